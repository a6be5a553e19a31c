from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import logger, APP_NAME, ALLOWED_ORIGINS, CONVERSIONS_STORAGE

# Routers
from routers import postback, dashboard  # type: ignore

app = FastAPI(title=APP_NAME)

# ---- CORS setup ----
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# --- Security headers ---
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    try:
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("X-Frame-Options", "DENY")
    except Exception as ex:
        logger.warning(f"[headers] failed to set security headers: {ex}")
    return response


# ---- Include routers ----
# postback ingestion (public; networks call this)
app.include_router(postback.router)
# dashboard: JSON list/stats, CSV export, HTML page
app.include_router(dashboard.router)


@app.on_event("startup")
async def _init_storage():
    if CONVERSIONS_STORAGE != "database":
        return
    try:
        from core.database import init_db
        init_db()
    except Exception as _ex:
        logger.warning(f"init_db failed: {_ex}")


@app.get("/")
async def root():
    return {"ok": True, "service": APP_NAME}


@app.get("/health")
async def health():
    return {"ok": True}
