import os
import logging
from dotenv import load_dotenv
from botocore.client import Config as BotoConfig
import boto3

# Load .env from project root
try:
    load_dotenv(dotenv_path=os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".env")))
except Exception:
    try:
        load_dotenv()
    except Exception:
        pass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name, "") or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name, "") or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logging.getLogger("postback").warning(f"[config] {name}={raw!r} is not an integer; using {default}")
        return default
    return value if value >= 0 else default


APP_NAME = os.getenv("APP_NAME", "CPA Postback Tracker")

# Environment
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID", "")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID", "")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY", "")
R2_BUCKET = os.getenv("R2_BUCKET", "")

# Conversion storage: "blob" (JSON key, local or R2), "memory" or "database"
CONVERSIONS_STORAGE = (os.getenv("CONVERSIONS_STORAGE", "blob") or "blob").strip().lower()
CONVERSIONS_KEY = (os.getenv("CONVERSIONS_KEY", "postbacks/conversions.json") or "").strip().strip("/")
DATABASE_URL = os.getenv("DATABASE_URL", "")

# Postback policy
REQUIRE_NETWORK = _env_bool("REQUIRE_NETWORK", False)

# Dashboard
DASHBOARD_TOKEN = os.getenv("DASHBOARD_TOKEN", "").strip()
DASHBOARD_DEFAULT_DAYS = _env_int("DASHBOARD_DEFAULT_DAYS", 7)

_default_origins = ",".join([
    "http://localhost:3000",
    "http://127.0.0.1:3000",
])
ALLOWED_ORIGINS = [o.strip() for o in (os.getenv("ALLOWED_ORIGINS") or _default_origins).split(",") if o.strip()]

# Logging
LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s | %(levelname)s | %(message)s")
logger = logging.getLogger("postback")

# Static dir helper (local blob fallback)
STATIC_DIR = os.getenv("STATIC_DIR") or os.path.join(os.path.dirname(__file__), "..", "static")
STATIC_DIR = os.path.abspath(STATIC_DIR)

TEMPLATES_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "templates"))

# S3/R2 resource for blob storage
s3 = None

if R2_ACCOUNT_ID and R2_ACCESS_KEY_ID and R2_SECRET_ACCESS_KEY:
    s3 = boto3.resource(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=BotoConfig(signature_version="s3v4"),
        region_name="auto",
    )
    logger.info(f"[config] R2 blob storage enabled bucket={R2_BUCKET or '-'}")
