import hmac
from typing import Optional
from fastapi import Request

from core.config import logger, DASHBOARD_TOKEN


def is_dashboard_authorized(request: Request, expected: Optional[str] = None) -> bool:
    """Check the dashboard token (header X-Dashboard-Token or ?token=). Open when no token is configured."""
    token = DASHBOARD_TOKEN if expected is None else expected
    if not token:
        return True
    supplied = (request.headers.get("x-dashboard-token") or request.query_params.get("token") or "").strip()
    ok = bool(supplied) and hmac.compare_digest(supplied, token)
    if not ok:
        client_ip = request.client.host if request.client else "?"
        logger.warning(f"[auth.dashboard] rejected ip={client_ip}")
    return ok
