from datetime import date, datetime, timezone
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Request, Depends, Query
from fastapi.responses import JSONResponse, HTMLResponse, Response

from core.auth import is_dashboard_authorized
from core.config import logger, DASHBOARD_DEFAULT_DAYS
from utils.conversion_store import get_conversion_store
from utils.csv_export import render_csv, export_filename, EmptyExportError
from utils.filters import ConversionFilter, filter_conversions, ALL
from utils.records import ConversionKind, Network
from utils.stats import compute_stats
from utils.templates import render_page

router = APIRouter(tags=["dashboard"])

NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store, must-revalidate"}

# Setup hints shown on the dashboard, one per network, using each network's own macro names
POSTBACK_EXAMPLES = [
    ("ClickDealer", "network=clickdealer&type=lead&subid=[subid]&txid=[transaction_id]&payout=[payout]&ip=[ip]"),
    ("Trafee", "network=trafee&type=lead&subid=[sub_id]&txid=[txn_id]&payout=[payout]&ip=[user_ip]"),
    ("Adverten", "network=adverten&type=lead&subid=[aff_sub]&txid=[transaction]&payout=[payout]&ip=[ip_address]"),
]


def _unauthorized() -> JSONResponse:
    return JSONResponse({"status": "error", "message": "Unauthorized"}, status_code=401)


def _filter_from_query(
    start_date: Optional[date],
    end_date: Optional[date],
    sub_id: Optional[str],
    network: str,
    kind: str,
) -> ConversionFilter:
    return ConversionFilter(
        start_date=start_date,
        end_date=end_date,
        sub_id_contains=(sub_id or "").strip() or None,
        network=(network or ALL).strip().lower(),
        kind=(kind or ALL).strip().lower(),
    )


@router.get("/api/conversions")
async def list_conversions(
    request: Request,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sub_id: Optional[str] = None,
    network: str = ALL,
    kind: str = Query(ALL, alias="type"),
    store=Depends(get_conversion_store),
):
    if not is_dashboard_authorized(request):
        return _unauthorized()
    try:
        spec = _filter_from_query(start_date, end_date, sub_id, network, kind)
        items = filter_conversions(store.list_all(), spec)
        return JSONResponse({
            "status": "success",
            "count": len(items),
            "stats": compute_stats(items).to_dict(),
            "data": [r.to_dict() for r in items],
        }, headers=NO_CACHE_HEADERS)
    except Exception as ex:
        logger.exception(f"[dashboard.list] error: {ex}")
        return JSONResponse({"status": "error", "message": "Failed to load conversions"}, status_code=500)


@router.get("/api/conversions/stats")
async def conversion_stats(
    request: Request,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sub_id: Optional[str] = None,
    network: str = ALL,
    kind: str = Query(ALL, alias="type"),
    store=Depends(get_conversion_store),
):
    if not is_dashboard_authorized(request):
        return _unauthorized()
    try:
        spec = _filter_from_query(start_date, end_date, sub_id, network, kind)
        stats = compute_stats(filter_conversions(store.list_all(), spec))
        return JSONResponse({"status": "success", "stats": stats.to_dict()}, headers=NO_CACHE_HEADERS)
    except Exception as ex:
        logger.exception(f"[dashboard.stats] error: {ex}")
        return JSONResponse({"status": "error", "message": "Failed to compute stats"}, status_code=500)


@router.get("/api/conversions/export")
async def export_conversions(
    request: Request,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sub_id: Optional[str] = None,
    network: str = ALL,
    kind: str = Query(ALL, alias="type"),
    store=Depends(get_conversion_store),
):
    if not is_dashboard_authorized(request):
        return _unauthorized()
    spec = _filter_from_query(start_date, end_date, sub_id, network, kind)
    items = filter_conversions(store.list_all(), spec)
    try:
        body = render_csv(items)
    except EmptyExportError:
        return JSONResponse({"status": "error", "message": "No data to export"}, status_code=404)
    name = export_filename(datetime.now(timezone.utc).date())
    logger.info(f"[dashboard.export] rows={len(items)} file={name}")
    headers = {
        "Content-Disposition": f"attachment; filename={name}",
        "Access-Control-Expose-Headers": "Content-Disposition",
        **NO_CACHE_HEADERS,
    }
    return Response(content=body.encode("utf-8"), media_type="text/csv; charset=utf-8", headers=headers)


def _parse_day(value: Optional[str]) -> Optional[date]:
    v = (value or "").strip()
    if not v:
        return None
    return date.fromisoformat(v)


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(
    request: Request,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    sub_id: str = "",
    network: str = ALL,
    kind: str = Query(ALL, alias="type"),
    store=Depends(get_conversion_store),
):
    if not is_dashboard_authorized(request):
        return _unauthorized()

    # First visit (no date params at all) opens on the default window; a cleared field means no bound
    if start_date is None and end_date is None:
        default = ConversionFilter.last_days(DASHBOARD_DEFAULT_DAYS)
        start_day, end_day = default.start_date, default.end_date
    else:
        try:
            start_day, end_day = _parse_day(start_date), _parse_day(end_date)
        except ValueError:
            return JSONResponse({"status": "error", "message": "Invalid date"}, status_code=422)

    spec = _filter_from_query(start_day, end_day, sub_id, network, kind)
    everything = store.list_all()
    items = filter_conversions(everything, spec)
    stats = compute_stats(items)

    query = {
        "start_date": start_day.isoformat() if start_day else "",
        "end_date": end_day.isoformat() if end_day else "",
        "sub_id": spec.sub_id_contains or "",
        "network": spec.network,
        "type": spec.kind,
    }
    token = request.query_params.get("token")
    if token:
        query["token"] = token

    html = render_page(
        "dashboard.html",
        conversions=items,
        total=len(everything),
        stats=stats,
        postback_url=str(request.base_url).rstrip("/") + "/api/postback",
        postback_examples=POSTBACK_EXAMPLES,
        filters=query,
        networks=[n.value for n in Network if n != Network.UNKNOWN],
        kinds=[k.value for k in ConversionKind],
        query_string=urlencode(query),
        token=token or "",
    )
    return HTMLResponse(html, headers=NO_CACHE_HEADERS)
