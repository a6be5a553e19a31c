from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse

from core.config import logger, REQUIRE_NETWORK
from utils.conversion_store import get_conversion_store
from utils.postback import normalize_postback, ValidationError

router = APIRouter(prefix="/api", tags=["postback"])  # GET|POST /api/postback?network=...&subid=...

NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store, must-revalidate"}


def _first_values(request: Request) -> dict[str, str]:
    # When a parameter repeats, the first occurrence wins
    params: dict[str, str] = {}
    for k, v in request.query_params.multi_items():
        params.setdefault(k, v)
    return params


@router.api_route("/postback", methods=["GET", "POST"])
async def receive_postback(request: Request, store=Depends(get_conversion_store)):
    client_ip = request.client.host if request.client else "?"
    try:
        record = normalize_postback(
            _first_values(request),
            request.headers,
            require_network=REQUIRE_NETWORK,
            raw_params=dict(request.query_params),
        )
        # The store logs its own failures; the network still gets its ack
        stored = store.append(record)
        logger.info(
            f"[postback.ingest] id={record.id} network={record.network.value} kind={record.kind.value} "
            f"subid={record.sub_id} txid={record.transaction_id} payout={record.payout} stored={stored}"
        )
        return JSONResponse(
            {"status": "success", "message": "Postback received", "data": record.to_dict()},
            headers=NO_CACHE_HEADERS,
        )
    except ValidationError as ex:
        logger.warning(f"[postback.ingest] rejected ip={client_ip} reason={ex} query={request.url.query}")
        return JSONResponse({"status": "error", "message": str(ex)}, status_code=400, headers=NO_CACHE_HEADERS)
    except Exception as ex:
        logger.exception(f"[postback.ingest] error: {ex}")
        return JSONResponse({"status": "error", "message": "Failed to process postback"}, status_code=500, headers=NO_CACHE_HEADERS)
