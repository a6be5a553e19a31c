"""
Postback normalization: turn a network's query string into a ConversionRecord.

ClickDealer, Trafee and Adverten each name their macros differently (subid vs
aff_sub, txid vs transaction_id, ...). FIELD_RULES lists, per record field, the
parameter aliases to try in order, an optional transport header to fall back
to, and the default when nothing usable was sent.
"""
import math
import re
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping, Optional, Tuple

from core.config import logger
from utils.records import UNKNOWN, ConversionKind, ConversionRecord, Network


class PostbackError(Exception):
    """Base error for postbacks that cannot be turned into a record."""


class ValidationError(PostbackError):
    """The postback carried a value we refuse to record (e.g. an unknown network)."""


@dataclass(frozen=True)
class FieldRule:
    aliases: Tuple[str, ...]
    default: str
    header: Optional[str] = None


FIELD_RULES: dict[str, FieldRule] = {
    "network": FieldRule(("network",), Network.UNKNOWN.value),
    "kind": FieldRule(("type",), ConversionKind.LEAD.value),
    "sub_id": FieldRule(("subid", "sub_id", "aff_sub"), UNKNOWN),
    "transaction_id": FieldRule(("txid", "txn_id", "transaction", "transaction_id"), UNKNOWN),
    "payout": FieldRule(("payout",), "0"),
    "ip_address": FieldRule(("ip", "user_ip", "ip_address"), UNKNOWN, header="x-forwarded-for"),
}

VALID_NETWORKS = frozenset(n.value for n in Network)
VALID_KINDS = frozenset(k.value for k in ConversionKind)

# Leading decimal number, the same prefix a browser's parseFloat accepts
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def resolve_field(rule: FieldRule, params: Mapping[str, str], headers: Optional[Mapping[str, str]] = None) -> Tuple[str, bool]:
    """Return (value, supplied) for a rule; empty values fall through to the next alias."""
    for alias in rule.aliases:
        value = params.get(alias)
        if value:
            return value, True
    if rule.header and headers is not None:
        value = headers.get(rule.header)
        if value:
            return value, True
    return rule.default, False


def parse_payout(raw: Optional[str]) -> float:
    """Parse a payout amount; anything unusable (garbage, negative, inf/nan) becomes 0."""
    m = _NUMBER_PREFIX.match(raw or "")
    if not m:
        return 0.0
    try:
        value = float(m.group(1))
    except ValueError:
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def generate_conversion_id() -> str:
    # Millisecond prefix keeps ids roughly time-ordered; uuid4 carries the uniqueness
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}"


def normalize_postback(
    params: Mapping[str, str],
    headers: Optional[Mapping[str, str]] = None,
    *,
    now: Optional[datetime] = None,
    id_factory: Optional[Callable[[], str]] = None,
    require_network: bool = False,
    raw_params: Optional[Mapping[str, str]] = None,
) -> ConversionRecord:
    """
    Build a ConversionRecord from postback parameters.

    `params` maps each query parameter to its value (first occurrence when a
    name repeats). `headers` is consulted only for the forwarded-for IP
    fallback. `raw_params` overrides what is kept for audit; it defaults to
    `params`.

    Raises ValidationError when a network is given but not recognized, or when
    `require_network` is set and no network was sent. A `type` other than
    click or lead is recorded as lead; `raw_params` keeps what was sent.
    Nothing is persisted here.
    """
    network, network_supplied = resolve_field(FIELD_RULES["network"], params, headers)
    network = network.lower()
    if network not in VALID_NETWORKS:
        raise ValidationError("Invalid network")
    if require_network and not network_supplied:
        raise ValidationError("Missing network")

    kind, _ = resolve_field(FIELD_RULES["kind"], params, headers)
    kind = kind.lower()
    if kind not in VALID_KINDS:
        logger.warning(f"[postback.normalize] unknown type={kind!r}; recording as lead")
        kind = ConversionKind.LEAD.value

    payout_raw, _ = resolve_field(FIELD_RULES["payout"], params, headers)

    return ConversionRecord(
        id=(id_factory or generate_conversion_id)(),
        network=Network(network),
        kind=ConversionKind(kind),
        sub_id=resolve_field(FIELD_RULES["sub_id"], params, headers)[0],
        transaction_id=resolve_field(FIELD_RULES["transaction_id"], params, headers)[0],
        payout=parse_payout(payout_raw),
        ip_address=resolve_field(FIELD_RULES["ip_address"], params, headers)[0],
        timestamp=now or datetime.now(timezone.utc),
        raw_params=dict(raw_params if raw_params is not None else params),
    )
