"""
Canonical conversion record shared by ingestion, storage and the dashboard.

Every network reports conversions with its own parameter names; once a postback
has been normalized it is a ConversionRecord and nothing downstream needs to
know which network sent it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

UNKNOWN = "unknown"


class Network(str, Enum):
    """CPA networks accepted on the postback endpoint."""

    CLICKDEALER = "clickdealer"
    TRAFEE = "trafee"
    ADVERTEN = "adverten"
    UNKNOWN = "unknown"  # postback arrived without a network parameter


class ConversionKind(str, Enum):
    """Type of conversion event reported by a postback."""

    CLICK = "click"
    LEAD = "lead"


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass(frozen=True)
class ConversionRecord:
    """
    One accepted postback.

    Records are frozen: the store only appends and reads them. `raw_params`
    keeps the query map exactly as received so a disputed conversion can be
    traced back to what the network actually sent.

    Example:
        record = ConversionRecord(
            id="1736937000123-9f1c2e...",
            network=Network.TRAFEE,
            kind=ConversionKind.LEAD,
            sub_id="abc",
            transaction_id="T1",
            payout=12.5,
            ip_address="1.2.3.4",
            timestamp=datetime.now(timezone.utc),
        )
    """

    id: str
    network: Network
    kind: ConversionKind
    sub_id: str
    transaction_id: str
    payout: float
    ip_address: str
    timestamp: datetime
    raw_params: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used by the stored blob and the API."""
        return {
            "id": self.id,
            "network": self.network.value,
            "type": self.kind.value,
            "subId": self.sub_id,
            "transactionId": self.transaction_id,
            "payout": self.payout,
            "ipAddress": self.ip_address,
            "timestamp": format_timestamp(self.timestamp),
            "rawParams": dict(self.raw_params),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversionRecord:
        """Create a record from its serialized form.

        Raises:
            ValueError: If id or timestamp is missing, the network or type is
                not recognized, or payout/timestamp cannot be parsed.
        """
        if not data.get("id"):
            raise ValueError("Missing required field: id")

        try:
            payout = float(data.get("payout", 0) or 0)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid payout: {data.get('payout')}") from e

        timestamp_value = data.get("timestamp")
        if isinstance(timestamp_value, datetime):
            timestamp = timestamp_value if timestamp_value.tzinfo else timestamp_value.replace(tzinfo=timezone.utc)
        elif isinstance(timestamp_value, str):
            try:
                timestamp = parse_timestamp(timestamp_value)
            except ValueError as e:
                raise ValueError(f"Invalid timestamp format: {timestamp_value}") from e
        else:
            raise ValueError("Missing required field: timestamp")

        return cls(
            id=str(data["id"]),
            network=Network(data.get("network") or UNKNOWN),
            kind=ConversionKind(data.get("type") or ConversionKind.LEAD.value),
            sub_id=str(data.get("subId") or UNKNOWN),
            transaction_id=str(data.get("transactionId") or UNKNOWN),
            payout=payout,
            ip_address=str(data.get("ipAddress") or UNKNOWN),
            timestamp=timestamp,
            raw_params={str(k): str(v) for k, v in (data.get("rawParams") or {}).items()},
        )
