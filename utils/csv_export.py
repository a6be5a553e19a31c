"""
CSV export of dashboard records
Header row is plain; every data cell is double-quoted
"""
import csv
import io
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from utils.records import ConversionRecord, format_timestamp

CSV_HEADERS = ["Timestamp", "Network", "Type", "Sub ID", "Transaction ID", "Payout", "IP Address"]


class EmptyExportError(Exception):
    """Raised when there is nothing to export; no file should be produced."""


def format_payout(value: float) -> str:
    """Shortest round-trip digits, laid out like JavaScript's Number#toString.

    Plain notation while the leading digit sits between 1e-6 and 1e20, exponent
    notation (`1e-7`, `1.5e+21`) outside that range.
    """
    d = Decimal(repr(float(value)))
    if not d:
        return "0"
    sign, digits, exponent = d.as_tuple()
    digits = list(digits)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    magnitude = len(digits) - 1 + exponent
    prefix = "-" if sign else ""
    if -7 < magnitude < 21:
        return prefix + format(Decimal((0, tuple(digits), exponent)), "f")
    mantissa = str(digits[0])
    if len(digits) > 1:
        mantissa += "." + "".join(str(n) for n in digits[1:])
    return f"{prefix}{mantissa}e{'+' if magnitude >= 0 else '-'}{abs(magnitude)}"


def csv_row(record: ConversionRecord) -> list[str]:
    return [
        format_timestamp(record.timestamp),
        record.network.value,
        record.kind.value,
        record.sub_id,
        record.transaction_id,
        format_payout(record.payout),
        record.ip_address,
    ]


def render_csv(records: Sequence[ConversionRecord]) -> str:
    if not records:
        raise EmptyExportError("No data to export")
    buf = io.StringIO()
    buf.write(",".join(CSV_HEADERS) + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for record in records:
        writer.writerow(csv_row(record))
    # csv.writer terminates every row; the document itself has no trailing newline
    return buf.getvalue().rstrip("\n")


def export_filename(today: Optional[date] = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"cpa-conversions-{today.isoformat()}.csv"


def iter_csv_rows(text: str) -> Iterable[list[str]]:
    """Parse an exported document back into rows, header included."""
    return csv.reader(io.StringIO(text))
