from dataclasses import dataclass
from typing import Iterable

from utils.records import ConversionKind, ConversionRecord


@dataclass(frozen=True)
class Stats:
    total_clicks: int = 0
    total_leads: int = 0
    total_revenue: float = 0.0
    conversion_rate: float = 0.0

    def to_dict(self) -> dict:
        return {
            "totalClicks": self.total_clicks,
            "totalLeads": self.total_leads,
            "totalRevenue": self.total_revenue,
            "conversionRate": self.conversion_rate,
        }


def compute_stats(records: Iterable[ConversionRecord]) -> Stats:
    """Click/lead counts, summed payout of both kinds, and leads per 100 clicks (0 without clicks)."""
    clicks = 0
    leads = 0
    revenue = 0.0
    for r in records:
        if r.kind == ConversionKind.CLICK:
            clicks += 1
        elif r.kind == ConversionKind.LEAD:
            leads += 1
        revenue += r.payout
    rate = (leads / clicks) * 100 if clicks > 0 else 0.0
    return Stats(
        total_clicks=clicks,
        total_leads=leads,
        total_revenue=revenue,
        conversion_rate=rate,
    )
