"""
Campaign-level CAPI economics.

Shows how the per-campaign fee cap changes publisher returns as campaign
spend grows, for a single campaign and for a tiered campaign portfolio.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..engine.benchmarks import BenchmarkTable, get_benchmarks

# Campaign spends used as worked examples in the report
EXAMPLE_CAMPAIGN_SPENDS = (79000.0, 150000.0, 300000.0, 500000.0, 1000000.0)

# label -> (min spend, max spend)
TIER_RANGES = {
    "Small": (30000.0, 100000.0),
    "Medium": (100000.0, 300000.0),
    "Large": (300000.0, 1000000.0),
}


@dataclass
class CampaignEconomics:
    """Fee and return for one campaign."""

    campaign_spend: float
    incremental_revenue: float
    raw_fee: float
    capped_fee: float
    net_to_publisher: float
    roi_multiple: Optional[float]
    is_capped: bool
    cap_savings: float

    def to_dict(self) -> Dict[str, Any]:
        return vars(self).copy()


@dataclass
class CampaignTier:
    """Campaigns of similar size, costed at the tier's average spend."""

    label: str
    min_spend: float
    max_spend: float
    avg_spend: float
    count: int
    economics: CampaignEconomics

    @property
    def total_incremental(self) -> float:
        return self.economics.incremental_revenue * self.count

    @property
    def total_fees(self) -> float:
        return self.economics.capped_fee * self.count

    @property
    def total_net(self) -> float:
        return self.economics.net_to_publisher * self.count

    @property
    def total_cap_savings(self) -> float:
        return self.economics.cap_savings * self.count


@dataclass
class CampaignPortfolio:
    """Yearly campaign portfolio analysis."""

    total_campaigns: int
    avg_campaign_spend: float
    cap_threshold: float
    tiers: List[CampaignTier] = field(default_factory=list)
    example_campaigns: List[CampaignEconomics] = field(default_factory=list)

    @property
    def total_campaign_spend(self) -> float:
        return sum(t.avg_spend * t.count for t in self.tiers)

    @property
    def total_incremental(self) -> float:
        return sum(t.total_incremental for t in self.tiers)

    @property
    def total_fees(self) -> float:
        return sum(t.total_fees for t in self.tiers)

    @property
    def total_net_to_publisher(self) -> float:
        return sum(t.total_net for t in self.tiers)

    @property
    def total_cap_savings(self) -> float:
        return sum(t.total_cap_savings for t in self.tiers)

    @property
    def portfolio_roi(self) -> Optional[float]:
        fees = self.total_fees
        return self.total_incremental / fees if fees > 0 else None

    @property
    def campaigns_above_cap(self) -> int:
        return sum(t.count for t in self.tiers if t.avg_spend >= self.cap_threshold)

    @property
    def above_cap_savings(self) -> float:
        return sum(t.total_cap_savings for t in self.tiers if t.avg_spend >= self.cap_threshold)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_campaigns": self.total_campaigns,
            "avg_campaign_spend": self.avg_campaign_spend,
            "total_campaign_spend": self.total_campaign_spend,
            "total_incremental": self.total_incremental,
            "total_fees": self.total_fees,
            "total_net_to_publisher": self.total_net_to_publisher,
            "total_cap_savings": self.total_cap_savings,
            "portfolio_roi": self.portfolio_roi,
            "campaigns_above_cap": self.campaigns_above_cap,
            "cap_threshold": self.cap_threshold,
            "tiers": [
                {
                    "label": t.label,
                    "min_spend": t.min_spend,
                    "max_spend": t.max_spend,
                    "avg_spend": t.avg_spend,
                    "count": t.count,
                    "total_incremental": t.total_incremental,
                    "total_fees": t.total_fees,
                    "total_net": t.total_net,
                }
                for t in self.tiers
            ],
            "example_campaigns": [e.to_dict() for e in self.example_campaigns],
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def cap_threshold_spend(table: Optional[BenchmarkTable] = None) -> float:
    """Campaign spend above which the per-campaign fee cap binds."""
    cfg = (table or get_benchmarks()).section("campaign_economics")
    return float(cfg["campaign_cap"]) / (float(cfg["conversion_improvement"]) * float(cfg["revenue_share_rate"]))


CAP_THRESHOLD_SPEND = cap_threshold_spend()


def calculate_campaign_economics(
    campaign_spend: float,
    table: Optional[BenchmarkTable] = None,
) -> CampaignEconomics:
    """
    Economics of a single CAPI campaign.

    Args:
        campaign_spend: Advertiser spend on the campaign

    Returns:
        CampaignEconomics with the capped fee and publisher net
    """
    if campaign_spend < 0:
        raise ValueError(f"Campaign spend must be >= 0, got {campaign_spend}")
    cfg = (table or get_benchmarks()).section("campaign_economics")
    campaign_cap = float(cfg["campaign_cap"])

    incremental = campaign_spend * float(cfg["conversion_improvement"])
    raw_fee = incremental * float(cfg["revenue_share_rate"])
    capped_fee = min(raw_fee, campaign_cap)

    return CampaignEconomics(
        campaign_spend=float(campaign_spend),
        incremental_revenue=incremental,
        raw_fee=raw_fee,
        capped_fee=capped_fee,
        net_to_publisher=incremental - capped_fee,
        roi_multiple=incremental / capped_fee if capped_fee > 0 else None,
        is_capped=raw_fee > campaign_cap,
        cap_savings=max(0.0, raw_fee - capped_fee),
    )


def calculate_campaign_portfolio(
    yearly_campaigns: int,
    avg_campaign_spend: float,
    table: Optional[BenchmarkTable] = None,
) -> CampaignPortfolio:
    """
    Split a year of campaigns into small/medium/large tiers.

    Tier counts follow the configured distribution. Small campaigns average
    half the overall spend (at most 60K), medium 1.2x, and the large tier
    takes whatever keeps the portfolio total on target (at least 2x).

    Args:
        yearly_campaigns: Campaigns booked per year
        avg_campaign_spend: Average spend across all campaigns

    Returns:
        CampaignPortfolio; empty when there are no campaigns or no spend
    """
    table = table or get_benchmarks()
    threshold = cap_threshold_spend(table)
    yearly_campaigns = int(yearly_campaigns)
    if yearly_campaigns < 0 or avg_campaign_spend < 0:
        raise ValueError("Campaign count and spend must be >= 0")
    if yearly_campaigns == 0 or avg_campaign_spend == 0:
        return CampaignPortfolio(total_campaigns=0, avg_campaign_spend=0.0, cap_threshold=threshold)

    distribution = table.section("campaign_economics")["distribution"]
    small_count = _round_half_up(yearly_campaigns * float(distribution["small"]))
    medium_count = _round_half_up(yearly_campaigns * float(distribution["medium"]))
    large_count = max(0, yearly_campaigns - small_count - medium_count)

    target_total = yearly_campaigns * avg_campaign_spend
    small_avg = min(avg_campaign_spend * 0.5, 60000.0)
    medium_avg = avg_campaign_spend * 1.2
    small_medium_total = small_count * small_avg + medium_count * medium_avg
    large_avg = (
        max(avg_campaign_spend * 2, (target_total - small_medium_total) / large_count)
        if large_count > 0
        else 0.0
    )

    tiers = []
    for label, count, avg_spend in (
        ("Small", small_count, small_avg),
        ("Medium", medium_count, medium_avg),
        ("Large", large_count, large_avg),
    ):
        if count <= 0:
            continue
        min_spend, max_spend = TIER_RANGES[label]
        tiers.append(
            CampaignTier(
                label=label,
                min_spend=min_spend,
                max_spend=max_spend,
                avg_spend=avg_spend,
                count=count,
                economics=calculate_campaign_economics(avg_spend, table),
            )
        )

    return CampaignPortfolio(
        total_campaigns=yearly_campaigns,
        avg_campaign_spend=float(avg_campaign_spend),
        cap_threshold=threshold,
        tiers=tiers,
        example_campaigns=[calculate_campaign_economics(s, table) for s in EXAMPLE_CAMPAIGN_SPENDS],
    )
