"""
Scenario calculator: steady-state monthly uplift per value component.

Combines aggregated domain inputs with resolved benchmarks to estimate the
monthly uplift from ID infrastructure (addressability and CDP savings),
CAPI campaigns and media performance. The 36-month projection in
projector/projection.py ramps these figures up month by month.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..models import AggregatedInputs
from .aggregation import deployment_tier_for
from .benchmarks import (
    PROJECTION_HORIZON_MONTHS,
    BenchmarkTable,
    DeploymentTier,
    ResolvedBenchmarks,
    RiskPosture,
    deployment_multiplier,
    get_benchmarks,
    ramp_up_factor,
    resolve_benchmarks,
)

logger = logging.getLogger(__name__)

# Realization factors stripped out for the unadjusted comparison
REALIZATION_FIELDS = (
    "adoption_rate",
    "addressability_efficiency",
    "capi_deployment_rate",
    "cpm_uplift_realization",
    "sales_effectiveness",
    "cdp_savings_realization",
)

# Slider bounds: name -> (min, max, step)
SLIDER_RANGES: Dict[str, Tuple[float, float, float]] = {
    "display_cpm": (1.0, 10.0, 0.1),
    "video_cpm": (5.0, 40.0, 0.5),
    "capi_campaigns_per_month": (0, 50, 1),
    "avg_campaign_spend": (10000.0, 1000000.0, 5000.0),
}


class Scope(Enum):
    """Which value components are in scope."""

    ID_ONLY = "id-only"
    ID_CAPI = "id-capi"
    ID_CAPI_PERFORMANCE = "id-capi-performance"

    @property
    def includes_capi(self) -> bool:
        return self in (Scope.ID_CAPI, Scope.ID_CAPI_PERFORMANCE)

    @property
    def includes_performance(self) -> bool:
        return self is Scope.ID_CAPI_PERFORMANCE


@dataclass
class ScenarioSelection:
    """Deployment and scope selectors. Deployment is derived from domain count when None."""

    scope: Scope = Scope.ID_CAPI_PERFORMANCE
    deployment: Optional[DeploymentTier] = None


@dataclass
class IdInfrastructureUplift:
    """ID infrastructure: addressability recovery and CDP savings."""

    addressability_recovery: float  # percentage points
    current_addressability: float  # %
    improved_addressability: float  # %
    newly_addressable_impressions: float
    addressability_revenue: float
    cdp_savings_revenue: float
    current_monthly_ids: float
    optimized_monthly_ids: float
    id_reduction_percentage: float
    monthly_uplift: float
    annual_uplift: float


@dataclass
class CapiUplift:
    """CAPI campaign uplift."""

    baseline_match_rate: float  # %
    improved_match_rate: float  # %
    match_rate_improvement: float  # % relative lift
    effective_campaigns: float
    campaign_incremental: float
    conversion_tracking_revenue: float
    monthly_uplift: float
    annual_uplift: float


@dataclass
class MediaPerformanceUplift:
    """Premium pricing and make-good reduction."""

    roas_improvement: float  # %
    make_good_reduction: float  # percentage points
    premium_pricing_power: float
    make_good_savings: float
    monthly_uplift: float
    annual_uplift: float


@dataclass
class ScenarioTotals:
    """Roll-up across components."""

    current_monthly_revenue: float
    total_monthly_uplift: float
    total_annual_uplift: float
    three_year_projection: float
    percentage_improvement: float


@dataclass
class ScenarioResult:
    """Complete scenario calculation."""

    inputs: AggregatedInputs
    scope: Scope
    deployment: DeploymentTier
    deployment_multiplier: float
    benchmarks: ResolvedBenchmarks
    capi_campaigns_per_month: float
    avg_campaign_spend: float

    id_infrastructure: IdInfrastructureUplift
    capi: Optional[CapiUplift]
    media_performance: Optional[MediaPerformanceUplift]

    totals: ScenarioTotals
    breakdown: Dict[str, float] = field(default_factory=dict)
    risk_adjustment: Dict[str, float] = field(default_factory=dict)

    @property
    def posture(self) -> RiskPosture:
        return self.benchmarks.posture

    @property
    def capi_monthly_incremental(self) -> float:
        """CAPI revenue that commercial models take a share of."""
        return self.capi.monthly_uplift if self.capi else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "scope": self.scope.value,
            "deployment": self.deployment.value,
            "deployment_multiplier": self.deployment_multiplier,
            "risk_posture": self.posture.value,
            "inputs": {
                "total_monthly_pageviews": self.inputs.total_monthly_pageviews,
                "display_cpm": self.inputs.display_cpm,
                "video_cpm": self.inputs.video_cpm,
                "display_video_split": self.inputs.weighted_display_video_split,
                "safari_share": self.inputs.weighted_safari_share,
                "tech_savvy": self.inputs.weighted_tech_savvy,
                "domains": [d.id for d in self.inputs.selected_domains],
                "capi_campaigns_per_month": self.capi_campaigns_per_month,
                "avg_campaign_spend": self.avg_campaign_spend,
            },
            "id_infrastructure": vars(self.id_infrastructure).copy(),
            "capi": vars(self.capi).copy() if self.capi else None,
            "media_performance": vars(self.media_performance).copy() if self.media_performance else None,
            "totals": vars(self.totals).copy(),
            "breakdown": dict(self.breakdown),
            "risk_adjustment": dict(self.risk_adjustment),
        }


def validate_slider(name: str, value: float) -> float:
    """Check a slider value against its documented bounds."""
    low, high, _ = SLIDER_RANGES[name]
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")
    return value


def _id_infrastructure(
    inputs: AggregatedInputs,
    bm: ResolvedBenchmarks,
    scale: float,
    display_impressions: float,
    video_impressions: float,
    table: BenchmarkTable,
) -> IdInfrastructureUplift:
    safari_share = inputs.weighted_safari_share
    # Chrome and other browsers are fully addressable
    non_safari = 1.0 - safari_share
    safari_gain = (bm.target_safari_addressability - bm.current_safari_addressability) * bm.addressability_efficiency

    current_addressability = non_safari + safari_share * bm.current_safari_addressability
    improvement = safari_share * safari_gain
    improved_addressability = current_addressability + improvement

    newly_display = display_impressions * improvement
    newly_video = video_impressions * improvement
    premium = bm.cpm_premium * bm.cpm_uplift_realization
    cpm_improvement = (
        (newly_display / 1000) * inputs.display_cpm * premium
        + (newly_video / 1000) * inputs.video_cpm * premium
    )

    operational = table.section("operational")
    unique_users = inputs.total_monthly_pageviews * table.value("inventory", "unique_user_ratio")
    current_ids = unique_users * float(operational["baseline_id_multiplier"])
    optimized_ids = unique_users * float(operational["improved_id_multiplier"])
    id_reduction = 1 - float(operational["improved_id_multiplier"]) / float(operational["baseline_id_multiplier"])

    cdp_savings = bm.cdp_monthly_savings * bm.cdp_savings_realization if unique_users > 0 else 0.0

    addressability_revenue = cpm_improvement * scale
    cdp_savings_revenue = cdp_savings * scale
    monthly_uplift = addressability_revenue + cdp_savings_revenue

    return IdInfrastructureUplift(
        addressability_recovery=improvement * 100,
        current_addressability=current_addressability * 100,
        improved_addressability=improved_addressability * 100,
        newly_addressable_impressions=newly_display + newly_video,
        addressability_revenue=addressability_revenue,
        cdp_savings_revenue=cdp_savings_revenue,
        current_monthly_ids=current_ids,
        optimized_monthly_ids=optimized_ids,
        id_reduction_percentage=id_reduction * 100,
        monthly_uplift=monthly_uplift,
        annual_uplift=monthly_uplift * 12,
    )


def _capi(
    bm: ResolvedBenchmarks,
    scale: float,
    current_monthly_revenue: float,
    campaigns_per_month: float,
    avg_campaign_spend: float,
    table: BenchmarkTable,
) -> CapiUplift:
    baseline_match = table.value("capi", "baseline_match_rate")
    conversion_lift = bm.conversion_multiplier - 1

    effective_campaigns = campaigns_per_month * bm.capi_deployment_rate * bm.sales_effectiveness
    campaign_incremental = effective_campaigns * avg_campaign_spend * conversion_lift
    conversion_tracking = (
        current_monthly_revenue
        * bm.performance_revenue_share
        * conversion_lift
        * (bm.improved_match_rate - baseline_match)
    )

    campaign_incremental *= scale
    conversion_tracking *= scale
    monthly_uplift = campaign_incremental + conversion_tracking

    return CapiUplift(
        baseline_match_rate=baseline_match * 100,
        improved_match_rate=bm.improved_match_rate * 100,
        match_rate_improvement=(bm.improved_match_rate / baseline_match - 1) * 100,
        effective_campaigns=effective_campaigns,
        campaign_incremental=campaign_incremental,
        conversion_tracking_revenue=conversion_tracking,
        monthly_uplift=monthly_uplift,
        annual_uplift=monthly_uplift * 12,
    )


def _media_performance(
    bm: ResolvedBenchmarks,
    scale: float,
    current_monthly_revenue: float,
    table: BenchmarkTable,
) -> MediaPerformanceUplift:
    media = table.section("media_performance")
    baseline_roas = float(media["baseline_roas"])
    improved_roas = float(media["improved_roas"])
    make_good_delta = float(media["baseline_makegood_rate"]) - float(media["improved_makegood_rate"])

    premium_pricing = current_monthly_revenue * bm.premium_inventory_share * float(media["yield_uplift_percentage"])
    # Make-goods only apply to direct-sold guaranteed inventory
    make_good_savings = current_monthly_revenue * float(media["direct_sold_inventory_share"]) * make_good_delta

    premium_pricing *= scale
    make_good_savings *= scale
    monthly_uplift = premium_pricing + make_good_savings

    return MediaPerformanceUplift(
        roas_improvement=(improved_roas - baseline_roas) / baseline_roas * 100,
        make_good_reduction=make_good_delta * 100,
        premium_pricing_power=premium_pricing,
        make_good_savings=make_good_savings,
        monthly_uplift=monthly_uplift,
        annual_uplift=monthly_uplift * 12,
    )


def _components(
    inputs: AggregatedInputs,
    scope: Scope,
    multiplier: float,
    bm: ResolvedBenchmarks,
    campaigns_per_month: float,
    avg_campaign_spend: float,
    table: BenchmarkTable,
) -> Tuple[float, IdInfrastructureUplift, Optional[CapiUplift], Optional[MediaPerformanceUplift]]:
    display_share = inputs.weighted_display_video_split / 100
    total_impressions = inputs.total_monthly_pageviews * table.value("inventory", "ad_impressions_per_pageview")
    display_impressions = total_impressions * display_share
    video_impressions = total_impressions * (1 - display_share)

    current_revenue = (
        (display_impressions / 1000) * inputs.display_cpm
        + (video_impressions / 1000) * inputs.video_cpm
    )

    scale = multiplier * bm.adoption_rate
    id_infra = _id_infrastructure(inputs, bm, scale, display_impressions, video_impressions, table)
    capi = (
        _capi(bm, scale, current_revenue, campaigns_per_month, avg_campaign_spend, table)
        if scope.includes_capi
        else None
    )
    media = _media_performance(bm, scale, current_revenue, table) if scope.includes_performance else None
    return current_revenue, id_infra, capi, media


def calculate_scenario(
    inputs: AggregatedInputs,
    selection: Optional[ScenarioSelection] = None,
    posture: Union[RiskPosture, str] = RiskPosture.MODERATE,
    overrides: Optional[Mapping[str, Any]] = None,
    capi_campaigns_per_month: float = 10,
    avg_campaign_spend: float = 100000.0,
    table: Optional[BenchmarkTable] = None,
) -> ScenarioResult:
    """
    Calculate steady-state monthly uplift for a scenario.

    Args:
        inputs: Aggregated domain inputs
        selection: Scope and deployment selectors
        posture: Risk posture selecting the benchmark table
        overrides: Named benchmark overrides (validated, never clamped)
        capi_campaigns_per_month: CAPI campaigns booked per month
        avg_campaign_spend: Average CAPI campaign spend

    Returns:
        ScenarioResult with per-component uplift and totals
    """
    table = table or get_benchmarks()
    selection = selection or ScenarioSelection()
    if capi_campaigns_per_month < 0:
        raise ValueError(f"capi_campaigns_per_month must be >= 0, got {capi_campaigns_per_month}")
    if avg_campaign_spend < 0:
        raise ValueError(f"avg_campaign_spend must be >= 0, got {avg_campaign_spend}")

    scope = Scope(selection.scope)
    deployment = (
        DeploymentTier(selection.deployment)
        if selection.deployment is not None
        else deployment_tier_for(inputs.domain_count, table)
    )
    multiplier = deployment_multiplier(deployment, table)
    bm = resolve_benchmarks(posture, overrides, table)

    current_revenue, id_infra, capi, media = _components(
        inputs, scope, multiplier, bm, capi_campaigns_per_month, avg_campaign_spend, table
    )

    total_monthly = id_infra.monthly_uplift + (capi.monthly_uplift if capi else 0.0) + (
        media.monthly_uplift if media else 0.0
    )
    three_year = sum(
        total_monthly * ramp_up_factor(month, table) for month in range(1, PROJECTION_HORIZON_MONTHS + 1)
    )

    totals = ScenarioTotals(
        current_monthly_revenue=current_revenue,
        total_monthly_uplift=total_monthly,
        total_annual_uplift=total_monthly * 12,
        three_year_projection=three_year,
        percentage_improvement=(total_monthly / current_revenue * 100) if current_revenue > 0 else 0.0,
    )

    if total_monthly > 0:
        breakdown = {
            "id_infrastructure_percent": id_infra.monthly_uplift / total_monthly * 100,
            "capi_percent": (capi.monthly_uplift if capi else 0.0) / total_monthly * 100,
            "performance_percent": (media.monthly_uplift if media else 0.0) / total_monthly * 100,
        }
    else:
        breakdown = {"id_infrastructure_percent": 0.0, "capi_percent": 0.0, "performance_percent": 0.0}

    # Same scenario with every realization factor at 100%
    unadjusted_bm = replace(bm, **{name: 1.0 for name in REALIZATION_FIELDS})
    _, u_id, u_capi, u_media = _components(
        inputs, scope, multiplier, unadjusted_bm, capi_campaigns_per_month, avg_campaign_spend, table
    )
    unadjusted = u_id.monthly_uplift + (u_capi.monthly_uplift if u_capi else 0.0) + (
        u_media.monthly_uplift if u_media else 0.0
    )
    risk_adjustment = {
        "unadjusted_monthly_uplift": unadjusted,
        "adjusted_monthly_uplift": total_monthly,
        "adjustment_percentage": ((total_monthly / unadjusted - 1) * 100) if unadjusted > 0 else 0.0,
    }

    logger.debug(
        "Scenario %s/%s/%s: monthly uplift %.2f on revenue %.2f",
        scope.value, deployment.value, bm.posture.value, total_monthly, current_revenue,
    )

    return ScenarioResult(
        inputs=inputs,
        scope=scope,
        deployment=deployment,
        deployment_multiplier=multiplier,
        benchmarks=bm,
        capi_campaigns_per_month=float(capi_campaigns_per_month),
        avg_campaign_spend=float(avg_campaign_spend),
        id_infrastructure=id_infra,
        capi=capi,
        media_performance=media,
        totals=totals,
        breakdown=breakdown,
        risk_adjustment=risk_adjustment,
    )
