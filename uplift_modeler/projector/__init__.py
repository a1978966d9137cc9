"""
Projector module for commercial-model projections.

Provides the commercial models, campaign-level economics and the 36-month
projection of CAPI incremental revenue.
"""

from .campaign_economics import (
    CAP_THRESHOLD_SPEND,
    CampaignEconomics,
    CampaignPortfolio,
    CampaignTier,
    calculate_campaign_economics,
    calculate_campaign_portfolio,
    cap_threshold_spend,
)
from .commercial_model import (
    INCENTIVE_ALIGNMENT,
    AnnualCapModel,
    CommercialModel,
    CommercialModelType,
    FlatFeeModel,
    IncentiveAlignment,
    RevenueShareModel,
    create_commercial_model,
)
from .projection import (
    ProjectionResult,
    best_model,
    build_monthly_incremental,
    compare_commercial_models,
    comparison_table,
    deal_breakdown,
    generate_projection,
)

__all__ = [
    # campaign_economics.py
    "CAP_THRESHOLD_SPEND",
    "CampaignEconomics",
    "CampaignPortfolio",
    "CampaignTier",
    "calculate_campaign_economics",
    "calculate_campaign_portfolio",
    "cap_threshold_spend",
    # commercial_model.py
    "INCENTIVE_ALIGNMENT",
    "AnnualCapModel",
    "CommercialModel",
    "CommercialModelType",
    "FlatFeeModel",
    "IncentiveAlignment",
    "RevenueShareModel",
    "create_commercial_model",
    # projection.py
    "ProjectionResult",
    "best_model",
    "build_monthly_incremental",
    "compare_commercial_models",
    "comparison_table",
    "deal_breakdown",
    "generate_projection",
]
