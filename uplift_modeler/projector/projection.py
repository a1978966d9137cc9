"""
36-month projection of CAPI incremental revenue under each commercial model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import pandas as pd

from ..engine.benchmarks import PROJECTION_HORIZON_MONTHS, BenchmarkTable, get_benchmarks, ramp_up_factor
from ..engine.scenario import ScenarioResult
from .commercial_model import CommercialModel, CommercialModelType, create_commercial_model

logger = logging.getLogger(__name__)


@dataclass
class ProjectionResult:
    """Monthly projection and summary for one commercial model."""

    model_type: CommercialModelType
    projection: pd.DataFrame
    summary: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "model_type": self.model_type.value,
            "summary": dict(self.summary),
            "monthly": self.projection.to_dict(orient="records"),
        }


def build_monthly_incremental(
    base_monthly_revenue: float,
    monthly_incremental: float,
    horizon_months: int = PROJECTION_HORIZON_MONTHS,
    table: Optional[BenchmarkTable] = None,
) -> pd.DataFrame:
    """
    Build the ramped monthly revenue table.

    Args:
        base_monthly_revenue: Current monthly ad revenue
        monthly_incremental: Steady-state monthly incremental revenue
        horizon_months: Number of months to project

    Returns:
        DataFrame with month, year, ramp_up, base_revenue and incremental_revenue
    """
    if horizon_months < 1:
        raise ValueError(f"horizon_months must be >= 1, got {horizon_months}")
    table = table or get_benchmarks()

    rows = []
    for month in range(1, horizon_months + 1):
        ramp = ramp_up_factor(month, table)
        rows.append(
            {
                "month": month,
                "year": (month - 1) // 12 + 1,
                "ramp_up": ramp,
                "base_revenue": float(base_monthly_revenue),
                "incremental_revenue": float(monthly_incremental) * ramp,
            }
        )
    return pd.DataFrame(rows)


def generate_projection(
    model: CommercialModel,
    scenario_result: ScenarioResult,
    horizon_months: int = PROJECTION_HORIZON_MONTHS,
    table: Optional[BenchmarkTable] = None,
) -> ProjectionResult:
    """
    Project a scenario's CAPI incremental revenue through a commercial model.

    Only CAPI incremental is shared with the vendor; ID infrastructure and
    media performance uplift stay with the publisher.
    """
    monthly = build_monthly_incremental(
        scenario_result.totals.current_monthly_revenue,
        scenario_result.capi_monthly_incremental,
        horizon_months,
        table,
    )
    projection = model.calculate_projection(monthly)
    summary = model.get_summary(projection)
    logger.debug(
        "Projected %s: incremental %.2f, vendor share %.2f",
        model.model_type.value, summary["total_incremental"], summary["total_vendor_share"],
    )
    return ProjectionResult(model_type=model.model_type, projection=projection, summary=summary)


def compare_commercial_models(
    scenario_result: ScenarioResult,
    model_params: Optional[Mapping[CommercialModelType, Mapping[str, Any]]] = None,
    horizon_months: int = PROJECTION_HORIZON_MONTHS,
    table: Optional[BenchmarkTable] = None,
) -> Dict[CommercialModelType, ProjectionResult]:
    """
    Project the same scenario under all three commercial models.

    Args:
        scenario_result: Scenario supplying the CAPI incremental revenue
        model_params: Optional per-model parameter overrides

    Returns:
        Dictionary mapping model type to its projection
    """
    table = table or get_benchmarks()
    model_params = model_params or {}
    # The revenue-share cap applies per campaign
    campaigns = max(1, int(round(scenario_result.capi_campaigns_per_month)))

    results = {}
    for model_type in CommercialModelType:
        params = dict(model_params.get(model_type, {}))
        if model_type == CommercialModelType.REVENUE_SHARE:
            params.setdefault("campaigns_per_month", campaigns)
        elif model_type == CommercialModelType.FLAT_FEE:
            # Suppression is measured against the same revenue-share deal
            params.setdefault("reference_campaigns", campaigns)
        model = create_commercial_model(model_type, table, **params)
        results[model_type] = generate_projection(model, scenario_result, horizon_months, table)
    return results


def comparison_table(comparisons: Mapping[CommercialModelType, ProjectionResult]) -> pd.DataFrame:
    """One row per commercial model with the headline totals."""
    rows = []
    for model_type, result in comparisons.items():
        summary = result.summary
        rows.append(
            {
                "model": model_type.value,
                "label": summary["label"],
                "total_incremental": summary["total_incremental"],
                "total_vendor_share": summary["total_vendor_share"],
                "total_publisher_net_gain": summary["total_publisher_net_gain"],
                "total_value_suppressed": summary["total_value_suppressed"],
                "net_gain_percentage": summary["net_gain_percentage"],
                "roi_multiple": summary["roi_multiple"],
                "alignment_score": summary["alignment_score"],
            }
        )
    return pd.DataFrame(rows)


def best_model(comparisons: Mapping[CommercialModelType, ProjectionResult]) -> Optional[CommercialModelType]:
    """Model leaving the publisher the highest net gain (ties go to better alignment)."""
    if not comparisons:
        return None
    return max(
        comparisons,
        key=lambda m: (
            comparisons[m].summary["total_publisher_net_gain"],
            comparisons[m].summary["alignment_score"],
        ),
    )


def deal_breakdown(
    scenario_result: ScenarioResult,
    horizon_months: int = PROJECTION_HORIZON_MONTHS,
    table: Optional[BenchmarkTable] = None,
) -> pd.DataFrame:
    """
    Ramped uplift per value component, by contract year.

    Returns:
        DataFrame with one row per component and a column per year plus total
    """
    table = table or get_benchmarks()
    components = {
        "ID Infrastructure": scenario_result.id_infrastructure.monthly_uplift,
        "CAPI": scenario_result.capi.monthly_uplift if scenario_result.capi else 0.0,
        "Media Performance": (
            scenario_result.media_performance.monthly_uplift if scenario_result.media_performance else 0.0
        ),
    }
    ramp = build_monthly_incremental(0.0, 1.0, horizon_months, table)
    ramp_by_year = ramp.groupby("year")["incremental_revenue"].sum()

    rows = []
    for name, monthly in components.items():
        row = {"component": name}
        for year, factor_sum in ramp_by_year.items():
            row[f"year_{year}"] = monthly * factor_sum
        row["total"] = monthly * ramp["incremental_revenue"].sum()
        rows.append(row)

    df = pd.DataFrame(rows)
    total_row = df.drop(columns=["component"]).sum().to_dict()
    total_row["component"] = "Total"
    return pd.concat([df, pd.DataFrame([total_row])], ignore_index=True)
