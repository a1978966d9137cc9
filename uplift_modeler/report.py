"""
Personalised report payload and CSV export.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union

import pandas as pd

from .config import settings
from .engine.scenario import ScenarioResult
from .models import LeadData, QuizResult
from .projector.commercial_model import CommercialModelType
from .projector.projection import ProjectionResult, best_model, deal_breakdown
from .recommendations import generate_key_recommendations


def build_report(
    lead: LeadData,
    scenario_result: ScenarioResult,
    comparisons: Mapping[CommercialModelType, ProjectionResult],
    quiz: Optional[QuizResult] = None,
) -> Dict[str, Any]:
    """
    Assemble the report released after lead capture.

    Args:
        lead: Captured contact details
        scenario_result: Calculated scenario
        comparisons: Projection per commercial model
        quiz: Optional quiz result

    Returns:
        JSON-serialisable report dictionary
    """
    totals = scenario_result.totals
    recommended = best_model(comparisons)

    report = {
        "title": settings.app.title,
        "generated_at": datetime.now().isoformat(),
        "prepared_for": {
            "name": lead.full_name,
            "email": lead.email,
            "company": lead.company,
        },
        "headline": {
            "current_monthly_revenue": totals.current_monthly_revenue,
            "monthly_uplift": totals.total_monthly_uplift,
            "annual_uplift": totals.total_annual_uplift,
            "three_year_uplift": totals.three_year_projection,
            "percentage_improvement": totals.percentage_improvement,
            "capi_monthly_incremental": scenario_result.capi_monthly_incremental,
        },
        "scenario": scenario_result.to_dict(),
        "breakdown_by_year": deal_breakdown(scenario_result).to_dict(orient="records"),
        "commercial_models": {
            model_type.value: dict(result.summary) for model_type, result in comparisons.items()
        },
        "recommended_model": recommended.value if recommended else None,
        "recommendations": generate_key_recommendations(scenario_result, quiz),
        "quiz": None,
    }

    if quiz is not None:
        report["quiz"] = {
            "overall_score": quiz.overall_score,
            "overall_grade": quiz.overall_grade,
            "scores": quiz.scores,
            "sales_mix": quiz.sales_mix,
        }
    return report


def projection_to_csv(projection: Union[ProjectionResult, pd.DataFrame]) -> str:
    """Export the monthly projection table as CSV text."""
    df = projection.projection if isinstance(projection, ProjectionResult) else projection
    return df.to_csv(index=False)
