"""Key recommendations derived from scenario and quiz results."""

from __future__ import annotations

from typing import List, Optional

from .engine.scenario import ScenarioResult
from .models import QuizResult
from .projector.campaign_economics import cap_threshold_spend

MIN_RECOMMENDATIONS = 3
MAX_RECOMMENDATIONS = 6

FALLBACK_RECOMMENDATIONS = (
    "Leverage privacy-compliant targeting to maximize CPMs",
    "Implement real-time optimization for inventory management",
)


def generate_key_recommendations(
    scenario_result: ScenarioResult,
    quiz: Optional[QuizResult] = None,
) -> List[str]:
    """
    Build between three and six recommendation bullets.

    Args:
        scenario_result: Calculated scenario
        quiz: Optional quiz result supplying the sales mix

    Returns:
        Recommendation strings, most important first
    """
    recommendations = []
    inputs = scenario_result.inputs
    current_addressability = scenario_result.id_infrastructure.current_addressability
    unaddressable = 100 - current_addressability

    if unaddressable > 20:
        recommendations.append("Implement comprehensive identity resolution to address significant unaddressable inventory")
    elif unaddressable > 10:
        recommendations.append("Optimize identity resolution to capture remaining unaddressable inventory")
    else:
        recommendations.append("Fine-tune identity resolution for maximum addressability rates")

    if inputs.weighted_safari_share > 0.25:
        recommendations.append("Implement Safari/Firefox-specific optimization strategies")

    if current_addressability < 70:
        recommendations.append("Priority focus on improving overall addressability rates")

    if quiz is not None and quiz.sales_mix:
        if quiz.sales_mix.get("open_exchange", 0) > 50:
            recommendations.append("Consider increasing direct sales and deal ID usage to improve margins")
        if quiz.sales_mix.get("direct", 0) < 30:
            recommendations.append("Explore opportunities to grow direct sales relationships")

    split = inputs.weighted_display_video_split
    if split < 20:
        recommendations.append("Optimize video inventory monetization strategies")
    elif split > 90:
        recommendations.append("Consider expanding video inventory opportunities")

    if inputs.domain_count > 3:
        recommendations.append("Implement cross-domain identity resolution for multi-domain operations")

    if scenario_result.capi is not None and scenario_result.avg_campaign_spend >= cap_threshold_spend():
        recommendations.append("Negotiate a per-campaign fee cap: large CAPI campaigns exceed the cap threshold")

    for fallback in FALLBACK_RECOMMENDATIONS:
        if len(recommendations) >= MIN_RECOMMENDATIONS:
            break
        recommendations.append(fallback)

    return recommendations[:MAX_RECOMMENDATIONS]
