import io
import json

import pandas as pd

from uplift_modeler.engine import ScenarioSelection, Scope, aggregate_domain_inputs, calculate_scenario
from uplift_modeler.models import LeadData
from uplift_modeler.projector import CommercialModelType, compare_commercial_models
from uplift_modeler.quiz import QUESTIONS, score_quiz
from uplift_modeler.recommendations import generate_key_recommendations
from uplift_modeler.report import build_report, projection_to_csv

LEAD = LeadData(first_name="Sam", last_name="Rivera", email="sam@example.com", company="Example Media")


def test_report_is_json_serialisable(poc_scenario):
    comparisons = compare_commercial_models(poc_scenario)
    quiz = score_quiz({q.id: q.options[0].value for q in QUESTIONS})
    report = build_report(LEAD, poc_scenario, comparisons, quiz)

    json.dumps(report)
    assert report["prepared_for"]["name"] == "Sam Rivera"
    assert report["headline"]["monthly_uplift"] == poc_scenario.totals.total_monthly_uplift
    assert set(report["commercial_models"]) == {m.value for m in CommercialModelType}
    assert report["recommended_model"] in report["commercial_models"]
    assert report["quiz"]["overall_grade"] == "F"
    assert 3 <= len(report["recommendations"]) <= 6


def test_report_without_quiz(poc_scenario):
    report = build_report(LEAD, poc_scenario, compare_commercial_models(poc_scenario))
    assert report["quiz"] is None


def test_projection_csv(poc_scenario):
    comparisons = compare_commercial_models(poc_scenario)
    csv_text = projection_to_csv(comparisons[CommercialModelType.ANNUAL_CAP])

    df = pd.read_csv(io.StringIO(csv_text))
    assert len(df) == 36
    assert {"month", "vendor_share", "publisher_net_gain", "value_suppressed"} <= set(df.columns)


def test_recommendations_bounds():
    inputs = aggregate_domain_inputs([])
    scenario = calculate_scenario(inputs, ScenarioSelection(scope=Scope.ID_ONLY))
    recommendations = generate_key_recommendations(scenario)
    assert 3 <= len(recommendations) <= 6


def test_recommendations_use_sales_mix(poc_scenario):
    quiz = score_quiz({}, {"direct": 10, "deal_ids": 20, "open_exchange": 70})
    recommendations = generate_key_recommendations(poc_scenario, quiz)

    assert len(recommendations) <= 6
    assert any("direct sales" in r for r in recommendations)


def test_large_campaigns_recommend_cap():
    inputs = aggregate_domain_inputs(["the-verge"])
    scenario = calculate_scenario(inputs, avg_campaign_spend=800000)
    recommendations = generate_key_recommendations(scenario)
    assert any("fee cap" in r for r in recommendations)
