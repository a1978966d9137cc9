import pytest

from uplift_modeler.engine import ScenarioSelection, Scope, aggregate_domain_inputs, calculate_scenario
from uplift_modeler.projector import (
    CommercialModelType,
    best_model,
    build_monthly_incremental,
    compare_commercial_models,
    comparison_table,
    create_commercial_model,
    deal_breakdown,
    generate_projection,
)


def test_monthly_table_shape():
    df = build_monthly_incremental(250000, 100000)

    assert len(df) == 36
    assert df["month"].tolist() == list(range(1, 37))
    assert df["year"].tolist() == [1] * 12 + [2] * 12 + [3] * 12
    assert df["incremental_revenue"].iloc[0] == pytest.approx(15000)
    assert df["incremental_revenue"].iloc[4] == pytest.approx(35000)
    assert df["incremental_revenue"].iloc[6] == pytest.approx(100000)
    assert (df["base_revenue"] == 250000).all()


def test_horizon_must_be_positive():
    with pytest.raises(ValueError):
        build_monthly_incremental(1, 1, horizon_months=0)


def test_generate_projection_uses_capi_incremental_only(poc_scenario):
    model = create_commercial_model(CommercialModelType.FLAT_FEE)
    result = generate_projection(model, poc_scenario)

    expected = poc_scenario.capi_monthly_incremental * 31.5
    assert result.summary["total_incremental"] == pytest.approx(expected)
    assert result.summary["months"] == 36
    assert result.model_type is CommercialModelType.FLAT_FEE
    assert len(result.to_dict()["monthly"]) == 36


def test_compare_all_models(poc_scenario):
    comparisons = compare_commercial_models(poc_scenario)

    assert set(comparisons) == set(CommercialModelType)
    incrementals = {m: r.summary["total_incremental"] for m, r in comparisons.items()}
    assert len({round(v, 6) for v in incrementals.values()}) == 1

    for result in comparisons.values():
        summary = result.summary
        assert summary["total_publisher_net_gain"] == pytest.approx(
            summary["total_incremental"] - summary["total_vendor_share"]
        )

    table = comparison_table(comparisons)
    assert list(table["model"]) == [m.value for m in comparisons]
    assert best_model(comparisons) in comparisons


def test_revenue_share_cap_uses_campaign_count(poc_scenario):
    comparisons = compare_commercial_models(poc_scenario)
    params = comparisons[CommercialModelType.REVENUE_SHARE].summary["params"]
    assert params["campaigns_per_month"] == 10


def test_model_param_overrides(poc_scenario):
    comparisons = compare_commercial_models(
        poc_scenario, model_params={CommercialModelType.FLAT_FEE: {"annual_fee": 0}}
    )
    summary = comparisons[CommercialModelType.FLAT_FEE].summary
    assert summary["total_vendor_share"] == 0
    assert summary["roi_multiple"] is None


def test_id_only_scope_shares_nothing():
    inputs = aggregate_domain_inputs(["the-verge"])
    scenario = calculate_scenario(inputs, ScenarioSelection(scope=Scope.ID_ONLY))
    comparisons = compare_commercial_models(scenario)

    revenue_share = comparisons[CommercialModelType.REVENUE_SHARE].summary
    assert revenue_share["total_incremental"] == 0
    assert revenue_share["total_vendor_share"] == 0


def test_deal_breakdown(poc_scenario):
    df = deal_breakdown(poc_scenario)

    assert df["component"].tolist() == ["ID Infrastructure", "CAPI", "Media Performance", "Total"]
    total = df[df["component"] == "Total"].iloc[0]
    assert total["total"] == pytest.approx(poc_scenario.totals.three_year_projection)
    assert total["year_1"] + total["year_2"] + total["year_3"] == pytest.approx(total["total"])
    # Year 1 carries the ramp: 3 x 0.15 + 3 x 0.35 + 6 x 1.0
    capi = df[df["component"] == "CAPI"].iloc[0]
    assert capi["year_1"] == pytest.approx(poc_scenario.capi.monthly_uplift * 7.5)


def test_identical_inputs_identical_outputs(poc_scenario):
    first = compare_commercial_models(poc_scenario)
    second = compare_commercial_models(poc_scenario)
    for model_type in CommercialModelType:
        assert first[model_type].projection.equals(second[model_type].projection)
