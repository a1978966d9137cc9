import pandas as pd
import pytest

from uplift_modeler.projector import (
    INCENTIVE_ALIGNMENT,
    AnnualCapModel,
    CommercialModelType,
    FlatFeeModel,
    RevenueShareModel,
    build_monthly_incremental,
    create_commercial_model,
)


def flat_months(incremental, months=36, base=1000000.0):
    return pd.DataFrame(
        {
            "month": range(1, months + 1),
            "year": [(m - 1) // 12 + 1 for m in range(1, months + 1)],
            "base_revenue": [base] * months,
            "incremental_revenue": [incremental] * months,
        }
    )


def test_revenue_share_below_cap():
    model = RevenueShareModel(share_percentage=0.125, campaign_cap=30000)
    df = model.calculate_projection(flat_months(100000))

    assert (df["vendor_share"] == 12500).all()
    assert (df["publisher_net_gain"] == 87500).all()
    assert (df["value_suppressed"] == 0).all()


def test_revenue_share_cap_scales_with_campaigns():
    single = RevenueShareModel(0.125, 30000, campaigns_per_month=1)
    multiple = RevenueShareModel(0.125, 30000, campaigns_per_month=3)

    assert single.calculate_projection(flat_months(1000000))["vendor_share"].max() == 30000
    assert multiple.calculate_projection(flat_months(1000000))["vendor_share"].max() == 90000


def test_revenue_share_never_suppresses_value():
    model = create_commercial_model(CommercialModelType.REVENUE_SHARE, campaigns_per_month=2)
    df = model.calculate_projection(build_monthly_incremental(500000, 2000000))
    assert df["value_suppressed"].sum() == 0
    assert model.get_summary(df)["total_value_suppressed"] == 0


def test_flat_fee_charges_every_month():
    model = FlatFeeModel(annual_fee=1200000, suppression_rate=0.25)
    df = model.calculate_projection(flat_months(50000))

    assert (df["vendor_share"] == 100000).all()
    # Net gain goes negative when the fee exceeds incremental
    assert (df["publisher_net_gain"] == -50000).all()
    # 100K fee vs a 6,250 revenue-share fee on the same month
    assert df["value_suppressed"].iloc[0] == pytest.approx((100000 - 6250) * 0.25)
    assert model.get_summary(df)["negative_months"] == 36


def test_annual_cap_truncates_crossing_month():
    model = AnnualCapModel(base_share_percentage=0.125, annual_cap=1200000, suppression_rate=0.25)
    # 125K fee per month: cap reached after 9.6 months
    df = model.calculate_projection(flat_months(1000000))

    year_one = df[df["year"] == 1]["vendor_share"].tolist()
    assert year_one[:9] == [125000] * 9
    assert year_one[9] == pytest.approx(75000)
    assert year_one[10:] == [0, 0]
    assert df.groupby("year")["vendor_share"].sum().tolist() == pytest.approx([1200000] * 3)
    # Month 13 regains headroom as month 1 leaves the trailing window
    assert df[df["month"] == 13]["vendor_share"].iloc[0] == 125000


def test_annual_cap_post_cap_benefit():
    model = AnnualCapModel(0.125, 1200000, suppression_rate=0.25)
    df = model.calculate_projection(flat_months(1000000))

    month_10 = df[df["month"] == 10].iloc[0]
    # 75K fee covers 600K of incremental; the other 400K is post-cap
    assert month_10["post_cap_benefit"] == pytest.approx(400000)
    assert month_10["value_suppressed"] == pytest.approx(100000)
    month_11 = df[df["month"] == 11].iloc[0]
    assert month_11["post_cap_benefit"] == pytest.approx(1000000)
    assert month_11["publisher_net_gain"] == pytest.approx(1000000)


def test_annual_cap_below_cap_behaves_like_revenue_share():
    cap = AnnualCapModel(0.125, 1200000, suppression_rate=0.25)
    df = cap.calculate_projection(flat_months(10000))
    assert (df["vendor_share"] == 1250).all()
    assert df["value_suppressed"].sum() == 0


def test_value_suppressed_never_negative():
    monthly = build_monthly_incremental(500000, 400000)
    for model_type in CommercialModelType:
        model = create_commercial_model(model_type)
        df = model.calculate_projection(monthly)
        assert (df["value_suppressed"] >= 0).all()


def test_cumulative_columns():
    model = RevenueShareModel(0.125, 30000)
    df = model.calculate_projection(flat_months(100000, months=3))
    assert df["cumulative_incremental"].tolist() == [100000, 200000, 300000]
    assert df["cumulative_vendor_share"].iloc[-1] == 37500
    assert df["cumulative_publisher_gain"].iloc[-1] == 262500


def test_summary_roi_and_zero_fee():
    model = RevenueShareModel(0.125, 30000)
    summary = model.get_summary(model.calculate_projection(flat_months(100000, months=12)))
    assert summary["roi_multiple"] == pytest.approx(8.0)
    assert summary["net_gain_percentage"] == pytest.approx(87.5)

    free = FlatFeeModel(annual_fee=0, suppression_rate=0.25)
    summary = free.get_summary(free.calculate_projection(flat_months(0, months=12)))
    assert summary["roi_multiple"] is None
    assert summary["net_gain_percentage"] == 0.0


def test_factory_uses_benchmark_defaults():
    revenue_share = create_commercial_model("revenue-share")
    flat = create_commercial_model(CommercialModelType.FLAT_FEE)
    annual = create_commercial_model(CommercialModelType.ANNUAL_CAP)

    assert revenue_share.share_percentage == 0.125
    assert revenue_share.campaign_cap == 30000
    assert flat.annual_fee == 1000000
    assert annual.annual_cap == 1200000
    assert annual.annual_floor == 300000


def test_missing_columns_rejected():
    model = RevenueShareModel(0.125, 30000)
    with pytest.raises(ValueError):
        model.calculate_projection(pd.DataFrame({"month": [1]}))


def test_invalid_parameters_rejected():
    with pytest.raises(ValueError):
        RevenueShareModel(1.5, 30000)
    with pytest.raises(ValueError):
        RevenueShareModel(0.125, 30000, campaigns_per_month=0)
    with pytest.raises(ValueError):
        FlatFeeModel(-1, 0.25)
    with pytest.raises(ValueError):
        AnnualCapModel(0, 1200000, 0.25)


def test_incentive_alignment_ordering():
    assert INCENTIVE_ALIGNMENT[CommercialModelType.REVENUE_SHARE].alignment_score == 100
    assert INCENTIVE_ALIGNMENT[CommercialModelType.ANNUAL_CAP].alignment_score == 60
    assert INCENTIVE_ALIGNMENT[CommercialModelType.FLAT_FEE].alignment_score == 20


def test_flat_fee_without_fee_suppresses_nothing():
    model = FlatFeeModel(annual_fee=0, suppression_rate=0.25)
    df = model.calculate_projection(flat_months(1000000, months=12))

    reference = RevenueShareModel(0.125, 30000)
    reference_df = reference.calculate_projection(flat_months(1000000, months=12))

    assert df["publisher_net_gain"].sum() > reference_df["publisher_net_gain"].sum()
    assert df["value_suppressed"].sum() == 0


def test_flat_fee_suppression_is_gap_to_revenue_share():
    # 10K/month fee is below the 30K capped revenue-share fee
    cheap = FlatFeeModel(annual_fee=120000, suppression_rate=0.25)
    assert cheap.calculate_projection(flat_months(1000000))["value_suppressed"].sum() == 0

    # 3 campaigns raise the reference fee to 90K, leaving a 10K monthly gap
    dear = FlatFeeModel(annual_fee=1200000, suppression_rate=0.25, reference_campaigns=3)
    df = dear.calculate_projection(flat_months(1000000, months=12))
    assert df["value_suppressed"].tolist() == pytest.approx([2500] * 12)


def test_annual_cap_bounds_every_trailing_window_on_ramped_projection():
    model = AnnualCapModel(base_share_percentage=0.125, annual_cap=1200000, suppression_rate=0.25)
    df = model.calculate_projection(build_monthly_incremental(0, 1280000))

    rolling = df["vendor_share"].rolling(12, min_periods=1).sum()
    assert rolling.max() <= 1200000 + 1e-6
    assert df.groupby("year")["vendor_share"].sum().max() <= 1200000 + 1e-6
    # The cap binds once the ramp reaches full volume
    assert df["post_cap_benefit"].sum() > 0


def test_commercial_model_is_abstract():
    from uplift_modeler.projector import CommercialModel

    with pytest.raises(TypeError):
        CommercialModel()
