"""
Identity Uplift Modeler - estimate ad revenue uplift from identity resolution.
Quiz, calculator, commercial-model comparison and report in one funnel.
"""

import json
import logging
from pathlib import Path

import plotly.graph_objects as go
import streamlit as st
from dotenv import load_dotenv

# Load environment variables
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path, override=True)

from uplift_modeler.catalog import get_catalog
from uplift_modeler.config import settings
from uplift_modeler.engine import (
    SLIDER_RANGES,
    DeploymentTier,
    InvalidOverrideError,
    ResolvedBenchmarks,
    RiskPosture,
    ScenarioSelection,
    Scope,
    aggregate_domain_inputs,
    calculate_scenario,
    get_benchmarks,
)
from uplift_modeler.formatting import format_currency, format_multiple, format_number, format_percentage
from uplift_modeler.lead_storage import load_lead, save_lead, validate_lead
from uplift_modeler.models import LeadData
from uplift_modeler.projector import (
    INCENTIVE_ALIGNMENT,
    CommercialModelType,
    calculate_campaign_portfolio,
    compare_commercial_models,
    comparison_table,
    deal_breakdown,
)
from uplift_modeler.quiz import (
    DEFAULT_SALES_MIX,
    QUESTIONS,
    SALES_MIX_KEYS,
    SALES_MIX_QUESTION,
    category_name,
    rebalance_sales_mix,
    sales_mix_can_proceed,
    score_quiz,
)
from uplift_modeler.recommendations import generate_key_recommendations
from uplift_modeler.report import build_report, projection_to_csv

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)

st.set_page_config(page_title=settings.app.title, page_icon="📈", layout="wide", initial_sidebar_state="collapsed")

MODEL_COLORS = {
    CommercialModelType.REVENUE_SHARE: "#34c759",
    CommercialModelType.ANNUAL_CAP: "#ff9500",
    CommercialModelType.FLAT_FEE: "#ff3b30",
}

# CSS
st.markdown("""
<style>
#MainMenu, footer, header, .stDeployButton {visibility: hidden; display: none;}
.stApp {background-color: #000000;}
.main .block-container {padding-top: 2rem; padding-bottom: 2rem; max-width: 1000px;}
.page-title {font-size: 34px; font-weight: 700; color: #ffffff; margin-bottom: 4px;}
.page-subtitle {font-size: 14px; color: #8e8e93; margin-bottom: 20px;}
.stat-card {background-color: #1c1c1e; border-radius: 12px; padding: 16px; margin-bottom: 12px;}
.stat-label {font-size: 13px; color: #8e8e93; margin-bottom: 8px;}
.stat-value {font-size: 28px; font-weight: 600; color: #ffffff;}
.stat-change-positive {font-size: 13px; color: #34c759; margin-top: 4px;}
.stat-change-negative {font-size: 13px; color: #ff3b30; margin-top: 4px;}
.stat-change-neutral {font-size: 13px; color: #8e8e93; margin-top: 4px;}
.section-header {font-size: 20px; font-weight: 600; color: #ffffff; margin-top: 24px; margin-bottom: 12px;}
.stButton > button {background-color: #2c2c2e; color: #ffffff; border: none; border-radius: 8px; font-weight: 500;}
.stButton > button:hover {background-color: #3c3c3e;}
</style>
""", unsafe_allow_html=True)


def stat_card(label: str, value: str, note: str = "", tone: str = "neutral") -> None:
    note_html = f'<div class="stat-change-{tone}">{note}</div>' if note else ""
    st.markdown(f'''<div class="stat-card">
        <div class="stat-label">{label}</div>
        <div class="stat-value">{value}</div>
        {note_html}
    </div>''', unsafe_allow_html=True)


def section_header(text: str) -> None:
    st.markdown(f'<div class="section-header">{text}</div>', unsafe_allow_html=True)


def _chart_layout(fig, height):
    fig.update_layout(
        height=height,
        margin=dict(l=0, r=0, t=30, b=30),
        paper_bgcolor='rgba(0,0,0,0)',
        plot_bgcolor='rgba(0,0,0,0)',
        showlegend=True,
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0, font=dict(color='#ffffff', size=11)),
        xaxis=dict(showgrid=False, showline=False, tickfont=dict(color='#8e8e93', size=10)),
        yaxis=dict(
            showgrid=True,
            gridcolor='rgba(142,142,147,0.2)',
            showline=False,
            tickfont=dict(color='#8e8e93', size=10),
            tickprefix='$',
            tickformat=',.0f',
        ),
        hovermode='x unified',
        hoverlabel=dict(bgcolor='#1c1c1e', font_size=12, font_color='#ffffff'),
    )
    return fig


def create_cumulative_chart(comparisons, height=350):
    """Cumulative publisher net gain per commercial model over 36 months."""
    fig = go.Figure()
    for model_type, result in comparisons.items():
        df = result.projection
        fig.add_trace(go.Scatter(
            x=df["month"],
            y=df["cumulative_publisher_gain"],
            mode='lines',
            name=result.summary["label"],
            line=dict(color=MODEL_COLORS[model_type], width=2),
            hovertemplate='$%{y:,.0f}<extra></extra>',
        ))
    return _chart_layout(fig, height)


def create_breakdown_chart(breakdown_df, height=320):
    """Ramped uplift by component and contract year."""
    fig = go.Figure()
    colors = ["#007aff", "#34c759", "#af52de"]
    year_columns = [c for c in breakdown_df.columns if c.startswith("year_")]
    components = breakdown_df[breakdown_df["component"] != "Total"]
    for i, (_, row) in enumerate(components.iterrows()):
        fig.add_trace(go.Bar(
            name=row["component"],
            x=[c.replace("year_", "Y") for c in year_columns],
            y=[row[c] for c in year_columns],
            marker_color=colors[i % len(colors)],
            hovertemplate='$%{y:,.0f}<extra></extra>',
        ))
    fig.update_layout(barmode='stack')
    return _chart_layout(fig, height)


def init_state():
    defaults = settings.defaults
    initial = {
        "page": "hero",
        "quiz_answers": {},
        "sales_mix": dict(DEFAULT_SALES_MIX),
        "quiz_result": None,
        "selected_domains": get_catalog().preset("poc"),
        "display_cpm": defaults.display_cpm,
        "video_cpm": defaults.video_cpm,
        "capi_campaigns_per_month": defaults.capi_campaigns_per_month,
        "avg_campaign_spend": defaults.avg_campaign_spend,
        "risk_posture": defaults.risk_posture,
        "scope": defaults.scope,
        "deployment": "auto",
        "overrides": {},
        "lead": load_lead(),
    }
    for key in SALES_MIX_KEYS:
        initial[f"mix_{key}"] = int(DEFAULT_SALES_MIX[key])
    for key, value in initial.items():
        if key not in st.session_state:
            st.session_state[key] = value


def go_to(page: str) -> None:
    st.session_state.page = page
    st.rerun()


def render_hero_page():
    st.markdown(f'<div class="page-title">{settings.app.title}</div>', unsafe_allow_html=True)
    st.markdown(
        '<div class="page-subtitle">See how much ad revenue identity resolution can recover across your portfolio.</div>',
        unsafe_allow_html=True,
    )
    catalog = get_catalog()
    col1, col2, col3 = st.columns(3)
    with col1:
        stat_card("Portfolio Domains", str(len(catalog)))
    with col2:
        stat_card("Monthly Pageviews", format_number(catalog.total_monthly_pageviews()))
    with col3:
        stat_card("Monthly Ad Impressions", format_number(catalog.total_monthly_impressions()))

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Take the Identity Health Quiz", use_container_width=True):
            go_to("quiz")
    with col2:
        if st.button("Skip to Calculator", use_container_width=True):
            go_to("inputs")


def on_sales_mix_change(channel: str) -> None:
    """Rebalance the other channels before the sliders are redrawn."""
    mix = rebalance_sales_mix(st.session_state.sales_mix, channel, st.session_state[f"mix_{channel}"])
    st.session_state.sales_mix = mix
    for key in SALES_MIX_KEYS:
        st.session_state[f"mix_{key}"] = int(mix[key])


def render_quiz_page():
    st.markdown('<div class="page-title">Identity Health Quiz</div>', unsafe_allow_html=True)
    answers = st.session_state.quiz_answers

    for question in QUESTIONS:
        labels = [option.label for option in question.options]
        values = [option.value for option in question.options]
        current = answers.get(question.id)
        choice = st.radio(
            question.question,
            labels,
            index=values.index(current) if current in values else None,
            key=f"quiz_{question.id}",
        )
        if choice is not None:
            answers[question.id] = values[labels.index(choice)]

    section_header(SALES_MIX_QUESTION)
    for key, label in (("direct", "Direct sales"), ("deal_ids", "Deal IDs"), ("open_exchange", "Open exchange")):
        st.slider(f"{label} (%)", 0, 100, key=f"mix_{key}", on_change=on_sales_mix_change, args=(key,))

    total = sum(st.session_state.sales_mix.values())
    st.caption(f"Total: {total:.0f}%")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Back", use_container_width=True):
            go_to("hero")
    with col2:
        complete = len(answers) == len(QUESTIONS) and sales_mix_can_proceed(st.session_state.sales_mix)
        if st.button("See my grade", use_container_width=True, disabled=not complete):
            st.session_state.quiz_result = score_quiz(answers, st.session_state.sales_mix)
            go_to("inputs")


def render_assumption_overrides():
    """Advanced settings: per-run benchmark overrides."""
    table = get_benchmarks()
    with st.expander("Advanced assumptions"):
        overrides = dict(st.session_state.overrides)
        for name in ResolvedBenchmarks.overridable_fields():
            if name not in table.override_ranges:
                continue
            low, high = table.override_ranges[name]
            use = st.checkbox(f"Override {name.replace('_', ' ')}", value=name in overrides, key=f"use_{name}")
            if use:
                overrides[name] = st.number_input(
                    name.replace("_", " ").title(),
                    min_value=low,
                    max_value=high,
                    value=float(overrides.get(name, low)),
                    key=f"override_{name}",
                )
            else:
                overrides.pop(name, None)
        st.session_state.overrides = overrides


def render_inputs_page():
    st.markdown('<div class="page-title">Your Portfolio</div>', unsafe_allow_html=True)
    quiz = st.session_state.quiz_result
    if quiz is not None:
        st.markdown(
            f'<div class="page-subtitle">Identity health grade: <b>{quiz.overall_grade}</b> '
            f'({quiz.overall_score:.1f} / 4)</div>',
            unsafe_allow_html=True,
        )

    catalog = get_catalog()
    domains = catalog.list_domains()
    names = {d.id: f"{d.name} ({catalog.category_label(d.category)})" for d in domains}

    col1, col2, col3 = st.columns(3)
    for col, preset in zip((col1, col2, col3), ("poc", "top", "full")):
        with col:
            if st.button(f"Select {preset.upper()} domains", use_container_width=True):
                st.session_state.selected_domains = catalog.preset(preset)
                st.rerun()

    st.session_state.selected_domains = st.multiselect(
        "Domains",
        options=[d.id for d in domains],
        default=st.session_state.selected_domains,
        format_func=lambda domain_id: names.get(domain_id, domain_id),
    )

    section_header("Inputs")
    col1, col2 = st.columns(2)
    with col1:
        low, high, step = SLIDER_RANGES["display_cpm"]
        st.session_state.display_cpm = st.slider("Display CPM ($)", low, high, float(st.session_state.display_cpm), step)
        low, high, step = SLIDER_RANGES["capi_campaigns_per_month"]
        st.session_state.capi_campaigns_per_month = st.slider(
            "CAPI campaigns per month", int(low), int(high), int(st.session_state.capi_campaigns_per_month), int(step)
        )
    with col2:
        low, high, step = SLIDER_RANGES["video_cpm"]
        st.session_state.video_cpm = st.slider("Video CPM ($)", low, high, float(st.session_state.video_cpm), step)
        low, high, step = SLIDER_RANGES["avg_campaign_spend"]
        st.session_state.avg_campaign_spend = st.slider(
            "Average campaign spend ($)", low, high, float(st.session_state.avg_campaign_spend), step
        )

    section_header("Scenario")
    col1, col2, col3 = st.columns(3)
    with col1:
        postures = [p.value for p in RiskPosture]
        st.session_state.risk_posture = st.radio(
            "Risk posture", postures, index=postures.index(st.session_state.risk_posture)
        )
        st.caption(get_benchmarks().posture_description(RiskPosture(st.session_state.risk_posture)))
    with col2:
        scopes = [s.value for s in Scope]
        st.session_state.scope = st.radio("Scope", scopes, index=scopes.index(st.session_state.scope))
    with col3:
        tiers = ["auto"] + [t.value for t in DeploymentTier]
        st.session_state.deployment = st.radio("Deployment", tiers, index=tiers.index(st.session_state.deployment))

    render_assumption_overrides()

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Back", use_container_width=True):
            go_to("hero")
    with col2:
        if st.button("Calculate", use_container_width=True):
            go_to("results")


def run_scenario():
    inputs = aggregate_domain_inputs(
        st.session_state.selected_domains,
        display_cpm=st.session_state.display_cpm,
        video_cpm=st.session_state.video_cpm,
    )
    deployment = None if st.session_state.deployment == "auto" else DeploymentTier(st.session_state.deployment)
    return calculate_scenario(
        inputs,
        selection=ScenarioSelection(scope=Scope(st.session_state.scope), deployment=deployment),
        posture=st.session_state.risk_posture,
        overrides=st.session_state.overrides,
        capi_campaigns_per_month=st.session_state.capi_campaigns_per_month,
        avg_campaign_spend=st.session_state.avg_campaign_spend,
    )


def render_commercial_models(result, comparisons):
    section_header("Commercial Model Comparison (36 months)")
    cols = st.columns(len(comparisons))
    for col, (model_type, projection) in zip(cols, comparisons.items()):
        summary = projection.summary
        alignment = INCENTIVE_ALIGNMENT[model_type]
        with col:
            tone = "positive" if summary["total_publisher_net_gain"] >= 0 else "negative"
            stat_card(
                summary["label"],
                format_currency(summary["total_publisher_net_gain"]),
                f"Vendor: {format_currency(summary['total_vendor_share'])} · ROI {format_multiple(summary['roi_multiple'])}",
                tone,
            )
            st.caption(f"{alignment.partnership_level} ({alignment.alignment_score}/100)")
            if summary["total_value_suppressed"] > 0:
                st.caption(f"Value at risk: {format_currency(summary['total_value_suppressed'])}")

    st.plotly_chart(create_cumulative_chart(comparisons), use_container_width=True, config={'displayModeBar': False})
    st.dataframe(comparison_table(comparisons), use_container_width=True, hide_index=True)

    if result.capi is not None:
        section_header("Campaign Economics")
        portfolio = calculate_campaign_portfolio(
            int(result.capi_campaigns_per_month * 12), result.avg_campaign_spend
        )
        col1, col2, col3 = st.columns(3)
        with col1:
            stat_card("Yearly Incremental", format_currency(portfolio.total_incremental))
        with col2:
            stat_card("Yearly Fees", format_currency(portfolio.total_fees))
        with col3:
            stat_card("Portfolio ROI", format_multiple(portfolio.portfolio_roi))
        st.dataframe(
            [
                {
                    "Campaign spend": format_currency(e.campaign_spend),
                    "Incremental": format_currency(e.incremental_revenue),
                    "Fee": format_currency(e.capped_fee),
                    "Net to publisher": format_currency(e.net_to_publisher),
                    "ROI": format_multiple(e.roi_multiple),
                    "Capped": "Yes" if e.is_capped else "No",
                }
                for e in portfolio.example_campaigns
            ],
            use_container_width=True,
            hide_index=True,
        )


def render_results_page():
    st.markdown('<div class="page-title">Your Uplift</div>', unsafe_allow_html=True)
    try:
        result = run_scenario()
    except InvalidOverrideError as e:
        st.error(f"Invalid assumption {e.field_name}: {e}")
        if st.button("Back to inputs"):
            go_to("inputs")
        return

    totals = result.totals
    if result.inputs.is_default:
        st.info("No domains with traffic selected: showing the default composite.")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        stat_card("Current Monthly Revenue", format_currency(totals.current_monthly_revenue))
    with col2:
        stat_card(
            "Monthly Uplift",
            format_currency(totals.total_monthly_uplift),
            f"+{format_percentage(totals.percentage_improvement, 1)}",
            "positive",
        )
    with col3:
        stat_card("Annual Uplift", format_currency(totals.total_annual_uplift))
    with col4:
        stat_card("3-Year Uplift", format_currency(totals.three_year_projection))

    section_header("Uplift by Component")
    breakdown = deal_breakdown(result)
    st.plotly_chart(create_breakdown_chart(breakdown), use_container_width=True, config={'displayModeBar': False})
    adj = result.risk_adjustment
    st.caption(
        f"Risk adjusted from {format_currency(adj['unadjusted_monthly_uplift'])} to "
        f"{format_currency(adj['adjusted_monthly_uplift'])} per month "
        f"({format_percentage(adj['adjustment_percentage'], 1)})."
    )

    comparisons = compare_commercial_models(result)
    if result.capi is not None:
        render_commercial_models(result, comparisons)

    section_header("Key Recommendations")
    for recommendation in generate_key_recommendations(result, st.session_state.quiz_result):
        st.markdown(f"- {recommendation}")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Adjust inputs", use_container_width=True):
            go_to("inputs")
    with col2:
        if st.button("Get the full report", use_container_width=True):
            go_to("report")


def render_lead_form():
    """Collect contact details; returns the saved lead or None."""
    existing = st.session_state.lead
    with st.form("lead_form"):
        col1, col2 = st.columns(2)
        with col1:
            first_name = st.text_input("First name", value=existing.first_name if existing else "")
            email = st.text_input("Email", value=existing.email if existing else "")
        with col2:
            last_name = st.text_input("Last name", value=existing.last_name if existing else "")
            company = st.text_input("Company", value=existing.company if existing else "")
        submitted = st.form_submit_button("Unlock report")

    if not submitted:
        return existing

    lead = LeadData(first_name=first_name, last_name=last_name, email=email, company=company)
    errors = validate_lead(lead)
    if errors:
        for message in errors.values():
            st.error(message)
        return None
    if not save_lead(lead):
        st.error("Could not save your details. Please try again.")
    st.session_state.lead = lead
    return lead


def render_report_page():
    st.markdown('<div class="page-title">Your Report</div>', unsafe_allow_html=True)
    lead = render_lead_form()
    if lead is None:
        return

    result = run_scenario()
    comparisons = compare_commercial_models(result)
    report = build_report(lead, result, comparisons, st.session_state.quiz_result)

    st.success(f"Report prepared for {lead.full_name} at {lead.company}.")
    if st.session_state.quiz_result is not None:
        section_header("Identity Health")
        cols = st.columns(4)
        for col, (category, score) in zip(cols, st.session_state.quiz_result.scores.items()):
            with col:
                stat_card(category_name(category), score["grade"])

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "Download report (JSON)",
            data=json.dumps(report, indent=2, default=str),
            file_name="uplift_report.json",
            mime="application/json",
            use_container_width=True,
        )
    with col2:
        st.download_button(
            "Download revenue-share projection (CSV)",
            data=projection_to_csv(comparisons[CommercialModelType.REVENUE_SHARE]),
            file_name="revenue_share_projection.csv",
            mime="text/csv",
            use_container_width=True,
        )

    if st.button("Back to results"):
        go_to("results")


def main():
    init_state()

    if st.session_state.page == "quiz":
        render_quiz_page()
    elif st.session_state.page == "inputs":
        render_inputs_page()
    elif st.session_state.page == "results":
        render_results_page()
    elif st.session_state.page == "report":
        render_report_page()
    else:
        render_hero_page()


if __name__ == "__main__":
    main()
