"""
Engine module for domain aggregation and scenario uplift.

Provides the domain aggregator, benchmark tables and the scenario calculator.
"""

from .aggregation import (
    aggregate_domain_inputs,
    default_composite,
    deployment_tier_for,
    pageview_weights,
    select_domains,
)
from .benchmarks import (
    PROJECTION_HORIZON_MONTHS,
    BenchmarkTable,
    DeploymentTier,
    InvalidOverrideError,
    ResolvedBenchmarks,
    RiskPosture,
    deployment_multiplier,
    get_benchmarks,
    ramp_up_factor,
    readiness_to_posture,
    resolve_benchmarks,
    validate_override,
)
from .scenario import (
    SLIDER_RANGES,
    CapiUplift,
    IdInfrastructureUplift,
    MediaPerformanceUplift,
    ScenarioResult,
    ScenarioSelection,
    ScenarioTotals,
    Scope,
    calculate_scenario,
    validate_slider,
)

__all__ = [
    # aggregation.py
    "aggregate_domain_inputs",
    "default_composite",
    "deployment_tier_for",
    "pageview_weights",
    "select_domains",
    # benchmarks.py
    "PROJECTION_HORIZON_MONTHS",
    "BenchmarkTable",
    "DeploymentTier",
    "InvalidOverrideError",
    "ResolvedBenchmarks",
    "RiskPosture",
    "deployment_multiplier",
    "get_benchmarks",
    "ramp_up_factor",
    "readiness_to_posture",
    "resolve_benchmarks",
    "validate_override",
    # scenario.py
    "SLIDER_RANGES",
    "CapiUplift",
    "IdInfrastructureUplift",
    "MediaPerformanceUplift",
    "ScenarioResult",
    "ScenarioSelection",
    "ScenarioTotals",
    "Scope",
    "calculate_scenario",
    "validate_slider",
]
