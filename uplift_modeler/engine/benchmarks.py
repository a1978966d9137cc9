"""
Benchmark constant tables and per-run assumption overrides.

The benchmark table is loaded once from config/benchmarks.yaml and is
read-only afterwards. A risk posture selects one of three parallel tables;
overrides replace named values on top of the selected table.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..config import DEFAULT_BENCHMARKS_PATH, read_yaml

logger = logging.getLogger(__name__)

PROJECTION_HORIZON_MONTHS = 36


class RiskPosture(Enum):
    """Risk posture enumeration."""

    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    OPTIMISTIC = "optimistic"


class DeploymentTier(Enum):
    """Deployment scope tiers keyed on domain count."""

    SINGLE = "single"
    MULTI = "multi"
    FULL = "full"


class InvalidOverrideError(ValueError):
    """An assumption override is unknown, non-numeric or out of range."""

    def __init__(self, field_name: str, message: str) -> None:
        self.field_name = field_name
        super().__init__(f"{field_name}: {message}")


# Values each posture table must define
POSTURE_FIELDS = (
    "improved_match_rate",
    "conversion_multiplier",
    "cpm_premium",
    "adoption_rate",
    "addressability_efficiency",
    "capi_deployment_rate",
    "premium_inventory_share",
    "cpm_uplift_realization",
    "sales_effectiveness",
    "cdp_savings_realization",
)


@dataclass(frozen=True)
class ResolvedBenchmarks:
    """Benchmark values for one run: posture table plus overrides."""

    posture: RiskPosture

    # Posture table
    improved_match_rate: float
    conversion_multiplier: float
    cpm_premium: float
    adoption_rate: float
    addressability_efficiency: float
    capi_deployment_rate: float
    premium_inventory_share: float
    cpm_uplift_realization: float
    sales_effectiveness: float
    cdp_savings_realization: float

    # Shared values that may also be overridden
    current_safari_addressability: float
    target_safari_addressability: float
    performance_revenue_share: float
    cdp_monthly_savings: float

    @classmethod
    def overridable_fields(cls) -> List[str]:
        return [f.name for f in fields(cls) if f.name != "posture"]


class BenchmarkTable:
    """Loads and validates the benchmark constants."""

    def __init__(self, filepath: Union[str, Path] = DEFAULT_BENCHMARKS_PATH):
        self.filepath = Path(filepath)
        self._data: Dict[str, Any] = {}
        self.ramp_up: List[Tuple[Optional[int], float]] = []
        self.postures: Dict[RiskPosture, Dict[str, float]] = {}
        self.override_ranges: Dict[str, Tuple[float, float]] = {}
        self._load()

    def _load(self) -> None:
        """Load the YAML file and check the tables are complete."""
        self._data = read_yaml(self.filepath)

        for posture in RiskPosture:
            table = self._data.get("postures", {}).get(posture.value)
            if table is None:
                raise ValueError(f"Benchmark table missing posture '{posture.value}'")
            missing = [name for name in POSTURE_FIELDS if name not in table]
            if missing:
                raise ValueError(f"Posture '{posture.value}' missing benchmarks: {missing}")
            self.postures[posture] = {name: float(table[name]) for name in POSTURE_FIELDS}

        self.override_ranges = {
            name: (float(bounds[0]), float(bounds[1]))
            for name, bounds in self._data.get("override_ranges", {}).items()
        }

        self.ramp_up = [
            (step.get("through_month"), float(step["factor"]))
            for step in self._data.get("ramp_up", [])
        ]
        self._validate_ramp_up()
        logger.debug("Loaded benchmark table from %s", self.filepath)

    def _validate_ramp_up(self) -> None:
        """Ramp-up factors must be non-decreasing and settle at 1.0."""
        if not self.ramp_up:
            raise ValueError("Benchmark table has no ramp-up curve")
        factors = [factor for _, factor in self.ramp_up]
        if any(b < a for a, b in zip(factors, factors[1:])):
            raise ValueError(f"Ramp-up factors must be non-decreasing: {factors}")
        if self.ramp_up[-1][0] is not None or factors[-1] != 1.0:
            raise ValueError("Final ramp-up step must be open-ended with factor 1.0")
        bounds = [through for through, _ in self.ramp_up[:-1]]
        if any(b is None for b in bounds) or bounds != sorted(bounds):
            raise ValueError(f"Ramp-up month bounds must be increasing: {bounds}")

    def section(self, name: str) -> Dict[str, Any]:
        """Return a named constant section (e.g. 'inventory')."""
        return dict(self._data.get(name, {}))

    def value(self, section: str, key: str) -> float:
        return float(self._data[section][key])

    def posture_description(self, posture: RiskPosture) -> str:
        return str(self._data.get("posture_descriptions", {}).get(posture.value, ""))


_table: Optional[BenchmarkTable] = None


def get_benchmarks() -> BenchmarkTable:
    """Get the process-wide benchmark table, loading it on first use."""
    global _table
    if _table is None:
        _table = BenchmarkTable()
    return _table


def validate_override(name: str, value: Any, table: Optional[BenchmarkTable] = None) -> float:
    """
    Validate one override value.

    Args:
        name: Benchmark name
        value: Proposed value

    Returns:
        The value as a float

    Raises:
        InvalidOverrideError: Unknown name, non-numeric value or out of range
    """
    table = table or get_benchmarks()
    if name not in ResolvedBenchmarks.overridable_fields():
        raise InvalidOverrideError(name, "not an overridable benchmark")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidOverrideError(name, f"must be numeric, got {type(value).__name__}")
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        raise InvalidOverrideError(name, "must be a finite number")
    if name not in table.override_ranges:
        raise InvalidOverrideError(name, "no documented range")
    low, high = table.override_ranges[name]
    if not low <= value <= high:
        raise InvalidOverrideError(name, f"{value} outside plausible range [{low}, {high}]")
    return value


def resolve_benchmarks(
    posture: Union[RiskPosture, str],
    overrides: Optional[Mapping[str, Any]] = None,
    table: Optional[BenchmarkTable] = None,
) -> ResolvedBenchmarks:
    """
    Select the posture table and apply assumption overrides.

    Overrides are validated, never clamped. Fields not overridden fall back
    to the posture table.
    """
    table = table or get_benchmarks()
    posture = RiskPosture(posture)

    addressability = table.section("addressability")
    resolved = ResolvedBenchmarks(
        posture=posture,
        current_safari_addressability=float(addressability["current_safari_addressability"]),
        target_safari_addressability=float(addressability["target_safari_addressability"]),
        performance_revenue_share=table.value("capi", "performance_revenue_share"),
        cdp_monthly_savings=table.value("operational", "cdp_monthly_savings"),
        **table.postures[posture],
    )

    if overrides:
        validated = {name: validate_override(name, value, table) for name, value in overrides.items()}
        resolved = replace(resolved, **validated)
        logger.debug("Applied %d benchmark overrides: %s", len(validated), sorted(validated))

    if resolved.target_safari_addressability < resolved.current_safari_addressability:
        raise InvalidOverrideError(
            "target_safari_addressability",
            "must not be below current_safari_addressability",
        )
    if resolved.improved_match_rate < table.value("capi", "baseline_match_rate"):
        raise InvalidOverrideError("improved_match_rate", "must not be below the baseline match rate")
    return resolved


def ramp_up_factor(month: int, table: Optional[BenchmarkTable] = None) -> float:
    """Deployment ramp-up multiplier for a 1-based month."""
    if month < 1:
        raise ValueError(f"Month must be >= 1, got {month}")
    table = table or get_benchmarks()
    for through_month, factor in table.ramp_up:
        if through_month is None or month <= through_month:
            return factor
    return 1.0


def deployment_multiplier(tier: Union[DeploymentTier, str], table: Optional[BenchmarkTable] = None) -> float:
    table = table or get_benchmarks()
    tier = DeploymentTier(tier)
    return table.value("deployment", tier.value)


def readiness_to_posture(factors: Mapping[str, float], table: Optional[BenchmarkTable] = None) -> RiskPosture:
    """
    Map business-readiness factors (0-1 scale) to a risk posture.

    Args:
        factors: Readiness factor name -> score

    Returns:
        Posture for the average readiness
    """
    if not factors:
        raise ValueError("At least one readiness factor is required")
    table = table or get_benchmarks()
    thresholds = table.section("readiness_thresholds")
    average = sum(float(v) for v in factors.values()) / len(factors)

    if average >= float(thresholds.get("optimistic", 0.9)):
        return RiskPosture.OPTIMISTIC
    if average >= float(thresholds.get("moderate", 0.7)):
        return RiskPosture.MODERATE
    return RiskPosture.CONSERVATIVE
