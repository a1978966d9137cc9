"""
Commercial models for sharing CAPI incremental revenue with the vendor.

This module implements the monthly mechanics of the three pricing models
compared in the report: revenue share with a per-campaign cap, a flat
annual fee, and an annual cap on a base revenue share.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from ..engine.benchmarks import BenchmarkTable, get_benchmarks


class CommercialModelType(Enum):
    """Commercial model enumeration."""

    REVENUE_SHARE = "revenue-share"
    ANNUAL_CAP = "annual-cap"
    FLAT_FEE = "flat-fee"


@dataclass(frozen=True)
class IncentiveAlignment:
    """How strongly a model ties the vendor's return to publisher growth."""

    alignment_score: int  # 0-100
    partnership_level: str
    investment_level: str
    description: str


INCENTIVE_ALIGNMENT: Dict[CommercialModelType, IncentiveAlignment] = {
    CommercialModelType.REVENUE_SHARE: IncentiveAlignment(
        alignment_score=100,
        partnership_level="Full Partnership",
        investment_level="Maximum",
        description=(
            "Vendor growth is tied to publisher growth. Sales support, training, "
            "advertiser outreach and ongoing optimization included."
        ),
    ),
    CommercialModelType.ANNUAL_CAP: IncentiveAlignment(
        alignment_score=60,
        partnership_level="Limited Partnership",
        investment_level="Reduced",
        description=(
            "Vendor incentive drops to zero once the annual cap is reached and "
            "may be deprioritized for the rest of the year."
        ),
    ),
    CommercialModelType.FLAT_FEE: IncentiveAlignment(
        alignment_score=20,
        partnership_level="Vendor Relationship",
        investment_level="Minimum",
        description="No financial incentive to grow CAPI adoption. Likely minimum viable service level.",
    ),
}

MODEL_LABELS: Dict[CommercialModelType, str] = {
    CommercialModelType.REVENUE_SHARE: "Revenue Share (Campaign Cap)",
    CommercialModelType.ANNUAL_CAP: "Annual Cap",
    CommercialModelType.FLAT_FEE: "Flat Annual Fee",
}

REQUIRED_COLUMNS = ["month", "year", "base_revenue", "incremental_revenue"]


class CommercialModel(ABC):
    """
    Base class for the commercial models.

    Subclasses fill in ``vendor_share``, ``value_suppressed`` and
    ``post_cap_benefit``; the net gain and cumulative columns are shared.
    """

    model_type: CommercialModelType

    @property
    def label(self) -> str:
        return MODEL_LABELS[self.model_type]

    @property
    def incentive_alignment(self) -> IncentiveAlignment:
        return INCENTIVE_ALIGNMENT[self.model_type]

    @abstractmethod
    def params(self) -> Dict[str, float]:
        """Model parameters reported in the summary."""

    @abstractmethod
    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """Add vendor_share, value_suppressed and post_cap_benefit columns."""

    def calculate_projection(self, monthly_df: pd.DataFrame) -> pd.DataFrame:
        """
        Calculate the month-by-month split of incremental revenue.

        Args:
            monthly_df: DataFrame with 'month', 'year', 'base_revenue' and
                'incremental_revenue' columns

        Returns:
            DataFrame with vendor share, publisher net gain, value suppressed
            and cumulative running totals
        """
        missing = [col for col in REQUIRED_COLUMNS if col not in monthly_df.columns]
        if missing:
            raise ValueError(f"Monthly projection missing columns: {missing}")

        df = self._apply(monthly_df.copy())

        # Flat fees can exceed a weak month's incremental: net gain goes negative
        df["publisher_net_gain"] = df["incremental_revenue"] - df["vendor_share"]

        df["cumulative_incremental"] = df["incremental_revenue"].cumsum()
        df["cumulative_vendor_share"] = df["vendor_share"].cumsum()
        df["cumulative_publisher_gain"] = df["publisher_net_gain"].cumsum()
        df["cumulative_value_suppressed"] = df["value_suppressed"].cumsum()
        df["cumulative_post_cap_benefit"] = df["post_cap_benefit"].cumsum()
        return df

    def get_summary(self, projection_df: pd.DataFrame) -> Dict[str, Any]:
        """
        Generate summary statistics for the model.

        Args:
            projection_df: Projection DataFrame from calculate_projection

        Returns:
            Dictionary with summary metrics
        """
        total_incremental = float(projection_df["incremental_revenue"].sum())
        total_vendor = float(projection_df["vendor_share"].sum())
        total_gain = float(projection_df["publisher_net_gain"].sum())

        return {
            "model_type": self.model_type.value,
            "label": self.label,
            "params": self.params(),
            "months": int(len(projection_df)),
            "total_base_revenue": float(projection_df["base_revenue"].sum()),
            "total_incremental": total_incremental,
            "total_vendor_share": total_vendor,
            "total_publisher_net_gain": total_gain,
            "total_value_suppressed": float(projection_df["value_suppressed"].sum()),
            "total_post_cap_benefit": float(projection_df["post_cap_benefit"].sum()),
            "net_gain_percentage": (total_gain / total_incremental * 100) if total_incremental > 0 else 0.0,
            # None when nothing was paid: ROI is not applicable
            "roi_multiple": (total_incremental / total_vendor) if total_vendor > 0 else None,
            "negative_months": int((projection_df["publisher_net_gain"] < 0).sum()),
            "alignment_score": self.incentive_alignment.alignment_score,
            "partnership_level": self.incentive_alignment.partnership_level,
        }


class RevenueShareModel(CommercialModel):
    """
    Revenue share capped per campaign per month.

    - Vendor takes share_percentage of the month's CAPI incremental
    - The monthly share never exceeds campaign_cap x campaigns_per_month
    - Vendor return always grows with publisher revenue: nothing is suppressed
    """

    model_type = CommercialModelType.REVENUE_SHARE

    def __init__(self, share_percentage: float, campaign_cap: float, campaigns_per_month: int = 1) -> None:
        if not 0 <= share_percentage <= 1:
            raise ValueError(f"share_percentage must be in [0, 1], got {share_percentage}")
        if campaign_cap < 0:
            raise ValueError(f"campaign_cap must be >= 0, got {campaign_cap}")
        if campaigns_per_month < 1:
            raise ValueError(f"campaigns_per_month must be >= 1, got {campaigns_per_month}")
        self.share_percentage = share_percentage
        self.campaign_cap = campaign_cap
        self.campaigns_per_month = campaigns_per_month

    @property
    def monthly_cap(self) -> float:
        return self.campaign_cap * self.campaigns_per_month

    def params(self) -> Dict[str, float]:
        return {
            "share_percentage": self.share_percentage,
            "campaign_cap": self.campaign_cap,
            "campaigns_per_month": self.campaigns_per_month,
        }

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        raw_share = df["incremental_revenue"] * self.share_percentage
        df["vendor_share"] = np.minimum(raw_share, self.monthly_cap)
        df["value_suppressed"] = 0.0
        df["post_cap_benefit"] = 0.0
        return df


class FlatFeeModel(CommercialModel):
    """
    Fixed annual fee amortized monthly.

    - Vendor receives annual_fee / 12 every month regardless of performance
    - Value suppressed is measured against a revenue-share reference deal on
      the same month: the amount the publisher nets below what revenue share
      would have left it, scaled by suppression_rate
    """

    model_type = CommercialModelType.FLAT_FEE

    def __init__(
        self,
        annual_fee: float,
        suppression_rate: float,
        reference_share: float = 0.125,
        reference_cap: float = 30000.0,
        reference_campaigns: int = 1,
    ) -> None:
        if annual_fee < 0:
            raise ValueError(f"annual_fee must be >= 0, got {annual_fee}")
        if not 0 <= suppression_rate <= 1:
            raise ValueError(f"suppression_rate must be in [0, 1], got {suppression_rate}")
        self.annual_fee = annual_fee
        self.suppression_rate = suppression_rate
        self.reference = RevenueShareModel(reference_share, reference_cap, reference_campaigns)

    def params(self) -> Dict[str, float]:
        return {
            "annual_fee": self.annual_fee,
            "suppression_rate": self.suppression_rate,
            "reference_share": self.reference.share_percentage,
            "reference_cap": self.reference.campaign_cap,
            "reference_campaigns": self.reference.campaigns_per_month,
        }

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        monthly_fee = self.annual_fee / 12
        reference_fee = np.minimum(
            df["incremental_revenue"].clip(lower=0.0) * self.reference.share_percentage,
            self.reference.monthly_cap,
        )
        # Net gap = (incremental - monthly_fee) vs (incremental - reference_fee)
        gap = (monthly_fee - reference_fee).clip(lower=0.0)

        df["vendor_share"] = monthly_fee
        df["value_suppressed"] = gap * self.suppression_rate
        df["post_cap_benefit"] = 0.0
        return df


class AnnualCapModel(CommercialModel):
    """
    Base revenue share with an annual cap.

    - Vendor takes base_share_percentage of incremental until the vendor
      share over the trailing 12 months (this month included) reaches
      annual_cap, so no 12-month window ever pays more than the cap
    - The month that reaches the cap pays only the remaining headroom
    - Incremental earned while the cap binds goes 100% to the publisher
      (post-cap benefit); a share of it is counted as suppressed because
      the vendor's marginal return is zero
    """

    model_type = CommercialModelType.ANNUAL_CAP
    window_months = 12

    def __init__(
        self,
        base_share_percentage: float,
        annual_cap: float,
        suppression_rate: float,
        annual_floor: float = 0.0,
    ) -> None:
        if not 0 < base_share_percentage <= 1:
            raise ValueError(f"base_share_percentage must be in (0, 1], got {base_share_percentage}")
        if annual_cap < 0:
            raise ValueError(f"annual_cap must be >= 0, got {annual_cap}")
        if not 0 <= suppression_rate <= 1:
            raise ValueError(f"suppression_rate must be in [0, 1], got {suppression_rate}")
        self.base_share_percentage = base_share_percentage
        self.annual_cap = annual_cap
        self.annual_floor = annual_floor  # informational, quoted in the deal terms
        self.suppression_rate = suppression_rate

    def params(self) -> Dict[str, float]:
        return {
            "base_share_percentage": self.base_share_percentage,
            "annual_cap": self.annual_cap,
            "annual_floor": self.annual_floor,
            "suppression_rate": self.suppression_rate,
        }

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        vendor_shares = []
        post_cap_benefits = []

        for _, row in df.iterrows():
            # Fees already paid in the previous 11 months
            window_fees = sum(vendor_shares[-(self.window_months - 1):])

            incremental = max(row["incremental_revenue"], 0.0)
            raw_fee = incremental * self.base_share_percentage
            remaining_cap = max(0.0, self.annual_cap - window_fees)
            fee = min(raw_fee, remaining_cap)

            if fee < raw_fee:
                post_cap = incremental - fee / self.base_share_percentage
            else:
                post_cap = 0.0

            vendor_shares.append(fee)
            post_cap_benefits.append(post_cap)

        df["vendor_share"] = vendor_shares
        df["post_cap_benefit"] = post_cap_benefits
        df["value_suppressed"] = df["post_cap_benefit"] * self.suppression_rate
        return df


def create_commercial_model(
    model_type: CommercialModelType,
    table: Optional[BenchmarkTable] = None,
    **params: Any,
) -> CommercialModel:
    """
    Create a commercial model with benchmark defaults.

    Args:
        model_type: Which model to build
        **params: Model-specific parameters overriding the benchmark defaults

    Returns:
        CommercialModel instance
    """
    table = table or get_benchmarks()
    model_type = CommercialModelType(model_type)
    defaults = table.section("commercial_models")
    suppression_rate = float(params.get("suppression_rate", defaults["value_suppression_rate"]))
    revenue_share = defaults["revenue_share"]

    if model_type == CommercialModelType.REVENUE_SHARE:
        return RevenueShareModel(
            share_percentage=float(params.get("share_percentage", revenue_share["share_percentage"])),
            campaign_cap=float(params.get("campaign_cap", revenue_share["campaign_cap"])),
            campaigns_per_month=int(params.get("campaigns_per_month", 1)),
        )
    if model_type == CommercialModelType.FLAT_FEE:
        cfg = defaults["flat_fee"]
        return FlatFeeModel(
            annual_fee=float(params.get("annual_fee", cfg["annual_fee"])),
            suppression_rate=suppression_rate,
            reference_share=float(params.get("reference_share", revenue_share["share_percentage"])),
            reference_cap=float(params.get("reference_cap", revenue_share["campaign_cap"])),
            reference_campaigns=int(params.get("reference_campaigns", 1)),
        )
    # ANNUAL_CAP
    cfg = defaults["annual_cap"]
    return AnnualCapModel(
        base_share_percentage=float(params.get("base_share_percentage", cfg["base_share_percentage"])),
        annual_cap=float(params.get("annual_cap", cfg["annual_cap"])),
        annual_floor=float(params.get("annual_floor", cfg.get("annual_floor", 0.0))),
        suppression_rate=suppression_rate,
    )
