"""Data models for the uplift modeler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class AudienceProfile:
    """Audience composition for a publisher property."""
    tech_savvy: float
    safari_share: float


@dataclass(frozen=True)
class DomainRecord:
    """A publisher property from the static domain catalog."""
    id: str
    name: str
    monthly_pageviews: float
    display_cpm: float
    video_cpm: float
    display_video_split: float  # % of impressions that are display
    category: str
    audience_profile: AudienceProfile
    ads_per_page: float = 2.0
    in_poc: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DomainRecord":
        """Create from a catalog entry."""
        profile = data.get("audience_profile", {})
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            monthly_pageviews=float(data["monthly_pageviews"]),
            display_cpm=float(data["display_cpm"]),
            video_cpm=float(data["video_cpm"]),
            display_video_split=float(data["display_video_split"]),
            category=str(data["category"]),
            audience_profile=AudienceProfile(
                tech_savvy=float(profile["tech_savvy"]),
                safari_share=float(profile["safari_share"]),
            ),
            ads_per_page=float(data.get("ads_per_page", 2.0)),
            in_poc=bool(data.get("in_poc", False)),
        )


@dataclass
class AggregatedInputs:
    """Pageview-weighted composite of the selected domains."""
    total_monthly_pageviews: float
    display_cpm: float
    video_cpm: float
    weighted_display_video_split: float
    weighted_safari_share: float
    weighted_tech_savvy: float
    selected_domains: List[DomainRecord] = field(default_factory=list)

    @property
    def domain_count(self) -> int:
        return len(self.selected_domains)

    @property
    def is_default(self) -> bool:
        return self.total_monthly_pageviews <= 0


@dataclass
class LeadData:
    """Contact details captured before the report is released."""
    first_name: str
    last_name: str
    email: str
    company: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to the stored JSON shape."""
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "company": self.company,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeadData":
        """Create from the stored JSON shape."""
        return cls(
            first_name=str(data.get("firstName", "")),
            last_name=str(data.get("lastName", "")),
            email=str(data.get("email", "")),
            company=str(data.get("company", "")),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class QuizResult:
    """Scored identity-health quiz."""
    overall_score: float
    overall_grade: str
    scores: Dict[str, Dict[str, Any]]
    answers: Dict[str, Any]
    sales_mix: Optional[Dict[str, float]] = None
