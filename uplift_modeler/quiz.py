"""
Identity-health quiz: questions, sales-mix balancing and grading.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .models import QuizResult

# (minimum score, grade), highest first
GRADE_THRESHOLDS: List[Tuple[float, str]] = [
    (3.8, "A+"),
    (3.5, "A"),
    (3.0, "B"),
    (2.5, "C"),
    (2.0, "D"),
]

CATEGORY_NAMES = {
    "durability": "Identity Durability",
    "cross-domain": "Cross-Domain Visibility",
    "privacy": "Privacy & Compliance",
    "browser": "Browser Resilience",
    "sales-mix": "Sales Mix",
}

SALES_MIX_KEYS = ("direct", "deal_ids", "open_exchange")
DEFAULT_SALES_MIX = {"direct": 40.0, "deal_ids": 35.0, "open_exchange": 25.0}


@dataclass(frozen=True)
class QuizOption:
    value: str
    label: str
    score: int


@dataclass(frozen=True)
class QuizQuestion:
    id: str
    category: str
    question: str
    options: Tuple[QuizOption, ...]

    def score_for(self, answer: Optional[str]) -> int:
        """Score of the chosen option; 0 when unanswered or unknown."""
        for option in self.options:
            if option.value == answer:
                return option.score
        return 0


QUESTIONS: Tuple[QuizQuestion, ...] = (
    QuizQuestion(
        id="durability-strategy",
        category="durability",
        question="How do you handle identity resolution when users are actively logged in (not just authenticated)?",
        options=(
            QuizOption("no-strategy", "No specific strategy", 1),
            QuizOption("basic-auth", "Basic authentication matching", 2),
            QuizOption("cross-session", "Cross-session identity linking", 3),
            QuizOption("advanced-resolution", "Advanced probabilistic + deterministic resolution", 4),
        ),
    ),
    QuizQuestion(
        id="cross-domain-tracking",
        category="cross-domain",
        question="What user tracking across domains/subdomains are you able to support?",
        options=(
            QuizOption("single-domain", "Single domain only", 1),
            QuizOption("limited-cross", "Limited cross-domain capability", 2),
            QuizOption("good-cross", "Good cross-domain tracking", 3),
            QuizOption("seamless-cross", "Seamless cross-domain identity resolution", 4),
        ),
    ),
    QuizQuestion(
        id="privacy-compliance",
        category="privacy",
        question="How do you handle privacy compliance and consent management?",
        options=(
            QuizOption("basic-compliance", "Basic compliance only", 1),
            QuizOption("gdpr-ready", "GDPR/CCPA compliant", 2),
            QuizOption("advanced-consent", "Advanced consent management", 3),
            QuizOption("privacy-first", "Privacy-first architecture with full compliance", 4),
        ),
    ),
    QuizQuestion(
        id="browser-monetization",
        category="browser",
        question="How do you monetize Safari/Firefox traffic?",
        options=(
            QuizOption("struggling", "Struggling to monetize effectively", 1),
            QuizOption("basic-approach", "Basic contextual targeting", 2),
            QuizOption("some-success", "Some success with workarounds", 3),
            QuizOption("optimized", "Fully optimized for privacy-focused browsers", 4),
        ),
    ),
)

SALES_MIX_QUESTION = "Provide a rough makeup of your ad sales"


def get_grade(score: float) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def category_name(category: str) -> str:
    return CATEGORY_NAMES.get(category, category)


def rebalance_sales_mix(sales_mix: Mapping[str, float], changed: str, value: float) -> Dict[str, float]:
    """
    Set one sales-mix channel and keep the total at or below 100.

    When the new total exceeds 100, the excess is taken from the other
    channels in proportion to their current values and everything is
    rounded to whole percentages.
    """
    if changed not in SALES_MIX_KEYS:
        raise ValueError(f"Unknown sales-mix channel '{changed}'")
    if not 0 <= value <= 100:
        raise ValueError(f"Sales-mix value must be between 0 and 100, got {value}")

    mix = {key: float(sales_mix.get(key, 0.0)) for key in SALES_MIX_KEYS}
    mix[changed] = float(value)
    total = sum(mix.values())
    if total <= 100:
        return mix

    excess = total - 100
    others_total = total - value
    for key in SALES_MIX_KEYS:
        if key == changed:
            continue
        proportion = mix[key] / others_total if others_total > 0 else 0.0
        mix[key] = max(0.0, mix[key] - excess * proportion)
    return {key: float(round(v)) for key, v in mix.items()}


def sales_mix_can_proceed(sales_mix: Mapping[str, float]) -> bool:
    """The quiz can be submitted once the mix accounts for 95-100% of sales."""
    total = sum(float(sales_mix.get(key, 0.0)) for key in SALES_MIX_KEYS)
    return 95 <= total <= 100


def score_quiz(answers: Mapping[str, Any], sales_mix: Optional[Mapping[str, float]] = None) -> QuizResult:
    """
    Score quiz answers.

    Args:
        answers: Question id -> chosen option value
        sales_mix: Direct / deal IDs / open exchange percentages

    Returns:
        QuizResult with per-category scores and the overall grade
    """
    scores: Dict[str, Dict[str, Any]] = {}
    total = 0
    for question in QUESTIONS:
        score = question.score_for(answers.get(question.id))
        scores[question.category] = {"score": score, "grade": get_grade(score)}
        total += score

    mix = dict(sales_mix) if sales_mix is not None else dict(DEFAULT_SALES_MIX)
    # Sales mix is informational and does not affect the grade
    scores["sales-mix"] = {"score": None, "grade": "N/A", "breakdown": mix}

    overall = total / len(QUESTIONS)
    return QuizResult(
        overall_score=overall,
        overall_grade=get_grade(overall),
        scores=scores,
        answers=dict(answers),
        sales_mix=mix,
    )
