import pytest

from uplift_modeler.quiz import (
    DEFAULT_SALES_MIX,
    QUESTIONS,
    category_name,
    get_grade,
    rebalance_sales_mix,
    sales_mix_can_proceed,
    score_quiz,
)


@pytest.mark.parametrize(
    "score, grade",
    [(4.0, "A+"), (3.8, "A+"), (3.75, "A"), (3.5, "A"), (3.0, "B"), (2.5, "C"), (2.0, "D"), (1.99, "F"), (0, "F")],
)
def test_grades(score, grade):
    assert get_grade(score) == grade


def test_perfect_quiz():
    answers = {q.id: q.options[-1].value for q in QUESTIONS}
    result = score_quiz(answers)

    assert result.overall_score == 4.0
    assert result.overall_grade == "A+"
    assert result.scores["durability"] == {"score": 4, "grade": "A+"}
    assert result.sales_mix == DEFAULT_SALES_MIX


def test_mixed_answers():
    answers = {
        "durability-strategy": "no-strategy",
        "cross-domain-tracking": "good-cross",
        "privacy-compliance": "gdpr-ready",
        "browser-monetization": "optimized",
    }
    result = score_quiz(answers)
    assert result.overall_score == pytest.approx(2.5)
    assert result.overall_grade == "C"


def test_missing_and_unknown_answers_score_zero():
    result = score_quiz({"durability-strategy": "advanced-resolution", "privacy-compliance": "nonsense"})
    assert result.scores["privacy"]["score"] == 0
    assert result.scores["browser"]["score"] == 0
    assert result.overall_score == pytest.approx(1.0)
    assert result.overall_grade == "F"


def test_sales_mix_is_not_graded():
    result = score_quiz({}, {"direct": 10, "deal_ids": 20, "open_exchange": 70})
    assert result.scores["sales-mix"]["grade"] == "N/A"
    assert result.scores["sales-mix"]["breakdown"]["open_exchange"] == 70


def test_rebalance_within_total():
    mix = rebalance_sales_mix(DEFAULT_SALES_MIX, "direct", 30)
    assert mix == {"direct": 30, "deal_ids": 35, "open_exchange": 25}


def test_rebalance_takes_excess_proportionally():
    mix = rebalance_sales_mix(DEFAULT_SALES_MIX, "direct", 70)
    # 30 excess taken 35:25 from the others
    assert mix == {"direct": 70, "deal_ids": 18, "open_exchange": 12}
    assert sum(mix.values()) <= 100


def test_rebalance_rejects_bad_input():
    with pytest.raises(ValueError):
        rebalance_sales_mix(DEFAULT_SALES_MIX, "barter", 10)
    with pytest.raises(ValueError):
        rebalance_sales_mix(DEFAULT_SALES_MIX, "direct", 120)


def test_sales_mix_can_proceed():
    assert sales_mix_can_proceed(DEFAULT_SALES_MIX)
    assert sales_mix_can_proceed({"direct": 40, "deal_ids": 30, "open_exchange": 25})
    assert not sales_mix_can_proceed({"direct": 40, "deal_ids": 30, "open_exchange": 20})


def test_category_name():
    assert category_name("cross-domain") == "Cross-Domain Visibility"
    assert category_name("other") == "other"
