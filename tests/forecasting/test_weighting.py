import pytest

from forecasting.weighting import (
    ai_verdict_stage,
    health_pct,
    outlook_totals,
    pct_to_score,
    stage_probability,
    sum_weighted,
    weigh,
)


def test_weigh_commit_example():
    weighted = weigh(10000, 0.8, 0.85)
    assert weighted.crm_weighted == pytest.approx(8000)
    assert weighted.ai_weighted == pytest.approx(6800)
    assert weighted.gap == pytest.approx(-1200)


def test_suppressed_deal_contributes_nothing_to_ai():
    weighted = weigh(5000, 0.325, 0.0)
    assert weighted.ai_weighted == 0
    assert weighted.gap == pytest.approx(-1625)


def test_missing_amount_is_zero():
    assert weigh(None, 0.8, 1.0).crm_weighted == 0


def test_stage_probability_defaults():
    assert stage_probability({}, "commit") == 0.8
    assert stage_probability(None, "best_case") == 0.325
    assert stage_probability({"pipeline": 0.2}, "pipeline") == 0.2


@pytest.mark.parametrize(
    "score, expected",
    [(None, None), (0, None), (-3, None), (15, 50), (30, 100), (31, 100), (22.5, 75), (0.75, 3), (21.75, 73)],
)
def test_health_pct(score, expected):
    assert health_pct(score) == expected


def test_pct_to_score():
    assert pct_to_score(50) == pytest.approx(15)
    assert pct_to_score(None) is None


@pytest.mark.parametrize(
    "score, expected",
    [(None, None), (30, "Commit"), (24, "Commit"), (23.9, "Best Case"), (18, "Best Case"), (5, "Pipeline")],
)
def test_ai_verdict_stage(score, expected):
    assert ai_verdict_stage(score) == expected


def test_totals_roll_up():
    deals = [{"weighted": weigh(1000, 0.5, 0.5).as_dict()}, {"weighted": weigh(2000, 0.5, 1.2).as_dict()}]
    group = sum_weighted(deals)
    assert group["crm_weighted"] == pytest.approx(1500)
    assert group["gap"] == pytest.approx(-250 + 200)
    overall = outlook_totals([group, sum_weighted([])])
    assert overall == {
        "crm_outlook_weighted": pytest.approx(1500),
        "ai_outlook_weighted": pytest.approx(1450),
        "gap": pytest.approx(-50),
    }
