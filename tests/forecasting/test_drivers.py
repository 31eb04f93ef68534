from forecasting.drivers import select_drivers, select_risk


def _deal(name, gap, hm=0.9, crm=None):
    crm = crm if crm is not None else max(abs(gap) * 10, 1)
    return {
        "id": name,
        "weighted": {"crm_weighted": crm, "ai_weighted": crm + gap, "gap": gap},
        "health": {"health_modifier": hm},
    }


def _ids(deals):
    return [d["id"] for d in deals]


def test_drivers_cover_ninety_percent_of_negative_gap():
    deals = [_deal("a", -100), _deal("b", -600), _deal("c", -300)]
    assert _ids(select_drivers(deals)) == ["b", "c"]


def test_drivers_positive_gap_sorted_descending():
    deals = [_deal("a", 50, hm=1.2), _deal("b", 400, hm=1.2), _deal("c", -20)]
    assert _ids(select_drivers(deals)) == ["b"]


def test_zero_total_counts_as_negative_direction():
    deals = [_deal("a", 100, hm=1.1), _deal("b", -100)]
    assert _ids(select_drivers(deals)) == ["b"]


def test_opposite_sign_deals_are_dropped_when_direction_matches():
    deals = [_deal("a", -500), _deal("b", 100, hm=1.1)]
    assert _ids(select_drivers(deals, take=10)) == ["a"]


def test_score_effect_filter():
    deals = [_deal("neutral", -500, hm=1.0), _deal("scored", -50, hm=0.8)]
    assert _ids(select_drivers(deals)) == ["scored"]
    assert _ids(select_drivers(deals, require_score_effect=False)) == ["neutral"]


def test_falls_back_to_full_ranking_when_no_candidate_matches_direction():
    # Total is negative but every deal with a score effect pulls up.
    deals = [_deal("neutral", -500, hm=1.0), _deal("up", 100, hm=1.1), _deal("up2", 40, hm=1.1)]
    assert _ids(select_drivers(deals)) == ["up2", "up"]


def test_single_flat_deal_is_still_returned():
    # total 0 -> direction -1, no deal has a negative gap
    assert _ids(select_drivers([_deal("zero", 0.0, hm=0.5)])) == ["zero"]


def test_min_abs_gap_and_take():
    deals = [_deal("a", -300), _deal("b", -200), _deal("c", -5)]
    assert _ids(select_drivers(deals, min_abs_gap=10)) == ["a", "b"]
    assert _ids(select_drivers(deals, take=1)) == ["a"]
    assert select_drivers([]) == []


def test_risk_mode_filters_and_orders():
    a = _deal("A", -1200, hm=0.85, crm=8000)
    b = _deal("B", -900, hm=1.0, crm=8000)
    small = _deal("small", -100, hm=0.5, crm=1000)
    worst = _deal("worst", -3000, hm=0.2, crm=4000)
    up = _deal("up", 300, hm=1.2)
    picked = select_risk([a, b, small, worst, up], min_downside=500)
    assert _ids(picked) == ["worst", "A"]


def test_risk_mode_without_score_effect_requirement():
    b = _deal("B", -900, hm=1.0, crm=8000)
    assert _ids(select_risk([b], min_downside=500, require_score_effect=False)) == ["B"]


def test_risk_take_caps_result():
    deals = [_deal(str(i), -100 * (i + 1)) for i in range(5)]
    assert _ids(select_risk(deals, take=2)) == ["4", "3"]
