import pytest

from dealscope.ratios import (
    RATIO_REGISTRY,
    DealRatio,
    PeriodRatio,
    RatioContext,
    get_ratio,
)


def _ctx(canon, periodicity="annual", periods=None) -> RatioContext:
    keys = tuple(sorted(canon)) if periods is None else tuple(periods)
    return RatioContext(periods=keys, periodicity=periodicity, canon=canon)


def _value(ratio_id: str, canon, periodicity="annual", period="2024"):
    return get_ratio(ratio_id).compute(_ctx(canon, periodicity))[period]


def test_registry_ids_are_unique() -> None:
    ids = [r.id for r in RATIO_REGISTRY]
    assert len(ids) == len(set(ids))


def test_registry_shapes() -> None:
    assert get_ratio("revenue_cagr_3y").deal_level is True
    assert isinstance(get_ratio("revenue_cagr_3y"), DealRatio)
    for ratio_id in ("gross_margin", "current_ratio", "ccc_days"):
        definition = get_ratio(ratio_id)
        assert isinstance(definition, PeriodRatio)
        assert definition.deal_level is False


def test_get_ratio_unknown_id() -> None:
    with pytest.raises(KeyError, match="Unknown ratio id"):
        get_ratio("ebitda_to_capex")


def test_margins() -> None:
    canon = {
        "2024": {
            "revenue": 1000.0,
            "gross_profit": 400.0,
            "net_income": 80.0,
            "ebitda": 150.0,
        }
    }

    assert _value("gross_margin", canon) == pytest.approx(0.40)
    assert _value("net_margin", canon) == pytest.approx(0.08)
    assert _value("ebitda_margin", canon) == pytest.approx(0.15)


def test_zero_gross_profit_is_a_valid_margin() -> None:
    canon = {"2024": {"revenue": 100.0, "gross_profit": 0.0}}

    assert _value("gross_margin", canon) == 0.0


def test_ccc_days_annual() -> None:
    """CCC = AR days + inventory days - AP days."""
    canon = {
        "2024": {
            "revenue": 365.0,
            "cogs": 365.0,
            "accounts_receivable": 30.0,
            "inventory": 60.0,
            "accounts_payable": 30.0,
        }
    }

    assert _value("ar_days", canon) == pytest.approx(30.0)
    assert _value("dio_days", canon) == pytest.approx(60.0)
    assert _value("ap_days", canon) == pytest.approx(30.0)
    assert _value("ccc_days", canon) == pytest.approx(60.0)


@pytest.mark.parametrize(
    "periodicity, period, expected",
    [
        ("monthly", "2024-01", 30.0),
        ("quarterly", "2024-Q1", 90.0),
        ("annual", "2024", 365.0),
    ],
)
def test_days_follow_periodicity(periodicity, period, expected) -> None:
    canon = {period: {"accounts_receivable": 50.0, "revenue": 50.0}}

    assert _value("ar_days", canon, periodicity, period) == pytest.approx(expected)


def test_ccc_requires_all_three_components() -> None:
    canon = {
        "2024": {
            "revenue": 365.0,
            "cogs": 365.0,
            "accounts_receivable": 30.0,
            "accounts_payable": 30.0,
        }
    }

    assert _value("ccc_days", canon) is None


def test_quick_ratio() -> None:
    base = {"cash": 50.0, "accounts_receivable": 50.0, "current_liabilities": 100.0}

    assert _value("quick_ratio", {"2024": base}) == pytest.approx(1.0)
    with_securities = dict(base, marketable_securities=50.0)
    assert _value("quick_ratio", {"2024": with_securities}) == pytest.approx(1.5)
    no_cash = {k: v for k, v in base.items() if k != "cash"}
    assert _value("quick_ratio", {"2024": no_cash}) is None


def test_liquidity_and_leverage() -> None:
    canon = {
        "2024": {
            "current_assets": 300.0,
            "current_liabilities": 200.0,
            "total_debt": 150.0,
            "shareholders_equity": 300.0,
            "revenue": 1000.0,
        }
    }

    assert _value("current_ratio", canon) == pytest.approx(1.5)
    assert _value("debt_to_equity", canon) == pytest.approx(0.5)
    assert _value("wc_to_sales", canon) == pytest.approx(0.10)


def test_per_period_ratios_are_none_without_data() -> None:
    ctx = _ctx({}, periods=["2024"])

    for definition in RATIO_REGISTRY:
        if definition.deal_level:
            assert definition.compute(ctx) is None
        else:
            assert definition.compute(ctx) == {"2024": None}


def test_zero_denominators_give_none() -> None:
    canon = {
        "2024": {
            "revenue": 0.0,
            "cogs": 0.0,
            "gross_profit": 10.0,
            "net_income": 10.0,
            "ebitda": 10.0,
            "current_assets": 10.0,
            "current_liabilities": 0.0,
            "total_debt": 10.0,
            "shareholders_equity": 0.0,
            "cash": 10.0,
            "accounts_receivable": 10.0,
            "inventory": 10.0,
            "accounts_payable": 10.0,
        }
    }
    ctx = _ctx(canon)

    for definition in RATIO_REGISTRY:
        if definition.deal_level:
            continue
        assert definition.compute(ctx) == {"2024": None}, definition.id


def test_each_period_is_independent() -> None:
    canon = {
        "2023": {"current_assets": 100.0, "current_liabilities": 100.0},
        "2024": {"current_assets": 300.0},
    }

    out = get_ratio("current_ratio").compute(_ctx(canon))

    assert out["2023"] == pytest.approx(1.0)
    assert out["2024"] is None


def test_revenue_cagr_over_three_years() -> None:
    canon = {
        "2021": {"revenue": 100.0},
        "2022": {},
        "2023": {},
        "2024": {"revenue": 133.1},
    }

    cagr = get_ratio("revenue_cagr_3y").compute(_ctx(canon))

    assert cagr == pytest.approx(0.10)


def test_revenue_cagr_needs_four_periods() -> None:
    canon = {
        "2022": {"revenue": 100.0},
        "2023": {"revenue": 110.0},
        "2024": {"revenue": 121.0},
    }

    assert get_ratio("revenue_cagr_3y").compute(_ctx(canon)) is None


def test_revenue_cagr_prefers_annual_periods() -> None:
    canon = {
        "2021": {"revenue": 100.0},
        "2022": {"revenue": 110.0},
        "2023": {"revenue": 121.0},
        "2024": {"revenue": 133.1},
        "2024-Q1": {"revenue": 5.0},
    }

    cagr = get_ratio("revenue_cagr_3y").compute(_ctx(canon))

    assert cagr == pytest.approx(0.10)


def test_revenue_cagr_falls_back_to_all_periods() -> None:
    canon = {
        "2024-Q1": {"revenue": 100.0},
        "2024-Q2": {"revenue": 100.0},
        "2024-Q3": {"revenue": 100.0},
        "2024-Q4": {"revenue": 800.0},
    }

    cagr = get_ratio("revenue_cagr_3y").compute(_ctx(canon, "quarterly"))

    assert cagr == pytest.approx(1.0)


@pytest.mark.parametrize(
    "base, last",
    [
        (0.0, 100.0),
        (None, 100.0),
        (100.0, None),
        (100.0, -50.0),
    ],
)
def test_revenue_cagr_undefined(base, last) -> None:
    canon = {"2021": {}, "2022": {}, "2023": {}, "2024": {}}
    if base is not None:
        canon["2021"]["revenue"] = base
    if last is not None:
        canon["2024"]["revenue"] = last

    assert get_ratio("revenue_cagr_3y").compute(_ctx(canon)) is None
