import pytest

from dealscope.signals import (
    SIGNAL_NAMES,
    THRESHOLDS,
    Band,
    DDSignal,
    compute_dd_signals,
)


def _signals(canon, **kwargs):
    return compute_dd_signals("deal-1", list(canon), canon, **kwargs)


@pytest.mark.parametrize(
    "ebitda, expected",
    [
        (300.0, "pass"),
        (200.0, "pass"),
        (150.0, "caution"),
        (125.0, "caution"),
        (124.0, "fail"),
    ],
)
def test_dscr_proxy_bands(ebitda, expected) -> None:
    """EBITDA / interest: >= 2.0 pass, >= 1.25 caution, else fail."""
    canon = {"2024": {"ebitda": ebitda, "interest_expense": 100.0}}

    signal = _signals(canon).dscr_proxy

    assert signal.status == expected
    assert signal.value == pytest.approx(ebitda / 100.0)
    assert signal.detail == "Proxy: EBITDA / Interest Expense"


@pytest.mark.parametrize(
    "canon",
    [
        {"2024": {"ebitda": 100.0, "interest_expense": 0.0}},
        {"2024": {"ebitda": 100.0}},
        {"2024": {"interest_expense": 10.0}},
    ],
)
def test_dscr_proxy_not_available(canon) -> None:
    signal = _signals(canon).dscr_proxy

    assert signal.status == "na"
    assert signal.value is None


def test_dscr_proxy_reads_latest_period_only() -> None:
    canon = {
        "2023": {"ebitda": 500.0, "interest_expense": 100.0},
        "2024": {"revenue": 10.0},
    }

    assert _signals(canon).dscr_proxy.status == "na"


@pytest.mark.parametrize(
    "ratio, expected",
    [
        (0.10, "pass"),
        (0.20, "pass"),
        (0.25, "caution"),
        (0.30, "caution"),
        (0.31, "fail"),
        (None, "na"),
    ],
)
def test_concentration_bands(ratio, expected) -> None:
    signal = _signals({"2024": {}}, concentration_ratio=ratio).concentration

    assert signal.status == expected
    assert signal.value == ratio


@pytest.mark.parametrize(
    "receivables, expected",
    [
        # 30 + 60 - 30 = 60 days
        (30.0, "pass"),
        # 60 + 60 - 30 = 90 days
        (60.0, "caution"),
        # 90 + 60 - 30 = 120 days
        (90.0, "fail"),
    ],
)
def test_working_capital_ccc_bands(receivables, expected) -> None:
    """Monthly periods count 30 days, so these cycles are exact."""
    canon = {
        "2024-01": {
            "revenue": 30.0,
            "cogs": 30.0,
            "accounts_receivable": receivables,
            "inventory": 60.0,
            "accounts_payable": 30.0,
        }
    }

    assert _signals(canon).working_capital_ccc.status == expected


def test_working_capital_ccc_not_available() -> None:
    canon = {"2024": {"revenue": 100.0, "accounts_receivable": 10.0}}

    signal = _signals(canon).working_capital_ccc

    assert signal.status == "na"
    assert signal.value is None


@pytest.mark.parametrize(
    "current_assets, expected",
    [
        (200.0, "pass"),
        (150.0, "pass"),
        (130.0, "caution"),
        (120.0, "caution"),
        (119.0, "fail"),
    ],
)
def test_current_ratio_bands(current_assets, expected) -> None:
    canon = {
        "2024": {"current_assets": current_assets, "current_liabilities": 100.0}
    }

    signal = _signals(canon).current_ratio

    assert signal.status == expected
    assert signal.value == pytest.approx(current_assets / 100.0)


@pytest.mark.parametrize(
    "revenues, expected",
    [
        ([100.0, 100.0, 100.0, 100.0], "pass"),
        ([80.0, 120.0, 80.0, 120.0], "caution"),
        ([50.0, 150.0, 50.0, 150.0], "fail"),
    ],
)
def test_seasonality_bands(revenues, expected) -> None:
    canon = {
        f"2024-Q{i}": {"revenue": revenue} for i, revenue in enumerate(revenues, 1)
    }

    signal = _signals(canon).seasonality

    assert signal.status == expected
    assert signal.detail == "Coefficient of variation of quarterly revenue"


def test_seasonality_uses_population_deviation() -> None:
    canon = {
        f"2024-Q{i}": {"revenue": revenue}
        for i, revenue in enumerate([80.0, 120.0, 80.0, 120.0], 1)
    }

    assert _signals(canon).seasonality.value == pytest.approx(0.20)


@pytest.mark.parametrize(
    "canon",
    [
        # fewer than four quarters
        {f"2024-Q{i}": {"revenue": 100.0} for i in range(1, 4)},
        # quarters without revenue
        {f"2024-Q{i}": {"cash": 1.0} for i in range(1, 5)},
        # zero mean revenue
        {f"2024-Q{i}": {"revenue": 0.0} for i in range(1, 5)},
        # annual data only
        {"2023": {"revenue": 1.0}, "2024": {"revenue": 2.0}},
    ],
)
def test_seasonality_not_available(canon) -> None:
    assert _signals(canon).seasonality.status == "na"


@pytest.mark.parametrize(
    "cfo, expected",
    [
        (95.0, "pass"),
        (90.0, "pass"),
        (85.0, "caution"),
        (80.0, "caution"),
        (70.0, "fail"),
        (130.0, "fail"),
    ],
)
def test_accrual_vs_cash_delta_bands(cfo, expected) -> None:
    canon = {"2024": {"revenue": 100.0, "cfo": cfo}}

    signal = _signals(canon).accrual_vs_cash_delta

    assert signal.status == expected
    assert signal.value == pytest.approx(abs(100.0 - cfo) / 100.0)


@pytest.mark.parametrize(
    "canon",
    [
        {"2024": {"revenue": 100.0}},
        {"2024": {"cfo": 100.0}},
        {"2024": {"revenue": 0.0, "cfo": 10.0}},
    ],
)
def test_accrual_vs_cash_delta_not_available(canon) -> None:
    assert _signals(canon).accrual_vs_cash_delta.status == "na"


@pytest.mark.parametrize(
    "periods, expected, detail",
    [
        (["2023", "2024", "2025"], "pass", "3 year(s), 3 period(s)"),
        (["2023", "2024"], "caution", "2 year(s), 2 period(s)"),
        (["2024"], "fail", "1 year(s), 1 period(s)"),
        (["2023-Q4", "2024-Q1", "2024-Q2"], "pass", "2 year(s), 3 period(s)"),
        (["2024-Q1", "2024-Q2", "2024-Q3"], "caution", "1 year(s), 3 period(s)"),
        ([], "fail", "0 year(s), 0 period(s)"),
    ],
)
def test_data_sufficiency(periods, expected, detail) -> None:
    canon = {p: {} for p in periods}

    signal = compute_dd_signals("deal-1", periods, canon).data_sufficiency

    assert signal.status == expected
    assert signal.detail == detail


def test_empty_deal_is_all_na_except_sufficiency() -> None:
    signals = compute_dd_signals("empty", [], {})

    for name, signal in signals.as_map().items():
        if name == "data_sufficiency":
            assert signal.status == "fail"
        else:
            assert signal.status == "na"


def test_signals_to_dict() -> None:
    canon = {"2024": {"current_assets": 150.0, "current_liabilities": 100.0}}

    payload = _signals(canon, concentration_ratio=0.25).to_dict()

    assert payload["deal_id"] == "deal-1"
    assert list(payload)[1:] == list(SIGNAL_NAMES)
    assert payload["current_ratio"] == {"status": "pass", "value": 1.5}
    assert payload["concentration"] == {"status": "caution", "value": 0.25}
    assert payload["dscr_proxy"] == {
        "status": "na",
        "detail": "Proxy: EBITDA / Interest Expense",
    }


def test_signal_to_dict_omits_missing_fields() -> None:
    assert DDSignal(status="na").to_dict() == {"status": "na"}


def test_band_classify() -> None:
    higher = Band(pass_at=2.0, caution_at=1.0, higher_is_better=True)
    lower = Band(pass_at=1.0, caution_at=2.0, higher_is_better=False)

    assert [higher.classify(v) for v in (2.0, 1.0, 0.5, None)] == [
        "pass",
        "caution",
        "fail",
        "na",
    ]
    assert [lower.classify(v) for v in (1.0, 2.0, 2.5, None)] == [
        "pass",
        "caution",
        "fail",
        "na",
    ]


def test_thresholds_cover_valued_signals() -> None:
    assert set(THRESHOLDS) == set(SIGNAL_NAMES) - {"data_sufficiency"}


def test_periodicity_override_drives_ccc() -> None:
    """Monthly keys analysed as annual periods count 365 days."""
    canon = {
        "2024-01": {
            "revenue": 30.0,
            "cogs": 30.0,
            "accounts_receivable": 30.0,
            "inventory": 60.0,
            "accounts_payable": 30.0,
        }
    }

    detected = _signals(canon).working_capital_ccc
    forced = _signals(canon, periodicity="annual").working_capital_ccc

    assert detected.value == pytest.approx(60.0)
    assert detected.status == "pass"
    assert forced.value == pytest.approx(730.0)
    assert forced.status == "fail"
