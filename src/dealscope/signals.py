# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Due-diligence signals for DealScope.

A DD signal classifies one financial risk dimension of a deal into a
status band:

- 'pass'    : comfortably within the expected range,
- 'caution' : borderline, worth a closer look,
- 'fail'    : outside the acceptable range,
- 'na'      : the inputs needed to evaluate the signal are missing.

Signals evaluated
-----------------
dscr_proxy             latest EBITDA / latest interest expense
concentration          caller-supplied top customer/product share (0..1)
working_capital_ccc    cash conversion cycle (days)
current_ratio          current assets / current liabilities
seasonality            coefficient of variation of quarterly revenue
accrual_vs_cash_delta  |revenue - CFO| / |revenue| for the latest period
data_sufficiency       number of years and periods available

Band boundaries are inclusive toward the better band: a current ratio of
exactly 1.5 passes, a CCC of exactly 90 days is a caution.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

from .engine import compute_all_metrics
from .periods import (
    annual_periods,
    detect_periodicity,
    latest_period,
    quarterly_periods,
    year_span,
)
from .ratios import CanonByPeriod

STATUSES: tuple[str, ...] = ("pass", "caution", "fail", "na")

SIGNAL_NAMES: tuple[str, ...] = (
    "dscr_proxy",
    "concentration",
    "working_capital_ccc",
    "current_ratio",
    "seasonality",
    "accrual_vs_cash_delta",
    "data_sufficiency",
)


@dataclass(frozen=True)
class Band:
    """Pass/caution thresholds for one signal.

    Attributes:
        pass_at: Threshold of the pass band (inclusive).
        caution_at: Threshold of the caution band (inclusive).
        higher_is_better: True when values >= thresholds are good
            (coverage, liquidity), False when values <= thresholds are
            good (days, shares, dispersion).
    """

    pass_at: float
    caution_at: float
    higher_is_better: bool

    def classify(self, value: Optional[float]) -> str:
        if value is None:
            return "na"
        if self.higher_is_better:
            if value >= self.pass_at:
                return "pass"
            if value >= self.caution_at:
                return "caution"
            return "fail"
        if value <= self.pass_at:
            return "pass"
        if value <= self.caution_at:
            return "caution"
        return "fail"


THRESHOLDS: Mapping[str, Band] = {
    "dscr_proxy": Band(pass_at=2.0, caution_at=1.25, higher_is_better=True),
    "concentration": Band(pass_at=0.20, caution_at=0.30, higher_is_better=False),
    "working_capital_ccc": Band(pass_at=60, caution_at=90, higher_is_better=False),
    "current_ratio": Band(pass_at=1.5, caution_at=1.2, higher_is_better=True),
    "seasonality": Band(pass_at=0.15, caution_at=0.25, higher_is_better=False),
    "accrual_vs_cash_delta": Band(
        pass_at=0.10, caution_at=0.20, higher_is_better=False
    ),
}

# data_sufficiency: minimum years and periods for 'pass', periods for 'caution'.
SUFFICIENCY_MIN_YEARS = 2
SUFFICIENCY_MIN_PERIODS = 3
SUFFICIENCY_CAUTION_PERIODS = 2

SEASONALITY_MIN_QUARTERS = 4


@dataclass(frozen=True)
class DDSignal:
    """Status of one due-diligence question."""

    status: str
    value: Optional[float] = None
    detail: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"status": self.status}
        if self.value is not None:
            out["value"] = self.value
        if self.detail is not None:
            out["detail"] = self.detail
        return out


@dataclass(frozen=True)
class DDSignals:
    """All due-diligence signals for one deal."""

    deal_id: str
    dscr_proxy: DDSignal
    concentration: DDSignal
    working_capital_ccc: DDSignal
    current_ratio: DDSignal
    seasonality: DDSignal
    accrual_vs_cash_delta: DDSignal
    data_sufficiency: DDSignal

    def as_map(self) -> dict[str, DDSignal]:
        """Signals keyed by name, in SIGNAL_NAMES order."""
        return {name: getattr(self, name) for name in SIGNAL_NAMES}

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"deal_id": self.deal_id}
        for name, signal in self.as_map().items():
            out[name] = signal.to_dict()
        return out


def _latest_number(
    periods: Iterable[str], canon: CanonByPeriod, key: str, ordering: str
) -> Optional[float]:
    last = latest_period(periods, ordering)
    if last is None:
        return None
    value = (canon.get(last) or {}).get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _dscr_proxy(
    periods: list[str], canon: CanonByPeriod, ordering: str
) -> Optional[float]:
    ebitda = _latest_number(periods, canon, "ebitda", ordering)
    interest = _latest_number(periods, canon, "interest_expense", ordering)
    if ebitda is None or interest is None or interest == 0:
        return None
    return ebitda / interest


def _seasonality_cv(periods: list[str], canon: CanonByPeriod) -> Optional[float]:
    """Population coefficient of variation of quarterly revenue."""
    quarters = quarterly_periods(periods)
    if len(quarters) < SEASONALITY_MIN_QUARTERS:
        return None

    revenues = [(canon.get(q) or {}).get("revenue") for q in quarters]
    revenues = [r for r in revenues if isinstance(r, (int, float))]
    if len(revenues) < SEASONALITY_MIN_QUARTERS:
        return None

    series = pd.Series(revenues, dtype=float)
    mean = float(series.mean())
    if mean == 0:
        return None
    return float(series.std(ddof=0)) / mean


def _accrual_delta(
    periods: list[str], canon: CanonByPeriod, ordering: str
) -> Optional[float]:
    revenue = _latest_number(periods, canon, "revenue", ordering)
    cfo = _latest_number(periods, canon, "cfo", ordering)
    if revenue is None or cfo is None or revenue == 0:
        return None
    return abs(revenue - cfo) / abs(revenue)


def _data_sufficiency(periods: list[str]) -> DDSignal:
    annuals = annual_periods(periods)
    years = len(annuals) if len(annuals) >= 2 else year_span(periods)
    count = len(periods)

    if years >= SUFFICIENCY_MIN_YEARS and count >= SUFFICIENCY_MIN_PERIODS:
        status = "pass"
    elif count >= SUFFICIENCY_CAUTION_PERIODS:
        status = "caution"
    else:
        status = "fail"
    return DDSignal(status=status, detail=f"{years} year(s), {count} period(s)")


def compute_dd_signals(
    deal_id: str,
    periods: Iterable[str],
    canon: CanonByPeriod,
    concentration_ratio: Optional[float] = None,
    ordering: str = "lexical",
    periodicity: Optional[str] = None,
) -> DDSignals:
    """Classify the due-diligence signals of a deal.

    Args:
        deal_id: Identifier of the deal, echoed in the result.
        periods: Period keys available for the deal.
        canon: Canon-by-period data.
        concentration_ratio: Optional share (0..1) of revenue from the
            largest customer or product. Not derivable from statements, so
            it is supplied by the caller; 'na' when omitted.
        ordering: Period ordering used to pick the latest period.
        periodicity: Optional periodicity driving the day counts of the
            cash conversion cycle. Detected from the period keys when None.

    Returns:
        A DDSignals instance. Signals whose inputs are missing are 'na';
        this function does not raise for missing data.
    """
    period_list = list(periods)
    resolved = periodicity or detect_periodicity(period_list)
    metrics = compute_all_metrics(period_list, resolved, canon, ordering)

    dscr = _dscr_proxy(period_list, canon, ordering)
    ccc = metrics.get("ccc_days")
    current = metrics.get("current_ratio")
    cv = _seasonality_cv(period_list, canon)
    accrual = _accrual_delta(period_list, canon, ordering)

    return DDSignals(
        deal_id=deal_id,
        dscr_proxy=DDSignal(
            status=THRESHOLDS["dscr_proxy"].classify(dscr),
            value=dscr,
            detail="Proxy: EBITDA / Interest Expense",
        ),
        concentration=DDSignal(
            status=THRESHOLDS["concentration"].classify(concentration_ratio),
            value=concentration_ratio,
        ),
        working_capital_ccc=DDSignal(
            status=THRESHOLDS["working_capital_ccc"].classify(ccc), value=ccc
        ),
        current_ratio=DDSignal(
            status=THRESHOLDS["current_ratio"].classify(current), value=current
        ),
        seasonality=DDSignal(
            status=THRESHOLDS["seasonality"].classify(cv),
            value=cv,
            detail="Coefficient of variation of quarterly revenue",
        ),
        accrual_vs_cash_delta=DDSignal(
            status=THRESHOLDS["accrual_vs_cash_delta"].classify(accrual),
            value=accrual,
        ),
        data_sufficiency=_data_sufficiency(period_list),
    )
