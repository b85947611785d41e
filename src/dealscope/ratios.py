# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Ratio registry for DealScope.

The registry is a static, read-only tuple of ratio definitions. Each
definition carries:

- an identifier (e.g. 'gross_margin'),
- a human-readable label,
- the canonical accounts it reads (documentation only, not enforced),
- a unit hint ('fraction', 'ratio', 'days'),
- a pure compute function over a RatioContext.

Two shapes of definitions exist:

1. PeriodRatio
   ------------
   Produces one value per period: {period_key -> float | None}.
   Most ratios (margins, liquidity, leverage, working-capital days) are of
   this kind.

2. DealRatio
   ----------
   Produces one scalar for the whole deal (float | None), for example the
   3-year revenue CAGR.

Both shapes expose a ``deal_level`` attribute so that consumers (see
engine.py) can dispatch without inspecting the compute function.

Null propagation
----------------
Every formula returns None when an operand is absent or a denominator is
exactly zero. No formula raises for missing data, and no formula produces
NaN or infinity.

Extending the registry
----------------------
New ratios are added by appending a PeriodRatio or DealRatio to
RATIO_REGISTRY. The aggregator does not need to change.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Optional, Union

from .periods import annual_periods, period_days

CanonByPeriod = Mapping[str, Mapping[str, float]]


@dataclass(frozen=True)
class RatioContext:
    """Inputs shared by every ratio computation."""

    periods: tuple[str, ...]
    periodicity: str
    canon: CanonByPeriod

    def values(self, period: str) -> Mapping[str, float]:
        """Canon for one period (empty mapping if the period has no data)."""
        return self.canon.get(period) or {}


@dataclass(frozen=True)
class PeriodRatio:
    """Ratio computed independently for each period."""

    id: str
    label: str
    requires: tuple[str, ...]
    unit: str
    compute: Callable[[RatioContext], dict[str, Optional[float]]]

    @property
    def deal_level(self) -> bool:
        return False


@dataclass(frozen=True)
class DealRatio:
    """Ratio computed once for the whole deal."""

    id: str
    label: str
    requires: tuple[str, ...]
    unit: str
    compute: Callable[[RatioContext], Optional[float]]

    @property
    def deal_level(self) -> bool:
        return True


RatioDef = Union[PeriodRatio, DealRatio]


def _safe_div(
    numerator: Optional[float], denominator: Optional[float]
) -> Optional[float]:
    if numerator is None or denominator is None or denominator == 0:
        return None
    return numerator / denominator


def _per_period(
    formula: Callable[[Mapping[str, float], int], Optional[float]],
) -> Callable[[RatioContext], dict[str, Optional[float]]]:
    """Lift a single-period formula into a per-period compute function."""

    def compute(ctx: RatioContext) -> dict[str, Optional[float]]:
        days = period_days(ctx.periodicity)
        return {p: formula(ctx.values(p), days) for p in ctx.periods}

    return compute


def _gross_margin(c: Mapping[str, float], _days: int) -> Optional[float]:
    return _safe_div(c.get("gross_profit"), c.get("revenue"))


def _net_margin(c: Mapping[str, float], _days: int) -> Optional[float]:
    return _safe_div(c.get("net_income"), c.get("revenue"))


def _ebitda_margin(c: Mapping[str, float], _days: int) -> Optional[float]:
    return _safe_div(c.get("ebitda"), c.get("revenue"))


def _current_ratio(c: Mapping[str, float], _days: int) -> Optional[float]:
    return _safe_div(c.get("current_assets"), c.get("current_liabilities"))


def _debt_to_equity(c: Mapping[str, float], _days: int) -> Optional[float]:
    return _safe_div(c.get("total_debt"), c.get("shareholders_equity"))


def _quick_ratio(c: Mapping[str, float], _days: int) -> Optional[float]:
    cash = c.get("cash")
    receivables = c.get("accounts_receivable")
    if cash is None or receivables is None:
        return None
    securities = c.get("marketable_securities", 0.0)
    return _safe_div(cash + securities + receivables, c.get("current_liabilities"))


def _days_ratio(
    numerator_key: str, denominator_key: str
) -> Callable[[Mapping[str, float], int], Optional[float]]:
    def formula(c: Mapping[str, float], days: int) -> Optional[float]:
        value = _safe_div(c.get(numerator_key), c.get(denominator_key))
        return None if value is None else value * days

    return formula


def _wc_to_sales(c: Mapping[str, float], _days: int) -> Optional[float]:
    assets = c.get("current_assets")
    liabilities = c.get("current_liabilities")
    if assets is None or liabilities is None:
        return None
    return _safe_div(assets - liabilities, c.get("revenue"))


def _ccc_days(ctx: RatioContext) -> dict[str, Optional[float]]:
    """AR days + inventory days - AP days, all three required per period."""
    dso = get_ratio("ar_days").compute(ctx)
    dio = get_ratio("dio_days").compute(ctx)
    dpo = get_ratio("ap_days").compute(ctx)

    out: dict[str, Optional[float]] = {}
    for p in ctx.periods:
        parts = (dso.get(p), dio.get(p), dpo.get(p))
        if any(v is None for v in parts):
            out[p] = None
        else:
            out[p] = parts[0] + parts[1] - parts[2]
    return out


def _revenue_cagr_3y(ctx: RatioContext) -> Optional[float]:
    """3-year compound growth between the last period and 3 positions before.

    Bare-year periods are preferred when there are at least four of them;
    otherwise all periods are used as-is.
    """
    annuals = annual_periods(ctx.periods)
    ordered = annuals if len(annuals) >= 4 else sorted(ctx.periods)
    if len(ordered) < 4:
        return None

    rev_last = ctx.values(ordered[-1]).get("revenue")
    rev_base = ctx.values(ordered[-4]).get("revenue")
    growth = _safe_div(rev_last, rev_base)
    if growth is None:
        return None
    # A negative last/base ratio would yield a complex root.
    if growth < 0:
        return None
    return growth ** (1 / 3) - 1


RATIO_REGISTRY: tuple[RatioDef, ...] = (
    PeriodRatio(
        id="gross_margin",
        label="Gross Margin",
        requires=("gross_profit", "revenue"),
        unit="fraction",
        compute=_per_period(_gross_margin),
    ),
    PeriodRatio(
        id="net_margin",
        label="Net Margin",
        requires=("net_income", "revenue"),
        unit="fraction",
        compute=_per_period(_net_margin),
    ),
    PeriodRatio(
        id="ebitda_margin",
        label="EBITDA Margin",
        requires=("ebitda", "revenue"),
        unit="fraction",
        compute=_per_period(_ebitda_margin),
    ),
    PeriodRatio(
        id="current_ratio",
        label="Current Ratio",
        requires=("current_assets", "current_liabilities"),
        unit="ratio",
        compute=_per_period(_current_ratio),
    ),
    PeriodRatio(
        id="debt_to_equity",
        label="Debt to Equity",
        requires=("total_debt", "shareholders_equity"),
        unit="ratio",
        compute=_per_period(_debt_to_equity),
    ),
    PeriodRatio(
        id="quick_ratio",
        label="Quick Ratio",
        requires=(
            "cash",
            "marketable_securities",
            "accounts_receivable",
            "current_liabilities",
        ),
        unit="ratio",
        compute=_per_period(_quick_ratio),
    ),
    PeriodRatio(
        id="ar_days",
        label="AR Days (DSO)",
        requires=("accounts_receivable", "revenue"),
        unit="days",
        compute=_per_period(_days_ratio("accounts_receivable", "revenue")),
    ),
    PeriodRatio(
        id="ap_days",
        label="AP Days (DPO)",
        requires=("accounts_payable", "cogs"),
        unit="days",
        compute=_per_period(_days_ratio("accounts_payable", "cogs")),
    ),
    PeriodRatio(
        id="dio_days",
        label="Inventory Days (DIO)",
        requires=("inventory", "cogs"),
        unit="days",
        compute=_per_period(_days_ratio("inventory", "cogs")),
    ),
    PeriodRatio(
        id="ccc_days",
        label="Cash Conversion Cycle",
        requires=(
            "accounts_receivable",
            "revenue",
            "inventory",
            "accounts_payable",
            "cogs",
        ),
        unit="days",
        compute=_ccc_days,
    ),
    PeriodRatio(
        id="wc_to_sales",
        label="Working Capital to Sales",
        requires=("current_assets", "current_liabilities", "revenue"),
        unit="fraction",
        compute=_per_period(_wc_to_sales),
    ),
    DealRatio(
        id="revenue_cagr_3y",
        label="Revenue CAGR (3y)",
        requires=("revenue",),
        unit="fraction",
        compute=_revenue_cagr_3y,
    ),
)

_BY_ID: Mapping[str, RatioDef] = {r.id: r for r in RATIO_REGISTRY}


def get_ratio(ratio_id: str) -> RatioDef:
    """Return the registry entry with the given id.

    Raises:
        KeyError: if no ratio with this id is registered.
    """
    try:
        return _BY_ID[ratio_id]
    except KeyError:
        raise KeyError(f"Unknown ratio id: {ratio_id!r}") from None
