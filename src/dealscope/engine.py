# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core metrics engine for DealScope.

This module turns raw accounting rows into canonical data and runs the
ratio registry over it.

The engine has two responsibilities:

1. Canon-by-period construction
   -----------------------------
   ``build_canon_by_period()`` takes rows shaped as
   {period, account, value}, groups them by period, normalizes each group
   through ``accounts.normalize_lines()`` and overlays the result onto the
   period's canon. Several documents for the same deal are combined with
   ``merge_canon_by_period()``: later maps overlay earlier ones key by key,
   they never replace a period wholesale.

2. Metrics aggregation
   --------------------
   ``compute_all_metrics()`` evaluates every entry of
   ``ratios.RATIO_REGISTRY`` and flattens the results into a single
   {ratio_id -> float | None} map:
   - deal-level ratios contribute their scalar,
   - per-period ratios contribute the value of the latest period.

   "Latest" is the last key after sorting with the requested ordering.
   The default lexical ordering is only chronological when all keys share
   one granularity (see periods.py).

   ``compute_metrics_by_period()`` exposes the full per-period series as a
   long-format DataFrame for time-series consumers.

Missing data never raises: absent inputs propagate as None through every
formula.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any, Optional

import pandas as pd

from .accounts import normalize_lines
from .periods import latest_period, sort_periods
from .ratios import RATIO_REGISTRY, CanonByPeriod, RatioContext

logger = logging.getLogger(__name__)

METRICS_BY_PERIOD_COLUMNS = ["period", "key", "label", "value", "unit"]


def _iter_rows(rows: Any) -> Iterable[Mapping[str, Any]]:
    if isinstance(rows, pd.DataFrame):
        return rows.to_dict(orient="records")
    return rows


def _coerce_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, float):
        if math.isnan(raw):
            return ""
        # Spreadsheet years come back as floats (2024.0).
        if raw.is_integer():
            return str(int(raw))
    return str(raw).strip()


def _coerce_value(raw: Any) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return value


def build_canon_by_period(
    rows: Any,
    aliases: Optional[Mapping[str, str]] = None,
) -> dict[str, dict[str, float]]:
    """Build a canon-by-period map from {period, account, value} rows.

    Args:
        rows: Iterable of mappings (or a DataFrame) with at least 'period',
            'account' and 'value'. Rows with a blank period or account, or
            a value that is not a number, are skipped.
        aliases: Optional alias table forwarded to ``normalize_lines()``.

    Returns:
        A dictionary {period_key -> {canonical_key -> float}}. Periods for
        which no row resolved to a canonical account are still present,
        with an empty canon.
    """
    grouped: dict[str, list[tuple[str, float]]] = {}
    skipped = 0
    for row in _iter_rows(rows):
        period = _coerce_text(row.get("period"))
        account = _coerce_text(row.get("account"))
        value = _coerce_value(row.get("value"))
        if not period or not account or value is None:
            skipped += 1
            continue
        grouped.setdefault(period, []).append((account, value))

    if skipped:
        logger.debug("Skipped %d incomplete rows", skipped)

    canon: dict[str, dict[str, float]] = {}
    for period, lines in grouped.items():
        canon.setdefault(period, {}).update(normalize_lines(lines, aliases))
    return canon


def merge_canon_by_period(*maps: CanonByPeriod) -> dict[str, dict[str, float]]:
    """Overlay several canon-by-period maps, last write wins per key."""
    merged: dict[str, dict[str, float]] = {}
    for canon in maps:
        for period, values in canon.items():
            merged.setdefault(period, {}).update(values)
    return merged


def compute_all_metrics(
    periods: Iterable[str],
    periodicity: str,
    canon: CanonByPeriod,
    ordering: str = "lexical",
) -> dict[str, Optional[float]]:
    """Evaluate every registered ratio and return the flat metric map.

    Args:
        periods: Period keys to consider.
        periodicity: 'monthly', 'quarterly' or 'annual' (drives day counts).
        canon: Canon-by-period data.
        ordering: Period ordering used to pick the latest period
            ('lexical' or 'chronological').

    Returns:
        A dictionary {ratio_id -> float | None}, one entry per registry
        definition, in registry order.
    """
    ctx = RatioContext(periods=tuple(periods), periodicity=periodicity, canon=canon)
    last = latest_period(ctx.periods, ordering)

    flat: dict[str, Optional[float]] = {}
    for definition in RATIO_REGISTRY:
        out = definition.compute(ctx)
        if definition.deal_level:
            flat[definition.id] = out
        else:
            flat[definition.id] = out.get(last) if last is not None else None
    return flat


def compute_metrics_by_period(
    periods: Iterable[str],
    periodicity: str,
    canon: CanonByPeriod,
    ordering: str = "lexical",
) -> pd.DataFrame:
    """Evaluate per-period ratios and return them in long format.

    Each row is one ratio for one period. Deal-level ratios have no period
    dimension and are not included.

    Returns
    -------
    pandas.DataFrame
        Columns: period, key, label, value, unit. Rows are ordered by
        period (using ``ordering``) then by registry order. ``value`` is
        None when the ratio cannot be computed.
    """
    ordered = sort_periods(periods, ordering)
    ctx = RatioContext(periods=tuple(ordered), periodicity=periodicity, canon=canon)

    series = [
        (definition, definition.compute(ctx))
        for definition in RATIO_REGISTRY
        if not definition.deal_level
    ]

    rows: list[dict[str, Any]] = []
    for period in ordered:
        for definition, values in series:
            rows.append(
                {
                    "period": period,
                    "key": definition.id,
                    "label": definition.label,
                    "value": values.get(period),
                    "unit": definition.unit,
                }
            )

    if not rows:
        return pd.DataFrame(columns=METRICS_BY_PERIOD_COLUMNS)
    return pd.DataFrame(rows, columns=METRICS_BY_PERIOD_COLUMNS)
