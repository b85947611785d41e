# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for DealScope.

This module turns engine outputs (metric map, DD signals, document
inventory, per-period metrics) into pandas DataFrames ready for console
display or CSV export. It performs no computation of its own beyond
rounding and reshaping.
"""

from collections.abc import Mapping
from typing import Optional

import pandas as pd

from .benchmarks import benchmark_status
from .inventory import DocumentInventory
from .ratios import RATIO_REGISTRY
from .signals import DDSignals

METRIC_COLUMNS = ["key", "label", "value", "unit", "benchmark"]
SIGNAL_COLUMNS = ["signal", "status", "value", "detail"]
INVENTORY_COLUMNS = ["statement", "status", "periods", "years", "periodicity"]


def _rounded(value: Optional[float], decimals: int) -> float:
    if value is None:
        return float("nan")
    return round(value, decimals)


def metrics_to_dataframe(
    metrics: Mapping[str, Optional[float]], decimals: int
) -> pd.DataFrame:
    """
    Convert a flat metric map into a DataFrame.

    Columns:
        - key:       ratio identifier (e.g. "gross_margin").
        - label:     human-readable label from the registry.
        - value:     value rounded to ``decimals``, NaN if not computable.
        - unit:      unit hint ("fraction", "ratio", "days").
        - benchmark: benchmark status ("excellent" ... "unknown").

    Rows follow registry order; keys unknown to the registry come last
    with their key as label.
    """
    if not metrics:
        return pd.DataFrame(columns=METRIC_COLUMNS)

    rows: list[dict[str, object]] = []
    known = set()
    for definition in RATIO_REGISTRY:
        if definition.id not in metrics:
            continue
        known.add(definition.id)
        value = metrics[definition.id]
        rows.append(
            {
                "key": definition.id,
                "label": definition.label,
                "value": _rounded(value, decimals),
                "unit": definition.unit,
                "benchmark": benchmark_status(definition.id, value),
            }
        )

    for key, value in metrics.items():
        if key in known:
            continue
        rows.append(
            {
                "key": key,
                "label": key,
                "value": _rounded(value, decimals),
                "unit": "",
                "benchmark": benchmark_status(key, value),
            }
        )

    return pd.DataFrame(rows, columns=METRIC_COLUMNS)


def signals_to_dataframe(signals: DDSignals, decimals: int) -> pd.DataFrame:
    """One row per DD signal: signal, status, value, detail."""
    rows = [
        {
            "signal": name,
            "status": signal.status,
            "value": _rounded(signal.value, decimals),
            "detail": signal.detail or "",
        }
        for name, signal in signals.as_map().items()
    ]
    return pd.DataFrame(rows, columns=SIGNAL_COLUMNS)


def inventory_to_dataframe(inventory: DocumentInventory) -> pd.DataFrame:
    """One row per expected statement with its presence and coverage."""
    rows: list[dict[str, object]] = []
    for kind in inventory.expected:
        coverage = inventory.coverage.get(kind)
        rows.append(
            {
                "statement": kind,
                "status": "present" if kind in inventory.present else "missing",
                "periods": coverage.periods if coverage else 0,
                "years": coverage.years if coverage else None,
                "periodicity": coverage.periodicity if coverage else None,
            }
        )
    return pd.DataFrame(rows, columns=INVENTORY_COLUMNS)


def metrics_by_period_table(by_period: pd.DataFrame, decimals: int) -> pd.DataFrame:
    """
    Pivot long-format per-period metrics into a wide table.

    The result has one row per ratio key (registry order) and one column
    per period (input order), values rounded to ``decimals``.
    """
    if by_period.empty:
        return pd.DataFrame()

    periods = list(dict.fromkeys(by_period["period"]))
    keys = list(dict.fromkeys(by_period["key"]))

    values = pd.to_numeric(by_period["value"], errors="coerce").round(decimals)
    wide = (
        by_period.assign(value=values)
        .pivot(index="key", columns="period", values="value")
        .reindex(index=keys, columns=periods)
    )
    wide.columns.name = None
    return wide.reset_index()
