# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
End-to-end analysis pipeline for DealScope.

This module provides the high-level entry point used to compute every
output of the engine for one deal in a single call.

Overview
--------
``analyze_rows()`` takes normalized {period, account, value[, statement]}
rows (as produced by ``io.read_period_rows()`` or by any upstream
extractor) and:

1. builds the canon-by-period map (engine.build_canon_by_period),
2. detects the periodicity of the period keys, unless overridden,
3. computes the flat metric map (engine.compute_all_metrics),
4. computes the per-period metric table (engine.compute_metrics_by_period),
5. classifies the due-diligence signals (signals.compute_dd_signals),
6. positions metrics against industry benchmarks
   (benchmarks.compare_to_benchmarks),
7. when rows carry a statement kind, builds the document inventory
   (inventory.build_document_inventory), with the periodicity of each
   statement detected from its own period keys.

``analyze_files()`` reads one or more CSV/XLSX files and runs the same
pipeline over their concatenated rows. Files are applied in order, so a
later file overrides earlier values for the same period and account.

Separation of concerns
----------------------
- ``engine.py``, ``ratios.py`` and ``signals.py`` stay pure and know
  nothing about files or configuration.
- ``pipeline.py`` wires them together and returns a single AnalysisResult
  whose ``to_dict()`` is JSON-serializable, ready for persistence or
  rendering by an external layer.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

from .benchmarks import compare_to_benchmarks
from .engine import (
    build_canon_by_period,
    compute_all_metrics,
    compute_metrics_by_period,
)
from .inventory import DocumentInventory, StatementData, build_document_inventory
from .io import ROW_COLUMNS, read_period_rows
from .periods import detect_periodicity, sort_periods
from .signals import DDSignals, compute_dd_signals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """
    All outputs of one deal analysis.

    Attributes
    ----------
    deal_id :
        Identifier of the deal.
    periodicity :
        'monthly', 'quarterly' or 'annual'.
    periods :
        Period keys, sorted with the ordering used for the analysis.
    canon :
        Canon-by-period data the metrics were computed from.
    metrics :
        Flat metric map {ratio_id -> float | None}.
    metrics_by_period :
        Long-format DataFrame of per-period ratios
        (period, key, label, value, unit).
    signals :
        Due-diligence signals.
    benchmarks :
        Benchmark status per metric ('excellent', 'good', 'average',
        'poor' or 'unknown').
    inventory :
        Document inventory, or None when the rows carry no statement kind.
    """

    deal_id: str
    periodicity: str
    periods: list[str]
    canon: dict[str, dict[str, float]]
    metrics: dict[str, Optional[float]]
    metrics_by_period: pd.DataFrame
    signals: DDSignals
    benchmarks: dict[str, str]
    inventory: Optional[DocumentInventory] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "deal_id": self.deal_id,
            "periodicity": self.periodicity,
            "periods": list(self.periods),
            "metrics": dict(self.metrics),
            "signals": self.signals.to_dict(),
            "benchmarks": dict(self.benchmarks),
            "inventory": (
                self.inventory.to_dict() if self.inventory is not None else None
            ),
        }


def _as_records(rows: Any) -> list[Mapping[str, Any]]:
    if isinstance(rows, pd.DataFrame):
        return rows.to_dict(orient="records")
    return list(rows)


def _build_inventory(
    deal_id: str,
    records: list[Mapping[str, Any]],
    aliases: Optional[Mapping[str, str]],
) -> Optional[DocumentInventory]:
    by_kind: dict[str, list[Mapping[str, Any]]] = {}
    for record in records:
        kind = record.get("statement") or ""
        if kind:
            by_kind.setdefault(str(kind), []).append(record)

    if not by_kind:
        return None

    statements: dict[str, StatementData] = {}
    periodicities: dict[str, str] = {}
    for kind, kind_rows in by_kind.items():
        canon = build_canon_by_period(kind_rows, aliases)
        periods = tuple(sorted(canon))
        statements[kind] = StatementData(canon=canon, periods=periods)
        periodicities[kind] = detect_periodicity(periods)

    return build_document_inventory(deal_id, statements, periodicities)


def analyze_rows(
    rows: Any,
    deal_id: str,
    concentration_ratio: Optional[float] = None,
    ordering: str = "lexical",
    aliases: Optional[Mapping[str, str]] = None,
    periodicity: Optional[str] = None,
) -> AnalysisResult:
    """
    Run the full analysis over normalized rows.

    Parameters
    ----------
    rows :
        DataFrame or iterable of mappings with 'period', 'account',
        'value' and optionally 'statement'.
    deal_id :
        Identifier of the deal.
    concentration_ratio :
        Optional top customer/product share (0..1) for the DD signals.
    ordering :
        'lexical' (default) or 'chronological' period ordering.
    aliases :
        Optional alias table (see accounts.load_alias_table).
    periodicity :
        Optional periodicity override; detected from the keys when None.

    Returns
    -------
    AnalysisResult

    Raises
    ------
    ValueError
        If the rows contain no usable period data.
    """
    records = _as_records(rows)
    canon = build_canon_by_period(records, aliases)
    periods = sort_periods(canon.keys(), ordering)
    if not periods:
        raise ValueError(
            "No structured data found: expected rows with period, account and value."
        )

    resolved_periodicity = periodicity or detect_periodicity(periods)
    logger.info(
        "Analyzing deal %s: %d period(s), %s",
        deal_id,
        len(periods),
        resolved_periodicity,
    )

    metrics = compute_all_metrics(periods, resolved_periodicity, canon, ordering)
    by_period = compute_metrics_by_period(
        periods, resolved_periodicity, canon, ordering
    )
    signals = compute_dd_signals(
        deal_id,
        periods,
        canon,
        concentration_ratio=concentration_ratio,
        ordering=ordering,
        periodicity=resolved_periodicity,
    )

    return AnalysisResult(
        deal_id=deal_id,
        periodicity=resolved_periodicity,
        periods=periods,
        canon=canon,
        metrics=metrics,
        metrics_by_period=by_period,
        signals=signals,
        benchmarks=compare_to_benchmarks(metrics),
        inventory=_build_inventory(deal_id, records, aliases),
    )


def read_files(paths: Iterable[str]) -> pd.DataFrame:
    """Read and concatenate rows from several files, in order."""
    frames = [read_period_rows(p) for p in paths]
    if not frames:
        return pd.DataFrame(columns=ROW_COLUMNS)
    return pd.concat(frames, ignore_index=True)


def analyze_files(
    paths: Sequence[str],
    deal_id: str,
    concentration_ratio: Optional[float] = None,
    ordering: str = "lexical",
    aliases: Optional[Mapping[str, str]] = None,
    periodicity: Optional[str] = None,
) -> AnalysisResult:
    """Read CSV/XLSX files and run ``analyze_rows()`` over their rows."""
    rows = read_files(paths)
    return analyze_rows(
        rows,
        deal_id=deal_id,
        concentration_ratio=concentration_ratio,
        ordering=ordering,
        aliases=aliases,
        periodicity=periodicity,
    )
