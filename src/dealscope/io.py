# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for DealScope.

This module reads structured financial data exported from spreadsheets and
normalizes it into a consistent long format suitable for the engine.

Expected input format
---------------------

One row per (period, account) pair. Column names are case-insensitive:

    period, account, value[, statement]

- ``period``:    period key ("2024", "2024-Q1" or "2024-01")
- ``account``:   line item label as written in the source document
                 (e.g. "Total Revenue", "Accounts Receivable")
- ``value``:     numeric amount
- ``statement``: optional statement kind the row comes from. Accepted
                 values: income_statement, balance_sheet, cash_flow, and
                 the short forms is, bs, cf. ``statement_type`` and
                 ``doc_type`` are accepted as column aliases.

Supported files
---------------
- ``.csv`` read with ``pandas.read_csv``,
- ``.xlsx`` read with ``pandas.read_excel`` (first sheet only). Legacy
  ``.xls`` workbooks are rejected with a ValueError.

Output schema
-------------
A pandas DataFrame with exactly these columns:

    - ``period``    (str)
    - ``account``   (str)
    - ``value``     (float)
    - ``statement`` (str, empty when the file has no statement column)

Rows with an empty period or account, or a value that is not a number,
are dropped. A file whose structure does not match the expected format
raises a clear ValueError.
"""

import logging
import os
from pathlib import Path
from typing import Any, Union

import pandas as pd

from .inventory import STATEMENT_KINDS

logger = logging.getLogger(__name__)

ROW_COLUMNS = ["period", "account", "value", "statement"]

_STATEMENT_COLUMN_ALIASES = ("statement", "statement_type", "doc_type")

_STATEMENT_ALIASES: dict[str, str] = {
    "is": "income_statement",
    "income statement": "income_statement",
    "bs": "balance_sheet",
    "balance sheet": "balance_sheet",
    "cf": "cash_flow",
    "cash flow": "cash_flow",
    "cash flow statement": "cash_flow",
}

EXCEL_SUFFIXES = (".xlsx",)
LEGACY_EXCEL_SUFFIXES = (".xls",)


def _cell_to_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, float):
        if pd.isna(raw):
            return ""
        # Years typed as numbers in spreadsheets come back as 2024.0.
        if raw.is_integer():
            return str(int(raw))
    return str(raw).strip()


def normalize_statement_kind(raw: Any) -> str:
    """Map a statement label to one of STATEMENT_KINDS ('' when blank).

    Raises:
        ValueError: if the label is not a known statement kind.
    """
    text = _cell_to_text(raw).lower()
    if not text:
        return ""
    text = text.replace("-", "_")
    if text in STATEMENT_KINDS:
        return text
    kind = _STATEMENT_ALIASES.get(text.replace("_", " "))
    if kind is None:
        raise ValueError(
            f"Unknown statement kind {raw!r}. "
            f"Expected one of: {', '.join(STATEMENT_KINDS)}."
        )
    return kind


def normalize_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Normalize a raw DataFrame into the period/account/value/statement schema.

    Parameters
    ----------
    df:
        DataFrame as read from a CSV or spreadsheet.

    Returns
    -------
    pandas.DataFrame
        Normalized rows with columns ``ROW_COLUMNS``.

    Raises
    ------
    ValueError
        If a required column is missing or a statement kind is unknown.
    """
    d = df.copy()
    d.columns = [str(c).lower().strip() for c in d.columns]
    cols = set(d.columns)

    missing = [c for c in ("period", "account", "value") if c not in cols]
    if missing:
        raise ValueError(
            "Invalid financial data structure. Expected columns:\n"
            "  - period, account, value[, statement]\n"
            f"Missing: {', '.join(missing)} "
            "(column names are case-insensitive)."
        )

    statement_col = next((c for c in _STATEMENT_COLUMN_ALIASES if c in cols), None)

    out = pd.DataFrame(
        {
            "period": d["period"].map(_cell_to_text),
            "account": d["account"].map(_cell_to_text),
            "value": pd.to_numeric(d["value"], errors="coerce"),
        }
    )
    if statement_col is None:
        out["statement"] = ""
    else:
        out["statement"] = d[statement_col].map(normalize_statement_kind)

    valid = (out["period"] != "") & (out["account"] != "") & out["value"].notna()
    dropped = int((~valid).sum())
    if dropped:
        logger.warning("Dropped %d incomplete or non-numeric rows", dropped)

    out = out.loc[valid, ROW_COLUMNS].reset_index(drop=True)
    out["value"] = out["value"].astype(float)
    return out


def read_period_rows(path: Union[str, "os.PathLike[str]"]) -> pd.DataFrame:
    """
    Read period/account/value rows from a CSV or spreadsheet file.

    Parameters
    ----------
    path:
        Path to a ``.csv`` or ``.xlsx`` file.

    Returns
    -------
    pandas.DataFrame
        Normalized rows, see ``normalize_rows()``.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file structure is invalid or the file is a legacy ``.xls``
        workbook.
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Financial data file not found: {p}")

    if p.suffix.lower() in LEGACY_EXCEL_SUFFIXES:
        raise ValueError(
            f"Legacy .xls workbooks are not supported: {p}. "
            "Save the file as .xlsx or .csv."
        )

    if p.suffix.lower() in EXCEL_SUFFIXES:
        df = pd.read_excel(p, sheet_name=0)
    else:
        df = pd.read_csv(p, dtype=str)

    logger.info("Read %d rows from %s", len(df), p)
    return normalize_rows(df)
