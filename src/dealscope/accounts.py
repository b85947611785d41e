# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Canonical account model for DealScope.

This module defines the fixed chart of accounts understood by the metrics
engine (the "canon") and the alias table that maps many human-written line
item labels onto it.

Responsibilities:
- Expose the canonical vocabulary, grouped by financial statement.
- Resolve a raw account label (case and surrounding whitespace ignored)
  to its canonical key through an exact alias lookup.
- Normalize a batch of {account, value} rows for one period into a partial
  canon, applying the derived fallbacks (gross profit, total debt).
- Load additional aliases from a user-maintained CSV file.

Labels without an alias entry are dropped: the normalizer never guesses and
never invents a canonical key.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)

INCOME_STATEMENT_ACCOUNTS: tuple[str, ...] = (
    "revenue",
    "cogs",
    "gross_profit",
    "sga",
    "operating_expenses",
    "net_income",
    "ebitda",
    "interest_expense",
)

BALANCE_SHEET_ACCOUNTS: tuple[str, ...] = (
    "cash",
    "marketable_securities",
    "accounts_receivable",
    "inventory",
    "other_current_assets",
    "current_assets",
    "accounts_payable",
    "short_term_debt",
    "other_current_liabilities",
    "current_liabilities",
    "total_debt",
    "shareholders_equity",
    "total_assets",
    "total_liabilities",
)

CASH_FLOW_ACCOUNTS: tuple[str, ...] = (
    "cfo",
    "cfi",
    "cff",
    "net_change_in_cash",
)

CANONICAL_ACCOUNTS: frozenset[str] = frozenset(
    INCOME_STATEMENT_ACCOUNTS + BALANCE_SHEET_ACCOUNTS + CASH_FLOW_ACCOUNTS
)

# Lower-cased, trimmed label -> canonical key.
DEFAULT_ALIASES: dict[str, str] = {
    # Income statement
    "sales": "revenue",
    "total revenue": "revenue",
    "revenue": "revenue",
    "cost of goods sold": "cogs",
    "cogs": "cogs",
    "gross profit": "gross_profit",
    "selling general administrative": "sga",
    "sga": "sga",
    "operating expenses": "operating_expenses",
    "net income": "net_income",
    "ebitda": "ebitda",
    "interest expense": "interest_expense",
    # Balance sheet: assets
    "cash and cash equivalents": "cash",
    "cash": "cash",
    "marketable securities": "marketable_securities",
    "accounts receivable": "accounts_receivable",
    "trade receivables": "accounts_receivable",
    "inventory": "inventory",
    "other current assets": "other_current_assets",
    "total current assets": "current_assets",
    # Balance sheet: liabilities and equity
    "accounts payable": "accounts_payable",
    "short-term debt": "short_term_debt",
    "other current liabilities": "other_current_liabilities",
    "total current liabilities": "current_liabilities",
    "total liabilities": "total_liabilities",
    "shareholders' equity": "shareholders_equity",
    "total shareholders' equity": "shareholders_equity",
    "total assets": "total_assets",
    "total debt": "total_debt",
    # Cash flow
    "net cash from operating activities": "cfo",
    "net cash used in investing activities": "cfi",
    "net cash from financing activities": "cff",
    "net change in cash": "net_change_in_cash",
}

Row = Union[Mapping[str, Any], tuple[str, float]]


def _normalize_label(label: Any) -> str:
    return str(label).strip().lower()


def resolve_account(
    label: str, aliases: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """Return the canonical key for a raw account label, or None.

    Args:
        label: Raw account label as written in the source document.
        aliases: Optional alias table to use instead of DEFAULT_ALIASES.

    Returns:
        The canonical key, or None if the label has no alias entry.
    """
    table = DEFAULT_ALIASES if aliases is None else aliases
    return table.get(_normalize_label(label))


def _unpack_row(row: Row) -> tuple[str, float]:
    if isinstance(row, Mapping):
        return str(row["account"]), row["value"]
    account, value = row
    return str(account), value


def normalize_lines(
    rows: Iterable[Row], aliases: Optional[Mapping[str, str]] = None
) -> dict[str, float]:
    """Normalize raw {account, value} rows for one period into a partial canon.

    Steps:
        1. Resolve each label through the alias table. Unknown labels are
           dropped. When the same canonical key appears twice, the last
           occurrence wins.
        2. If gross_profit is absent but revenue and cogs are present,
           gross_profit = revenue - cogs.
        3. If total_debt is absent, use short_term_debt when it is present
           and non-zero. Otherwise total_debt stays absent.

    Args:
        rows: Iterable of mappings with 'account' and 'value' keys, or of
            (account, value) pairs.
        aliases: Optional alias table to use instead of DEFAULT_ALIASES.

    Returns:
        A dictionary {canonical_key -> float} containing only canonical keys.
    """
    out: dict[str, float] = {}
    for row in rows:
        account, value = _unpack_row(row)
        key = resolve_account(account, aliases)
        if key is None:
            logger.debug("Unrecognized account label %r, ignored", account)
            continue
        out[key] = float(value)

    if "gross_profit" not in out and "revenue" in out and "cogs" in out:
        out["gross_profit"] = out["revenue"] - out["cogs"]

    if "total_debt" not in out:
        short_term_debt = out.get("short_term_debt")
        if short_term_debt:
            out["total_debt"] = short_term_debt

    return out


def load_alias_table(
    path: str, base: Optional[Mapping[str, str]] = None
) -> dict[str, str]:
    """Load additional account aliases from CSV and merge them over a base table.

    Expected structure
    ------------------
    The CSV must contain at least:
        - one column with the raw label:
            'alias', 'label' or 'account'
        - one column with the canonical key:
            'canonical', 'canonical_key' or 'key'

    Column names are matched case-insensitively and trimmed. Labels are
    stored lower-cased and trimmed, like the default table.

    Args:
        path: Path to the CSV file.
        base: Table to extend. Defaults to DEFAULT_ALIASES.

    Returns:
        A new alias table. Entries from the file override the base table.

    Raises:
        ValueError: if the required columns cannot be found, or if a row
            targets a key outside the canonical vocabulary.
    """
    df = pd.read_csv(path, dtype=str).fillna("")
    col_map = {str(c).strip().lower(): c for c in df.columns}

    alias_col = next(
        (col_map[c] for c in ("alias", "label", "account") if c in col_map), None
    )
    if alias_col is None:
        raise ValueError(
            "Could not find an alias column in aliases file. "
            "Expected one of: 'alias', 'label', 'account'."
        )

    key_col = next(
        (col_map[c] for c in ("canonical", "canonical_key", "key") if c in col_map),
        None,
    )
    if key_col is None:
        raise ValueError(
            "Could not find a canonical key column in aliases file. "
            "Expected one of: 'canonical', 'canonical_key', 'key'."
        )

    table = dict(DEFAULT_ALIASES if base is None else base)
    for alias, key in zip(df[alias_col], df[key_col]):
        label = _normalize_label(alias)
        canonical = str(key).strip()
        if not label:
            continue
        if canonical not in CANONICAL_ACCOUNTS:
            raise ValueError(
                f"Alias {alias!r} targets unknown canonical account {canonical!r}."
            )
        table[label] = canonical

    return table
