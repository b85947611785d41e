# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for DealScope.

Reporting periods are identified by string keys of three shapes:

- "2024"     annual
- "2024-Q1"  quarterly (Q1..Q4)
- "2024-01"  monthly

This module infers the periodicity of a set of keys, exposes the fixed
day-count policy used by day-based ratios, and orders period keys.

Two orderings are available:

- "lexical" (default): plain string sort. This matches chronological order
  as long as all keys share one granularity, which callers are expected to
  guarantee within one computation.
- "chronological": keys are parsed into (year, end month, granularity)
  tuples, so mixed granularities still sort by time. Malformed keys are
  placed first.
"""

import re
from collections.abc import Iterable
from typing import Literal, Optional

Periodicity = Literal["monthly", "quarterly", "annual"]
Ordering = Literal["lexical", "chronological"]

PERIODICITIES: tuple[str, ...] = ("monthly", "quarterly", "annual")
ORDERINGS: tuple[str, ...] = ("lexical", "chronological")

ANNUAL_RE = re.compile(r"^\d{4}$")
QUARTERLY_RE = re.compile(r"^(\d{4})-Q([1-4])$")
MONTHLY_RE = re.compile(r"^(\d{4})-(\d{2})$")
_LEADING_YEAR_RE = re.compile(r"^(\d{4})")

# Fixed day counts, not calendar days.
PERIOD_DAYS: dict[str, int] = {"monthly": 30, "quarterly": 90, "annual": 365}


def detect_periodicity(period_keys: Iterable[str]) -> Periodicity:
    """Infer the periodicity of a set of period keys.

    Precedence is monthly > quarterly > annual: a single monthly-shaped key
    makes the whole set monthly. Keys matching no known shape count as
    annual.
    """
    keys = list(period_keys)
    if any(MONTHLY_RE.match(k) for k in keys):
        return "monthly"
    if any(QUARTERLY_RE.match(k) for k in keys):
        return "quarterly"
    return "annual"


def period_days(periodicity: str) -> int:
    """Number of days assumed for one period of the given periodicity."""
    return PERIOD_DAYS.get(periodicity, PERIOD_DAYS["annual"])


def annual_periods(period_keys: Iterable[str]) -> list[str]:
    """Return the bare-year keys, sorted ascending."""
    return sorted(k for k in period_keys if ANNUAL_RE.match(k))


def quarterly_periods(period_keys: Iterable[str]) -> list[str]:
    """Return the YYYY-QN keys, sorted ascending."""
    return sorted(k for k in period_keys if QUARTERLY_RE.match(k))


def chronological_key(period_key: str) -> tuple[int, int, int, int, str]:
    """Sort key placing a period key on a time axis.

    The tuple is (valid, year, end month, granularity rank, key). Within
    one end month, monthly sorts before quarterly before annual.
    """
    if ANNUAL_RE.match(period_key):
        return (1, int(period_key), 12, 2, period_key)

    m = QUARTERLY_RE.match(period_key)
    if m:
        return (1, int(m.group(1)), int(m.group(2)) * 3, 1, period_key)

    m = MONTHLY_RE.match(period_key)
    if m:
        return (1, int(m.group(1)), int(m.group(2)), 0, period_key)

    return (0, 0, 0, 0, period_key)


def sort_periods(period_keys: Iterable[str], ordering: str = "lexical") -> list[str]:
    """Sort period keys ascending using the requested ordering.

    Raises:
        ValueError: if the ordering is unknown.
    """
    if ordering == "lexical":
        return sorted(period_keys)
    if ordering == "chronological":
        return sorted(period_keys, key=chronological_key)
    raise ValueError(
        f"Unknown period ordering: {ordering!r}. Expected one of: {ORDERINGS}."
    )


def latest_period(
    period_keys: Iterable[str], ordering: str = "lexical"
) -> Optional[str]:
    """Return the last period key after sorting, or None if there are none."""
    ordered = sort_periods(period_keys, ordering)
    return ordered[-1] if ordered else None


def year_span(period_keys: Iterable[str]) -> int:
    """Inclusive number of years covered by the leading years of the keys.

    Keys without a leading 4-digit year are ignored. Returns 0 when no key
    carries a year.
    """
    years = []
    for k in period_keys:
        m = _LEADING_YEAR_RE.match(k)
        if m:
            years.append(int(m.group(1)))
    if not years:
        return 0
    return max(years) - min(years) + 1
