# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Document inventory for DealScope.

Reports which of the three core financial statements were supplied for a
deal and how many periods/years each one covers. Deciding which statement
a row belongs to is the caller's job: the builder only looks at which
statement kinds it was given, never at the values themselves.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .periods import annual_periods
from .ratios import CanonByPeriod

STATEMENT_KINDS: tuple[str, ...] = ("income_statement", "balance_sheet", "cash_flow")


@dataclass(frozen=True)
class StatementData:
    """Canonical data of one statement kind."""

    canon: CanonByPeriod
    periods: tuple[str, ...]


@dataclass(frozen=True)
class Coverage:
    """Period coverage of one statement kind."""

    periods: int
    years: Optional[int] = None
    periodicity: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "periods": self.periods,
            "years": self.years,
            "periodicity": self.periodicity,
        }


@dataclass(frozen=True)
class DocumentInventory:
    """Expected, present and missing statements of a deal."""

    deal_id: str
    expected: list[str]
    present: list[str]
    missing: list[str]
    coverage: dict[str, Coverage]
    notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "deal_id": self.deal_id,
            "expected": list(self.expected),
            "present": list(self.present),
            "missing": list(self.missing),
            "coverage": {k: c.to_dict() for k, c in self.coverage.items()},
            "notes": list(self.notes),
        }


StatementInput = Union[StatementData, Mapping[str, Any]]


def _periods_of(data: StatementInput) -> list[str]:
    if isinstance(data, StatementData):
        return list(data.periods)
    periods = data.get("periods")
    if periods is None:
        return list((data.get("canon") or {}).keys())
    return list(periods)


def _year_span(periods: list[str]) -> Optional[int]:
    annuals = annual_periods(periods)
    if not annuals:
        return None
    return int(annuals[-1]) - int(annuals[0]) + 1


def build_document_inventory(
    deal_id: str,
    canon_by_doc_type: Mapping[str, StatementInput],
    periodicity_by_type: Optional[Mapping[str, str]] = None,
) -> DocumentInventory:
    """Build the document inventory of a deal.

    Parameters
    ----------
    deal_id :
        Identifier of the deal, echoed in the result.
    canon_by_doc_type :
        Statement kind -> StatementData (or a mapping with 'canon' and
        'periods' keys). Only supplied kinds count as present.
    periodicity_by_type :
        Optional statement kind -> periodicity asserted by the caller. It
        is reported as-is, not re-derived from the period keys.

    Returns
    -------
    DocumentInventory
        ``expected`` is always income_statement, balance_sheet, cash_flow.
        Coverage lists the period count of each present kind and, when
        bare-year keys exist, the inclusive year span.

    Raises
    ------
    ValueError
        If a statement kind outside STATEMENT_KINDS is supplied.
    """
    unknown = sorted(set(canon_by_doc_type) - set(STATEMENT_KINDS))
    if unknown:
        raise ValueError(
            f"Unknown statement kind(s): {', '.join(unknown)}. "
            f"Expected one of: {', '.join(STATEMENT_KINDS)}."
        )

    periodicities = periodicity_by_type or {}
    present = [k for k in STATEMENT_KINDS if canon_by_doc_type.get(k) is not None]
    missing = [k for k in STATEMENT_KINDS if k not in present]

    coverage: dict[str, Coverage] = {}
    for kind in present:
        periods = _periods_of(canon_by_doc_type[kind])
        coverage[kind] = Coverage(
            periods=len(periods),
            years=_year_span(periods),
            periodicity=periodicities.get(kind),
        )

    return DocumentInventory(
        deal_id=deal_id,
        expected=list(STATEMENT_KINDS),
        present=present,
        missing=missing,
        coverage=coverage,
    )
