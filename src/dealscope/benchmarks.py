# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Industry benchmark ranges for DealScope metrics.

Each benchmark defines four thresholds (excellent, good, average, poor)
used to position a metric value relative to typical industry levels.

The comparison direction follows the thresholds themselves: when
``excellent`` is greater than ``poor`` higher values are better (margins,
liquidity, growth); otherwise lower values are better (days, leverage,
working-capital intensity).
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

BENCHMARK_STATUSES: tuple[str, ...] = (
    "excellent",
    "good",
    "average",
    "poor",
    "unknown",
)

_DATA_SOURCE = (
    "Industry averages from S&P 500, Russell 2000, and sector-specific data"
)


@dataclass(frozen=True)
class BenchmarkRange:
    """Benchmark thresholds and documentation for one metric."""

    excellent: float
    good: float
    average: float
    poor: float
    unit: str
    description: str
    calculation: str
    data_source: str = _DATA_SOURCE

    @property
    def higher_is_better(self) -> bool:
        return self.excellent > self.poor


FINANCIAL_BENCHMARKS: Mapping[str, BenchmarkRange] = {
    # Profitability
    "gross_margin": BenchmarkRange(
        excellent=0.40,
        good=0.30,
        average=0.20,
        poor=0.10,
        unit="percentage",
        description=(
            "Gross profit as a percentage of revenue. Higher margins indicate "
            "better pricing power and cost control."
        ),
        calculation="(Revenue - Cost of Goods Sold) / Revenue",
    ),
    "net_margin": BenchmarkRange(
        excellent=0.20,
        good=0.15,
        average=0.10,
        poor=0.05,
        unit="percentage",
        description=(
            "Net income as a percentage of revenue. Measures overall "
            "profitability after all expenses."
        ),
        calculation="Net Income / Revenue",
    ),
    "ebitda_margin": BenchmarkRange(
        excellent=0.25,
        good=0.20,
        average=0.15,
        poor=0.10,
        unit="percentage",
        description=(
            "EBITDA as a percentage of revenue. Measures operational "
            "profitability before interest, taxes, depreciation, and "
            "amortization."
        ),
        calculation="EBITDA / Revenue",
    ),
    # Liquidity
    "current_ratio": BenchmarkRange(
        excellent=2.0,
        good=1.5,
        average=1.0,
        poor=0.8,
        unit="ratio",
        description=(
            "Ability to pay short-term obligations with current assets. "
            "Higher ratios indicate better liquidity."
        ),
        calculation="Current Assets / Current Liabilities",
    ),
    "quick_ratio": BenchmarkRange(
        excellent=1.5,
        good=1.0,
        average=0.8,
        poor=0.5,
        unit="ratio",
        description=(
            "Ability to pay short-term obligations with most liquid assets "
            "(excluding inventory)."
        ),
        calculation=(
            "(Cash + Marketable Securities + Accounts Receivable) / "
            "Current Liabilities"
        ),
    ),
    # Leverage
    "debt_to_equity": BenchmarkRange(
        excellent=0.3,
        good=0.5,
        average=1.0,
        poor=2.0,
        unit="ratio",
        description=(
            "Total debt relative to shareholders' equity. Lower ratios "
            "indicate less financial risk."
        ),
        calculation="Total Debt / Shareholders' Equity",
    ),
    # Efficiency
    "ar_days": BenchmarkRange(
        excellent=30,
        good=45,
        average=60,
        poor=90,
        unit="days",
        description=(
            "Days Sales Outstanding - average time to collect receivables. "
            "Lower is better."
        ),
        calculation="(Accounts Receivable / Revenue) x Period Days",
    ),
    "ap_days": BenchmarkRange(
        excellent=45,
        good=60,
        average=75,
        poor=90,
        unit="days",
        description="Days Payable Outstanding - average time to pay suppliers.",
        calculation="(Accounts Payable / Cost of Goods Sold) x Period Days",
    ),
    # Growth
    "revenue_cagr_3y": BenchmarkRange(
        excellent=0.25,
        good=0.15,
        average=0.08,
        poor=0.02,
        unit="annual percentage",
        description=(
            "Compound Annual Growth Rate over 3 years. Higher growth "
            "indicates expanding business."
        ),
        calculation="(Final Revenue / Initial Revenue)^(1/3) - 1",
    ),
    # Working capital
    "ccc_days": BenchmarkRange(
        excellent=30,
        good=60,
        average=90,
        poor=120,
        unit="days",
        description=(
            "Cash Conversion Cycle - time from paying suppliers to "
            "collecting from customers. Lower is better."
        ),
        calculation="AR Days + Inventory Days - AP Days",
    ),
    "wc_to_sales": BenchmarkRange(
        excellent=0.10,
        good=0.15,
        average=0.25,
        poor=0.40,
        unit="percentage",
        description=(
            "Working capital as a percentage of sales. Lower ratios indicate "
            "more efficient working capital management."
        ),
        calculation="(Current Assets - Current Liabilities) / Revenue",
    ),
}


def benchmark_status(metric_id: str, value: Optional[float]) -> str:
    """Position a metric value against its benchmark range.

    Returns:
        'excellent', 'good', 'average' or 'poor'; 'unknown' when the metric
        has no benchmark or the value is None.
    """
    benchmark = FINANCIAL_BENCHMARKS.get(metric_id)
    if benchmark is None or value is None:
        return "unknown"

    levels = (
        ("excellent", benchmark.excellent),
        ("good", benchmark.good),
        ("average", benchmark.average),
    )
    for status, threshold in levels:
        if benchmark.higher_is_better and value >= threshold:
            return status
        if not benchmark.higher_is_better and value <= threshold:
            return status
    return "poor"


def compare_to_benchmarks(metrics: Mapping[str, Optional[float]]) -> dict[str, str]:
    """Benchmark status of every metric that has a benchmark range."""
    return {
        key: benchmark_status(key, value)
        for key, value in metrics.items()
        if key in FINANCIAL_BENCHMARKS
    }


def status_color(status: str) -> str:
    """Traffic-light colour of a benchmark status."""
    if status in ("excellent", "good"):
        return "green"
    if status == "average":
        return "yellow"
    if status == "poor":
        return "red"
    return "neutral"
