# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
DealScope
---------

A deterministic financial-metrics engine for deal due diligence. It takes
raw accounting line items (from CSV/XLSX exports or any upstream
extractor), normalizes them into a canonical chart of accounts and derives
the indicators used to screen a deal.

Main capabilities:
- canonical account model with an extensible alias table,
- periodicity detection for annual, quarterly and monthly period keys,
- declarative ratio registry (margins, liquidity, leverage,
  working-capital days, cash conversion cycle, 3-year revenue CAGR),
- flat "latest value" metric map and per-period metric tables,
- due-diligence signals banded into pass / caution / fail / na,
- document inventory of income statement, balance sheet and cash flow,
- industry benchmark positioning,
- TOML configuration and a command-line interface.

The engine itself is pure: it performs no I/O and keeps no state between
calls. File reading, configuration and rendering live in separate modules.

Version: 0.1.0

Usage:
    python -m dealscope.cli --help
"""

__all__ = ["engine", "ratios", "signals", "inventory", "pipeline"]

__version__ = "0.1.0"
