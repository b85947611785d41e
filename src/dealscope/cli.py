# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for DealScope.

This module wires together the main building blocks of DealScope:

- configuration (period ordering, concentration, aliases, display options),
- CSV/XLSX reading of period/account/value rows,
- the analysis pipeline (metrics, DD signals, benchmarks, inventory),
- view helpers (tabular rendering).

The CLI is intentionally thin: it does not implement any financial logic
itself. It orchestrates the underlying modules based on command-line
arguments and the configuration file.


High-level pipeline
-------------------

1) Load the TOML configuration (dealscope_config.toml by default, if
   present) using ``load_app_config()``.

2) Resolve options, CLI arguments taking precedence over the
   configuration: period ordering, periodicity override, concentration
   ratio, extra aliases file, display mode.

3) Read every input file, concatenate their rows and run
   ``analyze_rows()``.

4) Render the result as console tables, a JSON document, or CSV files.


Display modes
-------------

- ``table`` (default):
    Print metrics, per-period metrics, DD signals and, when statement
    kinds are available, the document inventory.

- ``json``:
    Print the JSON payload of ``AnalysisResult.to_dict()``.

- ``csv``:
    Write one CSV file per table into ``--output`` (default
    ``data/output``), with a timestamp-based name such as
    ``metrics_YYYY-MM-DD-HH-MM-SS.csv``.


Examples
--------

    python -m dealscope.cli financials.csv
    python -m dealscope.cli is.xlsx bs.xlsx cf.xlsx --deal-id acme \\
        --concentration 0.22
    python -m dealscope.cli financials.csv \\
        --period-ordering chronological --display-mode json
"""

import argparse
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from . import __version__
from .accounts import load_alias_table
from .config import DISPLAY_MODES, AppConfig, load_app_config
from .periods import ORDERINGS, PERIODICITIES
from .pipeline import AnalysisResult, analyze_rows, read_files
from .views import (
    inventory_to_dataframe,
    metrics_by_period_table,
    metrics_to_dataframe,
    signals_to_dataframe,
)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m dealscope.cli",
        description=(
            "DealScope - Financial due-diligence metrics engine. "
            "Reads period/account/value rows from CSV or XLSX files, "
            "normalizes them into canonical accounts, computes financial "
            "ratios, due-diligence signals, benchmarks and a document "
            "inventory."
        ),
    )

    ap.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="CSV/XLSX files with period, account, value[, statement] columns.",
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of dealscope and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'dealscope_config.toml' in the current directory is used when it "
            "exists."
        ),
    )
    ap.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    # Analysis options
    ap.add_argument(
        "--deal-id",
        dest="deal_id",
        help="Deal identifier. Defaults to the name of the first input file.",
    )
    ap.add_argument(
        "--concentration",
        dest="concentration",
        type=float,
        help="Top customer/product revenue share (0..1) for the DD signals.",
    )
    ap.add_argument(
        "--period-ordering",
        dest="period_ordering",
        choices=list(ORDERINGS),
        help=(
            "How the latest period is selected: 'lexical' string sort or "
            "'chronological' parsed ordering. Overrides the configuration."
        ),
    )
    ap.add_argument(
        "--periodicity",
        choices=list(PERIODICITIES),
        help="Force the periodicity instead of detecting it from period keys.",
    )
    ap.add_argument(
        "--aliases",
        dest="aliases_path",
        help="CSV file of extra account aliases (alias, canonical).",
    )

    # Display options
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=list(DISPLAY_MODES),
        help="Override the display.mode setting from the configuration file.",
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory for CSV files when display mode is 'csv'. "
            "If omitted, 'data/output' is used."
        ),
    )
    return ap


def _print_tables(result: AnalysisResult, decimals: int) -> None:
    print(
        f"Deal: {result.deal_id} | periodicity: {result.periodicity} | "
        f"periods: {', '.join(result.periods)}"
    )

    print()
    print("=== Metrics (latest period) ===")
    print(metrics_to_dataframe(result.metrics, decimals).to_string(index=False))

    by_period = metrics_by_period_table(result.metrics_by_period, decimals)
    if not by_period.empty:
        print()
        print("=== Metrics by period ===")
        print(by_period.to_string(index=False))

    print()
    print("=== Due-diligence signals ===")
    print(signals_to_dataframe(result.signals, decimals).to_string(index=False))

    if result.inventory is not None:
        print()
        print("=== Document inventory ===")
        print(inventory_to_dataframe(result.inventory).to_string(index=False))


def _write_csv(result: AnalysisResult, output_dir: Path, decimals: int) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")

    tables = {
        "metrics": metrics_to_dataframe(result.metrics, decimals),
        "metrics_by_period": metrics_by_period_table(
            result.metrics_by_period, decimals
        ),
        "signals": signals_to_dataframe(result.signals, decimals),
    }
    if result.inventory is not None:
        tables["inventory"] = inventory_to_dataframe(result.inventory)

    for name, df in tables.items():
        path = output_dir / f"{name}_{timestamp}.csv"
        df.to_csv(path, index=False)
        print(f"Wrote {path} ({len(df)} rows)")


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the DealScope CLI.

    Parses command-line arguments, loads the configuration, reads the input
    files, runs the analysis pipeline and renders the result according to
    the display mode.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"dealscope version {__version__}")
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.files:
        parser.error("at least one input FILE is required.")

    # 1) Configuration
    try:
        config: AppConfig = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    # 2) Resolve options: CLI overrides configuration.
    ordering = args.period_ordering or config.period_ordering
    periodicity = args.periodicity or config.periodicity
    concentration = (
        args.concentration
        if args.concentration is not None
        else config.concentration_ratio
    )
    if concentration is not None and not 0.0 <= concentration <= 1.0:
        parser.error("--concentration must be between 0 and 1.")

    aliases_path = config.aliases_file
    if args.aliases_path:
        aliases_path = Path(args.aliases_path)
    aliases = None
    if aliases_path is not None:
        try:
            aliases = load_alias_table(str(aliases_path))
        except (FileNotFoundError, ValueError) as exc:
            parser.error(f"Invalid aliases file {aliases_path}: {exc}")

    deal_id = args.deal_id or Path(args.files[0]).stem

    # 3) Read files and run the analysis.
    try:
        rows = read_files(args.files)
        result = analyze_rows(
            rows,
            deal_id=deal_id,
            concentration_ratio=concentration,
            ordering=ordering,
            aliases=aliases,
            periodicity=periodicity,
        )
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    # 4) Render.
    display_mode = args.display_mode or config.display_mode
    if display_mode == "json":
        print(json.dumps(result.to_dict(), indent=2))
    elif display_mode == "csv":
        output_dir = Path(args.output_dir) if args.output_dir else Path("data/output")
        _write_csv(result, output_dir, config.decimals)
    else:
        _print_tables(result, config.decimals)


if __name__ == "__main__":
    main()
