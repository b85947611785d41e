# DealScope - Financial due-diligence metrics engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for DealScope.

This module is responsible for:
- loading the application configuration from a TOML file,
- validating its values,
- exposing a typed, immutable AppConfig used by the pipeline and the CLI.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import tomllib  # Python 3.11+

from .periods import ORDERINGS, PERIODICITIES

DEFAULT_CONFIG_FILE = "dealscope_config.toml"
DISPLAY_MODES: tuple[str, ...] = ("table", "json", "csv")


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for DealScope.

    Attributes:
        period_ordering: 'lexical' or 'chronological', used to pick the
            latest period.
        concentration_ratio: Optional default customer/product
            concentration (0..1) fed to the DD signals.
        periodicity: Optional periodicity override. When None, the
            periodicity is detected from the period keys.
        aliases_file: Optional CSV of extra account aliases.
        display_mode: 'table', 'json' or 'csv'.
        decimals: Number of decimals used when rendering values.
    """

    period_ordering: str = "lexical"
    concentration_ratio: Optional[float] = None
    periodicity: Optional[str] = None
    aliases_file: Optional[Path] = None
    display_mode: str = "table"
    decimals: int = 2


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Config section [{name}] must be a table.")
    return section


def _parse_choice(value: Any, allowed: tuple[str, ...], setting: str) -> str:
    text = str(value)
    if text not in allowed:
        raise ValueError(
            f"Invalid value {text!r} for '{setting}'. "
            f"Expected one of: {', '.join(allowed)}."
        )
    return text


def _parse_concentration(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        ratio = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'analysis.concentration_ratio'. Expected a number."
        ) from exc
    if not 0.0 <= ratio <= 1.0:
        raise ValueError("'analysis.concentration_ratio' must be between 0 and 1.")
    return ratio


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the DealScope configuration from a TOML file.

    Expected sections in the TOML file (all optional)
    -------------------------------------------------
    [analysis]
        period_ordering     = "lexical" | "chronological"
        concentration_ratio = number between 0 and 1
        periodicity         = "monthly" | "quarterly" | "annual"

    [accounts]
        aliases_file = path to a CSV of extra account aliases

    [display]
        mode     = "table" | "json" | "csv"
        decimals = integer

    Notes
    -----
    - When ``config_path`` is omitted, 'dealscope_config.toml' in the current
      directory is used if it exists; otherwise defaults apply.
    - File paths in the TOML are resolved relative to the TOML file.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file.

    Returns
    -------
    AppConfig
        Parsed and validated configuration.

    Raises
    ------
    FileNotFoundError
        If an explicit ``config_path`` does not exist.
    ValueError
        If the file cannot be parsed or a value is invalid.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return AppConfig()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Analysis options
    analysis = _section(raw, "analysis")
    period_ordering = _parse_choice(
        analysis.get("period_ordering", "lexical"),
        ORDERINGS,
        "analysis.period_ordering",
    )
    concentration_ratio = _parse_concentration(analysis.get("concentration_ratio"))

    raw_periodicity = analysis.get("periodicity")
    periodicity: Optional[str]
    if raw_periodicity is None or raw_periodicity == "":
        periodicity = None
    else:
        periodicity = _parse_choice(
            raw_periodicity, PERIODICITIES, "analysis.periodicity"
        )

    # 2) Accounts options
    accounts = _section(raw, "accounts")
    aliases_raw = accounts.get("aliases_file")
    aliases_file = (base_dir / str(aliases_raw)).resolve() if aliases_raw else None

    # 3) Display options
    display = _section(raw, "display")
    display_mode = _parse_choice(
        display.get("mode", "table"), DISPLAY_MODES, "display.mode"
    )
    try:
        decimals = int(display.get("decimals", 2))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'display.decimals'. Expected an integer."
        ) from exc

    return AppConfig(
        period_ordering=period_ordering,
        concentration_ratio=concentration_ratio,
        periodicity=periodicity,
        aliases_file=aliases_file,
        display_mode=display_mode,
        decimals=decimals,
    )
