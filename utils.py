"""
Utility helpers for filesystem paths and date parsing.

Centralizes logic for resolving project-relative paths (log files, the
household data file) and for parsing the ISO calendar dates used in every
persisted record.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent
_DEFAULT_HOUSEHOLD_FILE = "data/household.yaml"


def get_project_root() -> Path:
    """Return the directory relative config paths are resolved against."""
    return _PROJECT_ROOT


def _coerce_path(path_value: str | Path) -> Path:
    # Relative paths in config.yaml are relative to the project root, not the cwd
    path = Path(path_value)
    if path.is_absolute():
        return path
    return get_project_root() / path


def resolve_household_path(config: Optional[Dict[str, Any]] = None) -> Path:
    """
    Resolve the household data file from the ``data`` config section.

    The file is not created here; loading a missing file is reported by
    ``household.load_household``.

    Args:
        config: Optional configuration dictionary.

    Returns:
        Absolute path to the household YAML file.
    """
    data_config = (config or {}).get("data", {}) or {}
    return _coerce_path(data_config.get("household_file") or _DEFAULT_HOUSEHOLD_FILE)


def resolve_log_path(log_path: str) -> Path:
    """Resolve the configured log file and create its directory."""
    resolved = _coerce_path(log_path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved


def parse_iso_date(value: Any) -> date:
    """
    Parse an ISO calendar date (YYYY-MM-DD).

    Accepts ``date`` instances unchanged and strips the time component from
    ``datetime`` values and full ISO timestamps, since period boundaries are
    date-only. Any other trailing text is rejected.

    Raises:
        ValueError: If the value is not a valid ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected ISO date string, got {type(value).__name__}")
    text = value.strip()
    if "T" in text:
        return datetime.fromisoformat(text).date()
    if len(text) != 10:
        raise ValueError(f"Expected YYYY-MM-DD, got '{value}'")
    return datetime.strptime(text, "%Y-%m-%d").date()
