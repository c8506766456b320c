"""Configuration for the budget planner.

Paths and the log level can be overridden through environment variables;
engine constants live here so the app and the engine agree on them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

# Base project root - assumes this file is in budgetcore/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("BUDGET_DATA_DIR", _PROJECT_ROOT / "data"))

# Local state blob (transactions, plans, custom categories, tax input)
STATE_PATH = Path(
    os.getenv("BUDGET_STATE_PATH", DATA_DIR / "budget_state.json")
).resolve()

LOG_LEVEL = os.getenv("BUDGET_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

DEFAULT_NHF_RATE = 2.5
PIE_MAX_SLICES = 5
VIEW_CACHE_SIZE = 64


def configure_logging(level: str | None = None) -> None:
    """Set up root logging once for the app entrypoint."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)


def ensure_data_directory() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
