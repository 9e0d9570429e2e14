#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants for the Lorekeeper project.

The project structure:
    ROOT/
    ├── lorekeeper/    # Package code (migrations live in lorekeeper/migrations)
    ├── data/          # Wiki database and era configuration
    └── logs/          # Application logs

Every constant can be overridden from the command line; these are only the
defaults.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine the project root directory.

    Assumes this file is at ROOT/lorekeeper/core/paths.py.

    Raises:
        RuntimeError: If the layout does not look like a Lorekeeper checkout
    """
    current_file = Path(__file__).resolve()
    root = current_file.parent.parent.parent

    if not (root / "lorekeeper").is_dir():
        raise RuntimeError(
            f"Cannot determine valid project root. "
            f"Expected {root / 'lorekeeper'} to exist. "
            f"Current file: {current_file}"
        )

    return root


# ----- Project directory -----
ROOT: Path = _get_project_root()
PACKAGE_DIR = ROOT / "lorekeeper"
DATA_DIR = ROOT / "data"

# --- Database ---
ALEMBIC_DIR = PACKAGE_DIR / "migrations"
DB_PATH = DATA_DIR / "lorekeeper.db"

# --- Configuration ---
ERAS_FILE = DATA_DIR / "eras.yaml"

# --- Logs ---
LOG_DIR = ROOT / "logs"
