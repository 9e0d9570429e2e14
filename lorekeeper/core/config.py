#!/usr/bin/env python3
"""
config.py
--------------------
YAML configuration for era ordering.

Era order normally lives on each World row (era_order column). An eras
file supplies it for worlds that have none, either as one list shared by
every world or per world name:

    # data/eras.yaml
    eras:
      - First Age
      - Second Age
      - Third Age

    worlds:
      Arda:
        - Years of the Trees
        - First Age

A world listed under "worlds" uses its own list; every other world falls
back to the top-level "eras" list.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

# --- Third party imports ---
import yaml

# --- Local imports ---
from lorekeeper.chronology.eras import EraRegistry
from lorekeeper.core.exceptions import ValidationError
from lorekeeper.core.logging_manager import LorekeeperLogger
from lorekeeper.core.validators import DataValidator


@dataclass
class EraConfig:
    """
    Era lists loaded from an eras file.

    Attributes:
        default: Era order shared by every world
        worlds: Per-world era order keyed by world name
    """

    default: List[str] = field(default_factory=list)
    worlds: Dict[str, List[str]] = field(default_factory=dict)

    def eras_for(self, world_name: Optional[str]) -> List[str]:
        if world_name is not None:
            name = DataValidator.normalize_string(world_name)
            if name in self.worlds:
                return self.worlds[name]
        return self.default

    def registry_for(
        self,
        world_name: Optional[str],
        logger: Optional[LorekeeperLogger] = None,
    ) -> EraRegistry:
        """Build the EraRegistry that applies to a world."""
        return EraRegistry(self.eras_for(world_name), logger=logger)


def _era_list(value: Any, where: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, list):
        raise ValidationError(f"{where} must be a list of era names")
    return DataValidator.normalize_string_list(value)


def load_eras(path: Union[str, Path]) -> EraConfig:
    """
    Load era configuration from a YAML file.

    Args:
        path: Eras file; a missing file yields an empty configuration

    Returns:
        EraConfig

    Raises:
        ValidationError: If the file is not valid YAML or has the wrong shape
    """
    path = Path(path).expanduser()
    if not path.is_file():
        return EraConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid eras file {path}: {e}")

    if data is None:
        return EraConfig()
    if not isinstance(data, dict):
        raise ValidationError(f"Invalid eras file {path}: expected a mapping")

    worlds_data = data.get("worlds") or {}
    if not isinstance(worlds_data, dict):
        raise ValidationError(f"Invalid eras file {path}: 'worlds' must be a mapping")

    worlds: Dict[str, List[str]] = {}
    for world_name, eras in worlds_data.items():
        name = DataValidator.normalize_string(world_name)
        if name:
            worlds[name] = _era_list(eras, f"worlds.{name}")

    return EraConfig(default=_era_list(data.get("eras"), "eras"), worlds=worlds)
