"""Configuration loader for the policy engine."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

_CONFIG_PATH = Path(__file__).resolve().parent / "config.yml"


@lru_cache(maxsize=1)
def load_config() -> Dict[str, Any]:
    """Load the YAML configuration for the engine.

    The function caches the parsed YAML so repeated calls are inexpensive.
    """

    if not _CONFIG_PATH.exists():  # pragma: no cover
        raise FileNotFoundError(f"Config file not found at {_CONFIG_PATH}")
    with _CONFIG_PATH.open("r", encoding="utf-8") as handle:
        data: Dict[str, Any] = yaml.safe_load(handle) or {}
    return data


def get_setting(section: str, name: str, default: Any = None) -> Any:
    """Return ``name`` from a configuration section, or ``default``."""

    values = load_config().get(section) or {}
    return values.get(name, default)


def get_weight(name: str, default: float = 0.0) -> float:
    """Convenience accessor for scoring weights in the configuration."""

    return float(get_setting("scoring", name, default))
