"""Stored service settings (precheck scan cap, log listing page size)."""

import json
from pathlib import Path
from typing import Any

from storyline.store import StoreError

_CONFIG_DEFAULTS: dict[str, Any] = {
    "npc_scan_limit": 500,
    "event_list_limit": 100,
}


def _config_path(base: Path) -> Path:
    return base / "config.json"


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def get_config(base: Path) -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config: dict[str, Any] = dict(_CONFIG_DEFAULTS)
    path = _config_path(base)
    if path.is_file():
        try:
            stored = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read config.json: {e}") from e
        for key in _CONFIG_DEFAULTS:
            if key in stored and _positive_int(stored[key]):
                config[key] = stored[key]
    return config


def update_config(base: Path, fields: dict[str, Any]) -> dict[str, Any]:
    """Merge known fields into config and persist. Returns full config.

    Raises ValueError for a known key with a value that isn't a positive int.
    Unknown keys are ignored.
    """
    config = get_config(base)
    for key in _CONFIG_DEFAULTS:
        if key in fields:
            if not _positive_int(fields[key]):
                raise ValueError(f"{key} must be a positive integer")
            config[key] = fields[key]
    try:
        _config_path(base).write_text(json.dumps(config, indent=2))
    except OSError as e:
        raise StoreError(f"Cannot write config.json: {e}") from e
    return config
