"""Rider and route defaults loaded from JSON config files."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "pacing-optimizer"
CONFIG_PATH = CONFIG_DIR / "pacing-optimizer.json"
LOCAL_CONFIG_PATH = Path("pacing-optimizer.json")


def load_config(paths: list[Path] | None = None) -> dict:
    """Load configuration from config files.

    Merges config from global and local files:
    1. ~/.config/pacing-optimizer/pacing-optimizer.json (global, loaded first)
    2. ./pacing-optimizer.json (local, overrides global)

    Files that are missing are ignored; files that cannot be read or are not
    a JSON object are skipped with a warning.

    Returns:
        Dict with merged config values, empty dict if no files exist.
    """
    if paths is None:
        paths = [CONFIG_PATH, LOCAL_CONFIG_PATH]

    config = {}
    for config_path in paths:
        if not config_path.exists():
            continue
        try:
            with config_path.open() as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable config file %s: %s", config_path, e)
            continue
        if not isinstance(data, dict):
            logger.warning("Ignoring config file %s: expected a JSON object", config_path)
            continue
        config.update(data)
    return config
