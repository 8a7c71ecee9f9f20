"""Configuration loader for Koord semantic analysis."""

import tomllib
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ValidationError

from koord.log import get_logger

logger = get_logger(__name__)

CONFIG_DIR_NAME = ".koord"
"""Directory holding Koord configuration, locally and in the home directory."""

CONFIG_FILE_NAME = "config.toml"
"""Configuration file name inside CONFIG_DIR_NAME."""

ANALYSIS_TABLE = "analysis"
"""TOML table holding the analysis options."""


class RedefinitionPolicy(str, Enum):
    """What to do when a record type is defined twice under one name."""

    REJECT = "reject"
    """Report the type name as a multiple declaration."""

    REPLACE = "replace"
    """Let the later definition replace the earlier one."""


class AnalysisConfig(BaseModel):
    """Options controlling a semantic analysis run."""

    record_redefinition: RedefinitionPolicy = RedefinitionPolicy.REJECT
    verbose: bool = False


def _read_analysis_table(config_path: Path) -> AnalysisConfig | None:
    """Read the analysis table from a single config file.

    Args:
        config_path: Path to a config.toml file.

    Returns:
        Parsed configuration, or None if the file is missing, unreadable,
        or has no analysis table.

    """
    if not config_path.exists():
        return None
    try:
        with config_path.open("rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug("Failed to load config %s: %s", config_path, e)
        return None

    table = config.get(ANALYSIS_TABLE)
    if not isinstance(table, dict):
        return None
    try:
        return AnalysisConfig.model_validate(table)
    except ValidationError as e:
        logger.debug("Invalid analysis config in %s: %s", config_path, e)
        return None


def load_analysis_config(
    working_dir: Path,
    *,
    home_dir: Path | None = None,
) -> AnalysisConfig:
    """Load analysis configuration with priority: local > global > defaults.

    Args:
        working_dir: Directory whose .koord/config.toml is checked first.
        home_dir: Home directory override, mainly for tests.

    Returns:
        The effective analysis configuration.

    """
    home = home_dir if home_dir is not None else Path.home()
    candidates = [
        working_dir / CONFIG_DIR_NAME / CONFIG_FILE_NAME,
        home / CONFIG_DIR_NAME / CONFIG_FILE_NAME,
    ]
    for path in candidates:
        config = _read_analysis_table(path)
        if config is not None:
            logger.debug("Loaded analysis config from %s", path)
            return config

    return AnalysisConfig()
