"""
Utility functions for configuration and logging.
"""

import logging
from typing import Any, Dict, Optional

import config as default_config

from .exceptions import ConfigurationError
from .executor import MATCH_MODES

PACKAGE_LOGGER = "fuzzy_search"


class Config:
    """Settings object built from the default config module plus overrides."""

    def __init__(self, settings: Dict[str, Any]):
        for key, value in settings.items():
            setattr(self, key, value)


def load_config(config_dict: Optional[Dict[str, Any]] = None) -> Any:
    """
    Load configuration from the config module, applying overrides.

    Args:
        config_dict: Optional settings replacing the module defaults.

    Returns:
        The config module itself, or a Config object when overrides are given.
    """
    if not config_dict:
        return default_config
    settings = {key: getattr(default_config, key) for key in dir(default_config) if key.isupper()}
    settings.update(config_dict)
    return Config(settings)


def validate_config(cfg: Any) -> None:
    """
    Reject settings the engine cannot run with.

    Raises:
        ConfigurationError: On the first invalid setting found.
    """
    for name in ("SINGLE_WORD_ALTERNATES", "MULTI_WORD_ALTERNATES"):
        value = getattr(cfg, name)
        if not isinstance(value, int) or value < 0:
            raise ConfigurationError(f"{name} must be a non-negative integer, got {value!r}")

    if cfg.MATCH_MODE not in MATCH_MODES:
        raise ConfigurationError(f"MATCH_MODE must be one of {MATCH_MODES}, got {cfg.MATCH_MODE!r}")

    weights = dict(cfg.FIELD_WEIGHTS)
    weights["<default>"] = cfg.DEFAULT_FIELD_WEIGHT
    for field_name, weight in weights.items():
        if weight <= 0:
            raise ConfigurationError(f"Field weight for {field_name!r} must be positive, got {weight}")

    if cfg.POSITION_DECAY < 0:
        raise ConfigurationError(f"POSITION_DECAY must not be negative, got {cfg.POSITION_DECAY}")

    top_k = cfg.TOP_K_RESULTS
    if top_k is not None and (not isinstance(top_k, int) or top_k < 0):
        raise ConfigurationError(f"TOP_K_RESULTS must be None or a non-negative integer, got {top_k!r}")

    timeout = cfg.REBUILD_TIMEOUT
    if timeout is not None and (not isinstance(timeout, (int, float)) or timeout < 0):
        raise ConfigurationError(f"REBUILD_TIMEOUT must be None or a non-negative number, got {timeout!r}")


def configure_logging(level: str) -> logging.Logger:
    """
    Set the level of the package logger.

    Handlers are left to the application; this only controls verbosity.
    """
    numeric = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(numeric, int):
        raise ConfigurationError(f"Unknown log level {level!r}")
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric)
    return logger
