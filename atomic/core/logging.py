"""Logging setup for applications and scripts using atomic.

Library modules never configure handlers; they only call ``get_logger``.
"""

import logging
import logging.config
import os
from pathlib import Path
from typing import Optional, Union

import yaml

from atomic.core.config import settings

CONFIG_DIR = Path(__file__).parent.parent.parent / "config"

SQLALCHEMY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def resolve_config_path(
    config_path: Optional[str] = None, env_key: str = "LOG_CFG"
) -> Path:
    """Pick the logging config file to load.

    Order: the ``env_key`` environment variable, ``config_path``,
    ``settings.LOG_CFG``, ``config/logging.<ENVIRONMENT>.yaml`` and finally
    ``config/logging.yaml``.
    """
    explicit = os.getenv(env_key) or config_path or settings.LOG_CFG
    if explicit:
        return Path(explicit)

    per_environment = CONFIG_DIR / f"logging.{settings.ENVIRONMENT.lower()}.yaml"
    if per_environment.exists():
        return per_environment
    return CONFIG_DIR / "logging.yaml"


def setup_logging(
    config_path: Optional[str] = None,
    default_level: Union[int, str] = logging.INFO,
    env_key: str = "LOG_CFG",
) -> None:
    """
    Configure logging from a YAML ``dictConfig`` file.

    Falls back to ``logging.basicConfig(level=default_level)`` with a warning
    when the file is missing or cannot be applied.

    Args:
        config_path: path to a logging config file
        default_level: level for the fallback configuration
        env_key: environment variable overriding every other path
    """
    path = resolve_config_path(config_path, env_key)
    logger = logging.getLogger(__name__)

    if not path.exists():
        logging.basicConfig(level=default_level)
        logger.warning(f"Logging config file not found at {path}")
        return

    try:
        with open(path, "r") as f:
            logging.config.dictConfig(yaml.safe_load(f))
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        logging.basicConfig(level=default_level)
        logger.warning(f"Failed to load logging config, using basic config: {e}")
        return

    logger.info(f"Logging configured from {path}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_sqlalchemy_logging(echo: bool = False, echo_pool: bool = False) -> None:
    """Show SQL statements and pool events at INFO, or quiet them to WARNING."""
    for name, enabled in zip(SQLALCHEMY_LOGGERS, (echo, echo_pool)):
        logging.getLogger(name).setLevel(logging.INFO if enabled else logging.WARNING)
