"""Environment-based configuration and logging setup."""

import logging
import os
import sys
from os import PathLike
from typing import Optional, Union

from dotenv import load_dotenv

from .models.config import OrchestratorConfig, RetryPolicy

logger = logging.getLogger(__name__)

ENV_PREFIX = "COGNICHAIN_"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {ENV_PREFIX}{name}: {raw!r}, using {default}")
        return default


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {ENV_PREFIX}{name}: {raw!r}, using {default}")
        return default


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning(f"Invalid boolean for {ENV_PREFIX}{name}: {raw!r}, using {default}")
    return default


def load_config(env_file: Optional[Union[str, PathLike]] = None) -> OrchestratorConfig:
    """Build an OrchestratorConfig from ``COGNICHAIN_*`` environment variables.

    Values from ``env_file`` (or a ``.env`` found by python-dotenv) are loaded
    first; variables already set in the environment take precedence.
    """
    if env_file is not None:
        if os.path.exists(env_file):
            logger.info(f"Loading .env from {env_file}")
            load_dotenv(env_file)
        else:
            logger.warning(f"Env file {env_file} not found")
    else:
        load_dotenv()

    defaults = RetryPolicy.default()
    policy = RetryPolicy(
        max_retries=_get_int("MAX_RETRIES", defaults.max_retries),
        initial_delay_ms=_get_int("INITIAL_DELAY_MS", defaults.initial_delay_ms),
        backoff_multiplier=_get_float("BACKOFF_MULTIPLIER", defaults.backoff_multiplier),
        max_delay_ms=_get_int("MAX_DELAY_MS", defaults.max_delay_ms),
        use_jitter=_get_bool("USE_JITTER", defaults.use_jitter),
    )

    config_defaults = OrchestratorConfig()
    return OrchestratorConfig(
        retry_policy=policy,
        max_conversation_history=_get_int(
            "MAX_HISTORY", config_defaults.max_conversation_history
        ),
        enable_streaming=_get_bool("ENABLE_STREAMING", config_defaults.enable_streaming),
        retry_soft_failures=_get_bool(
            "RETRY_SOFT_FAILURES", config_defaults.retry_soft_failures
        ),
    )


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Send log records to stderr in the project's standard format."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
