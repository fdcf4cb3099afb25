"""
GrantStream Configuration

All settings come from environment variables so the same build can run in
development and production. Governance defaults apply to treasuries created
by ``init_treasury``; they start unlimited unless tightened here.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from grantstream.core.constants import U64_MAX
from grantstream.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw!r}")


def _get_amount(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if not 0 <= value <= U64_MAX:
        raise ConfigurationError(f"{name} must be between 0 and {U64_MAX}")
    return value


@dataclass(frozen=True)
class GrantConfig:
    environment: str = "development"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    metrics_enabled: bool = True
    default_max_grant_amount: int = U64_MAX
    default_max_total_allocation: int = U64_MAX


def load_config(env: Optional[Mapping[str, str]] = None) -> GrantConfig:
    """Build a :class:`GrantConfig` from ``env`` (defaults to ``os.environ``)."""
    env = os.environ if env is None else env

    log_level = env.get("GRANTSTREAM_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if log_level not in _LOG_LEVELS:
        raise ConfigurationError(
            f"GRANTSTREAM_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {log_level!r}"
        )

    config = GrantConfig(
        environment=env.get("GRANTSTREAM_ENVIRONMENT", "development").strip() or "development",
        log_level=log_level,
        log_file=env.get("GRANTSTREAM_LOG_FILE", "").strip() or None,
        metrics_enabled=_get_bool(env, "GRANTSTREAM_METRICS_ENABLED", True),
        default_max_grant_amount=_get_amount(env, "GRANTSTREAM_DEFAULT_MAX_GRANT_AMOUNT", U64_MAX),
        default_max_total_allocation=_get_amount(
            env, "GRANTSTREAM_DEFAULT_MAX_TOTAL_ALLOCATION", U64_MAX
        ),
    )
    logger.debug(
        "Configuration loaded",
        extra={"event": "config.loaded", "environment": config.environment},
    )
    return config
