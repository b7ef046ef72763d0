"""
Connection configuration for the serverless PostgreSQL connection.

The resolved configuration is created once per connection by merging the
caller's overrides onto the defaults and is immutable afterwards.
"""

import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable, Dict, Optional

from ..helper.error import ValidationError


@dataclass(frozen=True)
class ConnConfig:
    """Resolved configuration of a serverless connection."""

    max_connections_poll_interval_ms: float = 60000
    manual_max_connections: bool = False
    max_connections: int = 100
    min_idle_seconds: float = 0.5
    max_idle_connections_to_kill: Optional[int] = None
    connection_utilization_threshold: float = 0.8
    debug: bool = False
    backoff_cap_ms: float = 1000
    backoff_base_ms: float = 2
    backoff_delay_ms: float = 1000
    max_retries: int = 3


@dataclass
class ConnConfigParams:
    """
    Caller supplied overrides for ConnConfig.
    A field left at None keeps the default, so zero and False are real overrides.
    """

    max_connections_poll_interval_ms: Optional[float] = None
    manual_max_connections: Optional[bool] = None
    max_connections: Optional[int] = None
    min_idle_seconds: Optional[float] = None
    max_idle_connections_to_kill: Optional[int] = None
    connection_utilization_threshold: Optional[float] = None
    debug: Optional[bool] = None
    backoff_cap_ms: Optional[float] = None
    backoff_base_ms: Optional[float] = None
    backoff_delay_ms: Optional[float] = None
    max_retries: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the set fields to a dictionary."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnConfigParams":
        """Create ConnConfigParams from dictionary, ignoring unknown keys."""
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})

    @classmethod
    def from_env(cls) -> "ConnConfigParams":
        """
        Create overrides from environment variables.
        Every field maps to PGSERVERLESS_<FIELD_NAME_UPPERCASE>, for example
        PGSERVERLESS_MAX_CONNECTIONS. Unset variables are not overridden.
        """
        converters: Dict[str, Callable[[str], Any]] = {
            "max_connections_poll_interval_ms": float,
            "manual_max_connections": _parse_bool,
            "max_connections": int,
            "min_idle_seconds": float,
            "max_idle_connections_to_kill": int,
            "connection_utilization_threshold": float,
            "debug": _parse_bool,
            "backoff_cap_ms": float,
            "backoff_base_ms": float,
            "backoff_delay_ms": float,
            "max_retries": int,
        }

        values: Dict[str, Any] = {}
        for name, convert in converters.items():
            raw = os.getenv(f"PGSERVERLESS_{name.upper()}")
            if raw is None or raw.strip() == "":
                continue
            try:
                values[name] = convert(raw.strip())
            except ValueError as e:
                raise ValidationError(f"{name} has an invalid value: {raw}") from e

        return cls(**values)


def _parse_bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes", "on")


def new_default_config() -> ConnConfig:
    """Create the default connection configuration."""
    return ConnConfig()


def validate_int(name: str, value: int) -> None:
    if value < 0:
        raise ValidationError(f"{name} should not be negative")


def validate_float(name: str, value: float) -> None:
    if value < 0:
        raise ValidationError(f"{name} should not be negative")


def validate_connections_utilization(value: float) -> None:
    if value < 0:
        raise ValidationError("connectionsUtilization should not be negative")

    if value > 1:
        raise ValidationError("connectionsUtilization should not be bigger than 1")


def merge_and_validate(
    config: ConnConfig, params: Optional[ConnConfigParams]
) -> ConnConfig:
    """
    Merge the overrides onto the given configuration.

    Fields are validated in a fixed order and the first invalid field raises,
    discarding everything merged so far:
    debug, max_connections, max_retries, connection_utilization_threshold,
    max_connections_poll_interval_ms, max_idle_connections_to_kill,
    min_idle_seconds, backoff_base_ms, backoff_cap_ms, backoff_delay_ms,
    manual_max_connections.

    :param config: The configuration to start from, usually the defaults.
    :param params: The caller's overrides, None for no overrides.
    :returns: The merged configuration.
    :raises ValidationError: If an override is out of range.
    """
    if params is None:
        return config

    changes: Dict[str, Any] = {}

    if params.debug is not None:
        changes["debug"] = params.debug
    if params.max_connections is not None:
        validate_int("max_connections", params.max_connections)
        changes["max_connections"] = params.max_connections
    if params.max_retries is not None:
        validate_int("max_retries", params.max_retries)
        changes["max_retries"] = params.max_retries
    if params.connection_utilization_threshold is not None:
        validate_connections_utilization(params.connection_utilization_threshold)
        changes["connection_utilization_threshold"] = (
            params.connection_utilization_threshold
        )
    if params.max_connections_poll_interval_ms is not None:
        validate_float(
            "max_connections_poll_interval_ms",
            params.max_connections_poll_interval_ms,
        )
        changes["max_connections_poll_interval_ms"] = (
            params.max_connections_poll_interval_ms
        )
    if params.max_idle_connections_to_kill is not None:
        validate_int(
            "max_idle_connections_to_kill", params.max_idle_connections_to_kill
        )
        changes["max_idle_connections_to_kill"] = params.max_idle_connections_to_kill
    if params.min_idle_seconds is not None:
        validate_float("min_idle_seconds", params.min_idle_seconds)
        changes["min_idle_seconds"] = params.min_idle_seconds
    if params.backoff_base_ms is not None:
        validate_float("backoff_base_ms", params.backoff_base_ms)
        changes["backoff_base_ms"] = params.backoff_base_ms
    if params.backoff_cap_ms is not None:
        validate_float("backoff_cap_ms", params.backoff_cap_ms)
        changes["backoff_cap_ms"] = params.backoff_cap_ms
    if params.backoff_delay_ms is not None:
        validate_float("backoff_delay_ms", params.backoff_delay_ms)
        changes["backoff_delay_ms"] = params.backoff_delay_ms
    if params.manual_max_connections is not None:
        changes["manual_max_connections"] = params.manual_max_connections

    return replace(config, **changes)
