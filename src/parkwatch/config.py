"""Service configuration for parkwatch."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from parkwatch._constants import (
    DEFAULT_ALLOWED_ORIGIN_SUFFIXES,
    DEFAULT_ALLOWED_ORIGINS,
    DEFAULT_PORT,
    DEFAULT_PRICING,
    DEFAULT_READERS,
    DEFAULT_TOTAL_SLOTS,
    LOG_RETAIN,
    LOG_TRIM_TRIGGER,
)
from parkwatch.exceptions import ParkwatchConfigError
from parkwatch.state.policy import AvailabilityPolicy


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env_int(env_key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ParkwatchConfigError(f"{env_key} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class ParkwatchConfig:
    """Service configuration.

    Parameters
    ----------
    total_slots : int
        Fixed lot capacity.  Every snapshot carries this many slots.
    host : str
        Interface the HTTP server binds to.
    port : int
        HTTP port.  ``PORT`` is honoured as well as ``PARKWATCH_PORT``.
    log_trim_trigger : int
        Log length that triggers a trim.
    log_retain : int
        Number of newest log entries kept after a trim.
    availability_policy : AvailabilityPolicy
        Which source of truth owns ``available``.  See
        :mod:`parkwatch.state.policy`.
    allowed_origins : tuple of str
        Origins allowed by exact match for cross-origin access.
    allowed_origin_suffixes : tuple of str
        Hostname suffixes allowed for cross-origin access
        (e.g. ``".vercel.app"`` for preview deployments).
    subscriber_queue_size : int
        Per-subscriber buffer of pending snapshot pushes.
    lot_name : str
        Display name published in the snapshot metadata.
    readers : tuple of str
        Reader topology description published in the snapshot metadata.
    pricing : str
        Pricing rule text published in the snapshot metadata.
    mqtt_enabled : bool
        Enable the MQTT bridge (event ingestion + snapshot publishing).
    mqtt_host : str
        MQTT broker host.
    mqtt_port : int
        MQTT broker port.
    mqtt_event_topic : str
        Topic the rig publishes JSON events on.
    mqtt_state_topic : str
        Topic snapshots are published to (retained).
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    """

    total_slots: int = DEFAULT_TOTAL_SLOTS
    host: str = "0.0.0.0"  # noqa: S104
    port: int = DEFAULT_PORT
    log_trim_trigger: int = LOG_TRIM_TRIGGER
    log_retain: int = LOG_RETAIN
    availability_policy: AvailabilityPolicy = AvailabilityPolicy.OCCUPANCY
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    allowed_origin_suffixes: tuple[str, ...] = DEFAULT_ALLOWED_ORIGIN_SUFFIXES
    subscriber_queue_size: int = 64
    lot_name: str = "Smart Parking"
    readers: tuple[str, ...] = DEFAULT_READERS
    pricing: str = DEFAULT_PRICING
    mqtt_enabled: bool = False
    mqtt_host: str = "localhost"
    mqtt_port: int = 1883
    mqtt_event_topic: str = "parkwatch/events"
    mqtt_state_topic: str = "parkwatch/state"
    mqtt_keepalive: int = 60

    def __post_init__(self) -> None:
        if self.total_slots <= 0:
            raise ParkwatchConfigError(f"total_slots must be positive, got {self.total_slots}")
        if self.log_retain <= 0 or self.log_retain > self.log_trim_trigger:
            raise ParkwatchConfigError(
                f"log_retain must be in 1..log_trim_trigger ({self.log_trim_trigger}), got {self.log_retain}"
            )
        if self.subscriber_queue_size <= 0:
            raise ParkwatchConfigError("subscriber_queue_size must be positive")
        if not isinstance(self.availability_policy, AvailabilityPolicy):
            try:
                policy = AvailabilityPolicy(str(self.availability_policy).strip().lower())
            except ValueError as exc:
                raise ParkwatchConfigError(f"unknown availability policy: {self.availability_policy!r}") from exc
            object.__setattr__(self, "availability_policy", policy)

    @classmethod
    def from_env(cls, **overrides: Any) -> ParkwatchConfig:
        """Create configuration from environment variables.

        Reads optional ``PARKWATCH_*`` variables; ``PORT`` is accepted as a
        fallback for the HTTP port so the service runs unchanged on hosts
        that inject it.  Explicit keyword arguments override environment
        values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_STR_MAP = {
            "PARKWATCH_HOST": "host",
            "PARKWATCH_AVAILABILITY_POLICY": "availability_policy",
            "PARKWATCH_LOT_NAME": "lot_name",
            "PARKWATCH_PRICING": "pricing",
            "PARKWATCH_MQTT_HOST": "mqtt_host",
            "PARKWATCH_MQTT_EVENT_TOPIC": "mqtt_event_topic",
            "PARKWATCH_MQTT_STATE_TOPIC": "mqtt_state_topic",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_INT_MAP = {
            "PARKWATCH_TOTAL_SLOTS": "total_slots",
            "PARKWATCH_LOG_TRIM_TRIGGER": "log_trim_trigger",
            "PARKWATCH_LOG_RETAIN": "log_retain",
            "PARKWATCH_SUBSCRIBER_QUEUE_SIZE": "subscriber_queue_size",
            "PARKWATCH_MQTT_PORT": "mqtt_port",
            "PARKWATCH_MQTT_KEEPALIVE": "mqtt_keepalive",
        }
        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = _env_int(env_key, val)

        port_env = env.get("PARKWATCH_PORT") or env.get("PORT")
        if port_env is not None:
            config_kwargs["port"] = _env_int("PORT", port_env)

        _ENV_LIST_MAP = {
            "PARKWATCH_ALLOWED_ORIGINS": "allowed_origins",
            "PARKWATCH_ALLOWED_ORIGIN_SUFFIXES": "allowed_origin_suffixes",
            "PARKWATCH_READERS": "readers",
        }
        for env_key, field_name in _ENV_LIST_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = _env_list(val)

        if "mqtt_enabled" not in overrides:
            config_kwargs["mqtt_enabled"] = _env_bool(env.get("PARKWATCH_MQTT_ENABLED"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
