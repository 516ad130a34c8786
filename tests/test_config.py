from __future__ import annotations

import pytest

from parkwatch.config import ParkwatchConfig
from parkwatch.exceptions import ParkwatchConfigError
from parkwatch.state.policy import AvailabilityPolicy


def test_defaults() -> None:
    config = ParkwatchConfig()

    assert config.total_slots == 5
    assert config.port == 3000
    assert (config.log_trim_trigger, config.log_retain) == (200, 100)
    assert config.availability_policy is AvailabilityPolicy.OCCUPANCY
    assert config.mqtt_enabled is False


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("PARKWATCH_TOTAL_SLOTS", "12")
    monkeypatch.setenv("PARKWATCH_AVAILABILITY_POLICY", "Sensor")
    monkeypatch.setenv("PARKWATCH_ALLOWED_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("PARKWATCH_MQTT_ENABLED", "yes")

    config = ParkwatchConfig.from_env()

    assert config.port == 8080
    assert config.total_slots == 12
    assert config.availability_policy is AvailabilityPolicy.SENSOR
    assert config.allowed_origins == ("https://a.example", "https://b.example")
    assert config.mqtt_enabled is True


def test_overrides_beat_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARKWATCH_PORT", "9000")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("PARKWATCH_MQTT_ENABLED", "true")

    config = ParkwatchConfig.from_env(port=1234, mqtt_enabled=False)

    assert config.port == 1234
    assert config.mqtt_enabled is False


@pytest.mark.parametrize(
    "kwargs",
    [
        {"total_slots": 0},
        {"log_trim_trigger": 10, "log_retain": 20},
        {"log_retain": 0},
        {"subscriber_queue_size": 0},
        {"availability_policy": "whatever"},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(ParkwatchConfigError):
        ParkwatchConfig(**kwargs)  # type: ignore[arg-type]


def test_non_integer_env_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARKWATCH_TOTAL_SLOTS", "many")
    with pytest.raises(ParkwatchConfigError):
        ParkwatchConfig.from_env()
