"""MQTT bridge between the sensor rig and the lot service.

The rig can publish the same JSON events it POSTs to ``/update`` on an MQTT
topic; every committed snapshot is published back (retained) so headless
displays can follow the lot without a websocket.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt

from parkwatch.config import ParkwatchConfig
from parkwatch.exceptions import ParkwatchError, ParkwatchPayloadError
from parkwatch.state.events import IngestionSource, LotEvent


@dataclass(frozen=True)
class MqttSettings:
    """Broker/topic data required to run the bridge."""

    host: str
    port: int
    event_topic: str
    state_topic: str
    keepalive: int = 60

    @classmethod
    def from_config(cls, config: ParkwatchConfig) -> MqttSettings:
        return cls(
            host=config.mqtt_host,
            port=config.mqtt_port,
            event_topic=config.mqtt_event_topic,
            state_topic=config.mqtt_state_topic,
            keepalive=config.mqtt_keepalive,
        )


def decode_event_payload(payload: bytes) -> LotEvent:
    """Parse an MQTT message body into a :class:`LotEvent`.

    Raises
    ------
    ParkwatchPayloadError
        If the body is not UTF-8 JSON or fails event validation.
    """
    try:
        parsed = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParkwatchPayloadError("MQTT payload is not JSON", payload=payload) from exc
    return LotEvent.from_payload(parsed, source=IngestionSource.MQTT)


class MqttBridge:
    """Threaded paho-mqtt runtime that feeds events onto an asyncio loop."""

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        settings: MqttSettings,
        on_event: Callable[[LotEvent], Any],
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._settings = settings
        self._on_event = on_event
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def _handle_message(self, topic: str, payload: bytes) -> None:
        """Decode one message and hand it to the loop thread."""
        try:
            event = decode_event_payload(payload)
        except ParkwatchPayloadError:
            self._logger.warning("Dropping undecodable MQTT message on %s", topic)
            return
        self._logger.debug("MQTT event kind=%s id=%s", event.kind, event.vehicle_id)
        self._loop.call_soon_threadsafe(self._on_event, event)

    def publish_snapshot(self, message: dict[str, Any]) -> None:
        """Gateway listener: publish the snapshot message, retained."""
        client = self._client
        if client is None or not self._running:
            return
        client.publish(
            self._settings.state_topic,
            json.dumps(message["data"], separators=(",", ":")),
            qos=0,
            retain=True,
        )

    def start(self, client: mqtt.Client | None = None) -> None:
        """Connect, subscribe to the event topic and start the network loop."""
        self.stop()
        settings = self._settings
        self._logger.debug(
            "MQTT bridge start host=%s port=%s events=%s state=%s",
            settings.host,
            settings.port,
            settings.event_topic,
            settings.state_topic,
        )

        if client is None:
            client = mqtt.Client(
                callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
                protocol=mqtt.MQTTv311,
            )
            client.enable_logger(self._logger)

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if getattr(reason_code, "is_failure", False):
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected; subscribing %s", settings.event_topic)
            c.subscribe(settings.event_topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            self._handle_message(msg.topic, msg.payload)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        try:
            client.connect(settings.host, settings.port, keepalive=settings.keepalive)
        except OSError as exc:
            raise ParkwatchError(f"Cannot reach MQTT broker {settings.host}:{settings.port}") from exc
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect the client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
