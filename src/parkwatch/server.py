"""aiohttp transport for the lot service.

Routes
------
- ``POST /update``  apply one rig event
- ``GET  /state``   current snapshot
- ``GET  /health``  liveness and counters
- ``POST /reset``   back to the starting configuration
- ``GET  /ws``      websocket stream of ``update`` messages
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from typing import Any
from urllib.parse import urlsplit

from aiohttp import WSMsgType, web

from parkwatch._mqtt import MqttBridge, MqttSettings
from parkwatch.config import ParkwatchConfig
from parkwatch.exceptions import ParkwatchPayloadError
from parkwatch.service import LotService
from parkwatch.state.events import LotEvent

_logger = logging.getLogger(__name__)

SERVICE_KEY: web.AppKey[LotService] = web.AppKey("service", LotService)

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def is_origin_allowed(origin: str | None, exact: Iterable[str], suffixes: Iterable[str]) -> bool:
    """Exact match on the full origin, or suffix match on its hostname.

    Requests without an ``Origin`` header (curl, the rig itself) are allowed.
    """
    if not origin:
        return True
    if origin in set(exact):
        return True
    hostname = urlsplit(origin).hostname or ""
    if not hostname:
        return False
    for suffix in suffixes:
        bare = suffix.lstrip(".")
        if hostname == bare or hostname.endswith(f".{bare}"):
            return True
    return False


def _cors_middleware(config: ParkwatchConfig) -> Callable[[web.Request, _Handler], Awaitable[web.StreamResponse]]:
    @web.middleware
    async def cors(request: web.Request, handler: _Handler) -> web.StreamResponse:
        origin = request.headers.get("Origin")
        allowed = is_origin_allowed(origin, config.allowed_origins, config.allowed_origin_suffixes)

        if request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers:
            if not allowed:
                return web.Response(status=403)
            response: web.StreamResponse = web.Response(status=204)
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = request.headers.get(
                "Access-Control-Request-Headers", "Content-Type"
            )
        else:
            if not allowed and request.path == "/ws":
                _logger.info("Rejected websocket from origin %s", origin)
                return web.Response(status=403, text="origin not allowed")
            response = await handler(request)

        if origin and allowed and not response.prepared:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
        return response

    return cors


def _json(data: Any, *, status: int = 200) -> web.Response:
    return web.json_response(data, status=status)


async def handle_update(request: web.Request) -> web.Response:
    service = request.app[SERVICE_KEY]
    try:
        body = await request.json()
    except (ValueError, RecursionError):
        # JSONDecodeError is a ValueError; so is an integer past the str-to-int digit limit.
        body = None
    _logger.debug("POST /update => %s", body)

    try:
        event = LotEvent.from_payload(body)
    except ParkwatchPayloadError as exc:
        _logger.debug("Rejected payload: %s", exc)
        return _json({"ok": False, "msg": "bad payload"}, status=400)

    try:
        snapshot = service.handle(event)
    except Exception as exc:
        _logger.exception("Error processing update")
        return _json({"ok": False, "error": str(exc)}, status=500)
    return _json({"ok": True, "state": snapshot.to_wire()})


async def handle_state(request: web.Request) -> web.Response:
    return _json(request.app[SERVICE_KEY].snapshot().to_wire())


async def handle_health(request: web.Request) -> web.Response:
    return _json(request.app[SERVICE_KEY].health())


async def handle_reset(request: web.Request) -> web.Response:
    request.app[SERVICE_KEY].reset()
    return _json({"ok": True, "msg": "System reset"})


async def handle_ws(request: web.Request) -> web.WebSocketResponse:
    """Stream ``update`` messages; the current snapshot is sent on join."""
    service = request.app[SERVICE_KEY]
    ws = web.WebSocketResponse(heartbeat=30.0)
    await ws.prepare(request)

    gateway = service.gateway
    subscription = gateway.subscribe(service.snapshot())
    _logger.info("Client connected: %s", request.remote)

    async def _drain() -> None:
        while not ws.closed:
            message = await subscription.next()
            if message is None:
                await ws.close()
                return
            await ws.send_json(message)

    drain_task = asyncio.create_task(_drain())
    try:
        async for msg in ws:
            if msg.type == WSMsgType.ERROR:
                _logger.debug("Websocket error: %s", ws.exception())
                break
    finally:
        gateway.unsubscribe(subscription)
        drain_task.cancel()
        with contextlib.suppress(asyncio.CancelledError, ConnectionResetError):
            await drain_task
        _logger.info("Client disconnected: %s", request.remote)
    return ws


async def _mqtt_ctx(app: web.Application) -> AsyncIterator[None]:
    """Run the MQTT bridge for the lifetime of the app."""
    service = app[SERVICE_KEY]

    def _apply(event: LotEvent) -> None:
        try:
            service.handle(event)
        except Exception:
            _logger.exception("Error processing MQTT event")

    bridge = MqttBridge(
        loop=asyncio.get_running_loop(),
        settings=MqttSettings.from_config(service.config),
        on_event=_apply,
    )
    bridge.start()
    service.gateway.add_listener(bridge.publish_snapshot)
    try:
        yield
    finally:
        bridge.stop()


async def _on_shutdown(app: web.Application) -> None:
    app[SERVICE_KEY].gateway.close()


def create_app(config: ParkwatchConfig | None = None, *, service: LotService | None = None) -> web.Application:
    """Build the aiohttp application around a :class:`LotService`."""
    if service is None:
        service = LotService(config or ParkwatchConfig())
    config = service.config

    app = web.Application(middlewares=[_cors_middleware(config)])
    app[SERVICE_KEY] = service
    app.router.add_post("/update", handle_update)
    app.router.add_get("/state", handle_state)
    app.router.add_get("/health", handle_health)
    app.router.add_post("/reset", handle_reset)
    app.router.add_get("/ws", handle_ws)
    app.on_shutdown.append(_on_shutdown)
    if config.mqtt_enabled:
        app.cleanup_ctx.append(_mqtt_ctx)
    return app
