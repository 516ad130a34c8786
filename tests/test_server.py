from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from parkwatch.config import ParkwatchConfig
from parkwatch.server import SERVICE_KEY, create_app, is_origin_allowed
from parkwatch.service import LotService


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


@pytest_asyncio.fixture
async def client() -> AsyncIterator[TestClient]:
    service = LotService(ParkwatchConfig(), clock=_dt)
    async with TestClient(TestServer(create_app(service=service))) as test_client:
        yield test_client


@pytest.mark.asyncio
async def test_update_accepts_event_and_returns_state(client: TestClient) -> None:
    resp = await client.post("/update", json={"type": "slot_occupied", "id": "3"})

    assert resp.status == 200
    body = await resp.json()
    assert body["ok"] is True
    assert body["state"]["slots"] == [0, 0, 1, 0, 0]
    assert body["state"]["available"] == 4
    assert body["state"]["logs"][0]["type"] == "slot"


@pytest.mark.asyncio
async def test_update_without_type_is_bad_request(client: TestClient) -> None:
    resp = await client.post("/update", json={"id": "CARD1"})

    assert resp.status == 400
    assert await resp.json() == {"ok": False, "msg": "bad payload"}


@pytest.mark.asyncio
async def test_update_with_invalid_json_is_bad_request(client: TestClient) -> None:
    resp = await client.post("/update", data=b"{not json", headers={"Content-Type": "application/json"})
    assert resp.status == 400


@pytest.mark.asyncio
async def test_unknown_kind_still_succeeds(client: TestClient) -> None:
    resp = await client.post("/update", json={"type": "door_opened", "id": "X"})

    assert resp.status == 200
    body = await resp.json()
    assert body["ok"] is True
    assert body["state"]["logs"] == []


@pytest.mark.asyncio
async def test_entry_payment_scenario_over_http(client: TestClient) -> None:
    await client.post("/update", json={"type": "vehicle_entry", "id": "CARD1"})
    resp = await client.post("/update", json={"type": "payment_info", "id": "CARD1", "result": "FEE_15_TIME_30m"})

    state = (await resp.json())["state"]
    assert state["vehicles"][0]["cardUID"] == "CARD1"
    assert state["vehicles"][0]["status"] == "exited"
    assert state["revenue"] == 15
    assert state["totalTransactions"] == 1


@pytest.mark.asyncio
async def test_state_health_and_reset(client: TestClient) -> None:
    await client.post("/update", json={"type": "vehicle_entry", "id": "CARD1"})

    state = await (await client.get("/state")).json()
    assert len(state["vehicles"]) == 1
    assert state["config"]["name"] == "Smart Parking"

    health = await (await client.get("/health")).json()
    assert health["status"] == "OK"
    assert health["vehicles"] == 1
    assert health["available"] == 5

    reset = await client.post("/reset")
    assert await reset.json() == {"ok": True, "msg": "System reset"}
    state = await (await client.get("/state")).json()
    assert state["vehicles"] == []
    assert state["logs"] == []


@pytest.mark.asyncio
async def test_websocket_gets_snapshot_on_join_and_after_update(client: TestClient) -> None:
    await client.post("/update", json={"type": "slot_occupied", "id": "1"})

    async with client.ws_connect("/ws") as ws:
        joined = await asyncio.wait_for(ws.receive_json(), timeout=2.0)
        assert joined["event"] == "update"
        assert joined["data"]["slots"] == [1, 0, 0, 0, 0]

        await client.post("/update", json={"type": "slot_occupied", "id": "2"})
        pushed = await asyncio.wait_for(ws.receive_json(), timeout=2.0)
        assert pushed["data"]["slots"] == [1, 1, 0, 0, 0]

        await client.post("/reset")
        after_reset = await asyncio.wait_for(ws.receive_json(), timeout=2.0)
        assert after_reset["data"]["slots"] == [0, 0, 0, 0, 0]


@pytest.mark.asyncio
async def test_cors_headers_for_allowed_origin(client: TestClient) -> None:
    origin = "https://smart-parking-dashboard.vercel.app"
    resp = await client.get("/state", headers={"Origin": origin})
    assert resp.headers.get("Access-Control-Allow-Origin") == origin

    denied = await client.get("/state", headers={"Origin": "https://evil.example"})
    assert denied.status == 200
    assert "Access-Control-Allow-Origin" not in denied.headers


@pytest.mark.asyncio
async def test_cors_preflight(client: TestClient) -> None:
    resp = await client.options(
        "/update",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
    )
    assert resp.status == 204
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert "POST" in resp.headers["Access-Control-Allow-Methods"]

    denied = await client.options(
        "/update",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "POST"},
    )
    assert denied.status == 403


@pytest.mark.asyncio
async def test_websocket_from_disallowed_origin_refused(client: TestClient) -> None:
    resp = await client.get("/ws", headers={"Origin": "https://evil.example"})
    assert resp.status == 403


@pytest.mark.parametrize(
    ("origin", "allowed"),
    [
        (None, True),
        ("", True),
        ("http://localhost:3000", True),
        ("http://localhost:4000", False),
        ("https://preview-123.vercel.app", True),
        ("https://vercel.app", True),
        ("https://vercel.app.evil.example", False),
        ("https://notvercel.app", False),
        ("garbage", False),
    ],
)
def test_is_origin_allowed(origin: str | None, allowed: bool) -> None:
    config = ParkwatchConfig()
    assert is_origin_allowed(origin, config.allowed_origins, config.allowed_origin_suffixes) is allowed


@pytest.mark.asyncio
async def test_oversized_available_hint_is_ignored(client: TestClient) -> None:
    body = '{"type": "vehicle_entry", "id": "CARD1", "available": 1' + "0" * 400 + "}"
    resp = await client.post("/update", data=body, headers={"Content-Type": "application/json"})

    assert resp.status == 200
    state = (await resp.json())["state"]
    assert state["vehicles"][0]["cardUID"] == "CARD1"
    assert state["available"] == 5


@pytest.mark.asyncio
async def test_integer_past_digit_limit_is_bad_request(client: TestClient) -> None:
    body = '{"type": "vehicle_entry", "id": "CARD1", "available": 1' + "0" * 5000 + "}"
    resp = await client.post("/update", data=body, headers={"Content-Type": "application/json"})

    assert resp.status == 400
    assert await resp.json() == {"ok": False, "msg": "bad payload"}


@pytest.mark.asyncio
async def test_internal_fault_returns_500_and_keeps_previous_state(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    await client.post("/update", json={"type": "slot_occupied", "id": "1"})

    def _fail(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("reducer exploded")

    monkeypatch.setattr("parkwatch.service.reduce_event", _fail)
    resp = await client.post("/update", json={"type": "slot_occupied", "id": "2"})

    assert resp.status == 500
    assert await resp.json() == {"ok": False, "error": "reducer exploded"}
    state = await (await client.get("/state")).json()
    assert state["slots"] == [1, 0, 0, 0, 0]
    assert state["available"] == 4


@pytest.mark.asyncio
async def test_failed_websocket_send_still_unsubscribes(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    async def _reset(*_args: object, **_kwargs: object) -> None:
        raise ConnectionResetError("peer went away")

    monkeypatch.setattr(web.WebSocketResponse, "send_json", _reset)
    service = client.server.app[SERVICE_KEY]

    async with client.ws_connect("/ws") as ws:
        for _ in range(50):
            if service.gateway.subscriber_count == 1:
                break
            await asyncio.sleep(0.01)
        assert service.gateway.subscriber_count == 1
        await ws.close()

    for _ in range(50):
        if service.gateway.subscriber_count == 0:
            break
        await asyncio.sleep(0.01)
    assert service.gateway.subscriber_count == 0
