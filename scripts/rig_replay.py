#!/usr/bin/env python3
"""Replay a scripted rig session against a running parkwatch server.

Posts the same events the gate controller sends for one full visit
(entry, parking, leaving the slot, payment) and prints the resulting
lot counters.  With ``--watch`` it only follows the websocket stream.

Examples:
    python scripts/rig_replay.py --url http://localhost:3000 --card A1B2C3D4
    python scripts/rig_replay.py --watch
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Any

import aiohttp


@dataclass(frozen=True)
class ReplayStats:
    sent: int = 0
    rejected: int = 0


def _visit(card: str, slot: int, fee: int, duration: str) -> list[dict[str, Any]]:
    return [
        {"type": "vehicle_entry", "id": card, "result": "WELCOME"},
        {"type": "entry_time", "id": card, "result": "ENTRY_TIME_08:15"},
        {"type": "slot_occupied", "id": slot},
        {"type": "vehicle_parked", "id": card, "result": f"SLOT_{slot}"},
        {"type": "slot_freed", "id": slot},
        {"type": "vehicle_left_slot", "id": card},
        {"type": "vehicle_exiting", "id": card},
        {"type": "exit_time", "id": card, "result": "EXIT_TIME_08:45"},
        {"type": "payment_info", "id": card, "result": f"FEE_{fee}_TIME_{duration}"},
    ]


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay a rig session against a parkwatch server.")
    parser.add_argument("--url", default="http://localhost:3000", help="Server base URL.")
    parser.add_argument("--card", default="A1B2C3D4", help="RFID card UID to use.")
    parser.add_argument("--slot", type=int, default=1, help="Slot the vehicle parks in.")
    parser.add_argument("--fee", type=int, default=15, help="Fee in thousand VND.")
    parser.add_argument("--duration", default="30m", help="Duration text reported with the fee.")
    parser.add_argument("--delay", type=float, default=0.5, help="Seconds between events.")
    parser.add_argument("--watch", action="store_true", help="Print websocket updates instead of replaying.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logs.")
    return parser.parse_args()


async def _replay(args: argparse.Namespace) -> ReplayStats:
    base = args.url.rstrip("/")
    sent = rejected = 0
    async with aiohttp.ClientSession() as session:
        for event in _visit(args.card, args.slot, args.fee, args.duration):
            async with session.post(f"{base}/update", json=event) as resp:
                body = await resp.json()
            sent += 1
            if resp.status != 200:
                rejected += 1
                print(f"[replay] {event['type']:<18} -> HTTP {resp.status} {body}")
            else:
                state = body["state"]
                print(
                    f"[replay] {event['type']:<18} -> available={state['available']} "
                    f"revenue={state['revenue']} transactions={state['totalTransactions']}"
                )
            await asyncio.sleep(args.delay)
    return ReplayStats(sent=sent, rejected=rejected)


async def _watch(args: argparse.Namespace) -> None:
    base = args.url.rstrip("/")
    async with aiohttp.ClientSession() as session, session.ws_connect(f"{base}/ws") as ws:
        async for msg in ws:
            if msg.type != aiohttp.WSMsgType.TEXT:
                break
            data = msg.json()["data"]
            latest = data["logs"][0]["msg"] if data["logs"] else "-"
            print(f"[watch] slots={data['slots']} available={data['available']} last={latest}")


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.watch:
            asyncio.run(_watch(args))
            return 0
        stats = asyncio.run(_replay(args))
    except KeyboardInterrupt:
        return 130
    except aiohttp.ClientError as exc:
        print(f"[replay] Server unreachable: {exc}", file=sys.stderr)
        return 2

    print(f"[replay] Summary: sent={stats.sent} rejected={stats.rejected}")
    return 1 if stats.rejected else 0


if __name__ == "__main__":
    sys.exit(_main())
