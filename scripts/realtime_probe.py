#!/usr/bin/env python3
"""Passive realtime probe for car inventory changes.

Opens the shared change-feed subscription and prints every car change as
one JSON line. Optionally keeps a floor view open to show when it refreshes.

Use this to verify that moves made elsewhere reach the client and which
floors they are attributed to.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pymonza import CarChange, FloorCarsView, MonzaClient, MonzaConfig, MonzaError  # noqa: E402

_LOG = logging.getLogger("realtime_probe")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print realtime car changes.")
    parser.add_argument("--watch", default=None, help="Also keep a view of this floor open")
    parser.add_argument("--duration", type=float, default=0.0, help="Seconds to listen (0 = until Ctrl+C)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def _print_change(event: CarChange) -> None:
    print(
        json.dumps(
            {
                "received_at": event.received_at.isoformat(),
                "kind": event.kind.value,
                "car_id": event.car_id,
                "floor": event.affected_floor.value if event.affected_floor else None,
                "previous_floor": event.previous_floor.value if event.previous_floor else None,
                "table": event.table,
            }
        ),
        flush=True,
    )


def _print_view(view: FloorCarsView) -> None:
    _LOG.info("view %s state=%s cars=%d error=%s", view.floor.value, view.state.value, len(view.cars), view.error)


async def _probe(args: argparse.Namespace) -> None:
    config = MonzaConfig.from_env(realtime_enabled=True)
    async with MonzaClient(config) as client:
        if not client.realtime_running:
            raise MonzaError("Realtime subscription did not start")
        client.subscribe(_print_change)
        if args.watch:
            await client.watch_floor(args.watch, on_update=_print_view)
        _LOG.info("Listening for car changes (Ctrl+C to stop)")
        if args.duration > 0:
            await asyncio.sleep(args.duration)
        else:
            await asyncio.Event().wait()


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(_probe(args))
    except KeyboardInterrupt:
        pass
    except MonzaError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
