#!/usr/bin/env python3
"""Dump every floor's cars as JSON.

Usage
-----
Set environment variables and run::

    export MONZA_BASE_URL="https://<project>.supabase.co"
    export MONZA_API_KEY="<anon key>"
    python scripts/dump_floors.py

Options::

    --floor SHOWROOM_1   Only dump this floor (repeatable)
    --model "Voyah Free" Exact model filter
    --vin 123            VIN substring filter
    --sort year          Sort key (any car field)
    --desc               Sort descending
    --output FILE        Write output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pymonza import (  # noqa: E402
    CarFilter,
    Floor,
    MonzaClient,
    MonzaConfig,
    MonzaError,
    SortDirection,
    filter_cars,
    sort_cars,
)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dump cars per floor as JSON.")
    parser.add_argument("--floor", action="append", default=[], help="Floor to dump (default: all)")
    parser.add_argument("--model", default=None, help="Exact model filter")
    parser.add_argument("--status", default=None, help="Exact status filter")
    parser.add_argument("--vin", default=None, help="VIN substring filter")
    parser.add_argument("--client", default=None, help="Client name substring filter")
    parser.add_argument("--sort", default=None, help="Sort key")
    parser.add_argument("--desc", action="store_true", help="Sort descending")
    parser.add_argument("--output", type=Path, default=None, help="Output file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


async def _dump(args: argparse.Namespace) -> dict[str, Any]:
    config = MonzaConfig.from_env(realtime_enabled=False)
    floors = [Floor.parse(value) for value in args.floor] or list(Floor)
    criteria = CarFilter(model=args.model, status=args.status, vin=args.vin, client_name=args.client)
    direction = SortDirection.DESC if args.desc else SortDirection.ASC

    result: dict[str, Any] = {}
    async with MonzaClient(config) as client:
        counts = await client.get_floor_counts()
        for floor in floors:
            cars = filter_cars(await client.get_cars_by_floor(floor), criteria)
            if args.sort:
                cars = sort_cars(cars, args.sort, direction)
            result[floor.value] = {
                "label": floor.label,
                "total": counts.get(floor, 0),
                "cars": [car.model_dump(mode="json", exclude={"raw"}) for car in cars],
            }
    return result


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        result = asyncio.run(_dump(args))
    except (MonzaError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    text = json.dumps(result, indent=2, ensure_ascii=False)
    if args.output:
        args.output.write_text(text + "\n", encoding="utf-8")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
