#!/usr/bin/env python3
"""Watch a device's live movement log from the terminal.

Connects a :class:`pycarmonitor.MonitorClient` with the logging renderer
and prints every effect (connection status, log rows, alerts) until
Ctrl+C or ``--duration`` elapses.

Configuration comes from ``MONITOR_*`` environment variables; command
line flags override them.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pycarmonitor import MonitorClient, MonitorConfig, MonitorConfigError  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Watch a device's movement log in real time.")
    parser.add_argument("--endpoint", help="WebSocket URL (default: MONITOR_ENDPOINT or built-in).")
    parser.add_argument("--device-id", help="Device identifier (default: MONITOR_DEVICE_ID or 1).")
    parser.add_argument(
        "--duration",
        type=float,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable DEBUG logging.")
    return parser.parse_args()


async def _watch(config: MonitorConfig, duration: float) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    async with MonitorClient(config) as client:
        client.start()
        if duration > 0:
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop.wait(), duration)
        else:
            await stop.wait()
        stats = client.stats
        print(f"[watch] movements seen: {stats.movement_count}, in progress: {stats.active_count}")


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, Any] = {}
    if args.endpoint:
        overrides["endpoint"] = args.endpoint
    if args.device_id:
        overrides["device_id"] = int(args.device_id) if args.device_id.isdigit() else args.device_id
    try:
        config = MonitorConfig.from_env(**overrides)
    except MonitorConfigError as exc:
        print(f"[watch] Invalid configuration: {exc}", file=sys.stderr)
        return 2

    asyncio.run(_watch(config, args.duration))
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
