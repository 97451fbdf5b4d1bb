#!/usr/bin/env python3
"""Demo: build an algorithm trace and replay it headlessly.

Builds the trace for one algorithm (default input unless fields are
given), then either dumps it or plays it back through a PlaybackController
driven by a virtual clock, printing the rolling log as it grows.

Usage:
    python scripts/replay_demo.py --list
    python scripts/replay_demo.py three-sum
    python scripts/replay_demo.py three-sum --field numbers="0, 0, 0, 0"
    python scripts/replay_demo.py course-schedule --play --verbose
    python scripts/replay_demo.py rotate-image --json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure repo root is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from algotrace.api import dump_trace, list_algorithms, trace_to_json
from algotrace.builders import SUPPORTED_ALGORITHMS
from algotrace.playback_types import PlaybackMode
from algotrace.scheduler import ManualScheduler
from algotrace.session import AnimationSession


def _print_header(title: str) -> None:
    print()
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)


def _parse_fields(pairs: list[str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise SystemExit(f"--field expects key=value, got {pair!r}")
        # allow "\n" on the command line for matrix rows
        fields[key.strip()] = value.replace("\\n", "\n")
    return fields


def _print_catalogue() -> None:
    _print_header("Algorithms")
    for entry in list_algorithms():
        print(f"  {entry['slug']:<24} {entry['family']:<16} {entry['title']}")
        for name, default in entry["fields"].items():
            shown = default.replace("\n", "; ")
            print(f"      --field {name}={shown!r}")


def _replay(session: AnimationSession, scheduler: ManualScheduler) -> None:
    controller = session.controller
    delay = controller.config.delay_seconds
    controller.play()
    last_printed = 0
    while controller.mode == PlaybackMode.PLAYING:
        scheduler.advance(delay)
        for entry in controller.log:
            if entry.index > last_printed:
                print(f"  [{entry.index:>3}] {entry.kind:<16} {entry.description}")
                last_printed = entry.index
    print(f"\n  Finished at step {controller.cursor}/{controller.total}")


def main():
    parser = argparse.ArgumentParser(description="Algorithm trace replay demo")
    parser.add_argument(
        "algorithm",
        nargs="?",
        choices=SUPPORTED_ALGORITHMS,
        help="Algorithm slug",
    )
    parser.add_argument(
        "--field",
        "-f",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override one input field (repeatable)",
    )
    parser.add_argument("--list", action="store_true", help="List algorithms and exit")
    parser.add_argument("--json", action="store_true", help="Print the trace as JSON")
    parser.add_argument(
        "--play",
        action="store_true",
        help="Replay through the playback controller on a virtual clock",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.list or args.algorithm is None:
        _print_catalogue()
        return

    scheduler = ManualScheduler()
    session = AnimationSession(args.algorithm, scheduler)
    fields = _parse_fields(args.field)
    if fields:
        result = session.apply(**fields)
        if not result.ok:
            print(f"Input rejected ({result.error.kind.value}): {result.error.message}")
            sys.exit(1)

    if args.json:
        print(trace_to_json(session.trace))
        return

    _print_header(f"{session.title} ({session.algorithm})")
    if args.play:
        _replay(session, scheduler)
    else:
        print(dump_trace(session.trace))


if __name__ == "__main__":
    main()
