#!/usr/bin/env python3
"""
Demo script to run a robot battle.

Puts three Wanderers and a Sentry into the default 80x40 arena and steps
the engine until one robot is left or the tick limit is reached.
"""

import argparse
import logging

from robotarena.config import get_settings
from robotarena.core.roster import build_game


def run_battle(max_ticks: int, seed: int, report_every: int) -> None:
    """Run a battle and print a status line every `report_every` ticks."""
    settings = get_settings()

    print("=" * 60)
    print(f"{settings.APP_NAME} Battle Demo")
    print("=" * 60)
    print()

    engine = build_game({
        "width": settings.arena.DEFAULT_WIDTH,
        "height": settings.arena.DEFAULT_HEIGHT,
        "seed": seed,
        "robots": [
            {"id": "A", "template": "wanderer"},
            {"id": "B", "template": "wanderer"},
            {"id": "C", "template": "wanderer"},
            {"id": "S", "template": "sentry"},
        ],
    })

    print(f"Robots: {', '.join(r.id for r in engine.robots)}")
    print()

    while not engine.is_finished and engine.tick < max_ticks:
        engine.step()

        if engine.tick % report_every == 0:
            print(f"  Tick: {engine.tick} | Blasts: {len(engine.frame.blasts)}")
            for robot in engine.robots:
                print(f"    {robot.id}: {robot.position.to_tuple()} {robot.bearing.name:<5} "
                      f"v={robot.velocity} HP={robot.hit_points}")
            print()

    print("=" * 60)
    if engine.winner:
        print(f"WINNER: {engine.winner} after {engine.tick} ticks")
    else:
        print(f"No winner after {engine.tick} ticks ({len(engine.robots)} robots standing)")
    print("=" * 60)


def main():
    parser = argparse.ArgumentParser(description="Run a Robot Arena demo battle")
    parser.add_argument("--ticks", type=int, default=2000, help="Maximum number of ticks")
    parser.add_argument("--seed", type=int, default=42, help="Seed for robot placement")
    parser.add_argument("--report-every", type=int, default=100, help="Ticks between status lines")
    parser.add_argument("--verbose", action="store_true", help="Log engine events")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_battle(args.ticks, args.seed, args.report_every)


if __name__ == "__main__":
    main()
