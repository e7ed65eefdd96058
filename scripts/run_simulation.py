"""Run the scripted corridor simulation in the terminal.

Prints the track board on every tick.  Press Ctrl+C to quit.

Usage:
    uv run python scripts/run_simulation.py
    uv run python scripts/run_simulation.py --speed 10 --tick-ms 100
    uv run python scripts/run_simulation.py --once 55         # single board at t=55
    uv run python scripts/run_simulation.py --events          # list meets/overtakes
    uv run python scripts/run_simulation.py --live live.json  # also poll a live batch file
"""

from __future__ import annotations

import argparse
import itertools
import logging
import sys
import time

from corridor_sim.config import Settings
from corridor_sim.live.feed import JsonFileSource, LiveFeed
from corridor_sim.overlay.board import TrackBoardRenderer
from corridor_sim.overlay.surface import InMemorySurface
from corridor_sim.overlay.synchronizer import OverlaySynchronizer
from corridor_sim.schedule.loader import ScenarioError, load_scenario
from corridor_sim.schedule.position import ScheduleError
from corridor_sim.simulation.context import SimulationContext


def _print_events(sim: SimulationContext) -> None:
    """List the times at which any two trains meet or pass each other."""
    names = {t.train_id: t.name for t in sim.scenario.trains}
    ids = sim.model.train_ids
    found = False
    for a, b in itertools.combinations(ids, 2):
        for t in sim.model.crossings(a, b):
            found = True
            km = sim.model.evaluate(a, t)
            print(f"  {sim.clock_label(t)}  {names[a]} / {names[b]} at {km:.1f} km")
    if not found:
        print("  (no crossings)")


def main() -> None:
    settings = Settings.from_env()

    ap = argparse.ArgumentParser(description="Multi-track corridor overtake simulation")
    ap.add_argument("--scenario", default=str(settings.scenario_path), help="Scenario JSON path")
    ap.add_argument("--speed", type=float, default=settings.speed,
                    help="Virtual minutes per real second")
    ap.add_argument("--tick-ms", type=int, default=settings.tick_ms, help="Tick period in ms")
    ap.add_argument("--width", type=int, default=60, help="Board width in characters")
    ap.add_argument("--once", type=float, default=None,
                    help="Print one board at this time and exit")
    ap.add_argument("--loops", type=int, default=0,
                    help="Stop after N scenario loops (0 = forever)")
    ap.add_argument("--events", action="store_true", help="Print train crossings and exit")
    ap.add_argument("--live", default=None, help="Poll this JSON file for live batches")
    args = ap.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        scenario = load_scenario(args.scenario)
        surface = InMemorySurface()
        sim = SimulationContext(
            scenario,
            surface,
            speed_factor=args.speed,
            tick_interval_s=args.tick_ms / 1000.0,
            blink_interval_s=settings.blink_s,
        )
    except (ScenarioError, ScheduleError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(2)

    board = TrackBoardRenderer(scenario.route_length, scenario.stations, width=args.width)

    if args.events:
        _print_events(sim)
        return

    if args.once is not None:
        try:
            snap = sim.snapshot(args.once)
        except ValueError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            sys.exit(2)
        print(board.render(snap.trains, sim.tracks, sim.clock_label(args.once)))
        return

    feed = None
    if args.live:
        live_sync = OverlaySynchronizer(surface, blink_interval_s=settings.blink_s)
        feed = LiveFeed(JsonFileSource(args.live), live_sync, interval_s=1.0)
        feed.start()

    loops = 0
    last_t = 0.0
    sim.start()
    print("Simulation running. Press Ctrl+C to stop.", flush=True)
    try:
        while True:
            time.sleep(args.tick_ms / 1000.0)
            t = sim.clock.now
            if t < last_t:
                loops += 1
                if args.loops and loops >= args.loops:
                    break
            last_t = t
            snap = sim.snapshot(t)
            print("\033[2J\033[H" + board.render(snap.trains, sim.tracks, sim.clock_label(t)),
                  flush=True)
            result = sim.last_result
            if result is not None and result.error:
                print(f"  [overlay] {result.error}", flush=True)
    except KeyboardInterrupt:
        pass
    finally:
        if feed is not None:
            feed.stop()
        sim.stop()
        print("\nSimulation stopped.")


if __name__ == "__main__":
    main()
