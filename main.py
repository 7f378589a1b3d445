"""CLI entry point for the name wheel."""

import sys
import os
import random
import logging
import argparse

# Ensure project root is on path
sys.path.insert(0, os.path.dirname(__file__))

from config import DB_PATH, FAIRNESS_TRIALS, FAIRNESS_POWER_LEVELS, INCLUDE_FREE_SPINS
from db.schema import create_all_tables, LOCAL_TABLES
from engine.easing import SpinAnimation
from engine.layout import build_wheel, blank_wheel, fairness_text, render_svg
from engine.spin import SpinController
from session.local_session import LocalSession
from session.remote import get_adapter
from session.sync import DatabaseSync
from utils.constants import WINNER_RHYMES
from utils.names import validate_names, random_names, sequential_numbers

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _resolve_names(args, session: LocalSession, rng: random.Random):
    """Pick names from --names/--random/--numbers, falling back to the current wheel."""
    if args.names:
        validation = validate_names(args.names)
        for message in validation.messages():
            print(f"  ! {message}")
        if not validation.is_valid:
            return None, None
        return validation.names, "custom"
    if args.random is not None:
        return random_names(args.random, rng), "random"
    if args.numbers is not None:
        return sequential_numbers(args.numbers, rng), "numbers"
    current = session.get_current_configuration()
    if current:
        return current.names, None
    print("No names given and no saved wheel. Use --names, --random or --numbers.")
    return None, None


def _start_sync(session: LocalSession):
    adapter = get_adapter()
    if not adapter.is_ready():
        return None
    return DatabaseSync(session, adapter)


def run_spin(args):
    """Spin the wheel until a name lands and record every spin."""
    rng = random.Random(args.seed) if args.seed is not None else None
    session = LocalSession(DB_PATH)
    sync = _start_sync(session)

    names, input_method = _resolve_names(args, session, rng or random.Random())
    if not names:
        return
    current = session.get_current_configuration()
    if input_method is not None or args.team or current is None:
        config_id = session.save_configuration(names, args.team, input_method or "custom")
    else:
        config_id = current.id

    wheel = build_wheel(names, include_free_spins=not args.no_respin)
    controller = SpinController(
        wheel,
        rand=rng.random if rng else None,
        rotation=session.current_rotation(),
    )
    print(f"\n{fairness_text(wheel)}")

    spins = controller.spin_until_winner(args.power)
    spin_id = None
    for result in spins:
        ticks = sum(1 for f in SpinAnimation.for_result(result, wheel.segment_count).frames() if f.is_tick)
        spin_id = session.record_spin(
            config_id, result.label, result.is_respin, result.power, result.final_rotation,
        )
        tag = "free spin!" if result.is_respin else "winner"
        print(f"  {result.label:<20} ({tag}, {result.duration_ms / 1000:.1f}s, {ticks} ticks)")

    winner = spins[-1]
    if winner.is_respin:
        print("\nRan out of respins without a winner.")
    else:
        rhyme = (rng or random).choice(WINNER_RHYMES)
        print(f"\n{rhyme}\n  >>> {winner.label} <<<")
        print(f"  spin id: {spin_id}")

    if sync is not None:
        sync.drain(timeout=args.sync_timeout)
        sync.close()


def run_ack(spin_id: str, method: str):
    """Dismiss a winner. "remove" also takes the winner off the wheel."""
    session = LocalSession(DB_PATH)
    sync = _start_sync(session)
    spin = next((s for s in session.get_spin_history() if s.id == spin_id), None)
    session.update_spin_acknowledgment(spin_id, method)
    if spin is None:
        print(f"No spin {spin_id} in this session")
    elif method == "remove":
        config = next((c for c in session.get_configurations() if c.id == spin.config_id), None)
        remaining = [n for n in (config.names if config else []) if n != spin.winner]
        if remaining:
            session.save_configuration(remaining)
            print(f"Removed {spin.winner}; {len(remaining)} names left")
        else:
            print(f"Removed {spin.winner}; the wheel is now empty")
    else:
        print(f"Acknowledged {spin.winner} via {method}")
    if sync is not None:
        sync.drain()
        sync.close()


def show_history(limit: int):
    import pandas as pd

    session = LocalSession(DB_PATH)
    history = session.get_spin_history()[:limit]
    if not history:
        print("No spins yet")
        return
    df = pd.DataFrame([{
        "time": s.timestamp[:19].replace("T", " "),
        "winner": s.winner,
        "respin": s.is_respin,
        "power": f"{s.spin_power:.0%}",
        "ack": s.acknowledge_method or "",
    } for s in history])
    print(f"\n=== Spin history ({session.get_session_id()}) ===")
    print(df.to_string(index=False))
    print()


def run_fairness(args):
    """Monte Carlo fairness report for a wheel."""
    from engine.fairness import FairnessAnalyzer

    if args.names:
        names = validate_names(args.names).names
    else:
        names = [f"Name{i}" for i in range(1, args.segments + 1)]
    wheel = build_wheel(names or None, include_free_spins=not args.no_respin)
    analyzer = FairnessAnalyzer(wheel, seed=args.seed)

    logger.info(f"\n{'='*60}")
    logger.info(f"FAIRNESS CHECKS FOR {wheel.segment_count} SEGMENTS")
    logger.info(f"{'='*60}")

    uniform = analyzer.uniformity(args.trials)
    independence = analyzer.power_independence(args.trials, FAIRNESS_POWER_LEVELS)
    serial = analyzer.serial_correlation(args.trials)

    print(f"\n{fairness_text(wheel)}")
    print(analyzer.label_summary(uniform.counts).round(2).to_string(index=False))
    deviation = analyzer.deviation_stats(uniform.counts)
    print(f"\nMax deviation {deviation['max']:.2f}pp, mean {deviation['mean']:.2f}pp")
    print(f"Uniformity:         {'PASS' if uniform.is_fair else 'FAIL'} "
          f"(chi2 {uniform.statistic:.2f} <= {uniform.critical_value:.2f})")
    print(f"Power independence: {'PASS' if independence.is_independent else 'FAIL'} "
          f"(p = {independence.p_value:.4f})")
    print(f"Serial correlation: {'PASS' if serial.is_uncorrelated else 'FAIL'} "
          f"(repeat {serial.repeat_rate:.4f} vs {serial.expected_repeat_rate:.4f}, "
          f"max bias {serial.max_transition_bias:.4f})")


def run_share(team_name):
    from session.sharing import create_shareable_config

    session = LocalSession(DB_PATH)
    config = session.get_current_configuration()
    if config is None:
        print("Nothing to share yet: spin a wheel first")
        return
    shared = create_shareable_config(
        get_adapter(), session.get_session_id(), config.names,
        team_name or session.get_session_data().team_name,
        session.get_session_data().input_method,
    )
    if shared is None:
        print("Sharing is unavailable (hosted database not configured or unreachable)")
        return
    print(f"Shared wheel: /{shared.slug}")


def run_open(slug: str):
    """Load a shared wheel into the local session."""
    from session.sharing import get_config_by_slug
    from utils.slug import slug_to_title

    shared = get_config_by_slug(get_adapter(), slug)
    if shared is None:
        print(f"No public wheel at /{slug}")
        return
    session = LocalSession(DB_PATH)
    session.save_configuration(shared.names, shared.team_name, shared.input_method)
    print(f"Loaded {shared.team_name or slug_to_title(slug)}: {', '.join(shared.names)}")


def run_sync(duration: float):
    """Run the sync loop for a while, draining the queue on its interval."""
    import time

    session = LocalSession(DB_PATH)
    session.initialize_location_data()
    sync = _start_sync(session)
    if sync is None:
        print("Hosted database not configured - nothing to sync")
        return
    sync.force_sync()
    deadline = time.monotonic() + duration
    while time.monotonic() < deadline and sync.queue:
        sync.tick()
        time.sleep(0.5)
    status = sync.get_sync_status()
    print(f"Queue: {status['queue_length']} pending, last sync {status['last_sync_time']}")
    sync.close()


def run_render(output: str, no_respin: bool):
    session = LocalSession(DB_PATH)
    config = session.get_current_configuration()
    if config is None:
        wheel = blank_wheel()
    else:
        wheel = build_wheel(config.names, include_free_spins=not no_respin)
    with open(output, "w") as f:
        f.write(render_svg(wheel, session.current_rotation()))
    print(f"Wheel written to {output}")


def show_status():
    """Show local store, sync and hosted database status."""
    from db.connection import table_row_count

    create_all_tables(DB_PATH)
    print("\n=== Local Store ===")
    for table in LOCAL_TABLES:
        try:
            count = table_row_count(table, DB_PATH)
            print(f"  {table:.<35} {count:>8} rows")
        except Exception:
            print(f"  {table:.<35} {'N/A':>8}")

    adapter = get_adapter()
    print("\n=== Hosted Database ===")
    if not adapter.is_ready():
        print("  not configured (local-only mode)")
        print()
        return
    schema = adapter.verify_schema()
    stats = adapter.get_stats() or {}
    for table, ok in schema.items():
        count = stats.get(table)
        shown = count if count is not None else "N/A"
        print(f"  {table:.<35} {shown:>8} {'ok' if ok else 'unreachable'}")
    print()


def main():
    parser = argparse.ArgumentParser(description="Name wheel picker")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the local SQLite store")

    spin = sub.add_parser("spin", help="Spin the wheel")
    source = spin.add_mutually_exclusive_group()
    source.add_argument("--names", help="Names separated by commas or whitespace")
    source.add_argument("--random", type=int, metavar="N", help="N random names")
    source.add_argument("--numbers", type=int, metavar="N", help="Numbers 1..N, shuffled")
    spin.add_argument("--power", type=float, default=0.5, help="Spin power 0..1 (default: %(default)s)")
    spin.add_argument("--team", help="Team name saved with the wheel")
    spin.add_argument("--no-respin", action="store_true", help="Leave out the RESPIN tiles")
    spin.add_argument("--seed", type=int, help="Seed the draw (repeatable spins)")
    spin.add_argument("--sync-timeout", type=float, default=10.0,
                      help="Seconds to wait for the hosted database (default: %(default)s)")

    ack = sub.add_parser("ack", help="Acknowledge a winner")
    ack.add_argument("spin_id")
    ack.add_argument("--method", choices=["button", "backdrop", "x", "remove"], default="button")

    history = sub.add_parser("history", help="Show recent spins")
    history.add_argument("--limit", type=int, default=20)

    fairness = sub.add_parser("fairness", help="Run the fairness self-tests")
    fairness.add_argument("--names", help="Names to test (default: --segments placeholders)")
    fairness.add_argument("--segments", type=int, default=10)
    fairness.add_argument("--trials", type=int, default=FAIRNESS_TRIALS)
    fairness.add_argument("--seed", type=int)
    fairness.add_argument("--no-respin", action="store_true", default=not INCLUDE_FREE_SPINS)

    share = sub.add_parser("share", help="Publish the current wheel under a slug")
    share.add_argument("--team", help="Team name used for the slug")

    open_ = sub.add_parser("open", help="Load a shared wheel by slug")
    open_.add_argument("slug")

    sync = sub.add_parser("sync", help="Push local data to the hosted database")
    sync.add_argument("--duration", type=float, default=30.0)

    render = sub.add_parser("render", help="Write the current wheel as SVG")
    render.add_argument("--output", default="wheel.svg")
    render.add_argument("--no-respin", action="store_true")

    sub.add_parser("status", help="Show store and sync status")

    args = parser.parse_args()

    if args.command == "init-db":
        create_all_tables(DB_PATH)
        print(f"Database initialized at {DB_PATH}")
    elif args.command == "spin":
        run_spin(args)
    elif args.command == "ack":
        run_ack(args.spin_id, args.method)
    elif args.command == "history":
        show_history(args.limit)
    elif args.command == "fairness":
        run_fairness(args)
    elif args.command == "share":
        run_share(args.team)
    elif args.command == "open":
        run_open(args.slug)
    elif args.command == "sync":
        run_sync(args.duration)
    elif args.command == "render":
        run_render(args.output, args.no_respin)
    elif args.command == "status":
        show_status()


if __name__ == "__main__":
    main()
