"""Bending Arena command-line launcher. Simulate one battle or serve the API."""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13013")


def simulate(args) -> int:
    from bending_arena import storage
    from bending_arena.session import UnknownEntity, run_battle

    storage.init_storage(args.data_dir or Path(os.getenv("DATA_DIR", "data")))
    try:
        loop = run_battle(args.first, args.second, args.env, seed=args.seed, max_turns=args.max_turns)
    except (UnknownEntity, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    for event in loop.state.log:
        if event.text:
            print(f"[{event.turn:>2}] {event.text}")
    summary = loop.summary()
    print()
    print(f"Outcome: {summary.outcome} after {summary.turn_count} turns")
    for fighter_id, hp in summary.final_hp.items():
        print(f"  {fighter_id}: {hp} HP")
    if summary.metrics.render_defects:
        print(f"  ({summary.metrics.render_defects} unresolved placeholders)")
    return 0 if summary.metrics.error_count == 0 else 1


def serve(args) -> int:
    import uvicorn

    env_data_dir = args.data_dir.resolve() if args.data_dir else None
    if env_data_dir:
        os.environ["DATA_DIR"] = str(env_data_dir)
    print(f"Starting API on http://localhost:{args.port} ...")
    uvicorn.run("bending_arena.app:app", host=HOST, port=int(args.port), reload=args.reload)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Bending Arena")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log scoring and variant-selection trails")
    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="Run one battle and print the narrated log")
    sim.add_argument("first", help="First fighter id")
    sim.add_argument("second", help="Second fighter id")
    sim.add_argument("--env", required=True, help="Environment id")
    sim.add_argument("--seed", type=int, default=None)
    sim.add_argument("--max-turns", type=int, default=None)
    sim.set_defaults(func=simulate)

    srv = sub.add_parser("serve", help="Run the HTTP API")
    srv.add_argument("--port", default=PORT)
    srv.add_argument("--reload", action="store_true")
    srv.set_defaults(func=serve)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
