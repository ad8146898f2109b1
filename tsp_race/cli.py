import argparse
import sys
import time
from pathlib import Path
from typing import List, NoReturn, Optional

from tsp_race.data import FORMATS, LoadError, load_cities
from tsp_race.island import EXECUTORS, Improvement, IslandConfig, IslandModel
from tsp_race.solvers.genome import Tour
from tsp_race.solvers.heuristics import baseline


DEFAULT_DATA = "data/capitals.tsp"

# Worker threads interleave under the GIL; only processes evolve in parallel.
DEFAULT_EXECUTOR = "process"


def log(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def fail(msg: str) -> NoReturn:
    print(f"error: {msg}", file=sys.stderr, flush=True)
    raise SystemExit(1)


def print_improvement(improvement: Improvement, tour: Tour) -> None:
    log(
        f"worker {improvement.worker_id} @ {improvement.elapsed:.2f}s: "
        f"Score = {improvement.score:f}"
    )
    print(f"{tour}\n", flush=True)


def build_config(args) -> IslandConfig:
    overrides = {
        "data_path": args.data,
        "data_format": args.format,
        "workers": args.workers,
        "population_size": args.population,
        "offspring": args.offspring,
        "run_duration": args.duration,
        "random_seed": args.seed,
        "executor": args.executor,
    }
    values = {"executor": DEFAULT_EXECUTOR}
    if args.config:
        values.update(IslandConfig.read_file(args.config))
    values.update({k: v for k, v in overrides.items() if v is not None})
    return IslandConfig(**values)


def run(args) -> None:
    try:
        cfg = build_config(args)
    except (OSError, ValueError, TypeError) as exc:
        fail(f"invalid configuration: {exc}")
    log(
        f"solving {cfg.data_path}: workers={cfg.workers} ({cfg.executor}) "
        f"population={cfg.population_size} offspring={cfg.offspring} "
        f"duration={cfg.run_duration}s"
    )
    model = IslandModel(cfg, log=log, on_improvement=print_improvement)
    try:
        result = model.run()
    except LoadError as exc:
        fail(str(exc))
    published = ", ".join(f"{w}:{n}" for w, n in sorted(result.published.items()))
    log(
        f"received {result.received} tours ({published}), "
        f"{len(result.improvements)} improvements in {result.elapsed:.2f}s"
    )
    if result.best is not None:
        log(f"best score = {result.score:f}")
        if args.baseline:
            reference = baseline(load_cities(cfg.data_path, fmt=cfg.data_format))
            if result.score > 0:
                gap = f"{(reference.length - result.score) / result.score:+.2%}"
            else:
                gap = "n/a"
            log(
                f"{reference.solver_name} baseline = {reference.length:f} "
                f"({gap} against the GA best)"
            )
    print("Done.", flush=True)


def data(args) -> None:
    try:
        cities = load_cities(args.data, fmt=args.format)
    except LoadError as exc:
        fail(str(exc))
    lats = [c.lat for c in cities]
    lons = [c.lon for c in cities]
    print(f"{len(cities)} cities in {Path(args.data)}")
    print(f"latitude  [{min(lats):.4f}, {max(lats):.4f}]")
    print(f"longitude [{min(lons):.4f}, {max(lons):.4f}]")
    reference = baseline(cities)
    print(f"{reference.solver_name} length = {reference.length:f}")
    print(", ".join(reference.tour))


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Genetic TSP solver racing parallel populations")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Race GA workers until the time budget expires")
    run_parser.add_argument("--data", default=None, help=f"city file (default {DEFAULT_DATA})")
    run_parser.add_argument("--format", default=None, choices=FORMATS)
    run_parser.add_argument("--config", default=None, help="JSON file of config overrides")
    run_parser.add_argument("--workers", type=int, default=None)
    run_parser.add_argument("--population", type=int, default=None, help="tours per worker")
    run_parser.add_argument("--offspring", type=int, default=None, help="children per generation")
    run_parser.add_argument("--duration", type=float, default=None, help="seconds to run")
    run_parser.add_argument("--seed", type=int, default=None)
    run_parser.add_argument(
        "--executor",
        default=None,
        choices=EXECUTORS,
        help=f"worker pool (default {DEFAULT_EXECUTOR}); threads interleave under the GIL "
        "and do not evolve in parallel",
    )
    run_parser.add_argument(
        "--baseline", action="store_true", help="compare against nearest neighbour + 2-opt"
    )
    run_parser.set_defaults(func=run)

    data_parser = subparsers.add_parser("data", help="Inspect a city file")
    data_parser.add_argument("--data", default=DEFAULT_DATA)
    data_parser.add_argument("--format", default="auto", choices=FORMATS)
    data_parser.set_defaults(func=data)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
