import concurrent.futures
import json
import multiprocessing
import os
import queue
import random
import threading
import time
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .data import FORMATS
from .evolutionary import NUMBER, EvolutionConfig, Population, check_type
from .solvers.genome import Genotype, Tour


EXECUTORS = ("thread", "process")


def default_workers() -> int:
    return max(2, (os.cpu_count() or 1) // 2 + 1)


@dataclass
class IslandConfig(EvolutionConfig):
    data_path: str = "data/capitals.tsp"
    data_format: str = "auto"
    workers: int = field(default_factory=default_workers)
    run_duration: float = 10.0
    channel_capacity: int = 1
    poll_interval: float = 0.05
    executor: str = "thread"

    def __post_init__(self):
        super().__post_init__()
        check_type("data_path", self.data_path, str)
        check_type("data_format", self.data_format, str)
        check_type("workers", self.workers, int)
        check_type("run_duration", self.run_duration, NUMBER)
        check_type("channel_capacity", self.channel_capacity, int)
        check_type("poll_interval", self.poll_interval, NUMBER)
        check_type("executor", self.executor, str)
        if self.workers < 1:
            raise ValueError("workers must be at least 1.")
        if self.run_duration < 0:
            raise ValueError("run_duration must not be negative.")
        if self.channel_capacity < 1:
            raise ValueError("channel_capacity must be at least 1.")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive.")
        if self.executor not in EXECUTORS:
            raise ValueError(f"executor must be one of {', '.join(EXECUTORS)}.")
        if self.data_format not in FORMATS:
            raise ValueError(f"data_format must be one of {', '.join(FORMATS)}.")

    @classmethod
    def read_file(cls, path: Union[str, Path]) -> Dict:
        """Field values from a JSON object; unknown keys are rejected."""
        values = json.loads(Path(path).read_text())
        if not isinstance(values, dict):
            raise ValueError(f"{path}: expected a JSON object of config fields.")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"{path}: unknown config fields {', '.join(unknown)}.")
        return values

    @classmethod
    def from_file(cls, path: Union[str, Path], **overrides) -> "IslandConfig":
        values = cls.read_file(path)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def genetic_tsp(worker_id: int, cfg: IslandConfig, tours, stop) -> int:
    """Evolve a private population, publishing its best tour before every generation.

    Runs until ``stop`` is set and returns the number of tours published. A
    failure to load the cities propagates to the caller.
    """
    genotype = Genotype.load(cfg.data_path, fmt=cfg.data_format)
    seed = None if cfg.random_seed is None else cfg.random_seed + worker_id
    population = Population.from_genotype(genotype, cfg, rng=random.Random(seed))
    published = 0
    while not stop.is_set():
        try:
            tours.put((worker_id, population.best()), timeout=cfg.poll_interval)
        except queue.Full:
            continue
        published += 1
        if stop.is_set():
            break
        population.evolve(cfg.offspring)
    return published


@dataclass
class Improvement:
    elapsed: float
    worker_id: int
    score: float


@dataclass
class RunResult:
    best: Optional[Tour] = None
    score: float = float("inf")
    improvements: List[Improvement] = field(default_factory=list)
    published: Dict[int, int] = field(default_factory=dict)
    received: int = 0
    elapsed: float = 0.0


class IslandModel:
    """Races independent GA workers and keeps the best tour any of them reports."""

    def __init__(
        self,
        cfg: IslandConfig,
        log: Optional[Callable[[str], None]] = None,
        on_improvement: Optional[Callable[[Improvement, Tour], None]] = None,
    ):
        self.cfg = cfg
        self.log = log or (lambda msg: None)
        self.on_improvement = on_improvement
        self.result = RunResult()
        self._start = time.monotonic()

    def offer(self, worker_id: int, tour: Tour) -> bool:
        """Record ``tour`` if it strictly beats the best so far."""
        self.result.received += 1
        score = tour.score()
        if score >= self.result.score:
            return False
        self.result.best = tour
        self.result.score = score
        improvement = Improvement(
            elapsed=time.monotonic() - self._start, worker_id=worker_id, score=score
        )
        self.result.improvements.append(improvement)
        if self.on_improvement:
            self.on_improvement(improvement, tour)
        return True

    def run(self) -> RunResult:
        self.result = RunResult()
        self._start = time.monotonic()
        if self.cfg.executor == "process":
            with multiprocessing.Manager() as manager:
                tours = manager.Queue(maxsize=self.cfg.channel_capacity)
                stop = manager.Event()
                pool = concurrent.futures.ProcessPoolExecutor(max_workers=self.cfg.workers)
                self._race(pool, tours, stop)
        else:
            tours = queue.Queue(maxsize=self.cfg.channel_capacity)
            stop = threading.Event()
            pool = concurrent.futures.ThreadPoolExecutor(
                max_workers=self.cfg.workers, thread_name_prefix="tsp-worker"
            )
            self._race(pool, tours, stop)
        self.result.elapsed = time.monotonic() - self._start
        return self.result

    def _race(self, pool: concurrent.futures.Executor, tours, stop) -> None:
        self.log(
            f"starting {self.cfg.workers} {self.cfg.executor} workers "
            f"for {self.cfg.run_duration:.1f}s"
        )
        with pool:
            futures = {
                pool.submit(genetic_tsp, i, self.cfg, tours, stop): i
                for i in range(self.cfg.workers)
            }
            try:
                self._collect(futures, tours)
            finally:
                stop.set()
                concurrent.futures.wait(futures)
        # Workers are joined; whatever they left in the queue still counts.
        self._drain(tours)
        for future, worker_id in futures.items():
            self.result.published[worker_id] = future.result()
        self.log(f"all workers stopped after {time.monotonic() - self._start:.2f}s")

    def _collect(self, futures, tours) -> None:
        deadline = self._start + self.cfg.run_duration
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            self._raise_failures(futures)
            try:
                worker_id, tour = tours.get(timeout=min(remaining, self.cfg.poll_interval))
            except queue.Empty:
                continue
            self.offer(worker_id, tour)

    def _drain(self, tours) -> None:
        while True:
            try:
                worker_id, tour = tours.get_nowait()
            except queue.Empty:
                return
            self.offer(worker_id, tour)

    def _raise_failures(self, futures) -> None:
        for future, worker_id in futures.items():
            if future.done() and future.exception() is not None:
                self.log(f"worker {worker_id} failed: {future.exception()}")
                raise future.exception()
