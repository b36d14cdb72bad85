"""Concurrent stress harness for the four map variants.

Each worker loops over a small shared key pool and does the classic
get-or-insert dance:

    handle = map.get(key)
    if handle is None:
        handle = map.insert(key, value)     # MERGE: join a racing insert
    maybe clone it, read the value, release everything

Blocking variants run one worker per thread; cooperative variants run
one task per worker on a single event loop and yield between steps.
A correct map ends every run empty, and no worker ever reads a value
that was already torn down.
"""
from __future__ import annotations

import asyncio
import logging
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from rodmap.maps.blocking import BlockingRodMap, RodBTreeMap, RodHashMap
from rodmap.maps.cooperative import AsyncRodBTreeMap, AsyncRodHashMap, AsyncRodMap
from rodmap.policy import DuplicateKeyPolicy

log = logging.getLogger(__name__)

VARIANTS = ("hash", "btree")
SUBSTRATES = ("blocking", "cooperative")

_BLOCKING: dict[str, type[BlockingRodMap]] = {
    "hash": RodHashMap,
    "btree": RodBTreeMap,
}
_COOPERATIVE: dict[str, type[AsyncRodMap]] = {
    "hash": AsyncRodHashMap,
    "btree": AsyncRodBTreeMap,
}


@dataclass(slots=True)
class StressResult:
    """Counters and timing from one stress run."""
    variant: str
    substrate: str
    workers: int
    rounds: int
    inserts: int
    hits: int
    clones: int
    dead_reads: int
    final_size: int
    total_time_ms: float
    ops_per_sec: float

    @property
    def clean(self) -> bool:
        """True if the map emptied itself and no dead value was observed."""
        return self.final_size == 0 and self.dead_reads == 0


@dataclass(slots=True)
class _Tally:
    inserts: int = 0
    hits: int = 0
    clones: int = 0
    dead_reads: int = 0

    def merge(self, other: _Tally) -> None:
        self.inserts += other.inserts
        self.hits += other.hits
        self.clones += other.clones
        self.dead_reads += other.dead_reads


def _key_pool(num_keys: int) -> list[str]:
    return [f"key-{i:05d}" for i in range(num_keys)]


def _check_value(value: object, key: str, tally: _Tally) -> None:
    if not (isinstance(value, str) and value.startswith(key)):
        tally.dead_reads += 1


def _blocking_worker(
    rmap: BlockingRodMap, keys: list[str], rounds: int, seed: int,
) -> _Tally:
    rng = random.Random(seed)
    tally = _Tally()
    for _ in range(rounds):
        key = rng.choice(keys)
        handle = rmap.get(key)
        if handle is None:
            handle = rmap.insert(key, f"{key}/{threading.get_ident()}")
            tally.inserts += 1
        else:
            tally.hits += 1
        with handle:
            _check_value(handle.value, key, tally)
            if rng.random() < 0.25:
                with handle.clone() as extra:
                    tally.clones += 1
                    _check_value(extra.value, key, tally)
    return tally


async def _cooperative_worker(
    rmap: AsyncRodMap, keys: list[str], rounds: int, seed: int,
) -> _Tally:
    rng = random.Random(seed)
    tally = _Tally()
    for _ in range(rounds):
        key = rng.choice(keys)
        handle = await rmap.get(key)
        if handle is None:
            handle = await rmap.insert(key, f"{key}/{seed}")
            tally.inserts += 1
        else:
            tally.hits += 1
        with handle:
            await asyncio.sleep(0)  # let other tasks interleave while we hold it
            _check_value(handle.value, key, tally)
            if rng.random() < 0.25:
                with handle.clone() as extra:
                    tally.clones += 1
                    await asyncio.sleep(0)
                    _check_value(extra.value, key, tally)
    return tally


def _run_blocking(variant: str, workers: int, keys: list[str], rounds: int, seed: int):
    rmap = _BLOCKING[variant](
        duplicate_policy=DuplicateKeyPolicy.MERGE, name=f"stress-{variant}",
    )
    total = _Tally()
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futs = [
            pool.submit(_blocking_worker, rmap, keys, rounds, seed + w)
            for w in range(workers)
        ]
        for fut in futs:
            total.merge(fut.result())
    return total, rmap.size()


async def _run_cooperative_async(
    variant: str, workers: int, keys: list[str], rounds: int, seed: int,
):
    rmap = _COOPERATIVE[variant](
        duplicate_policy=DuplicateKeyPolicy.MERGE, name=f"stress-async-{variant}",
    )
    tallies = await asyncio.gather(*(
        _cooperative_worker(rmap, keys, rounds, seed + w) for w in range(workers)
    ))
    total = _Tally()
    for t in tallies:
        total.merge(t)
    return total, await rmap.size()


def run_stress(
    variant: str = "hash",
    substrate: str = "blocking",
    workers: int = 8,
    num_keys: int = 32,
    rounds: int = 2_000,
    seed: int = 42,
) -> StressResult:
    """Hammer one map variant and report what happened.

    Raises ValueError for an unknown variant or substrate.
    """
    if variant not in VARIANTS:
        raise ValueError(f"variant must be one of {VARIANTS}, got {variant!r}")
    if substrate not in SUBSTRATES:
        raise ValueError(f"substrate must be one of {SUBSTRATES}, got {substrate!r}")
    if workers <= 0 or num_keys <= 0 or rounds < 0:
        raise ValueError("workers and num_keys must be positive, rounds >= 0")

    keys = _key_pool(num_keys)
    log.info(
        "stress: %s/%s, %d workers x %d rounds over %d keys",
        variant, substrate, workers, rounds, num_keys,
    )
    start = time.perf_counter()
    if substrate == "blocking":
        tally, final_size = _run_blocking(variant, workers, keys, rounds, seed)
    else:
        tally, final_size = asyncio.run(
            _run_cooperative_async(variant, workers, keys, rounds, seed)
        )
    elapsed = time.perf_counter() - start

    total_ops = workers * rounds
    result = StressResult(
        variant=variant,
        substrate=substrate,
        workers=workers,
        rounds=rounds,
        inserts=tally.inserts,
        hits=tally.hits,
        clones=tally.clones,
        dead_reads=tally.dead_reads,
        final_size=final_size,
        total_time_ms=elapsed * 1000,
        ops_per_sec=total_ops / elapsed if elapsed > 0 else 0.0,
    )
    if not result.clean:
        log.error(
            "stress: map not clean (final_size=%d, dead_reads=%d)",
            result.final_size, result.dead_reads,
        )
    return result


def format_report(result: StressResult) -> str:
    """Format a StressResult as a readable report string."""
    lines = [
        f"=== {result.variant} / {result.substrate} ===",
        f"Workers x rounds:  {result.workers} x {result.rounds:,}",
        f"Total time:        {result.total_time_ms:.1f} ms",
        f"Throughput:        {result.ops_per_sec:,.0f} ops/sec",
        f"",
        f"Inserts:           {result.inserts:,}",
        f"Hits:              {result.hits:,}",
        f"Clones:            {result.clones:,}",
        f"Dead reads:        {result.dead_reads:,}",
        f"Final size:        {result.final_size:,}",
        f"Result:            {'CLEAN' if result.clean else 'LEAKED'}",
    ]
    return "\n".join(lines)
