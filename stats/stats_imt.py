"""Statistics for indexed Merkle trees."""

import argparse
import logging
import os
import time
from datetime import datetime

import numpy as np
from tqdm import tqdm

from benchmarks.config import BenchmarkConfig, BenchmarkMetadata, get_git_commit_hash
from indexed_merkle.factory import create_imt
from indexed_merkle.invariants import assert_imt_invariants_raise
from indexed_merkle.tree_stats import imt_stats_

logger = logging.getLogger(__name__)


def random_imt_of_size(n: int, depth: int, rng: np.random.Generator):
    """
    Build a tree of ``depth`` holding ``n`` random keys.

    Returns:
        (tree, inserted keys, per-insert times, per-proof non-empty sibling counts)
    """
    tree = create_imt(depth)
    if n > tree.capacity:
        raise ValueError(f"Tree of depth {depth} holds at most {tree.capacity} nodes, requested {n}")

    # Keys are drawn without replacement; 0 is the sentinel.
    space = max(1 << 24, 2 * n)
    keys = rng.choice(space - 1, size=n, replace=False) + 1

    insert_times = np.empty(n)
    present_siblings = np.empty(n)
    for i, key in enumerate(keys.tolist()):
        t0 = time.perf_counter()
        proof = tree.insert(key, key)
        insert_times[i] = time.perf_counter() - t0
        present_siblings[i] = sum(s is not None for s in proof.node_siblings)

    return tree, keys, insert_times, present_siblings


def repeated_experiment(size: int, depth: int, repetitions: int, seed: int) -> None:
    """
    Repeatedly builds random trees, then updates every key once, and logs
    timing and proof-shape statistics aggregated over all repetitions.
    """
    t_all_0 = time.perf_counter()
    rng = np.random.default_rng(seed)

    insert_times = []
    update_times = []
    stats_times = []
    present_siblings = []
    cache_sizes = []

    for _ in tqdm(range(repetitions), desc=f"n={size} depth={depth}", leave=False):
        tree, keys, t_insert, siblings = random_imt_of_size(size, depth, rng)
        insert_times.append(t_insert)
        present_siblings.append(siblings)

        t_update = np.empty(len(keys))
        for i, key in enumerate(keys.tolist()):
            t0 = time.perf_counter()
            tree.update(key, key + 1)
            t_update[i] = time.perf_counter() - t0
        update_times.append(t_update)

        t0 = time.perf_counter()
        stats = imt_stats_(tree)
        stats_times.append(time.perf_counter() - t0)
        cache_sizes.append(stats.cached_digest_count)

        assert_imt_invariants_raise(tree, stats)

    insert_times = np.concatenate(insert_times)
    update_times = np.concatenate(update_times)
    present_siblings = np.concatenate(present_siblings)
    stats_times = np.asarray(stats_times)
    cache_sizes = np.asarray(cache_sizes)

    rows = [
        ("Non-empty siblings", present_siblings.mean(), present_siblings.var()),
        ("Cached digests", cache_sizes.mean(), cache_sizes.var()),
        ("Digests per node", (cache_sizes / (size + 1)).mean(), (cache_sizes / (size + 1)).var()),
    ]

    header = f"{'Metric':<20} {'Avg':>15} {'(Var)':>15}"
    sep_line = "-" * len(header)

    logger.info(header)
    logger.info(sep_line)
    for name, avg, var in rows:
        var_str = f"({var:.2f})"
        logger.info(f"{name:<20} {avg:15.2f} {var_str:>15}")

    perf_rows = [
        ("Insert time (s)", insert_times),
        ("Update time (s)", update_times),
        ("Stats time (s)", stats_times),
    ]
    total_sum = sum(t.sum() for _, t in perf_rows)

    header = f"{'Metric':<20}{'Avg(s)':>13}{'P99(s)':>13}{'Total(s)':>13}{'%Total':>10}"
    sep = "-" * len(header)

    logger.info("")
    logger.info("Performance summary:")
    logger.info(header)
    logger.info(sep)
    for name, times in perf_rows:
        pct = (times.sum() / total_sum * 100) if total_sum else 0
        logger.info(
            f"{name:<20}{times.mean():13.6f}{np.percentile(times, 99):13.6f}{times.sum():13.6f}{pct:10.2f}%"
        )

    logger.info(sep)
    logger.info("Execution time: %.3f seconds", time.perf_counter() - t_all_0)


if __name__ == "__main__":
    defaults = BenchmarkConfig.from_env()

    parser = argparse.ArgumentParser(description="Run statistics experiments for indexed Merkle trees.")
    parser.add_argument("--sizes", type=int, nargs="+", default=defaults.sizes, help="List of tree sizes to test.")
    parser.add_argument("--depths", type=int, nargs="+", default=defaults.depths, help="List of tree depths to test.")
    parser.add_argument(
        "--repetitions", type=int, default=defaults.repetitions, help="Number of repetitions for each experiment."
    )
    parser.add_argument("--seed", type=int, default=defaults.seed, help="Random seed for reproducibility.")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=defaults.log_level,
        help="Set the logging level (default: INFO)",
    )

    args = parser.parse_args()
    config = BenchmarkConfig(
        seed=args.seed,
        sizes=args.sizes,
        depths=args.depths,
        repetitions=args.repetitions,
        log_level=args.log_level,
    )

    log_dir = os.path.join(os.getcwd(), "stats/logs/imt_logs")
    os.makedirs(log_dir, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_path = os.path.join(log_dir, f"run_{ts}.log")

    log_level = getattr(logging, config.log_level)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(log_path, mode="w"),
            logging.StreamHandler(),
        ],
        force=True,
    )

    # Also apply the chosen level to the library logger so that
    # log records from indexed_merkle.* are emitted at the requested level.
    logging.getLogger("indexed_merkle").setLevel(log_level)

    commit = get_git_commit_hash()
    for n in config.sizes:
        for depth in config.depths:
            metadata = BenchmarkMetadata(
                commit_hash=commit, config=config, size=n, depth=depth, repetitions=config.repetitions
            )
            logger.info("")
            logger.info(f"---------------- NOW RUNNING EXPERIMENT ----------------\n{metadata}")
            t0 = time.perf_counter()
            repeated_experiment(size=n, depth=depth, repetitions=config.repetitions, seed=config.seed)
            logger.info(f"Total experiment time: {time.perf_counter() - t0:.3f} seconds")
