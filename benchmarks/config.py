"""Benchmark configuration and metadata management."""

import os
import subprocess
from dataclasses import dataclass
from typing import Optional


@dataclass
class BenchmarkConfig:
    """Configuration for benchmark runs."""

    # Reproducibility
    seed: int = 42

    # Benchmark parameters
    sizes: list[int] = None
    depths: list[int] = None
    repetitions: int = 20

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        if self.sizes is None:
            self.sizes = [10, 100, 1000]
        if self.depths is None:
            self.depths = [16, 32]

    @classmethod
    def from_env(cls) -> "BenchmarkConfig":
        """Create config from environment variables."""
        sizes = os.environ.get("BENCHMARK_SIZES")
        depths = os.environ.get("BENCHMARK_DEPTHS")
        return cls(
            seed=int(os.environ.get("BENCHMARK_SEED", "42")),
            sizes=[int(s) for s in sizes.split(",")] if sizes else None,
            depths=[int(d) for d in depths.split(",")] if depths else None,
            repetitions=int(os.environ.get("BENCHMARK_REPETITIONS", "20")),
            log_level=os.environ.get("BENCHMARK_LOG_LEVEL", "INFO"),
        )


def get_git_commit_hash() -> Optional[str]:
    """Get the current git commit hash."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            cwd=os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None


@dataclass
class BenchmarkMetadata:
    """Metadata about a benchmark run."""

    commit_hash: Optional[str]
    config: BenchmarkConfig
    size: int
    depth: int
    repetitions: int

    def __str__(self) -> str:
        """Format metadata as string."""
        lines = [
            f"Commit: {self.commit_hash or 'unknown'}",
            f"Seed: {self.config.seed}",
            f"Size (n): {self.size}",
            f"Depth: {self.depth}",
            f"Repetitions: {self.repetitions}",
        ]
        return "\n".join(lines)
