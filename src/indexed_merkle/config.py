"""Tree configuration and environment loading."""

import logging
import os
from dataclasses import dataclass

from indexed_merkle.hashing import HASHERS

DEFAULT_DEPTH = 32


@dataclass
class IMTConfig:
    """Configuration for creating an indexed Merkle tree."""

    depth: int = DEFAULT_DEPTH
    hash_algorithm: str = "keccak256"

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        if not isinstance(self.depth, int) or isinstance(self.depth, bool) or not 1 <= self.depth <= 64:
            raise ValueError(f"depth must be an int in 1..64, got {self.depth!r}")
        if self.hash_algorithm not in HASHERS:
            raise ValueError(
                f"Unknown hash algorithm: {self.hash_algorithm!r} (expected one of {sorted(HASHERS)})"
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level.upper())

    @classmethod
    def from_env(cls) -> "IMTConfig":
        """Create config from environment variables."""
        return cls(
            depth=int(os.environ.get("IMT_DEPTH", str(DEFAULT_DEPTH))),
            hash_algorithm=os.environ.get("IMT_HASH_ALGORITHM", "keccak256"),
            log_level=os.environ.get("IMT_LOG_LEVEL", "INFO"),
        )
