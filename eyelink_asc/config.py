"""Configuration dataclasses for ASC decoding."""
from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(frozen=True)
class ReaderConfig:
    """Configuration for reading and decoding an ASC file."""

    # Worker count for per-block decoding (joblib semantics, -1 = all cores)
    n_jobs: int = 1

    # joblib backend; None lets joblib choose (loky)
    backend: Optional[Literal["loky", "threading", "multiprocessing"]] = None

    # Encoding used to read the file before ASCII normalization
    encoding: str = "latin-1"
