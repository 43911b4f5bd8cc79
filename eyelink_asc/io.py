# eyelink_asc/io.py
"""Line source for ASC exports and TSV output helpers."""
from __future__ import annotations

import gzip
import re
from pathlib import Path
from typing import Iterable, List

import pandas as pd

# Blank lines and lines holding a single bare word
_EMPTY_OR_WORD = re.compile(r"^\w*$")


def read_asc_lines(path: str | Path, encoding: str = "latin-1") -> List[str]:
    """Read an ASC file (plain or ``.gz``) into a list of raw text lines."""
    path = Path(path)
    opener = gzip.open if path.suffix == ".gz" else open
    with opener(path, "rt", encoding=encoding, newline=None) as handle:
        return handle.read().splitlines()


def to_ascii(line: str) -> str:
    return line.encode("ascii", errors="replace").decode("ascii")


def normalize_lines(lines: Iterable[str]) -> List[str]:
    """
    Prepare raw lines for decoding.

    - non-ASCII characters are replaced by ``?``
    - blank and single-word lines are dropped
    - comment lines (``#``) and ``/`` lines are dropped
    - trailing whitespace is removed
    """
    out = []
    for line in lines:
        line = to_ascii(line).rstrip()
        if _EMPTY_OR_WORD.match(line) or line.startswith(("#", "/")):
            continue
        out.append(line)
    return out


def write_tsv(df: pd.DataFrame, path: str | Path) -> None:
    """Write a decoded table as TSV."""
    df.to_csv(path, sep="\t", index=False)
