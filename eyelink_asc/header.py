"""Per-block recording configuration from SAMPLES/EVENTS declarations."""
from __future__ import annotations

import re
from typing import Optional, Sequence

from .domain import BlockHeaderConfig

_NUM = r"([-+]?[0-9]*\.?[0-9]+)"
_RATE = re.compile(r"RATE\s+" + _NUM)
_TRACKING = re.compile(r"TRACKING\s+(\w+)")
_FILTER = re.compile(r"FILTER\s+(\d)")


def is_data_line(line: str) -> bool:
    """True for raw rows and event/message lines, which end a block's header."""
    return line[:1].isdigit() or line.startswith(("MSG", "EFIX", "ESACC", "EBLINK", "SFIX", "SSACC", "SBLINK"))


def find_declaration(lines: Sequence[str]) -> Optional[str]:
    """
    Pick the declaration line describing a block.

    Only lines before the first raw/event line are considered (the opening
    TRIALID message itself is skipped). SAMPLES wins over EVENTS since it
    implies raw data is recorded.

    Any MSG line also ends the search. When a trial writes messages between
    TRIALID and its START, the in-block SAMPLES/EVENTS lines are not seen
    and the block falls back to the declarations in force before TRIALID.
    """
    samples = events = None
    for pos, line in enumerate(lines):
        if pos > 0 and is_data_line(line):
            break
        if line.startswith("SAMPLES"):
            samples = line
        elif line.startswith("EVENTS"):
            events = line
    return samples or events


def parse_declaration(line: Optional[str]) -> BlockHeaderConfig:
    if line is None:
        return BlockHeaderConfig()

    rate = _RATE.search(line)
    tracking = _TRACKING.search(line)
    filt = _FILTER.search(line)
    tokens = set(line.split())
    return BlockHeaderConfig(
        sample_rate=float(rate.group(1)) if rate else None,
        tracking_mode=tracking.group(1) if tracking else None,
        filter_level=int(filt.group(1)) if filt else None,
        left_eye="LEFT" in tokens,
        right_eye="RIGHT" in tokens,
        resolution="RES" in tokens,
        velocity="VEL" in tokens,
        has_samples=line.startswith("SAMPLES"),
    )


def parse_block_header(
    lines: Sequence[str], fallback: Sequence[str] = ()
) -> BlockHeaderConfig:
    """Parse a block's header; ``fallback`` holds the declarations in force before it."""
    line = find_declaration(lines)
    if line is None and fallback:
        line = find_declaration(fallback)
    return parse_declaration(line)
