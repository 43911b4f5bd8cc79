"""Recording schema inference from the file-level SAMPLES line."""
from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from .domain import RecordingSchema

logger = logging.getLogger(__name__)

# Head-target (remote setup) status: 13 flag characters, "." when clear
HTARG_PLACEHOLDER = r"[M.][A.][N.][C.][F.][T.][B.][L.][R.][T.][B.][L.][R.]"
_HTARG = re.compile(HTARG_PLACEHOLDER)
# Placeholder glued (or space separated) to the previous field
_HTARG_UNSEPARATED = re.compile(r"(?<=[^\t.\s]) *(" + HTARG_PLACEHOLDER + ")")


def find_samples_line(lines: Sequence[str]) -> Optional[str]:
    for line in lines:
        if line.startswith("SAMPLES"):
            return line
    return None


def extract_schema(lines: Sequence[str]) -> Optional[RecordingSchema]:
    """Derive the raw-sample schema, or ``None`` if the file has no SAMPLES line.

    HTARG on the SAMPLES line is not enough: remote setups may declare it
    without recording target data, so the placeholder has to be present
    somewhere in the file.
    """
    line = find_samples_line(lines)
    if line is None:
        return None

    tokens = set(line.split())
    has_head_target = False
    if "HTARG" in tokens:
        has_head_target = any(_HTARG.search(other) for other in lines)

    schema = RecordingSchema(
        has_velocity="VEL" in tokens,
        has_resolution="RES" in tokens,
        has_head_target=has_head_target,
        has_corneal_reflection="CR" in tokens,
        has_left_eye="LEFT" in tokens,
        has_right_eye="RIGHT" in tokens,
        has_input="INPUT" in tokens,
    )
    logger.debug("Recording schema: %s", schema)
    return schema


def repair_head_target(lines: Sequence[str], schema: Optional[RecordingSchema]) -> List[str]:
    """Insert the tab some encoders omit before the head-target placeholder.

    Only raw rows are touched, and rows that already separate the placeholder
    are returned unchanged.
    """
    if schema is None or not schema.has_head_target:
        return list(lines)

    repaired = []
    fixed = 0
    for line in lines:
        if line[:1].isdigit():
            new_line = _HTARG_UNSEPARATED.sub(r"\t\1", line)
            if new_line != line:
                fixed += 1
                line = new_line
        repaired.append(line)
    if fixed:
        logger.debug("Inserted missing head-target separator in %s rows", fixed)
    return repaired
