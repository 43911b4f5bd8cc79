"""Split an ASC line sequence into trial blocks."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .diagnostics import AscFormatError, Diagnostic, DiagnosticKind
from .domain import TrialSpan

logger = logging.getLogger(__name__)

TRIAL_START = re.compile(r"^MSG.*TRIALID")
TRIAL_END = re.compile(r"^MSG.*TRIAL_RESULT")
_TRIAL_ID = re.compile(r"^MSG.*TRIALID\s*")


@dataclass
class Segmentation:
    """Result of block segmentation."""

    spans: List[TrialSpan]
    excluded: int = 0
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def trial_ids(self) -> List[str]:
        return [span.trial_id for span in self.spans]


def find_header(lines: Sequence[str]) -> List[str]:
    """Return the lines before the first START line.

    Raises AscFormatError when the file never starts a recording.
    """
    for idx, line in enumerate(lines):
        if line.startswith("START"):
            return list(lines[:idx])
    raise AscFormatError("No START line found; not an EyeLink ASC recording")


def trial_id_of(line: str) -> str:
    """Text following TRIALID on an opening marker line."""
    return _TRIAL_ID.sub("", line, count=1)


def _marker_positions(lines: Sequence[str]) -> Tuple[List[int], List[int]]:
    starts = [i for i, line in enumerate(lines) if TRIAL_START.match(line)]
    ends = [i for i, line in enumerate(lines) if TRIAL_END.match(line)]
    return starts, ends


def find_unterminated(lines: Sequence[str]) -> List[int]:
    """Positions of TRIALID markers not followed by a TRIAL_RESULT marker.

    Both marker kinds are walked in document order; an opening whose next
    marker is another opening (or the end of the input) never ended.
    """
    starts, ends = _marker_positions(lines)
    markers = sorted([(i, True) for i in starts] + [(i, False) for i in ends])
    dodgy = []
    for pos, (idx, is_start) in enumerate(markers):
        if not is_start:
            continue
        if pos + 1 == len(markers) or markers[pos + 1][1]:
            dodgy.append(idx)
    return dodgy


def _declarations_before(lines: Sequence[str], stop: int) -> Tuple[str, ...]:
    # Most recent EVENTS and SAMPLES lines before `stop`, in file order
    found = {}
    for idx in range(stop - 1, -1, -1):
        line = lines[idx]
        for tag in ("EVENTS", "SAMPLES"):
            if tag not in found and line.startswith(tag):
                found[tag] = idx
        if len(found) == 2 or (found and line.startswith("START")):
            break
    return tuple(lines[i] for i in sorted(found.values()))


def segment_trials(lines: Sequence[str]) -> Segmentation:
    """
    Cut the line sequence into ``[TRIALID, TRIAL_RESULT]`` spans.

    Unterminated openings are removed together with their line before
    pairing. Openings and closings are then paired by position (i-th with
    i-th), which assumes trial ranges never interleave.
    """
    starts, ends = _marker_positions(lines)
    logger.info("%s TRIALIDs detected", len(starts))
    logger.info("%s TRIAL_RESULTs detected", len(ends))

    diagnostics: List[Diagnostic] = []
    dodgy = find_unterminated(lines)
    if dodgy:
        for idx in dodgy:
            diagnostics.append(
                Diagnostic(
                    DiagnosticKind.UNTERMINATED_TRIAL,
                    f"trial {trial_id_of(lines[idx])!r} started but never ended; ignored",
                )
            )
        dropped = set(dodgy)
        lines = [line for i, line in enumerate(lines) if i not in dropped]
        starts, ends = _marker_positions(lines)
        logger.info("%s unending trials ignored", len(dodgy))

    spans = []
    for number, (first, last) in enumerate(zip(starts, ends), start=1):
        spans.append(
            TrialSpan(
                index=number,
                trial_id=trial_id_of(lines[first]),
                lines=tuple(lines[first:last + 1]),
                declarations=_declarations_before(lines, first),
            )
        )

    if not spans:
        raise AscFormatError("No complete TRIALID/TRIAL_RESULT block found")

    return Segmentation(spans=spans, excluded=len(dodgy), diagnostics=diagnostics)
