"""Event decoding: fixations, saccades, blinks and messages.

Only end-of-event lines are decoded (EFIX, ESACC, EBLINK), they carry the
full summary of the event. Fixations and saccades come in two layouts, with
or without the trailing resolution columns; the layout is picked per line
from the number of fields.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .diagnostics import Diagnostic, DiagnosticKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventLayout:
    """Column layout of one event line variant (eye designator included)."""

    name: str
    columns: Tuple[str, ...]

    @property
    def width(self) -> int:
        return len(self.columns)


_TIMING = ("eye", "stime", "etime", "dur")

FIXATION = EventLayout("fixation", _TIMING + ("axp", "ayp", "aps"))
FIXATION_RES = EventLayout("fixation+res", FIXATION.columns + ("xr", "yr"))
SACCADE = EventLayout("saccade", _TIMING + ("sxp", "syp", "exp", "eyp", "ampl", "pv"))
SACCADE_RES = EventLayout("saccade+res", SACCADE.columns + ("xr", "yr"))
BLINK = EventLayout("blink", _TIMING)

FIXATION_LAYOUTS: Mapping[int, EventLayout] = {layout.width: layout for layout in (FIXATION, FIXATION_RES)}
SACCADE_LAYOUTS: Mapping[int, EventLayout] = {layout.width: layout for layout in (SACCADE, SACCADE_RES)}
BLINK_LAYOUTS: Mapping[int, EventLayout] = {BLINK.width: BLINK}

# Line prefix -> event table
EVENT_TAGS = {
    "EFIX": "fix",
    "ESACC": "sacc",
    "EBLINK": "blinks",
    "MSG": "msg",
}

_MESSAGE = re.compile(r"^MSG\s+(\d+)\s?(.*)$")
_MESSAGE_BARE = re.compile(r"^MSG\s*")


def event_kind(line: str) -> Optional[str]:
    """Table an event line belongs to, or None for lines that are not decoded."""
    for tag, kind in EVENT_TAGS.items():
        if line.startswith(tag):
            return kind
    return None


def _split_event(line: str, tag: str) -> Optional[List[str]]:
    match = re.match(rf"^{tag}\s+([LR])\s+(.*)$", line)
    if match is None:
        return None
    return [match.group(1)] + match.group(2).split()


def parse_eye_events(
    lines: Sequence[str],
    tag: str,
    layouts: Mapping[int, EventLayout],
    block: Optional[int] = None,
) -> Tuple[Optional[pd.DataFrame], List[Diagnostic]]:
    """
    Decode ``tag`` lines into a frame.

    Each line is matched against ``layouts`` by field count. Lines with an
    unknown count are reported and skipped. Columns missing from a shorter
    variant are left null in the merged frame.
    """
    records = []
    used: Dict[int, EventLayout] = {}
    diagnostics: List[Diagnostic] = []

    for line in lines:
        fields = _split_event(line, tag)
        layout = layouts.get(len(fields)) if fields is not None else None
        if layout is None:
            expected = " or ".join(str(width) for width in sorted(layouts))
            found = len(fields) if fields is not None else "unparseable"
            diagnostics.append(
                Diagnostic(
                    DiagnosticKind.COLUMN_MISMATCH,
                    f"{tag} line with {found} fields (expected {expected}) skipped: {line!r}",
                    block,
                )
            )
            continue
        used[layout.width] = layout
        records.append(dict(zip(layout.columns, fields)))

    if not records:
        return None, diagnostics

    logger.debug("Block %s: %s %s lines, layouts %s", block, len(records), tag, [used[w].name for w in sorted(used)])
    columns = used[max(used)].columns
    frame = pd.DataFrame.from_records(records, columns=list(columns))
    for col in columns[1:]:
        frame[col] = pd.to_numeric(frame[col], errors="coerce")
    return frame, diagnostics


def parse_fixations(lines: Sequence[str], block: Optional[int] = None):
    return parse_eye_events(lines, "EFIX", FIXATION_LAYOUTS, block)


def parse_saccades(lines: Sequence[str], block: Optional[int] = None):
    return parse_eye_events(lines, "ESACC", SACCADE_LAYOUTS, block)


def parse_blinks(lines: Sequence[str], block: Optional[int] = None):
    return parse_eye_events(lines, "EBLINK", BLINK_LAYOUTS, block)


def parse_messages(lines: Sequence[str]) -> Optional[pd.DataFrame]:
    """Split MSG lines into timestamp and verbatim text."""
    if not lines:
        return None
    times = []
    texts = []
    for line in lines:
        match = _MESSAGE.match(line)
        if match:
            times.append(int(match.group(1)))
            texts.append(match.group(2))
        else:
            times.append(None)
            texts.append(_MESSAGE_BARE.sub("", line, count=1))
    return pd.DataFrame({"time": pd.array(times, dtype="Int64"), "text": texts})


def decode_events(
    lines: Sequence[str], block: Optional[int] = None
) -> Tuple[Dict[str, Optional[pd.DataFrame]], List[Diagnostic]]:
    """Route event lines to their parsers.

    Returns one entry per table kind; a kind with no line in ``lines`` maps
    to None.
    """
    routed: Dict[str, List[str]] = {kind: [] for kind in EVENT_TAGS.values()}
    for line in lines:
        kind = event_kind(line)
        if kind is not None:
            routed[kind].append(line)

    diagnostics: List[Diagnostic] = []
    tables: Dict[str, Optional[pd.DataFrame]] = {}
    for kind, parser in (("fix", parse_fixations), ("sacc", parse_saccades), ("blinks", parse_blinks)):
        if routed[kind]:
            tables[kind], diags = parser(routed[kind], block)
            diagnostics.extend(diags)
        else:
            tables[kind] = None
    tables["msg"] = parse_messages(routed["msg"])
    return tables, diagnostics
