"""Decoding of a single trial block."""
from __future__ import annotations

from typing import Optional

from .domain import RecordingSchema, TrialBlock, TrialSpan
from .events import decode_events
from .header import parse_block_header
from .samples import decode_raw_samples, is_raw_line


def decode_block(span: TrialSpan, schema: Optional[RecordingSchema]) -> TrialBlock:
    """Decode one trial.

    Pure function of its arguments, so blocks can be decoded in any order or
    in separate worker processes.
    """
    header = parse_block_header(span.lines, span.declarations)
    raw, raw_diags = decode_raw_samples(span.lines, schema, span.index)

    event_lines = [line for line in span.lines if not is_raw_line(line)]
    tables, event_diags = decode_events(event_lines, span.index)

    return TrialBlock(
        index=span.index,
        trial_id=span.trial_id,
        header=header,
        raw=raw,
        fix=tables["fix"],
        sacc=tables["sacc"],
        blinks=tables["blinks"],
        msg=tables["msg"],
        diagnostics=tuple(raw_diags + event_diags),
    )
