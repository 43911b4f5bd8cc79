"""Merge per-block tables into file-level tables."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pandas as pd
from pandas.api.types import is_numeric_dtype

from .diagnostics import Diagnostic, DiagnosticKind
from .domain import TABLE_KINDS, Table, TrialBlock

logger = logging.getLogger(__name__)


def _merge_problem(frames: Sequence[pd.DataFrame], positional: Set[bool]) -> Optional[str]:
    """Why ``frames`` cannot be stacked into one table, or None if they can."""
    if len(positional) > 1:
        return "schema-named and positional raw tables"
    widest = max(frames, key=lambda frame: frame.shape[1]).columns.tolist()
    for frame in frames:
        columns = frame.columns.tolist()
        if columns != widest[: len(columns)]:
            return f"column layouts differ: {columns} vs {widest}"
    for col in widest:
        kinds = {is_numeric_dtype(frame[col]) for frame in frames if col in frame.columns}
        if len(kinds) > 1:
            return f"column {col!r} mixes numeric and text values"
    return None


class BlockAggregator:
    """Concatenate block outputs, tagging rows with block index and trial id."""

    def __init__(self, blocks: Sequence[TrialBlock]) -> None:
        self.blocks = list(blocks)
        self.trial_ids: Dict[int, str] = {block.index: block.trial_id for block in self.blocks}

    def collect(self, kind: str) -> Tuple[Table, List[Diagnostic]]:
        """
        Merge one table kind across blocks.

        Blocks without that table are skipped. Frames merge when their
        column labels agree (a shorter event layout may be a prefix of a
        wider one), raw tables are all schema-named or all positional, and
        no shared column mixes numeric and text values. Otherwise the
        per-block tables are returned as a list, in block order, untagged.
        """
        present = [block for block in self.blocks if block.table(kind) is not None]
        if not present:
            return None, []

        frames = [block.table(kind) for block in present]
        positional = {block.raw.positional for block in present} if kind == "raw" else {False}
        problem = _merge_problem(frames, positional)
        if problem is None:
            try:
                merged = pd.concat(
                    [frame.assign(block=block.index) for block, frame in zip(present, frames)],
                    ignore_index=True,
                )
            except (TypeError, ValueError) as exc:
                problem = str(exc)
        if problem is not None:
            diag = Diagnostic(DiagnosticKind.MERGE_FAILURE, f"failed to merge {kind}: {problem}")
            return [block.table(kind) for block in self.blocks], [diag]

        merged["trial_id"] = merged["block"].map(self.trial_ids)
        return merged, []

    def collect_all(self) -> Tuple[Dict[str, Table], List[Diagnostic]]:
        tables: Dict[str, Table] = {}
        diagnostics: List[Diagnostic] = []
        for kind in TABLE_KINDS:
            tables[kind], diags = self.collect(kind)
            diagnostics.extend(diags)
            if isinstance(tables[kind], pd.DataFrame):
                logger.debug("Merged %s: %s rows", kind, len(tables[kind]))
        return tables, diagnostics

    def trials(self) -> Optional[pd.DataFrame]:
        """One row per block with its header configuration."""
        if not self.blocks:
            return None
        return pd.DataFrame(
            [
                {
                    "block": block.index,
                    "trial_id": block.trial_id,
                    "sample_rate": block.header.sample_rate,
                    "tracking_mode": block.header.tracking_mode,
                    "filter_level": block.header.filter_level,
                    "left_eye": block.header.left_eye,
                    "right_eye": block.header.right_eye,
                    "has_samples": block.header.has_samples,
                }
                for block in self.blocks
            ]
        )
