"""Domain objects produced while decoding an ASC export."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from .diagnostics import Diagnostic


@dataclass(frozen=True)
class RecordingSchema:
    """Channels present in the raw samples, read from the file-level SAMPLES line."""

    has_velocity: bool = False
    has_resolution: bool = False
    has_head_target: bool = False
    has_corneal_reflection: bool = False
    has_left_eye: bool = False
    has_right_eye: bool = False
    has_input: bool = False

    @property
    def is_monocular(self) -> bool:
        return self.has_left_eye != self.has_right_eye

    @property
    def is_binocular(self) -> bool:
        return self.has_left_eye and self.has_right_eye


@dataclass(frozen=True)
class BlockHeaderConfig:
    """Recording parameters declared by a block's SAMPLES/EVENTS line."""

    sample_rate: Optional[float] = None
    tracking_mode: Optional[str] = None
    filter_level: Optional[int] = None
    left_eye: bool = False
    right_eye: bool = False
    resolution: bool = False
    velocity: bool = False
    has_samples: bool = False


@dataclass(frozen=True)
class TrialSpan:
    """Lines of one trial, from its TRIALID message to its TRIAL_RESULT message."""

    index: int
    trial_id: str
    lines: Tuple[str, ...]
    # SAMPLES/EVENTS lines in force before the opening marker
    declarations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RawTable:
    """Decoded raw samples of one block.

    ``positional`` is True when the observed column count did not match the
    schema: only ``time`` is named and the other columns keep integer labels.
    """

    frame: pd.DataFrame
    positional: bool = False


@dataclass(frozen=True)
class TrialBlock:
    index: int
    trial_id: str
    header: BlockHeaderConfig
    raw: Optional[RawTable] = None
    fix: Optional[pd.DataFrame] = None
    sacc: Optional[pd.DataFrame] = None
    blinks: Optional[pd.DataFrame] = None
    msg: Optional[pd.DataFrame] = None
    diagnostics: Tuple[Diagnostic, ...] = ()

    def table(self, kind: str) -> Optional[pd.DataFrame]:
        if kind == "raw":
            return self.raw.frame if self.raw is not None else None
        return getattr(self, kind)


# A merged table, or the per-block fallback when merging failed
Table = Union[pd.DataFrame, List[Optional[pd.DataFrame]], None]

TABLE_KINDS = ("raw", "msg", "fix", "sacc", "blinks")


@dataclass
class AscRecording:
    """Everything decoded from one ASC file."""

    schema: Optional[RecordingSchema]
    trial_ids: List[str]
    blocks: List[TrialBlock]
    raw: Table = None
    msg: Table = None
    fix: Table = None
    sacc: Table = None
    blinks: Table = None
    trials: Optional[pd.DataFrame] = None
    header: List[str] = field(default_factory=list)
    excluded_trials: int = 0
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def has_raw(self) -> bool:
        return self.schema is not None

    def tables(self) -> Dict[str, Table]:
        return {kind: getattr(self, kind) for kind in TABLE_KINDS}
