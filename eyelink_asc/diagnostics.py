"""Decode diagnostics and structural errors."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class AscFormatError(ValueError):
    """Raised when the input has no usable trial structure."""


class DiagnosticKind(Enum):
    """Recoverable problems met while decoding an ASC file."""

    MISSING_SAMPLES_LINE = "missing-samples-line"
    UNTERMINATED_TRIAL = "unterminated-trial"
    COLUMN_MISMATCH = "column-mismatch"
    MERGE_FAILURE = "merge-failure"
    ALL_GAZE_MISSING = "all-gaze-missing"


_LEVELS = {
    DiagnosticKind.MISSING_SAMPLES_LINE: logging.INFO,
}


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    block: Optional[int] = None

    @property
    def level(self) -> int:
        return _LEVELS.get(self.kind, logging.WARNING)

    def __str__(self) -> str:
        where = f"block {self.block}: " if self.block is not None else ""
        return f"[{self.kind.value}] {where}{self.message}"


def emit(diagnostics: Iterable[Diagnostic]) -> None:
    """Log diagnostics from the calling process."""
    for diag in diagnostics:
        logger.log(diag.level, "%s", diag)
