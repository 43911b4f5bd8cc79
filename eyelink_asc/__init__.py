"""EyeLink ASC decoding toolkit."""

from .config import ReaderConfig
from .diagnostics import AscFormatError, Diagnostic, DiagnosticKind
from .domain import AscRecording, BlockHeaderConfig, RawTable, RecordingSchema, TrialBlock
from .metadata import extract_schema
from .reader import AscReader, read_asc
from .samples import raw_columns
from .segmentation import segment_trials

__all__ = [
    "ReaderConfig",
    "AscFormatError",
    "Diagnostic",
    "DiagnosticKind",
    "AscRecording",
    "BlockHeaderConfig",
    "RawTable",
    "RecordingSchema",
    "TrialBlock",
    "extract_schema",
    "AscReader",
    "read_asc",
    "raw_columns",
    "segment_trials",
]
