# eyelink_asc/reader.py
"""ASC decoding orchestration.

Runs the sequential stages (schema inference, head-target repair,
segmentation) once, then decodes trial blocks independently with joblib and
merges the results.

Example:
    >>> from eyelink_asc import read_asc, ReaderConfig
    >>> rec = read_asc("mono500.asc.gz", ReaderConfig(n_jobs=4))
    >>> rec.raw.groupby("trial_id")["time"].count()
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from joblib import Parallel, delayed

from .aggregate import BlockAggregator
from .blocks import decode_block
from .config import ReaderConfig
from .diagnostics import Diagnostic, DiagnosticKind, emit
from .domain import AscRecording, TrialBlock
from .io import normalize_lines, read_asc_lines
from .metadata import extract_schema, repair_head_target
from .segmentation import find_header, segment_trials

logger = logging.getLogger(__name__)

Source = Union[str, Path, Iterable[str]]


class AscReader:
    """Decode EyeLink ASC exports into block-tagged pandas tables."""

    def __init__(self, config: Optional[ReaderConfig] = None) -> None:
        self.config = config or ReaderConfig()

    def read(self, path: Union[str, Path]) -> AscRecording:
        logger.info("Reading %s", path)
        return self.decode(read_asc_lines(path, encoding=self.config.encoding))

    def decode(self, lines: Iterable[str]) -> AscRecording:
        """Decode raw text lines (normalization included)."""
        return self.decode_normalized(normalize_lines(lines))

    def decode_normalized(self, lines: Sequence[str]) -> AscRecording:
        """Decode lines that already went through :func:`normalize_lines`."""
        diagnostics: List[Diagnostic] = []

        schema = extract_schema(lines)
        if schema is None:
            diagnostics.append(
                Diagnostic(DiagnosticKind.MISSING_SAMPLES_LINE, "no SAMPLES line, file has no raw data")
            )
        lines = repair_head_target(lines, schema)

        header = find_header(lines)
        segmentation = segment_trials(lines)
        diagnostics.extend(segmentation.diagnostics)

        blocks = self._decode_blocks(segmentation.spans, schema)
        for block in blocks:
            diagnostics.extend(block.diagnostics)

        aggregator = BlockAggregator(blocks)
        tables, merge_diags = aggregator.collect_all()
        diagnostics.extend(merge_diags)
        emit(diagnostics)

        return AscRecording(
            schema=schema,
            trial_ids=segmentation.trial_ids,
            blocks=blocks,
            trials=aggregator.trials(),
            header=header,
            excluded_trials=segmentation.excluded,
            diagnostics=diagnostics,
            **tables,
        )

    def _decode_blocks(self, spans, schema) -> List[TrialBlock]:
        cfg = self.config
        if cfg.n_jobs != 1:
            logger.info("Decoding %s blocks with n_jobs=%s", len(spans), cfg.n_jobs)
        parallel = Parallel(n_jobs=cfg.n_jobs, backend=cfg.backend)
        return list(parallel(delayed(decode_block)(span, schema) for span in spans))


def read_asc(source: Source, config: Optional[ReaderConfig] = None) -> AscRecording:
    """Decode an ASC file path, or an iterable of its raw lines."""
    reader = AscReader(config)
    if isinstance(source, (str, Path)):
        return reader.read(source)
    return reader.decode(source)
