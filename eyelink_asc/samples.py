"""Raw sample decoding.

Raw rows are the block lines starting with a digit. Their column layout is
not fixed: it follows from the file-level :class:`RecordingSchema`
(see :func:`raw_columns`). Rows where the gaze position fields hold "."
for every recorded eye are stored inconsistently by the tracker, so they are
pulled out before the bulk decode, reduced to their timestamp and merged back
in time order. A "." anywhere else (velocity, one eye of two) becomes a null
through numeric coercion.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from .diagnostics import Diagnostic, DiagnosticKind
from .domain import RawTable, RecordingSchema

logger = logging.getLogger(__name__)

Column = Tuple[str, str]

_GAZE_PAIRS = (("xp", "yp"), ("xpl", "ypl"), ("xpr", "ypr"))
_LEADING_TIME = re.compile(r"^(\d+(?:\.\d+)?)")


def raw_columns(schema: RecordingSchema) -> List[Column]:
    """Column names and kinds (``int``, ``float``, ``str``) of a raw row."""
    eye = ["xp", "yp", "ps"]
    if schema.has_velocity:
        eye += ["xv", "yv"]
    if schema.has_resolution:
        eye += ["xr", "yr"]

    if schema.is_binocular:
        eye = [f"{name}l" for name in eye] + [f"{name}r" for name in eye]

    columns: List[Column] = [("time", "int")] + [(name, "float") for name in eye]

    if schema.has_corneal_reflection:
        columns.append(("cr.info", "str"))

    # Remote setup: target position, distance and status flags
    if schema.has_head_target:
        columns += [("tx", "float"), ("ty", "float"), ("td", "float"), ("remote.info", "str")]

    return columns


def is_raw_line(line: str) -> bool:
    return line[:1].isdigit()


def gaze_fields(layout: Sequence[Column]) -> List[Tuple[int, int]]:
    """Tab-field indices of the x/y gaze position of each recorded eye."""
    names = [name for name, _ in layout]
    return [(names.index(x), names.index(y)) for x, y in _GAZE_PAIRS if x in names]


def has_missing_gaze(row: str, fields: Sequence[Tuple[int, int]]) -> bool:
    """True when every recorded eye has "." for both gaze coordinates."""
    values = row.split("\t")
    return all(
        y < len(values) and values[x].strip() == "." and values[y].strip() == "."
        for x, y in fields
    )


def _to_time(values: pd.Series) -> pd.Series:
    # Integer timestamps, except 2000 Hz recordings which carry half milliseconds
    numeric = pd.to_numeric(values, errors="coerce").astype(float)
    known = numeric.dropna()
    if (known == known.round()).all():
        return numeric.astype("Int64")
    return numeric


def _coerce(values: pd.Series, kind: str) -> pd.Series:
    values = values.str.strip()
    if kind == "str":
        return values
    if kind == "int":
        return _to_time(values)
    return pd.to_numeric(values, errors="coerce").astype(float)


def _maybe_numeric(values: pd.Series) -> pd.Series:
    values = values.str.strip()
    numeric = pd.to_numeric(values, errors="coerce")
    if numeric.notna().sum() == values.notna().sum():
        return numeric
    return values


def _empty_frame(layout: Sequence[Column]) -> pd.DataFrame:
    dtypes = {"int": "Int64", "float": float, "str": object}
    return pd.DataFrame({name: pd.Series(dtype=dtypes[kind]) for name, kind in layout})


def _decode_bulk(
    rows: Sequence[str], layout: Sequence[Column], block: Optional[int]
) -> Tuple[pd.DataFrame, bool, List[Diagnostic]]:
    frame = pd.DataFrame([row.split("\t") for row in rows])

    if frame.shape[1] == len(layout):
        frame.columns = [name for name, _ in layout]
        for name, kind in layout:
            frame[name] = _coerce(frame[name], kind)
        return frame, False, []

    diag = Diagnostic(
        DiagnosticKind.COLUMN_MISMATCH,
        f"raw rows have {frame.shape[1]} columns, schema expects {len(layout)}; "
        "assuming the first one is time, please check the others",
        block,
    )
    for col in frame.columns[1:]:
        frame[col] = _maybe_numeric(frame[col])
    frame[0] = _coerce(frame[0], "int")
    frame = frame.rename(columns={0: "time"})
    return frame, True, [diag]


def _with_missing_rows(frame: pd.DataFrame, rows: Sequence[str]) -> pd.DataFrame:
    """Append timestamp-only rows for ``rows`` and restore time order."""
    times = [float(_LEADING_TIME.match(row).group(1)) for row in rows]
    patch = frame.iloc[0:0].reindex(range(len(rows)))
    patch["time"] = times
    frame = frame.assign(time=frame["time"].astype(float))
    if len(frame):
        frame = pd.concat([frame, patch], ignore_index=True)
    else:
        frame = patch
    frame["time"] = _to_time(frame["time"])
    return frame.sort_values("time", kind="mergesort").reset_index(drop=True)


def decode_raw_samples(
    lines: Sequence[str],
    schema: Optional[RecordingSchema],
    block: Optional[int] = None,
) -> Tuple[Optional[RawTable], List[Diagnostic]]:
    """
    Decode the raw rows among ``lines``.

    Returns ``(None, [])`` when the file carries no raw data (``schema`` is
    None) or the block has no raw row.
    """
    if schema is None:
        return None, []

    rows = [line for line in lines if is_raw_line(line)]
    if not rows:
        return None, []

    layout = raw_columns(schema)
    fields = gaze_fields(layout)
    missing = [row for row in rows if has_missing_gaze(row, fields)]
    present = [row for row in rows if not has_missing_gaze(row, fields)]

    if not present:
        diag = Diagnostic(
            DiagnosticKind.ALL_GAZE_MISSING,
            f"gaze position missing in all {len(missing)} samples",
            block,
        )
        return RawTable(frame=_with_missing_rows(_empty_frame(layout), missing)), [diag]

    frame, positional, diagnostics = _decode_bulk(present, layout, block)
    if missing:
        logger.debug("Block %s: %s samples without gaze position", block, len(missing))
        frame = _with_missing_rows(frame, missing)

    return RawTable(frame=frame, positional=positional), diagnostics
