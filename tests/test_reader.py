import gzip

import pandas as pd
import pytest

from eyelink_asc import AscFormatError, DiagnosticKind, ReaderConfig, read_asc
from eyelink_asc.segmentation import TRIAL_START, trial_id_of

from conftest import SAMPLES_MONO_CR, raw_row, trial


def test_minimal_file_end_to_end(minimal_lines):
    rec = read_asc(minimal_lines)

    assert rec.trial_ids == ["A"]
    assert len(rec.blocks) == 1
    assert rec.excluded_trials == 0
    assert len(rec.raw) == 3
    assert rec.raw["block"].unique().tolist() == [1]
    assert rec.raw["trial_id"].unique().tolist() == ["A"]
    assert len(rec.fix) == 1
    assert rec.fix.loc[0, "block"] == 1
    assert rec.fix.loc[0, "dur"] == 50
    assert rec.msg["text"].tolist() == ["TRIALID A", "TRIAL_RESULT 0"]
    assert rec.sacc is None
    assert rec.blinks is None
    assert rec.header == ["** CONVERTED FROM test.edf"]
    assert rec.blocks[0].header.sample_rate == 500.0


def test_two_openings_one_closing():
    lines = [
        "START\t100\tLEFT",
        SAMPLES_MONO_CR,
        "MSG\t100 TRIALID first",
        raw_row(100),
        *trial("second", 200, [raw_row(200), raw_row(202)]),
    ]
    rec = read_asc(lines)

    assert rec.trial_ids == ["second"]
    assert rec.excluded_trials == 1
    kinds = [d.kind for d in rec.diagnostics]
    assert kinds.count(DiagnosticKind.UNTERMINATED_TRIAL) == 1
    assert rec.raw["time"].tolist() == [200, 202]


def test_trial_ids_round_trip(two_trial_lines):
    rec = read_asc(two_trial_lines)
    independent = [trial_id_of(line) for line in two_trial_lines if TRIAL_START.match(line)]

    assert rec.trial_ids == independent
    assert rec.trials["trial_id"].tolist() == independent


def test_missing_gaze_row_in_final_table(two_trial_lines):
    rec = read_asc(two_trial_lines)
    first = rec.raw[rec.raw["block"] == 1]

    assert first["time"].tolist() == [100, 102, 104]
    assert pd.isna(first["xp"].iloc[1])
    assert rec.blinks["trial_id"].tolist() == ["1"]
    assert rec.sacc["trial_id"].tolist() == ["2"]


def test_event_only_file_has_no_raw_table():
    lines = [
        "START\t100\tLEFT\tEVENTS",
        "EVENTS\tGAZE\tLEFT\tRATE\t500",
        *trial("1", 100, ["EFIX L   100\t150\t50\t  10.0\t  20.0\t  800"]),
    ]
    rec = read_asc(lines)

    assert rec.schema is None
    assert not rec.has_raw
    assert rec.raw is None
    assert len(rec.fix) == 1
    assert [d.kind for d in rec.diagnostics] == [DiagnosticKind.MISSING_SAMPLES_LINE]


def test_block_with_extra_raw_columns_is_kept_apart():
    lines = [
        "START\t100\tLEFT\tSAMPLES",
        SAMPLES_MONO_CR,
        *trial("1", 100, [raw_row(100), raw_row(102)]),
        *trial("2", 300, ["300\t 511.0\t 385.0\t 1000.0\t 1.5\t 2.5\t..."]),
    ]
    rec = read_asc(lines)

    assert isinstance(rec.raw, list)
    assert len(rec.raw) == 2
    assert list(rec.raw[0].columns) == ["time", "xp", "yp", "ps", "cr.info"]
    assert rec.raw[1].columns[0] == "time"
    kinds = [d.kind for d in rec.diagnostics]
    assert DiagnosticKind.COLUMN_MISMATCH in kinds
    assert DiagnosticKind.MERGE_FAILURE in kinds
    assert rec.msg["trial_id"].tolist() == ["1", "1", "2", "2"]


def test_head_target_columns_are_typed():
    lines = [
        "START\t100\tLEFT\tSAMPLES",
        "SAMPLES\tGAZE\tLEFT\tHTARG\tRATE\t 500.00\tTRACKING\tCR\tFILTER\t2",
        *trial(
            "1",
            100,
            [
                "100\t 511.0\t 385.0\t 1000.0\t...\t  -28\t   82\t 600.0 .............",
                "102\t 512.0\t 386.0\t 1001.0\t...\t  -27\t   81\t 601.0.............",
            ],
        ),
    ]
    rec = read_asc(lines)

    assert rec.schema.has_head_target
    assert not rec.blocks[0].raw.positional
    assert rec.raw["tx"].tolist() == [-28.0, -27.0]
    assert rec.raw["ty"].tolist() == [82.0, 81.0]
    assert rec.raw["td"].tolist() == [600.0, 601.0]
    assert rec.raw["remote.info"].tolist() == [".............", "............."]
    assert DiagnosticKind.COLUMN_MISMATCH not in [d.kind for d in rec.diagnostics]


def test_no_start_line_is_fatal():
    with pytest.raises(AscFormatError):
        read_asc(["MSG\t100 TRIALID 1", "MSG\t200 TRIAL_RESULT 0"])


def test_parallel_decoding_matches_sequential(two_trial_lines):
    sequential = read_asc(two_trial_lines)
    parallel = read_asc(two_trial_lines, ReaderConfig(n_jobs=2, backend="threading"))

    for kind in ("raw", "msg", "fix", "sacc", "blinks"):
        pd.testing.assert_frame_equal(getattr(sequential, kind), getattr(parallel, kind))
    assert sequential.trial_ids == parallel.trial_ids


def test_read_from_gzip_file(tmp_path, minimal_lines):
    path = tmp_path / "minimal.asc.gz"
    with gzip.open(path, "wt", encoding="latin-1") as handle:
        handle.write("\n".join(["# exported", ""] + minimal_lines) + "\n")

    rec = read_asc(path)
    assert rec.trial_ids == ["A"]
    assert len(rec.raw) == 3
