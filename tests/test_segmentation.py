import pytest

from eyelink_asc.diagnostics import AscFormatError, DiagnosticKind
from eyelink_asc.segmentation import (
    TRIAL_START,
    find_header,
    find_unterminated,
    segment_trials,
    trial_id_of,
)

from conftest import raw_row, trial


def test_header_is_everything_before_start():
    lines = ["** CONVERTED FROM x.edf", "** DATE: today", "START\t100\tLEFT", "MSG\t100 hi"]
    assert find_header(lines) == ["** CONVERTED FROM x.edf", "** DATE: today"]


def test_missing_start_is_fatal():
    with pytest.raises(AscFormatError):
        find_header(["MSG\t100 TRIALID 1", "MSG\t200 TRIAL_RESULT 0"])


def test_spans_cover_opening_to_closing(two_trial_lines):
    seg = segment_trials(two_trial_lines)

    assert [span.index for span in seg.spans] == [1, 2]
    assert seg.trial_ids == ["1", "2"]
    assert seg.excluded == 0
    assert seg.diagnostics == []
    first = seg.spans[0]
    assert first.lines[0] == "MSG\t100 TRIALID 1"
    assert first.lines[-1] == "MSG\t200 TRIAL_RESULT 0"
    assert first.declarations[-1].startswith("SAMPLES")


def test_unterminated_trial_is_dropped_and_counted_once():
    lines = [
        "START\t100\tLEFT",
        "MSG\t100 TRIALID broken",
        raw_row(100),
        *trial("ok", 200, [raw_row(200)]),
    ]
    seg = segment_trials(lines)

    assert seg.trial_ids == ["ok"]
    assert seg.excluded == 1
    assert [d.kind for d in seg.diagnostics] == [DiagnosticKind.UNTERMINATED_TRIAL]
    assert seg.spans[0].lines[0] == "MSG\t200 TRIALID ok"


def test_trailing_opening_without_closing():
    lines = ["START\t1", *trial("1", 100, []), "MSG\t300 TRIALID 2", raw_row(300)]
    seg = segment_trials(lines)

    assert seg.trial_ids == ["1"]
    assert seg.excluded == 1


def test_find_unterminated_positions():
    lines = ["MSG\t1 TRIALID a", "MSG\t2 TRIALID b", "MSG\t3 TRIAL_RESULT 0", "MSG\t4 TRIALID c"]
    assert find_unterminated(lines) == [0, 3]


def test_no_complete_trial_is_fatal():
    with pytest.raises(AscFormatError):
        segment_trials(["START\t1", "MSG\t100 TRIALID 1", raw_row(100)])


def test_trial_ids_match_opening_markers(two_trial_lines):
    seg = segment_trials(two_trial_lines)
    expected = [trial_id_of(line) for line in two_trial_lines if TRIAL_START.match(line)]
    assert seg.trial_ids == expected


def test_trial_id_keeps_inner_spaces():
    assert trial_id_of("MSG\t1234 TRIALID  block 3 trial 7") == "block 3 trial 7"
