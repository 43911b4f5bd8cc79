from typing import List

import pytest

from eyelink_asc.domain import RecordingSchema

SAMPLES_MONO_CR = "SAMPLES\tRATE\t500\tTRACKING\tCR\tFILTER\t2\tLEFT"
EVENTS_MONO = "EVENTS\tGAZE\tLEFT\tRATE\t 500.00\tTRACKING\tCR\tFILTER\t2"


def raw_row(time: int, x: float = 511.0, y: float = 385.0, pupil: float = 1000.0) -> str:
    return f"{time}\t {x:.1f}\t {y:.1f}\t {pupil:.1f}\t..."


def missing_row(time: int) -> str:
    return f"{time}\t   .\t   .\t    0.0\t..."


def trial(trial_id: str, start: int, body: List[str]) -> List[str]:
    return [f"MSG\t{start} TRIALID {trial_id}", *body, f"MSG\t{start + 100} TRIAL_RESULT 0"]


@pytest.fixture
def minimal_lines() -> List[str]:
    """One START, one SAMPLES line and a single trial with three samples."""
    return [
        "** CONVERTED FROM test.edf",
        "START\t100\tLEFT\tSAMPLES\tEVENTS",
        SAMPLES_MONO_CR,
        "MSG\t100 TRIALID A",
        raw_row(100),
        raw_row(102),
        raw_row(104),
        "EFIX L   100\t150\t50\t10.0\t20.0\t800",
        "MSG\t200 TRIAL_RESULT 0",
    ]


@pytest.fixture
def two_trial_lines() -> List[str]:
    return [
        "START\t100\tLEFT\tSAMPLES\tEVENTS",
        EVENTS_MONO,
        SAMPLES_MONO_CR,
        *trial(
            "1",
            100,
            [
                raw_row(100),
                missing_row(102),
                raw_row(104),
                "SFIX L   100",
                "EFIX L   100\t104\t6\t  511.0\t  385.0\t   1000",
                "EBLINK L 102\t102\t2",
            ],
        ),
        *trial(
            "2",
            300,
            [
                raw_row(300, x=600.0),
                raw_row(302, x=700.0),
                "ESACC L  300\t302\t4\t  600.0\t  385.0\t  700.0\t  385.0\t   2.50\t    120",
            ],
        ),
        "END\t402 \tSAMPLES\tEVENTS\tRES\t  38.00\t  31.00",
    ]


@pytest.fixture
def mono_cr_schema() -> RecordingSchema:
    return RecordingSchema(has_corneal_reflection=True, has_left_eye=True)
