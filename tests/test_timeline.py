import pandas as pd
import pytest

from solarview.attitude.timeline import AttitudeTimeline, eclipse_multiplier, parse_timestamp

THRESHOLD = 112.0

ROWS = [
    '"Time (UTCG)","Azimuth (deg)","Elevation (deg)","Eclipse Angle (deg)"',
    "2024-01-01 00:00:00,0.0,10.0,180.0",
    "",
    "2024-01-01 00:00:10,15.0,20.0,100.0",
    "2024-01-01 00:00:20,30.0,30.0,150.0",
]


@pytest.fixture
def timeline(reporter):
    return AttitudeTimeline.load(ROWS, THRESHOLD, temporal_resolution=10.0, reporter=reporter)


def test_load_skips_header_and_blank_rows(timeline, reporter):
    assert len(timeline) == 3
    assert reporter.error_count == 0

    first = timeline[0]
    assert first.timestamp_text == "2024-01-01 00:00:00"
    assert first.timestamp == pd.Timestamp("2024-01-01 00:00:00")
    assert first.azimuth_deg == 0.0
    assert first.elevation_deg == 10.0


def test_eclipse_gate_per_sample(timeline):
    assert [s.eclipse_multiplier for s in timeline.samples] == [1, 0, 1]


def test_eclipse_multiplier_uses_absolute_angle():
    assert eclipse_multiplier(-150.0, THRESHOLD) == 1
    assert eclipse_multiplier(-50.0, THRESHOLD) == 0
    assert eclipse_multiplier(THRESHOLD, THRESHOLD) == 1


def test_malformed_row_stops_parsing(reporter):
    rows = [
        "2024-01-01 00:00:00,0,0,180",
        "2024-01-01 00:00:01,10,0,180",
        "2024-01-01 00:00:02,20,0",
        "2024-01-01 00:00:03,30,0,180",
    ]
    timeline = AttitudeTimeline.load(rows, THRESHOLD, reporter=reporter)

    assert len(timeline) == 2
    assert [s.azimuth_deg for s in timeline.samples] == [0.0, 10.0]
    assert reporter.error_count == 1


def test_unparsable_value_stops_parsing(reporter):
    rows = [
        "2024-01-01 00:00:00,0,0,180",
        "2024-01-01 00:00:01,abc,0,180",
    ]
    timeline = AttitudeTimeline.load(rows, THRESHOLD, reporter=reporter)
    assert len(timeline) == 1
    assert reporter.error_count == 1


def test_epoch_seconds_timestamps():
    assert parse_timestamp("60") == pd.Timestamp("1970-01-01 00:01:00")


def test_cursor_bounds(timeline):
    assert timeline.cursor == 0
    timeline.retreat()
    assert timeline.cursor == 0

    for _ in range(10):
        timeline.advance()
    assert timeline.cursor == len(timeline)
    assert timeline.is_finished
    assert timeline.current is None

    timeline.advance()
    assert timeline.cursor == len(timeline)

    timeline.retreat()
    assert timeline.cursor == 2
    assert not timeline.is_finished
    assert timeline.current.azimuth_deg == 30.0


def test_set_cursor_is_clamped(timeline):
    timeline.set_cursor(-5)
    assert timeline.cursor == 0
    timeline.set_cursor(99)
    assert timeline.cursor == len(timeline)
    timeline.set_cursor(1)
    assert timeline.current.azimuth_deg == 15.0


def test_index_for_timestamp(timeline):
    assert timeline.index_for_timestamp("2024-01-01 00:00:00") == 0
    assert timeline.index_for_timestamp("2024-01-01 00:00:25") == 2
    assert timeline.index_for_timestamp(pd.Timestamp("2024-01-01 00:00:10")) == 1


def test_progress(timeline):
    assert timeline.progress == 0.0
    timeline.set_cursor(3)
    assert timeline.progress == 1.0


def test_missing_file_gives_empty_timeline(tmp_path, reporter):
    timeline = AttitudeTimeline.load_file(tmp_path / "none.csv", THRESHOLD, reporter=reporter)
    assert len(timeline) == 0
    assert timeline.is_finished
    assert reporter.error_count == 1


def test_load_file(tmp_path, reporter):
    path = tmp_path / "angles.csv"
    path.write_text("\n".join(ROWS) + "\n")
    timeline = AttitudeTimeline.load_file(path, THRESHOLD, 10.0, reporter)
    assert len(timeline) == 3
    assert timeline.temporal_resolution == 10.0
