import dataclasses

import numpy as np
import pytest

from solarview.attitude.timeline import AttitudeTimeline
from solarview.computation.area_estimator import AreaEstimator, AreaMeasurement
from solarview.io.data_writer import OutputLog
from solarview.io.obj_loader import GeometryModel
from solarview.rendering.raster_device import QueryTimeout
from solarview.simulation import Command, DriverState, SimulationDriver

from conftest import RecordingSink, square_part

ROWS = [
    "2024-03-20 00:00:00,0.0,90.0,180.0",
    "2024-03-20 00:01:00,0.0,90.0,180.0",
    "2024-03-20 00:02:00,0.0,90.0,20.0",
]


class FailingEstimator:
    """Times out on every measurement."""

    def measure(self, model, camera, eclipse_multiplier=1):
        raise QueryTimeout("stalled")


class StoppingEstimator:
    """Requests a stop after the first measurement."""

    def __init__(self, settings):
        self.inner = AreaEstimator(settings)
        self.driver = None

    def measure(self, model, camera, eclipse_multiplier=1):
        result = self.inner.measure(model, camera, eclipse_multiplier)
        self.driver.stop()
        return result


@pytest.fixture
def model():
    return GeometryModel([
        square_part("Panel", 0.25, z=0.0),
        square_part("Shade", 0.1, z=0.3),
    ], name="sat")


@pytest.fixture
def timeline(small_settings, reporter):
    return AttitudeTimeline.load(ROWS, small_settings.eclipse_angle_deg, reporter=reporter)


@pytest.fixture
def sinks():
    return RecordingSink(), RecordingSink()


def make_driver(settings, model, timeline, sinks, reporter, **kwargs):
    area_sink, power_sink = sinks
    messages = kwargs.pop("messages", [])
    return SimulationDriver(
        settings,
        model,
        timeline,
        area_log=OutputLog(area_sink, settings.write_block_size, settings.write_data, name="area"),
        power_log=OutputLog(power_sink, settings.write_block_size, settings.write_data, name="power"),
        console=messages.append,
        reporter=reporter,
        **kwargs
    )


def data_lines(sink):
    return [line for line in sink.lines if not line.startswith('%')]


def test_initial_state_writes_headers(small_settings, model, timeline, sinks, reporter):
    driver = make_driver(small_settings, model, timeline, sinks, reporter)

    assert driver.state == DriverState.IDLE
    assert driver.writing
    area_sink, power_sink = sinks
    assert area_sink.lines[1:] == ["% 1: time [s]", "% 2: Panel [m^2]", "% 3: Shade [m^2]"]
    assert power_sink.lines[1:] == ["% 1: time [s]", "% 2: power [W]"]


def test_step_does_nothing_unless_running(small_settings, model, timeline, sinks, reporter):
    driver = make_driver(small_settings, model, timeline, sinks, reporter)
    assert driver.step() is None
    assert timeline.cursor == 0


def test_run_to_finish(small_settings, model, timeline, sinks, reporter):
    driver = make_driver(small_settings, model, timeline, sinks, reporter)
    completed = driver.run(show_progress=False)

    assert completed == 3
    assert driver.state == DriverState.FINISHED
    assert timeline.is_finished

    area_sink, power_sink = sinks
    area_lines = data_lines(area_sink)
    power_lines = data_lines(power_sink)
    assert [line.split(';')[0] for line in area_lines] == [
        "2024-03-20 00:00:00", "2024-03-20 00:01:00", "2024-03-20 00:02:00"]
    assert len(power_lines) == 3

    # face-on: panel minus the shade on top of it
    panel_area = float(area_lines[0].split(';')[1])
    shade_area = float(area_lines[0].split(';')[2])
    assert panel_area == pytest.approx(0.25 - 0.04, abs=0.02)
    assert shade_area == pytest.approx(0.04, abs=0.01)

    power = float(power_lines[0].split(';')[1])
    expected = (panel_area + shade_area) * small_settings.cell_efficiency * small_settings.solar_intensity
    assert power == pytest.approx(expected, rel=1e-4)

    # last sample is eclipsed
    assert [float(v) for v in area_lines[2].split(';')[1:]] == [0.0, 0.0]
    assert float(power_lines[2].split(';')[1]) == 0.0


def test_finished_is_terminal(small_settings, model, timeline, sinks, reporter):
    driver = make_driver(small_settings, model, timeline, sinks, reporter)
    driver.run(show_progress=False)

    driver.start()
    assert driver.state == DriverState.FINISHED
    assert driver.step() is None


def test_start_on_exhausted_timeline_finishes(small_settings, model, sinks, reporter):
    empty = AttitudeTimeline([])
    driver = make_driver(small_settings, model, empty, sinks, reporter)
    driver.start()
    assert driver.state == DriverState.FINISHED


def test_pause_and_resume(small_settings, model, timeline, sinks, reporter):
    driver = make_driver(small_settings, model, timeline, sinks, reporter)
    driver.run(max_steps=1, show_progress=False)

    assert driver.state == DriverState.PAUSED
    assert timeline.cursor == 1

    driver.handle(Command.START)
    assert driver.state == DriverState.RUNNING
    driver.handle(Command.PAUSE)
    assert driver.state == DriverState.PAUSED

    driver.run(show_progress=False)
    assert driver.state == DriverState.FINISHED
    assert len(data_lines(sinks[0])) == 3


def test_manual_steps_report_to_console_only(small_settings, model, timeline, sinks, reporter):
    messages = []
    driver = make_driver(small_settings, model, timeline, sinks, reporter, messages=messages)
    writes_before = sinks[0].write_count

    result = driver.next()
    assert result is not None
    assert timeline.cursor == 1
    assert any("Area of <Panel>" in m for m in messages)
    assert any(m.startswith("Generated power") for m in messages)

    driver.previous()
    driver.previous()
    assert timeline.cursor == 0

    driver.flush()
    assert sinks[0].write_count == writes_before
    assert driver.area_log.pending == 0


def test_manual_steps_ignored_while_running(small_settings, model, timeline, sinks, reporter):
    driver = make_driver(small_settings, model, timeline, sinks, reporter)
    driver.start()
    assert driver.next() is None
    assert timeline.cursor == 0


def test_query_timeout_pauses_without_logging(small_settings, model, timeline, sinks, reporter):
    driver = make_driver(small_settings, model, timeline, sinks, reporter, estimator=FailingEstimator())
    completed = driver.run(show_progress=False)

    assert completed == 0
    assert driver.state == DriverState.PAUSED
    assert timeline.cursor == 0
    assert reporter.error_count == 1
    driver.flush()
    assert data_lines(sinks[0]) == []


def test_stop_keeps_unflushed_lines_in_memory(small_settings, model, timeline, sinks, reporter):
    estimator = StoppingEstimator(small_settings)
    driver = make_driver(small_settings, model, timeline, sinks, reporter, estimator=estimator)
    estimator.driver = driver

    completed = driver.run(show_progress=False)

    assert completed == 1
    assert driver.state == DriverState.PAUSED
    assert driver.area_log.pending == 1
    assert data_lines(sinks[0]) == []

    driver.flush()
    assert len(data_lines(sinks[0])) == 1


def test_toggle_write(small_settings, model, timeline, sinks, reporter):
    driver = make_driver(small_settings, model, timeline, sinks, reporter)
    area_sink = sinks[0]

    driver.run(max_steps=1, show_progress=False)
    assert driver.toggle_write() is False
    # pending line flushed before switching off
    assert len(data_lines(area_sink)) == 1

    driver.run(max_steps=1, show_progress=False)
    assert len(data_lines(area_sink)) == 1

    assert driver.toggle_write() is True
    # new log: header written with truncation
    assert area_sink.writes[-1][1] is False
    assert area_sink.writes[-1][0][0].startswith("% File generated on")


def test_reload_resets_cursor_and_state(small_settings, model, timeline, sinks, reporter):
    driver = make_driver(small_settings, model, timeline, sinks, reporter)
    driver.run(show_progress=False)
    assert driver.state == DriverState.FINISHED

    new_model = GeometryModel([square_part("Only", 0.2)])
    new_timeline = AttitudeTimeline.load(ROWS[:2], small_settings.eclipse_angle_deg)
    driver.reload(new_model, new_timeline)

    assert driver.state == DriverState.IDLE
    assert driver.model is new_model
    assert new_timeline.cursor == small_settings.start_index
    assert sinks[0].writes[-1][0][-1] == "% 2: Only [m^2]"


def test_reload_command_uses_source(small_settings, model, timeline, sinks, reporter):
    fresh = AttitudeTimeline.load(ROWS, small_settings.eclipse_angle_deg)
    driver = make_driver(small_settings, model, timeline, sinks, reporter,
                         reload_source=lambda: (model, fresh))
    driver.run(show_progress=False)

    driver.handle(Command.RELOAD)
    assert driver.timeline is fresh
    assert driver.state == DriverState.IDLE


def test_invalid_solar_cell_index_reported_once(small_settings, timeline, sinks, reporter):
    single = GeometryModel([square_part("Panel", 0.25)])
    driver = make_driver(small_settings, single, timeline, sinks, reporter)
    driver.run(show_progress=False)
    assert reporter.error_count == 1


def test_default_logs_in_memory(small_settings, model, timeline, reporter):
    driver = SimulationDriver(small_settings, model, timeline, reporter=reporter, console=lambda m: None)
    driver.run(show_progress=False)
    assert len([l for l in driver.area_log.sink.lines if not l.startswith('%')]) == 3


def test_run_with_elevation_offset_reaching_zenith(small_settings, model, reporter, sinks):
    settings = dataclasses.replace(small_settings, elevation_offset=10.0)
    timeline = AttitudeTimeline.load(["0,0,80,180"], settings.eclipse_angle_deg, reporter=reporter)
    driver = make_driver(settings, model, timeline, sinks, reporter)

    assert driver.run(show_progress=False) == 1
    assert driver.state == DriverState.FINISHED
    assert len(data_lines(sinks[0])) == 1
    assert reporter.error_count == 0
