"""
Simulation driver: time-step loop over the attitude timeline.

Each running step orients the sun camera to the current sample, measures the
per-part sunlit area, converts the solar cell area to power, appends one line
to each output log and advances the cursor. Manual stepping (next/previous)
while idle or paused only reports to the console sink.
"""

import logging
from enum import Enum
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from tqdm.auto import tqdm

from ..attitude.timeline import AttitudeTimeline, AttitudeSample
from ..computation.area_estimator import AreaEstimator, AreaMeasurement
from ..computation.power import compute_power
from ..config.settings_schemas import SimulationSettings
from ..io.data_writer import (
    OutputLog,
    MemorySink,
    build_area_header,
    build_power_header,
    format_area_line,
    format_power_line,
)
from ..io.obj_loader import GeometryModel
from ..rendering.camera import ProjectionCamera
from ..rendering.raster_device import QueryTimeout
from ..utils.error_reporter import ErrorReporter, resolve_reporter
from .commands import Command

logger = logging.getLogger(__name__)


class DriverState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass
class StepResult:
    """Measurement of one sample."""
    sample: AttitudeSample
    measurement: AreaMeasurement
    power: float


class SimulationDriver:
    """
    State machine around the area estimator.

    States: IDLE -> RUNNING on start, RUNNING -> PAUSED on pause or stop,
    RUNNING -> FINISHED when the cursor reaches the end of the timeline.
    FINISHED is terminal until reload.
    """

    def __init__(
        self,
        settings: SimulationSettings,
        model: GeometryModel,
        timeline: AttitudeTimeline,
        estimator: Optional[AreaEstimator] = None,
        camera: Optional[ProjectionCamera] = None,
        area_log: Optional[OutputLog] = None,
        power_log: Optional[OutputLog] = None,
        console: Optional[Callable[[str], None]] = None,
        reporter: Optional[ErrorReporter] = None,
        reload_source: Optional[Callable[[], Tuple[GeometryModel, AttitudeTimeline]]] = None
    ):
        """
        Args:
            settings: Simulation settings
            model: Satellite model
            timeline: Attitude samples
            estimator: Area estimator; created from settings if omitted
            camera: Sun camera; created from settings if omitted
            area_log: Area output; in-memory if omitted
            power_log: Power output; in-memory if omitted
            console: Sink for manual-step reports (defaults to logger.info)
            reporter: Error reporter
            reload_source: Callable returning a fresh (model, timeline) for Command.RELOAD
        """
        self.settings = settings
        self.reporter = resolve_reporter(reporter)
        self.estimator = estimator if estimator is not None else AreaEstimator(settings)
        self.camera = camera if camera is not None else ProjectionCamera(settings)
        self.area_log = area_log if area_log is not None else OutputLog(
            MemorySink(), settings.write_block_size, settings.write_data, name="area")
        self.power_log = power_log if power_log is not None else OutputLog(
            MemorySink(), settings.write_block_size, settings.write_data, name="power")
        self.console = console if console is not None else logger.info
        self.reload_source = reload_source

        self.model = model
        self.timeline = timeline
        self.state = DriverState.IDLE
        self.steps_completed = 0
        self._stop_requested = False
        self._solar_cell_indices: List[int] = []

        self._prepare()

    # =========================================================================
    # Setup
    # =========================================================================

    def _prepare(self) -> None:
        """Validate collaborators, position the cursor and start the output logs."""
        self._solar_cell_indices = self._validate_solar_cells()
        self.timeline.set_cursor(self.settings.start_index)
        self.camera.orient(0.0, 0.0)
        self.state = DriverState.IDLE
        self._start_logs()

        logger.info(f"Driver ready: {self.model.num_parts} parts, {len(self.timeline)} samples, "
                    f"start index {self.timeline.cursor}, write data = {self.writing}")

    def _validate_solar_cells(self) -> List[int]:
        valid = []
        for i in self.settings.solar_cell_part_indices:
            if 0 <= i < self.model.num_parts:
                valid.append(i)
            else:
                self.reporter.report(f"SimulationDriver: solar cell part index {i} outside "
                                     f"model with {self.model.num_parts} parts.")
        return valid

    def _start_logs(self) -> None:
        self.area_log.start_run(build_area_header(self.model.part_names))
        self.power_log.start_run(build_power_header())

    @property
    def writing(self) -> bool:
        return self.area_log.enabled and self.power_log.enabled

    # =========================================================================
    # Measurement
    # =========================================================================

    def _measure_current(self) -> Optional[StepResult]:
        """Orient to the current sample and measure; None when finished."""
        sample = self.timeline.current
        if sample is None:
            return None

        self.camera.orient(sample.azimuth_deg, sample.elevation_deg)
        measurement = self.estimator.measure(self.model, self.camera, sample.eclipse_multiplier)
        power = compute_power(
            measurement.areas,
            self._solar_cell_indices,
            self.settings.cell_efficiency,
            self.settings.solar_intensity,
            self.reporter
        )
        return StepResult(sample=sample, measurement=measurement, power=power)

    def _report_to_console(self, result: StepResult) -> None:
        self.console("- - - - - Sun - - - - -")
        for i, (name, area) in enumerate(zip(self.model.part_names, result.measurement.areas)):
            self.console(f"{i}: Area of <{name}> = {self.settings.format_value(area)} m^2.")
        self.console(f"Generated power = {result.power:.2f} W.")

    # =========================================================================
    # Transitions
    # =========================================================================

    def start(self) -> None:
        if self.state == DriverState.FINISHED:
            logger.debug("start ignored: simulation finished")
            return
        if self.timeline.is_finished:
            self._finish()
            return
        self.state = DriverState.RUNNING
        self._stop_requested = False
        logger.info(f"Simulation running from step {self.timeline.cursor} / {len(self.timeline)}")

    def pause(self) -> None:
        if self.state == DriverState.RUNNING:
            self.state = DriverState.PAUSED
            logger.info(f"Simulation paused at step {self.timeline.cursor} / {len(self.timeline)}")

    def stop(self) -> None:
        """
        Abort run() before the next step.

        Pending output lines stay in memory; call flush() to persist them.
        """
        self._stop_requested = True
        self.pause()

    def _finish(self) -> None:
        self.state = DriverState.FINISHED
        self.flush()
        logger.info(f"Simulation finished after {self.steps_completed} steps")

    def step(self) -> Optional[StepResult]:
        """
        Run one time step while RUNNING.

        Returns:
            StepResult, or None if nothing was measured
        """
        if self.state != DriverState.RUNNING:
            return None
        if self.timeline.is_finished:
            self._finish()
            return None

        try:
            result = self._measure_current()
        except QueryTimeout as e:
            self.reporter.report(f"SimulationDriver: step {self.timeline.cursor}: {e}")
            self.state = DriverState.PAUSED
            return None

        fmt = self.settings.float_format
        self.area_log.add_line(format_area_line(result.sample.timestamp_text, result.measurement.areas, fmt))
        self.power_log.add_line(format_power_line(result.sample.timestamp_text, result.power, fmt))

        self.timeline.advance()
        self.steps_completed += 1

        if self.timeline.is_finished:
            self._finish()
        return result

    def _manual_step(self, move: Callable[[], None]) -> Optional[StepResult]:
        if self.state not in (DriverState.IDLE, DriverState.PAUSED):
            return None
        move()
        try:
            result = self._measure_current()
        except QueryTimeout as e:
            self.reporter.report(f"SimulationDriver: manual step {self.timeline.cursor}: {e}")
            return None
        if result is not None:
            self._report_to_console(result)
        return result

    def next(self) -> Optional[StepResult]:
        """Advance one sample and report its areas to the console only."""
        return self._manual_step(self.timeline.advance)

    def previous(self) -> Optional[StepResult]:
        """Go back one sample and report its areas to the console only."""
        return self._manual_step(self.timeline.retreat)

    def toggle_write(self) -> bool:
        """
        Flip file output on or off.

        Pending lines are flushed first; turning output on starts new files.

        Returns:
            New writing state
        """
        self.flush()
        enabled = not self.writing
        self.area_log.enabled = enabled
        self.power_log.enabled = enabled
        logger.info(f"Set write data to <{enabled}>")
        if enabled:
            self._start_logs()
        return enabled

    def reload(self, model: GeometryModel, timeline: AttitudeTimeline) -> None:
        """Flush output and replace model and timeline; the driver returns to IDLE."""
        self.flush()
        self.model = model
        self.timeline = timeline
        self.steps_completed = 0
        self._stop_requested = False
        self._prepare()

    def flush(self) -> None:
        self.area_log.flush()
        self.power_log.flush()

    # =========================================================================
    # Loop
    # =========================================================================

    def handle(self, command: Command) -> None:
        """Dispatch an operator command."""
        if command == Command.START:
            self.start()
        elif command == Command.PAUSE:
            self.pause()
        elif command == Command.NEXT:
            self.next()
        elif command == Command.PREVIOUS:
            self.previous()
        elif command == Command.TOGGLE_WRITE:
            self.toggle_write()
        elif command == Command.RELOAD:
            if self.reload_source is not None:
                model, timeline = self.reload_source()
            else:
                model, timeline = self.model, self.timeline
            self.reload(model, timeline)
        elif command == Command.STOP:
            self.stop()
        else:
            raise ValueError(f"Unsupported command: {command}")

    def run(self, max_steps: Optional[int] = None, show_progress: bool = True) -> int:
        """
        Step until finished, paused, stopped or max_steps is reached.

        Starts the driver if it is idle or paused.

        Returns:
            Number of steps completed in this call
        """
        self.start()
        remaining = len(self.timeline) - self.timeline.cursor
        total = remaining if max_steps is None else min(remaining, max_steps)

        completed = 0
        with tqdm(total=total, desc="Sun view", disable=not show_progress) as progress:
            while self.state == DriverState.RUNNING and not self._stop_requested:
                if max_steps is not None and completed >= max_steps:
                    self.pause()
                    break
                if self.step() is None:
                    break
                completed += 1
                progress.update(1)

        logger.info(f"Completed {completed} steps ({self.timeline.cursor} / {len(self.timeline)}), "
                    f"state {self.state.value}")
        return completed
