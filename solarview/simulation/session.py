"""
Session assembly: settings, model, timeline, output files and driver.
"""

import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..attitude.timeline import AttitudeTimeline
from ..config.settings_manager import SettingsManager
from ..config.settings_schemas import SimulationSettings
from ..io.data_writer import OutputLog, FileSink
from ..io.obj_loader import GeometryModel, ObjLoader
from ..utils.error_reporter import ErrorReporter, resolve_reporter
from .driver import SimulationDriver

logger = logging.getLogger(__name__)


@dataclass
class SimulationSession:
    """Everything needed for one run."""
    settings: SimulationSettings
    driver: SimulationDriver
    area_path: Path
    power_path: Path
    reporter: ErrorReporter


def load_inputs(
    settings: SimulationSettings,
    model_path: Union[str, Path],
    attitude_path: Union[str, Path],
    reporter: Optional[ErrorReporter] = None
) -> Tuple[GeometryModel, AttitudeTimeline]:
    """
    Load the satellite model and the attitude timeline.

    Missing files are reported and give an empty model or timeline.
    """
    reporter = resolve_reporter(reporter)
    model = ObjLoader.load_file(model_path, settings.model_scale, settings.use_grayscale, reporter)
    timeline = AttitudeTimeline.load_file(
        attitude_path,
        settings.eclipse_angle_deg,
        settings.temporal_resolution,
        reporter
    )
    return model, timeline


def create_session(
    config_path: Union[str, Path],
    project_root: Optional[Path] = None,
    output_dir: Optional[Union[str, Path]] = None,
    reporter: Optional[ErrorReporter] = None,
    write_data: Optional[bool] = None
) -> SimulationSession:
    """
    Build a ready-to-run simulation from a YAML configuration.

    Args:
        config_path: Config file; relative paths resolve under data/models
        project_root: Project root for the SettingsManager
        output_dir: Directory for the output logs (defaults to data/results/<output_dir>)
        reporter: Error reporter
        write_data: Overrides the configured write_data flag

    Returns:
        SimulationSession with the driver in IDLE state
    """
    reporter = resolve_reporter(reporter)
    manager = SettingsManager(project_root)
    settings = manager.load_config(config_path)

    model_path = manager.get_model_path(settings)
    attitude_path = manager.get_attitude_path(settings)
    out_dir = Path(output_dir) if output_dir is not None else manager.get_output_directory(settings)

    area_path = out_dir / settings.area_output_name
    power_path = out_dir / settings.power_output_name
    enabled = settings.write_data if write_data is None else write_data

    model, timeline = load_inputs(settings, model_path, attitude_path, reporter)

    driver = SimulationDriver(
        settings,
        model,
        timeline,
        area_log=OutputLog(FileSink(area_path), settings.write_block_size, enabled, name="area"),
        power_log=OutputLog(FileSink(power_path), settings.write_block_size, enabled, name="power"),
        reporter=reporter,
        reload_source=lambda: load_inputs(settings, model_path, attitude_path, reporter)
    )

    logger.info(f"Session '{settings.name}': model {model_path.name}, attitude {attitude_path.name}, "
                f"output {out_dir}")
    return SimulationSession(
        settings=settings,
        driver=driver,
        area_path=area_path,
        power_path=power_path,
        reporter=reporter
    )
