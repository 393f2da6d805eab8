"""
Settings manager for solar area simulations.
Handles loading of YAML configuration files and path resolution.
"""

import yaml
import logging
from pathlib import Path
from typing import Union, Optional, Dict, Any

# Project Imports
from .settings_schemas import SimulationSettings

logger = logging.getLogger(__name__)


class SettingsManager:
    """
    Configuration manager for satellite area simulations.
    Handles configuration loading and path resolution. Settings are read-only
    once resolved; there is no save path.
    """

    def __init__(self, project_root: Path = None):
        """Initialize the settings manager."""
        # Initialize project_root (default to project structure)
        if project_root is None:
            self.project_root = Path(__file__).parent.parent.parent
        else:
            self.project_root = Path(project_root)

        # Initialize models directory
        self.models_dir = self.project_root / "data" / "models"

        # Will store the directory containing the config file
        self.config_directory: Optional[Path] = None

    def load_config(self, config_path: Union[str, Path]) -> SimulationSettings:
        """
        Load simulation settings from YAML file.

        Args:
            config_path: Path to configuration YAML file

        Returns:
            SimulationSettings: Resolved, immutable settings
        """
        config_path = Path(config_path)

        # Resolve relative paths
        if not config_path.is_absolute():
            config_path = self.models_dir / config_path

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        # Model and attitude files are in the same directory
        self.config_directory = config_path.parent
        logger.info(f"Loading settings from: {config_path}")

        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}

        settings = self.settings_from_dict(config_data)
        logger.info(f"Loaded settings for '{settings.name}': pixel area = {settings.pixel_area:.3e} m^2, "
                    f"eclipse angle = {settings.eclipse_angle_deg:.2f} deg")
        return settings

    @staticmethod
    def settings_from_dict(config_data: Dict[str, Any]) -> SimulationSettings:
        """
        Build settings from the nested YAML structure.

        Missing sections and keys fall back to the SimulationSettings defaults.
        """
        defaults = SimulationSettings()

        satellite = config_data.get('satellite', {})
        orbit = config_data.get('orbit', {})
        sim = config_data.get('simulation', {})
        screen = config_data.get('screen', {})
        camera = config_data.get('camera', {})
        rendering = config_data.get('rendering', {})
        files = config_data.get('files', {})

        return SimulationSettings(
            name=config_data.get('name', defaults.name),
            cell_efficiency=float(satellite.get('cell_efficiency', defaults.cell_efficiency)),
            solar_cell_part_indices=tuple(satellite.get('solar_cell_part_indices', defaults.solar_cell_part_indices)),
            model_scale=float(satellite.get('model_scale', defaults.model_scale)),
            altitude_km=float(orbit.get('altitude_km', defaults.altitude_km)),
            earth_radius_km=float(orbit.get('earth_radius_km', defaults.earth_radius_km)),
            solar_intensity=float(orbit.get('solar_intensity', defaults.solar_intensity)),
            temporal_resolution=float(sim.get('temporal_resolution', defaults.temporal_resolution)),
            start_index=int(sim.get('start_index', defaults.start_index)),
            write_data=bool(sim.get('write_data', defaults.write_data)),
            write_block_size=int(sim.get('write_block_size', defaults.write_block_size)),
            float_format=str(sim.get('float_format', defaults.float_format)),
            screen_size_pixel=int(screen.get('size_pixel', defaults.screen_size_pixel)),
            screen_size_meter=float(screen.get('size_meter', defaults.screen_size_meter)),
            near_plane=float(camera.get('near_plane', defaults.near_plane)),
            far_plane=float(camera.get('far_plane', defaults.far_plane)),
            camera_distance=float(camera.get('distance', defaults.camera_distance)),
            azimuth_offset=float(camera.get('azimuth_offset', defaults.azimuth_offset)),
            elevation_offset=float(camera.get('elevation_offset', defaults.elevation_offset)),
            use_grayscale=bool(rendering.get('use_grayscale', defaults.use_grayscale)),
            query_timeout_s=float(rendering.get('query_timeout_s', defaults.query_timeout_s)),
            model_file=str(files.get('model_file', defaults.model_file)),
            attitude_file=str(files.get('attitude_file', f"{config_data.get('name', defaults.name)}"
                                                        f"{files.get('suffix', defaults.suffix)}_SunAngles.csv")),
            output_dir=str(files.get('output_dir', defaults.output_dir)),
            suffix=str(files.get('suffix', defaults.suffix)),
        )

    def _require_config_directory(self) -> Path:
        if self.config_directory is None:
            raise RuntimeError("No configuration loaded; call load_config first")
        return self.config_directory

    def get_model_path(self, settings: SimulationSettings) -> Path:
        """
        Get the full path to the satellite model (*.obj).
        Model files are in the same directory as the config file.
        """
        return self._require_config_directory() / settings.model_file

    def get_attitude_path(self, settings: SimulationSettings) -> Path:
        """Get the full path to the sun angle file."""
        return self._require_config_directory() / settings.attitude_file

    def get_output_directory(self, settings: SimulationSettings) -> Path:
        """
        Get the output directory path.
        Creates it under data/results/<output_dir_name>.
        """
        output_dir = self.project_root / "data" / "results" / settings.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir
