"""
Simulation settings schemas for solar area and power estimation.
Single immutable settings value passed to every component.
"""

import math
from dataclasses import dataclass, field
from typing import Tuple


# Physical constants
EARTH_RADIUS_KM = 6371.0        # [km] earth radius
SOLAR_INTENSITY = 1367.0        # [W/m^2] solar intensity


@dataclass(frozen=True)
class SimulationSettings:
    """
    Complete settings for a solar area simulation run.

    Derived values (pixel area, eclipse angle) are computed once in
    __post_init__ and never changed afterwards.
    """
    # Satellite
    name: str = "ERNST"
    cell_efficiency: float = 0.3
    solar_cell_part_indices: Tuple[int, ...] = (0,)
    model_scale: float = 1.0

    # Orbit
    altitude_km: float = 500.0
    earth_radius_km: float = EARTH_RADIUS_KM
    solar_intensity: float = SOLAR_INTENSITY

    # Simulation
    temporal_resolution: float = 1.0    # [s] spacing of attitude samples
    start_index: int = 0
    write_data: bool = False
    write_block_size: int = 10000       # lines buffered before a write
    float_format: str = ".6f"

    # Screen
    screen_size_pixel: int = 800
    screen_size_meter: float = 1.0

    # Camera
    near_plane: float = 0.001
    far_plane: float = 10.0
    camera_distance: float = 5.0
    azimuth_offset: float = 0.0         # [deg] mount alignment
    elevation_offset: float = 0.0       # [deg] mount alignment

    # Rendering
    use_grayscale: bool = True
    query_timeout_s: float = 5.0

    # Files (relative to the config directory)
    model_file: str = "dummy.obj"
    attitude_file: str = ""
    output_dir: str = "results"
    suffix: str = "_i98_a500"

    # Derived
    pixel_area: float = field(init=False)
    eclipse_angle_deg: float = field(init=False)

    def __post_init__(self):
        if self.screen_size_pixel <= 0:
            raise ValueError(f"screen_size_pixel must be positive: {self.screen_size_pixel}")
        if self.screen_size_meter <= 0:
            raise ValueError(f"screen_size_meter must be positive: {self.screen_size_meter}")
        if self.model_scale <= 0:
            raise ValueError(f"model_scale must be positive: {self.model_scale}")
        if not 0.0 <= self.cell_efficiency <= 1.0:
            raise ValueError(f"cell_efficiency must be in [0, 1]: {self.cell_efficiency}")
        if self.altitude_km < 0:
            raise ValueError(f"altitude_km must not be negative: {self.altitude_km}")
        if self.write_block_size < 1:
            raise ValueError(f"write_block_size must be at least 1: {self.write_block_size}")
        if self.temporal_resolution <= 0:
            raise ValueError(f"temporal_resolution must be positive: {self.temporal_resolution}")
        if not 0 < self.near_plane < self.far_plane:
            raise ValueError(f"Invalid clip planes: near={self.near_plane}, far={self.far_plane}")
        if self.query_timeout_s <= 0:
            raise ValueError(f"query_timeout_s must be positive: {self.query_timeout_s}")

        # frozen dataclass: derived fields set through object.__setattr__
        object.__setattr__(self, 'solar_cell_part_indices', tuple(int(i) for i in self.solar_cell_part_indices))
        object.__setattr__(self, 'pixel_area', (self.screen_size_meter / self.screen_size_pixel) ** 2)
        object.__setattr__(self, 'eclipse_angle_deg', eclipse_half_angle_deg(self.altitude_km, self.earth_radius_km))

    @property
    def area_output_name(self) -> str:
        return f"Out_AreaSunView{self.suffix}.txt"

    @property
    def power_output_name(self) -> str:
        return f"Out_Power{self.suffix}.txt"

    def format_value(self, value: float) -> str:
        """Format a number for the output logs."""
        return format(value, self.float_format)


def eclipse_half_angle_deg(altitude_km: float, earth_radius_km: float = EARTH_RADIUS_KM) -> float:
    """
    Angle between earth->sun and earth->satellite beyond which the satellite is in shadow.

    Args:
        altitude_km: Orbital altitude above the surface
        earth_radius_km: Planet radius

    Returns:
        90 deg plus the horizon depression angle at the given altitude, in degrees
    """
    return 90.0 + math.degrees(math.acos(earth_radius_km / (earth_radius_km + altitude_km)))
