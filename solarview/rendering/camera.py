"""
Orthographic projection camera for sun-view rendering.

The camera sits on a sphere around the model origin at the sun direction
given by azimuth/elevation and always looks at the origin. The projection is
orthographic with a fixed physical extent, so every pixel covers the same
physical area regardless of distance.
"""

import math
import logging
import numpy as np

from ..config.settings_schemas import SimulationSettings
from ..utils.geometry_utils import (
    direction_from_angles,
    build_look_at_matrix,
    build_orthographic_matrix,
)

logger = logging.getLogger(__name__)

MAX_AZIMUTH = 360.0
MAX_ELEVATION = 89.999

# Up vector of the sun view (model -Z)
CAMERA_UP = np.array([0.0, 0.0, -1.0])


class ProjectionCamera:
    """Orthographic camera oriented by azimuth/elevation."""

    def __init__(self, settings: SimulationSettings):
        self.settings = settings
        self.target = np.zeros(3)
        self.azimuth = 0.0
        self.elevation = 0.0

        self.projection = build_orthographic_matrix(
            settings.screen_size_meter,
            settings.screen_size_meter,
            settings.near_plane,
            settings.far_plane
        )
        self.view = np.eye(4)
        self.position = np.zeros(3)
        self.update()

    @staticmethod
    def wrap_azimuth(azimuth: float) -> float:
        return math.fmod(azimuth, MAX_AZIMUTH)

    @staticmethod
    def clamp_elevation(elevation: float) -> float:
        return min(max(elevation, -MAX_ELEVATION), MAX_ELEVATION)

    def update(self) -> None:
        """Recompute position and view matrix from the current angles."""
        # mount offset can push the view onto the up axis
        direction = direction_from_angles(
            -self.azimuth + self.settings.azimuth_offset,
            self.clamp_elevation(self.elevation + self.settings.elevation_offset)
        )
        self.position = self.settings.camera_distance * direction
        self.view = build_look_at_matrix(self.position, self.target, CAMERA_UP)

    def orient(self, azimuth: float, elevation: float) -> None:
        """Set absolute sun azimuth/elevation in degrees."""
        self.azimuth = self.wrap_azimuth(float(azimuth))
        self.elevation = self.clamp_elevation(float(elevation))
        self.update()

    def rotate(self, d_azimuth: float, d_elevation: float) -> None:
        """Apply a relative rotation in degrees (interactive use)."""
        self.azimuth = self.wrap_azimuth(self.azimuth + d_azimuth)
        self.elevation = self.clamp_elevation(self.elevation + d_elevation)
        self.update()

    @property
    def view_direction(self) -> np.ndarray:
        """Unit vector from the camera towards the target."""
        return -self.position / np.linalg.norm(self.position)

    @property
    def view_projection(self) -> np.ndarray:
        return self.projection @ self.view
