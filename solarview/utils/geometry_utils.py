"""
Geometry utilities for camera placement and projection.

Provides:
- direction_from_angles: Unit vector from azimuth/elevation (spherical to Cartesian)
- build_look_at_matrix: 4x4 view matrix looking from an eye point at a target
- build_orthographic_matrix: 4x4 orthographic projection with depth mapped to [0, 1]
"""

import numpy as np
import logging

logger = logging.getLogger(__name__)


def direction_from_angles(azimuth_deg: float, elevation_deg: float) -> np.ndarray:
    """
    Convert azimuth/elevation into a unit vector.

    Azimuth is measured from +Y towards +X in the XY plane, elevation from the
    XY plane towards +Z.

    Args:
        azimuth_deg: Azimuth angle in degrees.
        elevation_deg: Elevation angle in degrees.

    Returns:
        Unit vector [x, y, z].
    """
    az = np.radians(azimuth_deg)
    el = np.radians(elevation_deg)
    return np.array([
        np.cos(el) * np.sin(az),
        np.cos(el) * np.cos(az),
        np.sin(el)
    ])


def build_look_at_matrix(eye: np.ndarray, target: np.ndarray, up: np.ndarray) -> np.ndarray:
    """
    Build a right-handed 4x4 view matrix (column-vector convention).

    The camera looks along -Z in view space.

    Args:
        eye: Camera position.
        target: Point the camera looks at.
        up: Approximate up direction, must not be parallel to the view direction.

    Returns:
        4x4 view matrix.
    """
    z_axis = eye - target
    z_norm = np.linalg.norm(z_axis)
    if z_norm < 1e-12:
        raise ValueError("Eye and target must not coincide.")
    z_axis = z_axis / z_norm

    x_axis = np.cross(up, z_axis)
    x_norm = np.linalg.norm(x_axis)
    if x_norm < 1e-12:
        raise ValueError("Up vector is parallel to the view direction.")
    x_axis = x_axis / x_norm

    y_axis = np.cross(z_axis, x_axis)

    view = np.eye(4)
    view[0, :3] = x_axis
    view[1, :3] = y_axis
    view[2, :3] = z_axis
    view[:3, 3] = -view[:3, :3] @ eye
    return view


def build_orthographic_matrix(width: float, height: float, near: float, far: float) -> np.ndarray:
    """
    Build a 4x4 orthographic projection matrix.

    Maps view-space x in [-width/2, width/2] and y in [-height/2, height/2] to
    [-1, 1], and view-space z in [-near, -far] to depth [0, 1].

    Args:
        width: Physical width of the view volume.
        height: Physical height of the view volume.
        near: Near plane distance (positive).
        far: Far plane distance (positive, > near).

    Returns:
        4x4 projection matrix.
    """
    projection = np.eye(4)
    projection[0, 0] = 2.0 / width
    projection[1, 1] = 2.0 / height
    projection[2, 2] = 1.0 / (near - far)
    projection[2, 3] = near / (near - far)
    return projection
