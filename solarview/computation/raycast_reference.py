"""
Ray-cast reference estimator.

Cross-checks the raster estimator: one ray per pixel centre is cast along the
sun view direction and the first triangle hit is attributed to its part.
Uses trimesh's batched ray-mesh intersection.
"""

import time
import logging
from typing import Optional

import numpy as np
from trimesh.ray.ray_triangle import RayMeshIntersector

from ..config.settings_schemas import SimulationSettings
from ..io.obj_loader import GeometryModel
from ..rendering.camera import ProjectionCamera
from .area_estimator import AreaMeasurement

logger = logging.getLogger(__name__)


class RayCastAreaEstimator:
    """Per-part sunlit area from first-hit ray casting on a pixel grid."""

    def __init__(self, settings: SimulationSettings, resolution: Optional[int] = None):
        """
        Args:
            settings: Simulation settings (screen size, near plane)
            resolution: Rays per side; defaults to the screen pixel resolution
        """
        self.settings = settings
        self.resolution = int(resolution) if resolution is not None else settings.screen_size_pixel
        self.pixel_area = (settings.screen_size_meter / self.resolution) ** 2

    def _ray_origins(self, camera: ProjectionCamera) -> np.ndarray:
        """Pixel centres on the near plane, in model coordinates."""
        n = self.resolution
        centres = (np.arange(n) + 0.5) / n
        ndc_x, ndc_y = np.meshgrid(centres * 2.0 - 1.0, 1.0 - centres * 2.0)

        ndc = np.stack([
            ndc_x.ravel(),
            ndc_y.ravel(),
            np.zeros(n * n),
            np.ones(n * n)
        ], axis=1)

        inverse = np.linalg.inv(camera.view_projection)
        world = ndc @ inverse.T
        return world[:, :3] / world[:, 3:4]

    def measure(
        self,
        model: GeometryModel,
        camera: ProjectionCamera,
        eclipse_multiplier: int = 1
    ) -> AreaMeasurement:
        """
        Measure per-part sunlit area by ray casting.

        Args:
            model: Satellite model
            camera: Camera oriented along the sun direction
            eclipse_multiplier: 0 if the satellite is eclipsed, 1 otherwise

        Returns:
            AreaMeasurement with one entry per part
        """
        start_time = time.time()
        num_parts = model.num_parts
        counts = np.zeros(num_parts, dtype=np.int64)

        mesh = model.to_trimesh()
        if mesh is None:
            return AreaMeasurement(pixel_counts=counts, areas=np.zeros(num_parts),
                                   eclipse_multiplier=int(eclipse_multiplier))

        origins = self._ray_origins(camera)
        directions = np.tile(camera.view_direction, (len(origins), 1))

        intersector = RayMeshIntersector(mesh)
        first_hits = intersector.intersects_first(ray_origins=origins, ray_directions=directions)

        hit_faces = first_hits[first_hits >= 0]
        if len(hit_faces) > 0:
            counts = np.bincount(model.face_part_indices()[hit_faces], minlength=num_parts).astype(np.int64)

        areas = np.maximum(counts * self.pixel_area * float(eclipse_multiplier), 0.0)

        logger.info(f"Ray-cast reference: {len(origins):,} rays, {len(hit_faces):,} hits "
                    f"({time.time() - start_time:.3f}s)")
        return AreaMeasurement(pixel_counts=counts, areas=areas, eclipse_multiplier=int(eclipse_multiplier))
