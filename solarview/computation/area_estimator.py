#!/usr/bin/env python3
"""
Area Estimator
==============

Sunlit area estimation by rasterization and occlusion queries.

The model is rendered along the sun direction with an orthographic camera.
After a depth pass over all parts, every part is drawn again inside an
occlusion query; the number of its fragments that survive the depth test is
the number of pixels where the part is the frontmost surface. Multiplied by
the physical pixel area and the eclipse gate this gives the sunlit projected
area of the part.
"""

import time
import logging
import threading
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..config.settings_schemas import SimulationSettings
from ..io.obj_loader import GeometryModel
from ..rendering.camera import ProjectionCamera
from ..rendering.raster_device import RasterDevice, QueryTimeout

logger = logging.getLogger(__name__)


@dataclass
class AreaMeasurement:
    """
    Result of one estimator pass.

    Attributes:
        pixel_counts: Visible fragment count per part (N,)
        areas: Sunlit projected area per part in m^2 (N,)
        eclipse_multiplier: Visibility gate applied to the areas (0 or 1)
    """
    pixel_counts: np.ndarray
    areas: np.ndarray
    eclipse_multiplier: int

    @property
    def total_area(self) -> float:
        return float(np.sum(self.areas))


class AreaEstimator:
    """
    Per-part sunlit area from visible fragment counts.

    Owns the raster device; must be driven from a single thread.
    """

    def __init__(
        self,
        settings: SimulationSettings,
        device: Optional[RasterDevice] = None,
        cancel_event: Optional[threading.Event] = None
    ):
        """
        Args:
            settings: Simulation settings (screen size, pixel area, query timeout)
            device: Raster device; created from the screen resolution if omitted
            cancel_event: Optional event that aborts pending query waits
        """
        self.settings = settings
        self.device = device if device is not None else RasterDevice(
            settings.screen_size_pixel, settings.screen_size_pixel)
        self.cancel_event = cancel_event
        self.pixel_area = settings.pixel_area
        self.stats = {
            'passes': 0,
            'queries': 0,
            'total_time': 0.0
        }
        logger.info(f"Area estimator initialized: {self.device.width}x{self.device.height} px, "
                    f"pixel area = {self.pixel_area:.3e} m^2")

    def _count_visible(self, vertices: np.ndarray) -> int:
        """Draw one part inside an occlusion query and wait for its count."""
        query = self.device.create_query()
        query.begin()
        self.device.draw_triangles(vertices)
        query.end()

        count = self.device.wait_for_query(
            query,
            timeout_s=self.settings.query_timeout_s,
            cancel_event=self.cancel_event
        )
        self.stats['queries'] += 1
        return count

    def measure(
        self,
        model: GeometryModel,
        camera: ProjectionCamera,
        eclipse_multiplier: int = 1
    ) -> AreaMeasurement:
        """
        Measure the sunlit area of every part for the current camera orientation.

        Args:
            model: Satellite model; render buffers are rebuilt if dirty
            camera: Camera oriented along the sun direction
            eclipse_multiplier: 0 if the satellite is eclipsed, 1 otherwise

        Returns:
            AreaMeasurement with one entry per part, in load order

        Raises:
            QueryTimeout: If an occlusion query does not complete in time
        """
        start_time = time.time()
        buffers = model.rebuild_buffers()
        num_parts = len(buffers)

        counts = np.zeros(num_parts, dtype=np.int64)

        # 1. Depth pass over the full scene
        self.device.clear()
        self.device.set_transform(camera.view_projection)
        for buffer in buffers:
            if buffer.vertex_count > 0:
                self.device.draw_triangles(buffer.positions)

        # 2. Visible fragments per part, in load order
        for i, buffer in enumerate(buffers):
            if buffer.vertex_count == 0:
                continue
            counts[i] = self._count_visible(buffer.positions)

        areas = counts * self.pixel_area * float(eclipse_multiplier)
        areas = np.maximum(areas, 0.0)

        self.stats['passes'] += 1
        self.stats['total_time'] += time.time() - start_time

        logger.debug(f"Measured {num_parts} parts: counts={counts.tolist()}, multiplier={eclipse_multiplier}")
        return AreaMeasurement(pixel_counts=counts, areas=areas, eclipse_multiplier=int(eclipse_multiplier))

    def measure_isolated(
        self,
        model: GeometryModel,
        camera: ProjectionCamera,
        part_index: int,
        eclipse_multiplier: int = 1
    ) -> float:
        """
        Area of a single part rendered alone, ignoring occlusion by other parts.

        Args:
            model: Satellite model
            camera: Camera oriented along the sun direction
            part_index: Index of the part to render
            eclipse_multiplier: 0 if the satellite is eclipsed, 1 otherwise

        Returns:
            Projected area in m^2
        """
        buffer = model.rebuild_buffers()[part_index]
        if buffer.vertex_count == 0:
            return 0.0

        self.device.clear()
        self.device.set_transform(camera.view_projection)
        self.device.draw_triangles(buffer.positions)
        count = self._count_visible(buffer.positions)

        return max(count * self.pixel_area * float(eclipse_multiplier), 0.0)

    def get_performance_summary(self) -> dict:
        """Get performance summary statistics."""
        return {
            'passes': self.stats['passes'],
            'queries': self.stats['queries'],
            'total_time': self.stats['total_time'],
            'average_pass_time': self.stats['total_time'] / self.stats['passes']
                                 if self.stats['passes'] > 0 else 0.0
        }


__all__ = ['AreaEstimator', 'AreaMeasurement', 'QueryTimeout']
