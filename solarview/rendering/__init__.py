"""
Rendering module for solarview.

Provides:
- Orthographic sun-view camera
- Software raster device with depth buffer and occlusion queries
"""

from .camera import ProjectionCamera
from .raster_device import RasterDevice, OcclusionQuery, QueryTimeout, QueryCancelled

__all__ = [
    'ProjectionCamera',
    'RasterDevice',
    'OcclusionQuery',
    'QueryTimeout',
    'QueryCancelled',
]
