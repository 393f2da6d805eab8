# Area estimation and power computation

from .area_estimator import AreaEstimator, AreaMeasurement
from .power import compute_power
from .raycast_reference import RayCastAreaEstimator

__all__ = [
    # Raster area estimation
    'AreaEstimator',
    'AreaMeasurement',
    # Power
    'compute_power',
    # Cross-check
    'RayCastAreaEstimator',
]
