"""
Electrical power from sunlit solar cell area.
"""

import logging
from typing import Iterable, Optional

import numpy as np

from ..utils.error_reporter import ErrorReporter, resolve_reporter

logger = logging.getLogger(__name__)


def compute_power(
    areas: np.ndarray,
    solar_cell_part_indices: Iterable[int],
    cell_efficiency: float,
    solar_intensity: float,
    reporter: Optional[ErrorReporter] = None
) -> float:
    """
    Sum generated power over the solar cell parts.

    power = sum(area_i * cell_efficiency * solar_intensity) over configured parts.
    Indices outside the part range are reported and skipped.

    Args:
        areas: Sunlit area per part in m^2
        solar_cell_part_indices: Indices of parts covered with solar cells
        cell_efficiency: Conversion efficiency of the cells
        solar_intensity: Solar flux in W/m^2

    Returns:
        Generated power in W
    """
    power = 0.0
    for i in solar_cell_part_indices:
        if not 0 <= i < len(areas):
            resolve_reporter(reporter).report(f"compute_power: solar cell part index {i} outside "
                                              f"model with {len(areas)} parts.")
            continue
        power += float(areas[i]) * cell_efficiency * solar_intensity
    return power
