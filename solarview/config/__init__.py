"""
Configuration module: immutable simulation settings and YAML loading.
"""

from .settings_schemas import SimulationSettings, eclipse_half_angle_deg
from .settings_manager import SettingsManager

__all__ = [
    'SimulationSettings',
    'SettingsManager',
    'eclipse_half_angle_deg',
]
