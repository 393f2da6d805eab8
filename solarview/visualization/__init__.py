"""
Solarview Visualization Module
==============================

Plots of the area and power output logs.

Modules:
- area_plotter: Area and power over time
- plot_styling: Shared constants and backend configuration
"""

from .area_plotter import create_area_power_plot, time_hours_since_start
from .plot_styling import setup_matplotlib_backend, PLOT_DPI, FIGURE_SIZE, TITLE_MAPPING

__all__ = [
    'create_area_power_plot',
    'time_hours_since_start',
    'setup_matplotlib_backend',
    'PLOT_DPI',
    'FIGURE_SIZE',
    'TITLE_MAPPING'
]
