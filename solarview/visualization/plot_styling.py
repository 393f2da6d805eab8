"""
Plot Styling and Configuration Module
====================================

Shared styling constants and matplotlib backend configuration for the
area and power plots.

Constants:
    PLOT_DPI: High DPI for publication-quality plots
    FIGURE_SIZE: Consistent figure dimensions
    TITLE_MAPPING: Plot kind to title mapping

Functions:
    setup_matplotlib_backend: Configure matplotlib backend for headless use
"""

import logging
from typing import Dict

logger = logging.getLogger(__name__)

# Plot configuration constants
PLOT_DPI = 150
FIGURE_SIZE = (12, 8)

TITLE_MAPPING: Dict[str, str] = {
    'area': 'Sunlit Area per Part',
    'power': 'Generated Power',
    'area_power': 'Sunlit Area and Generated Power',
}


def setup_matplotlib_backend(headless: bool) -> None:
    """
    Configure matplotlib backend.

    Headless runs (batch jobs, servers, tests) use 'Agg'; otherwise the
    default backend is left in place for interactive use.

    Args:
        headless: True if no display is available
    """
    if headless:
        logger.info("Configuring matplotlib for headless use (non-interactive backend)")
        import matplotlib
        matplotlib.use('Agg')
    else:
        logger.debug("Using default matplotlib backend for interactive plotting")
