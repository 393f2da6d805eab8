"""
Area and Power Plotting Module
==============================

Plots per-part sunlit area and generated power over time from the output
logs, with consistent styling and proper figure cleanup.

Functions:
    time_hours_since_start: Convert logged timestamps to hours since the first sample
    create_area_power_plot: Two-panel plot of areas and power
"""

import time
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional, Sequence

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from ..attitude.timeline import parse_timestamp
from .plot_styling import FIGURE_SIZE, PLOT_DPI, TITLE_MAPPING

logger = logging.getLogger(__name__)


def _get_date_output_dir(output_dir: Path) -> Path:
    """Create and return a date-based subdirectory (yymmdd) within output_dir."""
    date_output_dir = Path(output_dir) / datetime.now().strftime("%y%m%d")
    date_output_dir.mkdir(parents=True, exist_ok=True)
    return date_output_dir


def time_hours_since_start(timestamps: Sequence) -> np.ndarray:
    """
    Hours elapsed since the first timestamp.

    Args:
        timestamps: Timestamps as written in the logs (dates or epoch seconds)

    Returns:
        Elapsed time in hours
    """
    if len(timestamps) == 0:
        return np.zeros(0)
    parsed = [parse_timestamp(str(t)) for t in timestamps]
    start = parsed[0]
    return np.array([(t - start).total_seconds() / 3600.0 for t in parsed])


def create_area_power_plot(
    area_data: pd.DataFrame,
    power_data: Optional[pd.DataFrame],
    satellite_name: str,
    output_dir: Optional[Path] = None,
    save: bool = True,
    no_plot: bool = True
) -> Optional[Path]:
    """
    Plot sunlit area per part and generated power against time.

    Args:
        area_data: Area log (column "time" plus one column per part)
        power_data: Power log (columns "time", "power"); optional
        satellite_name: Satellite name for the title
        output_dir: Base output directory (date subfolder created automatically)
        save: If True, save a PNG to the date folder
        no_plot: If True, do not display the figure

    Returns:
        Path of the saved PNG, or None if not saved

    Raises:
        ValueError: If the logs are empty or inconsistent
    """
    logger.info("Creating area/power plot...")
    plot_start = time.time()

    if len(area_data) == 0:
        raise ValueError("Area log contains no samples")
    if power_data is not None and len(power_data) != len(area_data):
        raise ValueError("Area and power logs must have the same length")
    if save and output_dir is None:
        raise ValueError("output_dir required when save=True")

    time_hours = time_hours_since_start(area_data['time'].tolist())
    part_columns = [c for c in area_data.columns if c != 'time']

    num_panels = 2 if power_data is not None else 1
    fig = None
    png_path = None
    try:
        fig, axes = plt.subplots(num_panels, 1, figsize=FIGURE_SIZE, sharex=True, squeeze=False)
        axes = axes[:, 0]

        kind = 'area_power' if power_data is not None else 'area'
        fig.suptitle(f"{TITLE_MAPPING[kind]} - {satellite_name}", fontsize=16, fontweight='bold')

        ax = axes[0]
        for column in part_columns:
            ax.plot(time_hours, area_data[column].to_numpy(dtype=float), label=column, linewidth=1.0)
        ax.set_ylabel('Area [m$^2$]', fontsize=12)
        ax.grid(True, alpha=0.3)
        if part_columns:
            ax.legend(loc='upper right', fontsize=8)

        if power_data is not None:
            ax = axes[1]
            ax.plot(time_hours, power_data['power'].to_numpy(dtype=float), c='r', linewidth=1.0)
            ax.set_ylabel('Power [W]', fontsize=12)
            ax.grid(True, alpha=0.3)

        axes[-1].set_xlabel('Time since start [h]', fontsize=12)

        if save:
            date_dir = _get_date_output_dir(output_dir)
            png_path = date_dir / f"{datetime.now().strftime('%H%M')}_area_power_{len(area_data)}pts.png"
            plt.savefig(png_path, dpi=PLOT_DPI, bbox_inches='tight')
            logger.info(f"Plot saved: {png_path}")

        logger.info(f"Area/power plot generated ({time.time() - plot_start:.2f}s)")

        if not no_plot:
            plt.show()

        return png_path

    finally:
        # Always close figure to prevent memory leaks
        if fig is not None:
            plt.close(fig)
        else:
            plt.close('all')
