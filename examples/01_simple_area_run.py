#!/usr/bin/env python3
"""
Solarview Example 1: Simple Area and Power Run
==============================================

This script demonstrates the minimal pipeline for estimating the sunlit area
and generated power of a satellite over an attitude timeline, using the
cubesat test model.

Run from project root:
    python examples/01_simple_area_run.py

Expected output:
    - Area and power logs in data/results/cubesat/
    - Area/power plot saved to data/results/cubesat/<date>/
"""

import sys
import time
import logging
from pathlib import Path

# =============================================================================
# SETUP PROJECT ROOT
# =============================================================================
# This ensures imports work whether run from project root or examples/
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from solarview.simulation import create_session
from solarview.io.log_reader import read_area_log, read_power_log
from solarview.visualization import create_area_power_plot, setup_matplotlib_backend


def main():
    logging.basicConfig(level=logging.WARNING, format='%(levelname)s %(name)s: %(message)s')
    setup_matplotlib_backend(headless=True)

    print("=" * 60)
    print("Solarview Example 1: Simple Area and Power Run")
    print("=" * 60)

    # =========================================================================
    # STEP 1: Load Configuration, Model and Attitude
    # =========================================================================
    print("\n[1/3] Loading configuration, model and attitude data...")

    session = create_session("cubesat/cubesat_config.yaml", project_root=PROJECT_ROOT)
    driver = session.driver

    print(f"  Satellite: {session.settings.name}")
    print(f"  Parts: {', '.join(driver.model.part_names)}")
    print(f"  Samples: {len(driver.timeline)}")
    print(f"  Pixel area: {session.settings.pixel_area:.3e} m^2")

    # =========================================================================
    # STEP 2: Run Simulation
    # =========================================================================
    print("\n[2/3] Running sun view simulation...")

    run_start = time.time()
    steps = driver.run()
    run_time = time.time() - run_start

    print(f"  Steps: {steps} ({run_time:.2f}s)")
    print(f"  Errors reported: {session.reporter.error_count}")

    # =========================================================================
    # STEP 3: Plot Results
    # =========================================================================
    print("\n[3/3] Plotting results...")

    area = read_area_log(session.area_path)
    power = read_power_log(session.power_path)

    png_path = create_area_power_plot(
        area,
        power,
        satellite_name=session.settings.name,
        output_dir=session.area_path.parent,
        save=True,
        no_plot=True
    )

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    print(f"\nPeak power: {power['power'].max():.2f} W")
    print(f"Mean power: {power['power'].mean():.2f} W")
    print(f"Area log:  {session.area_path}")
    print(f"Power log: {session.power_path}")
    print(f"Plot:      {png_path}")
    print("\nExample complete!")


if __name__ == "__main__":
    main()
