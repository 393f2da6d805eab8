#!/usr/bin/env python3
"""
Solarview Example 2: Manual Inspection with Commands
====================================================

Steps through the cubesat timeline with operator commands instead of a full
run. Manual steps report areas to the console only and never touch the
output logs. Each inspected orientation is cross-checked against the
ray-cast reference estimator.

Run from project root:
    python examples/02_manual_inspection.py
"""

import sys
import logging
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from solarview.computation import RayCastAreaEstimator
from solarview.simulation import Command, create_session


def main():
    logging.basicConfig(level=logging.WARNING, format='%(levelname)s %(name)s: %(message)s')

    print("=" * 60)
    print("Solarview Example 2: Manual Inspection with Commands")
    print("=" * 60)

    session = create_session("cubesat/cubesat_config.yaml", project_root=PROJECT_ROOT, write_data=False)
    driver = session.driver
    driver.console = print

    reference = RayCastAreaEstimator(session.settings, resolution=200)

    for command in [Command.NEXT, Command.NEXT, Command.NEXT, Command.PREVIOUS]:
        print(f"\n> {command.name} (step {driver.timeline.cursor})")
        driver.handle(command)

        measured = driver.estimator.measure(
            driver.model, driver.camera, driver.timeline.current.eclipse_multiplier)
        cross_check = reference.measure(
            driver.model, driver.camera, driver.timeline.current.eclipse_multiplier)
        for name, raster_area, ray_area in zip(driver.model.part_names, measured.areas, cross_check.areas):
            print(f"  {name:10s} raster {raster_area:.5f} m^2 | ray-cast {ray_area:.5f} m^2")

    print(f"\nDriver state: {driver.state.value}, errors: {session.reporter.error_count}")
    print("\nExample complete!")


if __name__ == "__main__":
    main()
