#!/usr/bin/env python3
"""
Solarview Area Estimator Benchmark Script
=========================================

Runs the cubesat timeline through the raster area estimator as fast as
possible and reports the timing breakdown.

Usage:
    python benchmark_area_estimator.py [screen_size_pixel]

    screen_size_pixel: Render target resolution (default: from config)

Example:
    python benchmark_area_estimator.py 800
"""

import sys
import time
import dataclasses
from pathlib import Path

# Project setup
PROJECT_ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT_ROOT))


def benchmark_area_estimator(screen_size_pixel: int = None, show_progress: bool = True):
    """
    Run the cubesat timeline and report timing.

    Args:
        screen_size_pixel: Render target resolution override
        show_progress: Show progress bar during the run

    Returns:
        Dict with timing breakdown and results
    """
    timings = {}
    total_start = time.time()

    # =========================================================================
    # PHASE 1: Configuration and Model Loading
    # =========================================================================
    phase1_start = time.time()

    from solarview.config import SettingsManager
    from solarview.simulation import SimulationDriver, load_inputs

    manager = SettingsManager(PROJECT_ROOT)
    settings = manager.load_config("cubesat/cubesat_config.yaml")
    if screen_size_pixel is not None:
        settings = dataclasses.replace(settings, screen_size_pixel=screen_size_pixel)
    settings = dataclasses.replace(settings, write_data=False)

    model, timeline = load_inputs(settings, manager.get_model_path(settings), manager.get_attitude_path(settings))

    timings['model_loading'] = time.time() - phase1_start

    # =========================================================================
    # PHASE 2: Simulation Run (MAIN BENCHMARK TARGET)
    # =========================================================================
    phase2_start = time.time()

    driver = SimulationDriver(settings, model, timeline, console=lambda message: None)
    steps = driver.run(show_progress=show_progress)

    timings['simulation'] = time.time() - phase2_start
    timings['total'] = time.time() - total_start

    return {
        'timings': timings,
        'steps': steps,
        'screen_size_pixel': settings.screen_size_pixel,
        'num_parts': model.num_parts,
        'num_triangles': model.num_triangles,
        'estimator': driver.estimator.get_performance_summary(),
        'device': dict(driver.estimator.device.stats),
    }


def main():
    screen_size_pixel = int(sys.argv[1]) if len(sys.argv) > 1 else None

    print("=" * 60)
    print("Solarview Area Estimator Benchmark")
    print("=" * 60)

    results = benchmark_area_estimator(screen_size_pixel)
    timings = results['timings']

    print(f"\nResolution: {results['screen_size_pixel']} px")
    print(f"Model: {results['num_parts']} parts, {results['num_triangles']} triangles")
    print(f"Steps: {results['steps']}")
    print()
    print(f"  Model loading: {timings['model_loading']:.3f}s")
    print(f"  Simulation:    {timings['simulation']:.3f}s")
    print(f"  Total:         {timings['total']:.3f}s")
    print()
    print(f"  Average pass:  {results['estimator']['average_pass_time'] * 1000:.2f} ms")
    print(f"  Queries:       {results['estimator']['queries']:,}")
    print(f"  Draw calls:    {results['device']['draw_calls']:,}")
    print(f"  Fragments:     {results['device']['fragments']:,}")


if __name__ == "__main__":
    main()
