#!/usr/bin/env python3
"""
Solarview Quick Start - Installation Verification
=================================================

Run: python quickstart.py

This script verifies your solarview installation by:
1. Checking all required Python packages are installed
2. Checking the bundled cubesat model files exist
3. Importing the solarview modules
4. Measuring one face-on sun view of the cubesat
5. Printing next steps
"""

import sys
import importlib
from pathlib import Path

# Project root setup
PROJECT_ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT_ROOT))

CUBESAT_DIR = PROJECT_ROOT / "data" / "models" / "cubesat"


def print_header(title):
    """Print a formatted section header."""
    print()
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)


def print_check(name, passed, details=None):
    """Print a check result."""
    status = "[OK]" if passed else "[FAIL]"
    print(f"  {status} {name}")
    if details:
        print(f"       {details}")


def check_imports():
    """Check all required Python packages are installed."""
    print_header("Checking Python Dependencies")

    packages = [
        ("numpy", "numpy"),
        ("pandas", "pandas"),
        ("trimesh", "trimesh"),
        ("rtree", "rtree"),
        ("PyYAML", "yaml"),
        ("matplotlib", "matplotlib"),
        ("tqdm", "tqdm"),
    ]

    all_ok = True
    for name, import_name in packages:
        try:
            module = importlib.import_module(import_name)
            version = getattr(module, "__version__", "unknown")
            print_check(name, True, f"version {version}")
        except ImportError as e:
            print_check(name, False, str(e))
            all_ok = False

    return all_ok


def check_model_files():
    """Check the bundled cubesat files exist."""
    print_header("Checking Sample Model")

    required_files = [
        ("Configuration", "cubesat_config.yaml"),
        ("OBJ model", "cubesat.obj"),
        ("Sun angles", "CUBESAT_i98_a500_SunAngles.csv"),
    ]

    all_ok = True
    for name, file_name in required_files:
        full_path = CUBESAT_DIR / file_name
        if full_path.exists():
            print_check(name, True, f"{full_path.stat().st_size / 1024:.1f} KB")
        else:
            print_check(name, False, f"Not found: {file_name}")
            all_ok = False

    return all_ok


def check_solarview_modules():
    """Check solarview modules can be imported."""
    print_header("Checking Solarview Modules")

    modules = [
        ("Settings Manager", "solarview.config", "SettingsManager"),
        ("OBJ Loader", "solarview.io.obj_loader", "ObjLoader"),
        ("Attitude Timeline", "solarview.attitude", "AttitudeTimeline"),
        ("Raster Device", "solarview.rendering", "RasterDevice"),
        ("Area Estimator", "solarview.computation", "AreaEstimator"),
        ("Simulation Driver", "solarview.simulation", "SimulationDriver"),
    ]

    all_ok = True
    for name, module_path, attr_name in modules:
        try:
            module = importlib.import_module(module_path)
            getattr(module, attr_name)
            print_check(name, True)
        except (ImportError, AttributeError) as e:
            print_check(name, False, str(e))
            all_ok = False

    return all_ok


def measure_sample_view():
    """Measure the cubesat seen face-on from the sun."""
    print_header("Measuring Sample Sun View")

    from solarview.config import SettingsManager
    from solarview.io.obj_loader import ObjLoader
    from solarview.rendering import ProjectionCamera
    from solarview.computation import AreaEstimator
    from solarview.utils.error_reporter import ErrorReporter

    manager = SettingsManager(PROJECT_ROOT)
    settings = manager.load_config("cubesat/cubesat_config.yaml")
    reporter = ErrorReporter(name="quickstart")
    model = ObjLoader.load_file(manager.get_model_path(settings), settings.model_scale, reporter=reporter)

    camera = ProjectionCamera(settings)
    camera.orient(0.0, 90.0)
    result = AreaEstimator(settings).measure(model, camera)

    for name, area in zip(model.part_names, result.areas):
        print(f"       {name}: {area:.5f} m^2")
    ok = reporter.error_count == 0 and result.total_area > 0
    print_check("Face-on measurement", ok, f"total {result.total_area:.5f} m^2")
    return ok


def print_summary(results):
    """Print final summary and next steps."""
    print_header("Summary")

    if all(results.values()):
        print("  All checks passed! Your solarview installation is ready.")
    else:
        print("  Some checks failed. Please review the errors above.")
        print()
        print("  Try reinstalling:")
        print("    pip install -e .[test]")
        return

    print()
    print("-" * 60)
    print("  Next Steps:")
    print("-" * 60)
    print()
    print("  1. Run the first example:")
    print("     python examples/01_simple_area_run.py")
    print()
    print("  2. Step through orientations manually:")
    print("     python examples/02_manual_inspection.py")
    print()
    print("  3. Run the tests:")
    print("     pytest")
    print()


def main():
    """Run all verification checks."""
    print()
    print("=" * 60)
    print("  Solarview Quick Start - Installation Verification")
    print("=" * 60)

    results = {}

    results["imports"] = check_imports()
    results["model_files"] = check_model_files()
    results["solarview_modules"] = check_solarview_modules()
    if results["imports"] and results["solarview_modules"]:
        results["sample_view"] = measure_sample_view()

    print_summary(results)


if __name__ == "__main__":
    main()
