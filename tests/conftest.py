import os

os.environ.setdefault("MPLBACKEND", "Agg")

import numpy as np
import pytest

from solarview.config.settings_schemas import SimulationSettings
from solarview.io.obj_loader import GeometryModel, GeometryPart
from solarview.utils.error_reporter import ErrorReporter


class RecordingSink:
    """Sink that records every block written."""

    def __init__(self):
        self.writes = []

    def write_lines(self, lines, append):
        self.writes.append((list(lines), append))

    @property
    def write_count(self):
        return len(self.writes)

    @property
    def lines(self):
        return [line for block, _ in self.writes for line in block]


def square_part(name, half_size, z=0.0, center=(0.0, 0.0)):
    """Axis-aligned square in a plane of constant z, two triangles."""
    cx, cy = center
    vertices = np.array([
        [cx - half_size, cy - half_size, z],
        [cx + half_size, cy - half_size, z],
        [cx + half_size, cy + half_size, z],
        [cx - half_size, cy + half_size, z],
    ])
    faces = np.array([[0, 1, 2], [0, 2, 3]])
    return GeometryPart(name=name, vertices=vertices, faces=faces)


@pytest.fixture
def reporter():
    return ErrorReporter(name="test")


@pytest.fixture
def settings():
    """1 m screen at 100 px, so one pixel is 1e-4 m^2."""
    return SimulationSettings(
        name="TESTSAT",
        screen_size_pixel=100,
        screen_size_meter=1.0,
        solar_cell_part_indices=(0,),
        cell_efficiency=0.3,
        write_block_size=100,
        write_data=True,
        query_timeout_s=2.0,
    )


@pytest.fixture
def small_settings():
    """Coarse screen for driver tests."""
    return SimulationSettings(
        name="TESTSAT",
        screen_size_pixel=40,
        screen_size_meter=1.0,
        solar_cell_part_indices=(0, 1),
        cell_efficiency=0.25,
        write_block_size=100,
        write_data=True,
        query_timeout_s=2.0,
    )


@pytest.fixture
def unit_square_model():
    return GeometryModel([square_part("Square", 0.5)], name="square")


@pytest.fixture
def stacked_model():
    """Small near square above a larger far square along +Z."""
    return GeometryModel([
        square_part("Far", 0.3, z=0.0),
        square_part("Near", 0.2, z=0.5),
    ], name="stacked")


@pytest.fixture
def recording_sink():
    return RecordingSink()
