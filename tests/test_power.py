import numpy as np
import pytest

from solarview.computation.power import compute_power
from solarview.simulation.commands import Command
from solarview.utils.error_reporter import ErrorReporter, get_error_reporter, resolve_reporter


def test_power_sums_configured_parts(reporter):
    areas = np.array([1.0, 2.0, 3.0])
    power = compute_power(areas, [0, 2], cell_efficiency=0.3, solar_intensity=1367.0, reporter=reporter)
    assert power == pytest.approx(4.0 * 0.3 * 1367.0)
    assert reporter.error_count == 0


def test_power_skips_out_of_range_parts(reporter):
    areas = np.array([1.0])
    power = compute_power(areas, [0, 5, -1], 0.5, 1000.0, reporter=reporter)
    assert power == pytest.approx(500.0)
    assert reporter.error_count == 2


def test_power_zero_in_eclipse():
    assert compute_power(np.zeros(2), [0, 1], 0.3, 1367.0) == 0.0


def test_error_reporter_counts_monotonically():
    reporter = ErrorReporter(name="count", keep_messages=2)
    assert not reporter.has_errors
    assert reporter.report("a") == 0
    assert reporter.report("b") == 1
    assert reporter.report("c") == 2
    assert reporter.error_count == 3
    assert list(reporter.messages) == ["b", "c"]


def test_resolve_reporter():
    local = ErrorReporter()
    assert resolve_reporter(local) is local
    assert resolve_reporter(None) is get_error_reporter()


def test_command_lookup():
    assert Command.from_name("toggle_write") is Command.TOGGLE_WRITE
    assert Command.from_name(" Next ") is Command.NEXT
    with pytest.raises(ValueError):
        Command.from_name("jump")
