"""
Attitude timeline for sun-relative orientation samples.

Loads the comma-separated sun angle reports (timestamp, azimuth, elevation,
eclipse angle) produced by the attitude propagator and provides a bounded
cursor over them.
"""

import math
import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

import pandas as pd

from ..utils.error_reporter import ErrorReporter, resolve_reporter

logger = logging.getLogger(__name__)

FIELDS_PER_ROW = 4


@dataclass(frozen=True)
class AttitudeSample:
    """
    Sun direction in the body frame at one instant.

    Attributes:
        timestamp_text: Timestamp as written in the input file (echoed to output).
        timestamp: Parsed timestamp.
        azimuth_deg: Sun azimuth.
        elevation_deg: Sun elevation.
        eclipse_angle_deg: Angle between earth->sun and earth->satellite.
        eclipse_multiplier: 0 if the satellite is eclipsed, otherwise 1.
    """
    timestamp_text: str
    timestamp: pd.Timestamp
    azimuth_deg: float
    elevation_deg: float
    eclipse_angle_deg: float
    eclipse_multiplier: int


def parse_timestamp(text: str) -> pd.Timestamp:
    """Parse a date string; plain numbers are seconds since the Unix epoch."""
    try:
        return pd.Timestamp(float(text), unit='s')
    except ValueError:
        return pd.Timestamp(text)


def eclipse_multiplier(eclipse_angle_deg: float, threshold_deg: float) -> int:
    """Binary visibility gate: 0 while |eclipse angle| is below the threshold."""
    return 0 if abs(eclipse_angle_deg) < threshold_deg else 1


class AttitudeTimeline:
    """
    Ordered attitude samples with a cursor.

    The cursor always satisfies 0 <= cursor <= len(samples); cursor == len
    means the timeline is finished.
    """

    def __init__(self, samples: Optional[List[AttitudeSample]] = None, temporal_resolution: float = 1.0):
        self._samples: List[AttitudeSample] = list(samples) if samples else []
        self.temporal_resolution = temporal_resolution
        self._cursor = 0

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def load(
        cls,
        rows: Iterable[str],
        eclipse_angle_deg: float,
        temporal_resolution: float = 1.0,
        reporter: Optional[ErrorReporter] = None
    ) -> "AttitudeTimeline":
        """
        Parse sun angle rows.

        Blank rows and rows starting with a quote are skipped. A row with the
        wrong number of fields, or with values that cannot be parsed, stops
        parsing; the samples read up to that point are kept.

        Args:
            rows: Lines of the sun angle file.
            eclipse_angle_deg: Eclipse threshold derived from the orbit altitude.
            temporal_resolution: Time between samples in seconds.
            reporter: Error reporter for malformed rows.

        Returns:
            AttitudeTimeline with the parsed samples.
        """
        reporter = resolve_reporter(reporter)
        samples: List[AttitudeSample] = []

        for line_number, raw in enumerate(rows, start=1):
            line = raw.rstrip('\r\n')
            if len(line.strip()) == 0:
                continue
            if line[0] == '"':
                continue

            fields = line.split(',')
            if len(fields) != FIELDS_PER_ROW:
                reporter.report(f"AttitudeTimeline: line {line_number}: wrong format, expected "
                                f"{FIELDS_PER_ROW} fields, got {len(fields)}.")
                break

            try:
                timestamp_text = fields[0].strip()
                azimuth = float(fields[1])
                elevation = float(fields[2])
                eclipse = float(fields[3])
                timestamp = parse_timestamp(timestamp_text)
            except ValueError as e:
                reporter.report(f"AttitudeTimeline: line {line_number}: could not parse <{line}>: {e}")
                break

            samples.append(AttitudeSample(
                timestamp_text=timestamp_text,
                timestamp=timestamp,
                azimuth_deg=azimuth,
                elevation_deg=elevation,
                eclipse_angle_deg=eclipse,
                eclipse_multiplier=eclipse_multiplier(eclipse, eclipse_angle_deg)
            ))

        logger.info(f"{len(samples)} orientations relative to the sun.")
        return cls(samples, temporal_resolution=temporal_resolution)

    @classmethod
    def load_file(
        cls,
        path: Union[str, Path],
        eclipse_angle_deg: float,
        temporal_resolution: float = 1.0,
        reporter: Optional[ErrorReporter] = None
    ) -> "AttitudeTimeline":
        """Load a sun angle file; a missing file is reported and yields an empty timeline."""
        reporter = resolve_reporter(reporter)
        path = Path(path)

        if not path.exists():
            reporter.report(f"AttitudeTimeline: File <{path}> not found.")
            return cls([], temporal_resolution=temporal_resolution)

        logger.info(f"Reading orientation data from: {path}")
        with open(path, 'r') as f:
            return cls.load(f, eclipse_angle_deg, temporal_resolution, reporter)

    # =========================================================================
    # Cursor
    # =========================================================================

    @property
    def cursor(self) -> int:
        return self._cursor

    def advance(self) -> None:
        """Move to the next sample; stays at the end once finished."""
        if self._cursor < len(self._samples):
            self._cursor += 1

    def retreat(self) -> None:
        """Move to the previous sample; no-op at the first sample."""
        if self._cursor > 0:
            self._cursor -= 1

    def set_cursor(self, index: int) -> None:
        self._cursor = min(max(int(index), 0), len(self._samples))

    def index_for_timestamp(self, timestamp: Union[str, pd.Timestamp]) -> int:
        """Sample index of a timestamp, assuming constant temporal resolution."""
        if not self._samples:
            raise ValueError("Timeline is empty")
        if not isinstance(timestamp, pd.Timestamp):
            timestamp = parse_timestamp(str(timestamp))
        elapsed = (timestamp - self._samples[0].timestamp).total_seconds()
        return int(math.floor(elapsed / self.temporal_resolution))

    @property
    def is_finished(self) -> bool:
        return self._cursor >= len(self._samples)

    @property
    def current(self) -> Optional[AttitudeSample]:
        """Sample at the cursor, or None when finished."""
        if self.is_finished:
            return None
        return self._samples[self._cursor]

    # =========================================================================
    # Access
    # =========================================================================

    @property
    def samples(self) -> List[AttitudeSample]:
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __getitem__(self, index: int) -> AttitudeSample:
        return self._samples[index]

    @property
    def progress(self) -> float:
        """Fraction of samples processed."""
        if not self._samples:
            return 1.0
        return self._cursor / len(self._samples)
