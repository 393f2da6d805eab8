"""
Attitude module for solarview.

Sun direction samples in the body frame and the cursor over them.
"""

from .timeline import AttitudeTimeline, AttitudeSample, parse_timestamp, eclipse_multiplier

__all__ = [
    'AttitudeTimeline',
    'AttitudeSample',
    'parse_timestamp',
    'eclipse_multiplier',
]
