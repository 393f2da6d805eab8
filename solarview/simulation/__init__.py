"""
Simulation module for solarview.

Time-step driver, operator commands and session assembly.
"""

from .commands import Command
from .driver import SimulationDriver, DriverState, StepResult
from .session import SimulationSession, create_session, load_inputs

__all__ = [
    'Command',
    'SimulationDriver',
    'DriverState',
    'StepResult',
    'SimulationSession',
    'create_session',
    'load_inputs',
]
