"""
Discrete operator commands accepted by the simulation driver.
"""

from enum import Enum


class Command(Enum):
    """Named input events; keyboard or UI adapters translate to these."""
    START = "start"
    PAUSE = "pause"
    NEXT = "next"
    PREVIOUS = "previous"
    TOGGLE_WRITE = "toggle_write"
    RELOAD = "reload"
    STOP = "stop"

    @classmethod
    def from_name(cls, name: str) -> "Command":
        """Look up a command by value or member name, case-insensitive."""
        key = name.strip().lower()
        for command in cls:
            if command.value == key or command.name.lower() == key:
                return command
        raise ValueError(f"Unknown command: {name}")
