"""Per-action in-flight tracking: IDLE -> IN_FLIGHT -> IDLE."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FlightState(Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


class Outcome(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class InFlight:
    """Guards one action so the UI can disable exactly that action's trigger."""

    def __init__(self, name: str):
        self.name = name
        self.state = FlightState.IDLE
        self.last_outcome: Optional[Outcome] = None

    @property
    def busy(self) -> bool:
        return self.state is FlightState.IN_FLIGHT

    def begin(self) -> bool:
        """Enter IN_FLIGHT. Returns False if the action is already running."""
        if self.busy:
            return False
        self.state = FlightState.IN_FLIGHT
        return True

    def finish(self, ok: bool) -> None:
        self.state = FlightState.IDLE
        self.last_outcome = Outcome.SUCCEEDED if ok else Outcome.FAILED

    def __repr__(self) -> str:
        return f"InFlight({self.name!r}, state={self.state.value})"
