"""
Two-Stage Ascent Simulation - Mission Events

The physics core never writes log text. Discrete occurrences (staging,
fairing jettison, burns, mission failure, ...) are queued as structured
MissionEvent records and drained by whoever drives the simulation.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List


class EventType(Enum):
    STAGE_SEPARATION = auto()
    FAIRING_JETTISON = auto()
    MAX_Q_EXCEEDED = auto()
    MISSION_FAILURE = auto()
    BURN_STARTED = auto()
    BURN_ENDED = auto()
    ORBIT_ACHIEVED = auto()
    ENGINE_CUTOFF = auto()          # MECO / SECO
    ENGINE_IGNITION = auto()        # SES-1, burn-mode relight
    PITCH_KICK = auto()
    KARMAN_LINE = auto()


@dataclass
class MissionEvent:
    """One mission event at simulation time `time` (s)."""
    type: EventType
    time: float
    message: str = ''
    data: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        minutes, seconds = divmod(max(0.0, self.time), 60.0)
        return f"T+{int(minutes):02d}:{seconds:05.2f} {self.type.name}: {self.message}"


class EventQueue:
    """
    FIFO of pending events plus the set of once-per-run events already seen.
    """

    def __init__(self):
        self._pending: List[MissionEvent] = []
        self._fired = set()

    def emit(self, event_type: EventType, time: float, message: str = '',
             **data) -> MissionEvent:
        event = MissionEvent(event_type, time, message, data)
        self._pending.append(event)
        return event

    def emit_once(self, key, event_type: EventType, time: float, message: str = '',
                  **data) -> bool:
        """
        Emit unless an event with the same key already fired this run.

        Returns:
            True if the event was queued
        """
        if key in self._fired:
            return False
        self._fired.add(key)
        self.emit(event_type, time, message, **data)
        return True

    def has_fired(self, key) -> bool:
        return key in self._fired

    def drain(self) -> List[MissionEvent]:
        """Return and clear all pending events in emission order."""
        events, self._pending = self._pending, []
        return events

    def __len__(self) -> int:
        return len(self._pending)

    def clear(self):
        """Forget pending events and once-per-run history."""
        self._pending.clear()
        self._fired.clear()
