"""LeaseLocker enumerations."""

from enum import Enum


class HeartbeatState(str, Enum):
    """Heartbeat session state."""

    HELD = "held"
    LOST = "lost"
    FAILED = "failed"
    STOPPED = "stopped"

    @classmethod
    def terminal_states(cls) -> set["HeartbeatState"]:
        """Return terminal states."""
        return {cls.LOST, cls.FAILED, cls.STOPPED}

    def is_terminal(self) -> bool:
        """Check if state is terminal."""
        return self in self.terminal_states()
