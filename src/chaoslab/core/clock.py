from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

from chaoslab.utils.logging import get_logger

logger = get_logger(__name__)


class Steppable(Protocol):
    def step(self) -> Any:
        ...

    def reset(self) -> None:
        ...

    def snapshot(self) -> Any:
        ...


class ClockState(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"


class SimulationClock:
    """
    Per-tick driver for one simulation.

    Every tick advances the attached system once while RUNNING. While PAUSED,
    ticks are accepted but leave the system untouched. Reset is allowed in
    either state and keeps the current RUNNING/PAUSED state.
    """

    def __init__(self, system: Steppable, paused: bool = False):
        self.system = system
        self.state = ClockState.PAUSED if paused else ClockState.RUNNING
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self.state is ClockState.RUNNING

    def _advance(self) -> None:
        self.ticks += 1
        if self.running:
            self.system.step()

    def tick(self):
        """Handle one refresh signal and publish the resulting snapshot."""
        self._advance()
        return self.system.snapshot()

    def run(self, ticks: int):
        """
        Issue ``ticks`` ticks back to back and publish once at the end.

        Stopping early is just calling with a smaller count; there is no
        in-flight work to cancel.
        """
        if ticks < 0:
            raise ValueError(f"ticks must be >= 0, got {ticks!r}")
        for _ in range(ticks):
            self._advance()
        return self.system.snapshot()

    def toggle(self) -> ClockState:
        self.state = ClockState.PAUSED if self.running else ClockState.RUNNING
        logger.debug("Clock toggled to %s", self.state.value)
        return self.state

    def pause(self) -> None:
        self.state = ClockState.PAUSED

    def resume(self) -> None:
        self.state = ClockState.RUNNING

    def reset(self):
        self.system.reset()
        self.ticks = 0
        return self.system.snapshot()
