from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Tuple, TypeVar

from chaoslab.core.buffer import TrajectoryBuffer
from chaoslab.utils.logging import get_logger

logger = get_logger(__name__)

S = TypeVar("S")


@dataclass(frozen=True)
class SimulationSnapshot(Generic[S]):
    """Read-only view published to renderers after each tick."""

    steps: int
    time: float
    state: S
    history: Tuple[Any, ...]


class ContinuousSystem(ABC, Generic[S]):
    """
    Base class for continuous-state systems advanced by a fixed step.

    Subclasses provide the initial state, one integration step and the entry
    recorded in the history buffer for a given state.
    """

    def __init__(self, capacity: int):
        self.history: TrajectoryBuffer = TrajectoryBuffer(capacity)
        self.state: S = self.initial_state()
        self.steps = 0
        self.time = 0.0

    @abstractmethod
    def initial_state(self) -> S:
        ...

    @property
    @abstractmethod
    def dt(self) -> float:
        """Step size for the next step, read fresh every call."""
        ...

    @abstractmethod
    def advance(self, state: S, h: float) -> S:
        """Return the state one step after ``state``."""
        ...

    def record(self, state: S) -> Any:
        return state

    def step(self) -> S:
        h = self.dt
        self.state = self.advance(self.state, h)
        self.steps += 1
        self.time += h
        self.history.append(self.record(self.state))
        return self.state

    def reset(self) -> None:
        self.state = self.initial_state()
        self.steps = 0
        self.time = 0.0
        self.history.reset()
        logger.debug("%s reset to %s", type(self).__name__, self.state)

    def snapshot(self) -> SimulationSnapshot[S]:
        return SimulationSnapshot(
            steps=self.steps,
            time=self.time,
            state=self.state,
            history=self.history.snapshot(),
        )
