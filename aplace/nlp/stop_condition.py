# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Strategies to decide when the outer iterations of the optimization must stop
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class OptimizationState:
    """State observed by the stop conditions"""
    iteration: int = 0  # Number of completed outer iterations
    objectives: list[float] = field(default_factory=list)  # Total objective of every graph run

    @property
    def last_objective(self) -> Optional[float]:
        return self.objectives[-1] if self.objectives else None


class StopCondition(ABC):
    """Predicate over the optimization state"""

    def reset(self) -> None:
        """Called once by the placer before the first iteration"""

    @abstractmethod
    def should_stop(self, state: OptimizationState) -> bool:
        """Returns True when the optimization must stop"""


class StopAfterNumIterations(StopCondition):
    """Stops after a fixed number of outer iterations"""

    def __init__(self, max_iter: int):
        assert max_iter >= 0, "The number of iterations cannot be negative"
        self.max_iter = max_iter

    def should_stop(self, state: OptimizationState) -> bool:
        return state.iteration >= self.max_iter


class StopOnConvergence(StopCondition):
    """Stops when the relative change of the objective between two iterations is small"""

    def __init__(self, rel_tol: float, min_iterations: int = 1):
        assert rel_tol > 0, "The tolerance must be positive"
        self.rel_tol = rel_tol
        self.min_iterations = min_iterations

    def should_stop(self, state: OptimizationState) -> bool:
        if state.iteration < self.min_iterations or len(state.objectives) < 2:
            return False
        prev, last = state.objectives[-2], state.objectives[-1]
        return abs(prev - last) <= self.rel_tol * max(abs(prev), 1e-12)


class StopAfterTime(StopCondition):
    """Stops when a wall-clock budget (in seconds) is exhausted"""

    def __init__(self, seconds: float):
        assert seconds > 0, "The time limit must be positive"
        self.seconds = seconds
        self._start = time.monotonic()

    def reset(self) -> None:
        self._start = time.monotonic()

    def should_stop(self, state: OptimizationState) -> bool:
        return time.monotonic() - self._start >= self.seconds


class AnyStopCondition(StopCondition):
    """Stops as soon as one of the conditions holds"""

    def __init__(self, *conditions: StopCondition):
        assert len(conditions) > 0
        self.conditions = list(conditions)

    def reset(self) -> None:
        for c in self.conditions:
            c.reset()

    def should_stop(self, state: OptimizationState) -> bool:
        return any(c.should_stop(state) for c in self.conditions)
