# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Update steps of the outer iterations and schedule of the penalty weights
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable

import numpy as np
import numpy.typing as npt

from aplace.nlp.operators import Category, PenaltyWeights
from aplace.nlp.parameter_space import ParameterSpace
from aplace.nlp.tasks import ObjectiveRecord

logger = logging.getLogger(__name__)

ObjectiveFunction = Callable[[], float]


class UpdateStep(ABC):
    """Moves the point of the parameter space along the negative gradient"""

    @abstractmethod
    def step(self, space: ParameterSpace, gradient: npt.NDArray[np.float64], objective: float,
             evaluate: ObjectiveFunction) -> float:
        """
        Updates the variables of the parameter space
        :param space: the parameter space (at the point where the gradient was computed)
        :param gradient: the gradient of the objective
        :param objective: the objective at the current point
        :param evaluate: function that returns the objective at the current point of the space
        :return: the step size applied (0 if the point did not change)
        """


class GradientDescentStep(UpdateStep):
    """Fixed-size step: v <- v - step_size * g"""

    def __init__(self, step_size: float = 1.0):
        assert step_size > 0, "The step size must be positive"
        self.step_size = step_size

    def step(self, space: ParameterSpace, gradient: npt.NDArray[np.float64], objective: float,
             evaluate: ObjectiveFunction) -> float:
        space.assign(space.values - self.step_size * gradient)
        return self.step_size


class BacktrackingStep(UpdateStep):
    """
    Armijo line search. The step is shrunk until the objective decreases enough:
    f(v - t*g) <= f(v) - armijo * t * |g|^2.
    If no trial is accepted, the point is not modified.
    """

    def __init__(self, initial_step: float = 1.0, shrink: float = 0.5, armijo: float = 1e-4,
                 max_trials: int = 30):
        assert initial_step > 0, "The initial step must be positive"
        assert 0 < shrink < 1, "The shrink factor must be in (0,1)"
        assert 0 < armijo < 1, "The Armijo constant must be in (0,1)"
        assert max_trials > 0
        self.initial_step = initial_step
        self.shrink = shrink
        self.armijo = armijo
        self.max_trials = max_trials

    def step(self, space: ParameterSpace, gradient: npt.NDArray[np.float64], objective: float,
             evaluate: ObjectiveFunction) -> float:
        start = space.copy_values()
        g = gradient.copy()
        g2 = float(g @ g)
        if g2 == 0.0:
            return 0.0
        t = self.initial_step
        for _ in range(self.max_trials):
            space.assign(start - t * g)
            if evaluate() <= objective - self.armijo * t * g2:
                return t
            t *= self.shrink
        space.assign(start)
        logger.debug("Line search failed after %d trials", self.max_trials)
        return 0.0


class PenaltySchedule:
    """
    Increases the weights of the penalty terms that are still above a threshold
    """

    def __init__(self, thresholds: dict[str, float], growth: float = 1.0, max_weight: float = 1e4):
        """
        Constructor
        :param thresholds: threshold of each category (by name); categories not present are never updated
        :param growth: multiplier of the weights (1: the weights never change)
        :param max_weight: cap of the weights
        """
        assert growth >= 1, "The growth cannot be smaller than 1"
        self.thresholds = {Category(k): v for k, v in thresholds.items()}
        self.growth = growth
        self.max_weight = max_weight

    def apply(self, record: ObjectiveRecord, weights: PenaltyWeights) -> list[Category]:
        """
        Updates the weights according to the last objective
        :param record: the objective of the last iteration
        :param weights: the weights (modified in place)
        :return: the categories whose weight changed
        """
        changed = list[Category]()
        if self.growth == 1:
            return changed
        for cat, threshold in self.thresholds.items():
            w = weights.get(cat)
            if record.get(cat) > threshold and w < self.max_weight:
                weights.set(cat, min(w * self.growth, self.max_weight))
                changed.append(cat)
        if changed:
            logger.debug("Penalty weights increased: %s", ", ".join(c.value for c in changed))
        return changed
