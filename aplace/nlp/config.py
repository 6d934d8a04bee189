# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Configuration of the global placer
"""

from dataclasses import dataclass, field, fields
from typing import Any, Optional

from aplace.nlp.errors import ProblemError
from aplace.nlp.operators import Category, PenaltyWeights
from aplace.utils.keywords import KW
from aplace.utils.utils import is_number, read_json_yaml

STEPS = ["backtracking", "fixed"]
EXECUTIONS = ["parallel", "sequential"]
INITS = ["normal", "grid", "keep"]

# Expected types of the scalar keys (shared_sym_axis is boolean)
_NUMBER_KEYS = {KW.ALPHA, KW.STEP_SIZE, KW.SIGMA_RATIO, KW.CONVERGENCE_TOL, KW.TIME_LIMIT, KW.PENALTY_GROWTH,
                KW.MAX_PENALTY_WEIGHT}
_INT_KEYS = {KW.MAX_ITER, KW.SEED, KW.NUM_WORKERS}
_STR_KEYS = {KW.STEP, KW.EXECUTION, KW.INIT}
_OPTIONAL_KEYS = {KW.NUM_WORKERS, KW.CONVERGENCE_TOL, KW.TIME_LIMIT}


def default_penalty_thresholds() -> dict[str, float]:
    return {Category.OVERLAP.value: 0.01, Category.OUT_OF_BOUNDARY.value: 0.01, Category.ASYMMETRY.value: 0.01}


@dataclass
class PlacerConfig:
    """Hyperparameters and strategies of the placer"""
    alpha: float = 0.1  # Smoothing of the LSE wirelength and of the penalties
    weights: PenaltyWeights = field(default_factory=PenaltyWeights)  # Initial weights of the terms
    max_iter: int = 100  # Number of outer iterations
    step: str = "backtracking"  # Update step (see STEPS)
    step_size: float = 1.0  # Step size (initial step for backtracking)
    execution: str = "parallel"  # Execution of the task graphs (see EXECUTIONS)
    num_workers: Optional[int] = None  # Threads of the pool (None: default of concurrent.futures)
    shared_sym_axis: bool = False  # One axis for all the symmetry groups
    init: str = "normal"  # Initial placement (see INITS)
    seed: int = 6  # Seed of the random initial placements
    sigma_ratio: float = 0.1  # Spread of the normal initial placement (ratio of the boundary)
    convergence_tol: Optional[float] = None  # Relative objective change to stop (None: disabled)
    time_limit: Optional[float] = None  # Seconds (None: no limit)
    penalty_growth: float = 1.0  # Growth of the penalty weights above threshold (1: disabled)
    penalty_thresholds: dict[str, float] = field(default_factory=default_penalty_thresholds)
    max_penalty_weight: float = 1e4  # Cap of the penalty weights

    def validate(self) -> None:
        """Raises a ProblemError if some value is not acceptable"""
        if not self.alpha > 0:
            raise ProblemError("config", KW.ALPHA, f"the smoothing parameter must be positive (got {self.alpha})")
        for c in Category:
            if self.weights.get(c) < 0:
                raise ProblemError("config", c.value, "weights cannot be negative")
        if self.max_iter < 0:
            raise ProblemError("config", KW.MAX_ITER, "the number of iterations cannot be negative")
        if not self.step_size > 0:
            raise ProblemError("config", KW.STEP_SIZE, "the step size must be positive")
        for key, value, choices in [(KW.STEP, self.step, STEPS), (KW.EXECUTION, self.execution, EXECUTIONS),
                                    (KW.INIT, self.init, INITS)]:
            if value not in choices:
                raise ProblemError("config", key, f"unknown value {value} (expected one of {choices})")
        if self.num_workers is not None and self.num_workers <= 0:
            raise ProblemError("config", KW.NUM_WORKERS, "the number of workers must be positive")
        if not self.sigma_ratio > 0:
            raise ProblemError("config", KW.SIGMA_RATIO, "the spread must be positive")
        if self.penalty_growth < 1:
            raise ProblemError("config", KW.PENALTY_GROWTH, "the penalty growth cannot be smaller than 1")
        for key in self.penalty_thresholds:
            if key not in [c.value for c in Category]:
                raise ProblemError("config", KW.PENALTY_THRESHOLDS, f"unknown category {key}")

    @staticmethod
    def from_yaml(stream: str) -> 'PlacerConfig':
        """
        Reads a configuration from a file (JSON or YAML) or from a YAML text.
        Missing keys take the default values
        :param stream: name of the file or YAML text
        :return: the configuration
        """
        tree = read_json_yaml(stream)
        assert isinstance(tree, dict), "The configuration is not a dictionary"
        return PlacerConfig.from_dict(tree)

    @staticmethod
    def from_dict(tree: dict[str, Any]) -> 'PlacerConfig':
        """
        Creates a configuration from a dictionary
        :param tree: the values of the configuration
        :return: the configuration
        """
        names = {f.name for f in fields(PlacerConfig)}
        config = PlacerConfig()
        for key, value in tree.items():
            assert key in names, f"Unknown configuration key {key}"
            if key == KW.WEIGHTS:
                assert isinstance(value, dict), "The weights must be a dictionary"
                for c, w in value.items():
                    assert c in [cat.value for cat in Category], f"Unknown weight {c}"
                    if not is_number(w):
                        raise ProblemError("config", c, f"the weight must be a number (got {w!r})")
                    config.weights.set(Category(c), float(w))
            elif key == KW.PENALTY_THRESHOLDS:
                assert isinstance(value, dict), "The penalty thresholds must be a dictionary"
                for c, t in value.items():
                    if not is_number(t):
                        raise ProblemError("config", key, f"the threshold of {c} must be a number (got {t!r})")
                config.penalty_thresholds = {k: float(v) for k, v in value.items()}
            else:
                _check_type(key, value)
                setattr(config, key, value)
        return config


def _check_type(key: str, value: Any) -> None:
    """Raises a ProblemError if the value has not the type of the configuration key"""
    if value is None and key in _OPTIONAL_KEYS:
        return
    if key in _NUMBER_KEYS:
        ok, expected = is_number(value), "a number"
    elif key in _INT_KEYS:
        ok, expected = isinstance(value, int) and not isinstance(value, bool), "an integer"
    elif key in _STR_KEYS:
        ok, expected = isinstance(value, str), "a string"
    else:
        ok, expected = isinstance(value, bool), "a boolean"
    if not ok:
        raise ProblemError("config", key, f"the value must be {expected} (got {value!r})")

