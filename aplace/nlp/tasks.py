# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
The tasks of the optimization kernel.

A task is a record with the handles it reads and writes, and a run() method
without arguments. Tasks are created once and executed at every run of the
task graph. Every piece of shared data is written by exactly one task at a
time; the ordering is given by the edges of the graph.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np
import numpy.typing as npt

from aplace.nlp.operators import Category, Operator, Partials
from aplace.nlp.parameter_space import VarRef
from aplace.nlp.stop_condition import OptimizationState, StopCondition

IndexFunction = Callable[[VarRef], int]


@dataclass
class ObjectiveRecord:
    """Value of every term of the objective. Each field has a single writer"""
    hpwl: float = 0.0
    overlap: float = 0.0
    out_of_boundary: float = 0.0
    asymmetry: float = 0.0
    path_cosine: float = 0.0
    total: float = 0.0

    def get(self, category: Category) -> float:
        return getattr(self, category.value)

    def set(self, category: Category, value: float) -> None:
        setattr(self, category.value, value)

    def copy(self) -> 'ObjectiveRecord':
        return ObjectiveRecord(self.hpwl, self.overlap, self.out_of_boundary, self.asymmetry,
                               self.path_cosine, self.total)

    def __str__(self) -> str:
        return f"obj={self.total:.6g} (hpwl={self.hpwl:.6g}, ovl={self.overlap:.6g}, " \
               f"oob={self.out_of_boundary:.6g}, asym={self.asymmetry:.6g}, cos={self.path_cosine:.6g})"


class GradientAccumulator:
    """A gradient vector written by the tasks of one category"""

    def __init__(self, size: int, name: str = ""):
        self.name = name
        self.vector: npt.NDArray[np.float64] = np.zeros(size)

    def clear(self) -> None:
        self.vector.fill(0.0)

    def add(self, offset: int, value: float) -> None:
        self.vector[offset] += value


class Task:
    """Base class of the tasks"""
    name: str = "task"

    def run(self) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class EvaluateTask(Task):
    """Evaluates one operator"""

    def __init__(self, op: Operator, name: str):
        self.op = op
        self.name = name
        self.value = 0.0

    def run(self) -> None:
        self.value = self.op.evaluate()


class CategorySumTask(Task):
    """Sums the evaluations of one category into its field of the objective record"""

    def __init__(self, category: Category, sources: list[EvaluateTask], record: ObjectiveRecord):
        self.category = category
        self.sources = sources
        self.record = record
        self.name = f"sum_obj_{category.value}"

    def run(self) -> None:
        total = 0.0
        for t in self.sources:
            total += t.value
        self.record.set(self.category, total)


class TotalObjectiveTask(Task):
    """Sums the categories of the objective record"""
    name = "sum_obj_all"

    def __init__(self, record: ObjectiveRecord):
        self.record = record

    def run(self) -> None:
        r = self.record
        total = 0.0
        for c in Category:
            total += r.get(c)
        r.total = total


class CalculatePartialTask(Task):
    """Computes the partial derivatives of one operator"""

    def __init__(self, op: Operator, name: str):
        self.op = op
        self.name = name
        self.partials: Partials = {}

    def run(self) -> None:
        self.partials = self.op.compute_partials()


class ClearGradientTask(Task):
    """Sets a gradient accumulator to zero"""

    def __init__(self, accumulator: GradientAccumulator):
        self.accumulator = accumulator
        self.name = f"clear_grad_{accumulator.name}"

    def run(self) -> None:
        self.accumulator.clear()


class UpdateGradientTask(Task):
    """Adds the partials computed by a CalculatePartialTask into the accumulator of its category"""

    def __init__(self, source: CalculatePartialTask, accumulator: GradientAccumulator,
                 index_function: IndexFunction):
        self.source = source
        self.accumulator = accumulator
        self.index_function = index_function
        self.name = f"update_{source.name}"

    def run(self) -> None:
        for ref, v in self.source.partials.items():
            self.accumulator.add(self.index_function(ref), v)


class SumGradientTask(Task):
    """Sums the accumulators of all the categories into the gradient"""
    name = "sum_grad"

    def __init__(self, sources: list[GradientAccumulator], target: GradientAccumulator):
        self.sources = sources
        self.target = target

    def run(self) -> None:
        for s in self.sources:
            self.target.vector += s.vector


class StopCheckTask(Task):
    """Records the total objective and evaluates the stop condition"""
    name = "check_stop_condition"

    def __init__(self, condition: StopCondition, state: OptimizationState, record: ObjectiveRecord):
        self.condition = condition
        self.state = state
        self.record = record
        self.result: Optional[bool] = None

    def run(self) -> None:
        self.state.objectives.append(self.record.total)
        self.result = self.condition.should_stop(self.state)


@dataclass
class CategoryTasks:
    """All the per-operator tasks of one category"""
    category: Category
    evaluate: list[EvaluateTask] = field(default_factory=list)
    calculate: list[CalculatePartialTask] = field(default_factory=list)
    update: list[UpdateGradientTask] = field(default_factory=list)
