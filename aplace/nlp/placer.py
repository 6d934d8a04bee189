# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
The global placer: drives the stages of the analytical placement of a circuit.

The stages must be executed in this order (solve() runs all of them):
  build_problem -> init_placement -> build_operators -> build_tasks -> optimize -> write_out
"""

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
import numpy.typing as npt

from aplace.circuit.circuit import Circuit
from aplace.circuit.signal_path import SigPathSeg
from aplace.geometry.geometry import Point
from aplace.nlp.config import PlacerConfig
from aplace.nlp.errors import PlacerStateError
from aplace.nlp.executor import Executor, ExecutionMode
from aplace.nlp.init_place import InitialPlacement, NormalNearCenter, RandomGrid, KeepCircuitPlacement
from aplace.nlp.operators import Category, Operator, PenaltyWeights, HpwlOperator, OverlapOperator, \
    OutOfBoundaryOperator, AsymmetryOperator, PathCosineOperator
from aplace.nlp.optimizer import UpdateStep, BacktrackingStep, GradientDescentStep, PenaltySchedule
from aplace.nlp.parameter_space import ParameterSpace
from aplace.nlp.problem import PlacementProblem
from aplace.nlp.stop_condition import StopCondition, StopAfterNumIterations, StopOnConvergence, \
    StopAfterTime, AnyStopCondition, OptimizationState
from aplace.nlp.task_graph import TaskGraph, TaskGraphBuilder
from aplace.nlp.tasks import ObjectiveRecord
from aplace.utils.utils import auto_round

logger = logging.getLogger(__name__)


class PlacerState(Enum):
    UNINITIALIZED = 0
    PROBLEM_BUILT = 1
    PLACEMENT_INITIALIZED = 2
    OPERATORS_BUILT = 3
    TASKS_BUILT = 4
    ITERATING = 5
    DONE = 6


@dataclass
class PlacementResult:
    """Outcome of a placement"""
    iterations: int  # Number of updates of the variables
    record: ObjectiveRecord  # Objective at the last point
    history: list[ObjectiveRecord]  # Objective of every iteration
    locations: dict[str, Point]  # Location of every cell (database units)


def default_stop_condition(config: PlacerConfig) -> StopCondition:
    """Stop condition defined by the configuration"""
    conditions: list[StopCondition] = [StopAfterNumIterations(config.max_iter)]
    if config.convergence_tol is not None:
        conditions.append(StopOnConvergence(config.convergence_tol))
    if config.time_limit is not None:
        conditions.append(StopAfterTime(config.time_limit))
    return conditions[0] if len(conditions) == 1 else AnyStopCondition(*conditions)


def default_init_placement(config: PlacerConfig) -> InitialPlacement:
    """Initial placement policy defined by the configuration"""
    if config.init == "grid":
        return RandomGrid(config.seed)
    if config.init == "keep":
        return KeepCircuitPlacement()
    return NormalNearCenter(config.seed, config.sigma_ratio)


def default_update_step(config: PlacerConfig) -> UpdateStep:
    """Update step defined by the configuration"""
    if config.step == "fixed":
        return GradientDescentStep(config.step_size)
    return BacktrackingStep(config.step_size)


class GlobalPlacer:
    """
    Analytical global placer of a circuit. The strategies (stop condition, initial
    placement, update step and executor) can be injected. Otherwise, they are
    created from the configuration.
    """

    _state: PlacerState
    _problem: Optional[PlacementProblem]
    _space: Optional[ParameterSpace]
    _operators: dict[Category, list[Operator]]
    _builder: Optional[TaskGraphBuilder]
    _history: list[ObjectiveRecord]

    def __init__(self, circuit: Circuit, config: Optional[PlacerConfig] = None,
                 stop_condition: Optional[StopCondition] = None,
                 init_placement: Optional[InitialPlacement] = None,
                 update_step: Optional[UpdateStep] = None,
                 segments: Optional[list[SigPathSeg]] = None,
                 executor: Optional[Executor] = None):
        """
        Constructor
        :param circuit: the circuit to be placed (the locations are written into it)
        :param config: the configuration (default values if None)
        :param stop_condition: when to stop the outer iterations
        :param init_placement: policy of the initial placement
        :param update_step: update of the variables at every iteration
        :param segments: signal path segments (decomposed from the circuit if None)
        :param executor: executor of the task graphs (the placer owns the executor if None)
        """
        self.circuit = circuit
        self.config = config if config is not None else PlacerConfig()
        self._stop_condition = stop_condition
        self._init_placement = init_placement
        self._update_step = update_step
        self._segments = segments
        self._own_executor = executor is None
        self._executor = executor
        self._state = PlacerState.UNINITIALIZED
        self._problem = None
        self._space = None
        self._weights = PenaltyWeights()
        self._operators = {}
        self._builder = None
        self._opt_state = OptimizationState()
        self._history = []

    def _advance(self, expected: PlacerState, new: PlacerState) -> None:
        if self._state != expected:
            raise PlacerStateError(f"Cannot move to {new.name}: the placer is {self._state.name} "
                                   f"(expected {expected.name})")
        self._state = new

    @property
    def state(self) -> PlacerState:
        return self._state

    @property
    def problem(self) -> PlacementProblem:
        if self._problem is None:
            raise PlacerStateError("The problem has not been built")
        return self._problem

    @property
    def space(self) -> ParameterSpace:
        if self._space is None:
            raise PlacerStateError("The problem has not been built")
        return self._space

    @property
    def weights(self) -> PenaltyWeights:
        """Current weights of the terms of the objective"""
        return self._weights

    @property
    def operators(self) -> dict[Category, list[Operator]]:
        return self._operators

    @property
    def builder(self) -> TaskGraphBuilder:
        if self._builder is None:
            raise PlacerStateError("The tasks have not been built")
        return self._builder

    @property
    def record(self) -> ObjectiveRecord:
        """Objective computed by the last run of a task graph"""
        return self.builder.record

    @property
    def gradient(self) -> npt.NDArray[np.float64]:
        """Copy of the gradient computed by the last iteration"""
        return self.builder.gradient.vector.copy()

    @property
    def iterations(self) -> int:
        return self._opt_state.iteration

    @property
    def history(self) -> list[ObjectiveRecord]:
        return self._history

    # Stages

    def build_problem(self) -> None:
        """Validates the inputs and creates the parameter space"""
        self._advance(PlacerState.UNINITIALIZED, PlacerState.PROBLEM_BUILT)
        self._problem = PlacementProblem.from_circuit(self.circuit, self.config, self._segments)
        self._space = ParameterSpace(self.circuit.num_cells, self.circuit.num_sym_groups,
                                     self.config.shared_sym_axis)
        self._weights = dataclasses.replace(self.config.weights)
        if self._stop_condition is None:
            self._stop_condition = default_stop_condition(self.config)
        if self._init_placement is None:
            self._init_placement = default_init_placement(self.config)
        if self._update_step is None:
            self._update_step = default_update_step(self.config)
        if self._executor is None:
            mode = ExecutionMode(self.config.execution)
            self._executor = Executor(mode, self.config.num_workers)
        logger.info("Problem built: %d cells, %d nets, %d symmetry groups, %d path segments, %d variables",
                    self.circuit.num_cells, self.circuit.num_nets, self.circuit.num_sym_groups,
                    len(self._problem.segments), self._space.size)

    def init_placement(self) -> None:
        """Computes the starting point of the optimization"""
        self._advance(PlacerState.PROBLEM_BUILT, PlacerState.PLACEMENT_INITIALIZED)
        assert self._init_placement is not None
        self._init_placement.place(self.space, self.problem)

    def build_operators(self) -> None:
        """Creates the operators of all the terms of the objective"""
        self._advance(PlacerState.PLACEMENT_INITIALIZED, PlacerState.OPERATORS_BUILT)
        p, s, w = self.problem, self.space, self._weights
        ops: dict[Category, list[Operator]] = {c: [] for c in Category}

        for net in p.nets:
            hpwl = HpwlOperator(s, w, p.alpha, net.weight)
            for pin in net.pins:
                hpwl.add_pin(p.pin_cell(pin), p.pin_offsets[pin])
            ops[Category.HPWL].append(hpwl)

        n = p.num_cells
        for i in range(n):
            for j in range(i + 1, n):
                ops[Category.OVERLAP].append(OverlapOperator(s, w, p.alpha, i, p.widths[i], p.heights[i],
                                                             j, p.widths[j], p.heights[j]))
            ops[Category.OUT_OF_BOUNDARY].append(OutOfBoundaryOperator(s, w, p.alpha, i, p.widths[i],
                                                                       p.heights[i], p.boundary))

        for g, group in enumerate(p.sym_groups):
            if group.is_empty:
                continue
            asym = AsymmetryOperator(s, w, g)
            for a, b in group.pairs:
                asym.add_sym_pair(a, p.widths[a], b, p.widths[b])
            for c in group.self_syms:
                asym.add_self_sym(c, p.widths[c])
            ops[Category.ASYMMETRY].append(asym)

        for seg in p.segments:
            ops[Category.PATH_COSINE].append(
                PathCosineOperator(s, w, p.pin_cell(seg.begin_first), p.pin_offsets[seg.begin_first],
                                   p.pin_cell(seg.end_first), p.pin_offsets[seg.end_first],
                                   p.pin_offsets[seg.begin_second],
                                   p.pin_cell(seg.end_second), p.pin_offsets[seg.end_second]))

        self._operators = ops
        logger.debug("Operators: %s", ", ".join(f"{c.value}={len(v)}" for c, v in ops.items()))

    def build_tasks(self) -> None:
        """Creates the tasks and the task graphs"""
        self._advance(PlacerState.OPERATORS_BUILT, PlacerState.TASKS_BUILT)
        assert self._stop_condition is not None
        self._builder = TaskGraphBuilder(self._operators, self.space, self._stop_condition, self._opt_state)
        self._objective_graph = self._builder.build_objective_graph()
        self._iteration_graph = self._builder.build_iteration_graph()
        logger.debug("Iteration graph: %d tasks, %d dependencies",
                     len(self._iteration_graph), self._iteration_graph.num_edges)

    def _run(self, graph: TaskGraph) -> None:
        assert self._executor is not None
        self._executor.run(graph)

    def _objective(self) -> float:
        self._run(self._objective_graph)
        return self.record.total

    def evaluate(self) -> ObjectiveRecord:
        """
        Computes the objective at the current point of the parameter space
        :return: a copy of the objective record
        """
        if self._state not in (PlacerState.TASKS_BUILT, PlacerState.ITERATING, PlacerState.DONE):
            raise PlacerStateError(f"Cannot evaluate: the placer is {self._state.name}")
        self._objective()
        return self.record.copy()

    def optimize(self) -> int:
        """
        Runs the outer iterations until the stop condition holds
        :return: the number of iterations
        """
        self._advance(PlacerState.TASKS_BUILT, PlacerState.ITERATING)
        assert self._stop_condition is not None and self._update_step is not None
        schedule = PenaltySchedule(self.config.penalty_thresholds, self.config.penalty_growth,
                                   self.config.max_penalty_weight)
        builder = self.builder
        self._stop_condition.reset()
        while True:
            self._run(self._iteration_graph)
            current = builder.record.copy()
            self._history.append(current)
            logger.debug("Iteration %d: %s", self._opt_state.iteration, current)
            if builder.stop_check.result:
                break
            self._update_step.step(self.space, builder.gradient.vector, current.total, self._objective)
            self._opt_state.iteration += 1
            schedule.apply(current, self._weights)
        logger.info("Optimization finished after %d iterations: %s", self._opt_state.iteration, current)
        return self._opt_state.iteration

    def write_out(self) -> dict[str, Point]:
        """
        Writes the solution into the circuit. The coordinates are shifted so that
        the minimum is zero, converted to database units and rounded.
        :return: the location of every cell
        """
        self._advance(PlacerState.ITERATING, PlacerState.DONE)
        p, s = self.problem, self.space
        xs, ys = s.xs(), s.ys()
        min_x, min_y = float(xs.min()), float(ys.min())
        offset = self.circuit.parameters.layout_offset
        for i, cell in enumerate(self.circuit.cells):
            x = auto_round((float(xs[i]) - min_x) / p.scale + offset) - cell.origin.x
            y = auto_round((float(ys[i]) - min_y) / p.scale + offset) - cell.origin.y
            self.circuit.set_location(i, x, y)
        return {c.name: c.location for c in self.circuit.cells}

    def close(self) -> None:
        """Releases the threads of the executor (if owned by the placer)"""
        if self._own_executor and self._executor is not None:
            self._executor.shutdown()

    def solve(self) -> PlacementResult:
        """
        Runs all the stages of the placement
        :return: the result of the placement
        """
        try:
            self.build_problem()
            self.init_placement()
            self.build_operators()
            self.build_tasks()
            iterations = self.optimize()
            locations = self.write_out()
        finally:
            self.close()
        return PlacementResult(iterations=iterations, record=self._history[-1].copy(),
                               history=self._history, locations=locations)
