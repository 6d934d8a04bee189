# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Construction of the dependency graphs of the optimization kernel.

The graphs are built once per problem and executed at every outer iteration:

  evaluate(op) ──> sum_obj(category) ──> sum_obj_all ──> check_stop_condition
  clear_grad(category) ──┐
  calc_partial(op) ──────┴──> update(op) ──> update(next op of the category) ... ──> sum_grad
  clear_grad(all) ───────────────────────────────────────────────────────────────> sum_grad

The update tasks of a category are chained, so the accumulator of the category
has a single writer at any time.
"""

from typing import Iterable, Iterator

import networkx as nx

from aplace.nlp.operators import Category, Operator
from aplace.nlp.parameter_space import ParameterSpace
from aplace.nlp.stop_condition import OptimizationState, StopCondition
from aplace.nlp.tasks import Task, EvaluateTask, CategorySumTask, TotalObjectiveTask, CalculatePartialTask, \
    ClearGradientTask, UpdateGradientTask, SumGradientTask, StopCheckTask, ObjectiveRecord, GradientAccumulator, \
    CategoryTasks


class TaskGraph:
    """
    A directed acyclic graph of tasks
    """

    _graph: nx.DiGraph
    _order: list[Task] | None  # Topological order (computed on demand)

    def __init__(self, name: str = ""):
        self.name = name
        self._graph = nx.DiGraph()
        self._order = None

    def add(self, task: Task, after: Iterable[Task] = ()) -> Task:
        """
        Adds a task that can only start when the tasks in after have finished
        :param task: the task
        :param after: the predecessors of the task (already in the graph)
        :return: the task
        """
        self._graph.add_node(task)
        for p in after:
            assert p in self._graph, f"Unknown predecessor {p} of {task}"
            self._graph.add_edge(p, task)
        self._order = None
        return task

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, task: Task) -> bool:
        return task in self._graph

    def __iter__(self) -> Iterator[Task]:
        return iter(self._graph.nodes)

    @property
    def num_edges(self) -> int:
        return self._graph.number_of_edges()

    def predecessors(self, task: Task) -> list[Task]:
        return list(self._graph.predecessors(task))

    def successors(self, task: Task) -> list[Task]:
        return list(self._graph.successors(task))

    def in_degree(self, task: Task) -> int:
        return self._graph.in_degree(task)

    @property
    def order(self) -> list[Task]:
        """A fixed topological order of the tasks"""
        if self._order is None:
            assert nx.is_directed_acyclic_graph(self._graph), f"Task graph {self.name} has cycles"
            self._order = list(nx.topological_sort(self._graph))
        return self._order


class TaskGraphBuilder:
    """
    Creates the tasks for a set of operators and assembles them into graphs.
    The builder owns the objective record and the gradient accumulators written by the tasks.
    """

    record: ObjectiveRecord  # Objective computed by the graphs
    gradient: GradientAccumulator  # Combined gradient
    category_gradients: dict[Category, GradientAccumulator]  # Gradient of each category

    def __init__(self, operators: dict[Category, list[Operator]], space: ParameterSpace,
                 stop_condition: StopCondition, state: OptimizationState):
        """
        Constructor
        :param operators: the operators of each category
        :param space: the parameter space (provides the index-mapping function)
        :param stop_condition: the condition evaluated by the stop-check task
        :param state: the optimization state observed by the stop condition
        """
        self.record = ObjectiveRecord()
        self.gradient = GradientAccumulator(space.size, "all")
        self.category_gradients = {c: GradientAccumulator(space.size, c.value) for c in Category}

        self._tasks = {c: CategoryTasks(c) for c in Category}
        for c in Category:
            ct = self._tasks[c]
            for k, op in enumerate(operators.get(c, [])):
                ct.evaluate.append(EvaluateTask(op, f"eva_{c.value}_{k}"))
                calc = CalculatePartialTask(op, f"calc_{c.value}_{k}")
                ct.calculate.append(calc)
                ct.update.append(UpdateGradientTask(calc, self.category_gradients[c], space.ref_index))

        self._sum_obj = {c: CategorySumTask(c, self._tasks[c].evaluate, self.record) for c in Category}
        self._sum_obj_all = TotalObjectiveTask(self.record)
        self._clear_grad = {c: ClearGradientTask(self.category_gradients[c]) for c in Category}
        self._clear_grad_all = ClearGradientTask(self.gradient)
        self._sum_grad = SumGradientTask([self.category_gradients[c] for c in Category], self.gradient)
        self.stop_check = StopCheckTask(stop_condition, state, self.record)

    def category_tasks(self, category: Category) -> CategoryTasks:
        return self._tasks[category]

    def _add_objective_tasks(self, g: TaskGraph) -> None:
        for c in Category:
            for t in self._tasks[c].evaluate:
                g.add(t)
            g.add(self._sum_obj[c], after=self._tasks[c].evaluate)
        g.add(self._sum_obj_all, after=self._sum_obj.values())

    def _add_gradient_tasks(self, g: TaskGraph) -> None:
        g.add(self._clear_grad_all)
        all_updates = list[Task]()
        for c in Category:
            clear = g.add(self._clear_grad[c])
            previous: Task | None = None
            for calc, update in zip(self._tasks[c].calculate, self._tasks[c].update):
                g.add(calc)
                after = [calc, clear] if previous is None else [calc, clear, previous]
                previous = g.add(update, after=after)
            all_updates.extend(self._tasks[c].update)
            if previous is None:  # No operators in the category: the sum must still wait for the clear
                all_updates.append(clear)
        g.add(self._sum_grad, after=all_updates + [self._clear_grad_all])

    def build_objective_graph(self) -> TaskGraph:
        """Graph that only computes the objective"""
        g = TaskGraph("objective")
        self._add_objective_tasks(g)
        return g

    def build_gradient_graph(self) -> TaskGraph:
        """Graph that computes the objective and the gradient (no stop check)"""
        g = TaskGraph("gradient")
        self._add_objective_tasks(g)
        self._add_gradient_tasks(g)
        return g

    def build_iteration_graph(self) -> TaskGraph:
        """Graph executed at every outer iteration: objective, gradient and stop check"""
        g = TaskGraph("iteration")
        self._add_objective_tasks(g)
        self._add_gradient_tasks(g)
        g.add(self.stop_check, after=[self._sum_obj_all])
        return g
