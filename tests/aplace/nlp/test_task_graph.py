# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

import threading
import unittest

import numpy as np

from aplace.circuit.circuit import Circuit
from aplace.nlp.config import PlacerConfig
from aplace.nlp.executor import Executor, ExecutionMode
from aplace.nlp.operators import Category
from aplace.nlp.placer import GlobalPlacer
from aplace.nlp.task_graph import TaskGraph
from aplace.nlp.tasks import Task, UpdateGradientTask, CalculatePartialTask

CIRCUIT = """
Cells:
  M1: {width: 4, height: 6, pins: {D: [1, 6], G: [0, 3], S: [1, 0]}}
  M2: {width: 4, height: 6, pins: {D: [3, 6], G: [4, 3], S: [3, 0]}}
  M3: {width: 2, height: 2, pins: {I: [0, 1], O: [2, 1]}}
  M4: {width: 3, height: 2, pins: {I: [0, 1], O: [3, 1]}}
Nets:
  n1: [M1.D, M3.I]
  n2: {pins: [M2.D, M3.O, M4.I], weight: 2}
  n3: [M1.S, M2.S]
  n4: [M4.O]
SymGroups:
  - {pairs: [[M1, M2]], self: [M3]}
  - {}
SignalPaths:
  - [M1.S, M3.I, M3.O, M4.I]
Parameters: {boundary: [0, 0, 20, 20]}
"""


def build_placer(execution: str = "sequential") -> GlobalPlacer:
    placer = GlobalPlacer(Circuit(CIRCUIT), PlacerConfig(execution=execution, max_iter=5))
    placer.build_problem()
    placer.init_placement()
    placer.build_operators()
    placer.build_tasks()
    return placer


class TestTaskGraph(unittest.TestCase):
    def setUp(self) -> None:
        self.placer = build_placer()

    def tearDown(self) -> None:
        self.placer.close()

    def test_operators(self):
        ops = self.placer.operators
        self.assertEqual(len(ops[Category.HPWL]), 4)
        self.assertEqual(len(ops[Category.OVERLAP]), 6)
        self.assertEqual(len(ops[Category.OUT_OF_BOUNDARY]), 4)
        self.assertEqual(len(ops[Category.ASYMMETRY]), 1)  # The empty group has no operator
        self.assertEqual(len(ops[Category.PATH_COSINE]), 1)

    def test_shared_axis(self):
        self.assertEqual(self.placer.space.size, 2 * 4 + 2)
        placer = GlobalPlacer(Circuit(CIRCUIT), PlacerConfig(shared_sym_axis=True, execution="sequential"))
        placer.build_problem()
        self.assertEqual(placer.space.size, 2 * 4 + 1)
        placer.init_placement()
        self.assertEqual(placer.space.axis(0), placer.problem.default_sym_axis)

    def test_objective_graph(self):
        g = self.placer.builder.build_objective_graph()
        num_ops = sum(len(v) for v in self.placer.operators.values())
        self.assertEqual(len(g), num_ops + len(Category) + 1)
        self.assertFalse(any(isinstance(t, (CalculatePartialTask, UpdateGradientTask)) for t in g))

    def test_iteration_graph(self):
        builder = self.placer.builder
        g = builder.build_iteration_graph()
        self.assertIn(builder.stop_check, g)
        for c in Category:
            updates = builder.category_tasks(c).update
            for prev, nxt in zip(updates, updates[1:]):
                self.assertIn(prev, g.predecessors(nxt))
        order = g.order
        for t in g:
            for s in g.successors(t):
                self.assertLess(order.index(t), order.index(s))
        sum_grad = [t for t in g if t.name == "sum_grad"][0]
        for c in Category:
            for u in builder.category_tasks(c).update:
                self.assertIn(u, g.predecessors(sum_grad))

    def test_unknown_predecessor(self):
        g = TaskGraph("test")
        self.assertRaises(AssertionError, g.add, RecordTask("a", []), [RecordTask("b", [])])

    def test_objective_is_sum_of_operators(self):
        record = self.placer.evaluate()
        expected = 0.0
        for c in Category:
            value = sum(op.evaluate() for op in self.placer.operators[c])
            self.assertAlmostEqual(record.get(c), value)
            expected += value
        self.assertAlmostEqual(record.total, expected)
        self.assertGreater(record.hpwl, 0.0)

    def test_gradient_linearity(self):
        builder = self.placer.builder
        Executor(ExecutionMode.SEQUENTIAL).run(builder.build_gradient_graph())
        expected = np.zeros(self.placer.space.size)
        for c in Category:
            expected += builder.category_gradients[c].vector
        np.testing.assert_array_equal(builder.gradient.vector, expected)

        # Gradient of one category: sum of the partials of its operators
        ops = self.placer.operators[Category.OVERLAP]
        manual = np.zeros(self.placer.space.size)
        for op in ops:
            for ref, v in op.compute_partials().items():
                manual[self.placer.space.ref_index(ref)] += v
        np.testing.assert_allclose(builder.category_gradients[Category.OVERLAP].vector, manual)

    def test_no_gradient_leakage(self):
        builder = self.placer.builder
        space = self.placer.space
        g = builder.build_gradient_graph()
        executor = Executor(ExecutionMode.SEQUENTIAL)
        executor.run(g)
        point_b = space.values + np.linspace(-1.0, 1.0, space.size)
        space.assign(point_b)
        executor.run(g)

        fresh = build_placer()
        fresh.space.assign(point_b)
        executor.run(fresh.builder.build_gradient_graph())
        np.testing.assert_array_equal(builder.gradient.vector, fresh.builder.gradient.vector)
        self.assertEqual(builder.record.total, fresh.builder.record.total)
        fresh.close()

    def test_parallel_equals_sequential(self):
        builder = self.placer.builder
        g = builder.build_gradient_graph()
        Executor(ExecutionMode.SEQUENTIAL).run(g)
        seq_grad, seq_total = builder.gradient.vector.copy(), builder.record.total
        with Executor(ExecutionMode.PARALLEL, 4) as executor:
            for _ in range(3):
                executor.run(g)
                np.testing.assert_array_equal(builder.gradient.vector, seq_grad)
                self.assertEqual(builder.record.total, seq_total)

    def test_solve_parallel_equals_sequential(self):
        seq = GlobalPlacer(Circuit(CIRCUIT), PlacerConfig(execution="sequential", max_iter=5)).solve()
        par = GlobalPlacer(Circuit(CIRCUIT), PlacerConfig(execution="parallel", max_iter=5)).solve()
        self.assertEqual([r.total for r in seq.history], [r.total for r in par.history])
        self.assertEqual(seq.locations, par.locations)


class RecordTask(Task):
    """Appends its name to a shared list"""
    lock = threading.Lock()

    def __init__(self, name: str, log: list[str]):
        self.name = name
        self.log = log

    def run(self) -> None:
        with self.lock:
            self.log.append(self.name)


class FailingTask(Task):
    name = "failing"

    def run(self) -> None:
        raise RuntimeError("task failed")


class TestExecutor(unittest.TestCase):
    def chain(self, log: list[str]) -> TaskGraph:
        g = TaskGraph("chain")
        a = g.add(RecordTask("a", log))
        b = g.add(RecordTask("b", log), after=[a])
        c = g.add(RecordTask("c", log), after=[a])
        g.add(RecordTask("d", log), after=[b, c])
        return g

    def test_order(self):
        for mode in ExecutionMode:
            log: list[str] = []
            with Executor(mode, 2) as executor:
                executor.run(self.chain(log))
            self.assertEqual(len(log), 4)
            self.assertEqual(log[0], "a")
            self.assertEqual(log[-1], "d")

    def test_reuse(self):
        log: list[str] = []
        g = self.chain(log)
        with Executor(ExecutionMode.PARALLEL, 2) as executor:
            executor.run(g)
            executor.run(g)
        self.assertEqual(len(log), 8)

    def test_exception(self):
        for mode in ExecutionMode:
            log: list[str] = []
            g = TaskGraph("failing")
            f = g.add(FailingTask())
            g.add(RecordTask("after", log), after=[f])
            with Executor(mode) as executor:
                self.assertRaises(RuntimeError, executor.run, g)
            self.assertEqual(log, [])


if __name__ == "__main__":
    unittest.main()
