# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

import time
import unittest

from aplace.nlp.stop_condition import OptimizationState, StopAfterNumIterations, StopOnConvergence, \
    StopAfterTime, AnyStopCondition


class TestStopConditions(unittest.TestCase):
    def test_num_iterations(self):
        cond = StopAfterNumIterations(3)
        self.assertFalse(cond.should_stop(OptimizationState(iteration=2)))
        self.assertTrue(cond.should_stop(OptimizationState(iteration=3)))
        self.assertTrue(StopAfterNumIterations(0).should_stop(OptimizationState()))
        self.assertRaises(AssertionError, StopAfterNumIterations, -1)

    def test_convergence(self):
        cond = StopOnConvergence(1e-6)
        self.assertFalse(cond.should_stop(OptimizationState(iteration=0, objectives=[10.0])))
        self.assertFalse(cond.should_stop(OptimizationState(iteration=1, objectives=[10.0, 5.0])))
        self.assertTrue(cond.should_stop(OptimizationState(iteration=1, objectives=[10.0, 10.0000001])))
        cond = StopOnConvergence(1e-6, min_iterations=5)
        self.assertFalse(cond.should_stop(OptimizationState(iteration=2, objectives=[10.0, 10.0, 10.0])))

    def test_time(self):
        self.assertFalse(StopAfterTime(3600).should_stop(OptimizationState()))
        cond = StopAfterTime(0.001)
        time.sleep(0.01)
        self.assertTrue(cond.should_stop(OptimizationState()))
        cond.reset()
        cond.seconds = 3600
        self.assertFalse(cond.should_stop(OptimizationState()))

    def test_any(self):
        cond = AnyStopCondition(StopAfterNumIterations(10), StopOnConvergence(1e-3))
        self.assertFalse(cond.should_stop(OptimizationState(iteration=3, objectives=[4.0, 2.0])))
        self.assertTrue(cond.should_stop(OptimizationState(iteration=3, objectives=[2.0, 2.0])))
        self.assertTrue(cond.should_stop(OptimizationState(iteration=10, objectives=[4.0, 2.0])))

    def test_last_objective(self):
        self.assertIsNone(OptimizationState().last_objective)
        self.assertEqual(OptimizationState(objectives=[3.0, 1.0]).last_objective, 1.0)


if __name__ == "__main__":
    unittest.main()
