# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

import unittest

import numpy as np

from aplace.nlp.parameter_space import ParameterSpace, Orient, VarRef


class TestParameterSpace(unittest.TestCase):
    def setUp(self) -> None:
        self.space = ParameterSpace(3, 2)

    def test_layout(self):
        s = self.space
        self.assertEqual(s.size, 8)
        self.assertEqual(s.x_range, range(0, 3))
        self.assertEqual(s.y_range, range(3, 6))
        self.assertEqual(s.sym_range, range(6, 8))
        self.assertEqual(s.index(2, Orient.HORIZONTAL), 2)
        self.assertEqual(s.index(0, Orient.VERTICAL), 3)
        self.assertEqual(s.index(1, Orient.SYM), 7)
        self.assertEqual(s.ref_index(VarRef(1, Orient.VERTICAL)), 4)

    def test_get_set(self):
        s = self.space
        s.set_x(1, 2.5)
        s.set_y(1, -1.0)
        s.set_axis(0, 4.0)
        s.set_value(VarRef(2, Orient.HORIZONTAL), 7.0)
        self.assertEqual(s.x(1), 2.5)
        self.assertEqual(s.y(1), -1.0)
        self.assertEqual(s.axis(0), 4.0)
        self.assertEqual(s.value(VarRef(2, Orient.HORIZONTAL)), 7.0)
        np.testing.assert_array_equal(s.xs(), [0.0, 2.5, 7.0])
        np.testing.assert_array_equal(s.ys(), [0.0, -1.0, 0.0])

    def test_out_of_range(self):
        s = self.space
        self.assertRaises(AssertionError, s.index, 3, Orient.HORIZONTAL)
        self.assertRaises(AssertionError, s.index, -1, Orient.VERTICAL)
        self.assertRaises(AssertionError, s.index, 2, Orient.SYM)

    def test_read_only_values(self):
        s = self.space
        with self.assertRaises(ValueError):
            s.values[0] = 1.0
        xs = s.xs()
        xs[0] = 10.0
        self.assertEqual(s.x(0), 0.0)

    def test_assign(self):
        s = self.space
        v = np.arange(8, dtype=float)
        s.assign(v)
        self.assertEqual(s.y(0), 3.0)
        self.assertEqual(s.axis(1), 7.0)
        self.assertRaises(AssertionError, s.assign, np.zeros(5))

    def test_shared_axis(self):
        s = ParameterSpace(3, 2, shared_axis=True)
        self.assertEqual(s.size, 7)
        self.assertEqual(s.index(0, Orient.SYM), s.index(1, Orient.SYM))
        s.set_axis(1, 3.0)
        self.assertEqual(s.axis(0), 3.0)

    def test_no_groups(self):
        s = ParameterSpace(2, 0)
        self.assertEqual(s.size, 4)
        self.assertEqual(len(s.sym_range), 0)


if __name__ == "__main__":
    unittest.main()
