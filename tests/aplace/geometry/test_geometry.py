# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

import unittest

from aplace.geometry.geometry import Point, Box, parse_yaml_box
from aplace.utils.utils import auto_round, is_number, valid_identifier


class TestPoint(unittest.TestCase):
    def test_operators(self):
        p, q = Point(1, 2), Point(3, -1)
        self.assertEqual(p + q, Point(4, 1))
        self.assertEqual(p - q, Point(-2, 3))
        self.assertEqual(p * 2, Point(2, 4))
        self.assertEqual(2 * p, Point(2, 4))
        self.assertEqual(q / 2, Point(1.5, -0.5))
        self.assertEqual(p & q, 1)


class TestBox(unittest.TestCase):
    def test_box(self):
        b = Box(1, 2, 5, 10)
        self.assertEqual((b.width, b.height, b.area), (4, 8, 32))
        self.assertEqual(b.center, Point(3, 6))
        self.assertTrue(b.is_valid)
        self.assertFalse(Box(0, 0, 0, 5).is_valid)
        self.assertEqual(b.scaled(0.5), Box(0.5, 1, 2.5, 5))

    def test_parse(self):
        self.assertEqual(parse_yaml_box([0, 0, 10, 20]), Box(0, 0, 10, 20))
        self.assertRaises(AssertionError, parse_yaml_box, [0, 0, 10])
        self.assertRaises(AssertionError, parse_yaml_box, [0, 0, "a", 1])


class TestUtils(unittest.TestCase):
    def test_auto_round(self):
        self.assertEqual(auto_round(2.5), 3)
        self.assertEqual(auto_round(-2.5), -3)
        self.assertEqual(auto_round(2.4999), 2)
        self.assertEqual(auto_round(0.5), 1)

    def test_numbers_and_identifiers(self):
        self.assertTrue(is_number(3) and is_number(2.5))
        self.assertFalse(is_number(True))
        self.assertFalse(is_number("3"))
        self.assertTrue(valid_identifier("M1_a"))
        self.assertFalse(valid_identifier("1M"))


if __name__ == "__main__":
    unittest.main()
