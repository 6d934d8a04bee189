# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

import json
import unittest

from aplace.circuit.circuit import Circuit
from aplace.geometry.geometry import Point, Box

CIRCUIT = """
Cells:
  M1: {width: 10, height: 20, origin: [1, 2], location: [3, 4], pins: {D: [5, 20], S: [5, 0]}}
  M2: {width: 10, height: 20, pins: {D: [5, 20]}}
  M3: {width: 4, height: 4}
Nets:
  n1: [M1.D, M2.D]
  n2: {pins: [M1.S, M2.D], weight: 2}
SymGroups:
  - {pairs: [[M1, M2]], self: [M3]}
SignalPaths:
  - [M1.S, M2.D]
Parameters: {boundary: [0, 0, 100, 100], layout_offset: 5}
"""


class TestCircuit(unittest.TestCase):
    def setUp(self) -> None:
        self.circuit = Circuit(CIRCUIT)

    def test_counts(self):
        c = self.circuit
        self.assertEqual(c.num_cells, 3)
        self.assertEqual(c.num_pins, 3)
        self.assertEqual(c.num_nets, 2)
        self.assertEqual(c.num_sym_groups, 1)
        self.assertEqual(len(c.signal_paths), 1)

    def test_cells(self):
        c = self.circuit
        m1 = c.cell(c.cell_index("M1"))
        self.assertEqual(m1.origin, Point(1, 2))
        self.assertEqual(m1.location, Point(3, 4))
        self.assertIsNone(c.cell(1).location)
        self.assertEqual(c.cell(2).origin, Point(0, 0))
        self.assertEqual(m1.bbox, Box(1, 2, 11, 22))
        self.assertAlmostEqual(c.total_cell_area, 416)

    def test_pins_and_nets(self):
        c = self.circuit
        self.assertEqual([c.pin_name(i) for i in range(c.num_pins)], ["M1.D", "M1.S", "M2.D"])
        self.assertEqual(c.pin(2).cell, 1)
        self.assertEqual(c.pin(0).location, Point(5, 20))
        self.assertEqual(c.nets[0].pins, [0, 2])
        self.assertEqual(c.nets[0].weight, 1.0)
        self.assertEqual(c.nets[1].pins, [1, 2])
        self.assertEqual(c.nets[1].weight, 2.0)
        self.assertEqual(c.signal_paths[0], [1, 2])

    def test_sym_groups(self):
        g = self.circuit.sym_groups[0]
        self.assertEqual(g.pairs, [(0, 1)])
        self.assertEqual(g.self_syms, [2])
        self.assertFalse(g.is_empty)

    def test_parameters(self):
        p = self.circuit.parameters
        self.assertEqual(p.boundary, Box(0, 0, 100, 100))
        self.assertEqual(p.layout_offset, 5)
        self.assertEqual(p.max_white_space, 1.0)
        self.assertIsNone(p.scale)

    def test_locations(self):
        c = self.circuit
        c.set_location(1, 7, 8)
        locs = c.locations()
        self.assertEqual(locs["M2"], Point(7, 8))
        self.assertIsNone(locs["M3"])

    def test_write_read(self):
        c = self.circuit
        c.set_location(2, 50, 60)
        c2 = Circuit(c.write_yaml())
        self.assertEqual([x.name for x in c2.cells], ["M1", "M2", "M3"])
        self.assertEqual(c2.cell(0).origin, Point(1, 2))
        self.assertEqual(c2.cell(2).location, Point(50, 60))
        self.assertEqual([n.pins for n in c2.nets], [[0, 2], [1, 2]])
        self.assertEqual(c2.nets[1].weight, 2.0)
        self.assertEqual(c2.sym_groups[0].pairs, [(0, 1)])
        self.assertEqual(c2.signal_paths, [[1, 2]])
        self.assertEqual(c2.parameters.boundary, Box(0, 0, 100, 100))
        self.assertEqual(c2.parameters.layout_offset, 5)

    def test_write_json(self):
        data = json.loads(self.circuit.write_json())
        self.assertEqual(data["Cells"]["M1"], {"width": 10, "height": 20, "origin": [1, 2], "location": [3, 4],
                                               "pins": {"D": [5, 20], "S": [5, 0]}})
        self.assertEqual(data["Nets"]["n2"], {"pins": ["M1.S", "M2.D"], "weight": 2})
        self.assertEqual(data["SymGroups"], [{"pairs": [["M1", "M2"]], "self": ["M3"]}])


class TestMalformedCircuit(unittest.TestCase):
    def test_missing_height(self):
        self.assertRaises(AssertionError, Circuit, "Cells:\n  M1: {width: 10}\n")

    def test_unknown_key(self):
        self.assertRaises(AssertionError, Circuit, "Foo: 1\nCells: {}\n")

    def test_no_cells(self):
        self.assertRaises(AssertionError, Circuit, "Nets: {}\nParameters: {}\n")

    def test_unknown_pin(self):
        text = """
Cells:
  A: {width: 1, height: 1, pins: {P: [0, 0]}}
Nets:
  n: [A.X]
"""
        self.assertRaises(AssertionError, Circuit, text)

    def test_unknown_sym_cell(self):
        text = """
Cells:
  A: {width: 1, height: 1}
SymGroups:
  - {pairs: [[A, B]]}
"""
        self.assertRaises(AssertionError, Circuit, text)

    def test_bad_boundary(self):
        text = """
Cells:
  A: {width: 1, height: 1}
Parameters: {boundary: [0, 0, 10]}
"""
        self.assertRaises(AssertionError, Circuit, text)

    def test_bad_pin_location(self):
        text = """
Cells:
  A: {width: 1, height: 1, pins: {P: [0]}}
"""
        self.assertRaises(AssertionError, Circuit, text)


if __name__ == "__main__":
    unittest.main()
