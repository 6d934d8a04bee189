# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

import unittest

from aplace.circuit.circuit import Circuit
from aplace.circuit.signal_path import SigPathSeg, decompose_path, decompose_signal_paths

# Pin indices: A.I=0, A.O=1, B.I=2, B.O=3, C.I=4, C.O=5, D.I=6, D.O=7
CIRCUIT = """
Cells:
  A: {width: 2, height: 2, pins: {I: [0, 1], O: [2, 1]}}
  B: {width: 2, height: 2, pins: {I: [0, 1], O: [2, 1]}}
  C: {width: 2, height: 2, pins: {I: [0, 1], O: [2, 1]}}
  D: {width: 2, height: 2, pins: {I: [0, 1], O: [2, 1]}}
SignalPaths:
  - [A.O, B.I, B.O, C.I]
  - [A.O, B.I, B.O, C.I, C.O, D.I]
  - [A.O, B.I, B.O, A.I]
  - [A.O, B.I]
"""


class TestSignalPath(unittest.TestCase):
    def setUp(self) -> None:
        self.circuit = Circuit(CIRCUIT)

    def test_single_segment(self):
        segs = decompose_path(self.circuit, self.circuit.signal_paths[0])
        self.assertEqual(segs, [SigPathSeg(1, 2, 3, 4)])
        self.assertEqual(segs[0].pins, (1, 2, 3, 4))

    def test_two_segments(self):
        segs = decompose_path(self.circuit, self.circuit.signal_paths[1])
        self.assertEqual(segs, [SigPathSeg(1, 2, 3, 4), SigPathSeg(3, 4, 5, 6)])

    def test_same_start_and_end_cell(self):
        self.assertEqual(decompose_path(self.circuit, self.circuit.signal_paths[2]), [])

    def test_short_path(self):
        self.assertEqual(decompose_path(self.circuit, self.circuit.signal_paths[3]), [])

    def test_all_paths(self):
        segs = decompose_signal_paths(self.circuit)
        self.assertEqual(len(segs), 3)
        for s in segs:
            self.assertEqual(self.circuit.pin(s.end_first).cell, self.circuit.pin(s.begin_second).cell)


if __name__ == "__main__":
    unittest.main()
