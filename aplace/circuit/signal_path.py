# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Decomposition of the critical signal paths into segments of three cells.

A signal path is an ordered list of pins. Two consecutive pins on different cells
are connected by a wire, and two consecutive pins on the same cell represent
the signal traversing that cell. A segment is a wire into a cell followed by a
wire out of it: four pins on three cells (start, middle, end).
"""

from dataclasses import dataclass

from aplace.circuit.circuit import Circuit


@dataclass(frozen=True)
class SigPathSeg:
    """A decomposed segment: four pins on three cells"""
    begin_first: int  # Starting pin of the first wire (start cell)
    end_first: int  # Ending pin of the first wire (middle cell)
    begin_second: int  # Starting pin of the second wire (middle cell)
    end_second: int  # Ending pin of the second wire (end cell)

    @property
    def pins(self) -> tuple[int, int, int, int]:
        return self.begin_first, self.end_first, self.begin_second, self.end_second


def decompose_path(circuit: Circuit, path: list[int]) -> list[SigPathSeg]:
    """
    Decomposes one signal path into segments
    :param circuit: the circuit
    :param path: the list of pin indices of the path
    :return: the segments found in the path
    """
    cells = [circuit.pin(p).cell for p in path]
    segs = list[SigPathSeg]()
    for i in range(len(path) - 3):
        s, ma, mb, t = cells[i:i + 4]
        if ma == mb and s != ma and t != mb and s != t:
            segs.append(SigPathSeg(path[i], path[i + 1], path[i + 2], path[i + 3]))
    return segs


def decompose_signal_paths(circuit: Circuit) -> list[SigPathSeg]:
    """
    Decomposes all the signal paths of the circuit into segments
    :param circuit: the circuit
    :return: the list of segments (in the order of the paths)
    """
    return [seg for path in circuit.signal_paths for seg in decompose_path(circuit, path)]
