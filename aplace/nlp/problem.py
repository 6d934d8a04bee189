# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
The placement problem: a validated snapshot of the circuit in optimizer units.

The circuit is scaled so that the total area of the cells is 100 (unless the
circuit defines its own scale). All the validation of the inputs is done here,
before any operator or task is created.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from aplace.circuit.circuit import Circuit
from aplace.circuit.circuit_types import Net, SymGroup
from aplace.circuit.signal_path import SigPathSeg, decompose_signal_paths
from aplace.geometry.geometry import Point, Box
from aplace.nlp.config import PlacerConfig
from aplace.nlp.errors import ProblemError

logger = logging.getLogger(__name__)

# Scaled total cell area
NORMALIZED_CELL_AREA = 100.0
# Aspect ratio (width/height) of the automatic boundary
DEFAULT_ASPECT_RATIO = 0.85


@dataclass
class PlacementProblem:
    """Everything the operators need, in optimizer units"""
    circuit: Circuit
    alpha: float  # Smoothing parameter
    scale: float  # Optimizer units per database unit
    boundary: Box  # Placement boundary (optimizer units)
    widths: list[float]  # Scaled widths of the cells
    heights: list[float]  # Scaled heights of the cells
    pin_offsets: list[Point]  # Scaled offset of each pin from the lower-left corner of its cell
    segments: list[SigPathSeg]  # Signal path segments
    total_cell_area: float  # Scaled total area of the cells
    default_sym_axis: float  # Initial value of the symmetry axes

    @property
    def num_cells(self) -> int:
        return len(self.widths)

    @property
    def nets(self) -> list[Net]:
        return self.circuit.nets

    @property
    def sym_groups(self) -> list[SymGroup]:
        return self.circuit.sym_groups

    def pin_cell(self, pin: int) -> int:
        return self.circuit.pin(pin).cell

    @staticmethod
    def from_circuit(circuit: Circuit, config: PlacerConfig,
                     segments: Optional[list[SigPathSeg]] = None) -> 'PlacementProblem':
        """
        Validates the circuit and the configuration and builds the problem
        :param circuit: the circuit
        :param config: the configuration of the placer
        :param segments: signal path segments (decomposed from the circuit if None)
        :return: the problem
        """
        config.validate()
        validate_circuit(circuit)
        if segments is None:
            segments = decompose_signal_paths(circuit)
        validate_segments(circuit, segments)

        params = circuit.parameters
        area = circuit.total_cell_area
        scale = params.scale if params.scale is not None else math.sqrt(NORMALIZED_CELL_AREA / area)

        if params.boundary is not None:
            boundary = params.boundary.scaled(scale)
        else:
            boundary = automatic_boundary(scale * scale * area, params.max_white_space)
            logger.info("Automatic boundary: %s", boundary)

        offsets = list[Point]()
        for pin in circuit.pins:
            cell = circuit.cell(pin.cell)
            offsets.append((pin.location - cell.origin) * scale)

        return PlacementProblem(circuit=circuit, alpha=config.alpha, scale=scale, boundary=boundary,
                                widths=[c.width * scale for c in circuit.cells],
                                heights=[c.height * scale for c in circuit.cells],
                                pin_offsets=offsets, segments=segments,
                                total_cell_area=sum(c.area for c in circuit.cells) * scale * scale,
                                default_sym_axis=(boundary.xlo + boundary.xhi) / 2)


def automatic_boundary(cell_area: float, max_white_space: float) -> Box:
    """
    Boundary with lower-left corner at the origin, fixed aspect ratio and an area
    that tolerates some white space
    :param cell_area: total area of the cells
    :param max_white_space: white space ratio
    :return: the boundary
    """
    area = cell_area * (1 + max_white_space)
    xhi = math.sqrt(area * DEFAULT_ASPECT_RATIO)
    return Box(0.0, 0.0, xhi, area / xhi)


def validate_circuit(circuit: Circuit) -> None:
    """
    Checks that the circuit defines a valid placement problem
    :param circuit: the circuit
    """
    n = circuit.num_cells
    if n == 0:
        raise ProblemError("circuit", None, "no cells to place")
    for i, c in enumerate(circuit.cells):
        if not (c.width > 0 and c.height > 0):
            raise ProblemError("cell", i, f"{c.name} must have a positive width and height "
                                          f"(got {c.width}x{c.height})")
    for i, p in enumerate(circuit.pins):
        if not 0 <= p.cell < n:
            raise ProblemError("pin", i, f"invalid cell index {p.cell}")
    for i, net in enumerate(circuit.nets):
        if not net.weight >= 0:
            raise ProblemError("net", i, f"{net.name} has a negative weight {net.weight}")
        for p in net.pins:
            if not 0 <= p < circuit.num_pins:
                raise ProblemError("net", i, f"{net.name} has an invalid pin index {p}")
    for i, g in enumerate(circuit.sym_groups):
        for a, b in g.pairs:
            if not (0 <= a < n and 0 <= b < n):
                raise ProblemError("symmetry group", i, f"invalid cell index in pair ({a}, {b})")
            if a == b:
                raise ProblemError("symmetry group", i, f"cell {a} cannot be symmetric to itself in a pair")
        for c in g.self_syms:
            if not 0 <= c < n:
                raise ProblemError("symmetry group", i, f"invalid self-symmetric cell index {c}")
    params = circuit.parameters
    if params.boundary is not None and not params.boundary.is_valid:
        raise ProblemError("boundary", None, f"empty or inverted box {params.boundary}")
    if params.scale is not None and not params.scale > 0:
        raise ProblemError("parameters", "scale", "the scale must be positive")
    if params.max_white_space < 0:
        raise ProblemError("parameters", "max_white_space", "the white space cannot be negative")


def validate_segments(circuit: Circuit, segments: list[SigPathSeg]) -> None:
    """
    Checks that the signal path segments reference valid pins and that
    both middle pins belong to the same cell
    :param circuit: the circuit
    :param segments: the segments
    """
    for i, seg in enumerate(segments):
        if not all(0 <= p < circuit.num_pins for p in seg.pins):
            raise ProblemError("signal path segment", i, f"invalid pin index in {seg.pins}")
        if circuit.pin(seg.end_first).cell != circuit.pin(seg.begin_second).cell:
            raise ProblemError("signal path segment", i, "the middle pins belong to different cells")
