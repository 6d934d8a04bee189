# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
The differentiable operators of the placement objective.

Every operator reads a fixed subset of the parameter space and computes a scalar
contribution to the objective (evaluate) and its partial derivatives
(compute_partials). The coordinates in the parameter space are the lower-left
corners of the cells; pin offsets are relative to that corner. Each contribution
is multiplied by the weight of its category, read from a PenaltyWeights object
at evaluation time.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

import numpy as np

from aplace.geometry.geometry import Point, Box
from aplace.nlp.parameter_space import ParameterSpace, Orient, VarRef
from aplace.nlp.smoothing import lse_wirelength, smooth_hinge, smooth_hinge_derivative, smooth_abs, \
    smooth_abs_derivative

Partials = dict[VarRef, float]

# Added to the squared norms of the path vectors
COS_EPSILON = 1e-9


class Category(Enum):
    """Categories of operators (one term of the objective each)"""
    HPWL = "hpwl"
    OVERLAP = "overlap"
    OUT_OF_BOUNDARY = "out_of_boundary"
    ASYMMETRY = "asymmetry"
    PATH_COSINE = "path_cosine"


@dataclass
class PenaltyWeights:
    """Multipliers of the terms of the objective"""
    hpwl: float = 1.0
    overlap: float = 1.0
    out_of_boundary: float = 1.0
    asymmetry: float = 1.0
    path_cosine: float = 1.0

    def get(self, category: Category) -> float:
        return getattr(self, category.value)

    def set(self, category: Category, value: float) -> None:
        setattr(self, category.value, value)


def _accumulate(partials: Partials, ref: VarRef, v: float) -> None:
    """Adds v to the partial of ref (a variable may appear several times in an operator)"""
    partials[ref] = partials.get(ref, 0.0) + v


class Operator(ABC):
    """
    Base class of the differentiable operators
    """
    category: ClassVar[Category]

    _space: ParameterSpace  # Variables (read only)
    _weights: PenaltyWeights  # Weights of the categories

    def __init__(self, space: ParameterSpace, weights: PenaltyWeights):
        self._space = space
        self._weights = weights

    @property
    def penalty_weight(self) -> float:
        """Current weight of the category of the operator"""
        return self._weights.get(self.category)

    @property
    @abstractmethod
    def variables(self) -> list[VarRef]:
        """Variables read by the operator"""

    @abstractmethod
    def evaluate(self) -> float:
        """Value of the operator at the current point of the parameter space"""

    @abstractmethod
    def compute_partials(self) -> Partials:
        """Partial derivatives of the operator at the current point of the parameter space"""


class HpwlOperator(Operator):
    """
    Log-sum-exp smoothed half-perimeter wirelength of a net
    """
    category = Category.HPWL

    _alpha: float  # Smoothing parameter
    _weight: float  # Weight of the net
    _cells: list[int]  # Cell of each pin
    _offsets: list[Point]  # Offset of each pin from the lower-left corner of its cell

    def __init__(self, space: ParameterSpace, weights: PenaltyWeights, alpha: float, weight: float = 1.0):
        super().__init__(space, weights)
        self._alpha = alpha
        self._weight = weight
        self._cells = []
        self._offsets = []

    def add_pin(self, cell: int, offset: Point) -> None:
        self._cells.append(cell)
        self._offsets.append(offset)

    @property
    def num_pins(self) -> int:
        return len(self._cells)

    @property
    def variables(self) -> list[VarRef]:
        return [VarRef(c, o) for o in (Orient.HORIZONTAL, Orient.VERTICAL) for c in dict.fromkeys(self._cells)]

    def _pin_coordinates(self) -> tuple[np.ndarray, np.ndarray]:
        s = self._space
        xs = np.array([s.x(c) + o.x for c, o in zip(self._cells, self._offsets)])
        ys = np.array([s.y(c) + o.y for c, o in zip(self._cells, self._offsets)])
        return xs, ys

    def evaluate(self) -> float:
        if self.num_pins < 2 or self._weight == 0:
            return 0.0
        xs, ys = self._pin_coordinates()
        wl_x, _ = lse_wirelength(xs, self._alpha)
        wl_y, _ = lse_wirelength(ys, self._alpha)
        return self.penalty_weight * self._weight * (wl_x + wl_y)

    def compute_partials(self) -> Partials:
        partials: Partials = {}
        if self.num_pins < 2 or self._weight == 0:
            return partials
        xs, ys = self._pin_coordinates()
        _, gx = lse_wirelength(xs, self._alpha)
        _, gy = lse_wirelength(ys, self._alpha)
        f = self.penalty_weight * self._weight
        for c, dx, dy in zip(self._cells, gx, gy):
            _accumulate(partials, VarRef(c, Orient.HORIZONTAL), f * float(dx))
            _accumulate(partials, VarRef(c, Orient.VERTICAL), f * float(dy))
        return partials


class OverlapOperator(Operator):
    """
    Smoothed overlapping area of a pair of cells
    """
    category = Category.OVERLAP

    def __init__(self, space: ParameterSpace, weights: PenaltyWeights, alpha: float,
                 i: int, wi: float, hi: float, j: int, wj: float, hj: float):
        super().__init__(space, weights)
        self._delta = alpha
        self._i, self._wi, self._hi = i, wi, hi
        self._j, self._wj, self._hj = j, wj, hj

    @property
    def cells(self) -> tuple[int, int]:
        return self._i, self._j

    @property
    def variables(self) -> list[VarRef]:
        return [VarRef(self._i, Orient.HORIZONTAL), VarRef(self._j, Orient.HORIZONTAL),
                VarRef(self._i, Orient.VERTICAL), VarRef(self._j, Orient.VERTICAL)]

    def _distances(self) -> tuple[float, float]:
        """Distances between the centers of the cells (i minus j)"""
        s = self._space
        dx = (s.x(self._i) + self._wi / 2) - (s.x(self._j) + self._wj / 2)
        dy = (s.y(self._i) + self._hi / 2) - (s.y(self._j) + self._hj / 2)
        return dx, dy

    def evaluate(self) -> float:
        dx, dy = self._distances()
        ox = (self._wi + self._wj) / 2 - smooth_abs(dx)
        oy = (self._hi + self._hj) / 2 - smooth_abs(dy)
        return self.penalty_weight * smooth_hinge(ox, self._delta) * smooth_hinge(oy, self._delta)

    def compute_partials(self) -> Partials:
        dx, dy = self._distances()
        ox = (self._wi + self._wj) / 2 - smooth_abs(dx)
        oy = (self._hi + self._hj) / 2 - smooth_abs(dy)
        lam = self.penalty_weight
        # d(ox)/d(dx) = -|dx|'
        gx = -lam * smooth_hinge_derivative(ox, self._delta) * smooth_hinge(oy, self._delta) * smooth_abs_derivative(dx)
        gy = -lam * smooth_hinge(ox, self._delta) * smooth_hinge_derivative(oy, self._delta) * smooth_abs_derivative(dy)
        return {VarRef(self._i, Orient.HORIZONTAL): gx, VarRef(self._j, Orient.HORIZONTAL): -gx,
                VarRef(self._i, Orient.VERTICAL): gy, VarRef(self._j, Orient.VERTICAL): -gy}


class OutOfBoundaryOperator(Operator):
    """
    Smoothed protrusion of a cell out of the placement boundary
    """
    category = Category.OUT_OF_BOUNDARY

    def __init__(self, space: ParameterSpace, weights: PenaltyWeights, alpha: float,
                 cell: int, width: float, height: float, boundary: Box):
        super().__init__(space, weights)
        self._delta = alpha
        self._cell, self._w, self._h = cell, width, height
        self._boundary = boundary

    @property
    def variables(self) -> list[VarRef]:
        return [VarRef(self._cell, Orient.HORIZONTAL), VarRef(self._cell, Orient.VERTICAL)]

    def _protrusions(self) -> tuple[float, float, float, float]:
        """Distances by which the left, right, bottom and top edges are out of the boundary"""
        x, y, b = self._space.x(self._cell), self._space.y(self._cell), self._boundary
        return b.xlo - x, x + self._w - b.xhi, b.ylo - y, y + self._h - b.yhi

    def evaluate(self) -> float:
        return self.penalty_weight * sum(smooth_hinge(p, self._delta) for p in self._protrusions())

    def compute_partials(self) -> Partials:
        left, right, bottom, top = self._protrusions()
        lam, d = self.penalty_weight, self._delta
        gx = lam * (smooth_hinge_derivative(right, d) - smooth_hinge_derivative(left, d))
        gy = lam * (smooth_hinge_derivative(top, d) - smooth_hinge_derivative(bottom, d))
        return {VarRef(self._cell, Orient.HORIZONTAL): gx, VarRef(self._cell, Orient.VERTICAL): gy}


class AsymmetryOperator(Operator):
    """
    Squared violation of the mirror symmetry of a group about its vertical axis
    """
    category = Category.ASYMMETRY

    _group: int  # Index of the symmetry group (axis variable)
    _pairs: list[tuple[int, float, int, float]]  # (cell i, width i, cell j, width j)
    _self_syms: list[tuple[int, float]]  # (cell, width)

    def __init__(self, space: ParameterSpace, weights: PenaltyWeights, group: int):
        super().__init__(space, weights)
        self._group = group
        self._pairs = []
        self._self_syms = []

    def add_sym_pair(self, i: int, wi: float, j: int, wj: float) -> None:
        self._pairs.append((i, wi, j, wj))

    def add_self_sym(self, cell: int, width: float) -> None:
        self._self_syms.append((cell, width))

    @property
    def variables(self) -> list[VarRef]:
        refs = [VarRef(self._group, Orient.SYM)]
        for i, _, j, _ in self._pairs:
            refs += [VarRef(i, Orient.HORIZONTAL), VarRef(j, Orient.HORIZONTAL),
                     VarRef(i, Orient.VERTICAL), VarRef(j, Orient.VERTICAL)]
        refs += [VarRef(c, Orient.HORIZONTAL) for c, _ in self._self_syms]
        return list(dict.fromkeys(refs))

    def _pair_errors(self, axis: float) -> list[tuple[float, float]]:
        s = self._space
        return [(s.x(i) + wi / 2 + s.x(j) + wj / 2 - 2 * axis, s.y(i) - s.y(j)) for i, wi, j, wj in self._pairs]

    def _self_errors(self, axis: float) -> list[float]:
        return [self._space.x(c) + w / 2 - axis for c, w in self._self_syms]

    def evaluate(self) -> float:
        axis = self._space.axis(self._group)
        total = sum(ex * ex + ey * ey for ex, ey in self._pair_errors(axis))
        total += sum(e * e for e in self._self_errors(axis))
        return self.penalty_weight * total

    def compute_partials(self) -> Partials:
        partials: Partials = {}
        axis = self._space.axis(self._group)
        lam = self.penalty_weight
        axis_ref = VarRef(self._group, Orient.SYM)
        for (i, _, j, _), (ex, ey) in zip(self._pairs, self._pair_errors(axis)):
            _accumulate(partials, VarRef(i, Orient.HORIZONTAL), 2 * lam * ex)
            _accumulate(partials, VarRef(j, Orient.HORIZONTAL), 2 * lam * ex)
            _accumulate(partials, axis_ref, -4 * lam * ex)
            _accumulate(partials, VarRef(i, Orient.VERTICAL), 2 * lam * ey)
            _accumulate(partials, VarRef(j, Orient.VERTICAL), -2 * lam * ey)
        for (c, _), e in zip(self._self_syms, self._self_errors(axis)):
            _accumulate(partials, VarRef(c, Orient.HORIZONTAL), 2 * lam * e)
            _accumulate(partials, axis_ref, -2 * lam * e)
        return partials


class PathCosineOperator(Operator):
    """
    Bending of a signal path segment: 1 - cos(angle between the two wires).
    The first wire goes from the start pin to the first pin of the middle cell,
    the second one from the second pin of the middle cell to the end pin.
    """
    category = Category.PATH_COSINE

    def __init__(self, space: ParameterSpace, weights: PenaltyWeights,
                 start: int, start_offset: Point,
                 mid: int, mid_offset_a: Point, mid_offset_b: Point,
                 end: int, end_offset: Point):
        super().__init__(space, weights)
        self._start, self._start_offset = start, start_offset
        self._mid, self._mid_offset_a, self._mid_offset_b = mid, mid_offset_a, mid_offset_b
        self._end, self._end_offset = end, end_offset

    @property
    def variables(self) -> list[VarRef]:
        return [VarRef(c, o) for o in (Orient.HORIZONTAL, Orient.VERTICAL)
                for c in dict.fromkeys([self._start, self._mid, self._end])]

    def _pos(self, cell: int, offset: Point) -> Point:
        return Point(self._space.x(cell) + offset.x, self._space.y(cell) + offset.y)

    def _vectors(self) -> tuple[Point, Point]:
        v1 = self._pos(self._mid, self._mid_offset_a) - self._pos(self._start, self._start_offset)
        v2 = self._pos(self._end, self._end_offset) - self._pos(self._mid, self._mid_offset_b)
        return v1, v2

    def evaluate(self) -> float:
        v1, v2 = self._vectors()
        n1 = math.sqrt((v1 & v1) + COS_EPSILON)
        n2 = math.sqrt((v2 & v2) + COS_EPSILON)
        return self.penalty_weight * (1.0 - (v1 & v2) / (n1 * n2))

    def compute_partials(self) -> Partials:
        v1, v2 = self._vectors()
        n1 = math.sqrt((v1 & v1) + COS_EPSILON)
        n2 = math.sqrt((v2 & v2) + COS_EPSILON)
        dot = v1 & v2
        # Gradients of cos with respect to v1 and v2
        g1 = v2 / (n1 * n2) - v1 * (dot / (n1 ** 3 * n2))
        g2 = v1 / (n1 * n2) - v2 * (dot / (n1 * n2 ** 3))
        lam = self.penalty_weight
        partials: Partials = {}
        for cell, gx, gy in [(self._start, g1.x, g1.y),
                             (self._mid, g2.x - g1.x, g2.y - g1.y),
                             (self._end, -g2.x, -g2.y)]:
            _accumulate(partials, VarRef(cell, Orient.HORIZONTAL), lam * gx)
            _accumulate(partials, VarRef(cell, Orient.VERTICAL), lam * gy)
        return partials
