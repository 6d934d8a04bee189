# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Policies to compute the starting point of the optimization
"""

import logging
from abc import ABC, abstractmethod

import numpy as np

from aplace.geometry.geometry import Point
from aplace.nlp.parameter_space import ParameterSpace
from aplace.nlp.problem import PlacementProblem

logger = logging.getLogger(__name__)


class InitialPlacement(ABC):
    """Writes the coordinates of the cells and the symmetry axes of the parameter space"""

    def place(self, space: ParameterSpace, problem: PlacementProblem) -> None:
        """
        Initializes all the variables of the parameter space
        :param space: the parameter space
        :param problem: the placement problem
        """
        self._place_cells(space, problem)
        for g in range(space.num_sym_groups):
            space.set_axis(g, problem.default_sym_axis)

    @abstractmethod
    def _place_cells(self, space: ParameterSpace, problem: PlacementProblem) -> None:
        ...


class NormalNearCenter(InitialPlacement):
    """
    The centers of the cells are drawn from a normal distribution around
    the center of the boundary
    """

    def __init__(self, seed: int = 6, sigma_ratio: float = 0.1):
        """
        Constructor
        :param seed: seed of the random generator
        :param sigma_ratio: standard deviation, as a ratio of the size of the boundary
        """
        self.seed = seed
        self.sigma_ratio = sigma_ratio

    def _place_cells(self, space: ParameterSpace, problem: PlacementProblem) -> None:
        rng = np.random.default_rng(self.seed)
        b = problem.boundary
        center = b.center
        n = problem.num_cells
        cx = rng.normal(center.x, self.sigma_ratio * b.width, n)
        cy = rng.normal(center.y, self.sigma_ratio * b.height, n)
        for i in range(n):
            space.set_x(i, float(cx[i]) - problem.widths[i] / 2)
            space.set_y(i, float(cy[i]) - problem.heights[i] / 2)


class RandomGrid(InitialPlacement):
    """Each cell is put at a random point of an n x n grid on the boundary (n: number of cells)"""

    def __init__(self, seed: int = 6):
        self.seed = seed

    def _place_cells(self, space: ParameterSpace, problem: PlacementProblem) -> None:
        rng = np.random.default_rng(self.seed)
        b = problem.boundary
        n = problem.num_cells
        kx = rng.integers(0, n, n)
        ky = rng.integers(0, n, n)
        for i in range(n):
            space.set_x(i, b.xlo + int(kx[i]) * b.width / n)
            space.set_y(i, b.ylo + int(ky[i]) * b.height / n)


class KeepCircuitPlacement(InitialPlacement):
    """
    Starts from the locations of the circuit (the inverse of the write-out,
    up to a translation). Cells without location are put at the center of the boundary
    """

    def _place_cells(self, space: ParameterSpace, problem: PlacementProblem) -> None:
        center = problem.boundary.center
        offset = problem.circuit.parameters.layout_offset
        unplaced = 0
        for i, cell in enumerate(problem.circuit.cells):
            if cell.location is None:
                unplaced += 1
                space.set_x(i, center.x - problem.widths[i] / 2)
                space.set_y(i, center.y - problem.heights[i] / 2)
            else:
                lower_left = (cell.location + cell.origin - Point(offset, offset)) * problem.scale
                space.set_x(i, lower_left.x)
                space.set_y(i, lower_left.y)
        if unplaced > 0:
            logger.info("%d cells without location placed at the center of the boundary", unplaced)
