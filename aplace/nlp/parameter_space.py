# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
The parameter space: one flat buffer with all the variables of the optimization.

The layout of the buffer is fixed:
  [0, n)        x coordinates of the lower-left corners of the n cells
  [n, 2n)       y coordinates of the lower-left corners of the cells
  [2n, end)     one symmetry axis per symmetry group (or a single axis shared by all groups)

The buffer is only accessed through the functions of ParameterSpace. No views
into it are handed out, except for the read-only array returned by values.
"""

from enum import Enum
from typing import NamedTuple

import numpy as np
import numpy.typing as npt


class Orient(Enum):
    """Orientation of a variable"""
    HORIZONTAL = 0  # x coordinate of a cell
    VERTICAL = 1  # y coordinate of a cell
    SYM = 2  # symmetry axis of a group


class VarRef(NamedTuple):
    """Reference to a variable: a cell (or symmetry group) index and an orientation"""
    idx: int
    orient: Orient


class ParameterSpace:
    """
    The variables of the placement problem
    """

    _num_cells: int
    _num_sym_groups: int
    _shared_axis: bool  # All groups share a single axis variable
    _values: npt.NDArray[np.float64]

    def __init__(self, num_cells: int, num_sym_groups: int, shared_axis: bool = False):
        """
        Constructor
        :param num_cells: number of cells
        :param num_sym_groups: number of symmetry groups
        :param shared_axis: if True, one axis variable is shared by all the symmetry groups
        """
        assert num_cells >= 0 and num_sym_groups >= 0
        self._num_cells = num_cells
        self._num_sym_groups = num_sym_groups
        self._shared_axis = shared_axis
        num_axes = 1 if shared_axis else num_sym_groups
        self._values = np.zeros(2 * num_cells + num_axes)

    @property
    def num_cells(self) -> int:
        return self._num_cells

    @property
    def num_sym_groups(self) -> int:
        return self._num_sym_groups

    @property
    def shared_axis(self) -> bool:
        return self._shared_axis

    @property
    def size(self) -> int:
        """Number of variables"""
        return self._values.size

    @property
    def x_range(self) -> range:
        return range(0, self._num_cells)

    @property
    def y_range(self) -> range:
        return range(self._num_cells, 2 * self._num_cells)

    @property
    def sym_range(self) -> range:
        return range(2 * self._num_cells, self.size)

    def index(self, idx: int, orient: Orient) -> int:
        """
        Offset of a variable in the buffer
        :param idx: index of the cell (or of the symmetry group for Orient.SYM)
        :param orient: orientation of the variable
        :return: the offset
        """
        if orient == Orient.HORIZONTAL:
            assert 0 <= idx < self._num_cells, f"Cell index {idx} out of range"
            return idx
        if orient == Orient.VERTICAL:
            assert 0 <= idx < self._num_cells, f"Cell index {idx} out of range"
            return idx + self._num_cells
        assert 0 <= idx < self._num_sym_groups, f"Symmetry group index {idx} out of range"
        return 2 * self._num_cells if self._shared_axis else 2 * self._num_cells + idx

    def ref_index(self, ref: VarRef) -> int:
        """Offset of a referenced variable"""
        return self.index(ref.idx, ref.orient)

    def value(self, ref: VarRef) -> float:
        return float(self._values[self.index(ref.idx, ref.orient)])

    def x(self, cell: int) -> float:
        return float(self._values[self.index(cell, Orient.HORIZONTAL)])

    def y(self, cell: int) -> float:
        return float(self._values[self.index(cell, Orient.VERTICAL)])

    def axis(self, group: int) -> float:
        return float(self._values[self.index(group, Orient.SYM)])

    def set_x(self, cell: int, v: float) -> None:
        self._values[self.index(cell, Orient.HORIZONTAL)] = v

    def set_y(self, cell: int, v: float) -> None:
        self._values[self.index(cell, Orient.VERTICAL)] = v

    def set_axis(self, group: int, v: float) -> None:
        self._values[self.index(group, Orient.SYM)] = v

    def set_value(self, ref: VarRef, v: float) -> None:
        self._values[self.index(ref.idx, ref.orient)] = v

    @property
    def values(self) -> npt.NDArray[np.float64]:
        """Read-only view of the whole buffer"""
        view = self._values.view()
        view.flags.writeable = False
        return view

    def xs(self) -> npt.NDArray[np.float64]:
        """Copy of the x coordinates"""
        return self._values[:self._num_cells].copy()

    def ys(self) -> npt.NDArray[np.float64]:
        """Copy of the y coordinates"""
        return self._values[self._num_cells:2 * self._num_cells].copy()

    def assign(self, v: npt.ArrayLike) -> None:
        """
        Overwrites all the variables (in place, the buffer is never reallocated)
        :param v: the new values
        """
        v = np.asarray(v, dtype=np.float64)
        assert v.shape == self._values.shape, f"Expected {self._values.size} values, got {v.size}"
        self._values[:] = v

    def copy_values(self) -> npt.NDArray[np.float64]:
        return self._values.copy()
