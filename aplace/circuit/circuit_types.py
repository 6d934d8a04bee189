# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Types of the entities of a circuit: cells, pins, nets, symmetry groups and parameters
"""

from dataclasses import dataclass, field
from typing import Optional

from aplace.geometry.geometry import Point, Box


@dataclass()
class Cell:
    """Representation of a cell (a device or a group of devices)"""
    name: str  # Name of the cell
    width: float  # Width of the bounding box
    height: float  # Height of the bounding box
    origin: Point = field(default_factory=Point)  # Lower-left corner of the bounding box (cell frame)
    location: Optional[Point] = None  # Location of the cell origin in the layout

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def bbox(self) -> Box:
        """Bounding box of the cell in its own frame"""
        return Box(self.origin.x, self.origin.y, self.origin.x + self.width, self.origin.y + self.height)


@dataclass()
class Pin:
    """Representation of a pin of a cell"""
    name: str  # Name of the pin (unique in the cell)
    cell: int  # Index of the owning cell
    location: Point  # Location of the pin in the frame of the cell

    def full_name(self, cell_name: str) -> str:
        return f"{cell_name}.{self.name}"


@dataclass()
class Net:
    """Representation of a net (list of pin indices)"""
    name: str  # Name of the net
    pins: list[int]  # Indices of the pins of the net
    weight: float = 1.0  # Weight of the net

    def __repr__(self) -> str:
        if self.weight == 1:
            return f'Net<{self.name}, pins={self.pins}>'
        return f'Net<{self.name}, pins={self.pins}, weight={self.weight}>'


@dataclass()
class SymGroup:
    """A symmetry group: pairs of cells mirrored about an axis and self-symmetric cells"""
    pairs: list[tuple[int, int]] = field(default_factory=list)  # Symmetric pairs (cell indices)
    self_syms: list[int] = field(default_factory=list)  # Self-symmetric cells

    @property
    def is_empty(self) -> bool:
        return len(self.pairs) == 0 and len(self.self_syms) == 0


@dataclass()
class PlacementParameters:
    """Parameters of the placement problem"""
    boundary: Optional[Box] = None  # Boundary constraint (database units)
    max_white_space: float = 1.0  # White space ratio used for the automatic boundary
    layout_offset: float = 0.0  # Offset added to the solved coordinates
    scale: Optional[float] = None  # Scale between optimizer and database units (automatic if None)
