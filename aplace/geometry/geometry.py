# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Module to represent points and boxes
"""

from dataclasses import dataclass

from aplace.utils.utils import is_number


class Point:
    """
    A class to represent two-dimensional points and operate with them
    """

    _x: float  # x coordinate
    _y: float  # y coordinate

    def __init__(self, x: float = 0, y: float = 0) -> None:
        """
        Constructor of a Point.
        """
        self._x, self._y = x, y

    @property
    def x(self) -> float:
        return self._x

    @x.setter
    def x(self, value: float):
        self._x = value

    @property
    def y(self) -> float:
        return self._y

    @y.setter
    def y(self, value: float):
        self._y = value

    def __eq__(self, other: object) -> bool:
        """Return self == other."""
        assert isinstance(other, Point)
        return self.x == other.x and self.y == other.y

    def __add__(self, other: 'Point') -> 'Point':
        """Return self + other."""
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        """Return self - other."""
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, other: float) -> 'Point':
        """Return self * scalar."""
        return Point(self.x * other, self.y * other)

    __rmul__ = __mul__

    def __truediv__(self, other: float) -> 'Point':
        """Return self / scalar."""
        return Point(self.x / other, self.y / other)

    def __and__(self, other: 'Point') -> float:
        """Dot product between self and other."""
        return self.x * other.x + self.y * other.y

    def __str__(self) -> str:
        return f"Point(x={self.x}, y={self.y})"

    __repr__ = __str__


@dataclass
class Box:
    """
    A class to represent an axis-aligned box by its lower-left and upper-right coordinates
    """
    xlo: float
    ylo: float
    xhi: float
    yhi: float

    @property
    def width(self) -> float:
        return self.xhi - self.xlo

    @property
    def height(self) -> float:
        return self.yhi - self.ylo

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Point:
        return Point((self.xlo + self.xhi) / 2, (self.ylo + self.yhi) / 2)

    @property
    def is_valid(self) -> bool:
        """A box is valid if it has a positive width and height"""
        return self.xhi > self.xlo and self.yhi > self.ylo

    def scaled(self, factor: float) -> 'Box':
        """Returns the box with all its coordinates multiplied by a factor"""
        return Box(self.xlo * factor, self.ylo * factor, self.xhi * factor, self.yhi * factor)

    def __str__(self) -> str:
        return f"Box(({self.xlo}, {self.ylo}), ({self.xhi}, {self.yhi}))"


def parse_yaml_box(b: list[float]) -> Box:
    """
    Parses a box given as a list [xlo, ylo, xhi, yhi]
    :param b: the YAML description of the box
    :return: the box
    """
    assert isinstance(b, list) and len(b) == 4 and all(is_number(v) for v in b), \
        f"Incorrect format for box {b} (should be [xlo, ylo, xhi, yhi])"
    return Box(float(b[0]), float(b[1]), float(b[2]), float(b[3]))
