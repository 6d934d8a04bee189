# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Module to represent circuits: the placement database
"""

from typing import Optional

from aplace.circuit.circuit_types import Cell, Pin, Net, SymGroup, PlacementParameters
from aplace.circuit.yaml_read_circuit import parse_yaml_circuit
from aplace.circuit.yaml_write_circuit import dump_yaml_cells, dump_yaml_nets, dump_yaml_sym_groups, \
    dump_yaml_parameters
from aplace.geometry.geometry import Point
from aplace.utils.keywords import KW
from aplace.utils.utils import write_json_yaml, Python_object


class Circuit:
    """
    Class to represent a circuit to be placed
    """

    _cells: list[Cell]  # List of cells
    _pins: list[Pin]  # List of pins (of all cells)
    _nets: list[Net]  # List of nets
    _sym_groups: list[SymGroup]  # List of symmetry groups
    _signal_paths: list[list[int]]  # Signal paths (ordered lists of pin indices)
    _parameters: PlacementParameters  # Placement parameters
    _name2cell: dict[str, int]  # Map from cell names to cell indices

    def __init__(self, stream: str):
        """
        Constructor of a circuit from a file or from a string of text (YAML).
        The file can be either in JSON or YAML.
        :param stream: name of the file or the YAML string
        """
        self._cells, self._pins, self._nets, self._sym_groups, self._signal_paths, self._parameters = \
            parse_yaml_circuit(stream)
        self._name2cell = {c.name: i for i, c in enumerate(self._cells)}
        assert len(self._name2cell) == len(self._cells), "Duplicated cell names"

    @property
    def num_cells(self) -> int:
        """Number of cells of the circuit"""
        return len(self._cells)

    @property
    def cells(self) -> list[Cell]:
        return self._cells

    @property
    def num_pins(self) -> int:
        return len(self._pins)

    @property
    def pins(self) -> list[Pin]:
        return self._pins

    @property
    def num_nets(self) -> int:
        return len(self._nets)

    @property
    def nets(self) -> list[Net]:
        return self._nets

    @property
    def num_sym_groups(self) -> int:
        return len(self._sym_groups)

    @property
    def sym_groups(self) -> list[SymGroup]:
        return self._sym_groups

    @property
    def signal_paths(self) -> list[list[int]]:
        return self._signal_paths

    @property
    def parameters(self) -> PlacementParameters:
        return self._parameters

    @property
    def total_cell_area(self) -> float:
        """Sum of the areas of the bounding boxes of the cells"""
        return sum(c.area for c in self._cells)

    def cell(self, idx: int) -> Cell:
        return self._cells[idx]

    def pin(self, idx: int) -> Pin:
        return self._pins[idx]

    def cell_index(self, name: str) -> int:
        """
        Returns the index of the cell with a certain name
        :param name: name of the cell
        :return: the index
        """
        assert name in self._name2cell, f"Cell {name} does not exist"
        return self._name2cell[name]

    def pin_name(self, idx: int) -> str:
        """Full name (<cell>.<pin>) of a pin"""
        p = self._pins[idx]
        return f"{self._cells[p.cell].name}{KW.PIN_SEPARATOR}{p.name}"

    def set_location(self, idx: int, x: float, y: float) -> None:
        """Sets the location of the origin of a cell"""
        self._cells[idx].location = Point(x, y)

    def locations(self) -> dict[str, Optional[Point]]:
        """Returns the location of every cell, by name"""
        return {c.name: c.location for c in self._cells}

    def write_yaml(self, filename: Optional[str] = None) -> Optional[str]:
        """
        Writes the circuit into a YAML file.
        If no file name is given, a string with the yaml contents is returned
        :param filename: name of the output file
        """
        return write_json_yaml(self._write_json_yaml_data(), False, filename)

    def write_json(self, filename: Optional[str] = None) -> Optional[str]:
        """
        Writes the circuit into a JSON file. If no file name is given,
        a string with the JSON contents is returned
        :param filename: name of the output file
        """
        return write_json_yaml(self._write_json_yaml_data(), True, filename)

    def _write_json_yaml_data(self) -> Python_object:
        """
        Generates the data structure to be dumped into a JSON or YAML file.
        """
        pin_names = [self.pin_name(i) for i in range(self.num_pins)]
        data: dict = {KW.CELLS: dump_yaml_cells(self._cells, self._pins)}
        if self._nets:
            data[KW.NETS] = dump_yaml_nets(self._nets, pin_names)
        if self._sym_groups:
            data[KW.SYM_GROUPS] = dump_yaml_sym_groups(self._sym_groups, self._cells)
        if self._signal_paths:
            data[KW.SIGNAL_PATHS] = [[pin_names[p] for p in path] for path in self._signal_paths]
        params = dump_yaml_parameters(self._parameters)
        if params:
            data[KW.PARAMETERS] = params
        return data
