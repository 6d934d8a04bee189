# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Module to read circuits in JSON/YAML format
"""

from typing import Any

from aplace.circuit.circuit_types import Cell, Pin, Net, SymGroup, PlacementParameters
from aplace.geometry.geometry import Point, parse_yaml_box
from aplace.utils.keywords import KW
from aplace.utils.utils import valid_identifier, is_number, read_json_yaml

CircuitTree = tuple[list[Cell], list[Pin], list[Net], list[SymGroup], list[list[int]], PlacementParameters]


def parse_yaml_circuit(stream: str) -> CircuitTree:
    """
    Parses a circuit from a file (JSON or YAML) or from a string of text (YAML).
    If the text has only one line, it is assumed to be a file name
    :param stream: name of the file or YAML text
    :return: the cells, pins, nets, symmetry groups, signal paths (lists of pin indices)
    and placement parameters
    """
    tree = read_json_yaml(stream)
    assert isinstance(tree, dict), "The YAML root node is not a dictionary"
    for key in tree:
        assert key in [KW.CELLS, KW.NETS, KW.SYM_GROUPS, KW.SIGNAL_PATHS, KW.PARAMETERS], f"Unknown key {key}"
    assert KW.CELLS in tree, "The circuit has no cells"

    cells, pins = parse_yaml_cells(tree[KW.CELLS])
    cell_index = {c.name: i for i, c in enumerate(cells)}
    pin_index = {p.full_name(cells[p.cell].name): i for i, p in enumerate(pins)}

    nets = parse_yaml_nets(tree.get(KW.NETS, {}), pin_index)
    groups = parse_yaml_sym_groups(tree.get(KW.SYM_GROUPS, []), cell_index)
    paths = parse_yaml_signal_paths(tree.get(KW.SIGNAL_PATHS, []), pin_index)
    params = parse_yaml_parameters(tree.get(KW.PARAMETERS, {}))
    return cells, pins, nets, groups, paths, params


def parse_yaml_point(p: Any, what: str) -> Point:
    """
    Parses a point [x, y]
    :param p: YAML description of the point
    :param what: description of the point (for error messages)
    :return: the point
    """
    assert isinstance(p, list) and len(p) == 2 and is_number(p[0]) and is_number(p[1]), \
        f"Incorrect format for {what}"
    return Point(float(p[0]), float(p[1]))


def parse_yaml_cells(cells: dict) -> tuple[list[Cell], list[Pin]]:
    """
    Parses the cells of the circuit and their pins
    :param cells: the collection of cells
    :return: the list of cells and the list of pins
    """
    assert isinstance(cells, dict), "The YAML node for cells is not a dictionary"
    _cells = list[Cell]()
    _pins = list[Pin]()
    for name, info in cells.items():
        assert valid_identifier(name), f"Invalid cell name: {name}"
        assert isinstance(info, dict), f"The information for cell {name} is not a dictionary"
        for key in info:
            assert key in [KW.WIDTH, KW.HEIGHT, KW.ORIGIN, KW.LOCATION, KW.PINS], \
                f"Unknown attribute {key} of cell {name}"
        assert KW.WIDTH in info and KW.HEIGHT in info, f"Cell {name}: missing width or height"
        assert is_number(info[KW.WIDTH]) and is_number(info[KW.HEIGHT]), \
            f"Cell {name}: width and height must be numbers"

        cell = Cell(name, float(info[KW.WIDTH]), float(info[KW.HEIGHT]))
        if KW.ORIGIN in info:
            cell.origin = parse_yaml_point(info[KW.ORIGIN], f"the origin of cell {name}")
        if KW.LOCATION in info:
            cell.location = parse_yaml_point(info[KW.LOCATION], f"the location of cell {name}")

        idx = len(_cells)
        _cells.append(cell)
        pins = info.get(KW.PINS, {})
        assert isinstance(pins, dict), f"Cell {name}: the pins must be a dictionary"
        for pin_name, loc in pins.items():
            assert valid_identifier(pin_name), f"Cell {name}: invalid pin name {pin_name}"
            _pins.append(Pin(pin_name, idx, parse_yaml_point(loc, f"pin {name}.{pin_name}")))
    return _cells, _pins


def parse_pin_reference(ref: Any, pin_index: dict[str, int]) -> int:
    """
    Returns the index of a pin given as <cell>.<pin>
    :param ref: the reference
    :param pin_index: map from full pin names to pin indices
    :return: the index of the pin
    """
    assert isinstance(ref, str) and ref in pin_index, f"Unknown pin {ref}"
    return pin_index[ref]


def parse_yaml_nets(nets: dict, pin_index: dict[str, int]) -> list[Net]:
    """
    Parses the nets of the circuit. A net is either a list of pins or
    a dictionary with the pins and the weight
    :param nets: the YAML description of the nets
    :param pin_index: map from full pin names to pin indices
    :return: the list of nets
    """
    assert isinstance(nets, dict), "The YAML node for nets is not a dictionary"
    _nets = list[Net]()
    for name, info in nets.items():
        assert valid_identifier(name), f"Invalid net name: {name}"
        weight = 1.0
        if isinstance(info, dict):
            for key in info:
                assert key in [KW.PINS, KW.WEIGHT], f"Unknown attribute {key} of net {name}"
            if KW.WEIGHT in info:
                assert is_number(info[KW.WEIGHT]), f"Net {name}: the weight must be a number"
                weight = float(info[KW.WEIGHT])
            info = info.get(KW.PINS, [])
        assert isinstance(info, list), f"Incorrect specification of net {name}"
        _nets.append(Net(name, [parse_pin_reference(p, pin_index) for p in info], weight))
    return _nets


def parse_yaml_sym_groups(groups: list, cell_index: dict[str, int]) -> list[SymGroup]:
    """
    Parses the symmetry groups
    :param groups: list of groups, each one with pairs and self-symmetric cells
    :param cell_index: map from cell names to cell indices
    :return: the list of symmetry groups
    """
    assert isinstance(groups, list), "Incorrect format for the list of symmetry groups"
    _groups = list[SymGroup]()
    for i, g in enumerate(groups):
        assert isinstance(g, dict), f"Incorrect format for symmetry group {i}"
        group = SymGroup()
        for key, value in g.items():
            assert key in [KW.PAIRS, KW.SELF], f"Unknown attribute {key} of symmetry group {i}"
            assert isinstance(value, list), f"Symmetry group {i}: {key} must be a list"
            if key == KW.PAIRS:
                for p in value:
                    assert isinstance(p, list) and len(p) == 2 and all(c in cell_index for c in p), \
                        f"Symmetry group {i}: incorrect pair {p}"
                    group.pairs.append((cell_index[p[0]], cell_index[p[1]]))
            else:
                for c in value:
                    assert c in cell_index, f"Symmetry group {i}: unknown cell {c}"
                    group.self_syms.append(cell_index[c])
        _groups.append(group)
    return _groups


def parse_yaml_signal_paths(paths: list, pin_index: dict[str, int]) -> list[list[int]]:
    """
    Parses the signal paths (ordered lists of pins)
    :param paths: the YAML description of the paths
    :param pin_index: map from full pin names to pin indices
    :return: the list of paths, each one a list of pin indices
    """
    assert isinstance(paths, list), "Incorrect format for the list of signal paths"
    _paths = list[list[int]]()
    for p in paths:
        assert isinstance(p, list), f"Incorrect format for signal path {p}"
        _paths.append([parse_pin_reference(ref, pin_index) for ref in p])
    return _paths


def parse_yaml_parameters(params: dict) -> PlacementParameters:
    """
    Parses the placement parameters
    :param params: the YAML description of the parameters
    :return: the parameters
    """
    assert isinstance(params, dict), "The YAML node for parameters is not a dictionary"
    p = PlacementParameters()
    for key, value in params.items():
        if key == KW.BOUNDARY:
            p.boundary = parse_yaml_box(value)
        elif key in [KW.MAX_WHITE_SPACE, KW.LAYOUT_OFFSET, KW.SCALE]:
            assert is_number(value), f"Parameter {key} must be a number"
            setattr(p, key, float(value))
        else:
            assert False, f"Unknown parameter {key}"
    return p
