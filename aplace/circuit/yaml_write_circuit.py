# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

from typing import Any

from .circuit_types import Cell, Pin, Net, SymGroup, PlacementParameters
from ..utils.keywords import KW


def _number(v: float) -> float | int:
    """Integer values are dumped as integers"""
    return int(v) if float(v).is_integer() else v


def dump_yaml_cells(cells: list[Cell], pins: list[Pin]) -> dict[str, Any]:
    """
    Generates a data structure for the cells (and their pins) that can be dumped in YAML
    :param cells: list of cells
    :param pins: list of pins
    :return: the data structure
    """
    out = dict[str, Any]()
    for c in cells:
        info: dict[str, Any] = {KW.WIDTH: _number(c.width), KW.HEIGHT: _number(c.height)}
        if c.origin.x != 0 or c.origin.y != 0:
            info[KW.ORIGIN] = [_number(c.origin.x), _number(c.origin.y)]
        if c.location is not None:
            info[KW.LOCATION] = [_number(c.location.x), _number(c.location.y)]
        out[c.name] = info
    for p in pins:
        info = out[cells[p.cell].name]
        info.setdefault(KW.PINS, {})[p.name] = [_number(p.location.x), _number(p.location.y)]
    return out


def dump_yaml_nets(nets: list[Net], pin_names: list[str]) -> dict[str, Any]:
    """
    Generates a data structure for the nets that can be dumped in YAML
    :param nets: list of nets
    :param pin_names: full names of the pins
    :return: the data structure
    """
    out = dict[str, Any]()
    for n in nets:
        pins = [pin_names[p] for p in n.pins]
        out[n.name] = pins if n.weight == 1 else {KW.PINS: pins, KW.WEIGHT: _number(n.weight)}
    return out


def dump_yaml_sym_groups(groups: list[SymGroup], cells: list[Cell]) -> list[dict[str, Any]]:
    """
    Generates a data structure for the symmetry groups that can be dumped in YAML
    :param groups: list of symmetry groups
    :param cells: list of cells
    :return: the data structure
    """
    out = list[dict[str, Any]]()
    for g in groups:
        info = dict[str, Any]()
        if g.pairs:
            info[KW.PAIRS] = [[cells[a].name, cells[b].name] for a, b in g.pairs]
        if g.self_syms:
            info[KW.SELF] = [cells[c].name for c in g.self_syms]
        out.append(info)
    return out


def dump_yaml_parameters(params: PlacementParameters) -> dict[str, Any]:
    """
    Generates a data structure for the placement parameters (only non-default values)
    :param params: the parameters
    :return: the data structure
    """
    out = dict[str, Any]()
    default = PlacementParameters()
    if params.boundary is not None:
        b = params.boundary
        out[KW.BOUNDARY] = [_number(b.xlo), _number(b.ylo), _number(b.xhi), _number(b.yhi)]
    if params.max_white_space != default.max_white_space:
        out[KW.MAX_WHITE_SPACE] = _number(params.max_white_space)
    if params.layout_offset != default.layout_offset:
        out[KW.LAYOUT_OFFSET] = _number(params.layout_offset)
    if params.scale is not None:
        out[KW.SCALE] = params.scale
    return out
