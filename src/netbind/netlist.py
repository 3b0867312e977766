"""Netlist entities owned by a context.

Entities compare by identity. Cross references between them (a port's
net, a PortRef's cell, a cell's region) are plain object references that
never own their target; the context's maps are the only owners.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from netbind.exceptions import ensure
from netbind.ids import IdString
from netbind.property import Property


class PortType(Enum):
    """Direction of a cell port."""

    PORT_IN = 0
    PORT_OUT = 1
    PORT_INOUT = 2


class PlaceStrength(IntEnum):
    """Priority of a placement or routing assignment, weakest first."""

    STRENGTH_NONE = 0
    STRENGTH_WEAK = 1
    STRENGTH_STRONG = 2
    STRENGTH_FIXED = 3
    STRENGTH_LOCKED = 4
    STRENGTH_USER = 5


class GraphicElementType(Enum):
    TYPE_NONE = 0
    TYPE_LINE = 1
    TYPE_ARROW = 2
    TYPE_BOX = 3
    TYPE_CIRCLE = 4
    TYPE_LABEL = 5


class GraphicElementStyle(Enum):
    STYLE_GRID = 0
    STYLE_FRAME = 1
    STYLE_HIDDEN = 2
    STYLE_INACTIVE = 3
    STYLE_ACTIVE = 4


@dataclass
class Loc:
    """Grid location of a bel."""

    x: int = -1
    y: int = -1
    z: int = -1


@dataclass
class GraphicElement:
    """A shape drawn for a bel, wire or pip."""

    type: GraphicElementType = GraphicElementType.TYPE_NONE
    style: GraphicElementStyle = GraphicElementStyle.STYLE_FRAME
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    z: float = 0.0
    text: str = ""


@dataclass(eq=False)
class PortInfo:
    name: IdString
    type: PortType
    net: NetInfo | None = None


class PortRef:
    """Non-owning (cell, port) pair plus a timing budget.

    Two PortRefs are equal when they name the same cell object and the
    same port; the budget does not take part.
    """

    __slots__ = ("cell", "port", "budget")

    def __init__(self, cell: CellInfo | None = None, port: IdString = IdString(), budget: float = 0) -> None:
        self.cell = cell
        self.port = port
        self.budget = budget

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PortRef):
            return NotImplemented
        return self.cell is other.cell and self.port == other.port

    def __hash__(self) -> int:
        return hash((id(self.cell), self.port))

    def __copy__(self) -> PortRef:
        return PortRef(self.cell, self.port, self.budget)

    def __repr__(self) -> str:
        cell = None if self.cell is None else self.cell.name
        return f"PortRef(cell={cell!r}, port={self.port!r}, budget={self.budget!r})"


@dataclass
class PipMap:
    """Routing assignment of one wire: the pip driving it and its strength."""

    pip: Any = None
    strength: PlaceStrength = PlaceStrength.STRENGTH_NONE


@dataclass(eq=False)
class NetInfo:
    name: IdString
    driver: PortRef = field(default_factory=PortRef)
    users: list[PortRef] = field(default_factory=list)
    wires: dict[Any, PipMap] = field(default_factory=dict)
    attrs: dict[IdString, Property] = field(default_factory=dict)


@dataclass(eq=False)
class Region:
    """Placement constraint: which bels and wires a cell may use."""

    name: IdString
    constr_bels: bool = False
    constr_wires: bool = False
    constr_pips: bool = False
    bels: set[Any] = field(default_factory=set)
    wires: set[Any] = field(default_factory=set)


@dataclass(eq=False)
class CellInfo:
    name: IdString
    type: IdString
    attrs: dict[IdString, Property] = field(default_factory=dict)
    params: dict[IdString, Property] = field(default_factory=dict)
    ports: dict[IdString, PortInfo] = field(default_factory=dict)
    bel: Any = None
    bel_strength: PlaceStrength = PlaceStrength.STRENGTH_NONE
    pins: dict[IdString, IdString] = field(default_factory=dict)
    region: Region | None = None

    def add_input(self, name: IdString) -> None:
        self.add_port(name, PortType.PORT_IN)

    def add_output(self, name: IdString) -> None:
        self.add_port(name, PortType.PORT_OUT)

    def add_inout(self, name: IdString) -> None:
        self.add_port(name, PortType.PORT_INOUT)

    def add_port(self, name: IdString, type: PortType) -> None:
        existing = self.ports.get(name)
        if existing is not None:
            ensure(existing.net is None, "cannot redefine a connected port")
        self.ports[name] = PortInfo(name=name, type=type)

    def set_param(self, name: IdString, value: Property) -> None:
        self.params[name] = value

    def unset_param(self, name: IdString) -> None:
        self.params.pop(name, None)

    def set_attr(self, name: IdString, value: Property) -> None:
        self.attrs[name] = value

    def unset_attr(self, name: IdString) -> None:
        self.attrs.pop(name, None)


@dataclass(eq=False)
class HierarchicalCell:
    """Node of the design hierarchy laid over the flat cell and net maps."""

    name: IdString = IdString()
    type: IdString = IdString()
    parent: IdString = IdString()
    fullpath: IdString = IdString()
    leaf_cells: dict[IdString, IdString] = field(default_factory=dict)
    nets: dict[IdString, IdString] = field(default_factory=dict)
    hier_cells: dict[IdString, IdString] = field(default_factory=dict)
