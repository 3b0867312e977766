"""Generic architecture: a device described at runtime by scripts.

Bels, wires and pips are added one by one (``addBel``, ``addWire``,
``addPip``); their identifiers are thin wrappers around the IdString of
their name, so converting them to and from strings goes through the
context's interning table like any other identifier.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from netbind.arch import ArchFamily
from netbind.bindings.conversion import (
    StringConverter,
    as_enum,
    conv_from_str,
    conv_new_id,
    conv_to_str,
    deref_and_wrap,
    optional,
    pass_through,
    range_of,
    unwrap_context,
    wrap_context,
)
from netbind.bindings.registry import Bindings
from netbind.bindings.wrappers import fn, readwrite
from netbind.context import BaseCtx
from netbind.exceptions import InvalidIdentifier, UnsupportedConversion, ensure
from netbind.ids import IdString
from netbind.netlist import CellInfo, Loc, NetInfo, PipMap, PlaceStrength, PortType, Region

logger = logging.getLogger(__name__)


@dataclass
class ArchArgs:
    device: str = "generic"


@dataclass(frozen=True)
class BelId:
    name: IdString = IdString()


@dataclass(frozen=True)
class WireId:
    name: IdString = IdString()


@dataclass(frozen=True)
class PipId:
    name: IdString = IdString()


@dataclass(eq=False)
class BelPin:
    wire: WireId
    type: PortType


@dataclass(eq=False)
class BelInfo:
    name: IdString
    type: IdString
    loc: Loc
    gb: bool = False
    pins: dict[IdString, BelPin] = field(default_factory=dict)
    bound_cell: CellInfo | None = None


@dataclass(eq=False)
class WireInfo:
    name: IdString
    type: IdString
    x: int = 0
    y: int = 0
    uphill: list[PipId] = field(default_factory=list)
    downhill: list[PipId] = field(default_factory=list)
    bound_net: NetInfo | None = None


@dataclass(eq=False)
class PipInfo:
    name: IdString
    type: IdString
    src: WireId
    dst: WireId
    delay: float = 0.0
    loc: Loc = field(default_factory=Loc)
    bound_net: NetInfo | None = None


class Context(BaseCtx):
    """Context of a generic device."""

    def __init__(self, args: ArchArgs | None = None) -> None:
        super().__init__()
        self.args = args or ArchArgs()
        self.bels: dict[BelId, BelInfo] = {}
        self.wires: dict[WireId, WireInfo] = {}
        self.pips: dict[PipId, PipInfo] = {}
        self._bel_by_loc: dict[tuple[int, int, int], BelId] = {}

    # Device construction

    def add_wire(self, name: IdString, type: IdString, x: int, y: int) -> WireId:
        wire = WireId(name)
        ensure(wire not in self.wires, f"duplicate wire name '{name.str(self)}'")
        self.wires[wire] = WireInfo(name=name, type=type, x=x, y=y)
        return wire

    def add_pip(self, name: IdString, type: IdString, src: WireId, dst: WireId, delay: float, loc: Loc) -> PipId:
        pip = PipId(name)
        ensure(pip not in self.pips, f"duplicate pip name '{name.str(self)}'")
        ensure(src in self.wires and dst in self.wires, f"pip '{name.str(self)}' uses an unknown wire")
        self.pips[pip] = PipInfo(name=name, type=type, src=src, dst=dst, delay=delay, loc=loc)
        self.wires[src].downhill.append(pip)
        self.wires[dst].uphill.append(pip)
        return pip

    def add_bel(self, name: IdString, type: IdString, loc: Loc, gb: bool) -> BelId:
        bel = BelId(name)
        ensure(bel not in self.bels, f"duplicate bel name '{name.str(self)}'")
        key = (loc.x, loc.y, loc.z)
        ensure(key not in self._bel_by_loc, f"duplicate bel location ({loc.x}, {loc.y}, {loc.z})")
        self.bels[bel] = BelInfo(name=name, type=type, loc=Loc(loc.x, loc.y, loc.z), gb=gb)
        self._bel_by_loc[key] = bel
        return bel

    def _add_bel_pin(self, bel: BelId, name: IdString, wire: WireId, type: PortType) -> None:
        info = self.bel_info(bel)
        ensure(name not in info.pins, f"duplicate pin '{name.str(self)}' on bel '{bel.name.str(self)}'")
        ensure(wire in self.wires, f"unknown wire '{wire.name.str(self)}'")
        info.pins[name] = BelPin(wire=wire, type=type)

    def add_bel_input(self, bel: BelId, name: IdString, wire: WireId) -> None:
        self._add_bel_pin(bel, name, wire, PortType.PORT_IN)

    def add_bel_output(self, bel: BelId, name: IdString, wire: WireId) -> None:
        self._add_bel_pin(bel, name, wire, PortType.PORT_OUT)

    def add_bel_inout(self, bel: BelId, name: IdString, wire: WireId) -> None:
        self._add_bel_pin(bel, name, wire, PortType.PORT_INOUT)

    # Bels

    def bel_info(self, bel: BelId) -> BelInfo:
        info = self.bels.get(bel)
        ensure(info is not None, f"unknown bel '{bel.name.str(self)}'")
        return info

    def get_bel_by_name(self, name: IdString) -> BelId:
        bel = BelId(name)
        if bel not in self.bels:
            raise InvalidIdentifier(f"no bel named '{name.str(self)}'")
        return bel

    def get_bel_name(self, bel: BelId) -> IdString:
        return bel.name

    def get_bels(self) -> list[BelId]:
        return list(self.bels)

    def get_bel_type(self, bel: BelId) -> IdString:
        return self.bel_info(bel).type

    def get_bel_location(self, bel: BelId) -> Loc:
        loc = self.bel_info(bel).loc
        return Loc(loc.x, loc.y, loc.z)

    def get_bel_by_location(self, loc: Loc) -> BelId | None:
        return self._bel_by_loc.get((loc.x, loc.y, loc.z))

    def get_bel_pin_wire(self, bel: BelId, pin: IdString) -> WireId | None:
        bel_pin = self.bel_info(bel).pins.get(pin)
        return None if bel_pin is None else bel_pin.wire

    def check_bel_avail(self, bel: BelId) -> bool:
        return self.bel_info(bel).bound_cell is None

    def get_bound_bel_cell(self, bel: BelId) -> CellInfo | None:
        return self.bel_info(bel).bound_cell

    def bind_bel(self, bel: BelId, cell: CellInfo, strength: PlaceStrength) -> None:
        info = self.bel_info(bel)
        ensure(info.bound_cell is None, f"bel '{bel.name.str(self)}' is already bound")
        ensure(cell.bel is None, f"cell '{cell.name.str(self)}' is already placed")
        info.bound_cell = cell
        cell.bel = bel
        cell.bel_strength = strength

    def unbind_bel(self, bel: BelId) -> None:
        info = self.bel_info(bel)
        ensure(info.bound_cell is not None, f"bel '{bel.name.str(self)}' is not bound")
        info.bound_cell.bel = None
        info.bound_cell.bel_strength = PlaceStrength.STRENGTH_NONE
        info.bound_cell = None

    # Wires and pips

    def wire_info(self, wire: WireId) -> WireInfo:
        info = self.wires.get(wire)
        ensure(info is not None, f"unknown wire '{wire.name.str(self)}'")
        return info

    def pip_info(self, pip: PipId) -> PipInfo:
        info = self.pips.get(pip)
        ensure(info is not None, f"unknown pip '{pip.name.str(self)}'")
        return info

    def get_wire_by_name(self, name: IdString) -> WireId:
        wire = WireId(name)
        if wire not in self.wires:
            raise InvalidIdentifier(f"no wire named '{name.str(self)}'")
        return wire

    def get_wire_name(self, wire: WireId) -> IdString:
        return wire.name

    def get_wires(self) -> list[WireId]:
        return list(self.wires)

    def get_pip_by_name(self, name: IdString) -> PipId:
        pip = PipId(name)
        if pip not in self.pips:
            raise InvalidIdentifier(f"no pip named '{name.str(self)}'")
        return pip

    def get_pip_name(self, pip: PipId) -> IdString:
        return pip.name

    def get_pips(self) -> list[PipId]:
        return list(self.pips)

    def get_pips_downhill(self, wire: WireId) -> list[PipId]:
        return list(self.wire_info(wire).downhill)

    def get_pips_uphill(self, wire: WireId) -> list[PipId]:
        return list(self.wire_info(wire).uphill)

    def get_pip_src_wire(self, pip: PipId) -> WireId:
        return self.pip_info(pip).src

    def get_pip_dst_wire(self, pip: PipId) -> WireId:
        return self.pip_info(pip).dst

    def check_wire_avail(self, wire: WireId) -> bool:
        return self.wire_info(wire).bound_net is None

    def get_bound_wire_net(self, wire: WireId) -> NetInfo | None:
        return self.wire_info(wire).bound_net

    def bind_wire(self, wire: WireId, net: NetInfo, strength: PlaceStrength) -> None:
        info = self.wire_info(wire)
        ensure(info.bound_net is None, f"wire '{wire.name.str(self)}' is already bound")
        info.bound_net = net
        net.wires[wire] = PipMap(pip=None, strength=strength)

    def bind_pip(self, pip: PipId, net: NetInfo, strength: PlaceStrength) -> None:
        info = self.pip_info(pip)
        dst = self.wire_info(info.dst)
        ensure(info.bound_net is None, f"pip '{pip.name.str(self)}' is already bound")
        ensure(dst.bound_net is None, f"wire '{info.dst.name.str(self)}' is already bound")
        info.bound_net = net
        dst.bound_net = net
        net.wires[info.dst] = PipMap(pip=pip, strength=strength)

    def unbind_wire(self, wire: WireId) -> None:
        info = self.wire_info(wire)
        net = info.bound_net
        ensure(net is not None, f"wire '{wire.name.str(self)}' is not bound")
        pip_map = net.wires.pop(wire, None)
        if pip_map is not None and pip_map.pip is not None:
            self.pip_info(pip_map.pip).bound_net = None
        info.bound_net = None

    # Regions

    def create_rectangular_region(self, name: IdString, x0: int, y0: int, x1: int, y1: int) -> Region:
        """Create a region holding every bel inside the inclusive box."""
        region = self.create_region(name)
        region.constr_bels = True
        for bel, info in self.bels.items():
            if x0 <= info.loc.x <= x1 and y0 <= info.loc.y <= y1:
                region.bels.add(bel)
        logger.debug("region %s holds %d bels", name.str(self), len(region.bels))
        return region


class _NamedIdConverter(StringConverter):
    """Converts a BelId/WireId/PipId through its name; None is the empty string."""

    id_type: type
    lookup: str

    def to_str(self, ctx: Any, value: Any) -> str:
        if value is None:
            return ""
        return value.name.str(ctx)

    def from_str(self, ctx: Any, s: str) -> Any:
        if not isinstance(s, str):
            raise UnsupportedConversion(f"cannot convert {type(s).__name__} to {self.type_name}, expected str")
        if s == "":
            return None
        return getattr(ctx, self.lookup)(ctx.lookup_id(s))


class BelIdConverter(_NamedIdConverter):
    type_name = "BelId"
    lookup = "get_bel_by_name"


class WireIdConverter(_NamedIdConverter):
    type_name = "WireId"
    lookup = "get_wire_by_name"


class PipIdConverter(_NamedIdConverter):
    type_name = "PipId"
    lookup = "get_pip_by_name"


def wrap_python(bindings: Bindings) -> None:
    """Register the generic identifier types and the Context class."""
    bindings.register_converter(BelId, BelIdConverter())
    bindings.register_converter(WireId, WireIdConverter())
    bindings.register_converter(PipId, PipIdConverter())

    args_cls = bindings.add_class("ArchArgs", ArchArgs, constructible=True)
    readwrite(args_cls, "device", "device", pass_through(), pass_through())

    ctx_cls = bindings.add_class("Context", Context, bases=(bindings.class_for(BaseCtx),))

    bel = conv_from_str(BelId)
    wire = conv_from_str(WireId)
    pip = conv_from_str(PipId)
    name = conv_from_str(IdString)
    new_name = conv_new_id()
    strength = as_enum(PlaceStrength)
    loc = unwrap_context(Loc)

    fn(ctx_cls, "addWire", "add_wire", [new_name, new_name, pass_through(), pass_through()], conv_to_str(WireId))
    fn(ctx_cls, "addPip", "add_pip", [new_name, new_name, wire, wire, pass_through(), loc], conv_to_str(PipId))
    fn(ctx_cls, "addBel", "add_bel", [new_name, new_name, loc, pass_through()], conv_to_str(BelId))
    fn(ctx_cls, "addBelInput", "add_bel_input", [bel, new_name, wire])
    fn(ctx_cls, "addBelOutput", "add_bel_output", [bel, new_name, wire])
    fn(ctx_cls, "addBelInout", "add_bel_inout", [bel, new_name, wire])

    fn(ctx_cls, "getBels", "get_bels", [], range_of(conv_to_str(BelId)))
    fn(ctx_cls, "getBelByName", "get_bel_by_name", [name], conv_to_str(BelId))
    fn(ctx_cls, "getBelType", "get_bel_type", [bel], conv_to_str(IdString))
    fn(ctx_cls, "getBelLocation", "get_bel_location", [bel], wrap_context(Loc))
    fn(ctx_cls, "getBelByLocation", "get_bel_by_location", [loc], optional(conv_to_str(BelId)))
    fn(ctx_cls, "getBelPinWire", "get_bel_pin_wire", [bel, name], optional(conv_to_str(WireId)))
    fn(ctx_cls, "checkBelAvail", "check_bel_avail", [bel], pass_through())
    fn(ctx_cls, "getBoundBelCell", "get_bound_bel_cell", [bel], deref_and_wrap(CellInfo))
    fn(ctx_cls, "bindBel", "bind_bel", [bel, unwrap_context(CellInfo), strength])
    fn(ctx_cls, "unbindBel", "unbind_bel", [bel])

    fn(ctx_cls, "getWires", "get_wires", [], range_of(conv_to_str(WireId)))
    fn(ctx_cls, "getWireByName", "get_wire_by_name", [name], conv_to_str(WireId))
    fn(ctx_cls, "getPips", "get_pips", [], range_of(conv_to_str(PipId)))
    fn(ctx_cls, "getPipByName", "get_pip_by_name", [name], conv_to_str(PipId))
    fn(ctx_cls, "getPipsDownhill", "get_pips_downhill", [wire], range_of(conv_to_str(PipId)))
    fn(ctx_cls, "getPipsUphill", "get_pips_uphill", [wire], range_of(conv_to_str(PipId)))
    fn(ctx_cls, "getPipSrcWire", "get_pip_src_wire", [pip], conv_to_str(WireId))
    fn(ctx_cls, "getPipDstWire", "get_pip_dst_wire", [pip], conv_to_str(WireId))
    fn(ctx_cls, "checkWireAvail", "check_wire_avail", [wire], pass_through())
    fn(ctx_cls, "getBoundWireNet", "get_bound_wire_net", [wire], deref_and_wrap(NetInfo))
    fn(ctx_cls, "bindWire", "bind_wire", [wire, unwrap_context(NetInfo), strength])
    fn(ctx_cls, "bindPip", "bind_pip", [pip, unwrap_context(NetInfo), strength])
    fn(ctx_cls, "unbindWire", "unbind_wire", [wire])

    fn(
        ctx_cls,
        "createRectangularRegion",
        "create_rectangular_region",
        [new_name, pass_through(), pass_through(), pass_through(), pass_through()],
        wrap_context(Region),
    )
    fn(ctx_cls, "addBelToRegion", "add_bel_to_region", [name, bel])


ARCH = ArchFamily(
    name="generic",
    args_type=ArchArgs,
    context_type=Context,
    bel_id=BelId,
    wire_id=WireId,
    pip_id=PipId,
    wrap_python=wrap_python,
)
