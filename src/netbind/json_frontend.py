"""Read a Yosys JSON netlist into a context.

Only the top module is imported. Its cells become CellInfos, every signal
bit becomes a NetInfo, and each top-level port gets an I/O buffer cell
(``$nextpnr_ibuf``, ``$nextpnr_obuf`` or ``$nextpnr_iobuf``) so the design
is closed.
"""

from __future__ import annotations

import json
import logging
from typing import IO, Any

from netbind.context import BaseCtx
from netbind.exceptions import NetlistParseError
from netbind.ids import IdString
from netbind.netlist import CellInfo, PortType
from netbind.property import Property

logger = logging.getLogger(__name__)

GND_NET = "$PACKER_GND_NET"
VCC_NET = "$PACKER_VCC_NET"

_DIRECTIONS = {
    "input": PortType.PORT_IN,
    "output": PortType.PORT_OUT,
    "inout": PortType.PORT_INOUT,
}

# Top port direction -> (buffer cell type, buffer pin, buffer pin direction)
_IO_BUFFERS = {
    "input": ("$nextpnr_ibuf", "O", PortType.PORT_OUT),
    "output": ("$nextpnr_obuf", "I", PortType.PORT_IN),
    "inout": ("$nextpnr_iobuf", "IO", PortType.PORT_INOUT),
}


def _property(value: Any, where: str) -> Property:
    """Yosys writes strings for bit vectors and text, ints for small numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise NetlistParseError(f"{where}: unsupported property value {value!r}")
    if isinstance(value, int):
        return Property(value, 32)
    return Property.from_string(value)


def _bit_name(bit: Any) -> str:
    return f"$nextpnr_net{bit}"


class JsonFrontend:
    """Imports the top module of one parsed JSON document."""

    def __init__(self, ctx: BaseCtx, filename: str) -> None:
        self.ctx = ctx
        self.filename = filename
        self.bit_nets: dict[Any, IdString] = {}

    def error(self, message: str) -> NetlistParseError:
        return NetlistParseError(f"{self.filename}: {message}")

    def expect(self, value: Any, kind: type, where: str) -> Any:
        """Return ``value`` if it is a JSON ``kind``, else raise a parse error."""
        if not isinstance(value, kind):
            expected = "an object" if kind is dict else "a list"
            raise self.error(f"{where} is not {expected}")
        return value

    def run(self, root: Any) -> None:
        if not isinstance(root, dict) or not isinstance(root.get("modules"), dict):
            raise self.error("expected an object with a 'modules' object")
        name, module = self.find_top(root["modules"])
        logger.info("Importing module %s", name)

        ctx = self.ctx
        ctx.top_module = ctx.id(name)
        top = ctx.add_hierarchy_node(ctx.top_module, ctx.top_module)

        netnames = self.expect(module.get("netnames", {}), dict, f"module {name} netnames")
        cells = self.expect(module.get("cells", {}), dict, f"module {name} cells")
        ports = self.expect(module.get("ports", {}), dict, f"module {name} ports")
        self.import_netnames(netnames, top.nets)
        for cell_name, cell_data in cells.items():
            cell = self.import_cell(cell_name, cell_data)
            top.leaf_cells[cell.name] = cell.name
        for port_name, port_data in ports.items():
            cell = self.import_top_port(port_name, port_data)
            top.leaf_cells[cell.name] = cell.name
        logger.info("Imported %d cells and %d nets", len(ctx.cells), len(ctx.nets))

    def find_top(self, modules: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        tops = []
        for name, module in modules.items():
            self.expect(module, dict, f"module {name}")
            attrs = self.expect(module.get("attributes", {}), dict, f"module {name} attributes")
            if _property(attrs.get("top", 0), f"module {name}").as_bool():
                tops.append(name)
        if not tops and len(modules) == 1:
            tops = list(modules)
        if len(tops) != 1:
            raise self.error(f"cannot determine the top module (candidates: {sorted(tops) or 'none'})")
        return tops[0], modules[tops[0]]

    def net_for_bit(self, bit: Any) -> IdString | None:
        """Net carrying ``bit``, created on first use. Undriven constants give None."""
        ctx = self.ctx
        if bit in ("x", "z"):
            return None
        if bit in ("0", "1"):
            name = ctx.id(GND_NET if bit == "0" else VCC_NET)
            if name not in ctx.nets:
                ctx.create_net(name)
                cell_name, cell_type = ("$PACKER_GND", "GND") if bit == "0" else ("$PACKER_VCC", "VCC")
                driver = ctx.create_cell(ctx.id(cell_name), ctx.id(cell_type))
                driver.add_output(ctx.id("Y"))
                ctx.connect_port(name, driver.name, ctx.id("Y"))
            return name
        if not isinstance(bit, int):
            raise self.error(f"invalid signal bit {bit!r}")
        net = self.bit_nets.get(bit)
        if net is None:
            net = ctx.id(_bit_name(bit))
            ctx.create_net(net)
            self.bit_nets[bit] = net
        return net

    def connect_bit(self, bit: Any, cell: CellInfo, port_name: IdString) -> None:
        ctx = self.ctx
        net = self.net_for_bit(bit)
        if net is None:
            return
        if cell.ports[port_name].type == PortType.PORT_OUT and ctx.get_net(net).driver.cell is not None:
            raise self.error(f"multiple drivers for bit {bit!r} (cell {cell.name.str(ctx)})")
        ctx.connect_port(net, cell.name, port_name)

    def import_netnames(self, netnames: dict[str, Any], hier_nets: dict[IdString, IdString]) -> None:
        """Name nets after the first (preferably public) netname using each bit."""
        for name, data in netnames.items():
            self.expect(data, dict, f"netname {name}")
        ordered = sorted(netnames.items(), key=lambda item: (item[1].get("hide_name", 0), item[0]))
        ctx = self.ctx
        for name, data in ordered:
            bits = self.expect(data.get("bits", []), list, f"netname {name} bits")
            attrs = self.expect(data.get("attributes", {}), dict, f"netname {name} attributes")
            for i, bit in enumerate(bits):
                if not isinstance(bit, int) or bit in self.bit_nets:
                    continue
                net_name = ctx.id(name if len(bits) == 1 else f"{name}[{i}]")
                if net_name in ctx.nets:
                    continue
                net = ctx.create_net(net_name)
                for key, value in attrs.items():
                    net.attrs[ctx.id(key)] = _property(value, f"netname {name}")
                self.bit_nets[bit] = net_name
                hier_nets[net_name] = net_name

    def import_cell(self, name: str, data: Any) -> CellInfo:
        if not isinstance(data, dict) or not isinstance(data.get("type"), str):
            raise self.error(f"cell {name} has no type")
        ctx = self.ctx
        attrs = self.expect(data.get("attributes", {}), dict, f"cell {name} attributes")
        params = self.expect(data.get("parameters", {}), dict, f"cell {name} parameters")
        directions = self.expect(data.get("port_directions", {}), dict, f"cell {name} port_directions")
        connections = self.expect(data.get("connections", {}), dict, f"cell {name} connections")

        cell = ctx.create_cell(ctx.id(name), ctx.id(data["type"]))
        for key, value in attrs.items():
            cell.set_attr(ctx.id(key), _property(value, f"cell {name}"))
        for key, value in params.items():
            cell.set_param(ctx.id(key), _property(value, f"cell {name}"))

        for port, bits in connections.items():
            direction = directions.get(port, "inout")
            if direction not in _DIRECTIONS:
                raise self.error(f"cell {name} port {port} has invalid direction {direction!r}")
            self.expect(bits, list, f"cell {name} port {port} bits")
            for i, bit in enumerate(bits):
                port_name = ctx.id(port if len(bits) == 1 else f"{port}[{i}]")
                cell.add_port(port_name, _DIRECTIONS[direction])
                self.connect_bit(bit, cell, port_name)
        return cell

    def import_top_port(self, name: str, data: Any) -> CellInfo:
        direction = data.get("direction") if isinstance(data, dict) else None
        if direction not in _IO_BUFFERS:
            raise self.error(f"top port {name} has invalid direction {direction!r}")
        ctx = self.ctx
        buf_type, pin, pin_type = _IO_BUFFERS[direction]
        bits = self.expect(data.get("bits", []), list, f"top port {name} bits")
        cell = ctx.create_cell(ctx.id(name), ctx.id(buf_type))
        for i, bit in enumerate(bits):
            port_name = ctx.id(pin if len(bits) == 1 else f"{pin}[{i}]")
            cell.add_port(port_name, pin_type)
            self.connect_bit(bit, cell, port_name)
        return cell


def parse_json(stream: IO[str], filename: str, ctx: BaseCtx) -> None:
    """Parse the JSON netlist in ``stream`` into ``ctx``."""
    try:
        root = json.load(stream)
    except json.JSONDecodeError as e:
        raise NetlistParseError(f"{filename}: invalid JSON: {e}") from e
    JsonFrontend(ctx, filename).run(root)
