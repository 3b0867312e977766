"""The netlist database.

A context owns every cell, net, region and hierarchy node, together with
the interning table that gives identifiers their meaning. Architecture
families derive their Context from BaseCtx.
"""

from __future__ import annotations

import logging

from netbind.exceptions import InvalidIdentifier, ensure
from netbind.ids import IdString, IdStringTable
from netbind.netlist import (
    CellInfo,
    HierarchicalCell,
    NetInfo,
    PortRef,
    PortType,
    Region,
)

logger = logging.getLogger(__name__)


class BaseCtx:
    """Architecture independent part of a context."""

    def __init__(self) -> None:
        self.id_table = IdStringTable()
        self.cells: dict[IdString, CellInfo] = {}
        self.nets: dict[IdString, NetInfo] = {}
        self.region: dict[IdString, Region] = {}
        self.hierarchy: dict[IdString, HierarchicalCell] = {}
        self.top_module = IdString()

    # Identifiers

    def id(self, s: str) -> IdString:
        """Intern ``s``."""
        return self.id_table.intern(s)

    def lookup_id(self, s: str) -> IdString:
        """Return the identifier for ``s`` without interning it."""
        return self.id_table.lookup(s)

    def name_of(self, ident: IdString) -> str:
        return ident.str(self)

    # Lookup

    def get_cell(self, name: IdString) -> CellInfo:
        cell = self.cells.get(name)
        if cell is None:
            raise InvalidIdentifier(f"no cell named '{name.str(self)}'")
        return cell

    def get_net(self, name: IdString) -> NetInfo:
        net = self.nets.get(name)
        if net is None:
            raise InvalidIdentifier(f"no net named '{name.str(self)}'")
        return net

    # Netlist editing

    def create_cell(self, name: IdString, type: IdString) -> CellInfo:
        ensure(name not in self.cells, f"cell '{name.str(self)}' already exists")
        cell = CellInfo(name=name, type=type)
        self.cells[name] = cell
        return cell

    def create_net(self, name: IdString) -> NetInfo:
        ensure(name not in self.nets, f"net '{name.str(self)}' already exists")
        net = NetInfo(name=name)
        self.nets[name] = net
        return net

    def connect_port(self, net_name: IdString, cell_name: IdString, port_name: IdString) -> None:
        """Attach a cell port to a net; outputs drive, everything else uses."""
        net = self.get_net(net_name)
        cell = self.get_cell(cell_name)
        port = cell.ports.get(port_name)
        ensure(port is not None, f"cell '{cell_name.str(self)}' has no port '{port_name.str(self)}'")
        ensure(port.net is None, f"port '{port_name.str(self)}' of '{cell_name.str(self)}' is already connected")
        if port.type == PortType.PORT_OUT:
            ensure(net.driver.cell is None, f"net '{net_name.str(self)}' already has a driver")
        port.net = net
        if port.type == PortType.PORT_OUT:
            net.driver = PortRef(cell, port_name)
        else:
            net.users.append(PortRef(cell, port_name))

    def disconnect_port(self, cell_name: IdString, port_name: IdString) -> None:
        cell = self.get_cell(cell_name)
        port = cell.ports.get(port_name)
        ensure(port is not None, f"cell '{cell_name.str(self)}' has no port '{port_name.str(self)}'")
        net = port.net
        if net is None:
            return
        ref = PortRef(cell, port_name)
        net.users[:] = [user for user in net.users if user != ref]
        if net.driver == ref:
            net.driver = PortRef()
        port.net = None

    def rename_net(self, old: IdString, new: IdString) -> None:
        if old == new:
            return
        ensure(new not in self.nets, f"net '{new.str(self)}' already exists")
        net = self.get_net(old)
        del self.nets[old]
        net.name = new
        self.nets[new] = net

    # Regions

    def create_region(self, name: IdString) -> Region:
        ensure(name not in self.region, f"region '{name.str(self)}' already exists")
        region = Region(name=name)
        self.region[name] = region
        return region

    def add_bel_to_region(self, name: IdString, bel: object) -> None:
        region = self.region.get(name)
        ensure(region is not None, f"no region named '{name.str(self)}'")
        region.bels.add(bel)

    def constrain_cell_to_region(self, cell_name: IdString, region_name: IdString) -> None:
        cell = self.get_cell(cell_name)
        region = self.region.get(region_name)
        ensure(region is not None, f"no region named '{region_name.str(self)}'")
        cell.region = region

    # Hierarchy

    def add_hierarchy_node(
        self, name: IdString, type: IdString, parent: IdString = IdString()
    ) -> HierarchicalCell:
        """Create a hierarchy node under ``parent`` (the root when empty).

        Nodes are keyed by their full dotted path; ``parent`` is the parent
        node's full path.
        """
        if parent:
            parent_node = self.hierarchy.get(parent)
            ensure(parent_node is not None, f"no hierarchy node '{parent.str(self)}'")
            fullpath = self.id(f"{parent.str(self)}.{name.str(self)}")
        else:
            fullpath = name
        ensure(fullpath not in self.hierarchy, f"hierarchy node '{fullpath.str(self)}' already exists")
        node = HierarchicalCell(name=name, type=type, parent=parent, fullpath=fullpath)
        self.hierarchy[fullpath] = node
        if parent:
            parent_node.hier_cells[name] = fullpath
        logger.debug("added hierarchy node %s", fullpath.str(self))
        return node
