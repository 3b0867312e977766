"""Builds the script module of one architecture family.

Registration runs in dependency order: enums, leaf value types, the
context base class, entity types, collection types, the file-load
functions, and last the architecture's own hook.
"""

from __future__ import annotations

import logging
import os
import types
from typing import Any

from netbind.arch import ArchFamily, get_arch
from netbind.bindings.bridge import translate_assertfail
from netbind.bindings.conversion import (
    IdStringConverter,
    PortRefConverter,
    PropertyConverter,
    as_enum,
    conv_from_str,
    conv_new_id,
    conv_to_str,
    deref_and_wrap,
    optional,
    pass_through,
    unwrap_context,
    wrap_context,
    wrap_new_context,
)
from netbind.bindings.registry import Bindings
from netbind.bindings.wrappers import fn, readonly, readwrite
from netbind.context import BaseCtx
from netbind.design import load_design, parse_json_file
from netbind.exceptions import AssertionFailure
from netbind.ids import IdString
from netbind.netlist import (
    CellInfo,
    GraphicElement,
    GraphicElementStyle,
    GraphicElementType,
    HierarchicalCell,
    Loc,
    NetInfo,
    PipMap,
    PlaceStrength,
    PortInfo,
    PortRef,
    PortType,
    Region,
)
from netbind.property import Property

logger = logging.getLogger(__name__)


def module_name(arch_name: str) -> str:
    return f"netbind_{arch_name}"


def _register_enums(b: Bindings) -> None:
    b.add_enum(GraphicElementType)
    b.add_enum(GraphicElementStyle)
    b.add_enum(PortType)
    b.add_enum(PlaceStrength)


def _register_value_types(b: Bindings) -> None:
    ge_cls = b.add_class("GraphicElement", GraphicElement, constructible=True)
    readwrite(ge_cls, "type", "type", pass_through(), as_enum(GraphicElementType))
    readwrite(ge_cls, "style", "style", pass_through(), as_enum(GraphicElementStyle))
    for field in ("x1", "y1", "x2", "y2", "z", "text"):
        readwrite(ge_cls, field, field, pass_through(), pass_through())

    loc_cls = b.add_class("Loc", Loc, constructible=True)
    for field in ("x", "y", "z"):
        readwrite(loc_cls, field, field, pass_through(), pass_through())


def _register_context(b: Bindings) -> None:
    ctx_cls = b.add_class("BaseCtx", BaseCtx)
    readonly(ctx_cls, "cells", "cells", wrap_context("CellMap"))
    readonly(ctx_cls, "nets", "nets", wrap_context("NetMap"))
    readonly(ctx_cls, "region", "region", wrap_context("RegionMap"))
    readonly(ctx_cls, "hierarchy", "hierarchy", wrap_context("HierarchyMap"))
    readwrite(ctx_cls, "top_module", "top_module", conv_to_str(IdString), conv_new_id())

    name = conv_from_str(IdString)
    fn(ctx_cls, "createCell", "create_cell", [conv_new_id(), conv_new_id()], wrap_context(CellInfo))
    fn(ctx_cls, "createNet", "create_net", [conv_new_id()], wrap_context(NetInfo))
    fn(ctx_cls, "connectPort", "connect_port", [name, name, name])
    fn(ctx_cls, "disconnectPort", "disconnect_port", [name, name])
    fn(ctx_cls, "renameNet", "rename_net", [name, conv_new_id()])
    fn(ctx_cls, "createRegion", "create_region", [conv_new_id()], wrap_context(Region))
    fn(ctx_cls, "constrainCellToRegion", "constrain_cell_to_region", [name, name])


def _register_entities(b: Bindings, arch: ArchFamily) -> None:
    new_id = conv_new_id()
    id_str = conv_to_str(IdString)
    strength = as_enum(PlaceStrength)

    ci_cls = b.add_class("CellInfo", CellInfo)
    readwrite(ci_cls, "name", "name", id_str, new_id)
    readwrite(ci_cls, "type", "type", id_str, new_id)
    readonly(ci_cls, "attrs", "attrs", wrap_context("AttrMap"))
    readonly(ci_cls, "params", "params", wrap_context("AttrMap"))
    readonly(ci_cls, "ports", "ports", wrap_context("PortMap"))
    readwrite(ci_cls, "bel", "bel", optional(conv_to_str(arch.bel_id)), conv_from_str(arch.bel_id))
    readwrite(ci_cls, "belStrength", "bel_strength", pass_through(), strength)
    readonly(ci_cls, "pins", "pins", wrap_context("IdIdMap"))
    readonly(ci_cls, "region", "region", deref_and_wrap(Region))
    fn(ci_cls, "addInput", "add_input", [new_id])
    fn(ci_cls, "addOutput", "add_output", [new_id])
    fn(ci_cls, "addInout", "add_inout", [new_id])
    fn(ci_cls, "setParam", "set_param", [new_id, conv_from_str(Property)])
    fn(ci_cls, "unsetParam", "unset_param", [conv_from_str(IdString)])
    fn(ci_cls, "setAttr", "set_attr", [new_id, conv_from_str(Property)])
    fn(ci_cls, "unsetAttr", "unset_attr", [conv_from_str(IdString)])

    pi_cls = b.add_class("PortInfo", PortInfo)
    readwrite(pi_cls, "name", "name", id_str, new_id)
    readonly(pi_cls, "net", "net", deref_and_wrap(NetInfo))
    readwrite(pi_cls, "type", "type", pass_through(), as_enum(PortType))

    ni_cls = b.add_class("NetInfo", NetInfo)
    readwrite(ni_cls, "name", "name", id_str, new_id)
    readwrite(ni_cls, "driver", "driver", wrap_context(PortRef), unwrap_context(PortRef, by_value=True))
    readonly(ni_cls, "users", "users", wrap_context("PortRefVector"))
    readonly(ni_cls, "wires", "wires", wrap_context("WireMap"))
    readonly(ni_cls, "attrs", "attrs", wrap_context("AttrMap"))

    pr_cls = b.add_class("PortRef", PortRef)
    readonly(pr_cls, "cell", "cell", deref_and_wrap(CellInfo))
    readwrite(pr_cls, "port", "port", id_str, conv_from_str(IdString))
    readwrite(pr_cls, "budget", "budget", pass_through(), pass_through())

    pm_cls = b.add_class("PipMap", PipMap)
    readwrite(pm_cls, "pip", "pip", optional(conv_to_str(arch.pip_id)), conv_from_str(arch.pip_id))
    readwrite(pm_cls, "strength", "strength", pass_through(), strength)

    region_cls = b.add_class("Region", Region)
    readwrite(region_cls, "name", "name", id_str, new_id)
    for flag in ("constr_bels", "constr_wires", "constr_pips"):
        readwrite(region_cls, flag, flag, pass_through(), pass_through())
    readonly(region_cls, "bels", "bels", wrap_context("BelSet"))
    readonly(region_cls, "wires", "wires", wrap_context("WireSet"))

    hier_cls = b.add_class("HierarchicalCell", HierarchicalCell)
    for field in ("name", "type", "parent", "fullpath"):
        readwrite(hier_cls, field, field, id_str, new_id)
    for field in ("leaf_cells", "nets", "hier_cells"):
        readonly(hier_cls, field, field, wrap_context("IdIdMap"))


def _register_collections(b: Bindings, arch: ArchFamily) -> None:
    b.add_map("AttrMap", IdString, conv_to_str(Property), conv_from_str(Property), intern_keys=True, deletable=True)
    b.add_map("PortMap", IdString, wrap_context(PortInfo))
    b.add_map("IdIdMap", IdString, conv_to_str(IdString), conv_new_id(), intern_keys=True, deletable=True)
    b.add_map(
        "WireMap",
        arch.wire_id,
        wrap_context(PipMap),
        unwrap_context(PipMap, by_value=True),
        deletable=True,
    )
    b.add_map("CellMap", IdString, wrap_context(CellInfo))
    b.add_map("NetMap", IdString, wrap_context(NetInfo))
    b.add_map("RegionMap", IdString, wrap_context(Region))
    b.add_map("HierarchyMap", IdString, wrap_context(HierarchicalCell))
    b.add_vector("PortRefVector", wrap_context(PortRef), unwrap_context(PortRef, by_value=True))
    b.add_set("BelSet", arch.bel_id)
    b.add_set("WireSet", arch.wire_id)


def _register_functions(b: Bindings, arch: ArchFamily) -> None:
    def parse_json(filename: str | os.PathLike[str], ctx: BaseCtx) -> None:
        """Load a JSON netlist into an existing context."""
        parse_json_file(filename, ctx)

    def load_design_(filename: str | os.PathLike[str], args: Any) -> BaseCtx:
        """Create a context from ``args`` and load a JSON netlist into it."""
        return load_design(filename, args, arch.create_context)

    load_design_.__name__ = "load_design"
    b.add_function("parse_json", parse_json, [pass_through(), unwrap_context(BaseCtx)])
    b.add_function(
        "load_design",
        load_design_,
        [pass_through(), optional(unwrap_context(arch.args_type))],
        wrap_new_context(),
    )


def build_bindings(arch: ArchFamily) -> Bindings:
    """Register every core binding, then the family's own."""
    b = Bindings(module_name(arch.name))
    b.bridge.register(AssertionFailure, translate_assertfail)

    b.register_converter(IdString, IdStringConverter())
    b.register_converter(Property, PropertyConverter())
    b.register_converter(PortRef, PortRefConverter())

    _register_enums(b)
    _register_value_types(b)
    _register_context(b)
    _register_entities(b, arch)
    _register_collections(b, arch)
    _register_functions(b, arch)

    arch.wrap_python(b)
    logger.debug("registered %d names for %s", len(b.namespace), arch.name)
    return b


def wrap_python(arch_name: str) -> types.ModuleType:
    """Build the script module for the architecture family ``arch_name``."""
    return build_bindings(get_arch(arch_name)).build_module()
