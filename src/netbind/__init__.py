"""netbind - Python scripting bindings for a netlist and placement database."""

from netbind.arch import ArchFamily, get_arch, list_arches
from netbind.bindings import Bindings, ContextualWrapper, StringConverter, wrap_python
from netbind.context import BaseCtx
from netbind.design import load_design, parse_json_file
from netbind.exceptions import (
    AssertionFailure,
    ErrorKind,
    InvalidIdentifier,
    NativeInvariantFailure,
    NetbindError,
    NetlistIOError,
    NetlistParseError,
    UnsupportedConversion,
)
from netbind.host import ScriptHost
from netbind.ids import IdString, IdStringTable
from netbind.netlist import (
    CellInfo,
    HierarchicalCell,
    Loc,
    NetInfo,
    PlaceStrength,
    PortInfo,
    PortRef,
    PortType,
    Region,
)
from netbind.property import Property

__all__ = [
    # Main API
    "wrap_python",
    "ScriptHost",
    "load_design",
    "parse_json_file",
    # Database
    "BaseCtx",
    "IdString",
    "IdStringTable",
    "Property",
    "CellInfo",
    "NetInfo",
    "PortInfo",
    "PortRef",
    "PortType",
    "PlaceStrength",
    "Region",
    "HierarchicalCell",
    "Loc",
    # Bindings
    "Bindings",
    "ContextualWrapper",
    "StringConverter",
    "ArchFamily",
    "get_arch",
    "list_arches",
    # Errors
    "ErrorKind",
    "NetbindError",
    "InvalidIdentifier",
    "UnsupportedConversion",
    "NetlistIOError",
    "NetlistParseError",
    "NativeInvariantFailure",
    "AssertionFailure",
]

__version__ = "0.1.0"
