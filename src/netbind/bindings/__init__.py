"""Script bindings: wrappers, converters, proxies and the module builder."""

from netbind.bindings.bridge import ExceptionBridge
from netbind.bindings.conversion import StringConverter
from netbind.bindings.module import build_bindings, module_name, wrap_python
from netbind.bindings.registry import Bindings
from netbind.bindings.wrappers import ContextualWrapper, fn, readonly, readwrite

__all__ = [
    "Bindings",
    "ContextualWrapper",
    "ExceptionBridge",
    "StringConverter",
    "build_bindings",
    "fn",
    "module_name",
    "readonly",
    "readwrite",
    "wrap_python",
]
