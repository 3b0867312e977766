"""Registry of everything exposed to scripts by one module build."""

from __future__ import annotations

import logging
import types
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

from netbind.bindings.bridge import ExceptionBridge
from netbind.bindings.containers import CollectionProxy, MapProxy, SetProxy, VectorProxy
from netbind.bindings.conversion import StringConverter, conv_from_str, conv_new_id, conv_to_str
from netbind.bindings.wrappers import ContextualWrapper, Method, Policy
from netbind.exceptions import UnsupportedConversion

logger = logging.getLogger(__name__)


class Bindings:
    """Converters, wrapper classes and proxies of a script module.

    The core registration and the architecture hook both add to the same
    Bindings; ``build_module`` then turns the exported names into a module.
    """

    def __init__(self, module_name: str) -> None:
        self.module_name = module_name
        self.bridge = ExceptionBridge()
        self.namespace: dict[str, Any] = {}
        self._converters: dict[type, StringConverter] = {}
        self._classes: dict[type, type[ContextualWrapper]] = {}
        self._collections: dict[str, type[CollectionProxy]] = {}

    # Converters

    def register_converter(self, native_type: type, converter: StringConverter) -> None:
        """Register the string converter for ``native_type``."""
        if native_type in self._converters:
            raise ValueError(f"Converter for '{native_type.__name__}' is already registered")
        self._converters[native_type] = converter

    def find_converter(self, native_type: type) -> StringConverter | None:
        for klass in native_type.__mro__:
            converter = self._converters.get(klass)
            if converter is not None:
                return converter
        return None

    def converter(self, native_type: type) -> StringConverter:
        """Get the converter for ``native_type``, raising if there is none."""
        converter = self.find_converter(native_type)
        if converter is None:
            raise UnsupportedConversion(f"no string converter for {native_type.__name__}")
        return converter

    # Exported names

    def export(self, name: str, value: Any) -> None:
        if name in self.namespace:
            raise ValueError(f"'{name}' is already exported by {self.module_name}")
        self.namespace[name] = value

    def add_enum(self, enum_type: type[Enum], name: str | None = None, export_values: bool = True) -> type[Enum]:
        """Export an enum, and its members at module level."""
        self.export(name or enum_type.__name__, enum_type)
        if export_values:
            for member in enum_type:
                self.export(member.name, member)
        return enum_type

    def add_class(
        self,
        name: str,
        native_type: type,
        bases: Sequence[type[ContextualWrapper]] = (),
        constructible: bool = False,
        doc: str | None = None,
    ) -> type[ContextualWrapper]:
        """Create and export the wrapper class for ``native_type``."""
        if native_type in self._classes:
            raise ValueError(f"'{native_type.__name__}' is already bound as {self._classes[native_type].__name__}")
        attrs = {
            "__module__": self.module_name,
            "__doc__": doc or native_type.__doc__,
            "bindings": self,
            "native_type": native_type,
            "constructible": constructible,
        }
        # Mutable values compare by content and cannot be hashed
        if native_type.__hash__ is None:
            attrs["__hash__"] = None
        cls = types.new_class(name, tuple(bases) or (ContextualWrapper,), exec_body=lambda ns: ns.update(attrs))
        self._classes[native_type] = cls
        self.export(name, cls)
        return cls

    def add_function(
        self,
        name: str,
        func: Callable[..., Any],
        arg_policies: Sequence[Policy] = (),
        ret_policy: Policy | None = None,
    ) -> Callable[..., Any]:
        """Export a free function with converted arguments and result."""
        method = Method(func, arg_policies, ret_policy, free=True)

        def call(*args: Any) -> Any:
            return method.invoke(self, None, None, args)

        call.__name__ = name
        call.__qualname__ = name
        call.__module__ = self.module_name
        call.__doc__ = func.__doc__
        self.export(name, call)
        return call

    # Collections

    def _add_collection(self, name: str, proxy_base: type[CollectionProxy], attrs: dict[str, Any]) -> type[CollectionProxy]:
        if name in self._collections:
            raise ValueError(f"Collection '{name}' is already registered")
        attrs.update({"__module__": self.module_name, "bindings": self})
        cls = types.new_class(name, (proxy_base,), exec_body=lambda ns: ns.update(attrs))
        self._collections[name] = cls
        self.export(name, cls)
        return cls

    def add_map(
        self,
        name: str,
        key_type: type,
        value_get: Policy,
        value_set: Policy | None = None,
        intern_keys: bool = False,
        deletable: bool = False,
    ) -> type[CollectionProxy]:
        """Register a map proxy keyed by ``key_type``.

        ``intern_keys`` lets assignment create identifiers for new keys;
        without it only existing identifiers may be used as keys.
        """
        key_set = conv_from_str(key_type)
        return self._add_collection(
            name,
            MapProxy,
            {
                "key_get": conv_to_str(key_type),
                "key_set": key_set,
                "key_new": conv_new_id() if intern_keys else key_set,
                "value_get": value_get,
                "value_set": value_set,
                "deletable": deletable,
            },
        )

    def add_vector(self, name: str, value_get: Policy, value_set: Policy | None = None) -> type[CollectionProxy]:
        """Register a sequence proxy."""
        return self._add_collection(name, VectorProxy, {"value_get": value_get, "value_set": value_set})

    def add_set(self, name: str, value_type: type, mutable: bool = True) -> type[CollectionProxy]:
        """Register a set proxy over string-convertible values."""
        lookup = conv_from_str(value_type)
        return self._add_collection(
            name,
            SetProxy,
            {
                "value_get": conv_to_str(value_type),
                "value_set": lookup if mutable else None,
                "value_lookup": lookup,
            },
        )

    # Wrapping

    def class_for(self, native_type: type) -> type[ContextualWrapper]:
        """Most derived wrapper class bound for ``native_type``."""
        for klass in native_type.__mro__:
            cls = self._classes.get(klass)
            if cls is not None:
                return cls
        raise UnsupportedConversion(f"{native_type.__name__} is not exposed to scripts")

    def collection(self, name: str) -> type[CollectionProxy]:
        cls = self._collections.get(name)
        if cls is None:
            raise UnsupportedConversion(f"no collection named '{name}'")
        return cls

    def wrap(self, ctx: Any, value: Any, target: type | str | None = None) -> Any:
        """Wrap ``value`` for scripts, as the class or collection ``target``."""
        if isinstance(target, str):
            return self.collection(target).wrap(ctx, value)
        return self.class_for(target or type(value)).wrap(ctx, value)

    def build_module(self) -> types.ModuleType:
        module = types.ModuleType(self.module_name, f"netbind script bindings ({self.module_name})")
        module.__dict__.update(self.namespace)
        module.__all__ = sorted(self.namespace)
        logger.debug("built module %s with %d names", self.module_name, len(self.namespace))
        return module
