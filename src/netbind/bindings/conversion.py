"""String converters and conversion policies.

A StringConverter turns one native type into its script string and back,
always relative to a context. A policy is a callable
``policy(bindings, ctx, value)`` that an accessor applies to a value on
its way in or out; policies look converters and wrapper classes up in the
Bindings they are given, so a binding can name a type whose converter is
only registered later (for example by an architecture hook).
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import TYPE_CHECKING, Any

from netbind.bindings.wrappers import ContextualWrapper
from netbind.exceptions import UnsupportedConversion
from netbind.ids import IdString
from netbind.netlist import PortRef
from netbind.property import Property

if TYPE_CHECKING:
    from netbind.bindings.registry import Bindings


class StringConverter:
    """Converts values of one native type to and from strings."""

    type_name = "value"

    def to_str(self, ctx: Any, value: Any) -> str:
        raise UnsupportedConversion(f"{self.type_name} to_str not implemented")

    def from_str(self, ctx: Any, s: str) -> Any:
        raise UnsupportedConversion(f"{self.type_name} from_str not implemented")


def _require_str(type_name: str, s: object) -> str:
    if not isinstance(s, str):
        raise UnsupportedConversion(f"cannot convert {type(s).__name__} to {type_name}, expected str")
    return s


class IdStringConverter(StringConverter):
    """Strict: from_str never interns, unknown strings are InvalidIdentifier."""

    type_name = "IdString"

    def to_str(self, ctx: Any, value: IdString) -> str:
        return value.str(ctx)

    def from_str(self, ctx: Any, s: str) -> IdString:
        return ctx.lookup_id(_require_str(self.type_name, s))


class PropertyConverter(StringConverter):
    type_name = "Property"

    def to_str(self, ctx: Any, value: Property) -> str:
        return value.to_string()

    def from_str(self, ctx: Any, s: str) -> Property:
        return Property.from_string(_require_str(self.type_name, s))


class PortRefConverter(StringConverter):
    """Prints ``cell.port``. A (cell, port) pair cannot be rebuilt from that."""

    type_name = "PortRef"

    def to_str(self, ctx: Any, value: PortRef) -> str:
        cell = "" if value.cell is None else value.cell.name.str(ctx)
        return f"{cell}.{value.port.str(ctx)}"


# Policies


class ConversionPolicy:
    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> Any:
        raise NotImplementedError


class pass_through(ConversionPolicy):
    """Hand the value over unchanged."""

    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> Any:
        return value


class conv_to_str(ConversionPolicy):
    def __init__(self, native_type: type) -> None:
        self.native_type = native_type

    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> str:
        return bindings.converter(self.native_type).to_str(ctx, value)


class conv_from_str(ConversionPolicy):
    def __init__(self, native_type: type) -> None:
        self.native_type = native_type

    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> Any:
        return bindings.converter(self.native_type).from_str(ctx, value)


class conv_new_id(ConversionPolicy):
    """Intern the string, creating the identifier if it is new.

    Only used where a script names something it is creating: new ports,
    attribute and parameter keys, renamed fields, new cells and nets.
    """

    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> IdString:
        return ctx.id(_require_str("IdString", value))


class as_enum(ConversionPolicy):
    """Accept an enum member, its name or its value."""

    def __init__(self, enum_type: type[Enum]) -> None:
        self.enum_type = enum_type

    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> Enum:
        if isinstance(value, self.enum_type):
            return value
        try:
            if isinstance(value, str):
                return self.enum_type[value]
            return self.enum_type(value)
        except (KeyError, ValueError):
            raise UnsupportedConversion(f"{value!r} is not a valid {self.enum_type.__name__}") from None


class wrap_context(ConversionPolicy):
    """Wrap a native value with its context.

    ``target`` is a native type (entity wrappers) or the registered name
    of a collection proxy; it is resolved when the value is wrapped.
    """

    def __init__(self, target: type | str | None = None) -> None:
        self.target = target

    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> Any:
        return bindings.wrap(ctx, value, self.target)


class deref_and_wrap(wrap_context):
    """Like wrap_context, but a missing reference stays None."""

    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> Any:
        if value is None:
            return None
        return bindings.wrap(ctx, value, self.target)


class wrap_new_context(ConversionPolicy):
    """Wrap a freshly built context; the script now holds the only handle."""

    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> Any:
        return bindings.wrap(value, value, type(value))


class unwrap_context(ConversionPolicy):
    """Take the native value out of a wrapper.

    With ``by_value`` set, value types are copied so the caller never aliases
    storage it does not own.
    """

    def __init__(self, native_type: type | None = None, by_value: bool = False) -> None:
        self.native_type = native_type
        self.by_value = by_value

    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> Any:
        if not isinstance(value, ContextualWrapper):
            expected = self.native_type.__name__ if self.native_type else "a wrapped object"
            raise UnsupportedConversion(f"expected {expected}, got {type(value).__name__}")
        if self.native_type is not None and not isinstance(value.base, self.native_type):
            raise UnsupportedConversion(
                f"expected {self.native_type.__name__}, got {type(value.base).__name__}"
            )
        if ctx is not None and value.ctx is not None and value.ctx is not ctx:
            raise UnsupportedConversion(f"{type(value).__name__} belongs to a different context")
        return copy.copy(value.base) if self.by_value else value.base


class optional(ConversionPolicy):
    """Apply ``inner`` unless the value is None."""

    def __init__(self, inner: ConversionPolicy) -> None:
        self.inner = inner

    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> Any:
        if value is None:
            return None
        return self.inner(bindings, ctx, value)


class range_of(ConversionPolicy):
    """Convert every element of an iterable, returning a list."""

    def __init__(self, inner: ConversionPolicy) -> None:
        self.inner = inner

    def __call__(self, bindings: Bindings, ctx: Any, value: Any) -> list[Any]:
        return [self.inner(bindings, ctx, item) for item in value]
