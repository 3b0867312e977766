"""Context-bound wrappers and the field and method accessors installed on them.

Every exposed native type gets a ContextualWrapper subclass, built by
Bindings.add_class. Attributes and methods are added to that class as
descriptors by ``readonly``, ``readwrite`` and ``fn``; each class keeps
the table of what was bound in ``_bound``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from netbind.bindings.registry import Bindings

Policy = Callable[["Bindings", Any, Any], Any]


class ContextualWrapper:
    """A native object paired with the context it belongs to.

    The wrapper borrows the object: it never copies it and never outlives
    the context's ownership of it. Constructible classes are context-free
    value types such as Loc; their ``ctx`` is always None.
    """

    __slots__ = ("ctx", "base")

    bindings: ClassVar[Bindings]
    native_type: ClassVar[type]
    constructible: ClassVar[bool] = False
    _bound: ClassVar[dict[str, Any]] = {}

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        if not self.constructible:
            raise TypeError(f"{type(self).__name__} cannot be instantiated from a script")
        self.ctx = None
        self.base = self.native_type(*args, **kwargs)

    @classmethod
    def wrap(cls, ctx: Any, base: Any) -> ContextualWrapper:
        obj = object.__new__(cls)
        obj.ctx = None if cls.constructible else ctx
        obj.base = base
        return obj

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContextualWrapper):
            return NotImplemented
        return self.ctx is other.ctx and (self.base is other.base or self.base == other.base)

    def __hash__(self) -> int:
        return hash(self.base)

    def __repr__(self) -> str:
        converter = self.bindings.find_converter(type(self.base))
        if converter is not None and self.ctx is not None:
            return f"<{type(self).__name__} {converter.to_str(self.ctx, self.base)}>"
        name = getattr(self.base, "name", None)
        if name is not None and self.ctx is not None:
            return f"<{type(self).__name__} {name.str(self.ctx)!r}>"
        return f"<{type(self).__name__} {self.base!r}>"

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._bound))


class ReadOnlyAttribute:
    """Attribute that converts a native field on read and cannot be set."""

    def __init__(self, attr: str, get_policy: Policy) -> None:
        self.attr = attr
        self.get_policy = get_policy
        self.name = attr

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: ContextualWrapper | None, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        with obj.bindings.bridge.translating():
            return self.get_policy(obj.bindings, obj.ctx, getattr(obj.base, self.attr))

    def __set__(self, obj: ContextualWrapper, value: Any) -> None:
        raise AttributeError(f"attribute '{self.name}' of '{type(obj).__name__}' is read-only")


class ReadWriteAttribute(ReadOnlyAttribute):
    """Attribute that converts on read and on write."""

    def __init__(self, attr: str, get_policy: Policy, set_policy: Policy) -> None:
        super().__init__(attr, get_policy)
        self.set_policy = set_policy

    def __set__(self, obj: ContextualWrapper, value: Any) -> None:
        with obj.bindings.bridge.translating():
            setattr(obj.base, self.attr, self.set_policy(obj.bindings, obj.ctx, value))


class Method:
    """Callable that converts its arguments in and its result out.

    ``method`` is the name of a method on the native object, or a plain
    function taking the native object first (or only the arguments, for a
    free function). A ``ret_policy`` of None means the call returns
    nothing to the script.
    """

    def __init__(
        self,
        method: str | Callable[..., Any],
        arg_policies: Sequence[Policy],
        ret_policy: Policy | None = None,
        free: bool = False,
    ) -> None:
        self.method = method
        self.free = free
        self.arg_policies = tuple(arg_policies)
        self.ret_policy = ret_policy
        self.name = method if isinstance(method, str) else method.__name__

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: ContextualWrapper | None, objtype: type | None = None) -> Any:
        if obj is None:
            return self

        def call(*args: Any) -> Any:
            return self.invoke(obj.bindings, obj.ctx, obj.base, args)

        call.__name__ = self.name
        call.__qualname__ = f"{type(obj).__name__}.{self.name}"
        return call

    def invoke(self, bindings: Bindings, ctx: Any, base: Any, args: Sequence[Any]) -> Any:
        if len(args) != len(self.arg_policies):
            raise TypeError(
                f"{self.name}() takes {len(self.arg_policies)} argument(s) ({len(args)} given)"
            )
        with bindings.bridge.translating():
            native_args = [policy(bindings, ctx, arg) for policy, arg in zip(self.arg_policies, args)]
            if isinstance(self.method, str):
                result = getattr(base, self.method)(*native_args)
            elif self.free:
                result = self.method(*native_args)
            else:
                result = self.method(base, *native_args)
            if self.ret_policy is None:
                return None
            return self.ret_policy(bindings, ctx, result)


def _install(cls: type[ContextualWrapper], name: str, descriptor: Any) -> None:
    if "_bound" not in cls.__dict__:
        cls._bound = dict(cls._bound)
    setattr(cls, name, descriptor)
    descriptor.__set_name__(cls, name)
    cls._bound[name] = descriptor


def readonly(cls: type[ContextualWrapper], name: str, attr: str, policy: Policy) -> None:
    """Expose native field ``attr`` as read-only attribute ``name``."""
    _install(cls, name, ReadOnlyAttribute(attr, policy))


def readwrite(cls: type[ContextualWrapper], name: str, attr: str, get_policy: Policy, set_policy: Policy) -> None:
    """Expose native field ``attr`` as settable attribute ``name``."""
    _install(cls, name, ReadWriteAttribute(attr, get_policy, set_policy))


def fn(
    cls: type[ContextualWrapper],
    name: str,
    method: str | Callable[..., Any],
    arg_policies: Sequence[Policy] = (),
    ret_policy: Policy | None = None,
) -> None:
    """Expose a native method as script method ``name``."""
    _install(cls, name, Method(method, arg_policies, ret_policy))
