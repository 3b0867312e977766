"""Live proxies over native maps, vectors and sets.

A proxy holds the native container itself, never a copy, so every
mutation made through it is visible to the database and to any other
proxy over the same container. Key and value policies are class
attributes set by Bindings when the proxy class is registered.
"""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping, MutableSequence, MutableSet
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from netbind.bindings.registry import Bindings
    from netbind.bindings.wrappers import Policy


class CollectionProxy:
    """Common state of all proxies: the context and the native container."""

    bindings: ClassVar[Bindings]
    value_get: ClassVar[Policy]
    value_set: ClassVar[Policy | None] = None

    def __init__(self, ctx: Any, base: Any) -> None:
        self.ctx = ctx
        self.base = base

    @classmethod
    def wrap(cls, ctx: Any, base: Any) -> CollectionProxy:
        return cls(ctx, base)

    def _to_script(self, value: Any) -> Any:
        with self.bindings.bridge.translating():
            return self.value_get(self.bindings, self.ctx, value)

    def _to_native(self, value: Any) -> Any:
        if self.value_set is None:
            raise TypeError(f"'{type(self).__name__}' object is read-only")
        with self.bindings.bridge.translating():
            return self.value_set(self.bindings, self.ctx, value)


class MapProxy(CollectionProxy, MutableMapping):
    """Mapping view over a native dict.

    Lookups convert keys strictly, so a key that was never interned is
    reported the same way as a key that is simply absent: KeyError
    (InvalidIdentifier is a KeyError). Inserting may intern new keys when
    ``key_new`` says so.
    """

    key_get: ClassVar[Policy]
    key_set: ClassVar[Policy]
    key_new: ClassVar[Policy]
    deletable: ClassVar[bool] = False

    def _key_to_native(self, key: Any) -> Any:
        with self.bindings.bridge.translating():
            return self.key_set(self.bindings, self.ctx, key)

    def _key_to_script(self, key: Any) -> Any:
        with self.bindings.bridge.translating():
            return self.key_get(self.bindings, self.ctx, key)

    def __getitem__(self, key: Any) -> Any:
        native_key = self._key_to_native(key)
        try:
            value = self.base[native_key]
        except KeyError:
            raise KeyError(key) from None
        return self._to_script(value)

    def __setitem__(self, key: Any, value: Any) -> None:
        native_value = self._to_native(value)
        with self.bindings.bridge.translating():
            native_key = self.key_new(self.bindings, self.ctx, key)
        self.base[native_key] = native_value

    def __delitem__(self, key: Any) -> None:
        if not self.deletable:
            raise TypeError(f"'{type(self).__name__}' object does not support item deletion")
        native_key = self._key_to_native(key)
        try:
            del self.base[native_key]
        except KeyError:
            raise KeyError(key) from None

    def __contains__(self, key: object) -> bool:
        try:
            native_key = self._key_to_native(key)
        except (KeyError, TypeError):
            return False
        return native_key in self.base

    def __iter__(self) -> Iterator[Any]:
        for native_key in list(self.base):
            yield self._key_to_script(native_key)

    def __len__(self) -> int:
        return len(self.base)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


class VectorProxy(CollectionProxy, MutableSequence):
    """Sequence view over a native list."""

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, slice):
            return [self._to_script(value) for value in self.base[index]]
        return self._to_script(self.base[index])

    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, slice):
            self.base[index] = [self._to_native(v) for v in value]
        else:
            self.base[index] = self._to_native(value)

    def __delitem__(self, index: Any) -> None:
        if self.value_set is None:
            raise TypeError(f"'{type(self).__name__}' object is read-only")
        del self.base[index]

    def __len__(self) -> int:
        return len(self.base)

    def insert(self, index: int, value: Any) -> None:
        self.base.insert(index, self._to_native(value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


class SetProxy(CollectionProxy, MutableSet):
    """Set view over a native set."""

    value_lookup: ClassVar[Policy]

    @classmethod
    def _from_iterable(cls, it: Any) -> set[Any]:
        return set(it)

    def _lookup(self, value: Any) -> Any:
        with self.bindings.bridge.translating():
            return self.value_lookup(self.bindings, self.ctx, value)

    def __contains__(self, value: object) -> bool:
        try:
            native = self._lookup(value)
        except (KeyError, TypeError):
            return False
        return native in self.base

    def __iter__(self) -> Iterator[Any]:
        for value in list(self.base):
            yield self._to_script(value)

    def __len__(self) -> int:
        return len(self.base)

    def add(self, value: Any) -> None:
        self.base.add(self._to_native(value))

    def discard(self, value: Any) -> None:
        if self.value_set is None:
            raise TypeError(f"'{type(self).__name__}' object is read-only")
        try:
            native = self._lookup(value)
        except (KeyError, TypeError):
            return
        self.base.discard(native)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({set(self)!r})"
