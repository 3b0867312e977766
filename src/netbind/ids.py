"""Interned identifiers.

An IdString is only an index. The string it stands for lives in the
IdStringTable owned by a context, so every conversion in either direction
needs that context.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from netbind.exceptions import InvalidIdentifier


class HasIdTable(Protocol):
    id_table: IdStringTable


@dataclass(frozen=True, order=True)
class IdString:
    """Opaque interned identifier. Index 0 is the empty string."""

    index: int = 0

    def str(self, ctx: HasIdTable) -> str:
        """Return the string this identifier stands for in ``ctx``."""
        return ctx.id_table.lookup_index(self.index)

    def empty(self) -> bool:
        return self.index == 0

    def __bool__(self) -> bool:
        return self.index != 0

    def __repr__(self) -> str:
        return f"IdString({self.index})"


class IdStringTable:
    """Interning arena mapping strings to indices and back."""

    def __init__(self) -> None:
        self._strings: list[str] = [""]
        self._indices: dict[str, int] = {"": 0}

    def intern(self, s: str) -> IdString:
        """Return the identifier for ``s``, adding it if it is new."""
        index = self._indices.get(s)
        if index is None:
            index = len(self._strings)
            self._strings.append(s)
            self._indices[s] = index
        return IdString(index)

    def lookup(self, s: str) -> IdString:
        """Return the identifier for ``s``; raise if it was never interned."""
        index = self._indices.get(s)
        if index is None:
            raise InvalidIdentifier(f"'{s}' is not a known identifier")
        return IdString(index)

    def lookup_index(self, index: int) -> str:
        if not 0 <= index < len(self._strings):
            raise InvalidIdentifier(f"identifier index {index} is out of range")
        return self._strings[index]

    def __contains__(self, s: str) -> bool:
        return s in self._indices

    def __len__(self) -> int:
        return len(self._strings)
