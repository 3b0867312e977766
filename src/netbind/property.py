"""Typed property values for cell attributes and parameters."""

from __future__ import annotations

from netbind.exceptions import ensure
from netbind.parsing.property_lexer import PropertyLexer

S0 = "0"
S1 = "1"
Sx = "x"
Sz = "z"

BIT_STATES = (S0, S1, Sx, Sz)

_lexer: PropertyLexer | None = None


def _get_lexer() -> PropertyLexer:
    global _lexer
    if _lexer is None:
        _lexer = PropertyLexer()
        _lexer.build()
    return _lexer


class Property:
    """A string or a bit vector.

    Bit vectors are stored LSB first in ``value`` and print MSB first.
    For vectors the integer value of the first 64 bits is cached in
    ``intval``, with undefined bits counting as zero.
    """

    __slots__ = ("is_string", "value", "intval")

    def __init__(self, value: int | str | None = None, width: int = 32) -> None:
        if value is None:
            self.is_string = False
            self.value = ""
            self.intval = 0
        elif isinstance(value, str):
            self.is_string = True
            self.value = value
            self.intval = 0xDEADBEEF
        else:
            self.is_string = False
            self.value = "".join(S1 if (value >> i) & 1 else S0 for i in range(width))
            self.intval = value

    @classmethod
    def from_bits(cls, bits: str) -> Property:
        """Build a bit vector from LSB-first state characters."""
        prop = cls()
        prop.value = bits
        prop.update_intval()
        return prop

    def update_intval(self) -> None:
        self.intval = 0
        for i, bit in enumerate(self.value):
            ensure(bit in BIT_STATES, f"invalid bit state '{bit}'")
            if bit == S1 and i < 64:
                self.intval |= 1 << i

    def size(self) -> int:
        return len(self.value)

    def is_fully_def(self) -> bool:
        return not self.is_string and all(b in (S0, S1) for b in self.value)

    def as_int64(self) -> int:
        ensure(not self.is_string, "as_int64 called on a string property")
        return self.intval

    def as_bool(self) -> bool:
        if self.is_string:
            return self.value != "" and self.value != "0"
        return self.intval != 0

    def as_string(self) -> str:
        ensure(self.is_string, "as_string called on a bit vector property")
        return self.value

    def extract(self, offset: int, width: int, padding: str = S0) -> Property:
        """Return ``width`` bits starting at ``offset``, padded past the end."""
        ensure(not self.is_string, "extract called on a string property")
        bits = self.value[offset:offset + width]
        return Property.from_bits(bits + padding * (width - len(bits)))

    def to_string(self) -> str:
        """Serialize; strings that would read back as bits get a trailing space."""
        if self.is_string:
            if _get_lexer().token_types(self.value) in ([], ["BITS"], ["BLANK"], ["BITS", "BLANK"]):
                return self.value + " "
            return self.value
        return self.value[::-1]

    @classmethod
    def from_string(cls, s: str) -> Property:
        """Parse the output of to_string back into a Property."""
        lexer = _get_lexer()
        if lexer.is_bit_vector(s):
            return cls.from_bits(s[::-1])
        if lexer.is_padded_bits(s):
            return cls(s[:-1])
        return cls(s)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Property):
            return NotImplemented
        return self.is_string == other.is_string and self.value == other.value

    def __hash__(self) -> int:
        return hash((self.is_string, self.value))

    def __repr__(self) -> str:
        return f"Property({self.to_string()!r})"
