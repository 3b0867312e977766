"""Tests for interned identifiers."""

import pytest

from netbind.context import BaseCtx
from netbind.exceptions import ErrorKind, InvalidIdentifier
from netbind.ids import IdString, IdStringTable


class TestIdStringTable:
    """Tests for the interning arena."""

    def test_empty_string_is_index_zero(self):
        """The empty string is pre-interned as index 0."""
        table = IdStringTable()
        assert table.lookup("") == IdString(0)
        assert len(table) == 1

    def test_intern_is_idempotent(self):
        """Interning the same string twice gives the same identifier."""
        table = IdStringTable()
        a = table.intern("clk")
        b = table.intern("clk")
        assert a == b
        assert len(table) == 2

    def test_intern_distinct_strings(self):
        """Different strings get different indices."""
        table = IdStringTable()
        assert table.intern("a") != table.intern("b")

    def test_lookup_does_not_intern(self):
        """A strict lookup of an unknown string raises and adds nothing."""
        table = IdStringTable()
        with pytest.raises(InvalidIdentifier, match="not a known identifier"):
            table.lookup("missing")
        assert "missing" not in table
        assert len(table) == 1

    def test_lookup_index_out_of_range(self):
        """Indices that were never handed out are rejected."""
        table = IdStringTable()
        with pytest.raises(InvalidIdentifier):
            table.lookup_index(42)


class TestIdString:
    """Tests for the identifier value type."""

    def test_string_needs_context(self):
        """An identifier resolves to its string only through a context."""
        ctx = BaseCtx()
        ident = ctx.id("lut0")
        assert ident.str(ctx) == "lut0"
        assert ctx.name_of(ident) == "lut0"

    def test_same_index_means_different_strings_in_different_contexts(self):
        """An index is only meaningful relative to its own table."""
        ctx_a = BaseCtx()
        ctx_b = BaseCtx()
        a = ctx_a.id("first")
        ctx_b.id("other")
        assert a.str(ctx_b) == "other"

    def test_default_is_empty(self):
        """The default identifier is empty and falsy."""
        assert IdString().empty()
        assert not IdString()
        assert IdString(3)

    def test_hashable_and_frozen(self):
        """Identifiers are usable as dict keys and cannot be changed."""
        d = {IdString(1): "x"}
        assert d[IdString(1)] == "x"
        with pytest.raises(AttributeError):
            IdString(1).index = 2  # type: ignore[misc]

    def test_repr_has_no_string(self):
        """The repr shows the index only."""
        assert repr(IdString(7)) == "IdString(7)"


class TestInvalidIdentifier:
    """Tests for the InvalidIdentifier error."""

    def test_is_key_error_with_plain_message(self):
        """It is a KeyError whose str() is not quoted."""
        err = InvalidIdentifier("'q' is not a known identifier")
        assert isinstance(err, KeyError)
        assert str(err) == "'q' is not a known identifier"
        assert err.kind is ErrorKind.INVALID_IDENTIFIER
