"""Parsing helpers."""

from netbind.parsing.property_lexer import PropertyLexer

__all__ = [
    "PropertyLexer",
]
