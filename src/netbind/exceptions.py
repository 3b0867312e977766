"""Error taxonomy shared by the native database and the script bindings."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Kinds of failure that may reach a script."""

    INVALID_IDENTIFIER = "invalid_identifier"
    UNSUPPORTED_CONVERSION = "unsupported_conversion"
    IO_ERROR = "io_error"
    PARSE_ERROR = "parse_error"
    NATIVE_INVARIANT_FAILURE = "native_invariant_failure"


class NetbindError(Exception):
    """Base class for every catchable netbind error."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidIdentifier(NetbindError, KeyError):
    """A string has no interned entry (or no object) in the context."""

    kind = ErrorKind.INVALID_IDENTIFIER


class UnsupportedConversion(NetbindError, TypeError):
    """A conversion direction is not implemented for a type."""

    kind = ErrorKind.UNSUPPORTED_CONVERSION


class NetlistIOError(NetbindError, OSError):
    """A netlist file could not be opened."""

    kind = ErrorKind.IO_ERROR


class NetlistParseError(NetbindError, ValueError):
    """The netlist front end rejected its input."""

    kind = ErrorKind.PARSE_ERROR


class NativeInvariantFailure(NetbindError, AssertionError):
    """Script-side form of a database AssertionFailure."""

    kind = ErrorKind.NATIVE_INVARIANT_FAILURE


class AssertionFailure(Exception):
    """Raised by the database when one of its own invariants does not hold.

    This never reaches a script directly; the binding layer turns it into
    a NativeInvariantFailure with the same message.
    """


def ensure(condition: object, message: str) -> None:
    """Raise AssertionFailure with ``message`` unless ``condition`` holds."""
    if not condition:
        raise AssertionFailure(f"Assertion failure: {message}")
