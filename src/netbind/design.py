"""File-load entry points."""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

from netbind.context import BaseCtx
from netbind.exceptions import NetlistIOError
from netbind.json_frontend import parse_json


def parse_json_file(filename: str | os.PathLike[str], ctx: BaseCtx) -> None:
    """Load the JSON netlist ``filename`` into an existing context.

    Raises:
        NetlistIOError: If the file cannot be opened.
        NetlistParseError: If the front end rejects the contents.
    """
    filename = os.fspath(filename)
    try:
        stream = open(filename)
    except OSError as e:
        raise NetlistIOError(f"failed to open file {filename}") from e
    with stream:
        parse_json(stream, filename, ctx)


def load_design(filename: str | os.PathLike[str], args: Any, create_context: Callable[[Any], BaseCtx]) -> BaseCtx:
    """Build a new context from ``args`` and load ``filename`` into it.

    Nothing is returned when loading fails; the half-built context is
    dropped.
    """
    ctx = create_context(args)
    parse_json_file(filename, ctx)
    return ctx
