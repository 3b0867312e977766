"""Architecture families.

A family supplies the Context class for its devices, its ArchArgs, and a
hook that registers its identifier types with the script bindings. The
built-in families are listed in BUILTIN_ARCHES; others are found through
the ``netbind.arches`` entry point group, whose entries must load an
ArchFamily.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from netbind.bindings.registry import Bindings
    from netbind.context import BaseCtx

ENTRY_POINT_GROUP = "netbind.arches"

BUILTIN_ARCHES = {
    "generic": "netbind.arch.generic",
}


@dataclass
class ArchFamily:
    """What the core needs to know about an architecture family.

    ``bel_id``, ``wire_id`` and ``pip_id`` are the family's identifier
    types; the core binds fields of those types, and ``wrap_python``
    registers their string converters.
    """

    name: str
    args_type: type
    context_type: type[BaseCtx]
    bel_id: type
    wire_id: type
    pip_id: type
    wrap_python: Callable[[Bindings], None]

    def create_context(self, args: Any = None) -> BaseCtx:
        return self.context_type(args if args is not None else self.args_type())


def _entry_point_arches() -> dict[str, Any]:
    return {ep.name: ep for ep in entry_points(group=ENTRY_POINT_GROUP)}


def list_arches() -> list[str]:
    """Names of every known architecture family."""
    return sorted(set(BUILTIN_ARCHES) | set(_entry_point_arches()))


def get_arch(name: str) -> ArchFamily:
    """Load the architecture family called ``name``.

    Raises:
        KeyError: If no such family is known.
    """
    module_name = BUILTIN_ARCHES.get(name)
    if module_name is not None:
        family = importlib.import_module(module_name).ARCH
    else:
        ep = _entry_point_arches().get(name)
        if ep is None:
            raise KeyError(f"Architecture '{name}' not found (known: {', '.join(list_arches())})")
        family = ep.load()
    if not isinstance(family, ArchFamily):
        raise TypeError(f"Architecture '{name}' did not provide an ArchFamily")
    return family
