"""Script host: installs the bindings module and runs user scripts."""

from __future__ import annotations

import argparse
import logging
import os
import runpy
import sys
from pathlib import Path
from typing import Any

from netbind.arch import get_arch, list_arches
from netbind.bindings.module import build_bindings
from netbind.context import BaseCtx
from netbind.design import parse_json_file
from netbind.exceptions import NetbindError
from netbind.log import setup_logging

logger = logging.getLogger(__name__)


class ScriptHost:
    """Runs scripts against the bindings of one architecture family.

    ``init`` must be called once before any script runs; it puts the
    module in ``sys.modules`` so scripts can also ``import`` it by name.
    """

    def __init__(self, arch_name: str = "generic") -> None:
        self.arch = get_arch(arch_name)
        self.bindings = None
        self.module = None

    def init(self):
        if self.module is not None:
            return self.module
        self.bindings = build_bindings(self.arch)
        self.module = self.bindings.build_module()
        sys.modules[self.module.__name__] = self.module
        # Scripts may import helpers that sit next to them
        cwd = os.getcwd()
        if cwd not in sys.path:
            sys.path.insert(0, cwd)
        logger.debug("installed module %s", self.module.__name__)
        return self.module

    def deinit(self) -> None:
        if self.module is None:
            return
        sys.modules.pop(self.module.__name__, None)
        self.module = None
        self.bindings = None

    def create_context(self, args: Any = None) -> BaseCtx:
        return self.arch.create_context(args)

    def script_globals(self, ctx: Any = None) -> dict[str, Any]:
        """Names a script starts with: everything the module exports, plus ``ctx``."""
        if self.module is None:
            raise RuntimeError("ScriptHost.init() must be called before running scripts")
        names = {name: getattr(self.module, name) for name in self.module.__all__}
        if ctx is not None:
            if isinstance(ctx, BaseCtx):
                ctx = self.bindings.wrap(ctx, ctx)
            names["ctx"] = ctx
        return names

    def execute_file(self, path: str | os.PathLike[str], ctx: Any = None) -> int:
        """Run the script at ``path``. Returns 0 on success, 1 if it raised.

        A missing script is fatal and exits the process.
        """
        init_globals = self.script_globals(ctx)
        path = Path(path)
        if not path.is_file():
            logger.error("Fatal error: file not found %s", path)
            raise SystemExit(1)
        logger.info("Executing %s", path)
        try:
            runpy.run_path(str(path), init_globals=init_globals, run_name="__main__")
        except Exception:
            logger.exception("Error occurred while executing Python script %s", path)
            return 1
        return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Run Python scripts against a netlist database"
    )
    arg_parser.add_argument(
        "scripts",
        type=Path,
        nargs="*",
        help="Scripts to execute, in order",
    )
    arg_parser.add_argument(
        "--arch",
        default="generic",
        help="Architecture family (default: generic)",
    )
    arg_parser.add_argument(
        "--list-arches",
        action="store_true",
        help="List the known architecture families and exit",
    )
    arg_parser.add_argument(
        "--json",
        type=Path,
        help="Yosys JSON netlist to load before running the scripts",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress messages",
    )
    arg_parser.add_argument(
        "--debug",
        action="store_true",
        help="Log debug messages",
    )
    arg_parser.add_argument(
        "--log",
        type=str,
        help="Also write the log to this file",
    )

    args = arg_parser.parse_args(argv)

    if args.list_arches:
        for name in list_arches():
            print(name)
        return 0

    level = logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING
    setup_logging(level, args.log)

    try:
        host = ScriptHost(args.arch)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1

    host.init()
    try:
        ctx = host.create_context()
        if args.json:
            try:
                parse_json_file(args.json, ctx)
            except NetbindError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1

        status = 0
        for script in args.scripts:
            if host.execute_file(script, ctx):
                status = 1
        return status
    finally:
        host.deinit()


if __name__ == "__main__":
    sys.exit(main())
