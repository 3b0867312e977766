"""Tests for building the script module and the architecture extension hook."""

import pytest

from netbind.arch import ArchFamily, get_arch, list_arches
from netbind.arch import generic
from netbind.bindings import build_bindings, module_name, wrap_python
from netbind.bindings.conversion import StringConverter, conv_to_str
from netbind.netlist import PlaceStrength, PortType


class TestWrapPython:
    """Tests for the registration entry point."""

    def test_module_name_follows_arch(self):
        module = wrap_python("generic")
        assert module.__name__ == "netbind_generic"
        assert module_name("ice40") == "netbind_ice40"

    def test_core_names_exported(self):
        """Enums, classes, collections and free functions are all exported."""
        module = wrap_python("generic")
        for name in (
            "GraphicElementType",
            "GraphicElementStyle",
            "PortType",
            "PlaceStrength",
            "GraphicElement",
            "Loc",
            "BaseCtx",
            "CellInfo",
            "PortInfo",
            "NetInfo",
            "PortRef",
            "PipMap",
            "Region",
            "HierarchicalCell",
            "AttrMap",
            "PortMap",
            "IdIdMap",
            "WireMap",
            "PortRefVector",
            "CellMap",
            "NetMap",
            "RegionMap",
            "HierarchyMap",
            "BelSet",
            "WireSet",
            "parse_json",
            "load_design",
        ):
            assert name in module.__all__, name

    def test_enum_values_at_module_level(self):
        module = wrap_python("generic")
        assert module.PORT_OUT is PortType.PORT_OUT
        assert module.STRENGTH_LOCKED is PlaceStrength.STRENGTH_LOCKED
        assert module.PortType is PortType

    def test_arch_names_exported(self):
        """The generic hook adds its own classes."""
        module = wrap_python("generic")
        assert "Context" in module.__all__
        assert "ArchArgs" in module.__all__
        assert module.ArchArgs().device == "generic"

    def test_each_build_is_independent(self):
        """Two builds do not share wrapper classes."""
        a = wrap_python("generic")
        b = wrap_python("generic")
        assert a.CellInfo is not b.CellInfo

    def test_unknown_arch(self):
        with pytest.raises(KeyError, match="Architecture 'nope' not found"):
            wrap_python("nope")


class TestArchRegistry:
    """Tests for architecture discovery."""

    def test_generic_is_builtin(self):
        assert "generic" in list_arches()
        assert get_arch("generic") is generic.ARCH

    def test_create_context_default_args(self):
        ctx = generic.ARCH.create_context()
        assert isinstance(ctx, generic.Context)
        assert ctx.args.device == "generic"


def _toy_family(hook):
    return ArchFamily(
        name="toy",
        args_type=generic.ArchArgs,
        context_type=generic.Context,
        bel_id=generic.BelId,
        wire_id=generic.WireId,
        pip_id=generic.PipId,
        wrap_python=hook,
    )


class TestExtensionHook:
    """Tests for the per-architecture hook."""

    def test_hook_called_once_after_core(self):
        """The hook runs once, with every core binding already in place."""
        calls = []

        def hook(bindings):
            calls.append(sorted(bindings.namespace))

        build_bindings(_toy_family(hook))
        assert len(calls) == 1
        assert "CellInfo" in calls[0]
        assert "WireSet" in calls[0]

    def test_hook_registers_converters_and_functions(self):
        """A family can add conversions and functions with the same templates."""

        class TileConverter(StringConverter):
            type_name = "Tile"

            def to_str(self, ctx, value):
                return f"X{value[0]}Y{value[1]}"

        def hook(bindings):
            bindings.register_converter(tuple, TileConverter())
            bindings.add_function("origin", lambda: (0, 0), [], conv_to_str(tuple))

        module = build_bindings(_toy_family(hook)).build_module()
        assert module.__name__ == "netbind_toy"
        assert module.origin() == "X0Y0"

    def test_hook_cannot_shadow_core_names(self):
        def hook(bindings):
            bindings.export("CellInfo", object())

        with pytest.raises(ValueError, match="already exported"):
            build_bindings(_toy_family(hook))
