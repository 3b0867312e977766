"""Tests for the generic architecture family."""

import pytest

from netbind.arch.generic import BelId, Context, WireId
from netbind.bindings import wrap_python
from netbind.exceptions import AssertionFailure, InvalidIdentifier, NativeInvariantFailure
from netbind.netlist import Loc, PlaceStrength


@pytest.fixture
def nb():
    return wrap_python("generic")


@pytest.fixture
def ctx(nb, tmp_path):
    """A 2x1 device with one LUT bel per tile and a pip between the tiles."""
    path = tmp_path / "empty.json"
    path.write_text('{"modules": {"top": {}}}')
    ctx = nb.load_design(str(path), None)
    for x in range(2):
        ctx.addWire(f"X{x}/O", "LOCAL", x, 0)
        ctx.addWire(f"X{x}/I", "LOCAL", x, 0)
        ctx.addBel(f"X{x}/LUT", "LUT4", nb.Loc(x, 0, 0), False)
        ctx.addBelOutput(f"X{x}/LUT", "O", f"X{x}/O")
        ctx.addBelInput(f"X{x}/LUT", "I0", f"X{x}/I")
    ctx.addPip("X0/O->X1/I", "PIP", "X0/O", "X1/I", 0.1, nb.Loc(1, 0, 0))
    return ctx


class TestDeviceQueries:
    """Tests for bel, wire and pip queries."""

    def test_bels(self, ctx, nb):
        assert ctx.getBels() == ["X0/LUT", "X1/LUT"]
        assert ctx.getBelType("X1/LUT") == "LUT4"
        loc = ctx.getBelLocation("X1/LUT")
        assert (loc.x, loc.y, loc.z) == (1, 0, 0)
        assert ctx.getBelByLocation(nb.Loc(0, 0, 0)) == "X0/LUT"
        assert ctx.getBelByLocation(nb.Loc(5, 5, 5)) is None

    def test_bel_location_is_a_copy(self, ctx):
        loc = ctx.getBelLocation("X0/LUT")
        loc.x = 9
        assert ctx.getBelLocation("X0/LUT").x == 0

    def test_bel_pins(self, ctx):
        assert ctx.getBelPinWire("X0/LUT", "O") == "X0/O"
        assert ctx.getBelPinWire("X0/LUT", "LUT4") is None

    def test_wires_and_pips(self, ctx):
        assert sorted(ctx.getWires()) == ["X0/I", "X0/O", "X1/I", "X1/O"]
        assert ctx.getPips() == ["X0/O->X1/I"]
        assert ctx.getPipsDownhill("X0/O") == ["X0/O->X1/I"]
        assert ctx.getPipsUphill("X1/I") == ["X0/O->X1/I"]
        assert ctx.getPipsUphill("X0/O") == []
        assert ctx.getPipSrcWire("X0/O->X1/I") == "X0/O"
        assert ctx.getPipDstWire("X0/O->X1/I") == "X1/I"

    def test_unknown_names(self, ctx):
        """Names that are not bels are invalid identifiers, interned or not."""
        with pytest.raises(InvalidIdentifier):
            ctx.getBelType("NOPE")
        with pytest.raises(InvalidIdentifier, match="no bel named 'X0/O'"):
            ctx.getBelType("X0/O")
        with pytest.raises(InvalidIdentifier):
            ctx.getWireByName("X0/LUT")

    def test_duplicate_bel(self, ctx, nb):
        with pytest.raises(NativeInvariantFailure, match="duplicate bel name"):
            ctx.addBel("X0/LUT", "LUT4", nb.Loc(7, 7, 0), False)
        with pytest.raises(NativeInvariantFailure, match="duplicate bel location"):
            ctx.addBel("X9/LUT", "LUT4", nb.Loc(0, 0, 0), False)


class TestIdentifierConversion:
    """Tests for the bel, wire and pip converters."""

    def test_round_trips(self, ctx):
        bindings = type(ctx).bindings
        native = ctx.base
        conv = bindings.converter(BelId)
        for bel in native.get_bels():
            assert conv.from_str(native, conv.to_str(native, bel)) == bel
        for name in ("X0/LUT", "X1/LUT"):
            assert conv.to_str(native, conv.from_str(native, name)) == name

    def test_empty_string_is_none(self, ctx):
        bindings = type(ctx).bindings
        assert bindings.converter(WireId).from_str(ctx.base, "") is None
        assert bindings.converter(WireId).to_str(ctx.base, None) == ""


class TestPlacement:
    """Tests for binding cells to bels."""

    def test_bind_and_unbind(self, ctx, nb):
        cell = ctx.createCell("lut", "LUT4")
        assert ctx.checkBelAvail("X0/LUT")
        ctx.bindBel("X0/LUT", cell, "STRENGTH_WEAK")
        assert not ctx.checkBelAvail("X0/LUT")
        assert ctx.getBoundBelCell("X0/LUT") == cell
        assert cell.bel == "X0/LUT"
        assert cell.belStrength is nb.STRENGTH_WEAK

        ctx.unbindBel("X0/LUT")
        assert ctx.checkBelAvail("X0/LUT")
        assert ctx.getBoundBelCell("X0/LUT") is None
        assert cell.bel is None

    def test_bind_occupied_bel(self, ctx, nb):
        a = ctx.createCell("a", "LUT4")
        b = ctx.createCell("b", "LUT4")
        ctx.bindBel("X0/LUT", a, nb.STRENGTH_STRONG)
        with pytest.raises(NativeInvariantFailure, match="already bound"):
            ctx.bindBel("X0/LUT", b, nb.STRENGTH_STRONG)

    def test_set_bel_field(self, ctx):
        cell = ctx.createCell("lut", "LUT4")
        cell.bel = "X1/LUT"
        assert cell.bel == "X1/LUT"
        cell.bel = ""
        assert cell.bel is None


class TestRouting:
    """Tests for binding wires and pips to nets."""

    def test_bind_wire(self, ctx, nb):
        net = ctx.createNet("n")
        ctx.bindWire("X0/O", net, "STRENGTH_STRONG")
        assert not ctx.checkWireAvail("X0/O")
        assert ctx.getBoundWireNet("X0/O") == net
        assignment = net.wires["X0/O"]
        assert assignment.pip is None
        assert assignment.strength is nb.STRENGTH_STRONG

    def test_bind_pip(self, ctx, nb):
        net = ctx.createNet("n")
        ctx.bindWire("X0/O", net, nb.STRENGTH_WEAK)
        ctx.bindPip("X0/O->X1/I", net, nb.STRENGTH_WEAK)
        assert sorted(net.wires) == ["X0/O", "X1/I"]
        assert net.wires["X1/I"].pip == "X0/O->X1/I"

    def test_unbind_wire(self, ctx, nb):
        net = ctx.createNet("n")
        ctx.bindPip("X0/O->X1/I", net, nb.STRENGTH_WEAK)
        ctx.unbindWire("X1/I")
        assert "X1/I" not in net.wires
        assert ctx.checkWireAvail("X1/I")
        ctx.bindPip("X0/O->X1/I", net, nb.STRENGTH_WEAK)

    def test_delete_from_wire_map(self, ctx, nb):
        """The wire map is a live view of the net's routing."""
        net = ctx.createNet("n")
        ctx.bindWire("X0/O", net, nb.STRENGTH_WEAK)
        del net.wires["X0/O"]
        assert len(ctx.nets["n"].wires) == 0

    def test_pip_map_strength(self, ctx, nb):
        net = ctx.createNet("n")
        ctx.bindWire("X0/O", net, nb.STRENGTH_WEAK)
        net.wires["X0/O"].strength = "STRENGTH_LOCKED"
        assert ctx.nets["n"].wires["X0/O"].strength is nb.STRENGTH_LOCKED


class TestRegions:
    """Tests for region constraints."""

    def test_rectangular_region(self, ctx):
        region = ctx.createRectangularRegion("left", 0, 0, 0, 0)
        assert region.name == "left"
        assert region.constr_bels
        assert list(region.bels) == ["X0/LUT"]
        assert "X1/LUT" not in region.bels
        assert ctx.region["left"] == region

    def test_region_sets_are_live(self, ctx):
        region = ctx.createRectangularRegion("left", 0, 0, 0, 0)
        region.bels.add("X1/LUT")
        ctx.addBelToRegion("left", "X0/LUT")
        assert sorted(ctx.region["left"].bels) == ["X0/LUT", "X1/LUT"]
        region.bels.discard("X0/LUT")
        assert list(ctx.region["left"].bels) == ["X1/LUT"]
        region.wires.add("X0/O")
        assert "X0/O" in region.wires

    def test_non_string_set_membership(self, ctx):
        region = ctx.createRectangularRegion("left", 0, 0, 0, 0)
        assert 5 not in region.bels
        assert None not in region.wires
        region.bels.discard(5)
        assert list(region.bels) == ["X0/LUT"]

    def test_constraint_flags_are_independent(self, ctx):
        region = ctx.createRegion("r")
        region.constr_wires = True
        assert region.constr_wires
        assert not region.constr_bels
        assert not region.constr_pips

    def test_constrain_cell(self, ctx):
        cell = ctx.createCell("lut", "LUT4")
        ctx.createRegion("r")
        ctx.constrainCellToRegion("lut", "r")
        assert cell.region == ctx.region["r"]


class TestNativeContext:
    """Tests for the generic context used directly."""

    def test_bind_wire_twice(self):
        ctx = Context()
        wire = ctx.add_wire(ctx.id("w"), ctx.id("LOCAL"), 0, 0)
        net = ctx.create_net(ctx.id("n"))
        ctx.bind_wire(wire, net, PlaceStrength.STRENGTH_WEAK)
        with pytest.raises(AssertionFailure, match="already bound"):
            ctx.bind_wire(wire, net, PlaceStrength.STRENGTH_WEAK)

    def test_pip_with_unknown_wire(self):
        ctx = Context()
        src = ctx.add_wire(ctx.id("a"), ctx.id("LOCAL"), 0, 0)
        with pytest.raises(AssertionFailure, match="unknown wire"):
            ctx.add_pip(ctx.id("p"), ctx.id("PIP"), src, WireId(ctx.id("b")), 0.0, Loc())
