"""
Tests for Split LAST CTN and for splitting cartons off a line.
"""

import pytest

from conftest import make_line
from domain.errors import ValidationError
from domain.models import LastCartonOverride
from services.line_splitter import (
    last_carton_override_from_input,
    split_last_carton,
    split_off_cartons,
    suggest_last_carton_override,
)


@pytest.fixture
def five_carton_line():
    return make_line(
        id="L1", po_no="PO-1", style_no="ST-1", description="Knit top",
        cartons=5, carton_no_from=1, carton_no_to=5, qty=100,
        nw_per_carton=10.0, gw_per_carton=11.0, cbm_per_carton=0.05,
    )


@pytest.fixture
def override():
    return LastCartonOverride(qty=10, nw_per_carton=2.0, gw_per_carton=2.5, cbm_per_carton=0.012345)


class TestSplitLastCarton:

    def test_bulk_and_last_parts(self, five_carton_line, override):
        bulk, last = split_last_carton([five_carton_line], "L1", override)

        assert (bulk.cartons, bulk.carton_no_from, bulk.carton_no_to, bulk.qty) == (4, 1, 4, 100)
        assert (last.cartons, last.carton_no_from, last.carton_no_to, last.qty) == (1, 5, 5, 10)

    def test_cartons_and_range_are_conserved(self, five_carton_line, override):
        bulk, last = split_last_carton([five_carton_line], "L1", override)

        assert bulk.cartons + last.cartons == five_carton_line.cartons
        assert bulk.carton_no_to + 1 == last.carton_no_from == last.carton_no_to
        assert last.carton_no_to == five_carton_line.carton_no_to

    def test_last_part_takes_override_values(self, five_carton_line, override):
        _, last = split_last_carton([five_carton_line], "L1", override)

        assert last.id == "L1__LAST5"
        assert last.nw_per_carton == 2.0
        assert last.gw_per_carton == 2.5
        assert last.cbm_per_carton == 0.0123
        assert last.description == "Knit top (LAST CTN)"

    def test_bulk_keeps_per_carton_values(self, five_carton_line, override):
        bulk, _ = split_last_carton([five_carton_line], "L1", override)

        assert bulk.nw_per_carton == 10.0
        assert bulk.total_nw == 40.0
        assert bulk.description == "Knit top"

    def test_spliced_in_place(self, five_carton_line, override):
        before = make_line(id="before", po_no="PO-0", cartons=1)
        after = make_line(id="after", po_no="PO-2", cartons=1)

        result = split_last_carton([before, five_carton_line, after], "L1", override)

        assert [ln.id for ln in result] == ["before", "L1", "L1__LAST5", "after"]
        assert result[0] is before
        assert result[3] is after

    def test_splitting_twice_gives_unique_ids(self, five_carton_line, override):
        once = split_last_carton([five_carton_line], "L1", override)
        twice = split_last_carton(once, "L1", override)

        ids = [ln.id for ln in twice]
        assert ids == ["L1", "L1__LAST4", "L1__LAST5"]
        assert len(set(ids)) == len(ids)
        assert [(ln.carton_no_from, ln.carton_no_to) for ln in twice] == [(1, 3), (4, 4), (5, 5)]

    def test_single_carton_is_rejected(self, override):
        line = make_line(id="one", cartons=1, carton_no_from=3, carton_no_to=3)

        with pytest.raises(ValidationError) as exc:
            split_last_carton([line], "one", override)
        assert exc.value.line_id == "one"

    def test_unset_range_is_rejected(self, override):
        line = make_line(id="x", cartons=3)

        with pytest.raises(ValidationError):
            split_last_carton([line], "x", override)

    def test_inconsistent_range_is_rejected(self, override):
        line = make_line(id="x", cartons=3, carton_no_from=1, carton_no_to=4)
        lines = [line]

        with pytest.raises(ValidationError):
            split_last_carton(lines, "x", override)
        assert lines == [line]

    def test_unknown_or_deleted_line_is_rejected(self, five_carton_line, override):
        deleted = make_line(id="d", cartons=2, carton_no_from=1, carton_no_to=2, is_deleted=True)

        with pytest.raises(ValidationError):
            split_last_carton([five_carton_line], "nope", override)
        with pytest.raises(ValidationError):
            split_last_carton([deleted], "d", override)

    def test_suggested_override(self, five_carton_line):
        prefill = suggest_last_carton_override(
            make_line(cartons=3, qty=100, nw_per_carton=1.5, gw_per_carton=2.0, cbm_per_carton=0.1)
        )

        assert prefill.qty == 33
        assert prefill.nw_per_carton == 1.5
        assert prefill.cbm_per_carton == 0.1

    def test_override_from_dialog_input(self):
        override = last_carton_override_from_input(10, "2", 2.5, " 0.0123 ")

        assert override == LastCartonOverride(qty=10, nw_per_carton=2.0, gw_per_carton=2.5, cbm_per_carton=0.0123)
        assert last_carton_override_from_input(1, 1, 1, "").cbm_per_carton == 0.0

    @pytest.mark.parametrize("cbm_text", ["0.12345", "abc", "-0.1"])
    def test_mistyped_cbm_is_rejected(self, cbm_text):
        with pytest.raises(ValidationError) as exc:
            last_carton_override_from_input(10, 2, 2.5, cbm_text, line_id="L1")
        assert exc.value.line_id == "L1"


class TestSplitOffCartons:

    def _lines(self):
        return [
            make_line(id="L1", po_no="PO-1", description="Pants", cartons=10, qty=200,
                      carton_no_from=1, carton_no_to=10, nw_per_carton=5.0,
                      gw_per_carton=6.0, line_no=1),
            make_line(id="L2", po_no="PO-1", cartons=2, qty=20, line_no=4),
        ]

    def test_qty_and_cartons_are_moved(self):
        result = split_off_cartons(self._lines(), "L1", split_cartons=3, split_qty=50)
        remainder, split = result[0], result[1]

        assert (remainder.cartons, remainder.qty) == (7, 150)
        assert (split.cartons, split.qty) == (3, 50)
        assert remainder.qty + split.qty == 200

    def test_new_line_number_and_cleared_ranges(self):
        result = split_off_cartons(
            self._lines(), "L1", split_cartons=3, split_qty=50,
            split_gw_per_carton=4.0, description_suffix="(SAMPLE)",
        )
        remainder, split = result[0], result[1]

        assert split.line_no == 5
        assert split.id == "L1__5"
        assert split.gw_per_carton == 4.0
        assert split.nw_per_carton == 5.0
        assert split.description == "Pants (SAMPLE)"
        assert (remainder.carton_no_from, remainder.carton_no_to) == (None, None)
        assert (split.carton_no_from, split.carton_no_to) == (None, None)
        assert [ln.id for ln in result] == ["L1", "L1__5", "L2"]

    @pytest.mark.parametrize(
        "split_cartons, split_qty",
        [(0, 10), (3, 0), (10, 10), (3, 200)],
    )
    def test_out_of_range_split_is_rejected(self, split_cartons, split_qty):
        with pytest.raises(ValidationError):
            split_off_cartons(self._lines(), "L1", split_cartons, split_qty)
