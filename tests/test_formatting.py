import math

import pytest

from utils.formatting import (
    format_carton_range,
    format_cbm,
    format_decimal,
    format_money,
    format_qty,
    format_weight,
    is_cbm_input,
    origin_to_coo_text,
    parse_cbm_input,
    round_cbm,
    split_last_carton_marker,
)


class TestCbm:

    @pytest.mark.parametrize(
        "value, expected",
        [
            (1.2, "1.2"),
            (2, "2"),
            (1.23, "1.23"),
            (1.2300, "1.23"),
            (0.123456, "0.1235"),
            (0.00004, "0"),
            (None, "0"),
            (math.nan, "0"),
        ],
    )
    def test_format_cbm(self, value, expected):
        assert format_cbm(value) == expected

    def test_round_cbm_half_up(self):
        assert round_cbm(0.00005) == 0.0001
        assert round_cbm("1.23456") == 1.2346

    @pytest.mark.parametrize("text", ["", "1", "1.", "0.1234", "12.5"])
    def test_accepted_input(self, text):
        assert is_cbm_input(text)

    @pytest.mark.parametrize("text", ["0.12345", "-1", "1,5", "abc", "1.2.3"])
    def test_rejected_input(self, text):
        assert not is_cbm_input(text)

    def test_parse_cbm_input(self):
        assert parse_cbm_input("0.1234") == 0.1234
        assert parse_cbm_input("2.") == 2.0
        assert parse_cbm_input("") is None
        assert parse_cbm_input(".") is None
        assert parse_cbm_input("0.12345") is None


class TestNumbers:

    def test_money(self):
        assert format_money(1234.5) == "1,234.50"
        assert format_money(0) == "0.00"
        assert format_money(None) == "0.00"

    def test_qty(self):
        assert format_qty(1200) == "1,200"
        assert format_qty(12.0) == "12"
        assert format_qty(12.5) == "12.5"
        assert format_qty(1234.567) == "1,234.57"

    def test_weight_has_one_decimal(self):
        assert format_weight(10) == "10.0"
        assert format_weight(1234.56) == "1,234.6"
        assert format_weight("") == "0.0"

    def test_weight_rounds_halves_up(self):
        assert format_weight(0.25) == "0.3"
        assert format_weight(1.25) == "1.3"

    def test_decimal(self):
        assert format_decimal(0.05, 3) == "0.050"


class TestDocumentText:

    @pytest.mark.parametrize(
        "start, end, expected",
        [(3, 5, "3-5"), (6, 6, "6"), (None, None, ""), (4, None, "4"), (None, 7, "7")],
    )
    def test_carton_range(self, start, end, expected):
        assert format_carton_range(start, end) == expected

    def test_last_carton_marker(self):
        assert split_last_carton_marker("Knit top (LAST CTN)") == ("Knit top", True)
        assert split_last_carton_marker("Knit top (last ctn)") == ("Knit top", True)
        assert split_last_carton_marker("Knit top") == ("Knit top", False)
        assert split_last_carton_marker(None) == ("", False)

    @pytest.mark.parametrize(
        "origin, expected",
        [
            ("VN_HCM", "MADE IN VIETNAM"),
            ("qingdao", "MADE IN CHINA"),
            ("KR_SEOUL", "MADE IN KOREA"),
            ("INDONESIA_JKT", "MADE IN INDONESIA JKT"),
            ("", ""),
        ],
    )
    def test_coo_text(self, origin, expected):
        assert origin_to_coo_text(origin) == expected
