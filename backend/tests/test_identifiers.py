import pytest

from stockbook.domain.identifiers import (
    normalize_identifier, is_valid_imei, tac_of, format_tray_code, parse_tray_code, is_tray_code,
)


@pytest.mark.parametrize("value", ["353286110000001", "000000000000000"])
def test_valid_imei(value):
    assert is_valid_imei(value)


@pytest.mark.parametrize("value", [
    "",
    "35328611000000",        # 14 digits
    "3532861100000012",      # 16 digits
    "35328611000000A",
    "353286110000001\n",
    " 353286110000001",
    "３５３２８６１１００００００１",  # full-width digits are not ASCII
])
def test_invalid_imei(value):
    assert not is_valid_imei(value)


def test_normalize_strips_scanner_noise():
    assert normalize_identifier("  353286110000001\r\n") == "353286110000001"
    assert normalize_identifier(None) == ""


def test_tac_is_first_eight_characters():
    assert tac_of("353286110000001") == "35328611"


def test_tray_code_format():
    assert format_tray_code(1) == "TRAY001"
    assert format_tray_code(42) == "TRAY042"
    assert format_tray_code(1000) == "TRAY1000"
    with pytest.raises(ValueError):
        format_tray_code(0)


def test_tray_code_parse():
    assert parse_tray_code("TRAY010") == 10
    assert parse_tray_code("TRAY1000") == 1000
    for bad in ("TRAY01", "tray010", "BIN010", "TRAY010A", ""):
        assert not is_tray_code(bad)
        with pytest.raises(ValueError):
            parse_tray_code(bad)
