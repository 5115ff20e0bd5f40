import pytest

from pedalprog.debug import FootswitchError, UsageError, hexdump


def test_hexdump_empty():
    assert hexdump(b"") == "\n"


def test_hexdump_short_line():
    assert hexdump(bytes([0x01, 0x81, 0x08])) == "01 81 08 \n"


def test_hexdump_accepts_list_of_ints():
    assert hexdump([0x01, 0x81, 0x08]) == hexdump(b"\x01\x81\x08")


def test_hexdump_wraps_after_sixteen_bytes():
    lines = hexdump(bytes(range(17))).splitlines()
    assert len(lines) == 2
    assert len(lines[0].split()) == 16
    assert lines[1].split() == ["10"]


def test_hexdump_exact_multiple_has_no_empty_line():
    out = hexdump(bytes(range(32)))
    assert out.endswith(" \n")
    assert len(out.splitlines()) == 2


@pytest.mark.parametrize("data", [b"\x00", bytes(range(256)), b"\xff" * 40])
def test_hexdump_round_trip(data):
    assert bytes.fromhex(hexdump(data)) == data


def test_hexdump_rejects_out_of_range_values():
    with pytest.raises(ValueError):
        hexdump([256])


def test_usage_error_is_footswitch_error():
    error = UsageError("Invalid combination of options")
    assert str(error) == "Invalid combination of options"
    assert isinstance(error, FootswitchError)
    assert issubclass(UsageError, FootswitchError)