import pytest

from pedalprog.debug import FootswitchError, UsageError
from pedalprog.footswitch1p import (
    PedalReport,
    build_report,
    device_id_query,
    main,
    parse_device_id,
)
from pedalprog.keymap import Modifier, MouseButton, encode_key


def test_default_report_header_and_size():
    raw = PedalReport().to_bytes()
    assert len(raw) == 64
    assert raw[:4] == bytes([0x10, 0x03, 0x00, 0x00])
    assert raw[4:] == bytes(60)


def test_set_key():
    report = PedalReport()
    report.set_key("b")
    raw = report.to_bytes()
    assert raw[2] == 0x80
    assert raw[3] == 0x08
    assert raw[6] == encode_key("b")


def test_modifiers_accumulate():
    report = PedalReport()
    report.add_modifier("ctrl")
    report.add_modifier("r_shift")
    assert report.data[0] == Modifier.CTRL | Modifier.R_SHIFT
    assert report.command == 0x80


def test_mouse_button_sets_flag():
    report = PedalReport()
    report.set_mouse_button("mouse_left")
    assert report.command == 0x02
    assert report.size == 0x04
    assert report.data[0] == MouseButton.LEFT | 0x08


def test_mouse_xy_are_negated():
    report = PedalReport()
    report.set_mouse_xyw("5", None, None)
    report.set_mouse_xyw(None, -7, None)
    assert (report.data[1] + 5) % 256 == 0
    assert (report.data[2] - 7) % 256 == 0
    assert report.data[0] & 0x08


def test_mouse_wheel_kept_as_is():
    report = PedalReport()
    report.set_mouse_xyw(None, None, "3")
    assert report.data[3] == 3
    report.set_mouse_xyw(None, None, -1)
    assert report.data[3] == 0xFF


@pytest.mark.parametrize("value", ["128", "-129", 500])
def test_mouse_out_of_range(value):
    with pytest.raises(FootswitchError, match="must be in"):
        PedalReport().set_mouse_xyw(value, None, None)


def test_invalid_key_and_modifier():
    report = PedalReport()
    with pytest.raises(FootswitchError, match="Cannot encode key"):
        report.set_key("nosuchkey")
    with pytest.raises(FootswitchError, match="Invalid modifier"):
        report.add_modifier("hyper")


def test_device_id_query():
    raw = device_id_query()
    assert raw[:4] == bytes([0x22, 0x00, 0x00, 0x22])
    assert len(raw) == 64


def test_parse_device_id_round_trip():
    response = bytes([0x22, 0, 0, 0]) + (123456).to_bytes(8, "little") + bytes(52)
    assert parse_device_id(response) == 123456


def test_parse_device_id_unknown():
    assert parse_device_id(bytes([0x10]) + bytes(63)) is None


def test_build_report():
    report = build_report(["-k", "a", "-m", "alt"])
    assert report.data[2] == encode_key("a")
    assert report.data[0] == Modifier.ALT


def test_build_report_rejects_r():
    with pytest.raises(FootswitchError, match="Cannot use -r"):
        build_report(["-k", "a", "-r"])


def test_build_report_unknown_option():
    with pytest.raises(UsageError):
        build_report(["-q"])


def test_main_without_args(capsys):
    assert main([]) == 1
    assert "Usage: footswitch1p" in capsys.readouterr().err


def test_main_bad_modifier(capsys):
    assert main(["-m", "hyper"]) == 1
    assert "Invalid modifier 'hyper'" in capsys.readouterr().err