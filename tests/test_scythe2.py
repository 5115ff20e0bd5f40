import pytest

from pedalprog.debug import FootswitchError, UsageError
from pedalprog.keymap import Modifier, MouseButton, encode_char, encode_key
from pedalprog.scythe2 import (
    EventType,
    Scythe2Config,
    build_config,
    checksum,
    describe_key,
    describe_pedal,
    describe_settings,
    main,
    setting_frames,
    update_frame,
)


def _as_report(payload: bytes) -> bytes:
    return (bytes(2) + payload[2:]).ljust(0x48, b"\x00")


def test_checksum_ignores_byte_seven():
    frame = bytearray(16)
    frame[0] = 3
    frame[7] = 200
    frame[10] = 4
    assert checksum(frame) == 7


def test_update_frame_header_and_checksum_invariant():
    frame = update_frame(bytes(0x48))
    assert frame[:3] == bytes([0x05, 0x96, 0xA5])
    assert len(frame) == 0x48
    assert frame[7] == (sum(frame) - frame[7]) % 256


def test_setting_frames_structure():
    payload = bytes(range(40))
    frames = setting_frames(payload)
    assert len(frames) == 6
    assert frames[0][3] == 0x2C and frames[0][6] == 0x02
    assert frames[1] == frames[2]
    assert frames[1][3] == 0x26
    assert frames[1][6] == 0x20
    assert frames[1][8:8 + 0x20] == payload[:0x20]
    assert frames[3][5] == 0x20
    assert frames[3][6] == 8
    assert frames[3][8:16] == payload[0x20:]
    assert frames[-1][3:7] == bytes([0x2B, 0x14, 0x23, 0x00])
    for frame in frames:
        assert frame[7] == (sum(frame) - frame[7]) % 256


def test_setting_frames_keep_stale_bytes():
    payload = bytes([0xAA] * 0x20 + [0x01])
    frames = setting_frames(payload)
    assert frames[3][8] == 0x01
    assert frames[3][9:8 + 0x20] == bytes([0xAA] * 0x1F)


def test_default_payload():
    payload = Scythe2Config().payload()
    assert payload[0] == len(payload)
    assert payload[1] == 0
    record = bytes([1, EventType.SINGLE_KEY_REPEAT, 0xF0, encode_key("a")])
    assert payload[2:] == record * 6


def test_string_payload():
    config = Scythe2Config()
    config.add_string("ab")
    payload = config.payload()
    assert payload[2:8] == bytes(
        [2, EventType.MULTIPLE_KEYS, 0xF0, encode_char("a"), 0xF0, encode_char("b")]
    )
    assert payload[0] + payload[1] * 256 == len(payload)


def test_modifier_before_key_is_kept():
    config = Scythe2Config()
    config.select(3)
    config.add_modifier("ctrl")
    config.set_key_norepeat("x")
    payload = config.payload()
    third = payload[2 + 8:2 + 12]
    assert third == bytes(
        [1, EventType.SINGLE_KEY_NOREPEAT, 0xF0 | Modifier.CTRL, encode_key("x")]
    )


def test_mouse_button_record():
    config = Scythe2Config()
    config.set_mouse_button("mouse_right")
    assert config.payload()[2:6] == bytes(
        [1, EventType.SINGLE_KEY_REPEAT, 0xC0, MouseButton.RIGHT]
    )


def test_second_type_on_same_pedal_is_rejected():
    config = Scythe2Config()
    config.set_key_repeat("a")
    with pytest.raises(UsageError):
        config.add_string("abc")


def test_too_long_string():
    with pytest.raises(FootswitchError, match="exceeds 255"):
        Scythe2Config().add_string("a" * 256)


def test_unknown_key_and_modifier():
    with pytest.raises(FootswitchError):
        Scythe2Config().set_key_repeat("nosuchkey")
    with pytest.raises(FootswitchError):
        Scythe2Config().add_modifier("hyper")


def test_select_range():
    with pytest.raises(UsageError):
        Scythe2Config().select(7)


def test_describe_key_mouse_and_modifiers():
    assert describe_key(0xC0, MouseButton.LEFT | MouseButton.RIGHT) == (
        "mouse left\nmouse right"
    )
    mod = 0xF0 | Modifier.CTRL | Modifier.SHIFT
    assert describe_key(mod, encode_key("x")) == "ctrl+shift+x"


def test_describe_pedal_unknown_type():
    assert describe_pedal(1, bytes([1, 0x99, 0xF0, 4])) is None


def test_describe_settings_round_trip_default():
    lines = list(describe_settings(_as_report(Scythe2Config().payload())))
    assert len(lines) == 6
    assert lines[0] == "Pedal 1 (single key repeat): a"
    assert lines[5].startswith("Pedal 6 ")


def test_describe_settings_round_trip_string():
    config = build_config(["-1", "-s", "hello", "-2", "-a", "q"])
    lines = list(describe_settings(_as_report(config.payload())))
    assert lines[0] == "Pedal 1 (multiple keys): hello"
    assert lines[1] == "Pedal 2 (single key no repeat): q"


def test_describe_settings_stops_at_overflow():
    config = Scythe2Config()
    config.add_string("x" * 40)
    assert list(describe_settings(_as_report(config.payload()[:0x48]))) == []


def test_build_config_rejects_read_flag():
    with pytest.raises(FootswitchError, match="-r"):
        build_config(["-k", "a", "-r"])


def test_main_usage_errors(capsys):
    assert main([]) == 1
    assert "Usage: scythe2" in capsys.readouterr().err
    assert main(["-1", "-k", "a", "-k", "b"]) == 1
    assert "Invalid combination of options" in capsys.readouterr().err
    assert main(["-z"]) == 1