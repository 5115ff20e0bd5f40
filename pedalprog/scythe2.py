"""Programming and reading of the Scythe six-pedal footswitch (055a:0998)."""

from __future__ import annotations

import enum
import getopt
import sys
import time
from collections.abc import Iterator
from dataclasses import dataclass, field

from .debug import FootswitchError, UsageError
from .hidraw import DeviceNotFound, find_device
from .keymap import (
    Modifier,
    MouseButton,
    decode_byte,
    encode_char,
    encode_key,
    parse_modifier,
    parse_mouse_button,
)

VENDOR_ID = 0x055A
PRODUCT_ID = 0x0998

MAX_KEYS = 255
PEDAL_COUNT = 6
FRAME_SIZE = 0x48
CHUNK_SIZE = 0x20
FRAME_HEADER = bytes([0x05, 0x96, 0xA5])
REPORT_ID = 0x05

KEY_MOD = 0xF0
MOUSE_MOD = 0xC0
DEFAULT_CODE = 0x04

_REPORT_DELAY = 0.2

USAGE = (
    "Usage: scythe2 [-123456] [-r] [-k <key>] [-a <key>] [-m <modifier>] [-b <button>]\n"
    "   -r          - read all pedals\n"
    "   -1          - program the first pedal\n"
    "   -2          - program the second pedal (default)\n"
    "   -3          - program the third pedal\n"
    "   -4          - program the fourth pedal\n"
    "   -5          - program the fifth pedal\n"
    "   -6          - program the sixth pedal\n"
    "   -s string   - append the specified string\n"
    "   -a key      - write the specified key (no repeat)\n"
    "   -k key      - write the specified key (repeat)\n"
    "   -m modifier - ctrl|shift|alt|win\n"
    "   -b button   - mouse_left|mouse_middle|mouse_right|mouse_double\n"
)

_MODIFIER_NAMES = (
    (Modifier.CTRL, "ctrl"),
    (Modifier.SHIFT, "shift"),
    (Modifier.ALT, "alt"),
    (Modifier.WIN, "win"),
)


class EventType(enum.IntEnum):
    """What a pedal sends when pressed."""

    NONE = 0
    SINGLE_KEY_REPEAT = 0x10
    SINGLE_KEY_NOREPEAT = 0x20
    MULTIPLE_KEYS = 0x30


_TYPE_LABELS = {
    EventType.SINGLE_KEY_REPEAT: "single key repeat",
    EventType.SINGLE_KEY_NOREPEAT: "single key no repeat",
    EventType.MULTIPLE_KEYS: "multiple keys",
}


def checksum(frame: bytes | bytearray) -> int:
    """The byte sum of a frame modulo 256, counting byte 7 as zero."""
    return (sum(frame) - frame[7]) & 0xFF


def update_frame(frame: bytes | bytearray) -> bytes:
    """Stamp the update header and checksum onto a frame and return it."""
    stamped = bytearray(frame)
    stamped[0:3] = FRAME_HEADER
    stamped[7] = checksum(stamped)
    return bytes(stamped)


def setting_frames(payload: bytes) -> list[bytes]:
    """The frames that upload ``payload`` as the device's settings.

    One buffer is reused from frame to frame, so bytes beyond a short
    chunk keep what the previous chunk left there.
    """
    buffer = bytearray(FRAME_SIZE)
    buffer[3] = 0x2C
    buffer[6] = 0x02
    frames = [update_frame(buffer)]
    for offset in range(0, len(payload), CHUNK_SIZE):
        chunk = payload[offset:offset + CHUNK_SIZE]
        buffer[3] = 0x26
        buffer[4] = (offset >> 8) & 0xFF
        buffer[5] = offset & 0xFF
        buffer[6] = len(chunk)
        buffer[8:8 + len(chunk)] = chunk
        frame = update_frame(buffer)
        frames.extend([frame, frame])
    buffer[3] = 0x2B
    buffer[4] = 0x14
    buffer[5] = 0x23
    buffer[6] = 0x00
    frames.append(update_frame(buffer))
    return frames


@dataclass
class _Pedal:
    type: EventType = EventType.NONE
    count: int = 0
    mods: bytearray = field(default_factory=lambda: bytearray(MAX_KEYS))
    codes: bytearray = field(default_factory=lambda: bytearray(MAX_KEYS))

    def claim(self, new_type: EventType) -> None:
        if self.type != EventType.NONE:
            raise UsageError("Invalid combination of options")
        self.type = new_type

    def record(self) -> bytes:
        if self.type == EventType.NONE:
            return bytes([1, EventType.SINGLE_KEY_REPEAT, KEY_MOD, DEFAULT_CODE])
        pairs = bytes(
            byte
            for mod, code in zip(self.mods[:self.count], self.codes[:self.count])
            for byte in (mod, code)
        )
        return bytes([self.count, self.type]) + pairs


@dataclass
class Scythe2Config:
    """The configuration of all six pedals, built option by option."""

    pedals: list[_Pedal] = field(
        default_factory=lambda: [_Pedal() for _ in range(PEDAL_COUNT)]
    )
    current: int = 0

    @property
    def pedal(self) -> _Pedal:
        return self.pedals[self.current]

    def select(self, number: int) -> None:
        """Make pedal ``number`` (1 to 6) the one that options apply to."""
        if not 1 <= number <= len(self.pedals):
            raise UsageError(f"Invalid pedal number {number}")
        self.current = number - 1

    def add_string(self, text: str) -> None:
        """Program the pedal to type ``text``; unknown characters become 0."""
        pedal = self.pedal
        pedal.claim(EventType.MULTIPLE_KEYS)
        if len(text) > MAX_KEYS:
            raise FootswitchError(f"The string length exceeds {MAX_KEYS}")
        pedal.count = len(text)
        for index, ch in enumerate(text):
            try:
                code = encode_char(ch)
            except ValueError:
                code = 0
            pedal.mods[index] = KEY_MOD
            pedal.codes[index] = code

    def _set_single_key(self, key: str, event: EventType) -> None:
        pedal = self.pedal
        pedal.claim(event)
        try:
            code = encode_key(key)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        pedal.count = 1
        pedal.mods[0] |= KEY_MOD
        pedal.codes[0] = code

    def set_key_norepeat(self, key: str) -> None:
        self._set_single_key(key, EventType.SINGLE_KEY_NOREPEAT)

    def set_key_repeat(self, key: str) -> None:
        self._set_single_key(key, EventType.SINGLE_KEY_REPEAT)

    def add_modifier(self, name: str) -> None:
        try:
            modifier = parse_modifier(name)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        self.pedal.mods[0] |= modifier

    def set_mouse_button(self, name: str) -> None:
        pedal = self.pedal
        pedal.claim(EventType.SINGLE_KEY_REPEAT)
        try:
            button = parse_mouse_button(name)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        pedal.count = 1
        pedal.mods[0] = MOUSE_MOD
        pedal.codes[0] = button

    def payload(self) -> bytes:
        """The settings block: a little-endian length, then one record per pedal.

        Pedals left unconfigured send the key 'a' with repeat.
        """
        body = b"".join(pedal.record() for pedal in self.pedals)
        length = len(body) + 2
        return bytes([length % 256, length // 256]) + body


def describe_key(mod: int, code: int) -> str:
    """Describe a modifier and key code pair, or a mouse button."""
    if mod == MOUSE_MOD:
        parts = []
        if code & MouseButton.LEFT:
            parts.append("mouse left")
        if code & MouseButton.RIGHT:
            parts.append("mouse right")
        return "\n".join(parts)
    prefix = "".join(f"{name}+" for bit, name in _MODIFIER_NAMES if mod & bit)
    return prefix + decode_byte(code)


def describe_pedal(number: int, data: bytes) -> str | None:
    """Describe one pedal record, or return ``None`` for an unknown type."""
    count, kind = data[0], data[1]
    if kind not in _TYPE_LABELS:
        return None
    label = f"Pedal {number} ({_TYPE_LABELS[EventType(kind)]}): "
    if kind == EventType.MULTIPLE_KEYS:
        return label + "".join(decode_byte(data[3 + i * 2]) for i in range(count))
    return label + describe_key(data[2], data[3])


def describe_settings(buffer: bytes) -> Iterator[str]:
    """Yield descriptions of the pedal records found in a settings report.

    Records that do not fit within the report are not shown.
    """
    data = bytes(buffer).ljust(FRAME_SIZE, b"\x00")
    index = 2
    for number in range(1, PEDAL_COUNT + 1):
        if index >= FRAME_SIZE:
            break
        length = data[index] * 2 + 2
        if index + length > FRAME_SIZE:
            break
        description = describe_pedal(number, data[index:index + length])
        if description is not None:
            yield description
        index += length


def build_config(argv: list[str]) -> Scythe2Config:
    """Build a pedal configuration from command-line options."""
    try:
        options, _ = getopt.gnu_getopt(argv, "123456rs:a:k:m:b:")
    except getopt.GetoptError as exc:
        raise UsageError(str(exc)) from None
    config = Scythe2Config()
    actions = {
        "-s": config.add_string,
        "-a": config.set_key_norepeat,
        "-k": config.set_key_repeat,
        "-m": config.add_modifier,
        "-b": config.set_mouse_button,
    }
    for option, value in options:
        if option[1].isdigit():
            config.select(int(option[1]))
        elif option == "-r":
            raise FootswitchError("Cannot use -r with other options")
        else:
            actions[option](value)
    return config


def _open():
    try:
        return find_device(VENDOR_ID, PRODUCT_ID, None)
    except DeviceNotFound:
        raise DeviceNotFound(
            "Cannot find Scythe pedal with VID:PID=055a:0998.\n"
            "Check that a Scythe device is connected and that you have the "
            "correct permissions to access it."
        ) from None


def _send(device, frame: bytes) -> None:
    try:
        device.send_feature_report(frame)
    except FootswitchError:
        sys.stderr.write("Error sending feature report\n")
    time.sleep(_REPORT_DELAY)


def _read_pedals(device) -> Iterator[str]:
    query = bytearray(FRAME_SIZE)
    query[3] = 0x5A
    _send(device, update_frame(query))
    response = device.get_feature_report(REPORT_ID, FRAME_SIZE)
    yield from describe_settings(response)


def _write_pedals(device, config: Scythe2Config) -> None:
    _send(device, update_frame(bytes(FRAME_SIZE)))
    for frame in setting_frames(config.payload()):
        _send(device, frame)


def main(argv: list[str] | None = None) -> int:
    """Run the scythe2 command."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        if not args:
            raise UsageError("")
        if args == ["-r"]:
            with _open() as device:
                for line in _read_pedals(device):
                    print(line)
            return 0
        config = build_config(args)
        with _open() as device:
            _write_pedals(device, config)
        print("Done. Unplug the footswitch and then plug it back again.")
    except UsageError as exc:
        if str(exc):
            print(exc, file=sys.stderr)
        sys.stderr.write(USAGE)
        return 1
    except FootswitchError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0