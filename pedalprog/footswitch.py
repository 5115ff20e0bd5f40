"""Programming and reading of the three-pedal PCsensor footswitch."""

from __future__ import annotations

import enum
import getopt
import re
import sys
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from .debug import FootswitchError, UsageError, hexdump
from .hidraw import open_first
from .keymap import (
    Modifier,
    decode_byte,
    encode_key,
    encode_string,
    parse_modifier,
    parse_mouse_button,
)

SUPPORTED_IDS = (
    (0x0C45, 0x7403),
    (0x0C45, 0x7404),
    (0x413D, 0x2107),
    (0x1A86, 0xE026),
    (0x3553, 0xB001),
)
INTERFACE = 1

START_PACKET = bytes([0x01, 0x80, 0x08, 0x00, 0x00, 0x00, 0x00, 0x00])
MAX_STRING = 38
_MAX_DATA = 40
_WRITE_DELAY = 0.03
_START_DELAY = 1.0

USAGE = (
    "Usage: footswitch [-123] [-r] [-s <string>] [-S <raw_string>] [-ak <key>] "
    "[-m <modifier>] [-b <button>] [-xyw <XYW>]\n"
    "   -r          - read all pedals\n"
    "   -1          - program the first pedal\n"
    "   -2          - program the second pedal (default)\n"
    "   -3          - program the third pedal\n"
    "   -s string   - append the specified string\n"
    "   -S rstring  - append the specified raw string (hex numbers delimited with spaces)\n"
    "   -a key      - append the specified key\n"
    "   -k key      - write the specified key\n"
    "   -m modifier - (l_,r_)ctrl|shift|alt|win\n"
    "   -b button   - mouse_left|mouse_middle|mouse_right\n"
    "   -x X        - move the mouse cursor horizontally by X pixels\n"
    "   -y Y        - move the mouse cursor vertically by Y pixels\n"
    "   -w W        - move the mouse wheel by W\n\n"
    "You cannot mix -sSa options with -kmbxyw options for one and the same pedal\n"
)

_HEX = re.compile(r"\s*([+-]?)(?:0[xX])?([0-9a-fA-F]+)")
_INT = re.compile(r"\s*([+-]?\d+)")

_MODIFIER_NAMES = (
    (Modifier.CTRL, "l_ctrl"),
    (Modifier.SHIFT, "l_shift"),
    (Modifier.ALT, "l_alt"),
    (Modifier.WIN, "l_win"),
    (Modifier.R_CTRL, "r_ctrl"),
    (Modifier.R_SHIFT, "r_shift"),
    (Modifier.R_ALT, "r_alt"),
    (Modifier.R_WIN, "r_win"),
)
_MOUSE_NAMES = {1: "mouse_left", 2: "mouse_right", 4: "mouse_middle"}


class PedalType(enum.IntFlag):
    """What a pedal sends; KEY and MOUSE may be combined, STRING stands alone."""

    KEY = 1
    MOUSE = 2
    STRING = 4


def _combination_error() -> UsageError:
    return UsageError("Invalid combination of options")


@dataclass
class Pedal:
    """Header and data bytes for one pedal, numbered from 1."""

    number: int
    header: bytearray = field(init=False)
    data: bytearray = field(init=False)
    length: int = field(init=False, default=8)

    def __post_init__(self) -> None:
        self.header = bytearray([0x01, 0x81, 0x08, self.number, 0, 0, 0, 0])
        self.data = bytearray(48)
        self.data[0] = 0x08

    def set_type(self, new_type: PedalType) -> None:
        """Set or extend the pedal type, refusing invalid combinations."""
        current = self.data[1]
        if current == 0:
            self.data[1] = new_type
            if new_type == PedalType.STRING:
                self.length = 2
            return
        if new_type == PedalType.STRING:
            if current != PedalType.STRING:
                raise _combination_error()
            return
        if new_type in (PedalType.KEY, PedalType.MOUSE):
            if current == PedalType.STRING:
                raise _combination_error()
            self.data[1] = current | new_type
            return
        raise _combination_error()

    def append_string_data(self, data: bytes) -> None:
        """Append encoded keys to the pedal's string."""
        if self.length + len(data) > _MAX_DATA:
            raise FootswitchError(
                f"The size of the accumulated string must be <= {MAX_STRING}"
            )
        self.data[self.length:self.length + len(data)] = data
        self.length += len(data)
        self.header[2] = self.length
        self.data[0] = self.length

    def packets(self) -> list[bytes]:
        """The 8-byte packets that program this pedal, header first."""
        payload = bytes(self.data[:self.length])
        chunks = [
            payload[start:start + 8].ljust(8, b"\x00")
            for start in range(0, len(payload), 8)
        ] or [bytes(8)]
        return [bytes(self.header), *chunks]


def _parse_hex(token: str) -> int:
    match = _HEX.match(token)
    if match is None:
        raise FootswitchError(f"'{token}' is invalid hex number")
    value = int(match.group(2), 16)
    if match.group(1) == "-":
        value = -value
    return value & 0xFF


def _to_int(value: str | int) -> int:
    if isinstance(value, int):
        return value
    match = _INT.match(value)
    return int(match.group(1)) if match else 0


def _to_signed_byte(name: str, value: str | int) -> int:
    number = _to_int(value)
    if not -128 <= number <= 127:
        raise FootswitchError(f"'{name}' must be in [-128, 127]")
    return number & 0xFF


def _signed(byte: int) -> int:
    return byte - 256 if byte > 127 else byte


@dataclass
class PedalConfig:
    """The configuration for all three pedals, built option by option."""

    pedals: list[Pedal] = field(default_factory=lambda: [Pedal(n) for n in (1, 2, 3)])
    current: int = 1

    @property
    def pedal(self) -> Pedal:
        return self.pedals[self.current]

    def select(self, number: int) -> None:
        """Make pedal ``number`` (1 to 3) the one that options apply to."""
        if not 1 <= number <= len(self.pedals):
            raise UsageError(f"Invalid pedal number {number}")
        self.current = number - 1

    def add_string(self, text: str) -> None:
        self.pedal.set_type(PedalType.STRING)
        if len(text) > MAX_STRING:
            raise FootswitchError(f"The size of each string must be <= {MAX_STRING}")
        try:
            encoded = encode_string(text)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        self.pedal.append_string_data(encoded)

    def add_raw_string(self, text: str) -> None:
        """Append hex byte values separated by spaces or commas."""
        self.pedal.set_type(PedalType.STRING)
        tokens = [token for token in re.split(r"[ ,]", text) if token]
        if len(tokens) > MAX_STRING:
            raise FootswitchError(f"The size of each string must be <= {MAX_STRING}")
        self.pedal.append_string_data(bytes(_parse_hex(token) for token in tokens))

    def add_string_key(self, key: str) -> None:
        self.pedal.set_type(PedalType.STRING)
        try:
            code = encode_key(key)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        self.pedal.append_string_data(bytes([code]))

    def set_key(self, key: str) -> None:
        self.pedal.set_type(PedalType.KEY)
        try:
            self.pedal.data[3] = encode_key(key)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None

    def add_modifier(self, name: str) -> None:
        try:
            modifier = parse_modifier(name)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        self.pedal.set_type(PedalType.KEY)
        self.pedal.data[2] |= modifier

    def set_mouse_button(self, name: str) -> None:
        try:
            button = parse_mouse_button(name)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        self.pedal.set_type(PedalType.MOUSE)
        self.pedal.data[4] = button

    def set_mouse_xyw(self, x: str | int | None, y: str | int | None,
                      w: str | int | None) -> None:
        """Set the mouse movement; values are in [-128, 127], ``None`` keeps one."""
        self.pedal.set_type(PedalType.MOUSE)
        for name, value, index in (("x", x, 5), ("y", y, 6), ("w", w, 7)):
            if value is not None:
                self.pedal.data[index] = _to_signed_byte(name, value)

    def packets(self) -> list[bytes]:
        """The start packet followed by every pedal's packets."""
        return [START_PACKET] + [p for pedal in self.pedals for p in pedal.packets()]


def describe_key(response: bytes) -> str:
    """Describe the modifier and key bytes of a pedal response."""
    parts = [name for bit, name in _MODIFIER_NAMES if response[2] & bit]
    if response[3]:
        return "".join(f"{name}+" for name in parts) + decode_byte(response[3])
    return "+".join(parts)


def describe_mouse(response: bytes) -> str:
    """Describe the mouse button and movement bytes of a pedal response."""
    button = _MOUSE_NAMES.get(response[4])
    movement = "X={} Y={} W={}".format(*(_signed(b) for b in response[5:8]))
    return f"{button} {movement}" if button else movement


def _describe_string(response: bytes, read_more: Callable[[], bytes] | None) -> str:
    remaining = response[0] - 2
    chunk, index = response, 2
    out = []
    while remaining > 0:
        if index == 8:
            if read_more is None:
                raise FootswitchError("expected 8 bytes, received: 0")
            chunk = read_more()
            if len(chunk) != 8:
                raise FootswitchError(f"expected 8 bytes, received: {len(chunk)}")
            index = 0
        name = decode_byte(chunk[index])
        out.append(f"<{name}>" if len(name) > 1 else name)
        remaining -= 1
        index += 1
    return "".join(out)


def describe_response(response: bytes,
                      read_more: Callable[[], bytes] | None) -> str | None:
    """Describe one pedal response, or return ``None`` if it is not understood.

    ``read_more`` supplies the following 8-byte chunks of a long string.
    """
    kind = response[1]
    if kind == 0:
        return "unconfigured"
    if kind in (1, 0x81):
        return describe_key(response)
    if kind == 2:
        return describe_mouse(response)
    if kind == 3:
        return f"{describe_key(response)} {describe_mouse(response)}"
    if kind == 4:
        return _describe_string(response, read_more)
    return None


def build_config(argv: list[str]) -> PedalConfig:
    """Build a pedal configuration from command-line options."""
    try:
        options, _ = getopt.gnu_getopt(argv, "123rs:S:a:k:m:b:x:y:w:")
    except getopt.GetoptError as exc:
        raise UsageError(str(exc)) from None
    config = PedalConfig()
    actions = {
        "-s": config.add_string,
        "-S": config.add_raw_string,
        "-a": config.add_string_key,
        "-k": config.set_key,
        "-m": config.add_modifier,
        "-b": config.set_mouse_button,
        "-x": lambda value: config.set_mouse_xyw(value, None, None),
        "-y": lambda value: config.set_mouse_xyw(None, value, None),
        "-w": lambda value: config.set_mouse_xyw(None, None, value),
    }
    for option, value in options:
        if option in ("-1", "-2", "-3"):
            config.select(int(option[1]))
        elif option == "-r":
            raise FootswitchError("Cannot use -r with other options")
        else:
            actions[option](value)
    return config


def _usb_write(device, data: bytes) -> None:
    device.write(data)
    time.sleep(_WRITE_DELAY)


def read_pedals(device) -> Iterator[str]:
    """Query each pedal and yield a line describing it."""
    for number in (1, 2, 3):
        _usb_write(device, bytes([0x01, 0x82, 0x08, number, 0, 0, 0, 0]))
        response = device.read(8).ljust(8, b"\x00")
        description = describe_response(response, lambda: device.read(8))
        if description is None:
            sys.stderr.write("Unknown response:\n" + hexdump(response))
            return
        yield f"[switch {number}]: {description}"


def write_pedals(device, config: PedalConfig) -> None:
    """Send the whole configuration to the device."""
    start, *rest = config.packets()
    _usb_write(device, start)
    time.sleep(_START_DELAY)
    for packet in rest:
        _usb_write(device, packet)


def main(argv: list[str] | None = None) -> int:
    """Run the footswitch command."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        if not args:
            raise UsageError("")
        if args == ["-r"]:
            with open_first(SUPPORTED_IDS, INTERFACE) as device:
                for line in read_pedals(device):
                    print(line)
            return 0
        config = build_config(args)
        with open_first(SUPPORTED_IDS, INTERFACE) as device:
            write_pedals(device, config)
    except UsageError as exc:
        if str(exc):
            print(exc, file=sys.stderr)
        sys.stderr.write(USAGE)
        return 1
    except FootswitchError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0