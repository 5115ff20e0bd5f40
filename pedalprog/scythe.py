"""Programming and reading of the Scythe three-pedal footswitch (0426:3011)."""

from __future__ import annotations

import getopt
import sys
import time
from collections.abc import Iterator
from dataclasses import dataclass, field

from .debug import FootswitchError, UsageError
from .hidraw import DeviceNotFound, find_device
from .keymap import Modifier, MouseButton, decode_byte, encode_key, parse_modifier, parse_mouse_button

VENDOR_ID = 0x0426
PRODUCT_ID = 0x3011

KEY_DATA = bytes([0x06, 0x00, 0x08, 0x01, 0x00, 0x00, 0x00, 0x00,
                  0x06, 0x00, 0x00, 0x00, 0xFF])
MOUSE_DATA = bytes([0x06, 0x00, 0x08, 0x04, 0x00, 0x00, 0x00, 0x00,
                    0x06, 0x00, 0x00, 0xFF])
KEY_SLOTS = (6, 7, 9, 10, 11)

_MOUSE_CODES = {
    MouseButton.LEFT: 0x81,
    MouseButton.RIGHT: 0x82,
    MouseButton.MIDDLE: 0x84,
    MouseButton.DOUBLE: 0x80,
}
_MOUSE_NAMES = {
    0x81: "mouse_left",
    0x82: "mouse_right",
    0x84: "mouse_middle",
    0x80: "mouse_double",
}
_MODIFIER_NAMES = (
    (Modifier.CTRL, "ctrl"),
    (Modifier.SHIFT, "shift"),
    (Modifier.ALT, "alt"),
    (Modifier.WIN, "win"),
)
_REPORT_DELAY = 0.2

USAGE = (
    "Usage: scythe [-123] [-r] [-a <key>] [-m <modifier>] [-b <button>]\n"
    "   -r          - read all pedals\n"
    "   -1          - program the first pedal\n"
    "   -2          - program the second pedal (default)\n"
    "   -3          - program the third pedal\n"
    "   -a key      - append the specified key\n"
    "   -m modifier - ctrl|shift|alt|win\n"
    "   -b button   - mouse_left|mouse_middle|mouse_right|mouse_double\n\n"
    "You cannot mix -a and -m options with -b option for one and the same pedal\n"
)


@dataclass
class _Slot:
    data: bytearray = field(default_factory=lambda: bytearray(16))
    length: int = 0

    def load(self, template: bytes) -> None:
        self.data[:len(template)] = template
        self.length = len(template)


def _combination_error() -> UsageError:
    return UsageError("Invalid combination of options")


@dataclass
class ScytheConfig:
    """The configuration of the three pedals, built option by option."""

    pedals: list[_Slot] = field(default_factory=lambda: [_Slot() for _ in range(3)])
    current: int = 1

    def select(self, number: int) -> None:
        """Make pedal ``number`` (1 to 3) the one that options apply to."""
        if not 1 <= number <= len(self.pedals):
            raise UsageError(f"Invalid pedal number {number}")
        self.current = number - 1

    def _key_slot(self) -> _Slot:
        slot = self.pedals[self.current]
        if slot.length == len(MOUSE_DATA):
            raise _combination_error()
        return slot

    def _prepare_key(self, slot: _Slot) -> None:
        if slot.length == 0:
            slot.load(KEY_DATA)
        slot.data[1] = self.current + 1

    def add_key(self, key: str) -> None:
        """Append a key; at most five keys fit on one pedal."""
        slot = self._key_slot()
        try:
            code = encode_key(key)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        self._prepare_key(slot)
        for index in KEY_SLOTS:
            if slot.data[index] == 0:
                slot.data[index] = code
                return
        raise FootswitchError("Cannot write more than 5 keys")

    def add_modifier(self, name: str) -> None:
        slot = self._key_slot()
        try:
            modifier = parse_modifier(name)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        self._prepare_key(slot)
        slot.data[4] |= modifier

    def set_mouse_button(self, name: str) -> None:
        try:
            button = parse_mouse_button(name)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        slot = self.pedals[self.current]
        if slot.length == len(KEY_DATA):
            raise _combination_error()
        if slot.length == 0:
            slot.load(MOUSE_DATA)
        slot.data[1] = self.current + 1
        slot.data[4] = _MOUSE_CODES[button]

    def reports(self) -> list[bytes]:
        """The 8-byte feature reports that program the device, in order."""
        nop = bytearray([0x06, 0x00, 0x00, 0xFF, 0x00, 0x00, 0x00, 0x00])
        out = [bytes(nop)]
        for number, slot in enumerate(self.pedals, start=1):
            if slot.length > 0:
                out.append(bytes(slot.data[0:8]))
                out.append(bytes(slot.data[8:16]))
            else:
                nop[1] = number
                out.append(bytes(nop))
        for number in (4, 5):
            nop[1] = number
            out.append(bytes(nop))
        out.append(bytes([0x06, 0xAA, 0xFF, 0xFF, 0x00, 0x00, 0x00, 0x00]))
        return out


def describe_pedal(response: bytes) -> str:
    """Describe the 8-byte feature report that a pedal answers with."""
    kind = response[1]
    if kind in _MOUSE_NAMES:
        return _MOUSE_NAMES[kind]
    if kind == 0xFF:
        return "undefined"
    parts = [name for bit, name in _MODIFIER_NAMES if kind & bit]
    for code in response[3:8]:
        if code == 0:
            break
        parts.append(decode_byte(code))
    return "+".join(parts)


def build_config(argv: list[str]) -> ScytheConfig:
    """Build a pedal configuration from command-line options."""
    try:
        options, _ = getopt.gnu_getopt(argv, "123ra:m:b:")
    except getopt.GetoptError as exc:
        raise UsageError(str(exc)) from None
    config = ScytheConfig()
    actions = {
        "-a": config.add_key,
        "-m": config.add_modifier,
        "-b": config.set_mouse_button,
    }
    for option, value in options:
        if option in ("-1", "-2", "-3"):
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
            "Cannot find Scythe pedal with VID:PID=0426:3011.\n"
            "Check that a Scythe device is connected and that you have the "
            "correct permissions to access it."
        ) from None


def read_pedals(device) -> Iterator[str]:
    """Query each pedal and yield a line describing it."""
    for number in (1, 2, 3):
        device.send_feature_report(bytes([0x06, 0xBB, number, 0, 0, 0, 0, 0]))
        response = device.get_feature_report(0x06, 8).ljust(8, b"\x00")
        yield f"[switch {number}]: {describe_pedal(response)}"


def write_pedals(device, config: ScytheConfig) -> None:
    """Send each frame of the configuration, noting failed sends on stderr."""
    for report in config.reports():
        try:
            device.send_feature_report(report)
        except FootswitchError:
            sys.stderr.write("Error sending feature report\n")
        time.sleep(_REPORT_DELAY)


def main(argv: list[str] | None = None) -> int:
    """Run the scythe command."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        if not args:
            raise UsageError("")
        if args == ["-r"]:
            with _open() as device:
                for line in read_pedals(device):
                    print(line)
            return 0
        config = build_config(args)
        with _open() as device:
            write_pedals(device, config)
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