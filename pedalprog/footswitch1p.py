"""Programming and reading of the single-pedal footswitch (5131:2019)."""

from __future__ import annotations

import getopt
import re
import sys
import time
from dataclasses import dataclass, field

from .debug import FootswitchError, UsageError
from .hidraw import open_first
from .keymap import encode_key, parse_modifier, parse_mouse_button

SUPPORTED_IDS = ((0x5131, 0x2019),)
INTERFACE = 3

REPORT_DEVICE_ID = 0x22
REPORT_SET_CODE = 0x10
PEDAL_PIN_3_P15 = 0x03
REPORT_SIZE = 64

_KEY_COMMAND = 0x80
_KEY_SIZE = 0x08
_MOUSE_COMMAND = 0x02
_MOUSE_SIZE = 0x04
_MOUSE_FLAG = 0x08
_WRITE_DELAY = 0.03

USAGE = (
    "Usage: footswitch1p [-r] [-k <key>] [-m <modifier>] [-b <button>] [-xyw <XYW>]\n"
    "   -r          - read all pedals\n"
    "   -k key      - write the specified key\n"
    "   -m modifier - (l_,r_)ctrl|shift|alt|win\n"
    "   -b button   - mouse_left|mouse_middle|mouse_right\n"
    "   -x X        - move the mouse cursor horizontally by X pixels\n"
    "   -y Y        - move the mouse cursor vertically by Y pixels\n"
    "   -w W        - move the mouse wheel by W\n\n"
    "You cannot mix -km options with -bxyw options.\n"
)

_INT = re.compile(r"\s*([+-]?\d+)")


def _to_int(value: str | int) -> int:
    if isinstance(value, int):
        return value
    match = _INT.match(value)
    return int(match.group(1)) if match else 0


def _checked(name: str, value: str | int) -> int:
    number = _to_int(value)
    if not -128 <= number <= 127:
        raise FootswitchError(f"'{name}' must be in [-128, 127]")
    return number


@dataclass
class PedalReport:
    """The 64-byte output report that configures the pedal."""

    report_id: int = REPORT_SET_CODE
    pin: int = PEDAL_PIN_3_P15
    command: int = 0
    size: int = 0
    data: bytearray = field(default_factory=lambda: bytearray(8))

    def _as_key(self) -> None:
        self.command = _KEY_COMMAND
        self.size = _KEY_SIZE

    def _as_mouse(self) -> None:
        self.command = _MOUSE_COMMAND
        self.size = _MOUSE_SIZE

    def set_key(self, key: str) -> None:
        try:
            code = encode_key(key)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        self._as_key()
        self.data[2] = code

    def add_modifier(self, name: str) -> None:
        try:
            modifier = parse_modifier(name)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        self._as_key()
        self.data[0] |= modifier

    def set_mouse_button(self, name: str) -> None:
        try:
            button = parse_mouse_button(name)
        except ValueError as exc:
            raise FootswitchError(str(exc)) from None
        self._as_mouse()
        self.data[0] |= button | _MOUSE_FLAG

    def set_mouse_xyw(self, x: str | int | None, y: str | int | None,
                      w: str | int | None) -> None:
        """Set mouse movement; X and Y are sent negated, ``None`` keeps a value."""
        self._as_mouse()
        self.data[0] |= _MOUSE_FLAG
        if x is not None:
            self.data[1] = -_checked("x", x) & 0xFF
        if y is not None:
            self.data[2] = -_checked("y", y) & 0xFF
        if w is not None:
            self.data[3] = _checked("w", w) & 0xFF

    def to_bytes(self) -> bytes:
        """The full report, padded with zeros to 64 bytes."""
        head = bytes([self.report_id, self.pin, self.command, self.size])
        return (head + bytes(self.data)).ljust(REPORT_SIZE, b"\x00")


def device_id_query() -> bytes:
    """The report that asks the pedal for its device id."""
    return PedalReport(report_id=REPORT_DEVICE_ID, pin=0, command=0,
                       size=0x22).to_bytes()


def parse_device_id(response: bytes) -> int | None:
    """Return the device id in a response, or ``None`` if it is not one."""
    if not response or response[0] != REPORT_DEVICE_ID:
        return None
    return int.from_bytes(bytes(response[4:12]).ljust(8, b"\x00"), "little")


def build_report(argv: list[str]) -> PedalReport:
    """Build the pedal report from command-line options."""
    try:
        options, _ = getopt.gnu_getopt(argv, "rk:m:b:x:y:w:")
    except getopt.GetoptError as exc:
        raise UsageError(str(exc)) from None
    report = PedalReport()
    actions = {
        "-k": report.set_key,
        "-m": report.add_modifier,
        "-b": report.set_mouse_button,
        "-x": lambda value: report.set_mouse_xyw(value, None, None),
        "-y": lambda value: report.set_mouse_xyw(None, value, None),
        "-w": lambda value: report.set_mouse_xyw(None, None, value),
    }
    for option, value in options:
        if option == "-r":
            raise FootswitchError("Cannot use -r with other options")
        actions[option](value)
    return report


def _usb_write(device, data: bytes) -> None:
    device.write(data)
    time.sleep(_WRITE_DELAY)


def main(argv: list[str] | None = None) -> int:
    """Run the footswitch1p command."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        if not args:
            raise UsageError("")
        if args == ["-r"]:
            with open_first(SUPPORTED_IDS, INTERFACE) as device:
                _usb_write(device, device_id_query())
                response = device.read(REPORT_SIZE)
            device_id = parse_device_id(response)
            if device_id is None:
                sys.stderr.write("Unknown response:\n")
            else:
                print(f"Device ID: {device_id}")
            return 0
        report = build_report(args)
        with open_first(SUPPORTED_IDS, INTERFACE) as device:
            _usb_write(device, report.to_bytes())
    except UsageError as exc:
        if str(exc):
            print(exc, file=sys.stderr)
        sys.stderr.write(USAGE)
        return 1
    except FootswitchError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0