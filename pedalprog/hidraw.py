"""Minimal access to USB HID devices through the Linux hidraw interface."""

from __future__ import annotations

import fcntl
import os
from collections.abc import Iterable
from pathlib import Path

from .debug import FootswitchError

SYSFS_HIDRAW = Path("/sys/class/hidraw")
DEV_DIR = Path("/dev")

_IOC_READ_WRITE = 3
_HIDIOCSFEATURE = 0x06
_HIDIOCGFEATURE = 0x07


def _hid_ioctl(nr: int, size: int) -> int:
    return (_IOC_READ_WRITE << 30) | (size << 16) | (ord("H") << 8) | nr


class DeviceNotFound(FootswitchError):
    """No matching HID device could be opened."""


class HidDevice:
    """An open hidraw device node."""

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)
        self._fd: int | None = os.open(self.path, os.O_RDWR)

    def _require_fd(self) -> int:
        if self._fd is None:
            raise FootswitchError("device is closed")
        return self._fd

    def write(self, data: bytes) -> int:
        """Write one output report; the first byte is the report number."""
        fd = self._require_fd()
        try:
            return os.write(fd, bytes(data))
        except OSError as exc:
            raise FootswitchError(f"error writing data ({exc.strerror})") from exc

    def read(self, size: int) -> bytes:
        """Read one input report of at most ``size`` bytes."""
        fd = self._require_fd()
        try:
            return os.read(fd, size)
        except OSError as exc:
            raise FootswitchError(f"error reading data ({exc.strerror})") from exc

    def send_feature_report(self, data: bytes) -> int:
        """Send a feature report; the first byte is the report number."""
        fd = self._require_fd()
        buffer = bytearray(data)
        try:
            return fcntl.ioctl(fd, _hid_ioctl(_HIDIOCSFEATURE, len(buffer)), buffer, True)
        except OSError as exc:
            raise FootswitchError(
                f"error sending feature report ({exc.strerror})"
            ) from exc

    def get_feature_report(self, report_id: int, size: int) -> bytes:
        """Fetch a feature report, including its report number byte."""
        fd = self._require_fd()
        buffer = bytearray(size)
        buffer[0] = report_id
        try:
            count = fcntl.ioctl(fd, _hid_ioctl(_HIDIOCGFEATURE, size), buffer, True)
        except OSError as exc:
            raise FootswitchError(
                f"error getting feature report ({exc.strerror})"
            ) from exc
        return bytes(buffer[:count])

    def close(self) -> None:
        """Close the device node; closing twice is harmless."""
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    def __enter__(self) -> HidDevice:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def _read_ids(uevent: Path) -> tuple[int, int] | None:
    try:
        text = uevent.read_text()
    except OSError:
        return None
    for line in text.splitlines():
        key, _, value = line.partition("=")
        if key == "HID_ID":
            parts = value.split(":")
            if len(parts) == 3:
                try:
                    return int(parts[1], 16), int(parts[2], 16)
                except ValueError:
                    return None
    return None


def _interface_number(device_dir: Path) -> int | None:
    try:
        text = (device_dir.resolve().parent / "bInterfaceNumber").read_text()
        return int(text.strip(), 16)
    except (OSError, ValueError):
        return None


def find_device(vid: int, pid: int, interface: int | None) -> HidDevice:
    """Open the first hidraw node with the given ids and interface number.

    An ``interface`` of ``None`` accepts any interface.
    """
    try:
        entries = sorted(SYSFS_HIDRAW.iterdir())
    except OSError:
        entries = []
    for entry in entries:
        device_dir = entry / "device"
        if _read_ids(device_dir / "uevent") != (vid, pid):
            continue
        if interface is not None and _interface_number(device_dir) != interface:
            continue
        try:
            return HidDevice(DEV_DIR / entry.name)
        except OSError:
            continue
    raise DeviceNotFound(f"No device with VID:PID={vid:04x}:{pid:04x}")


def open_first(ids: Iterable[tuple[int, int]], interface: int | None) -> HidDevice:
    """Open the first device found from a list of (vid, pid) pairs."""
    for vid, pid in ids:
        try:
            return find_device(vid, pid, interface)
        except DeviceNotFound:
            continue
    raise DeviceNotFound(
        "Cannot find footswitch with one of the supported VID:PID.\n"
        "Check that the device is connected and that you have the correct "
        "permissions to access it."
    )