import pytest

from pedalprog import hidraw
from pedalprog.debug import FootswitchError
from pedalprog.hidraw import DeviceNotFound, HidDevice, find_device, open_first


@pytest.fixture
def fake_sysfs(tmp_path, monkeypatch):
    sys_root = tmp_path / "class"
    dev_root = tmp_path / "dev"
    usb = tmp_path / "usb"
    sys_root.mkdir()
    dev_root.mkdir()

    def add(name, vid, pid, iface):
        intf = usb / f"{name}-if"
        intf.mkdir(parents=True)
        (intf / "bInterfaceNumber").write_text(f"{iface:02x}\n")
        hid = intf / "hid"
        hid.mkdir()
        (hid / "uevent").write_text(
            f"DRIVER=hid-generic\nHID_ID=0003:{vid:08X}:{pid:08X}\nHID_NAME=pedal\n"
        )
        node = sys_root / name
        node.mkdir()
        (node / "device").symlink_to(hid)
        (dev_root / name).write_bytes(b"")
        return dev_root / name

    monkeypatch.setattr(hidraw, "SYSFS_HIDRAW", sys_root)
    monkeypatch.setattr(hidraw, "DEV_DIR", dev_root)
    return add


def test_write_goes_to_node(tmp_path):
    node = tmp_path / "node"
    node.write_bytes(b"")
    with HidDevice(node) as dev:
        assert dev.write(b"\x01\x80\x08\x00") == 4
    assert node.read_bytes() == b"\x01\x80\x08\x00"


def test_read_returns_bytes(tmp_path):
    node = tmp_path / "node"
    node.write_bytes(bytes(range(10)))
    with HidDevice(node) as dev:
        assert dev.read(8) == bytes(range(8))


def test_closed_device_rejects_io(tmp_path):
    node = tmp_path / "node"
    node.write_bytes(b"")
    with HidDevice(node) as dev:
        pass
    with pytest.raises(FootswitchError):
        dev.write(b"\x00")
    dev.close()


def test_feature_report_on_plain_file_fails(tmp_path):
    node = tmp_path / "node"
    node.write_bytes(b"")
    with HidDevice(node) as dev:
        with pytest.raises(FootswitchError, match="feature report"):
            dev.send_feature_report(b"\x06\x00\x00\xff\x00\x00\x00\x00")
        with pytest.raises(FootswitchError, match="feature report"):
            dev.get_feature_report(6, 8)


def test_find_device_matches_interface(fake_sysfs):
    fake_sysfs("hidraw0", 0x0C45, 0x7403, 0)
    wanted = fake_sysfs("hidraw1", 0x0C45, 0x7403, 1)
    with find_device(0x0C45, 0x7403, 1) as dev:
        assert dev.path == wanted


def test_find_device_any_interface(fake_sysfs):
    first = fake_sysfs("hidraw0", 0x0426, 0x3011, 0)
    with find_device(0x0426, 0x3011, None) as dev:
        assert dev.path == first


def test_find_device_missing(fake_sysfs):
    fake_sysfs("hidraw0", 0x0C45, 0x7403, 1)
    with pytest.raises(DeviceNotFound):
        find_device(0x0C45, 0x7404, 1)


def test_open_first_tries_each(fake_sysfs):
    wanted = fake_sysfs("hidraw3", 0x413D, 0x2107, 1)
    ids = [(0x0C45, 0x7403), (0x413D, 0x2107)]
    with open_first(ids, 1) as dev:
        assert dev.path == wanted


def test_open_first_none_found(fake_sysfs):
    with pytest.raises(DeviceNotFound, match="Cannot find footswitch"):
        open_first([(0x0C45, 0x7403)], 1)


def test_device_not_found_is_fatal_error(fake_sysfs):
    fake_sysfs("hidraw0", 0x0C45, 0x7403, 0)
    with pytest.raises(FootswitchError) as info:
        find_device(0x0C45, 0x7403, 1)
    assert isinstance(info.value, DeviceNotFound)