# pedalprog

Command-line tools for programming USB foot switches. A pedal can be set to
send a key, a key combination, a mouse action or a whole string when it is
pressed. The settings are stored in the device itself, so nothing has to
keep running once it is programmed.

Four commands are installed, one for each family of devices:

| Command        | Devices (VID:PID)                                                          |
|----------------|----------------------------------------------------------------------------|
| `footswitch`   | three-pedal devices: 0c45:7403, 0c45:7404, 413d:2107, 1a86:e026, 3553:b001 |
| `footswitch1p` | single-pedal devices: 5131:2019                                            |
| `scythe`       | Scythe three-pedal devices: 0426:3011                                      |
| `scythe2`      | Scythe devices with up to six pedals: 055a:0998                            |

Every command prints its usage text and exits with status 1 when it is run
without arguments or with an invalid combination of options. Errors are
reported on standard error with exit status 1.

## Installation

```
pip install .
```

The devices are reached through the Linux hidraw interface: the commands
look up matching devices under `/sys/class/hidraw` and open the
corresponding `/dev/hidraw*` node. Your user needs read and write access to
that node, for example through a udev rule for the vendor and product IDs
above, or by running the command as root.

## footswitch

```
footswitch [-123] [-r] [-s <string>] [-S <raw_string>] [-ak <key>] [-m <modifier>] [-b <button>] [-xyw <XYW>]
```

- `-r` read all pedals (must be the only option)
- `-1`, `-2`, `-3` select the pedal that the following options apply to (the second one by default)
- `-s string` append a string
- `-S rstring` append raw key codes, hex numbers separated by spaces or commas
- `-a key` append a key to the string
- `-k key` set the key
- `-m modifier` add a modifier: `ctrl`, `shift`, `alt`, `win`, each also with an `l_` or `r_` prefix
- `-b button` `mouse_left`, `mouse_middle` or `mouse_right`
- `-x X`, `-y Y`, `-w W` move the cursor or the wheel, each in [-128, 127]

String options (`-s`, `-S`, `-a`) cannot be combined with key and mouse
options (`-k`, `-m`, `-b`, `-x`, `-y`, `-w`) on the same pedal; key and
mouse options may be combined. A pedal's string may hold at most 38 keys.
Pedals that are not given any option are written as unconfigured.

Reading prints one line per pedal, such as `[switch 1]: l_ctrl+c`.

```
footswitch -r
footswitch -1 -k a -2 -k b -3 -k c
footswitch -m ctrl -k c
footswitch -3 -s "hello world"
footswitch -b mouse_left -x 10
```

## footswitch1p

```
footswitch1p [-r] [-k <key>] [-m <modifier>] [-b <button>] [-xyw <XYW>]
```

`-r` prints the device ID. Key options (`-k`, `-m`) and mouse options
(`-b`, `-x`, `-y`, `-w`) should not be mixed; the last kind given decides
what the pedal sends.

```
footswitch1p -m ctrl -k v
```

## scythe

```
scythe [-123] [-r] [-a <key>] [-m <modifier>] [-b <button>]
```

- `-1`, `-2`, `-3` select the pedal (the second one by default)
- `-a key` append a key; up to five keys per pedal
- `-m modifier` `ctrl`, `shift`, `alt` or `win`
- `-b button` `mouse_left`, `mouse_middle`, `mouse_right` or `mouse_double`

Keys and modifiers cannot be combined with a mouse button on the same pedal.
Unplug the device and plug it back in after programming.

```
scythe -1 -m ctrl -a c -2 -m ctrl -a v -3 -b mouse_double
```

## scythe2

```
scythe2 [-123456] [-r] [-s <string>] [-k <key>] [-a <key>] [-m <modifier>] [-b <button>]
```

- `-1` to `-6` select the pedal (the first one by default)
- `-s string` type a string (up to 255 characters; characters without a key code are sent as 0)
- `-k key` a single key that repeats while held
- `-a key` a single key without repeat
- `-m modifier` `ctrl`, `shift`, `alt` or `win`
- `-b button` a mouse button

Each pedal takes only one of `-s`, `-k`, `-a` and `-b`. Pedals that are not
given any setting are programmed with the key `a`. Unplug the device and
plug it back in after programming.

`scythe2 -r` shows only the pedals whose settings fit in the first settings
report the device returns.

```
scythe2 -1 -k pagedown -2 -k pageup -3 -s "hello"
```

## Key names

Letters, digits and punctuation stand for themselves. Named keys include
`enter`, `esc`, `backspace`, `tab`, `space`, `capslock`, `f1` to `f24`,
`printscreen`, `pause`, `insert`, `home`, `pageup`, `delete`, `end`,
`pagedown`, `left`, `right`, `up`, `down`, `numlock`, the keypad keys
(`KP_Add`, `KP_Enter`, ...) and X11 names such as `XF86AudioMute`. Key names
are matched without regard to case; single characters in `-s` strings are
matched exactly.

## Using it from Python

The configurations can be built without a device, which is handy for
checking what would be sent:

```python
from pedalprog.footswitch import build_config
from pedalprog.scythe2 import Scythe2Config, setting_frames

config = build_config(["-1", "-m", "ctrl", "-k", "c"])
for packet in config.packets():
    print(packet.hex(" "))

six = Scythe2Config()
six.set_key_repeat("pagedown")
frames = setting_frames(six.payload())
```

`pedalprog.keymap` has the key table (`encode_key`, `encode_string`,
`decode_byte`, `parse_modifier`, `parse_mouse_button`), and
`pedalprog.hidraw` opens devices (`find_device`, `open_first`, `HidDevice`).

## What it does not do

- It works only on Linux, through hidraw; there is no support for other
  operating systems.
- It does not install udev rules or otherwise set device permissions.

## Running the tests

```
pip install .[test]
pytest
```