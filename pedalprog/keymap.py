"""Key names, HID usage codes, modifiers and mouse buttons shared by all pedals."""

from __future__ import annotations

import enum
import string


class Modifier(enum.IntFlag):
    """Keyboard modifier bits as used in HID boot reports."""

    CTRL = 1
    SHIFT = 2
    ALT = 4
    WIN = 8
    R_CTRL = 16
    R_SHIFT = 32
    R_ALT = 64
    R_WIN = 128


class MouseButton(enum.IntFlag):
    """Mouse button bits understood by the pedals."""

    LEFT = 1
    RIGHT = 2
    MIDDLE = 4
    DOUBLE = 8


def _placeholders(first: int, last: int) -> list[tuple[str, int]]:
    return [(f"<{value:02x}>", value) for value in range(first, last + 1)]


def _sequence(names, first: int) -> list[tuple[str, int]]:
    return [(name, value) for value, name in enumerate(names, start=first)]


# Order matters: the first entry with a given name or value wins.
KEYMAP: tuple[tuple[str, int], ...] = tuple(
    _placeholders(0x00, 0x03)
    + _sequence(string.ascii_lowercase, 0x04)
    + _sequence("1234567890", 0x1E)
    + [
        ("enter", 0x28), ("Return", 0x28), ("esc", 0x29), ("Escape", 0x29),
        ("backspace", 0x2A), ("tab", 0x2B), (" ", 0x2C), ("space", 0x2C),
        ("-", 0x2D), ("=", 0x2E), ("[", 0x2F), ("]", 0x30),
        ("\\", 0x31), ("\\", 0x32), (";", 0x33), ("'", 0x34),
        ("`", 0x35), (",", 0x36), (".", 0x37), ("/", 0x38),
        ("capslock", 0x39),
    ]
    + _sequence([f"f{n}" for n in range(1, 13)], 0x3A)
    + _sequence([f"f{n}" for n in range(13, 25)], 0x68)
    + [
        ("printscreen", 0x46), ("scrollock", 0x47), ("pause", 0x48),
        ("insert", 0x49), ("home", 0x4A), ("pageup", 0x4B), ("Prior", 0x4B),
        ("delete", 0x4C), ("end", 0x4D), ("pagedown", 0x4E), ("Next", 0x4E),
        ("right", 0x4F), ("down", 0x51), ("left", 0x50), ("up", 0x52),
        ("numlock", 0x53),
    ]
    + _sequence(
        [
            "KP_Divide", "KP_Multiply", "KP_Subtract", "KP_Add", "KP_Enter",
            "KP_End", "KP_Down", "KP_Next", "KP_Left", "KP_Begin", "KP_Right",
            "KP_Home", "KP_Up", "KP_Prior", "KP_Insert", "KP_Delete", "less",
        ],
        0x54,
    )
    + [
        ("Multi_key", 0x65), ("compose", 0x65), ("XF86PowerOff", 0x66),
        ("KP_Equal", 0x67), ("XF86Tools", 0x68), ("XF86Launch5", 0x69),
        ("XF86MenuKB", 0x6A), ("XF86Launch7", 0x6B), ("XF86Launch8", 0x6C),
        ("XF86Launch9", 0x6D), ("<6e>", 0x6E), ("<6f>", 0x6F),
        ("XF86TouchpadToggle", 0x70), ("XF86TouchpadToggle", 0x71),
        ("XF86TouchpadOff", 0x72), ("<73>", 0x73), ("SunOpen", 0x74),
        ("Help", 0x75), ("SunProps", 0x76), ("SunFront", 0x77),
        ("Cancel", 0x78), ("Redo", 0x79), ("Undo", 0x7A), ("XF86Cut", 0x7B),
        ("XF86Copy", 0x7C), ("XF86Paste", 0x7D), ("Find", 0x7E),
        ("XF86AudioMute", 0x7F), ("XF86AudioRaiseVolume", 0x80),
        ("XF86AudioLowerVolume", 0x81), ("<82>", 0x82), ("Hangul", 0x82),
        ("<83>", 0x83), ("Hangul_Hanja", 0x83),
    ]
    + _sequence(string.ascii_uppercase, 0x84)
    + _sequence("!@#$%^&*()", 0x9E)
    + _placeholders(0xA8, 0xAC)
    + [
        ("_", 0xAD), ("+", 0xAE), ("{", 0xAF), ("}", 0xB0), ("|", 0xB1),
        ("|", 0xB2), (":", 0xB3), ('"', 0xB4), ("~", 0xB5), ("<", 0xB6),
        (">", 0xB7), ("?", 0xB8),
    ]
    + _placeholders(0xB9, 0xDF)
    + _sequence(
        [
            "Control_L", "Shift_L", "Alt_L", "Super_L", "Control_R", "Shift_R",
            "Meta_R", "Super_R", "XF86AudioPause", "XF86Eject", "XF86AudioPrev",
            "XF86AudioNext", "XF86Eject", "XF86AudioRaiseVolume",
            "XF86AudioLowerVolume", "XF86AudioMute", "XF86WWW", "XF86Back",
            "XF86Forward", "Cancel", "Find", "XF86ScrollUp", "XF86ScrollDown",
            "<f7>", "XF86Sleep", "XF86ScreenSaver", "XF86Reload",
            "XF86Calculator",
        ],
        0xE0,
    )
    + _placeholders(0xFC, 0xFF)
)

_ASCII_FOLD = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _fold(name: str) -> str:
    """Fold ASCII letters only, matching a byte-wise case-insensitive compare."""
    return name.translate(_ASCII_FOLD)


def _first_wins(pairs):
    table: dict = {}
    for key, value in pairs:
        table.setdefault(key, value)
    return table


_BY_CHAR: dict[str, int] = _first_wins((n, v) for n, v in KEYMAP if len(n) == 1)
_BY_NAME: dict[str, int] = _first_wins((_fold(n), v) for n, v in KEYMAP)
_BY_VALUE: dict[int, str] = _first_wins((v, n) for n, v in KEYMAP)

_MODIFIERS: dict[str, Modifier] = {
    "ctrl": Modifier.CTRL,
    "alt": Modifier.ALT,
    "win": Modifier.WIN,
    "shift": Modifier.SHIFT,
    "l_ctrl": Modifier.CTRL,
    "l_alt": Modifier.ALT,
    "l_win": Modifier.WIN,
    "l_shift": Modifier.SHIFT,
    "r_ctrl": Modifier.R_CTRL,
    "r_alt": Modifier.R_ALT,
    "r_win": Modifier.R_WIN,
    "r_shift": Modifier.R_SHIFT,
}

_MOUSE_BUTTONS: dict[str, MouseButton] = {
    "mouse_left": MouseButton.LEFT,
    "mouse_middle": MouseButton.MIDDLE,
    "mouse_right": MouseButton.RIGHT,
    "mouse_double": MouseButton.DOUBLE,
}


def parse_modifier(name: str) -> Modifier:
    """Return the modifier named by ``name`` (case-insensitive)."""
    try:
        return _MODIFIERS[_fold(name)]
    except KeyError:
        raise ValueError(f"Invalid modifier '{name}'") from None


def parse_mouse_button(name: str) -> MouseButton:
    """Return the mouse button named by ``name`` (case-insensitive)."""
    try:
        return _MOUSE_BUTTONS[_fold(name)]
    except KeyError:
        raise ValueError(f"Invalid mouse button '{name}'") from None


def encode_char(ch: str) -> int:
    """Return the usage code for a single character (case-sensitive)."""
    if len(ch) != 1 or ch not in _BY_CHAR:
        raise ValueError(f"Cannot encode character {ch!r}")
    return _BY_CHAR[ch]


def encode_string(text: str) -> bytes:
    """Encode every character of ``text`` into usage codes."""
    try:
        return bytes(encode_char(ch) for ch in text)
    except ValueError:
        raise ValueError(f"Cannot encode string: '{text}'") from None


def encode_key(key: str) -> int:
    """Return the usage code for a key name (case-insensitive, first match)."""
    try:
        return _BY_NAME[_fold(key)]
    except KeyError:
        raise ValueError(f"Cannot encode key '{key}'") from None


def decode_byte(value: int) -> str:
    """Return the first key name for a usage code, or an empty string."""
    return _BY_VALUE.get(value, "")