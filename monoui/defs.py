"""Message codes, field-function entries and form-definition builders.

A form definition string (FDS) is a byte sequence made of commands. Each
command starts with one letter, followed by fixed argument bytes and, for
some commands, a text part enclosed in the delimiter byte ``0xff``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

MAX_TEXT_LEN = 41
MENU_CACHE_SIZE = 4
LAST_FORM_STACK_SIZE = 4
TEXT_DELIMITER = 0xFF
TOKEN_SEPARATOR = ord("|")

FieldId = Union[str, bytes]
Callback = Callable[[Any, int], int]


class Message(enum.IntEnum):
    """Messages sent to field callbacks."""

    NONE = 0
    DRAW = 1
    FORM_START = 2
    FORM_END = 3
    CURSOR_ENTER = 4
    CURSOR_SELECT = 5
    VALUE_INCREMENT = 6
    VALUE_DECREMENT = 7
    CURSOR_LEAVE = 8
    TOUCH_DOWN = 9
    TOUCH_UP = 10
    EVENT_NEXT = 11
    EVENT_PREV = 12


class ConfigFlag(enum.IntFlag):
    """Static properties of a field function."""

    NONE = 0
    IS_CURSOR_SELECTABLE = 0x01
    IS_TOUCH_SELECTABLE = 0x02
    IS_EXECUTE_ON_SELECT = 0x04


class DynamicFlag(enum.IntFlag):
    """Per-field state computed while walking a form."""

    NONE = 0
    IS_CURSOR_FOCUS = 0x01
    IS_TOUCH_FOCUS = 0x02


@dataclass(frozen=True)
class FieldFunction:
    """Binds a two-byte field id to a callback and optional user data."""

    id0: int
    id1: int
    cflags: ConfigFlag
    callback: Callback
    data: Any = None
    extra: int = 0

    @property
    def field_id(self) -> bytes:
        return bytes((self.id0, self.id1))

    @property
    def is_cursor_selectable(self) -> bool:
        return bool(self.cflags & ConfigFlag.IS_CURSOR_SELECTABLE)

    @property
    def is_execute_on_select(self) -> bool:
        return bool(self.cflags & ConfigFlag.IS_EXECUTE_ON_SELECT)

    def __call__(self, ui: Any, msg: int) -> int:
        return self.callback(ui, msg)


def _field_id(field_id: FieldId) -> bytes:
    if isinstance(field_id, str):
        try:
            raw = field_id.encode("latin-1")
        except UnicodeEncodeError as exc:
            raise ValueError(f"field id {field_id!r} is not single-byte text") from exc
    elif isinstance(field_id, (bytes, bytearray)):
        raw = bytes(field_id)
    else:
        raise TypeError(f"field id must be str or bytes, not {type(field_id).__name__}")
    if len(raw) != 2:
        raise ValueError(f"field id must be exactly two characters, got {field_id!r}")
    return raw


def _byte(value: int, name: str) -> bytes:
    if not isinstance(value, int):
        raise TypeError(f"{name} must be an int")
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be in 0..255, got {value}")
    return bytes((value,))


def _style_char(n: Union[int, str]) -> bytes:
    text = str(n)
    if len(text) != 1:
        raise ValueError(f"style number must be a single character, got {n!r}")
    return text.encode("latin-1")


def _text(text: Union[str, bytes]) -> bytes:
    raw = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    if TEXT_DELIMITER in raw or 0 in raw:
        raise ValueError("text must not contain the delimiter byte 0xff or a zero byte")
    return b"\xff" + raw + b"\xff"


def muif(field_id: FieldId, cflags: int, data: Any, callback: Callback) -> FieldFunction:
    """Create a generic field-function entry."""
    if not callable(callback):
        raise TypeError("callback must be callable")
    raw = _field_id(field_id)
    return FieldFunction(raw[0], raw[1], ConfigFlag(cflags), callback, data)


def muif_style(n: Union[int, str], callback: Callback) -> FieldFunction:
    """Field function for style ``n`` (matched by ``style(n)``)."""
    return muif(b"S" + _style_char(n), ConfigFlag.NONE, None, callback)


def muif_ro(field_id: FieldId, callback: Callback) -> FieldFunction:
    """Read-only field."""
    return muif(field_id, ConfigFlag.NONE, None, callback)


def muif_label(callback: Callback) -> FieldFunction:
    """Field function for ``label`` commands."""
    return muif(".L", ConfigFlag.NONE, None, callback)


def muif_goto(callback: Callback) -> FieldFunction:
    """Selectable field function for ``goto`` commands."""
    return muif(".G", ConfigFlag.IS_CURSOR_SELECTABLE, None, callback)


def muif_button(field_id: FieldId, callback: Callback) -> FieldFunction:
    """Cursor-selectable field."""
    return muif(field_id, ConfigFlag.IS_CURSOR_SELECTABLE, None, callback)


def muif_execute_on_select_button(field_id: FieldId, callback: Callback) -> FieldFunction:
    """Selectable field that is executed by a select with field search."""
    flags = ConfigFlag.IS_CURSOR_SELECTABLE | ConfigFlag.IS_EXECUTE_ON_SELECT
    return muif(field_id, flags, None, callback)


def muif_variable(field_id: FieldId, variable: Any, callback: Callback) -> FieldFunction:
    """Selectable field bound to a user variable."""
    return muif(field_id, ConfigFlag.IS_CURSOR_SELECTABLE, variable, callback)


def form(n: int) -> bytes:
    """Start of form number ``n``."""
    return b"U" + _byte(n, "form number")


def style(n: Union[int, str]) -> bytes:
    """Switch to style ``n``."""
    return b"S" + _style_char(n)


def aux(field_id: FieldId) -> bytes:
    """Field without position, argument or text."""
    return b"Z" + _field_id(field_id)


def data(field_id: FieldId, text: Union[str, bytes]) -> bytes:
    """Data field holding only text."""
    return b"D" + _field_id(field_id) + _text(text)


def xy(field_id: FieldId, x: int, y: int) -> bytes:
    """Field placed at ``x``/``y``."""
    return b"F" + _field_id(field_id) + _byte(x, "x") + _byte(y, "y")


def xyt(field_id: FieldId, x: int, y: int, text: Union[str, bytes]) -> bytes:
    """Field placed at ``x``/``y`` with text."""
    return b"B" + _field_id(field_id) + _byte(x, "x") + _byte(y, "y") + _text(text)


def xya(field_id: FieldId, x: int, y: int, a: int) -> bytes:
    """Field placed at ``x``/``y`` with a one-byte argument."""
    return b"A" + _field_id(field_id) + _byte(x, "x") + _byte(y, "y") + _byte(a, "argument")


def xyat(field_id: FieldId, x: int, y: int, a: int, text: Union[str, bytes]) -> bytes:
    """Field placed at ``x``/``y`` with an argument and text."""
    return (
        b"T"
        + _field_id(field_id)
        + _byte(x, "x")
        + _byte(y, "y")
        + _byte(a, "argument")
        + _text(text)
    )


def label(x: int, y: int, text: Union[str, bytes]) -> bytes:
    """Text label at ``x``/``y``."""
    return b"L" + _byte(x, "x") + _byte(y, "y") + _text(text)


def goto(x: int, y: int, n: int, text: Union[str, bytes]) -> bytes:
    """Button at ``x``/``y`` that jumps to form ``n``."""
    return b"G" + _byte(x, "x") + _byte(y, "y") + _byte(n, "form number") + _text(text)


def goto_lower(x: int, y: int, n: int, text: Union[str, bytes]) -> bytes:
    """Lower-case variant of ``goto`` (handled by a separate field function)."""
    return b"g" + _byte(x, "x") + _byte(y, "y") + _byte(n, "form number") + _text(text)