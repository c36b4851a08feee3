"""Low-level reading of form definition strings (FDS).

An FDS is a byte string of commands. Reading past its end behaves like
reading a terminating zero byte, which ends any command, text or token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from monoui.defs import MAX_TEXT_LEN, TOKEN_SEPARATOR

_FIXED_SIZES = {
    ord("U"): 2,  # form: cmd, form id
    ord("S"): 2,  # style: cmd, style id
    ord("D"): 3,  # data: cmd, id0, id1, text
    ord("Z"): 3,  # aux: cmd, id0, id1
    ord("F"): 5,  # field: cmd, id0, id1, x, y
    ord("B"): 5,  # field with text: cmd, id0, id1, x, y, text
    ord("T"): 6,  # field with arg and text: cmd, id0, id1, x, y, arg, text
    ord("A"): 6,  # field with arg: cmd, id0, id1, x, y, arg
    ord("L"): 3,  # label: cmd, x, y, text
    ord("G"): 4,  # goto: cmd, x, y, form, text
}

# Commands (compared case-sensitively) that carry no text part.
_WITHOUT_TEXT = frozenset(b"USFAZ")


@dataclass(frozen=True)
class ParsedText:
    """Result of reading a command or text part.

    ``size`` is the number of bytes consumed, ``text`` the collected text
    (at most ``MAX_TEXT_LEN`` bytes) and ``delimiter`` the outer delimiter.
    """

    size: int
    text: bytes = b""
    delimiter: int = 0

    @property
    def string(self) -> str:
        return self.text.decode("utf-8", errors="replace")


def _char(fds: bytes, pos: int) -> int:
    if 0 <= pos < len(fds):
        return fds[pos]
    return 0


def command_size_without_text(fds: bytes, pos: int) -> int:
    """Size of the command at ``pos``, not counting any text part."""
    c = _char(fds, pos) & 0xDF
    if c == 0:
        return 0
    return _FIXED_SIZES.get(c, 1)


def parse_text(fds: bytes, pos: int) -> ParsedText:
    """Read a delimited text part starting at its opening delimiter."""
    delimiter = _char(fds, pos)
    if delimiter == 0:
        return ParsedText(0, b"", 0)
    collected = bytearray()
    t = pos + 1
    while True:
        c = _char(fds, t)
        if c == 0:
            break
        if c == delimiter:
            t += 1
            break
        if len(collected) < MAX_TEXT_LEN:
            collected.append(c)
        t += 1
    return ParsedText(t - pos, bytes(collected), delimiter)


def command_size(fds: bytes, pos: int) -> ParsedText:
    """Full size of the command at ``pos`` together with its text part."""
    size = command_size_without_text(fds, pos)
    if _char(fds, pos) in _WITHOUT_TEXT:
        return ParsedText(size, b"", 0)
    text = parse_text(fds, pos + size)
    return ParsedText(size + text.size, text.text, text.delimiter)


def iter_tokens(fds: bytes, pos: int) -> Iterator[bytes]:
    """Yield the ``|``-separated tokens of the text of the command at ``pos``.

    Iteration stops at the first empty token.
    """
    token = pos + command_size_without_text(fds, pos)
    delimiter = _char(fds, token)
    token += 1
    while True:
        collected = bytearray()
        while True:
            c = _char(fds, token)
            if c == 0 or c == delimiter:
                break
            if c == TOKEN_SEPARATOR:
                token += 1
                break
            if len(collected) < MAX_TEXT_LEN:
                collected.append(c)
            token += 1
        if not collected:
            return
        yield bytes(collected)


def nth_token(fds: bytes, pos: int, n: int) -> Optional[bytes]:
    """Return token ``n`` (counting from 0) or ``None`` if there are fewer."""
    if n < 0:
        raise ValueError(f"token index must not be negative, got {n}")
    for index, tok in enumerate(iter_tokens(fds, pos)):
        if index == n:
            return tok
    return None


def token_count(fds: bytes, pos: int) -> int:
    """Number of tokens in the text of the command at ``pos``."""
    return sum(1 for _ in iter_tokens(fds, pos))