"""The menu engine: walks form definitions and dispatches field messages."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Sequence, Union

from monoui.defs import (
    LAST_FORM_STACK_SIZE,
    MENU_CACHE_SIZE,
    DynamicFlag,
    FieldFunction,
    Message,
)
from monoui.parse import command_size, iter_tokens
from monoui.parse import nth_token as _nth_token

_FORM = ord("U")
_FIELD_WITH_POSITION = frozenset(b"FBTA")
_FIELD_WITH_ARG = frozenset(b"AT")
_FIELD_ID_ONLY = frozenset(b"DZ")
_STYLE = ord("S")
_SKIP_FIELD = 255


def _join(fds: Union[bytes, bytearray, Iterable[bytes]]) -> bytes:
    if isinstance(fds, (bytes, bytearray, memoryview)):
        return bytes(fds)
    return b"".join(bytes(part) for part in fds)


class Mui:
    """Monochrome menu user interface driven by a form definition string.

    Field callbacks receive this object and a message code. While a callback
    runs, ``cmd``, ``id0``, ``id1``, ``x``, ``y``, ``arg``, ``text``,
    ``dflags``, ``pos`` and ``uif`` describe the field being processed.
    """

    def __init__(
        self,
        fds: Union[bytes, bytearray, Iterable[bytes]],
        fields: Sequence[FieldFunction],
        graphics_data: Any = None,
    ) -> None:
        self.definition = _join(fds)
        self.fields = tuple(fields)
        self._lookup: dict[tuple[int, int], FieldFunction] = {}
        for field in self.fields:
            self._lookup.setdefault((field.id0, field.id1), field)
        self.graphics_data = graphics_data

        self.current_form: Optional[int] = None
        self.cursor_focus: Optional[int] = None
        self.touch_focus: Optional[int] = None

        # Reserved for field functions; not used by the engine itself.
        self.form_scroll_total = 0
        self.form_scroll_top = 0
        self.form_scroll_visible = 0
        self.is_mud = 0

        self.delimiter = 0
        self.cmd = 0
        self.id0 = 0
        self.id1 = 0
        self.x = 0
        self.y = 0
        self.dflags = DynamicFlag.NONE
        self.arg = 0
        self.length = 0
        self.pos = 0
        self.uif: Optional[FieldFunction] = None
        self.text = b""

        self._tmp: Optional[int] = None
        self._target: Optional[int] = None
        self._counter = 0

        self._form_stack: list[tuple[int, int]] = []
        self.last_form_fds: Optional[int] = None

        self.menu_form_last_added = 0
        self.menu_form_id = [0] * MENU_CACHE_SIZE
        self.menu_form_cursor_focus_position = [0] * MENU_CACHE_SIZE

    # --- low level helpers -------------------------------------------------

    def _byte_at(self, pos: int) -> int:
        if 0 <= pos < len(self.definition):
            return self.definition[pos]
        return 0

    @property
    def text_string(self) -> str:
        """The current field text decoded as UTF-8."""
        return self.text.decode("utf-8", errors="replace")

    @property
    def last_form_stack(self) -> tuple[tuple[int, int], ...]:
        """Saved (form id, cursor position) pairs, oldest first."""
        return tuple(self._form_stack)

    def is_form_active(self) -> bool:
        return self.current_form is not None

    def is_cursor_focus(self) -> bool:
        return bool(self.dflags & DynamicFlag.IS_CURSOR_FOCUS)

    def is_touch_focus(self) -> bool:
        return bool(self.dflags & DynamicFlag.IS_TOUCH_FOCUS)

    def _prepare_current_field(self) -> bool:
        """Decode the command at ``self.pos``; True if a field function matches."""
        self.uif = None
        self.dflags = DynamicFlag.NONE
        self.id0 = 0
        self.id1 = 0
        self.arg = 0

        parsed = command_size(self.definition, self.pos)
        self.length = parsed.size
        self.text = parsed.text
        if parsed.delimiter:
            self.delimiter = parsed.delimiter

        raw = self._byte_at(self.pos)
        self.id1 = raw
        self.cmd = raw & 0xDF
        if self.cmd in (_FORM, 0):
            return False

        if self.pos == self.cursor_focus:
            self.dflags |= DynamicFlag.IS_CURSOR_FOCUS
        if self.pos == self.touch_focus:
            self.dflags |= DynamicFlag.IS_TOUCH_FOCUS

        p = self.pos
        if self.cmd in _FIELD_WITH_POSITION:
            self.id0 = self._byte_at(p + 1)
            self.id1 = self._byte_at(p + 2)
            self.x = self._byte_at(p + 3)
            self.y = self._byte_at(p + 4)
            if self.cmd in _FIELD_WITH_ARG:
                self.arg = self._byte_at(p + 5)
        elif self.cmd in _FIELD_ID_ONLY:
            self.id0 = self._byte_at(p + 1)
            self.id1 = self._byte_at(p + 2)
        elif self.cmd == _STYLE:
            self.id0 = _STYLE
            self.id1 = self._byte_at(p + 1)
        else:
            self.id0 = ord(".")
            self.x = self._byte_at(p + 1)
            self.y = self._byte_at(p + 2)
            if self.cmd in (ord("G"), ord("M")):
                self.arg = self._byte_at(p + 3)

        self.uif = self._lookup.get((self.id0, self.id1))
        return self.uif is not None

    def _call(self, msg: int) -> int:
        assert self.uif is not None
        return int(self.uif(self, msg) or 0)

    def _loop_over_form(self, task: Callable[[], bool]) -> None:
        if self.current_form is None:
            return
        self.pos = self.current_form
        self._target = None
        self._tmp = None
        self.pos += command_size(self.definition, self.pos).size
        while self._byte_at(self.pos) not in (_FORM, 0):
            if self._prepare_current_field() and task():
                break
            self.pos += self.length

    def _find_form(self, form_id: int) -> Optional[int]:
        pos = 0
        while True:
            cmd = self._byte_at(pos)
            if cmd == 0:
                return None
            if cmd == _FORM and self._byte_at(pos + 1) == form_id:
                return pos
            pos += command_size(self.definition, pos).size

    # --- tasks -------------------------------------------------------------

    def _selectable(self) -> bool:
        return self.uif is not None and self.uif.is_cursor_selectable

    def _task_draw(self) -> bool:
        self._call(Message.DRAW)
        return False

    def _task_form_start(self) -> bool:
        self._call(Message.FORM_START)
        return False

    def _task_form_end(self) -> bool:
        self._call(Message.FORM_END)
        return False

    def _task_find_prev(self) -> bool:
        if self._selectable():
            if self.pos == self.cursor_focus:
                self._target = self._tmp
                return True
            self._tmp = self.pos
        return False

    def _task_find_first(self) -> bool:
        if self._selectable():
            self._target = self.pos
            return True
        return False

    def _task_find_last(self) -> bool:
        if self._selectable():
            self._target = self.pos
        return False

    def _task_find_next(self) -> bool:
        if self._selectable():
            if self._tmp is not None:
                self._target = self.pos
                self._tmp = None
                return True
            if self.pos == self.cursor_focus:
                self._tmp = self.pos
        return False

    def _task_focus_position(self) -> bool:
        if self._selectable():
            if self.pos == self.cursor_focus:
                return True
            self._counter += 1
        return False

    def _task_find_execute_on_select(self) -> bool:
        if self.uif is not None and self.uif.is_execute_on_select:
            self._target = self.pos
            return True
        return False

    # --- cursor messages ---------------------------------------------------

    def _send_cursor_msg(self, msg: int) -> int:
        if self.cursor_focus is not None:
            self.pos = self.cursor_focus
            if self._prepare_current_field():
                return self._call(msg)
        return 0

    def _send_cursor_enter_msg(self) -> int:
        self.is_mud = 0
        return self._send_cursor_msg(Message.CURSOR_ENTER)

    def _advance_focus(self) -> None:
        self._loop_over_form(self._task_find_next)
        self.cursor_focus = self._target
        if self._target is None:
            self._loop_over_form(self._task_find_first)
            self.cursor_focus = self._target

    # --- public API --------------------------------------------------------

    def get_current_cursor_focus_position(self) -> int:
        """Index of the focused field among the selectable fields of the form."""
        self._counter = 0
        self._loop_over_form(self._task_focus_position)
        return self._counter

    def draw(self) -> None:
        """Send a draw message to every field of the current form."""
        self._loop_over_form(self._task_draw)

    def get_selectable_field_text_option(self, fds_pos: Optional[int], nth_token: int) -> bool:
        """Put token ``nth_token`` of the field at ``fds_pos`` into ``text``."""
        if fds_pos is None:
            self.text = b""
            return False
        token = _nth_token(self.definition, fds_pos, nth_token)
        self.text = token if token is not None else b""
        return token is not None

    def get_selectable_field_option_count(self, fds_pos: Optional[int]) -> int:
        """Number of ``|``-separated options in the field at ``fds_pos``."""
        self.text = b""
        if fds_pos is None:
            return 0
        return sum(1 for _ in iter_tokens(self.definition, fds_pos))

    def enter_form(self, fds_pos: int, initial_cursor_position: int = 0) -> None:
        """Activate the form starting at ``fds_pos``, leaving any current form."""
        self.leave_form()
        self.touch_focus = None
        self.cursor_focus = None
        self.form_scroll_top = 0
        self.form_scroll_visible = 0
        self.form_scroll_total = 0
        self.current_form = fds_pos

        self._loop_over_form(self._task_form_start)
        self._loop_over_form(self._task_find_first)
        self.cursor_focus = self._target

        for _ in range(initial_cursor_position):
            self.next_field()
        while self._send_cursor_enter_msg() == _SKIP_FIELD:
            self.next_field()

    def leave_form(self) -> None:
        """Deactivate the current form, if any."""
        if self.current_form is None:
            return
        self._send_cursor_msg(Message.CURSOR_LEAVE)
        self.cursor_focus = None
        self._loop_over_form(self._task_form_end)
        self.current_form = None

    def goto_form(self, form_id: int, initial_cursor_position: int = 0) -> bool:
        """Enter form ``form_id``; False if there is no such form."""
        pos = self._find_form(form_id)
        if pos is None:
            return False
        self.enter_form(pos, initial_cursor_position)
        return True

    def save_form_with_cursor_position(self, cursor_pos: int) -> None:
        """Push the current form with the given cursor position."""
        if self.current_form is None:
            return
        self._form_stack.append((self._byte_at(self.current_form + 1), cursor_pos))
        if len(self._form_stack) > LAST_FORM_STACK_SIZE:
            del self._form_stack[0]
        self.last_form_fds = self.cursor_focus

    def save_form(self) -> None:
        """Push the current form with its current cursor position."""
        self.save_form_with_cursor_position(self.get_current_cursor_focus_position())

    def restore_form(self) -> bool:
        """Return to the most recently saved form; False if none is saved."""
        if not self._form_stack:
            return False
        form_id, focus = self._form_stack.pop()
        return self.goto_form(form_id, focus)

    def save_cursor_position(self, cursor_position: int) -> None:
        """Remember a cursor position for the current form."""
        if self.current_form is None:
            raise RuntimeError("no form is active")
        form_id = self._byte_at(self.current_form + 1)
        try:
            self.menu_form_last_added = self.menu_form_id.index(form_id)
        except ValueError:
            self.menu_form_last_added = (self.menu_form_last_added + 1) % MENU_CACHE_SIZE
        self.menu_form_id[self.menu_form_last_added] = form_id
        self.menu_form_cursor_focus_position[self.menu_form_last_added] = cursor_position

    def goto_form_auto_cursor_position(self, form_id: int) -> bool:
        """Enter ``form_id`` at its remembered cursor position (or 0)."""
        cursor_position = 0
        if form_id == self.menu_form_id[0]:
            cursor_position = self.menu_form_cursor_focus_position[0]
        if form_id == self.menu_form_id[1]:
            cursor_position = self.menu_form_cursor_focus_position[1]
        return self.goto_form(form_id, cursor_position)

    def current_form_id(self) -> Optional[int]:
        """Id of the active form, or None when no form is active."""
        if self.current_form is None:
            return None
        return self._byte_at(self.current_form + 1)

    def next_field(self) -> None:
        """Move the cursor to the next selectable field, wrapping around."""
        while True:
            if self._send_cursor_msg(Message.EVENT_NEXT):
                return
            self._send_cursor_msg(Message.CURSOR_LEAVE)
            self._advance_focus()
            if self._send_cursor_enter_msg() != _SKIP_FIELD:
                break

    def prev_field(self) -> None:
        """Move the cursor to the previous selectable field, wrapping around."""
        while True:
            if self._send_cursor_msg(Message.EVENT_PREV):
                return
            self._send_cursor_msg(Message.CURSOR_LEAVE)
            self._loop_over_form(self._task_find_prev)
            self.cursor_focus = self._target
            if self._target is None:
                self._loop_over_form(self._task_find_last)
                self.cursor_focus = self._target
            if self._send_cursor_enter_msg() != _SKIP_FIELD:
                break

    def send_select(self) -> None:
        self._send_cursor_msg(Message.CURSOR_SELECT)

    def send_select_with_execute_on_select_field_search(self) -> None:
        """Select the execute-on-select field if the form has one, else the focused field."""
        self._loop_over_form(self._task_find_execute_on_select)
        if self._target is not None:
            field_pos = self._target
            self._send_cursor_msg(Message.CURSOR_LEAVE)
            self.cursor_focus = field_pos
            self._send_cursor_enter_msg()
        self._send_cursor_msg(Message.CURSOR_SELECT)

    def send_value_increment(self) -> None:
        self._send_cursor_msg(Message.VALUE_INCREMENT)

    def send_value_decrement(self) -> None:
        self._send_cursor_msg(Message.VALUE_DECREMENT)