# monoui

A small menu engine for monochrome displays that does not depend on any
graphics library, together with a simple two-wheel drive controller.

## Menus

A menu is described by one *form definition string* (FDS), a byte string
built with the helpers in `monoui.defs`, and by a list of *field functions*
that react to messages. The menu engine is `monoui.ui.Mui`.

```python
from monoui.defs import Message, form, label, goto, xyt, muif_label, muif_goto, muif_button
from monoui.ui import Mui

def on_label(ui, msg):
    if msg == Message.DRAW:
        print("label", ui.text_string)
    return 0

def on_goto(ui, msg):
    if msg == Message.CURSOR_SELECT:
        ui.goto_form(ui.arg, 0)
    return 0

def on_ok(ui, msg):
    if msg == Message.DRAW:
        print(">" if ui.is_cursor_focus() else " ", ui.text_string)
    return 0

fds = (
    form(1)
    + label(5, 10, "Main")
    + goto(5, 30, 2, "Settings")
    + form(2)
    + xyt("OK", 5, 30, "Back")
)
fields = [muif_label(on_label), muif_goto(on_goto), muif_button("OK", on_ok)]

ui = Mui(fds, fields, None)
ui.goto_form(1, 0)
ui.draw()
ui.send_select()               # the focused goto button enters form 2
print(ui.current_form_id())    # 2
```

### Building a form definition

`form`, `style`, `aux`, `data`, `xy`, `xyt`, `xya`, `xyat`, `label`, `goto`
and `goto_lower` each return the bytes of one command. Text parts are
enclosed in the delimiter byte `0xff`; positions, arguments and form numbers
must be in 0..255, and field ids must be exactly two characters, otherwise a
`ValueError` is raised.

Field functions are created with `muif`, `muif_style`, `muif_ro`,
`muif_label`, `muif_goto`, `muif_button`, `muif_execute_on_select_button` and
`muif_variable`. Each returns a `FieldFunction`, matched against commands by
its two-byte id. A callback is called as `callback(ui, msg)` with a `Message`
code; while it runs, `ui.cmd`, `ui.id0`, `ui.id1`, `ui.x`, `ui.y`, `ui.arg`,
`ui.text`, `ui.dflags`, `ui.pos` and `ui.uif` describe the field. Returning
255 from `Message.CURSOR_ENTER` makes the cursor skip that field; returning a
true value from `Message.EVENT_NEXT` / `Message.EVENT_PREV` keeps the cursor
where it is.

### Navigation

`Mui` offers `next_field`, `prev_field` (both wrap around), `send_select`,
`send_select_with_execute_on_select_field_search`, `send_value_increment`
and `send_value_decrement`. `enter_form`, `leave_form` and `goto_form` switch
forms; `current_form_id` returns `None` when no form is active. Forms can be
pushed with `save_form` / `save_form_with_cursor_position` (at most four are
kept, the oldest is dropped) and popped with `restore_form`.
`save_cursor_position` and `goto_form_auto_cursor_position` remember a cursor
position per form.

### Option lists

A text part may hold options separated by `|`. `monoui.parse` reads them
with `iter_tokens`, `nth_token` and `token_count`; inside a field function
`Mui.get_selectable_field_text_option` and
`Mui.get_selectable_field_option_count` do the same for a field position.
Texts and tokens are cut to 41 bytes.

## Drive controller

`monoui.motor.DriveController` takes the raw encoder counter readings of the
left and right wheel each control period, updates distance and speed, runs
the PI speed loop and returns one `WheelCommand` per wheel, holding a
`Direction` (the two bridge input levels) and a PWM compare value:

```python
from monoui.motor import DriveController

ctrl = DriveController()
ctrl.left.speed_exp = 100.0
left, right = ctrl.measure(10, -10)
print(left.direction, left.duty, ctrl.telemetry())
```

`telemetry` returns the status line as bytes, cut to 32 bytes;
`format_telemetry` formats any such line.

## What the package does not do

It draws nothing and talks to no hardware. The menu engine only calls your
field functions with `Message.DRAW`; rendering text and graphics on a display
is up to them. The drive controller only computes wheel commands and the
telemetry line; setting pins, PWM registers and sending over a serial port
is left to the caller.

## Tests

```
pip install -e .[test]
pytest
```