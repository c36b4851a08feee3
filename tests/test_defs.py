import pytest

from monoui.defs import (
    ConfigFlag,
    Message,
    aux,
    data,
    form,
    goto,
    goto_lower,
    label,
    muif,
    muif_button,
    muif_execute_on_select_button,
    muif_goto,
    muif_label,
    muif_ro,
    muif_style,
    muif_variable,
    style,
    xy,
    xya,
    xyat,
    xyt,
)


def cb(ui, msg):
    return 0


def test_muif_sets_ids_and_fields():
    payload = [1, 2]
    f = muif("ab", ConfigFlag.IS_CURSOR_SELECTABLE, payload, cb)
    assert f.id0 == ord("a")
    assert f.id1 == ord("b")
    assert f.field_id == b"ab"
    assert f.data is payload
    assert f.callback is cb
    assert f.extra == 0
    assert f.is_cursor_selectable


def test_muif_bytes_and_str_ids_match():
    assert muif(b"xy", 0, None, cb).field_id == muif("xy", 0, None, cb).field_id


@pytest.mark.parametrize("bad", ["", "a", "abc", b"abcd"])
def test_muif_rejects_bad_id_length(bad):
    with pytest.raises(ValueError):
        muif(bad, 0, None, cb)


def test_muif_rejects_non_callable():
    with pytest.raises(TypeError):
        muif("ab", 0, None, "not callable")


def test_field_function_call_forwards_message():
    seen = []

    def record(ui, msg):
        seen.append((ui, msg))
        return 7

    f = muif_button("ok", record)
    assert f("ui", Message.CURSOR_SELECT) == 7
    assert seen == [("ui", Message.CURSOR_SELECT)]


def test_style_matches_style_field_function():
    assert muif_style(3, cb).field_id == style(3)
    assert style(3)[:1] == b"S"


def test_style_rejects_multi_char():
    with pytest.raises(ValueError):
        style(10)
    with pytest.raises(ValueError):
        muif_style(10, cb)


def test_ro_is_not_selectable():
    f = muif_ro("r0", cb)
    assert not f.is_cursor_selectable
    assert f.cflags == ConfigFlag.NONE


def test_label_id_matches_command():
    f = muif_label(cb)
    assert f.field_id == b".L"
    assert label(1, 2, "hi")[0] == f.id1
    assert not f.is_cursor_selectable


def test_goto_id_matches_command_and_selectable():
    f = muif_goto(cb)
    assert f.field_id == b".G"
    assert f.is_cursor_selectable
    assert goto(0, 0, 1, "go")[0] == f.id1
    assert goto_lower(0, 0, 1, "go")[:1] == b"g"


def test_button_flags():
    plain = muif_button("b1", cb)
    exec_btn = muif_execute_on_select_button("b2", cb)
    assert plain.is_cursor_selectable and not plain.is_execute_on_select
    assert exec_btn.is_cursor_selectable and exec_btn.is_execute_on_select


def test_variable_keeps_reference():
    var = {"value": 0}
    f = muif_variable("v0", var, cb)
    assert f.data is var
    assert f.is_cursor_selectable


def test_form_bytes():
    assert form(7) == b"U" + bytes([7])


@pytest.mark.parametrize("n", [-1, 256])
def test_form_rejects_out_of_range(n):
    with pytest.raises(ValueError):
        form(n)


def test_aux_layout():
    assert aux("ab") == b"Z" + b"ab"


def test_data_layout():
    assert data("ab", "x|y").split(b"\xff") == [b"Dab", b"x|y", b""]


def test_xy_layout():
    cmd = xy("ab", 5, 6)
    assert cmd[:1] == b"F"
    assert cmd[1:3] == b"ab"
    assert list(cmd[3:]) == [5, 6]


def test_xyt_layout():
    cmd = xyt("ab", 5, 6, "ok")
    assert cmd[:1] == b"B"
    assert list(cmd[3:5]) == [5, 6]
    assert cmd[5:].split(b"\xff") == [b"", b"ok", b""]


def test_xya_layout():
    cmd = xya("ab", 5, 6, 9)
    assert cmd[:3] == b"Aab"
    assert list(cmd[3:]) == [5, 6, 9]


def test_xyat_layout():
    cmd = xyat("ab", 5, 6, 9, "a|b")
    assert cmd[:3] == b"Tab"
    assert list(cmd[3:6]) == [5, 6, 9]
    assert cmd[6:].split(b"\xff") == [b"", b"a|b", b""]


def test_label_and_goto_layout():
    lab = label(3, 4, "t")
    assert list(lab[1:3]) == [3, 4]
    g = goto(3, 4, 2, "t")
    assert list(g[1:4]) == [3, 4, 2]
    assert g[4:].split(b"\xff") == [b"", b"t", b""]


def test_text_is_utf8_encoded():
    assert "é".encode("utf-8") in xyt("ab", 0, 0, "é")


@pytest.mark.parametrize("bad", [b"a\xffb", b"a\x00b"])
def test_text_rejects_delimiter_and_zero(bad):
    with pytest.raises(ValueError):
        label(0, 0, bad)


def test_coordinate_out_of_range():
    with pytest.raises(ValueError):
        xy("ab", 300, 0)
    with pytest.raises(ValueError):
        xya("ab", 0, 0, -1)