import pytest

from monoui.motor import (
    Direction,
    DriveController,
    MotorState,
    PidError,
    WheelCommand,
    format_telemetry,
)


def test_pid_error_update_shifts_and_accumulates():
    err = PidError()
    err.update(2.0)
    err.update(3.0)
    assert (err.last, err.now, err.all) == (2.0, 3.0, 5.0)


def test_direction_pin_levels():
    assert (Direction.FORWARD.in1, Direction.FORWARD.in2) == (False, True)
    cmd = WheelCommand(Direction.REVERSE, 10)
    assert (cmd.in1, cmd.in2) == (True, False)


def test_motor_state_defaults_are_zero():
    state = MotorState()
    assert (state.output, state.speed_act, state.location_act) == (0, 0.0, 0.0)


def test_measure_idle_gives_zero_forward():
    ctl = DriveController()
    left, right = ctl.measure(0, 0)
    assert left == WheelCommand(Direction.FORWARD, 0)
    assert right == WheelCommand(Direction.FORWARD, 0)


def test_one_revolution_of_counts_is_one_unit():
    ctl = DriveController()
    ctl.measure(1060, 0)
    assert ctl.left.location_act == pytest.approx(1.0)


def test_right_location_builds_on_left():
    ctl = DriveController()
    ctl.measure(1060, 0)
    assert ctl.right.location_act == pytest.approx(ctl.left.location_act)


def test_speed_is_proportional_to_counts():
    a = DriveController()
    b = DriveController()
    a.measure(530, 0)
    b.measure(1060, 0)
    assert b.left.speed_act == pytest.approx(2 * a.left.speed_act)
    assert a.left.speed_act > 0


def test_right_count_is_negated():
    a = DriveController()
    b = DriveController()
    a.measure(1060, 0)
    b.measure(0, 1060)
    assert b.right.speed_act == pytest.approx(-a.left.speed_act)
    assert b.encode_right == -1060


def test_counter_wraps_to_int16():
    ctl = DriveController()
    ctl.measure(65535, 0)
    assert ctl.encode_left == -1
    assert ctl.left.location_act == pytest.approx(-1 / 1060)


def test_speed_setpoint_is_capped():
    ctl = DriveController()
    ctl.left.speed_exp = 1000.0
    ctl.right.speed_exp = 400.0
    ctl.measure(0, 0)
    assert ctl.left.speed_exp == 275.0
    assert ctl.right.speed_exp == 275.0


def test_location_integral_is_capped():
    ctl = DriveController()
    ctl.left.location_exp = 100.0
    ctl.measure(0, 0)
    ctl.measure(0, 0)
    assert ctl.left_location_error.all == 5.0
    assert ctl.left_location_error.now == pytest.approx(100.0)


def test_speed_loop_output():
    ctl = DriveController()
    ctl.left.speed_exp = 100.0
    left, _ = ctl.measure(0, 0)
    assert ctl.left.output == 60
    assert left == WheelCommand(Direction.FORWARD, 60)


def test_drive_right_saturates_and_reverses():
    ctl = DriveController()
    _, fwd = ctl.drive(0, 1000)
    _, rev = ctl.drive(0, -100)
    _, rev_big = ctl.drive(0, -1000)
    assert fwd == WheelCommand(Direction.FORWARD, 255)
    assert rev == WheelCommand(Direction.REVERSE, 100)
    assert rev_big == WheelCommand(Direction.REVERSE, 255)


def test_drive_left_uses_stored_output_for_limits():
    ctl = DriveController()
    ctl.left.output = 300
    left, _ = ctl.drive(300, 0)
    assert left == WheelCommand(Direction.FORWARD, 255)
    ctl.left.output = -300
    left, _ = ctl.drive(-300, 0)
    assert left == WheelCommand(Direction.REVERSE, 255)


def test_format_telemetry_short_message():
    assert format_telemetry(",A=%.2f,", 1.5) == b",A=1.50,"


def test_format_telemetry_truncates_to_buffer():
    out = format_telemetry("%s", "x" * 100)
    assert out == b"x" * 32


def test_telemetry_initial_line():
    ctl = DriveController()
    assert ctl.telemetry() == b",A=0.00,B=0.00,C=0.0,D=0.0,"


def test_telemetry_long_values_are_cut():
    ctl = DriveController()
    ctl.left.location_act = 12345.678
    ctl.left.location_exp = 98765.432
    ctl.left.speed_act = 1234.5
    ctl.left.speed_exp = 275.0
    line = ctl.telemetry()
    assert len(line) == 32
    assert line.startswith(b",A=12345.68,B=98765.43,")