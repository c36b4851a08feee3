"""Closed-loop control of a two-wheel differential drive.

Each control period the encoder counts of both wheels are read and turned
into distance and speed. A PI speed loop then computes the motor outputs.
Those outputs become H-bridge pin levels and PWM compare values.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

COUNTS_PER_REVOLUTION = 1060.0
CONTROL_RATE_HZ = 100.0
SECONDS_PER_MINUTE = 60
PWM_MAX = 256 - 1
SPEED_LIMIT = 275.0
LOCATION_INTEGRAL_LIMIT = 5.0
TELEMETRY_BUFFER_SIZE = 32
TELEMETRY_FORMAT = ",A=%.2f,B=%.2f,C=%.1f,D=%.1f,"


def _to_int16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _float_to_int16(value: float) -> int:
    # Saturating conversion to a 32-bit integer, then narrowing to 16 bits.
    as_int = int(value)
    as_int = max(-(2**31), min(2**31 - 1, as_int))
    return _to_int16(as_int)


@dataclass
class MotorState:
    """Commanded and measured state of one wheel."""

    output: int = 0
    speed_exp: float = 0.0
    speed_act: float = 0.0
    location_exp: float = 0.0
    location_act: float = 0.0


@dataclass
class PidGains:
    """Proportional, integral and derivative gains."""

    p: float
    i: float
    d: float


@dataclass
class PidError:
    """Previous, current and accumulated control error."""

    last: float = 0.0
    now: float = 0.0
    all: float = 0.0

    def update(self, value: float) -> None:
        """Shift in a new error value and add it to the running sum."""
        self.last = self.now
        self.now = value
        self.all += value


class Direction(enum.Enum):
    """Rotation direction, given as the levels of the two bridge inputs."""

    FORWARD = (False, True)
    REVERSE = (True, False)

    @property
    def in1(self) -> bool:
        return self.value[0]

    @property
    def in2(self) -> bool:
        return self.value[1]


@dataclass(frozen=True)
class WheelCommand:
    """Pin levels and PWM compare value sent to one wheel."""

    direction: Direction
    duty: int

    @property
    def in1(self) -> bool:
        return self.direction.in1

    @property
    def in2(self) -> bool:
        return self.direction.in2


def format_telemetry(fmt: str, *args: object) -> bytes:
    """Format a message as the serial link sends it, cut to the buffer size."""
    return (fmt % args).encode("utf-8")[:TELEMETRY_BUFFER_SIZE]


@dataclass
class DriveController:
    """State and control loop for the left and right wheel."""

    left: MotorState = field(default_factory=MotorState)
    right: MotorState = field(default_factory=MotorState)
    left_speed_gains: PidGains = field(default_factory=lambda: PidGains(0.5, 0.1, 0.1))
    right_speed_gains: PidGains = field(default_factory=lambda: PidGains(0.5, 0.1, 0.1))
    left_location_gains: PidGains = field(default_factory=lambda: PidGains(20.0, 0.0, 0.0))
    right_location_gains: PidGains = field(default_factory=lambda: PidGains(20.0, 0.0, 0.0))
    left_speed_error: PidError = field(default_factory=PidError)
    right_speed_error: PidError = field(default_factory=PidError)
    left_location_error: PidError = field(default_factory=PidError)
    right_location_error: PidError = field(default_factory=PidError)
    encode_left: int = 0
    encode_right: int = 0

    def measure(self, left_count: int, right_count: int) -> tuple[WheelCommand, WheelCommand]:
        """Run one control period from raw encoder counter readings.

        The counters are taken as 16-bit signed values; the right encoder is
        mounted mirrored, so its count is negated.
        """
        self.encode_left = _to_int16(left_count)
        self.encode_right = _to_int16(-_to_int16(right_count))

        left, right = self.left, self.right
        left.location_act = self.encode_left / COUNTS_PER_REVOLUTION + left.location_act
        # The right wheel's distance is accumulated on top of the left one.
        right.location_act = self.encode_right / COUNTS_PER_REVOLUTION + left.location_act

        self.left_location_error.update(left.location_exp - left.location_act)
        self.right_location_error.update(right.location_exp - right.location_act)
        for error in (self.left_location_error, self.right_location_error):
            if error.all >= LOCATION_INTEGRAL_LIMIT:
                error.all = LOCATION_INTEGRAL_LIMIT

        for state in (left, right):
            if state.speed_exp >= SPEED_LIMIT:
                state.speed_exp = SPEED_LIMIT

        scale = CONTROL_RATE_HZ * SECONDS_PER_MINUTE / COUNTS_PER_REVOLUTION
        left.speed_act = float(self.encode_left) * scale
        right.speed_act = float(self.encode_right) * scale

        self.left_speed_error.update(left.speed_exp - left.speed_act)
        self.right_speed_error.update(right.speed_exp - right.speed_act)

        left.output = _float_to_int16(
            self.left_speed_gains.p * self.left_speed_error.now
            + self.left_speed_gains.i * self.left_speed_error.all
        )
        right.output = _float_to_int16(
            self.right_speed_gains.p * self.right_speed_error.now
            + self.right_speed_gains.i * self.right_speed_error.all
        )
        return self.drive(left.output, right.output)

    def drive(self, left_output: int, right_output: int) -> tuple[WheelCommand, WheelCommand]:
        """Turn signed outputs into bridge directions and PWM compare values.

        The left limits are checked against the stored left output.
        """
        stored = self.left.output
        if left_output >= 0:
            left_duty = PWM_MAX if stored > PWM_MAX else stored & 0xFFFFFFFF
            left_cmd = WheelCommand(Direction.FORWARD, left_duty)
        else:
            # The compare register receives the raw two's-complement value.
            left_duty = PWM_MAX if stored < -PWM_MAX else left_output & 0xFFFFFFFF
            left_cmd = WheelCommand(Direction.REVERSE, left_duty)

        if right_output >= 0:
            right_cmd = WheelCommand(Direction.FORWARD, min(right_output, PWM_MAX))
        else:
            duty = PWM_MAX if right_output < -PWM_MAX else -right_output
            right_cmd = WheelCommand(Direction.REVERSE, duty)
        return left_cmd, right_cmd

    def telemetry(self) -> bytes:
        """The status line sent over the serial link after each drive."""
        return format_telemetry(
            TELEMETRY_FORMAT,
            self.left.location_act,
            self.left.location_exp,
            self.left.speed_act,
            self.left.speed_exp,
        )