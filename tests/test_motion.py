"""Tests for the single-axis bounce integrator."""
import pytest

from bouncing.motion import Motion


def make_motion(position=0.0, speed=0.0, acceleration=0.0, lower=None, upper=None):
    motion = Motion()
    motion.position = position
    motion.speed = speed
    motion.acceleration = acceleration
    if lower is not None:
        motion.set_lower_limit(lower)
    if upper is not None:
        motion.set_upper_limit(upper)
    return motion


def test_new_motion_is_at_rest_and_unbounded():
    motion = Motion()
    assert motion.position == 0.0
    assert motion.speed == 0.0
    assert motion.acceleration == 0.0
    assert not motion.has_lower_limit
    assert not motion.has_upper_limit


def test_unbounded_motion_follows_closed_form():
    """Without limits move() is speed += a; position += speed, exactly."""
    motion = make_motion(position=3.0, speed=-1.5, acceleration=0.25)
    position, speed = 3.0, -1.5
    for _ in range(1000):
        motion.move(0.5)
        speed += 0.25
        position += speed
        assert motion.speed == speed
        assert motion.position == position


def test_upper_limit_clamps_and_reflects():
    motion = make_motion(position=9.0, speed=2.0, upper=10.0)

    motion.move(0.5)
    assert motion.position == 10.0
    assert motion.speed == -1.0

    motion.move(0.5)
    assert motion.position == 9.0


def test_lower_limit_clamps_and_reflects():
    motion = make_motion(position=1.0, speed=-3.0, lower=0.0)

    motion.move(0.8)
    assert motion.position == 0.0
    assert motion.speed == pytest.approx(2.4)


def test_position_on_limit_does_not_bounce():
    """Limits are inclusive."""
    motion = make_motion(position=8.0, speed=2.0, upper=10.0)
    motion.move(0.5)
    assert motion.position == 10.0
    assert motion.speed == 2.0


def test_lower_limit_wins_when_limits_are_inverted():
    motion = make_motion(position=5.0, speed=0.0, lower=10.0, upper=0.0)
    motion.move(0.5)
    assert motion.position == 10.0
    motion.move(0.5)
    # Now above the upper limit and not below the lower one
    assert motion.position == 0.0


def test_bounce_factor_above_one_is_not_clamped():
    motion = make_motion(position=9.0, speed=2.0, upper=10.0)
    motion.move(2.0)
    assert motion.speed == -4.0


def test_accelerate_is_one_time_boost():
    motion = make_motion(speed=1.0, acceleration=0.5)
    motion.accelerate(2.0)
    assert motion.speed == 3.0
    assert motion.acceleration == 0.5


def test_halt_keeps_position():
    motion = make_motion(position=4.0, speed=7.0, acceleration=-2.0)
    motion.halt()
    assert motion.speed == 0.0
    assert motion.acceleration == 0.0
    assert motion.position == 4.0


@pytest.mark.parametrize("value", [0.0, -3.75, 1e-300, 12345.678])
def test_acceleration_round_trips(value):
    motion = Motion()
    motion.acceleration = value
    assert motion.acceleration == value
