import random

import pytest

from bouncing.ball import Ball
from bouncing.config import SimConfig
from bouncing.world import World, generate_colors, playfield_limits


def make_config(**overrides):
    base = SimConfig(
        width=100.0,
        height=80.0,
        n_balls=0,
        min_radius=5.0,
        max_radius=10.0,
        max_initial_speed=4.0,
        gravity=0.5,
        bounce_factor=0.9,
        max_balls=50,
        seed=1,
    )
    return base.replace(**overrides)


def test_world_spawns_configured_number_of_balls():
    world = World(make_config(n_balls=7))
    assert len(world.balls) == 7
    for ball in world.balls:
        assert 5.0 <= ball.radius <= 10.0
        assert ball.radius <= ball.x <= 100.0 - ball.radius
        assert ball.radius <= ball.y <= 80.0 - ball.radius
        assert ball.acceleration_y == 0.5
        assert ball.bounce_factor == 0.9


def test_balls_stay_inside_walls():
    world = World(make_config(n_balls=10, max_initial_speed=30.0))
    for _ in range(500):
        world.step()
        for ball in world.balls:
            assert ball.radius <= ball.x <= world.config.width - ball.radius
            assert ball.radius <= ball.y <= world.config.height - ball.radius
    assert world.ticks == 500
    assert all(ball.steps == 500 for ball in world.balls)


def test_seeded_worlds_are_reproducible():
    a = World(make_config(n_balls=5, seed=42))
    b = World(make_config(n_balls=5, seed=42))
    for _ in range(20):
        a.step()
        b.step()
    assert a.get_state() == b.get_state()


def test_add_ball_defaults_to_centre_and_palette_color():
    world = World(make_config())
    ball = world.add_ball(4.0)
    assert (ball.x, ball.y) == (50.0, 40.0)
    assert ball.color == world.palette[0]
    assert world.add_ball(4.0).color == world.palette[1]
    assert ball.x_motion.lower_limit == 4.0
    assert ball.x_motion.upper_limit == 96.0
    assert ball.y_motion.upper_limit == 76.0


def test_add_ball_rejects_negative_radius():
    world = World(make_config())
    with pytest.raises(ValueError):
        world.add_ball(-1.0)
    assert world.balls == []


def test_add_ball_respects_population_cap():
    world = World(make_config(max_balls=2))
    world.add_ball(1.0)
    world.add_ball(1.0)
    with pytest.raises(ValueError):
        world.add_ball(1.0)


def test_explode_replaces_ball_with_fragments():
    world = World(make_config(), rng=random.Random(3))
    first = world.add_ball(8.0, x=20.0, y=30.0, color="red")
    last = world.add_ball(8.0, color="blue")

    children = world.explode(0)

    assert len(world.balls) == 9
    assert world.balls[0:8] == children
    assert world.balls[8] is last
    assert first not in world.balls
    assert world.explosions == 1
    for child in children:
        assert child.radius == 4.0
        assert child.color == "red"
        assert (child.x, child.y) == (20.0, 30.0)
        assert child.bounce_factor == 0.9
        assert child.x_motion.lower_limit == 4.0


def test_explode_bad_index_raises_index_error():
    world = World(make_config())
    world.add_ball(8.0)
    with pytest.raises(IndexError):
        world.explode(1)
    with pytest.raises(IndexError):
        world.explode(-1)


def test_explode_small_ball_raises_value_error():
    world = World(make_config(min_explode_radius=2.0))
    world.add_ball(1.0)
    with pytest.raises(ValueError):
        world.explode(0)


def test_explode_full_world_raises_value_error():
    world = World(make_config(max_balls=8))
    world.add_ball(8.0)
    world.add_ball(8.0)
    with pytest.raises(ValueError):
        world.explode(0)
    assert len(world.balls) == 2


def test_automatic_explosions_stop_at_minimum_radius():
    world = World(make_config(explode_every=5, min_explode_radius=2.0, max_balls=1000))
    world.add_ball(8.0)

    for _ in range(5):
        world.step()
    assert len(world.balls) == 8

    for _ in range(50):
        world.step()
    # 8 -> 4 -> 2 -> 1: three generations explode
    assert len(world.balls) == 8 ** 3
    assert all(ball.radius == 1.0 for ball in world.balls)
    assert world.explosions == 1 + 8 + 64


def test_automatic_explosions_respect_population_cap():
    world = World(make_config(explode_every=1, max_balls=20))
    world.add_ball(8.0)
    world.add_ball(8.0)
    world.add_ball(8.0)
    world.step()
    # Two explosions fit (3 + 7 + 7 = 17), the third would not
    assert len(world.balls) == 17
    assert world.explosions == 2


def test_resize_moves_walls():
    world = World(make_config())
    ball = world.add_ball(5.0)
    world.resize(200.0, 150.0)
    assert ball.x_motion.upper_limit == 195.0
    assert ball.y_motion.upper_limit == 145.0
    with pytest.raises(ValueError):
        world.resize(0.0, 10.0)
    assert world.config.width == 200.0


def test_ball_wider_than_field_is_pinned_to_centre():
    assert playfield_limits(10.0, 8.0) == (5.0, 5.0)
    assert playfield_limits(10.0, 2.0) == (2.0, 8.0)


def test_halt_all_stops_every_ball():
    world = World(make_config(n_balls=4))
    world.halt_all()
    for ball in world.balls:
        assert (ball.delta_x, ball.delta_y) == (0.0, 0.0)
        assert (ball.acceleration_x, ball.acceleration_y) == (0.0, 0.0)


def test_reset_restores_seeded_population():
    world = World(make_config(n_balls=3, seed=9))
    initial = world.get_state()
    for _ in range(10):
        world.step()
    world.explode(0)

    world.reset()

    assert world.get_state() == initial
    assert world.ticks == 0
    assert world.explosions == 0


def test_invalid_config_raises_error():
    with pytest.raises(ValueError):
        World(make_config(min_radius=20.0, max_radius=10.0))


def test_get_state_lists_balls():
    world = World(make_config())
    world.add_ball(3.0, x=10.0, y=20.0, speed=(1.0, -1.0), color="#123456")
    state = world.get_state()
    assert state["width"] == 100.0
    assert state["ticks"] == 0
    assert state["balls"] == [
        {
            "id": 0,
            "x": 10.0,
            "y": 20.0,
            "radius": 3.0,
            "color": "#123456",
            "dx": 1.0,
            "dy": -1.0,
            "steps": 0,
        }
    ]


def test_generate_colors_are_distinct_hex_tokens():
    colors = generate_colors(12)
    assert len(set(colors)) == 12
    assert all(c.startswith("#") and len(c) == 7 for c in colors)


def test_world_accepts_plain_balls_in_list():
    world = World(make_config())
    world.balls.append(Ball("red", 1.0))
    world.step()
    assert world.balls[0].steps == 1
