"""
Unit Tests for the Firing Platform and Game Loop
================================================
Howitzer elevation limits and range estimation, terrain generation,
the orchestrator, configuration and firing tables.
Run: python -m pytest tests/ -v
"""

import sys
import os
import math
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from artillery.config import DisplayScale, SimulationConfig
from artillery.errors import InvalidTimeStep
from artillery.firing_table import build_firing_table, compare_time_steps
from artillery.howitzer import Howitzer, HowitzerConfig
from artillery.simulation import Simulator
from artillery.terrain import Ground, MAX_RELIEF_FRACTION, PAD_COLUMNS
from artillery.vectors import Angle, Position, Velocity


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


class TestHowitzer:
    """Elevation clamping and firing bookkeeping."""

    def test_defaults(self):
        gun = Howitzer()
        assert gun.muzzle_velocity == 827.0
        assert gun.elevation.degrees == pytest.approx(45.0)
        assert gun.rounds_fired == 0
        assert gun.last_fire_time == -1.0
        assert gun.position == Position()
        assert gun.barrel_length == 6.0
        assert gun.can_fire()

    @pytest.mark.parametrize('start', [0.0, 10.0, 45.0, 80.0, 84.9, 85.0])
    def test_raise_past_max_clamps(self, start):
        gun = Howitzer(elevation=start)
        gun.raise_elevation(100.0)
        assert gun.elevation.degrees == pytest.approx(85.0)
        gun.raise_elevation(5.0)
        assert gun.elevation.degrees == pytest.approx(85.0)

    def test_rotate_past_max_clamps(self):
        gun = Howitzer()
        for _ in range(100):
            gun.rotate(0.05)
            assert gun.elevation.degrees <= 85.0 + 1e-9
        assert gun.elevation.degrees == pytest.approx(85.0)

    def test_lower_past_min_clamps_without_wrapping(self):
        gun = Howitzer(elevation=3.0)
        gun.raise_elevation(-10.0)
        assert gun.elevation.degrees == pytest.approx(0.0)
        gun.rotate(-0.5)
        assert gun.elevation.degrees == pytest.approx(0.0)

    def test_small_changes_inside_range(self):
        gun = Howitzer(elevation=45.0)
        gun.raise_elevation(2.5)
        assert gun.elevation.degrees == pytest.approx(47.5)
        gun.rotate(-math.radians(7.5))
        assert gun.elevation.degrees == pytest.approx(40.0)

    def test_set_elevation_clamps(self):
        gun = Howitzer()
        gun.set_elevation(120.0)
        assert gun.elevation.degrees == pytest.approx(85.0)
        gun.set_elevation(-20.0)
        assert gun.elevation.degrees == pytest.approx(0.0)
        gun.set_elevation(Angle.from_degrees(-5.0))
        assert gun.elevation.degrees == pytest.approx(0.0)
        gun.set_elevation(Angle.from_degrees(30.0))
        assert gun.elevation.degrees == pytest.approx(30.0)

    def test_presets(self):
        gun = Howitzer()
        gun.set_max_elevation()
        assert gun.elevation.degrees == pytest.approx(85.0)
        gun.set_min_elevation()
        assert gun.elevation.degrees == pytest.approx(0.0)
        gun.set_elevation(40.0)
        gun.set_horizontal()
        assert gun.elevation.degrees == pytest.approx(0.0)

    def test_custom_limits(self):
        gun = Howitzer(config=HowitzerConfig(min_elevation=10.0, max_elevation=60.0))
        gun.raise_elevation(100.0)
        assert gun.elevation.degrees == pytest.approx(60.0)
        gun.raise_elevation(-100.0)
        assert gun.elevation.degrees == pytest.approx(10.0)

    def test_invalid_limits(self):
        with pytest.raises(ValueError):
            HowitzerConfig(min_elevation=50.0, max_elevation=40.0)
        with pytest.raises(ValueError):
            HowitzerConfig(default_muzzle_velocity=0.0)

    def test_muzzle_velocity_ignores_non_positive(self):
        gun = Howitzer(muzzle_velocity=-10.0)
        assert gun.muzzle_velocity == 827.0
        gun.set_muzzle_velocity(0.0)
        assert gun.muzzle_velocity == 827.0
        gun.set_muzzle_velocity(500.0)
        assert gun.muzzle_velocity == 500.0

    def test_record_firing(self):
        gun = Howitzer()
        gun.record_firing(3.5)
        gun.record_firing(7.0)
        assert gun.rounds_fired == 2
        assert gun.last_fire_time == 7.0
        gun.reset()
        assert gun.rounds_fired == 0
        assert gun.last_fire_time == -1.0

    def test_reset_restores_defaults(self):
        gun = Howitzer(muzzle_velocity=400.0, elevation=70.0)
        gun.reset()
        assert gun.muzzle_velocity == 827.0
        assert gun.elevation.degrees == pytest.approx(45.0)

    def test_muzzle_geometry(self):
        gun = Howitzer(elevation=0.0, position=Position(100.0, 50.0))
        assert gun.muzzle_position == Position(100.0, 56.0)
        gun.set_elevation(30.0)
        assert gun.muzzle_velocity_vector == Velocity.from_angle(
            Angle.from_degrees(30.0), 827.0)

    def test_firing_solution(self):
        gun = Howitzer(muzzle_velocity=600.0, elevation=35.0,
                       position=Position(10.0, 20.0))
        position, elevation, muzzle_velocity = gun.firing_solution()
        assert position == Position(10.0, 20.0)
        assert elevation == Angle.from_degrees(35.0)
        assert muzzle_velocity == 600.0

    def test_generate_position(self, rng):
        gun = Howitzer()
        for _ in range(20):
            position = gun.generate_position(28000.0, rng)
            assert 2800.0 <= position.x <= 25200.0
            assert position.y == 0.0
            assert gun.position == position


class TestRangeEstimation:
    """Flat-ground range and the inverse firing solution."""

    def test_straight_up_has_no_range(self):
        gun = Howitzer(elevation=0.0)
        assert gun.estimate_range() == pytest.approx(0.0, abs=1e-6)

    def test_range_rises_from_vertical(self):
        gun = Howitzer(elevation=15.0)
        steep = gun.estimate_range()
        gun.set_elevation(45.0)
        assert gun.estimate_range() > steep > 0.0

    def test_angle_for_range_round_trip(self):
        gun = Howitzer(elevation=70.0)
        target = gun.estimate_range()
        solution = gun.estimate_angle_for_range(target)
        assert solution is not None
        gun.set_elevation(solution)
        assert gun.estimate_range() == pytest.approx(target, abs=25.0)

    def test_prefers_flatter_solution(self):
        gun = Howitzer(elevation=15.0)
        target = gun.estimate_range()
        solution = gun.estimate_angle_for_range(target)
        assert solution.degrees > 15.0 + 5.0

    def test_unreachable_range(self):
        gun = Howitzer()
        assert gun.estimate_angle_for_range(1e7) is None
        assert gun.estimate_angle_for_range(-100.0) is None


class TestConfig:
    """Display scale and orchestrator settings."""

    def test_scale_round_trip(self):
        scale = DisplayScale(40.0)
        assert scale.to_pixels(Position(400.0, 800.0)) == (10.0, 20.0)
        assert scale.from_pixels(10.0, 20.0) == Position(400.0, 800.0)
        assert scale.meters(700.0) == 28000.0

    def test_scale_must_be_positive(self):
        with pytest.raises(ValueError):
            DisplayScale(0.0)

    def test_simulation_defaults(self):
        config = SimulationConfig()
        assert config.time_step == 0.5
        assert config.hit_tolerance == 175.0
        assert config.trail_length == 20
        assert config.field_width_m == 28000.0
        assert config.field_height_m == 20000.0
        assert config.upper_right == Position(28000.0, 20000.0)


class TestGround:
    """Terrain profile and target placement."""

    def make_ground(self, rng):
        return Ground(700, 500, DisplayScale(40.0), rng)

    def test_reset_places_howitzer_on_ground(self, rng):
        ground = self.make_ground(rng)
        howitzer = ground.reset(Position(14000.0, 0.0))
        assert howitzer.x == 14000.0
        assert howitzer.y == pytest.approx(ground.elevation_at(howitzer))
        assert ground.howitzer_column == 350

    def test_target_is_down_range(self, rng):
        ground = self.make_ground(rng)
        for _ in range(10):
            ground.reset(Position(8000.0, 0.0))
            assert ground.target_column - ground.howitzer_column >= 175
            assert ground.target.x > 8000.0

    def test_target_sits_on_flat_pad(self, rng):
        ground = self.make_ground(rng)
        ground.reset(Position(4000.0, 0.0))
        target = ground.target
        assert target.y == pytest.approx(ground.elevation_at(target))
        i = ground.target_column
        lo = max(0, i - PAD_COLUMNS)
        hi = min(ground.width, i + PAD_COLUMNS + 1)
        assert np.all(ground.heights[lo:hi] == ground.heights[i])

    def test_no_room_puts_target_at_edge(self, rng):
        ground = self.make_ground(rng)
        ground.reset(Position(27000.0, 0.0))
        assert ground.target_column == ground.width - 1

    def test_relief_is_bounded(self, rng):
        ground = self.make_ground(rng)
        ground.reset(Position(14000.0, 0.0))
        assert ground.heights.min() >= 0.0
        assert ground.heights.max() <= MAX_RELIEF_FRACTION * 20000.0 + 1e-6
        assert len(ground.heights) == 700

    def test_elevation_clamps_at_edges(self, rng):
        ground = self.make_ground(rng)
        ground.reset(Position(14000.0, 0.0))
        assert ground.elevation_at(Position(-5000.0, 0.0)) == ground.ground_height(0)
        assert ground.elevation_at(Position(1e6, 0.0)) == ground.ground_height(699)

    def test_elevation_interpolates_between_columns(self, rng):
        ground = self.make_ground(rng)
        ground.reset(Position(14000.0, 0.0))
        left, right = ground.ground_height(100), ground.ground_height(101)
        middle = ground.elevation_at(Position(100.5 * 40.0, 0.0))
        assert middle == pytest.approx((left + right) / 2.0)

    def test_heights_are_read_only(self, rng):
        ground = self.make_ground(rng)
        ground.reset(Position(14000.0, 0.0))
        with pytest.raises(ValueError):
            ground.heights[0] = 1.0

    def test_valid_positions(self, rng):
        ground = self.make_ground(rng)
        ground.reset(Position(14000.0, 0.0))
        surface = ground.elevation_at(Position(5000.0, 0.0))
        assert ground.is_valid_position(Position(5000.0, surface + 10.0))
        assert not ground.is_valid_position(Position(5000.0, surface - 10.0))
        assert not ground.is_valid_position(Position(-1.0, 5000.0))
        assert not ground.is_valid_position(Position(5000.0, 1e6))
        assert ground.height_above_ground(Position(5000.0, surface + 10.0)) == \
            pytest.approx(10.0)

    def test_same_seed_same_terrain(self):
        a = Ground(700, 500, DisplayScale(), np.random.default_rng(7))
        b = Ground(700, 500, DisplayScale(), np.random.default_rng(7))
        a.reset(Position(14000.0, 0.0))
        b.reset(Position(14000.0, 0.0))
        assert np.array_equal(a.heights, b.heights)
        assert a.target == b.target

    def test_too_small_field(self):
        with pytest.raises(ValueError):
            Ground(1, 500)


class TestSimulator:
    """Orchestrator: firing, ticking, impacts and score."""

    def test_initial_state(self, rng):
        sim = Simulator(rng=rng)
        assert not sim.is_firing
        assert sim.score == 0
        assert sim.shots_attempted == 0
        assert sim.hit_rate == 0.0
        assert sim.howitzer.position.x == pytest.approx(14000.0)
        assert sim.howitzer.position.y == pytest.approx(
            sim.ground.elevation_at(sim.howitzer.position))
        assert 'Press SPACE to fire' in sim.status_text()

    def test_fire_once_at_a_time(self, rng):
        sim = Simulator(rng=rng)
        assert sim.fire() is True
        assert sim.fire() is False
        assert sim.shots_attempted == 1
        assert sim.howitzer.rounds_fired == 1
        assert sim.howitzer.last_fire_time == 0.0
        assert sim.projectile.is_flying
        assert 'Projectile in flight' in sim.status_text()

    def test_update_requires_positive_step(self, rng):
        sim = Simulator(rng=rng)
        with pytest.raises(InvalidTimeStep):
            sim.update(0.0)
        with pytest.raises(InvalidTimeStep):
            sim.update(-0.5)

    def test_update_while_idle_does_nothing(self, rng):
        sim = Simulator(rng=rng)
        sim.update()
        assert sim.time == 0.0
        assert sim.trail == ()

    def test_tick_advances_shell(self, rng):
        sim = Simulator(rng=rng)
        sim.fire()
        sim.update()
        assert sim.time == 0.5
        assert len(sim.projectile.trajectory) == 2
        assert sim.trail[0] == sim.projectile.position

    def test_trail_keeps_latest_positions(self, rng):
        sim = Simulator(rng=rng)
        sim.fire()
        for _ in range(30):
            sim.update()
        assert sim.is_firing
        assert len(sim.trail) == 20
        assert sim.trail[0] == sim.projectile.position
        assert sim.trail[0].x > sim.trail[-1].x

    def test_miss(self, rng):
        sim = Simulator(SimulationConfig(hit_tolerance=0.0), rng)
        target = sim.ground.target
        sim.fire()
        assert sim.run_shot() is False
        assert not sim.is_firing
        assert sim.score == 0
        assert sim.last_impact is not None
        assert not sim.projectile.is_flying
        assert len(sim.projectile.trajectory) == 0
        assert sim.trail == ()
        # terrain only changes after a hit
        assert sim.ground.target == target
        assert 'Target: Miss' in sim.status_text()

    def test_hit(self, rng):
        sim = Simulator(SimulationConfig(hit_tolerance=1e9), rng)
        sim.fire()
        assert sim.run_shot() is True
        assert sim.score == 1
        assert sim.hit_rate == 1.0
        assert sim.howitzer.position.y == pytest.approx(
            sim.ground.elevation_at(sim.howitzer.position))
        assert 'Target: HIT!' in sim.status_text()
        assert 'Score: 1/1 (100%)' in sim.status_text()

    def test_impact_is_at_or_below_ground(self, rng):
        sim = Simulator(rng=rng)
        sim.fire()
        sim.run_shot()
        impact = sim.last_impact
        assert impact.y <= sim.ground.elevation_at(impact) or impact.y < 0.0

    def test_commands(self, rng):
        sim = Simulator(rng=rng)
        start = sim.howitzer.elevation.degrees
        sim.handle_command('right')
        assert sim.howitzer.elevation.degrees == pytest.approx(start + math.degrees(0.05))
        sim.handle_command('left')
        assert sim.howitzer.elevation.degrees == pytest.approx(start)
        sim.handle_command('up')
        assert sim.howitzer.elevation.degrees == pytest.approx(start - math.degrees(0.003))
        sim.handle_command('down')
        assert sim.howitzer.elevation.degrees == pytest.approx(start)
        sim.handle_command('fire')
        assert sim.is_firing
        with pytest.raises(ValueError):
            sim.handle_command('jump')

    def test_up_turns_barrel_toward_vertical(self, rng):
        sim = Simulator(rng=rng)
        before = sim.howitzer.elevation.dy
        sim.handle_command('up')
        assert sim.howitzer.elevation.dy > before
        sim.handle_command('down')
        sim.handle_command('down')
        assert sim.howitzer.elevation.dy < before

    def test_commands_respect_limits(self, rng):
        sim = Simulator(rng=rng)
        for _ in range(200):
            sim.handle_command('right')
        assert sim.howitzer.elevation.degrees == pytest.approx(85.0)
        for _ in range(200):
            sim.handle_command('left')
        assert sim.howitzer.elevation.degrees == pytest.approx(0.0)

    def test_reset_abandons_shell(self, rng):
        sim = Simulator(rng=rng)
        sim.fire()
        sim.update()
        sim.reset()
        assert not sim.is_firing
        assert sim.time == 0.0
        assert not sim.projectile.is_flying
        assert sim.shots_attempted == 1

    def test_new_game(self, rng):
        sim = Simulator(SimulationConfig(hit_tolerance=1e9), rng)
        sim.howitzer.set_elevation(70.0)
        sim.fire()
        sim.run_shot()
        sim.new_game()
        assert sim.score == 0
        assert sim.shots_attempted == 0
        assert sim.last_impact is None
        assert sim.howitzer.rounds_fired == 0
        assert sim.howitzer.elevation.degrees == pytest.approx(45.0)
        assert 2800.0 <= sim.howitzer.position.x <= 25200.0
        assert sim.howitzer.position.y == pytest.approx(
            sim.ground.elevation_at(sim.howitzer.position))


class TestFiringTable:
    """Elevation sweeps and step comparison."""

    def test_rows(self):
        rows = build_firing_table(elevations=(30.0, 45.0), verbose=False)
        assert [r.elevation_deg for r in rows] == [30.0, 45.0]
        for row in rows:
            assert row.range_m > 0.0
            assert row.max_altitude_m > 0.0
            assert row.flight_time_s > 0.0
            assert row.impact_angle_deg > 0.0

    def test_steeper_shot_climbs_higher(self):
        steep, flat = build_firing_table(elevations=(20.0, 70.0), verbose=False)
        assert steep.max_altitude_m > flat.max_altitude_m
        assert steep.flight_time_s > flat.flight_time_s

    def test_compare_time_steps(self):
        results = compare_time_steps(steps=(1.0, 0.1), verbose=False)
        assert set(results) == {1.0, 0.1}
        assert len(results[0.1].time) > len(results[1.0].time)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
