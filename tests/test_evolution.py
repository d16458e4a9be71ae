"""
Unit tests for the time evolution engine.
"""

import logging

import numpy as np
import pytest

from planetsim.body import Body
from planetsim.config import SimulationParameters
from planetsim.diagnostics import NonFiniteStateError
from planetsim.evolution import (
    PlanetarySystem,
    TickReport,
    evolve_system,
    run_simulation,
)
from planetsim.initialization import make_rng
from planetsim import constants as const


def resting_body(position, radius=1000.0, mass=1.0e15):
    return Body(position=position, velocity=[0.0, 0.0, 0.0], radius=radius, mass=mass)


def make_system(bodies, **overrides):
    """Engine seeded with bodies; spawning disabled unless overridden."""
    overrides.setdefault('target_count', 0)
    params = SimulationParameters(**overrides)
    return PlanetarySystem(params, rng=make_rng(0), bodies=bodies)


class TestConstruction:

    def test_new_is_empty(self):
        system = PlanetarySystem.new()
        assert system.body_count == 0
        assert len(system.get_positions()) == 0
        assert len(system.get_masses()) == 0

    def test_invalid_parameters_rejected(self):
        with pytest.raises(ValueError, match="star mass"):
            PlanetarySystem(SimulationParameters(star_mass=-1.0))

    def test_repr(self):
        system = make_system([resting_body([1.0e8, 0.0, 0.0])])
        assert "Bodies: 1" in repr(system)


class TestSpawning:
    """Population growth before removal."""

    def test_fills_to_target_in_one_tick(self):
        system = PlanetarySystem(SimulationParameters(target_count=10), rng=make_rng(0))
        report = system.tick()
        assert report.spawned == 10
        assert system.body_count == 10 - report.removed + report.merges

    def test_tops_up_to_target(self):
        bodies = [resting_body([1.0e8, 0.0, 0.0]), resting_body([0.0, 1.0e8, 0.0])]
        system = make_system(bodies, target_count=5)
        report = system.tick()
        assert report.spawned == 3

    def test_mass_policy(self):
        params = SimulationParameters(spawn_policy="mass", target_total_mass=1.0e24)
        system = PlanetarySystem(params, rng=make_rng(5))
        report = system.tick()
        assert report.spawned > 0


class TestEndToEnd:
    """Four bodies from an empty system, collisions disabled."""

    DRAWS = [
        0.5, 0.5, 0.75, 0.5, 0.5, 0.6, 0.5, 0.5,
        0.5, 0.5, 0.5, 0.75, 0.5, 0.5, 0.6, 0.5,
        0.5, 0.5, 0.5, 0.5, 0.75, 0.5, 0.5, 0.6,
        0.5, 0.5, 0.25, 0.5, 0.5, 0.4, 0.5, 0.5,
    ]

    def test_one_tick(self, scripted_rng):
        params = SimulationParameters(target_count=4, collision_coefficient=0.0)
        system = PlanetarySystem.new(params, rng=scripted_rng(self.DRAWS))

        # Replay the same draws to know what was spawned
        replay = scripted_rng(self.DRAWS)
        spawned = [Body.random(replay, params) for _ in range(4)]

        report = system.tick()

        assert report == TickReport(spawned=4)
        assert system.body_count == 4

        # Positions moved by dt × initial velocity; acceleration only touched velocity
        expected = np.array([b.position + const.UNIT_TIME * b.velocity for b in spawned])
        np.testing.assert_allclose(system.get_positions().reshape(-1, 3), expected, rtol=1e-12)
        np.testing.assert_array_equal(system.get_masses(), [b.mass for b in spawned])

        # Velocities changed: the star pulls every body inward
        for body, initial in zip(system.get_bodies(), spawned):
            assert not np.allclose(body.velocity, initial.velocity, rtol=0, atol=1e-9)

    def test_time_advances(self, scripted_rng):
        params = SimulationParameters(target_count=4, collision_coefficient=0.0)
        system = PlanetarySystem.new(params, rng=scripted_rng(self.DRAWS))
        system.tick()
        system.tick()
        assert system.state.timestep_count == 2
        assert system.state.time == 2 * const.UNIT_TIME


class TestEscape:
    """Bodies at the bounding sphere leave the system."""

    def test_beyond_threshold_removed(self):
        params = SimulationParameters()
        system = make_system([resting_body([params.escape_radius + 1.0, 0.0, 0.0])])
        report = system.tick()
        assert report.escaped == 1
        assert report.merges == 0
        assert system.body_count == 0

    def test_inside_threshold_retained(self):
        params = SimulationParameters()
        system = make_system([resting_body([0.0, 0.0, -(params.escape_radius - 1.0)])])
        report = system.tick()
        assert report.escaped == 0
        assert system.body_count == 1

    def test_escape_is_logged(self, caplog):
        params = SimulationParameters()
        system = make_system([resting_body([params.escape_radius + 1.0, 0.0, 0.0])])
        with caplog.at_level(logging.DEBUG, logger="planetsim.evolution"):
            system.tick()
        assert "Body 0 escaped" in caplog.text


class TestStarCollision:
    """Bodies touching the star are removed."""

    def test_inside_contact_removed(self):
        contact = const.STAR_RADIUS + 1000.0
        system = make_system([resting_body([0.0, contact - 1.0, 0.0])])
        report = system.tick()
        assert report.star_collisions == 1
        assert report.merges == 0
        assert system.body_count == 0

    def test_outside_contact_retained(self):
        contact = const.STAR_RADIUS + 1000.0
        system = make_system([resting_body([0.0, contact + 1.0, 0.0])])
        report = system.tick()
        assert report.star_collisions == 0
        assert system.body_count == 1

    def test_logged_separately_from_escape(self, caplog):
        system = make_system([resting_body([const.STAR_RADIUS, 0.0, 0.0])])
        with caplog.at_level(logging.DEBUG, logger="planetsim.evolution"):
            system.tick()
        assert "collided with the star" in caplog.text
        assert "Body 0 escaped" not in caplog.text


class TestMerging:
    """Body-body collisions and merge products."""

    def test_pair_merges(self):
        a = resting_body([1.0e8, 0.0, 0.0], radius=1000.0, mass=2.0e15)
        b = resting_body([1.0e8 + 1500.0, 0.0, 0.0], radius=2000.0, mass=3.0e15)
        system = make_system([a, b])

        report = system.tick()

        assert report.merges == 1
        assert report.removed == 2
        assert system.body_count == 1

        product = system.get_bodies()[0]
        assert product.mass == a.mass + b.mass
        assert product.radius ** 3 == pytest.approx(a.radius ** 3 + b.radius ** 3, rel=1e-12)
        # Both were at rest, so the drift left them in place
        np.testing.assert_allclose(product.position, [1.0e8 + 750.0, 0.0, 0.0])

    def test_coefficient_controls_contact(self):
        a = resting_body([1.0e8, 0.0, 0.0])
        b = resting_body([1.0e8 + 5000.0, 0.0, 0.0])
        assert make_system([a, b]).tick().merges == 0
        assert make_system([a, b], collision_coefficient=3.0).tick().merges == 1

    def test_shared_partner_produces_two_products(self):
        """A touches both B and C; each pair yields its own product."""
        a = resting_body([1.0e8, 0.0, 0.0], mass=1.0e15)
        b = resting_body([1.0e8 + 1500.0, 0.0, 0.0], mass=2.0e15)
        c = resting_body([1.0e8 - 1500.0, 0.0, 0.0], mass=4.0e15)
        system = make_system([a, b, c])

        report = system.tick()

        assert report.merges == 2
        assert report.removed == 3
        assert system.body_count == 2
        # A's mass is counted in both products
        assert np.sum(system.get_masses()) == pytest.approx(2 * a.mass + b.mass + c.mass)

    def test_products_wait_for_next_tick(self):
        """Overlapping merge products are not merged in the tick that made them."""
        a = resting_body([1.0e8, 0.0, 0.0])
        b = resting_body([1.0e8 + 1500.0, 0.0, 0.0])
        c = resting_body([1.0e8 - 1500.0, 0.0, 0.0])
        system = make_system([a, b, c])

        system.tick()
        products = system.get_bodies()
        assert len(products) == 2
        distance = np.linalg.norm(products[0].position - products[1].position)
        assert distance < products[0].radius + products[1].radius

        report = system.tick()
        assert report.merges == 1
        assert system.body_count == 1
        assert system.get_masses()[0] == pytest.approx(4 * a.mass)

    def test_spawned_body_merges_in_same_tick(self, scripted_rng):
        """A body spawned on top of an existing one merges before the tick ends."""
        # radius, density, position (R/2, 0, 0), velocity at rest
        draws = [0.5, 0.5, 0.75, 0.5, 0.5, 0.5, 0.5, 0.5]
        x = const.SYSTEM_RADIUS / 2
        seeded = resting_body([x + 100.0, 0.0, 0.0])
        params = SimulationParameters(target_count=2)
        system = PlanetarySystem(params, rng=scripted_rng(draws), bodies=[seeded])

        report = system.tick()

        assert report.spawned == 1
        assert report.merges == 1
        assert report.removed == 2
        assert system.body_count == 1
        spawned_mass = Body.random(scripted_rng(draws), params).mass
        assert system.get_masses()[0] == pytest.approx(seeded.mass + spawned_mass)

    def test_escaped_body_still_merges(self):
        params = SimulationParameters()
        x = params.escape_radius + 10.0
        a = resting_body([x, 0.0, 0.0])
        b = resting_body([x + 1500.0, 0.0, 0.0])
        system = make_system([a, b])
        report = system.tick()
        assert report.escaped == 2
        assert report.merges == 1
        assert system.body_count == 1


class TestNumerics:
    """Hardened numeric edge cases."""

    def test_coincident_bodies_stay_finite(self):
        a = resting_body([1.0e8, 0.0, 0.0], mass=1.0e22)
        b = resting_body([1.0e8, 0.0, 0.0], mass=1.0e22)
        system = make_system([a, b], collision_coefficient=0.0)
        system.tick()
        system.tick()
        assert np.all(np.isfinite(system.get_positions()))
        assert np.all(np.isfinite(system.state.velocities))

    def test_non_finite_state_raises(self):
        body = Body(position=[1.0e8, 0.0, 0.0], velocity=[np.inf, 0.0, 0.0],
                    radius=1000.0, mass=1.0e15)
        system = make_system([body])
        with pytest.raises(NonFiniteStateError) as excinfo:
            system.tick()
        assert excinfo.value.indices == [0]
        assert isinstance(excinfo.value, ArithmeticError)


class TestAccessors:
    """Read-only views of the population."""

    def test_idempotent(self):
        system = PlanetarySystem(SimulationParameters(target_count=8), rng=make_rng(2))
        system.tick()
        np.testing.assert_array_equal(system.get_positions(), system.get_positions())
        np.testing.assert_array_equal(system.get_masses(), system.get_masses())
        assert system.body_count == system.body_count

    def test_returned_arrays_are_copies(self):
        system = make_system([resting_body([1.0e8, 0.0, 0.0])])
        positions = system.get_positions()
        masses = system.get_masses()
        positions[:] = 0.0
        masses[:] = 0.0
        assert system.get_positions()[0] == 1.0e8
        assert system.get_masses()[0] == 1.0e15

    def test_flat_layout(self):
        system = make_system([resting_body([1.0, 2.0, 3.0 + 1.0e8]),
                              resting_body([4.0, 5.0 + 1.0e8, 6.0])])
        positions = system.get_positions()
        assert positions.shape == (6,)
        np.testing.assert_array_equal(positions, [1.0, 2.0, 3.0 + 1.0e8, 4.0, 5.0 + 1.0e8, 6.0])
        np.testing.assert_array_equal(system.get_radii(), [1000.0, 1000.0])


class TestEvolveSystem:
    """Tests for the multi-tick driver."""

    def test_statistics(self):
        system = PlanetarySystem(SimulationParameters(target_count=6), rng=make_rng(4))
        stats = evolve_system(system, 5, show_progress=False)

        assert stats['final_timestep'] == 5
        assert stats['final_time'] == pytest.approx(5 * const.UNIT_TIME)
        assert stats['final_count'] == system.body_count
        assert stats['total_spawned'] >= 6
        for key in ('total_escaped', 'total_star_collisions', 'total_merges'):
            assert stats[key] >= 0

    def test_health_checks_run(self, recwarn):
        system = PlanetarySystem(SimulationParameters(target_count=4), rng=make_rng(4))
        stats = evolve_system(system, 2, show_progress=False, health_check_every=1)
        assert stats['final_timestep'] == 2

    def test_run_simulation(self):
        params = SimulationParameters(target_count=5, n_steps=3)
        system, stats = run_simulation(params, seed=1, show_progress=False)
        assert system.state.timestep_count == 3
        assert stats['final_count'] == system.body_count

    def test_run_simulation_reproducible(self):
        params = SimulationParameters(target_count=5, n_steps=2)
        first, _ = run_simulation(params, show_progress=False)
        second, _ = run_simulation(params, show_progress=False)
        np.testing.assert_array_equal(first.get_positions(), second.get_positions())
