"""
Unit tests for SystemState class.

Tests cover:
- Empty and seeded construction
- Appending and descending-order removal
- Body views and representation
"""

import numpy as np
import pytest

from planetsim.body import Body
from planetsim.state import SystemState


def make_body(x, mass=1.0e20, radius=100.0):
    return Body(position=[x, 0.0, 0.0], velocity=[0.0, x / 1.0e6, 0.0], radius=radius, mass=mass)


class TestSystemStateBasics:
    """Tests for basic SystemState functionality."""

    def test_empty(self):
        state = SystemState()
        assert state.n_bodies == 0
        assert len(state) == 0
        assert state.positions.shape == (0, 3)
        assert state.velocities.shape == (0, 3)
        assert state.masses.shape == (0,)
        assert state.total_mass == 0.0
        assert state.time == 0.0
        assert state.timestep_count == 0

    def test_seeded(self):
        state = SystemState([make_body(1.0e7), make_body(2.0e7)])
        assert state.n_bodies == 2
        assert state.positions.shape == (2, 3)
        assert state.positions.dtype == np.float64

    def test_append_returns_index(self):
        state = SystemState()
        assert state.append(make_body(1.0e7)) == 0
        assert state.append(make_body(2.0e7)) == 1
        assert state.positions[1, 0] == 2.0e7

    def test_total_mass(self):
        state = SystemState([make_body(1.0e7, mass=2.0e20), make_body(2.0e7, mass=3.0e20)])
        assert state.total_mass == pytest.approx(5.0e20)


class TestRemoval:
    """Tests for index-based removal."""

    def test_remove_keeps_order_of_survivors(self):
        state = SystemState([make_body(float(x) * 1.0e6) for x in range(1, 6)])
        state.remove({0, 2, 4})
        np.testing.assert_array_equal(state.positions[:, 0], [2.0e6, 4.0e6])
        np.testing.assert_array_equal(state.velocities[:, 1], [2.0, 4.0])
        assert state.n_bodies == 2

    def test_remove_ignores_duplicates(self):
        state = SystemState([make_body(1.0e6), make_body(2.0e6), make_body(3.0e6)])
        state.remove([1, 1, 1])
        np.testing.assert_array_equal(state.positions[:, 0], [1.0e6, 3.0e6])

    def test_remove_nothing(self):
        state = SystemState([make_body(1.0e6)])
        state.remove(set())
        assert state.n_bodies == 1

    def test_remove_out_of_range(self):
        state = SystemState([make_body(1.0e6)])
        with pytest.raises(IndexError):
            state.remove([3])


class TestBodyViews:

    def test_body_is_a_copy(self):
        state = SystemState([make_body(1.0e6, radius=42.0)])
        body = state.body(0)
        assert body.radius == 42.0
        body.position[0] = -1.0
        assert state.positions[0, 0] == 1.0e6

    def test_bodies_in_order(self):
        state = SystemState([make_body(1.0e6), make_body(2.0e6)])
        xs = [b.position[0] for b in state.bodies]
        assert xs == [1.0e6, 2.0e6]

    def test_repr(self):
        state = SystemState([make_body(1.0e6)])
        text = repr(state)
        assert "Bodies: 1" in text
        assert "SystemState" in text
