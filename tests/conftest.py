"""
Pytest configuration for the planetary system simulation tests.

This file ensures the planetsim package is importable from tests and
provides a scripted random source for deterministic spawning.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / 'src'))


class ScriptedRandom:
    """
    Random source replaying a fixed sequence of unit draws.

    Mimics numpy.random.Generator.random(size=None); the sequence wraps
    around when exhausted.
    """

    def __init__(self, draws):
        self.draws = [float(d) for d in draws]
        self.calls = 0

    def _next(self):
        value = self.draws[self.calls % len(self.draws)]
        self.calls += 1
        return value

    def random(self, size=None):
        if size is None:
            return self._next()
        return np.array([self._next() for _ in range(size)])


@pytest.fixture
def scripted_rng():
    """Factory for ScriptedRandom instances."""
    return ScriptedRandom
