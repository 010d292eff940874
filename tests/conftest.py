import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ballistics.drag_model import BcKind, DragTableRegistry
from ballistics.projectile import Projectile, Simulation
from ballistics.units import feet_per_second, grains, inches


@pytest.fixture(scope='session')
def registry():
    return DragTableRegistry.standard()


@pytest.fixture
def reference_projectile(registry):
    """.264 in, 140 gr, G7 0.305 at 2710 ft/s."""
    return Projectile(
        caliber=inches(0.264),
        weight=grains(140.0),
        bc=0.305,
        drag_table=registry.get(BcKind.G7),
        velocity=feet_per_second(2710.0),
    )


@pytest.fixture
def reference_simulation(reference_projectile):
    return Simulation(projectile=reference_projectile)
