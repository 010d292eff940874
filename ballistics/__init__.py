"""
Exterior Ballistics Point-Mass Solver
=====================================
Predicts the flight of a small-arms projectile from muzzle to target,
incorporating the forces that matter at rifle ranges:
  - Gravity
  - Mach-dependent aerodynamic drag from the standard G-function tables
  - Moist-air density and speed of sound
  - Wind (head/tail/cross)
  - Coriolis effect (Earth's rotation)

Trajectories are produced lazily as Packets by a fixed-step integrator,
and an iterative solver finds the muzzle angles that zero a rifle at a
given range.
"""

from .atmosphere import (
    Atmosphere, isa_temperature, isa_pressure,
    air_density, speed_of_sound, vapor_pressure,
)
from .drag_model import BcKind, DragTable, DragTableRegistry, lookup, drag_force
from .errors import (
    BallisticsError, ConfigurationError, DragLookupError, ZeroingError,
    AngleNotChangingError, AngleRangeError, TerminalVelocityError,
    IterationLimitError,
)
from .frames import SightFrame, rotate_forward, rotate_inverse
from .projectile import (
    Projectile, Wind, Shooter, Scope, Flags, Simulation, compute_acceleration,
)
from .packet import Packet
from .integrator import simulate, drop_table
from .zeroing import zero

__version__ = "1.0.0"
__all__ = [
    'Atmosphere', 'isa_temperature', 'isa_pressure',
    'air_density', 'speed_of_sound', 'vapor_pressure',
    'BcKind', 'DragTable', 'DragTableRegistry', 'lookup', 'drag_force',
    'BallisticsError', 'ConfigurationError', 'DragLookupError',
    'ZeroingError', 'AngleNotChangingError', 'AngleRangeError',
    'TerminalVelocityError', 'IterationLimitError',
    'SightFrame', 'rotate_forward', 'rotate_inverse',
    'Projectile', 'Wind', 'Shooter', 'Scope', 'Flags', 'Simulation',
    'compute_acceleration',
    'Packet', 'simulate', 'drop_table', 'zero',
]
