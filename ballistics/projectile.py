"""
Projectile Definition & Forces
===============================
Defines the configuration dataclasses of a simulation and computes the
acceleration acting on the projectile:
  - Gravity
  - Aerodynamic drag (Mach-dependent, relative to the moving air mass)
  - Coriolis / Eötvös effect (Earth's rotation)

All values are SI: meters, kilograms, seconds, pascals, kelvin, radians.
Use ballistics.units to convert from grains, inches, ft/s and the like.

Coordinate system (world frame):
  x = north
  y = up
  z = east
The line of fire is rotated into this frame by the shooter's bearing,
line-of-sight pitch and cant; see ballistics.frames.
"""

import math
from dataclasses import dataclass, field, replace
from functools import cached_property

import numpy as np

from .atmosphere import Atmosphere, GRAVITY
from .drag_model import DragTable, drag_force, lookup
from .errors import ConfigurationError
from .frames import SightFrame, X_AXIS, heading, pivot_z
from .units import inches, to_inches, to_pounds


# ── Earth rotation parameters ─────────────────────────────────────────────
EARTH_ROTATION_RATE = 7.2921159e-5  # rad/s

MAX_TIME_STEP = 0.1  # s


def _require_finite(name, value):
    if not math.isfinite(value):
        raise ConfigurationError(name, value, reason='expected a finite number')


def _require_positive(name, value):
    _require_finite(name, value)
    if value <= 0.0:
        raise ConfigurationError(name, value, reason='expected > 0')


def _require_within(name, value, low, high):
    _require_finite(name, value)
    if not low <= value <= high:
        raise ConfigurationError(name, value, (low, high))


@dataclass(frozen=True)
class Projectile:
    """
    Physical and aerodynamic properties of a bullet.
    """
    caliber: float                    # m
    weight: float                     # kg
    bc: float                         # ballistic coefficient (lb/in²)
    drag_table: DragTable = field(repr=False)
    velocity: float                   # m/s  muzzle velocity

    def __post_init__(self):
        _require_positive('caliber', self.caliber)
        _require_positive('weight', self.weight)
        _require_positive('bc', self.bc)
        _require_positive('velocity', self.velocity)
        if not isinstance(self.drag_table, DragTable):
            raise ConfigurationError('drag_table', self.drag_table,
                                     reason='expected a DragTable')

    @property
    def radius(self) -> float:
        return self.caliber / 2.0

    @property
    def area(self) -> float:
        """Reference cross-sectional area (m²)."""
        return math.pi * self.radius ** 2

    @property
    def mass(self) -> float:
        return self.weight

    @property
    def sectional_density(self) -> float:
        """Weight over caliber squared, in the customary lb/in² convention."""
        return to_pounds(self.weight) / to_inches(self.caliber) ** 2

    @property
    def form_factor(self) -> float:
        """i = SD / BC; scales the standard table to this projectile."""
        return self.sectional_density / self.bc


@dataclass(frozen=True)
class Wind:
    """
    Horizontal wind.

    yaw is where the wind comes FROM, measured clockwise from the line of
    fire: 0 = headwind, +90° = from the right, 180° = tailwind.
    """
    speed: float = 0.0                # m/s
    yaw: float = 0.0                  # rad

    def __post_init__(self):
        _require_finite('wind_speed', self.speed)
        if self.speed < 0.0:
            raise ConfigurationError('wind_speed', self.speed,
                                     reason='expected >= 0')
        _require_within('wind_yaw', self.yaw, -2.0 * math.pi, 2.0 * math.pi)

    def velocity(self) -> np.ndarray:
        """Flow vector relative to the line of fire (air moves away from yaw)."""
        return heading(self.speed * X_AXIS, self.yaw + math.pi)


@dataclass(frozen=True)
class Shooter:
    """
    Orientation and location of the shooter on the Earth.

    bearing is a compass bearing (0 = north, +90° = east), pitch the
    line-of-sight angle (uphill positive), roll the cant of the rifle.
    """
    bearing: float = 0.0              # rad
    pitch: float = 0.0                # rad
    roll: float = 0.0                 # rad
    latitude: float = 0.0             # rad
    gravity: float = GRAVITY          # m/s², magnitude

    def __post_init__(self):
        _require_within('bearing', self.bearing, -2.0 * math.pi, 2.0 * math.pi)
        _require_within('shot_angle', self.pitch, -math.pi / 2, math.pi / 2)
        _require_within('roll', self.roll, -math.pi, math.pi)
        _require_within('latitude', self.latitude, -math.pi / 2, math.pi / 2)
        _require_positive('gravity', self.gravity)

    def omega(self) -> np.ndarray:
        """Earth's angular velocity vector in the world frame at this latitude."""
        return pivot_z(EARTH_ROTATION_RATE * X_AXIS, self.latitude)

    def gravity_vector(self) -> np.ndarray:
        return np.array([0.0, -self.gravity, 0.0])


@dataclass(frozen=True)
class Scope:
    """
    Sight mounting geometry.

    pitch and yaw are the muzzle angles relative to the line of sight;
    zeroing solves for them. yaw follows the compass-like convention,
    positive to the right.
    """
    height: float = inches(1.5)       # m, above the bore
    offset: float = 0.0               # m, right of the bore
    pitch: float = 0.0                # rad
    yaw: float = 0.0                  # rad
    roll: float = 0.0                 # rad, scope cant

    def __post_init__(self):
        for name in ('height', 'offset', 'pitch', 'yaw'):
            _require_finite(f'scope_{name}', getattr(self, name))
        _require_within('scope_roll', self.roll, -math.pi, math.pi)

    def position(self) -> np.ndarray:
        return np.array([0.0, self.height, self.offset])


@dataclass(frozen=True)
class Flags:
    """Which acceleration terms to integrate."""
    drag: bool = True
    coriolis: bool = True
    gravity: bool = True


@dataclass(frozen=True)
class Simulation:
    """
    Complete, immutable description of one shot.

    A Simulation is never mutated by stepping or zeroing, so a single
    instance can be shared by any number of concurrent runs. Each call to
    ``simulate`` owns its own trajectory state.
    """
    projectile: Projectile
    atmosphere: Atmosphere = field(default_factory=Atmosphere)
    wind: Wind = field(default_factory=Wind)
    shooter: Shooter = field(default_factory=Shooter)
    scope: Scope = field(default_factory=Scope)
    flags: Flags = field(default_factory=Flags)
    time_step: float = 1e-5           # s

    def __post_init__(self):
        _require_finite('time_step', self.time_step)
        if not 0.0 < self.time_step <= MAX_TIME_STEP:
            raise ConfigurationError('time_step', self.time_step,
                                     (0.0, MAX_TIME_STEP))

    # ── Derived, computed once per instance ──────────────────────────────
    @cached_property
    def frame(self) -> SightFrame:
        """Sight <-> world rotation; cant is the rifle cant plus scope cant."""
        return SightFrame(
            pitch=self.shooter.pitch,
            bearing=self.shooter.bearing,
            roll=self.shooter.roll + self.scope.roll,
        )

    @cached_property
    def initial_position(self) -> np.ndarray:
        """Muzzle position relative to the sight, in the world frame."""
        return -self.frame.to_world(self.scope.position())

    @cached_property
    def initial_velocity(self) -> np.ndarray:
        """Muzzle velocity rotated by muzzle angles, then into the world."""
        bore = heading(pivot_z(self.projectile.velocity * X_AXIS,
                               self.scope.pitch), self.scope.yaw)
        return self.frame.to_world(bore)

    @cached_property
    def wind_velocity(self) -> np.ndarray:
        """Wind in the world frame; stays horizontal regardless of slope."""
        return heading(self.wind.velocity(), self.shooter.bearing)

    @cached_property
    def omega(self) -> np.ndarray:
        return self.shooter.omega()

    @cached_property
    def gravity_vector(self) -> np.ndarray:
        return self.shooter.gravity_vector()

    @cached_property
    def rho(self) -> float:
        return self.atmosphere.rho

    @cached_property
    def speed_of_sound(self) -> float:
        return self.atmosphere.speed_of_sound

    # ── Variations ───────────────────────────────────────────────────────
    def with_muzzle_angles(self, pitch: float, yaw: float) -> 'Simulation':
        """Copy of this simulation with new muzzle pitch/yaw (rad)."""
        return replace(self, scope=replace(self.scope, pitch=pitch, yaw=yaw))

    def zeroed(self, distance: float, elevation_offset: float = 0.0,
               windage_offset: float = 0.0, tolerance: float = inches(0.1),
               **kwargs) -> 'Simulation':
        """Copy with the muzzle angles that zero it at ``distance`` (m)."""
        from .zeroing import zero
        pitch, yaw = zero(self, distance, elevation_offset, windage_offset,
                          tolerance, **kwargs)
        return self.with_muzzle_angles(pitch, yaw)

    def __iter__(self):
        from .integrator import simulate
        return simulate(self)


def compute_acceleration(simulation: Simulation,
                         velocity: np.ndarray) -> np.ndarray:
    """
    Total acceleration acting on the projectile (m/s²).

    Parameters
    ----------
    simulation : Simulation
    velocity : [vx, vy, vz] in m/s (world frame, ground-relative)

    Raises
    ------
    DragLookupError
        If the Mach number leaves the drag table's domain.
    """
    flags = simulation.flags
    acceleration = np.zeros(3)

    # ── 1. Coriolis acceleration ──────────────────────────────────────────
    if flags.coriolis:
        acceleration += -2.0 * np.cross(simulation.omega, velocity)

    # ── 2. Aerodynamic drag ───────────────────────────────────────────────
    if flags.drag:
        projectile = simulation.projectile
        # Velocity relative to air mass (subtract wind from projectile velocity)
        v_rel = velocity - simulation.wind_velocity
        mach = float(np.linalg.norm(v_rel)) / simulation.speed_of_sound
        cd = projectile.form_factor * lookup(projectile.drag_table, mach)
        F_drag = drag_force(v_rel, simulation.rho, cd, projectile.area)
        acceleration += F_drag / projectile.mass

    # ── 3. Gravity ────────────────────────────────────────────────────────
    if flags.gravity:
        acceleration += simulation.gravity_vector

    return acceleration
