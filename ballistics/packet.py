"""
Trajectory Packets
==================
A Packet is an immutable snapshot of one trajectory step: time, position
and velocity in the world frame, plus the Simulation that produced it.
Every reported measurement is derived from a Packet.

Positions are reported relative to the line of sight (sight frame):
  distance  = down-range along the line of sight
  elevation = above (+) / below (-) the line of sight
  windage   = right (+) / left (-) of the line of sight
"""

import math
from typing import NamedTuple, Optional

import numpy as np

from .units import to_moa


def _angle_2d(ax: float, ay: float, bx: float, by: float) -> float:
    """Unsigned angle between two 2-D vectors (rad)."""
    return math.atan2(abs(ax * by - ay * bx), ax * bx + ay * by)


class Packet(NamedTuple):
    """Snapshot of the projectile state at one time step."""
    simulation: object                # Simulation
    time: float                       # s
    position: np.ndarray              # [x, y, z] world frame (m)
    velocity: np.ndarray              # [vx, vy, vz] world frame (m/s)
    acceleration: Optional[np.ndarray] = None  # world frame (m/s²)

    def relative_position(self) -> np.ndarray:
        """Position rotated back into the sight frame."""
        return self.simulation.frame.to_sight(self.position)

    # ── Measurements (SI) ────────────────────────────────────────────────
    def speed(self) -> float:
        """Velocity magnitude (m/s)."""
        return float(np.linalg.norm(self.velocity))

    def energy(self) -> float:
        """Kinetic energy (J)."""
        return 0.5 * self.simulation.projectile.mass * self.speed() ** 2

    def mach(self) -> float:
        """Mach number of the velocity relative to the air mass."""
        air_speed = np.linalg.norm(self.velocity - self.simulation.wind_velocity)
        return float(air_speed) / self.simulation.speed_of_sound

    def distance(self) -> float:
        """Down-range distance along the line of sight (m)."""
        return self.simulation.frame.downrange(self.position)

    def elevation(self) -> float:
        """Height above the line of sight (m); negative is drop."""
        return float(self.relative_position()[1])

    def windage(self) -> float:
        """Lateral deviation from the line of sight (m); positive is right."""
        return float(self.relative_position()[2])

    def moa(self) -> float:
        """Angle between the projectile and the line of sight (MOA)."""
        x, y, z = self.relative_position()
        return to_moa(math.atan2(math.hypot(y, z), x))

    # ── Zeroing feedback ─────────────────────────────────────────────────
    def offset_vertical_angle(self, offset: float, tolerance: float) -> float:
        """
        Signed pitch correction (rad) that moves the impact onto ``offset``.

        Negative when the impact is at or above ``offset - tolerance``.
        """
        x, y, _ = self.relative_position()
        sign = -1.0 if y >= (offset - tolerance) else 1.0
        return sign * _angle_2d(x, y, x, offset)

    def offset_horizontal_angle(self, offset: float, tolerance: float) -> float:
        """
        Signed yaw correction (rad) that moves the impact onto ``offset``.

        Negative when the impact is at or right of ``offset - tolerance``.
        """
        x, _, z = self.relative_position()
        sign = -1.0 if z >= (offset - tolerance) else 1.0
        return sign * _angle_2d(x, z, x, offset)

    def vertical_moa(self, tolerance: float) -> float:
        """Elevation correction back to the line of sight (MOA)."""
        return to_moa(self.offset_vertical_angle(0.0, tolerance))

    def horizontal_moa(self, tolerance: float) -> float:
        """Windage correction back to the line of sight (MOA)."""
        return to_moa(self.offset_horizontal_angle(0.0, tolerance))

    # ── Interpolation ────────────────────────────────────────────────────
    def interpolate(self, other: 'Packet', distance: float) -> 'Packet':
        """
        Packet at exactly ``distance`` (m) down-range, linear between
        this packet and ``other``.

        Time, position, velocity and acceleration all move by the same
        fraction of the down-range gap between the two packets.
        """
        start = self.distance()
        span = other.distance() - start
        if span == 0.0:
            return self
        fraction = (distance - start) / span

        acceleration = None
        if self.acceleration is not None and other.acceleration is not None:
            acceleration = (self.acceleration
                            + (other.acceleration - self.acceleration) * fraction)

        return Packet(
            self.simulation,
            self.time + (other.time - self.time) * fraction,
            self.position + (other.position - self.position) * fraction,
            self.velocity + (other.velocity - self.velocity) * fraction,
            acceleration,
        )
