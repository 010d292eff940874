"""
Zeroing Solver
==============
Finds the muzzle pitch and yaw (relative to the line of sight) that put
the projectile on a given offset at a given distance.

Each iteration flies a full trajectory, reads the elevation and windage
of the first packet at or beyond the target distance, and corrects each
angle by the angle subtended by the miss at that distance. The solver
stops when both components are within tolerance, or raises a
ZeroingError subclass describing why it could not.
"""

import logging
import math
from typing import Optional, Tuple

from .errors import (
    AngleNotChangingError, AngleRangeError, ConfigurationError,
    IterationLimitError, TerminalVelocityError,
)
from .integrator import simulate
from .packet import Packet
from .projectile import Simulation
from .units import feet, feet_per_second, inches, to_inches, to_moa

logger = logging.getLogger(__name__)


DEG_45 = math.pi / 4
DEG_90 = math.pi / 2

# The target search gives up below this speed or beyond this drop
MINIMUM_VELOCITY = feet_per_second(50.0)   # m/s
MAXIMUM_DROP = feet(10000.0)               # m


def _first_packet_at(simulation: Simulation,
                     distance: float) -> Optional[Packet]:
    """First packet whose down-range distance reaches ``distance``, if any."""
    for packet in simulate(simulation):
        if packet.distance() >= distance:
            return packet
        if packet.speed() < MINIMUM_VELOCITY:
            return None
        if packet.elevation() < -MAXIMUM_DROP:
            return None
    return None


def zero(simulation: Simulation, distance: float,
         elevation_offset: float = 0.0, windage_offset: float = 0.0,
         tolerance: float = inches(0.1),
         max_iterations: Optional[int] = None) -> Tuple[float, float]:
    """
    Solve the muzzle angles that zero ``simulation`` at ``distance``.

    Parameters
    ----------
    simulation : Simulation
        The shot to zero; its own scope pitch/yaw are ignored.
    distance : float
        Zero range along the line of sight (m).
    elevation_offset, windage_offset : float
        Desired point of impact relative to the line of sight (m).
    tolerance : float
        Accepted miss on each axis (m).
    max_iterations : int, optional
        Give up after this many trajectories. Unbounded by default.

    Returns
    -------
    (pitch, yaw) in radians.

    Raises
    ------
    AngleNotChangingError, AngleRangeError, TerminalVelocityError,
    IterationLimitError
    """
    if not distance > 0.0:
        raise ConfigurationError('zero_distance', distance, reason='expected > 0')
    if not tolerance > 0.0:
        raise ConfigurationError('tolerance', tolerance, reason='expected > 0')
    if max_iterations is not None and max_iterations < 1:
        raise ConfigurationError('max_iterations', max_iterations,
                                 reason='expected >= 1')

    pitch = yaw = 0.0
    elevation_correction = windage_correction = 0.0
    iterations = 0

    while True:
        iterations += 1
        last_pitch, last_yaw = pitch, yaw
        pitch += elevation_correction
        yaw += windage_correction

        if iterations > 1 and pitch == last_pitch and yaw == last_yaw:
            raise AngleNotChangingError(iterations, pitch)
        if not -DEG_90 <= pitch <= DEG_45:
            raise AngleRangeError(iterations, pitch)
        if not -DEG_90 <= yaw <= DEG_90:
            raise AngleRangeError(iterations, yaw)

        packet = _first_packet_at(simulation.with_muzzle_angles(pitch, yaw),
                                  distance)
        if packet is None:
            raise TerminalVelocityError(iterations, pitch)

        elevation = packet.elevation()
        windage = packet.windage()
        elevation_correction = packet.offset_vertical_angle(elevation_offset,
                                                            tolerance)
        windage_correction = packet.offset_horizontal_angle(windage_offset,
                                                            tolerance)

        logger.debug(
            f"zero #{iterations}: pitch {to_moa(pitch):.3f} MOA, "
            f"yaw {to_moa(yaw):.3f} MOA, miss {to_inches(elevation - elevation_offset):.3f} in "
            f"/ {to_inches(windage - windage_offset):.3f} in"
        )

        if (abs(elevation - elevation_offset) <= tolerance
                and abs(windage - windage_offset) <= tolerance):
            logger.debug(f"zero converged after {iterations} iterations")
            return pitch, yaw

        if max_iterations is not None and iterations >= max_iterations:
            raise IterationLimitError(iterations, pitch)
