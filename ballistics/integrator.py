"""
Trajectory Stepper
==================
Explicit Euler integration with a second-order position term:

    a  = a(v)                       (from compute_acceleration)
    x' = x + v·dt + ½·a·dt²
    v' = v + a·dt
    t' = t + dt

``simulate`` is a lazy generator of Packets. The state at t = 0 is yielded
first; iteration stops as soon as a step fails to move the projectile
further down-range (measured along the line of sight), so every run is
finite once the projectile stalls or turns back. Callers that need a
tighter bound pass ``max_time`` or simply stop iterating.
"""

from typing import Iterator, List, Optional

import numpy as np

from .errors import ConfigurationError
from .packet import Packet
from .projectile import Simulation, compute_acceleration


class TrajectoryState:
    """Mutable position/velocity/time owned by a single simulate() call."""

    __slots__ = ('time', 'position', 'velocity')

    def __init__(self, position: np.ndarray, velocity: np.ndarray,
                 time: float = 0.0):
        self.time = time
        self.position = np.array(position, dtype=float)
        self.velocity = np.array(velocity, dtype=float)

    def packet(self, simulation: Simulation) -> Packet:
        return Packet(simulation, self.time, self.position, self.velocity)

    def step(self, simulation: Simulation) -> np.ndarray:
        """Advance one time step; returns the acceleration acting before it."""
        dt = simulation.time_step
        acc = compute_acceleration(simulation, self.velocity)

        # New arrays each step; packets already handed out keep their values
        self.position = self.position + self.velocity * dt + 0.5 * acc * dt ** 2
        self.velocity = self.velocity + acc * dt
        self.time += dt
        return acc


def simulate(simulation: Simulation,
             max_time: Optional[float] = None) -> Iterator[Packet]:
    """
    Yield a Packet per time step, starting at t = 0.

    Parameters
    ----------
    simulation : Simulation
        Shared, read-only description of the shot.
    max_time : float, optional
        Stop after this flight time (s). Unbounded by default.

    Raises
    ------
    DragLookupError
        Propagated from the drag lookup when the Mach number leaves the
        table; packets yielded before that point remain valid.
    """
    frame = simulation.frame
    state = TrajectoryState(simulation.initial_position,
                            simulation.initial_velocity)

    while max_time is None or state.time <= max_time:
        previous = state.packet(simulation)
        previous_range = frame.downrange(state.position)

        acc = state.step(simulation)

        if not frame.downrange(state.position) > previous_range:
            return
        yield previous._replace(acceleration=acc)


def drop_table(simulation: Simulation, step: float, start: float,
               end: float) -> List[Packet]:
    """
    Packets at each range ``start, start + step, ..., end`` (m).

    Each row is interpolated between the last packet short of the range
    and the first packet at or beyond it.

    A single trajectory run is consumed. Ranges the projectile never reaches
    are left out, so the result may be shorter than requested.
    """
    if not step > 0.0:
        raise ConfigurationError('step', step, reason='expected > 0')
    if start < 0.0 or end < start:
        raise ConfigurationError('range', (start, end),
                                 reason='expected 0 <= start <= end')

    count = int(np.floor((end - start) / step + 1e-9)) + 1
    targets = [start + i * step for i in range(count)]

    rows = []
    previous = None
    for packet in simulate(simulation):
        distance = packet.distance()
        # one packet may cover several targets when step < v·dt
        while len(rows) < count and distance >= targets[len(rows)]:
            target = targets[len(rows)]
            if previous is None or distance == target:
                rows.append(packet)
            else:
                rows.append(previous.interpolate(packet, target))
        if len(rows) == count:
            break
        previous = packet
    return rows
