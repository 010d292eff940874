"""
Frame Transforms
================
Rotations linking the three coordinate systems used by the solver.

  world frame : x = north, y = up, z = east (right-handed)
  sight frame : x = down-range along the line of sight,
                y = up in the reticle, z = right in the reticle

Primitive rotations are right-hand rotations about a single axis:

  pivot_x : roll   (cant)
  pivot_y : yaw    (about the vertical)
  pivot_z : pitch  (elevation)

Sign convention for yaw-type angles (bearing, muzzle yaw, wind direction):
they are compass-like, positive clockwise seen from above, i.e. toward +z.
A right-hand rotation about +y turns x toward -z, so ``heading`` negates the
angle. This is the only place that negation happens.

Composition order, sight -> world:

    forward = R_y(-bearing) · R_z(pitch) · R_x(roll)

roll is applied first, then line-of-sight pitch, then bearing. The inverse
applies the mirror image: un-bearing, then un-pitch, then un-roll.
All angles are radians.
"""

import numpy as np
from scipy.spatial.transform import Rotation


X_AXIS = np.array([1.0, 0.0, 0.0])
Y_AXIS = np.array([0.0, 1.0, 0.0])
Z_AXIS = np.array([0.0, 0.0, 1.0])


# ══════════════════════════════════════════════════════════════════════════
#  Primitive rotations
# ══════════════════════════════════════════════════════════════════════════

def rotation_x(angle: float) -> np.ndarray:
    return Rotation.from_rotvec(angle * X_AXIS).as_matrix()


def rotation_y(angle: float) -> np.ndarray:
    return Rotation.from_rotvec(angle * Y_AXIS).as_matrix()


def rotation_z(angle: float) -> np.ndarray:
    return Rotation.from_rotvec(angle * Z_AXIS).as_matrix()


def pivot_x(vector: np.ndarray, angle: float) -> np.ndarray:
    """Roll: rotate about the x axis."""
    return rotation_x(angle) @ vector


def pivot_y(vector: np.ndarray, angle: float) -> np.ndarray:
    """Rotate about the y (vertical) axis, right-hand sense."""
    return rotation_y(angle) @ vector


def pivot_z(vector: np.ndarray, angle: float) -> np.ndarray:
    """Pitch: rotate about the z axis; positive raises x toward +y."""
    return rotation_z(angle) @ vector


def heading(vector: np.ndarray, yaw: float) -> np.ndarray:
    """Yaw by a compass-like angle: positive turns x toward +z (right)."""
    return pivot_y(vector, -yaw)


# ══════════════════════════════════════════════════════════════════════════
#  Composed transforms
# ══════════════════════════════════════════════════════════════════════════

def rotate_forward(vector: np.ndarray, pitch: float, bearing: float,
                   roll: float) -> np.ndarray:
    """Sight frame -> world frame."""
    return heading(pivot_z(pivot_x(vector, roll), pitch), bearing)


def rotate_inverse(vector: np.ndarray, pitch: float, bearing: float,
                   roll: float) -> np.ndarray:
    """World frame -> sight frame; exact mirror of rotate_forward."""
    return pivot_x(pivot_z(heading(vector, -bearing), -pitch), -roll)


class SightFrame:
    """
    Cached sight <-> world rotation for one shooter orientation.

    The matrices are built once; applying them is a single 3x3 product,
    cheap enough to call on every trajectory step.
    """

    __slots__ = ('pitch', 'bearing', 'roll', '_forward', '_inverse')

    def __init__(self, pitch: float = 0.0, bearing: float = 0.0,
                 roll: float = 0.0):
        self.pitch = pitch
        self.bearing = bearing
        self.roll = roll
        forward = rotation_y(-bearing) @ rotation_z(pitch) @ rotation_x(roll)
        forward.setflags(write=False)
        inverse = np.ascontiguousarray(forward.T)
        inverse.setflags(write=False)
        self._forward = forward
        self._inverse = inverse

    @property
    def matrix(self) -> np.ndarray:
        return self._forward

    def to_world(self, vector: np.ndarray) -> np.ndarray:
        return self._forward @ vector

    def to_sight(self, vector: np.ndarray) -> np.ndarray:
        return self._inverse @ vector

    def downrange(self, position: np.ndarray) -> float:
        """Sight-frame x of a world position, without the full rotation."""
        return float(self._inverse[0] @ position)

    def __repr__(self) -> str:
        return (f"SightFrame(pitch={self.pitch!r}, bearing={self.bearing!r}, "
                f"roll={self.roll!r})")
