"""
Aerodynamic Drag Model
======================
Mach-dependent drag coefficients from the standard G-function tables.

A published ballistic coefficient (BC) is always relative to one reference
projectile, so the table is chosen by the BC's kind (G1, G7, ...) and the
tabulated Cd is scaled by the projectile's form factor:

    i  = sectional_density / bc
    Cd = i * Cd_table(Mach)

Interpolation is piecewise-linear between the bracketing table rows, found
by binary search. There is no extrapolation: a Mach number below the first
row, or at/above the last row, raises DragLookupError.
"""

from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Tuple

import numpy as np

from .errors import ConfigurationError, DragLookupError
from .tables import STANDARD_TABLES


class BcKind(Enum):
    """Reference projectile a ballistic coefficient is measured against."""
    G1 = 'G1'
    G2 = 'G2'
    G5 = 'G5'
    G6 = 'G6'
    G7 = 'G7'
    G8 = 'G8'
    GI = 'GI'
    GS = 'GS'


# ══════════════════════════════════════════════════════════════════════════
#  Table type
# ══════════════════════════════════════════════════════════════════════════

class DragTable:
    """
    Immutable Mach -> Cd mapping.

    Keys must be strictly increasing and there must be at least two rows.
    The backing arrays are flagged read-only so a table can be shared by
    every Projectile and every thread.
    """

    __slots__ = ('name', '_mach', '_cd')

    def __init__(self, mach: Iterable[float], cd: Iterable[float],
                 name: str = ''):
        mach_arr = np.array(mach, dtype=float)
        cd_arr = np.array(cd, dtype=float)

        if mach_arr.ndim != 1 or mach_arr.shape != cd_arr.shape:
            raise ConfigurationError(
                'drag_table', name or 'table',
                reason='mach and cd must be 1-D arrays of equal length')
        if mach_arr.size < 2:
            raise ConfigurationError(
                'drag_table', name or 'table',
                reason='at least two rows are required')
        if not (np.all(np.isfinite(mach_arr)) and np.all(np.isfinite(cd_arr))):
            raise ConfigurationError(
                'drag_table', name or 'table',
                reason='rows must be finite')
        if np.any(np.diff(mach_arr) <= 0.0):
            raise ConfigurationError(
                'drag_table', name or 'table',
                reason='Mach keys must be strictly increasing')

        mach_arr.setflags(write=False)
        cd_arr.setflags(write=False)
        self.name = name
        self._mach = mach_arr
        self._cd = cd_arr

    @classmethod
    def from_pairs(cls, rows, name: str = '') -> 'DragTable':
        """Build from an (N, 2) sequence of [Mach, Cd] rows."""
        rows = np.asarray(rows, dtype=float)
        if rows.ndim != 2 or rows.shape[1] != 2:
            raise ConfigurationError(
                'drag_table', name or 'table',
                reason='rows must be [Mach, Cd] pairs')
        return cls(rows[:, 0], rows[:, 1], name=name)

    @property
    def mach(self) -> np.ndarray:
        return self._mach

    @property
    def cd_values(self) -> np.ndarray:
        return self._cd

    @property
    def bounds(self) -> Tuple[float, float]:
        """Valid lookup domain, [first key, last key)."""
        return float(self._mach[0]), float(self._mach[-1])

    def items(self) -> Iterator[Tuple[float, float]]:
        for m, c in zip(self._mach, self._cd):
            yield float(m), float(c)

    def cd(self, mach: float) -> float:
        """Tabulated drag coefficient at the given Mach number."""
        return lookup(self, mach)

    def __len__(self) -> int:
        return int(self._mach.size)

    def __repr__(self) -> str:
        lo, hi = self.bounds
        return f"DragTable({self.name or '?'}, {len(self)} rows, Mach {lo}-{hi})"


def lookup(table: DragTable, mach: float) -> float:
    """
    Piecewise-linear Cd lookup.

    Finds rows (m0, c0), (m1, c1) with m0 <= mach < m1 by binary search and
    returns c0 + (mach - m0) * (c1 - c0) / (m1 - m0). An exact key returns
    its tabulated value.

    Raises
    ------
    DragLookupError
        If mach is below the first key or at/above the last key.
    """
    keys = table._mach
    if not (keys[0] <= mach < keys[-1]):
        raise DragLookupError(mach, table.bounds)

    i = int(np.searchsorted(keys, mach, side='right')) - 1
    m0 = keys[i]
    c0 = table._cd[i]
    if mach == m0:
        return float(c0)

    m1 = keys[i + 1]
    c1 = table._cd[i + 1]
    return float(c0 + (mach - m0) * (c1 - c0) / (m1 - m0))


def drag_force(velocity_rel: np.ndarray, rho: float, cd: float,
               area: float) -> np.ndarray:
    """
    Aerodynamic drag force vector (N).

    F_drag = -½ ρ A Cd v_rel |v_rel|

    Parameters
    ----------
    velocity_rel : np.ndarray
        Velocity relative to the air mass [vx, vy, vz] (m/s)
    rho : float
        Air density (kg/m³)
    cd : float
        Drag coefficient, already scaled by the form factor
    area : float
        Reference cross-sectional area (m²)
    """
    v_mag = np.linalg.norm(velocity_rel)
    return -0.5 * rho * area * cd * v_mag * velocity_rel


# ══════════════════════════════════════════════════════════════════════════
#  Registry
# ══════════════════════════════════════════════════════════════════════════

class DragTableRegistry:
    """
    Explicit BcKind -> DragTable mapping.

    Build it once (usually with ``DragTableRegistry.standard()``) and hand
    the tables to each Projectile by reference.
    """

    def __init__(self, tables: Mapping[BcKind, DragTable]):
        self._tables: Dict[BcKind, DragTable] = dict(tables)

    @classmethod
    def standard(cls) -> 'DragTableRegistry':
        """Registry holding the eight standard G-function tables."""
        return cls({
            BcKind(key): DragTable.from_pairs(rows, name=key)
            for key, rows in STANDARD_TABLES.items()
        })

    def get(self, kind) -> DragTable:
        """Table for a BcKind or its name ('G7')."""
        if not isinstance(kind, BcKind):
            try:
                kind = BcKind(str(kind).upper())
            except ValueError:
                raise ConfigurationError(
                    'bc_kind', kind,
                    reason=f"unknown drag table; available: {self.kinds()}"
                ) from None
        try:
            return self._tables[kind]
        except KeyError:
            raise ConfigurationError(
                'bc_kind', kind.value,
                reason=f"not registered; available: {self.kinds()}"
            ) from None

    __getitem__ = get

    def kinds(self) -> list:
        return [kind.value for kind in self._tables]

    def __contains__(self, kind) -> bool:
        if not isinstance(kind, BcKind):
            try:
                kind = BcKind(str(kind).upper())
            except ValueError:
                return False
        return kind in self._tables

    def __len__(self) -> int:
        return len(self._tables)
