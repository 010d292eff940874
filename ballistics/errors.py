"""
Error Taxonomy
==============
Exceptions raised by the solver:

  - ConfigurationError : invalid static parameter, raised at construction
  - DragLookupError    : Mach number outside a drag table's domain, fatal
                         to the trajectory run that hit it
  - ZeroingError       : the zeroing solver gave up (angle not changing,
                         angle out of range, terminal velocity, iteration cap)

Diagnostic fields travel with the exception so the caller can report them.
"""

import math
from typing import Optional, Tuple


class BallisticsError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(BallisticsError, ValueError):
    """A configuration value violates its invariant."""

    def __init__(self, name: str, value, bounds: Optional[Tuple] = None,
                 reason: str = ''):
        self.name = name
        self.value = value
        self.bounds = bounds
        if bounds is not None:
            detail = f"expected within [{bounds[0]}, {bounds[1]}]"
        else:
            detail = reason or "invalid value"
        super().__init__(f"{name}={value!r}: {detail}")


class DragLookupError(BallisticsError, LookupError):
    """Mach number falls outside the drag table."""

    def __init__(self, mach: float, bounds: Tuple[float, float]):
        self.mach = mach
        self.bounds = bounds
        super().__init__(
            f"Mach {mach:.4f} outside drag table domain "
            f"[{bounds[0]}, {bounds[1]})"
        )


class ZeroingError(BallisticsError):
    """Zeroing failed; carries the iteration count and the last angle (rad)."""

    label = 'Zeroing error'

    def __init__(self, iterations: int, angle: float):
        self.iterations = iterations
        self.angle = angle
        super().__init__(
            f"{iterations}: {self.label}: {math.degrees(angle):.6f} deg"
        )


class AngleNotChangingError(ZeroingError):
    label = 'Angle not changing'


class AngleRangeError(ZeroingError):
    label = 'Outside valid range'


class TerminalVelocityError(ZeroingError):
    label = 'Terminal velocity reached'


class IterationLimitError(ZeroingError):
    label = 'Iteration limit reached'
