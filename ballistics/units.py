"""
Unit Conversions
================
Every formula in the solver works in SI: meters, seconds, kilograms,
pascals, kelvin and radians. These helpers convert at the boundary only,
when building a Simulation (ingress) or reporting a Packet (egress).

    >>> from ballistics.units import inches
    >>> round(inches(1.5), 4)
    0.0381
"""

import math


# ── Conversion factors (exact where defined) ─────────────────────────────
METERS_PER_INCH      = 0.0254
METERS_PER_FOOT      = 0.3048
METERS_PER_YARD      = 0.9144
KG_PER_GRAIN         = 6.479891e-5
KG_PER_POUND         = 0.45359237
GRAINS_PER_POUND     = 7000.0
MPS_PER_MPH          = 0.44704
PASCALS_PER_INHG     = 3386.389
JOULES_PER_FOOT_LB   = 1.3558179483
KELVIN_OFFSET        = 273.15
MINUTES_PER_DEGREE   = 60.0


# ── Length ────────────────────────────────────────────────────────────────
def inches(value: float) -> float:
    return value * METERS_PER_INCH


def to_inches(meters: float) -> float:
    return meters / METERS_PER_INCH


def feet(value: float) -> float:
    return value * METERS_PER_FOOT


def yards(value: float) -> float:
    return value * METERS_PER_YARD


def to_yards(meters: float) -> float:
    return meters / METERS_PER_YARD


# ── Mass ──────────────────────────────────────────────────────────────────
def grains(value: float) -> float:
    return value * KG_PER_GRAIN


def to_grains(kg: float) -> float:
    return kg / KG_PER_GRAIN


def to_pounds(kg: float) -> float:
    return kg / KG_PER_POUND


# ── Velocity ──────────────────────────────────────────────────────────────
def feet_per_second(value: float) -> float:
    return value * METERS_PER_FOOT


def to_feet_per_second(mps: float) -> float:
    return mps / METERS_PER_FOOT


def miles_per_hour(value: float) -> float:
    return value * MPS_PER_MPH


# ── Temperature / pressure ────────────────────────────────────────────────
def celsius(value: float) -> float:
    """°C -> K."""
    return value + KELVIN_OFFSET


def fahrenheit(value: float) -> float:
    """°F -> K."""
    return (value - 32.0) * 5.0 / 9.0 + KELVIN_OFFSET


def to_celsius(kelvin: float) -> float:
    return kelvin - KELVIN_OFFSET


def inches_of_mercury(value: float) -> float:
    return value * PASCALS_PER_INHG


# ── Angle ─────────────────────────────────────────────────────────────────
def degrees(value: float) -> float:
    return math.radians(value)


def to_degrees(radians: float) -> float:
    return math.degrees(radians)


def moa(value: float) -> float:
    """Minutes of angle -> radians."""
    return math.radians(value / MINUTES_PER_DEGREE)


def to_moa(radians: float) -> float:
    return math.degrees(radians) * MINUTES_PER_DEGREE


# ── Energy ────────────────────────────────────────────────────────────────
def to_foot_pounds(joules: float) -> float:
    return joules / JOULES_PER_FOOT_LB
