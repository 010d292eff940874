"""
Moist-Air Atmosphere Model
==========================
Air density and speed of sound at the firing point, from station
temperature, pressure and relative humidity:

  - Saturation vapor pressure from the Arden Buck equation
  - Density from the partial pressures of dry air and water vapor
  - Speed of sound from the adiabatic index of air

The International Standard Atmosphere (ISA 1976) troposphere and lower
stratosphere give default station conditions for a known altitude.

Reference: U.S. Standard Atmosphere, 1976 (NASA-TM-X-74335)
"""

from dataclasses import dataclass

import numpy as np

from .errors import ConfigurationError


# ── ISA Constants ──────────────────────────────────────────────────────────
SEA_LEVEL_TEMP       = 288.15      # K  (15 °C)
SEA_LEVEL_PRESSURE   = 101325.0    # Pa
SEA_LEVEL_DENSITY    = 1.225       # kg/m³
LAPSE_RATE_TROPO     = -0.0065     # K/m  (troposphere)
TROPOPAUSE_ALT       = 11000.0     # m
TROPOPAUSE_TEMP      = 216.65      # K  (-56.5 °C)
GRAVITY              = 9.80665     # m/s²

# ── Moist air ─────────────────────────────────────────────────────────────
GAS_CONSTANT         = 8.314       # J/(mol·K)
MOLAR_MASS_DRY       = 0.0289644   # kg/mol
MOLAR_MASS_VAPOR     = 0.018016    # kg/mol
ADIABATIC_INDEX      = 1.4         # γ, mostly diatomic gas
KELVIN_OFFSET        = 273.15

# Station temperatures accepted by Atmosphere (-80 °C to 50 °C)
MIN_TEMPERATURE      = 193.15      # K
MAX_TEMPERATURE      = 323.15      # K


def isa_temperature(altitude: float) -> float:
    """
    Temperature (K) at a given geometric altitude (m).

    - Troposphere (0–11 km): linear lapse at −6.5 °C/km
    - Stratosphere (11–20 km): isothermal at 216.65 K
    """
    if altitude <= TROPOPAUSE_ALT:
        return SEA_LEVEL_TEMP + LAPSE_RATE_TROPO * altitude
    return TROPOPAUSE_TEMP


def isa_pressure(altitude: float) -> float:
    """
    Atmospheric pressure (Pa) at a given geometric altitude (m).
    Uses the barometric formula appropriate for each layer.
    """
    exponent = GRAVITY * MOLAR_MASS_DRY / (GAS_CONSTANT * abs(LAPSE_RATE_TROPO))

    if altitude <= TROPOPAUSE_ALT:
        T = isa_temperature(altitude)
        return SEA_LEVEL_PRESSURE * (T / SEA_LEVEL_TEMP) ** exponent

    P_tropo = SEA_LEVEL_PRESSURE * (TROPOPAUSE_TEMP / SEA_LEVEL_TEMP) ** exponent
    return P_tropo * np.exp(
        -GRAVITY * MOLAR_MASS_DRY * (altitude - TROPOPAUSE_ALT)
        / (GAS_CONSTANT * TROPOPAUSE_TEMP)
    )


def vapor_pressure(temperature: float, humidity: float) -> float:
    """
    Partial pressure of water vapor (Pa), Arden Buck equation.

    pv = humidity · 611.21 · exp((18.678 − Tc/234.5) · (Tc / (257.14 + Tc)))
    """
    tc = temperature - KELVIN_OFFSET
    return humidity * 611.21 * np.exp((18.678 - tc / 234.5) * (tc / (257.14 + tc)))


def air_density(temperature: float, pressure: float, humidity: float) -> float:
    """
    Density of moist air (kg/m³).

    ρ = (pd · M_dry + pv · M_vapor) / (R · T)
    """
    pv = vapor_pressure(temperature, humidity)
    pd = pressure - pv
    return (pd * MOLAR_MASS_DRY + pv * MOLAR_MASS_VAPOR) / (GAS_CONSTANT * temperature)


def speed_of_sound(temperature: float, pressure: float, humidity: float) -> float:
    """
    Local speed of sound (m/s) = sqrt(γ · P / ρ).
    """
    return float(np.sqrt(ADIABATIC_INDEX * pressure
                         / air_density(temperature, pressure, humidity)))


@dataclass(frozen=True)
class Atmosphere:
    """
    Station conditions at the firing point.

    temperature in K, pressure in Pa (station, not sea-level corrected),
    humidity as a fraction in [0, 1].
    """
    temperature: float = SEA_LEVEL_TEMP
    pressure: float = SEA_LEVEL_PRESSURE
    humidity: float = 0.0

    def __post_init__(self):
        if not MIN_TEMPERATURE <= self.temperature <= MAX_TEMPERATURE:
            raise ConfigurationError('temperature', self.temperature,
                                     (MIN_TEMPERATURE, MAX_TEMPERATURE))
        if not self.pressure > 0.0:
            raise ConfigurationError('pressure', self.pressure,
                                     reason='expected > 0')
        if not 0.0 <= self.humidity <= 1.0:
            raise ConfigurationError('humidity', self.humidity, (0.0, 1.0))

    @classmethod
    def standard(cls, altitude: float = 0.0, humidity: float = 0.0) -> 'Atmosphere':
        """ISA conditions at the given station altitude (m)."""
        return cls(
            temperature=isa_temperature(altitude),
            pressure=float(isa_pressure(altitude)),
            humidity=humidity,
        )

    @property
    def celsius(self) -> float:
        return self.temperature - KELVIN_OFFSET

    @property
    def vapor_pressure(self) -> float:
        return float(vapor_pressure(self.temperature, self.humidity))

    @property
    def dry_pressure(self) -> float:
        return self.pressure - self.vapor_pressure

    @property
    def rho(self) -> float:
        """Air density (kg/m³)."""
        return float(air_density(self.temperature, self.pressure, self.humidity))

    @property
    def speed_of_sound(self) -> float:
        """Speed of sound (m/s)."""
        return speed_of_sound(self.temperature, self.pressure, self.humidity)
