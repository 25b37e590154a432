"""
Range Atmosphere Model
======================
Air density for a range from its temperature and altitude, using a
simplified International Standard Atmosphere (ISA):

- Pressure follows the standard barometric profile for the altitude
  (troposphere lapse to 11 km, isothermal above).
- Density uses the *actual* range temperature: ρ = P / (R_specific × T).

Warm or high ranges have thinner air and therefore less drag. The result
feeds ``EnvironmentParameters.air_density_kg_m3``.

Reference: U.S. Standard Atmosphere, 1976 (NASA-TM-X-74335)
"""

from typing import Dict, NamedTuple

import numpy as np

from .config import GRAVITY, InvalidConfiguration


# ── ISA Constants ──────────────────────────────────────────────────────────
SEA_LEVEL_TEMP       = 288.15      # K  (15 °C)
SEA_LEVEL_PRESSURE   = 101325.0    # Pa
LAPSE_RATE_TROPO     = 0.0065      # K/m  (troposphere, magnitude)
TROPOPAUSE_ALT       = 11000.0     # m
R_SPECIFIC           = 287.05      # J/(kg·K)  specific gas constant for air
ABSOLUTE_ZERO_C      = -273.15

# Bounds of the 0-5 density index
DENSITY_INDEX_MIN    = 0.5         # kg/m³  (hot, high)
DENSITY_INDEX_MAX    = 1.4         # kg/m³  (cold, sea level)


class RangeConditions(NamedTuple):
    temperature_c: float
    altitude_m: float


DEFAULT_CONDITIONS = RangeConditions(temperature_c=15.0, altitude_m=0.0)

ENVIRONMENT_PRESETS: Dict[str, RangeConditions] = {
    'sea-level':       RangeConditions(15.0, 0.0),
    'desert-hot':      RangeConditions(35.0, 100.0),
    'mountain-summit': RangeConditions(0.0, 2500.0),
    'arctic-cold':     RangeConditions(-20.0, 0.0),
    'high-altitude':   RangeConditions(10.0, 3500.0),
    'tropical':        RangeConditions(30.0, 500.0),
}


def isa_pressure(altitude_m: float) -> float:
    """
    Standard pressure (Pa) at ``altitude_m``.

    - Troposphere (0–11 km): P = P₀ (1 − L·h/T₀)^(g / (R·L))
    - Above 11 km: isothermal exponential decay
    """
    exponent = GRAVITY / (R_SPECIFIC * LAPSE_RATE_TROPO)
    if altitude_m <= TROPOPAUSE_ALT:
        return SEA_LEVEL_PRESSURE * (1.0 - LAPSE_RATE_TROPO * altitude_m / SEA_LEVEL_TEMP) ** exponent

    tropo_temp = SEA_LEVEL_TEMP - LAPSE_RATE_TROPO * TROPOPAUSE_ALT
    p_tropo = isa_pressure(TROPOPAUSE_ALT)
    return p_tropo * np.exp(-GRAVITY * (altitude_m - TROPOPAUSE_ALT)
                            / (R_SPECIFIC * tropo_temp))


def compute_air_density(temperature_c: float, altitude_m: float) -> float:
    """
    Air density (kg/m³) at the range.

    >>> round(compute_air_density(15, 0), 3)
    1.225
    """
    if temperature_c <= ABSOLUTE_ZERO_C:
        raise InvalidConfiguration(
            f"temperature must be above absolute zero, got {temperature_c} °C"
        )
    temperature_k = temperature_c - ABSOLUTE_ZERO_C
    return float(isa_pressure(altitude_m) / (R_SPECIFIC * temperature_k))


def density_for(conditions: RangeConditions) -> float:
    return compute_air_density(conditions.temperature_c, conditions.altitude_m)


def get_environment_preset(name: str) -> RangeConditions:
    try:
        return ENVIRONMENT_PRESETS[name]
    except KeyError:
        raise InvalidConfiguration(
            f"Unknown environment preset '{name}'. "
            f"Available: {list(ENVIRONMENT_PRESETS.keys())}"
        ) from None


def density_index(conditions: RangeConditions) -> int:
    """Coarse 0 (thin air) to 5 (dense air) rating for display."""
    rho = density_for(conditions)
    normalized = (rho - DENSITY_INDEX_MIN) / (DENSITY_INDEX_MAX - DENSITY_INDEX_MIN)
    return int(np.clip(round(normalized * 5), 0, 5))


def format_environment_summary(conditions: RangeConditions) -> str:
    """e.g. ``"15°C @ 0m"``"""
    return f"{conditions.temperature_c:g}°C @ {conditions.altitude_m:g}m"
