"""
Expert Sim Extras — Spin Drift & Coriolis
=========================================
Post-flight deflections layered on top of the integrator's impact point
for expert levels. Both are gameplay approximations driven only by time of
flight and shooting geometry; they are not real-world firing solutions.

Outputs use the package convention: dy up (+), dz right (+).
"""

import math
from typing import NamedTuple


K_SPIN = 0.12              # m/s²  spin drift coefficient
MAX_SPIN_DRIFT = 0.25      # m
K_CORIOLIS_H = 0.03        # m/s   lateral coefficient
K_CORIOLIS_V = 0.015       # m/s   vertical (Eötvös) coefficient
MAX_CORIOLIS_H = 0.2       # m
MAX_CORIOLIS_V = 0.1       # m


class ExpertDeflection(NamedTuple):
    dy: float
    dz: float


def _clamp(value: float, limit: float) -> float:
    return max(-limit, min(value, limit))


def calculate_spin_drift(time_of_flight_s: float) -> float:
    """Rightward drift from right-hand rifling: 0.12·t², capped at 0.25 m."""
    return min(K_SPIN * time_of_flight_s ** 2, MAX_SPIN_DRIFT)


def calculate_coriolis(time_of_flight_s: float, heading_deg: float,
                       latitude_deg: float = 45.0) -> ExpertDeflection:
    """
    Coriolis deflection for a shot fired on ``heading_deg`` (0 = north,
    90 = east) at ``latitude_deg``.

    Lateral:  northern-hemisphere shots drift right when fired north.
    Vertical: shots fired east strike high (Eötvös effect).
    """
    heading = math.radians(heading_deg)
    lat = math.radians(latitude_deg)
    lateral = K_CORIOLIS_H * time_of_flight_s * math.sin(lat) * math.cos(heading)
    vertical = K_CORIOLIS_V * time_of_flight_s * math.sin(heading) * math.cos(lat)
    return ExpertDeflection(dy=_clamp(vertical, MAX_CORIOLIS_V),
                            dz=_clamp(lateral, MAX_CORIOLIS_H))


def calculate_expert_effects(time_of_flight_s: float, heading_deg: float = 0.0,
                             latitude_deg: float = 45.0,
                             spin_drift: bool = True,
                             coriolis: bool = True) -> ExpertDeflection:
    """Sum of the enabled extras."""
    dy = dz = 0.0
    if spin_drift:
        dz += calculate_spin_drift(time_of_flight_s)
    if coriolis:
        c = calculate_coriolis(time_of_flight_s, heading_deg, latitude_deg)
        dy += c.dy
        dz += c.dz
    return ExpertDeflection(dy, dz)
