"""
Shot & Environment Definitions and Forces
=========================================
Defines the per-shot input records and the acceleration model:
  - Gravity (constant, −Y)
  - Quadratic drag on the air-relative velocity, scaled by a gameplay
    drag factor and the air density
  - Crosswind entering through the air-relative velocity

Coordinate system:
  x = downrange (toward the target)
  y = vertical  (up positive)
  z = lateral   (right positive, looking downrange)

The drag factor absorbs mass, area and drag coefficient into one tunable
number that level difficulty is tuned against. It is not a
ballistic-coefficient model.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .config import (
    DEFAULT_DT, DEFAULT_MAX_TIME, DEFAULT_SEED, GRAVITY, SEA_LEVEL_DENSITY,
    InvalidConfiguration,
)
from .seeding import SeedLike
from .wind import WindLayerSegment


@dataclass(frozen=True)
class ShotParameters:
    """
    Everything about one trigger pull that is not the environment.
    """
    distance_m: float                 # downrange distance to the target plane
    muzzle_velocity_mps: float
    drag_factor: float = 0.0          # gameplay-tunable (units absorbed)
    aim_y_m: float = 0.0              # aim point on target plane, up (+)
    aim_z_m: float = 0.0              # aim point on target plane, right (+)
    dt_s: float = DEFAULT_DT
    max_time_s: float = DEFAULT_MAX_TIME
    record_path: bool = False

    def validate(self) -> None:
        for name in ('distance_m', 'muzzle_velocity_mps', 'dt_s', 'max_time_s'):
            value = getattr(self, name)
            if not 0 < value < math.inf:
                raise InvalidConfiguration(f"{name} must be finite and > 0, got {value}")
        if not 0 <= self.drag_factor < math.inf:
            raise InvalidConfiguration(
                f"drag_factor must be finite and >= 0, got {self.drag_factor}"
            )
        for name in ('aim_y_m', 'aim_z_m'):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidConfiguration(f"{name} must be finite, got {value}")

    def launch_angles(self) -> Tuple[float, float]:
        """(elevation, azimuth) in radians that point the bore at the aim point."""
        return (math.atan2(self.aim_y_m, self.distance_m),
                math.atan2(self.aim_z_m, self.distance_m))

    def initial_velocity_vector(self) -> np.ndarray:
        """Convert muzzle speed + aim angles to [vx, vy, vz]."""
        elev, azim = self.launch_angles()
        v0 = self.muzzle_velocity_mps
        return np.array([
            v0 * math.cos(elev) * math.cos(azim),
            v0 * math.sin(elev),
            v0 * math.cos(elev) * math.sin(azim),
        ])


@dataclass(frozen=True)
class EnvironmentParameters:
    """
    Range conditions for one shot.

    ``wind_mps`` / ``gust_mps`` describe a constant crosswind; a non-empty
    ``wind_profile`` replaces them with per-segment winds.
    """
    wind_mps: float = 0.0
    gust_mps: float = 0.0
    air_density_kg_m3: float = SEA_LEVEL_DENSITY
    gravity_mps2: float = GRAVITY
    seed: SeedLike = DEFAULT_SEED
    wind_profile: Optional[Tuple[WindLayerSegment, ...]] = None

    def validate(self) -> None:
        if not math.isfinite(self.wind_mps):
            raise InvalidConfiguration(
                f"wind_mps must be finite, got {self.wind_mps}"
            )
        if not 0 <= self.gust_mps < math.inf:
            raise InvalidConfiguration(
                f"gust_mps must be finite and >= 0, got {self.gust_mps}"
            )
        if not 0 <= self.air_density_kg_m3 < math.inf:
            raise InvalidConfiguration(
                f"air_density_kg_m3 must be finite and >= 0, got {self.air_density_kg_m3}"
            )
        if not math.isfinite(self.gravity_mps2):
            raise InvalidConfiguration(
                f"gravity_mps2 must be finite, got {self.gravity_mps2}"
            )


def compute_acceleration(velocity: np.ndarray, wind_z: float,
                         k: float, gravity: float) -> np.ndarray:
    """
    Acceleration vector acting on the projectile.

    Parameters
    ----------
    velocity : [vx, vy, vz] in m/s (ground frame)
    wind_z : crosswind in m/s, +Z = blowing right
    k : aggregate drag coefficient (drag_factor × air density)
    gravity : m/s², applied along −Y

    Returns
    -------
    acceleration : np.ndarray [ax, ay, az] in m/s²
    """
    # Velocity relative to the air mass
    v_rel = velocity - np.array([0.0, 0.0, wind_z])
    speed_rel = float(np.linalg.norm(v_rel))

    # ── Drag: a = −k |v_rel| v_rel ────────────────────────────────────────
    a_drag = -k * speed_rel * v_rel if speed_rel > 0.0 else np.zeros(3)

    # ── Gravity ───────────────────────────────────────────────────────────
    return a_drag + np.array([0.0, -gravity, 0.0])
