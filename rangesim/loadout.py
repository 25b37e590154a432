"""
Loadout Aggregation
===================
Combines a weapon's base ballistics, an optional ammo variant and the
player's realism preset into the numbers the integrator and the
dispersion sampler consume.

    muzzle velocity = weapon × ammo.muzzle_velocity_scale
    drag factor     = weapon × ammo.drag_scale × preset drag scale
    precision (MOA) = weapon × ammo.dispersion_scale

Weapon and ammo catalogs live with the content layer; only the arithmetic
lives here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

from .config import InvalidConfiguration
from .projectile import ShotParameters


class RealismPreset(Enum):
    ARCADE = 'arcade'
    REALISTIC = 'realistic'
    EXPERT = 'expert'

    @classmethod
    def parse(cls, key: Union['RealismPreset', str]) -> 'RealismPreset':
        if isinstance(key, cls):
            return key
        try:
            return cls(key)
        except ValueError:
            raise InvalidConfiguration(
                f"Unknown realism preset '{key}'. "
                f"Available: {[p.value for p in cls]}"
            ) from None


REALISM_DRAG_SCALE: Dict[RealismPreset, float] = {
    RealismPreset.ARCADE: 0.5,
    RealismPreset.REALISTIC: 1.0,
    RealismPreset.EXPERT: 1.2,
}


@dataclass(frozen=True)
class WeaponBallistics:
    muzzle_velocity_mps: float
    drag_factor: float
    precision_moa: float          # group size rating


@dataclass(frozen=True)
class AmmoModifiers:
    muzzle_velocity_scale: float = 1.0
    drag_scale: float = 1.0
    dispersion_scale: float = 1.0

    def __post_init__(self):
        for name in ('muzzle_velocity_scale', 'drag_scale', 'dispersion_scale'):
            value = getattr(self, name)
            if not value > 0:
                raise InvalidConfiguration(f"{name} must be > 0, got {value}")


@dataclass(frozen=True)
class FinalShotParams:
    muzzle_velocity_mps: float
    drag_factor: float
    precision_moa: float

    def shot_parameters(self, distance_m: float, aim_y_m: float = 0.0,
                        aim_z_m: float = 0.0, **overrides) -> ShotParameters:
        """ShotParameters for this loadout at a given distance and aim point."""
        return ShotParameters(
            distance_m=distance_m,
            muzzle_velocity_mps=self.muzzle_velocity_mps,
            drag_factor=self.drag_factor,
            aim_y_m=aim_y_m,
            aim_z_m=aim_z_m,
            **overrides,
        )


def compute_final_shot_params(weapon: WeaponBallistics,
                              ammo: Optional[AmmoModifiers] = None,
                              preset: Union[RealismPreset, str] = RealismPreset.REALISTIC
                              ) -> FinalShotParams:
    """Aggregate weapon, ammo and realism preset into per-shot inputs."""
    ammo = ammo or AmmoModifiers()
    preset = RealismPreset.parse(preset)
    return FinalShotParams(
        muzzle_velocity_mps=weapon.muzzle_velocity_mps * ammo.muzzle_velocity_scale,
        drag_factor=weapon.drag_factor * ammo.drag_scale * REALISM_DRAG_SCALE[preset],
        precision_moa=weapon.precision_moa * ammo.dispersion_scale,
    )
