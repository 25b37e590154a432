"""
Dispersion Sampler
==================
Turns a weapon/ammo precision rating (group size in MOA) into a per-shot
radial miss offset on the target plane.

Sampling is uniform over the disc of the group:
    angle  ~ U[0, 2π)
    radius = sqrt(U[0, 1)) · max_radius

The square root makes density uniform per unit area. Drawing the radius
uniformly instead would pile shots up at the centre and leave the rim of
the group under-populated.

``max_radius`` is half the group's linear size at the target distance —
a radius, not the group diameter.
"""

import math
from typing import List, NamedTuple, Sequence

import numpy as np

from .config import InvalidConfiguration
from .seeding import SeedLike, combine_seed, prng, to_seed, uniform
from .turret import mil_to_meters, moa_to_mils


class DispersionSample(NamedTuple):
    dy: float   # vertical offset (m), up positive
    dz: float   # lateral offset (m), right positive


ZERO_OFFSET = DispersionSample(0.0, 0.0)


def group_size_at_distance(distance_m: float, group_size_moa: float) -> float:
    """Linear group diameter (m) for an angular group size at ``distance_m``."""
    return mil_to_meters(distance_m, moa_to_mils(group_size_moa))


def dispersion_radius_m(distance_m: float, group_size_moa: float) -> float:
    """Largest radial miss the sampler can produce at ``distance_m``."""
    return group_size_at_distance(distance_m, group_size_moa) / 2.0


def sample_disc(rand, max_radius: float):
    """Areal-uniform point in a disc of ``max_radius`` as (dy, dz)."""
    angle = uniform(rand, 0.0, 2.0 * math.pi)
    radius = math.sqrt(rand()) * max_radius
    return radius * math.sin(angle), radius * math.cos(angle)


def sample_dispersion(distance_m: float, group_size_moa: float,
                      seed: SeedLike) -> DispersionSample:
    """
    Radial miss offset for one shot.

    A zero group size is exact: returns (0, 0) without drawing any random
    numbers.
    """
    if not distance_m > 0:
        raise InvalidConfiguration(f"distance must be > 0, got {distance_m}")
    if not group_size_moa >= 0:
        raise InvalidConfiguration(
            f"group size must be >= 0 MOA, got {group_size_moa}"
        )
    if group_size_moa == 0:
        return ZERO_OFFSET

    max_radius = dispersion_radius_m(distance_m, group_size_moa)
    dy, dz = sample_disc(prng(seed), max_radius)
    return DispersionSample(dy, dz)


def sample_shot_group(distance_m: float, group_size_moa: float,
                      base_seed: SeedLike, shots: int) -> List[DispersionSample]:
    """Offsets for a string of ``shots`` shots, one sub-seed per shot."""
    if shots <= 0:
        raise InvalidConfiguration(f"shot count must be > 0, got {shots}")
    base = to_seed(base_seed)
    return [sample_dispersion(distance_m, group_size_moa, combine_seed(base, i))
            for i in range(shots)]


def calculate_group_size(impacts: Sequence[DispersionSample]) -> float:
    """Extreme spread: largest centre-to-centre distance between two impacts (m)."""
    if len(impacts) < 2:
        return 0.0
    pts = np.asarray(impacts, dtype=float)
    diff = pts[:, None, :] - pts[None, :, :]
    return float(np.sqrt((diff ** 2).sum(axis=-1)).max())


def measured_group_moa(impacts: Sequence[DispersionSample], distance_m: float) -> float:
    """Extreme spread expressed back in MOA at ``distance_m``."""
    spread_m = calculate_group_size(impacts)
    return spread_m / group_size_at_distance(distance_m, 1.0)
