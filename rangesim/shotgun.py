"""
Shotgun Pellet Pattern Engine
=============================
Deterministic per-pellet impact offsets for multi-pellet loads.

Spread is given as an angular diameter in MILs, narrowed by the choke,
and converted to a linear radius at the target distance:

    radius_m = spread_mils · choke_multiplier · distance / 2000

Each pellet draws its own offset from ``combine_seed(pattern_seed, index)``
using the same areal-uniform disc sampling as single-shot dispersion, so a
pellet's position never depends on how many pellets precede it.

Offsets use the package convention (dy up, dz right), which is what the
external plate/ring hit-test expects.
"""

import logging
import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from .config import MAX_PELLETS, InvalidConfiguration
from .dispersion import DispersionSample, sample_disc
from .seeding import SeedLike, combine_seed, prng, to_seed


logger = logging.getLogger(__name__)

PelletImpact = DispersionSample


class Choke(Enum):
    """Muzzle constriction, loosest to tightest."""
    CYLINDER = 'cylinder'
    IMPROVED_CYLINDER = 'improved-cylinder'
    MODIFIED = 'modified'
    IMPROVED_MODIFIED = 'improved-modified'
    FULL = 'full'

    @classmethod
    def parse(cls, key: Union['Choke', str]) -> 'Choke':
        if isinstance(key, cls):
            return key
        try:
            return cls(key)
        except ValueError:
            raise InvalidConfiguration(
                f"Unknown choke '{key}'. "
                f"Available: {[c.value for c in cls]}"
            ) from None


# Multiplier applied to the base spread. Every Choke member must appear.
CHOKE_SPREAD_MODIFIERS: Dict[Choke, float] = {
    Choke.CYLINDER: 1.0,
    Choke.IMPROVED_CYLINDER: 0.8,
    Choke.MODIFIED: 0.65,
    Choke.IMPROVED_MODIFIED: 0.55,
    Choke.FULL: 0.45,
}


def choke_multiplier(choke: Union[Choke, str]) -> float:
    choke = Choke.parse(choke)
    try:
        return CHOKE_SPREAD_MODIFIERS[choke]
    except KeyError:
        raise InvalidConfiguration(f"No spread modifier defined for {choke}") from None


def mils_to_spread_radius(spread_mils: float, distance_m: float) -> float:
    """Radius (m) of a pattern whose angular diameter is ``spread_mils``."""
    return spread_mils * distance_m / 2000.0


def shotgun_spread_radius(distance_m: float, base_spread_mils: float,
                          choke: Union[Choke, str] = Choke.CYLINDER) -> float:
    """Pattern radius (m) at ``distance_m`` after the choke is applied."""
    return mils_to_spread_radius(base_spread_mils * choke_multiplier(choke), distance_m)


@dataclass(frozen=True)
class ShotgunPatternConfig:
    distance_m: float
    pellet_count: int
    base_spread_mils: float
    choke: Union[Choke, str] = Choke.CYLINDER
    seed: SeedLike = 1

    def validate(self) -> None:
        if not 0 < self.distance_m < math.inf:
            raise InvalidConfiguration(f"distance_m must be finite and > 0, got {self.distance_m}")
        if (isinstance(self.pellet_count, bool)
                or not isinstance(self.pellet_count, numbers.Integral)
                or self.pellet_count < 1):
            raise InvalidConfiguration(
                f"pellet_count must be a whole number >= 1, got {self.pellet_count!r}"
            )
        if not 0 <= self.base_spread_mils < math.inf:
            raise InvalidConfiguration(
                f"base_spread_mils must be finite and >= 0, got {self.base_spread_mils}"
            )
        Choke.parse(self.choke)

    @property
    def effective_pellet_count(self) -> int:
        return min(int(self.pellet_count), MAX_PELLETS)

    @property
    def spread_radius_m(self) -> float:
        return shotgun_spread_radius(self.distance_m, self.base_spread_mils, self.choke)


def sample_pellet_pattern(config: ShotgunPatternConfig) -> List[PelletImpact]:
    """
    Generate pellet offsets for one shell.

    The pellet count is capped at MAX_PELLETS whatever the load asks for.
    """
    config.validate()
    count = config.effective_pellet_count
    if count < config.pellet_count:
        logger.debug("pellet count %d capped to %d", config.pellet_count, count)

    pattern_seed = to_seed(config.seed)
    radius = config.spread_radius_m

    pellets = []
    for i in range(count):
        dy, dz = sample_disc(prng(combine_seed(pattern_seed, i)), radius)
        pellets.append(PelletImpact(dy, dz))
    return pellets


def _radii(pellets: Sequence[PelletImpact]) -> np.ndarray:
    if not pellets:
        return np.empty(0)
    pts = np.asarray(pellets, dtype=float)
    return np.hypot(pts[:, 0], pts[:, 1])


def pattern_radius(pellets: Sequence[PelletImpact]) -> float:
    """Distance from the aim point to the outermost pellet (m)."""
    radii = _radii(pellets)
    return float(radii.max()) if radii.size else 0.0


def count_pellets_on_target(pellets: Sequence[PelletImpact],
                            target_radius_m: float) -> int:
    """Pellets inside a circular target centred on the aim point (edge counts)."""
    return int(np.count_nonzero(_radii(pellets) <= target_radius_m))


def best_pellet(pellets: Sequence[PelletImpact]) -> Optional[PelletImpact]:
    """Pellet closest to centre, for bullseye scoring; None if empty."""
    if not pellets:
        return None
    return pellets[int(np.argmin(_radii(pellets)))]
