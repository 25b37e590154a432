"""
Environment Wind Sampler
========================
Derives the crosswind actually used for a shot from a baseline speed and a
± gust range, seeded so every shot is reproducible.

Sign convention: positive wind blows left → right and drifts the bullet
toward +Z (right).

Layered profiles split the range into segments (near / mid / far) that each
carry their own baseline and gust; every segment draws its gust from its own
sub-seed so segments vary independently but deterministically.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence

from .config import InvalidConfiguration
from .seeding import SeedLike, prng, to_seed


SEGMENT_SEED_STRIDE = 1000
FLAG_FRACTIONS = (0.33, 0.66, 1.0)


def sample_wind(baseline_mps: float, gust_mps: float, seed: SeedLike) -> float:
    """
    Wind used for one shot: ``baseline + uniform(-gust, +gust)``.

    A zero gust range returns the baseline exactly and never builds a
    generator, so deterministic-only levels get zero variance.
    """
    if not 0 <= gust_mps < math.inf:
        raise InvalidConfiguration(f"gust range must be finite and >= 0, got {gust_mps}")
    if gust_mps == 0:
        return baseline_mps
    rand = prng(seed)
    return baseline_mps + (rand() * 2.0 - 1.0) * gust_mps


@dataclass(frozen=True)
class WindLayerSegment:
    """One downrange band of a layered wind profile."""
    start_m: float
    end_m: float
    wind_mps: float
    gust_mps: float = 0.0

    def __post_init__(self):
        if self.end_m <= self.start_m:
            raise InvalidConfiguration(
                f"wind segment must have end_m > start_m, got "
                f"[{self.start_m}, {self.end_m})"
            )
        if not math.isfinite(self.wind_mps):
            raise InvalidConfiguration(
                f"wind segment wind must be finite, got {self.wind_mps}"
            )
        if not 0 <= self.gust_mps < math.inf:
            raise InvalidConfiguration(
                f"wind segment gust must be finite and >= 0, got {self.gust_mps}"
            )

    def contains(self, distance_m: float) -> bool:
        return self.start_m <= distance_m < self.end_m


class WindSample(NamedTuple):
    wind_mps: float
    segment_index: int     # -1 when no profile is in use


def segment_index_at(distance_m: float,
                     profile: Sequence[WindLayerSegment]) -> int:
    for i, segment in enumerate(profile):
        if segment.contains(distance_m):
            return i
    # Past the far end (or before the first band): last segment governs.
    return len(profile) - 1


def sample_segment_wind(profile: Sequence[WindLayerSegment], index: int,
                        seed: SeedLike) -> float:
    """Wind in one profile segment, drawn from ``seed + 1000·index``."""
    segment = profile[index]
    segment_seed = to_seed(seed) + index * SEGMENT_SEED_STRIDE
    return sample_wind(segment.wind_mps, segment.gust_mps, segment_seed)


def sample_wind_at_distance(distance_m: float,
                            profile: Optional[Sequence[WindLayerSegment]],
                            seed: SeedLike,
                            baseline_mps: float = 0.0,
                            gust_mps: float = 0.0) -> WindSample:
    """
    Sample wind at a downrange distance.

    With no profile the constant ``baseline ± gust`` wind applies and the
    returned segment index is -1.
    """
    if not profile:
        return WindSample(sample_wind(baseline_mps, gust_mps, seed), -1)
    index = segment_index_at(distance_m, profile)
    return WindSample(sample_segment_wind(profile, index, seed), index)


def wind_at_flag_positions(target_distance_m: float,
                           profile: Optional[Sequence[WindLayerSegment]],
                           seed: SeedLike,
                           baseline_mps: float = 0.0,
                           gust_mps: float = 0.0) -> dict:
    """Wind at the near / mid / far flags (33 %, 66 %, 100 % of range)."""
    near, mid, far = (
        sample_wind_at_distance(target_distance_m * f, profile, seed,
                                baseline_mps, gust_mps)
        for f in FLAG_FRACTIONS
    )
    return {'near': near, 'mid': mid, 'far': far}


def effective_wind(distance_m: float,
                   profile: Sequence[WindLayerSegment],
                   seed: SeedLike) -> float:
    """
    Distance-weighted mean crosswind over [0, distance].

    Each segment contributes its sampled wind weighted by how much of the
    flight path it covers. Any stretch no segment covers falls to the last
    segment, matching ``sample_wind_at_distance``.
    """
    if distance_m <= 0:
        raise InvalidConfiguration(f"distance must be > 0, got {distance_m}")
    if not profile:
        raise InvalidConfiguration("effective_wind needs a non-empty profile")

    total = 0.0
    remaining = distance_m
    last = len(profile) - 1
    for i, segment in enumerate(profile[:last]):
        covered = min(segment.end_m, distance_m) - max(segment.start_m, 0.0)
        if covered > 0:
            total += covered * sample_segment_wind(profile, i, seed)
            remaining -= covered
    if remaining > 0:
        total += remaining * sample_segment_wind(profile, last, seed)
    return total / distance_m
