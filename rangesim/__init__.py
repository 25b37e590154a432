"""
rangesim — Shooting-Range Ballistics Core
=========================================
The deterministic simulation core of a shooting-range game:
  - Seeded hashing and PRNG shared by every sampler
  - Gusting and layered crosswind sampling
  - Fixed-step trajectory integration (gravity, quadratic drag, crosswind)
  - Precision-based shot dispersion
  - Choke-modulated shotgun pellet patterns
  - MIL/MOA conversion and click-quantized turret correction

Every function is a pure function of its explicit inputs: identical
arguments and seed give bit-identical results.

Coordinate convention: +Y up, +Z right. Positive wind drifts the bullet
right, positive windage shifts impact right, positive elevation shifts
impact up.
"""

from .config import InvalidConfiguration, MAX_PELLETS
from .seeding import string_hash, combine_seed, prng, Mulberry32
from .wind import (
    sample_wind, sample_wind_at_distance, wind_at_flag_positions,
    effective_wind, WindLayerSegment, WindSample,
)
from .projectile import ShotParameters, EnvironmentParameters, compute_acceleration
from .integrator import simulate_shot, ShotResult, TrajectoryPoint
from .dispersion import (
    sample_dispersion, sample_shot_group, dispersion_radius_m,
    calculate_group_size, DispersionSample,
)
from .shotgun import (
    Choke, ShotgunPatternConfig, PelletImpact, sample_pellet_pattern,
    shotgun_spread_radius, count_pellets_on_target, best_pellet,
)
from .turret import (
    mil_to_meters, meters_to_mils, mils_to_moa, moa_to_mils,
    compute_adjustment_for_offset, quantize_adjustment_to_clicks,
    next_click_value, apply_adjustment, apply_turret_offset,
    format_turret_state, TurretState, TurretAdjustment, ZeroProfile,
)
from .atmosphere import compute_air_density, ENVIRONMENT_PRESETS
from .loadout import (
    RealismPreset, WeaponBallistics, AmmoModifiers, FinalShotParams,
    compute_final_shot_params,
)
from .expert_effects import calculate_expert_effects
from .validation import validate_against_reference, run_all_validations, free_fall_drop
from .visualization import (
    plot_trajectory, plot_pellet_pattern, plot_shot_group, plot_euler_vs_rk4,
)

__version__ = "1.0.0"
__all__ = [
    'InvalidConfiguration', 'MAX_PELLETS',
    'string_hash', 'combine_seed', 'prng', 'Mulberry32',
    'sample_wind', 'sample_wind_at_distance', 'wind_at_flag_positions',
    'effective_wind', 'WindLayerSegment', 'WindSample',
    'ShotParameters', 'EnvironmentParameters', 'compute_acceleration',
    'simulate_shot', 'ShotResult', 'TrajectoryPoint',
    'sample_dispersion', 'sample_shot_group', 'dispersion_radius_m',
    'calculate_group_size', 'DispersionSample',
    'Choke', 'ShotgunPatternConfig', 'PelletImpact', 'sample_pellet_pattern',
    'shotgun_spread_radius', 'count_pellets_on_target', 'best_pellet',
    'mil_to_meters', 'meters_to_mils', 'mils_to_moa', 'moa_to_mils',
    'compute_adjustment_for_offset', 'quantize_adjustment_to_clicks',
    'next_click_value', 'apply_adjustment', 'apply_turret_offset',
    'format_turret_state', 'TurretState', 'TurretAdjustment', 'ZeroProfile',
    'compute_air_density', 'ENVIRONMENT_PRESETS',
    'RealismPreset', 'WeaponBallistics', 'AmmoModifiers', 'FinalShotParams',
    'compute_final_shot_params', 'calculate_expert_effects',
    'validate_against_reference', 'run_all_validations', 'free_fall_drop',
    'plot_trajectory', 'plot_pellet_pattern', 'plot_shot_group',
    'plot_euler_vs_rk4',
]
