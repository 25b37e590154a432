#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  RANGESIM — Demo Runner
═══════════════════════════════════════════════════════════════════════════════

  Walks through the ballistics core end to end:
    1. Seeded hashing & PRNG
    2. Gust sampling and a layered wind profile
    3. Rifle shot with recorded trajectory
    4. Zeroing: measured miss → quantized turret correction
    5. Dispersion shot group
    6. Shotgun pattern for every choke
    7. Validation against an adaptive reference solver
    8. Euler vs RK4 drop sweep

  Plots are saved to outputs/.

  Usage:
    python main.py              # Run everything
    python main.py --quick      # Skip validation and sweep plots
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import os
import sys
import time

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from rangesim.seeding import string_hash, combine_seed, prng
from rangesim.wind import sample_wind, WindLayerSegment, wind_at_flag_positions
from rangesim.projectile import ShotParameters, EnvironmentParameters
from rangesim.integrator import simulate_shot
from rangesim.atmosphere import density_for, get_environment_preset
from rangesim.loadout import (
    WeaponBallistics, AmmoModifiers, RealismPreset, compute_final_shot_params,
)
from rangesim.turret import (
    TurretState, compute_adjustment_for_offset, quantize_adjustment,
    apply_adjustment, apply_turret_offset, format_turret_state,
)
from rangesim.dispersion import (
    sample_shot_group, dispersion_radius_m, calculate_group_size,
    measured_group_moa,
)
from rangesim.shotgun import (
    Choke, ShotgunPatternConfig, sample_pellet_pattern, count_pellets_on_target,
    pattern_radius,
)
from rangesim.validation import validate_against_reference
from rangesim.visualization import (
    plot_trajectory, plot_pellet_pattern, plot_shot_group, plot_euler_vs_rk4,
    ensure_output_dir,
)


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def main():
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    start_time = time.time()
    quick = '--quick' in sys.argv
    out = ensure_output_dir('outputs')

    level_seed = string_hash("level-07:rifle-308:match-168gr")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Seeds
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Seeds")
    print(f"  Level seed        : {level_seed}")
    rand = prng(level_seed)
    print(f"  First draws       : {', '.join(f'{rand():.6f}' for _ in range(4))}")
    print(f"  Shot sub-seeds    : {[combine_seed(level_seed, i) for i in range(3)]}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Wind
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Wind (baseline 5 m/s ± 2 m/s)")
    winds = np.array([sample_wind(5.0, 2.0, combine_seed(level_seed, i))
                      for i in range(1000)])
    print(f"  1000 shots  min {winds.min():.3f}  max {winds.max():.3f}  "
          f"mean {winds.mean():.3f} m/s")

    profile = (
        WindLayerSegment(0.0, 150.0, 2.0, 0.5),
        WindLayerSegment(150.0, 300.0, 4.0, 1.0),
        WindLayerSegment(300.0, 600.0, 6.0, 1.5),
    )
    flags = wind_at_flag_positions(500.0, profile, level_seed)
    for name, sample in flags.items():
        print(f"  {name:<4} flag: {sample.wind_mps:+.2f} m/s (segment {sample.segment_index})")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Rifle shot
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Rifle Shot at 300 m (mountain summit)")
    loadout = compute_final_shot_params(
        WeaponBallistics(muzzle_velocity_mps=820.0, drag_factor=0.00002, precision_moa=1.0),
        AmmoModifiers(muzzle_velocity_scale=1.02, dispersion_scale=0.8),
        RealismPreset.REALISTIC,
    )
    conditions = get_environment_preset('mountain-summit')
    env = EnvironmentParameters(wind_mps=4.0, gust_mps=1.0,
                                air_density_kg_m3=density_for(conditions),
                                seed=level_seed)
    shot = loadout.shot_parameters(300.0, record_path=True)
    result = simulate_shot(shot, env)
    print(result.summary())
    fig = plot_trajectory(result, save_path=f'{out}/01_trajectory.png')
    plt.close(fig)
    print(f"\n  ✓ Saved: {out}/01_trajectory.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Zeroing
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Zeroing the Turret")
    turret = TurretState()
    for attempt in range(1, 5):
        aim_y, aim_z = apply_turret_offset(0.0, 0.0, turret, shot.distance_m)
        hit = simulate_shot(loadout.shot_parameters(shot.distance_m, aim_y, aim_z), env)
        print(f"  Shot {attempt}: {format_turret_state(turret)}  → "
              f"Y {hit.impact_y_m*100:+6.2f} cm  Z {hit.impact_z_m*100:+6.2f} cm")
        correction = quantize_adjustment(
            compute_adjustment_for_offset(hit.impact_y_m, hit.impact_z_m, shot.distance_m))
        if correction.elevation_mils == 0 and correction.windage_mils == 0:
            break
        turret = apply_adjustment(turret, correction)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Dispersion
    # ══════════════════════════════════════════════════════════════════════
    section(f"PHASE 5: Dispersion ({loadout.precision_moa:.2f} MOA at 300 m)")
    group = sample_shot_group(300.0, loadout.precision_moa, level_seed, 30)
    max_r = dispersion_radius_m(300.0, loadout.precision_moa)
    print(f"  Max radius      : {max_r*100:.2f} cm")
    print(f"  Extreme spread  : {calculate_group_size(group)*100:.2f} cm "
          f"({measured_group_moa(group, 300.0):.2f} MOA)")
    fig = plot_shot_group(group, max_r, save_path=f'{out}/02_shot_group.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/02_shot_group.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Shotgun
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 6: Shotgun Patterns (9 pellets, 60 mil, 25 m)")
    for choke in Choke:
        cfg = ShotgunPatternConfig(distance_m=25.0, pellet_count=9,
                                   base_spread_mils=60.0, choke=choke, seed=level_seed)
        pellets = sample_pellet_pattern(cfg)
        print(f"  {choke.value:<18s} radius {cfg.spread_radius_m*100:6.2f} cm  "
              f"outermost {pattern_radius(pellets)*100:6.2f} cm  "
              f"on 20 cm plate: {count_pellets_on_target(pellets, 0.10)}")
    cfg = ShotgunPatternConfig(distance_m=25.0, pellet_count=50,
                               base_spread_mils=60.0, choke=Choke.MODIFIED, seed=level_seed)
    fig = plot_pellet_pattern(sample_pellet_pattern(cfg), cfg.spread_radius_m, 0.10,
                              save_path=f'{out}/03_pellet_pattern.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/03_pellet_pattern.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 7-8: Validation
    # ══════════════════════════════════════════════════════════════════════
    if not quick:
        section("PHASE 7: Validation")
        validate_against_reference(method='euler')
        validate_against_reference(method='rk4')

        section("PHASE 8: Euler vs RK4 Sweep")
        fig = plot_euler_vs_rk4(ShotParameters(distance_m=100.0, muzzle_velocity_mps=820.0,
                                               drag_factor=0.00002, dt_s=0.002),
                                EnvironmentParameters(),
                                distances=np.linspace(50.0, 1000.0, 20),
                                save_path=f'{out}/04_euler_vs_rk4.png')
        plt.close(fig)
        print(f"  ✓ Saved: {out}/04_euler_vs_rk4.png")
    else:
        section("PHASE 7-8: Validation SKIPPED (--quick mode)")

    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"  All outputs saved to: {os.path.abspath(out)}/")
    print(f"  Total runtime: {elapsed:.1f} seconds\n")


if __name__ == "__main__":
    main()
