"""
Unit Tests for the Wind Sampler, Ballistics Integrator and Environment
=====================================================================
Tests core flight physics for correctness and determinism.
Run: python -m pytest tests/ -v
"""

import sys
import os
import logging
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import rangesim.wind
from rangesim.config import GRAVITY, MAX_PATH_POINTS, InvalidConfiguration
from rangesim.wind import (
    sample_wind, sample_wind_at_distance, wind_at_flag_positions,
    effective_wind, WindLayerSegment,
)
from rangesim.projectile import ShotParameters, EnvironmentParameters, compute_acceleration
from rangesim.integrator import simulate_shot, TrajectoryPoint
from rangesim.atmosphere import (
    compute_air_density, density_for, density_index, get_environment_preset,
    format_environment_summary, RangeConditions,
)
from rangesim.loadout import (
    WeaponBallistics, AmmoModifiers, RealismPreset, compute_final_shot_params,
)
from rangesim.expert_effects import (
    calculate_spin_drift, calculate_coriolis, calculate_expert_effects,
)
from rangesim.validation import (
    free_fall_drop, reference_solution, validate_against_reference, REFERENCE_CASES,
)


def rifle_shot(**overrides):
    params = dict(distance_m=200.0, muzzle_velocity_mps=800.0,
                  drag_factor=0.00002, dt_s=0.001)
    params.update(overrides)
    return ShotParameters(**params)


class TestWindSampler:
    """Gust sampling bounds, exactness and layered profiles."""

    def test_gust_bounds(self):
        for seed in range(2000):
            w = sample_wind(5.0, 2.0, seed)
            assert 3.0 <= w <= 7.0

    def test_gust_actually_varies(self):
        winds = {sample_wind(5.0, 2.0, seed) for seed in range(50)}
        assert len(winds) > 40

    def test_zero_gust_is_exact_and_never_samples(self, monkeypatch):
        def boom(seed):
            raise AssertionError("PRNG must not be built for zero gust")
        monkeypatch.setattr(rangesim.wind, 'prng', boom)
        for seed in range(20):
            assert sample_wind(5.0, 0.0, seed) == 5.0

    def test_negative_gust_rejected(self):
        with pytest.raises(InvalidConfiguration):
            sample_wind(5.0, -1.0, 1)

    def test_same_seed_same_wind(self):
        assert sample_wind(4.0, 1.0, 999) == sample_wind(4.0, 1.0, 999)

    def test_segment_lookup(self):
        profile = (WindLayerSegment(0, 100, 2.0), WindLayerSegment(100, 200, 4.0))
        assert sample_wind_at_distance(50, profile, 1) == (2.0, 0)
        assert sample_wind_at_distance(150, profile, 1) == (4.0, 1)
        # Beyond the profile the last segment applies
        assert sample_wind_at_distance(1000, profile, 1) == (4.0, 1)

    def test_constant_wind_without_profile(self):
        sample = sample_wind_at_distance(50, None, 1, baseline_mps=3.0)
        assert sample.wind_mps == 3.0
        assert sample.segment_index == -1

    def test_segment_gusts_stay_in_band(self):
        profile = (WindLayerSegment(0, 100, 2.0, 0.5), WindLayerSegment(100, 300, -4.0, 1.0))
        for seed in range(200):
            near = sample_wind_at_distance(10, profile, seed).wind_mps
            far = sample_wind_at_distance(250, profile, seed).wind_mps
            assert 1.5 <= near <= 2.5
            assert -5.0 <= far <= -3.0

    def test_flag_positions(self):
        profile = (WindLayerSegment(0, 100, 1.0), WindLayerSegment(100, 200, 2.0),
                   WindLayerSegment(200, 300, 3.0))
        flags = wind_at_flag_positions(300.0, profile, 5)
        assert flags['near'].segment_index == 0
        assert flags['mid'].segment_index == 1
        assert flags['far'].segment_index == 2

    def test_effective_wind_is_distance_weighted(self):
        profile = (WindLayerSegment(0, 100, 2.0), WindLayerSegment(100, 200, 4.0))
        assert effective_wind(200.0, profile, 1) == pytest.approx(3.0)
        assert effective_wind(50.0, profile, 1) == pytest.approx(2.0)

    def test_invalid_segment(self):
        with pytest.raises(InvalidConfiguration):
            WindLayerSegment(100, 50, 1.0)


class TestForces:

    def test_gravity_only_without_drag(self):
        acc = compute_acceleration(np.array([800.0, 0.0, 0.0]), 0.0, 0.0, GRAVITY)
        assert np.allclose(acc, [0.0, -GRAVITY, 0.0])

    def test_drag_opposes_motion(self):
        v = np.array([800.0, 10.0, 0.0])
        acc = compute_acceleration(v, 0.0, 0.001, 0.0)
        assert np.dot(acc, v) < 0

    def test_crosswind_pushes_right(self):
        acc = compute_acceleration(np.array([800.0, 0.0, 0.0]), 5.0, 0.001, GRAVITY)
        assert acc[2] > 0


class TestIntegrator:
    """Verify the fixed-step flight model."""

    def test_free_fall_matches_closed_form(self):
        res = simulate_shot(
            ShotParameters(distance_m=100.0, muzzle_velocity_mps=800.0,
                           drag_factor=0.0, dt_s=0.001),
            EnvironmentParameters(wind_mps=0.0, gravity_mps2=GRAVITY, seed=123),
        )
        expected = -0.5 * GRAVITY * (100.0 / 800.0) ** 2
        assert expected == pytest.approx(-0.0766, abs=1e-4)
        assert res.impact_y_m == pytest.approx(expected, abs=2e-3)
        assert res.impact_z_m == pytest.approx(0.0, abs=1e-12)
        assert res.time_of_flight_s == pytest.approx(0.125, abs=1e-9)
        assert res.completed

    def test_rk4_free_fall_is_tighter(self):
        shot = ShotParameters(distance_m=100.0, muzzle_velocity_mps=800.0, dt_s=0.001)
        expected = free_fall_drop(100.0, 800.0)
        euler = simulate_shot(shot, method='euler')
        rk4 = simulate_shot(shot, method='rk4')
        assert rk4.impact_y_m == pytest.approx(expected, abs=1e-5)
        assert abs(rk4.impact_y_m - expected) < abs(euler.impact_y_m - expected)

    def test_drag_increases_time_and_drop(self):
        env = EnvironmentParameters(seed=1)
        no_drag = simulate_shot(rifle_shot(drag_factor=0.0), env)
        with_drag = simulate_shot(rifle_shot(drag_factor=0.00002), env)
        assert with_drag.time_of_flight_s > no_drag.time_of_flight_s
        assert abs(with_drag.impact_y_m) > abs(no_drag.impact_y_m)

    def test_positive_crosswind_drifts_right(self):
        res = simulate_shot(rifle_shot(distance_m=150.0), EnvironmentParameters(wind_mps=5.0))
        assert res.impact_z_m > 0

    def test_negative_crosswind_drifts_left(self):
        res = simulate_shot(rifle_shot(distance_m=150.0), EnvironmentParameters(wind_mps=-5.0))
        assert res.impact_z_m < 0

    def test_aim_point_moves_impact(self):
        centre = simulate_shot(rifle_shot())
        right = simulate_shot(rifle_shot(aim_z_m=0.1))
        high = simulate_shot(rifle_shot(aim_y_m=0.1))
        assert right.impact_z_m == pytest.approx(0.1, abs=2e-3)
        assert high.impact_y_m > centre.impact_y_m

    def test_determinism_bit_identical(self):
        shot = rifle_shot(distance_m=120.0, muzzle_velocity_mps=750.0, record_path=True)
        env = EnvironmentParameters(wind_mps=4.0, gust_mps=1.0, seed=999)
        a = simulate_shot(shot, env)
        b = simulate_shot(shot, env)
        assert a == b
        assert a.wind_used_mps == b.wind_used_mps
        assert a.impact_y_m == b.impact_y_m
        assert a.impact_z_m == b.impact_z_m

    def test_wind_used_within_gust_range(self):
        shot = rifle_shot(distance_m=100.0)
        for seed in range(40):
            res = simulate_shot(shot, EnvironmentParameters(wind_mps=5.0, gust_mps=2.0, seed=seed))
            assert 3.0 <= res.wind_used_mps <= 7.0

    def test_zero_gust_wind_used_exact(self):
        for seed in range(10):
            res = simulate_shot(rifle_shot(distance_m=50.0),
                                EnvironmentParameters(wind_mps=5.0, gust_mps=0.0, seed=seed))
            assert res.wind_used_mps == 5.0

    def test_path_does_not_change_physics(self):
        env = EnvironmentParameters(wind_mps=3.0, gust_mps=1.0, seed=42)
        plain = simulate_shot(rifle_shot(), env)
        traced = simulate_shot(rifle_shot(record_path=True), env)
        assert plain.path is None
        assert traced.impact_y_m == plain.impact_y_m
        assert traced.impact_z_m == plain.impact_z_m
        assert traced.time_of_flight_s == plain.time_of_flight_s

    def test_path_is_bounded_and_anchored(self):
        res = simulate_shot(rifle_shot(distance_m=800.0, dt_s=0.0001, record_path=True))
        assert 2 <= len(res.path) <= MAX_PATH_POINTS
        assert res.path[0] == TrajectoryPoint(0.0, 0.0, 0.0, 0.0)
        assert res.path[-1].x == pytest.approx(800.0)
        assert res.path[-1].y == res.impact_y_m
        times = [p.t for p in res.path]
        assert times == sorted(times)
        assert res.path_array().shape == (len(res.path), 4)

    def test_unreachable_target_is_flagged(self, caplog):
        shot = ShotParameters(distance_m=1000.0, muzzle_velocity_mps=1.0, max_time_s=5.0)
        with caplog.at_level(logging.WARNING, logger='rangesim.integrator'):
            res = simulate_shot(shot)
        assert not res.completed
        assert res.steps <= 2501
        assert res.time_of_flight_s == pytest.approx(5.0, abs=0.01)
        assert "did not reach" in caplog.text

    def test_stalled_shot_stops_early(self):
        shot = ShotParameters(distance_m=100.0, muzzle_velocity_mps=100.0, drag_factor=10.0)
        res = simulate_shot(shot)
        assert not res.completed
        assert res.steps == 1

    def test_layered_wind_matches_uniform_constant(self):
        profile = (WindLayerSegment(0, 100, 3.0), WindLayerSegment(100, 400, 3.0))
        layered = simulate_shot(rifle_shot(), EnvironmentParameters(wind_profile=profile))
        constant = simulate_shot(rifle_shot(), EnvironmentParameters(wind_mps=3.0))
        assert layered.impact_z_m == constant.impact_z_m
        assert layered.wind_used_mps == pytest.approx(3.0)

    def test_far_segment_wind_still_drifts(self):
        calm = simulate_shot(rifle_shot())
        profile = (WindLayerSegment(0, 100, 0.0), WindLayerSegment(100, 400, 6.0))
        far_wind = simulate_shot(rifle_shot(), EnvironmentParameters(wind_profile=profile))
        assert calm.impact_z_m == pytest.approx(0.0, abs=1e-12)
        assert far_wind.impact_z_m > 0

    def test_thin_air_reduces_drop(self):
        dense = simulate_shot(rifle_shot(distance_m=400.0),
                              EnvironmentParameters(air_density_kg_m3=1.3))
        thin = simulate_shot(rifle_shot(distance_m=400.0),
                             EnvironmentParameters(air_density_kg_m3=0.9))
        assert abs(thin.impact_y_m) < abs(dense.impact_y_m)

    @pytest.mark.parametrize("overrides", [
        {'distance_m': 0.0},
        {'distance_m': -10.0},
        {'muzzle_velocity_mps': 0.0},
        {'dt_s': -0.001},
        {'drag_factor': -0.1},
        {'distance_m': float('nan')},
        {'muzzle_velocity_mps': float('inf')},
        {'aim_y_m': float('nan')},
        {'aim_z_m': float('inf')},
    ])
    def test_invalid_shot_rejected(self, overrides):
        with pytest.raises(InvalidConfiguration):
            simulate_shot(rifle_shot(**overrides))

    def test_unknown_method_rejected(self):
        with pytest.raises(InvalidConfiguration):
            simulate_shot(rifle_shot(), method='verlet')

    @pytest.mark.parametrize("env_kwargs", [
        {'gust_mps': -1.0},
        {'gust_mps': float('inf')},
        {'wind_mps': float('nan')},
        {'wind_mps': float('inf')},
        {'air_density_kg_m3': float('nan')},
    ])
    def test_invalid_environment_rejected(self, env_kwargs):
        with pytest.raises(InvalidConfiguration):
            simulate_shot(rifle_shot(), EnvironmentParameters(**env_kwargs))

    def test_non_finite_segment_wind_rejected(self):
        with pytest.raises(InvalidConfiguration):
            WindLayerSegment(0, 100, float('nan'))


class TestValidation:

    def test_free_fall_drop(self):
        assert free_fall_drop(100.0, 800.0) == pytest.approx(-0.076614, abs=1e-6)

    def test_reference_solver_free_fall(self):
        y, z, tof = reference_solution(
            ShotParameters(distance_m=100.0, muzzle_velocity_mps=800.0),
            EnvironmentParameters())
        assert y == pytest.approx(free_fall_drop(100.0, 800.0), abs=1e-8)
        assert z == pytest.approx(0.0, abs=1e-10)
        assert tof == pytest.approx(0.125, abs=1e-8)

    def test_euler_tracks_reference(self):
        for r in validate_against_reference(method='euler', verbose=False):
            assert r.y_error < 2e-2, r.name
            assert r.z_error < 2e-2, r.name
            assert r.tof_error < 5e-3, r.name

    def test_rk4_matches_reference(self):
        results = validate_against_reference(method='rk4', verbose=False)
        assert len(results) == len(REFERENCE_CASES)
        for r in results:
            assert r.y_error < 1e-4, r.name
            assert r.z_error < 1e-4, r.name


class TestAtmosphere:

    def test_standard_sea_level_density(self):
        assert compute_air_density(15.0, 0.0) == pytest.approx(1.225, abs=1e-3)

    def test_density_decreases_with_altitude(self):
        assert compute_air_density(15, 0) > compute_air_density(15, 2000) > \
            compute_air_density(15, 5000)

    def test_warm_air_is_thinner(self):
        assert compute_air_density(35, 0) < compute_air_density(-20, 0)

    def test_above_tropopause_continuous(self):
        below = compute_air_density(-56.5, 10999.0)
        above = compute_air_density(-56.5, 11001.0)
        assert below == pytest.approx(above, rel=1e-3)

    def test_presets(self):
        arctic = get_environment_preset('arctic-cold')
        high = get_environment_preset('high-altitude')
        assert density_for(arctic) > density_for(high)
        assert density_index(arctic) >= density_index(high)
        assert 0 <= density_index(high) <= 5

    def test_unknown_preset(self):
        with pytest.raises(InvalidConfiguration):
            get_environment_preset('moon')

    def test_below_absolute_zero(self):
        with pytest.raises(InvalidConfiguration):
            compute_air_density(-300.0, 0.0)

    def test_summary(self):
        assert format_environment_summary(RangeConditions(10, 2500)) == "10°C @ 2500m"


class TestLoadout:

    def test_aggregation(self):
        weapon = WeaponBallistics(muzzle_velocity_mps=800.0, drag_factor=0.00002,
                                  precision_moa=1.0)
        ammo = AmmoModifiers(muzzle_velocity_scale=1.1, drag_scale=0.5, dispersion_scale=0.8)
        final = compute_final_shot_params(weapon, ammo, 'expert')
        assert final.muzzle_velocity_mps == pytest.approx(880.0)
        assert final.drag_factor == pytest.approx(0.00002 * 0.5 * 1.2)
        assert final.precision_moa == pytest.approx(0.8)

    def test_arcade_halves_drag(self):
        weapon = WeaponBallistics(800.0, 0.00004, 2.0)
        assert compute_final_shot_params(weapon, None, RealismPreset.ARCADE).drag_factor == \
            pytest.approx(0.00002)

    def test_shot_parameters(self):
        final = compute_final_shot_params(WeaponBallistics(800.0, 0.00002, 1.0))
        shot = final.shot_parameters(300.0, aim_y_m=0.2, dt_s=0.001)
        assert shot.distance_m == 300.0
        assert shot.aim_y_m == 0.2
        assert shot.dt_s == 0.001
        assert simulate_shot(shot).completed

    def test_unknown_preset(self):
        with pytest.raises(InvalidConfiguration):
            compute_final_shot_params(WeaponBallistics(800.0, 0.0, 1.0), None, 'nightmare')

    def test_zero_scale_rejected(self):
        with pytest.raises(InvalidConfiguration):
            AmmoModifiers(drag_scale=0.0)


class TestExpertEffects:

    def test_spin_drift_grows_and_caps(self):
        assert calculate_spin_drift(0.5) == pytest.approx(0.03)
        assert calculate_spin_drift(1.0) > calculate_spin_drift(0.5)
        assert calculate_spin_drift(10.0) == 0.25

    def test_coriolis_north_drifts_right(self):
        c = calculate_coriolis(1.0, heading_deg=0.0, latitude_deg=45.0)
        assert c.dz > 0
        assert c.dy == pytest.approx(0.0, abs=1e-12)

    def test_coriolis_east_strikes_high(self):
        assert calculate_coriolis(1.0, heading_deg=90.0, latitude_deg=45.0).dy > 0
        assert calculate_coriolis(1.0, heading_deg=270.0, latitude_deg=45.0).dy < 0

    def test_coriolis_clamped(self):
        c = calculate_coriolis(100.0, heading_deg=45.0, latitude_deg=45.0)
        assert abs(c.dz) <= 0.2
        assert abs(c.dy) <= 0.1

    def test_toggles(self):
        assert calculate_expert_effects(1.0, spin_drift=False, coriolis=False) == (0.0, 0.0)
        only_spin = calculate_expert_effects(1.0, spin_drift=True, coriolis=False)
        assert only_spin.dz == pytest.approx(0.12)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
