"""
Integrator Validation
=====================
Checks the fixed-step integrator against two independent references:

  - the closed-form drop −½·g·t² for a drag-free, windless shot
  - an adaptive high-order solution of the same force model from
    ``scipy.integrate.solve_ivp`` (DOP853, tight tolerances), stopped
    exactly on the target plane by an event function

Reference cases span pistol, rifle and long-range rifle shots with and
without crosswind.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np
from scipy.integrate import solve_ivp

from .config import GRAVITY, InvalidConfiguration
from .integrator import simulate_shot
from .projectile import EnvironmentParameters, ShotParameters, compute_acceleration
from .wind import sample_wind


logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
#  Reference cases
# ══════════════════════════════════════════════════════════════════════════

REFERENCE_CASES = [
    {
        'name': 'Free fall 100 m',
        'shot': ShotParameters(distance_m=100.0, muzzle_velocity_mps=800.0,
                               drag_factor=0.0, dt_s=0.001),
        'env': EnvironmentParameters(),
    },
    {
        'name': 'Pistol 25 m',
        'shot': ShotParameters(distance_m=25.0, muzzle_velocity_mps=350.0,
                               drag_factor=0.00005, dt_s=0.001),
        'env': EnvironmentParameters(wind_mps=2.0),
    },
    {
        'name': 'Rifle 300 m crosswind',
        'shot': ShotParameters(distance_m=300.0, muzzle_velocity_mps=820.0,
                               drag_factor=0.00002, dt_s=0.001),
        'env': EnvironmentParameters(wind_mps=5.0, gust_mps=1.0, seed=7),
    },
    {
        'name': 'Long range 800 m',
        'shot': ShotParameters(distance_m=800.0, muzzle_velocity_mps=850.0,
                               drag_factor=0.000015, aim_y_m=4.0, dt_s=0.001),
        'env': EnvironmentParameters(wind_mps=-3.0),
    },
]


@dataclass
class ValidationResult:
    """Result of one validation comparison."""
    name: str
    ref_y: float            # reference impact Y (m)
    sim_y: float            # simulated impact Y (m)
    ref_z: float
    sim_z: float
    ref_tof: float
    sim_tof: float

    @property
    def y_error(self) -> float:
        return abs(self.sim_y - self.ref_y)

    @property
    def z_error(self) -> float:
        return abs(self.sim_z - self.ref_z)

    @property
    def tof_error(self) -> float:
        return abs(self.sim_tof - self.ref_tof)


def free_fall_drop(distance_m: float, muzzle_velocity_mps: float,
                   gravity: float = GRAVITY) -> float:
    """Closed-form vertical offset −½·g·(d/v)² of a flat, drag-free shot."""
    t = distance_m / muzzle_velocity_mps
    return -0.5 * gravity * t * t


def reference_solution(shot: ShotParameters,
                       env: EnvironmentParameters) -> Tuple[float, float, float]:
    """
    Solve the same equations of motion adaptively.

    Returns (impact_y, impact_z, time_of_flight).
    """
    if env.wind_profile:
        raise InvalidConfiguration("reference solution supports constant wind only")
    shot.validate()
    env.validate()

    wind = sample_wind(env.wind_mps, env.gust_mps, env.seed)
    k = shot.drag_factor * env.air_density_kg_m3
    g = env.gravity_mps2

    def rhs(t, s):
        return np.concatenate([s[3:], compute_acceleration(s[3:], wind, k, g)])

    def reach_target(t, s):
        return s[0] - shot.distance_m
    reach_target.terminal = True
    reach_target.direction = 1

    s0 = np.concatenate([np.zeros(3), shot.initial_velocity_vector()])
    sol = solve_ivp(rhs, (0.0, shot.max_time_s), s0, method='DOP853',
                    events=reach_target, rtol=1e-10, atol=1e-12)
    if not sol.t_events[0].size:
        raise InvalidConfiguration(
            f"reference solver did not reach {shot.distance_m} m "
            f"within {shot.max_time_s} s"
        )
    state = sol.y_events[0][0]
    return float(state[1]), float(state[2]), float(sol.t_events[0][0])


def validate_case(case: dict, method: str = 'euler') -> ValidationResult:
    shot, env = case['shot'], case['env']
    ref_y, ref_z, ref_tof = reference_solution(shot, env)
    sim = simulate_shot(shot, env, method=method)
    return ValidationResult(
        name=case['name'],
        ref_y=ref_y, sim_y=sim.impact_y_m,
        ref_z=ref_z, sim_z=sim.impact_z_m,
        ref_tof=ref_tof, sim_tof=sim.time_of_flight_s,
    )


def validate_against_reference(cases: List[dict] = None, method: str = 'euler',
                               verbose: bool = True) -> List[ValidationResult]:
    """
    Run every reference case through the integrator and compare.

    Returns list of ValidationResult, one per case.
    """
    cases = REFERENCE_CASES if cases is None else cases
    results = [validate_case(case, method) for case in cases]

    if verbose:
        print(f"\n{'='*75}")
        print(f"  VALIDATION: {method.upper()} vs DOP853 reference")
        print(f"{'='*75}")
        print(f"{'Case':<24} {'Ref Y (cm)':>10} {'Sim Y (cm)':>10} "
              f"{'Ref Z (cm)':>10} {'Sim Z (cm)':>10} {'ΔToF (ms)':>10}")
        print("-" * 75)
        for r in results:
            print(f"{r.name:<24} {r.ref_y*100:>10.3f} {r.sim_y*100:>10.3f} "
                  f"{r.ref_z*100:>10.3f} {r.sim_z*100:>10.3f} "
                  f"{r.tof_error*1000:>10.4f}")
        worst = max(max(r.y_error, r.z_error) for r in results)
        print("-" * 75)
        print(f"  Worst impact error: {worst*1000:.3f} mm")
        print(f"{'='*75}\n")

    for r in results:
        logger.debug("%s: |Δy|=%.2e m |Δz|=%.2e m", r.name, r.y_error, r.z_error)
    return results


def run_all_validations(verbose: bool = True) -> Dict[str, List[ValidationResult]]:
    """Validate both steppers against the reference cases."""
    return {method: validate_against_reference(method=method, verbose=verbose)
            for method in ('euler', 'rk4')}


if __name__ == "__main__":
    run_all_validations(verbose=True)
