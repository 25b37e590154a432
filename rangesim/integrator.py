"""
Ballistics Integrator
=====================
Fixed-step integration of the projectile's equations of motion from the
muzzle to the target plane:

    dx/dt = v
    dv/dt = a(v, wind)   (from compute_acceleration)

Two steppers are available:

1. **Semi-implicit Euler** (default) — velocity first, then position with
   the new velocity. This is the model level difficulty is tuned against.
2. **Runge-Kutta 4th order** — same force model, higher accuracy per step;
   used to check the Euler step in validation.

Integration stops at the first step whose downrange position reaches the
target distance; impact offsets and time are linearly interpolated onto the
target plane. The step count is hard-capped, and a shot that stalls or runs
out of steps is returned with ``completed=False`` instead of looping.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

import numpy as np

from .config import MAX_INTEGRATION_STEPS, MAX_PATH_POINTS, InvalidConfiguration
from .projectile import EnvironmentParameters, ShotParameters, compute_acceleration
from .wind import effective_wind, sample_segment_wind, sample_wind, segment_index_at


logger = logging.getLogger(__name__)


class TrajectoryPoint(NamedTuple):
    """One recorded sample of the flight path."""
    t: float
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class ShotResult:
    """Outcome of one simulated shot on the target plane."""
    impact_y_m: float
    impact_z_m: float
    time_of_flight_s: float
    wind_used_mps: float
    path: Optional[Tuple[TrajectoryPoint, ...]] = None
    completed: bool = True
    steps: int = 0
    method: str = 'euler'

    def path_array(self) -> np.ndarray:
        """Recorded path as an (N, 4) array of [t, x, y, z]."""
        if self.path is None:
            return np.empty((0, 4))
        return np.array(self.path, dtype=float)

    def summary(self) -> str:
        """Human-readable summary string."""
        status = "reached target" if self.completed else "INCOMPLETE"
        lines = [
            f"  Method       : {self.method.upper()} ({self.steps} steps, {status})",
            f"  Impact Y     : {self.impact_y_m * 100:>+9.2f} cm",
            f"  Impact Z     : {self.impact_z_m * 100:>+9.2f} cm",
            f"  Time of fl.  : {self.time_of_flight_s:>9.4f} s",
            f"  Wind used    : {self.wind_used_mps:>+9.2f} m/s",
        ]
        return '\n'.join(lines)


AccelFn = Callable[[np.ndarray], np.ndarray]


def _step_semi_implicit_euler(pos: np.ndarray, vel: np.ndarray, dt: float,
                              accel: AccelFn) -> Tuple[np.ndarray, np.ndarray]:
    """
    v_{n+1} = v_n + a(v_n) * dt
    x_{n+1} = x_n + v_{n+1} * dt
    """
    vel = vel + accel(vel) * dt
    pos = pos + vel * dt
    return pos, vel


def _step_rk4(pos: np.ndarray, vel: np.ndarray, dt: float,
              accel: AccelFn) -> Tuple[np.ndarray, np.ndarray]:
    """Classic RK4 over the (x, v) state; forces depend on velocity only."""
    k1v = accel(vel)
    k1x = vel

    k2v = accel(vel + 0.5 * dt * k1v)
    k2x = vel + 0.5 * dt * k1v

    k3v = accel(vel + 0.5 * dt * k2v)
    k3x = vel + 0.5 * dt * k2v

    k4v = accel(vel + dt * k3v)
    k4x = vel + dt * k3v

    pos = pos + (dt / 6.0) * (k1x + 2 * k2x + 2 * k3x + k4x)
    vel = vel + (dt / 6.0) * (k1v + 2 * k2v + 2 * k3v + k4v)
    return pos, vel


STEPPERS: Dict[str, Callable] = {
    'euler': _step_semi_implicit_euler,
    'rk4': _step_rk4,
}


class _PathRecorder:
    """
    Keeps at most MAX_PATH_POINTS samples by halving resolution whenever the
    buffer fills. Only reads state; never feeds back into the integration.
    """

    def __init__(self, limit: int = MAX_PATH_POINTS):
        self.limit = limit
        self.stride = 1
        self.points: List[TrajectoryPoint] = []

    def offer(self, step: int, t: float, pos: np.ndarray) -> None:
        if step % self.stride:
            return
        self.points.append(TrajectoryPoint(t, float(pos[0]), float(pos[1]), float(pos[2])))
        # Leave room for the impact point appended by finish().
        if len(self.points) >= self.limit:
            self.points = self.points[::2]
            self.stride *= 2

    def finish(self, point: TrajectoryPoint) -> Tuple[TrajectoryPoint, ...]:
        if self.points and self.points[-1] == point:
            return tuple(self.points)
        return tuple(self.points) + (point,)


def _wind_model(shot: ShotParameters, env: EnvironmentParameters):
    """Return (wind_used, wind_at(x)) for the shot."""
    if not env.wind_profile:
        wind = sample_wind(env.wind_mps, env.gust_mps, env.seed)
        return wind, lambda x: wind

    profile = env.wind_profile
    segment_winds = [sample_segment_wind(profile, i, env.seed)
                     for i in range(len(profile))]
    wind_used = effective_wind(shot.distance_m, profile, env.seed)
    return wind_used, lambda x: segment_winds[segment_index_at(x, profile)]


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def simulate_shot(shot: ShotParameters,
                  env: Optional[EnvironmentParameters] = None,
                  method: str = 'euler') -> ShotResult:
    """
    Fly one shot to the target plane.

    Parameters
    ----------
    shot : ShotParameters
    env : EnvironmentParameters (defaults: still air at sea level, seed 1)
    method : 'euler' (semi-implicit, default) or 'rk4'

    Returns
    -------
    ShotResult with impact offsets in meters relative to the bore line's
    intersection with the target plane (+Y up, +Z right).
    """
    if env is None:
        env = EnvironmentParameters()
    shot.validate()
    env.validate()
    if method not in STEPPERS:
        raise InvalidConfiguration(
            f"Unknown integration method '{method}'. "
            f"Available: {list(STEPPERS.keys())}"
        )
    stepper = STEPPERS[method]

    wind_used, wind_at = _wind_model(shot, env)
    k = shot.drag_factor * env.air_density_kg_m3
    g = env.gravity_mps2
    dt = shot.dt_s
    target = shot.distance_m

    max_steps = min(int(math.ceil(shot.max_time_s / dt)), MAX_INTEGRATION_STEPS)

    pos = np.zeros(3)
    vel = shot.initial_velocity_vector()
    t = 0.0

    recorder = _PathRecorder() if shot.record_path else None
    if recorder is not None:
        recorder.offer(0, t, pos)

    step = 0
    while step < max_steps:
        wind_z = wind_at(pos[0])
        prev_pos, prev_t = pos, t

        pos, vel = stepper(pos, vel, dt,
                           lambda v: compute_acceleration(v, wind_z, k, g))
        step += 1
        t = step * dt

        if pos[0] >= target:
            dx = pos[0] - prev_pos[0]
            frac = (target - prev_pos[0]) / (dx if dx != 0 else 1e-9)
            impact_y = _lerp(prev_pos[1], pos[1], frac)
            impact_z = _lerp(prev_pos[2], pos[2], frac)
            impact_t = _lerp(prev_t, t, frac)
            path = None
            if recorder is not None:
                path = recorder.finish(TrajectoryPoint(impact_t, target, impact_y, impact_z))
            logger.debug("shot reached %.1f m in %d %s steps (tof %.4f s)",
                         target, step, method, impact_t)
            return ShotResult(
                impact_y_m=float(impact_y),
                impact_z_m=float(impact_z),
                time_of_flight_s=float(impact_t),
                wind_used_mps=wind_used,
                path=path,
                completed=True,
                steps=step,
                method=method,
            )

        if recorder is not None:
            recorder.offer(step, t, pos)

        if vel[0] <= 0.0:
            # No downrange speed left: the target can never be reached.
            break

    logger.warning(
        "shot did not reach %.1f m: stopped at x=%.2f m after %d steps (t=%.3f s)",
        target, pos[0], step, t,
    )
    path = None
    if recorder is not None:
        path = recorder.finish(TrajectoryPoint(t, float(pos[0]), float(pos[1]), float(pos[2])))
    return ShotResult(
        impact_y_m=float(pos[1]),
        impact_z_m=float(pos[2]),
        time_of_flight_s=float(t),
        wind_used_mps=wind_used,
        path=path,
        completed=False,
        steps=step,
        method=method,
    )
