"""
Angular Units & Turret Correction
=================================
MIL / MOA / meter conversions and click-quantized turret dialing.

1 MIL subtends distance/1000 meters at that distance; 1 MIL ≈ 3.438 MOA.

Sign convention (shared with the integrator and every caller):
  - Elevation: positive shifts the point of impact UP
  - Windage:   positive shifts the point of impact RIGHT

Dial values are stored as click counts × click size, so repeated clicking
never accumulates floating-point drift.
"""

import math
from dataclasses import dataclass

from .config import DEFAULT_CLICK_MILS, MILS_PER_MOA, MOA_PER_MIL, InvalidConfiguration


# ══════════════════════════════════════════════════════════════════════════
#  Unit conversions
# ══════════════════════════════════════════════════════════════════════════

def _require_distance(distance_m: float) -> None:
    if not distance_m > 0:
        raise InvalidConfiguration(f"distance must be > 0, got {distance_m}")


def mil_to_meters(distance_m: float, mils: float) -> float:
    """Linear size (m) subtended by ``mils`` at ``distance_m``."""
    _require_distance(distance_m)
    return distance_m * 0.001 * mils


def meters_to_mils(distance_m: float, meters: float) -> float:
    """Angular size (mil) of ``meters`` seen from ``distance_m``."""
    _require_distance(distance_m)
    return meters / (distance_m * 0.001)


def mils_to_moa(mils: float) -> float:
    return mils * MOA_PER_MIL


def moa_to_mils(moa: float) -> float:
    return moa * MILS_PER_MOA


# ══════════════════════════════════════════════════════════════════════════
#  Click quantization
# ══════════════════════════════════════════════════════════════════════════

def _require_click(click_size: float) -> None:
    if not click_size > 0:
        raise InvalidConfiguration(f"click size must be > 0, got {click_size}")


def click_count(value: float, click_size: float = DEFAULT_CLICK_MILS) -> int:
    """
    Nearest whole number of clicks to ``value``.

    Halves round away from zero, so a correction and its mirror image
    quantize symmetrically and small repeated corrections cannot flip-flop.
    """
    _require_click(click_size)
    return int(math.copysign(math.floor(abs(value) / click_size + 0.5), value))


def quantize_adjustment_to_clicks(value: float,
                                  click_size: float = DEFAULT_CLICK_MILS) -> float:
    """Round a MIL value to the nearest representable click."""
    return click_count(value, click_size) * click_size


def next_click_value(current: float, direction: int,
                     click_size: float = DEFAULT_CLICK_MILS) -> float:
    """
    Dial value one click away from ``current`` in ``direction`` (+1 / -1).

    The step is added in click space (integer count) and converted back
    once, never by repeatedly adding a float click size to a float value.
    """
    if direction not in (1, -1):
        raise InvalidConfiguration(f"direction must be +1 or -1, got {direction}")
    return (click_count(current, click_size) + direction) * click_size


# ══════════════════════════════════════════════════════════════════════════
#  Turret state & corrections
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TurretState:
    elevation_mils: float = 0.0   # positive = impact up
    windage_mils: float = 0.0     # positive = impact right


@dataclass(frozen=True)
class TurretAdjustment:
    """An angular correction to dial onto the turret."""
    elevation_mils: float
    windage_mils: float


@dataclass(frozen=True)
class ZeroProfile:
    """Turret setting at which point of aim equals point of impact."""
    turret: TurretState
    distance_m: float

    def __post_init__(self):
        _require_distance(self.distance_m)


def compute_adjustment_for_offset(offset_y_m: float, offset_z_m: float,
                                  distance_m: float) -> TurretAdjustment:
    """
    Correction that recentres a measured miss.

    A hit 10 cm high at 100 m (offset_y = +0.1) needs -1.0 mil elevation;
    a hit left (offset_z < 0) needs positive windage.
    """
    return TurretAdjustment(
        elevation_mils=-meters_to_mils(distance_m, offset_y_m),
        windage_mils=-meters_to_mils(distance_m, offset_z_m),
    )


def quantize_adjustment(adjustment: TurretAdjustment,
                        click_size: float = DEFAULT_CLICK_MILS) -> TurretAdjustment:
    return TurretAdjustment(
        elevation_mils=quantize_adjustment_to_clicks(adjustment.elevation_mils, click_size),
        windage_mils=quantize_adjustment_to_clicks(adjustment.windage_mils, click_size),
    )


def apply_adjustment(state: TurretState, adjustment: TurretAdjustment,
                     click_size: float = DEFAULT_CLICK_MILS) -> TurretState:
    """Dial a correction onto the turret; the result stays on whole clicks."""
    elev = click_count(state.elevation_mils, click_size) + \
        click_count(adjustment.elevation_mils, click_size)
    wind = click_count(state.windage_mils, click_size) + \
        click_count(adjustment.windage_mils, click_size)
    return TurretState(elevation_mils=elev * click_size,
                       windage_mils=wind * click_size)


def apply_turret_offset(aim_y_m: float, aim_z_m: float, state: TurretState,
                        distance_m: float):
    """
    Shift an aim point by the dialed turret values.

    Returns the adjusted (aim_y_m, aim_z_m); positive elevation raises the
    aim, positive windage moves it right.
    """
    return (aim_y_m + mil_to_meters(distance_m, state.elevation_mils),
            aim_z_m + mil_to_meters(distance_m, state.windage_mils))


def format_turret_state(state: TurretState) -> str:
    """e.g. ``"E: +0.0, W: -2.1"``"""
    # + 0.0 folds -0.0 into +0.0
    return (f"E: {state.elevation_mils + 0.0:+.1f}, "
            f"W: {state.windage_mils + 0.0:+.1f}")
