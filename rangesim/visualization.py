"""
Diagnostic Plots
================
Matplotlib figures for inspecting the core's outputs while tuning content:
  1. Trajectory side/top view from a recorded path
  2. Shotgun pellet pattern with spread circle and target ring
  3. Dispersion shot group with its max-radius circle
  4. Euler vs RK4 impact comparison across distances

These are developer tools; in-game rendering lives elsewhere.
"""

import os
from typing import Optional, Sequence

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.patches import Circle

from .dispersion import DispersionSample
from .integrator import ShotResult, simulate_shot
from .projectile import EnvironmentParameters, ShotParameters


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b',
                      '#e040fb', '#ff5252'],
}


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    axes = axes.flatten() if isinstance(axes, np.ndarray) else [axes]
    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def _legend(ax):
    ax.legend(fontsize=9, facecolor='#1a1a1a', edgecolor='#444',
              labelcolor=STYLE['text_color'])


def _finish(fig, save_path: Optional[str]):
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])
    return fig


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
#  1. Trajectory
# ══════════════════════════════════════════════════════════════════════════

def plot_trajectory(result: ShotResult, save_path: str = None) -> plt.Figure:
    """Vertical (side) and lateral (top) offsets along the recorded path, in cm."""
    if result.path is None:
        raise ValueError("plot_trajectory needs a result recorded with record_path=True")
    path = result.path_array()

    fig, (ax_side, ax_top) = plt.subplots(2, 1, figsize=(12, 7), sharex=True)
    _apply_dark_style(fig, np.array([ax_side, ax_top]))

    ax_side.plot(path[:, 1], path[:, 2] * 100, color=STYLE['accent_colors'][0],
                 linewidth=2, label='Height')
    ax_side.plot(path[-1, 1], result.impact_y_m * 100, 'x', color='#ff5252',
                 markersize=12, markeredgewidth=3, label='Impact')
    ax_side.set_ylabel('Y (cm)')
    ax_side.set_title(f'Trajectory — {result.method.upper()}, '
                      f'ToF {result.time_of_flight_s:.3f} s, '
                      f'wind {result.wind_used_mps:+.2f} m/s',
                      fontweight='bold')
    _legend(ax_side)

    ax_top.plot(path[:, 1], path[:, 3] * 100, color=STYLE['accent_colors'][4],
                linewidth=2, label='Drift')
    ax_top.axhline(y=0, color='#555', linestyle='--', alpha=0.5)
    ax_top.set_xlabel('Downrange (m)')
    ax_top.set_ylabel('Z (cm)')
    _legend(ax_top)

    return _finish(fig, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  2 & 3. Target-plane scatter plots
# ══════════════════════════════════════════════════════════════════════════

def _plot_target_plane(offsets: Sequence[DispersionSample], max_radius_m: float,
                       title: str, target_radius_m: Optional[float],
                       save_path: Optional[str]) -> plt.Figure:
    fig, ax = plt.subplots(figsize=(7, 7))
    _apply_dark_style(fig, ax)

    pts = np.asarray(offsets, dtype=float).reshape(-1, 2) * 100
    ax.scatter(pts[:, 1], pts[:, 0], s=18, color=STYLE['accent_colors'][1],
               label=f'{len(pts)} impacts', zorder=3)
    ax.add_patch(Circle((0, 0), max_radius_m * 100, fill=False,
                        color=STYLE['accent_colors'][0], linestyle='--',
                        label='Max radius'))
    if target_radius_m is not None:
        ax.add_patch(Circle((0, 0), target_radius_m * 100, fill=False,
                            color=STYLE['accent_colors'][2], linewidth=2,
                            label='Target'))
    ax.plot(0, 0, '+', color='#ffffff', markersize=14)

    lim = max(max_radius_m, target_radius_m or 0.0) * 100 * 1.15 or 1.0
    ax.set_xlim(-lim, lim)
    ax.set_ylim(-lim, lim)
    ax.set_aspect('equal')
    ax.set_xlabel('Z, right (cm)')
    ax.set_ylabel('Y, up (cm)')
    ax.set_title(title, fontweight='bold')
    _legend(ax)
    return _finish(fig, save_path)


def plot_pellet_pattern(pellets: Sequence[DispersionSample], spread_radius_m: float,
                        target_radius_m: Optional[float] = None,
                        save_path: str = None) -> plt.Figure:
    return _plot_target_plane(pellets, spread_radius_m, 'Shotgun Pattern',
                              target_radius_m, save_path)


def plot_shot_group(samples: Sequence[DispersionSample], max_radius_m: float,
                    save_path: str = None) -> plt.Figure:
    return _plot_target_plane(samples, max_radius_m, 'Dispersion Group',
                              None, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  4. Euler vs RK4
# ══════════════════════════════════════════════════════════════════════════

def plot_euler_vs_rk4(base_shot: ShotParameters, env: EnvironmentParameters,
                      distances: Sequence[float],
                      save_path: str = None) -> plt.Figure:
    """Impact drop from both steppers across a sweep of distances."""
    fig, (ax_y, ax_d) = plt.subplots(1, 2, figsize=(14, 5))
    _apply_dark_style(fig, np.array([ax_y, ax_d]))

    drops = {}
    for method in ('euler', 'rk4'):
        drops[method] = np.array([
            simulate_shot(ShotParameters(
                distance_m=d,
                muzzle_velocity_mps=base_shot.muzzle_velocity_mps,
                drag_factor=base_shot.drag_factor,
                dt_s=base_shot.dt_s,
                max_time_s=base_shot.max_time_s,
            ), env, method=method).impact_y_m
            for d in distances
        ])

    ax_y.plot(distances, drops['euler'] * 100, color=STYLE['accent_colors'][1],
              linewidth=2, label='Semi-implicit Euler')
    ax_y.plot(distances, drops['rk4'] * 100, '--', color=STYLE['accent_colors'][0],
              linewidth=2, label='RK4')
    ax_y.set_xlabel('Distance (m)')
    ax_y.set_ylabel('Impact Y (cm)')
    ax_y.set_title('Bullet Drop', fontweight='bold')
    _legend(ax_y)

    ax_d.plot(distances, (drops['euler'] - drops['rk4']) * 1000,
              color=STYLE['accent_colors'][4], linewidth=2)
    ax_d.set_xlabel('Distance (m)')
    ax_d.set_ylabel('Euler − RK4 (mm)')
    ax_d.set_title(f'Step Error (dt = {base_shot.dt_s * 1000:g} ms)',
                   fontweight='bold')

    return _finish(fig, save_path)
