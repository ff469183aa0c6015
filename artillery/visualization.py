"""
Visualization Engine
====================
Plots for the ballistic core and the game:
  1. Trajectory (altitude vs range)
  2. Cd vs Mach curve (M795)
  3. Atmospheric tables (gravity, density, speed of sound)
  4. Dashboard with key metrics
  5. Elevation sweep
  6. Time-step comparison
  7. Game frame (terrain, howitzer, target, tracer) in screen pixels
  8. Animated trajectory (saved as GIF)

This module is the only place the meters-per-pixel display scale is
applied; everything handed in is in meters.
"""

import os
from typing import Dict, Optional

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import matplotlib.gridspec as gridspec

from .atmosphere import atmosphere_profile
from .config import DisplayScale
from .drag_model import M795_DRAG_TABLE, drag_curve
from .integrator import ShotResult


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b',
                      '#e040fb', '#ff5252', '#26c6da', '#ffa726'],
}

LEGEND_STYLE = dict(facecolor='#1a1a1a', edgecolor='#444',
                    labelcolor=STYLE['text_color'])


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def _save(fig, save_path):
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
#  1. Single Trajectory Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_trajectory(result: ShotResult, save_path: str = None,
                    show: bool = False) -> plt.Figure:
    """Altitude vs downrange for a single shot."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    x0 = result.x[0]
    ax.plot((result.x - x0) / 1000, result.y / 1000,
            color=STYLE['accent_colors'][0], linewidth=2.5, label='M795')

    ax.plot(0, result.y[0] / 1000, 'o', color='#00e676', markersize=10,
            label='Launch', zorder=5)
    ax.plot((result.x[-1] - x0) / 1000, result.y[-1] / 1000, 'x',
            color='#ff5252', markersize=12, markeredgewidth=3,
            label='Impact', zorder=5)

    idx_max = np.argmax(result.y)
    ax.plot((result.x[idx_max] - x0) / 1000, result.y[idx_max] / 1000, '^',
            color='#ffeb3b', markersize=10, label='Apex', zorder=5)

    ax.set_xlabel('Downrange (km)', fontsize=12)
    ax.set_ylabel('Altitude (km)', fontsize=12)
    ax.set_title(f'M795 Trajectory (v₀={result.muzzle_velocity:.0f} m/s, '
                 f'θ={result.elevation.degrees:.0f}°, Δt={result.dt}s)',
                 fontsize=13, fontweight='bold')
    ax.legend(loc='upper right', fontsize=10, **LEGEND_STYLE)
    ax.set_ylim(bottom=0)
    ax.set_xlim(left=0)

    plt.tight_layout()
    _save(fig, save_path)
    if show:
        plt.show()
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  2. Cd vs Mach Curve
# ══════════════════════════════════════════════════════════════════════════

def plot_cd_vs_mach(save_path: str = None) -> plt.Figure:
    """M795 drag coefficient against Mach number, with the table knots."""
    fig, ax = plt.subplots(figsize=(11, 6))
    _apply_dark_style(fig, ax)

    mach_range = np.linspace(0, 5.0, 500)
    ax.plot(mach_range, drag_curve(mach_range), color='#00d4ff',
            linewidth=2.5, label='Interpolated')
    ax.plot(M795_DRAG_TABLE.domains, M795_DRAG_TABLE.ranges, 'o',
            color='#ffeb3b', markersize=5, label='Table knots')

    ax.axvspan(0.8, 1.2, alpha=0.08, color='#ff5252')
    ax.text(1.0, 0.05, 'Transonic\nRegion', ha='center',
            color='#ff5252', fontsize=10, alpha=0.7)

    ax.set_xlabel('Mach Number', fontsize=12)
    ax.set_ylabel('Drag Coefficient (Cd)', fontsize=12)
    ax.set_title('Drag Coefficient vs Mach Number — M795',
                 fontsize=14, fontweight='bold')
    ax.legend(fontsize=11, **LEGEND_STYLE)
    ax.set_xlim(0, 5.0)
    ax.set_ylim(0, 0.5)

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  3. Atmospheric Profile
# ══════════════════════════════════════════════════════════════════════════

def plot_atmosphere(save_path: str = None,
                    max_altitude: float = 80000.0) -> plt.Figure:
    """Gravity, density and speed of sound from sea level to 80 km."""
    altitudes = np.linspace(0, max_altitude, 500)
    profile = atmosphere_profile(altitudes)

    fig, axes = plt.subplots(1, 3, figsize=(15, 7), sharey=True)
    _apply_dark_style(fig, axes)

    alt_km = altitudes / 1000

    params = [
        ('Gravity (m/s²)', profile['gravity'], '#ff6b35'),
        ('Density (kg/m³)', profile['density'], '#00e676'),
        ('Speed of Sound (m/s)', profile['speed_of_sound'], '#ffeb3b'),
    ]

    for ax, (title, data, color) in zip(axes, params):
        ax.plot(data, alt_km, color=color, linewidth=2)
        ax.set_xlabel(title, fontsize=10)
        ax.fill_betweenx(alt_km, data.min(), data, alpha=0.1, color=color)

    axes[1].set_xscale('log')
    axes[0].set_ylabel('Altitude (km)', fontsize=12)
    fig.suptitle('Atmospheric Lookup Tables',
                 fontsize=14, fontweight='bold', color=STYLE['text_color'])
    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  4. Dashboard
# ══════════════════════════════════════════════════════════════════════════

def plot_dashboard(result: ShotResult, save_path: str = None) -> plt.Figure:
    """Trajectory, flight data and per-sample histories on one page."""
    fig = plt.figure(figsize=(18, 11))
    fig.patch.set_facecolor(STYLE['bg_color'])

    gs = gridspec.GridSpec(3, 3, figure=fig, hspace=0.35, wspace=0.3)

    # ── Trajectory (top, spans 2 cols) ──
    ax1 = fig.add_subplot(gs[0, :2])
    _apply_dark_style(fig, ax1)
    x_km = (result.x - result.x[0]) / 1000
    ax1.plot(x_km, result.y / 1000, color='#00d4ff', linewidth=2.5)
    idx_max = np.argmax(result.y)
    ax1.plot(x_km[idx_max], result.y[idx_max] / 1000, '^',
             color='#ffeb3b', markersize=12)
    ax1.plot(x_km[-1], 0, 'x', color='#ff5252',
             markersize=14, markeredgewidth=3)
    ax1.set_xlabel('Range (km)')
    ax1.set_ylabel('Altitude (km)')
    ax1.set_title('TRAJECTORY', fontweight='bold', fontsize=13)
    ax1.set_ylim(bottom=0)

    # ── Metrics panel (top-right) ──
    ax_info = fig.add_subplot(gs[0, 2])
    ax_info.set_facecolor('#111111')
    ax_info.axis('off')

    metrics = [
        ('LAUNCH', f'{result.muzzle_velocity:.0f} m/s @ {result.elevation.degrees:.0f}°'),
        ('RANGE', f'{result.range_total/1000:.2f} km'),
        ('MAX ALT', f'{result.max_altitude/1000:.2f} km'),
        ('FLIGHT TIME', f'{result.flight_time:.1f} s'),
        ('IMPACT VEL', f'{result.impact_velocity:.0f} m/s'),
        ('IMPACT ANGLE', f'{result.impact_angle_deg:.1f}°'),
        ('MASS', f'{result.mass:.1f} kg'),
        ('STEP', f'{result.dt} s'),
    ]

    for i, (label, value) in enumerate(metrics):
        y_pos = 0.92 - i * 0.115
        ax_info.text(0.05, y_pos, label, fontsize=10, fontweight='bold',
                     color='#888888', transform=ax_info.transAxes, fontfamily='monospace')
        ax_info.text(0.95, y_pos, value, fontsize=11, fontweight='bold',
                     color='#00d4ff', transform=ax_info.transAxes,
                     ha='right', fontfamily='monospace')

    ax_info.set_title('FLIGHT DATA', fontweight='bold',
                      color=STYLE['text_color'], fontsize=13, pad=10)

    panels = [
        (gs[1, 0], result.speed, '#ff6b35', 'Speed (m/s)', 'SPEED'),
        (gs[1, 1], result.mach_history, '#e040fb', 'Mach', 'MACH NUMBER'),
        (gs[1, 2], result.cd_history, '#00e676', 'Cd', 'DRAG COEFFICIENT'),
        (gs[2, 0], result.y / 1000, '#ffeb3b', 'Altitude (km)', 'ALTITUDE'),
        (gs[2, 1], result.density_history, '#26c6da', 'ρ (kg/m³)', 'AIR DENSITY'),
    ]
    for cell, data, color, ylabel, title in panels:
        ax = fig.add_subplot(cell)
        _apply_dark_style(fig, ax)
        ax.plot(result.time, data, color=color, linewidth=2)
        ax.set_xlabel('Time (s)')
        ax.set_ylabel(ylabel)
        ax.set_title(title, fontweight='bold')
        if title == 'MACH NUMBER':
            ax.axhline(y=1.0, color='#ff5252', linestyle='--', alpha=0.5)

    # ── Velocity components (bottom-right) ──
    ax7 = fig.add_subplot(gs[2, 2])
    _apply_dark_style(fig, ax7)
    ax7.plot(result.time, result.vx, label='vx (range)', color='#00d4ff', linewidth=1.5)
    ax7.plot(result.time, result.vy, label='vy (vertical)', color='#ff6b35', linewidth=1.5)
    ax7.set_xlabel('Time (s)')
    ax7.set_ylabel('Velocity (m/s)')
    ax7.set_title('VELOCITY COMPONENTS', fontweight='bold')
    ax7.legend(fontsize=8, **LEGEND_STYLE)

    fig.suptitle('M777 HOWITZER — M795 FLIGHT DASHBOARD',
                 fontsize=16, fontweight='bold', color='#00d4ff', y=0.98)

    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  5. Elevation Sweep
# ══════════════════════════════════════════════════════════════════════════

def plot_elevation_sweep(results: Dict[float, ShotResult],
                         save_path: str = None) -> plt.Figure:
    """Trajectories for several elevations plus range vs elevation."""
    fig, axes = plt.subplots(1, 2, figsize=(16, 6))
    _apply_dark_style(fig, axes)

    colors = STYLE['accent_colors']
    ax = axes[0]
    for i, (elev, res) in enumerate(sorted(results.items())):
        ax.plot((res.x - res.x[0]) / 1000, res.y / 1000,
                color=colors[i % len(colors)], linewidth=2, label=f'{elev:.0f}°')
    ax.set_xlabel('Range (km)')
    ax.set_ylabel('Altitude (km)')
    ax.set_title('Trajectories by Elevation', fontweight='bold')
    ax.legend(fontsize=9, **LEGEND_STYLE)
    ax.set_ylim(bottom=0)

    ax = axes[1]
    elevations = sorted(results)
    ranges = [results[e].range_total / 1000 for e in elevations]
    ax.plot(elevations, ranges, 'o-', color='#ffeb3b', linewidth=2, markersize=8)
    ax.set_xlabel('Elevation from vertical (°)')
    ax.set_ylabel('Range (km)')
    ax.set_title('Range vs Elevation', fontweight='bold')

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  6. Time-Step Comparison
# ══════════════════════════════════════════════════════════════════════════

def plot_timestep_comparison(results: Dict[float, ShotResult],
                             save_path: str = None) -> plt.Figure:
    """The same shot integrated at several step sizes."""
    fig, axes = plt.subplots(1, 2, figsize=(16, 6))
    _apply_dark_style(fig, axes)

    steps = sorted(results, reverse=True)
    reference = results[steps[-1]]
    colors = STYLE['accent_colors']

    ax = axes[0]
    for i, dt in enumerate(steps):
        res = results[dt]
        ax.plot(res.x / 1000, res.y / 1000, color=colors[i % len(colors)],
                linewidth=2, linestyle='--' if dt != steps[-1] else '-',
                label=f'Δt={dt}s')
    ax.set_xlabel('Range (km)')
    ax.set_ylabel('Altitude (km)')
    ax.set_title('Trajectory Comparison', fontweight='bold')
    ax.legend(fontsize=10, **LEGEND_STYLE)
    ax.set_ylim(bottom=0)

    ax = axes[1]
    errors = [results[dt].range_total - reference.range_total for dt in steps]
    ax.bar([str(dt) for dt in steps], errors,
           color=[colors[i % len(colors)] for i in range(len(steps))], alpha=0.85)
    ax.axhline(y=0, color='#888', linewidth=0.5)
    ax.set_xlabel('Time step (s)')
    ax.set_ylabel(f'Range error vs Δt={steps[-1]}s (m)')
    ax.set_title('Step-Size Error', fontweight='bold')

    fig.suptitle('First-Order Integration — Step Size Sensitivity',
                 fontsize=14, fontweight='bold', color=STYLE['text_color'], y=1.02)
    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  7. Game Frame
# ══════════════════════════════════════════════════════════════════════════

def plot_game_frame(simulator, scale: Optional[DisplayScale] = None,
                    save_path: str = None) -> plt.Figure:
    """
    One frame of the game in screen pixels: terrain, howitzer, target,
    tracer trail and the status panel.
    """
    scale = scale or simulator.config.scale
    config = simulator.config
    ground = simulator.ground

    fig, ax = plt.subplots(figsize=(10, 10 * config.field_height_px / config.field_width_px))
    _apply_dark_style(fig, ax)
    ax.grid(False)

    columns = np.arange(ground.width)
    heights_px = ground.heights / scale.meters_per_pixel
    ax.fill_between(columns, 0, heights_px, color='#2e7d32', alpha=0.9)

    tx, ty = scale.to_pixels(ground.target)
    ax.plot(tx, ty, 's', color='#ff5252', markersize=9, label='Target')

    hx, hy = scale.to_pixels(simulator.howitzer.position)
    # a 6 m barrel is a fraction of a pixel; draw it at a visible length
    barrel = 12.0
    elevation = simulator.howitzer.elevation
    ax.plot([hx, hx + barrel * elevation.dx], [hy, hy + barrel * elevation.dy],
            color='#bdbdbd', linewidth=4, solid_capstyle='round')
    ax.plot(hx, hy, 'o', color='#bdbdbd', markersize=8, label='Howitzer')

    trail = simulator.trail
    if trail:
        points = np.array([scale.to_pixels(p) for p in trail])
        alpha = np.linspace(1.0, 0.1, len(points))
        for (px, py), a in zip(points, alpha):
            ax.plot(px, py, 'o', color='#ffeb3b', markersize=4, alpha=a)

    ax.text(0.02, 0.97, simulator.status_text(), transform=ax.transAxes,
            color=STYLE['text_color'], fontsize=10, fontfamily='monospace',
            verticalalignment='top')

    ax.set_xlim(0, config.field_width_px)
    ax.set_ylim(0, config.field_height_px)
    ax.set_xlabel('x (px)')
    ax.set_ylabel('y (px)')
    ax.set_title(f'M777 Howitzer — {scale.meters_per_pixel:.0f} m/px',
                 fontweight='bold')
    ax.legend(loc='upper right', fontsize=9, **LEGEND_STYLE)

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  8. Animated Trajectory (GIF)
# ══════════════════════════════════════════════════════════════════════════

def create_trajectory_animation(result: ShotResult,
                                save_path: str = 'outputs/trajectory_anim.gif',
                                frames: int = 100) -> str:
    """Create animated GIF of the shot with a trail."""
    from matplotlib.animation import FuncAnimation, PillowWriter

    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    x_km = (result.x - result.x[0]) / 1000
    y_km = result.y / 1000

    ax.set_xlim(0, max(x_km.max(), 0.1) * 1.05)
    ax.set_ylim(0, max(y_km.max(), 0.1) * 1.15)
    ax.set_xlabel('Range (km)', fontsize=12)
    ax.set_ylabel('Altitude (km)', fontsize=12)
    ax.set_title('M795 Trajectory Animation', fontsize=14, fontweight='bold')

    trail_line, = ax.plot([], [], color='#00d4ff', linewidth=1.5, alpha=0.6)
    point, = ax.plot([], [], 'o', color='#00d4ff', markersize=8)
    time_text = ax.text(0.02, 0.95, '', transform=ax.transAxes,
                        color=STYLE['text_color'], fontsize=11, fontfamily='monospace')

    # Subsample for animation
    total_pts = len(x_km)
    step = max(1, total_pts // frames)
    indices = list(range(0, total_pts, step))
    if indices[-1] != total_pts - 1:
        indices.append(total_pts - 1)

    def animate(frame_idx):
        idx = indices[min(frame_idx, len(indices) - 1)]
        trail_line.set_data(x_km[:idx+1], y_km[:idx+1])
        point.set_data([x_km[idx]], [y_km[idx]])
        time_text.set_text(
            f't={result.time[idx]:.1f}s | v={result.speed[idx]:.0f} m/s | '
            f'alt={result.y[idx]:.0f} m | Mach={result.mach_history[idx]:.2f}'
        )
        return trail_line, point, time_text

    anim = FuncAnimation(fig, animate, frames=len(indices), interval=50, blit=True)
    anim.save(save_path, writer=PillowWriter(fps=20),
              savefig_kwargs={'facecolor': STYLE['bg_color']})
    plt.close(fig)
    return save_path
