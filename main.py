#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  M777 HOWITZER BALLISTICS SIMULATOR — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the complete pipeline:
    1. Atmospheric lookup tables
    2. M795 Cd vs Mach curve
    3. Reference shot (0.5 s step)
    4. Firing table across elevations
    5. Time-step sensitivity
    6. Firing solution for a requested range
    7. Headless games against random terrain
    8. Dashboard and animated trajectory

  Figures are saved to the outputs/ directory.

  Usage:
    python main.py                    # Run everything
    python main.py --quick            # Skip figures (faster)
    python main.py --elevation 60 --velocity 700 --games 3
═══════════════════════════════════════════════════════════════════════════════
"""

import argparse
import logging
import os
import sys
import time

import numpy as np

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from artillery.atmosphere import (
    density_from_altitude, gravity_from_altitude, speed_sound_from_altitude,
)
from artillery.config import SimulationConfig
from artillery.drag_model import drag_from_mach
from artillery.firing_table import build_firing_table, compare_time_steps, sweep_shots
from artillery.howitzer import DEFAULT_ELEVATION_ANGLE, DEFAULT_MUZZLE_VELOCITY, Howitzer
from artillery.integrator import simulate_shot
from artillery.projectile import Projectile
from artillery.simulation import Simulator


def banner():
    print("""
╔═══════════════════════════════════════════════════════════════════════╗
║                                                                       ║
║     M777 HOWITZER — M795 155mm BALLISTICS SIMULATOR                   ║
║     ─────────────────────────────────────────────                     ║
║     Gravity(h) · Density(h) · Speed of sound(h) · Drag(Mach)          ║
║     Fixed-step integration │ Δt = 0.5 s reference                     ║
║                                                                       ║
╚═══════════════════════════════════════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Simulate M795 shells fired from an M777 howitzer.")
    parser.add_argument('--quick', action='store_true',
                        help="skip figure and animation output")
    parser.add_argument('--elevation', type=float, default=DEFAULT_ELEVATION_ANGLE,
                        help="elevation in degrees from vertical (default: %(default)s)")
    parser.add_argument('--velocity', type=float, default=DEFAULT_MUZZLE_VELOCITY,
                        help="muzzle velocity in m/s (default: %(default)s)")
    parser.add_argument('--range', type=float, default=15000.0, dest='target_range',
                        help="range in meters to solve a firing angle for")
    parser.add_argument('--games', type=int, default=1,
                        help="number of headless games to play")
    parser.add_argument('--shots', type=int, default=5,
                        help="shots per game")
    parser.add_argument('--seed', type=int, default=None,
                        help="random seed for terrain")
    parser.add_argument('--output', default='outputs',
                        help="directory for figures")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="show debug logging from the simulator")
    return parser.parse_args(argv)


def play_games(args, rng):
    """Aim with the range estimator and fire at each new target."""
    sim = Simulator(SimulationConfig(), rng)
    sim.howitzer.set_muzzle_velocity(args.velocity)

    for game in range(1, args.games + 1):
        if game > 1:
            sim.new_game()
            sim.howitzer.set_muzzle_velocity(args.velocity)
        print(f"\n  Game {game}")
        for shot in range(1, args.shots + 1):
            target = sim.ground.target
            gun = sim.howitzer.position
            solution = sim.howitzer.estimate_angle_for_range(target.x - gun.x)
            if solution is None:
                print(f"    shot {shot}: target {target.x - gun.x:.0f} m out of range")
                sim.howitzer.set_max_elevation()
            else:
                sim.howitzer.set_elevation(solution)
            sim.fire()
            hit = sim.run_shot()
            miss = sim.last_impact.distance_to(target)
            print(f"    shot {shot}: elevation {sim.howitzer.elevation.degrees:5.1f}°  "
                  f"target {target.x - gun.x:>7.0f} m  "
                  f"miss {miss:>6.0f} m  {'HIT' if hit else 'miss'}")
        print(f"  Score: {sim.score}/{sim.shots_attempted} "
              f"({sim.hit_rate * 100:.0f}%)")
    return sim


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(name)s: %(message)s')
    start_time = time.time()
    rng = np.random.default_rng(args.seed)

    banner()

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Atmospheric Tables
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Atmospheric Lookup Tables")
    print(f"  {'Alt (m)':>8} {'g (m/s²)':>9} {'ρ (kg/m³)':>11} {'a (m/s)':>8}")
    for h in [0, 1000, 5000, 10000, 20000, 40000, 60000, 80000]:
        print(f"  {h:>8} {gravity_from_altitude(h):>9.3f} "
              f"{density_from_altitude(h):>11.5f} {speed_sound_from_altitude(h):>8.1f}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Drag Coefficient
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: M795 Cd vs Mach")
    for mach in [0.5, 0.9, 1.0, 1.06, 1.5, 2.0, 3.0, 5.0]:
        print(f"  Mach {mach:>4.2f}   Cd = {drag_from_mach(mach):.4f}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Reference Shot
    # ══════════════════════════════════════════════════════════════════════
    section(f"PHASE 3: Reference Shot ({args.elevation:.0f}°, {args.velocity:.0f} m/s)")
    gun = Howitzer(muzzle_velocity=args.velocity, elevation=args.elevation)
    position, elevation, muzzle_velocity = gun.firing_solution()
    result = simulate_shot(Projectile(), position, elevation, muzzle_velocity)
    print(result.summary())

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Firing Table
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Firing Table")
    build_firing_table(muzzle_velocity=args.velocity)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Time-Step Sensitivity
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Time-Step Sensitivity")
    step_results = compare_time_steps(muzzle_velocity=args.velocity,
                                      elevation_deg=args.elevation)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Firing Solution
    # ══════════════════════════════════════════════════════════════════════
    section(f"PHASE 6: Firing Solution for {args.target_range:.0f} m")
    angle = gun.estimate_angle_for_range(args.target_range)
    if angle is None:
        print(f"  {args.target_range:.0f} m is beyond maximum range at {args.velocity:.0f} m/s")
    else:
        gun.set_elevation(angle)
        print(f"  Elevation: {gun.elevation.degrees:.2f}°  "
              f"→ estimated range {gun.estimate_range():.0f} m")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 7: Headless Games
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 7: Headless Games")
    sim = play_games(args, rng) if args.games > 0 else None

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 8: Figures
    # ══════════════════════════════════════════════════════════════════════
    if args.quick:
        section("PHASE 8: Figures SKIPPED (--quick mode)")
    else:
        section("PHASE 8: Figures")
        import matplotlib.pyplot as plt
        from artillery.visualization import (
            create_trajectory_animation, ensure_output_dir, plot_atmosphere,
            plot_cd_vs_mach, plot_dashboard, plot_elevation_sweep,
            plot_game_frame, plot_timestep_comparison, plot_trajectory,
        )

        out = ensure_output_dir(args.output)
        figures = [
            ('01_atmosphere_profile.png', lambda p: plot_atmosphere(save_path=p)),
            ('02_cd_vs_mach.png', lambda p: plot_cd_vs_mach(save_path=p)),
            ('03_reference_trajectory.png', lambda p: plot_trajectory(result, save_path=p)),
            ('04_elevation_sweep.png',
             lambda p: plot_elevation_sweep(sweep_shots(args.velocity), save_path=p)),
            ('05_timestep_comparison.png',
             lambda p: plot_timestep_comparison(step_results, save_path=p)),
            ('06_dashboard.png', lambda p: plot_dashboard(result, save_path=p)),
        ]
        if sim is not None:
            figures.append(('07_game_frame.png',
                            lambda p: plot_game_frame(sim, save_path=p)))

        for name, draw in figures:
            fig = draw(f'{out}/{name}')
            plt.close(fig)
            print(f"  ✓ Saved: {out}/{name}")

        create_trajectory_animation(result,
                                    save_path=f'{out}/08_trajectory_animation.gif',
                                    frames=120)
        print(f"  ✓ Saved: {out}/08_trajectory_animation.gif")

    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"  Total runtime: {elapsed:.1f} seconds\n")


if __name__ == "__main__":
    main()
