"""
Two-Stage Ascent Simulation - CLI

The single entry point for running a headless mission, writing the CSV
log and generating plots.
"""

import argparse
import logging
import os
import sys
from dataclasses import replace

from .config import create_default_config
from .main import run_mission
from .plotting import generate_all_plots
from .stepper import BurnMode, MissionMode

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Two-stage launch vehicle ascent simulation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in MissionMode],
        default=MissionMode.GUIDED.value,
        help="Mission mode"
    )
    parser.add_argument(
        "--target-altitude-km",
        type=float,
        default=500.0,
        help="Target orbit altitude (spawn altitude in orbital mode)"
    )
    parser.add_argument(
        "--max-time",
        type=float,
        default=None,
        help="Maximum simulated time (s)"
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=None,
        help="Host tick length (s, before time warp)"
    )
    parser.add_argument(
        "--burn",
        choices=[m.value for m in BurnMode],
        default=None,
        help="Burn mode to hold at the start of an orbital run"
    )
    parser.add_argument(
        "--burn-duration",
        type=float,
        default=30.0,
        help="Burn duration (s) for --burn"
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Write the telemetry log to this CSV file"
    )
    parser.add_argument(
        "--output-dir", "-o",
        type=str,
        default="plots",
        help="Directory to save output plots"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress verbose output"
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip plot generation"
    )
    args = parser.parse_args(argv)
    if args.burn and args.mode != MissionMode.ORBITAL.value:
        parser.error("--burn requires --mode orbital")
    return args


def main(argv=None):
    """Main execution flow."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    overrides = {'verbose': not args.quiet}
    if args.max_time is not None:
        overrides['max_time'] = args.max_time
    if args.dt is not None:
        overrides['dt'] = args.dt
    config = replace(create_default_config(), **overrides)

    print(f"\n{'='*70}\nTWO-STAGE ASCENT SIMULATION ({args.mode})\n{'='*70}\n")

    try:
        logger.info("Starting simulation...")
        final_state, log, reason = run_mission(
            config,
            mode=args.mode,
            target_altitude=args.target_altitude_km * 1000.0,
            burn=args.burn,
            burn_duration=args.burn_duration,
        )

        print("\n" + "="*60)
        print("SIMULATION SUMMARY")
        print("="*60)
        print(f"Termination reason: {reason}")
        print(f"Final time: {final_state.elapsed_time:.2f} s")
        print(f"Final altitude: {final_state.altitude/1000:.2f} km")
        print(f"Final velocity: {final_state.speed:.2f} m/s")
        if log.apoapsis:
            print(f"Orbit: {log.periapsis[-1]:.1f} x {log.apoapsis[-1]:.1f} km")
        print("="*60 + "\n")

        if args.csv:
            log.to_csv(args.csv)

        if not args.no_plots and len(log.time) > 0:
            plot_dir = os.path.abspath(args.output_dir)
            logger.info(f"Generating plots in {plot_dir}")
            paths = generate_all_plots(log, plot_dir)
            print(f">> Wrote {len(paths)} plots to: {plot_dir}")

    except Exception as e:
        logger.error(f"Simulation failed: {e}", exc_info=True)
        print(f"\n[ERROR] Simulation failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
