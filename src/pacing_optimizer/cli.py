import argparse
import json
import logging
import sys
from dataclasses import asdict

from pacing_optimizer import __version__
from pacing_optimizer.config import load_config
from pacing_optimizer.formatters import format_duration, format_percent
from pacing_optimizer.models import RiderParams
from pacing_optimizer.optimize import optimize
from pacing_optimizer.parser import parse_gpx
from pacing_optimizer.segments import build_route, summarize_route

# Default values for CLI options
DEFAULTS = {
    "ftp": 250.0,
    "rider_mass": 75.0,
    "bike_mass": 8.0,
    "cda": 0.32,
    "crr": 0.004,
    "w_prime": 20000.0,
    "wind_speed": 0.0,
    "wind_direction": 0.0,
    "intensity": 85.0,
    "segment_length": 100.0,
}


def build_parser(config: dict | None = None) -> argparse.ArgumentParser:
    """Build argument parser with defaults from config file."""
    if config is None:
        config = {}

    def get_default(key: str) -> float:
        return config.get(key, DEFAULTS[key])

    parser = argparse.ArgumentParser(
        prog="pacing-optimizer",
        description="Plan per-segment power for a GPX route within your W' reserve.",
    )
    parser.add_argument("gpx_file", help="Path to GPX file")
    parser.add_argument(
        "--ftp",
        type=float,
        default=get_default("ftp"),
        help=f"Functional threshold power in watts (default: {DEFAULTS['ftp']})",
    )
    parser.add_argument(
        "--rider-mass",
        type=float,
        default=get_default("rider_mass"),
        help=f"Rider mass in kg (default: {DEFAULTS['rider_mass']})",
    )
    parser.add_argument(
        "--bike-mass",
        type=float,
        default=get_default("bike_mass"),
        help=f"Bike mass in kg (default: {DEFAULTS['bike_mass']})",
    )
    parser.add_argument(
        "--cda",
        type=float,
        default=get_default("cda"),
        help=f"Drag coefficient * frontal area in m² (default: {DEFAULTS['cda']})",
    )
    parser.add_argument(
        "--crr",
        type=float,
        default=get_default("crr"),
        help=f"Rolling resistance coefficient (default: {DEFAULTS['crr']})",
    )
    parser.add_argument(
        "--w-prime",
        type=float,
        default=get_default("w_prime"),
        help=f"Anaerobic work capacity in joules (default: {DEFAULTS['w_prime']})",
    )
    parser.add_argument(
        "--wind-speed",
        type=float,
        default=get_default("wind_speed"),
        help=f"Wind speed in km/h (default: {DEFAULTS['wind_speed']})",
    )
    parser.add_argument(
        "--wind-direction",
        type=float,
        default=get_default("wind_direction"),
        help=f"Direction the wind blows from, in degrees (default: {DEFAULTS['wind_direction']})",
    )
    parser.add_argument(
        "--intensity",
        type=float,
        default=get_default("intensity"),
        help=f"Target intensity as percent of FTP (default: {DEFAULTS['intensity']})",
    )
    parser.add_argument(
        "--segment-length",
        type=float,
        default=get_default("segment_length"),
        help=f"Target segment length in meters (default: {DEFAULTS['segment_length']})",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print per-segment results and metrics as JSON",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log solver and W' balance decisions",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def params_from_args(args: argparse.Namespace) -> RiderParams:
    """Build RiderParams from parsed options, converting wind from km/h to m/s."""
    return RiderParams(
        ftp=args.ftp,
        total_mass=args.rider_mass + args.bike_mass,
        cda=args.cda,
        crr=args.crr,
        w_prime=args.w_prime,
        wind_speed=args.wind_speed / 3.6,
        wind_direction=args.wind_direction,
        target_intensity=args.intensity,
    )


def main(argv: list[str] | None = None) -> None:
    config = load_config()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    params = params_from_args(args)

    gpx_path = args.gpx_file
    try:
        points = parse_gpx(gpx_path)
    except FileNotFoundError:
        print(f"Error: File not found: {gpx_path}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error parsing GPX file: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        segments = build_route(points, args.segment_length)
        result = optimize(segments, params)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(asdict(result), indent=2))
        return

    summary = summarize_route(segments)
    metrics = result.metrics

    print("=== Route ===")
    print(f"Distance:       {summary.total_distance / 1000:.1f} km")
    print(f"Elevation Gain: {summary.elevation_gain:.0f} m")
    print(f"Max Gradient:   {format_percent(summary.max_gradient)}")
    print(f"Segments:       {len(segments)}")
    print("")
    print("=== Pacing Plan ===")
    print(
        f"Config: ftp={args.ftp}W mass={params.total_mass}kg cda={args.cda} crr={args.crr} "
        f"w'={args.w_prime}J wind={args.wind_speed}km/h from {args.wind_direction}° "
        f"intensity={args.intensity}%"
    )
    print(f"Est. Time:      {format_duration(metrics.total_time)}")
    print(f"Avg Power:      {metrics.avg_power:.0f} W")
    print(f"Norm. Power:    {metrics.normalized_power:.0f} W")
    print(f"IF:             {metrics.intensity_factor:.2f}")
    print(f"TSS:            {metrics.training_stress_score:.0f}")
    print(f"Avg Speed:      {metrics.avg_speed:.1f} km/h")
    w_pct = max(0.0, min(100.0, metrics.w_prime_percent))
    print(f"Min W' Balance: {metrics.min_w_balance:.0f} J ({w_pct:.0f}%)")
