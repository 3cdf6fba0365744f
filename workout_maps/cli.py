"""
Filename: cli.py
Description: Command line entry for Workout Maps - renders route and heat map images without the GUI.
Author: Ryan Kari
License: MIT
Created: 2025-07-20
"""
import argparse
import logging
import os

from matplotlib.figure import Figure

from workout_maps.config import HeatmapSettings, load_config
from workout_maps.geo import first_coordinate, normalize_activity_type
from workout_maps.health_core import (
    AppleHealthExport,
    GarminRouteSource,
    HealthDataUnavailable,
    load_workout_routes,
)
from workout_maps.heatmap import calculate_heatmap_data, heatmap_overlays
from workout_maps.plots import plot_combined_routes, plot_heatmap
from workout_maps.report import heatmap_summary


def build_parser():
    parser = argparse.ArgumentParser(description="Render workout routes and heat maps.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--export", help="Apple Health export directory, export.xml or export.zip.")
    source.add_argument("--garmin", action="store_true",
                        help="Read from Garmin Connect using GARMIN_USERNAME and GARMIN_PASSWORD.")
    parser.add_argument("--activity", nargs="+", default=None,
                        help="Activity types to render (default from config).")
    parser.add_argument("--start-date", default=None, help="Only workouts starting on or after YYYY-MM-DD.")
    parser.add_argument("--end-date", default=None, help="Only workouts starting on or before YYYY-MM-DD.")
    parser.add_argument("--output-dir", default="output", help="Where the PNG files are written.")
    parser.add_argument("--config", default=None, help="JSON config file replacing the bundled one.")
    parser.add_argument("--top", type=int, default=None, help="Busiest cells listed in the summary.")
    return parser


def save_figure(plot_func, path, *args, **kwargs):
    fig = Figure(figsize=(9, 9))
    ax = fig.add_subplot(111)
    plot_func(*args, ax, **kwargs)
    fig.tight_layout()
    fig.savefig(path, dpi=120)
    return path


def render_activity(activity_type, routes, config, settings, output_dir, top_n):
    route_list = [route for route, _ in routes.values()]
    frequency = calculate_heatmap_data(
        route_list,
        decimal_places=settings.grid_precision_decimal_places,
        validate=settings.validate_coordinates,
    )

    routes_png = save_figure(plot_combined_routes, os.path.join(output_dir, f"{activity_type}_routes.png"),
                             route_list, config=config)
    heatmap_png = save_figure(plot_heatmap, os.path.join(output_dir, f"{activity_type}_heatmap.png"),
                              heatmap_overlays(frequency, settings),
                              center=first_coordinate(route_list), config=config)
    print(f"Saved {routes_png} and {heatmap_png}")
    print(heatmap_summary(activity_type, routes, frequency, settings, top_n=top_n))
    return frequency


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = load_config(args.config)
    settings = HeatmapSettings.from_config(config)
    health_cfg = config.get("health", {})
    activity_types = [normalize_activity_type(t) for t in (args.activity or health_cfg.get("activity_types", ["running", "cycling"]))]
    start_date = args.start_date or health_cfg.get("start_date")
    top_n = args.top if args.top is not None else int(config.get("report", {}).get("top_cells", 10))

    if args.garmin:
        username = os.getenv("GARMIN_USERNAME")
        password = os.getenv("GARMIN_PASSWORD")
        if not username or not password:
            print("GARMIN_USERNAME and GARMIN_PASSWORD must be set in environment")
            return 1
        source = GarminRouteSource(username, password)
    else:
        try:
            source = AppleHealthExport(args.export)
        except HealthDataUnavailable as e:
            print(f"Health data is not available: {e}")
            return 1

    routes_by_type = load_workout_routes(
        source, activity_types, start_date=start_date, end_date=args.end_date,
        max_workers=int(health_cfg.get("max_workers", 8)),
    )

    os.makedirs(args.output_dir, exist_ok=True)
    for activity_type, routes in routes_by_type.items():
        if not routes:
            print(f"No {activity_type} workouts found.")
            continue
        render_activity(activity_type, routes, config, settings, args.output_dir, top_n)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
