"""
Filename: plots.py
Description: Map plotting functions for Workout Maps - single routes, combined routes and heat map cells.
Author: Ryan Kari
License: MIT
Created: 2025-07-20
"""
import math

import numpy as np
from matplotlib.patches import Ellipse

from workout_maps.geo import HOME, activity_name

METERS_PER_DEGREE = 111320.0


def meters_to_degrees(radius_m, latitude):
    """
    Convert a radius in metres to (latitude, longitude) degree offsets at the given latitude.
    """
    dlat = radius_m / METERS_PER_DEGREE
    dlon = radius_m / (METERS_PER_DEGREE * max(math.cos(math.radians(latitude)), 1e-6))
    return dlat, dlon


def set_map_region(ax, center, span):
    lat, lon = center[0], center[1]
    ax.set_xlim(lon - span / 2, lon + span / 2)
    ax.set_ylim(lat - span / 2, lat + span / 2)
    # Equirectangular look: one degree of longitude is shorter than one of latitude
    ax.set_aspect(1 / max(math.cos(math.radians(lat)), 1e-6))
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")


def _coordinates(route):
    coords = np.array([(sample[0], sample[1]) for sample in route], dtype=float)
    return coords.reshape(-1, 2)


def plot_route(route, ax, workout=None, config=None):
    """
    Plots one workout route with Start and End markers, centred on its first sample.
    """
    map_cfg = (config or {}).get("map", {})
    span = float(map_cfg.get("route_span", 0.01))
    color = map_cfg.get("route_color", "tab:blue")
    width = float(map_cfg.get("route_width", 4))

    title = workout.name if workout is not None else "Workout"
    ax.set_title(title)

    coords = _coordinates(route)
    if len(coords) == 0:
        ax.text(0.5, 0.5, "No route recorded for this workout.", ha="center", va="center",
                transform=ax.transAxes)
        return None

    line, = ax.plot(coords[:, 1], coords[:, 0], color=color, linewidth=width)

    for label, (lat, lon), marker_color in [("Start", coords[0], "green"), ("End", coords[-1], "red")]:
        ax.plot(lon, lat, "o", color=marker_color, markersize=8)
        ax.annotate(label, (lon, lat), textcoords="offset points", xytext=(6, 6), fontsize=9)

    set_map_region(ax, coords[0], span)
    ax.grid(True, alpha=0.3)
    return line


def plot_combined_routes(routes, ax, config=None, title="All Routes"):
    """
    Plots every route as a blue line on one map centred on the home location.

    Returns:
        list: the Line2D objects, one per non-empty route.
    """
    map_cfg = (config or {}).get("map", {})
    home = map_cfg.get("home", HOME)
    span = float(map_cfg.get("combined_span", 0.05))
    color = map_cfg.get("route_color", "tab:blue")
    width = float(map_cfg.get("combined_route_width", 3))

    lines = []
    for route in routes:
        coords = _coordinates(route)
        if len(coords) == 0:
            continue
        line, = ax.plot(coords[:, 1], coords[:, 0], color=color, linewidth=width)
        lines.append(line)

    set_map_region(ax, home, span)
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    return lines


def plot_heatmap(overlays, ax, center=None, config=None, title="All Routes"):
    """
    Plots heat map cells as filled circles whose opacity follows the cell count.

    Parameters:
        overlays: list of HeatmapOverlay from heatmap.heatmap_overlays
        ax: matplotlib axis
        center: (lat, lon) to centre the map on; the home location when None
        config: Configuration dictionary
    """
    config = config or {}
    map_cfg = config.get("map", {})
    fill_color = config.get("heatmap", {}).get("fill_color", "red")
    span = float(map_cfg.get("heatmap_span", 0.05))
    if center is None:
        center = map_cfg.get("home", HOME)

    patches = []
    for overlay in overlays:
        lat, lon = overlay.center
        dlat, dlon = meters_to_degrees(overlay.radius, lat)
        patch = Ellipse((lon, lat), width=2 * dlon, height=2 * dlat,
                        facecolor=fill_color, edgecolor="none", alpha=overlay.opacity)
        ax.add_patch(patch)
        patches.append(patch)

    set_map_region(ax, center, span)
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    return patches
