"""
Filename: config.py
Description: Configuration for Workout Maps - bundled JSON settings and typed heat map settings.
Author: Ryan Kari
License: MIT
Created: 2025-07-20
"""
import json
import logging
from dataclasses import dataclass
from importlib import resources

from workout_maps.heatmap import (
    CIRCLE_RADIUS_M,
    GRID_PRECISION_DECIMAL_PLACES,
    OPACITY_COUNT_CAP,
)

CONFIG_FILE = "config_information.json"


def load_config(path=None, filename=CONFIG_FILE):
    """
    Load settings from a JSON file, or from the copy bundled with the package.

    Returns an empty dict when the file cannot be read, so callers fall back
    to their defaults.
    """
    try:
        if path is not None:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        with resources.files("workout_maps").joinpath(filename).open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logging.error(f"Error loading config: {e}")
        return {}


@dataclass(frozen=True)
class HeatmapSettings:
    grid_precision_decimal_places: int = GRID_PRECISION_DECIMAL_PLACES
    opacity_count_cap: int = OPACITY_COUNT_CAP
    circle_radius_m: float = CIRCLE_RADIUS_M
    fill_color: str = "red"
    validate_coordinates: bool = True

    @classmethod
    def from_config(cls, config):
        heatmap_cfg = (config or {}).get("heatmap", {})
        return cls(
            grid_precision_decimal_places=int(heatmap_cfg.get("grid_precision_decimal_places", GRID_PRECISION_DECIMAL_PLACES)),
            opacity_count_cap=int(heatmap_cfg.get("opacity_count_cap", OPACITY_COUNT_CAP)),
            circle_radius_m=float(heatmap_cfg.get("circle_radius_m", CIRCLE_RADIUS_M)),
            fill_color=heatmap_cfg.get("fill_color", "red"),
            validate_coordinates=bool(heatmap_cfg.get("validate_coordinates", True)),
        )
