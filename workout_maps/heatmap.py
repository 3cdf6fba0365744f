"""
Filename: heatmap.py
Description: Heat map aggregation for Workout Maps - rounds GPS samples into grid cells and counts them.
Author: Ryan Kari
License: MIT
Created: 2025-07-20
"""
import logging
import math
from collections import Counter
from typing import Iterable, List, NamedTuple, Sequence

import numpy as np
import pandas as pd


GRID_PRECISION_DECIMAL_PLACES = 3  # cell size ~0.001 degrees per axis
OPACITY_COUNT_CAP = 10  # count at which a cell is drawn fully opaque
CIRCLE_RADIUS_M = 20


class GridCell(NamedTuple):
    latitude: float
    longitude: float


class HeatmapOverlay(NamedTuple):
    center: GridCell
    count: int
    opacity: float
    radius: float


class InvalidCoordinate(ValueError):
    def __init__(self, latitude, longitude):
        super().__init__(f"Invalid coordinate ({latitude}, {longitude})")
        self.latitude = latitude
        self.longitude = longitude


def round_half_away_from_zero(value: float, decimal_places: int = GRID_PRECISION_DECIMAL_PLACES) -> float:
    """
    Round value to decimal_places, breaking ties away from zero.

    Ties are judged on the double value of value * 10**decimal_places, so
    0.0625 -> 0.063 and -0.0625 -> -0.063. Non-finite values are returned as-is.
    """
    if not math.isfinite(value):
        return value
    scale = 10 ** decimal_places
    return math.copysign(math.floor(abs(value) * scale + 0.5), value) / scale


def validate_sample(sample) -> None:
    latitude, longitude = float(sample[0]), float(sample[1])
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidCoordinate(latitude, longitude)
    if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
        raise InvalidCoordinate(latitude, longitude)


def grid_cell(sample, decimal_places: int = GRID_PRECISION_DECIMAL_PLACES, validate: bool = True) -> GridCell:
    """Quantize a GeoSample, or any (lat, lon) pair, to its GridCell."""
    if validate:
        validate_sample(sample)
    return GridCell(
        round_half_away_from_zero(float(sample[0]), decimal_places),
        round_half_away_from_zero(float(sample[1]), decimal_places),
    )


def calculate_heatmap_data(routes: Iterable[Sequence], decimal_places: int = GRID_PRECISION_DECIMAL_PLACES,
                           validate: bool = True) -> Counter:
    """
    Count route samples per grid cell.

    Args:
        routes: Iterable of routes, each a sequence of GeoSample or (lat, lon) pairs.
        decimal_places: Rounding precision of the grid.
        validate: Skip samples outside [-90, 90] / [-180, 180] or non-finite.

    Returns:
        Counter: GridCell -> number of samples inside it.
    """
    frequency = Counter()
    skipped = 0
    for route in routes:
        for sample in route:
            try:
                cell = grid_cell(sample, decimal_places, validate)
            except InvalidCoordinate as e:
                logging.debug(f"Skipping sample: {e}")
                skipped += 1
                continue
            frequency[cell] += 1

    if skipped:
        logging.warning(f"Skipped {skipped} samples with invalid coordinates")
    return frequency


def merge_frequencies(*frequencies) -> Counter:
    merged = Counter()
    for frequency in frequencies:
        merged.update(frequency)
    return merged


def cell_opacity(count, cap=OPACITY_COUNT_CAP):
    return min(count / float(cap), 1.0)


def heatmap_overlays(frequency, settings=None) -> List[HeatmapOverlay]:
    """Turn a frequency mapping into render records, ordered by cell."""
    cap = settings.opacity_count_cap if settings else OPACITY_COUNT_CAP
    radius = settings.circle_radius_m if settings else CIRCLE_RADIUS_M
    return [
        HeatmapOverlay(GridCell(*cell), count, cell_opacity(count, cap), radius)
        for cell, count in sorted(frequency.items())
    ]


def frequency_frame(frequency, cap=OPACITY_COUNT_CAP):
    """Tabulate a frequency mapping with the busiest cells first."""
    columns = ["latitude", "longitude", "count", "opacity"]
    if not frequency:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(
        [(cell[0], cell[1], count) for cell, count in frequency.items()],
        columns=columns[:3],
    )
    df["opacity"] = np.minimum(df["count"] / float(cap), 1.0)
    df = df.sort_values(by=["count", "latitude", "longitude"], ascending=[False, True, True])
    return df.reset_index(drop=True)
