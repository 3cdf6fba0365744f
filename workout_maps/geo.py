"""
Filename: geo.py
Description: Data model for Workout Maps - GPS samples, workouts and activity type names.
Author: Ryan Kari
License: MIT
Created: 2025-07-20
"""
import re
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple, Optional


# London is used as the home location to anonymise the default map centre.
HOME = (51.5072, 0.1276)

ACTIVITY_NAMES = {
    "walking": "Walking",
    "running": "Running",
    "cycling": "Cycling",
    "swimming": "Swimming",
    "hiking": "Hiking",
    "yoga": "Yoga",
    "strength_training": "Strength Training",
}

# Garmin type keys and HealthKit names that fold into one of the keys above
ACTIVITY_ALIASES = {
    "trail_running": "running",
    "treadmill_running": "running",
    "track_running": "running",
    "road_biking": "cycling",
    "mountain_biking": "cycling",
    "gravel_cycling": "cycling",
    "indoor_cycling": "cycling",
    "lap_swimming": "swimming",
    "open_water_swimming": "swimming",
    "functional_strength_training": "strength_training",
    "traditional_strength_training": "strength_training",
}

HEALTHKIT_PREFIX = "HKWorkoutActivityType"


class GeoSample(NamedTuple):
    latitude: float
    longitude: float
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class Workout:
    workout_id: str
    activity_type: str
    start_time: datetime
    end_time: datetime
    source_name: str = ""
    route_ref: Optional[str] = None

    @property
    def name(self):
        return activity_name(self.activity_type)


def normalize_activity_type(value):
    """
    Normalize an activity type to a snake-case key.

    Accepts HealthKit identifiers (HKWorkoutActivityTypeRunning), Garmin type
    keys (trail_running) and plain names (Running, "Strength Training").
    """
    if value is None:
        return "workout"
    text = str(value).strip()
    if text.startswith(HEALTHKIT_PREFIX):
        text = text[len(HEALTHKIT_PREFIX):]
    text = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", text)
    key = re.sub(r"[\s\-]+", "_", text).lower()
    return ACTIVITY_ALIASES.get(key, key)


def activity_name(activity_type):
    return ACTIVITY_NAMES.get(normalize_activity_type(activity_type), "Workout")


def first_coordinate(routes):
    """Return the first sample of the first non-empty route, or None."""
    for route in routes:
        for sample in route:
            return sample
    return None
