"""
Filename: health_core.py
Description: Health data sources for Workout Maps - workout listings and GPS routes from Apple Health exports and Garmin Connect.
Author: Ryan Kari
License: MIT
Created: 2025-07-20
"""
import ast
import datetime
import logging
import os
import uuid
import xml.etree.ElementTree as ET
import zipfile
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager

import gpxpy
import pandas as pd
from garminconnect import Garmin

from workout_maps.geo import GeoSample, Workout, normalize_activity_type


EXPORT_XML = "export.xml"
EXPORT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"
WORKOUT_COLUMNS = ["workoutActivityType", "startDate", "endDate", "sourceName", "routePath"]
GARMIN_EARLIEST_DATE = "2000-01-01"


class HealthDataUnavailable(Exception):
    pass


def _as_utc(value):
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def _end_bound(end_date):
    # A bare date includes the whole day
    end = _as_utc(end_date)
    if end == end.normalize():
        end += pd.Timedelta(days=1)
    return end


class AppleHealthExport:
    """
    Workouts and routes from an Apple Health export.

    export_path may be the unzipped export directory, the export.xml file
    itself, or the export.zip produced by the Health app.
    """

    def __init__(self, export_path):
        self.export_path = export_path
        self._zip_prefix = None
        self._base_dir = None
        self._workouts_df = None
        self._locate()

    def _locate(self):
        path = self.export_path
        if not path or not os.path.exists(path):
            raise HealthDataUnavailable(f"Health export not found at {path}")

        if os.path.isfile(path) and zipfile.is_zipfile(path):
            with zipfile.ZipFile(path) as zf:
                for name in zf.namelist():
                    if name == EXPORT_XML or name.endswith("/" + EXPORT_XML):
                        self._zip_prefix = name[:-len(EXPORT_XML)]
                        return
            raise HealthDataUnavailable(f"No {EXPORT_XML} inside {path}")

        if os.path.isfile(path):
            self._base_dir = os.path.dirname(os.path.abspath(path))
            return

        for candidate in (path, os.path.join(path, "apple_health_export")):
            if os.path.exists(os.path.join(candidate, EXPORT_XML)):
                self._base_dir = candidate
                return
        raise HealthDataUnavailable(f"No {EXPORT_XML} found in {path}")

    @contextmanager
    def _open(self, relative_path):
        relative_path = relative_path.lstrip("/")
        if self._zip_prefix is not None:
            with zipfile.ZipFile(self.export_path) as zf:
                name = self._zip_prefix + relative_path
                try:
                    zf.getinfo(name)
                except KeyError:
                    raise FileNotFoundError(name)
                with zf.open(name) as f:
                    yield f
        else:
            if os.path.isfile(self.export_path) and relative_path == EXPORT_XML:
                full_path = os.path.abspath(self.export_path)
            else:
                full_path = os.path.join(self._base_dir, relative_path)
            with open(full_path, "rb") as f:
                yield f

    def workouts_frame(self):
        """Parse every Workout element of export.xml into a DataFrame (cached)."""
        if self._workouts_df is not None:
            return self._workouts_df

        workout_list = []
        with self._open(EXPORT_XML) as f:
            for event, elem in ET.iterparse(f, events=("end",)):
                if elem.tag == "Workout":
                    record = dict(elem.attrib)
                    ref = elem.find("WorkoutRoute/FileReference")
                    record["routePath"] = ref.get("path") if ref is not None else None
                    workout_list.append(record)
                    elem.clear()
                elif elem.tag == "Record":
                    elem.clear()

        df = pd.DataFrame(workout_list, columns=WORKOUT_COLUMNS)
        for col in ["startDate", "endDate"]:
            df[col] = pd.to_datetime(df[col], format=EXPORT_DATE_FORMAT, utc=True, errors="coerce")
        df["activityType"] = df["workoutActivityType"].map(normalize_activity_type)
        df["workoutId"] = [
            str(uuid.uuid5(uuid.NAMESPACE_URL, f"{row.workoutActivityType}|{row.startDate}|{row.sourceName}"))
            for row in df.itertuples()
        ]
        logging.info(f"Loaded {len(df)} workouts from {self.export_path}")
        self._workouts_df = df
        return df

    def list_workouts(self, activity_type, start_date=None, end_date=None):
        """
        List workouts of one type, newest end time first.

        Args:
            activity_type (str): Activity type in any spelling normalize_activity_type accepts.
            start_date: Only workouts starting on or after this date.
            end_date: Only workouts starting on or before this date.

        Returns:
            list[Workout]
        """
        df = self.workouts_frame()
        df = df[df["activityType"] == normalize_activity_type(activity_type)]
        df = df.dropna(subset=["startDate", "endDate"])
        if start_date is not None:
            df = df[df["startDate"] >= _as_utc(start_date)]
        if end_date is not None:
            df = df[df["startDate"] < _end_bound(end_date)]
        df = df.sort_values(by="endDate", ascending=False)

        workouts = []
        for _, row in df.iterrows():
            route_path = row["routePath"] if isinstance(row["routePath"], str) else None
            workouts.append(Workout(
                workout_id=row["workoutId"],
                activity_type=row["activityType"],
                start_time=row["startDate"].to_pydatetime(),
                end_time=row["endDate"].to_pydatetime(),
                source_name=row["sourceName"] if isinstance(row["sourceName"], str) else "",
                route_ref=route_path,
            ))
        return workouts

    def fetch_route(self, workout):
        """Read the GPX route of a workout. Workouts recorded without GPS give an empty route."""
        if not workout.route_ref:
            logging.info(f"Workout {workout.workout_id} has no route")
            return []

        try:
            with self._open(workout.route_ref) as f:
                gpx = gpxpy.parse(f.read().decode("utf-8"))
        except FileNotFoundError:
            logging.warning(f"Route file {workout.route_ref} missing from export")
            return []

        route = []
        for track in gpx.tracks:
            for segment in track.segments:
                for point in segment.points:
                    route.append(GeoSample(point.latitude, point.longitude, point.time))
        return route


def extract_typekey(entry):
    if isinstance(entry, str):
        try:
            return ast.literal_eval(entry).get("typeKey", None)
        except (ValueError, SyntaxError, AttributeError):
            return entry
    elif isinstance(entry, dict):
        return entry.get("typeKey", None)
    return None


class GarminRouteSource:
    def __init__(self, username=None, password=None, client=None, max_poly=4000):
        """
        Workouts and routes from Garmin Connect.

        Args:
            username (str): Garmin Connect username.
            password (str): Garmin Connect password.
            client: An already logged in garminconnect.Garmin client.
            max_poly (int): Maximum number of polyline points requested per activity.
        """
        self.username = username
        self.password = password
        self.client = client
        self.max_poly = max_poly

    def login(self):
        if self.client is None:
            client = Garmin(self.username, self.password)
            client.login()
            self.client = client
        return self.client

    def list_workouts(self, activity_type, start_date=None, end_date=None):
        client = self.login()
        key = normalize_activity_type(activity_type)
        start = _as_utc(start_date or GARMIN_EARLIEST_DATE).strftime("%Y-%m-%d")
        end = _as_utc(end_date or datetime.date.today()).strftime("%Y-%m-%d")

        activities = client.get_activities_by_date(start, end, key) or []
        workouts = []
        for activity in activities:
            if normalize_activity_type(extract_typekey(activity.get("activityType"))) != key:
                continue
            aid = activity.get("activityId")
            if aid is None:
                continue
            start_time = pd.to_datetime(activity.get("startTimeGMT"), utc=True, errors="coerce")
            if pd.isna(start_time):
                logging.warning(f"Skipping activity {aid} without a start time")
                continue
            duration = float(activity.get("duration") or 0)
            aid = str(aid)
            workouts.append(Workout(
                workout_id=aid,
                activity_type=key,
                start_time=start_time.to_pydatetime(),
                end_time=(start_time + pd.Timedelta(seconds=duration)).to_pydatetime(),
                source_name="Garmin Connect",
                route_ref=aid if activity.get("hasPolyline", True) else None,
            ))

        workouts.sort(key=lambda w: w.end_time, reverse=True)
        return workouts

    def fetch_route(self, workout):
        if not workout.route_ref:
            return []
        details = self.login().get_activity_details(workout.route_ref, maxpoly=self.max_poly) or {}
        polyline = (details.get("geoPolylineDTO") or {}).get("polyline") or []

        route = []
        for point in polyline:
            lat, lon = point.get("lat"), point.get("lon")
            if lat is None or lon is None:
                continue
            timestamp = point.get("time")
            if timestamp is not None:
                timestamp = datetime.datetime.fromtimestamp(timestamp / 1000, tz=datetime.timezone.utc)
            route.append(GeoSample(float(lat), float(lon), timestamp))
        return route


def fetch_all_routes(source, workouts, max_workers=8):
    """
    Fetch the route of every workout concurrently and wait for all of them.

    Returns:
        dict: workout_id -> (route, workout), in the order of workouts. A
        failed fetch is logged and recorded as an empty route.
    """
    if not workouts:
        return {}

    fetched = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(source.fetch_route, workout): workout for workout in workouts}
        for future in as_completed(futures):
            workout = futures[future]
            try:
                route = future.result()
            except Exception as e:
                logging.error(f"Failed to get route for {workout.workout_id}: {e}")
                route = []
            fetched[workout.workout_id] = (route, workout)

    return {workout.workout_id: fetched[workout.workout_id] for workout in workouts}


def load_workout_routes(source, activity_types, start_date=None, end_date=None, max_workers=8):
    """Routes per activity type: {activity_type: {workout_id: (route, workout)}}."""
    routes_by_type = {}
    for activity_type in activity_types:
        key = normalize_activity_type(activity_type)
        workouts = source.list_workouts(key, start_date=start_date, end_date=end_date)
        logging.info(f"Found {len(workouts)} {key} workouts")
        routes_by_type[key] = fetch_all_routes(source, workouts, max_workers=max_workers)
    return routes_by_type
