import datetime

import pytest

from workout_maps.geo import GeoSample, Workout
from workout_maps.health_core import (
    AppleHealthExport,
    GarminRouteSource,
    HealthDataUnavailable,
    extract_typekey,
    fetch_all_routes,
    load_workout_routes,
)
from workout_maps.heatmap import calculate_heatmap_data


UTC = datetime.timezone.utc


@pytest.fixture
def export(apple_export):
    return AppleHealthExport(str(apple_export))


def test_list_workouts_filters_type_and_start_date(export):
    workouts = export.list_workouts("running", start_date="2025-01-03")
    assert [w.start_time for w in workouts] == [
        datetime.datetime(2025, 3, 1, 6, 30, tzinfo=UTC),
        datetime.datetime(2025, 2, 10, 18, 0, tzinfo=UTC),
        datetime.datetime(2025, 1, 5, 7, 0, tzinfo=UTC),
    ]
    assert all(w.activity_type == "running" for w in workouts)
    assert all(w.name == "Running" for w in workouts)
    assert all(w.source_name == "Watch" for w in workouts)


def test_list_workouts_accepts_healthkit_names(export):
    assert len(export.list_workouts("HKWorkoutActivityTypeRunning")) == 4
    assert len(export.list_workouts("Cycling")) == 1
    assert export.list_workouts("swimming") == []


def test_list_workouts_end_date_includes_whole_day(export):
    workouts = export.list_workouts("running", start_date="2025-01-03", end_date="2025-02-10")
    assert [w.start_time.date() for w in workouts] == [datetime.date(2025, 2, 10), datetime.date(2025, 1, 5)]


def test_workout_ids_are_stable(apple_export, export):
    ids = [w.workout_id for w in export.list_workouts("running")]
    again = [w.workout_id for w in AppleHealthExport(str(apple_export)).list_workouts("running")]
    assert ids == again
    assert len(set(ids)) == 4


def test_fetch_route_reads_gpx(export):
    workout = export.list_workouts("running", start_date="2025-01-05", end_date="2025-01-05")[0]
    route = export.fetch_route(workout)
    assert len(route) == 3
    assert (route[0].latitude, route[0].longitude) == (51.5072, 0.1276)
    assert route[2].latitude == 51.5073
    assert route[0].timestamp == datetime.datetime(2025, 1, 5, 7, 0, tzinfo=UTC)


def test_workout_without_route_gives_empty_route(export):
    workout = export.list_workouts("running", start_date="2025-02-10", end_date="2025-02-10")[0]
    assert workout.route_ref is None
    assert export.fetch_route(workout) == []


def test_missing_route_file_gives_empty_route(export):
    workout = export.list_workouts("running", start_date="2025-03-01")[0]
    assert workout.route_ref == "/workout-routes/route_missing.gpx"
    assert export.fetch_route(workout) == []


def test_zip_export_matches_directory(apple_export_zip, export):
    zipped = AppleHealthExport(str(apple_export_zip))
    from_zip = zipped.list_workouts("running", start_date="2025-01-03")
    from_dir = export.list_workouts("running", start_date="2025-01-03")
    assert [w.workout_id for w in from_zip] == [w.workout_id for w in from_dir]
    assert zipped.fetch_route(from_zip[-1]) == export.fetch_route(from_dir[-1])


def test_export_xml_path_is_accepted(apple_export):
    export = AppleHealthExport(str(apple_export / "export.xml"))
    assert len(export.list_workouts("cycling")) == 1
    assert len(export.fetch_route(export.list_workouts("cycling")[0])) == 2


def test_parent_directory_is_accepted(apple_export):
    export = AppleHealthExport(str(apple_export.parent))
    assert len(export.list_workouts("running")) == 4


def test_missing_export_raises(tmp_path):
    with pytest.raises(HealthDataUnavailable):
        AppleHealthExport(str(tmp_path / "nowhere"))
    with pytest.raises(HealthDataUnavailable):
        AppleHealthExport(str(tmp_path))


def test_load_workout_routes_per_type(export):
    routes_by_type = load_workout_routes(export, ["Running", "cycling", "yoga"], start_date="2025-01-03")
    assert set(routes_by_type) == {"running", "cycling", "yoga"}
    assert routes_by_type["yoga"] == {}
    running = routes_by_type["running"]
    assert [len(route) for route, _ in running.values()] == [0, 0, 3]

    frequency = calculate_heatmap_data(route for route, _ in running.values())
    assert dict(frequency) == {(51.507, 0.128): 3}


class FlakySource:
    def __init__(self, routes, failing):
        self.routes = routes
        self.failing = failing

    def fetch_route(self, workout):
        if workout.workout_id in self.failing:
            raise ConnectionError("timed out")
        return self.routes[workout.workout_id]


def make_workout(workout_id, day):
    start = datetime.datetime(2025, 1, day, 7, 0, tzinfo=UTC)
    return Workout(workout_id, "running", start, start + datetime.timedelta(minutes=30), "test", workout_id)


def test_fetch_all_routes_joins_and_keeps_order():
    workouts = [make_workout(str(i), i) for i in range(1, 11)]
    routes = {w.workout_id: [GeoSample(51.5 + int(w.workout_id) / 1000, 0.1)] for w in workouts}
    result = fetch_all_routes(FlakySource(routes, failing={"3"}), workouts, max_workers=4)
    assert list(result) == [w.workout_id for w in workouts]
    assert result["3"] == ([], workouts[2])
    assert result["4"][0] == routes["4"]
    assert result["4"][1] is workouts[3]


def test_fetch_all_routes_empty():
    assert fetch_all_routes(FlakySource({}, set()), []) == {}


def test_extract_typekey():
    assert extract_typekey({"typeKey": "running"}) == "running"
    assert extract_typekey("{'typeKey': 'road_biking'}") == "road_biking"
    assert extract_typekey("running") == "running"
    assert extract_typekey(None) is None


class FakeGarmin:
    def __init__(self):
        self.calls = []
        self.detail_calls = []

    def get_activities_by_date(self, startdate, enddate, activitytype):
        self.calls.append((startdate, enddate, activitytype))
        return [
            {"activityId": 101, "activityType": {"typeKey": "running"},
             "startTimeGMT": "2025-01-05 07:00:00", "duration": 1800.0, "hasPolyline": True},
            {"activityId": 102, "activityType": {"typeKey": "trail_running"},
             "startTimeGMT": "2025-01-07 07:00:00", "duration": 3600.0, "hasPolyline": True},
            {"activityId": 103, "activityType": {"typeKey": "treadmill_running"},
             "startTimeGMT": "2025-01-08 07:00:00", "duration": 1800.0, "hasPolyline": False},
            {"activityId": 104, "activityType": {"typeKey": "road_biking"},
             "startTimeGMT": "2025-01-09 07:00:00", "duration": 5400.0, "hasPolyline": True},
        ]

    def get_activity_details(self, activity_id, maxchart=2000, maxpoly=4000):
        self.detail_calls.append((activity_id, maxpoly))
        return {
            "geoPolylineDTO": {
                "polyline": [
                    {"lat": 51.5072, "lon": 0.1276, "time": 1736060400000},
                    {"lat": None, "lon": None, "time": 1736060401000},
                    {"lat": 51.5073, "lon": 0.1276, "time": 1736060405000},
                ]
            }
        }


@pytest.fixture
def garmin():
    return GarminRouteSource(client=FakeGarmin(), max_poly=500)


def test_garmin_list_workouts(garmin):
    workouts = garmin.list_workouts("Running", start_date="2025-01-01", end_date="2025-01-31")
    assert garmin.client.calls == [("2025-01-01", "2025-01-31", "running")]
    assert [w.workout_id for w in workouts] == ["103", "102", "101"]
    assert workouts[0].route_ref is None
    assert workouts[1].end_time == datetime.datetime(2025, 1, 7, 8, 0, tzinfo=UTC)
    assert all(w.source_name == "Garmin Connect" for w in workouts)


def test_garmin_fetch_route(garmin):
    workouts = garmin.list_workouts("running", start_date="2025-01-01", end_date="2025-01-31")
    route = garmin.fetch_route(workouts[-1])
    assert garmin.client.detail_calls == [("101", 500)]
    assert route == [
        GeoSample(51.5072, 0.1276, datetime.datetime(2025, 1, 5, 7, 0, tzinfo=UTC)),
        GeoSample(51.5073, 0.1276, datetime.datetime(2025, 1, 5, 7, 0, 5, tzinfo=UTC)),
    ]
    assert garmin.fetch_route(workouts[0]) == []
    assert len(garmin.client.detail_calls) == 1


def test_garmin_routes_feed_the_heatmap(garmin):
    routes_by_type = load_workout_routes(garmin, ["running"], start_date="2025-01-01", end_date="2025-01-31")
    frequency = calculate_heatmap_data(route for route, _ in routes_by_type["running"].values())
    assert dict(frequency) == {(51.507, 0.128): 4}
