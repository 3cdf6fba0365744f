import os
import zipfile

import pytest


EXPORT_XML = """<?xml version="1.0" encoding="UTF-8"?>
<HealthData locale="en_GB">
 <Record type="HKQuantityTypeIdentifierHeartRate" sourceName="Watch" unit="count/min" startDate="2025-01-05 07:01:00 +0000" endDate="2025-01-05 07:01:00 +0000" value="142"/>
 <Workout workoutActivityType="HKWorkoutActivityTypeRunning" duration="30" durationUnit="min" sourceName="Watch" startDate="2025-01-05 07:00:00 +0000" endDate="2025-01-05 07:30:00 +0000">
  <WorkoutRoute sourceName="Watch" startDate="2025-01-05 07:00:00 +0000" endDate="2025-01-05 07:30:00 +0000">
   <FileReference path="/workout-routes/route_2025-01-05_7.00am.gpx"/>
  </WorkoutRoute>
 </Workout>
 <Workout workoutActivityType="HKWorkoutActivityTypeRunning" duration="45" durationUnit="min" sourceName="Watch" startDate="2025-02-10 18:00:00 +0000" endDate="2025-02-10 18:45:00 +0000">
 </Workout>
 <Workout workoutActivityType="HKWorkoutActivityTypeCycling" duration="60" durationUnit="min" sourceName="Watch" startDate="2025-01-20 09:00:00 +0000" endDate="2025-01-20 10:00:00 +0000">
  <WorkoutRoute sourceName="Watch">
   <FileReference path="/workout-routes/route_2025-01-20_9.00am.gpx"/>
  </WorkoutRoute>
 </Workout>
 <Workout workoutActivityType="HKWorkoutActivityTypeRunning" duration="20" durationUnit="min" sourceName="Watch" startDate="2024-12-30 08:00:00 +0000" endDate="2024-12-30 08:20:00 +0000">
  <WorkoutRoute sourceName="Watch">
   <FileReference path="/workout-routes/route_2024-12-30_8.00am.gpx"/>
  </WorkoutRoute>
 </Workout>
 <Workout workoutActivityType="HKWorkoutActivityTypeRunning" duration="25" durationUnit="min" sourceName="Watch" startDate="2025-03-01 06:30:00 +0000" endDate="2025-03-01 06:55:00 +0000">
  <WorkoutRoute sourceName="Watch">
   <FileReference path="/workout-routes/route_missing.gpx"/>
  </WorkoutRoute>
 </Workout>
</HealthData>
"""

GPX_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="Apple Health Export" xmlns="http://www.topografix.com/GPX/1/1">
 <trk>
  <name>{name}</name>
  <trkseg>
{points}
  </trkseg>
 </trk>
</gpx>
"""

POINT_TEMPLATE = '   <trkpt lon="{lon}" lat="{lat}"><ele>10.0</ele><time>{time}</time></trkpt>'

ROUTES = {
    "route_2025-01-05_7.00am.gpx": [
        (51.5072, 0.1276, "2025-01-05T07:00:00Z"),
        (51.5072, 0.1276, "2025-01-05T07:00:05Z"),
        (51.5073, 0.1276, "2025-01-05T07:00:10Z"),
    ],
    "route_2025-01-20_9.00am.gpx": [
        (51.5100, 0.1300, "2025-01-20T09:00:00Z"),
        (51.5110, 0.1310, "2025-01-20T09:00:05Z"),
    ],
    "route_2024-12-30_8.00am.gpx": [
        (51.5000, 0.1200, "2024-12-30T08:00:00Z"),
    ],
}


def gpx_text(name, points):
    lines = [POINT_TEMPLATE.format(lat=lat, lon=lon, time=time) for lat, lon, time in points]
    return GPX_TEMPLATE.format(name=name, points="\n".join(lines))


@pytest.fixture
def apple_export(tmp_path):
    """An unzipped Apple Health export with four running and one cycling workout."""
    export_dir = tmp_path / "apple_health_export"
    routes_dir = export_dir / "workout-routes"
    routes_dir.mkdir(parents=True)
    (export_dir / "export.xml").write_text(EXPORT_XML, encoding="utf-8")
    for filename, points in ROUTES.items():
        (routes_dir / filename).write_text(gpx_text(filename, points), encoding="utf-8")
    return export_dir


@pytest.fixture
def apple_export_zip(tmp_path, apple_export):
    zip_path = tmp_path / "export.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        for root, _, files in os.walk(apple_export):
            for filename in files:
                full_path = os.path.join(root, filename)
                arcname = os.path.relpath(full_path, tmp_path)
                zf.write(full_path, arcname.replace(os.sep, "/"))
    return zip_path
