from PyQt5.QtCore import QThread, pyqtSignal

from workout_maps.geo import activity_name
from workout_maps.health_core import fetch_all_routes


class LoadRoutesWorker(QThread):
    progress = pyqtSignal(str)
    finished = pyqtSignal(object)  # {activity_type: {workout_id: (route, workout)}}

    def __init__(self, source_factory, activity_types, config=None):
        super().__init__()
        self.source_factory = source_factory
        self.activity_types = activity_types
        self.config = config or {}

    def run(self):
        health_cfg = self.config.get("health", {})
        start_date = health_cfg.get("start_date")
        max_workers = int(health_cfg.get("max_workers", 8))

        try:
            self.progress.emit("Opening health data...")
            source = self.source_factory()
        except Exception as e:
            self.progress.emit(f"Health data is not available: {e}")
            self.finished.emit(None)
            return

        routes_by_type = {}
        for activity_type in self.activity_types:
            try:
                workouts = source.list_workouts(activity_type, start_date=start_date)
                self.progress.emit(f"Fetching {len(workouts)} {activity_name(activity_type)} routes...")
                routes_by_type[activity_type] = fetch_all_routes(source, workouts, max_workers=max_workers)
            except Exception as e:
                self.progress.emit(f"Error while loading {activity_name(activity_type)} workouts: {e}")
                self.finished.emit(None)
                return

        self.progress.emit("Route load complete.")
        self.finished.emit(routes_by_type)
