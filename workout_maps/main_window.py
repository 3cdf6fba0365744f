"""
Filename: main_window.py
Description: Main window for Workout Maps - hosts the route and heat map plots.
Author: Ryan Kari
License: MIT
Created: 2025-07-20
"""

import os
import sys

from PyQt5.QtWidgets import (
    QApplication,
    QComboBox,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSizePolicy,
    QSpacerItem,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)
from PyQt5.QtCore import Qt

import matplotlib

matplotlib.use("Qt5Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.backends.backend_qt5agg import NavigationToolbar2QT as NavigationToolbar

from workout_maps.config import HeatmapSettings, load_config
from workout_maps.geo import activity_name, first_coordinate
from workout_maps.health_core import AppleHealthExport, GarminRouteSource
from workout_maps.heatmap import calculate_heatmap_data, heatmap_overlays
from workout_maps.plots import plot_combined_routes, plot_heatmap, plot_route
from workout_maps.report import heatmap_summary
from workout_maps.styles import (
    heatmap_button_style,
    loading_style,
    map_button_style,
    workout_combobox_style,
)
from workout_maps.workers import LoadRoutesWorker


class MapWindow(QMainWindow):
    def __init__(self, config=None):
        super().__init__()
        self.setWindowTitle("Workout Maps")

        screen_geometry = QApplication.primaryScreen().availableGeometry()
        width = int(screen_geometry.width() * 0.8)
        height = int(screen_geometry.height() * 0.8)
        self.resize(width, height)
        self.move(
            (screen_geometry.width() - width) // 2,
            (screen_geometry.height() - height) // 2,
        )

        self.config = config if config is not None else load_config()
        self.settings = HeatmapSettings.from_config(self.config)
        self.activity_types = self.config.get("health", {}).get("activity_types", ["running", "cycling"])
        self.routes_by_type = {}

        main_widget = QWidget()
        self.setCentralWidget(main_widget)
        main_layout = QHBoxLayout(main_widget)

        # --- Left: Button column ---
        button_widget = QWidget()
        button_layout = QVBoxLayout(button_widget)
        button_layout.setAlignment(Qt.AlignTop)
        main_layout.addWidget(button_widget)

        self.map_buttons = {}
        for activity_type in self.activity_types:
            name = activity_name(activity_type)
            for label, func, style in [
                (f"{name} Routes", lambda _, t=activity_type: self.show_routes(t), map_button_style),
                (f"{name} Heat Map", lambda _, t=activity_type: self.show_heatmap(t), heatmap_button_style),
            ]:
                btn = QPushButton(label)
                btn.setStyleSheet(style)
                btn.clicked.connect(func)
                btn.setEnabled(False)
                button_layout.addWidget(btn)
                self.map_buttons[label] = btn

        self.workout_combo = QComboBox()
        self.workout_combo.setStyleSheet(workout_combobox_style)
        button_layout.addWidget(QLabel("Workout:"))
        button_layout.addWidget(self.workout_combo)
        btn = QPushButton("Show Workout")
        btn.setStyleSheet(map_button_style)
        btn.clicked.connect(self.show_selected_workout)
        btn.setEnabled(False)
        button_layout.addWidget(btn)
        self.map_buttons["Show Workout"] = btn

        button_layout.addItem(
            QSpacerItem(20, 40, QSizePolicy.Minimum, QSizePolicy.Expanding)
        )

        for label, func in [
            ("Load Apple Health Export", lambda _: self.load_routes_async(use_garmin=False)),
            ("Sync Garmin Data", lambda _: self.load_routes_async(use_garmin=True)),
        ]:
            btn = QPushButton(label)
            btn.setStyleSheet(map_button_style)
            btn.clicked.connect(func)
            button_layout.addWidget(btn)
            self.map_buttons[label] = btn

        # --- Center: Map area ---
        plot_widget = QWidget()
        plot_layout = QVBoxLayout(plot_widget)
        plot_layout.setContentsMargins(0, 0, 0, 0)
        plot_widget.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        main_layout.addWidget(plot_widget, stretch=1)

        self.figure = plt.Figure(figsize=(9, 6))
        self.canvas = FigureCanvas(self.figure)
        self.canvas.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.toolbar = NavigationToolbar(self.canvas, self)
        plot_layout.addWidget(self.toolbar)
        plot_layout.addWidget(self.canvas, stretch=5)

        self.console = QTextEdit()
        self.console.setReadOnly(True)
        self.console.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        plot_layout.addWidget(QLabel("Console:"))
        plot_layout.addWidget(self.console, stretch=1)

        self.load_routes_async(use_garmin=False)

    def get_garmin_credentials(self):
        username = os.getenv("GARMIN_USERNAME")
        password = os.getenv("GARMIN_PASSWORD")
        if not username:
            username, ok = QInputDialog.getText(self, "Garmin Username", "Enter your Garmin username:")
            if not ok or not username:
                return None, None
        if not password:
            password, ok = QInputDialog.getText(self, "Garmin Password", "Enter your Garmin password:", QLineEdit.Password)
            if not ok or not password:
                return None, None
        return username, password

    def load_routes_async(self, use_garmin=False):
        if use_garmin:
            username, password = self.get_garmin_credentials()
            if not username or not password:
                QMessageBox.critical(
                    self, "Credentials Error",
                    "GARMIN_USERNAME or GARMIN_PASSWORD environment variable not set."
                )
                return
            source_factory = lambda: GarminRouteSource(username, password)
            label = "Sync Garmin Data"
        else:
            export_path = os.getenv("WORKOUT_MAPS_EXPORT") or self.config.get("health", {}).get("export_path")
            source_factory = lambda: AppleHealthExport(export_path)
            label = "Load Apple Health Export"

        self.map_buttons[label].setStyleSheet(loading_style)
        self.loading_label = label
        self.load_worker = LoadRoutesWorker(source_factory, self.activity_types, config=self.config)
        self.load_worker.progress.connect(self.console.append)
        self.load_worker.finished.connect(self.handle_routes_loaded)
        self.load_worker.start()

    def handle_routes_loaded(self, routes_by_type):
        self.map_buttons[self.loading_label].setStyleSheet(map_button_style)
        if routes_by_type is None:
            self.console.append("Route load failed.")
            return
        self.routes_by_type = routes_by_type

        self.workout_combo.clear()
        for activity_type, routes in routes_by_type.items():
            name = activity_name(activity_type)
            has_routes = bool(routes)
            self.map_buttons[f"{name} Routes"].setEnabled(has_routes)
            self.map_buttons[f"{name} Heat Map"].setEnabled(has_routes)
            for workout_id, (route, workout) in routes.items():
                self.workout_combo.addItem(
                    f"{workout.name} {workout.start_time:%Y-%m-%d %H:%M}", (activity_type, workout_id)
                )
        self.map_buttons["Show Workout"].setEnabled(self.workout_combo.count() > 0)

        for activity_type in routes_by_type:
            if routes_by_type[activity_type]:
                self.show_routes(activity_type)
                break

    def clear_figure(self):
        self.figure.clear()
        self.canvas.draw()

    def show_routes(self, activity_type):
        self.clear_figure()
        ax = self.figure.add_subplot(111)
        routes = [route for route, _ in self.routes_by_type.get(activity_type, {}).values()]
        plot_combined_routes(routes, ax, self.config, title=f"All {activity_name(activity_type)} Routes")
        self.canvas.draw()

    def show_heatmap(self, activity_type):
        self.clear_figure()
        ax = self.figure.add_subplot(111)
        routes = self.routes_by_type.get(activity_type, {})
        route_list = [route for route, _ in routes.values()]
        frequency = calculate_heatmap_data(
            route_list,
            decimal_places=self.settings.grid_precision_decimal_places,
            validate=self.settings.validate_coordinates,
        )
        plot_heatmap(heatmap_overlays(frequency, self.settings), ax, center=first_coordinate(route_list),
                     config=self.config, title=f"{activity_name(activity_type)} Heat Map")
        self.canvas.draw()

        top_n = int(self.config.get("report", {}).get("top_cells", 10))
        summary = heatmap_summary(activity_type, routes, frequency, self.settings, top_n=top_n)
        self.console.append(f'<pre>{summary}</pre>')

    def show_selected_workout(self):
        data = self.workout_combo.currentData()
        if not data:
            return
        activity_type, workout_id = data
        route, workout = self.routes_by_type[activity_type][workout_id]
        self.clear_figure()
        ax = self.figure.add_subplot(111)
        plot_route(route, ax, workout=workout, config=self.config)
        self.canvas.draw()


def run_app():
    QApplication.setAttribute(Qt.AA_EnableHighDpiScaling, True)
    QApplication.setAttribute(Qt.AA_UseHighDpiPixmaps, True)
    app = QApplication(sys.argv)
    window = MapWindow()
    window.show()
    sys.exit(app.exec_())
