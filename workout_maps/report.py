"""
Filename: report.py
Description: Text summaries for Workout Maps - renders heat map statistics through a Jinja2 template.
Author: Ryan Kari
License: MIT
Created: 2025-07-20
"""
import datetime
import os
import sys

from jinja2 import Template

from workout_maps.geo import activity_name
from workout_maps.heatmap import frequency_frame


def resource_path(relative_path):
    """ Get absolute path to a bundled resource, works for dev and for PyInstaller """
    if hasattr(sys, '_MEIPASS'):
        return os.path.join(sys._MEIPASS, 'workout_maps', relative_path)
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), relative_path)


SUMMARY_TEMPLATE = resource_path('heatmap_summary.txt')


def load_summary_template(template_path, **kwargs):
    if not os.path.exists(template_path):
        return None

    with open(template_path, 'r', encoding='utf-8') as f:
        template = Template(f.read())
    return template.render(**kwargs)


def heatmap_summary(activity_type, routes, frequency, settings, top_n=10, template_path=SUMMARY_TEMPLATE):
    """
    Summarise a heat map for the console.

    Parameters:
        activity_type: Activity type key, e.g. 'running'
        routes: dict workout_id -> (route, workout) from health_core.fetch_all_routes
        frequency: Counter from heatmap.calculate_heatmap_data
        settings: HeatmapSettings
        top_n: Number of busiest cells listed

    Returns:
        str: the rendered summary, or a message starting with 'ERROR:'
    """
    route_list = [route for route, _ in routes.values()]
    df_cells = frequency_frame(frequency, settings.opacity_count_cap)
    if df_cells.empty:
        top_cells = "No GPS samples recorded."
    else:
        top_cells = df_cells.head(top_n).round({"opacity": 2}).to_string(index=False)

    summary = load_summary_template(
        template_path,
        activity_name=activity_name(activity_type),
        generated=datetime.datetime.now().strftime('%Y-%m-%d %H:%M'),
        workout_count=len(route_list),
        empty_count=sum(1 for route in route_list if len(route) == 0),
        sample_count=sum(len(route) for route in route_list),
        cell_count=len(frequency),
        precision=settings.grid_precision_decimal_places,
        opacity_cap=settings.opacity_count_cap,
        top_cells=top_cells,
    )

    if summary is None:
        return (
            "ERROR: Summary template file not found at: {}\n"
            "Please ensure 'heatmap_summary.txt' is present in the package."
        ).format(template_path)
    return summary
