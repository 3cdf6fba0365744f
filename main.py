"""
Filename: main.py
Description: main entry point for Workout Maps - opens the map viewer window.
Author: Ryan Kari
License: MIT
Created: 2025-07-20
"""

from workout_maps.main_window import run_app

if __name__ == "__main__":
    run_app()
