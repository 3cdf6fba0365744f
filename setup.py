from setuptools import setup, find_packages

setup(
    name="workout-maps",
    version="0.1.0",
    description="Route overlays and GPS density heat maps for workouts from Apple Health exports and Garmin Connect.",
    author="Ryan Kari",
    author_email="ryan.j.kari@gmail.com",
    packages=find_packages(exclude=["tests"]),
    include_package_data=True,
    package_data={
        "workout_maps": ["config_information.json", "heatmap_summary.txt"],
    },
    install_requires=[
        "PyQt5>=5.15",
        "matplotlib",
        "pandas",
        "numpy",
        "Jinja2",
        "garminconnect",
        "gpxpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "workout-maps = workout_maps.cli:main",
            "workout-maps-viewer = workout_maps.main_window:run_app",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)
