"""Setup script for conveyor-sort-sim."""

from setuptools import setup, find_packages

setup(
    name="conveyor-sort-sim",
    version="0.1.0",
    description="A discrete-time simulator of a conveyor sorting line with an imperfect sensor and timed diverter",
    author="Conveyor Sort Sim",
    license="MIT",
    packages=find_packages(include=["src", "src.*", "scripts"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "pandas",
        "matplotlib",
        "simpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "run-simulation=scripts.run_simulation:main",
        ],
    },
)
