[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "uarsim"
version = "0.1.0"
description = "Discrete-time control loop simulator: setpoint generator, PID controller and ARX plant model, runnable locally or split across a TCP link"
requires-python = ">=3.10"
dependencies = []
keywords = ["control", "pid", "arx", "simulation", "feedback", "regulator"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
uarsim = "uarsim.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["uarsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
