[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oskit"
version = "0.1.0"
description = "Teaching simulations of operating-system concepts: a small shell, virtual memory, scheduling, an in-memory file system and classic concurrency problems"
requires-python = ">=3.10"
dependencies = []
keywords = ["operating-systems", "shell", "virtual-memory", "scheduler", "simulation", "education"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
oskit-shell = "oskit.shell:main"
oskit-barber = "oskit.barber:main"
oskit-deadlock = "oskit.deadlock:main"
oskit-scan = "oskit.scanner:main"

[tool.hatch.build.targets.wheel]
packages = ["oskit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
