[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "duelcards"
version = "0.1.0"
description = "A two-player networked card duel: a TCP game server and a terminal client"
requires-python = ">=3.10"
dependencies = []
keywords = ["card game", "duel", "turn based", "multiplayer", "tcp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Turn Based Strategy",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
duelcards-server = "duelcards.server:main"
duelcards-client = "duelcards.client:main"

[tool.hatch.build.targets.wheel]
packages = ["duelcards"]

[tool.pytest.ini_options]
addopts = "-ra"
