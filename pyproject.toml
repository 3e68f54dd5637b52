[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "watchtower"
version = "0.1.0"
description = "Container filters, label metadata, recreation settings, flags and a token-protected update API for automatic container updates"
requires-python = ">=3.10"
dependencies = []
keywords = ["containers", "docker", "updates", "automation", "filters", "flags"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["watchtower"]

[tool.hatch.build.targets.sdist]
include = ["watchtower", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
