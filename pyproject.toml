[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "r51bus"
version = "0.1.0"
description = "Event bus messages, CAN/J1939 gateways and keypad nodes for an in-vehicle controller network"
requires-python = ">=3.10"
dependencies = []
keywords = ["can", "j1939", "canbus", "vehicle", "event-bus", "realdash", "keypad", "rotary-encoder"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems :: Controller Area Network (CAN) :: J1939",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["r51bus"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
