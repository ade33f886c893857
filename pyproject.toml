[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "intentplanner"
version = "0.3.0"
description = "Configuration, state model, TTL cache and actuator plugin messages for an intent-driven orchestration planner."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "orchestration",
    "intent",
    "planner",
    "actuator",
    "plugins",
    "configuration",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["intentplanner"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
