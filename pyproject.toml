[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cukerunner"
version = "0.1.0"
description = "Step definitions, hooks, scenario contexts and a wire-protocol server for running Cucumber features against Python code"
requires-python = ">=3.10"
dependencies = []
keywords = ["cucumber", "bdd", "gherkin", "wire-protocol", "step-definitions", "testing"]
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
    "Topic :: Software Development :: Testing :: BDD",
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cukerunner"]

[tool.hatch.build.targets.sdist]
include = ["cukerunner", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
