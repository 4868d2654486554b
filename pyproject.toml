[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nginxlogstats"
version = "0.1.0"
description = "Per-path statistics from nginx access logs, rendered as Markdown and sent by e-mail"
requires-python = ">=3.11"
keywords = ["nginx", "access-log", "log-analysis", "percentiles", "report", "smtp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Log Analysis",
    "Topic :: System :: Monitoring",
]
dependencies = [
    "markdown",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
nginxlogstats = "nginxlogstats.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["nginxlogstats"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
