[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubedock"
version = "0.1.0"
description = "Bookkeeping, filtering and stream helpers for serving a container engine API on top of a Kubernetes cluster"
requires-python = ">=3.10"
dependencies = []
keywords = ["containers", "kubernetes", "docker-api", "reaper", "tar", "reverse-proxy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Clustering",
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kubedock"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
