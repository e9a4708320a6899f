[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "glab"
version = "0.1.0"
description = "Core helpers for a small graphics laboratory: timesteps, logging, framebuffer bookkeeping, unique widget names and evolving random-expression pictures."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "graphics",
    "framebuffer",
    "expression-tree",
    "generative-art",
    "evolutionary-art",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["glab"]

[tool.hatch.build.targets.sdist]
include = [
    "glab",
    "tests",
    "README.md",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
