[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "acervo"
version = "0.1.0"
description = "Library management over fixed-size binary record files, with searching, external sorting and a hashed client index"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "library",
    "records",
    "binary-search",
    "quicksort",
    "external-sorting",
    "replacement-selection",
    "multiway-merge",
    "hashing",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
acervo = "acervo.app:main"

[tool.hatch.build.targets.wheel]
packages = ["acervo"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
