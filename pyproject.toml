[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zeitgeist"
version = "0.1.0"
description = "Dependency version consistency checks and Go module release helper"
requires-python = ">=3.10"
keywords = ["dependencies", "versions", "semver", "go.mod", "release", "git"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "pyyaml",
    "semver",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
buoy = "zeitgeist.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["zeitgeist"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
