"""Dependency version checks, version comparison and Go module release tooling."""

__version__ = "0.1.0"