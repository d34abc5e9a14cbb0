"""Dependency configuration files and local consistency checks."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from zeitgeist.version import Version, VersionScheme

logger = logging.getLogger(__name__)


class DependencyError(Exception):
    """Raised for invalid dependency files and failed dependency checks."""


@dataclass(frozen=True)
class RefPath:
    """A file expected to mention a dependency's version on a matching line."""

    path: str
    match: str = ""


@dataclass(frozen=True)
class Dependency:
    """A dependency declared in the configuration file."""

    name: str
    version: str
    scheme: VersionScheme = VersionScheme.SEMVER
    sensitivity: str = ""
    upstream: dict[str, str] | None = None
    ref_paths: list[RefPath] = field(default_factory=list)

    @property
    def current(self) -> Version:
        """The declared version with its comparison scheme."""
        return Version(self.version, self.scheme)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (Mapping, list)):
        raise DependencyError(f"expected a scalar value, got {value!r}")
    return str(value)


def parse_dependency(data: Any) -> Dependency:
    """Build a Dependency from one decoded YAML mapping, validating it."""
    if not isinstance(data, Mapping):
        raise DependencyError(f"dependency must be a mapping, got {data!r}")

    name = _text(data.get("name"))
    if not name:
        raise DependencyError(f"Dependency has no `name`: {dict(data)!r}")

    version = _text(data.get("version"))
    if not version:
        raise DependencyError(f"Dependency has no `version`: {dict(data)!r}")

    scheme_text = _text(data.get("scheme")) or VersionScheme.SEMVER.value
    try:
        scheme = VersionScheme(scheme_text)
    except ValueError:
        raise DependencyError(f"unknown version scheme: {scheme_text}") from None

    raw_upstream = data.get("upstream")
    upstream: dict[str, str] | None = None
    if raw_upstream is not None and raw_upstream != "":
        if not isinstance(raw_upstream, Mapping):
            raise DependencyError(f"upstream of {name} must be a mapping")
        upstream = {str(k): _text(v) for k, v in raw_upstream.items()}

    raw_refs = data.get("refPaths") or []
    if not isinstance(raw_refs, list):
        raise DependencyError(f"refPaths of {name} must be a list")
    ref_paths = []
    for entry in raw_refs:
        if not isinstance(entry, Mapping):
            raise DependencyError(f"refPath entry of {name} must be a mapping")
        ref_paths.append(RefPath(path=_text(entry.get("path")), match=_text(entry.get("match"))))

    dependency = Dependency(
        name=name,
        version=version,
        scheme=scheme,
        sensitivity=_text(data.get("sensitivity")),
        upstream=upstream,
        ref_paths=ref_paths,
    )
    logger.debug("Deserialised Dependency %s: %r", name, dependency)
    return dependency


def parse_dependencies(text: str) -> list[Dependency]:
    """Parse the contents of a dependencies file."""
    try:
        document = yaml.load(text, Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        raise DependencyError(f"invalid YAML: {exc}") from exc

    if document is None:
        return []
    if not isinstance(document, Mapping):
        raise DependencyError("dependencies file must contain a mapping")

    entries = document.get("dependencies") or []
    if not isinstance(entries, list):
        raise DependencyError("`dependencies` must be a list")
    return [parse_dependency(entry) for entry in entries]


def load_dependencies(path: str | Path) -> list[Dependency]:
    """Read and parse a dependencies file from disk."""
    return parse_dependencies(Path(path).read_text(encoding="utf-8"))


def _file_mentions(file_path: Path, matcher: re.Pattern[str], version: str) -> bool:
    with file_path.open(encoding="utf-8", errors="replace") as handle:
        for number, line in enumerate(handle, start=1):
            line = line.rstrip("\r\n")
            if matcher.search(line) and version in line:
                logger.debug(
                    "Line %d matches expected regexp %r and version %r: %s",
                    number,
                    matcher.pattern,
                    version,
                    line,
                )
                return True
    return False


def local_check(dependency_file_path: str | Path, base_path: str | Path) -> None:
    """Check that every referenced file mentions its dependency's version.

    Raises OSError if a referenced file cannot be read, DependencyError for an
    invalid regular expression or when any reference is out of sync.
    """
    logger.debug("Base path: %s", base_path)
    dependencies = load_dependencies(dependency_file_path)

    non_matching: list[str] = []
    for dep in dependencies:
        logger.debug("Examining dependency: %s", dep.name)

        for ref in dep.ref_paths:
            file_path = Path(base_path) / ref.path
            logger.debug("Examining file: %s", file_path)

            if not file_path.is_file():
                with file_path.open():
                    pass
            try:
                matcher = re.compile(ref.match)
            except re.error as exc:
                raise DependencyError(f"compiling regex: {exc}") from exc

            if not _file_mentions(file_path, matcher, dep.version):
                logger.debug("Finished reading file %s, no match found.", file_path)
                non_matching.append(ref.path)

        if non_matching:
            logger.error(
                "%s indicates that %s should be at version %s, but the following files didn't match: %s",
                dependency_file_path,
                dep.name,
                dep.version,
                ", ".join(non_matching),
            )
            raise DependencyError("Dependencies are not in sync")