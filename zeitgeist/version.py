"""Version values and the rules for deciding whether one is newer than another."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import semver

logger = logging.getLogger(__name__)


class VersionScheme(str, Enum):
    """How two versions of a dependency are compared."""

    SEMVER = "semver"
    """Semantic versioning, the default."""
    ALPHA = "alpha"
    """Alphanumeric: plain string ordering."""
    RANDOM = "random"
    """No ordering (e.g. hashes): any different version counts as newer."""

    def __str__(self) -> str:
        return self.value


class VersionSensitivity(str, Enum):
    """Which kind of semver bump counts as an update."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VersionUpdate:
    """One entry of an exported update report."""

    name: str
    version: str
    new_version: str


@dataclass(frozen=True)
class Version:
    """A version string together with the scheme used to compare it."""

    version: str
    scheme: str = VersionScheme.SEMVER

    def more_recent_than(self, other: Version) -> bool:
        """Return True if this version is newer than ``other`` at patch level."""
        return self.more_sensitively_recent_than(other, VersionSensitivity.PATCH)

    def more_sensitively_recent_than(self, other: Version, sensitivity: str | None = None) -> bool:
        """Return True if this version is newer than ``other`` for the given sensitivity.

        Raises ValueError for mismatched or unknown schemes, unparsable semver
        strings and unknown sensitivities.
        """
        if not sensitivity:
            sensitivity = VersionSensitivity.PATCH

        if self.scheme != other.scheme:
            raise ValueError(
                f"trying to compare incompatible 'Version' schemes: {self.scheme} and {other.scheme}"
            )

        try:
            scheme = VersionScheme(self.scheme)
        except ValueError:
            raise ValueError(f"unknown version scheme: {self.scheme}") from None

        if scheme is VersionScheme.SEMVER:
            mine = _parse_semver(self.version)
            theirs = _parse_semver(other.version)
            return _semver_compare(mine, theirs, sensitivity)
        if scheme is VersionScheme.ALPHA:
            return self.version > other.version
        return self.version != other.version


def _parse_semver(text: str) -> semver.Version:
    try:
        return semver.Version.parse(text.removeprefix("v"))
    except (ValueError, TypeError):
        logger.debug("Failed to semver-parse %s", text)
        raise ValueError(f"invalid semantic version: {text!r}") from None


def _semver_compare(a: semver.Version, b: semver.Version, sensitivity: str) -> bool:
    try:
        level = VersionSensitivity(sensitivity)
    except ValueError:
        raise ValueError(f"unknown version sensitivity: {sensitivity}") from None

    if level is VersionSensitivity.MAJOR:
        return a.major > b.major
    if level is VersionSensitivity.MINOR:
        return a.major > b.major or (a.major == b.major and a.minor > b.minor)
    return a > b