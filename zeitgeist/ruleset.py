"""Rulesets that decide which kinds of git refs may be chosen for a release."""

from __future__ import annotations

from enum import IntEnum


class RulesetType(IntEnum):
    """The rules used when picking the best ref of a repository."""

    ANY = 0
    """Release tag, release branch, or default branch."""
    RELEASE_OR_RELEASE_BRANCH = 1
    """Only a release tag or a release branch."""
    RELEASE = 2
    """Only a release tag."""
    RELEASE_BRANCH = 3
    """Only a release branch."""
    INVALID = 4
    """A rule that could not be parsed."""

    def __str__(self) -> str:
        return _LABELS[self]


_LABELS = {
    RulesetType.ANY: "Any",
    RulesetType.RELEASE_OR_RELEASE_BRANCH: "ReleaseOrBranch",
    RulesetType.RELEASE: "Release",
    RulesetType.RELEASE_BRANCH: "Branch",
    RulesetType.INVALID: "Invalid",
}

_LOOKUP = {label.lower(): rule for rule, label in _LABELS.items()}


def ruleset(rule: str) -> RulesetType:
    """Convert a rule name, in any letter case, into a RulesetType."""
    return _LOOKUP.get(rule.lower(), RulesetType.INVALID)


def rulesets() -> list[str]:
    """Return the names that parse into a valid RulesetType."""
    return [str(rule) for rule in RulesetType if rule is not RulesetType.INVALID]