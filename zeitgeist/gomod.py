"""Release readiness checks over the dependencies of Go modules."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from zeitgeist.git import (
    RefType,
    SemVer,
    parse_ref,
    release_branch_version,
    release_version,
)
from zeitgeist.goimport import module_to_repo
from zeitgeist.modules import module, modules
from zeitgeist.ruleset import RulesetType


class DependencyCheckError(Exception):
    """Raised when some dependencies of a module have no ref for a release."""

    def __init__(self, module: str = "", dependencies: list[str] | None = None) -> None:
        self.module = module
        self.dependencies = list(dependencies or [])
        super().__init__(str(self))

    def __str__(self) -> str:
        return (
            f"{self.module} failed because of the following dependencies "
            f"[{', '.join(self.dependencies)}]"
        )


@dataclass(frozen=True)
class ReleaseMeta:
    """Release branch status and next release tag of a module."""

    module: str
    release_branch_exists: bool = False
    release_branch: str = ""
    release: str = ""


def _emit(out: TextIO | None, *parts: str) -> None:
    if out is not None:
        print(*parts, file=out)


def _check_module(
    name: str,
    packages: list[str],
    release: str,
    ruleset: RulesetType,
    out: TextIO | None,
) -> None:
    this = SemVer.parse_tolerant(release)
    _emit(out, name)

    non_ready: list[str] = []
    for pkg in packages:
        repo = module_to_repo(pkg)
        ref, ref_type = repo.best_ref_for(this, ruleset)
        if ref_type is RefType.NO_REF:
            non_ready.append(ref)
            _emit(out, "✘ ", ref)
        else:
            _emit(out, "✔ ", ref)

    if non_ready:
        raise DependencyCheckError(name, non_ready)


def check(
    gomod: str | Path,
    release: str,
    domain: str,
    ruleset: RulesetType,
    out: TextIO | None = None,
) -> None:
    """Verify that every dependency under ``domain`` has a ref for ``release``.

    Raises DependencyCheckError listing the dependencies without a ref.
    """
    module_pkgs, _ = modules([gomod], domain)
    for name, packages in module_pkgs.items():
        _check_module(name, packages, release, ruleset, out)


def float_refs(
    gomod: str | Path, release: str, domain: str, ruleset: RulesetType
) -> list[str]:
    """Return the best ``module@ref`` for each dependency, omitting those without one."""
    _, packages = modules([gomod], domain)
    this = SemVer.parse_tolerant(release)

    refs: list[str] = []
    for pkg in packages:
        repo = module_to_repo(pkg)
        ref, ref_type = repo.best_ref_for(this, ruleset)
        if ref_type is not RefType.NO_REF:
            refs.append(ref)
    return refs


def release_status(gomod: str | Path, release: str, out: TextIO | None = None) -> ReleaseMeta:
    """Report whether the module's release branch exists and its next release tag."""
    this = SemVer.parse_tolerant(release)
    name, _ = module(gomod, "domain filter ignored")
    _emit(out, name)

    repo = module_to_repo(name)

    ref, ref_type = repo.best_ref_for(this, RulesetType.RELEASE_BRANCH)
    if ref_type is RefType.RELEASE_BRANCH:
        _, branch, _ = parse_ref(ref)
        exists = True
        _emit(out, "✔ ", branch)
    else:
        branch = release_branch_version(this)
        exists = False
        _emit(out, "✘ ", branch)

    ref, ref_type = repo.best_ref_for(this, RulesetType.RELEASE)
    if ref_type is RefType.RELEASE:
        _, tag, _ = parse_ref(ref)
        latest = SemVer.parse_tolerant(tag)
        next_release = release_version(dataclasses.replace(latest, patch=latest.patch + 1))
    else:
        next_release = release_version(this)
    _emit(out, "➜ ", next_release)

    return ReleaseMeta(
        module=name,
        release_branch_exists=exists,
        release_branch=branch,
        release=next_release,
    )