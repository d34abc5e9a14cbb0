"""Git references of repositories and selection of the best ref for a release."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path

import requests

from zeitgeist.ruleset import RulesetType

_HTTP_TIMEOUT = 30


class RefType(IntEnum):
    """The kind of ref chosen for a module."""

    BRANCH = 0
    DEFAULT_BRANCH = 1
    RELEASE_BRANCH = 2
    RELEASE = 3
    NO_REF = 4
    UNDEFINED = 5

    def __str__(self) -> str:
        return _REF_TYPE_LABELS.get(self, "")


_REF_TYPE_LABELS = {
    RefType.DEFAULT_BRANCH: "Default Branch",
    RefType.RELEASE_BRANCH: "Release Branch",
    RefType.RELEASE: "Release",
    RefType.NO_REF: "No Ref",
}

_NUMERIC = r"0|[1-9][0-9]*"
_IDENT = r"[0-9A-Za-z-]+"
_SEMVER_RE = re.compile(
    rf"({_NUMERIC})\.({_NUMERIC})\.({_NUMERIC})"
    rf"(?:-({_IDENT}(?:\.{_IDENT})*))?"
    rf"(?:\+({_IDENT}(?:\.{_IDENT})*))?"
)


@dataclass(frozen=True)
class SemVer:
    """A semantic version with optional pre-release and build identifiers."""

    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    @staticmethod
    def parse(text: str) -> SemVer:
        """Parse a strict ``major.minor.patch[-pre][+build]`` version."""
        match = _SEMVER_RE.fullmatch(text)
        if match is None:
            raise ValueError(f"invalid semantic version: {text!r}")
        pre = tuple(match.group(4).split(".")) if match.group(4) else ()
        for ident in pre:
            if ident.isdigit() and len(ident) > 1 and ident.startswith("0"):
                raise ValueError(f"pre-release number has a leading zero: {text!r}")
        build = tuple(match.group(5).split(".")) if match.group(5) else ()
        return SemVer(int(match.group(1)), int(match.group(2)), int(match.group(3)), pre, build)

    @staticmethod
    def parse_tolerant(text: str) -> SemVer:
        """Parse a version leniently: a leading ``v``, leading zeros and missing parts are allowed."""
        text = text.strip().removeprefix("v")
        parts = text.split(".", 2)
        for index, part in enumerate(parts):
            if len(part) > 1:
                part = part.lstrip("0")
                if not part or part[0] not in "0123456789":
                    part = "0" + part
                parts[index] = part
        if len(parts) < 3:
            if any(sign in parts[-1] for sign in "+-"):
                raise ValueError("Short version cannot contain PreRelease/Build meta data")
            parts.extend(["0"] * (3 - len(parts)))
        return SemVer.parse(".".join(parts))

    def _precedence(self) -> tuple:
        pre_key = tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in self.pre)
        return (self.major, self.minor, self.patch, not self.pre, pre_key)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence() < other._precedence()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence() <= other._precedence()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence() > other._precedence()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._precedence() >= other._precedence()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += "-" + ".".join(self.pre)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


def normalize_tag_version(v: str) -> tuple[str, bool]:
    """Strip the ``v`` of a release tag; the flag tells whether it had one."""
    if v.startswith("v"):
        return v[1:], True
    return v, False


def normalize_branch_version(v: str) -> tuple[str, bool]:
    """Turn ``release-X.Y`` into ``X.Y.0``; the flag tells whether it was a release branch."""
    if v.startswith("release-"):
        return v[len("release-"):] + ".0", True
    return v, False


def release_version(v: SemVer) -> str:
    """Format the release tag of a version."""
    return f"v{v.major}.{v.minor}.{v.patch}"


def release_branch_version(v: SemVer) -> str:
    """Format the release branch of a version."""
    return f"release-{v.major}.{v.minor}"


def parse_ref(ref: str) -> tuple[str, str, RefType]:
    """Split ``module@ref`` into the module, the ref and the kind of ref."""
    parts = ref.split("@")
    if len(parts) != 2:
        return ref, "", RefType.UNDEFINED
    module, reference = parts
    if normalize_tag_version(reference)[1]:
        return module, reference, RefType.RELEASE
    if normalize_branch_version(reference)[1]:
        return module, reference, RefType.RELEASE_BRANCH
    return module, reference, RefType.BRANCH


def _largest_matching(
    names: Iterable[str],
    normalize: Callable[[str], tuple[str, bool]],
    this: SemVer,
    *,
    skip_tagged: bool,
) -> SemVer | None:
    candidates = []
    for name in names:
        text, ok = normalize(name)
        if not ok:
            continue
        try:
            version = SemVer.parse(text)
        except ValueError:
            continue
        if skip_tagged and (version.pre or version.build):
            continue
        if version.major == this.major and version.minor == this.minor:
            candidates.append(version)
    return max(candidates, default=None)


@dataclass
class Repo:
    """A git remote reduced to its tags, branches and default branch."""

    ref: str
    default_branch: str = ""
    tags: list[str] = field(default_factory=list)
    branches: list[str] = field(default_factory=list)

    def best_ref_for(self, this: SemVer, ruleset: RulesetType) -> tuple[str, RefType]:
        """Return ``module@ref`` and its kind for the release ``this`` under ``ruleset``."""
        if ruleset in (RulesetType.ANY, RulesetType.RELEASE_OR_RELEASE_BRANCH, RulesetType.RELEASE):
            # Go cannot fetch semver tags with pre-release or build parts.
            largest = _largest_matching(self.tags, normalize_tag_version, this, skip_tagged=True)
            if largest is not None:
                return f"{self.ref}@{release_version(largest)}", RefType.RELEASE

        if ruleset in (
            RulesetType.ANY,
            RulesetType.RELEASE_OR_RELEASE_BRANCH,
            RulesetType.RELEASE_BRANCH,
        ):
            largest = _largest_matching(
                self.branches, normalize_branch_version, this, skip_tagged=False
            )
            if largest is not None:
                return f"{self.ref}@{release_branch_version(largest)}", RefType.RELEASE_BRANCH

        if ruleset is RulesetType.ANY:
            return f"{self.ref}@{self.default_branch}", RefType.DEFAULT_BRANCH

        return self.ref, RefType.NO_REF


@dataclass(frozen=True)
class Info:
    """Details used to interact with a code-hosting service."""

    org: str = ""
    repo: str = ""
    head: str = ""
    base: str = ""
    user_id: str = ""
    user_name: str = ""
    email: str = ""

    def head_ref(self) -> str:
        """Return the head ref in the form ``user:head``."""
        return f"{self.user_id}:{self.head}"


_PKT_LEN_RE = re.compile(r"[0-9a-fA-F]{4}")


def _pkt_lines(data: bytes) -> Iterator[bytes | None]:
    pos = 0
    while pos < len(data):
        head = data[pos:pos + 4].decode("ascii", errors="replace")
        if not _PKT_LEN_RE.fullmatch(head):
            raise ValueError(f"malformed pkt-line length at offset {pos}")
        length = int(head, 16)
        if length == 0:
            yield None
            pos += 4
            continue
        if length < 4 or pos + length > len(data):
            raise ValueError(f"malformed pkt-line at offset {pos}")
        yield data[pos + 4:pos + length]
        pos += length


def parse_advertised_refs(data: bytes) -> dict[str, str]:
    """Parse a git smart-protocol ref advertisement.

    Returns ref names mapped to object ids; a symbolic HEAD is given as
    ``ref: <target>``.
    """
    refs: dict[str, str] = {}
    head_target: str | None = None
    for payload in _pkt_lines(data):
        if payload is None:
            continue
        line = payload.decode("utf-8", errors="replace").rstrip("\n")
        if line.startswith("ERR "):
            raise ValueError(f"remote error: {line[4:]}")
        if line.startswith("# ") or line.startswith("version "):
            continue
        line, _, capabilities = line.partition("\0")
        for capability in capabilities.split():
            if capability.startswith("symref=HEAD:"):
                head_target = capability[len("symref=HEAD:"):]
        object_id, _, name = line.partition(" ")
        if not name or name.endswith("^{}"):
            continue
        refs[name] = object_id
    if head_target is not None:
        refs["HEAD"] = f"ref: {head_target}"
    return refs


def _fetch_http_refs(url: str) -> dict[str, str]:
    response = requests.get(
        url.rstrip("/") + "/info/refs",
        params={"service": "git-upload-pack"},
        timeout=_HTTP_TIMEOUT,
    )
    response.raise_for_status()
    return parse_advertised_refs(response.content)


def _read_local_refs(url: str) -> dict[str, str]:
    path = Path(url.removeprefix("file://"))
    if (path / ".git").is_dir():
        git_dir = path / ".git"
    elif (path / "HEAD").is_file() and (path / "refs").is_dir():
        git_dir = path
    else:
        raise ValueError(f"repository not found: {url}")

    refs: dict[str, str] = {}
    packed = git_dir / "packed-refs"
    if packed.is_file():
        for line in packed.read_text(encoding="utf-8").splitlines():
            if not line or line.startswith(("#", "^")):
                continue
            object_id, _, name = line.partition(" ")
            if name:
                refs[name] = object_id
    for item in sorted((git_dir / "refs").rglob("*")):
        if item.is_file():
            refs[item.relative_to(git_dir).as_posix()] = item.read_text(encoding="utf-8").strip()
    refs["HEAD"] = (git_dir / "HEAD").read_text(encoding="utf-8").strip()
    return refs


def _short(name: str) -> str:
    for prefix in ("refs/heads/", "refs/tags/", "refs/remotes/", "refs/"):
        if name.startswith(prefix):
            return name[len(prefix):]
    return name


def _repo_from_refs(ref: str, refs: Mapping[str, str]) -> Repo:
    repo = Repo(ref)
    for name in sorted(refs):
        if name.startswith("refs/tags/"):
            repo.tags.append(_short(name))
        elif name.startswith("refs/heads/"):
            repo.branches.append(_short(name))
        elif name == "HEAD":
            target = refs[name]
            repo.default_branch = _short(target[5:]) if target.startswith("ref: ") else ""
    return repo


def get_repo(ref: str, url: str) -> Repo:
    """List the refs of the repository at ``url`` and build a Repo for module ``ref``.

    HTTP(S) remotes are queried with the smart protocol; anything else is read
    as a local repository path.
    """
    if url.startswith(("http://", "https://")):
        refs = _fetch_http_refs(url)
    elif "://" in url:
        raise ValueError(f"unsupported transport: {url}")
    else:
        refs = _read_local_refs(url)
    if not any(name != "HEAD" for name in refs):
        raise ValueError("remote repository is empty")
    return _repo_from_refs(ref, refs)