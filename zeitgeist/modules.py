"""Reading go.mod files and collecting their direct dependencies."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path


class GoModError(ValueError):
    """Raised for malformed go.mod files and invalid module queries."""


@dataclass(frozen=True)
class Requirement:
    """One ``require`` entry of a go.mod file."""

    path: str
    version: str
    indirect: bool = False


@dataclass
class GoModFile:
    """The parts of a go.mod file that matter for dependency discovery."""

    module: str
    go: str | None = None
    requires: list[Requirement] = field(default_factory=list)


_TOKEN_RE = re.compile(r'//.*|"(?:[^"\\\n]|\\.)*"|`[^`]*`|[()]|[^\s()"`]+')
_VERSION_RE = re.compile(
    r"v\d+(?:\.\d+){0,2}(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?"
)
_GO_VERSION_RE = re.compile(r"\d+(?:\.\d+)*(?:[a-z]+\d+)?")
_VERBS = frozenset(
    {"module", "go", "require", "exclude", "replace", "retract", "toolchain", "godebug"}
)


def _tokenize(line: str, lineno: int) -> tuple[list[str], str | None]:
    tokens: list[str] = []
    comment: str | None = None
    pos = 0
    while pos < len(line):
        if line[pos].isspace():
            pos += 1
            continue
        match = _TOKEN_RE.match(line, pos)
        if match is None:
            raise GoModError(f"line {lineno}: unexpected input {line[pos:]!r}")
        token = match.group()
        if token.startswith("//"):
            comment = token[2:].strip()
            break
        tokens.append(token)
        pos = match.end()
    return tokens, comment


def _unquote(token: str, lineno: int) -> str:
    if token.startswith('"'):
        try:
            return json.loads(token)
        except json.JSONDecodeError:
            raise GoModError(f"line {lineno}: invalid quoted string {token}") from None
    if token.startswith("`"):
        return token[1:-1]
    return token


def _is_indirect(comment: str | None) -> bool:
    return comment is not None and (comment == "indirect" or comment.startswith("indirect;"))


class _Parser:
    def __init__(self) -> None:
        self.module: str | None = None
        self.go: str | None = None
        self.requires: list[Requirement] = []

    def directive(self, verb: str, args: list[str], comment: str | None, lineno: int) -> None:
        if "(" in args or ")" in args:
            raise GoModError(f"line {lineno}: unexpected parenthesis")
        if verb == "module":
            if len(args) != 1:
                raise GoModError(f"line {lineno}: usage: module module/path")
            if self.module is not None:
                raise GoModError(f"line {lineno}: repeated module statement")
            self.module = _unquote(args[0], lineno)
        elif verb == "go":
            if len(args) != 1 or not _GO_VERSION_RE.fullmatch(args[0]):
                raise GoModError(f"line {lineno}: usage: go 1.23")
            self.go = args[0]
        elif verb == "require":
            if len(args) != 2:
                raise GoModError(f"line {lineno}: usage: require module/path v1.2.3")
            version = _unquote(args[1], lineno)
            if not _VERSION_RE.fullmatch(version):
                raise GoModError(f"line {lineno}: invalid module version {version!r}")
            self.requires.append(
                Requirement(_unquote(args[0], lineno), version, _is_indirect(comment))
            )
        elif not args:
            raise GoModError(f"line {lineno}: {verb} needs arguments")

    def result(self) -> GoModFile:
        if self.module is None:
            raise GoModError("no module statement found")
        return GoModFile(self.module, self.go, self.requires)


def parse_gomod(text: str) -> GoModFile:
    """Parse the contents of a go.mod file."""
    parser = _Parser()
    block: str | None = None
    for lineno, line in enumerate(text.splitlines(), start=1):
        tokens, comment = _tokenize(line, lineno)
        if not tokens:
            continue
        if block is not None:
            if tokens == [")"]:
                block = None
                continue
            parser.directive(block, tokens, comment, lineno)
            continue
        verb, args = tokens[0], tokens[1:]
        if verb not in _VERBS:
            raise GoModError(f"line {lineno}: unknown directive: {verb}")
        if args == ["("]:
            block = verb
            continue
        if args == ["(", ")"]:
            continue
        parser.directive(verb, args, comment, lineno)
    if block is not None:
        raise GoModError(f"unterminated {block} block")
    return parser.result()


def module(gomod: str | Path, domain: str) -> tuple[str, list[str]]:
    """Return the module name and its sorted direct dependencies under ``domain``."""
    domain = domain.strip()
    if not domain:
        raise GoModError("no domain provided")

    parsed = parse_gomod(Path(gomod).read_text(encoding="utf-8"))
    packages = {
        req.path
        for req in parsed.requires
        if not req.indirect and req.path.startswith(domain)
    }
    return parsed.module, sorted(packages)


def modules(gomods: list[str | Path], domain: str) -> tuple[dict[str, list[str]], list[str]]:
    """Map each module to its direct dependencies and list the unique dependencies."""
    if not gomods:
        raise GoModError("no go module files provided")

    packages: dict[str, list[str]] = {}
    seen: set[str] = set()
    for gomod in gomods:
        name, deps = module(gomod, domain)
        packages[name] = deps
        seen.update(deps)
    return packages, sorted(seen)