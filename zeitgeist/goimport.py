"""Resolution of Go module paths to their source repositories."""

from __future__ import annotations

from dataclasses import dataclass
from html.parser import HTMLParser

import requests

from zeitgeist.git import Repo, get_repo

_HTTP_TIMEOUT = 30


class MetaNotFoundError(ValueError):
    """Raised when a document lacks the requested <meta> tag."""


@dataclass(frozen=True)
class MetaImport:
    """The parsed ``<meta name="go-import" content="prefix vcs reporoot">`` tag."""

    prefix: str = ""
    vcs: str = ""
    repo_root: str = ""

    def org_repo(self) -> tuple[str, str]:
        """Return the organisation and repository names of the repo root."""
        root = self.repo_root.removesuffix(".git")
        location = root.split("://")[-1]
        parts = location.split("/")
        if len(parts) >= 2:
            return parts[-2], parts[-1]
        raise ValueError(f"unknown repo root: {self.repo_root}")


class _MetaFinder(HTMLParser):
    def __init__(self, name: str) -> None:
        super().__init__(convert_charrefs=True)
        self._name = name
        self.attrs: list[tuple[str, str | None]] | None = None

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "meta" and any(key == "name" and value == self._name for key, value in attrs):
            self.attrs = attrs


def meta_content(document: str, name: str) -> str:
    """Return the content of the last ``<meta name=...>`` tag in an HTML document."""
    finder = _MetaFinder(name)
    finder.feed(document)
    finder.close()
    if finder.attrs is not None:
        for key, value in finder.attrs:
            if key == "content":
                return value or ""
    raise MetaNotFoundError(f"missing <meta name={name}> in the node tree")


def get_meta_import(url: str) -> MetaImport:
    """Fetch ``url`` and parse its go-import meta tag."""
    response = requests.get(url, timeout=_HTTP_TIMEOUT)
    content = meta_content(response.text, "go-import")
    fields = content.split()
    if len(fields) < 3:
        raise ValueError(f"malformed go-import content: {content!r}")
    return MetaImport(prefix=fields[0], vcs=fields[1], repo_root=fields[2])


def module_to_repo(module: str) -> Repo:
    """Resolve a Go module path to the git repository that hosts it."""
    url = f"https://{module}?go-get=1"
    try:
        meta = get_meta_import(url)
    except (requests.RequestException, ValueError) as exc:
        raise OSError(f"unable to fetch go import {url}: {exc}") from exc

    if meta.vcs != "git":
        raise ValueError(f"unknown VCS: {meta.vcs}")

    return get_repo(module, meta.repo_root)