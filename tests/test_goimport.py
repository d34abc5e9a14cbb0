import pytest
import requests
import responses

from zeitgeist.git import Repo
from zeitgeist.goimport import (
    MetaImport,
    MetaNotFoundError,
    get_meta_import,
    meta_content,
    module_to_repo,
)

GO_IMPORT_PAGE = """<html>
<head>
    <meta http-equiv="Content-Type" content="text/html; charset=utf-8"/>
    <meta name="go-import" content="tableflip.dev/buoy git https://github.com/n3wscott/buoy">
    <meta name="go-source" content="tableflip.dev/buoy https://github.com/n3wscott/buoy https://github.com/n3wscott/buoy/tree/master{/dir} https://github.com/n3wscott/buoy/blob/master{/dir}/{file}#L{line}">
    <meta http-equiv="refresh" content="0; url=https://pkg.go.dev/tableflip.dev/buoy/">
</head>
</html>"""


def _pkt(line: str) -> bytes:
    payload = line.encode()
    return f"{len(payload) + 4:04x}".encode() + payload


@pytest.mark.parametrize(
    ("root", "org", "repo"),
    [
        ("https://github.com/n3wscott/buoy", "n3wscott", "buoy"),
        ("https://github.com/n3wscott/buoy.git", "n3wscott", "buoy"),
        ("http://gitlab.com/repo/oldscott/boiii", "oldscott", "boiii"),
    ],
)
def test_org_repo(root, org, repo):
    assert MetaImport(repo_root=root).org_repo() == (org, repo)


def test_org_repo_unknown_root():
    with pytest.raises(ValueError, match="unknown repo root"):
        MetaImport(repo_root="https://github.com").org_repo()


def test_meta_content_found():
    body = '<html><head><meta name="foo" content="bar"></head></html>'
    assert meta_content(body, "foo") == "bar"


def test_meta_content_not_found():
    body = '<html><head><meta name="foo" content="bar"></head></html>'
    with pytest.raises(MetaNotFoundError):
        meta_content(body, "bar")


def test_meta_content_go_import():
    assert meta_content(GO_IMPORT_PAGE, "go-import") == (
        "tableflip.dev/buoy git https://github.com/n3wscott/buoy"
    )


def test_meta_content_last_match_wins():
    body = '<meta name="foo" content="first"><meta name="foo" content="second">'
    assert meta_content(body, "foo") == "second"


def test_meta_content_match_without_content():
    with pytest.raises(MetaNotFoundError):
        meta_content('<meta name="foo">', "foo")


def test_get_meta_import():
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, "http://example.com/buoy", body=GO_IMPORT_PAGE)
        meta = get_meta_import("http://example.com/buoy")
    assert meta == MetaImport(
        prefix="tableflip.dev/buoy",
        vcs="git",
        repo_root="https://github.com/n3wscott/buoy",
    )


def test_get_meta_import_invalid_host():
    with responses.RequestsMock() as mock:
        mock.add(
            responses.GET,
            "http://example.com/down",
            body=requests.ConnectionError("connection refused"),
        )
        with pytest.raises(requests.ConnectionError):
            get_meta_import("http://example.com/down")


def test_get_meta_import_missing_go_import():
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, "http://example.com/hi", body="<html>hi</html>")
        with pytest.raises(MetaNotFoundError):
            get_meta_import("http://example.com/hi")


def test_module_to_repo():
    page = '<meta name="go-import" content="example.com/mod git https://git.example.com/mod.git">'
    refs = (
        _pkt("# service=git-upload-pack\n")
        + b"0000"
        + _pkt(f"{'a' * 40} HEAD\0symref=HEAD:refs/heads/main\n")
        + _pkt(f"{'a' * 40} refs/heads/main\n")
        + _pkt(f"{'b' * 40} refs/heads/release-0.1\n")
        + _pkt(f"{'c' * 40} refs/tags/v0.1.0\n")
        + b"0000"
    )
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, "https://example.com/mod", body=page)
        mock.add(responses.GET, "https://git.example.com/mod.git/info/refs", body=refs)
        repo = module_to_repo("example.com/mod")
    assert repo == Repo(
        ref="example.com/mod",
        default_branch="main",
        tags=["v0.1.0"],
        branches=["main", "release-0.1"],
    )
    assert repo.tags == ["v0.1.0"]


def test_module_to_repo_unknown_vcs():
    page = '<meta name="go-import" content="example.com/mod hg https://hg.example.com/mod">'
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, "https://example.com/mod", body=page)
        with pytest.raises(ValueError, match="unknown VCS: hg"):
            module_to_repo("example.com/mod")


def test_module_to_repo_fetch_failure():
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, "https://example.com/mod", body="<html>nothing</html>")
        with pytest.raises(OSError, match="unable to fetch go import"):
            module_to_repo("example.com/mod")