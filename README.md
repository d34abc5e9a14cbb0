# zeitgeist

Tools for keeping dependencies in step.

- A **dependency checker** for any language. It reads a
  `dependencies.yaml` file and checks that every file named there refers
  to the declared version. It also compares versions under the semver,
  alphanumeric or random schemes.
- **buoy**, a command-line tool for Go module dependencies. For a given
  release it finds the best git ref of each dependency: a release tag, a
  release branch or the default branch.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Dependency configuration

```yaml
dependencies:
  - name: terraform
    version: 0.12.3
    scheme: semver        # semver (default), alpha or random
    sensitivity: patch    # patch (default), minor or major
    refPaths:
      - path: helper/Dockerfile
        match: TERRAFORM_VERSION
```

Every dependency needs a `name` and a `version`; an unknown `scheme` is
rejected. `zeitgeist.dependency.load_dependencies` and
`parse_dependencies` read such a file into `Dependency` objects and raise
`DependencyError` when it is invalid.

Check that local files agree with the configuration:

```python
from zeitgeist.dependency import local_check

local_check("dependencies.yaml", ".")
```

For every `refPath`, the file (relative to the base path) must have a line
that matches the `match` regular expression and contains the version.
`local_check` raises `DependencyError` when a file does not match or a
regular expression is invalid, and `OSError` when a file cannot be read.

## Comparing versions

```python
from zeitgeist.version import Version, VersionScheme, VersionSensitivity

a = Version("1.0.0", VersionScheme.SEMVER)
b = Version("1.1.0", VersionScheme.SEMVER)
b.more_recent_than(a)                                        # True
b.more_sensitively_recent_than(a, VersionSensitivity.MAJOR)  # False
```

- `semver`: a leading `v` is ignored; the sensitivity decides whether a
  patch, minor or major bump counts as newer.
- `alpha`: plain string ordering.
- `random`: any different version counts as newer.

Comparing different schemes, an unknown scheme or sensitivity, or an
unparsable semver string raises `ValueError`.

## buoy

```
buoy needs go.mod --domain knative.dev
buoy float go.mod --release v0.15 --domain knative.dev --ruleset Any
buoy check go.mod --release v0.15 --domain knative.dev --ruleset ReleaseOrBranch --verbose
buoy exists go.mod --release v0.15 --next
```

- `needs` lists the direct (non-indirect) dependencies under a domain,
  across one or more `go.mod` files. `--domain` is required.
- `float` prints the best ref of each dependency for the release.
  `--domain` defaults to `knative.dev`, `--ruleset` to `Any`.
- `check` exits with status 1 and prints the failing dependencies when
  some dependency has no ref under the ruleset (default
  `ReleaseOrBranch`). `--verbose` writes progress to stderr.
- `exists` exits with status 1 when the module has no release branch for
  the release. `--next` prints the next release tag; `--verbose` writes
  progress to stderr.

Rulesets: `Any`, `ReleaseOrBranch`, `Release`, `Branch`; letter case does
not matter. Other errors are printed to stderr and give exit status 1.

Module paths are resolved through their `go-import` meta tag
(`zeitgeist.goimport.module_to_repo`), and the refs of the repository are
listed over HTTP(S) with the git smart protocol, or read from a local
repository path (`zeitgeist.git.get_repo`). The same functions are
available from Python in `zeitgeist.modules` (`module`, `modules`,
`parse_gomod`) and `zeitgeist.gomod` (`check`, `float_refs`,
`release_status`).

## What this package does not do

- It has no command for the dependency checker: `local_check` is used
  from Python only.
- It does not look up the latest versions of dependencies upstream; the
  `upstream` entry of a dependency is read but not queried, and there is
  no export of available updates.
- Git remotes are reached only over HTTP(S) or as local paths; SSH and
  `git://` transports are not supported.