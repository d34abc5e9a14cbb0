import pytest

from zeitgeist.ruleset import RulesetType, ruleset, rulesets


@pytest.mark.parametrize(
    ("rule", "expected"),
    [
        ("Any", RulesetType.ANY),
        ("ReleaseOrBranch", RulesetType.RELEASE_OR_RELEASE_BRANCH),
        ("Release", RulesetType.RELEASE),
        ("Branch", RulesetType.RELEASE_BRANCH),
        ("Invalid", RulesetType.INVALID),
        ("dasddasdsa", RulesetType.INVALID),
        ("any", RulesetType.ANY),
        ("releaseorbranch", RulesetType.RELEASE_OR_RELEASE_BRANCH),
        ("release", RulesetType.RELEASE),
        ("branch", RulesetType.RELEASE_BRANCH),
        ("invalid", RulesetType.INVALID),
        ("adsdsaasd", RulesetType.INVALID),
        ("", RulesetType.INVALID),
    ],
)
def test_ruleset(rule, expected):
    assert ruleset(rule) is expected


@pytest.mark.parametrize(
    ("rule", "expected"),
    [
        (RulesetType.ANY, "Any"),
        (RulesetType.RELEASE_OR_RELEASE_BRANCH, "ReleaseOrBranch"),
        (RulesetType.RELEASE, "Release"),
        (RulesetType.RELEASE_BRANCH, "Branch"),
        (RulesetType.INVALID, "Invalid"),
    ],
)
def test_ruleset_type_str(rule, expected):
    assert str(rule) == expected


def test_ruleset_type_out_of_range():
    with pytest.raises(ValueError):
        RulesetType(999)


def test_rulesets():
    assert rulesets() == ["Any", "ReleaseOrBranch", "Release", "Branch"]


def test_rulesets_round_trip():
    names = rulesets()
    parsed = [ruleset(name) for name in names]
    assert RulesetType.INVALID not in parsed
    assert [str(rule) for rule in parsed] == names