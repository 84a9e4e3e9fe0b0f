"""
Tests for version pattern compilation.

Covers placeholder expansion, literal escaping of the service name and
pattern text, anchoring, build number extraction and compile failures.
"""

import pytest

from s3repo.exceptions import PatternCompileError
from s3repo.pattern import (
    Matcher,
    MatchResult,
    compile_pattern,
    expand_placeholders,
)


@pytest.mark.parametrize(
    "template, basename, expected",
    [
        # %W-%B: any text followed by a build number
        ("%W-%B", "app-1.0-10", True),
        ("%W-%B", "app-feature-x-3", True),
        ("%W-%B", "app-1.0-", False),
        ("%W-%B", "app-1.0-1a", False),
        # %V: a single integer
        ("%V", "app-12", True),
        ("%V", "app-1a", False),
        ("%V", "app-", False),
        # %S: alphanumerics with dots and commas
        ("%S", "app-1.2,rc3", True),
        ("%S", "app-1_2", False),
        # %G is optional
        ("%V.%V%G-%B", "app-1.2-10", True),
        ("%V.%V%G-%B", "app-1.2-3-gabc123-10", True),
        ("%V.%V%G-%B", "app-1.2-3-g-10", False),
        # Literal dots are not wildcards
        ("1.%B", "app-1.5", True),
        ("1.%B", "app-1x5", False),
        # Unknown tokens are literal text
        ("%X", "app-%X", True),
        ("%X", "app-1", False),
        # A literal percent sign before a placeholder
        ("%%B", "app-%7", True),
    ],
)
def test_placeholder_matching(template, basename, expected):
    """Each placeholder accepts exactly the text described by its table entry."""
    matcher = compile_pattern("app", template)
    assert matcher.matches(basename) is expected


@pytest.mark.parametrize(
    "basename",
    [
        "xapp-1.0-10",  # leading characters
        "app-1.0-10x",  # trailing characters
        " app-1.0-10",
        "app-1.0-10\n",  # a trailing newline must not satisfy the end anchor
        "prefix/app-1.0-10",
    ],
)
def test_matcher_is_anchored(basename):
    """Extra leading or trailing characters are rejected."""
    matcher = compile_pattern("app", "%W-%B")
    assert not matcher.matches(basename)


def test_service_name_is_escaped():
    """Regex metacharacters in the service name match only themselves."""
    matcher = compile_pattern("my+svc", "%B")
    assert matcher.matches("my+svc-3")
    assert not matcher.matches("myysvc-3")
    assert not matcher.matches("mysvc-3")


def test_generated_expression_is_anchored_text():
    matcher = compile_pattern("app", "%V")
    assert matcher.pattern.startswith("^app")
    assert matcher.pattern.endswith("([0-9]+)$")
    assert matcher.template == "%V"


def test_build_number_extraction():
    """The %B capture is returned as text for matching basenames."""
    matcher = compile_pattern("app", "%V.%V%G-%B")
    assert matcher.has_build_number
    assert matcher.match("app-1.2-10") == MatchResult(matched=True, build_text="10")
    assert matcher.build_number("app-1.2-3-gabc123-42") == "42"
    assert matcher.build_number("app-1.2") is None


def test_match_without_build_placeholder():
    """Patterns without %B match but never report a build number."""
    matcher = compile_pattern("app", "%W")
    assert not matcher.has_build_number
    result = matcher.match("app-anything")
    assert result.matched
    assert result.build_text is None
    # %W is greedy and may be empty
    assert matcher.matches("app-")


def test_unmatched_result():
    matcher = compile_pattern("app", "%W-%B")
    assert matcher.match("other-1") == MatchResult(matched=False)


def test_expand_placeholders_is_single_pass():
    """Replacement text is never scanned for further placeholders."""
    expanded = expand_placeholders("%B%W")
    assert expanded == "(?P<buildnum>[0-9]+)(.*)"
    assert expand_placeholders("plain") == "plain"


def test_duplicate_build_placeholder_fails():
    """Two %B groups cannot share a name, so compilation fails."""
    with pytest.raises(PatternCompileError) as excinfo:
        compile_pattern("app", "%B-%B")

    error = excinfo.value
    assert error.template == "%B-%B"
    assert "%B-%B" in str(error)
    assert error.expression is not None
    assert error.details


def test_compile_returns_matcher():
    assert isinstance(compile_pattern("app", "0.1.%W-%B"), Matcher)
