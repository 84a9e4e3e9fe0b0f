"""
Version Pattern Compilation for s3repo

Turns a human-authored version pattern such as ``%V.%S%G-%B`` into an anchored
regular expression. The service name and pattern are escaped as a literal
first, so only the placeholder tokens below keep a variable meaning:

    %V  single non-negative integer version
    %S  alphanumeric subversion, dot and comma allowed
    %G  optional git distance suffix (-<n>-g<hex>)
    %B  build sequence number (named group ``buildnum``)
    %W  any text
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern

from s3repo.constants import (
    BUILD_NUMBER_GROUP,
    PATTERN_PLACEHOLDERS,
    SERVICE_SEPARATOR,
)
from s3repo.exceptions import PatternCompileError

# re.escape leaves "%" and ASCII letters alone, so placeholder tokens survive
# escaping unchanged and can be located in the escaped text.
PLACEHOLDER_RX = re.compile(
    "|".join(re.escape(token) for token in PATTERN_PLACEHOLDERS)
)


@dataclass(frozen=True)
class MatchResult:
    """Outcome of testing one basename against a compiled pattern."""

    matched: bool
    """Whether the whole basename conforms to the pattern"""

    build_text: Optional[str] = None
    """Raw text captured by %B; None when unmatched or the pattern has no %B"""


@dataclass(frozen=True)
class Matcher:
    """A compiled, fully anchored version pattern."""

    template: str
    """The version pattern as written by the user"""

    regex: Pattern[str]
    """Compiled expression for ``<service>-<template>``"""

    @property
    def pattern(self) -> str:
        """The generated regular expression text."""
        return self.regex.pattern

    @property
    def has_build_number(self) -> bool:
        return BUILD_NUMBER_GROUP in self.regex.groupindex

    def matches(self, basename: str) -> bool:
        return self.regex.fullmatch(basename) is not None

    def match(self, basename: str) -> MatchResult:
        """
        Test a basename and extract its build number text.

        Parameters:
            basename (str): Candidate key with its extension already stripped.

        Returns:
            MatchResult: `matched` is False when the basename does not conform.
            When it does, `build_text` holds the %B capture ("" if the group
            captured nothing) or None when the pattern has no %B.
        """
        found = self.regex.fullmatch(basename)
        if found is None:
            return MatchResult(matched=False)
        if not self.has_build_number:
            return MatchResult(matched=True)
        return MatchResult(
            matched=True, build_text=found.group(BUILD_NUMBER_GROUP) or ""
        )

    def build_number(self, basename: str) -> Optional[str]:
        """Return the %B capture for a matching basename, or None."""
        return self.match(basename).build_text


def expand_placeholders(escaped: str) -> str:
    """Replace every placeholder token in already-escaped text, in a single pass."""
    return PLACEHOLDER_RX.sub(lambda m: PATTERN_PLACEHOLDERS[m.group(0)], escaped)


def compile_pattern(service: str, template: str) -> Matcher:
    """
    Compile a version pattern for a service into a Matcher.

    The literal ``service + "-" + template`` is escaped, placeholder tokens are
    expanded, and the result is anchored to the whole basename.

    Parameters:
        service (str): Service name; becomes the literal key prefix.
        template (str): Version pattern containing placeholder tokens.

    Returns:
        Matcher: The compiled matcher.

    Raises:
        PatternCompileError: If the expanded expression is not a valid regular
            expression (for example when %B appears twice).
    """
    escaped = re.escape(service + SERVICE_SEPARATOR + template)
    expression = "^" + expand_placeholders(escaped) + "$"
    try:
        regex = re.compile(expression)
    except re.error as e:
        raise PatternCompileError(
            f"Invalid version pattern '{template}'",
            template=template,
            expression=expression,
            details=str(e),
        ) from e
    return Matcher(template=template, regex=regex)
