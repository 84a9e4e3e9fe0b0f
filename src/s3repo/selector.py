"""
Artifact Selection for s3repo

Given a compiled version pattern and a storage listing, this module finds the
keys compatible with the pattern and picks the single artifact to install:

- the compatible key with the highest positive build number (first one wins
  on ties);
- otherwise the first compatible key without a build number;
- otherwise, when nothing usable matched, the most recently modified key of
  the whole listing.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional

from s3repo.constants import (
    EVENT_BUILD_NUMBER_PARSED,
    EVENT_CANDIDATE_CHECKED,
    EVENT_RECENCY_FALLBACK,
    EVENT_UNPARSABLE_BUILD_NUMBER,
    EVENT_WINNER_SELECTED,
)
from s3repo.exceptions import NoArtifactsFoundError
from s3repo.log_utils import EventSink
from s3repo.pattern import Matcher


@dataclass(frozen=True)
class CandidateKey:
    """An object in the bucket considered for selection."""

    key: str
    """The object key (e.g., 'app-0.1.4-12.zip')"""

    last_modified: datetime
    """When the object was last written"""


@dataclass
class SelectionOutcome:
    """Result of selecting an artifact from a storage listing."""

    compatible: List[CandidateKey] = field(default_factory=list)
    """Candidates whose basename matched the pattern, in listing order"""

    winner: Optional[CandidateKey] = None
    """The selected candidate, or None when the listing was empty"""

    winner_build: Optional[int] = None
    """Build number of the winner when it was chosen by build number"""

    used_fallback: bool = False
    """Whether the winner was chosen by recency instead of by pattern"""

    @property
    def compatible_keys(self) -> List[str]:
        return [candidate.key for candidate in self.compatible]

    @property
    def winner_key(self) -> Optional[str]:
        return self.winner.key if self.winner else None

    @property
    def no_artifacts(self) -> bool:
        """True when there was nothing to select from."""
        return self.winner is None

    def require_winner(self, service: Optional[str] = None) -> CandidateKey:
        """
        Return the winner, raising when the listing was empty.

        Raises:
            NoArtifactsFoundError: If no winner was selected.
        """
        if self.winner is None:
            raise NoArtifactsFoundError(service)
        return self.winner


def strip_extension(key: str) -> str:
    """
    Remove the final extension from a key.

    Only the suffix starting at the last dot of the last path segment is
    removed, so 'svc-1.2.3-7.tar.gz' becomes 'svc-1.2.3-7.tar'. Keys without a
    dot in their last segment are returned unchanged.
    """
    for i in range(len(key) - 1, -1, -1):
        if key[i] == "/":
            break
        if key[i] == ".":
            return key[:i]
    return key


def parse_build_number(text: str) -> Optional[int]:
    """Parse build number text as a non-negative decimal integer, or return None."""
    if not text or not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def _emit(on_event: Optional[EventSink], event: str, **fields: Any) -> None:
    if on_event is not None:
        on_event(event, fields)


def select_most_recent(candidates: Iterable[CandidateKey]) -> Optional[CandidateKey]:
    """Return the candidate modified last; the earliest listed wins ties."""
    most_recent: Optional[CandidateKey] = None
    for candidate in candidates:
        if most_recent is None or candidate.last_modified > most_recent.last_modified:
            most_recent = candidate
    return most_recent


def select_artifact(
    matcher: Matcher,
    candidates: Iterable[CandidateKey],
    on_event: Optional[EventSink] = None,
) -> SelectionOutcome:
    """
    Select the current artifact from a storage listing.

    Every candidate's basename (key without its final extension) is tested
    against the matcher. Matching candidates form the compatible set. Among
    them the winner is the one whose build number strictly exceeds a running
    maximum that starts at 0, so build 0 never wins by itself. A candidate
    without a build number is only adopted while no winner exists, so the
    first such match wins. Candidates whose build text is not a non-negative
    integer stay compatible but are never selected.

    If no compatible candidate could be selected (including a listing whose
    only builds are 0), the most recently modified key of the full listing
    wins, regardless of the pattern.

    Parameters:
        matcher (Matcher): Compiled version pattern.
        candidates (Iterable[CandidateKey]): Storage listing in listing order.
        on_event (Optional[EventSink]): Observability sink receiving selection events.

    Returns:
        SelectionOutcome: Compatible candidates and the winner. An empty listing
        yields an outcome with `no_artifacts` set; it is not an error.
    """
    listing = list(candidates)
    outcome = SelectionOutcome()
    max_build = 0

    for candidate in listing:
        basename = strip_extension(candidate.key)
        result = matcher.match(basename)
        _emit(
            on_event,
            EVENT_CANDIDATE_CHECKED,
            key=candidate.key,
            basename=basename,
            matched=result.matched,
        )
        if not result.matched:
            continue

        outcome.compatible.append(candidate)

        if not result.build_text:
            if outcome.winner is None:
                outcome.winner = candidate
            continue

        build = parse_build_number(result.build_text)
        if build is None:
            _emit(
                on_event,
                EVENT_UNPARSABLE_BUILD_NUMBER,
                key=candidate.key,
                text=result.build_text,
            )
            continue

        _emit(on_event, EVENT_BUILD_NUMBER_PARSED, key=candidate.key, build=build)
        if build > max_build:
            max_build = build
            outcome.winner = candidate
            outcome.winner_build = build

    if outcome.winner is None:
        outcome.winner = select_most_recent(listing)
        if outcome.winner is not None:
            outcome.used_fallback = True
            _emit(on_event, EVENT_RECENCY_FALLBACK, key=outcome.winner.key)

    if outcome.winner is not None:
        _emit(
            on_event,
            EVENT_WINNER_SELECTED,
            key=outcome.winner.key,
            build=outcome.winner_build,
        )
    return outcome
