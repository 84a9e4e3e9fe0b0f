"""
Artifact Resolution for s3repo

`resolve()` is the pure entry point: compile a version pattern for a service
and select the current artifact from a listing. `ArtifactRepository` wires it
to a bucket and a downloader for the `list` and `update` commands.
"""

from typing import TYPE_CHECKING, Iterable, List, Optional

from s3repo.constants import (
    CANDIDATE_MARKER,
    DEFAULT_VERSION_PREFIX,
    PREFIX_PATTERN_SUFFIX,
    SERVICE_SEPARATOR,
    WINNER_MARKER,
)
from s3repo.log_utils import EventSink, log_event, logger
from s3repo.pattern import compile_pattern
from s3repo.selector import CandidateKey, SelectionOutcome, select_artifact

if TYPE_CHECKING:
    from s3repo.config import RepoConfig
    from s3repo.download import ArtifactDownloader
    from s3repo.storage import S3Storage


def key_prefix(service: str) -> str:
    """Return the literal listing prefix for a service."""
    return service + SERVICE_SEPARATOR


def effective_pattern(
    pattern: Optional[str], prefix: Optional[str] = DEFAULT_VERSION_PREFIX
) -> str:
    """
    Return the version pattern to use.

    An explicit pattern always wins. Otherwise the deprecated version prefix is
    turned into ``<prefix>.%W-%B``; a trailing dot on the prefix is not doubled,
    so the default "0.1." becomes "0.1.%W-%B".
    """
    if pattern:
        return pattern
    if prefix is None:
        prefix = DEFAULT_VERSION_PREFIX
    # Departs from the historical "0.1..%W-%B", whose doubled dot never matched
    # a 0.1.x build.
    if prefix.endswith("."):
        prefix = prefix[:-1]
    return prefix + PREFIX_PATTERN_SUFFIX


def resolve(
    service: str,
    template: str,
    candidates: Iterable[CandidateKey],
    on_event: Optional[EventSink] = None,
) -> SelectionOutcome:
    """
    Compile `template` for `service` and select from `candidates`.

    Raises:
        PatternCompileError: If the template does not compile.
    """
    matcher = compile_pattern(service, template)
    return select_artifact(matcher, candidates, on_event=on_event)


def format_listing(outcome: SelectionOutcome) -> List[str]:
    """Render compatible keys in listing order, marking the winner with '*'."""
    return [
        f"{WINNER_MARKER if key == outcome.winner_key else CANDIDATE_MARKER}{key}"
        for key in outcome.compatible_keys
    ]


class ArtifactRepository:
    """
    Resolves and retrieves the current artifact of one service in one bucket.

    Attributes:
        config: Validated run configuration.
        storage: Bucket access (listing and fetching).
        downloader: Writer used by `update`; may be None for `list`.
        on_event: Observability sink passed to the selector.
    """

    def __init__(
        self,
        config: "RepoConfig",
        storage: "S3Storage",
        downloader: Optional["ArtifactDownloader"] = None,
        on_event: Optional[EventSink] = log_event,
    ) -> None:
        self.config = config
        self.storage = storage
        self.downloader = downloader
        self.on_event = on_event

    def resolve(self) -> SelectionOutcome:
        """List the service's keys and select the current artifact."""
        service = self.config.service
        template = self.config.version_pattern
        matcher = compile_pattern(service, template)
        prefix = key_prefix(service)

        logger.debug(
            f"Querying bucket {self.config.bucket} with prefix `{prefix}` and pattern `{matcher.pattern}`"
        )
        candidates = self.storage.list_keys(prefix)
        return select_artifact(matcher, candidates, on_event=self.on_event)

    def list_artifacts(self) -> List[str]:
        """
        Return the display lines for the `list` command.

        Raises:
            NoArtifactsFoundError: If the bucket holds nothing for the service.
        """
        outcome = self.resolve()
        outcome.require_winner(self.config.service)
        return format_listing(outcome)

    def update(self) -> str:
        """
        Download the current artifact and return its local path.

        Raises:
            NoArtifactsFoundError: If the bucket holds nothing for the service.
            StorageError: If the object cannot be fetched.
            DownloadError: If it cannot be written locally.
        """
        if self.downloader is None:
            raise ValueError("update requires a downloader")

        winner = self.resolve().require_winner(self.config.service)
        logger.debug(f"Fetching {winner.key} from {self.config.bucket}")
        remote = self.storage.fetch(winner.key)
        return self.downloader.download(winner.key, remote)
