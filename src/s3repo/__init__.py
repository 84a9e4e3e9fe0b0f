"""
s3repo - resolve the current build of a service stored in an S3 bucket.

Core Components:
- pattern: version pattern compilation
- selector: candidate selection (build number, then recency)
- resolver: resolve() entry point and the ArtifactRepository facade
- storage: boto3-backed bucket access
- download: atomic artifact download
- config: validated run configuration
"""

from .exceptions import NoArtifactsFoundError, PatternCompileError, S3RepoError
from .pattern import Matcher, MatchResult, compile_pattern
from .resolver import ArtifactRepository, resolve
from .selector import CandidateKey, SelectionOutcome, select_artifact

__all__ = [
    # Core
    "compile_pattern",
    "select_artifact",
    "resolve",
    # Data model
    "CandidateKey",
    "Matcher",
    "MatchResult",
    "SelectionOutcome",
    # Facade
    "ArtifactRepository",
    # Errors
    "S3RepoError",
    "PatternCompileError",
    "NoArtifactsFoundError",
]
