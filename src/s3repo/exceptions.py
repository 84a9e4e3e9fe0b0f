"""
Custom exceptions for s3repo.

This module defines domain-specific exceptions that separate fatal errors
(invalid patterns, invalid configuration, storage failures) from the expected
"nothing to update" outcome.
"""


class S3RepoError(Exception):
    """
    Base exception for all s3repo errors.

    All custom exceptions in s3repo inherit from this class so callers can
    catch every application-specific error in one place.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(S3RepoError):
    """
    Exception raised when configuration is invalid or missing.

    This includes:
    - Missing service or bucket
    - Mutually exclusive options used together
    - Configuration file parsing errors
    """

    pass


class ConfigFileError(ConfigurationError):
    """Exception raised when the configuration file cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


class ConfigValidationError(ConfigurationError):
    """Exception raised when configuration validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field


# =============================================================================
# Pattern and Selection Errors
# =============================================================================


class PatternCompileError(S3RepoError):
    """
    Exception raised when a version pattern does not compile into a matcher.

    Attributes:
        template: The offending version pattern, as supplied by the user.
        expression: The regular expression generated from it, when available.
    """

    def __init__(
        self,
        message: str,
        template: str,
        expression: str | None = None,
        details: str | None = None,
    ) -> None:
        """
        Initialize the pattern exception.

        Args:
            message: The primary error message.
            template: The version pattern that failed to compile.
            expression: The generated regular expression.
            details: Optional additional context (usually the regex error).
        """
        super().__init__(message, details)
        self.template = template
        self.expression = expression


class NoArtifactsFoundError(S3RepoError):
    """
    Raised when a winner is required but the storage listing was empty.

    Selection itself reports this condition through
    ``SelectionOutcome.no_artifacts``; this exception is only raised by
    ``SelectionOutcome.require_winner()``.
    """

    def __init__(self, service: str | None = None, details: str | None = None):
        message = (
            f"No files found to update the service {service}"
            if service
            else "No artifacts found"
        )
        super().__init__(message, details)
        self.service = service


# =============================================================================
# Storage and Download Errors
# =============================================================================


class StorageError(S3RepoError):
    """
    Exception raised when the object store cannot be listed or read.

    Attributes:
        bucket: The bucket being accessed.
        key: The object key being read, if any.
    """

    def __init__(
        self,
        message: str,
        bucket: str | None = None,
        key: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.bucket = bucket
        self.key = key


class DownloadError(S3RepoError):
    """Exception raised when a selected artifact cannot be written locally."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.key = key


# =============================================================================
# File System Errors
# =============================================================================


class FileSystemError(S3RepoError):
    """
    Exception raised for file system operation errors.

    Attributes:
        path: The file path that caused the error.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


class PathValidationError(FileSystemError):
    """Exception raised when a path fails security validation."""

    pass
