"""
Constants and configuration values for s3repo.

This module contains the placeholder table, defaults, file names and logging
settings used throughout the application.
"""

# Version pattern placeholders and the expressions they expand to.
#   %V - single decimal integer version
#   %S - alphanumeric (+period, comma) subversion
#   %G - optional git commit distance (-{NUMBER}-g{HASH})
#   %B - number in the build sequence
#   %W - any text
BUILD_NUMBER_GROUP = "buildnum"
PATTERN_PLACEHOLDERS = {
    "%V": r"([0-9]+)",
    "%S": r"([0-9a-zA-Z.,]+)",
    "%G": r"(-[0-9]+-g[0-9a-z]+)?",
    "%B": rf"(?P<{BUILD_NUMBER_GROUP}>[0-9]+)",
    "%W": r"(.*)",
}

# Separator between the service name and the rest of an artifact key
SERVICE_SEPARATOR = "-"

# Defaults matching the historical command-line behaviour
DEFAULT_REGION = "us-east-1"
DEFAULT_VERSION_PREFIX = "0.1."
PREFIX_PATTERN_SUFFIX = ".%W-%B"

# Commands
COMMAND_LIST = "list"
COMMAND_UPDATE = "update"
COMMANDS = (COMMAND_LIST, COMMAND_UPDATE)

# Listing markers
WINNER_MARKER = "*"
CANDIDATE_MARKER = " "

# Download configuration defaults
DEFAULT_CHUNK_SIZE = 8192
DIRECTORY_PERMISSIONS = 0o755

# Configuration file names
APP_NAME = "s3repo"
CONFIG_FILE_NAME = "s3repo.yaml"

# Logging configuration
LOGGER_NAME = "s3repo"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_NAME = "s3repo.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Environment variable names
LOG_LEVEL_ENV_VAR = "S3REPO_LOG_LEVEL"
REGION_ENV_VAR = "S3REPO_REGION"
BUCKET_ENV_VAR = "S3REPO_BUCKET"

# Selection events reported to the observability sink
EVENT_CANDIDATE_CHECKED = "candidate_checked"
EVENT_BUILD_NUMBER_PARSED = "build_number_parsed"
EVENT_UNPARSABLE_BUILD_NUMBER = "unparsable_build_number"
EVENT_RECENCY_FALLBACK = "recency_fallback"
EVENT_WINNER_SELECTED = "winner_selected"

# User-facing messages
MSG_NO_FILES_FOUND = "No files found to update the service {service}"
MSG_PATTERN_ERROR = "Error parsing version pattern: {error}"
