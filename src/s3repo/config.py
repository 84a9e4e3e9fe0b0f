"""
Configuration for s3repo.

Command-line flags, an optional YAML file and a couple of environment
variables are merged into a single validated RepoConfig, which is what the
rest of the application consumes.
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

import platformdirs
import yaml

from s3repo.constants import (
    APP_NAME,
    BUCKET_ENV_VAR,
    COMMAND_UPDATE,
    COMMANDS,
    CONFIG_FILE_NAME,
    DEFAULT_REGION,
    DEFAULT_VERSION_PREFIX,
    REGION_ENV_VAR,
)
from s3repo.exceptions import ConfigFileError, ConfigValidationError
from s3repo.log_utils import logger
from s3repo.resolver import effective_pattern

CONFIG_DIR = platformdirs.user_config_dir(APP_NAME)
CONFIG_FILE = os.path.join(CONFIG_DIR, CONFIG_FILE_NAME)

# Settings that must hold text; YAML happily yields ints, lists or mappings.
TEXT_FIELDS = (
    "service",
    "bucket",
    "region",
    "prefix",
    "pattern",
    "destination",
    "store_name",
    "log_dir",
)
OPTIONAL_TEXT_FIELDS = frozenset({"pattern", "destination", "store_name", "log_dir"})


@dataclass
class RepoConfig:
    """Validated settings for one list or update run."""

    command: str
    """Either 'list' or 'update'"""

    service: str = ""
    """Service component whose artifacts are resolved"""

    bucket: str = ""
    """Bucket holding the artifacts"""

    region: str = DEFAULT_REGION
    """AWS region of the bucket"""

    prefix: str = DEFAULT_VERSION_PREFIX
    """Deprecated version prefix, used only when no pattern is given"""

    pattern: Optional[str] = None
    """Version pattern (see s3repo.pattern)"""

    destination: Optional[str] = None
    """Directory the winner is downloaded to"""

    show_name: bool = False
    """Print the downloaded file path"""

    show_progress: bool = False
    """Display a progress bar while downloading"""

    store_name: Optional[str] = None
    """File receiving the downloaded file path"""

    verbose: bool = False
    """Enable debug logging"""

    log_dir: Optional[str] = None
    """Directory for the rotating s3repo.log file; no file logging when unset"""

    @property
    def version_pattern(self) -> str:
        return effective_pattern(self.pattern, self.prefix)

    def validate(self) -> "RepoConfig":
        """
        Check the settings for consistency.

        Returns:
            RepoConfig: self, to allow chaining.

        Raises:
            ConfigValidationError: On a missing service or bucket, an unknown
                command, a non-string value for a text setting, `update`
                without a destination, or when both `show_name` and
                `store_name` are set.
        """
        if self.command not in COMMANDS:
            raise ConfigValidationError(
                f"Unknown command: {self.command}",
                field="command",
                details=f"expected one of {', '.join(COMMANDS)}",
            )
        for name in TEXT_FIELDS:
            value = getattr(self, name)
            if value is None and name in OPTIONAL_TEXT_FIELDS:
                continue
            if not isinstance(value, str):
                raise ConfigValidationError(
                    f"Invalid value for {name}: {value!r}",
                    field=name,
                    details=f"expected a string, got {type(value).__name__}",
                )
        if not self.service:
            raise ConfigValidationError("No service name provided", field="service")
        if not self.bucket:
            raise ConfigValidationError("No bucket provided", field="bucket")
        if self.store_name and self.show_name:
            raise ConfigValidationError(
                "Cannot use both -n and -p options at the same time",
                field="store_name",
            )
        if self.command == COMMAND_UPDATE and not self.destination:
            raise ConfigValidationError(
                "Destination file not provided", field="destination"
            )
        return self


# Keys a config file may set; the command always comes from the command line.
FILE_KEYS = frozenset(f.name for f in fields(RepoConfig)) - {"command"}


def load_config_file(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load default settings from a YAML file.

    Parameters:
        path (Optional[str]): Explicit file to read. When omitted, the
            platformdirs-managed CONFIG_FILE is used if it exists.

    Returns:
        Dict[str, Any]: Recognized settings. A missing default file yields an
        empty mapping; unknown keys are logged and dropped.

    Raises:
        ConfigFileError: If an explicit file is missing, the file cannot be
            read or parsed, or its top level is not a mapping.
    """
    config_path = path or CONFIG_FILE
    if not os.path.exists(config_path):
        if path:
            raise ConfigFileError("Configuration file not found", path=config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(
            f"Failed to load configuration from {config_path}",
            path=config_path,
            details=str(e),
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(
            f"Configuration in {config_path} must be a mapping",
            path=config_path,
        )

    unknown = sorted(str(k) for k in data if k not in FILE_KEYS)
    if unknown:
        logger.warning(
            f"Ignoring unknown configuration keys in {config_path}: {', '.join(unknown)}"
        )
    logger.debug(f"Loaded configuration from {config_path}")
    return {k: v for k, v in data.items() if k in FILE_KEYS}


def build_config(
    args: Any,
    file_defaults: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RepoConfig:
    """
    Merge parsed arguments, file defaults and environment into a RepoConfig.

    Precedence is command line, then config file, then environment (region and
    bucket only), then built-in defaults. The result is not validated; call
    `validate()` on it.

    Parameters:
        args: argparse.Namespace (or any object) with attributes named after
            RepoConfig fields; None or missing attributes mean "not given".
        file_defaults: Settings loaded from a config file.
        environ: Environment mapping, defaults to os.environ.
    """
    file_defaults = file_defaults or {}
    environ = os.environ if environ is None else environ
    env_defaults = {
        "region": environ.get(REGION_ENV_VAR),
        "bucket": environ.get(BUCKET_ENV_VAR),
    }

    values: Dict[str, Any] = {}
    for name in FILE_KEYS:
        given = getattr(args, name, None)
        if given is None or given is False:
            given = file_defaults.get(name)
        if given is None:
            given = env_defaults.get(name)
        if given is not None:
            values[name] = given

    for flag in ("show_name", "show_progress", "verbose"):
        if flag in values:
            values[flag] = bool(values[flag])

    return RepoConfig(command=getattr(args, "command", None) or "", **values)
