# src/s3repo/cli.py

import argparse
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import List, Optional

from s3repo import log_utils
from s3repo.config import RepoConfig, build_config, load_config_file
from s3repo.constants import (
    COMMAND_LIST,
    COMMAND_UPDATE,
    DEFAULT_VERSION_PREFIX,
    MSG_NO_FILES_FOUND,
    MSG_PATTERN_ERROR,
)
from s3repo.download import ArtifactDownloader, store_download_name
from s3repo.exceptions import (
    ConfigurationError,
    DownloadError,
    FileSystemError,
    NoArtifactsFoundError,
    PatternCompileError,
    StorageError,
)
from s3repo.resolver import ArtifactRepository
from s3repo.storage import S3Storage


def get_s3repo_version() -> str:
    """
    Retrieve the installed s3repo package version.

    Returns:
        version (str): The installed version string, or "unknown" if it cannot be determined.
    """
    try:
        return version("s3repo")
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Options go before the command, e.g. ``s3repo -b builds -s api list``.
    Options left unset default to None so a config file can supply them.
    """
    parser = argparse.ArgumentParser(
        prog="s3repo",
        description=(
            "s3repo - resolve and fetch the current build of a service from S3"
        ),
    )
    parser.add_argument("-z", "--region", help="AWS region (default: us-east-1)")
    parser.add_argument("-b", "--bucket", help="bucket to query")
    parser.add_argument("-s", "--service", help="service component to update")
    parser.add_argument(
        "-r",
        "--prefix",
        help=(
            f"version prefix to match (default: {DEFAULT_VERSION_PREFIX}; "
            "DEPRECATED, ignored when used with -w)"
        ),
    )
    parser.add_argument("-w", "--pattern", help="version pattern to match")
    parser.add_argument("-d", "--destination", help="destination directory")

    name_group = parser.add_mutually_exclusive_group()
    name_group.add_argument(
        "-p",
        "--show-name",
        dest="show_name",
        action="store_true",
        help="display the name of the downloaded file",
    )
    name_group.add_argument(
        "-n",
        "--store-name",
        dest="store_name",
        metavar="FILE",
        help="store the name of the downloaded file in the specified location",
    )

    parser.add_argument(
        "-i",
        "--show-progress",
        dest="show_progress",
        action="store_true",
        help="display progress",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="verbose output"
    )
    parser.add_argument(
        "-l",
        "--log-dir",
        dest="log_dir",
        metavar="DIR",
        help="also write a rotating log file (s3repo.log) to DIR",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="read default options from a YAML file",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {get_s3repo_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="(list|update)")
    subparsers.required = True
    subparsers.add_parser(
        COMMAND_LIST,
        help="List compatible artifacts, marking the current one with '*'",
    )
    subparsers.add_parser(
        COMMAND_UPDATE,
        help="Download the current artifact to the destination directory",
    )
    return parser


def _run_list(repository: ArtifactRepository) -> None:
    for line in repository.list_artifacts():
        print(line)


def _run_update(config: RepoConfig, repository: ArtifactRepository) -> None:
    path = repository.update()
    if config.show_name:
        print(path)
    if config.store_name:
        store_download_name(path, config.store_name)
        log_utils.logger.debug(f"Stored download name in {config.store_name}")


def main(argv: Optional[List[str]] = None) -> None:
    # Logging is initialized by importing log_utils

    """
    Entry point for the s3repo command-line interface.

    Parses options, merges them with the optional config file, validates the
    result and runs `list` or `update`. Exits with status 1 on configuration,
    pattern, storage or download errors and when the bucket holds no artifact
    for the service; argparse exits with status 2 on usage errors.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        log_utils.set_log_level("DEBUG")

    try:
        config = build_config(args, load_config_file(args.config)).validate()
    except ConfigurationError as e:
        print(e)
        sys.exit(1)

    if config.verbose and not args.verbose:
        log_utils.set_log_level("DEBUG")

    if config.log_dir:
        try:
            log_utils.add_file_logging(
                Path(config.log_dir), "DEBUG" if config.verbose else "INFO"
            )
        except OSError as e:
            print(f"Could not enable file logging in {config.log_dir}: {e}")
            sys.exit(1)

    try:
        storage = S3Storage(config.bucket, region=config.region)
        downloader = None
        if config.command == COMMAND_UPDATE:
            downloader = ArtifactDownloader(
                config.destination,
                show_progress=config.show_progress,
                label=config.service,
            )
        repository = ArtifactRepository(config, storage, downloader)

        if config.command == COMMAND_LIST:
            _run_list(repository)
        else:
            _run_update(config, repository)
    except PatternCompileError as e:
        print(MSG_PATTERN_ERROR.format(error=e))
        sys.exit(1)
    except NoArtifactsFoundError:
        print(MSG_NO_FILES_FOUND.format(service=config.service))
        sys.exit(1)
    except (StorageError, DownloadError, FileSystemError) as e:
        log_utils.logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
