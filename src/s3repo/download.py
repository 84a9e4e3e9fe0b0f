"""
Artifact Download for s3repo

Streams a selected object into the destination directory. Data is written to
a temporary file next to the target and moved into place only once the whole
body has been received, so an interrupted download never leaves a truncated
artifact behind.
"""

import os
import tempfile
import time
from typing import BinaryIO, Optional

from botocore.exceptions import BotoCoreError
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
)

from s3repo.constants import DEFAULT_CHUNK_SIZE, DIRECTORY_PERMISSIONS
from s3repo.exceptions import DownloadError, PathValidationError
from s3repo.log_utils import console, logger
from s3repo.storage import RemoteObject


def resolve_target_path(destination: str, key: str) -> str:
    """
    Return the local path for `key` inside `destination`.

    Keys containing '/' map to subdirectories. Keys that would resolve outside
    the destination directory are rejected.

    Raises:
        PathValidationError: If the key is empty, absolute or escapes the destination.
    """
    if not key or "\x00" in key or os.path.isabs(key):
        raise PathValidationError(f"Unsafe object key: {key!r}", path=key)

    base = os.path.realpath(destination)
    candidate = os.path.realpath(os.path.join(base, key))
    try:
        inside = os.path.commonpath([base, candidate]) == base
    except ValueError:
        inside = False
    if not inside or candidate == base:
        raise PathValidationError(
            f"Object key resolves outside {destination}: {key!r}", path=key
        )
    return candidate


def _make_progress() -> Progress:
    return Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        DownloadColumn(),
        console=console,
    )


class ArtifactDownloader:
    """
    Writes fetched artifacts into a destination directory.

    Attributes:
        destination: Directory receiving the artifact.
        show_progress: Whether to render a progress bar while copying.
        label: Progress bar description, usually the service name.
        chunk_size: Number of bytes read from the body per iteration.
    """

    def __init__(
        self,
        destination: str,
        show_progress: bool = False,
        label: Optional[str] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.destination = destination
        self.show_progress = show_progress
        self.label = label
        self.chunk_size = chunk_size

    def download(self, key: str, remote: RemoteObject) -> str:
        """
        Stream `remote` to `<destination>/<key>` and return the written path.

        The destination directory is created if needed. The body is always
        closed; the temporary file is removed if anything fails.

        Parameters:
            key (str): Object key, used as the relative file name.
            remote (RemoteObject): Opened object body and its size.

        Returns:
            str: Path of the downloaded file.

        Raises:
            PathValidationError: If the key is not a safe relative path.
            DownloadError: If the directory, temporary file or copy fails.
        """
        try:
            target_path = resolve_target_path(self.destination, key)
            target_dir = os.path.dirname(target_path)
            try:
                os.makedirs(target_dir, mode=DIRECTORY_PERMISSIONS, exist_ok=True)
            except OSError as e:
                raise DownloadError(
                    f"Could not create destination directory {target_dir}",
                    key=key,
                    details=str(e),
                ) from e

            start_time = time.time()
            written = self._write_atomically(target_path, key, remote)
        finally:
            remote.body.close()

        elapsed = time.time() - start_time
        logger.debug(f"Download elapsed time: {elapsed:.2f}s for {key}")
        logger.info(f"Downloaded: {key} ({written} bytes)")
        return os.path.join(self.destination, key)

    def _write_atomically(
        self, target_path: str, key: str, remote: RemoteObject
    ) -> int:
        try:
            temp_fd, temp_path = tempfile.mkstemp(
                dir=os.path.dirname(target_path), prefix="tmp-", suffix=".part"
            )
        except OSError as e:
            raise DownloadError(
                f"Could not create temporary file for {target_path}",
                key=key,
                details=str(e),
            ) from e

        try:
            with os.fdopen(temp_fd, "wb") as temp_f:
                written = self._copy(remote, temp_f)
            os.replace(temp_path, target_path)
        except (OSError, BotoCoreError) as e:
            raise DownloadError(
                f"Could not write {target_path}", key=key, details=str(e)
            ) from e
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError as e_rm:
                    logger.debug(f"Error removing temp file {temp_path}: {e_rm}")

        if remote.content_length is not None and written != remote.content_length:
            logger.warning(
                f"Size mismatch for {key}: expected {remote.content_length} bytes, got {written}"
            )
        return written

    def _copy(self, remote: RemoteObject, out: BinaryIO) -> int:
        if not self.show_progress:
            return self._copy_chunks(remote.body, out)

        with _make_progress() as progress:
            task_id = progress.add_task(
                self.label or "download", total=remote.content_length
            )
            return self._copy_chunks(
                remote.body, out, lambda n: progress.advance(task_id, n)
            )

    def _copy_chunks(self, body, out: BinaryIO, on_chunk=None) -> int:
        written = 0
        for chunk in iter(lambda: body.read(self.chunk_size), b""):
            out.write(chunk)
            written += len(chunk)
            if on_chunk is not None:
                on_chunk(len(chunk))
        return written


def store_download_name(path: str, target: str) -> None:
    """
    Write the downloaded file path to `target`, replacing its contents.

    Raises:
        DownloadError: If the file cannot be written.
    """
    try:
        with open(target, "w", encoding="utf-8") as f:
            f.write(path)
    except OSError as e:
        raise DownloadError(
            f"Could not store download name in {target}", details=str(e)
        ) from e
