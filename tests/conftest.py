from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import platformdirs
import pytest

_NETWORK_BLOCK_MSG = (
    "AWS access is blocked during tests. Inject a mocked client into S3Storage."
)

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _block_boto3_client(*_args, **_kwargs):
    """
    Prevent real boto3 clients from being created during tests.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG`.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point configuration lookups at a temporary directory and clear s3repo environment variables.

    Patches platformdirs.user_config_dir and s3repo.config.CONFIG_DIR/CONFIG_FILE so no real
    user configuration is read, and removes S3REPO_* variables that would change defaults.
    """
    base = tmp_path_factory.mktemp("s3repo")
    config_dir = base / "config"
    config_dir.mkdir(parents=True, exist_ok=True)

    for name in ("S3REPO_LOG_LEVEL", "S3REPO_REGION", "S3REPO_BUCKET"):
        monkeypatch.delenv(name, raising=False)

    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )

    import s3repo.config as config

    monkeypatch.setattr(config, "CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(
        config, "CONFIG_FILE", str(Path(config_dir) / config.CONFIG_FILE_NAME)
    )


@pytest.fixture(autouse=True)
def _block_aws(monkeypatch):
    """Replace boto3.client as seen by s3repo.storage with a blocking callable."""
    import s3repo.storage as storage

    monkeypatch.setattr(storage.boto3, "client", _block_boto3_client)


@pytest.fixture
def make_candidates():
    """
    Build CandidateKey lists from key names.

    Keys get increasing timestamps one minute apart, in the given order, unless
    explicit (key, minutes) tuples are passed.
    """
    from s3repo.selector import CandidateKey

    def _make(*entries):
        candidates = []
        for index, entry in enumerate(entries):
            if isinstance(entry, tuple):
                key, minutes = entry
            else:
                key, minutes = entry, index
            last_modified = BASE_TIME + timedelta(minutes=minutes)
            candidates.append(CandidateKey(key=key, last_modified=last_modified))
        return candidates

    return _make


@pytest.fixture
def mock_s3_client():
    """
    Provide a MagicMock standing in for a boto3 S3 client.

    `set_pages(*pages)` configures the list_objects_v2 paginator with pages of
    (key, minutes) tuples.
    """
    client = MagicMock()

    def set_pages(*pages):
        rendered = []
        for page in pages:
            contents = [
                {"Key": key, "LastModified": BASE_TIME + timedelta(minutes=minutes)}
                for key, minutes in page
            ]
            rendered.append({"Contents": contents} if contents else {})
        client.get_paginator.return_value.paginate.return_value = rendered

    client.set_pages = set_pages
    set_pages()
    return client
