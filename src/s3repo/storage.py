"""
S3 Storage Access for s3repo

Thin adapter over a boto3 S3 client providing the two capabilities the
selector needs: listing keys (with last-modified timestamps) under a prefix,
and fetching one object as a byte stream.
"""

from dataclasses import dataclass
from typing import Any, BinaryIO, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from s3repo.constants import DEFAULT_REGION
from s3repo.exceptions import StorageError
from s3repo.log_utils import logger
from s3repo.selector import CandidateKey


@dataclass
class RemoteObject:
    """An object body opened for reading."""

    body: BinaryIO
    """Streaming body; call close() when finished"""

    content_length: Optional[int] = None
    """Size in bytes as reported by the store"""


class S3Storage:
    """
    Read-only access to one S3 bucket.

    Credentials and endpoint resolution are left to boto3's default chain.
    A pre-built client may be injected (tests, custom sessions).
    """

    def __init__(
        self,
        bucket: str,
        region: str = DEFAULT_REGION,
        client: Optional[Any] = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        self.client = client or boto3.client("s3", region_name=region)

    def list_keys(self, prefix: str) -> List[CandidateKey]:
        """
        List every object whose key starts with `prefix`.

        Pages of the `list_objects_v2` paginator are walked in order, so the
        result preserves the store's listing order.

        Parameters:
            prefix (str): Literal key prefix, typically '<service>-'.

        Returns:
            List[CandidateKey]: Keys with their last-modified timestamps.

        Raises:
            StorageError: If the listing request fails.
        """
        candidates: List[CandidateKey] = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    candidates.append(
                        CandidateKey(key=obj["Key"], last_modified=obj["LastModified"])
                    )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(
                f"Failed to list bucket {self.bucket}",
                bucket=self.bucket,
                details=str(e),
            ) from e

        logger.debug(
            f"Listed {len(candidates)} object(s) in {self.bucket} with prefix '{prefix}'"
        )
        return candidates

    def fetch(self, key: str) -> RemoteObject:
        """
        Open an object for streaming.

        Raises:
            StorageError: If the object cannot be retrieved.
        """
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(
                f"Failed to fetch {key} from bucket {self.bucket}",
                bucket=self.bucket,
                key=key,
                details=str(e),
            ) from e
        return RemoteObject(
            body=response["Body"], content_length=response.get("ContentLength")
        )
