"""S3-compatible object store client.

boto3 is synchronous; every call is pushed to a worker thread so the
pipeline's event loop stays responsive.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from tubecast.config.schema import StorageConfig
from tubecast.storage.keys import (
    FEED_CACHE_CONTROL,
    MEDIA_CACHE_CONTROL,
    content_type_for,
)
from tubecast.storage.models import UploadedObject
from tubecast.utils.errors import UploadError

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class ObjectStore:
    """Uploads podcast assets to a bucket and builds their public URLs.

    Example:
        >>> store = ObjectStore(config.storage)
        >>> obj = await store.upload(Path("1-Intro.mp3"), "podcasts/demo/episodes/1-1-Intro.mp3")
        >>> obj.url
        'https://pub.example.dev/podcasts/demo/episodes/1-1-Intro.mp3'
    """

    def __init__(self, storage: StorageConfig, client: Any | None = None) -> None:
        """Initialize the store.

        Args:
            storage: Endpoint, bucket and credentials
            client: Pre-built S3 client (default: created with boto3)
        """
        self.bucket_name = storage.bucket_name
        self.public_base_url = storage.public_url.rstrip("/")

        if client is None:
            session = boto3.session.Session()
            client = session.client(
                "s3",
                region_name=storage.region,
                endpoint_url=storage.endpoint,
                aws_access_key_id=storage.access_key,
                aws_secret_access_key=storage.secret_key,
            )
        self.client = client

    def public_url(self, key: str) -> str:
        """Public URL of ``key``; path segments are percent-encoded."""
        return f"{self.public_base_url}/{quote(key)}"

    async def upload(
        self,
        local_path: Path,
        key: str,
        content_type: str | None = None,
    ) -> UploadedObject:
        """Upload a local file as a long-cached media object.

        Args:
            local_path: File to upload
            key: Destination object key
            content_type: MIME type (default: derived from the file extension)

        Raises:
            UploadError: If the file cannot be read or the store rejects it
        """
        mime_type = content_type or content_type_for(local_path.name)
        extra_args = {"ContentType": mime_type, "CacheControl": MEDIA_CACHE_CONTROL}

        try:
            size = local_path.stat().st_size
            await asyncio.to_thread(
                self.client.upload_file,
                str(local_path),
                self.bucket_name,
                key,
                ExtraArgs=extra_args,
            )
        except (ClientError, BotoCoreError, OSError) as e:
            raise UploadError(
                f"Failed to upload {local_path.name} to {key}: {e}",
                key=key,
                bucket=self.bucket_name,
            ) from e

        logger.debug("Uploaded %s (%d bytes) to %s", local_path.name, size, key)
        return UploadedObject(key=key, url=self.public_url(key), size=size)

    async def upload_feed_document(self, xml_text: str, key: str) -> UploadedObject:
        """Upload feed XML with a short cache lifetime.

        Raises:
            UploadError: If the store rejects the write
        """
        body = xml_text.encode("utf-8")
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type_for(key),
                CacheControl=FEED_CACHE_CONTROL,
            )
        except (ClientError, BotoCoreError) as e:
            raise UploadError(
                f"Failed to upload feed to {key}: {e}",
                key=key,
                bucket=self.bucket_name,
            ) from e

        logger.debug("Uploaded feed (%d bytes) to %s", len(body), key)
        return UploadedObject(key=key, url=self.public_url(key), size=len(body))

    async def exists(self, key: str) -> bool:
        """Check whether ``key`` is present in the bucket.

        Raises:
            UploadError: For failures other than "not found"
        """
        try:
            await asyncio.to_thread(self.client.head_object, Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if str(e.response.get("Error", {}).get("Code")) in NOT_FOUND_CODES:
                return False
            raise UploadError(
                f"Failed to check {key}: {e}", key=key, bucket=self.bucket_name
            ) from e
        except BotoCoreError as e:
            raise UploadError(
                f"Failed to check {key}: {e}", key=key, bucket=self.bucket_name
            ) from e
        return True
