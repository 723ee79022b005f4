"""
Pokédex API: S3 Object Storage
===============================

What:  ObjectStorage implementation backed by Amazon S3 (or any
       S3-compatible endpoint) through aioboto3.
How:   One aioboto3 client is opened in the application lifespan and reused
       by every request. Uploads are retried with tenacity on transient
       connection failures; everything else becomes a StorageError.
Who:   Created by `S3ObjectStorage.from_settings()` in main.lifespan and
       injected into routes via `get_object_storage`.

Retry policy:
    Retried:     EndpointConnectionError, ConnectionClosedError,
                 ConnectTimeoutError, ReadTimeoutError
    Not retried: ClientError (AccessDenied, NoSuchBucket, ...) since the
                 same request would fail the same way.
    Backoff:     exponential with jitter, STORAGE_RETRY_* settings
"""

import logging
import time
from contextlib import AsyncExitStack
from typing import Any, Optional

import aioboto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from pokedex.config import Settings, settings
from pokedex.exceptions import StorageError
from pokedex.services.storage_base import ObjectStorage

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ConnectTimeoutError,
    ReadTimeoutError,
)


class S3ObjectStorage(ObjectStorage):
    """
    Stores Pokémon images in an S3 bucket.

    Lifecycle:
        storage = S3ObjectStorage.from_settings(settings)
        await storage.start()     # lifespan startup
        url = await storage.upload_file(path, key, "image/png")
        await storage.close()     # lifespan shutdown
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
    ):
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self._session = aioboto3.Session()
        self._exit_stack: Optional[AsyncExitStack] = None
        self._client: Any = None

    @classmethod
    def from_settings(cls, config: Settings) -> "S3ObjectStorage":
        return cls(
            bucket=config.s3_bucket,
            region=config.aws_region,
            endpoint_url=config.s3_endpoint_url,
            public_base_url=config.s3_public_base_url,
        )

    async def start(self) -> None:
        """Open the shared S3 client."""
        if self._client is not None:
            return
        self._exit_stack = AsyncExitStack()
        self._client = await self._exit_stack.enter_async_context(
            self._session.client(
                "s3",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
            )
        )
        logger.info(
            "S3ObjectStorage started: bucket=%s region=%s endpoint=%s",
            self.bucket or "<unset>",
            self.region,
            self.endpoint_url or "aws",
        )

    async def close(self) -> None:
        """Close the shared S3 client."""
        if self._exit_stack is not None:
            await self._exit_stack.aclose()
        self._exit_stack = None
        self._client = None

    def _require_client(self) -> Any:
        if self._client is None or not self.bucket:
            raise StorageError(
                message="Image storage is not configured.",
                context={"bucket": self.bucket, "started": self._client is not None},
            )
        return self._client

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def upload_file(self, path: str, key: str, content_type: str) -> str:
        """
        Upload a local file and return its public URL.

        Raises:
            StorageError: not configured, rejected by S3, or still failing
                          after all retry attempts.
        """
        client = self._require_client()
        start_time = time.perf_counter()

        try:
            await self._upload_with_retry(client, path, key, content_type)
        except (BotoCoreError, ClientError, OSError) as e:
            logger.error(
                "S3 upload failed for key=%s bucket=%s: %s",
                key,
                self.bucket,
                str(e),
            )
            raise StorageError(
                context={"key": key, "bucket": self.bucket, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info("Uploaded %s to bucket %s in %.0fms", key, self.bucket, duration_ms)
        return self.public_url(key)

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(settings.storage_retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.storage_retry_min_wait,
            max=settings.storage_retry_max_wait,
            jitter=settings.storage_retry_jitter,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _upload_with_retry(
        self, client: Any, path: str, key: str, content_type: str
    ) -> None:
        await client.upload_file(
            path,
            self.bucket,
            key,
            ExtraArgs={"ContentType": content_type},
        )

    async def delete_object(self, key: str) -> None:
        client = self._require_client()
        try:
            await client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 delete failed for key=%s: %s", key, str(e))
            raise StorageError(
                message="Could not remove the stored image.",
                context={"key": key, "error_type": type(e).__name__},
            ) from e
        logger.info("Deleted %s from bucket %s", key, self.bucket)

    async def health_check(self) -> bool:
        """HEAD the bucket: proves connectivity, credentials and bucket existence."""
        try:
            client = self._require_client()
            await client.head_bucket(Bucket=self.bucket)
            return True
        except (StorageError, BotoCoreError, ClientError) as e:
            logger.warning("S3 health check failed: %s", str(e))
            return False
