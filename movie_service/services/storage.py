"""Cover image storage on S3."""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from movie_service.services.errors import ObjectStoreError, UploadError

logger = logging.getLogger(__name__)

S3_KEY_PREFIX = "images"
_WAIT_DELAY_SECONDS = 5


class CoverImageStore:
    """Upload and delete cover images under the images/ prefix of one bucket."""

    def __init__(
        self,
        client: Any,
        *,
        bucket: str | None,
        region: str,
        wait_seconds: int = 60,
    ) -> None:
        self._client = client
        self.bucket = bucket
        self.region = region
        self.wait_seconds = wait_seconds

    def object_key(self, key: str) -> str:
        return f"{S3_KEY_PREFIX}/{key}"

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{self.object_key(key)}"

    def upload(self, body: bytes, key: str, content_type: str | None = None) -> str:
        """Write the object, wait until it is visible and return its public URL."""

        if not self.bucket:
            raise UploadError("BUCKET_NAME is not configured")
        s3_key = self.object_key(key)
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": s3_key, "Body": body}
        if content_type:
            params["ContentType"] = content_type
        try:
            self._client.put_object(**params)
            waiter = self._client.get_waiter("object_exists")
            waiter.wait(
                Bucket=self.bucket,
                Key=s3_key,
                WaiterConfig={
                    "Delay": _WAIT_DELAY_SECONDS,
                    "MaxAttempts": max(1, self.wait_seconds // _WAIT_DELAY_SECONDS),
                },
            )
        except (BotoCoreError, ClientError, WaiterError) as exc:
            logger.error("Cover upload failed for %s: %s", s3_key, exc)
            raise UploadError(f"cover upload failed: {exc}") from exc

        url = self.public_url(key)
        logger.info("Uploaded cover image %s", s3_key)
        return url

    def delete(self, key: str) -> None:
        if not self.bucket:
            raise ObjectStoreError("BUCKET_NAME is not configured")
        s3_key = self.object_key(key)
        try:
            self._client.delete_object(Bucket=self.bucket, Key=s3_key)
        except (BotoCoreError, ClientError) as exc:
            raise ObjectStoreError(f"cover delete failed: {exc}") from exc
        logger.info("Deleted cover image %s", s3_key)

    @staticmethod
    def key_from_url(url: str) -> str:
        return url.rsplit("/", 1)[-1]
