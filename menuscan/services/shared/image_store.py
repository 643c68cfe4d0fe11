import logging
from typing import Optional
from urllib.parse import unquote, urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class ImageStore:
    """S3 bucket holding the uploaded menu photos.

    Photos are deleted right after analysis; deletion is best effort and a
    failure is logged, never raised.
    """

    def __init__(self, bucket: str, region: Optional[str] = None, client=None) -> None:
        self._bucket = bucket
        self._client = client or boto3.client("s3", region_name=region)

    @property
    def bucket(self) -> str:
        return self._bucket

    def key_from_url(self, url: str) -> Optional[str]:
        """Object key for a virtual-hosted (bucket.s3...) or path-style (s3.../bucket/key) URL."""
        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
        path = unquote(parsed.path or "").lstrip("/")
        if not path:
            return None
        if host.startswith(self._bucket.lower() + "."):
            return path
        prefix = self._bucket + "/"
        if path.startswith(prefix):
            return path[len(prefix):] or None
        return None

    def delete_image(self, url: str) -> bool:
        key = self.key_from_url(url)
        if not key:
            logger.warning("Image not deleted: URL does not belong to bucket %s", self._bucket)
            return False
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.warning("Failed to delete image %s: %s", key, e)
            return False
        logger.info("Image deleted after analysis: %s", key)
        return True
