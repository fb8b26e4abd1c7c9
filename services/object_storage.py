"""Object storage for uploaded assets (product images, brand logos)."""
from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from services.errors import UploadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    url: str
    external_id: str  # needed later to delete the asset


class ObjectStorage(ABC):
    """Opaque upload/delete capability; both raise UploadError on failure."""

    @abstractmethod
    def upload(self, data: bytes, folder: str) -> UploadResult:
        ...

    @abstractmethod
    def delete(self, external_id: str) -> None:
        ...


class S3ObjectStorage(ObjectStorage):
    """S3 (or any S3-compatible endpoint) backed storage."""

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        timeout: float = 30,
        client=None,
    ):
        self.bucket = bucket
        self.region = region
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.s3_client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            config=Config(connect_timeout=timeout, read_timeout=timeout, retries={"max_attempts": 2}),
        )

    def _public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def upload(self, data: bytes, folder: str) -> UploadResult:
        key = f"{folder.strip('/')}/{uuid.uuid4().hex}"
        try:
            self.s3_client.put_object(Bucket=self.bucket, Key=key, Body=data)
        except (BotoCoreError, ClientError) as exc:
            raise UploadError(f"failed to upload {key}: {exc}") from exc
        logger.debug("uploaded %s (%d bytes)", key, len(data))
        return UploadResult(url=self._public_url(key), external_id=key)

    def delete(self, external_id: str) -> None:
        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=external_id)
        except (BotoCoreError, ClientError) as exc:
            raise UploadError(f"failed to delete {external_id}: {exc}") from exc
