"""Object storage clients for presigned direct uploads (S3 and in-memory)."""

import os
import re
import time
import uuid
import logging
from dataclasses import dataclass
from typing import Protocol
import boto3
from fastapi import HTTPException, status
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Configure logging
logger = logging.getLogger(__name__)

S3_BUCKET = os.getenv("S3_BUCKET")
AWS_REGION = os.getenv("AWS_REGION", "ap-south-1")

UPLOAD_URL_EXPIRES_SECONDS = 300
UPLOAD_PREFIX = "uploads"

if not S3_BUCKET:
    logger.warning("S3_BUCKET not set in .env, upload URLs will fail until configured")


class StorageClient(Protocol):
    """Operations the upload broker needs from object storage."""

    def presign_put(self, key: str, content_type: str, expires_in: int = UPLOAD_URL_EXPIRES_SECONDS) -> str:
        ...

    def public_url(self, key: str) -> str:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"

    def presign_put(self, key: str, content_type: str, expires_in: int = UPLOAD_URL_EXPIRES_SECONDS) -> str:
        return f"{self.base_url}/{key}?op=put&content_type={content_type}&expires={expires_in}"

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/{key}"


@dataclass
class S3StorageClient:
    """AWS S3 client. Credentials come from the standard boto3 chain."""

    bucket: str
    region: str

    def __post_init__(self):
        self._client = boto3.client("s3", region_name=self.region)

    def presign_put(self, key: str, content_type: str, expires_in: int = UPLOAD_URL_EXPIRES_SECONDS) -> str:
        return self._client.generate_presigned_url(
            ClientMethod="put_object",
            Params={
                "Bucket": self.bucket,
                "Key": key,
                "ContentType": content_type,
                "ACL": "public-read",
            },
            ExpiresIn=expires_in,
        )

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"


def sanitize_filename(filename: str) -> str:
    """Replace whitespace with underscores and drop anything outside [A-Za-z0-9._-]."""
    name = re.sub(r"\s+", "_", filename.strip())
    name = re.sub(r"[^A-Za-z0-9._-]", "", name)
    return name.lstrip(".") or "file"


def build_object_key(filename: str) -> str:
    """Return a random object key: uploads/<epoch millis>-<uuid4>-<filename>."""
    millis = int(time.time() * 1000)
    return f"{UPLOAD_PREFIX}/{millis}-{uuid.uuid4()}-{sanitize_filename(filename)}"


_storage_client = None


def get_storage_client() -> StorageClient:
    """
    Dependency returning a shared S3 client.

    Raises:
        HTTPException: 500 if no bucket is configured
    """
    global _storage_client
    if _storage_client:
        return _storage_client

    if not S3_BUCKET:
        logger.error("Upload URL requested but S3_BUCKET is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="storage_not_configured"
        )

    _storage_client = S3StorageClient(bucket=S3_BUCKET, region=AWS_REGION)
    return _storage_client
