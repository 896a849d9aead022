"""
Storage abstraction for challenge photos: Firebase Storage, S3-compatible
buckets and an in-memory test double.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Protocol

import boto3
from botocore.config import Config


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def presign_get(self, path: str, expires_in: int = 3600) -> str:
        ...

    def presign_put(self, path: str, expires_in: int = 3600) -> str:
        ...

    def get_bytes(self, path: str) -> bytes:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def reset(self) -> None:
        self.stored_objects.clear()

    def presign_get(self, path: str, expires_in: int = 3600) -> str:
        return f"{self.base_url}/{path}?op=get&expires={expires_in}"

    def presign_put(self, path: str, expires_in: int = 3600) -> str:
        return f"{self.base_url}/{path}?op=put&expires={expires_in}"

    def get_bytes(self, path: str) -> bytes:
        stored = self.stored_objects.get(path)
        if stored is None:
            raise FileNotFoundError(path)
        return stored


class FirebaseStorageClient:
    """Firebase Storage (Google Cloud Storage) bucket via firebase_admin."""

    def __init__(self, bucket_name: Optional[str] = None, bucket=None):
        if bucket is None:
            from firebase_admin import storage

            bucket = storage.bucket(bucket_name)
        self._bucket = bucket

    def _signed_url(self, path: str, method: str, expires_in: int, **kwargs) -> str:
        return self._bucket.blob(path).generate_signed_url(
            version="v4",
            expiration=timedelta(seconds=expires_in),
            method=method,
            **kwargs,
        )

    def presign_get(self, path: str, expires_in: int = 3600) -> str:
        return self._signed_url(path, "GET", expires_in)

    def presign_put(self, path: str, expires_in: int = 3600) -> str:
        return self._signed_url(
            path, "PUT", expires_in, content_type="application/octet-stream"
        )

    def get_bytes(self, path: str) -> bytes:
        from google.api_core import exceptions

        try:
            return self._bucket.blob(path).download_as_bytes()
        except exceptions.NotFound as e:
            raise FileNotFoundError(path) from e


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def presign_get(self, path: str, expires_in: int = 3600) -> str:
        return self._client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": path},
            ExpiresIn=expires_in,
        )

    def presign_put(self, path: str, expires_in: int = 3600) -> str:
        # We include a dummy content type so uploads work in browsers by default.
        return self._client.generate_presigned_url(
            ClientMethod="put_object",
            Params={
                "Bucket": self.bucket,
                "Key": path,
                "ContentType": "application/octet-stream",
            },
            ExpiresIn=expires_in,
        )

    def get_bytes(self, path: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=path)
        except self._client.exceptions.NoSuchKey as e:
            raise FileNotFoundError(path) from e
        return response["Body"].read()
