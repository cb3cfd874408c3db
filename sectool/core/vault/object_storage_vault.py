"""
Object Storage Vault
====================

VaultStore backend that keeps the same single encrypted blob as the file
vault, stored as an object in an S3-compatible bucket.

Credentials are resolved via boto3's standard credential chain; region and
endpoint come from configuration. A missing object is an empty vault.
"""

from __future__ import annotations

from typing import Any, Optional

from sectool.core.errors import VaultUnavailable
from sectool.core.vault.base import EncryptedBlobVaultStore, backup_name
from sectool.security.constants import DEFAULT_OBJECT_NAME

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def _error_code(exc: Exception) -> str:
    response = getattr(exc, "response", None) or {}
    return str(response.get("Error", {}).get("Code", ""))


class ObjectStorageVaultStore(EncryptedBlobVaultStore):
    """
    Vault persisted as one object in a bucket.

    Usage:
        vault = ObjectStorageVaultStore(
            bucket="secrets", key="master-key",
            region="eu-west-1", endpoint="https://s3.example.com",
        )
    """

    def __init__(
        self,
        bucket: str,
        key: str | bytes,
        *,
        region: str = "",
        endpoint: str = "",
        object_name: str = DEFAULT_OBJECT_NAME,
        client: Optional[Any] = None,
    ) -> None:
        super().__init__(key)
        self._bucket = bucket
        self._region = region
        self._endpoint = endpoint
        self._object_name = object_name
        self._client_obj = client

    def _client(self) -> Any:
        if self._client_obj is None:
            import boto3

            kwargs = {}
            if self._region:
                kwargs["region_name"] = self._region
            if self._endpoint:
                kwargs["endpoint_url"] = self._endpoint
            self._client_obj = boto3.client("s3", **kwargs)
        return self._client_obj

    def _read_blob(self) -> Optional[bytes]:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            output = self._client().get_object(Bucket=self._bucket, Key=self._object_name)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return None
            raise VaultUnavailable(
                f"Cannot read s3://{self._bucket}/{self._object_name}"
            ) from e
        except BotoCoreError as e:
            raise VaultUnavailable(f"Object storage unavailable: {self._bucket}") from e
        body = output["Body"]
        try:
            return body.read()
        finally:
            body.close()

    def _write_blob(self, blob: bytes) -> None:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            self._client().put_object(Bucket=self._bucket, Key=self._object_name, Body=blob)
        except (BotoCoreError, ClientError) as e:
            raise VaultUnavailable(
                f"Cannot write s3://{self._bucket}/{self._object_name}"
            ) from e

    def _backup_blob(self) -> Optional[str]:
        blob = self._read_blob()
        if blob is None:
            return None
        from botocore.exceptions import BotoCoreError, ClientError

        target = backup_name(self._object_name)
        try:
            self._client().put_object(Bucket=self._bucket, Key=target, Body=blob)
        except (BotoCoreError, ClientError) as e:
            raise VaultUnavailable(f"Cannot back up vault object to {target}") from e
        return target

    def initialize(self) -> None:
        with self._lock:
            if self._read_blob() is None:
                self._write_blob(b"")

    def __repr__(self) -> str:
        return f"ObjectStorageVaultStore(bucket={self._bucket!r}, object={self._object_name!r})"
