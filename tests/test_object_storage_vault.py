"""Tests for the bucket-backed vault, using an in-process fake client."""
import io

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from sectool.core.errors import VaultUnavailable
from sectool.core.vault import ObjectStorageVaultStore


class FakeS3:
    """Just enough of the S3 client API."""

    def __init__(self):
        self.objects = {}

    def get_object(self, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
            )
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}

    def put_object(self, Bucket, Key, Body):
        self.objects[(Bucket, Key)] = bytes(Body)
        return {}


class DeniedS3(FakeS3):

    def get_object(self, Bucket, Key):
        raise ClientError({"Error": {"Code": "AccessDenied"}}, "GetObject")


class UnreachableS3(FakeS3):

    def get_object(self, Bucket, Key):
        raise EndpointConnectionError(endpoint_url="https://s3.invalid")


@pytest.fixture
def s3():
    return FakeS3()


@pytest.fixture
def vault(s3):
    return ObjectStorageVaultStore("secrets", "master-key", client=s3)


class TestObjectStorageVault:

    def test_missing_object_is_empty_vault(self, vault):
        assert vault.list_keys() == set()

    def test_set_get(self, vault, s3):
        vault.set("A", "1")
        assert vault.get("A") == "1"
        assert b"A=1" not in s3.objects[("secrets", "repository.vault")]

    def test_custom_object_name(self, s3):
        vault = ObjectStorageVaultStore("secrets", "k", object_name="team.vault", client=s3)
        vault.set("A", "1")
        assert ("secrets", "team.vault") in s3.objects

    def test_backup_object(self, vault, s3):
        vault.set("A", "1")
        vault.enable_backup(True)
        vault.set("B", "2")
        names = [key for _, key in s3.objects if key.startswith("repository.vault_")]
        assert len(names) == 1
        assert len(names[0]) == len("repository.vault_") + 14

    def test_initialize(self, vault, s3):
        vault.initialize()
        assert s3.objects[("secrets", "repository.vault")] == b""
        assert vault.list_keys() == set()

    def test_access_denied(self):
        vault = ObjectStorageVaultStore("secrets", "k", client=DeniedS3())
        with pytest.raises(VaultUnavailable):
            vault.get("A")

    def test_unreachable(self):
        vault = ObjectStorageVaultStore("secrets", "k", client=UnreachableS3())
        with pytest.raises(VaultUnavailable):
            vault.list_keys()
