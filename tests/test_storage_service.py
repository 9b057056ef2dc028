"""Tests for the S3 storage wrapper with a stubbed boto3 client."""
import io

import pytest
from botocore.exceptions import ClientError

from duetasks.core.exceptions import StorageError
from duetasks.services.storage_service import StorageService


def client_error(code, operation):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class StubS3:
    def __init__(self, existing_buckets=(), fail_put=False):
        self.buckets = set(existing_buckets)
        self.fail_put = fail_put
        self.objects = {}
        self.presigned = []

    def head_bucket(self, Bucket):
        if Bucket not in self.buckets:
            raise client_error("404", "HeadBucket")

    def create_bucket(self, Bucket, **kwargs):
        self.buckets.add(Bucket)

    def upload_fileobj(self, file_obj, bucket, key, ExtraArgs=None):
        if self.fail_put:
            raise client_error("AccessDenied", "PutObject")
        self.objects[(bucket, key)] = (file_obj.read(), ExtraArgs)

    def delete_object(self, Bucket, Key):
        self.objects.pop((Bucket, Key), None)

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        self.presigned.append((operation, Params, ExpiresIn))
        return f"https://s3.test/{Params['Bucket']}/{Params['Key']}"


def test_upload_creates_missing_bucket():
    s3 = StubS3()
    storage = StorageService(client=s3, default_bucket="task-attachments")

    storage.upload_fileobj(io.BytesIO(b"data"), "u/t/file.txt", content_type="text/plain")

    assert "task-attachments" in s3.buckets
    assert s3.objects[("task-attachments", "u/t/file.txt")] == (b"data", {"ContentType": "text/plain"})


def test_upload_failure_raises_storage_error():
    storage = StorageService(client=StubS3(existing_buckets={"b"}, fail_put=True), default_bucket="b")
    with pytest.raises(StorageError):
        storage.upload_fileobj(io.BytesIO(b"data"), "key")


def test_presigned_download_url_uses_ttl():
    s3 = StubS3()
    storage = StorageService(client=s3, default_bucket="b")
    url = storage.generate_download_url("u/t/file.txt", expires_in=60)
    assert url == "https://s3.test/b/u/t/file.txt"
    assert s3.presigned == [("get_object", {"Bucket": "b", "Key": "u/t/file.txt"}, 60)]


def test_bucket_check_error_is_wrapped():
    class DeniedS3(StubS3):
        def head_bucket(self, Bucket):
            raise client_error("403", "HeadBucket")

    storage = StorageService(client=DeniedS3(), default_bucket="b")
    with pytest.raises(StorageError):
        storage.ensure_bucket("b")
