"""Storage service for S3/MinIO operations."""
import logging
from typing import BinaryIO, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, BotoCoreError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from duetasks.config import settings
from duetasks.core.exceptions import StorageError

logger = logging.getLogger(__name__)

_transient = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(BotoCoreError),
    reraise=True,
)


class StorageService:
    """Service for S3/MinIO operations.

    The boto3 client is created on first use so importing the module never
    touches the network.
    """

    def __init__(self, client=None, default_bucket: Optional[str] = None):
        self._client = client
        self.default_bucket = default_bucket or settings.S3_BUCKET_NAME
        self._known_buckets = set()

    @property
    def s3_client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=settings.S3_ENDPOINT_URL,
                aws_access_key_id=settings.S3_ACCESS_KEY_ID,
                aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
                region_name=settings.S3_REGION,
                use_ssl=settings.S3_USE_SSL,
                config=Config(signature_version="s3v4"),
            )
        return self._client

    def ensure_bucket(self, bucket: str) -> None:
        """Ensure the target bucket exists, creating it if necessary."""
        if bucket in self._known_buckets:
            return
        try:
            self.s3_client.head_bucket(Bucket=bucket)
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code", "")
            if error_code not in {"404", "NoSuchBucket", "NotFound"}:
                raise StorageError(detail=f"Error checking bucket: {exc}") from exc

            create_params = {"Bucket": bucket}
            if settings.S3_REGION and settings.S3_REGION != "us-east-1":
                create_params["CreateBucketConfiguration"] = {
                    "LocationConstraint": settings.S3_REGION
                }
            try:
                self.s3_client.create_bucket(**create_params)
            except ClientError as create_exc:
                create_error_code = create_exc.response.get("Error", {}).get("Code", "")
                if create_error_code not in {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}:
                    raise StorageError(detail=f"Error creating bucket: {create_exc}") from create_exc
            logger.info("Created bucket %s", bucket)
        except BotoCoreError as exc:
            raise StorageError(detail=f"Error checking bucket: {exc}") from exc
        self._known_buckets.add(bucket)

    @_transient
    def _put(self, bucket: str, key: str, file_obj: BinaryIO, extra_args: dict) -> None:
        self.s3_client.upload_fileobj(file_obj, bucket, key, ExtraArgs=extra_args)

    def upload_fileobj(
        self,
        file_obj: BinaryIO,
        key: str,
        content_type: Optional[str] = None,
        bucket: Optional[str] = None,
    ) -> bool:
        """Upload a file-like object; never overwrites an existing key."""
        bucket = bucket or self.default_bucket
        self.ensure_bucket(bucket)
        extra_args = {}
        if content_type:
            extra_args["ContentType"] = content_type
        try:
            self._put(bucket, key, file_obj, extra_args)
        except (ClientError, BotoCoreError) as e:
            logger.error("Upload of %s/%s failed: %s", bucket, key, e)
            raise StorageError(detail=f"Error uploading file: {e}") from e
        return True

    def delete_file(self, key: str, bucket: Optional[str] = None) -> bool:
        """Delete a file from S3."""
        bucket = bucket or self.default_bucket
        try:
            self.s3_client.delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error("Delete of %s/%s failed: %s", bucket, key, e)
            raise StorageError(detail=f"Error deleting file: {e}") from e
        return True

    def generate_download_url(
        self,
        key: str,
        expires_in: int = settings.SIGNED_URL_TTL_SECONDS,
        bucket: Optional[str] = None,
    ) -> str:
        """Generate presigned URL for downloading a file (GET)."""
        bucket = bucket or self.default_bucket
        try:
            return self.s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(detail=f"Error generating download URL: {e}") from e


# Global instance
storage_service = StorageService()
