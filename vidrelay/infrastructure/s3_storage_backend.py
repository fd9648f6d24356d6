"""
S3 Storage Backend Implementation

Concrete implementation of StorageBackend for Amazon S3 and S3-compatible
services, using boto3 multipart upload operations and presigned part URLs.
"""

import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config as BotoConfig

from vidrelay.domain.upload_session.storage_backend import StorageBackend
from vidrelay.domain.upload_session.value_objects import CompletedPart, StorageSession

logger = logging.getLogger(__name__)


class S3StorageBackend(StorageBackend):
    """
    Amazon S3 implementation of StorageBackend.

    Thread Safety:
        boto3 clients are thread-safe, so one client is shared by the
        concurrent part URL requests.

    Attributes:
        bucket_name: Bucket new uploads are created in
        client: boto3 S3 client
    """

    def __init__(
        self,
        bucket_name: str,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client=None,
    ):
        """
        Initialize the S3 storage backend.

        Args:
            bucket_name: Name of the bucket to upload into
            region: AWS region of the bucket
            endpoint_url: Custom endpoint for S3-compatible services
            client: Pre-built boto3 S3 client (used by tests)

        Raises:
            ValueError: If bucket_name is empty
        """
        if not bucket_name or not bucket_name.strip():
            raise ValueError("bucket_name cannot be empty")

        self.bucket_name = bucket_name
        self.client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            config=BotoConfig(signature_version="s3v4", retries={"max_attempts": 3}),
        )

    def begin_session(self, key: str, content_type: str) -> StorageSession:
        """Start a multipart upload with CreateMultipartUpload."""
        response = self.client.create_multipart_upload(
            Bucket=self.bucket_name,
            Key=key,
            ContentType=content_type,
        )
        logger.info(f"Began multipart upload {response['UploadId']} for {key}")
        return StorageSession(
            upload_id=response["UploadId"],
            key=response.get("Key", key),
            bucket=response.get("Bucket", self.bucket_name),
        )

    def issue_part_upload_url(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        part_number: int,
        ttl_seconds: int,
    ) -> str:
        """Presign an UploadPart request for one part."""
        return self.client.generate_presigned_url(
            ClientMethod="upload_part",
            Params={
                "Bucket": bucket,
                "Key": key,
                "UploadId": upload_id,
                "PartNumber": part_number,
            },
            ExpiresIn=ttl_seconds,
        )

    def finalize_session(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        parts: List[CompletedPart],
    ) -> Dict[str, Any]:
        """Assemble the object with CompleteMultipartUpload."""
        response = self.client.complete_multipart_upload(
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
            MultipartUpload={
                "Parts": [
                    {"ETag": part.etag, "PartNumber": part.part_number} for part in parts
                ]
            },
        )
        logger.info(f"Completed multipart upload {upload_id} for {key} ({len(parts)} parts)")
        return {
            "bucket": response.get("Bucket", bucket),
            "key": response.get("Key", key),
            "etag": response.get("ETag"),
            "location": response.get("Location"),
        }

    def abort_session(self, bucket: str, key: str, upload_id: str) -> None:
        """Discard a multipart upload with AbortMultipartUpload."""
        self.client.abort_multipart_upload(Bucket=bucket, Key=key, UploadId=upload_id)
        logger.info(f"Aborted multipart upload {upload_id} for {key}")
