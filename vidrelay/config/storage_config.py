"""
Storage Configuration

Object storage and upload limits, read from the environment.
"""

import os
from typing import Optional


class StorageConfig:
    """S3 storage and multipart upload settings."""

    def __init__(self):
        self.bucket_name = os.getenv("S3_BUCKET_NAME", "")
        self.region = os.getenv("S3_REGION", "us-east-1")
        # Set for S3-compatible services such as MinIO
        self.endpoint_url: Optional[str] = os.getenv("S3_ENDPOINT_URL") or None

        self.key_prefix = os.getenv("UPLOAD_KEY_PREFIX", "__raw_uploads")
        self.url_ttl_seconds = int(os.getenv("UPLOAD_URL_TTL_SECONDS", 3600))
        self.max_parts_per_request = int(os.getenv("UPLOAD_MAX_PARTS_PER_REQUEST", 1000))
        self.max_url_concurrency = int(os.getenv("UPLOAD_MAX_URL_CONCURRENCY", 16))

        # Videos left in CREATED without a session are abandoned after this age
        self.orphan_max_age_seconds = int(os.getenv("ORPHAN_MAX_AGE_SECONDS", 3600))
