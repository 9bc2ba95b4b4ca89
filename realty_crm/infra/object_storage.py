"""
Object Storage Adapter

Low-level S3-compatible storage operations for the project-files bucket.
"""
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from realty_crm.lib.config import settings
from realty_crm.lib.errors import RecordNotFound, UpstreamServiceError


def get_s3_client():
    """Initialize S3-compatible client for the storage bucket."""
    return boto3.client(
        's3',
        endpoint_url=settings.storage_endpoint,
        aws_access_key_id=settings.storage_access_key_id,
        aws_secret_access_key=settings.storage_secret_access_key,
        region_name=settings.storage_region,
        config=Config(
            signature_version='s3v4',
            retries={'max_attempts': 3}
        )
    )


class ObjectStorageAdapter:
    """
    Low-level storage adapter.

    Provides:
    - File upload/download
    - Public URLs
    - Deletes
    """

    def __init__(self, client=None, bucket: Optional[str] = None):
        self._client = client
        self.bucket = bucket or settings.storage_bucket
        self.public_base = settings.storage_public_base_url.rstrip('/') if settings.storage_public_base_url else None

    @property
    def client(self):
        if self._client is None:
            self._client = get_s3_client()
        return self._client

    async def upload_file(
        self,
        key: str,
        body: bytes,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Upload file to storage."""
        try:
            params = {
                'Bucket': self.bucket,
                'Key': key,
                'Body': body,
                'ContentType': content_type,
            }
            if metadata:
                params['Metadata'] = metadata

            self.client.put_object(**params)

            return {
                'key': key,
                'size': len(body),
                'content_type': content_type,
            }
        except (ClientError, BotoCoreError) as e:
            raise UpstreamServiceError(f"Upload failed: {e}")

    async def download_file(self, key: str) -> bytes:
        """Download file content."""
        try:
            response = self.client.get_object(
                Bucket=self.bucket,
                Key=key,
            )
            return response['Body'].read()
        except ClientError as e:
            if e.response['Error']['Code'] == 'NoSuchKey':
                raise RecordNotFound(f"File not found: {key}")
            raise UpstreamServiceError(f"Download failed: {e}")
        except BotoCoreError as e:
            raise UpstreamServiceError(f"Download failed: {e}")

    def get_public_url(self, key: str) -> str:
        """Public URL, through the configured base URL if there is one."""
        if self.public_base:
            return f"{self.public_base}/{key}"
        # Fallback to endpoint-based URL for local dev
        return f"{settings.storage_endpoint.rstrip('/')}/{self.bucket}/{key}"

    async def delete_file(self, key: str) -> bool:
        """Delete file from storage."""
        try:
            self.client.delete_object(
                Bucket=self.bucket,
                Key=key,
            )
            return True
        except (ClientError, BotoCoreError) as e:
            raise UpstreamServiceError(f"Delete failed: {e}")


# Singleton instance
object_storage = ObjectStorageAdapter()
