"""Object storage backends for project attachments."""

import boto3
from botocore.exceptions import ClientError
from supabase import Client

from repofolio.config import Settings
from typing import Any, Optional, Protocol, Tuple
import logging

logger = logging.getLogger(__name__)


class AttachmentStorage(Protocol):
    def upload_file(self, file_content: bytes, key: str, content_type: str) -> Tuple[str, str]:
        """Store the blob and return ``(stored_path, public_url)``."""

    def delete_file(self, key: str) -> bool:
        ...


class SupabaseStorage:
    def __init__(self, supabase: Client, bucket_name: str):
        self.supabase = supabase
        self.bucket_name = bucket_name

    def upload_file(self, file_content: bytes, key: str, content_type: str) -> Tuple[str, str]:
        bucket = self.supabase.storage.from_(self.bucket_name)
        response = bucket.upload(
            key,
            file_content,
            file_options={"content-type": content_type, "upsert": "true"}
        )
        stored_path = getattr(response, "path", None) or key
        return stored_path, bucket.get_public_url(key)

    def delete_file(self, key: str) -> bool:
        try:
            self.supabase.storage.from_(self.bucket_name).remove([key])
            return True
        except Exception as e:
            logger.error(f"Failed to delete {key} from Supabase Storage: {e}")
            return False


class S3Storage:
    def __init__(self, settings: Settings, s3_client: Optional[Any] = None):
        if not settings.s3_configured:
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = s3_client or boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name
        self.region = settings.aws_region

    def upload_file(self, file_content: bytes, key: str, content_type: str) -> Tuple[str, str]:
        """Upload file to S3 and return its key and public HTTPS URL"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=file_content,
                ContentType=content_type
            )
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise
        return key, f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    def delete_file(self, key: str) -> bool:
        """Delete file from S3"""
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            logger.error(f"Failed to delete file from S3: {str(e)}")
            return False


def build_attachment_storage(settings: Settings, supabase: Client) -> AttachmentStorage:
    """S3 when fully configured, otherwise the Supabase Storage bucket."""
    if settings.s3_configured:
        try:
            return S3Storage(settings)
        except Exception as e:
            logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
    return SupabaseStorage(supabase, settings.attachments_bucket)
