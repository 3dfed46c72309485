import time

from supabase import Client

from repofolio.core.errors import UpstreamError, ValidationFailure
from repofolio.modules.attachments.schemas import AttachmentResponse
from repofolio.modules.attachments.storage import AttachmentStorage
from fastapi import HTTPException, UploadFile
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

ATTACHMENT_COLUMNS = "id, file_name, file_url, content_type, size, created_at"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class AttachmentService:
    TABLE = "project_documents"

    def __init__(self, supabase: Client, storage: AttachmentStorage):
        self.supabase = supabase
        self.storage = storage

    def list_attachments(self, project_id: str) -> List[AttachmentResponse]:
        """Attachments of a project, newest first"""
        try:
            result = self.supabase.table(self.TABLE)\
                .select(ATTACHMENT_COLUMNS)\
                .eq("project_id", project_id)\
                .order("created_at", desc=True)\
                .execute()
            return [AttachmentResponse(**row) for row in result.data or []]
        except Exception as e:
            raise UpstreamError(str(e))

    async def upload_attachments(
        self,
        project: Dict[str, Any],
        files: List[UploadFile]
    ) -> List[AttachmentResponse]:
        """Upload each file, then record it. Files are processed one after another."""
        files = [f for f in files or [] if f is not None and f.filename]
        if not files:
            raise ValidationFailure("No files provided")

        uploads = []
        for file in files:
            content = await file.read()
            uploads.append(self._store(project, file.filename, content, file.content_type or DEFAULT_CONTENT_TYPE))
        return uploads

    def _store(self, project: Dict[str, Any], file_name: str, content: bytes, content_type: str) -> AttachmentResponse:
        key = f"{project['user_id']}/{project['id']}/{int(time.time() * 1000)}-{file_name}"
        try:
            stored_path, file_url = self.storage.upload_file(content, key, content_type)
        except Exception as e:
            logger.error(f"Attachment upload failed for project {project['id']}: {str(e)}")
            raise UpstreamError(f"Failed to upload to storage: {str(e)}")

        try:
            result = self.supabase.table(self.TABLE).insert({
                "project_id": project["id"],
                "file_name": file_name,
                "file_path": stored_path,
                "file_url": file_url,
                "content_type": content_type,
                "size": len(content),
            }).execute()

            if not result.data:
                raise UpstreamError("Failed to record attachment")
        except Exception as e:
            # Cleanup: the blob is useless without its metadata row
            if self.storage.delete_file(key):
                logger.info(f"Removed orphaned attachment blob {key}")
            else:
                logger.error(f"Orphaned attachment blob left behind: {key}")
            if isinstance(e, HTTPException):
                raise
            raise UpstreamError(f"Failed to record attachment: {str(e)}")

        logger.info(f"Stored attachment {file_name} ({len(content)} bytes) for project {project['id']}")
        return AttachmentResponse(**result.data[0])
