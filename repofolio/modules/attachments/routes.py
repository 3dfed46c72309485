from fastapi import APIRouter, Depends, File, UploadFile
from supabase import Client

from repofolio.config import Settings
from repofolio.core.access import ProjectAction
from repofolio.core.dependencies import ProjectAccess, get_settings, get_supabase, require_project_access
from repofolio.core.responses import success_response
from repofolio.modules.attachments.service import AttachmentService
from repofolio.modules.attachments.storage import build_attachment_storage
from typing import List, Optional

router = APIRouter(prefix="/projects", tags=["attachments"])


def get_attachment_service(
    supabase: Client = Depends(get_supabase),
    settings: Settings = Depends(get_settings)
) -> AttachmentService:
    return AttachmentService(supabase, build_attachment_storage(settings, supabase))


@router.get("/{project_id}/attachments")
async def list_attachments(
    project_id: str,
    access: ProjectAccess = Depends(require_project_access(ProjectAction.READ)),
    service: AttachmentService = Depends(get_attachment_service)
):
    """Uploaded files of a project, newest first (owner or expert)"""
    return success_response(service.list_attachments(project_id))


@router.post("/{project_id}/attachments")
async def upload_attachments(
    project_id: str,
    files: Optional[List[UploadFile]] = File(None),
    access: ProjectAccess = Depends(require_project_access(ProjectAction.WRITE)),
    service: AttachmentService = Depends(get_attachment_service)
):
    """Upload one or more files (multipart field ``files``) to a project (owner or expert)"""
    uploads = await service.upload_attachments(access.project, files or [])
    return success_response(uploads, status_code=201)
