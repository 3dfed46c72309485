from fastapi import APIRouter, Depends
from supabase import Client

from repofolio.core.access import ProjectAction
from repofolio.core.dependencies import ProjectAccess, get_supabase, require_project_access
from repofolio.core.responses import success_response
from repofolio.modules.documentation.schemas import DocumentationUpdate
from repofolio.modules.documentation.service import DocumentationService

router = APIRouter(prefix="/projects", tags=["documentation"])


def get_documentation_service(supabase: Client = Depends(get_supabase)) -> DocumentationService:
    return DocumentationService(supabase)


@router.get("/{project_id}/documentation")
async def get_documentation(
    project_id: str,
    access: ProjectAccess = Depends(require_project_access(ProjectAction.READ_DOCUMENTATION)),
    service: DocumentationService = Depends(get_documentation_service)
):
    """Project documentation, or null when none was written yet (owner or expert)"""
    return success_response(service.get_documentation(project_id))


@router.put("/{project_id}/documentation")
async def save_documentation(
    project_id: str,
    payload: DocumentationUpdate,
    access: ProjectAccess = Depends(require_project_access(ProjectAction.WRITE_DOCUMENTATION)),
    service: DocumentationService = Depends(get_documentation_service)
):
    """Replace project documentation (owner only; experts have read-only access)"""
    return success_response(service.save_documentation(project_id, payload, access.user["id"]))
