from fastapi import APIRouter, Depends
from supabase import Client

from repofolio.config import Settings
from repofolio.core.access import EXPERT_ROLE, ProjectAction
from repofolio.core.dependencies import (
    GitHubClientFactory, ProjectAccess, get_current_user, get_github_client_factory,
    get_settings, get_supabase, get_token_vault, require_project_access
)
from repofolio.core.errors import AuthorizationError
from repofolio.core.responses import success_response
from repofolio.modules.auth.token_vault import TokenVault
from repofolio.modules.profiles.service import ProfileService
from repofolio.modules.projects.schemas import ProjectImportRequest, ProjectUpdate
from repofolio.modules.projects.service import ProjectService
from typing import Dict

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_service(supabase: Client = Depends(get_supabase)) -> ProjectService:
    return ProjectService(supabase)


@router.get("")
async def list_projects(
    view: str = "developer",
    current_user: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
    supabase: Client = Depends(get_supabase),
    settings: Settings = Depends(get_settings)
):
    """Caller's projects, or every project grouped by owner with ``view=expert``"""
    if view == "expert":
        if settings.expert_view_requires_role:
            profile = ProfileService(supabase).get_or_create_profile(current_user)
            if profile.role != EXPERT_ROLE:
                raise AuthorizationError("Only experts can browse all portfolios")
        return success_response(service.list_grouped_by_owner())
    return success_response(service.list_projects(current_user["id"]))


@router.post("")
def import_project(
    payload: ProjectImportRequest,
    current_user: Dict = Depends(get_current_user),
    vault: TokenVault = Depends(get_token_vault),
    github_factory: GitHubClientFactory = Depends(get_github_client_factory),
    service: ProjectService = Depends(get_project_service)
):
    """Import (or re-sync) a GitHub repository into the caller's portfolio"""
    # body validation precedes the token lookup
    with github_factory(vault.get(current_user["id"])) as github:
        project = service.import_repository(current_user["id"], payload.repository_full_name, github)
    return success_response(project, status_code=201)


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    access: ProjectAccess = Depends(require_project_access(ProjectAction.READ)),
    service: ProjectService = Depends(get_project_service)
):
    """Project metadata with attachments (owner or expert)"""
    return success_response(service.get_project(project_id))


@router.patch("/{project_id}")
async def update_project(
    project_id: str,
    payload: ProjectUpdate,
    access: ProjectAccess = Depends(require_project_access(ProjectAction.WRITE)),
    service: ProjectService = Depends(get_project_service)
):
    """Update notes, tags or review status (owner or expert)"""
    return success_response(service.update_metadata(project_id, payload))
