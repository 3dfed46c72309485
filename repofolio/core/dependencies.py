"""
Core dependencies for route protection and project access checks
"""

from dataclasses import dataclass

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from repofolio.config import Settings
from repofolio.core.access import ProjectAction, evaluate_project_access
from repofolio.core.errors import AuthenticationError, AuthorizationError, NotFoundError
from repofolio.modules.auth.service import AuthService
from repofolio.modules.auth.token_vault import TokenVault
from repofolio.modules.github.client import GitHubClient
from repofolio.modules.profiles.schemas import ProfileResponse
from repofolio.modules.profiles.service import ProfileService
from repofolio.modules.projects.service import ProjectService
from typing import Any, Callable, Dict, Iterator
import logging

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must produce our 401 envelope, not FastAPI's default
security = HTTPBearer(auto_error=False)

GitHubClientFactory = Callable[[str], GitHubClient]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_supabase(request: Request) -> Client:
    return request.app.state.supabase.get_client()


def get_github_client_factory(request: Request) -> GitHubClientFactory:
    return request.app.state.github_client_factory


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


def get_token_vault(supabase: Client = Depends(get_supabase)) -> TokenVault:
    return TokenVault(supabase)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Extract and verify the Supabase access token from the Authorization header"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing Authorization header")
    return auth_service.verify_token(credentials.credentials)


def get_current_profile(
    user_data: Dict = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service)
) -> ProfileResponse:
    return profile_service.get_or_create_profile(user_data)


def is_super_user(user_data: dict) -> bool:
    """Super users are flagged in app_metadata, which only the service role can write"""
    app_metadata = user_data.get("app_metadata") or {}
    return app_metadata.get("type") == "super_user"


def get_github_client(
    user_data: Dict = Depends(get_current_user),
    vault: TokenVault = Depends(get_token_vault),
    factory: GitHubClientFactory = Depends(get_github_client_factory)
) -> Iterator[GitHubClient]:
    """GitHub client for the caller's stored provider token; 412 if GitHub was never linked"""
    token = vault.get(user_data["id"])
    with factory(token) as client:
        yield client


@dataclass
class ProjectAccess:
    project: Dict[str, Any]
    user: Dict[str, Any]
    profile: ProfileResponse
    is_owner: bool


def check_project_access(
    project_id: str,
    action: ProjectAction,
    user_data: dict,
    profile: ProfileResponse,
    supabase: Client
) -> ProjectAccess:
    """404 if the project does not exist, 403 unless the policy allows ``action``"""
    project = ProjectService(supabase).get_project_owner(project_id)
    if not project:
        raise NotFoundError("Project not found")
    decision = evaluate_project_access(user_data["id"], project.get("user_id"), profile.role, action)
    if not decision.allowed:
        logger.info(f"User {user_data['id']} denied {action.value} on project {project_id}: {decision.reason}")
        raise AuthorizationError(decision.reason)
    return ProjectAccess(
        project=project,
        user=user_data,
        profile=profile,
        is_owner=project.get("user_id") == user_data["id"],
    )


def require_project_access(action: ProjectAction):
    """Factory function to create a project access dependency"""
    def check_access(
        project_id: str,
        user_data: Dict = Depends(get_current_user),
        profile: ProfileResponse = Depends(get_current_profile),
        supabase: Client = Depends(get_supabase)
    ) -> ProjectAccess:
        return check_project_access(project_id, action, user_data, profile, supabase)
    return check_access
