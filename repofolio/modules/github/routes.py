from fastapi import APIRouter, Depends

from repofolio.core.dependencies import get_github_client
from repofolio.core.errors import ValidationFailure
from repofolio.core.responses import success_response
from repofolio.modules.github.client import GitHubClient
from repofolio.modules.github.schemas import FULL_NAME_PATTERN
from repofolio.modules.github.service import GitHubService
from typing import Optional

router = APIRouter(prefix="/github", tags=["github"])


def get_github_service(client: GitHubClient = Depends(get_github_client)) -> GitHubService:
    return GitHubService(client)


@router.get("/user")
def get_user(service: GitHubService = Depends(get_github_service)):
    """Caller's GitHub profile"""
    return success_response(service.get_user())


@router.get("/repos")
def list_repos(
    full_name: Optional[str] = None,
    service: GitHubService = Depends(get_github_service)
):
    """Caller's repositories, or a single one when ``full_name`` (owner/repo) is given"""
    if full_name is not None:
        if not FULL_NAME_PATTERN.fullmatch(full_name):
            raise ValidationFailure("full_name must be owner/repo")
        return success_response(service.get_repo(full_name))
    return success_response(service.list_repos())


@router.get("/activity")
def get_activity(service: GitHubService = Depends(get_github_service)):
    """Last 10 public events"""
    return success_response(service.get_activity())


@router.get("/contributions")
def get_contributions(service: GitHubService = Depends(get_github_service)):
    """One-year contribution calendar as a flat list of days"""
    return success_response(service.get_contributions())


@router.get("/profile-repo")
def get_profile_repo(service: GitHubService = Depends(get_github_service)):
    """The caller's <login>/<login> profile repository and README"""
    return success_response(service.get_profile_repo())
