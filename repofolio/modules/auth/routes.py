from fastapi import APIRouter, Depends, Request

from repofolio.config import Settings
from repofolio.core.dependencies import (
    GitHubClientFactory, get_current_user, get_github_client_factory,
    get_profile_service, get_settings, get_token_vault
)
from repofolio.core.rate_limit import auth_rate_limit, limiter
from repofolio.core.responses import success_response
from repofolio.modules.auth.schemas import LoginUrlResponse, MeResponse, StoreTokenRequest
from repofolio.modules.auth.service import build_login_url
from repofolio.modules.auth.token_vault import TokenVault
from repofolio.modules.profiles.service import ProfileService
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/login")
@limiter.limit(auth_rate_limit)
async def login(
    request: Request,
    settings: Settings = Depends(get_settings)
):
    """Supabase authorize URL for the GitHub OAuth flow"""
    return success_response(LoginUrlResponse(auth_url=build_login_url(settings)))


@router.post("/store-github-token")
@limiter.limit(auth_rate_limit)
def store_github_token(
    request: Request,
    payload: StoreTokenRequest,
    current_user: Dict = Depends(get_current_user),
    vault: TokenVault = Depends(get_token_vault),
    github_factory: GitHubClientFactory = Depends(get_github_client_factory)
):
    """Link GitHub: store the provider token the browser read from the OAuth redirect fragment"""
    with github_factory(payload.provider_token) as github:
        result = vault.store(current_user["id"], payload.provider_token, github)
    return success_response(result)


@router.get("/me")
async def me(
    current_user: Dict = Depends(get_current_user),
    profile_service: ProfileService = Depends(get_profile_service)
):
    """Current Supabase user and application profile"""
    profile = profile_service.get_or_create_profile(current_user)
    return success_response(MeResponse(user=current_user, profile=profile.model_dump()))
