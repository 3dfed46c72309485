from fastapi import APIRouter, Depends

from repofolio.config import Settings
from repofolio.core.access import EXPERT_ROLE
from repofolio.core.dependencies import get_current_user, get_profile_service, get_settings, is_super_user
from repofolio.core.errors import AuthorizationError
from repofolio.core.responses import success_response
from repofolio.modules.profiles.schemas import RoleUpdateRequest, RoleUpdateResponse
from repofolio.modules.profiles.service import ProfileService
from typing import Dict

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/make-expert")
async def make_expert(
    request: RoleUpdateRequest,
    current_user: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Set a user's role (requires current user to be super_user)"""
    if not is_super_user(current_user):
        raise AuthorizationError("Only super users can change roles")

    profile = service.set_role(request.user_id, request.role)
    return success_response(RoleUpdateResponse(
        message=f"User {profile.id} set to {request.role}",
        user_id=profile.id,
        role=request.role
    ))


@router.post("/make-me-expert")
async def make_me_expert(
    current_user: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
    settings: Settings = Depends(get_settings)
):
    """Promote the caller to expert; only for environments that enable self-promotion"""
    if not settings.allow_self_promotion:
        raise AuthorizationError("Self-promotion is disabled")

    service.get_or_create_profile(current_user)
    profile = service.set_role(current_user["id"], EXPERT_ROLE)
    return success_response(RoleUpdateResponse(
        message=f"User {profile.id} set to {EXPERT_ROLE}",
        user_id=profile.id,
        role=EXPERT_ROLE
    ))
