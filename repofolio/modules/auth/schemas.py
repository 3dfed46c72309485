from pydantic import BaseModel, Field
from typing import Optional, Dict, Any


class LoginUrlResponse(BaseModel):
    auth_url: str


class StoreTokenRequest(BaseModel):
    provider_token: str = Field(min_length=1)
    # Supabase session pair from the same URL fragment; accepted but not stored
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


class StoreTokenResponse(BaseModel):
    message: str
    github_id: Optional[int] = None
    username: Optional[str] = None


class MeResponse(BaseModel):
    user: Dict[str, Any]
    profile: Optional[Dict[str, Any]] = None
