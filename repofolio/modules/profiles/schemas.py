from pydantic import BaseModel
from typing import Optional, Literal

Role = Literal["developer", "expert"]


class ProfileResponse(BaseModel):
    id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[Role] = "developer"

    class Config:
        from_attributes = True


class RoleUpdateRequest(BaseModel):
    user_id: str
    role: Role = "expert"


class RoleUpdateResponse(BaseModel):
    message: str
    user_id: str
    role: Role
