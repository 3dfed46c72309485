from pydantic import BaseModel, field_validator
from typing import Optional, List, Literal, Dict, Any

from repofolio.modules.github.schemas import FULL_NAME_PATTERN
from repofolio.modules.profiles.schemas import ProfileResponse

ProjectStatus = Literal["draft", "in_review", "published"]


class ProjectImportRequest(BaseModel):
    repository_full_name: str

    @field_validator("repository_full_name")
    @classmethod
    def must_be_owner_repo(cls, value: str) -> str:
        value = value.strip()
        if not FULL_NAME_PATTERN.fullmatch(value):
            raise ValueError("repository_full_name must be owner/repo")
        return value


class ProjectUpdate(BaseModel):
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[ProjectStatus] = None


class ProjectResponse(BaseModel):
    id: str
    user_id: str
    github_repo_id: int
    repository_full_name: str
    name: str
    description: Optional[str] = None
    html_url: Optional[str] = None
    private: Optional[bool] = False
    fork: Optional[bool] = False
    language: Optional[str] = None
    stars: Optional[int] = 0
    forks: Optional[int] = 0
    watchers: Optional[int] = 0
    open_issues: Optional[int] = 0
    visibility: Optional[str] = None
    owner_username: Optional[str] = None
    default_branch: Optional[str] = None
    pushed_at: Optional[str] = None
    created_at_github: Optional[str] = None
    updated_at_github: Optional[str] = None
    last_synced_at: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[ProjectStatus] = "draft"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    # attachment rows, or [{"count": n}] on list views
    documents: Optional[List[Dict[str, Any]]] = None

    class Config:
        from_attributes = True


class ExpertProjectGroup(BaseModel):
    owner_id: str
    owner: Optional[ProfileResponse] = None
    projects: List[ProjectResponse]
