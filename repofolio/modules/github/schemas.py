import re

from pydantic import BaseModel
from typing import Optional, List

# GitHub logins are alphanumerics and hyphens; repository names also allow "." and "_"
FULL_NAME_PATTERN = re.compile(r"[A-Za-z0-9-]+/[A-Za-z0-9._-]+")


class GithubUserResponse(BaseModel):
    github_id: int
    username: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None
    updated_at: Optional[str] = None


class GithubRepoResponse(BaseModel):
    id: int
    name: str
    full_name: Optional[str] = None
    html_url: str
    description: Optional[str] = None
    private: bool = False
    fork: bool = False
    language: Optional[str] = None
    stargazers_count: int = 0
    watchers_count: int = 0
    forks_count: int = 0
    owner: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    pushed_at: Optional[str] = None
    default_branch: Optional[str] = None
    open_issues_count: Optional[int] = None
    visibility: Optional[str] = None


class GithubActivityItem(BaseModel):
    id: str
    type: Optional[str] = None
    repo: Optional[str] = None
    created_at: Optional[str] = None


class ContributionDay(BaseModel):
    date: str
    count: int


class ContributionSummary(BaseModel):
    total_contributions: int = 0
    contributions: List[ContributionDay] = []


class ProfileRepoResponse(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    stars: Optional[int] = None
    updated_at: Optional[str] = None
    html_url: Optional[str] = None
    readme_content: Optional[str] = None
