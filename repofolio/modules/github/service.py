from repofolio.modules.github.client import GitHubClient
from repofolio.modules.github.schemas import (
    GithubUserResponse, GithubRepoResponse, GithubActivityItem,
    ContributionDay, ContributionSummary, ProfileRepoResponse
)
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

ACTIVITY_LIMIT = 10


def map_repository(repo: Dict[str, Any]) -> GithubRepoResponse:
    """Flatten a GitHub repository payload into the shape the dashboard uses."""
    owner = repo.get("owner") or {}
    return GithubRepoResponse(
        id=repo["id"],
        name=repo["name"],
        full_name=repo.get("full_name"),
        html_url=repo["html_url"],
        description=repo.get("description"),
        private=bool(repo.get("private")),
        fork=bool(repo.get("fork")),
        language=repo.get("language"),
        stargazers_count=repo.get("stargazers_count") or 0,
        watchers_count=repo.get("watchers_count") or 0,
        forks_count=repo.get("forks_count") or 0,
        owner=owner.get("login"),
        created_at=repo.get("created_at"),
        updated_at=repo.get("updated_at"),
        pushed_at=repo.get("pushed_at"),
        default_branch=repo.get("default_branch"),
        open_issues_count=repo.get("open_issues_count"),
        visibility=repo.get("visibility"),
    )


def flatten_contribution_calendar(calendar: Optional[Dict[str, Any]]) -> ContributionSummary:
    """Turn the week/day nesting of a contribution calendar into a flat, ordered day list."""
    if not calendar:
        return ContributionSummary()
    contributions = [
        ContributionDay(date=day["date"], count=day["contributionCount"])
        for week in calendar.get("weeks") or []
        for day in week.get("contributionDays") or []
    ]
    return ContributionSummary(
        total_contributions=calendar.get("totalContributions") or 0,
        contributions=contributions,
    )


class GitHubService:
    def __init__(self, client: GitHubClient):
        self.client = client

    def get_user(self) -> GithubUserResponse:
        profile = self.client.get_authenticated_user()
        return GithubUserResponse(
            github_id=profile["id"],
            username=profile["login"],
            email=profile.get("email"),
            avatar_url=profile.get("avatar_url"),
            html_url=profile.get("html_url"),
            updated_at=profile.get("updated_at"),
        )

    def list_repos(self) -> List[GithubRepoResponse]:
        return [map_repository(repo) for repo in self.client.list_user_repos()]

    def get_repo(self, full_name: str) -> GithubRepoResponse:
        return map_repository(self.client.get_repo(full_name))

    def get_activity(self, limit: int = ACTIVITY_LIMIT) -> List[GithubActivityItem]:
        """Most recent public events of the authenticated user"""
        login = self.client.get_authenticated_user()["login"]
        events = self.client.list_user_events(login)
        return [
            GithubActivityItem(
                id=str(event["id"]),
                type=event.get("type"),
                repo=(event.get("repo") or {}).get("name"),
                created_at=event.get("created_at"),
            )
            for event in events[:limit]
        ]

    def get_contributions(self) -> ContributionSummary:
        return flatten_contribution_calendar(self.client.get_contribution_calendar())

    def get_profile_repo(self) -> ProfileRepoResponse:
        """The user's ``<login>/<login>`` profile repository with its README, if any."""
        login = self.client.get_authenticated_user()["login"]
        repo = self.client.get_repo(f"{login}/{login}")
        try:
            readme = self.client.get_readme(login, login)
        except Exception as e:
            logger.warning(f"README unavailable for {login}/{login}: {e}")
            readme = None
        return ProfileRepoResponse(
            name=repo.get("name"),
            description=repo.get("description"),
            stars=repo.get("stargazers_count"),
            updated_at=repo.get("updated_at"),
            html_url=repo.get("html_url"),
            readme_content=readme,
        )
