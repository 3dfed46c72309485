"""Thin GitHub REST/GraphQL client authenticated with the user's provider token."""

import base64
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from repofolio.core.errors import UpstreamError

logger = logging.getLogger(__name__)

CONTRIBUTIONS_QUERY = """
{
  viewer {
    contributionsCollection {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            date
            contributionCount
          }
        }
      }
    }
  }
}
"""


def _segment(value: str) -> str:
    return quote(value, safe="")


class GitHubAPIError(UpstreamError):
    """Non-2xx answer from GitHub.

    ``upstream_status`` keeps GitHub's status. The status we answer with is
    derived from it: a rejected token asks the client to re-link, other 4xx
    pass through and anything else is a 500.
    """

    default_code = "github_error"

    def __init__(self, upstream_status: Optional[int], message: str):
        self.upstream_status = upstream_status
        if upstream_status == 401:
            super().__init__(message, status_code=412, code="github_token_invalid")
        elif upstream_status is not None and 400 <= upstream_status < 500:
            super().__init__(message, status_code=upstream_status)
        else:
            super().__init__(message, status_code=500)


class GitHubClient:
    BASE_URL = "https://api.github.com"
    GRAPHQL_URL = "https://api.github.com/graphql"
    API_VERSION = "2022-11-28"
    ACCEPT_JSON = "application/vnd.github+json"

    def __init__(
        self,
        token: str,
        *,
        base_url: Optional[str] = None,
        graphql_url: Optional[str] = None,
        timeout_seconds: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._graphql_url = graphql_url or self.GRAPHQL_URL
        self._client = httpx.Client(
            base_url=base_url or self.BASE_URL,
            timeout=timeout_seconds,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": self.ACCEPT_JSON,
                "X-GitHub-Api-Version": self.API_VERSION,
            },
        )

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_authenticated_user(self) -> Dict[str, Any]:
        return self._request("GET", "/user")

    def list_user_repos(self, per_page: int = 100, sort: str = "updated") -> List[Dict[str, Any]]:
        return self._request("GET", "/user/repos", params={"per_page": per_page, "sort": sort})

    def get_repo(self, full_name: str) -> Dict[str, Any]:
        owner, repo = full_name.split("/", 1)
        return self._request("GET", f"/repos/{_segment(owner)}/{_segment(repo)}")

    def list_user_events(self, username: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/users/{_segment(username)}/events")

    def get_readme(self, owner: str, repo: str) -> Optional[str]:
        payload = self._request("GET", f"/repos/{_segment(owner)}/{_segment(repo)}/readme")
        content = payload.get("content") if isinstance(payload, dict) else None
        if not content:
            return None
        encoding = payload.get("encoding") or "base64"
        if encoding != "base64":
            return content
        return base64.b64decode(content).decode("utf-8")

    def get_contribution_calendar(self) -> Optional[Dict[str, Any]]:
        """Return ``viewer.contributionsCollection.contributionCalendar`` or None."""
        payload = self._request("POST", self._graphql_url, json={"query": CONTRIBUTIONS_QUERY})
        data = payload.get("data") if isinstance(payload, dict) else None
        if not data and payload.get("errors"):
            messages = "; ".join(e.get("message", "") for e in payload["errors"])
            raise GitHubAPIError(None, f"GitHub GraphQL failed: {messages}")
        viewer = (data or {}).get("viewer") or {}
        collection = viewer.get("contributionsCollection") or {}
        return collection.get("contributionCalendar")

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"GitHub request {method} {url} failed: {e}")
            raise GitHubAPIError(None, f"GitHub request failed: {e}")
        if not response.is_success:
            message = response.text or f"GitHub request failed with {response.status_code}"
            logger.warning(f"GitHub {method} {url} returned {response.status_code}")
            raise GitHubAPIError(response.status_code, message)
        return response.json()
