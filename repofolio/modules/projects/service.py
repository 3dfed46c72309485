from datetime import datetime, timezone

from supabase import Client

from repofolio.core.errors import NotFoundError, UpstreamError
from repofolio.modules.github.client import GitHubClient
from repofolio.modules.profiles.service import ProfileService
from repofolio.modules.projects.schemas import ExpertProjectGroup, ProjectResponse, ProjectUpdate
from fastapi import HTTPException
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

SNAPSHOT_CONFLICT_KEY = "github_repo_id"
DOCUMENT_COLUMNS = "id, file_name, file_url, content_type, size, created_at"


def build_snapshot(repo: Dict[str, Any], repository_full_name: str, user_id: str) -> Dict[str, Any]:
    """Project columns owned by GitHub; user-editable metadata is deliberately absent."""
    return {
        "user_id": user_id,
        "github_repo_id": repo["id"],
        "repository_full_name": repo.get("full_name") or repository_full_name,
        "name": repo["name"],
        "description": repo.get("description"),
        "html_url": repo.get("html_url"),
        "private": bool(repo.get("private")),
        "fork": bool(repo.get("fork")),
        "language": repo.get("language"),
        "stars": repo.get("stargazers_count") or 0,
        "forks": repo.get("forks_count") or 0,
        "watchers": repo.get("watchers_count") or 0,
        "open_issues": repo.get("open_issues_count") or 0,
        "visibility": repo.get("visibility"),
        "owner_username": (repo.get("owner") or {}).get("login"),
        "default_branch": repo.get("default_branch"),
        "pushed_at": repo.get("pushed_at"),
        "created_at_github": repo.get("created_at"),
        "updated_at_github": repo.get("updated_at"),
        "last_synced_at": datetime.now(timezone.utc).isoformat(),
    }


class ProjectService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_projects(self, user_id: str) -> List[ProjectResponse]:
        """Caller's own projects, most recently updated first, with attachment counts"""
        try:
            result = self.supabase.table("projects")\
                .select("*, documents:project_documents(count)")\
                .eq("user_id", user_id)\
                .order("updated_at", desc=True)\
                .execute()
            return [ProjectResponse(**row) for row in result.data or []]
        except Exception as e:
            raise UpstreamError(str(e))

    def list_grouped_by_owner(self) -> List[ExpertProjectGroup]:
        """All projects by stars, grouped per owner in order of first appearance."""
        try:
            result = self.supabase.table("projects")\
                .select("*")\
                .order("stars", desc=True)\
                .execute()
        except Exception as e:
            raise UpstreamError(str(e))
        rows = result.data or []

        owner_ids = [row["user_id"] for row in rows if row.get("user_id")]
        profiles = ProfileService(self.supabase).get_profiles(owner_ids)

        groups: Dict[str, ExpertProjectGroup] = {}
        for row in rows:
            owner_id = row.get("user_id") or "unknown"
            if owner_id not in groups:
                groups[owner_id] = ExpertProjectGroup(
                    owner_id=owner_id,
                    owner=profiles.get(owner_id),
                    projects=[],
                )
            groups[owner_id].projects.append(ProjectResponse(**row))
        return list(groups.values())

    def get_project_owner(self, project_id: str) -> Optional[Dict[str, Any]]:
        """``{id, user_id}`` for access checks, None if the project does not exist"""
        try:
            result = self.supabase.table("projects")\
                .select("id, user_id")\
                .eq("id", project_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise UpstreamError(str(e))
        return result.data if result else None

    def get_project(self, project_id: str) -> ProjectResponse:
        """Get project with its attachments"""
        try:
            result = self.supabase.table("projects")\
                .select(f"*, documents:project_documents({DOCUMENT_COLUMNS})")\
                .eq("id", project_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise UpstreamError(str(e))
        if not result or not result.data:
            raise NotFoundError("Project not found")
        return ProjectResponse(**result.data)

    def import_repository(self, user_id: str, repository_full_name: str, github: GitHubClient) -> ProjectResponse:
        """Fetch the live repository and merge it into ``projects``."""
        repo = github.get_repo(repository_full_name)
        snapshot = build_snapshot(repo, repository_full_name, user_id)
        project = self.merge_snapshot(snapshot)
        logger.info(f"User {user_id} imported {repository_full_name} (github id {repo['id']})")
        return project

    def merge_snapshot(self, snapshot: Dict[str, Any]) -> ProjectResponse:
        """Insert, or refresh the existing row with the same ``github_repo_id``."""
        try:
            result = self.supabase.table("projects")\
                .upsert(snapshot, on_conflict=SNAPSHOT_CONFLICT_KEY)\
                .execute()

            if not result.data:
                raise UpstreamError("Failed to save project")

            return ProjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Project upsert failed for github id {snapshot.get('github_repo_id')}: {e}")
            raise UpstreamError(str(e))

    def update_metadata(self, project_id: str, project_data: ProjectUpdate) -> ProjectResponse:
        """Patch notes/tags/status; only fields present in the request are written"""
        update_data = project_data.model_dump(exclude_unset=True)
        # notes may be cleared; tags and status may not
        for key in ("tags", "status"):
            if key in update_data and update_data[key] is None:
                del update_data[key]
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("projects")\
                .update(update_data)\
                .eq("id", project_id)\
                .execute()

            if not result.data:
                raise NotFoundError("Project not found")

            return ProjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise UpstreamError(str(e))
