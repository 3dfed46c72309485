from datetime import datetime, timezone

from supabase import Client

from repofolio.core.errors import StorageNotConfiguredError, UpstreamError, ValidationFailure
from repofolio.modules.documentation.schemas import (
    CONTENT_TEXT_MAX_LENGTH, DocumentationResponse, DocumentationUpdate
)
from typing import Any, List, Optional
import logging

logger = logging.getLogger(__name__)

DOCUMENTATION_COLUMNS = "project_id, content, content_text, updated_at, updated_by"
_MISSING_TABLE_CODES = {"42P01", "PGRST205", "PGRST106"}


def is_table_missing(error: Exception) -> bool:
    """True when PostgREST reports that the documentation table does not exist."""
    code = getattr(error, "code", None)
    message = (getattr(error, "message", None) or str(error)).lower()
    return (
        code in _MISSING_TABLE_CODES
        or "could not find the table" in message
        or "relationship 'project_documentation'" in message
    )


def extract_plain_text(document: Any) -> str:
    """Plain text of a rich-text editor document, one line per block node"""
    lines: List[str] = []

    def walk(node: Any, buffer: List[str]) -> None:
        if isinstance(node, list):
            for child in node:
                walk(child, buffer)
            return
        if not isinstance(node, dict):
            return
        if node.get("type") == "text":
            buffer.append(node.get("text") or "")
            return
        if node.get("type") == "hardBreak":
            buffer.append("\n")
            return
        children = node.get("content") or []
        if not children:
            # empty paragraphs stay as blank lines
            if node.get("type") not in (None, "doc"):
                lines.append("")
            return
        if all(isinstance(c, dict) and c.get("type") in ("text", "hardBreak") for c in children):
            inline: List[str] = []
            walk(children, inline)
            lines.append("".join(inline))
        else:
            walk(children, buffer)

    walk(document, lines)
    return "\n".join(lines)


class DocumentationService:
    TABLE = "project_documentation"

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_documentation(self, project_id: str) -> Optional[DocumentationResponse]:
        try:
            result = self.supabase.table(self.TABLE)\
                .select(DOCUMENTATION_COLUMNS)\
                .eq("project_id", project_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            if is_table_missing(e):
                logger.warning(f"{self.TABLE} table is missing; serving project {project_id} without documentation")
                return None
            raise UpstreamError(str(e))
        row = result.data if result else None
        return DocumentationResponse(**row) if row else None

    def save_documentation(self, project_id: str, payload: DocumentationUpdate, user_id: str) -> DocumentationResponse:
        content_text = payload.content_text
        if content_text is None and payload.content is not None:
            content_text = extract_plain_text(payload.content)
            if len(content_text) > CONTENT_TEXT_MAX_LENGTH:
                raise ValidationFailure(
                    f"content_text must be at most {CONTENT_TEXT_MAX_LENGTH} characters"
                )

        record = {
            "project_id": project_id,
            "content": payload.content,
            "content_text": content_text,
            "updated_at": datetime.now(timezone.utc).isoformat(),
            "updated_by": user_id,
        }
        try:
            result = self.supabase.table(self.TABLE)\
                .upsert(record, on_conflict="project_id")\
                .execute()
        except Exception as e:
            if is_table_missing(e):
                raise StorageNotConfiguredError(
                    "Project documentation storage is not configured. Please run the associated migration."
                )
            logger.error(f"Failed to save documentation for project {project_id}: {e}")
            raise UpstreamError(str(e))
        row = result.data[0] if result.data else record
        return DocumentationResponse(**row)
