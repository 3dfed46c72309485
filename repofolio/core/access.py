"""Project access policy.

Owners may do anything with their projects. Experts may read and annotate any
project, but documentation stays owner-authored: experts only get a read-only
view of it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

EXPERT_ROLE = "expert"
DEVELOPER_ROLE = "developer"


class ProjectAction(str, Enum):
    READ = "read"
    WRITE = "write"
    READ_DOCUMENTATION = "read_documentation"
    WRITE_DOCUMENTATION = "write_documentation"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str


def evaluate_project_access(
    caller_id: str,
    owner_id: Optional[str],
    caller_role: Optional[str],
    action: ProjectAction,
) -> AccessDecision:
    if owner_id is not None and caller_id == owner_id:
        return AccessDecision(True, "owner")
    is_expert = caller_role == EXPERT_ROLE
    if action is ProjectAction.WRITE_DOCUMENTATION:
        if is_expert:
            return AccessDecision(False, "Only project owners can update documentation")
        return AccessDecision(False, "Not authorized")
    if is_expert:
        return AccessDecision(True, "expert")
    return AccessDecision(False, "Not authorized")
