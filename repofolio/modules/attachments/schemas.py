from pydantic import BaseModel
from typing import Optional


class AttachmentResponse(BaseModel):
    id: str
    project_id: Optional[str] = None
    file_name: str
    file_path: Optional[str] = None
    file_url: Optional[str] = None
    content_type: Optional[str] = None
    size: Optional[int] = None
    created_at: Optional[str] = None

    class Config:
        from_attributes = True
