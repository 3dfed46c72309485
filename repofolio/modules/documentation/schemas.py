from pydantic import BaseModel, Field
from typing import Optional, Any

CONTENT_TEXT_MAX_LENGTH = 20000


class DocumentationUpdate(BaseModel):
    content: Optional[Any] = None  # rich-text editor JSON document
    content_text: Optional[str] = Field(default=None, max_length=CONTENT_TEXT_MAX_LENGTH)


class DocumentationResponse(BaseModel):
    project_id: str
    content: Optional[Any] = None
    content_text: Optional[str] = None
    updated_at: Optional[str] = None
    updated_by: Optional[str] = None

    class Config:
        from_attributes = True
