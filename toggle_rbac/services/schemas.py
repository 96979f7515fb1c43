from typing import Optional
from pydantic import BaseModel, Field

# URL에 그대로 쓸 수 있는 식별자 (RFC 3986 unreserved 문자)
URL_FRIENDLY_PATTERN = r"^[a-zA-Z0-9\-._~]+$"


class ProjectIdSchema(BaseModel):
    id: str = Field(..., min_length=1, max_length=100, pattern=URL_FRIENDLY_PATTERN)


class ProjectSchema(ProjectIdSchema):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
