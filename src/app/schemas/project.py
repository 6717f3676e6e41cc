"""Project schemas for API request/response."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.app.models import ProjectStatus
from src.app.schemas.redaction import RedactableRead
from src.app.schemas.types import MoneyInput


class ProjectCreate(BaseModel):
    """Intake form for a code-fix request."""

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    repository_url: str | None = Field(default=None, max_length=500)
    budget: MoneyInput | None = None

    @field_validator("title", "description")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Cannot be empty or whitespace only")
        return v

    @field_validator("repository_url")
    @classmethod
    def validate_repository_url(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not v.startswith(("https://", "http://")):
            raise ValueError("Repository URL must start with http:// or https://")
        return v


class ProjectAssign(BaseModel):
    admin_id: UUID


class ProjectRead(RedactableRead):
    redacted_fields = ("budget",)

    id: UUID
    client_id: UUID
    assigned_admin_id: UUID | None
    status: ProjectStatus
    title: str
    description: str
    repository_url: str | None
    budget: int | None = None
    created_at: datetime
    updated_at: datetime
    started_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
