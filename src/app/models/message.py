"""Project message model."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now


class Message(SQLModel, table=True):
    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_project_created", "project_id", "created_at"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", ondelete="CASCADE")
    sender_id: UUID = Field(foreign_key="users.id")
    body: str = Field(max_length=5000)
    created_at: datetime = Field(default_factory=utc_now)
