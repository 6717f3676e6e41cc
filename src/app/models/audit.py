"""Audit log model for master-admin overrides and privileged actions."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now


class AuditAction(str, Enum):
    """Audit action types for type-safe logging."""

    # Lifecycle actions taken under master-admin override
    PROJECT_OVERRIDE = "project.override"

    # Privileged actions
    PROJECT_ASSIGN = "project.assign"
    PROJECT_CANCEL = "project.cancel"
    RATING_HIDE = "rating.hide"
    ADMIN_INVITE = "admin.invite"
    ROLE_ELEVATE = "user.role_elevate"
    PACKAGE_CREATE = "subscription_package.create"

    # Payments
    WEBHOOK_REJECTED = "payment.webhook_rejected"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class AuditLog(SQLModel, table=True):
    """Who did what to which entity, and when."""

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_actor_created", "actor_id", "created_at"),
        Index("ix_audit_logs_action_created", "action", "created_at"),
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    actor_id: UUID | None = Field(default=None, foreign_key="users.id", index=True)

    action: str = Field(max_length=50)
    entity_type: str = Field(max_length=50)  # "project", "proposal", "invoice", "user"
    entity_id: UUID | None = Field(default=None)

    changes: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True),
    )

    # Request metadata
    ip_address: str | None = Field(default=None, max_length=45)
    user_agent: str | None = Field(default=None, max_length=500)
    request_id: str | None = Field(default=None, max_length=36)

    status: str = Field(default=AuditStatus.SUCCESS.value, max_length=20)
    error_message: str | None = Field(default=None, max_length=1000)

    created_at: datetime = Field(default_factory=utc_now)
