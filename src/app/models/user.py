"""User model - mirrors identities managed by the external identity provider."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.app.models.base import utc_now
from src.app.models.enums import UserRole


class User(SQLModel, table=True):
    """A marketplace participant.

    ``role`` only changes through the admin-invite elevation flow.
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    external_id: str = Field(max_length=255, unique=True, index=True)
    email: str = Field(max_length=255, unique=True, index=True)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    role: str = Field(default=UserRole.CLIENT.value, max_length=20, index=True)
    is_active: bool = Field(default=True)
    stripe_customer_id: str | None = Field(default=None, max_length=255)
    saved_payment_method_ref: str | None = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def role_enum(self) -> UserRole:
        return UserRole(self.role)

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.email

    @property
    def has_payment_method(self) -> bool:
        return self.saved_payment_method_ref is not None
