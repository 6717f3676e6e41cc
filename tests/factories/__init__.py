"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import UserFactory, ProjectFactory, ...
"""

from tests.factories.base import BaseFactory, generate_uuid, utc_now
from tests.factories.project import (
    InvoiceFactory,
    ProjectFactory,
    ProposalFactory,
    TimeEntryFactory,
)
from tests.factories.user import UserFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid",
    "utc_now",
    # User
    "UserFactory",
    # Project
    "ProjectFactory",
    "ProposalFactory",
    "TimeEntryFactory",
    "InvoiceFactory",
]
