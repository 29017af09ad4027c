"""
Data factories for test data generation.

Factories use factory-boy to create realistic test data with sensible defaults.
All factories support async creation via create_async().

Usage:
    from tests.factories import UserFactory, ClientFactory

    user = await UserFactory.create_async(db_session, email="custom@test.com")
    client = await ClientFactory.create_async(db_session, owner_id=user.id)
"""

from tests.factories.user import UserFactory
from tests.factories.client import ClientFactory

__all__ = [
    "UserFactory",
    "ClientFactory",
]
