# =============================================================================
# TEST CONFIGURATION
# =============================================================================
# Global fixtures for pytest
# =============================================================================

import os

# Set the environment BEFORE importing the app settings
os.environ["ENVIRONMENT"] = "testing"
os.environ.setdefault("SLA_SCAN_INTERVAL_SECONDS", "0")

from datetime import datetime, timedelta, timezone

import pytest

from helpdesk.config import UserRole
from helpdesk.realtime.application import RealtimeGateway
from helpdesk.realtime.infrastructure import InMemoryRoomRegistry
from helpdesk.tickets.domain import User

from tests.fakes import (
    InMemoryTicketStore,
    InMemoryUserDirectory,
    RecordingNotifier,
    make_ticket,
)


NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# DOMAIN FIXTURES
# =============================================================================

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def staff_user() -> User:
    return User(id="u-staff", email="staff@example.com", name="Sam Staff",
                roles=frozenset({UserRole.STAFF}))


@pytest.fixture
def admin_user() -> User:
    return User(id="u-admin", email="admin@example.com", name="Ada Admin",
                roles=frozenset({UserRole.ADMIN}))


@pytest.fixture
def customer_user() -> User:
    return User(id="u-cust", email="cust@example.com", name="Casey Customer")


# =============================================================================
# COLLABORATOR FIXTURES
# =============================================================================

@pytest.fixture
def ticket_store(now) -> InMemoryTicketStore:
    return InMemoryTicketStore([
        make_ticket("T1", now + timedelta(hours=4)),
        make_ticket("T2", now + timedelta(hours=4)),
    ])


@pytest.fixture
def user_directory(staff_user, admin_user, customer_user) -> InMemoryUserDirectory:
    return InMemoryUserDirectory([staff_user, admin_user, customer_user])


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def registry() -> InMemoryRoomRegistry:
    return InMemoryRoomRegistry()


@pytest.fixture
def gateway(registry, ticket_store, user_directory, now) -> RealtimeGateway:
    return RealtimeGateway(
        registry,
        ticket_store,
        user_directory,
        reward_points=5,
        clock=lambda: now,
    )
