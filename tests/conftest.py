"""Shared fixtures: in-memory store, services and an API client.

Every test gets a fresh InMemoryStore with a controllable clock so ordering
assertions do not depend on wall time.
"""

import os
from datetime import datetime, timedelta

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("KAFKA_ENABLED", "false")
os.environ.setdefault("SEED_ON_STARTUP", "false")

import pytest
from httpx import ASGITransport, AsyncClient

from campus_service.application.services import (
    FeedService,
    GroupRegistryService,
    MembershipService,
    MessagingService,
    RelationshipService,
    UserService,
)
from campus_service.dependencies import get_authenticated_identity, set_repositories
from campus_service.infrastructure import InMemoryStore, memory_repositories
from campus_service.kafka_producer import KafkaProducerManager
from campus_service.main import app
from campus_service.schemas import Viewer


class SteppingClock:
    """Returns a strictly increasing time on each call unless frozen."""

    def __init__(self, start=datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start
        self.frozen = False

    def __call__(self):
        current = self.now
        if not self.frozen:
            self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def store(clock):
    return InMemoryStore(clock=clock)


@pytest.fixture
def repos(store):
    return memory_repositories(store)


@pytest.fixture
def kafka():
    # Never started: publishing is a logged no-op
    return KafkaProducerManager()


@pytest.fixture
def relationships(repos, kafka):
    return RelationshipService(repos.follows, kafka)


@pytest.fixture
def registry(repos):
    return GroupRegistryService(repos.groups)


@pytest.fixture
def memberships(repos, kafka):
    return MembershipService(repos.groups, repos.memberships, repos.follows, kafka)


@pytest.fixture
def feed(repos, kafka):
    return FeedService(repos.posts, kafka)


@pytest.fixture
def messaging(repos, kafka):
    return MessagingService(repos.messages, kafka)


@pytest.fixture
def users(repos):
    return UserService(repos.users)


@pytest.fixture
async def alice(repos):
    await repos.users.create_if_absent("alice@aimsr.edu", "Alice", "MCA", "2023")
    return await repos.users.find_by_email("alice@aimsr.edu")


@pytest.fixture
async def bob(repos):
    await repos.users.create_if_absent("bob@aimsr.edu", "Bob", "BCA", "2024")
    return await repos.users.find_by_email("bob@aimsr.edu")


@pytest.fixture
async def carol(repos):
    await repos.users.create_if_absent("carol@aimsr.edu", "Carol", "MBA", "2025")
    return await repos.users.find_by_email("carol@aimsr.edu")


@pytest.fixture
def viewer_holder():
    """Mutable slot the API client reads the current viewer from."""
    return {"viewer": None}


@pytest.fixture
async def client(repos, viewer_holder):
    """API client over the in-memory repositories with token checks stubbed out."""
    async def override_identity():
        return viewer_holder["viewer"]

    set_repositories(repos)
    app.dependency_overrides[get_authenticated_identity] = override_identity

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    set_repositories(None)


@pytest.fixture
def login(viewer_holder):
    """Switch the identity the API client acts as."""
    def _login(user):
        viewer_holder["viewer"] = Viewer(id=user.id, email=user.email, name=user.name)
    return _login
