"""Shared test fixtures for the profile sync test suite."""

import os
import pytest
from unittest.mock import AsyncMock, MagicMock

# Ensure settings can be imported without real env vars
os.environ.setdefault("OWNCLOUD_URL", "https://cloud.example.com")
os.environ.setdefault("OWNCLOUD_USERNAME", "alice")

from sync.models import Account, UserAvatar, UserProfile, UserQuota  # noqa: E402
from data.models import RemoteAvatar, RemoteQuota, UserInfo  # noqa: E402


# ── Database Pool Mock ──


class FakeRecord(dict):
    """Mimics asyncpg.Record: supports both dict-style and attribute access."""
    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(key)


class FakeConnection:
    """Mock asyncpg connection with configurable return values."""

    def __init__(self):
        self.execute_results: list[str] = ["DELETE 1"]
        self.fetch_results: list[list[dict]] = [[]]
        self.fetchrow_result: dict | None = None
        self.fetchval_result = None
        self._execute_calls: list[tuple] = []
        self._fetch_calls: list[tuple] = []
        self._fetchrow_calls: list[tuple] = []
        self.transactions = 0

    async def execute(self, query, *args):
        self._execute_calls.append((query, args))
        return self.execute_results[0] if self.execute_results else "UPDATE 0"

    async def fetch(self, query, *args):
        self._fetch_calls.append((query, args))
        result = self.fetch_results.pop(0) if self.fetch_results else []
        return [FakeRecord(r) for r in result]

    async def fetchrow(self, query, *args):
        self._fetchrow_calls.append((query, args))
        return FakeRecord(self.fetchrow_result) if self.fetchrow_result else None

    async def fetchval(self, query, *args):
        self._fetch_calls.append((query, args))
        return self.fetchval_result

    def transaction(self):
        self.transactions += 1
        return FakeTransaction()


class FakeTransaction:
    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass


class FakePool:
    """Mock asyncpg.Pool that yields a FakeConnection."""

    def __init__(self):
        self.conn = FakeConnection()

    def acquire(self):
        return FakePoolContext(self.conn)


class FakePoolContext:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, *args):
        pass


@pytest.fixture
def fake_pool():
    """Provide a mock database pool."""
    return FakePool()


@pytest.fixture
def fake_conn(fake_pool):
    """Direct access to the underlying FakeConnection."""
    return fake_pool.conn


# ── Domain fixtures ──


@pytest.fixture
def account():
    return Account(name="alice@cloud.example.com", server_url="https://cloud.example.com", username="alice")


@pytest.fixture
def user_info():
    return UserInfo(id="alice", display_name="Alice Liddell", email="alice@example.com")


@pytest.fixture
def remote_quota():
    return RemoteQuota(free=750, used=250, total=1000, relative=25.0)


@pytest.fixture
def remote_avatar():
    return RemoteAvatar(data=b"\x89PNG fake", mime_type="image/png", etag="etag-1")


# ── Collaborator mocks ──


@pytest.fixture
def mock_client(user_info, remote_quota, remote_avatar):
    """Mock OwnCloudCollector whose calls all succeed."""
    c = MagicMock()
    c.get_user_info = AsyncMock(return_value=user_info)
    c.get_user_quota = AsyncMock(return_value=remote_quota)
    c.get_avatar = AsyncMock(return_value=remote_avatar)
    c.close = AsyncMock()
    return c


@pytest.fixture
def mock_accounts():
    a = MagicMock()
    a.set_user_data = AsyncMock()
    a.get_user_data = AsyncMock(return_value=None)
    a.add = AsyncMock()
    return a


@pytest.fixture
def mock_profiles():
    p = MagicMock()
    p.get = AsyncMock(return_value=None)
    p.update = AsyncMock()
    p.delete_avatar = AsyncMock()
    return p


@pytest.fixture
def mock_thumbnails():
    t = MagicMock()
    t.add_avatar_to_cache = MagicMock(side_effect=lambda name, data, dim: f"a_{name}")
    t.remove_avatar_from_cache = MagicMock()
    return t


@pytest.fixture
def stored_profile(account):
    """A profile persisted by an earlier pass, with an avatar."""
    return UserProfile(
        account_name=account.name,
        user_id="alice",
        display_name="Alice",
        email=None,
        quota=UserQuota(available=1, relative=50.0, total=2, used=1),
        avatar=UserAvatar(cache_key=f"a_{account.name}", mime_type="image/jpeg", etag="etag-0"),
    )
