"""Tests for sync/main.py — entry point wiring and summary output."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from sync import main as entry
from sync.result import SyncError, SyncFailure, SyncSuccess
from sync.models import UserAvatar, UserProfile, UserQuota


class TestDescribe:
    def test_success(self):
        profile = UserProfile(
            account_name="alice@x", user_id="alice", display_name="Alice", email="a@example.com",
            quota=UserQuota(available=768, relative=25.0, total=1024, used=256),
            avatar=UserAvatar(cache_key="a_alice@x", mime_type="image/png", etag="e"),
        )
        assert entry.describe(SyncSuccess(profile)) == (
            "Alice <a@example.com> - 256 bytes of 1.00 KB used (25.00%) - avatar cached"
        )

    def test_success_without_avatar(self):
        profile = UserProfile(account_name="alice@x", user_id="alice", display_name="Alice")
        assert entry.describe(SyncSuccess(profile)) == "Alice - quota unknown - no avatar"

    def test_failure(self):
        result = SyncFailure(SyncError.PROFILE_UNAVAILABLE, cause=RuntimeError("HTTP 401"))
        assert entry.describe(result) == "sync failed (profile_unavailable): HTTP 401"


class TestRunSync:
    @pytest.fixture
    def wiring(self, user_info):
        with patch.object(entry, "setup_logging"), \
             patch.object(entry, "get_pool", AsyncMock(return_value=MagicMock())), \
             patch.object(entry, "run_migrations", AsyncMock(return_value=0)), \
             patch.object(entry, "close_pool", AsyncMock()) as close_pool, \
             patch.object(entry, "AccountRepository") as accounts_cls, \
             patch.object(entry, "UserProfilesRepository"), \
             patch.object(entry, "OwnCloudCollector") as client_cls, \
             patch.object(entry, "ProfileSyncStep") as step_cls:
            accounts_cls.return_value.add = AsyncMock()
            client_cls.return_value.close = AsyncMock()
            step_cls.return_value.execute = AsyncMock(
                return_value=SyncSuccess(UserProfile(account_name="alice@cloud.example.com", user_id="alice", display_name="Alice"))
            )
            yield {"close_pool": close_pool, "client": client_cls.return_value, "step_cls": step_cls, "accounts": accounts_cls.return_value}

    async def test_runs_step_for_configured_account(self, wiring):
        result = await entry.run_sync()
        assert result.ok
        account = wiring["step_cls"].return_value.execute.await_args.args[0]
        assert account.name == "alice@cloud.example.com"
        wiring["accounts"].add.assert_awaited_once_with(account)
        assert wiring["step_cls"].call_args.kwargs["avatar_dimension"] == entry.settings.avatar_dimension

    async def test_closes_resources_on_error(self, wiring):
        wiring["step_cls"].return_value.execute.side_effect = RuntimeError("boom")
        with pytest.raises(RuntimeError):
            await entry.run_sync()
        wiring["client"].close.assert_awaited_once()
        wiring["close_pool"].assert_awaited_once()


class TestMain:
    def test_prints_summary_and_exits_zero(self, capsys):
        profile = UserProfile(account_name="alice@x", user_id="alice", display_name="Alice")
        with patch.object(entry, "run_sync", AsyncMock(return_value=SyncSuccess(profile))):
            with pytest.raises(SystemExit) as exc:
                entry.main()
        assert exc.value.code == 0
        assert "Alice" in capsys.readouterr().out

    def test_sync_failure_exits_one(self, capsys):
        with patch.object(entry, "run_sync", AsyncMock(return_value=SyncFailure(SyncError.QUOTA_UNAVAILABLE))):
            with pytest.raises(SystemExit) as exc:
                entry.main()
        assert exc.value.code == 1
        assert "quota_unavailable" in capsys.readouterr().out

    def test_unreachable_database_prints_failure_line(self, capsys):
        with patch.object(entry, "run_sync", AsyncMock(side_effect=OSError("connection refused"))):
            with pytest.raises(SystemExit) as exc:
                entry.main()
        assert exc.value.code == 1
        out = capsys.readouterr().out
        assert out.startswith("sync aborted:")
        assert "connection refused" in out
