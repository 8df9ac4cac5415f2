"""Entry point: run one profile sync pass for the configured account."""

import asyncio
import sys
import structlog
from config.settings import settings
from config.logging_config import setup_logging
from data.collectors.owncloud import OwnCloudCollector
from data.thumbnails import ThumbnailCache
from storage.database import get_pool, close_pool, run_migrations
from storage.repositories.account_repo import AccountRepository
from storage.repositories.profile_repo import UserProfilesRepository
from sync.profile_sync import ProfileSyncStep
from sync.result import SyncFailure, SyncResult
from sync.models import Account
from utils.formatting import format_quota

log = structlog.get_logger(__name__)


def describe(result: SyncResult) -> str:
    """One-line summary of a sync result."""
    if isinstance(result, SyncFailure):
        cause = f": {result.cause}" if result.cause else ""
        return f"sync failed ({result.error.value}){cause}"
    profile = result.profile
    email = f" <{profile.email}>" if profile.email else ""
    avatar = "avatar cached" if profile.avatar else "no avatar"
    return f"{profile.display_name}{email} - {format_quota(profile.quota)} - {avatar}"


async def run_sync() -> SyncResult:
    """Wire collaborators from settings and run the step once."""
    setup_logging()
    account = Account.for_server(settings.owncloud_username, settings.owncloud_url)
    log.info("starting_profile_sync", account=account.name)

    client = OwnCloudCollector(
        settings.owncloud_url,
        settings.owncloud_username,
        password=settings.owncloud_password,
        token=settings.owncloud_token,
    )
    try:
        pool = await get_pool()
        await run_migrations(pool)

        accounts = AccountRepository(pool)
        await accounts.add(account)

        step = ProfileSyncStep(
            client=client,
            accounts=accounts,
            profiles=UserProfilesRepository(pool),
            thumbnails=ThumbnailCache(settings.thumbnail_cache_dir, memory_ttl=settings.avatar_cache_ttl),
            avatar_dimension=settings.avatar_dimension,
        )
        return await step.execute(account)
    finally:
        await client.close()
        await close_pool()


def main() -> None:
    try:
        result = asyncio.run(run_sync())
    except Exception as e:
        log.exception("profile_sync_aborted")
        print(f"sync aborted: {e!r}")
        sys.exit(1)
    print(describe(result))
    sys.exit(0 if result.ok else 1)


if __name__ == "__main__":
    main()
