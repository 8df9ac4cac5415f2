"""One-shot refresh of an account's profile, quota and avatar."""

import structlog
from typing import Any
from config.constants import KEY_DISPLAY_NAME, KEY_ID
from data.collectors.base import NotFoundError, NotModifiedError, RemoteError
from data.collectors.owncloud import OwnCloudCollector
from data.thumbnails import ThumbnailCache
from storage.repositories.account_repo import AccountRepository
from storage.repositories.profile_repo import UserProfilesRepository
from sync.result import SyncError, SyncFailure, SyncResult, SyncSuccess
from sync.models import Account, UserAvatar, UserProfile, UserQuota


class ProfileSyncStep:
    """Copies the server's view of the user into local storage.

    Stages run in order: user info, account user data, quota, avatar,
    persist. User info and quota are required; the avatar is best effort.
    The account user data written in the second stage is kept even if a
    later stage fails.
    """

    def __init__(
        self,
        client: OwnCloudCollector,
        accounts: AccountRepository,
        profiles: UserProfilesRepository,
        thumbnails: ThumbnailCache,
        avatar_dimension: int,
        log: Any = None,
    ) -> None:
        self.client = client
        self.accounts = accounts
        self.profiles = profiles
        self.thumbnails = thumbnails
        self.avatar_dimension = avatar_dimension
        self.log = log or structlog.get_logger(__name__)

    async def execute(self, account: Account) -> SyncResult:
        log = self.log.bind(account=account.name)
        try:
            try:
                info = await self.client.get_user_info()
            except RemoteError as e:
                log.warning("user_info_unavailable", status=e.status, error=str(e))
                return SyncFailure(SyncError.PROFILE_UNAVAILABLE, cause=e)
            log.debug("user_info_fetched", user_id=info.id, display_name=info.display_name)

            await self.accounts.set_user_data(account, KEY_DISPLAY_NAME, info.display_name)
            await self.accounts.set_user_data(account, KEY_ID, info.id)

            profile = UserProfile(
                account_name=account.name,
                user_id=info.id,
                display_name=info.display_name,
                email=info.email,
            )

            try:
                remote_quota = await self.client.get_user_quota(info.id)
            except RemoteError as e:
                log.warning("user_quota_unavailable", status=e.status, error=str(e))
                return SyncFailure(SyncError.QUOTA_UNAVAILABLE, cause=e)
            log.debug("user_quota_fetched", used=remote_quota.used, total=remote_quota.total)

            profile.quota = UserQuota(
                available=remote_quota.free,
                relative=remote_quota.relative,
                total=remote_quota.total,
                used=remote_quota.used,
            )

            profile.avatar = await self._sync_avatar(account, info.id, log)

            await self.profiles.update(profile)
            log.info("user_profile_synced", user_id=profile.user_id, has_avatar=profile.avatar is not None)
            return SyncSuccess(profile)

        except Exception as e:
            log.exception("user_profile_sync_failed")
            return SyncFailure(SyncError.UNEXPECTED_ERROR, cause=e)

    async def _sync_avatar(self, account: Account, user_id: str, log: Any) -> UserAvatar | None:
        """Refresh the cached avatar. Returns the reference the profile should carry."""
        stored = await self.profiles.get(account.name)
        previous = stored.avatar if stored else None

        try:
            avatar = await self.client.get_avatar(
                user_id,
                self.avatar_dimension,
                etag=previous.etag if previous else None,
            )
        except NotFoundError:
            log.info("avatar_not_found_removing_cached_copy")
            await self.profiles.delete_avatar(account.name)
            self.thumbnails.remove_avatar_from_cache(account.name)
            return None
        except NotModifiedError:
            log.debug("avatar_not_modified")
            return previous
        except RemoteError as e:
            # Avatars are only replaced when the server sends a new one.
            log.info("avatar_unavailable", status=e.status, error=str(e))
            return previous

        try:
            cache_key = self.thumbnails.add_avatar_to_cache(account.name, avatar.data, self.avatar_dimension)
        except ValueError as e:
            log.warning("avatar_undecodable", mime_type=avatar.mime_type, error=str(e))
            return previous
        log.debug("avatar_fetched", mime_type=avatar.mime_type, etag=avatar.etag)
        return UserAvatar(cache_key=cache_key, mime_type=avatar.mime_type, etag=avatar.etag)
