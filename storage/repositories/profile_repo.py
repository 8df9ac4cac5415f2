"""User profile repository: profile, quota and avatar rows per account."""

import asyncpg
from typing import Any
from sync.models import UserAvatar, UserProfile, UserQuota


def _profile_from_row(row: Any) -> UserProfile:
    quota = None
    if row["total"] is not None:
        quota = UserQuota(
            available=row["available"],
            relative=row["relative"],
            total=row["total"],
            used=row["used"],
        )
    avatar = None
    if row["cache_key"] is not None:
        avatar = UserAvatar(cache_key=row["cache_key"], mime_type=row["mime_type"], etag=row["etag"])
    return UserProfile(
        account_name=row["account_name"],
        user_id=row["user_id"],
        display_name=row["display_name"],
        email=row["email"],
        quota=quota,
        avatar=avatar,
    )


class UserProfilesRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def get(self, account_name: str) -> UserProfile | None:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT p.account_name, p.user_id, p.display_name, p.email,
                       q.available, q.relative, q.total, q.used,
                       a.cache_key, a.mime_type, a.etag
                FROM user_profiles p
                LEFT JOIN user_quotas q ON q.account_name = p.account_name
                LEFT JOIN user_avatars a ON a.account_name = p.account_name
                WHERE p.account_name = $1
                """,
                account_name,
            )
        return _profile_from_row(row) if row else None

    async def update(self, profile: UserProfile) -> None:
        """Store ``profile`` as the full state for its account.

        Quota and avatar rows are removed when the profile carries none.
        """
        name = profile.account_name
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(
                    """
                    INSERT INTO user_profiles (account_name, user_id, display_name, email)
                    VALUES ($1, $2, $3, $4)
                    ON CONFLICT (account_name) DO UPDATE SET
                        user_id = $2, display_name = $3, email = $4, updated_at = NOW()
                    """,
                    name,
                    profile.user_id,
                    profile.display_name,
                    profile.email,
                )

                if profile.quota is not None:
                    q = profile.quota
                    await conn.execute(
                        """
                        INSERT INTO user_quotas (account_name, available, relative, total, used)
                        VALUES ($1, $2, $3, $4, $5)
                        ON CONFLICT (account_name) DO UPDATE SET
                            available = $2, relative = $3, total = $4, used = $5
                        """,
                        name,
                        q.available,
                        q.relative,
                        q.total,
                        q.used,
                    )
                else:
                    await conn.execute("DELETE FROM user_quotas WHERE account_name = $1", name)

                if profile.avatar is not None:
                    a = profile.avatar
                    await conn.execute(
                        """
                        INSERT INTO user_avatars (account_name, cache_key, mime_type, etag)
                        VALUES ($1, $2, $3, $4)
                        ON CONFLICT (account_name) DO UPDATE SET
                            cache_key = $2, mime_type = $3, etag = $4
                        """,
                        name,
                        a.cache_key,
                        a.mime_type,
                        a.etag,
                    )
                else:
                    await conn.execute("DELETE FROM user_avatars WHERE account_name = $1", name)

    async def delete_avatar(self, account_name: str) -> None:
        async with self._pool.acquire() as conn:
            await conn.execute("DELETE FROM user_avatars WHERE account_name = $1", account_name)

    async def delete(self, account_name: str) -> bool:
        """Remove the profile with its quota and avatar. Returns True if deleted."""
        async with self._pool.acquire() as conn:
            result = await conn.execute("DELETE FROM user_profiles WHERE account_name = $1", account_name)
        return result == "DELETE 1"
