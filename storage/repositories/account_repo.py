"""Local accounts and their key/value user data."""

import asyncpg
from sync.models import Account


class AccountRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def add(self, account: Account) -> None:
        async with self._pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO accounts (name, server_url, username)
                VALUES ($1, $2, $3)
                ON CONFLICT (name) DO UPDATE SET server_url = $2, username = $3
                """,
                account.name,
                account.server_url,
                account.username,
            )

    async def get(self, name: str) -> Account | None:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT name, server_url, username FROM accounts WHERE name = $1", name
            )
        if row is None:
            return None
        return Account(name=row["name"], server_url=row["server_url"], username=row["username"])

    async def get_all(self) -> list[Account]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch("SELECT name, server_url, username FROM accounts ORDER BY name")
        return [Account(name=r["name"], server_url=r["server_url"], username=r["username"]) for r in rows]

    async def remove(self, name: str) -> bool:
        """Remove an account and its user data. Returns True if deleted."""
        async with self._pool.acquire() as conn:
            result = await conn.execute("DELETE FROM accounts WHERE name = $1", name)
        return result == "DELETE 1"

    async def set_user_data(self, account: Account, key: str, value: str | None) -> None:
        async with self._pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO account_user_data (account_name, key, value)
                VALUES ($1, $2, $3)
                ON CONFLICT (account_name, key) DO UPDATE SET value = $3, updated_at = NOW()
                """,
                account.name,
                key,
                value,
            )

    async def get_user_data(self, account: Account, key: str) -> str | None:
        async with self._pool.acquire() as conn:
            return await conn.fetchval(
                "SELECT value FROM account_user_data WHERE account_name = $1 AND key = $2",
                account.name,
                key,
            )
