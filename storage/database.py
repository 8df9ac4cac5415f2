"""Async PostgreSQL pool and schema migrations."""

import asyncpg
import structlog
from pathlib import Path
from config.settings import settings

log = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

_pool: asyncpg.Pool | None = None


async def get_pool(dsn: str | None = None) -> asyncpg.Pool:
    """Get or create the connection pool."""
    global _pool
    if _pool is None:
        _pool = await asyncpg.create_pool(dsn or settings.database_url, min_size=1, max_size=4)
        log.info("database_pool_created")
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        log.info("database_pool_closed")


def pending_migrations(applied: set[str], migrations_dir: Path = MIGRATIONS_DIR) -> list[Path]:
    """SQL files not yet applied, in filename order."""
    return [f for f in sorted(migrations_dir.glob("*.sql")) if f.name not in applied]


async def run_migrations(pool: asyncpg.Pool | None = None) -> int:
    """Apply pending migrations, each in its own transaction. Returns how many ran."""
    pool = pool or await get_pool()

    async with pool.acquire() as conn:
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                filename VARCHAR(255) PRIMARY KEY,
                applied_at TIMESTAMPTZ DEFAULT NOW()
            )
        """)
        applied = {row["filename"] for row in await conn.fetch("SELECT filename FROM _migrations")}

        pending = pending_migrations(applied)
        for migration_file in pending:
            log.info("applying_migration", filename=migration_file.name)
            async with conn.transaction():
                await conn.execute(migration_file.read_text())
                await conn.execute(
                    "INSERT INTO _migrations (filename) VALUES ($1)",
                    migration_file.name,
                )
    return len(pending)
