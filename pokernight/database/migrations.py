"""
Versioned schema migrations for the poker night database.

Migrations are an ordered list of named steps. Each step runs at most once and
the highest applied version is stored in the ``schema_version`` table. Column
additions still probe ``PRAGMA table_info`` first so that databases created by
older deployments (which altered tables ad hoc) are adopted without errors.

Steps flagged ``requires_recompute`` change what player statistics can be
derived from the game history, so the caller must run a full statistics
recompute after they are applied.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, List

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from pokernight.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    apply: Callable[[AsyncConnection], Awaitable[None]]
    requires_recompute: bool = False


async def _get_columns(conn: AsyncConnection, table: str) -> List[str]:
    result = await conn.execute(text(f"PRAGMA table_info({table})"))
    return [row[1] for row in result.fetchall()]


async def _add_column(conn: AsyncConnection, table: str, column: str, definition: str) -> None:
    if column in await _get_columns(conn, table):
        logger.debug(f"Column {table}.{column} already exists, skipping")
        return
    await conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {definition}"))
    logger.info(f"Added {table}.{column}")


async def _create_base_tables(conn: AsyncConnection) -> None:
    await conn.execute(text("""
        CREATE TABLE IF NOT EXISTS games (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            players TEXT NOT NULL,
            seating_hash TEXT UNIQUE NOT NULL,
            winner TEXT
        )
    """))
    await conn.execute(text("""
        CREATE TABLE IF NOT EXISTS player_stats (
            player TEXT PRIMARY KEY,
            games_played INTEGER DEFAULT 0,
            wins INTEGER DEFAULT 0
        )
    """))


async def _add_game_economics(conn: AsyncConnection) -> None:
    await _add_column(conn, 'games', 'buy_in', 'REAL NOT NULL DEFAULT 0')
    await _add_column(conn, 'games', 'second_place', 'TEXT')
    await _add_column(conn, 'games', 'third_place', 'TEXT')


async def _add_player_economics(conn: AsyncConnection) -> None:
    await _add_column(conn, 'player_stats', 'top3_count', 'INTEGER NOT NULL DEFAULT 0')
    await _add_column(conn, 'player_stats', 'total_buy_ins', 'REAL NOT NULL DEFAULT 0')
    await _add_column(conn, 'player_stats', 'total_winnings', 'REAL NOT NULL DEFAULT 0')
    await _add_column(conn, 'player_stats', 'net_profit', 'REAL NOT NULL DEFAULT 0')


async def _add_game_indexes(conn: AsyncConnection) -> None:
    await conn.execute(text("CREATE INDEX IF NOT EXISTS idx_games_winner ON games(winner)"))


MIGRATIONS: List[Migration] = [
    Migration(1, 'create_base_tables', _create_base_tables),
    Migration(2, 'add_game_economics', _add_game_economics),
    Migration(3, 'add_player_economics', _add_player_economics, requires_recompute=True),
    Migration(4, 'add_game_indexes', _add_game_indexes),
]


async def _ensure_version_table(conn: AsyncConnection) -> None:
    await conn.execute(text("""
        CREATE TABLE IF NOT EXISTS schema_version (
            id INTEGER PRIMARY KEY,
            version INTEGER NOT NULL DEFAULT 0,
            applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """))
    await conn.execute(text("INSERT OR IGNORE INTO schema_version (id, version) VALUES (1, 0)"))


async def get_schema_version(conn: AsyncConnection) -> int:
    await _ensure_version_table(conn)
    result = await conn.execute(text("SELECT version FROM schema_version WHERE id = 1"))
    return result.scalar_one()


async def apply_migrations(conn: AsyncConnection, migrations: List[Migration] = None) -> List[Migration]:
    """
    Apply every pending migration in version order.

    Args:
        conn: Connection inside an open transaction
        migrations: Override of the migration list (tests)

    Returns:
        The migrations that were applied by this call, empty when up to date
    """
    migrations = sorted(migrations if migrations is not None else MIGRATIONS, key=lambda m: m.version)
    current = await get_schema_version(conn)

    applied = []
    for migration in migrations:
        if migration.version <= current:
            continue

        logger.info(f"Applying migration {migration.version}: {migration.name}")
        await migration.apply(conn)
        await conn.execute(
            text("UPDATE schema_version SET version = :version, applied_at = CURRENT_TIMESTAMP WHERE id = 1"),
            {'version': migration.version}
        )
        applied.append(migration)

    if applied:
        logger.info(f"Schema migrated from version {current} to {applied[-1].version}")
    else:
        logger.debug(f"Schema up to date at version {current}")
    return applied
