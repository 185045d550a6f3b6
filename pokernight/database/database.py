from typing import Optional, List
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import select, delete, func, event
from contextlib import asynccontextmanager

from pokernight.config import Config
from pokernight.database.models import Game, PlayerStatistic
from pokernight.database.migrations import apply_migrations, Migration
from pokernight.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url
        self.engine = None
        self.async_session = None
        self.applied_migrations: List[Migration] = []

    async def initialize(self) -> List[Migration]:
        """Initialize the database connection and bring the schema up to date"""
        self.logger.info("Initializing database...")

        # Convert sqlite URL to async if needed
        database_url = self.database_url or Config.get_async_database_url()
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')

        self.engine = create_async_engine(
            database_url,
            echo=Config.DEBUG,
            future=True
        )
        if self.engine.dialect.name == 'sqlite':
            self._enable_sqlite_savepoints()

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        # Apply versioned migrations
        async with self.engine.begin() as conn:
            self.applied_migrations = await apply_migrations(conn)

        self.logger.info("Database initialized successfully")
        return self.applied_migrations

    def _enable_sqlite_savepoints(self):
        """
        Let SQLAlchemy emit BEGIN itself instead of the sqlite3 driver.

        The driver's implicit transactions do not cover SAVEPOINT, so a
        released savepoint would commit the enclosing transaction early.
        """
        @event.listens_for(self.engine.sync_engine, "connect")
        def _disable_driver_transactions(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(self.engine.sync_engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

    @property
    def needs_recompute(self) -> bool:
        """Whether a migration applied at startup invalidated derived statistics"""
        return any(m.requires_recompute for m in self.applied_migrations)

    @property
    def session_factory(self):
        return self.async_session

    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.

        All operations within the context are committed together on success,
        or rolled back together on failure. A game insert and the statistics
        update it triggers always share one of these.

        Usage:
            async with db.transaction() as session:
                await db.add_game(session, game)
                await stats_sync.apply_game_created(session, seating, buy_in)
                # Both commit together here
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")

    # Game (seating store) operations
    async def get_active_game(self, session: AsyncSession) -> Optional[Game]:
        """Get the game that has no recorded winner, if any"""
        result = await session.execute(
            select(Game).where(Game.winner.is_(None)).order_by(Game.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def fingerprint_exists(self, session: AsyncSession, seating_hash: str) -> bool:
        """Check whether a seating with this fingerprint was ever generated"""
        result = await session.execute(
            select(Game.id).where(Game.seating_hash == seating_hash)
        )
        return result.first() is not None

    async def add_game(self, session: AsyncSession, game: Game) -> Game:
        """
        Insert a game inside a savepoint and flush to obtain its id.

        On IntegrityError only the insert is rolled back; the enclosing
        transaction stays usable.
        """
        async with session.begin_nested():
            session.add(game)
            await session.flush()
        return game

    async def get_game(self, session: AsyncSession, game_id: int) -> Optional[Game]:
        """Get a game by id"""
        return await session.get(Game, game_id)

    async def delete_game(self, session: AsyncSession, game: Game) -> None:
        await session.delete(game)
        await session.flush()

    async def get_all_games(self, session: AsyncSession) -> List[Game]:
        """Get the full game history in creation order"""
        result = await session.execute(select(Game).order_by(Game.id))
        return list(result.scalars().all())

    async def get_latest_game_id(self, session: AsyncSession) -> Optional[int]:
        result = await session.execute(select(func.max(Game.id)))
        return result.scalar_one_or_none()

    # Player statistic operations
    async def get_player_statistics(self, session: AsyncSession, players: List[str]) -> dict[str, PlayerStatistic]:
        """Get existing statistic rows for the given players, keyed by name"""
        if not players:
            return {}
        result = await session.execute(
            select(PlayerStatistic).where(PlayerStatistic.player.in_(players))
        )
        return {row.player: row for row in result.scalars().all()}

    async def get_all_player_statistics(self) -> List[PlayerStatistic]:
        async with self.get_session() as session:
            result = await session.execute(select(PlayerStatistic))
            return list(result.scalars().all())

    async def clear_player_statistics(self, session: AsyncSession) -> None:
        """Delete every derived statistic row and forget any copies held by the session"""
        await session.execute(
            delete(PlayerStatistic).execution_options(synchronize_session=False)
        )
        stale = [obj for obj in session.identity_map.values() if isinstance(obj, PlayerStatistic)]
        for obj in stale:
            session.expunge(obj)
