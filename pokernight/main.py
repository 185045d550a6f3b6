import logging
import random
import traceback
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pokernight.config import Config
from pokernight.database.database import Database
from pokernight.operations.admin_operations import AdminOperations
from pokernight.operations.seating_operations import SeatingOperations
from pokernight.services.admin_sessions import AdminSessionStore
from pokernight.services.history_service import HistoryService
from pokernight.services.leaderboard import LeaderboardService
from pokernight.services.player_stats_sync import PlayerStatsSyncService
from pokernight.services.write_lock import WriteLock
from pokernight.api import games_router, stats_router, admin_router
from pokernight.utils.exceptions import PokerNightError
from pokernight.utils.logger import setup_logger

class PokerNightServer:
    """Owns the database and wires the services and operations together"""

    def __init__(
        self,
        database_url: Optional[str] = None,
        admin_password: Optional[str] = None,
        redis_url: Optional[str] = None,
        rng: Optional[random.Random] = None
    ):
        self.logger = setup_logger(__name__)
        self.db = Database(database_url)
        self.write_lock = WriteLock(redis_url if redis_url is not None else Config.REDIS_URL)
        self.stats_sync = PlayerStatsSyncService(self.db)
        self.seating_ops = SeatingOperations(self.db, self.stats_sync, self.write_lock, rng=rng)
        self.admin_ops = AdminOperations(self.db, self.stats_sync, self.write_lock)
        self.uses_default_password = admin_password is None and Config.uses_default_admin_password()
        self.admin_sessions = AdminSessionStore.from_password(
            admin_password or Config.ADMIN_PASSWORD,
            Config.ADMIN_TOKEN_TTL_HOURS * 60 * 60
        )
        self.leaderboard: Optional[LeaderboardService] = None
        self.history: Optional[HistoryService] = None

    async def setup(self):
        """Called when the server is starting up"""
        self.logger.info("Setting up poker night server...")

        await self.db.initialize()
        await self.write_lock.connect()

        if self.db.needs_recompute:
            self.logger.info("Schema migration changed derived statistics, recomputing...")
            await self.admin_ops.recompute_statistics()

        self.leaderboard = LeaderboardService(self.db.session_factory)
        self.history = HistoryService(self.db.session_factory)

        if self.uses_default_password:
            self.logger.warning("ADMIN_PASSWORD is not set, using the default password. Set it before exposing the server.")

        self.logger.info("Poker night server setup complete!")

    async def close(self):
        """Cleanup when server is shutting down"""
        self.logger.info("Shutting down poker night server...")
        await self.write_lock.close()
        await self.db.close()


def create_app(server: Optional[PokerNightServer] = None) -> FastAPI:
    """Build the FastAPI application around a server instance"""
    server = server or PokerNightServer()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await server.setup()
        try:
            yield
        finally:
            await server.close()

    app = FastAPI(title="Poker Night", lifespan=lifespan)
    app.state.server = server

    app.include_router(games_router)
    app.include_router(stats_router)
    app.include_router(admin_router)

    @app.exception_handler(PokerNightError)
    async def handle_poker_night_error(request: Request, exc: PokerNightError):
        if exc.status_code >= 500:
            server.logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            server.logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.user_message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        server.logger.info(f"{request.method} {request.url.path} rejected: invalid request body")
        return JSONResponse(status_code=400, content={"error": "Invalid request", "details": jsonable_errors(exc)})

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


def run():
    """Main entry point"""
    Config.validate()

    try:
        uvicorn.run(create_app(), host=Config.HOST, port=Config.PORT)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        traceback.print_exc()
        raise

if __name__ == "__main__":
    run()
