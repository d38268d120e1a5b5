"""FastAPI app entry point for Skirmish Server."""

import logging

from fastapi import FastAPI

from api.actions import router as actions_router
from api.games import router as games_router
from api.ws import router as ws_router
from config import DECKS_DIR, GAMES_DIR, LOG_LEVEL
from engine.decks import DeckRegistry
from engine.replication import ChannelHub, JsonFileStore
from engine.session import SessionRegistry

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def create_app(games_dir: str = GAMES_DIR, decks_dir: str = DECKS_DIR) -> FastAPI:
    """Build the app with its storage, broadcast hub, sessions and decks."""
    app = FastAPI(
        title="Skirmish Server",
        description="Snapshot storage and broadcast relay for a shared tactical card game",
        version="0.1.0",
    )

    app.state.store = JsonFileStore(games_dir)
    app.state.hub = ChannelHub()
    app.state.sessions = SessionRegistry(app.state.store, app.state.hub)
    app.state.decks = DeckRegistry()
    app.state.decks.load_directory(decks_dir)

    app.include_router(games_router, tags=["Games"])
    app.include_router(actions_router, prefix="/games/{game_id}/actions", tags=["Actions"])
    app.include_router(ws_router, tags=["WebSocket"])

    @app.get("/")
    def root() -> dict:
        """Root endpoint returning server info."""
        return {"name": "Skirmish Server", "version": "0.1.0", "status": "running"}

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint."""
        return {"healthy": True}

    return app


app = create_app()
