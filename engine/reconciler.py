"""Applies inbound snapshots to a local game session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from config import LOBBY_SENTINEL, STATE_UPDATE_EVENT
from engine.maps import get_map
from models.game_state import GameState

if TYPE_CHECKING:
    from engine.replication import SnapshotStore
    from engine.session import GameSession

logger = logging.getLogger(__name__)


class Reconciler:
    """Replaces a session's state with snapshots received from elsewhere.

    The merge is a shallow, field-by-field overwrite: any top-level field
    present in the snapshot replaces the local one wholesale, nested lists
    included. Whatever arrives last wins.

    With reject_stale enabled, snapshots carrying a lower revision than the
    local state are ignored instead.
    """

    def __init__(self, session: GameSession, reject_stale: bool = False) -> None:
        self.session = session
        self.reject_stale = reject_stale
        self.in_game = False

    def apply(self, payload: GameState | dict[str, Any] | str | None) -> bool:
        """Merge a snapshot into the session.

        Returns:
            True if the local state was replaced.
        """
        if payload is None or payload == LOBBY_SENTINEL:
            return False

        if isinstance(payload, GameState):
            incoming = payload.model_copy(deep=True)
            fields = list(GameState.model_fields)
        else:
            try:
                incoming = GameState.model_validate(payload)
            except ValidationError as exc:
                logger.error("Ignoring malformed snapshot for game %s: %s", self.session.game_id, exc)
                return False
            fields = list(incoming.model_fields_set)

        current = self.session.state
        if self.reject_stale and incoming.revision < current.revision:
            logger.warning(
                "Ignoring stale snapshot for game %s (revision %d < %d)",
                self.session.game_id,
                incoming.revision,
                current.revision,
            )
            return False

        self.session.state = current.model_copy(
            update={name: getattr(incoming, name) for name in fields}
        )
        if "map_id" in fields:
            self.session.current_map = get_map(self.session.state.map_id)
        if self.session.state.players:
            self.in_game = True
        return True

    async def on_message(self, message: dict[str, Any]) -> None:
        """Channel subscriber: apply state update events."""
        if message.get("type") != STATE_UPDATE_EVENT:
            return
        self.apply(message.get("payload"))

    async def rejoin(self, store: SnapshotStore) -> bool:
        """Fetch the persisted record and apply it, as a rejoining client does."""
        try:
            record = await store.load(self.session.game_id)
        except Exception as exc:
            logger.error("Error fetching game state on rejoin for %s: %s", self.session.game_id, exc)
            return False
        return self.apply(record)
