"""Persistence and broadcast of game snapshots.

A snapshot is published by writing it to durable storage and then
broadcasting it to every subscriber of the game's channel, the publisher
included. The two steps are independent: a failed write does not stop the
broadcast, and nothing is retried or rolled back.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Protocol

import httpx

from config import BROADCAST_TIMEOUT_SECONDS, LOBBY_SENTINEL, STATE_UPDATE_EVENT
from models.actions import PublishResult
from models.game_state import GameState

logger = logging.getLogger(__name__)

# A persisted record is either a full snapshot or the lobby sentinel.
Record = GameState | str
Subscriber = Callable[[dict[str, Any]], Awaitable[None]]
DropHook = Callable[[], Awaitable[None]]


def serialize_record(record: Record) -> Any:
    """Convert a record to its JSON form."""
    if isinstance(record, GameState):
        return record.model_dump(mode="json")
    return record


def parse_record(data: Any) -> Record:
    """Parse the JSON form of a record.

    Raises:
        ValueError: If data is neither the lobby sentinel nor a snapshot.
    """
    if data == LOBBY_SENTINEL:
        return LOBBY_SENTINEL
    if isinstance(data, dict):
        return GameState.model_validate(data)
    raise ValueError(f"Unrecognised game record: {data!r}")


def state_update(snapshot: GameState) -> dict[str, Any]:
    """Build the broadcast message carrying a snapshot."""
    return {"type": STATE_UPDATE_EVENT, "payload": snapshot.model_dump(mode="json")}


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class SnapshotStore(Protocol):
    async def save(self, game_id: str, record: Record) -> None: ...

    async def load(self, game_id: str) -> Record | None: ...


class MemoryStore:
    """Keeps records in a dict. Useful for tests and embedded hosts."""

    def __init__(self) -> None:
        self.records: dict[str, Any] = {}

    async def save(self, game_id: str, record: Record) -> None:
        self.records[game_id] = serialize_record(record)

    async def load(self, game_id: str) -> Record | None:
        if game_id not in self.records:
            return None
        return parse_record(self.records[game_id])


class JsonFileStore:
    """One JSON file per game under a directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, game_id: str) -> Path:
        if not game_id or "/" in game_id or "\\" in game_id or game_id.startswith("."):
            raise ValueError(f"Invalid game id: {game_id!r}")
        return self.directory / f"{game_id}.json"

    async def save(self, game_id: str, record: Record) -> None:
        """Write the record, via a temporary file renamed into place."""
        path = self.path_for(game_id)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = str(path) + ".tmp"
        with open(tmp_path, "w") as f:
            json.dump(serialize_record(record), f, default=str)
        os.replace(tmp_path, path)

    async def load(self, game_id: str) -> Record | None:
        path = self.path_for(game_id)
        if not path.exists():
            return None
        with open(path) as f:
            data = json.load(f)
        return parse_record(data)

    def exists(self, game_id: str) -> bool:
        return self.path_for(game_id).exists()


class HttpSnapshotStore:
    """Persists records through a remote host's state endpoint."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def save(self, game_id: str, record: Record) -> None:
        resp = await self.client.put(
            f"/games/{game_id}/state", json={"state": serialize_record(record)}
        )
        resp.raise_for_status()

    async def load(self, game_id: str) -> Record | None:
        resp = await self.client.get(f"/games/{game_id}/state")
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return parse_record(resp.json()["state"])


# ---------------------------------------------------------------------------
# Broadcast
# ---------------------------------------------------------------------------


class Broadcaster(Protocol):
    async def send(self, game_id: str, message: dict[str, Any]) -> str: ...


class ChannelHub:
    """In-process broadcast channels, one per game id.

    Delivery is self-inclusive: a publisher that is subscribed to its own
    game receives its own messages.
    """

    def __init__(self, timeout: float = BROADCAST_TIMEOUT_SECONDS) -> None:
        self.timeout = timeout
        self.closed = False
        self._subscribers: dict[str, list[Subscriber]] = {}
        self._drop_hooks: dict[Subscriber, DropHook] = {}

    def subscribe(
        self,
        game_id: str,
        subscriber: Subscriber,
        on_drop: DropHook | None = None,
    ) -> Callable[[], None]:
        """Register a subscriber and return a function that removes it.

        on_drop is awaited if the hub later drops the subscriber because a
        delivery failed or timed out.
        """
        self._subscribers.setdefault(game_id, []).append(subscriber)
        if on_drop is not None:
            self._drop_hooks[subscriber] = on_drop

        def unsubscribe() -> None:
            self._remove(game_id, subscriber)

        return unsubscribe

    def _remove(self, game_id: str, subscriber: Subscriber) -> DropHook | None:
        bucket = self._subscribers.get(game_id)
        if bucket and subscriber in bucket:
            bucket.remove(subscriber)
            if not bucket:
                del self._subscribers[game_id]
        return self._drop_hooks.pop(subscriber, None)

    def subscriber_count(self, game_id: str) -> int:
        return len(self._subscribers.get(game_id, []))

    async def send(self, game_id: str, message: dict[str, Any]) -> str:
        """Deliver a message to every subscriber of a game.

        Subscribers that fail or time out are dropped and their drop hooks
        run. Returns "ok" once the message has been handed to all live
        subscribers.
        """
        if self.closed:
            return "closed"

        dead = []
        for subscriber in list(self._subscribers.get(game_id, [])):
            try:
                await asyncio.wait_for(subscriber(message), timeout=self.timeout)
            except Exception as exc:
                logger.warning("Dropping subscriber of game %s: %r", game_id, exc)
                dead.append(subscriber)
        for subscriber in dead:
            on_drop = self._remove(game_id, subscriber)
            if on_drop is None:
                continue
            try:
                await asyncio.wait_for(on_drop(), timeout=self.timeout)
            except Exception as exc:
                logger.warning("Drop hook for game %s failed: %r", game_id, exc)
        return "ok"

    def close(self) -> None:
        self.closed = True
        self._subscribers.clear()
        self._drop_hooks.clear()


class HttpBroadcaster:
    """Broadcasts through a remote host's broadcast endpoint."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def send(self, game_id: str, message: dict[str, Any]) -> str:
        try:
            resp = await self.client.post(f"/games/{game_id}/broadcast", json=message)
        except httpx.TimeoutException:
            return "timed out"
        except httpx.HTTPError as exc:
            logger.error("Broadcast request for game %s failed: %s", game_id, exc)
            return "error"
        if resp.status_code != 200:
            return "error"
        return resp.json().get("status", "error")


# ---------------------------------------------------------------------------
# Channel
# ---------------------------------------------------------------------------


class ReplicationChannel:
    """Persist-then-broadcast publication for a single game."""

    def __init__(self, game_id: str, store: SnapshotStore, broadcaster: Broadcaster) -> None:
        self.game_id = game_id
        self.store = store
        self.broadcaster = broadcaster

    async def publish(self, snapshot: GameState) -> PublishResult:
        """Write the snapshot to storage, then broadcast it.

        Both steps are always attempted, in that order. Failures are logged
        and reported in the result; they are never raised.
        """
        errors: list[str] = []

        persisted = True
        try:
            await self.store.save(self.game_id, snapshot)
        except Exception as exc:
            persisted = False
            errors.append(f"persist failed: {exc}")
            logger.error("Failed to persist game %s: %s", self.game_id, exc)

        try:
            status = await self.broadcaster.send(self.game_id, state_update(snapshot))
        except Exception as exc:
            status = "error"
            errors.append(f"broadcast failed: {exc}")
            logger.error("Failed to broadcast game %s: %s", self.game_id, exc)
        else:
            if status != "ok":
                errors.append(f"Broadcast failed with status: {status}")
                logger.error(
                    "Broadcast for game %s failed with status: %s", self.game_id, status
                )

        return PublishResult(persisted=persisted, broadcast_status=status, errors=errors)
