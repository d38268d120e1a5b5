"""Deck registry: loading and validating deck definition files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from models.decks import DeckConfig, DeckLoadResult, DeckMetadata

logger = logging.getLogger(__name__)


def _format_validation_error(exc: ValidationError) -> str:
    """Turn a pydantic error into a single user-facing line."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err["loc"])
        message = err["msg"].removeprefix("Value error, ")
        parts.append(f"{location}: {message}" if location else message)
    return "Invalid deck configuration: " + "; ".join(parts)


def validate_deck(data: dict[str, Any]) -> DeckConfig:
    """Validate raw deck data.

    Raises:
        ValueError: With a user-facing message if the deck is malformed.
    """
    try:
        return DeckConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(_format_validation_error(exc)) from exc


class DeckRegistry:
    """In-memory collection of validated decks, keyed by deck id."""

    def __init__(self) -> None:
        self.decks: dict[str, DeckConfig] = {}
        self.active_deck_id: str | None = None
        self.error: str | None = None

    def load_deck(self, data: dict[str, Any]) -> DeckLoadResult:
        """Validate and register a deck. Replaces a deck with the same id."""
        try:
            deck = validate_deck(data)
        except ValueError as exc:
            self.error = str(exc)
            logger.warning("Rejected deck: %s", exc)
            return DeckLoadResult(success=False, error=str(exc))

        self.decks[deck.id] = deck
        self.error = None
        logger.info("Loaded deck %s (%s)", deck.id, deck.name)
        return DeckLoadResult(success=True, deck=deck)

    def load_deck_file(self, path: str | Path) -> DeckLoadResult:
        """Read a JSON deck file and register it."""
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            self.error = f"Failed to load deck file: {exc}"
            logger.warning("Could not read deck file %s: %s", path, exc)
            return DeckLoadResult(success=False, error=self.error)
        if not isinstance(data, dict):
            self.error = "Failed to load deck file: expected a JSON object"
            return DeckLoadResult(success=False, error=self.error)
        return self.load_deck(data)

    def load_directory(self, path: str | Path) -> list[DeckLoadResult]:
        """Register every *.json deck in a directory, in name order."""
        directory = Path(path)
        if not directory.is_dir():
            logger.warning("Deck directory %s does not exist", directory)
            return []
        return [self.load_deck_file(p) for p in sorted(directory.glob("*.json"))]

    def get(self, deck_id: str | None) -> DeckConfig | None:
        if deck_id is None:
            return None
        return self.decks.get(deck_id)

    def first(self) -> DeckConfig | None:
        """The first registered deck, used when a player picked none."""
        return next(iter(self.decks.values()), None)

    def list_decks(self) -> list[DeckMetadata]:
        return [
            DeckMetadata(
                id=deck.id,
                name=deck.name,
                description=deck.description or "",
                author=deck.author,
                version=deck.version,
                card_count=len(deck.cards),
            )
            for deck in self.decks.values()
        ]

    def set_active_deck(self, deck_id: str | None) -> bool:
        """Select a deck; unknown ids leave the selection unchanged."""
        if deck_id is not None and deck_id not in self.decks:
            self.error = "Deck not found"
            return False
        self.active_deck_id = deck_id
        self.error = None
        return True

    def remove_deck(self, deck_id: str) -> None:
        self.decks.pop(deck_id, None)
        if self.active_deck_id == deck_id:
            self.active_deck_id = None

    def clear(self) -> None:
        self.decks.clear()
        self.active_deck_id = None
        self.error = None
