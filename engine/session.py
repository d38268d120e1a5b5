"""Per-game session: the local store that runs and publishes transitions."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Callable

from config import REJECT_STALE_SNAPSHOTS
from engine import board, cards, combat
from engine.decks import DeckRegistry
from engine.maps import get_map
from engine.reconciler import Reconciler
from engine.replication import ChannelHub, ReplicationChannel, SnapshotStore
from engine.setup import create_initial_state
from models.actions import RosterEntry, TransitionResult, TransitionType
from models.cards import Card, CombatCard
from models.characters import Position, TokenTemplate
from models.game_state import GameState

logger = logging.getLogger(__name__)


class GameSession:
    """The local copy of one match and the transitions that change it.

    Every transition validates against the current state, computes a full
    next snapshot, applies it locally and publishes it through the
    replication channel. Rejected transitions are logged and reported in the
    returned TransitionResult; they never raise. Replication failures are
    reported too, but the local state is kept.
    """

    def __init__(
        self,
        game_id: str,
        channel: ReplicationChannel,
        state: GameState | None = None,
        rng: random.Random | None = None,
        reject_stale: bool = REJECT_STALE_SNAPSHOTS,
    ) -> None:
        self.game_id = game_id
        self.channel = channel
        self.state = state if state is not None else GameState()
        self.current_map = get_map(self.state.map_id)
        self.rng = rng or random.Random()
        self.reconciler = Reconciler(self, reject_stale=reject_stale)
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def in_game(self) -> bool:
        return self.reconciler.in_game

    def attach(self, hub: ChannelHub) -> None:
        """Subscribe this session to its game's broadcast channel."""
        self.detach()
        self._unsubscribe = hub.subscribe(self.game_id, self.reconciler.on_message)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def _commit(
        self,
        transition: TransitionType,
        compute: Callable[[GameState], GameState | None],
        description: str,
    ) -> TransitionResult:
        """Run a pure transition, apply its result locally and publish it."""
        try:
            nxt = compute(self.state)
        except ValueError as exc:
            logger.error("%s rejected in game %s: %s", transition.value, self.game_id, exc)
            return TransitionResult(
                success=False,
                transition=transition,
                description=str(exc),
                error=str(exc),
            )

        if nxt is None:
            return TransitionResult(success=True, transition=transition, description=description)

        if len(nxt.log) > len(self.state.log) and nxt.log[-1].message:
            description = nxt.log[-1].message
        nxt.revision = self.state.revision + 1
        self.state = nxt
        if nxt.players:
            self.reconciler.in_game = True

        published = await self.channel.publish(nxt)
        return TransitionResult(
            success=True,
            transition=transition,
            description=description,
            published=published,
        )

    # --- Setup ---

    async def start_game(
        self,
        roster: list[RosterEntry],
        decks: DeckRegistry,
        map_id: str | None = None,
    ) -> TransitionResult:
        """Host only: deal decks, place characters and publish the opening state."""
        def compute(state: GameState) -> GameState:
            if not roster:
                raise ValueError("Cannot start a game without players")
            initial = create_initial_state(roster, decks, map_id, rng=self.rng)
            if not initial.players:
                raise ValueError("No player has a usable deck")
            initial.revision = state.revision
            return initial

        result = await self._commit(TransitionType.START_GAME, compute, "Game started")
        if result.success:
            self.current_map = get_map(self.state.map_id)
        return result

    # --- Cards ---

    async def draw_card(self, player_id: str, character_id: str | None = None) -> TransitionResult:
        return await self._commit(
            TransitionType.DRAW_CARD,
            lambda s: cards.draw_card(s, player_id, character_id, rng=self.rng),
            "Deck and discard pile are empty; nothing to draw",
        )

    async def play_card(self, player_id: str, card_id: int) -> TransitionResult:
        return await self._commit(
            TransitionType.PLAY_CARD,
            lambda s: cards.play_card(s, player_id, card_id),
            f"Played card {card_id}",
        )

    async def discard_card(self, player_id: str, card_id: int) -> TransitionResult:
        return await self._commit(
            TransitionType.DISCARD_CARD,
            lambda s: cards.discard_card(s, player_id, card_id),
            f"Discarded card {card_id}",
        )

    async def shuffle_deck(self, player_id: str) -> TransitionResult:
        return await self._commit(
            TransitionType.SHUFFLE_DECK,
            lambda s: cards.shuffle_deck(s, player_id, rng=self.rng),
            "Deck shuffled",
        )

    async def inspect_deck(
        self,
        inspector_id: str,
        target_player_id: str,
        count: int,
    ) -> TransitionResult:
        return await self._commit(
            TransitionType.INSPECT_DECK,
            lambda s: cards.inspect_deck(s, inspector_id, target_player_id, count),
            "Deck inspection opened",
        )

    async def resolve_deck_inspection(
        self,
        cards_to_top: list[Card],
        cards_to_bottom: list[Card],
    ) -> TransitionResult:
        return await self._commit(
            TransitionType.RESOLVE_INSPECTION,
            lambda s: cards.resolve_deck_inspection(s, cards_to_top, cards_to_bottom),
            "Deck inspection resolved",
        )

    # --- Board ---

    async def move_character(self, character_id: str, position: Position) -> TransitionResult:
        return await self._commit(
            TransitionType.MOVE_CHARACTER,
            lambda s: board.move_character(s, character_id, position),
            f"Moved {character_id}",
        )

    async def update_character_health(self, character_id: str, health: int) -> TransitionResult:
        return await self._commit(
            TransitionType.UPDATE_HEALTH,
            lambda s: board.update_character_health(s, character_id, health),
            f"Set health of {character_id} to {health}",
        )

    async def update_character_conditions(
        self,
        character_id: str,
        conditions: list[str],
    ) -> TransitionResult:
        return await self._commit(
            TransitionType.UPDATE_CONDITIONS,
            lambda s: board.update_character_conditions(s, character_id, conditions),
            f"Updated conditions of {character_id}",
        )

    async def add_token_character(self, template: TokenTemplate) -> TransitionResult:
        return await self._commit(
            TransitionType.ADD_TOKEN,
            lambda s: board.add_token_character(s, template),
            f"Added token {template.name}",
        )

    async def roll_dice(self, player_id: str, sides: int = 6) -> TransitionResult:
        return await self._commit(
            TransitionType.ROLL_DICE,
            lambda s: board.roll_dice(s, player_id, sides, rng=self.rng),
            "Rolled the movement die",
        )

    async def change_map(self, map_id: str) -> TransitionResult:
        self.current_map = get_map(map_id)
        return await self._commit(
            TransitionType.CHANGE_MAP,
            lambda s: board.change_map(s, map_id),
            f"Map changed to {self.current_map.name}",
        )

    def set_map(self, map_id: str) -> None:
        """Preview a map locally without publishing it."""
        self.current_map = get_map(map_id)

    # --- Combat ---

    async def begin_attack(
        self,
        attacker_id: str,
        defender_id: str,
        card: CombatCard,
    ) -> TransitionResult:
        return await self._commit(
            TransitionType.BEGIN_ATTACK,
            lambda s: combat.begin_attack(s, attacker_id, defender_id, card),
            f"{attacker_id} declared an attack on {defender_id}",
        )

    async def resolve_attack(self, defending_card: CombatCard | None = None) -> TransitionResult:
        return await self._commit(
            TransitionType.RESOLVE_ATTACK,
            lambda s: combat.resolve_attack(s, defending_card),
            "Attack resolved",
        )

    def clear_last_attack(self) -> None:
        """Acknowledge the combat result locally. Not published."""
        self.state = combat.clear_last_attack(self.state)

    def clear_log(self) -> None:
        """Empty the local log view. Not published."""
        self.state = self.state.model_copy(update={"log": []})


class SessionRegistry:
    """Owns one GameSession per game id for a hosting process."""

    def __init__(self, store: SnapshotStore, hub: ChannelHub) -> None:
        self.store = store
        self.hub = hub
        self.sessions: dict[str, GameSession] = {}
        self._rejoins: dict[str, asyncio.Future[bool]] = {}

    async def get(self, game_id: str) -> GameSession:
        """Return the session for a game, rejoining from storage on first use.

        The session is registered before the storage read, so concurrent
        first requests share one session and wait for the same rejoin.
        """
        session = self.sessions.get(game_id)
        if session is None:
            channel = ReplicationChannel(game_id, self.store, self.hub)
            session = GameSession(game_id, channel)
            session.attach(self.hub)
            self.sessions[game_id] = session
            self._rejoins[game_id] = asyncio.ensure_future(
                session.reconciler.rejoin(self.store)
            )

        rejoin = self._rejoins.get(game_id)
        if rejoin is not None:
            await rejoin
            self._rejoins.pop(game_id, None)
        return session

    def drop(self, game_id: str) -> None:
        session = self.sessions.pop(game_id, None)
        self._rejoins.pop(game_id, None)
        if session is not None:
            session.detach()
