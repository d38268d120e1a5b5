"""Game records, broadcast relay, game start, decks, maps and conditions."""

from typing import Any
from uuid import uuid4

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ValidationError

from config import LOBBY_SENTINEL
from engine.conditions import get_condition, list_conditions
from engine.decks import DeckRegistry
from engine.maps import list_maps
from engine.replication import ChannelHub, JsonFileStore, parse_record, serialize_record
from engine.session import SessionRegistry
from models.actions import StartGameRequest, TransitionResult
from models.conditions import Condition, ConditionType
from models.decks import DeckMetadata
from models.game_state import GameState
from models.maps import MapDefinition

router = APIRouter()


class CreateGameRequest(BaseModel):
    """Request body for creating a game record."""
    game_id: str | None = None


class CreateGameResponse(BaseModel):
    game_id: str
    state: str


class StateRecord(BaseModel):
    """A stored record: a full snapshot or the lobby sentinel."""
    state: Any


class BroadcastRequest(BaseModel):
    """A message relayed to every subscriber of a game."""
    type: str
    payload: Any = None


class BroadcastResponse(BaseModel):
    status: str


class ActiveDeckRequest(BaseModel):
    deck_id: str | None = None


class ActionResponse(BaseModel):
    """A transition result together with the session's resulting state."""
    result: TransitionResult
    state: GameState


def _get_store(request: Request) -> JsonFileStore:
    return request.app.state.store


def _get_hub(request: Request) -> ChannelHub:
    return request.app.state.hub


def _get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _get_decks(request: Request) -> DeckRegistry:
    return request.app.state.decks


@router.post("/games", response_model=CreateGameResponse)
async def create_game(body: CreateGameRequest, request: Request) -> CreateGameResponse:
    """Create a game record holding the lobby sentinel."""
    store = _get_store(request)
    game_id = body.game_id or uuid4().hex[:8]
    try:
        exists = store.exists(game_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if exists:
        raise HTTPException(status_code=409, detail=f"Game '{game_id}' already exists")
    await store.save(game_id, LOBBY_SENTINEL)
    return CreateGameResponse(game_id=game_id, state=LOBBY_SENTINEL)


@router.get("/games/{game_id}/state", response_model=StateRecord)
async def get_state(game_id: str, request: Request) -> StateRecord:
    """Read the persisted record of a game."""
    try:
        record = await _get_store(request).load(game_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if record is None:
        raise HTTPException(status_code=404, detail=f"Game '{game_id}' not found")
    return StateRecord(state=serialize_record(record))


@router.put("/games/{game_id}/state", response_model=StateRecord)
async def put_state(game_id: str, body: StateRecord, request: Request) -> StateRecord:
    """Replace the persisted record of a game."""
    try:
        record = parse_record(body.state)
    except (ValueError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        await _get_store(request).save(game_id, record)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return StateRecord(state=serialize_record(record))


@router.post("/games/{game_id}/broadcast", response_model=BroadcastResponse)
async def broadcast(game_id: str, body: BroadcastRequest, request: Request) -> BroadcastResponse:
    """Relay a message to every subscriber of the game, the sender included."""
    status = await _get_hub(request).send(game_id, body.model_dump())
    return BroadcastResponse(status=status)


@router.post("/games/{game_id}/start", response_model=ActionResponse)
async def start_game(game_id: str, body: StartGameRequest, request: Request) -> ActionResponse:
    """Host a new match: build the opening state and publish it."""
    session = await _get_sessions(request).get(game_id)
    if session.in_game:
        raise HTTPException(status_code=400, detail="Game has already started")

    result = await session.start_game(body.players, _get_decks(request), body.map_id)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return ActionResponse(result=result, state=session.state)


@router.get("/decks", response_model=list[DeckMetadata])
def get_decks(request: Request) -> list[DeckMetadata]:
    """List registered decks."""
    return _get_decks(request).list_decks()


@router.get("/maps", response_model=list[MapDefinition])
def get_maps() -> list[MapDefinition]:
    """List preset terrain maps."""
    return list_maps()


@router.post("/decks", response_model=DeckMetadata)
def upload_deck(data: dict[str, Any], request: Request) -> DeckMetadata:
    """Validate and register an uploaded deck definition.

    A deck with the same id is replaced. Validation problems are reported
    as a single 400 message.
    """
    registry = _get_decks(request)
    result = registry.load_deck(data)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    return next(m for m in registry.list_decks() if m.id == result.deck.id)


@router.delete("/decks/{deck_id}")
def delete_deck(deck_id: str, request: Request) -> dict:
    registry = _get_decks(request)
    if registry.get(deck_id) is None:
        raise HTTPException(status_code=404, detail=f"Deck '{deck_id}' not found")
    registry.remove_deck(deck_id)
    return {"deleted": deck_id}


@router.delete("/decks")
def clear_decks(request: Request) -> dict:
    """Unregister every deck."""
    _get_decks(request).clear()
    return {"cleared": True}


@router.get("/decks/active")
def get_active_deck(request: Request) -> dict:
    return {"deck_id": _get_decks(request).active_deck_id}


@router.put("/decks/active")
def set_active_deck(body: ActiveDeckRequest, request: Request) -> dict:
    """Select the deck offered by default; null clears the selection."""
    registry = _get_decks(request)
    if not registry.set_active_deck(body.deck_id):
        raise HTTPException(status_code=404, detail=registry.error)
    return {"deck_id": registry.active_deck_id}


@router.get("/conditions", response_model=list[Condition])
def get_conditions(type: ConditionType | None = None) -> list[Condition]:
    """List the standard named conditions, optionally filtered by type."""
    return list_conditions(type)


@router.get("/conditions/{name}", response_model=Condition)
def get_condition_by_name(name: str) -> Condition:
    condition = get_condition(name)
    if condition is None:
        raise HTTPException(status_code=404, detail=f"Condition '{name}' not found")
    return condition
