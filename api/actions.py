"""Endpoints that run transitions on the hosted game session."""

from fastapi import APIRouter, HTTPException, Request

from api.games import ActionResponse
from config import MAX_HAND_SIZE
from engine.grid import snap_to_grid
from engine.session import GameSession
from models.actions import (
    BeginAttackRequest,
    CardRequest,
    ChangeMapRequest,
    ConditionsRequest,
    DrawCardRequest,
    HealthRequest,
    InspectDeckRequest,
    MoveRequest,
    ResolveAttackRequest,
    ResolveInspectionRequest,
    RollDiceRequest,
    ShuffleRequest,
    TokenRequest,
    TransitionResult,
)

router = APIRouter()


async def _get_session(request: Request, game_id: str) -> GameSession:
    """Get the hosted session for a game from app state."""
    return await request.app.state.sessions.get(game_id)


def _respond(session: GameSession, result: TransitionResult) -> ActionResponse:
    """Map a transition result onto an HTTP response.

    Rejected transitions are 400s. A replication failure is a 502, although
    the session keeps the new state locally.
    """
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)
    if result.published is not None and not result.published.ok:
        raise HTTPException(
            status_code=502,
            detail={"message": "Replication failed", "errors": result.published.errors},
        )
    return ActionResponse(result=result, state=session.state)


@router.post("/draw", response_model=ActionResponse)
async def draw_card(game_id: str, body: DrawCardRequest, request: Request) -> ActionResponse:
    """Draw a card, optionally binding a combat card to a character."""
    session = await _get_session(request, game_id)
    player = session.state.find_player(body.player_id)
    if player is not None and len(player.hand) >= MAX_HAND_SIZE:
        raise HTTPException(
            status_code=409, detail=f"Hand is full ({MAX_HAND_SIZE} cards)"
        )
    result = await session.draw_card(body.player_id, body.character_id)
    return _respond(session, result)


@router.post("/play", response_model=ActionResponse)
async def play_card(game_id: str, body: CardRequest, request: Request) -> ActionResponse:
    session = await _get_session(request, game_id)
    return _respond(session, await session.play_card(body.player_id, body.card_id))


@router.post("/discard", response_model=ActionResponse)
async def discard_card(game_id: str, body: CardRequest, request: Request) -> ActionResponse:
    session = await _get_session(request, game_id)
    return _respond(session, await session.discard_card(body.player_id, body.card_id))


@router.post("/shuffle", response_model=ActionResponse)
async def shuffle_deck(game_id: str, body: ShuffleRequest, request: Request) -> ActionResponse:
    session = await _get_session(request, game_id)
    return _respond(session, await session.shuffle_deck(body.player_id))


@router.post("/move", response_model=ActionResponse)
async def move_character(game_id: str, body: MoveRequest, request: Request) -> ActionResponse:
    """Move a character. With snap set, the position is snapped and clamped first."""
    session = await _get_session(request, game_id)
    position = body.position
    if body.snap:
        character = session.state.find_character(body.character_id)
        if character is not None:
            position = snap_to_grid(
                position.x, position.y, character.size, session.state.grid_size
            )
    return _respond(session, await session.move_character(body.character_id, position))


@router.post("/health", response_model=ActionResponse)
async def update_health(game_id: str, body: HealthRequest, request: Request) -> ActionResponse:
    session = await _get_session(request, game_id)
    result = await session.update_character_health(body.character_id, body.health)
    return _respond(session, result)


@router.post("/conditions", response_model=ActionResponse)
async def update_conditions(
    game_id: str,
    body: ConditionsRequest,
    request: Request,
) -> ActionResponse:
    session = await _get_session(request, game_id)
    result = await session.update_character_conditions(body.character_id, body.conditions)
    return _respond(session, result)


@router.post("/token", response_model=ActionResponse)
async def add_token(game_id: str, body: TokenRequest, request: Request) -> ActionResponse:
    session = await _get_session(request, game_id)
    return _respond(session, await session.add_token_character(body.token))


@router.post("/inspect", response_model=ActionResponse)
async def inspect_deck(game_id: str, body: InspectDeckRequest, request: Request) -> ActionResponse:
    """Open a scry on the top cards of a player's deck."""
    session = await _get_session(request, game_id)
    result = await session.inspect_deck(body.inspector_id, body.target_player_id, body.count)
    return _respond(session, result)


@router.post("/resolve-inspection", response_model=ActionResponse)
async def resolve_inspection(
    game_id: str,
    body: ResolveInspectionRequest,
    request: Request,
) -> ActionResponse:
    session = await _get_session(request, game_id)
    result = await session.resolve_deck_inspection(body.cards_to_top, body.cards_to_bottom)
    return _respond(session, result)


@router.post("/roll", response_model=ActionResponse)
async def roll_dice(game_id: str, body: RollDiceRequest, request: Request) -> ActionResponse:
    session = await _get_session(request, game_id)
    return _respond(session, await session.roll_dice(body.player_id, body.sides))


@router.post("/map", response_model=ActionResponse)
async def change_map(game_id: str, body: ChangeMapRequest, request: Request) -> ActionResponse:
    session = await _get_session(request, game_id)
    return _respond(session, await session.change_map(body.map_id))


@router.post("/attack", response_model=ActionResponse)
async def begin_attack(game_id: str, body: BeginAttackRequest, request: Request) -> ActionResponse:
    """Declare an attack with a face-down combat card."""
    session = await _get_session(request, game_id)
    result = await session.begin_attack(body.attacker_id, body.defender_id, body.card)
    return _respond(session, result)


@router.post("/defend", response_model=ActionResponse)
async def resolve_attack(
    game_id: str,
    body: ResolveAttackRequest,
    request: Request,
) -> ActionResponse:
    """Answer the pending attack, with a defending card or without one."""
    session = await _get_session(request, game_id)
    return _respond(session, await session.resolve_attack(body.defending_card))


@router.post("/clear-last-attack")
async def clear_last_attack(game_id: str, request: Request) -> dict:
    """Acknowledge the last combat result on the hosted session only."""
    session = await _get_session(request, game_id)
    session.clear_last_attack()
    return {"cleared": True}
