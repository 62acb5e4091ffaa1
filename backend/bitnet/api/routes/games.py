"""
Game Routes

REST API endpoints for game management:
- Create/list/get/delete games
- One endpoint per player action
- Computer opponent turns
- Game log and event history
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, Path, Query
from pydantic import BaseModel, Field

from ...core import ActionResult, Difficulty, GameConfig, GameEngine

router = APIRouter()


# =============================================================================
# Pydantic Models for Request/Response
# =============================================================================

class DifficultyLevel(str, Enum):
    """Difficulty levels for API"""
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    NIGHTMARE = "nightmare"


class CreateGameRequest(BaseModel):
    """Request model for creating a new game"""
    difficulty: DifficultyLevel = DifficultyLevel.NORMAL
    seed: Optional[int] = Field(default=None, description="Seed for a reproducible deal")
    player_name: str = Field(default="You", description="Name of the human player")
    starting_player: int = Field(default=0, ge=0, le=1, description="Who moves first")

    model_config = {
        "json_schema_extra": {
            "example": {
                "difficulty": "normal",
                "seed": 42,
                "player_name": "You",
                "starting_player": 0
            }
        }
    }


class CardRequest(BaseModel):
    """A card from the current player's hand"""
    card_id: str = Field(..., description="Card id, e.g. computer-12")


class CableRequest(CardRequest):
    switch_id: Optional[str] = Field(default=None, description="Switch placement id; floating if omitted")


class ComputerRequest(CardRequest):
    cable_id: Optional[str] = Field(default=None, description="Cable placement id; floating if omitted")


class MoveRequest(BaseModel):
    """Move a cable or computer with everything attached to it"""
    source_type: str = Field(..., description="cable or computer")
    source_id: str
    target_type: str = Field(..., description="switch, cable or floating")
    target_id: Optional[str] = None


class AttackRequest(CardRequest):
    target_node_id: str
    target_player_index: int = Field(..., ge=0, le=1)


class ResolutionRequest(CardRequest):
    target_node_id: str


class ClassificationRequest(CardRequest):
    target_class_id: Optional[str] = Field(default=None, description="Opponent classification to steal")
    discard_class_id: Optional[str] = Field(default=None, description="Own classification to discard at the cap")


class AuditRequest(CardRequest):
    target_player_index: int = Field(..., ge=0, le=1)


class BattleResponseRequest(BaseModel):
    """A chain response or pass by the human seat"""
    card_id: Optional[str] = None


class SelectionRequest(BaseModel):
    placement_id: str


class ActionResultResponse(BaseModel):
    """Response model for action result"""
    success: bool
    action: str
    message: str
    effects: List[str] = []
    points_gained: int = 0
    ends_turn: bool = False
    data: Dict[str, Any] = {}
    game_state: Dict[str, Any]


# =============================================================================
# Game Storage (In-Memory)
# =============================================================================

games_store: Dict[str, Dict] = {}


def get_difficulty_enum(level: DifficultyLevel) -> Difficulty:
    """Convert API difficulty to game enum"""
    return Difficulty.from_name(level.value)


def get_engine(game_id: str) -> GameEngine:
    if game_id not in games_store:
        raise HTTPException(status_code=404, detail="Game not found")
    return games_store[game_id]["engine"]


def game_state_to_response(engine: GameEngine, viewer_index: int = 0) -> Dict[str, Any]:
    """
    Serialize the state for one seat. The other player's hand is reduced
    to its size.
    """
    data = engine.state.to_dict()
    for index, player in enumerate(data["players"]):
        if index != viewer_index:
            player["hand_count"] = len(player["hand"])
            player["hand"] = []
    data["scores"] = engine.get_scores()
    data["game_over"] = engine.is_game_over()
    data["difficulty"] = engine.difficulty.name
    return data


def get_human_index(game_id: str) -> int:
    get_engine(game_id)
    return games_store[game_id]["human_index"]


def run_action(game_id: str, action: Callable[[GameEngine], ActionResult],
               check_turn: bool = True) -> ActionResultResponse:
    """
    Execute an engine action; rejections become HTTP 400. Unless told
    otherwise, the human seat must be the one expected to act.
    """
    engine = get_engine(game_id)
    if engine.is_game_over():
        raise HTTPException(status_code=400, detail="Game is already over")
    if check_turn:
        valid, message = engine.validator.validate(
            engine.validator.require_turn, engine.state, get_human_index(game_id))
        if not valid:
            raise HTTPException(status_code=400, detail=message)
    result = action(engine)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return ActionResultResponse(
        success=result.success,
        action=result.action,
        message=result.message,
        effects=result.effects,
        points_gained=result.points_gained,
        ends_turn=result.ends_turn,
        data=result.data,
        game_state=game_state_to_response(engine, games_store[game_id]["human_index"]),
    )


# =============================================================================
# Game Endpoints
# =============================================================================

@router.post("/")
async def create_new_game(request: CreateGameRequest):
    """
    Create a new game session against the computer opponent.

    Returns the game id and the initial game state.
    """
    config = GameConfig(player_names=[request.player_name, "Opponent"], seed=request.seed)
    engine = GameEngine(config=config, difficulty=get_difficulty_enum(request.difficulty))
    engine.initialize_game(starting_player=request.starting_player)
    game_id = engine.state.game_id

    games_store[game_id] = {
        "engine": engine,
        "human_index": 0,
        "difficulty": request.difficulty.value,
    }
    return {"game_id": game_id, "game_state": game_state_to_response(engine)}


@router.get("/", response_model=List[Dict[str, Any]])
async def list_games(
    active_only: bool = Query(default=True, description="Only return active games")
):
    """
    List all game sessions.
    """
    games = []
    for game_id, game_data in games_store.items():
        engine = game_data["engine"]
        is_active = not engine.is_game_over()
        if active_only and not is_active:
            continue
        games.append({
            "game_id": game_id,
            "turn_number": engine.state.turn_number,
            "current_player": engine.state.current_player.name,
            "difficulty": game_data["difficulty"],
            "scores": engine.get_scores(),
            "is_active": is_active
        })
    return games


@router.get("/{game_id}")
async def get_game(game_id: str = Path(..., description="Game ID")):
    """
    Get the current state of a game.
    """
    engine = get_engine(game_id)
    return game_state_to_response(engine, games_store[game_id]["human_index"])


@router.delete("/{game_id}")
async def delete_game(game_id: str = Path(..., description="Game ID")):
    """
    Delete a game session.
    """
    get_engine(game_id)
    del games_store[game_id]
    return {"message": "Game deleted", "game_id": game_id}


# =============================================================================
# Equipment Actions
# =============================================================================

@router.post("/{game_id}/switch", response_model=ActionResultResponse)
async def play_switch(game_id: str, request: CardRequest = Body(...)):
    return run_action(game_id, lambda e: e.play_switch(request.card_id))


@router.post("/{game_id}/cable", response_model=ActionResultResponse)
async def play_cable(game_id: str, request: CableRequest = Body(...)):
    return run_action(game_id, lambda e: e.play_cable(request.card_id, request.switch_id))


@router.post("/{game_id}/computer", response_model=ActionResultResponse)
async def play_computer(game_id: str, request: ComputerRequest = Body(...)):
    """Play a computer from the hand or from the audited pool"""
    return run_action(game_id, lambda e: e.play_computer(request.card_id, request.cable_id))


@router.post("/{game_id}/move", response_model=ActionResultResponse)
async def move_equipment(game_id: str, request: MoveRequest = Body(...)):
    """Reroute equipment; connecting floating equipment is free"""
    return run_action(game_id, lambda e: e.move_equipment(
        request.source_type, request.source_id, request.target_type, request.target_id))


# =============================================================================
# Attack / Resolution / Classification Actions
# =============================================================================

@router.post("/{game_id}/attack", response_model=ActionResultResponse)
async def play_attack(game_id: str, request: AttackRequest = Body(...)):
    return run_action(game_id, lambda e: e.play_attack(
        request.card_id, request.target_node_id, request.target_player_index))


@router.post("/{game_id}/resolution", response_model=ActionResultResponse)
async def play_resolution(game_id: str, request: ResolutionRequest = Body(...)):
    return run_action(game_id, lambda e: e.play_resolution(request.card_id, request.target_node_id))


@router.post("/{game_id}/classification", response_model=ActionResultResponse)
async def play_classification(game_id: str, request: ClassificationRequest = Body(...)):
    """Play a classification, or steal one with head-hunter / seal-the-deal"""
    return run_action(game_id, lambda e: e.play_classification(
        request.card_id, request.target_class_id, request.discard_class_id))


@router.post("/{game_id}/discard", response_model=ActionResultResponse)
async def discard_card(game_id: str, request: CardRequest = Body(...)):
    return run_action(game_id, lambda e: e.discard_card(request.card_id))


# =============================================================================
# Audit Battle
# =============================================================================

@router.post("/{game_id}/audit", response_model=ActionResultResponse)
async def start_audit(game_id: str, request: AuditRequest = Body(...)):
    return run_action(game_id, lambda e: e.start_audit(request.card_id, request.target_player_index))


@router.post("/{game_id}/audit/respond", response_model=ActionResultResponse)
async def respond_to_audit(game_id: str, request: BattleResponseRequest = Body(...)):
    if request.card_id is None:
        raise HTTPException(status_code=400, detail="card_id is required to respond")
    seat = get_human_index(game_id)
    return run_action(game_id, lambda e: e.respond_to_audit(request.card_id, seat))


@router.post("/{game_id}/audit/pass", response_model=ActionResultResponse)
async def pass_audit(game_id: str):
    seat = get_human_index(game_id)
    return run_action(game_id, lambda e: e.pass_audit(seat))


@router.post("/{game_id}/audit/select", response_model=ActionResultResponse)
async def toggle_audit_selection(game_id: str, request: SelectionRequest = Body(...)):
    seat = get_human_index(game_id)
    return run_action(game_id, lambda e: e.toggle_audit_computer_selection(
        request.placement_id, seat))


@router.post("/{game_id}/audit/confirm", response_model=ActionResultResponse)
async def confirm_audit_selection(game_id: str):
    seat = get_human_index(game_id)
    return run_action(game_id, lambda e: e.confirm_audit_selection(seat))


# =============================================================================
# Head-Hunter Battle
# =============================================================================

@router.post("/{game_id}/headhunter/respond", response_model=ActionResultResponse)
async def respond_to_headhunter(game_id: str, request: BattleResponseRequest = Body(...)):
    if request.card_id is None:
        raise HTTPException(status_code=400, detail="card_id is required to respond")
    seat = get_human_index(game_id)
    return run_action(game_id, lambda e: e.respond_to_headhunter_battle(
        request.card_id, seat))


@router.post("/{game_id}/headhunter/pass", response_model=ActionResultResponse)
async def pass_headhunter(game_id: str):
    seat = get_human_index(game_id)
    return run_action(game_id, lambda e: e.pass_headhunter_battle(seat))


# =============================================================================
# Turn Flow
# =============================================================================

@router.post("/{game_id}/discard-phase", response_model=ActionResultResponse)
async def enter_discard_phase(game_id: str):
    return run_action(game_id, lambda e: e.enter_discard_phase())


@router.post("/{game_id}/end-phase", response_model=ActionResultResponse)
async def end_phase(game_id: str):
    """End the current turn: draw, score, check the win, hand over"""
    return run_action(game_id, lambda e: e.end_phase())


@router.post("/{game_id}/ai-turn", response_model=ActionResultResponse)
async def execute_ai_turn(game_id: str):
    """
    Let the computer opponent act. It plays until its turn ends, or answers
    a pending battle step and returns.
    """
    engine = get_engine(game_id)
    if engine.state.acting_player_index != engine.config.opponent_index:
        raise HTTPException(status_code=400, detail="Not the opponent's turn")
    return run_action(game_id, lambda e: e.execute_ai_turn(), check_turn=False)


# =============================================================================
# Log & History
# =============================================================================

@router.get("/{game_id}/log", response_model=List[str])
async def get_game_log(game_id: str = Path(..., description="Game ID")):
    """The bounded in-game log, oldest first"""
    return list(get_engine(game_id).state.game_log)


@router.get("/{game_id}/history", response_model=List[Dict[str, Any]])
async def get_game_history(
    game_id: str = Path(..., description="Game ID"),
    limit: Optional[int] = Query(default=None, ge=1, description="Most recent events only")
):
    """
    Get the event history of a game.
    """
    engine = get_engine(game_id)
    history = []
    for i, event in enumerate(engine.get_event_history(limit=limit)):
        history.append({
            "index": i,
            "type": event.event_type.name,
            "turn": event.turn,
            "player_index": event.player_index,
            "action": event.action or None,
            "message": event.message
        })
    return history
