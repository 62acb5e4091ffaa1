"""
AI Routes

REST API endpoints for the computer opponent:
- Describe difficulty tiers and aggression profiles
- Explain the opponent's next decision for a running game
- Run headless opponent-vs-opponent simulations
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, Path
from pydantic import BaseModel, Field

from ...ai import Aggression, AIConfig, play_simulated_game
from ...core import Difficulty
from .games import DifficultyLevel, get_difficulty_enum, get_engine

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class DifficultyInfo(BaseModel):
    """Decision parameters of one tier"""
    name: str
    lookahead_depth: int
    randomness: float
    hold_probability: float
    bluff_probability: float
    risk_tolerance: float
    counter_estimation_accuracy: float


class AggressionInfo(BaseModel):
    name: str
    description: str


class SimulationRequest(BaseModel):
    """Configuration for a headless game"""
    first: DifficultyLevel = DifficultyLevel.NORMAL
    second: DifficultyLevel = DifficultyLevel.NORMAL
    seed: Optional[int] = Field(default=None, description="Seed for deck and agents")
    max_turns: int = Field(default=200, ge=1, le=1000, description="Turn limit")

    model_config = {
        "json_schema_extra": {
            "example": {
                "first": "hard",
                "second": "easy",
                "seed": 7,
                "max_turns": 200
            }
        }
    }


class SimulationResult(BaseModel):
    winner: Optional[str]
    winner_index: Optional[int]
    scores: Dict[str, int]
    turns: int
    stats: Dict[str, int]
    aggression: List[str]


def difficulty_info(difficulty: Difficulty) -> DifficultyInfo:
    config = AIConfig.for_difficulty(difficulty)
    return DifficultyInfo(
        name=str(difficulty),
        lookahead_depth=config.lookahead_depth,
        randomness=config.randomness,
        hold_probability=config.hold_probability,
        bluff_probability=config.bluff_probability,
        risk_tolerance=config.risk_tolerance,
        counter_estimation_accuracy=config.counter_estimation_accuracy,
    )


# =============================================================================
# API Endpoints
# =============================================================================

@router.get("/difficulties", response_model=List[DifficultyInfo])
async def list_difficulties():
    """
    List all difficulty tiers with their decision parameters.
    """
    return [difficulty_info(d) for d in Difficulty]


@router.get("/difficulties/{name}", response_model=DifficultyInfo)
async def get_difficulty(name: str = Path(..., description="Tier name")):
    """
    Get the decision parameters of one tier.
    """
    try:
        difficulty = Difficulty.from_name(name)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Difficulty '{name}' not found")
    return difficulty_info(difficulty)


@router.get("/aggression", response_model=List[AggressionInfo])
async def list_aggression_profiles():
    """Per-match play styles the opponent may pick"""
    return [AggressionInfo(name=str(a), description=a.description) for a in Aggression]


@router.get("/games/{game_id}/debug", response_model=Dict[str, Any])
async def explain_decision(game_id: str = Path(..., description="Game ID")):
    """
    Analysis and top-ranked candidates the opponent would consider in the
    current state. Does not change the game.
    """
    engine = get_engine(game_id)
    agent = engine.get_opponent_agent()
    return agent.explain(engine.get_state_copy())


@router.post("/simulate", response_model=SimulationResult)
async def simulate_game(request: SimulationRequest = Body(default_factory=SimulationRequest)):
    """
    Play a complete game with the opponent engine in both seats.
    """
    summary = play_simulated_game(
        difficulties=(get_difficulty_enum(request.first), get_difficulty_enum(request.second)),
        seed=request.seed,
        max_turns=request.max_turns,
    )
    return SimulationResult(**summary)
