# =============================================================================
# Core Game Module
# =============================================================================
"""
Core game engine components including:
- Card catalog and deck composition
- Equipment graph with cascading disable/enable
- Turn/phase state machine
- Audit and head-hunter battles
- Classification abilities
"""

from .enums import (
    CardType, CardSubtype, GamePhase, AuditStage, EquipmentKind, Difficulty
)
from .cards import Card, CardFactory, DECK_COMPOSITION, build_deck, deck_size
from .data_structures import (
    PlacedCard, CableNode, SwitchNode, FloatingCable, PlayerNetwork, Player,
    ChainLink, AuditCandidate, AuditBattle, HeadHunterBattle, Battle,
    GameConfig, ActionResult, ActionRejected
)
from .game_state import GameState
from .actions import ActionValidator
from .game_engine import GameEngine, GameEvent, GameEventType, create_game

__all__ = [
    # Enums
    "CardType", "CardSubtype", "GamePhase", "AuditStage", "EquipmentKind",
    "Difficulty",
    # Cards
    "Card", "CardFactory", "DECK_COMPOSITION", "build_deck", "deck_size",
    # Data structures
    "PlacedCard", "CableNode", "SwitchNode", "FloatingCable", "PlayerNetwork",
    "Player", "ChainLink", "AuditCandidate", "AuditBattle", "HeadHunterBattle",
    "Battle", "GameConfig", "ActionResult", "ActionRejected",
    # Core classes
    "GameState", "ActionValidator",
    "GameEngine", "GameEvent", "GameEventType",
    # Convenience functions
    "create_game",
]
