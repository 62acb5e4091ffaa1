# =============================================================================
# BitNet Card Game - Game State
# =============================================================================
"""
The complete game state representation.
This is the central data structure that captures everything about a game.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional
import random
import uuid

from .cards import Card
from .data_structures import (
    AuditBattle, Battle, GameConfig, HeadHunterBattle, Player
)
from .enums import GamePhase
from .network import collect_cards, count_connected_computers


@dataclass
class GameState:
    """
    Complete state of a game instance.

    This class encapsulates all information needed to:
    - Display the game
    - Determine legal moves
    - Execute actions
    - Check the win condition

    The engine never mutates a committed state in place. Every action works
    on ``clone()`` and the clone replaces the committed state on success.
    """

    # ==========================================================================
    # Identifiers
    # ==========================================================================
    game_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # ==========================================================================
    # Players
    # ==========================================================================
    players: List[Player] = field(default_factory=list)
    current_player_index: int = 0

    # ==========================================================================
    # Turn Progress
    # ==========================================================================
    phase: GamePhase = GamePhase.MOVES
    moves_remaining: int = 3
    equipment_moves_remaining: int = 0
    turn_number: int = 1

    # ==========================================================================
    # Piles
    # ==========================================================================
    draw_pile: List[Card] = field(default_factory=list)
    discard_pile: List[Card] = field(default_factory=list)

    # ==========================================================================
    # Interrupts
    # ==========================================================================
    battle: Optional[Battle] = None

    # ==========================================================================
    # Victory / Log
    # ==========================================================================
    winner_index: Optional[int] = None
    game_log: Deque[str] = field(default_factory=lambda: deque(maxlen=20))
    placement_counter: int = 0

    # ==========================================================================
    # Configuration
    # ==========================================================================
    config: GameConfig = field(default_factory=GameConfig)

    def __post_init__(self):
        if self.game_log.maxlen != self.config.game_log_size:
            self.game_log = deque(self.game_log, maxlen=self.config.game_log_size)

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def opponent_index(self) -> int:
        return self.other_index(self.current_player_index)

    @property
    def opponent(self) -> Player:
        return self.players[self.opponent_index]

    @property
    def winner(self) -> Optional[Player]:
        if self.winner_index is None:
            return None
        return self.players[self.winner_index]

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def audit_battle(self) -> Optional[AuditBattle]:
        """The running audit, if the battle slot holds one"""
        return self.battle if isinstance(self.battle, AuditBattle) else None

    @property
    def headhunter_battle(self) -> Optional[HeadHunterBattle]:
        """The running head-hunter battle, if the battle slot holds one"""
        return self.battle if isinstance(self.battle, HeadHunterBattle) else None

    @property
    def acting_player_index(self) -> int:
        """Seat expected to act next: the battle responder, else the current player"""
        if self.battle is not None:
            return self.battle.responder_index
        return self.current_player_index

    @property
    def total_moves_available(self) -> int:
        return self.moves_remaining + self.equipment_moves_remaining

    # ==========================================================================
    # Queries
    # ==========================================================================

    @staticmethod
    def other_index(index: int) -> int:
        return 1 - index

    def get_player(self, index: int) -> Player:
        if index not in (0, 1):
            raise IndexError(f"No player {index}")
        return self.players[index]

    def income(self, index: int) -> int:
        """Bitcoin the player would score if their turn ended now"""
        return count_connected_computers(self.players[index].network)

    def all_cards(self) -> List[Card]:
        """
        Every card in the game, wherever it is. Used to check that cards
        are never created or lost.
        """
        cards: List[Card] = list(self.draw_pile) + list(self.discard_pile)
        for player in self.players:
            cards.extend(player.hand)
            cards.extend(player.audited_computers)
            cards.extend(c.card for c in player.classification_cards)
            cards.extend(collect_cards(player.network))
        if isinstance(self.battle, AuditBattle):
            cards.append(self.battle.audit_card)
            cards.extend(link.card for link in self.battle.chain)
        elif isinstance(self.battle, HeadHunterBattle):
            cards.append(self.battle.initial_card)
            cards.extend(link.card for link in self.battle.chain)
        return cards

    # ==========================================================================
    # Victory Conditions
    # ==========================================================================

    def check_victory_conditions(self) -> Optional[int]:
        """
        Return the index of a player who reached the winning score, or None.
        """
        for index, player in enumerate(self.players):
            if player.score >= self.config.winning_score:
                return index
        return None

    # ==========================================================================
    # State Manipulation
    # ==========================================================================

    def next_placement_id(self) -> str:
        """Allocate an arena-style placement id"""
        self.placement_counter += 1
        return f"placement-{self.placement_counter}"

    def add_log(self, message: str):
        """Append to the bounded game log (oldest entries fall off)"""
        self.game_log.append(message)

    def refill_hand(self, player_index: int, rng: random.Random) -> int:
        """
        Draw until the player holds the maximum hand size. When the draw
        pile runs out the discard pile is shuffled into it.

        Returns:
            Number of cards drawn
        """
        player = self.players[player_index]
        needed = self.config.max_hand_size - len(player.hand)
        drawn = 0
        while drawn < needed:
            if not self.draw_pile:
                if not self.discard_pile:
                    break
                self.draw_pile = list(self.discard_pile)
                self.discard_pile = []
                rng.shuffle(self.draw_pile)
                self.add_log("Discard pile shuffled into the draw pile")
            player.hand.append(self.draw_pile.pop(0))
            drawn += 1
        return drawn

    def end_game(self, winner_index: int):
        """Mark the game as ended"""
        self.winner_index = winner_index
        self.phase = GamePhase.GAME_OVER
        self.battle = None

    # ==========================================================================
    # Cloning
    # ==========================================================================

    def clone(self) -> 'GameState':
        """
        Create a deep copy of the game state.
        Cards are immutable and shared; everything holding them is copied.
        """
        return GameState(
            game_id=self.game_id,
            players=[p.clone() for p in self.players],
            current_player_index=self.current_player_index,
            phase=self.phase,
            moves_remaining=self.moves_remaining,
            equipment_moves_remaining=self.equipment_moves_remaining,
            turn_number=self.turn_number,
            draw_pile=list(self.draw_pile),
            discard_pile=list(self.discard_pile),
            battle=self.battle.clone() if self.battle is not None else None,
            winner_index=self.winner_index,
            game_log=deque(self.game_log, maxlen=self.game_log.maxlen),
            placement_counter=self.placement_counter,
            config=self.config,  # Config is shared, never mutated
        )

    # ==========================================================================
    # Serialization
    # ==========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary for JSON serialization"""
        return {
            "game_id": self.game_id,
            "players": [p.to_dict() for p in self.players],
            "current_player_index": self.current_player_index,
            "phase": self.phase.name,
            "moves_remaining": self.moves_remaining,
            "equipment_moves_remaining": self.equipment_moves_remaining,
            "turn_number": self.turn_number,
            "draw_pile_count": len(self.draw_pile),
            "discard_pile": [c.to_dict() for c in self.discard_pile],
            "battle": self.battle.to_dict() if self.battle is not None else None,
            "winner_index": self.winner_index,
            "game_log": list(self.game_log),
            "config": self.config.to_dict(),
        }

    # ==========================================================================
    # String Representation
    # ==========================================================================

    def __str__(self) -> str:
        """Human-readable summary of game state"""
        lines = [
            f"=== Game {self.game_id[:8]} ===",
            f"Turn: {self.turn_number}  Phase: {self.phase}",
            f"Current Player: {self.current_player.name}",
            f"Moves: {self.moves_remaining} (+{self.equipment_moves_remaining} equipment)",
            f"Draw pile: {len(self.draw_pile)}  Discard: {len(self.discard_pile)}",
        ]
        for index, player in enumerate(self.players):
            lines.append(
                f"{player.name}: {player.score} BTC, income {self.income(index)}, "
                f"hand {len(player.hand)}, classifications "
                f"{[str(c.subtype) for c in player.classification_cards]}"
            )
        if self.is_game_over and self.winner is not None:
            lines.append(f"\nGAME OVER: {self.winner.name} wins")
        return "\n".join(lines)
