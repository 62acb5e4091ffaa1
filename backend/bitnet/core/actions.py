# =============================================================================
# BitNet Card Game - Actions Module
# =============================================================================
"""
Rule guards shared by every action.
Engine actions call these before mutating the working state; each guard
raises ActionRejected with the log line shown to the player.
"""

from typing import Callable, Iterable, Optional, Tuple

from .cards import Card
from .data_structures import ActionRejected, GameConfig, Player
from .enums import CardType, CardSubtype, GamePhase
from .game_state import GameState


# =============================================================================
# Action Validation
# =============================================================================

class ActionValidator:
    """
    Validates actions before execution.

    Checks:
    - The game is still running
    - The phase allows the action
    - It is the acting player's turn
    - The move budget covers the action
    - The card is in the acting player's hand
    """

    def __init__(self, config: GameConfig):
        self.config = config

    def validate(self, guard: Callable[..., object], *args) -> Tuple[bool, str]:
        """
        Run a guard and report the outcome without raising.

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            guard(*args)
        except ActionRejected as exc:
            return False, exc.message
        return True, ""

    # =========================================================================
    # State Guards
    # =========================================================================

    def require_active(self, state: GameState):
        if state.is_game_over:
            raise ActionRejected("The game is over")

    def require_phase(self, state: GameState, *phases: GamePhase):
        self.require_active(state)
        if state.phase not in phases:
            allowed = ", ".join(str(p) for p in phases)
            raise ActionRejected(f"Not allowed during {state.phase} phase (needs {allowed})")

    def require_turn(self, state: GameState, player_index: int):
        """The seat must be the one expected to act, battle responder included"""
        if player_index != state.acting_player_index:
            raise ActionRejected("It is not your turn")

    def require_moves(self, state: GameState, equipment: bool = False):
        available = state.moves_remaining
        if equipment:
            available += state.equipment_moves_remaining
        if available <= 0:
            raise ActionRejected("No moves remaining")

    def require_play(self, state: GameState, equipment: bool = False):
        """Guard for any paid play during the moves phase"""
        self.require_phase(state, GamePhase.MOVES)
        self.require_moves(state, equipment)

    # =========================================================================
    # Card Guards
    # =========================================================================

    def require_card(self, player: Player, card_id: str,
                     card_type: Optional[CardType] = None,
                     subtypes: Optional[Iterable[CardSubtype]] = None) -> Card:
        card = player.find_in_hand(card_id)
        if card is None:
            raise ActionRejected(f"Card {card_id} is not in {player.name}'s hand")
        if card_type is not None and card.card_type != card_type:
            raise ActionRejected(f"{card.name} is not a {card_type} card")
        if subtypes is not None and card.subtype not in set(subtypes):
            raise ActionRejected(f"{card.name} cannot be played here")
        return card

    def require_target_player(self, state: GameState, target_index: int,
                              acting_index: int):
        if target_index not in (0, 1):
            raise ActionRejected(f"No player {target_index}")
        if target_index == acting_index:
            raise ActionRejected("You cannot target yourself")

    # =========================================================================
    # Move Budget
    # =========================================================================

    def spend_move(self, state: GameState, equipment: bool = False) -> str:
        """
        Decrement the budget. Equipment actions use the bonus equipment move
        first.

        Returns:
            "equipment" or "regular", whichever was spent
        """
        if equipment and state.equipment_moves_remaining > 0:
            state.equipment_moves_remaining -= 1
            return "equipment"
        if state.moves_remaining <= 0:
            raise ActionRejected("No moves remaining")
        state.moves_remaining -= 1
        return "regular"
