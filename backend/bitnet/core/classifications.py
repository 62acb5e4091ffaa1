# =============================================================================
# BitNet Card Game - Classification Abilities
# =============================================================================
"""
Persistent abilities granted by classification cards.

- security-specialist / facilities / supervisor clear every matching issue
  across the owner's network the moment they enter play (including by
  steal) and block new attacks of that type while held.
- field-tech grants one equipment move per turn.
- head-hunter / seal-the-deal are steal cards, handled by the battle
  protocol.
"""

import logging
from typing import List, Optional

from .cards import Card
from .data_structures import ActionRejected, GameConfig, PlacedCard, Player
from .enums import CardSubtype
from .game_state import GameState
from .network import clear_issues

logger = logging.getLogger(__name__)


def blocking_classification(player: Player, attack: CardSubtype) -> Optional[PlacedCard]:
    """Classification that makes the player immune to an attack subtype"""
    for placed in player.classification_cards:
        if placed.subtype.clears == attack:
            return placed
    return None


def equipment_moves_for(player: Player, config: GameConfig) -> int:
    """Bonus equipment moves granted at turn start (never stacks)"""
    if player.has_classification(CardSubtype.FIELD_TECH):
        return config.field_tech_equipment_moves
    return 0


def on_enter_play(state: GameState, owner_index: int, placed: PlacedCard) -> List[str]:
    """
    Trigger the entry ability of a classification.

    Returns:
        Effect lines for the action result
    """
    target = placed.subtype.clears
    if target is None:
        return []
    owner = state.players[owner_index]
    removed = clear_issues(owner.network, target)
    state.discard_pile.extend(removed)
    if not removed:
        return []
    logger.debug("%s cleared %d %s issues for %s",
                 placed.subtype, len(removed), target, owner.name)
    return [f"{placed.card.name} resolved {len(removed)} {target.display_name} issue(s)"]


def make_room(state: GameState, owner_index: int,
              discard_classification_id: Optional[str]) -> Optional[Card]:
    """
    Discard one of the owner's classifications if they are at the cap.

    Returns:
        The discarded card, or None when no room was needed

    Raises:
        ActionRejected: at the cap without a valid classification to discard
    """
    owner = state.players[owner_index]
    if len(owner.classification_cards) < state.config.max_classifications:
        return None
    if discard_classification_id is None:
        raise ActionRejected(
            f"Already holding {state.config.max_classifications} classifications; "
            f"choose one to discard"
        )
    placed = owner.find_classification(discard_classification_id)
    if placed is None:
        raise ActionRejected(f"Classification {discard_classification_id} not found")
    owner.classification_cards.remove(placed)
    state.discard_pile.append(placed.card)
    return placed.card


def add_classification(state: GameState, owner_index: int, card: Card) -> List[str]:
    """Put a classification into play for its owner and trigger it"""
    placed = PlacedCard(id=state.next_placement_id(), card=card)
    state.players[owner_index].classification_cards.append(placed)
    return on_enter_play(state, owner_index, placed)
