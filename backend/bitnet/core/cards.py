# =============================================================================
# BitNet Card Game - Card Catalog
# =============================================================================
"""
Card definitions, the deck composition table and deck building.

Every physical card is an immutable ``Card`` whose id is ``{subtype}-{n}``.
The deck is built once per game from ``DECK_COMPOSITION``, shuffled with a
seeded ``random.Random`` and dealt to the players.
"""

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Any

from .enums import CardSubtype, CardType


# =============================================================================
# Card
# =============================================================================

@dataclass(frozen=True)
class Card:
    """
    A single card. Immutable; identity is the ``id``.

    Attributes:
        id: Unique identifier within a game (e.g. "computer-12")
        subtype: Concrete card kind
    """
    id: str
    subtype: CardSubtype

    @property
    def card_type(self) -> CardType:
        return self.subtype.card_type

    @property
    def name(self) -> str:
        return self.subtype.display_name

    @property
    def description(self) -> str:
        return self.subtype.description

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "type": str(self.card_type),
            "subtype": str(self.subtype),
            "name": self.name,
            "description": self.description,
        }

    def __str__(self) -> str:
        return f"{self.name} [{self.id}]"


# =============================================================================
# Deck Composition
# =============================================================================

# subtype -> number of copies in a fresh deck (144 cards)
DECK_COMPOSITION: Dict[CardSubtype, int] = {
    # Equipment (75)
    CardSubtype.COMPUTER: 32,
    CardSubtype.CABLE_2: 16,
    CardSubtype.CABLE_3: 9,
    CardSubtype.SWITCH: 18,
    # Attacks (27)
    CardSubtype.AUDIT: 4,
    CardSubtype.HACKED: 9,
    CardSubtype.NEW_HIRE: 7,
    CardSubtype.POWER_OUTAGE: 7,
    # Resolutions (27)
    CardSubtype.HELPDESK: 4,
    CardSubtype.TRAINED: 7,
    CardSubtype.POWERED: 7,
    CardSubtype.SECURED: 9,
    # Classifications (15)
    CardSubtype.FACILITIES: 2,
    CardSubtype.FIELD_TECH: 2,
    CardSubtype.SUPERVISOR: 2,
    CardSubtype.SECURITY_SPECIALIST: 2,
    CardSubtype.HEAD_HUNTER: 6,
    CardSubtype.SEAL_THE_DEAL: 1,
}


def deck_size() -> int:
    """Total number of cards in a fresh deck"""
    return sum(DECK_COMPOSITION.values())


class CardFactory:
    """
    Creates cards with per-subtype sequential ids.

    One factory is used per game so ids never collide.
    """

    def __init__(self):
        self._counters: Dict[CardSubtype, int] = {}

    def create(self, subtype: CardSubtype) -> Card:
        """Create the next card of a subtype"""
        number = self._counters.get(subtype, 0) + 1
        self._counters[subtype] = number
        return Card(id=f"{subtype.value}-{number}", subtype=subtype)

    def create_many(self, subtype: CardSubtype, count: int) -> List[Card]:
        return [self.create(subtype) for _ in range(count)]


def build_deck(composition: Optional[Dict[CardSubtype, int]] = None,
               factory: Optional[CardFactory] = None) -> List[Card]:
    """
    Build an unshuffled deck.

    Args:
        composition: Copies per subtype (defaults to DECK_COMPOSITION)
        factory: Card factory to draw ids from

    Returns:
        List of cards grouped by subtype
    """
    composition = composition or DECK_COMPOSITION
    factory = factory or CardFactory()
    deck: List[Card] = []
    for subtype, count in composition.items():
        deck.extend(factory.create_many(subtype, count))
    return deck


def shuffle_deck(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """Return a shuffled copy of the deck"""
    rng = rng or random.Random()
    shuffled = list(deck)
    rng.shuffle(shuffled)
    return shuffled


def deal_hands(deck: List[Card], players: int, hand_size: int) -> Tuple[List[List[Card]], List[Card]]:
    """
    Deal ``hand_size`` cards to each player from the top of the deck.

    Returns:
        Tuple of (hands, remaining draw pile)
    """
    if players * hand_size > len(deck):
        raise ValueError("Not enough cards to deal")
    hands = [deck[i * hand_size:(i + 1) * hand_size] for i in range(players)]
    return hands, deck[players * hand_size:]
