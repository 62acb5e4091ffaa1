"""
Shared fixtures: a table builder that lays out hand-crafted game states
without spending moves, and wraps them in an engine.
"""

from typing import List, Optional

import pytest

from bitnet.core import (
    CableNode, Card, CardFactory, CardSubtype, Difficulty, GameConfig,
    GameEngine, GameState, PlacedCard, Player, SwitchNode
)
from bitnet.core.network import (
    apply_attack, place_cable, place_computer, place_switch
)


class TableBuilder:
    """Places cards directly on a fresh state"""

    def __init__(self, config: Optional[GameConfig] = None):
        self.factory = CardFactory()
        self.config = config or GameConfig(seed=11)
        players = [
            Player(id="player-1", name="You"),
            Player(id="player-2", name="Opponent", is_human=False),
        ]
        self.state = GameState(players=players, config=self.config,
                               moves_remaining=self.config.moves_per_turn)

    def card(self, subtype: CardSubtype) -> Card:
        return self.factory.create(subtype)

    def give(self, index: int, *subtypes: CardSubtype) -> List[Card]:
        cards = [self.card(s) for s in subtypes]
        self.state.players[index].hand.extend(cards)
        return cards

    def network(self, index: int):
        return self.state.players[index].network

    def switch(self, index: int) -> SwitchNode:
        return place_switch(self.network(index), self.state.next_placement_id(),
                            self.card(CardSubtype.SWITCH))

    def cable(self, index: int, switch: Optional[SwitchNode] = None,
              subtype: CardSubtype = CardSubtype.CABLE_2) -> CableNode:
        return place_cable(self.network(index), self.state.next_placement_id(),
                           self.card(subtype), switch.id if switch else None)

    def computer(self, index: int, cable: Optional[CableNode] = None) -> PlacedCard:
        return place_computer(self.network(index), self.state.next_placement_id(),
                              self.card(CardSubtype.COMPUTER), cable.id if cable else None)

    def scoring_line(self, index: int, computers: int = 1,
                     subtype: CardSubtype = CardSubtype.CABLE_3):
        """Switch, one cable and some computers, all connected"""
        switch = self.switch(index)
        cable = self.cable(index, switch, subtype)
        nodes = [self.computer(index, cable) for _ in range(computers)]
        return switch, cable, nodes

    def attack(self, index: int, node: PlacedCard,
               subtype: CardSubtype = CardSubtype.HACKED) -> Card:
        card = self.card(subtype)
        apply_attack(self.network(index), node.id, card)
        return card

    def classification(self, index: int, subtype: CardSubtype) -> PlacedCard:
        placed = PlacedCard(id=self.state.next_placement_id(), card=self.card(subtype))
        self.state.players[index].classification_cards.append(placed)
        return placed

    def stock_draw_pile(self, count: int = 30, subtype: CardSubtype = CardSubtype.COMPUTER):
        self.state.draw_pile.extend(self.card(subtype) for _ in range(count))

    def engine(self, difficulty: Difficulty = Difficulty.NORMAL) -> GameEngine:
        engine = GameEngine(config=self.config, difficulty=difficulty)
        engine.load_state(self.state)
        return engine


@pytest.fixture
def table() -> TableBuilder:
    return TableBuilder()
