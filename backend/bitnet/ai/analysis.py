# =============================================================================
# BitNet Card Game - Opponent Analysis
# =============================================================================
"""
Situation analysis run fresh before every opponent decision:

- NetworkAnalysis: what a network mines, how fragile it is
- HandAnalysis: what the hand can do, which cards are dead
- OpponentModel: what the other player probably holds and how they play
"""

import math
from collections import Counter, deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Deque, Dict, List

from ..core.cards import Card, DECK_COMPOSITION, deck_size
from ..core.data_structures import Player, PlayerNetwork
from ..core.enums import CardSubtype, CardType, EquipmentKind
from ..core.game_state import GameState
from ..core.network import count_connected_computers, iter_nodes


# =============================================================================
# Network Analysis
# =============================================================================

@dataclass
class NetworkAnalysis:
    """Snapshot of one player's equipment"""
    connected_computers: int = 0
    total_computers: int = 0
    enabled_switches: int = 0
    disabled_switches: int = 0
    enabled_cables: int = 0
    disabled_cables: int = 0
    floating_cables: int = 0
    floating_computers: int = 0
    available_cable_slots: int = 0
    single_points_of_failure: int = 0
    total_equipment: int = 0
    disabled_equipment: int = 0
    issue_counts: Dict[CardSubtype, int] = field(default_factory=dict)

    @property
    def redundancy_score(self) -> float:
        """0.0 - 1.0, how well income survives a single attack"""
        if self.enabled_switches > 1:
            return max(0.0, min(1.0, self.enabled_switches * 0.4
                                - self.single_points_of_failure * 0.3))
        return 0.1 if self.single_points_of_failure else 0.3

    @property
    def vulnerability_score(self) -> float:
        """Share of equipment currently disabled"""
        if self.total_equipment == 0:
            return 0.0
        return self.disabled_equipment / self.total_equipment

    @property
    def total_issues(self) -> int:
        return sum(self.issue_counts.values())

    def to_dict(self) -> Dict:
        return {
            "connected_computers": self.connected_computers,
            "total_computers": self.total_computers,
            "enabled_switches": self.enabled_switches,
            "disabled_switches": self.disabled_switches,
            "enabled_cables": self.enabled_cables,
            "disabled_cables": self.disabled_cables,
            "floating_cables": self.floating_cables,
            "floating_computers": self.floating_computers,
            "available_cable_slots": self.available_cable_slots,
            "single_points_of_failure": self.single_points_of_failure,
            "redundancy_score": round(self.redundancy_score, 3),
            "vulnerability_score": round(self.vulnerability_score, 3),
            "issues": {str(k): v for k, v in self.issue_counts.items()},
        }


def analyze_network(network: PlayerNetwork) -> NetworkAnalysis:
    """Summarize a network for decision making"""
    analysis = NetworkAnalysis(
        connected_computers=count_connected_computers(network),
        floating_cables=len(network.floating_cables),
        floating_computers=len(network.floating_computers),
    )
    issues: Counter = Counter()
    for ref in iter_nodes(network):
        analysis.total_equipment += 1
        if ref.node.is_disabled:
            analysis.disabled_equipment += 1
        issues.update(ref.node.issue_subtypes())
        if ref.kind == EquipmentKind.COMPUTER:
            analysis.total_computers += 1

    for switch in network.switches:
        if switch.is_disabled:
            analysis.disabled_switches += 1
        else:
            analysis.enabled_switches += 1
        scoring_cables = 0
        for cable in switch.cables:
            if cable.is_disabled:
                analysis.disabled_cables += 1
                continue
            analysis.enabled_cables += 1
            analysis.available_cable_slots += cable.free_slots
            if any(not c.is_disabled for c in cable.computers):
                scoring_cables += 1
        # A switch carrying two or more scoring cables takes them all down
        if not switch.is_disabled and scoring_cables >= 2:
            analysis.single_points_of_failure += 1

    analysis.issue_counts = dict(issues)
    return analysis


# =============================================================================
# Hand Analysis
# =============================================================================

@dataclass
class HandAnalysis:
    """Cards in hand grouped by what they can do"""
    switches: List[Card] = field(default_factory=list)
    cables: List[Card] = field(default_factory=list)
    computers: List[Card] = field(default_factory=list)
    attacks: List[Card] = field(default_factory=list)
    audits: List[Card] = field(default_factory=list)
    resolutions: List[Card] = field(default_factory=list)
    classifications: List[Card] = field(default_factory=list)
    steal_cards: List[Card] = field(default_factory=list)
    dead_cards: List[Card] = field(default_factory=list)

    @property
    def equipment(self) -> List[Card]:
        return self.switches + self.cables + self.computers

    def count(self, subtype: CardSubtype) -> int:
        groups = (self.switches + self.cables + self.computers + self.attacks + self.audits
                  + self.resolutions + self.classifications + self.steal_cards)
        return sum(1 for c in groups if c.subtype == subtype)

    def to_dict(self) -> Dict:
        return {
            "switches": len(self.switches),
            "cables": len(self.cables),
            "computers": len(self.computers),
            "attacks": len(self.attacks),
            "audits": len(self.audits),
            "resolutions": len(self.resolutions),
            "classifications": len(self.classifications),
            "steal_cards": len(self.steal_cards),
            "dead_cards": [c.id for c in self.dead_cards],
        }


def analyze_hand(player: Player, network_analysis: NetworkAnalysis) -> HandAnalysis:
    """
    Bucket a hand. A resolution is dead when nothing on the board matches it
    (helpdesk is dead only when there are no issues at all).
    """
    hand = HandAnalysis()
    for card in player.hand:
        subtype = card.subtype
        if subtype == CardSubtype.SWITCH:
            hand.switches.append(card)
        elif subtype.is_cable:
            hand.cables.append(card)
        elif subtype == CardSubtype.COMPUTER:
            hand.computers.append(card)
        elif subtype == CardSubtype.AUDIT:
            hand.audits.append(card)
        elif card.card_type == CardType.ATTACK:
            hand.attacks.append(card)
        elif card.card_type == CardType.RESOLUTION:
            hand.resolutions.append(card)
            if subtype == CardSubtype.HELPDESK:
                if network_analysis.total_issues == 0:
                    hand.dead_cards.append(card)
            elif network_analysis.issue_counts.get(subtype.resolves, 0) == 0:
                hand.dead_cards.append(card)
        elif subtype.is_steal:
            hand.steal_cards.append(card)
        else:
            hand.classifications.append(card)
    return hand


# =============================================================================
# Opponent Model
# =============================================================================

class Behavior(Enum):
    """How the other player has been playing"""
    UNKNOWN = auto()
    AGGRESSIVE = auto()
    DEFENSIVE = auto()
    BUILDING = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass
class OpponentProfile:
    """Estimates about the other player for one decision"""
    behavior: Behavior = Behavior.UNKNOWN
    likely_hacked: float = 0.0
    likely_secured: float = 0.0
    likely_head_hunters: float = 0.0
    steal_protected: bool = False
    hand_size: int = 0

    def to_dict(self) -> Dict:
        return {
            "behavior": str(self.behavior),
            "likely_hacked": round(self.likely_hacked, 3),
            "likely_secured": round(self.likely_secured, 3),
            "likely_head_hunters": round(self.likely_head_hunters, 3),
            "steal_protected": self.steal_protected,
            "hand_size": self.hand_size,
        }


class OpponentModel:
    """
    Memory of what the other player has done this match.

    Observations come from engine events. Counter likelihoods come from the
    deck composition minus every card the observer can see, blended with the
    uninformed deck ratio by the tier's accuracy.
    """

    RECENT_ACTIONS = 10
    DEFENSIVE_PLAYS = 3

    def __init__(self, accuracy: float):
        self.accuracy = accuracy
        self.played: Counter = Counter()
        self.recent: Deque[CardType] = deque(maxlen=self.RECENT_ACTIONS)

    def observe(self, subtype: CardSubtype):
        """Record a card the other player put into play"""
        self.played[subtype] += 1
        self.recent.append(subtype.card_type)

    def visible_cards(self, state: GameState, observer_index: int) -> Counter:
        """Subtypes the observer can account for"""
        seen: Counter = Counter(c.subtype for c in state.discard_pile)
        seen.update(c.subtype for c in state.players[observer_index].hand)
        for player in state.players:
            seen.update(c.subtype for c in player.audited_computers)
            seen.update(c.subtype for c in player.classification_cards)
            for ref in iter_nodes(player.network):
                seen[ref.node.subtype] += 1
                seen.update(ref.node.issue_subtypes())
        if state.battle is not None:
            seen.update(link.card.subtype for link in state.battle.chain)
        return seen

    def likely_count(self, state: GameState, observer_index: int,
                     subtype: CardSubtype) -> float:
        """
        Expected copies of a subtype in the other player's hand.

        Full accuracy counts every visible card; zero accuracy falls back to
        the subtype's share of the whole deck.
        """
        other = state.players[state.other_index(observer_index)]
        hand_size = len(other.hand)
        unseen_pool = hand_size + len(state.draw_pile)
        if unseen_pool == 0:
            return 0.0
        copies = DECK_COMPOSITION.get(subtype, 0)
        unseen = max(0, copies - self.visible_cards(state, observer_index)[subtype])
        informed = unseen * hand_size / unseen_pool
        prior = copies * hand_size / deck_size()
        return self.accuracy * informed + (1 - self.accuracy) * prior

    def behavior(self, other: Player, network: NetworkAnalysis) -> Behavior:
        attacks = sum(1 for t in self.recent if t == CardType.ATTACK)
        if attacks > 3:
            return Behavior.AGGRESSIVE
        if network.connected_computers > 3 and network.enabled_switches > 1:
            return Behavior.BUILDING
        if len(other.classification_cards) >= 2:
            return Behavior.DEFENSIVE
        # Match-long repairs outweighing attacks
        repairs = sum(n for s, n in self.played.items() if s.card_type == CardType.RESOLUTION)
        strikes = sum(n for s, n in self.played.items() if s.card_type == CardType.ATTACK)
        if repairs >= self.DEFENSIVE_PLAYS and repairs > strikes:
            return Behavior.DEFENSIVE
        return Behavior.UNKNOWN

    def profile(self, state: GameState, observer_index: int,
                network: NetworkAnalysis) -> OpponentProfile:
        other = state.players[state.other_index(observer_index)]
        return OpponentProfile(
            behavior=self.behavior(other, network),
            likely_hacked=self.likely_count(state, observer_index, CardSubtype.HACKED),
            likely_secured=self.likely_count(state, observer_index, CardSubtype.SECURED),
            likely_head_hunters=self.likely_count(state, observer_index, CardSubtype.HEAD_HUNTER),
            steal_protected=other.is_steal_protected,
            hand_size=len(other.hand),
        )


# =============================================================================
# Projections
# =============================================================================

def estimate_turns_to_win(score: int, income: int, winning_score: int) -> float:
    """Turns until the winning score at the current income (inf if none)"""
    if score >= winning_score:
        return 0.0
    if income <= 0:
        return math.inf
    return float(math.ceil((winning_score - score) / income))
