# =============================================================================
# BitNet Card Game - Candidate Actions
# =============================================================================
"""
Enumerates the legal actions available to the computer opponent.

Candidates are grouped into the six action categories (build, reroute,
repair, disrupt, setup, cycle). Identical cards produce a single candidate
per target, so a hand of three computers does not triple the search.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterable, List, Optional

from ..core.cards import Card
from ..core.data_structures import Player
from ..core.enums import CardSubtype, CardType, EquipmentKind, GamePhase
from ..core.game_state import GameState
from ..core.network import attached_cables, count_total_computers, iter_nodes
from .analysis import HandAnalysis
from .config import ActionCategory, AIConfig


# =============================================================================
# Candidate Types
# =============================================================================

class AIActionType(Enum):
    """Concrete engine calls the opponent can make"""
    PLAY_SWITCH = auto()
    PLAY_CABLE = auto()
    PLAY_COMPUTER = auto()
    CONNECT = auto()            # free: floating equipment joins a parent
    REROUTE = auto()            # paid move of attached equipment
    PLAY_RESOLUTION = auto()
    PLAY_ATTACK = auto()
    START_AUDIT = auto()
    STEAL_CLASSIFICATION = auto()
    PLAY_CLASSIFICATION = auto()
    DISCARD = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def category(self) -> ActionCategory:
        categories = {
            AIActionType.PLAY_SWITCH: ActionCategory.BUILD,
            AIActionType.PLAY_CABLE: ActionCategory.BUILD,
            AIActionType.PLAY_COMPUTER: ActionCategory.BUILD,
            AIActionType.CONNECT: ActionCategory.REROUTE,
            AIActionType.REROUTE: ActionCategory.REROUTE,
            AIActionType.PLAY_RESOLUTION: ActionCategory.REPAIR,
            AIActionType.PLAY_ATTACK: ActionCategory.DISRUPT,
            AIActionType.START_AUDIT: ActionCategory.DISRUPT,
            AIActionType.STEAL_CLASSIFICATION: ActionCategory.DISRUPT,
            AIActionType.PLAY_CLASSIFICATION: ActionCategory.SETUP,
            AIActionType.DISCARD: ActionCategory.CYCLE,
        }
        return categories[self]

    @property
    def is_equipment(self) -> bool:
        """Actions an equipment move can pay for"""
        return self in (AIActionType.PLAY_SWITCH, AIActionType.PLAY_CABLE,
                        AIActionType.PLAY_COMPUTER, AIActionType.REROUTE)

    @property
    def is_free(self) -> bool:
        return self == AIActionType.CONNECT


@dataclass
class CandidateAction:
    """
    One concrete action with its evaluation.

    Attributes:
        action_type: Engine call to make
        card: Card played or discarded (None for moves)
        target_id: Switch/cable to attach to, attacked node, resolved node
            or stolen classification, depending on the action
        source_id: Placement being moved (CONNECT / REROUTE)
        target_kind: Parent kind for moves
        target_player: Opponent index for attacks, audits and steals
        discard_id: Own classification swapped out at the cap
        from_audit: Computer comes from the audited pool
        forced: Fallback discard chosen by a safety net
    """
    action_type: AIActionType
    card: Optional[Card] = None
    target_id: Optional[str] = None
    source_id: Optional[str] = None
    target_kind: Optional[EquipmentKind] = None
    target_player: Optional[int] = None
    discard_id: Optional[str] = None
    from_audit: bool = False
    forced: bool = False
    reasoning: str = ""
    utility: float = 0.0
    breakdown: Dict[str, float] = field(default_factory=dict)

    @property
    def category(self) -> ActionCategory:
        return self.action_type.category

    def describe(self) -> str:
        parts = [str(self.action_type)]
        if self.card is not None:
            parts.append(self.card.id)
        if self.source_id is not None:
            parts.append(self.source_id)
        if self.target_id is not None:
            parts.append(f"-> {self.target_id}")
        return " ".join(parts)

    def to_dict(self) -> Dict:
        return {
            "type": str(self.action_type),
            "category": str(self.category),
            "card_id": self.card.id if self.card else None,
            "target_id": self.target_id,
            "source_id": self.source_id,
            "target_player": self.target_player,
            "discard_id": self.discard_id,
            "from_audit": self.from_audit,
            "forced": self.forced,
            "reasoning": self.reasoning,
            "utility": round(self.utility, 3),
            "breakdown": {k: round(v, 3) for k, v in self.breakdown.items()},
        }


# Lower rank is discarded first when making room
CLASSIFICATION_RANK: Dict[CardSubtype, int] = {
    CardSubtype.SUPERVISOR: 1,
    CardSubtype.FACILITIES: 2,
    CardSubtype.SECURITY_SPECIALIST: 3,
    CardSubtype.FIELD_TECH: 4,
}

# Forced fallback discards these families first
FORCED_DISCARD_ORDER = (CardType.ATTACK, CardType.RESOLUTION,
                        CardType.CLASSIFICATION, CardType.EQUIPMENT)


def _unique(cards: Iterable[Card]) -> List[Card]:
    """First card of each subtype"""
    seen = set()
    result = []
    for card in cards:
        if card.subtype not in seen:
            seen.add(card.subtype)
            result.append(card)
    return result


def weakest_classification(player: Player, incoming: Optional[CardSubtype] = None) -> Optional[str]:
    """
    Placement id of the classification to give up for an incoming one, or
    None when nothing held is worth less.
    """
    if not player.classification_cards:
        return None
    weakest = min(player.classification_cards,
                  key=lambda p: CLASSIFICATION_RANK.get(p.subtype, 0))
    if incoming is not None and CLASSIFICATION_RANK.get(incoming, 0) <= CLASSIFICATION_RANK.get(weakest.subtype, 0):
        return None
    return weakest.id


# =============================================================================
# Generator
# =============================================================================

class CandidateGenerator:
    """
    Builds every candidate action for one player in the current state.
    """

    def __init__(self, config: AIConfig):
        self.config = config

    def generate(self, state: GameState, player_index: int,
                 hand: HandAnalysis) -> List[CandidateAction]:
        """
        All legal candidates for the player, respecting the move budget.

        Only free connects are offered with no moves left; only equipment
        actions and connects when just the equipment move remains.
        """
        if state.phase != GamePhase.MOVES or state.current_player_index != player_index:
            return []

        player = state.players[player_index]
        candidates = self.reroute_actions(player)
        if state.total_moves_available <= 0:
            return [c for c in candidates if c.action_type.is_free]

        candidates.extend(self.build_actions(player, hand))
        if state.moves_remaining <= 0:
            return [c for c in candidates if c.action_type.is_free or c.action_type.is_equipment]

        opponent_index = state.other_index(player_index)
        opponent = state.players[opponent_index]
        candidates.extend(self.repair_actions(player, hand))
        cap = state.config.max_classifications
        candidates.extend(self.disrupt_actions(player, opponent, opponent_index, hand, cap))
        candidates.extend(self.setup_actions(player, hand, cap))
        has_build = any(c.category == ActionCategory.BUILD for c in candidates)
        candidates.extend(self.cycle_actions(player, hand, has_build, cap))
        return candidates

    # =========================================================================
    # Build
    # =========================================================================

    def build_actions(self, player: Player, hand: HandAnalysis) -> List[CandidateAction]:
        actions = []
        network = player.network

        for card in _unique(hand.switches):
            actions.append(CandidateAction(AIActionType.PLAY_SWITCH, card=card,
                                           reasoning="Play switch"))

        enabled_switches = [s for s in network.switches if not s.is_disabled]
        for card in _unique(hand.cables):
            for switch in enabled_switches:
                actions.append(CandidateAction(
                    AIActionType.PLAY_CABLE, card=card, target_id=switch.id,
                    target_kind=EquipmentKind.SWITCH,
                    reasoning=f"Play {card.name} on an enabled switch",
                ))
            if len(network.floating_cables) < self.config.max_floating_cables:
                actions.append(CandidateAction(AIActionType.PLAY_CABLE, card=card,
                                               reasoning=f"Play {card.name} floating"))

        computers = [(c, False) for c in hand.computers[:1]]
        computers += [(c, True) for c in player.audited_computers[:1]]
        open_cables = [c for _, c in attached_cables(network)
                       if not c.is_disabled and not c.is_full]
        open_cables += [c for c in network.floating_cables
                        if not c.is_disabled and not c.is_full]
        for card, from_audit in computers:
            source = "audited computer" if from_audit else "computer"
            for cable in open_cables:
                actions.append(CandidateAction(
                    AIActionType.PLAY_COMPUTER, card=card, target_id=cable.id,
                    target_kind=EquipmentKind.CABLE, from_audit=from_audit,
                    reasoning=f"Play {source} on a cable",
                ))
            actions.append(CandidateAction(AIActionType.PLAY_COMPUTER, card=card,
                                           from_audit=from_audit,
                                           reasoning=f"Play {source} floating"))
        return actions

    # =========================================================================
    # Reroute
    # =========================================================================

    def reroute_actions(self, player: Player) -> List[CandidateAction]:
        """Free connects of floating equipment, paid rescues of stranded equipment"""
        actions = []
        network = player.network
        enabled_switches = [s for s in network.switches if not s.is_disabled]
        scoring_cables = [c for _, c in attached_cables(network)
                          if not c.is_disabled and not c.is_full]

        for cable in network.floating_cables:
            for switch in enabled_switches:
                actions.append(CandidateAction(
                    AIActionType.CONNECT, source_id=cable.id, target_id=switch.id,
                    target_kind=EquipmentKind.SWITCH,
                    reasoning=f"Connect floating cable ({len(cable.computers)} computers)",
                ))

        for computer in network.floating_computers:
            targets = scoring_cables + [c for c in network.floating_cables if not c.is_full]
            for cable in targets:
                actions.append(CandidateAction(
                    AIActionType.CONNECT, source_id=computer.id, target_id=cable.id,
                    target_kind=EquipmentKind.CABLE,
                    reasoning="Connect floating computer",
                ))

        # Healthy equipment stranded under disabled parents
        for ref in iter_nodes(network):
            if ref.floating or not ref.node.is_disabled or ref.node.has_issues:
                continue
            if ref.kind == EquipmentKind.CABLE and ref.parent is not None:
                for switch in enabled_switches:
                    if switch is not ref.parent:
                        actions.append(CandidateAction(
                            AIActionType.REROUTE, source_id=ref.node.id,
                            target_id=switch.id, target_kind=EquipmentKind.SWITCH,
                            reasoning="Move cable off a disabled switch",
                        ))
            elif ref.kind == EquipmentKind.COMPUTER:
                for cable in scoring_cables:
                    if cable is not ref.parent:
                        actions.append(CandidateAction(
                            AIActionType.REROUTE, source_id=ref.node.id,
                            target_id=cable.id, target_kind=EquipmentKind.CABLE,
                            reasoning="Move computer off a disabled cable",
                        ))
        return actions

    # =========================================================================
    # Repair
    # =========================================================================

    def repair_actions(self, player: Player, hand: HandAnalysis) -> List[CandidateAction]:
        actions = []
        resolutions = _unique(hand.resolutions)
        for ref in iter_nodes(player.network):
            issues = set(ref.node.issue_subtypes())
            if not issues:
                continue
            for card in resolutions:
                if card.subtype == CardSubtype.HELPDESK or card.subtype.resolves in issues:
                    actions.append(CandidateAction(
                        AIActionType.PLAY_RESOLUTION, card=card, target_id=ref.node.id,
                        reasoning=f"Repair {ref.node.card.name} ({ref.location})",
                    ))
        return actions

    # =========================================================================
    # Disrupt
    # =========================================================================

    def disrupt_actions(self, player: Player, opponent: Player, opponent_index: int,
                        hand: HandAnalysis, cap: int) -> List[CandidateAction]:
        actions = []
        attacks = [c for c in _unique(hand.attacks)
                   if not any(p.subtype.clears == c.subtype for p in opponent.classification_cards)]
        for ref in iter_nodes(opponent.network):
            if ref.node.is_disabled:
                continue
            for card in attacks:
                actions.append(CandidateAction(
                    AIActionType.PLAY_ATTACK, card=card, target_id=ref.node.id,
                    target_player=opponent_index,
                    reasoning=f"{card.name} on {ref.node.card.name} ({ref.location})",
                ))

        if hand.audits and count_total_computers(opponent.network) > 0:
            actions.append(CandidateAction(
                AIActionType.START_AUDIT, card=hand.audits[0],
                target_player=opponent_index, reasoning="Audit the opponent",
            ))

        if not opponent.is_steal_protected:
            at_cap = len(player.classification_cards) >= cap
            for card in _unique(hand.steal_cards):
                for placed in opponent.classification_cards:
                    if player.has_classification(placed.subtype):
                        continue
                    discard_id = None
                    if at_cap:
                        discard_id = weakest_classification(player, placed.subtype)
                        if discard_id is None:
                            continue
                    actions.append(CandidateAction(
                        AIActionType.STEAL_CLASSIFICATION, card=card,
                        target_id=placed.id, target_player=opponent_index,
                        discard_id=discard_id,
                        reasoning=f"Steal {placed.card.name} with {card.name}",
                    ))
        return actions

    # =========================================================================
    # Setup
    # =========================================================================

    def setup_actions(self, player: Player, hand: HandAnalysis, cap: int) -> List[CandidateAction]:
        actions = []
        at_cap = len(player.classification_cards) >= cap
        for card in _unique(hand.classifications):
            discard_id = None
            if at_cap:
                discard_id = weakest_classification(player, card.subtype)
                if discard_id is None:
                    continue
            actions.append(CandidateAction(
                AIActionType.PLAY_CLASSIFICATION, card=card, discard_id=discard_id,
                reasoning=f"Play {card.name}" + (" (swap)" if discard_id else ""),
            ))
        return actions

    # =========================================================================
    # Cycle
    # =========================================================================

    def cycle_actions(self, player: Player, hand: HandAnalysis,
                      has_build: bool, cap: int) -> List[CandidateAction]:
        """
        Discards of dead cards and classifications that can never be played.
        Equipment is not offered while it can still be built or connected.
        """
        actions = []
        dead = list(hand.dead_cards)
        at_cap = len(player.classification_cards) >= cap
        if at_cap:
            dead.extend(c for c in hand.classifications
                        if weakest_classification(player, c.subtype) is None)
        network = player.network
        floating = network.floating_cables or network.floating_computers
        if not has_build and not floating:
            dead.extend(hand.equipment)

        for card in _unique(dead):
            actions.append(CandidateAction(AIActionType.DISCARD, card=card,
                                           reasoning=f"Cycle dead {card.name}"))
        return actions

    def forced_discard(self, state: GameState, player_index: int) -> Optional[CandidateAction]:
        """
        Fallback discard used when the safety nets trip. Attacks go first,
        then resolutions, classifications and finally equipment.
        """
        if state.phase == GamePhase.MOVES and state.moves_remaining <= 0:
            return None
        player = state.players[player_index]
        for card_type in FORCED_DISCARD_ORDER:
            for card in player.hand:
                if card.card_type == card_type:
                    return CandidateAction(AIActionType.DISCARD, card=card, forced=True,
                                           reasoning=f"Forced discard of {card.name}")
        return None
