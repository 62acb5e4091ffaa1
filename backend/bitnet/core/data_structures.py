# =============================================================================
# BitNet Card Game - Core Data Structures
# =============================================================================
"""
Core data structures for representing game elements.
These are the fundamental building blocks of the game state: the equipment
tree each player builds, the players themselves, the two battle records and
the engine's configuration and result types.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union, Any

from .cards import Card
from .enums import AuditStage, CardSubtype, GamePhase


# =============================================================================
# Placed Equipment
# =============================================================================

@dataclass
class PlacedCard:
    """
    A card placed on the table.

    Attributes:
        id: Placement id ("placement-N"), stable across moves
        card: The equipment card
        attached_issues: Attack cards stuck on this node, in play order
        is_disabled: Derived flag, own issues or a disabled parent
    """
    id: str
    card: Card
    attached_issues: List[Card] = field(default_factory=list)
    is_disabled: bool = False

    @property
    def subtype(self) -> CardSubtype:
        return self.card.subtype

    @property
    def has_issues(self) -> bool:
        return bool(self.attached_issues)

    def issue_subtypes(self) -> List[CardSubtype]:
        return [issue.subtype for issue in self.attached_issues]

    def clone(self) -> 'PlacedCard':
        """Create a deep copy of this placement"""
        return PlacedCard(
            id=self.id,
            card=self.card,
            attached_issues=list(self.attached_issues),
            is_disabled=self.is_disabled,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "card": self.card.to_dict(),
            "attached_issues": [c.to_dict() for c in self.attached_issues],
            "is_disabled": self.is_disabled,
        }


@dataclass
class CableNode(PlacedCard):
    """
    A cable, attached under a switch or floating.
    Holds up to ``max_computers`` computers.
    """
    max_computers: int = 0
    computers: List[PlacedCard] = field(default_factory=list)

    def __post_init__(self):
        if self.max_computers == 0:
            self.max_computers = self.card.subtype.cable_capacity

    @property
    def free_slots(self) -> int:
        return self.max_computers - len(self.computers)

    @property
    def is_full(self) -> bool:
        return self.free_slots <= 0

    def clone(self) -> 'CableNode':
        return CableNode(
            id=self.id,
            card=self.card,
            attached_issues=list(self.attached_issues),
            is_disabled=self.is_disabled,
            max_computers=self.max_computers,
            computers=[c.clone() for c in self.computers],
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["max_computers"] = self.max_computers
        data["computers"] = [c.to_dict() for c in self.computers]
        return data


@dataclass
class SwitchNode(PlacedCard):
    """A switch, the internet-connected root of a subtree."""
    cables: List[CableNode] = field(default_factory=list)

    def clone(self) -> 'SwitchNode':
        return SwitchNode(
            id=self.id,
            card=self.card,
            attached_issues=list(self.attached_issues),
            is_disabled=self.is_disabled,
            cables=[c.clone() for c in self.cables],
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["cables"] = [c.to_dict() for c in self.cables]
        return data


# Floating cables are ordinary cable nodes kept outside any switch
FloatingCable = CableNode


@dataclass
class PlayerNetwork:
    """
    A player's equipment forest.

    Only three depths exist (switch -> cable -> computer). Floating variants
    exist at cable and computer depth and never score.
    """
    switches: List[SwitchNode] = field(default_factory=list)
    floating_cables: List[CableNode] = field(default_factory=list)
    floating_computers: List[PlacedCard] = field(default_factory=list)

    def clone(self) -> 'PlayerNetwork':
        return PlayerNetwork(
            switches=[s.clone() for s in self.switches],
            floating_cables=[c.clone() for c in self.floating_cables],
            floating_computers=[c.clone() for c in self.floating_computers],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "switches": [s.to_dict() for s in self.switches],
            "floating_cables": [c.to_dict() for c in self.floating_cables],
            "floating_computers": [c.to_dict() for c in self.floating_computers],
        }


# =============================================================================
# Player
# =============================================================================

@dataclass
class Player:
    """
    Represents one of the two players.

    Attributes:
        id: Stable player id ("player-1", "player-2")
        name: Display name
        hand: Cards in hand
        network: Equipment built so far
        classification_cards: In-play classifications (at most 2 at rest)
        audited_computers: Computers returned by audits, playable later
        score: Bitcoin mined, never decreases
        is_human: False for the computer opponent
    """
    id: str
    name: str
    hand: List[Card] = field(default_factory=list)
    network: PlayerNetwork = field(default_factory=PlayerNetwork)
    classification_cards: List[PlacedCard] = field(default_factory=list)
    audited_computers: List[Card] = field(default_factory=list)
    score: int = 0
    is_human: bool = True

    def find_in_hand(self, card_id: str) -> Optional[Card]:
        for card in self.hand:
            if card.id == card_id:
                return card
        return None

    def remove_from_hand(self, card_id: str) -> Card:
        card = self.find_in_hand(card_id)
        if card is None:
            raise KeyError(card_id)
        self.hand.remove(card)
        return card

    def cards_of(self, *subtypes: CardSubtype) -> List[Card]:
        """Cards in hand with any of the given subtypes"""
        return [c for c in self.hand if c.subtype in subtypes]

    def has_classification(self, subtype: CardSubtype) -> bool:
        return any(c.subtype == subtype for c in self.classification_cards)

    def find_classification(self, placement_id: str) -> Optional[PlacedCard]:
        for placed in self.classification_cards:
            if placed.id == placement_id:
                return placed
        return None

    @property
    def is_steal_protected(self) -> bool:
        """Two classifications of the same subtype cannot be stolen"""
        subtypes = [c.subtype for c in self.classification_cards]
        return len(subtypes) == 2 and subtypes[0] == subtypes[1]

    def clone(self) -> 'Player':
        """Create a deep copy of this player"""
        return Player(
            id=self.id,
            name=self.name,
            hand=list(self.hand),
            network=self.network.clone(),
            classification_cards=[c.clone() for c in self.classification_cards],
            audited_computers=list(self.audited_computers),
            score=self.score,
            is_human=self.is_human,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "name": self.name,
            "hand": [c.to_dict() for c in self.hand],
            "network": self.network.to_dict(),
            "classification_cards": [c.to_dict() for c in self.classification_cards],
            "audited_computers": [c.to_dict() for c in self.audited_computers],
            "score": self.score,
            "is_human": self.is_human,
        }


# =============================================================================
# Battles
# =============================================================================

@dataclass
class ChainLink:
    """One response card spent in a battle chain."""
    player_index: int
    card: Card

    def to_dict(self) -> Dict[str, Any]:
        return {"player_index": self.player_index, "card": self.card.to_dict()}


@dataclass
class AuditCandidate:
    """A computer the auditor may select, with a readable location."""
    placement_id: str
    card: Card
    location: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "placement_id": self.placement_id,
            "card": self.card.to_dict(),
            "location": self.location,
        }


@dataclass
class AuditBattle:
    """
    An audit in progress.

    The chain alternates starting with the target: an even-length chain
    waits on the target, an odd-length chain waits on the auditor.
    """
    auditor_index: int
    target_index: int
    audit_card: Card
    computers_to_return: int
    chain: List[ChainLink] = field(default_factory=list)
    stage: AuditStage = AuditStage.COUNTER
    available_computers: List[AuditCandidate] = field(default_factory=list)
    selected_computer_ids: List[str] = field(default_factory=list)

    @property
    def responder_index(self) -> int:
        """Player whose turn it is in the chain (or who selects)"""
        if self.stage == AuditStage.SELECTION:
            return self.auditor_index
        return self.target_index if len(self.chain) % 2 == 0 else self.auditor_index

    def clone(self) -> 'AuditBattle':
        return AuditBattle(
            auditor_index=self.auditor_index,
            target_index=self.target_index,
            audit_card=self.audit_card,
            computers_to_return=self.computers_to_return,
            chain=list(self.chain),
            stage=self.stage,
            available_computers=list(self.available_computers),
            selected_computer_ids=list(self.selected_computer_ids),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "audit",
            "auditor_index": self.auditor_index,
            "target_index": self.target_index,
            "audit_card": self.audit_card.to_dict(),
            "computers_to_return": self.computers_to_return,
            "chain": [link.to_dict() for link in self.chain],
            "stage": str(self.stage),
            "responder_index": self.responder_index,
            "available_computers": [c.to_dict() for c in self.available_computers],
            "selected_computer_ids": list(self.selected_computer_ids),
        }


@dataclass
class HeadHunterBattle:
    """
    A contested classification steal.

    The chain alternates starting with the defender.
    """
    attacker_index: int
    defender_index: int
    initial_card: Card
    target_classification_id: str
    previous_phase: GamePhase
    previous_moves_remaining: int
    discard_classification_id: Optional[str] = None
    chain: List[ChainLink] = field(default_factory=list)

    @property
    def responder_index(self) -> int:
        return self.defender_index if len(self.chain) % 2 == 0 else self.attacker_index

    def clone(self) -> 'HeadHunterBattle':
        return HeadHunterBattle(
            attacker_index=self.attacker_index,
            defender_index=self.defender_index,
            initial_card=self.initial_card,
            target_classification_id=self.target_classification_id,
            previous_phase=self.previous_phase,
            previous_moves_remaining=self.previous_moves_remaining,
            discard_classification_id=self.discard_classification_id,
            chain=list(self.chain),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "headhunter",
            "attacker_index": self.attacker_index,
            "defender_index": self.defender_index,
            "initial_card": self.initial_card.to_dict(),
            "target_classification_id": self.target_classification_id,
            "discard_classification_id": self.discard_classification_id,
            "chain": [link.to_dict() for link in self.chain],
            "responder_index": self.responder_index,
            "previous_phase": str(self.previous_phase),
            "previous_moves_remaining": self.previous_moves_remaining,
        }


# None means no battle is running
Battle = Union[AuditBattle, HeadHunterBattle]


# =============================================================================
# Game Configuration
# =============================================================================

@dataclass
class GameConfig:
    """
    Configuration settings for a game instance.
    """
    # Hands
    starting_hand_size: int = 6
    max_hand_size: int = 6

    # Turn budget
    moves_per_turn: int = 3
    field_tech_equipment_moves: int = 1

    # Victory
    winning_score: int = 25

    # Table limits
    max_classifications: int = 2
    game_log_size: int = 20

    # Players
    player_names: List[str] = field(default_factory=lambda: ["You", "Opponent"])
    opponent_index: Optional[int] = 1  # None for two human players

    # Random seed for reproducibility
    seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "starting_hand_size": self.starting_hand_size,
            "max_hand_size": self.max_hand_size,
            "moves_per_turn": self.moves_per_turn,
            "field_tech_equipment_moves": self.field_tech_equipment_moves,
            "winning_score": self.winning_score,
            "max_classifications": self.max_classifications,
            "game_log_size": self.game_log_size,
            "player_names": list(self.player_names),
            "opponent_index": self.opponent_index,
            "seed": self.seed,
        }


# =============================================================================
# Action Result
# =============================================================================

@dataclass
class ActionResult:
    """
    Result of a single engine action. Actions never raise; a rejected action
    comes back with ``success=False`` and the log line as ``message``.
    """
    action: str
    success: bool
    message: str = ""
    effects: List[str] = field(default_factory=list)
    points_gained: int = 0
    ends_turn: bool = False
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "action": self.action,
            "success": self.success,
            "message": self.message,
            "effects": list(self.effects),
            "points_gained": self.points_gained,
            "ends_turn": self.ends_turn,
            "data": dict(self.data),
        }


# =============================================================================
# Errors
# =============================================================================

class ActionRejected(Exception):
    """
    Raised inside the core when an action breaks a rule.
    The engine converts it into a failed ActionResult and a log line.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
