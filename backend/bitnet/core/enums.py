# =============================================================================
# BitNet Card Game - Enumerations
# =============================================================================
"""
All enumeration types used throughout the game.
These define the discrete values for cards, phases and difficulty tiers.
"""

from enum import Enum, auto
from typing import Dict, List, Optional


class CardType(Enum):
    """
    The four families of cards in the deck.
    """
    EQUIPMENT = "equipment"           # Builds the network
    ATTACK = "attack"                 # Disables opponent equipment
    RESOLUTION = "resolution"         # Repairs own equipment
    CLASSIFICATION = "classification" # Persistent abilities

    def __str__(self) -> str:
        return self.value


class CardSubtype(Enum):
    """
    Concrete card kinds. The value is the identifier used in card ids
    (``computer-12``) and in the deck composition table.
    """
    # ==========================================================================
    # EQUIPMENT
    # ==========================================================================
    SWITCH = "switch"
    CABLE_2 = "cable-2"
    CABLE_3 = "cable-3"
    COMPUTER = "computer"

    # ==========================================================================
    # ATTACKS
    # ==========================================================================
    HACKED = "hacked"
    POWER_OUTAGE = "power-outage"
    NEW_HIRE = "new-hire"
    AUDIT = "audit"

    # ==========================================================================
    # RESOLUTIONS
    # ==========================================================================
    SECURED = "secured"
    POWERED = "powered"
    TRAINED = "trained"
    HELPDESK = "helpdesk"

    # ==========================================================================
    # CLASSIFICATIONS
    # ==========================================================================
    SECURITY_SPECIALIST = "security-specialist"
    FACILITIES = "facilities"
    SUPERVISOR = "supervisor"
    FIELD_TECH = "field-tech"
    HEAD_HUNTER = "head-hunter"
    SEAL_THE_DEAL = "seal-the-deal"

    def __str__(self) -> str:
        return self.value

    @property
    def card_type(self) -> CardType:
        """Family this subtype belongs to"""
        if self in (CardSubtype.SWITCH, CardSubtype.CABLE_2,
                    CardSubtype.CABLE_3, CardSubtype.COMPUTER):
            return CardType.EQUIPMENT
        if self in (CardSubtype.HACKED, CardSubtype.POWER_OUTAGE,
                    CardSubtype.NEW_HIRE, CardSubtype.AUDIT):
            return CardType.ATTACK
        if self in (CardSubtype.SECURED, CardSubtype.POWERED,
                    CardSubtype.TRAINED, CardSubtype.HELPDESK):
            return CardType.RESOLUTION
        return CardType.CLASSIFICATION

    @property
    def display_name(self) -> str:
        """Name printed on the card"""
        names = {
            CardSubtype.SWITCH: "Switch",
            CardSubtype.CABLE_2: "Cable (2)",
            CardSubtype.CABLE_3: "Cable (3)",
            CardSubtype.COMPUTER: "Computer",
            CardSubtype.HACKED: "Hacked",
            CardSubtype.POWER_OUTAGE: "Power Outage",
            CardSubtype.NEW_HIRE: "New Hire",
            CardSubtype.AUDIT: "Audit",
            CardSubtype.SECURED: "Secured",
            CardSubtype.POWERED: "Powered",
            CardSubtype.TRAINED: "Trained",
            CardSubtype.HELPDESK: "Helpdesk",
            CardSubtype.SECURITY_SPECIALIST: "Security Specialist",
            CardSubtype.FACILITIES: "Facilities",
            CardSubtype.SUPERVISOR: "Supervisor",
            CardSubtype.FIELD_TECH: "Field Tech",
            CardSubtype.HEAD_HUNTER: "Head Hunter",
            CardSubtype.SEAL_THE_DEAL: "Seal the Deal",
        }
        return names[self]

    @property
    def description(self) -> str:
        """Rules text printed on the card"""
        descriptions = {
            CardSubtype.SWITCH: "Connects to the internet. Cables attach here.",
            CardSubtype.CABLE_2: "Connects up to 2 computers to a switch",
            CardSubtype.CABLE_3: "Connects up to 3 computers to a switch",
            CardSubtype.COMPUTER: "Mines 1 bitcoin per turn when connected",
            CardSubtype.HACKED: "Disables target equipment and everything below it",
            CardSubtype.POWER_OUTAGE: "Disables target equipment and everything below it",
            CardSubtype.NEW_HIRE: "Disables target equipment and everything below it",
            CardSubtype.AUDIT: "Opponent returns half of their computers",
            CardSubtype.SECURED: "Resolves a Hacked issue",
            CardSubtype.POWERED: "Resolves a Power Outage issue",
            CardSubtype.TRAINED: "Resolves a New Hire issue",
            CardSubtype.HELPDESK: "Resolves every issue on one piece of equipment",
            CardSubtype.SECURITY_SPECIALIST: "Resolves all Hacked cards. Blocks new Hacked attacks",
            CardSubtype.FACILITIES: "Resolves all Power Outage cards. Blocks new Power Outage attacks",
            CardSubtype.SUPERVISOR: "Resolves all New Hire cards. Blocks new New Hire attacks",
            CardSubtype.FIELD_TECH: "One extra equipment move per turn",
            CardSubtype.HEAD_HUNTER: "Steal an opponent classification",
            CardSubtype.SEAL_THE_DEAL: "Steal a classification. Cannot be blocked",
        }
        return descriptions[self]

    @property
    def cable_capacity(self) -> int:
        """Number of computers a cable of this subtype can hold"""
        capacities = {
            CardSubtype.CABLE_2: 2,
            CardSubtype.CABLE_3: 3,
        }
        return capacities.get(self, 0)

    @property
    def is_cable(self) -> bool:
        return self in (CardSubtype.CABLE_2, CardSubtype.CABLE_3)

    @property
    def resolves(self) -> Optional['CardSubtype']:
        """Attack subtype removed by this resolution (None for helpdesk)"""
        pairs = {
            CardSubtype.SECURED: CardSubtype.HACKED,
            CardSubtype.POWERED: CardSubtype.POWER_OUTAGE,
            CardSubtype.TRAINED: CardSubtype.NEW_HIRE,
        }
        return pairs.get(self)

    @property
    def clears(self) -> Optional['CardSubtype']:
        """Attack subtype cleared and blocked by this classification"""
        pairs = {
            CardSubtype.SECURITY_SPECIALIST: CardSubtype.HACKED,
            CardSubtype.FACILITIES: CardSubtype.POWER_OUTAGE,
            CardSubtype.SUPERVISOR: CardSubtype.NEW_HIRE,
        }
        return pairs.get(self)

    @property
    def is_steal(self) -> bool:
        return self in (CardSubtype.HEAD_HUNTER, CardSubtype.SEAL_THE_DEAL)

    @property
    def is_disabling_attack(self) -> bool:
        return self in (CardSubtype.HACKED, CardSubtype.POWER_OUTAGE,
                        CardSubtype.NEW_HIRE)


class GamePhase(Enum):
    """
    Phases of the turn state machine.
    """
    MOVES = auto()              # Base phase: plays and equipment moves
    DISCARD = auto()            # Manual discard variant of the same turn
    AUDIT = auto()              # Audit battle interrupt
    HEADHUNTER_BATTLE = auto()  # Head-hunter battle interrupt
    GAME_OVER = auto()          # Terminal

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_battle(self) -> bool:
        return self in (GamePhase.AUDIT, GamePhase.HEADHUNTER_BATTLE)


class AuditStage(Enum):
    """
    Sub-phases of an audit battle.
    """
    COUNTER = auto()    # Alternating block / counter-block chain
    SELECTION = auto()  # Auditor picks the computers to return

    def __str__(self) -> str:
        return self.name.lower()


class EquipmentKind(Enum):
    """
    Depths of the equipment tree, used to address move sources and targets.
    """
    SWITCH = auto()
    CABLE = auto()
    COMPUTER = auto()
    FLOATING = auto()   # Move target only: detach into the floating area

    def __str__(self) -> str:
        return self.name.lower()


class Difficulty(Enum):
    """
    Opponent difficulty tiers.
    Tiers differ only in the decision parameters below.
    """
    EASY = 1
    NORMAL = 2
    HARD = 3
    NIGHTMARE = 4

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def lookahead_depth(self) -> int:
        """How many follow-up plays the opponent considers"""
        depths = {
            Difficulty.EASY: 1,
            Difficulty.NORMAL: 2,
            Difficulty.HARD: 4,
            Difficulty.NIGHTMARE: 5,
        }
        return depths.get(self, 2)

    @property
    def randomness(self) -> float:
        """Relative utility noise (0.0 - 1.0)"""
        values = {
            Difficulty.EASY: 0.4,
            Difficulty.NORMAL: 0.2,
            Difficulty.HARD: 0.05,
            Difficulty.NIGHTMARE: 0.0,
        }
        return values.get(self, 0.2)

    @property
    def hold_probability(self) -> float:
        """Chance of keeping a counter card back for a later battle"""
        values = {
            Difficulty.EASY: 0.1,
            Difficulty.NORMAL: 0.3,
            Difficulty.HARD: 0.5,
            Difficulty.NIGHTMARE: 0.6,
        }
        return values.get(self, 0.3)

    @property
    def bluff_probability(self) -> float:
        """Chance of choosing a near-optimal play of a different kind"""
        values = {
            Difficulty.EASY: 0.05,
            Difficulty.NORMAL: 0.15,
            Difficulty.HARD: 0.25,
            Difficulty.NIGHTMARE: 0.3,
        }
        return values.get(self, 0.15)

    @property
    def risk_tolerance(self) -> float:
        """0.0 = cautious, 1.0 = reckless"""
        values = {
            Difficulty.EASY: 0.7,
            Difficulty.NORMAL: 0.5,
            Difficulty.HARD: 0.3,
            Difficulty.NIGHTMARE: 0.2,
        }
        return values.get(self, 0.5)

    @property
    def counter_estimation_accuracy(self) -> float:
        """How well the opponent guesses counters held by the human"""
        values = {
            Difficulty.EASY: 0.3,
            Difficulty.NORMAL: 0.6,
            Difficulty.HARD: 0.85,
            Difficulty.NIGHTMARE: 0.95,
        }
        return values.get(self, 0.6)

    @classmethod
    def from_name(cls, name: str) -> 'Difficulty':
        """Parse a tier name such as ``"hard"``"""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown difficulty: {name}") from None


# =============================================================================
# Utility Functions
# =============================================================================

def subtypes_of(card_type: CardType) -> List[CardSubtype]:
    """Get all subtypes belonging to a card family"""
    return [s for s in CardSubtype if s.card_type == card_type]


def counter_subtype_for(battle_phase: GamePhase, defending: bool) -> CardSubtype:
    """
    Card subtype that must be spent to respond in a battle chain.

    Args:
        battle_phase: AUDIT or HEADHUNTER_BATTLE
        defending: True for the audit target / head-hunter defender

    Returns:
        The subtype a response card must have
    """
    table: Dict[GamePhase, Dict[bool, CardSubtype]] = {
        GamePhase.AUDIT: {True: CardSubtype.HACKED, False: CardSubtype.SECURED},
        GamePhase.HEADHUNTER_BATTLE: {True: CardSubtype.HEAD_HUNTER,
                                      False: CardSubtype.HEAD_HUNTER},
    }
    return table[battle_phase][defending]
