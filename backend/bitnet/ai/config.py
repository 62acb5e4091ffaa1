# =============================================================================
# BitNet Card Game - Opponent Configuration
# =============================================================================
"""
Tunable constants for the computer opponent: per-tier decision parameters,
base utility weights and how they shift with the game situation, action
categories and aggression profiles.
"""

from dataclasses import asdict, dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional

import numpy as np

from ..core.enums import Difficulty


# =============================================================================
# Action Categories
# =============================================================================

class ActionCategory(Enum):
    """Families of candidate actions, in evaluation order"""
    BUILD = auto()
    REROUTE = auto()
    REPAIR = auto()
    DISRUPT = auto()
    SETUP = auto()
    CYCLE = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def order_weight(self) -> float:
        """Tie-breaking preference between categories"""
        weights = {
            ActionCategory.BUILD: 1.20,
            ActionCategory.REROUTE: 1.12,
            ActionCategory.REPAIR: 1.10,
            ActionCategory.DISRUPT: 1.05,
            ActionCategory.SETUP: 1.00,
            ActionCategory.CYCLE: 0.92,
        }
        return weights.get(self, 1.0)


class Aggression(Enum):
    """Per-match play style, picked once when the match starts"""
    PASSIVE = auto()
    BALANCED = auto()
    AGGRESSIVE = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def description(self) -> str:
        descriptions = {
            Aggression.PASSIVE: "Defensive focus, prioritizes building and repairs over disruption",
            Aggression.BALANCED: "Even approach, adapts to game state",
            Aggression.AGGRESSIVE: "Offensive focus, prioritizes attacks and finishing moves",
        }
        return descriptions[self]

    def category_bias(self, category: ActionCategory) -> float:
        """Multiplier applied to the utility of a category"""
        biases = {
            Aggression.PASSIVE: {
                ActionCategory.BUILD: 1.15,
                ActionCategory.REPAIR: 1.20,
                ActionCategory.DISRUPT: 0.75,
                ActionCategory.SETUP: 1.10,
                ActionCategory.CYCLE: 0.95,
            },
            Aggression.BALANCED: {},
            Aggression.AGGRESSIVE: {
                ActionCategory.BUILD: 0.95,
                ActionCategory.REPAIR: 0.85,
                ActionCategory.DISRUPT: 1.25,
                ActionCategory.SETUP: 1.05,
                ActionCategory.CYCLE: 1.05,
            },
        }
        return biases[self].get(category, 1.0)

    @classmethod
    def select(cls, rng: np.random.Generator) -> 'Aggression':
        profiles = list(cls)
        return profiles[int(rng.integers(len(profiles)))]


# =============================================================================
# Utility Weights
# =============================================================================

@dataclass
class UtilityWeights:
    """Weights of the utility components (risk is subtracted)"""
    bitcoin_gain: float = 10.0
    bitcoin_denial: float = 8.0
    board_stability: float = 5.0
    future_advantage: float = 4.0
    risk_penalty: float = 3.0
    redundancy_bonus: float = 3.0
    classification_value: float = 6.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


# =============================================================================
# Opponent Configuration
# =============================================================================

@dataclass
class AIConfig:
    """
    Decision parameters for one difficulty tier plus the safety limits of
    the turn loop.
    """
    difficulty: Difficulty = Difficulty.NORMAL
    lookahead_depth: int = 2
    randomness: float = 0.2
    hold_probability: float = 0.3
    bluff_probability: float = 0.15
    risk_tolerance: float = 0.5
    counter_estimation_accuracy: float = 0.6

    # Turn loop
    worthless_utility: float = 0.0
    max_consecutive_failures: int = 3
    max_failed_action_types: int = 3
    max_turn_iterations: int = 40

    # Candidate generation
    max_floating_cables: int = 5
    near_optimal_margin: float = 0.1

    # Endgame multipliers
    endgame_denial_multiplier: float = 1.5
    endgame_scoring_multiplier: float = 1.4

    base_weights: Optional[UtilityWeights] = None

    def __post_init__(self):
        if self.base_weights is None:
            self.base_weights = UtilityWeights()

    @classmethod
    def for_difficulty(cls, difficulty: Difficulty) -> 'AIConfig':
        """Build the configuration of a difficulty tier"""
        endgame = {
            Difficulty.EASY: (1.2, 1.2),
            Difficulty.NORMAL: (1.5, 1.4),
            Difficulty.HARD: (2.0, 1.6),
            Difficulty.NIGHTMARE: (2.5, 1.8),
        }
        denial, scoring = endgame.get(difficulty, (1.5, 1.4))
        return cls(
            difficulty=difficulty,
            lookahead_depth=difficulty.lookahead_depth,
            randomness=difficulty.randomness,
            hold_probability=difficulty.hold_probability,
            bluff_probability=difficulty.bluff_probability,
            risk_tolerance=difficulty.risk_tolerance,
            counter_estimation_accuracy=difficulty.counter_estimation_accuracy,
            endgame_denial_multiplier=denial,
            endgame_scoring_multiplier=scoring,
        )

    @property
    def is_easy(self) -> bool:
        return self.difficulty == Difficulty.EASY

    @property
    def is_hard(self) -> bool:
        return self.difficulty in (Difficulty.HARD, Difficulty.NIGHTMARE)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["difficulty"] = self.difficulty.name
        return data


def derive_weights(config: AIConfig, score_diff: int, turns_to_win: float) -> UtilityWeights:
    """
    Re-weight utility components for the current situation.

    Args:
        config: Opponent configuration
        score_diff: Own score minus the other player's score
        turns_to_win: Estimated own turns until the winning score

    Returns:
        Adjusted weights
    """
    base = config.base_weights
    w = UtilityWeights(**base.to_dict())

    if score_diff < -5:
        # Behind: hurt the leader, accept more risk
        w.bitcoin_denial *= 1.5
        w.board_stability *= 0.7
        w.risk_penalty *= 0.5
    elif score_diff > 5:
        # Ahead: protect the lead
        w.board_stability *= 1.5
        w.redundancy_bonus *= 1.5
        w.risk_penalty *= 1.3

    if turns_to_win <= 2:
        w.bitcoin_gain *= 2.0
        w.future_advantage *= 0.3

    if config.is_easy:
        w.future_advantage *= 0.5
        w.redundancy_bonus *= 0.5
    elif config.is_hard:
        w.future_advantage *= 1.5
        w.redundancy_bonus *= 1.5
        w.risk_penalty *= 1.5

    return w
