# =============================================================================
# AI Module
# =============================================================================
"""
Computer opponent for the BitNet card game.

Contains:
- analysis: network, hand and opponent analysis
- candidates: legal action enumeration
- evaluator: weighted utility scoring
- opponent_agent: selection, turn loop and battle decisions
"""

from .config import (
    ActionCategory,
    Aggression,
    AIConfig,
    UtilityWeights,
    derive_weights,
)

from .analysis import (
    Behavior,
    HandAnalysis,
    NetworkAnalysis,
    OpponentModel,
    OpponentProfile,
    analyze_hand,
    analyze_network,
    estimate_turns_to_win,
)

from .candidates import (
    AIActionType,
    CandidateAction,
    CandidateGenerator,
)

from .evaluator import (
    DecisionContext,
    UtilityEvaluator,
)

from .opponent_agent import (
    OpponentAgent,
    play_simulated_game,
)

__all__ = [
    # Configuration
    'ActionCategory',
    'Aggression',
    'AIConfig',
    'UtilityWeights',
    'derive_weights',

    # Analysis
    'Behavior',
    'HandAnalysis',
    'NetworkAnalysis',
    'OpponentModel',
    'OpponentProfile',
    'analyze_hand',
    'analyze_network',
    'estimate_turns_to_win',

    # Candidates & scoring
    'AIActionType',
    'CandidateAction',
    'CandidateGenerator',
    'DecisionContext',
    'UtilityEvaluator',

    # Agent
    'OpponentAgent',
    'play_simulated_game',
]
