# =============================================================================
# BitNet Card Game - Backend Package
# =============================================================================
"""
BitNet Card Game Backend

A two-player, turn-based network-building card game. Players wire
switches, cables and computers into a tree and mine one bitcoin per
enabled, connected computer each turn, while attacks, audits and
head-hunter steals tear the opponent's network apart. One side is played by
a priority-weighted computer opponent.
"""

__version__ = "0.1.0"
