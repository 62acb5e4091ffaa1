"""
Routes Module

Contains API route definitions.
"""

from . import ai, games

__all__ = ['ai', 'games']
