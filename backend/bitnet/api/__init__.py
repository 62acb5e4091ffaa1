"""
API Module

FastAPI application exposing the game engine and the computer opponent.
"""
