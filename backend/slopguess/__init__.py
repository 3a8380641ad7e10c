"""Slop Guess - round lifecycle and scoring engine for the AI image prompt guessing game.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""

__version__ = "1.0.0"
