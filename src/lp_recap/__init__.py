"""Rank recap bot for League of Legends and Teamfight Tactics."""

__version__ = "0.1.0"
