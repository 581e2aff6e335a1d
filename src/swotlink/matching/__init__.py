"""
Motor de matching.

Combina filtros hard y un score ponderado para rankear startups e
inversores compatibles.
"""

from swotlink.matching.engine import MatchingEngine, MatchStats, preferences_match
from swotlink.matching.saved import SavedMatchService
from swotlink.matching.scoring import parse_preferences, score, tokenize_location

__all__ = [
    "MatchingEngine",
    "MatchStats",
    "SavedMatchService",
    "preferences_match",
    "parse_preferences",
    "score",
    "tokenize_location",
]
