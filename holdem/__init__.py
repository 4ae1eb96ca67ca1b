"""Heads-up No-Limit Hold'em rules engine."""

from .actions import Action, ActionType, AvailableActions
from .cards import Card, Deck, Rank, Suit, build_deck, parse_cards, parse_label
from .evaluator import HandEvaluation, HandRank, evaluate_hand
from .game import GameState
from .models import IllegalAction, Phase, Player, ShowdownResult, TableConfig

__all__ = [
    "Action",
    "ActionType",
    "AvailableActions",
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "build_deck",
    "parse_cards",
    "parse_label",
    "HandEvaluation",
    "HandRank",
    "evaluate_hand",
    "GameState",
    "IllegalAction",
    "Phase",
    "Player",
    "ShowdownResult",
    "TableConfig",
]
