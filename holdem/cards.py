from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, List, Optional, Sequence


class Rank(IntEnum):
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def symbol(self) -> str:
        return RANK_SYMBOLS[self]


class Suit(str, Enum):
    SPADES = "s"
    HEARTS = "h"
    DIAMONDS = "d"
    CLUBS = "c"

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]

    @property
    def is_red(self) -> bool:
        return self in (Suit.HEARTS, Suit.DIAMONDS)


RANK_SYMBOLS = {rank: "23456789TJQKA"[rank - 2] for rank in Rank}
SYMBOL_RANKS = {symbol: rank for rank, symbol in RANK_SYMBOLS.items()}
SUIT_SYMBOLS = {Suit.SPADES: "♠", Suit.HEARTS: "♥", Suit.DIAMONDS: "♦", Suit.CLUBS: "♣"}


@dataclass(frozen=True)
class Card:
    rank: Rank
    suit: Suit

    def __post_init__(self) -> None:
        if not isinstance(self.rank, Rank):
            raise ValueError(f"Invalid rank: {self.rank}")
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{self.rank.symbol}{self.suit.value}"

    def __str__(self) -> str:
        return f"{self.rank.symbol}{self.suit.symbol}"


def build_deck() -> List[Card]:
    return [Card(rank, suit) for suit in Suit for rank in Rank]


class Deck:
    """52 cards dealt from the front without replacement."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._cards = build_deck()
        self._index = 0

    def __len__(self) -> int:
        return len(self._cards) - self._index

    def shuffle(self) -> None:
        self._rng.shuffle(self._cards)
        self._index = 0

    def deal(self) -> Optional[Card]:
        if self._index >= len(self._cards):
            return None
        card = self._cards[self._index]
        self._index += 1
        return card

    def deal_n(self, count: int) -> List[Card]:
        dealt = []
        for _ in range(count):
            card = self.deal()
            if card is None:
                break
            dealt.append(card)
        return dealt


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    if len(label) != 2:
        raise ValueError(f"Invalid card label: {label}")
    rank = SYMBOL_RANKS.get(label[0].upper())
    if rank is None:
        raise ValueError(f"Invalid rank: {label[0]}")
    try:
        suit = Suit(label[1].lower())
    except ValueError:
        raise ValueError(f"Invalid suit: {label[1]}") from None
    return Card(rank, suit)


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
