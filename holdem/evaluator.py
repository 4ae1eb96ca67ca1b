from __future__ import annotations

import itertools
from collections import Counter
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Sequence, Tuple

from .cards import Card, Rank


class HandRank(IntEnum):
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8


RANK_NAMES = {
    Rank.TWO: "twos",
    Rank.THREE: "threes",
    Rank.FOUR: "fours",
    Rank.FIVE: "fives",
    Rank.SIX: "sixes",
    Rank.SEVEN: "sevens",
    Rank.EIGHT: "eights",
    Rank.NINE: "nines",
    Rank.TEN: "tens",
    Rank.JACK: "jacks",
    Rank.QUEEN: "queens",
    Rank.KING: "kings",
    Rank.ACE: "aces",
}

HIGH_NAMES = {rank: rank.name.capitalize() for rank in Rank}

WHEEL = frozenset({Rank.ACE, Rank.TWO, Rank.THREE, Rank.FOUR, Rank.FIVE})


@dataclass(frozen=True, order=True)
class HandEvaluation:
    # Ordering looks at (rank, kickers) only; the description is display text.
    rank: HandRank
    kickers: Tuple[Rank, ...]
    description: str = field(default="", compare=False)

    def strength(self) -> float:
        """Normalised 0.0-1.0 strength used by policies and displays."""
        base = int(self.rank) / 8.0
        bonus = (int(self.kickers[0]) - 2) / 12.0 * 0.1 if self.kickers else 0.0
        return min(base + bonus, 1.0)


def evaluate_hand(hole: Sequence[Card], board: Sequence[Card]) -> HandEvaluation:
    """Best hand from hole + board cards.

    With five or more cards every 5-card subset is scored and the maximum kept.
    With fewer, only rank repetitions can be judged, so the result is an
    estimate that never reports straights or flushes.
    """
    cards = list(hole) + list(board)
    if len(cards) < 5:
        return _evaluate_partial(cards)

    best: Optional[HandEvaluation] = None
    for combo in itertools.combinations(cards, 5):
        evaluation = evaluate_five(combo)
        if best is None or evaluation > best:
            best = evaluation
    assert best is not None
    return best


def _evaluate_partial(cards: Sequence[Card]) -> HandEvaluation:
    if not cards:
        return HandEvaluation(HandRank.HIGH_CARD, (), "No cards")

    counts = Counter(card.rank for card in cards)
    quads = [rank for rank, count in counts.items() if count == 4]
    if quads:
        return _four_of_a_kind(quads[0])

    trips = sorted((rank for rank, count in counts.items() if count == 3), reverse=True)
    if trips:
        return _three_of_a_kind(trips[0])

    pairs = sorted((rank for rank, count in counts.items() if count == 2), reverse=True)
    if len(pairs) >= 2:
        return HandEvaluation(HandRank.TWO_PAIR, (pairs[0],), "Two pair")
    if pairs:
        return _pair(pairs[0])

    ranks = tuple(sorted((card.rank for card in cards), reverse=True))
    return _high_card(ranks)


def evaluate_five(cards: Sequence[Card]) -> HandEvaluation:
    if len(cards) != 5:
        raise ValueError(f"Expected 5 cards, got {len(cards)}")

    counts = Counter(card.rank for card in cards)
    is_flush = len({card.suit for card in cards}) == 1
    straight_high = _straight_high(counts.keys())

    # Highest count first, then highest rank within the same count.
    grouped = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    top_rank, top_count = grouped[0]
    second_count = grouped[1][1] if len(grouped) > 1 else 0
    ranks = tuple(sorted((card.rank for card in cards), reverse=True))

    if is_flush and straight_high is not None:
        return HandEvaluation(
            HandRank.STRAIGHT_FLUSH,
            (straight_high,),
            f"{HIGH_NAMES[straight_high]} high straight flush",
        )
    if top_count == 4:
        return _four_of_a_kind(top_rank)
    if top_count == 3 and second_count == 2:
        pair_rank = grouped[1][0]
        return HandEvaluation(
            HandRank.FULL_HOUSE,
            (top_rank, pair_rank),
            f"Full house, {RANK_NAMES[top_rank]} full of {RANK_NAMES[pair_rank]}",
        )
    if is_flush:
        return HandEvaluation(HandRank.FLUSH, ranks, f"{HIGH_NAMES[ranks[0]]} high flush")
    if straight_high is not None:
        return HandEvaluation(
            HandRank.STRAIGHT,
            (straight_high,),
            f"{HIGH_NAMES[straight_high]} high straight",
        )
    if top_count == 3:
        return _three_of_a_kind(top_rank)
    if top_count == 2 and second_count == 2:
        high_pair, low_pair = grouped[0][0], grouped[1][0]
        return HandEvaluation(
            HandRank.TWO_PAIR,
            (high_pair, low_pair),
            f"Two pair, {RANK_NAMES[high_pair]} and {RANK_NAMES[low_pair]}",
        )
    if top_count == 2:
        return _pair(top_rank)
    return _high_card(ranks)


def _straight_high(distinct: Sequence[Rank]) -> Optional[Rank]:
    ranks = set(distinct)
    if len(ranks) != 5:
        return None
    if ranks == WHEEL:
        return Rank.FIVE
    high, low = max(ranks), min(ranks)
    if high - low == 4:
        return high
    return None


def _four_of_a_kind(rank: Rank) -> HandEvaluation:
    return HandEvaluation(HandRank.FOUR_OF_A_KIND, (rank,), f"Four of a kind, {RANK_NAMES[rank]}")


def _three_of_a_kind(rank: Rank) -> HandEvaluation:
    return HandEvaluation(HandRank.THREE_OF_A_KIND, (rank,), f"Three of a kind, {RANK_NAMES[rank]}")


def _pair(rank: Rank) -> HandEvaluation:
    return HandEvaluation(HandRank.PAIR, (rank,), f"Pair of {RANK_NAMES[rank]}")


def _high_card(ranks: Tuple[Rank, ...]) -> HandEvaluation:
    return HandEvaluation(HandRank.HIGH_CARD, ranks, f"{HIGH_NAMES[ranks[0]]} high")
