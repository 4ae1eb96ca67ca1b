import itertools
import random

import pytest

from holdem.cards import Deck, Rank, parse_cards
from holdem.evaluator import HandEvaluation, HandRank, evaluate_five, evaluate_hand


def evaluate_labels(labels):
    cards = parse_cards(labels)
    return evaluate_hand(cards[:2], cards[2:])


def test_evaluate_identifies_all_hand_categories():
    cases = [
        (HandRank.STRAIGHT_FLUSH, ["As", "Ks", "Qs", "Js", "Ts"]),
        (HandRank.FOUR_OF_A_KIND, ["As", "Ah", "Ad", "Ac", "Kd"]),
        (HandRank.FULL_HOUSE, ["Qc", "Qd", "Qs", "9h", "9s"]),
        (HandRank.FLUSH, ["Ah", "Jh", "9h", "6h", "2h"]),
        (HandRank.STRAIGHT, ["9h", "8d", "7c", "6s", "5h"]),
        (HandRank.THREE_OF_A_KIND, ["8h", "8d", "8s", "Qd", "Js"]),
        (HandRank.TWO_PAIR, ["7h", "7d", "4s", "4c", "As"]),
        (HandRank.PAIR, ["6h", "6s", "Qh", "8d", "4c"]),
        (HandRank.HIGH_CARD, ["As", "Kd", "Jh", "9c", "4d"]),
    ]

    for expected_rank, labels in cases:
        assert evaluate_labels(labels).rank == expected_rank, f"labels={labels}"


def test_royal_flush_reports_ace_high():
    evaluation = evaluate_labels(["As", "Ks", "Qs", "Js", "Ts"])
    assert evaluation.kickers == (Rank.ACE,)
    assert evaluation.description == "Ace high straight flush"


def test_wheel_is_the_lowest_straight():
    wheel = evaluate_labels(["Ah", "2d", "3c", "4s", "5h"])
    six_high = evaluate_labels(["2s", "3h", "4d", "5c", "6s"])
    assert wheel.rank == HandRank.STRAIGHT
    assert wheel.kickers == (Rank.FIVE,)
    assert six_high.rank == HandRank.STRAIGHT
    assert six_high.kickers == (Rank.SIX,)
    assert six_high > wheel


def test_ace_is_not_low_outside_the_wheel():
    evaluation = evaluate_labels(["Ah", "Kd", "2c", "3s", "4h"])
    assert evaluation.rank == HandRank.HIGH_CARD


def test_steel_wheel_is_a_five_high_straight_flush():
    evaluation = evaluate_labels(["Ad", "2d", "3d", "4d", "5d"])
    assert evaluation.rank == HandRank.STRAIGHT_FLUSH
    assert evaluation.kickers == (Rank.FIVE,)


def test_straight_with_four_suited_cards_is_not_straight_flush():
    evaluation = evaluate_labels(["As", "Ks", "Qs", "Js", "Th"])
    assert evaluation.rank == HandRank.STRAIGHT


def test_straight_flush_must_come_from_one_combination():
    # Spade flush on board plus an off-suit straight: neither makes a straight flush.
    evaluation = evaluate_labels(["9h", "8c", "Ks", "7s", "6s", "5s", "2s"])
    assert evaluation.rank == HandRank.FLUSH
    assert evaluation.kickers == (Rank.KING, Rank.SEVEN, Rank.SIX, Rank.FIVE, Rank.TWO)


def test_kicker_layout_per_category():
    assert evaluate_labels(["Kc", "Kd", "Ks", "Kh", "2d"]).kickers == (Rank.KING,)
    assert evaluate_labels(["3c", "3d", "3s", "Jh", "Jd"]).kickers == (Rank.THREE, Rank.JACK)
    assert evaluate_labels(["7h", "7d", "Qs", "Qc", "As"]).kickers == (Rank.QUEEN, Rank.SEVEN)
    assert evaluate_labels(["6h", "6s", "Qh", "8d", "4c"]).kickers == (Rank.SIX,)
    assert evaluate_labels(["8h", "8d", "8s", "Qd", "Js"]).kickers == (Rank.EIGHT,)
    assert evaluate_labels(["As", "Kd", "Jh", "9c", "4d"]).kickers == (
        Rank.ACE,
        Rank.KING,
        Rank.JACK,
        Rank.NINE,
        Rank.FOUR,
    )


def test_full_house_descriptions_name_both_ranks():
    evaluation = evaluate_labels(["Ks", "Kh", "Kd", "Qs", "Qh", "2c", "3d"])
    assert evaluation.rank == HandRank.FULL_HOUSE
    assert evaluation.description == "Full house, kings full of queens"


def test_seven_card_hand_picks_best_two_pair():
    evaluation = evaluate_labels(["As", "Ah", "Kd", "Kc", "2s", "3h", "4d"])
    assert evaluation.rank == HandRank.TWO_PAIR
    assert evaluation.kickers == (Rank.ACE, Rank.KING)


def test_higher_category_beats_any_kickers():
    trips = evaluate_labels(["2h", "2d", "2s", "7d", "9s"])
    two_pair = evaluate_labels(["Ah", "Ad", "Ks", "Kc", "Qs"])
    assert trips > two_pair


def test_comparison_ignores_description():
    assert HandEvaluation(HandRank.PAIR, (Rank.ACE,), "a") == HandEvaluation(HandRank.PAIR, (Rank.ACE,), "b")


@pytest.mark.parametrize("seed", [7, 77, 777])
def test_seven_cards_equal_best_of_all_subsets(seed):
    deck = Deck(random.Random(seed))
    deck.shuffle()
    for _ in range(7):
        cards = deck.deal_n(7)
        best = max(evaluate_five(combo) for combo in itertools.combinations(cards, 5))
        assert evaluate_hand(cards[:2], cards[2:]) == best


def test_evaluation_is_deterministic_for_same_cards():
    cards = parse_cards(["Qs", "Jd", "Ts", "9s", "8h", "2s", "3s"])
    results = {evaluate_hand(cards[:2], cards[2:]) for _ in range(5)}
    assert len(results) == 1
    reordered = evaluate_hand(cards[5:], cards[:5])
    assert reordered == results.pop()


def test_partial_board_estimates_from_repeats_only():
    assert evaluate_labels(["Ah", "Ad"]).rank == HandRank.PAIR
    assert evaluate_labels(["Ah", "Ad", "Ac"]).kickers == (Rank.ACE,)
    assert evaluate_labels(["Ah", "Ad", "Ac", "As"]).rank == HandRank.FOUR_OF_A_KIND
    two_pair = evaluate_labels(["Ah", "Ad", "Kc", "Ks"])
    assert two_pair.rank == HandRank.TWO_PAIR
    assert two_pair.kickers == (Rank.ACE,)
    suited_run = evaluate_labels(["9h", "8h", "7h", "6h"])
    assert suited_run.rank == HandRank.HIGH_CARD
    assert suited_run.kickers == (Rank.NINE, Rank.EIGHT, Rank.SEVEN, Rank.SIX)


def test_empty_input_is_high_card_without_kickers():
    evaluation = evaluate_hand([], [])
    assert evaluation.rank == HandRank.HIGH_CARD
    assert evaluation.kickers == ()
    assert evaluation.strength() == 0.0


def test_strength_is_normalised():
    royal = evaluate_labels(["As", "Ks", "Qs", "Js", "Ts"])
    low = evaluate_labels(["7h", "5d", "4c", "3s", "2h"])
    assert royal.strength() == 1.0
    assert 0.0 <= low.strength() < royal.strength()


def test_evaluate_five_rejects_wrong_card_count():
    with pytest.raises(ValueError, match="Expected 5 cards"):
        evaluate_five(parse_cards(["As", "Ks", "Qs", "Js"]))
