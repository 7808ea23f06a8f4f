import pytest

from engine.cards import Card, Hand, Suit, parse_card


def test_card_codes_round_trip_for_every_suit_and_rank():
    for suit in Suit:
        for rank in range(16):
            card = Card(suit, rank)
            assert parse_card(card.code) == card


def test_card_labels_use_lowercase_hex():
    assert Card(Suit.SPADES, 10).code == "Sa"
    assert Card(Suit.DIAMONDS, 15).label == "D.f"


@pytest.mark.parametrize("text", ["SA", "X1", "S", "S10", "", "s1", "H-"])
def test_parse_card_rejects_out_of_grammar_text(text):
    with pytest.raises(ValueError):
        parse_card(text)


def test_rank_out_of_range_rejected():
    with pytest.raises(ValueError):
        Card(Suit.HEARTS, 16)


def test_hand_marks_slots_played_without_shifting_indices():
    hand = Hand([Card(Suit.SPADES, 0), Card(Suit.HEARTS, 2), Card(Suit.SPADES, 5)])
    assert hand.mark_played(1) == Card(Suit.HEARTS, 2)

    assert len(hand) == 3
    assert hand.remaining == 2
    assert hand[1].played
    assert hand.unplayed() == [(0, Card(Suit.SPADES, 0)), (2, Card(Suit.SPADES, 5))]
    assert not hand.has_suit(Suit.HEARTS)
    assert hand.find(Card(Suit.HEARTS, 2)) is None


def test_played_slot_cannot_be_played_again():
    hand = Hand([Card(Suit.CLUBS, 3)])
    hand.mark_played(0)
    with pytest.raises(ValueError):
        hand.mark_played(0)
    assert not hand.is_unplayed(0)
    assert not hand.is_unplayed(5)


def test_find_skips_played_duplicates():
    card = Card(Suit.DIAMONDS, 7)
    hand = Hand([card, card])
    hand.mark_played(0)
    assert hand.find(card) == 1
