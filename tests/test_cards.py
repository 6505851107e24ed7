"""Tests for src/engine/cards.py: card encoding, string I/O and masks."""

from __future__ import annotations

import pytest

from src.engine.cards import (
    FULL_DECK_MASK,
    NUM_CARDS,
    RANK_NAMES,
    SUIT_NAMES,
    card_mask,
    card_rank,
    card_suit,
    card_to_str,
    hand_to_str,
    mask_to_cards,
    str_to_card,
    swap_suit,
)


class TestCardEncoding:
    def test_two_of_clubs_is_card_zero(self):
        assert card_rank(0) == 0
        assert card_suit(0) == 0

    def test_ace_of_spades_is_card_51(self):
        assert card_rank(51) == 12
        assert card_suit(51) == 3

    def test_rank_and_suit_cover_the_deck(self):
        seen = {(card_rank(c), card_suit(c)) for c in range(NUM_CARDS)}
        assert len(seen) == NUM_CARDS

    def test_name_tables(self):
        assert ''.join(RANK_NAMES) == '23456789TJQKA'
        assert ''.join(SUIT_NAMES) == 'cdhs'


class TestStringConversion:
    def test_card_to_str(self):
        assert card_to_str(0) == '2c'
        assert card_to_str(50) == 'Ah'
        assert card_to_str(32) == 'Tc'

    def test_str_to_card(self):
        assert str_to_card('2s') == 3
        assert str_to_card('7s') == 23
        assert str_to_card('Kd') == 45

    def test_str_to_card_is_case_insensitive(self):
        assert str_to_card('ah') == str_to_card('AH') == 50

    def test_every_card_survives_string_round_trip(self):
        for card in range(NUM_CARDS):
            assert str_to_card(card_to_str(card)) == card

    @pytest.mark.parametrize("bad", ['', 'A', 'Ax', '1c', '10c', 'Zs'])
    def test_invalid_strings_raise(self, bad):
        with pytest.raises(ValueError):
            str_to_card(bad)

    def test_hand_to_str(self):
        assert hand_to_str((44, 40)) == 'KcQc'


class TestMasks:
    def test_card_mask_sets_one_bit_per_card(self):
        assert card_mask((0, 2)) == 0b101
        assert card_mask(()) == 0

    def test_mask_to_cards_is_sorted(self):
        assert mask_to_cards(card_mask((31, 3, 23))) == [3, 23, 31]

    def test_full_deck_mask(self):
        assert mask_to_cards(FULL_DECK_MASK) == list(range(NUM_CARDS))


class TestSwapSuit:
    def test_exchanges_both_directions(self):
        assert swap_suit(str_to_card('5c'), 2, 0) == str_to_card('5h')
        assert swap_suit(str_to_card('5h'), 2, 0) == str_to_card('5c')

    def test_other_suits_untouched(self):
        assert swap_suit(str_to_card('5d'), 2, 0) == str_to_card('5d')
        assert swap_suit(str_to_card('5s'), 2, 0) == str_to_card('5s')

    def test_is_an_involution(self):
        for card in range(NUM_CARDS):
            assert swap_suit(swap_suit(card, 1, 3), 1, 3) == card
