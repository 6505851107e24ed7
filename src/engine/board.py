"""
Board validation and card-availability masks.

The board is a tuple of 3, 4 or 5 card integers (flop, turn, river). Private
hands are (c1, c2) tuples; each player's hand list is converted once to a
numpy uint64 array of 52-bit card masks so that collision checks against the
board and against the opponent's hands vectorise.
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from .cards import FULL_DECK_MASK, NUM_CARDS, card_mask
from .errors import InvalidBoardLength


class Street(Enum):
    """Board state, valued by the number of board cards."""
    FLOP = 3
    TURN = 4
    RIVER = 5


def board_street(board: tuple[int, ...] | list[int]) -> Street:
    """Return the street a board of this length belongs to.

    Raises:
        InvalidBoardLength: If the board is not 3, 4 or 5 cards.

    Examples:
        >>> board_street((0, 1, 2))
        <Street.FLOP: 3>
        >>> board_street((0, 1, 2, 3, 4))
        <Street.RIVER: 5>
    """
    try:
        return Street(len(board))
    except ValueError:
        raise InvalidBoardLength(len(board)) from None


def validate_board(board: tuple[int, ...] | list[int]) -> tuple[int, ...]:
    """Check a board and return it as a tuple.

    Raises:
        InvalidBoardLength: If the board is not 3, 4 or 5 cards.
        ValueError: If a card is outside 0–51 or appears twice.
    """
    board_street(board)
    seen = 0
    for card in board:
        if not 0 <= card < NUM_CARDS:
            raise ValueError(f"Card {card} is out of range.")
        if seen >> card & 1:
            raise ValueError(f"Card {card} has already been dealt.")
        seen |= 1 << card
    return tuple(int(c) for c in board)


def next_street(board: tuple[int, ...] | list[int]) -> Street:
    """Return the street that the next chance card deals (TURN or RIVER).

    Raises:
        InvalidBoardLength: If the board is already complete or malformed.
    """
    street = board_street(board)
    if street is Street.RIVER:
        raise InvalidBoardLength(len(board) + 1)
    return Street(street.value + 1)


def hand_masks(private_cards: list[tuple[int, int]]) -> np.ndarray:
    """Return a uint64 array with the card mask of every private hand.

    Examples:
        >>> hand_masks([(0, 1), (4, 5)]).tolist()
        [3, 48]
    """
    return np.array([card_mask(hand) for hand in private_cards], dtype=np.uint64)


def compatible_pairs(
    masks0: np.ndarray,
    masks1: np.ndarray,
    board_mask: int,
) -> np.ndarray:
    """Return the (n0, n1) boolean matrix of non-colliding hand pairs.

    A pair is compatible when neither hand touches the board and the two hands
    share no card.
    """
    board = np.uint64(board_mask)
    zero = np.uint64(0)
    valid0 = (masks0 & board) == zero
    valid1 = (masks1 & board) == zero
    disjoint = (masks0[:, None] & masks1[None, :]) == zero
    return disjoint & valid0[:, None] & valid1[None, :]


def possible_cards_mask(
    board: tuple[int, ...] | list[int],
    private_cards: tuple[list[tuple[int, int]], list[tuple[int, int]]],
) -> int:
    """Return the 52-bit mask of cards that may be dealt next.

    A card is impossible when it is already on the board, or when it belongs
    to every compatible (OOP, IP) hand pair, so that dealing it would leave no
    possible holding.

    Examples:
        >>> board = (3, 23, 31)
        >>> bin(possible_cards_mask(board, ([(44, 40)], [(36, 32)]))).count('1')
        45
    """
    b_mask = card_mask(board)
    masks0 = hand_masks(private_cards[0])
    masks1 = hand_masks(private_cards[1])
    if len(masks0) == 0 or len(masks1) == 0:
        return 0

    compat = compatible_pairs(masks0, masks1, b_mask)
    unions = (masks0[:, None] | masks1[None, :])[compat]
    dead = int(np.bitwise_and.reduce(unions, initial=np.uint64(FULL_DECK_MASK)))
    return ~(b_mask | dead) & FULL_DECK_MASK
