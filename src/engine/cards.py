"""
Card constants, encoding, and human-readable I/O helpers.

Card encoding (integer 0–51):
    rank_index = card // 4  ->  0=2, 1=3, ..., 8=T, 9=J, 10=Q, 11=K, 12=A
    suit_index = card % 4   ->  0=c, 1=d, 2=h, 3=s

Card sets are carried as 52-bit integer masks (bit ``card`` set) so that
collision checks between hands and the board are a single ``&``.
String representations are used exclusively at I/O boundaries.
"""

from __future__ import annotations

RANK_NAMES: list[str] = ['2', '3', '4', '5', '6', '7', '8', '9', 'T', 'J', 'Q', 'K', 'A']
SUIT_NAMES: list[str] = ['c', 'd', 'h', 's']

NUM_CARDS: int = 52
FULL_DECK_MASK: int = (1 << NUM_CARDS) - 1


def card_rank(card: int) -> int:
    """Return the rank index (0–12) of a card.

    Examples:
        >>> card_rank(0)   # 2 of clubs
        0
        >>> card_rank(51)  # Ace of spades
        12
    """
    return card // 4


def card_suit(card: int) -> int:
    """Return the suit index (0–3) of a card.

    Examples:
        >>> card_suit(0)   # 2 of clubs
        0
        >>> card_suit(51)  # Ace of spades
        3
    """
    return card % 4


def card_to_str(card: int) -> str:
    """Convert a card integer to its human-readable string representation.

    Examples:
        >>> card_to_str(0)
        '2c'
        >>> card_to_str(51)
        'As'
        >>> card_to_str(32)
        'Tc'
    """
    return RANK_NAMES[card // 4] + SUIT_NAMES[card % 4]


def str_to_card(s: str) -> int:
    """Parse a human-readable card string to its integer encoding.

    The format is <rank><suit>. Rank is '2'-'9', 'T', 'J', 'Q', 'K' or 'A'
    (case-insensitive); suit is 'c', 'd', 'h' or 's' (case-insensitive).

    Raises:
        ValueError: If the string is not a valid card.

    Examples:
        >>> str_to_card('2c')
        0
        >>> str_to_card('As')
        51
        >>> str_to_card('Tc')
        32
    """
    if len(s) != 2:
        raise ValueError(f"Invalid card string: {s!r}")
    rank_char, suit_char = s[0].upper(), s[1].lower()
    if rank_char not in RANK_NAMES or suit_char not in SUIT_NAMES:
        raise ValueError(f"Invalid card string: {s!r}")
    return RANK_NAMES.index(rank_char) * 4 + SUIT_NAMES.index(suit_char)


def hand_to_str(cards: tuple[int, ...]) -> str:
    """Convert a hand (tuple of card ints) to a compact string.

    Examples:
        >>> hand_to_str((48, 51))
        'AcAs'
    """
    return ''.join(card_to_str(c) for c in cards)


def card_mask(cards: tuple[int, ...] | list[int]) -> int:
    """Return the 52-bit mask with one bit set per card.

    Examples:
        >>> card_mask((0, 2))
        5
    """
    mask = 0
    for card in cards:
        mask |= 1 << card
    return mask


def mask_to_cards(mask: int) -> list[int]:
    """Return the sorted card integers whose bits are set in ``mask``."""
    return [card for card in range(NUM_CARDS) if mask >> card & 1]


def swap_suit(card: int, suit1: int, suit2: int) -> int:
    """Exchange ``suit1`` and ``suit2`` on a card; other suits are unchanged.

    Examples:
        >>> swap_suit(49, 1, 0)   # Ad with d<->c gives Ac
        48
        >>> swap_suit(48, 1, 0)   # Ac with d<->c gives Ad
        49
        >>> swap_suit(50, 1, 0)   # Ah is untouched
        50
    """
    suit = card % 4
    if suit == suit1:
        return card - suit1 + suit2
    if suit == suit2:
        return card - suit2 + suit1
    return card
