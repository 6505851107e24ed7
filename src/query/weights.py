"""Weight normalization and weighted summaries.

Raw propagated weights are not mutually consistent: the weight of an OOP hand
ignores whether IP could even hold a hand alongside it. Normalized weights
fix that by summing, over every card-disjoint (OOP, IP) hand pair that also
avoids the board, the joint weight ``w0[i] * w1[j]``:

    N0[i] = sum_j w0[i] * w1[j]
    N1[j] = sum_i w0[i] * w1[j]

Both vectors sum to the same total joint mass. They are the weights used for
display scaling and for averaging equity and EV over a range.
"""

from __future__ import annotations

import numpy as np

from src.engine.board import compatible_pairs, hand_masks
from src.engine.cards import card_mask


def normalized_weights(
    weights: tuple[np.ndarray, np.ndarray],
    private_cards: tuple[list[tuple[int, int]], list[tuple[int, int]]],
    board: tuple[int, ...],
) -> tuple[np.ndarray, np.ndarray]:
    """Return NormalizedWeight[2] for the given raw weights and board.

    Args:
        weights:       Raw per-hand weights for OOP and IP.
        private_cards: (c1, c2) per hand for OOP and IP, aligned with weights.
        board:         Every card currently on the board.

    Returns:
        (oop_normalized, ip_normalized), float64 arrays shaped like the inputs.

    Examples:
        >>> w = (np.array([1.0, 1.0]), np.array([0.5]))
        >>> n0, n1 = normalized_weights(w, ([(0, 1), (4, 5)], [(0, 8)]), (20, 21, 22))
        >>> n0.tolist(), n1.tolist()
        ([0.0, 0.5], [0.5])
    """
    w0 = np.asarray(weights[0], dtype=np.float64)
    w1 = np.asarray(weights[1], dtype=np.float64)
    compat = compatible_pairs(
        hand_masks(private_cards[0]),
        hand_masks(private_cards[1]),
        card_mask(board),
    )
    live = compat & (w0 > 0.0)[:, None] & (w1 > 0.0)[None, :]
    joint = np.where(live, np.outer(w0, w1), 0.0)
    return joint.sum(axis=1), joint.sum(axis=0)


def truncate_weights(weights: np.ndarray, floor: float) -> np.ndarray:
    """Zero out weights below ``floor`` (display noise), keep the rest."""
    weights = np.asarray(weights, dtype=np.float64)
    return np.where(weights < floor, 0.0, weights)


def is_empty(weights: np.ndarray) -> bool:
    """True iff every weight is zero."""
    return not np.any(weights)


def emptiness_flag(oop_empty: bool, ip_empty: bool) -> int:
    """Pack both emptiness flags: bit 0 = OOP empty, bit 1 = IP empty."""
    return int(oop_empty) + 2 * int(ip_empty)


def weighted_average(values: np.ndarray, weights: np.ndarray) -> float:
    """Return sum(values * weights) / sum(weights).

    A zero weight sum yields NaN rather than an error.

    Examples:
        >>> weighted_average(np.array([1.0, 3.0]), np.array([1.0, 3.0]))
        2.5
    """
    values = np.asarray(values, dtype=np.float64)
    weights = np.asarray(weights, dtype=np.float64)
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.sum(values * weights) / np.sum(weights))
