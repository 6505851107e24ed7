"""Decoding of per-node statistics into literal, display-ready arrays.

Node tables are stored in the canonical branch's hand ordering and may be
fixed-point compressed. ``ResultDecoder`` decodes them through the single
``decode_statistic`` boundary and then applies the replay's pending swaps,
river swap first and turn swap second, which maps canonical indices back to
the literal hand ordering used by the weights.

Display rounding keeps a magnitude-dependent number of decimals:

    |value| bucket      decimals
    < 1                 6
    < 10                5
    < 100               4
    < 1000              3
    < 10000             2
    otherwise           1

The bucket is chosen from the unrounded value (negative values fall in the
first bucket).
"""

from __future__ import annotations

import numpy as np

from src.query.propagation import strategy_rows
from src.query.replay import ReplayState
from src.solvers.solved_tree import SolvedTree, TreeNode, decode_statistic

_ROUNDING_BOUNDS: np.ndarray = np.array([1.0, 10.0, 100.0, 1000.0, 10000.0])
_MAX_DECIMALS: int = 6


# ─── Display rounding ─────────────────────────────────────────────────────────


def display_decimals(values: np.ndarray | float) -> np.ndarray:
    """Return the number of decimals each value is displayed with.

    Examples:
        >>> display_decimals(np.array([0.5, 5.0, 50.0, 500.0, 5000.0, 50000.0])).tolist()
        [6, 5, 4, 3, 2, 1]
    """
    values = np.asarray(values, dtype=np.float64)
    return _MAX_DECIMALS - np.searchsorted(_ROUNDING_BOUNDS, values, side='right')


def round_array(values: np.ndarray) -> np.ndarray:
    """Round every value to its display precision; inf and NaN pass through.

    Ties round away from zero (1000.125 -> 1000.13), not to even.
    """
    values = np.asarray(values, dtype=np.float64)
    scale = 10.0 ** display_decimals(values)
    with np.errstate(invalid='ignore'):
        return np.sign(values) * np.floor(np.abs(values) * scale + 0.5) / scale


def round_value(value: float) -> float:
    """Scalar form of ``round_array``.

    Examples:
        >>> round_value(0.12345678)
        0.123457
        >>> round_value(12.345678)
        12.3457
        >>> round_value(123456.78)
        123456.8
    """
    return float(round_array(np.asarray(value, dtype=np.float64)))


# ─── Equity-to-reward ─────────────────────────────────────────────────────────


def equity_to_reward(
    expected_values: np.ndarray,
    equity: np.ndarray,
    pot: float,
    min_equity: float,
) -> np.ndarray:
    """Return rounded EV / (pot * equity) per entry.

    Where equity is below ``min_equity`` the ratio is undefined and the entry
    is ``ev / 0.0`` (+inf, -inf, or NaN when ev is 0), unrounded.
    """
    ev = np.asarray(expected_values, dtype=np.float64)
    eq = np.asarray(equity, dtype=np.float64)
    with np.errstate(divide='ignore', invalid='ignore'):
        undefined = ev / 0.0
        defined = round_array(ev / (pot * eq))
    return np.where(eq < min_equity, undefined, defined)


# ─── Decoder ──────────────────────────────────────────────────────────────────


class ResultDecoder:
    """Reads the node under a ReplayState and returns literal-ordered arrays."""

    def __init__(self, tree: SolvedTree) -> None:
        self.tree = tree

    def node(self, state: ReplayState) -> TreeNode:
        return self.tree.node(state.path)

    def _to_literal(self, state: ReplayState, player: int, values: np.ndarray) -> np.ndarray:
        for swap in state.pending_swaps:
            values = swap.apply(player, values)
        return values

    def strategy(self, state: ReplayState) -> np.ndarray:
        """(num_actions, num_hands[actor]) strategy of the acting player."""
        node = self.node(state)
        return self._to_literal(state, node.player, strategy_rows(node))

    def action_values(self, state: ReplayState) -> np.ndarray:
        """(num_actions, num_hands[actor]) per-action EVs of the acting player."""
        node = self.node(state)
        if node.cum_regret is None:
            raise LookupError("No cumulative-regret table stored at this node.")
        rows = decode_statistic(node.cum_regret).reshape(len(node.actions), -1)
        return self._to_literal(state, node.player, rows)

    def equity(self, state: ReplayState, player: int) -> np.ndarray:
        node = self.node(state)
        return self._to_literal(state, player, decode_statistic(node.equity(player)))

    def expected_values(self, state: ReplayState, player: int) -> np.ndarray:
        node = self.node(state)
        return self._to_literal(state, player, decode_statistic(node.expected_values(player)))
