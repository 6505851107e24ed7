"""
Interface to a solved postflop game tree.

The equilibrium engine that produces the tree lives outside this package; the
query layer only reads it. This module pins down what the query layer needs
from it:

    SolvedTree    the whole solve: board, pot, ranges, node lookup by path
    TreeNode      one node: kind, actor, actions, per-node statistics and
                  isomorphism metadata

Nodes are addressed by an index path from the root (a tuple of action
indices), so a cursor is a plain value that can be copied, stored and
replayed.

Per-node statistics are either dense floats or 16-bit fixed-point integers
with a per-table scale factor. Both are modelled as one ``Statistic`` variant
and decoded at a single boundary, ``decode_statistic``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

import numpy as np

from src.engine.actions import Action

# Per-player tuple of disjoint (i, j) hand-index pairs.
SwapPairs = tuple[tuple[tuple[int, int], ...], tuple[tuple[int, int], ...]]


# ─── Statistic variant ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Dense:
    """Statistic stored as plain floats."""
    values: np.ndarray


@dataclass(frozen=True)
class Compressed:
    """Statistic stored as 16-bit fixed point.

    Attributes:
        raw:   uint16 (non-negative tables such as strategy or equity) or
               int16 (signed tables such as regrets and EVs).
        scale: Value represented by the largest raw integer.
    """
    raw: np.ndarray
    scale: float

    @classmethod
    def encode(cls, values: np.ndarray, *, signed: bool = False) -> Compressed:
        """Quantise float values into a Compressed statistic.

        The scale is the largest absolute value (1.0 for an all-zero table),
        so the extreme value maps to the largest representable integer.

        Examples:
            >>> c = Compressed.encode(np.array([0.0, 0.5, 1.0]))
            >>> c.raw.tolist(), c.scale
            ([0, 32768, 65535], 1.0)
        """
        values = np.asarray(values, dtype=np.float64)
        dtype = np.int16 if signed else np.uint16
        if not signed and np.any(values < 0.0):
            raise ValueError("Negative values need a signed table.")
        peak = float(np.max(np.abs(values))) if values.size else 0.0
        scale = peak if peak > 0.0 else 1.0
        max_raw = np.iinfo(dtype).max
        raw = np.rint(values / scale * max_raw).astype(dtype)
        return cls(raw=raw, scale=scale)


Statistic = Union[Dense, Compressed]


def decode_statistic(stat: Statistic) -> np.ndarray:
    """Return a fresh float64 array holding the decoded statistic.

    Compressed tables decode as ``raw * scale / max_representable`` where the
    maximum comes from the raw integer dtype (65535 for uint16, 32767 for
    int16). The result is always a new array, so callers may permute or
    modify it freely.

    Examples:
        >>> decode_statistic(Dense(np.array([0.25, 0.75]))).tolist()
        [0.25, 0.75]
        >>> raw = np.array([0, 65535], dtype=np.uint16)
        >>> decode_statistic(Compressed(raw, scale=2.0)).tolist()
        [0.0, 2.0]
    """
    if isinstance(stat, Dense):
        return np.array(stat.values, dtype=np.float64)
    if isinstance(stat, Compressed):
        max_raw = np.iinfo(stat.raw.dtype).max
        return stat.raw.astype(np.float64) * stat.scale / max_raw
    raise TypeError(f"Unsupported statistic type: {type(stat).__name__}")


# ─── Engine protocols ─────────────────────────────────────────────────────────


class TreeNode(Protocol):
    """Read-only view of one node of a solved tree.

    ``strategy`` and ``cum_regret`` are (num_actions, num_hands[player])
    tables for the acting player; after the solve is finalised ``cum_regret``
    holds the per-action expected values. Tables are indexed in the node's
    canonical hand ordering.

    ``isomorphic_chances[i]`` is the branch a non-canonical card
    ``isomorphic_cards[i]`` is folded into, and ``isomorphic_swap(i)`` the
    per-player index pairs relating the two hand orderings.
    """
    is_terminal: bool
    is_chance: bool
    player: int
    actions: tuple[Action, ...]
    total_bet_amount: tuple[int, int]
    strategy: Statistic | None
    cum_regret: Statistic | None
    isomorphic_chances: tuple[int, ...]
    isomorphic_cards: tuple[int, ...]

    def child(self, index: int) -> TreeNode: ...

    def equity(self, player: int) -> Statistic: ...

    def expected_values(self, player: int) -> Statistic: ...

    def isomorphic_swap(self, index: int) -> SwapPairs: ...


class SolvedTree(Protocol):
    """Read-only view of a finished solve."""
    board: tuple[int, ...]
    starting_pot: int
    effective_stack: int
    is_compression_enabled: bool

    def node(self, path: tuple[int, ...]) -> TreeNode: ...

    def num_private_hands(self, player: int) -> int: ...

    def private_hand_cards(self, player: int) -> list[tuple[int, int]]: ...

    def initial_weight(self, player: int) -> np.ndarray: ...
