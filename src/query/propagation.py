"""Per-hand reach-weight propagation along a replayed history.

Each player carries one weight per private hand, indexed like the tree's
initial hand list. While a history is replayed from the root:

    player node     the actor's weights are multiplied by the strategy row of
                    the action taken (skipped when the node has one action)
    chance node     no multiplication; an isomorphic card permutes both
                    players' weights into the canonical branch's ordering

After the descent, ``finish`` undoes the permutations (river first, then
turn), zeroes hands that collide with a dealt card, and multiplies by the
initial range weights exactly once. The result is the absolute weight of
every hand in literal card ordering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from src.engine.board import Street, hand_masks
from src.engine.cards import card_mask
from src.solvers.solved_tree import SolvedTree, SwapPairs, TreeNode, decode_statistic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapList:
    """Per-player hand-index transpositions recorded at one chance transition.

    Applying a SwapList maps between the literal hand ordering and the
    ordering of the canonical branch the card was folded into. The pairs are
    disjoint, so applying the same list twice restores the original order.

    Attributes:
        street: TURN or RIVER, the street whose card produced the swap.
        pairs:  One tuple of (i, j) index pairs per player.
    """
    street: Street
    pairs: SwapPairs

    def permutation(self, player: int, num_hands: int) -> np.ndarray:
        perm = np.arange(num_hands)
        for i, j in self.pairs[player]:
            perm[i], perm[j] = j, i
        return perm

    def apply(self, player: int, values: np.ndarray) -> np.ndarray:
        """Return ``values`` with the player's pairs exchanged along the last axis."""
        if not self.pairs[player]:
            return np.array(values, copy=True)
        return values[..., self.permutation(player, values.shape[-1])]

    def __bool__(self) -> bool:
        return bool(self.pairs[0] or self.pairs[1])


def strategy_rows(node: TreeNode) -> np.ndarray:
    """Decode the node's strategy table as (num_actions, num_hands)."""
    if node.strategy is None:
        raise LookupError("No strategy table stored at this node.")
    return decode_statistic(node.strategy).reshape(len(node.actions), -1)


class WeightPropagator:
    """Carries WeightVector[2] alongside one replay from the root."""

    def __init__(self, tree: SolvedTree) -> None:
        self.tree = tree
        self.weights: list[np.ndarray] = [
            np.ones(tree.num_private_hands(0), dtype=np.float64),
            np.ones(tree.num_private_hands(1), dtype=np.float64),
        ]

    def on_action(self, node: TreeNode, action_index: int) -> None:
        """Scale the actor's weights by the probability of the action taken."""
        if len(node.actions) <= 1:
            return
        row = strategy_rows(node)[action_index]
        player = node.player
        if row.shape != self.weights[player].shape:
            raise ValueError(
                f"Strategy row has {row.shape[0]} entries, "
                f"player {player} has {self.weights[player].shape[0]} hands."
            )
        self.weights[player] *= row

    def on_chance(self, swap: SwapList | None) -> None:
        """Move both weight vectors into the canonical branch's ordering."""
        if swap is None:
            return
        for player in range(2):
            self.weights[player] = swap.apply(player, self.weights[player])

    def finish(
        self,
        pending_swaps: list[SwapList],
        dealt_cards: tuple[int, ...],
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return absolute weights in literal ordering.

        Args:
            pending_swaps: Swaps in the order they must be undone
                           (river before turn).
            dealt_cards:   Literal cards dealt during the replay.
        """
        for swap in pending_swaps:
            for player in range(2):
                self.weights[player] = swap.apply(player, self.weights[player])

        dealt_mask = np.uint64(card_mask(dealt_cards))
        for player in range(2):
            if dealt_cards:
                masks = hand_masks(self.tree.private_hand_cards(player))
                blocked = (masks & dealt_mask) != np.uint64(0)
                self.weights[player][blocked] = 0.0
            self.weights[player] *= self.tree.initial_weight(player)

        logger.debug(
            "Propagated weights: %d/%d live OOP hands, %d/%d live IP hands",
            int(np.count_nonzero(self.weights[0])), len(self.weights[0]),
            int(np.count_nonzero(self.weights[1])), len(self.weights[1]),
        )
        return self.weights[0], self.weights[1]
