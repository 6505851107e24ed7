"""
In-memory solved tree.

A concrete ``SolvedTree`` whose nodes are plain dataclasses. Hosts that hold
an exported solve (or tests that need a small hand-built one) assemble a tree
of ``MemoryNode`` objects with the ``player_node`` / ``chance_node`` /
``terminal_node`` helpers and wrap it in ``MemoryTree``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto

import numpy as np

from src.engine.actions import Action
from src.engine.board import validate_board
from src.engine.cards import card_mask
from src.solvers.solved_tree import Compressed, Statistic, SwapPairs


class NodeKind(Enum):
    PLAYER = auto()
    CHANCE = auto()
    TERMINAL = auto()


@dataclass
class MemoryNode:
    """One node of an in-memory solved tree.

    Attributes:
        kind:               PLAYER, CHANCE or TERMINAL.
        player:             Acting player (0 = OOP, 1 = IP); -1 otherwise.
        actions:            Outgoing edges, aligned with ``children``.
        children:           Child nodes.
        total_bet_amount:   Chips each player has committed beyond the
                            starting pot when this node is reached.
        strategy:           (num_actions, num_hands[player]) table.
        cum_regret:         (num_actions, num_hands[player]) per-action EVs.
        equities:           Per-player equity tables.
        values:             Per-player expected-value tables.
        isomorphic_chances: Branch index for each non-canonical card.
        isomorphic_cards:   The non-canonical cards, aligned with the above.
        swaps:              Per-entry swap pairs, aligned with the above.
    """
    kind: NodeKind
    player: int = -1
    actions: tuple[Action, ...] = ()
    children: list[MemoryNode] = field(default_factory=list)
    total_bet_amount: tuple[int, int] = (0, 0)
    strategy: Statistic | None = None
    cum_regret: Statistic | None = None
    equities: tuple[Statistic, Statistic] | None = None
    values: tuple[Statistic, Statistic] | None = None
    isomorphic_chances: tuple[int, ...] = ()
    isomorphic_cards: tuple[int, ...] = ()
    swaps: tuple[SwapPairs, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.kind is NodeKind.TERMINAL

    @property
    def is_chance(self) -> bool:
        return self.kind is NodeKind.CHANCE

    def child(self, index: int) -> MemoryNode:
        return self.children[index]

    def equity(self, player: int) -> Statistic:
        if self.equities is None:
            raise LookupError("No equity table stored at this node.")
        return self.equities[player]

    def expected_values(self, player: int) -> Statistic:
        if self.values is None:
            raise LookupError("No expected-value table stored at this node.")
        return self.values[player]

    def isomorphic_swap(self, index: int) -> SwapPairs:
        return self.swaps[index]

    def iter_nodes(self) -> Iterator[MemoryNode]:
        """Yield this node and every descendant, depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


# ─── Node factories ───────────────────────────────────────────────────────────


def player_node(
    player: int,
    actions: list[Action],
    children: list[MemoryNode],
    *,
    strategy: Statistic,
    cum_regret: Statistic | None = None,
    equities: tuple[Statistic, Statistic] | None = None,
    values: tuple[Statistic, Statistic] | None = None,
    total_bet_amount: tuple[int, int] = (0, 0),
) -> MemoryNode:
    if len(actions) != len(children):
        raise ValueError("Each action needs exactly one child.")
    return MemoryNode(
        kind=NodeKind.PLAYER,
        player=player,
        actions=tuple(actions),
        children=list(children),
        total_bet_amount=total_bet_amount,
        strategy=strategy,
        cum_regret=cum_regret,
        equities=equities,
        values=values,
    )


def chance_node(
    cards: list[int],
    children: list[MemoryNode],
    *,
    isomorphic: list[tuple[int, int, SwapPairs]] | None = None,
    equities: tuple[Statistic, Statistic] | None = None,
    values: tuple[Statistic, Statistic] | None = None,
    total_bet_amount: tuple[int, int] = (0, 0),
) -> MemoryNode:
    """Build a chance node.

    Args:
        cards:      Canonical cards, one branch each.
        children:   Subtrees aligned with ``cards``.
        isomorphic: (card, canonical_card, swap_pairs) entries for cards that
                    are folded into an existing branch.
    """
    if len(cards) != len(children):
        raise ValueError("Each chance card needs exactly one child.")
    iso_chances: list[int] = []
    iso_cards: list[int] = []
    swaps: list[SwapPairs] = []
    for card, canonical, pairs in isomorphic or []:
        iso_chances.append(cards.index(canonical))
        iso_cards.append(card)
        swaps.append(pairs)
    return MemoryNode(
        kind=NodeKind.CHANCE,
        actions=tuple(Action.chance(c) for c in cards),
        children=list(children),
        total_bet_amount=total_bet_amount,
        equities=equities,
        values=values,
        isomorphic_chances=tuple(iso_chances),
        isomorphic_cards=tuple(iso_cards),
        swaps=tuple(swaps),
    )


def terminal_node(
    *,
    equities: tuple[Statistic, Statistic] | None = None,
    values: tuple[Statistic, Statistic] | None = None,
    total_bet_amount: tuple[int, int] = (0, 0),
) -> MemoryNode:
    return MemoryNode(
        kind=NodeKind.TERMINAL,
        total_bet_amount=total_bet_amount,
        equities=equities,
        values=values,
    )


# ─── Tree ─────────────────────────────────────────────────────────────────────


class MemoryTree:
    """A finished solve held entirely in memory.

    Args:
        root:            Root node.
        board:           3, 4 or 5 board cards at the root.
        private_cards:   Per-player list of (c1, c2) hands.
        initial_weights: Per-player range weight for each hand.
        starting_pot:    Pot at the root.
        effective_stack: Effective stack at the root.

    Raises:
        InvalidBoardLength: If the board is not 3, 4 or 5 cards.
        ValueError: If a hand list and its weights differ in length, or a
            hand shares a card with the board.
    """

    def __init__(
        self,
        root: MemoryNode,
        board: tuple[int, ...] | list[int],
        private_cards: tuple[list[tuple[int, int]], list[tuple[int, int]]],
        initial_weights: tuple[np.ndarray, np.ndarray],
        *,
        starting_pot: int,
        effective_stack: int,
    ) -> None:
        self.board = validate_board(board)
        board_mask = card_mask(self.board)
        for player in range(2):
            if len(private_cards[player]) != len(initial_weights[player]):
                raise ValueError(
                    f"Player {player} has {len(private_cards[player])} hands "
                    f"but {len(initial_weights[player])} weights."
                )
            for hand in private_cards[player]:
                if card_mask(hand) & board_mask:
                    raise ValueError(f"Hand {hand} collides with the board.")

        self.root = root
        self.starting_pot = starting_pot
        self.effective_stack = effective_stack
        self._private_cards = (
            [tuple(h) for h in private_cards[0]],
            [tuple(h) for h in private_cards[1]],
        )
        self._initial_weights = (
            np.asarray(initial_weights[0], dtype=np.float64),
            np.asarray(initial_weights[1], dtype=np.float64),
        )
        self.is_compression_enabled = any(
            isinstance(stat, Compressed)
            for node in root.iter_nodes()
            for stat in (node.strategy, node.cum_regret)
        )

    def node(self, path: tuple[int, ...]) -> MemoryNode:
        node = self.root
        for index in path:
            node = node.child(index)
        return node

    def num_private_hands(self, player: int) -> int:
        return len(self._private_cards[player])

    def private_hand_cards(self, player: int) -> list[tuple[int, int]]:
        return list(self._private_cards[player])

    def initial_weight(self, player: int) -> np.ndarray:
        return self._initial_weights[player].copy()
