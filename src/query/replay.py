"""History replay with card canonicalization.

A solved tree stores only one branch per class of suit-isomorphic chance
cards. Replaying a literal history (player actions plus the cards actually
dealt) therefore has to resolve each literal card to the branch that
represents it and remember how the two hand orderings relate:

    1. If the turn was folded into a branch of another suit, a later river
       card of either of those suits is read with the suits exchanged.
    2. The (possibly remapped) card is looked up among the node's chance
       actions.
    3. Failing that, among the node's isomorphism entries; a hit descends the
       canonical branch and records the entry's SwapList for that street.
    4. Otherwise the card is not reachable.

The replay is iterative: it walks the history left to right, feeds each step
to a WeightPropagator, and returns an immutable ReplayState. The pending
swaps are kept as an explicit list and are undone in a fixed order (river,
then turn) once the descent is over.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from src.engine.actions import Action, encode_line
from src.engine.board import Street, next_street
from src.engine.cards import swap_suit
from src.engine.errors import ActionNotFound, CardNotReachable
from src.query.propagation import SwapList, WeightPropagator
from src.solvers.solved_tree import SolvedTree, TreeNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ReplayState:
    """Cursor into a solved tree plus everything derived while reaching it.

    Attributes:
        history:    Literal actions, as supplied by the caller.
        path:       Branch index taken at every step from the root.
        board:      Root board followed by the literal cards dealt.
        weights:    Absolute per-hand weights, literal ordering.
        turn_swap:  SwapList recorded for an isomorphic turn card, if any.
        river_swap: SwapList recorded for an isomorphic river card, if any.
        turn_suits: (dealt_suit, canonical_suit) of an isomorphic turn card.
    """
    history: tuple[Action, ...]
    path: tuple[int, ...]
    board: tuple[int, ...]
    weights: tuple[np.ndarray, np.ndarray]
    turn_swap: SwapList | None = None
    river_swap: SwapList | None = None
    turn_suits: tuple[int, int] | None = None

    @property
    def pending_swaps(self) -> list[SwapList]:
        """Recorded swaps in the order that maps canonical back to literal."""
        return [s for s in (self.river_swap, self.turn_swap) if s is not None]

    @property
    def line(self) -> str:
        return encode_line(self.history)


@dataclass(frozen=True)
class ChanceResolution:
    """Outcome of resolving one literal chance card at a chance node."""
    index: int
    swap: SwapList | None = None
    turn_suits: tuple[int, int] | None = None


def resolve_chance(
    node: TreeNode,
    card: int,
    street: Street,
    turn_suits: tuple[int, int] | None,
    path: tuple[int, ...] = (),
) -> ChanceResolution:
    """Find the branch of ``node`` that represents the literal ``card``.

    Args:
        node:       Chance node being left.
        card:       Literal dealt card.
        street:     Street the card is dealt on (TURN or RIVER).
        turn_suits: Suit pair recorded when the turn was canonicalized.
        path:       Path of ``node``, for error messages.

    Raises:
        CardNotReachable: If neither an exact nor an isomorphic branch exists.
    """
    lookup_card = card
    if turn_suits is not None:
        lookup_card = swap_suit(card, *turn_suits)

    for index, action in enumerate(node.actions):
        if action.is_chance and action.card == lookup_card:
            return ChanceResolution(index)

    for entry, iso_card in enumerate(node.isomorphic_cards):
        if iso_card != lookup_card:
            continue
        index = node.isomorphic_chances[entry]
        swap = SwapList(street, node.isomorphic_swap(entry))
        suits = None
        if street is Street.TURN:
            canonical_card = node.actions[index].card
            suits = (lookup_card % 4, canonical_card % 4)
        return ChanceResolution(index, swap, suits)

    raise CardNotReachable(card, path)


def find_action(node: TreeNode, action: Action, path: tuple[int, ...] = ()) -> int:
    """Return the index of ``action`` among the node's actions.

    Raises:
        ActionNotFound: If the node has no such action.
    """
    try:
        return node.actions.index(action)
    except ValueError:
        raise ActionNotFound(action, path) from None


class Replayer:
    """Replays literal histories against one solved tree."""

    def __init__(self, tree: SolvedTree) -> None:
        self.tree = tree

    def replay(self, history: list[Action] | tuple[Action, ...]) -> ReplayState:
        """Walk ``history`` from the root and return the resulting state.

        Raises:
            ActionNotFound: A player action is absent, a chance card is given
                at a player node (or vice versa), or the history runs past a
                terminal node.
            CardNotReachable: A chance card has no exact or isomorphic branch.
        """
        history = tuple(history)
        propagator = WeightPropagator(self.tree)
        path: list[int] = []
        board = list(self.tree.board)
        dealt: list[int] = []
        swaps: dict[Street, SwapList] = {}
        turn_suits: tuple[int, int] | None = None

        node = self.tree.node(())
        for action in history:
            here = tuple(path)
            if node.is_terminal:
                raise ActionNotFound(action, here)

            if node.is_chance:
                if not action.is_chance:
                    raise ActionNotFound(action, here)
                street = next_street(board)
                resolution = resolve_chance(node, action.card, street, turn_suits, here)
                if resolution.swap is not None:
                    swaps[street] = resolution.swap
                    propagator.on_chance(resolution.swap)
                if resolution.turn_suits is not None:
                    turn_suits = resolution.turn_suits
                board.append(action.card)
                dealt.append(action.card)
                index = resolution.index
            else:
                if action.is_chance:
                    raise ActionNotFound(action, here)
                index = find_action(node, action, here)
                propagator.on_action(node, index)

            path.append(index)
            node = node.child(index)

        turn_swap = swaps.get(Street.TURN)
        river_swap = swaps.get(Street.RIVER)
        pending = [s for s in (river_swap, turn_swap) if s is not None]
        weights = propagator.finish(pending, tuple(dealt))
        for w in weights:
            w.flags.writeable = False

        logger.debug("Replayed %s to node %s", encode_line(history), path)
        return ReplayState(
            history=history,
            path=tuple(path),
            board=tuple(board),
            weights=weights,
            turn_swap=turn_swap,
            river_swap=river_swap,
            turn_suits=turn_suits,
        )
