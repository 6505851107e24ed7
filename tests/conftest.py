"""
Shared pytest fixtures for postflop query tests.

Provides a card-string helper and a small suit-symmetric solved tree built
programmatically:

    board       2s 7s 9s
    OOP range   KcQc KdQd KhQh
    IP range    JcTc JdTd JhTh

Clubs, diamonds and hearts are interchangeable on this board, so turn cards
of those suits fold into the club card of the same rank. After a club turn
the river folds hearts into diamonds; after a spade turn it folds diamonds
and hearts into clubs. Every node carries distinct per-hand tables drawn
from a seeded generator, so dense and compressed builds hold the same
numbers up to quantisation.

Tree shape (bets are total chips committed on top of the starting pot):

    flop   OOP [X, B10]   X -> IP [X, B10]   X -> turn chance
           B10 -> opponent [F, C] terminals
    turn   OOP [X, B20]   X -> IP [X] -> river chance
           B20 -> IP [F, C] terminals
    river  OOP [X, B40]   X -> terminal
           B40 -> IP [F, C] terminals
"""

from __future__ import annotations

import numpy as np
import pytest

from src.engine.actions import Action
from src.engine.cards import NUM_CARDS, card_suit, str_to_card
from src.query.context import QueryContext
from src.solvers.memory_tree import (
    MemoryNode,
    MemoryTree,
    chance_node,
    player_node,
    terminal_node,
)
from src.solvers.solved_tree import Compressed, Dense, Statistic, decode_statistic

# ─── Fixture data ─────────────────────────────────────────────────────────────

CLUB, DIAMOND, HEART, SPADE = 0, 1, 2, 3
STARTING_POT = 100
EFFECTIVE_STACK = 500
SEED = 7


def cards(*card_strs: str) -> tuple[int, ...]:
    """Build a tuple of card ints from human-readable strings.

    Examples:
        >>> cards('2s', '7s', '9s')
        (3, 23, 31)
    """
    return tuple(str_to_card(s) for s in card_strs)


FLOP: tuple[int, ...] = cards('2s', '7s', '9s')
OOP_HANDS: list[tuple[int, int]] = [cards('Kc', 'Qc'), cards('Kd', 'Qd'), cards('Kh', 'Qh')]
IP_HANDS: list[tuple[int, int]] = [cards('Jc', 'Tc'), cards('Jd', 'Td'), cards('Jh', 'Th')]


def swap_pairs(i: int, j: int):
    """Same hand-index transposition for both players."""
    return ((i, j),), ((i, j),)


# ─── Tree builder ─────────────────────────────────────────────────────────────


class _Tables:
    """Draws node tables in build order; ``compress`` only changes storage."""

    def __init__(self, seed: int, compress: bool) -> None:
        self.rng = np.random.default_rng(seed)
        self.compress = compress

    def _wrap(self, values: np.ndarray, signed: bool = False) -> Statistic:
        if self.compress:
            return Compressed.encode(values, signed=signed)
        return Dense(values)

    def strategy(self, num_actions: int, override=None) -> Statistic:
        if override is not None:
            values = np.asarray(override, dtype=np.float64)
        else:
            raw = self.rng.uniform(0.25, 1.0, (num_actions, 3))
            values = raw / raw.sum(axis=0)
        return self._wrap(values.ravel())

    def regrets(self, num_actions: int) -> Statistic:
        return self._wrap(self.rng.uniform(-50.0, 50.0, num_actions * 3), signed=True)

    def equities(self) -> tuple[Statistic, Statistic]:
        return (
            self._wrap(self.rng.uniform(0.05, 0.95, 3)),
            self._wrap(self.rng.uniform(0.05, 0.95, 3)),
        )

    def values(self) -> tuple[Statistic, Statistic]:
        return (
            self._wrap(self.rng.uniform(-20.0, 120.0, 3), signed=True),
            self._wrap(self.rng.uniform(-20.0, 120.0, 3), signed=True),
        )


def _terminal(t: _Tables, bets: tuple[int, int]) -> MemoryNode:
    return terminal_node(equities=t.equities(), values=t.values(), total_bet_amount=bets)


def _player(
    t: _Tables,
    player: int,
    actions: list[Action],
    children: list[MemoryNode],
    bets: tuple[int, int],
    override=None,
) -> MemoryNode:
    return player_node(
        player,
        actions,
        children,
        strategy=t.strategy(len(actions), override),
        cum_regret=t.regrets(len(actions)),
        equities=t.equities(),
        values=t.values(),
        total_bet_amount=bets,
    )


def _facing_bet(t: _Tables, amount: int, base: int) -> MemoryNode:
    return _player(
        t, 1, [Action.fold(), Action.call()],
        [_terminal(t, (amount, base)), _terminal(t, (amount, amount))],
        (amount, base),
    )


def _river_subtree(t: _Tables) -> MemoryNode:
    return _player(
        t, 0, [Action.check(), Action.bet(40)],
        [_terminal(t, (0, 0)), _facing_bet(t, 40, 0)],
        (0, 0),
    )


def _river_chance(t: _Tables, turn_card: int) -> MemoryNode:
    dealt = set(FLOP) | {turn_card}
    if card_suit(turn_card) == CLUB:
        canonical_suits = {CLUB, DIAMOND, SPADE}
        folds = {HEART: (DIAMOND, swap_pairs(1, 2))}
    else:
        canonical_suits = {CLUB, SPADE}
        folds = {DIAMOND: (CLUB, swap_pairs(0, 1)), HEART: (CLUB, swap_pairs(0, 2))}

    river_cards = [
        c for c in range(NUM_CARDS) if c not in dealt and card_suit(c) in canonical_suits
    ]
    isomorphic = []
    for card in range(NUM_CARDS):
        if card in dealt or card_suit(card) not in folds:
            continue
        target_suit, pairs = folds[card_suit(card)]
        isomorphic.append((card, card - card_suit(card) + target_suit, pairs))

    children = [_river_subtree(t) for _ in river_cards]
    return chance_node(
        river_cards, children, isomorphic=isomorphic,
        equities=t.equities(), values=t.values(),
    )


def _turn_subtree(t: _Tables, turn_card: int) -> MemoryNode:
    ip_check = _player(t, 1, [Action.check()], [_river_chance(t, turn_card)], (0, 0))
    return _player(
        t, 0, [Action.check(), Action.bet(20)],
        [ip_check, _facing_bet(t, 20, 0)],
        (0, 0),
    )


def _turn_chance(t: _Tables) -> MemoryNode:
    turn_cards = [
        c for c in range(NUM_CARDS) if c not in FLOP and card_suit(c) in (CLUB, SPADE)
    ]
    isomorphic = [
        (c, c - card_suit(c), swap_pairs(0, card_suit(c)))
        for c in range(NUM_CARDS)
        if card_suit(c) in (DIAMOND, HEART)
    ]
    children = [_turn_subtree(t, c) for c in turn_cards]
    return chance_node(
        turn_cards, children, isomorphic=isomorphic,
        equities=t.equities(), values=t.values(),
    )


def build_tree(
    *,
    compress: bool = False,
    root_strategy=None,
    seed: int = SEED,
    initial_weights: tuple[np.ndarray, np.ndarray] | None = None,
) -> MemoryTree:
    """Build the fixture tree.

    Args:
        compress:        Store every table as 16-bit fixed point.
        root_strategy:   Optional (2, 3) OOP [Check, Bet] table at the root.
        seed:            Seed for every drawn table.
        initial_weights: Range weights; uniform 1.0 when omitted.
    """
    t = _Tables(seed, compress)
    ip_bet_faced = _player(
        t, 0, [Action.fold(), Action.call()],
        [_terminal(t, (0, 10)), _terminal(t, (10, 10))],
        (0, 10),
    )
    ip_flop = _player(
        t, 1, [Action.check(), Action.bet(10)],
        [_turn_chance(t), ip_bet_faced],
        (0, 0),
    )
    root = _player(
        t, 0, [Action.check(), Action.bet(10)],
        [ip_flop, _facing_bet(t, 10, 0)],
        (0, 0),
        override=root_strategy,
    )
    if initial_weights is None:
        initial_weights = (np.ones(3), np.ones(3))
    return MemoryTree(
        root,
        FLOP,
        (OOP_HANDS, IP_HANDS),
        initial_weights,
        starting_pot=STARTING_POT,
        effective_stack=EFFECTIVE_STACK,
    )


def decoded(stat: Statistic) -> np.ndarray:
    """Shortcut for tests reading raw node tables."""
    return decode_statistic(stat)


# ─── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def tree() -> MemoryTree:
    return build_tree()


@pytest.fixture(scope="session")
def compressed_tree() -> MemoryTree:
    return build_tree(compress=True)


@pytest.fixture
def ctx(tree: MemoryTree) -> QueryContext:
    """A fresh QueryContext (cursor at the root) over the shared tree."""
    return QueryContext(tree)
