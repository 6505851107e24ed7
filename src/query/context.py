"""Query context: the single entry point for reading a solved tree.

A QueryContext owns the one cursor into a solved tree and one exclusive lock.
Every public method holds the lock for its whole duration, so a query never
observes another query's temporary cursor movement. Methods that look ahead
(``append``) or aggregate over chance cards move the cursor temporarily and
always restore it before returning, including when they raise.

Histories are accepted either as Action objects or as compact tokens
(``"X"``, ``"B100"``, ``"37"``).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from src.engine.actions import Action, action_label, as_action, encode_action
from src.engine.board import possible_cards_mask
from src.query.chance_report import ChanceReport, ChanceReportAggregator
from src.query.config import QueryConfig
from src.query.cursor import Cursor
from src.query.decoder import ResultDecoder
from src.query.replay import Replayer, ReplayState
from src.query.results import ResultsReport, build_results, player_label
from src.solvers.solved_tree import SolvedTree

logger = logging.getLogger(__name__)

HistoryLike = Iterable[Action | str]


def _as_actions(history: HistoryLike) -> tuple[Action, ...]:
    return tuple(as_action(item) for item in history)


class QueryContext:
    """Serialized access to one solved tree and its cursor.

    Args:
        tree:   The solved tree to query.
        config: Reporting settings; defaults to QueryConfig().
    """

    def __init__(self, tree: SolvedTree, config: QueryConfig | None = None) -> None:
        self.tree = tree
        self.config = config or QueryConfig()
        self._lock = threading.Lock()
        self._replayer = Replayer(tree)
        self._cursor = Cursor(self._replayer)
        self._decoder = ResultDecoder(tree)
        self._aggregator = ChanceReportAggregator(tree, self._decoder, self.config)

    # ─── Cursor control ──────────────────────────────────────────────────────

    def apply_history(self, history: HistoryLike) -> None:
        """Move the cursor to the node reached by ``history`` from the root.

        Raises:
            MalformedActionToken: A token cannot be decoded.
            ActionNotFound: A step does not exist in the tree.
            CardNotReachable: A chance card has no branch.
        """
        actions = _as_actions(history)
        with self._lock:
            self._cursor.apply_history(actions)
            logger.info("Cursor moved to %s", self._cursor.state.line)

    def back_to_root(self) -> None:
        with self._lock:
            self._cursor.back_to_root()

    @property
    def history(self) -> list[str]:
        """Token-encoded literal history of the cursor."""
        with self._lock:
            return [encode_action(a) for a in self._cursor.history]

    @property
    def state(self) -> ReplayState:
        """Snapshot of the cursor's current replay state."""
        with self._lock:
            return self._cursor.state

    # ─── Node queries ────────────────────────────────────────────────────────

    @contextmanager
    def _ahead(self, append: tuple[Action, ...]) -> Iterator[ReplayState]:
        """Yield the state ``append`` steps past the cursor; caller holds the lock."""
        if not append:
            yield self._cursor.state
            return
        with self._cursor.temporary() as cursor:
            yield cursor.apply_history(cursor.history + append)

    def current_player(self) -> str:
        """'oop', 'ip', 'chance' or 'terminal'."""
        with self._lock:
            return player_label(self.tree.node(self._cursor.state.path))

    def actions_after(self, append: HistoryLike = ()) -> list[str]:
        """Action labels at the node ``append`` steps past the cursor."""
        append = _as_actions(append)
        with self._lock, self._ahead(append) as state:
            node = self.tree.node(state.path)
            if node.is_terminal:
                return ["terminal"]
            if node.is_chance:
                return ["chance"]
            return [action_label(a) for a in node.actions]

    def total_bet_amount(self, append: HistoryLike = ()) -> tuple[int, int]:
        append = _as_actions(append)
        with self._lock, self._ahead(append) as state:
            bets = self.tree.node(state.path).total_bet_amount
            return int(bets[0]), int(bets[1])

    def possible_cards(self, append: HistoryLike = ()) -> int:
        """52-bit mask of dealable cards, or 0 away from a chance node."""
        append = _as_actions(append)
        with self._lock, self._ahead(append) as state:
            if not self.tree.node(state.path).is_chance:
                return 0
            private_cards = (self.tree.private_hand_cards(0), self.tree.private_hand_cards(1))
            return possible_cards_mask(state.board, private_cards)

    def private_cards(self) -> tuple[list[tuple[int, int]], list[tuple[int, int]]]:
        return self.tree.private_hand_cards(0), self.tree.private_hand_cards(1)

    # ─── Reports ─────────────────────────────────────────────────────────────

    def get_results(self) -> ResultsReport:
        """Display results for the node under the cursor."""
        with self._lock:
            return build_results(self.tree, self._cursor.state, self._decoder, self.config)

    def get_chance_reports(
        self,
        suffix: HistoryLike = (),
        num_actions: int | None = None,
    ) -> ChanceReport:
        """Per-card report for the chance node under the cursor.

        Args:
            suffix:      Actions to play after each dealt card.
            num_actions: Actions to summarise in the strategy table.
        """
        suffix = _as_actions(suffix)
        with self._lock:
            return self._aggregator.aggregate(self._cursor, suffix, num_actions)
