"""Per-card report over every outcome of a chance node.

From a cursor sitting on a chance node, the aggregator deals each of the 52
cards in turn, optionally plays a fixed suffix of actions after it, and
records one row:

    status          NOT_POSSIBLE, EMPTY or NORMAL
    combo_count     sum of each player's weights after the card
    equity / EV     each player's averages over their normalized weights
    eqr             EV / (pot * equity)
    strategy        acting player's action frequencies after the suffix

Cards outside the possible-cards mask, and cards whose replay raises
ActionNotFound or CardNotReachable, stay NOT_POSSIBLE with all fields zero.
The cursor is put back after every card and on every exit path.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from src.engine.actions import Action
from src.engine.board import possible_cards_mask
from src.engine.cards import NUM_CARDS, card_to_str
from src.engine.errors import ActionNotFound, CardNotReachable
from src.query.config import QueryConfig
from src.query.cursor import Cursor
from src.query.decoder import ResultDecoder, equity_to_reward, round_value
from src.query.replay import ReplayState
from src.query.results import is_player_node, pot_bases
from src.query.weights import is_empty, normalized_weights, truncate_weights, weighted_average
from src.solvers.solved_tree import SolvedTree

logger = logging.getLogger(__name__)


class ChanceStatus(IntEnum):
    NOT_POSSIBLE = 0
    EMPTY = 1
    NORMAL = 2


@dataclass(frozen=True)
class ChanceReportRow:
    """One card's slice of a ChanceReport."""
    card: int
    status: ChanceStatus
    combo_count: tuple[float, float]
    equity: tuple[float, float]
    expected_value: tuple[float, float]
    eqr: tuple[float, float]
    strategy: tuple[float, ...]


@dataclass
class ChanceReport:
    """Statistics for every possible next card.

    Attributes:
        num_actions:    Actions summarised in ``strategy``.
        status:         (52,) ChanceStatus values.
        combo_count:    (2, 52) summed weights per player.
        equity:         (2, 52) normalized-weight average equity.
        expected_value: (2, 52) normalized-weight average EV.
        eqr:            (2, 52) equity-to-reward.
        strategy:       (num_actions * 52,) flat, index ``action * 52 + card``.
    """
    num_actions: int
    status: np.ndarray
    combo_count: np.ndarray
    equity: np.ndarray
    expected_value: np.ndarray
    eqr: np.ndarray
    strategy: np.ndarray

    @classmethod
    def empty(cls, num_actions: int) -> ChanceReport:
        return cls(
            num_actions=num_actions,
            status=np.zeros(NUM_CARDS, dtype=np.int8),
            combo_count=np.zeros((2, NUM_CARDS)),
            equity=np.zeros((2, NUM_CARDS)),
            expected_value=np.zeros((2, NUM_CARDS)),
            eqr=np.zeros((2, NUM_CARDS)),
            strategy=np.zeros(num_actions * NUM_CARDS),
        )

    def row(self, card: int) -> ChanceReportRow:
        return ChanceReportRow(
            card=card,
            status=ChanceStatus(int(self.status[card])),
            combo_count=(float(self.combo_count[0, card]), float(self.combo_count[1, card])),
            equity=(float(self.equity[0, card]), float(self.equity[1, card])),
            expected_value=(
                float(self.expected_value[0, card]),
                float(self.expected_value[1, card]),
            ),
            eqr=(float(self.eqr[0, card]), float(self.eqr[1, card])),
            strategy=tuple(
                float(self.strategy[a * NUM_CARDS + card]) for a in range(self.num_actions)
            ),
        )

    def rows(self) -> Iterator[ChanceReportRow]:
        for card in range(NUM_CARDS):
            yield self.row(card)

    def to_dict(self) -> dict:
        return {
            "status": self.status.tolist(),
            "combo_count": self.combo_count.tolist(),
            "equity": self.equity.tolist(),
            "expected_value": self.expected_value.tolist(),
            "eqr": self.eqr.tolist(),
            "strategy": self.strategy.tolist(),
        }


@dataclass
class _CardRow:
    status: ChanceStatus
    combos: tuple[float, float]
    equity: tuple[float, float] = (0.0, 0.0)
    ev: tuple[float, float] = (0.0, 0.0)
    eqr: tuple[float, float] = (0.0, 0.0)
    strategy: list[float] | None = None


class ChanceReportAggregator:
    """Builds ChanceReports by driving a cursor over each next card."""

    def __init__(self, tree: SolvedTree, decoder: ResultDecoder, config: QueryConfig) -> None:
        self.tree = tree
        self.decoder = decoder
        self.config = config
        self._private_cards = (tree.private_hand_cards(0), tree.private_hand_cards(1))

    def aggregate(
        self,
        cursor: Cursor,
        suffix: tuple[Action, ...] = (),
        num_actions: int | None = None,
    ) -> ChanceReport:
        """Return the ChanceReport for the chance node under ``cursor``.

        Args:
            cursor:      Cursor on a chance node; restored before returning.
            suffix:      Actions played after each dealt card.
            num_actions: Actions to summarise; taken from the first reachable
                         player node when omitted.

        Raises:
            ValueError: If the cursor is not on a chance node.
        """
        if not self.tree.node(cursor.state.path).is_chance:
            raise ValueError("Chance reports need the cursor on a chance node.")

        saved = cursor.history
        possible = possible_cards_mask(cursor.state.board, self._private_cards)
        rows: dict[int, _CardRow] = {}

        for card in range(NUM_CARDS):
            if not possible >> card & 1:
                continue
            with cursor.temporary():
                try:
                    state = cursor.apply_history(saved + (Action.chance(card),) + suffix)
                except (ActionNotFound, CardNotReachable) as exc:
                    logger.debug("Card %s left out of chance report: %s", card_to_str(card), exc)
                    continue
                row = self._card_row(state)
            rows[card] = row
            if num_actions is None and row.strategy is not None:
                num_actions = len(row.strategy)

        report = ChanceReport.empty(num_actions or 0)
        for card, row in rows.items():
            report.status[card] = row.status
            for player in range(2):
                report.combo_count[player, card] = row.combos[player]
                report.equity[player, card] = row.equity[player]
                report.expected_value[player, card] = row.ev[player]
                report.eqr[player, card] = row.eqr[player]
            for action, value in enumerate((row.strategy or [])[:report.num_actions]):
                report.strategy[action * NUM_CARDS + card] = value

        logger.debug(
            "Chance report: %d normal, %d empty, %d not possible",
            int(np.sum(report.status == ChanceStatus.NORMAL)),
            int(np.sum(report.status == ChanceStatus.EMPTY)),
            int(np.sum(report.status == ChanceStatus.NOT_POSSIBLE)),
        )
        return report

    def _card_row(self, state: ReplayState) -> _CardRow:
        node = self.tree.node(state.path)
        weights = [truncate_weights(w, self.config.weight_floor) for w in state.weights]
        combos = (round_value(weights[0].sum()), round_value(weights[1].sum()))
        empty = (is_empty(weights[0]), is_empty(weights[1]))
        normalizer = normalized_weights(state.weights, self._private_cards, state.board)

        strategy = None
        if is_player_node(node):
            actor = node.player
            if not empty[actor]:
                ws = weights[actor] if empty[actor ^ 1] else normalizer[actor]
                strategy = [
                    round_value(weighted_average(row, ws))
                    for row in self.decoder.strategy(state)
                ]

        if empty[0] or empty[1]:
            return _CardRow(ChanceStatus.EMPTY, combos, strategy=strategy)

        eqr_base = pot_bases(self.tree, node)
        equity = [0.0, 0.0]
        ev = [0.0, 0.0]
        eqr = [0.0, 0.0]
        for player in range(2):
            eq_avg = weighted_average(self.decoder.equity(state, player), normalizer[player])
            ev_avg = weighted_average(self.decoder.expected_values(state, player), normalizer[player])
            equity[player] = round_value(eq_avg)
            ev[player] = round_value(ev_avg)
            eqr[player] = float(equity_to_reward(
                np.array(ev_avg), np.array(eq_avg), eqr_base[player], self.config.eqr_min_equity
            ))
        return _CardRow(
            ChanceStatus.NORMAL,
            combos,
            equity=(equity[0], equity[1]),
            ev=(ev[0], ev[1]),
            eqr=(eqr[0], eqr[1]),
            strategy=strategy,
        )
