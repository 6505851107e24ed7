"""Tests for src/query/results.py: the per-node ResultsReport."""

from __future__ import annotations

import numpy as np

from src.engine.actions import decode_line
from src.query.config import QueryConfig
from src.query.decoder import ResultDecoder, round_array
from src.query.replay import Replayer
from src.query.results import build_results, pot_bases
from tests.conftest import STARTING_POT, build_tree, cards, decoded

AH, FIVE_C = cards('Ah', '5c')


def _results(tree, line: str, config: QueryConfig | None = None):
    state = Replayer(tree).replay(decode_line(line))
    return build_results(tree, state, ResultDecoder(tree), config or QueryConfig())


class TestPotBases:
    def test_unequal_bets(self, tree):
        node = tree.node((1,))  # IP facing a 10-chip bet
        assert node.total_bet_amount == (10, 0)
        assert pot_bases(tree, node) == (STARTING_POT + 10, STARTING_POT)

    def test_matched_bets(self, tree):
        node = tree.node((1, 1))
        assert pot_bases(tree, node) == (STARTING_POT + 20, STARTING_POT + 20)


class TestBuildResults:
    def test_root_report(self, tree):
        report = _results(tree, "")
        root = tree.node(())
        assert report.current_player == "oop"
        assert report.num_actions == 2
        assert report.emptiness_flags == 0
        assert report.pot_base_per_player == (STARTING_POT, STARTING_POT)
        np.testing.assert_allclose(report.equity[0], round_array(decoded(root.equity(0))))
        np.testing.assert_allclose(report.strategy, round_array(decoded(root.strategy)))
        np.testing.assert_allclose(report.per_action_ev, round_array(decoded(root.cum_regret)))

    def test_normalized_weights_at_root(self, tree):
        report = _results(tree, "")
        np.testing.assert_allclose(report.normalized_weights[0], np.full(3, 3.0))
        np.testing.assert_allclose(report.normalized_weights[1], np.full(3, 3.0))

    def test_eqr_uses_player_pot_base(self, tree):
        report = _results(tree, "B10")
        node = tree.node((1,))
        ev = decoded(node.expected_values(1))
        eq = decoded(node.equity(1))
        np.testing.assert_allclose(report.eqr[1], round_array(ev / (STARTING_POT * eq)))
        ev0 = decoded(node.expected_values(0))
        eq0 = decoded(node.equity(0))
        np.testing.assert_allclose(report.eqr[0], round_array(ev0 / ((STARTING_POT + 10) * eq0)))

    def test_chance_node(self, tree):
        report = _results(tree, "X-X")
        assert report.current_player == "chance"
        assert report.num_actions == 0
        assert report.strategy.size == 0
        assert report.per_action_ev.size == 0
        assert report.equity[0].shape == (3,)

    def test_terminal_node(self, tree):
        report = _results(tree, "B10-F")
        assert report.current_player == "terminal"
        assert report.num_actions == 0
        assert report.strategy.size == 0

    def test_strategy_is_in_literal_order(self, tree):
        report = _results(tree, f"X-X|{AH}-X-X|{FIVE_C}")
        state = Replayer(tree).replay(decode_line(f"X-X|{AH}-X-X|{FIVE_C}"))
        rows = decoded(tree.node(state.path).strategy).reshape(2, 3)[:, [1, 2, 0]]
        np.testing.assert_allclose(report.strategy, round_array(rows).ravel())

    def test_blocked_hand_weight_is_zero(self, tree):
        report = _results(tree, f"X-X|{cards('Qh')[0]}")
        assert report.weights[0][2] == 0.0
        assert report.normalized_weights[0][2] == 0.0

    def test_weights_below_floor_are_zero(self, tree):
        report = _results(tree, "X", QueryConfig(weight_floor=0.9))
        assert not report.weights[0].any()
        assert report.emptiness_flags == 1


class TestEmptyRange:
    def test_empty_oop_range(self):
        tree = build_tree(root_strategy=[[1.0, 1.0, 1.0], [0.0, 0.0, 0.0]])
        report = _results(tree, "B10")
        assert report.emptiness_flags == 1
        assert report.current_player == "ip"
        assert report.equity[0].size == 0 and report.equity[1].size == 0
        assert report.eqr[0].size == 0
        assert report.per_action_ev.size == 0
        assert report.strategy.shape == (6,)
        np.testing.assert_array_equal(report.normalized_weights[1], report.weights[1])

    def test_to_dict_is_plain(self):
        tree = build_tree(root_strategy=[[1.0, 1.0, 1.0], [0.0, 0.0, 0.0]])
        data = _results(tree, "B10").to_dict()
        assert data["emptiness_flags"] == 1
        assert data["equity"] == [[], []]
        assert isinstance(data["weights"][1], list)
