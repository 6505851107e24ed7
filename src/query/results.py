"""Results for the node under the cursor.

``build_results`` assembles everything a viewer shows for one node: both
players' weights and normalized weights, equity, EV and EQR per hand, and the
acting player's strategy and per-action EVs. Every float crosses this
boundary already rounded to display precision.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from src.query.config import QueryConfig
from src.query.decoder import ResultDecoder, equity_to_reward, round_array
from src.query.replay import ReplayState
from src.query.weights import emptiness_flag, is_empty, normalized_weights, truncate_weights
from src.solvers.solved_tree import SolvedTree, TreeNode

_EMPTY: np.ndarray = np.zeros(0)


@dataclass
class ResultsReport:
    """Display results for one node.

    Attributes:
        current_player:      "oop", "ip", "chance" or "terminal".
        num_actions:         Actions at a player node, 0 otherwise.
        emptiness_flags:     Bit 0 set if OOP has no live hand, bit 1 for IP.
        pot_base_per_player: Pot used as EQR denominator for each player.
        weights:             Truncated, rounded absolute weights per player.
        normalized_weights:  Opponent-consistent weights per player.
        equity:              Per-hand equity per player (empty if any range
                             is empty).
        expected_value:      Per-hand EV per player (same condition).
        eqr:                 Per-hand equity-to-reward per player.
        strategy:            Flattened (num_actions, num_hands[actor]) table.
        per_action_ev:       Flattened (num_actions, num_hands[actor]) EVs.
    """
    current_player: str
    num_actions: int
    emptiness_flags: int
    pot_base_per_player: tuple[int, int]
    weights: tuple[np.ndarray, np.ndarray]
    normalized_weights: tuple[np.ndarray, np.ndarray]
    equity: tuple[np.ndarray, np.ndarray]
    expected_value: tuple[np.ndarray, np.ndarray]
    eqr: tuple[np.ndarray, np.ndarray]
    strategy: np.ndarray
    per_action_ev: np.ndarray

    def to_dict(self) -> dict:
        """Plain-Python form (lists and ints) for serialization."""
        return {
            "current_player": self.current_player,
            "num_actions": self.num_actions,
            "emptiness_flags": self.emptiness_flags,
            "pot_base_per_player": list(self.pot_base_per_player),
            "weights": [w.tolist() for w in self.weights],
            "normalized_weights": [w.tolist() for w in self.normalized_weights],
            "equity": [e.tolist() for e in self.equity],
            "expected_value": [e.tolist() for e in self.expected_value],
            "eqr": [e.tolist() for e in self.eqr],
            "strategy": self.strategy.tolist(),
            "per_action_ev": self.per_action_ev.tolist(),
        }


def player_label(node: TreeNode) -> str:
    if node.is_terminal:
        return "terminal"
    if node.is_chance:
        return "chance"
    return "oop" if node.player == 0 else "ip"


def is_player_node(node: TreeNode) -> bool:
    return not node.is_terminal and not node.is_chance


def pot_bases(tree: SolvedTree, node: TreeNode) -> tuple[int, int]:
    """EQR pot per player: common pot plus that player's own commitment."""
    bets = node.total_bet_amount
    pot_base = tree.starting_pot + min(bets)
    return pot_base + bets[0], pot_base + bets[1]


def build_results(
    tree: SolvedTree,
    state: ReplayState,
    decoder: ResultDecoder,
    config: QueryConfig,
) -> ResultsReport:
    """Assemble the ResultsReport for the node at ``state``."""
    node = tree.node(state.path)
    eqr_base = pot_bases(tree, node)

    weights = tuple(
        round_array(truncate_weights(w, config.weight_floor)) for w in state.weights
    )
    flag = emptiness_flag(is_empty(weights[0]), is_empty(weights[1]))

    equity: tuple[np.ndarray, np.ndarray] = (_EMPTY, _EMPTY)
    ev: tuple[np.ndarray, np.ndarray] = (_EMPTY, _EMPTY)
    eqr: tuple[np.ndarray, np.ndarray] = (_EMPTY, _EMPTY)

    if flag:
        normalizer = (weights[0].copy(), weights[1].copy())
    else:
        private_cards = (tree.private_hand_cards(0), tree.private_hand_cards(1))
        raw_norm = normalized_weights(state.weights, private_cards, state.board)
        normalizer = (round_array(raw_norm[0]), round_array(raw_norm[1]))

        equity_raw = [decoder.equity(state, p) for p in range(2)]
        ev_raw = [decoder.expected_values(state, p) for p in range(2)]
        equity = (round_array(equity_raw[0]), round_array(equity_raw[1]))
        ev = (round_array(ev_raw[0]), round_array(ev_raw[1]))
        eqr = tuple(
            equity_to_reward(ev_raw[p], equity_raw[p], eqr_base[p], config.eqr_min_equity)
            for p in range(2)
        )

    strategy = _EMPTY
    per_action_ev = _EMPTY
    if is_player_node(node):
        strategy = round_array(decoder.strategy(state)).ravel()
        if flag == 0:
            per_action_ev = round_array(decoder.action_values(state)).ravel()

    return ResultsReport(
        current_player=player_label(node),
        num_actions=0 if node.is_chance else len(node.actions),
        emptiness_flags=flag,
        pot_base_per_player=eqr_base,
        weights=weights,
        normalized_weights=normalizer,
        equity=equity,
        expected_value=ev,
        eqr=eqr,
        strategy=strategy,
        per_action_ev=per_action_ev,
    )
