"""Text reports for query results.

Two public functions format query output into human-readable tables:

    print_results(report, private_cards)   per-hand weights, equity, EV, EQR
                                           and the acting player's strategy
    print_chance_report(report)            one row per possible next card
"""

from __future__ import annotations

import numpy as np

from src.engine.cards import card_to_str, hand_to_str
from src.query.chance_report import ChanceReport, ChanceStatus
from src.query.results import ResultsReport

_PLAYER_NAMES: tuple[str, str] = ("OOP", "IP")
_STATUS_LABELS: dict[ChanceStatus, str] = {
    ChanceStatus.EMPTY: "empty",
    ChanceStatus.NORMAL: "normal",
}


def _fmt(value: float, width: int) -> str:
    if np.isnan(value):
        return f"{'n/a':>{width}}"
    if np.isinf(value):
        return f"{'+inf' if value > 0 else '-inf':>{width}}"
    return f"{value:>{width}.4f}"


# ─── Results ──────────────────────────────────────────────────────────────────


def print_results(
    report: ResultsReport,
    private_cards: tuple[list[tuple[int, int]], list[tuple[int, int]]],
) -> None:
    """Print the per-hand table for both players, then the actor's strategy.

    Equity, EV and EQR columns are blank while either range is empty.

    Args:
        report:        ResultsReport from QueryContext.get_results().
        private_cards: Per-player hands, aligned with the report's arrays.
    """
    print("=" * 56)
    print(f"Node Results  (to act: {report.current_player})")
    print("=" * 56)
    print(f"  Pot base:        OOP {report.pot_base_per_player[0]}  IP {report.pot_base_per_player[1]}")
    print(f"  Empty ranges:    {report.emptiness_flags}")
    print()

    has_values = report.emptiness_flags == 0
    for player, name in enumerate(_PLAYER_NAMES):
        print(f"  {name} range")
        print(f"  {'Hand':>6}  {'Weight':>9}  {'Norm':>9}  {'Equity':>9}  {'EV':>9}  {'EQR':>9}")
        print(f"  {'------':>6}  {'-' * 9:>9}  {'-' * 9:>9}  {'-' * 9:>9}  {'-' * 9:>9}  {'-' * 9:>9}")
        for i, hand in enumerate(private_cards[player]):
            weight = report.weights[player][i]
            if weight == 0.0:
                continue
            line = (
                f"  {hand_to_str(hand):>6}  {weight:>9.4f}  "
                f"{report.normalized_weights[player][i]:>9.4f}"
            )
            if has_values:
                line += (
                    f"  {_fmt(report.equity[player][i], 9)}"
                    f"  {_fmt(report.expected_value[player][i], 9)}"
                    f"  {_fmt(report.eqr[player][i], 9)}"
                )
            print(line)
        print()

    if report.strategy.size:
        actor = 0 if report.current_player == "oop" else 1
        table = report.strategy.reshape(report.num_actions, -1)
        print(f"  Strategy ({_PLAYER_NAMES[actor]}), frequency per action")
        for i, hand in enumerate(private_cards[actor]):
            if report.weights[actor][i] == 0.0:
                continue
            freqs = "  ".join(f"{p:>6.3f}" for p in table[:, i])
            print(f"  {hand_to_str(hand):>6}  {freqs}")
        print()


# ─── Chance report ────────────────────────────────────────────────────────────


def print_chance_report(report: ChanceReport, player: int = 0) -> None:
    """Print one row per possible next card for ``player``.

    Not-possible cards are omitted. The strategy columns list the acting
    player's aggregate frequency for each summarised action.

    Args:
        report: ChanceReport from QueryContext.get_chance_reports().
        player: 0 for OOP, 1 for IP.
    """
    print("=" * 56)
    print(f"Chance Report  ({_PLAYER_NAMES[player]})")
    print("=" * 56)
    header = (
        f"  {'Card':>4}  {'Status':>6}  {'Combos':>8}  "
        f"{'Equity':>8}  {'EV':>9}  {'EQR':>8}"
    )
    header += "".join(f"  {'A' + str(a):>6}" for a in range(report.num_actions))
    print(header)

    rows = [row for row in report.rows() if row.status is not ChanceStatus.NOT_POSSIBLE]
    if not rows:
        print("  (no possible cards)")
    for row in rows:
        line = (
            f"  {card_to_str(row.card):>4}  {_STATUS_LABELS[row.status]:>6}  "
            f"{row.combo_count[player]:>8.2f}"
        )
        if row.status is ChanceStatus.NORMAL:
            line += (
                f"  {_fmt(row.equity[player], 8)}"
                f"  {_fmt(row.expected_value[player], 9)}"
                f"  {_fmt(row.eqr[player], 8)}"
            )
        else:
            line += f"  {'':>8}  {'':>9}  {'':>8}"
        line += "".join(f"  {p:>6.3f}" for p in row.strategy)
        print(line)
    print()
