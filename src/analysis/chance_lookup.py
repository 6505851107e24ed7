"""Interactive Plotly view of a chance report.

Two public functions:

    build_chance_report_figure(report, metric, player)
        Rank by suit heatmap of one chance-report metric for one player.
    save_report_html(fig, path)
        Export any figure to a self-contained HTML file.

Rows are ranks (A at the top), columns are suits. Cards that cannot be dealt
are blank; hovering a card shows its status, combos and the three averages.
"""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go

from src.engine.cards import RANK_NAMES, SUIT_NAMES, card_to_str
from src.query.chance_report import ChanceReport, ChanceStatus

# ─── Constants ────────────────────────────────────────────────────────────────

METRIC_LABELS: dict[str, str] = {
    "equity": "Equity",
    "expected_value": "EV",
    "eqr": "EQR",
    "combo_count": "Combos",
}

_PLAYER_NAMES: tuple[str, str] = ("OOP", "IP")
_ROW_RANKS: list[int] = list(range(len(RANK_NAMES) - 1, -1, -1))
_ROW_LABELS: list[str] = [RANK_NAMES[r] for r in _ROW_RANKS]
_COL_LABELS: list[str] = list(SUIT_NAMES)


# ─── Data helpers ─────────────────────────────────────────────────────────────


def build_chance_grid(report: ChanceReport, metric: str, player: int) -> np.ndarray:
    """Return a (13, 4) rank by suit matrix of ``metric`` for ``player``.

    Not-possible cards, and EMPTY cards for the averaged metrics, are NaN.
    Infinite EQR values are NaN as well so the colour range stays finite.

    Raises:
        ValueError: If ``metric`` is not a chance-report metric.
    """
    if metric not in METRIC_LABELS:
        raise ValueError(f"Unknown metric {metric!r}; expected one of {sorted(METRIC_LABELS)}")
    values = getattr(report, metric)[player]
    grid = np.full((len(_ROW_RANKS), len(_COL_LABELS)), np.nan)
    for r, rank in enumerate(_ROW_RANKS):
        for suit in range(len(_COL_LABELS)):
            card = rank * 4 + suit
            status = report.status[card]
            if status == ChanceStatus.NOT_POSSIBLE:
                continue
            if status == ChanceStatus.EMPTY and metric != "combo_count":
                continue
            value = values[card]
            if np.isfinite(value):
                grid[r, suit] = value
    return grid


def _build_hover(report: ChanceReport, player: int) -> list[list[str]]:
    """Return a 13×4 list of hover strings (empty string for blank cells)."""
    rows: list[list[str]] = []
    for rank in _ROW_RANKS:
        row: list[str] = []
        for suit in range(len(_COL_LABELS)):
            card = rank * 4 + suit
            info = report.row(card)
            if info.status is ChanceStatus.NOT_POSSIBLE:
                row.append("")
                continue
            lines = [
                f"Card: <b>{card_to_str(card)}</b>",
                f"Status: {info.status.name.lower()}",
                f"Combos: {info.combo_count[player]:.2f}",
            ]
            if info.status is ChanceStatus.NORMAL:
                lines += [
                    f"Equity: {info.equity[player]:.4f}",
                    f"EV: {info.expected_value[player]:.4f}",
                    f"EQR: {info.eqr[player]:.4f}",
                ]
            row.append("<br>".join(lines))
        rows.append(row)
    return rows


# ─── Public figure builder ────────────────────────────────────────────────────


def build_chance_report_figure(
    report: ChanceReport,
    metric: str = "equity",
    player: int = 0,
) -> go.Figure:
    """Build an interactive heatmap of one chance-report metric.

    Args:
        report: ChanceReport from QueryContext.get_chance_reports().
        metric: "equity", "expected_value", "eqr" or "combo_count".
        player: 0 for OOP, 1 for IP.

    Returns:
        go.Figure with a single 13×4 heatmap trace.
    """
    grid = build_chance_grid(report, metric, player)
    z = [[None if np.isnan(v) else v for v in row] for row in grid.tolist()]
    label = METRIC_LABELS[metric]

    fig = go.Figure(
        go.Heatmap(
            z=z,
            x=_COL_LABELS,
            y=_ROW_LABELS,
            colorscale="RdYlGn",
            text=_build_hover(report, player),
            hovertemplate="%{text}<extra></extra>",
            colorbar={"title": label},
            name=label,
        )
    )
    fig.update_layout(
        title_text=f"Next card: {label} ({_PLAYER_NAMES[player]})",
        title_font_size=15,
        height=560,
        width=420,
    )
    fig.update_yaxes(title_text="Rank", autorange="reversed")
    fig.update_xaxes(title_text="Suit")
    return fig


# ─── HTML export ──────────────────────────────────────────────────────────────


def save_report_html(fig: go.Figure, path: str) -> None:
    """Save a Plotly figure to a self-contained HTML file.

    Plotly JS is loaded from the CDN so the file itself remains compact.
    """
    fig.write_html(path, include_plotlyjs="cdn")
