"""Tests for src/analysis/chance_lookup.py: Plotly chance-report figures.

No display server is required: Plotly figures are in-memory objects and the
save helper writes HTML without rendering.
"""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go
import pytest

from src.analysis.chance_lookup import (
    build_chance_grid,
    build_chance_report_figure,
    save_report_html,
)
from src.query.chance_report import ChanceReport
from src.query.context import QueryContext
from tests.conftest import cards


@pytest.fixture(scope="module")
def report(tree) -> ChanceReport:
    ctx = QueryContext(tree)
    ctx.apply_history(["X", "X"])
    return ctx.get_chance_reports()


def _cell(card: int) -> tuple[int, int]:
    """Grid position of a card: ace row first, suits in c, d, h, s order."""
    return 12 - card // 4, card % 4


class TestBuildChanceGrid:
    def test_shape(self, report):
        assert build_chance_grid(report, "equity", 0).shape == (13, 4)

    def test_values_by_card(self, report):
        grid = build_chance_grid(report, "equity", 1)
        kd = cards('Kd')[0]
        assert grid[_cell(kd)] == report.equity[1, kd]

    def test_board_cards_are_blank(self, report):
        grid = build_chance_grid(report, "combo_count", 0)
        for card in cards('2s', '7s', '9s'):
            assert np.isnan(grid[_cell(card)])

    def test_unknown_metric(self, report):
        with pytest.raises(ValueError):
            build_chance_grid(report, "variance", 0)


class TestBuildChanceReportFigure:
    def test_returns_single_heatmap(self, report):
        fig = build_chance_report_figure(report)
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 1
        assert isinstance(fig.data[0], go.Heatmap)

    def test_title_names_metric_and_player(self, report):
        fig = build_chance_report_figure(report, metric="eqr", player=1)
        assert "EQR" in fig.layout.title.text
        assert "IP" in fig.layout.title.text

    def test_blank_cells_are_none(self, report):
        fig = build_chance_report_figure(report)
        row, col = _cell(cards('2s')[0])
        assert fig.data[0].z[row][col] is None

    def test_hover_text(self, report):
        fig = build_chance_report_figure(report)
        flat = [cell for row in fig.data[0].text for cell in row if cell]
        assert len(flat) == 49
        assert any("Card: <b>Kd</b>" in cell for cell in flat)


class TestSaveReportHtml:
    def test_writes_html(self, report, tmp_path):
        path = tmp_path / "chance.html"
        save_report_html(build_chance_report_figure(report), str(path))
        assert path.exists()
        assert "<html>" in path.read_text(encoding="utf-8").lower()
