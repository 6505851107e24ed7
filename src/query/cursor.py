"""Mutable cursor over a solved tree.

The cursor holds one immutable ReplayState. Every move re-derives the state
by replaying the full literal history from the root, so the cursor can always
be put back exactly where it was by replaying a saved history.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from src.engine.actions import Action
from src.query.replay import Replayer, ReplayState


class Cursor:
    """Current position in the tree, with its derived weights and swaps."""

    def __init__(self, replayer: Replayer) -> None:
        self._replayer = replayer
        self.state: ReplayState = replayer.replay(())

    @property
    def history(self) -> tuple[Action, ...]:
        return self.state.history

    def apply_history(self, history: list[Action] | tuple[Action, ...]) -> ReplayState:
        """Move to the node reached by ``history`` from the root.

        On failure the cursor is left where it was.
        """
        self.state = self._replayer.replay(history)
        return self.state

    def play(self, action: Action) -> ReplayState:
        return self.apply_history(self.state.history + (action,))

    def back_to_root(self) -> ReplayState:
        return self.apply_history(())

    @contextmanager
    def temporary(self) -> Iterator[Cursor]:
        """Allow free movement inside the block; restore the cursor on exit.

        Restoration replays the saved history from the root and runs on every
        exit path, including exceptions.
        """
        saved = self.state.history
        try:
            yield self
        finally:
            self.apply_history(saved)
