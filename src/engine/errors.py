"""
Error types raised by the query layer.

All errors derive from ``QueryError`` (itself a ``ValueError``) and are raised
synchronously to the caller of the operation that discovered them. None are
retried internally.

    ActionNotFound          a history step matches no action at its node
    CardNotReachable        a chance card has neither an exact nor an
                            isomorphic branch
    InvalidBoardLength      a board that is not 3, 4 or 5 cards
    MalformedActionToken    a textual action token that cannot be decoded
"""

from __future__ import annotations


class QueryError(ValueError):
    """Base class for every error surfaced by the query layer."""


class ActionNotFound(QueryError):
    """A history step does not match any action at the current node.

    Usually means the history was recorded against a different tree shape
    (for example after the action tree was rebuilt).
    """

    def __init__(self, action: object, path: tuple[int, ...]) -> None:
        super().__init__(f"Action {action} not found at node {list(path)}")
        self.action = action
        self.path = path


class CardNotReachable(QueryError):
    """A chance card is blocked or absent even after isomorphism resolution."""

    def __init__(self, card: int, path: tuple[int, ...]) -> None:
        super().__init__(f"Card {card} is not reachable at node {list(path)}")
        self.card = card
        self.path = path


class InvalidBoardLength(QueryError):
    """The board does not have 3 (flop), 4 (turn) or 5 (river) cards."""

    def __init__(self, length: int) -> None:
        super().__init__(f"Invalid board length: {length}")
        self.length = length


class MalformedActionToken(QueryError):
    """A textual action token could not be decoded."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Malformed action token: {token!r}")
        self.token = token
