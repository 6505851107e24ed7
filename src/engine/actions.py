"""
Actions and their compact textual encoding.

An action is one of Fold, Check, Call, Bet(amount), Raise(amount),
AllIn(amount) or Chance(card). Histories cross the reporting boundary as
compact tokens:

    F       fold
    X       check
    C       call
    B<n>    bet n chips
    R<n>    raise to n chips
    A<n>    all-in for n chips
    <card>  chance card as its decimal integer (0–51)

A whole line is joined with '-' between actions and '|' where a street closes
(after a call, or after the second of two consecutive checks). The empty line
is written '(Root)'.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .cards import NUM_CARDS
from .errors import MalformedActionToken


class ActionKind(Enum):
    FOLD = 'F'
    CHECK = 'X'
    CALL = 'C'
    BET = 'B'
    RAISE = 'R'
    ALLIN = 'A'
    CHANCE = '#'


_SIZED_KINDS: frozenset[ActionKind] = frozenset(
    {ActionKind.BET, ActionKind.RAISE, ActionKind.ALLIN}
)

_LABELS: dict[ActionKind, str] = {
    ActionKind.FOLD: 'Fold',
    ActionKind.CHECK: 'Check',
    ActionKind.CALL: 'Call',
    ActionKind.BET: 'Bet',
    ActionKind.RAISE: 'Raise',
    ActionKind.ALLIN: 'Allin',
}

_LINE_DELIMITER = re.compile(r'[-|]')
ROOT_LINE: str = '(Root)'


@dataclass(frozen=True)
class Action:
    """A single edge of the game tree.

    Frozen (hashable) so actions compare exactly and can key dicts.

    Attributes:
        kind:   Which variant this is.
        amount: Chips for BET / RAISE / ALLIN, 0 otherwise.
        card:   Dealt card (0–51) for CHANCE, -1 otherwise.
    """
    kind: ActionKind
    amount: int = 0
    card: int = -1

    @classmethod
    def fold(cls) -> Action:
        return cls(ActionKind.FOLD)

    @classmethod
    def check(cls) -> Action:
        return cls(ActionKind.CHECK)

    @classmethod
    def call(cls) -> Action:
        return cls(ActionKind.CALL)

    @classmethod
    def bet(cls, amount: int) -> Action:
        return cls(ActionKind.BET, amount=amount)

    @classmethod
    def raise_to(cls, amount: int) -> Action:
        return cls(ActionKind.RAISE, amount=amount)

    @classmethod
    def allin(cls, amount: int) -> Action:
        return cls(ActionKind.ALLIN, amount=amount)

    @classmethod
    def chance(cls, card: int) -> Action:
        return cls(ActionKind.CHANCE, card=card)

    @property
    def is_chance(self) -> bool:
        return self.kind is ActionKind.CHANCE

    def __str__(self) -> str:
        return encode_action(self)


def encode_action(action: Action) -> str:
    """Encode one action as its compact token.

    Examples:
        >>> encode_action(Action.bet(120))
        'B120'
        >>> encode_action(Action.chance(37))
        '37'
    """
    if action.kind is ActionKind.CHANCE:
        return str(action.card)
    if action.kind in _SIZED_KINDS:
        return f"{action.kind.value}{action.amount}"
    return action.kind.value


def decode_action(token: str) -> Action:
    """Decode one compact token into an Action.

    Raises:
        MalformedActionToken: If the token is empty, has an unknown prefix,
            a non-integer amount, or a card outside 0–51.

    Examples:
        >>> decode_action('X')
        Action(kind=<ActionKind.CHECK: 'X'>, amount=0, card=-1)
        >>> decode_action('R300').amount
        300
        >>> decode_action('51').card
        51
    """
    if token in ('F', 'X', 'C'):
        return Action(ActionKind(token))
    if token.isdigit():
        card = int(token)
        if card >= NUM_CARDS:
            raise MalformedActionToken(token)
        return Action.chance(card)
    if len(token) < 2 or not token[1:].isdigit():
        raise MalformedActionToken(token)
    kind = {'B': ActionKind.BET, 'R': ActionKind.RAISE, 'A': ActionKind.ALLIN}.get(token[0])
    if kind is None:
        raise MalformedActionToken(token)
    return Action(kind, amount=int(token[1:]))


def as_action(item: Action | str) -> Action:
    """Accept either an Action or its token and return the Action."""
    if isinstance(item, Action):
        return item
    return decode_action(item)


def action_label(action: Action) -> str:
    """Return the 'Kind:amount' label used in action listings.

    Examples:
        >>> action_label(Action.check())
        'Check:0'
        >>> action_label(Action.allin(900))
        'Allin:900'
    """
    if action.kind is ActionKind.CHANCE:
        return f"Chance:{action.card}"
    return f"{_LABELS[action.kind]}:{action.amount}"


def encode_line(line: list[Action] | tuple[Action, ...]) -> str:
    """Encode a sequence of actions as a single delimited string.

    Examples:
        >>> encode_line([Action.check(), Action.check(), Action.bet(10), Action.call()])
        'X-X|B10-C'
        >>> encode_line([])
        '(Root)'
    """
    if not line:
        return ROOT_LINE

    parts: list[str] = []
    flag = 0  # 1 after one check, 2 once the street has closed
    for action in line:
        if parts:
            parts.append('|' if flag == 2 else '-')
            if flag == 2:
                flag = 0
        if action.kind is ActionKind.CHECK:
            flag += 1
        elif action.kind is ActionKind.CALL:
            flag = 2
        else:
            flag = 0
        parts.append(encode_action(action))
    return ''.join(parts)


def decode_line(line: str) -> list[Action]:
    """Decode a delimited line back into actions.

    Raises:
        MalformedActionToken: If any token cannot be decoded.

    Examples:
        >>> [encode_action(a) for a in decode_line('X-B10|C')]
        ['X', 'B10', 'C']
        >>> decode_line('(Root)')
        []
    """
    line = line.strip()
    if line in ('', ROOT_LINE):
        return []
    return [decode_action(token) for token in _LINE_DELIMITER.split(line)]
