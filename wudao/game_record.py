"""Game record replay and serialisation.

A game record is the ordered list of :data:`~wudao.models.GameAction`
entries appended by :class:`~wudao.game_engine.Board`. It is stored as JSON
Lines: one object per action, tagged by its ``type`` field::

    {"type":"place","player":"black","pos":[0,0]}
    {"type":"reward","player":"black","pattern":{"family":"square","key":[0,0]}}
    {"type":"move","player":"white","from":[2,2],"to":[2,3]}

Writing the text to disk (or anywhere else) is left to the caller.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from .errors import ImmobilizationVictory, RecordFormatError, ReplayError, RulesViolationError
from .game_engine import Board
from .models import GameAction, RewardAction

logger = logging.getLogger(__name__)

__all__ = [
    "GameReplayer",
    "parse_game_record",
    "serialize_game_record",
]

_ACTION_ADAPTER: TypeAdapter = TypeAdapter(GameAction)


def serialize_game_record(actions: Iterable[GameAction]) -> str:
    """Render ``actions`` as JSON Lines (trailing newline included)."""
    lines = [
        _ACTION_ADAPTER.dump_json(action, by_alias=True).decode("utf-8")
        for action in actions
    ]
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def parse_game_record(text: str) -> List[GameAction]:
    """Parse JSON Lines produced by :func:`serialize_game_record`.

    Blank lines are ignored.

    Raises:
        RecordFormatError: a line is not a valid action.
    """
    actions: List[GameAction] = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            actions.append(_ACTION_ADAPTER.validate_json(line))
        except ValidationError as e:
            raise RecordFormatError(
                "Invalid game record entry",
                context={"line": line_no, "error": e.errors()[0].get("msg", str(e))},
            ) from e
    return actions


class GameReplayer:
    """Re-derive board states by replaying a record through the commands.

    Reward entries are implied side effects of the place/move before them
    and are skipped.
    """

    def __init__(self, actions: Sequence[GameAction]):
        self.actions: List[GameAction] = list(actions)
        self.current_step = 0
        self.board = Board()

    @property
    def current_board(self) -> Board:
        return self.board

    @property
    def is_finished(self) -> bool:
        return self.current_step >= len(self.actions)

    def reset(self) -> None:
        self.current_step = 0
        self.board = Board()

    def step_forward(self) -> Optional[Board]:
        """Apply the next recorded action.

        Returns:
            The board after the step, or None once the record is exhausted.

        Raises:
            ReplayError: the recorded action is illegal in the replayed state.
        """
        if self.is_finished:
            return None

        step = self.current_step
        action = self.actions[step]
        self.current_step += 1
        if isinstance(action, RewardAction):
            return self.board

        try:
            self.board.apply_action(action)
        except ImmobilizationVictory as win:
            logger.debug("Replay step %d decided the game: %s", step, win.message)
        except RulesViolationError as e:
            raise ReplayError(
                f"Recorded action cannot be replayed: {e.message}",
                step=step,
                context={"code": e.code},
            ) from e
        return self.board

    def replay_all(self) -> Board:
        """Apply every remaining action and return the final board."""
        while self.step_forward() is not None:
            pass
        return self.board
