"""Random AI implementation for Wudao.

This agent selects uniformly random legal actions using the per-instance
RNG on the :class:`BaseAI`. It serves as the playout policy of the
Monte-Carlo search and as a baseline opponent in tests.
"""

from __future__ import annotations

from ..game_engine import Board
from ..models import PlayerAction
from .base import BaseAI


class RandomAI(BaseAI):
    """AI that selects random valid actions in any phase."""

    def select_move(self, board: Board) -> PlayerAction | None:
        """Select a uniformly random legal action for ``board``.

        Returns:
            A random action, or ``None`` if this player has nothing to do.
        """
        valid_moves = self.get_valid_moves(board)
        if not valid_moves:
            return None

        selected = self.get_random_element(valid_moves)
        self.move_count += 1
        return selected

    def evaluate_position(self, board: Board) -> float:
        """Return a small random evaluation.

        RandomAI does not attempt to evaluate positions meaningfully.
        """
        _ = board  # unused in this implementation
        return self.rng.uniform(-0.1, 0.1)
