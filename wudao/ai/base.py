"""
Base AI class for the Wudao move advisor
Abstract base class that all advisor implementations inherit from
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import random

from ..game_engine import Board
from ..models import AIConfig, Player, PlayerAction


class BaseAI(ABC):
    """Abstract base class for all advisor implementations.

    Implementations only ever read the board they are given. Anything that
    needs to look ahead works on :meth:`Board.clone` copies.
    """

    def __init__(
        self,
        player: Player,
        config: AIConfig,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize advisor

        Args:
            player: The player this advisor recommends moves for
            config: AI configuration settings
            rng: Optional RNG to share (rollout workers hand theirs to the
                playout policies). Defaults to one seeded from
                ``config.rng_seed``, or unseeded when that is None.
        """
        self.player = player
        self.config = config
        self.move_count = 0
        if rng is not None:
            self.rng = rng
        else:
            self.rng = random.Random(config.rng_seed)

    @abstractmethod
    def select_move(self, board: Board) -> Optional[PlayerAction]:
        """
        Select the best action for the current board

        Args:
            board: Current board (not modified)

        Returns:
            Selected action or None if there is nothing to do
        """
        pass

    @abstractmethod
    def evaluate_position(self, board: Board) -> float:
        """
        Evaluate the board from this advisor's perspective

        Args:
            board: Current board

        Returns:
            Evaluation score (positive = good for this player)
        """
        pass

    def get_evaluation_breakdown(self, board: Board) -> Dict[str, float]:
        """
        Get detailed breakdown of position evaluation

        Args:
            board: Current board

        Returns:
            Dictionary with evaluation components
        """
        return {"total": self.evaluate_position(board)}

    def get_valid_moves(self, board: Board) -> List[PlayerAction]:
        """
        Legal actions for this advisor's player; empty when it is not this
        player's turn or the game is decided.
        """
        if board.current_player != self.player:
            return []
        return board.get_valid_actions()

    def get_random_element(self, items: List[Any]) -> Optional[Any]:
        """Random item from ``items`` using the per-instance RNG."""
        if not items:
            return None
        return self.rng.choice(items)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(player={self.player.value})"
