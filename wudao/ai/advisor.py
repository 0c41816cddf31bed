"""Move advisor facade.

:class:`MoveAdvisor` is what a presentation layer calls before prompting a
human: it takes the authoritative :class:`~wudao.game_engine.Board`, works
on a private snapshot, and returns a :class:`~wudao.models.Recommendation`
for whoever is on turn. The board passed in is never modified.

    advisor = MoveAdvisor(AIConfig(think_time=500))
    rec = advisor.recommend(board)
    if rec is not None:
        board.apply_action(rec.action)
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from ..game_engine import Board
from ..models import (
    AIConfig,
    CaptureAction,
    GamePhase,
    PlaceAction,
    Player,
    Recommendation,
)
from .heuristic_ai import HeuristicAI
from .monte_carlo_ai import MonteCarloAI

logger = logging.getLogger(__name__)

__all__ = ["MoveAdvisor"]


class MoveAdvisor:
    """Phase-dispatching advisor for both players."""

    def __init__(self, config: Optional[AIConfig] = None):
        self.config = config or AIConfig()
        self._ai_cache: Dict[Player, MonteCarloAI] = {}
        self._cache_lock = threading.Lock()

    def _ai_for(self, player: Player) -> MonteCarloAI:
        with self._cache_lock:
            ai = self._ai_cache.get(player)
            if ai is None:
                ai = MonteCarloAI(player, self.config)
                self._ai_cache[player] = ai
            return ai

    def recommend(self, board: Board) -> Optional[Recommendation]:
        """Recommend an action for the player on turn.

        Returns:
            None when the game is decided or the player has no legal action.
        """
        snapshot = board.clone()
        if snapshot.check_winner() is not None:
            return None
        if snapshot.phase == GamePhase.PLACEMENT:
            return self.advise_placement(snapshot)
        if snapshot.phase == GamePhase.CAPTURE:
            return self.advise_capture(snapshot)
        return self.advise_movement(snapshot)

    def advise_placement(self, board: Board) -> Optional[Recommendation]:
        ai = self._ai_for(board.current_player)
        scored = ai.score_placements(board.clone())
        best = HeuristicAI.argmax(scored)
        if best is None:
            return None
        pos, score = best
        return Recommendation(
            phase=GamePhase.PLACEMENT,
            player=ai.player,
            action=PlaceAction(player=ai.player, pos=pos),
            score=score,
            candidates_evaluated=len(scored),
        )

    def advise_capture(self, board: Board) -> Optional[Recommendation]:
        ai = self._ai_for(board.current_player)
        if board.capture_remaining.get(ai.player, 0) <= 0:
            return None
        scored = ai.score_captures(board.clone())
        best = HeuristicAI.argmax(scored)
        if best is None:
            return None
        pos, score = best
        return Recommendation(
            phase=GamePhase.CAPTURE,
            player=ai.player,
            action=CaptureAction(player=ai.player, pos=pos),
            score=score,
            candidates_evaluated=len(scored),
        )

    def advise_movement(self, board: Board) -> Optional[Recommendation]:
        ai = self._ai_for(board.current_player)
        result = ai.search(board.clone())
        if result.action is None:
            return None
        return Recommendation(
            phase=GamePhase.MOVEMENT,
            player=ai.player,
            action=result.action,
            score=result.score,
            candidates_evaluated=result.candidates,
            rollouts=result.rollouts,
        )
