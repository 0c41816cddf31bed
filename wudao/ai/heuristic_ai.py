"""
Heuristic AI implementation for Wudao.

This advisor scores a flat set of legal actions with per-phase heuristics
and picks the best candidate:

- Placement: ``base + reward_potential * W_REWARD + positional weight
  - opponent_threat * W_THREAT`` for every empty cell. Reward potential
  counts untriggered squares through the cell in which the player already
  holds at least two of the other three corners and the opponent holds
  none. Opponent threat counts untriggered opposing patterns that are one
  stone short of completion and do *not* pass through the cell (placing
  there leaves them intact).
- Capture: ``base + center bonus + potential-reward-piece bonus`` for
  every unprotected opponent stone; stones on the middle row or column
  take part in the most patterns.
- Movement: greedy one-ply lookahead with :meth:`evaluate_position`.
  :class:`~wudao.ai.monte_carlo_ai.MonteCarloAI` replaces this with
  rollouts.

Ties always keep the earliest candidate in row-major scan order.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..board_manager import BoardManager
from ..errors import ImmobilizationVictory
from ..game_engine import Board
from ..models import (
    AIConfig,
    BOARD_SIZE,
    CaptureAction,
    Coord,
    GamePhase,
    MoveAction,
    PatternFamily,
    PlaceAction,
    Player,
    PlayerAction,
)
from .base import BaseAI
from .heuristic_weights import (
    HEURISTIC_WEIGHT_PROFILES,
    POSITION_WEIGHTS,
    REWARD_POTENTIAL_CAP,
)

logger = logging.getLogger(__name__)

_CENTER = BOARD_SIZE // 2


class HeuristicAI(BaseAI):
    """Heuristic AI that scores and selects actions phase by phase."""

    # Evaluation weights (overridden by the configured profile)
    WEIGHT_PLACEMENT_BASE = 10.0
    WEIGHT_REWARD_POTENTIAL = 50.0
    WEIGHT_POSITIONAL = 1.0
    WEIGHT_OPPONENT_THREAT = 20.0
    WEIGHT_CAPTURE_BASE = 10.0
    WEIGHT_CAPTURE_CENTER = 5.0
    WEIGHT_POTENTIAL_REWARD_PIECE = 15.0
    WEIGHT_PIECE_COUNT = 10.0
    WEIGHT_PATTERN_COUNT = 50.0
    WEIGHT_PROTECTED_PIECES = 5.0
    WEIGHT_POSITIONAL_CONTROL = 1.0
    WEIGHT_DECISIVE_RESULT = 100.0

    def __init__(self, player: Player, config: AIConfig, rng=None) -> None:
        super().__init__(player, config, rng=rng)
        self._apply_weight_profile()

    def _apply_weight_profile(self) -> None:
        """Override class-level weights from ``config.heuristic_profile_id``.

        Unknown profile ids keep the built-in defaults.
        """
        profile_id = self.config.heuristic_profile_id
        if not profile_id:
            return
        weights = HEURISTIC_WEIGHT_PROFILES.get(profile_id)
        if weights is None:
            logger.warning(
                "Unknown heuristic profile %r; using built-in weights", profile_id
            )
            return
        for name, value in weights.items():
            setattr(self, name, value)

    # ------------------------------------------------------------------
    # Move selection
    # ------------------------------------------------------------------

    def select_move(self, board: Board) -> Optional[PlayerAction]:
        if board.current_player != self.player or board.check_winner() is not None:
            return None
        if board.phase == GamePhase.PLACEMENT:
            best = self.argmax(self.score_placements(board))
            if best is None:
                return None
            return PlaceAction(player=self.player, pos=best[0])
        if board.phase == GamePhase.CAPTURE:
            best = self.argmax(self.score_captures(board))
            if best is None:
                return None
            return CaptureAction(player=self.player, pos=best[0])
        best = self.argmax(self.score_moves(board))
        if best is None:
            return None
        src, dst = best[0]
        return MoveAction(player=self.player, from_pos=src, to=dst)

    @staticmethod
    def argmax(scored: List[Tuple[object, float]]) -> Optional[Tuple[object, float]]:
        """First strict maximum, so ties favour the earliest candidate."""
        best: Optional[Tuple[object, float]] = None
        for candidate, score in scored:
            if best is None or score > best[1]:
                best = (candidate, score)
        return best

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def score_placements(self, board: Board) -> List[Tuple[Coord, float]]:
        """Score every empty cell in row-major order."""
        opponent = self.player.opponent()
        threats = self._opponent_threats(board, opponent)
        scores: List[Tuple[Coord, float]] = []
        for row, col in board.legal_placements():
            intact = sum(1 for cells in threats if (row, col) not in cells)
            score = (
                self.WEIGHT_PLACEMENT_BASE
                + self.WEIGHT_REWARD_POTENTIAL * self._reward_potential(board, row, col)
                + self.WEIGHT_POSITIONAL * float(POSITION_WEIGHTS[row, col])
                - self.WEIGHT_OPPONENT_THREAT * intact
            )
            scores.append(((row, col), score))
        return scores

    def _reward_potential(self, board: Board, row: int, col: int) -> int:
        opponent = self.player.opponent()
        potential = 0
        for pattern in BoardManager.patterns_touching(row, col):
            if pattern.family is not PatternFamily.SQUARE or pattern in board.triggered:
                continue
            others = [
                board.grid[r][c]
                for r, c in BoardManager.pattern_cells(pattern)
                if (r, c) != (row, col)
            ]
            if opponent in others:
                continue
            if others.count(self.player) >= 2:
                potential += 1
        return min(potential, REWARD_POTENTIAL_CAP)

    @staticmethod
    def _opponent_threats(board: Board, opponent: Player) -> List[frozenset]:
        """Untriggered patterns the opponent is one stone away from."""
        threats = []
        for pattern in BoardManager.all_patterns():
            if pattern in board.triggered:
                continue
            cells = BoardManager.pattern_cells(pattern)
            contents = [board.grid[r][c] for r, c in cells]
            if contents.count(opponent) == len(cells) - 1 and contents.count(None) == 1:
                threats.append(frozenset(cells))
        return threats

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------

    def score_captures(self, board: Board) -> List[Tuple[Coord, float]]:
        """Score every capturable opponent stone in row-major order."""
        scores: List[Tuple[Coord, float]] = []
        for row, col in board.capture_targets(self.player):
            distance = max(abs(row - _CENTER), abs(col - _CENTER))
            score = self.WEIGHT_CAPTURE_BASE + self.WEIGHT_CAPTURE_CENTER * (_CENTER - distance)
            if row == _CENTER or col == _CENTER:
                score += self.WEIGHT_POTENTIAL_REWARD_PIECE
            scores.append(((row, col), score))
        return scores

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def score_moves(self, board: Board) -> List[Tuple[Tuple[Coord, Coord], float]]:
        """One-ply lookahead: evaluate the board after each legal move."""
        scores = []
        for src, dst in board.legal_moves(self.player):
            sim = board.clone()
            try:
                sim.move(src, dst)
            except ImmobilizationVictory:
                pass  # sim.winner is set; evaluate_position scores it
            scores.append(((src, dst), self.evaluate_position(sim)))
        return scores

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate_position(self, board: Board) -> float:
        """
        Static evaluation from this advisor's player's perspective.

        A decided game scores +/- WEIGHT_DECISIVE_RESULT; otherwise the sum
        of the weighted components from :meth:`get_evaluation_breakdown`.
        """
        winner = board.check_winner()
        if winner is not None:
            if winner == self.player:
                return self.WEIGHT_DECISIVE_RESULT
            return -self.WEIGHT_DECISIVE_RESULT
        return sum(self._compute_component_scores(board).values())

    def get_evaluation_breakdown(self, board: Board) -> Dict[str, float]:
        components = self._compute_component_scores(board)
        components["total"] = self.evaluate_position(board)
        return components

    def _compute_component_scores(self, board: Board) -> Dict[str, float]:
        me = self.player
        opponent = me.opponent()
        mine, theirs = self._ownership_masks(board)

        piece_diff = float(mine.sum() - theirs.sum())

        my_patterns = len(BoardManager.owned_patterns(board.grid, board.triggered, me))
        their_patterns = len(BoardManager.owned_patterns(board.grid, board.triggered, opponent))

        protected_diff = len(board.reward_pieces.get(me, ())) - len(
            board.reward_pieces.get(opponent, ())
        )

        control = float((POSITION_WEIGHTS * (mine - theirs)).sum())

        return {
            "piece_count": self.WEIGHT_PIECE_COUNT * piece_diff,
            "pattern_count": self.WEIGHT_PATTERN_COUNT * (my_patterns - their_patterns),
            "protected_pieces": self.WEIGHT_PROTECTED_PIECES * protected_diff,
            "positional_control": self.WEIGHT_POSITIONAL_CONTROL * control,
        }

    def _ownership_masks(self, board: Board) -> Tuple[np.ndarray, np.ndarray]:
        me = self.player
        opponent = me.opponent()
        mine = np.array(
            [[cell == me for cell in line] for line in board.grid], dtype=np.float64
        )
        theirs = np.array(
            [[cell == opponent for cell in line] for line in board.grid], dtype=np.float64
        )
        return mine, theirs
