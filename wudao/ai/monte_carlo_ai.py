"""
Parallel Monte-Carlo rollout search for the Wudao movement phase.

Every legal (from, to) move gets one worker thread. Until the shared
wall-clock deadline passes, a worker repeatedly clones its private copy of
the board, applies its candidate move and plays a bounded random self-play
rollout (any phase: placement, capture or movement), stopping early once
the game is decided. A rollout scores +/- WEIGHT_DECISIVE_RESULT for a
decided game and the static evaluation of :class:`HeuristicAI` otherwise.

Each worker keeps a running mean and reports it exactly once to a shared,
lock-guarded best-result register. Ties keep whichever worker reported
first, so equal-scoring moves can be chosen differently from run to run.

Configuration:

- ``AIConfig.think_time`` (ms) or ``WUDAO_MC_THINK_TIME_MS`` (default 1000)
- ``AIConfig.rollout_depth`` or ``WUDAO_MC_ROLLOUT_DEPTH`` (default 20)
- ``AIConfig.max_workers``: cap on the thread pool (default: one thread
  per candidate move)
"""

from __future__ import annotations

import logging
import os
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..errors import ImmobilizationVictory
from ..game_engine import Board
from ..models import AIConfig, GamePhase, MoveAction, Player, PlayerAction
from .heuristic_ai import HeuristicAI
from .random_ai import RandomAI

logger = logging.getLogger(__name__)

DEFAULT_THINK_TIME_MS = int(os.getenv("WUDAO_MC_THINK_TIME_MS", "1000"))
DEFAULT_ROLLOUT_DEPTH = int(os.getenv("WUDAO_MC_ROLLOUT_DEPTH", "20"))


@dataclass
class SearchResult:
    """Outcome of one Monte-Carlo search."""
    action: Optional[MoveAction]
    score: float
    rollouts: int
    candidates: int


class _BestResult:
    """Shared best-move register, updated once per worker."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.action: Optional[MoveAction] = None
        self.score = float("-inf")
        self.rollouts = 0

    def offer(self, action: MoveAction, score: float, rollouts: int) -> None:
        with self._lock:
            self.rollouts += rollouts
            if self.action is None or score > self.score:
                self.action = action
                self.score = score


class MonteCarloAI(HeuristicAI):
    """Heuristic advisor with parallel Monte-Carlo search for Movement.

    Placement and capture advice are inherited from :class:`HeuristicAI`.
    """

    def __init__(self, player: Player, config: AIConfig, rng=None) -> None:
        super().__init__(player, config, rng=rng)
        self.time_budget, self.rollout_depth = rollout_budget(config)
        self.max_workers: Optional[int] = config.max_workers

    def select_move(self, board: Board) -> Optional[PlayerAction]:
        if board.phase != GamePhase.MOVEMENT:
            return super().select_move(board)
        return self.search(board).action

    def search(self, board: Board) -> SearchResult:
        """Run the rollout search over every legal move of this player.

        ``board`` itself is never touched: each worker receives its own
        clone before the pool starts.
        """
        if (
            board.phase != GamePhase.MOVEMENT
            or board.current_player != self.player
            or board.check_winner() is not None
        ):
            return SearchResult(action=None, score=0.0, rollouts=0, candidates=0)

        candidates = [
            MoveAction(player=self.player, from_pos=src, to=dst)
            for src, dst in board.legal_moves(self.player)
        ]
        if not candidates:
            return SearchResult(action=None, score=0.0, rollouts=0, candidates=0)

        best = _BestResult()
        deadline = time.monotonic() + self.time_budget
        workers = len(candidates)
        if self.max_workers is not None:
            workers = min(workers, self.max_workers)

        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="wudao-mc"
        ) as pool:
            futures = {
                pool.submit(
                    self._run_worker,
                    board.clone(),
                    action,
                    deadline,
                    self._worker_rng(index),
                    best,
                ): action
                for index, action in enumerate(candidates)
            }
            for future in as_completed(futures):
                action = futures[future]
                try:
                    future.result()
                except Exception as e:
                    logger.warning(
                        "Rollout worker for %s -> %s failed: %s",
                        action.from_pos, action.to, e,
                    )

        if best.action is None:
            # Every worker failed; fall back to the first legal move.
            logger.warning("No rollout results; falling back to first legal move")
            return SearchResult(
                action=candidates[0],
                score=0.0,
                rollouts=best.rollouts,
                candidates=len(candidates),
            )

        logger.info(
            "MonteCarloAI(%s): %s -> %s mean=%.2f over %d rollouts, %d candidates",
            self.player.value, best.action.from_pos, best.action.to,
            best.score, best.rollouts, len(candidates),
        )
        self.move_count += 1
        return SearchResult(
            action=best.action,
            score=best.score,
            rollouts=best.rollouts,
            candidates=len(candidates),
        )

    def _worker_rng(self, index: int) -> random.Random:
        if self.config.rng_seed is None:
            return random.Random()
        return random.Random(self.config.rng_seed * 1_000_003 + index)

    def _run_worker(
        self,
        root: Board,
        action: MoveAction,
        deadline: float,
        rng: random.Random,
        best: _BestResult,
    ) -> None:
        """Roll out ``action`` from ``root`` until the deadline passes.

        At least one rollout always completes, so an oversubscribed pool
        still reports a mean for every candidate.
        """
        policies: Dict[Player, RandomAI] = {
            player: RandomAI(player, self.config, rng=rng)
            for player in (Player.BLACK, Player.WHITE)
        }
        total = 0.0
        rollouts = 0
        while rollouts == 0 or time.monotonic() < deadline:
            total += self._rollout(root.clone(), action, policies)
            rollouts += 1

        mean = total / rollouts
        logger.debug(
            "Worker %s -> %s: mean=%.2f over %d rollouts",
            action.from_pos, action.to, mean, rollouts,
        )
        best.offer(action, mean, rollouts)

    def _rollout(
        self,
        sim: Board,
        action: MoveAction,
        policies: Dict[Player, RandomAI],
    ) -> float:
        """Apply ``action`` then play random actions for up to
        ``rollout_depth`` plies; return the terminal score for this player."""
        try:
            sim.apply_action(action)
            for _ in range(self.rollout_depth):
                if sim.check_winner() is not None:
                    break
                choice = policies[sim.current_player].select_move(sim)
                if choice is None:
                    break
                sim.apply_action(choice)
        except ImmobilizationVictory:
            pass  # sim.winner is set; scored below
        return self._terminal_score(sim)

    def _terminal_score(self, sim: Board) -> float:
        winner = sim.check_winner()
        if winner is not None:
            if winner == self.player:
                return self.WEIGHT_DECISIVE_RESULT
            return -self.WEIGHT_DECISIVE_RESULT
        return self.evaluate_position(sim)


def rollout_budget(config: AIConfig) -> Tuple[float, int]:
    """Effective (seconds, plies) budget for ``config``."""
    think_time = config.think_time if config.think_time is not None else DEFAULT_THINK_TIME_MS
    return think_time / 1000.0, config.rollout_depth or DEFAULT_ROLLOUT_DEPTH
