"""
Shared pytest fixtures for wudao tests.

Game state fixtures are function-scoped so every test gets its own board.
Positions are built directly from row strings (see tests/helpers.py) so a
test can start in any phase without replaying the game that led there.
"""

from typing import Callable

import pytest

from wudao.game_engine import Board
from wudao.models import AIConfig, GamePhase, Player, RewardPattern

from tests.helpers import PRE_CAPTURE_ROWS, build_board


@pytest.fixture
def board_factory() -> Callable[..., Board]:
    """Factory fixture for boards in arbitrary positions."""
    return build_board


@pytest.fixture
def empty_board() -> Board:
    return Board()


@pytest.fixture
def fast_config() -> AIConfig:
    """Short, seeded search budget for Monte-Carlo tests."""
    return AIConfig(think_time=50, rollout_depth=5, rng_seed=7)


@pytest.fixture
def pre_capture_board() -> Board:
    """Placement board one black stone away from the capture transition."""
    return build_board(
        PRE_CAPTURE_ROWS,
        phase=GamePhase.PLACEMENT,
        current_player=Player.BLACK,
        triggered=[
            RewardPattern.square(0, 0),
            RewardPattern.square(0, 2),
            RewardPattern.tri(1),
        ],
    )


@pytest.fixture
def immobilization_board() -> Board:
    """Movement board where Black's (2,1)->(1,1) boxes in every white stone.

    Tri 0 is already triggered, so the move itself earns nothing.
    """
    return build_board(
        ["WWB..", "W....", "BB...", ".....", "....."],
        phase=GamePhase.MOVEMENT,
        current_player=Player.BLACK,
        triggered=[RewardPattern.tri(0)],
    )
