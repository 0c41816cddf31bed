"""Position builders shared by the wudao tests.

``B`` is a black stone, ``W`` a white stone and ``.`` an empty cell.
"""

from typing import Dict, Iterable, List, Optional

from wudao.ai.random_ai import RandomAI
from wudao.errors import ImmobilizationVictory
from wudao.game_engine import Board
from wudao.models import (
    AIConfig,
    GamePhase,
    MovementPhaseOrigin,
    Player,
    RewardPattern,
)

_SYMBOLS = {"B": Player.BLACK, "W": Player.WHITE, ".": None}


def build_board(
    rows: List[str],
    phase: GamePhase = GamePhase.MOVEMENT,
    current_player: Player = Player.BLACK,
    triggered: Iterable[RewardPattern] = (),
    capture_remaining: Optional[Dict[Player, int]] = None,
    capture_origin: Optional[GamePhase] = None,
    capture_turn: Optional[Player] = None,
    movement_phase_origin: MovementPhaseOrigin = MovementPhaseOrigin.FROM_PLACEMENT,
) -> Board:
    """Create a board in an arbitrary position."""
    assert len(rows) == 5 and all(len(row) == 5 for row in rows)
    board = Board()
    board.grid = [[_SYMBOLS[ch] for ch in row] for row in rows]
    board.phase = phase
    board.current_player = current_player
    board.triggered = set(triggered)
    if capture_remaining is not None:
        board.capture_remaining = {
            Player.BLACK: capture_remaining.get(Player.BLACK, 0),
            Player.WHITE: capture_remaining.get(Player.WHITE, 0),
        }
    board.capture_origin = capture_origin
    board.capture_turn = capture_turn or current_player
    board.movement_phase_origin = movement_phase_origin
    board._update_reward_pieces()
    return board


def play_random_game(seed: int, max_actions: int = 400) -> Board:
    """Self-play with seeded uniform random policies until decided."""
    board = Board()
    policies = {
        Player.BLACK: RandomAI(Player.BLACK, AIConfig(rng_seed=seed)),
        Player.WHITE: RandomAI(Player.WHITE, AIConfig(rng_seed=seed + 1)),
    }
    for _ in range(max_actions):
        if board.check_winner() is not None:
            break
        action = policies[board.current_player].select_move(board)
        if action is None:
            break
        try:
            board.apply_action(action)
        except ImmobilizationVictory:
            break
    return board


# A full board (minus the (4, 4) corner, which Black fills) containing
# exactly three reward patterns: Black square@0,0, White square@0,2 and
# White tri 1 ((0,2),(1,3),(2,4)).
PRE_CAPTURE_ROWS = [
    "BBWWB",
    "BBWWB",
    "WBWBW",
    "WBWBW",
    "BWBW.",
]

# Full board (minus (4, 4)) with no reward pattern anywhere: cell (r, c) is
# black when (r + 2c) mod 4 is 0 or 1.
PATTERN_FREE_ROWS = [
    "BWBWB",
    "BWBWB",
    "WBWBW",
    "WBWBW",
    "BWBW.",
]
