"""Movement phase, reward-triggered capture sub-phases and immobilisation."""

import pytest

from wudao.errors import (
    AdjacencyError,
    CoordinateError,
    ImmobilizationVictory,
    OccupancyError,
    PhaseError,
)
from wudao.models import (
    GamePhase,
    MoveAction,
    MovementPhaseOrigin,
    Player,
    RewardAction,
    RewardPattern,
)

ROW_MOVE_ROWS = ["BBBB.", "....B", "....W", "W.W..", ".W..W"]


class TestMoveValidation:
    @pytest.fixture
    def board(self, board_factory):
        return board_factory(ROW_MOVE_ROWS)

    @pytest.mark.parametrize(
        "src, dst, error, code",
        [
            ((0, 0), (1, 1), AdjacencyError, "NOT_ADJACENT"),
            ((0, 0), (2, 0), AdjacencyError, "NOT_ADJACENT"),
            ((0, 0), (0, 1), OccupancyError, "OCCUPANCY"),
            ((2, 2), (2, 3), OccupancyError, "OCCUPANCY"),
            ((3, 0), (2, 0), OccupancyError, "OCCUPANCY"),
            ((0, 0), (-1, 0), CoordinateError, "OUT_OF_BOUNDS"),
            ((0, 3), (0, 5), CoordinateError, "OUT_OF_BOUNDS"),
        ],
    )
    def test_rejected_moves_leave_board_unchanged(self, board, src, dst, error, code):
        grid = [list(line) for line in board.grid]
        record = board.get_game_record()
        with pytest.raises(error) as exc_info:
            board.move(src, dst)
        assert exc_info.value.code == code
        assert board.grid == grid
        assert board.get_game_record() == record
        assert board.get_state() == (GamePhase.MOVEMENT, Player.BLACK)

    def test_malformed_coordinate(self, board):
        with pytest.raises(CoordinateError):
            board.move((0,), (0, 1))

    def test_move_outside_movement_phase(self, empty_board):
        with pytest.raises(PhaseError):
            empty_board.move((0, 0), (0, 1))

    def test_legal_moves_are_orthogonal_steps(self, board):
        moves = board.legal_moves(Player.BLACK)
        assert ((0, 3), (0, 4)) in moves
        assert ((1, 4), (0, 4)) in moves
        for (r1, c1), (r2, c2) in moves:
            assert abs(r1 - r2) + abs(c1 - c2) == 1
            assert board.get_cell(r2, c2) is None


class TestMoveRewards:
    def test_row_move_enters_capture(self, board_factory):
        board = board_factory(ROW_MOVE_ROWS)
        assert board.move((1, 4), (0, 4)) == 2

        assert board.phase == GamePhase.CAPTURE
        assert board.capture_origin == GamePhase.MOVEMENT
        assert board.capture_turn == Player.BLACK
        assert board.current_player == Player.BLACK
        assert board.capture_remaining == {Player.BLACK: 2, Player.WHITE: 0}
        assert RewardPattern.row(0) in board.triggered_patterns()
        assert board.protected_cells(Player.BLACK) == {(0, c) for c in range(5)}
        assert board.get_game_record()[-2:] == [
            MoveAction(player=Player.BLACK, from_pos=(1, 4), to=(0, 4)),
            RewardAction(player=Player.BLACK, pattern=RewardPattern.row(0)),
        ]

    def test_capture_after_move_hands_turn_to_opponent(self, board_factory):
        board = board_factory(ROW_MOVE_ROWS)
        board.move((1, 4), (0, 4))
        assert board.capture(3, 0) == 1
        assert board.current_player == Player.BLACK
        assert board.capture(3, 2) == 0

        assert board.phase == GamePhase.MOVEMENT
        assert board.movement_phase_origin == MovementPhaseOrigin.FROM_MOVEMENT
        assert board.current_player == Player.WHITE
        assert board.capture_origin is None

    def test_triggered_pattern_pays_once(self, board_factory):
        board = board_factory(
            ["BB...", "B....", ".B...", "...WW", "...W."],
            triggered=[RewardPattern.square(0, 0)],
        )
        record_len = len(board.get_game_record())
        assert board.move((2, 1), (1, 1)) == 0
        assert board.current_player == Player.WHITE
        assert board.phase == GamePhase.MOVEMENT
        assert len(board.get_game_record()) == record_len + 1
        assert board.protected_cells(Player.BLACK) == {(0, 0), (0, 1), (1, 0), (1, 1)}

    def test_reward_without_target_is_forfeited(self, board_factory):
        board = board_factory(
            ["BBBB.", "....B", ".....", "...WW", "...WW"],
            triggered=[RewardPattern.square(3, 3)],
        )
        assert board.move((1, 4), (0, 4)) == 0
        assert RewardPattern.row(0) in board.triggered_patterns()
        assert board.phase == GamePhase.MOVEMENT
        assert board.current_player == Player.WHITE
        assert board.capture_remaining == {Player.BLACK: 0, Player.WHITE: 0}

    def test_triggered_set_only_grows(self, board_factory):
        board = board_factory(
            ["BB...", "BB...", ".....", "...WW", "...WW"],
            triggered=[RewardPattern.square(0, 0), RewardPattern.square(3, 3)],
        )
        before = board.triggered_patterns()
        board.move((1, 1), (2, 1))
        board.move((3, 3), (2, 3))
        after = board.triggered_patterns()
        assert before <= after
        # Broken up, so no longer protected, but still triggered.
        assert board.protected_cells(Player.BLACK) == set()
        assert RewardPattern.square(0, 0) in after


class TestImmobilisation:
    def test_move_that_boxes_in_opponent_wins(self, immobilization_board):
        board = immobilization_board
        with pytest.raises(ImmobilizationVictory) as exc_info:
            board.move((2, 1), (1, 1))
        assert exc_info.value.winner == Player.BLACK
        assert exc_info.value.to_dict()["context"]["winner"] == "black"
        assert board.winner == Player.BLACK
        assert board.check_winner() == Player.BLACK
        assert board.get_game_record()[-1] == MoveAction(
            player=Player.BLACK, from_pos=(2, 1), to=(1, 1)
        )

    def test_current_player_without_moves_loses(self, board_factory):
        board = board_factory(
            ["WWB..", "WB...", "B....", ".....", "....."],
            current_player=Player.WHITE,
        )
        assert not board.has_legal_moves(Player.WHITE)
        assert board.check_winner() == Player.BLACK
        assert board.get_valid_actions() == []

    def test_fewer_than_three_stones_has_no_moves(self, board_factory):
        board = board_factory(["B....", "..B..", ".....", ".....", "WWW.."])
        assert not board.has_legal_moves(Player.BLACK)
        assert board.has_legal_moves(Player.WHITE)
        assert board.check_winner() == Player.WHITE


class TestClone:
    def test_clone_is_independent(self, board_factory):
        board = board_factory(ROW_MOVE_ROWS)
        copy = board.clone()
        copy.move((1, 4), (0, 4))
        copy.capture(3, 0)

        assert board.get_cell(1, 4) == Player.BLACK
        assert board.get_cell(3, 0) == Player.WHITE
        assert board.phase == GamePhase.MOVEMENT
        assert board.triggered_patterns() == set()
        assert board.get_game_record() == []
        assert board.capture_remaining == {Player.BLACK: 0, Player.WHITE: 0}
