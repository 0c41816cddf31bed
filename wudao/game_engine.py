"""
Wudao rules engine.

The :class:`Board` owns the single source of truth for a game: the 5x5 grid,
the active phase, whose turn it is, pending bonus placements and captures,
the global record of triggered reward patterns and the append-only action
log. It is mutated only through the three commands ``place``, ``capture``
and ``move`` (plus the internal phase-transition helpers they call).

Phase flow::

    PLACEMENT --(board full)--> CAPTURE --(quotas settled)--> MOVEMENT
                     \\--(nobody can capture)-------------------^
    MOVEMENT --(move completes a pattern)--> CAPTURE --> MOVEMENT

Every command validates first and applies second, so a rejected command
(any :class:`~wudao.errors.RulesViolationError`) leaves the board untouched.
:class:`~wudao.errors.ImmobilizationVictory` is the one exception raised
*after* applying: it reports that the committed action decided the game.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set, Tuple

from .board_manager import BoardManager, Grid
from .errors import (
    AdjacencyError,
    CoordinateError,
    ImmobilizationVictory,
    OccupancyError,
    PhaseError,
    QuotaError,
    RulesViolationError,
)
from .models import (
    BOARD_SIZE,
    CaptureAction,
    Coord,
    GameAction,
    GamePhase,
    MoveAction,
    MovementPhaseOrigin,
    PlaceAction,
    Player,
    PlayerAction,
    RewardAction,
    RewardPattern,
)

logger = logging.getLogger(__name__)

__all__ = ["Board", "MIN_PIECES"]

# A player with fewer stones than this can no longer form any pattern and
# loses.
MIN_PIECES = 3

_ORTHOGONAL_STEPS: Tuple[Coord, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


class Board:
    """Authoritative Wudao game state and rules."""

    def __init__(self) -> None:
        self.grid: Grid = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
        self.current_player: Player = Player.BLACK
        self.phase: GamePhase = GamePhase.PLACEMENT
        self.extra_moves: int = 0
        self.capture_remaining: Dict[Player, int] = {
            Player.BLACK: 0,
            Player.WHITE: 0,
        }
        self.capture_turn: Player = Player.BLACK
        # Phase the running Capture was entered from (PLACEMENT or MOVEMENT)
        self.capture_origin: Optional[GamePhase] = None
        self.movement_phase_origin: MovementPhaseOrigin = (
            MovementPhaseOrigin.FROM_PLACEMENT
        )
        # Global and append-only: a pattern instance pays out at most once
        # per game, whoever owns its cells later.
        self.triggered: Set[RewardPattern] = set()
        self.reward_pieces: Dict[Player, Set[Coord]] = {}
        self.game_record: List[GameAction] = []
        self.winner: Optional[Player] = None
        self._update_reward_pieces()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_state(self) -> Tuple[GamePhase, Player]:
        return self.phase, self.current_player

    def get_game_record(self) -> List[GameAction]:
        return list(self.game_record)

    def get_cell(self, row: int, col: int) -> Optional[Player]:
        self._require_position(row, col)
        return self.grid[row][col]

    def is_full(self) -> bool:
        return all(cell is not None for line in self.grid for cell in line)

    def player_pieces(self, player: Player) -> List[Coord]:
        return [
            (r, c)
            for r in range(BOARD_SIZE)
            for c in range(BOARD_SIZE)
            if self.grid[r][c] == player
        ]

    def count_pieces(self, player: Player) -> int:
        return sum(line.count(player) for line in self.grid)

    def triggered_patterns(self) -> Set[RewardPattern]:
        return set(self.triggered)

    def protected_cells(self, player: Player) -> Set[Coord]:
        return set(self.reward_pieces.get(player, ()))

    def pending_captures(self) -> int:
        return sum(self.capture_remaining.values())

    def has_legal_moves(self, player: Player) -> bool:
        """False when ``player`` has fewer than 3 stones or every stone is
        boxed in orthogonally."""
        pieces = self.player_pieces(player)
        if len(pieces) < MIN_PIECES:
            return False
        return any(self._empty_neighbours(r, c) for r, c in pieces)

    def has_capturable_pieces(self, owner: Player) -> bool:
        """Whether ``owner`` has at least one stone outside its protection set."""
        protected = self.reward_pieces.get(owner, set())
        return any(pos not in protected for pos in self.player_pieces(owner))

    def check_winner(self) -> Optional[Player]:
        """Return the winner, if the game is decided.

        Only the Capture and Movement phases can be decided: a side reduced
        below three stones loses at once (even mid-capture), and in Movement
        a current player without a legal move loses.
        """
        if self.phase == GamePhase.PLACEMENT:
            return None
        if self.winner is not None:
            return self.winner
        if self.count_pieces(Player.BLACK) < MIN_PIECES:
            return Player.WHITE
        if self.count_pieces(Player.WHITE) < MIN_PIECES:
            return Player.BLACK
        if self.phase == GamePhase.MOVEMENT and not self.has_legal_moves(
            self.current_player
        ):
            return self.current_player.opponent()
        return None

    # ------------------------------------------------------------------
    # Legal action enumeration
    # ------------------------------------------------------------------

    def legal_placements(self) -> List[Coord]:
        if self.phase != GamePhase.PLACEMENT:
            return []
        return [
            (r, c)
            for r in range(BOARD_SIZE)
            for c in range(BOARD_SIZE)
            if self.grid[r][c] is None
        ]

    def capture_targets(self, player: Player) -> List[Coord]:
        """Opponent stones ``player`` may remove (unprotected ones)."""
        opponent = player.opponent()
        protected = self.reward_pieces.get(opponent, set())
        return [pos for pos in self.player_pieces(opponent) if pos not in protected]

    def legal_moves(self, player: Player) -> List[Tuple[Coord, Coord]]:
        moves: List[Tuple[Coord, Coord]] = []
        for r, c in self.player_pieces(player):
            for to in self._empty_neighbours(r, c):
                moves.append(((r, c), to))
        return moves

    def get_valid_actions(self) -> List[PlayerAction]:
        """Every action the current player may issue right now."""
        if self.check_winner() is not None:
            return []
        player = self.current_player
        if self.phase == GamePhase.PLACEMENT:
            return [
                PlaceAction(player=player, pos=pos)
                for pos in self.legal_placements()
            ]
        if self.phase == GamePhase.CAPTURE:
            if self.capture_remaining.get(player, 0) <= 0:
                return []
            return [
                CaptureAction(player=player, pos=pos)
                for pos in self.capture_targets(player)
            ]
        return [
            MoveAction(player=player, from_pos=src, to=dst)
            for src, dst in self.legal_moves(player)
        ]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def place(self, row: int, col: int) -> int:
        """Place a stone for the current player.

        Returns:
            The bonus placements earned by this stone (sum of the rewards of
            newly completed patterns).

        Raises:
            PhaseError, CoordinateError, OccupancyError
        """
        if self.phase != GamePhase.PLACEMENT:
            raise PhaseError(
                "Stones can only be placed during the placement phase",
                context={"phase": self.phase.value},
            )
        self._require_position(row, col)
        if self.grid[row][col] is not None:
            raise OccupancyError(
                "Target cell is already occupied",
                context={"pos": (row, col)},
            )

        player = self.current_player
        self.grid[row][col] = player
        self._record(PlaceAction(player=player, pos=(row, col)))

        new_patterns = BoardManager.newly_completed_after_placement(
            self.grid, row, col, player, self.triggered
        )
        bonus = self._trigger(new_patterns, player)

        self.extra_moves += bonus
        if self.extra_moves > 0:
            self.extra_moves -= 1
        else:
            self.current_player = player.opponent()

        if self.is_full():
            self._enter_capture_phase()
        else:
            self._update_reward_pieces()
        return bonus

    def capture(self, row: int, col: int) -> int:
        """Remove an opponent stone for the current player.

        Returns:
            The acting player's captures still owed after this one.

        Raises:
            PhaseError, QuotaError, CoordinateError, OccupancyError
            ImmobilizationVictory: the capture (already applied) decided the
                game for the acting player.
        """
        if self.phase != GamePhase.CAPTURE:
            raise PhaseError(
                "Stones can only be captured during a capture phase",
                context={"phase": self.phase.value},
            )
        player = self.current_player
        remaining = self.capture_remaining.get(player, 0)
        if remaining <= 0:
            raise QuotaError(
                "No pending captures for the current player",
                context={"player": player.value},
            )
        self._require_position(row, col)
        opponent = player.opponent()
        target = self.grid[row][col]
        if target is None:
            raise OccupancyError("There is no stone to capture", context={"pos": (row, col)})
        if target != opponent:
            raise OccupancyError("Only opponent stones can be captured", context={"pos": (row, col)})
        if (row, col) in self.reward_pieces.get(opponent, set()):
            raise OccupancyError(
                "Stone is protected by a completed pattern",
                context={"pos": (row, col)},
            )

        self.grid[row][col] = None
        self._record(CaptureAction(player=player, pos=(row, col)))
        self.capture_remaining[player] = remaining - 1
        self._update_reward_pieces()

        self._advance_capture_turn(player)

        if self.count_pieces(opponent) < MIN_PIECES or (
            self.phase == GamePhase.MOVEMENT and not self.has_legal_moves(opponent)
        ):
            self._declare_winner(player, "capture left the opponent unable to move")
        return self.capture_remaining.get(player, 0)

    def move(self, from_pos: Coord, to: Coord) -> int:
        """Slide one of the current player's stones one step orthogonally.

        Returns:
            The number of captures the mover is now owed. When positive the
            board is back in the Capture phase and the captures are executed
            through :meth:`capture`.

        Raises:
            PhaseError, CoordinateError, OccupancyError, AdjacencyError
            ImmobilizationVictory: the move (already applied) left the
                opponent without a legal move.
        """
        if self.phase != GamePhase.MOVEMENT:
            raise PhaseError(
                "Stones can only be moved during the movement phase",
                context={"phase": self.phase.value},
            )
        from_row, from_col = self._coerce_coord(from_pos)
        to_row, to_col = self._coerce_coord(to)
        player = self.current_player
        source = self.grid[from_row][from_col]
        if source is None:
            raise OccupancyError("Source cell is empty", context={"from": (from_row, from_col)})
        if source != player:
            raise OccupancyError(
                "Only your own stones can be moved",
                context={"from": (from_row, from_col)},
            )
        if self.grid[to_row][to_col] is not None:
            raise OccupancyError("Target cell is already occupied", context={"to": (to_row, to_col)})
        if abs(from_row - to_row) + abs(from_col - to_col) != 1:
            raise AdjacencyError(
                "Stones move one step up, down, left or right",
                context={"from": (from_row, from_col), "to": (to_row, to_col)},
            )

        self.grid[from_row][from_col] = None
        self.grid[to_row][to_col] = player
        self._record(
            MoveAction(player=player, from_pos=(from_row, from_col), to=(to_row, to_col))
        )

        new_patterns = BoardManager.newly_completed_at(
            self.grid, to_row, to_col, player, self.triggered
        )
        capture_count = self._trigger(new_patterns, player)
        self._update_reward_pieces()

        opponent = player.opponent()
        if capture_count > 0:
            if self.has_capturable_pieces(opponent):
                self._enter_capture_from_move(player, capture_count)
                return capture_count
            logger.debug(
                "%s earned %d captures but every %s stone is protected",
                player.value, capture_count, opponent.value,
            )

        if not self.has_legal_moves(opponent):
            self._declare_winner(player, "move left the opponent unable to move")
        self.current_player = opponent
        return 0

    def apply_action(self, action: PlayerAction) -> int:
        """Dispatch a recorded or advised action to the command surface.

        The action's ``player`` must be the player to act.
        """
        if isinstance(action, RewardAction):
            raise RulesViolationError(
                "Reward entries are log-only and cannot be applied",
                context={"pattern": str(action.pattern)},
            )
        if action.player != self.current_player:
            raise RulesViolationError(
                "Action belongs to the player not on turn",
                code="WRONG_PLAYER",
                context={"player": action.player.value, "current": self.current_player.value},
            )
        if isinstance(action, PlaceAction):
            return self.place(*action.pos)
        if isinstance(action, CaptureAction):
            return self.capture(*action.pos)
        return self.move(action.from_pos, action.to)

    def clone(self) -> "Board":
        """Independent copy; nothing mutable is shared with ``self``."""
        other = Board.__new__(Board)
        other.grid = [list(line) for line in self.grid]
        other.current_player = self.current_player
        other.phase = self.phase
        other.extra_moves = self.extra_moves
        other.capture_remaining = dict(self.capture_remaining)
        other.capture_turn = self.capture_turn
        other.capture_origin = self.capture_origin
        other.movement_phase_origin = self.movement_phase_origin
        other.triggered = set(self.triggered)
        other.reward_pieces = {
            player: set(cells) for player, cells in self.reward_pieces.items()
        }
        # Actions are frozen, a shallow copy of the list is enough.
        other.game_record = list(self.game_record)
        other.winner = self.winner
        return other

    # ------------------------------------------------------------------
    # Phase transitions
    # ------------------------------------------------------------------

    def scan_all_rewards(self) -> None:
        """Add every currently complete pattern (either player) to the
        triggered record. The record only ever grows."""
        for player in (Player.BLACK, Player.WHITE):
            self.triggered.update(BoardManager.scan_complete(self.grid, player))
        self._update_reward_pieces()

    def _enter_capture_phase(self) -> None:
        self.phase = GamePhase.CAPTURE
        self.capture_origin = GamePhase.PLACEMENT
        self.extra_moves = 0
        self.scan_all_rewards()

        # White placed second, so White opens when both sides may capture.
        qualified: List[Player] = []
        for player in (Player.WHITE, Player.BLACK):
            quota = BoardManager.capture_quota(self.grid, self.triggered, player)
            if quota > 0 and self.has_capturable_pieces(player.opponent()):
                self.capture_remaining[player] = quota
                qualified.append(player)
            else:
                self.capture_remaining[player] = 0

        logger.debug(
            "Board full; capture quotas black=%d white=%d",
            self.capture_remaining[Player.BLACK],
            self.capture_remaining[Player.WHITE],
        )
        if not qualified:
            self._enter_movement_phase(MovementPhaseOrigin.FROM_PLACEMENT)
            return
        self.current_player = qualified[0]
        self.capture_turn = qualified[0]

    def _enter_capture_from_move(self, mover: Player, count: int) -> None:
        self.phase = GamePhase.CAPTURE
        self.capture_origin = GamePhase.MOVEMENT
        self.capture_remaining = {mover: count, mover.opponent(): 0}
        self.capture_turn = mover
        self.current_player = mover
        logger.debug("%s re-enters capture owing %d", mover.value, count)

    def _advance_capture_turn(self, actor: Player) -> None:
        """Hand the capture turn on after ``actor`` captured.

        The actor keeps the turn while it owes captures and has a target;
        then the opponent under the same condition. A side that owes but
        has nothing to take forfeits its debt. With nothing left owed the
        board moves on to Movement.
        """
        for candidate in (actor, actor.opponent()):
            if self.capture_remaining.get(candidate, 0) <= 0:
                continue
            if self.capture_targets(candidate):
                self.current_player = candidate
                return
            logger.debug(
                "%s forfeits %d captures: no unprotected targets",
                candidate.value, self.capture_remaining[candidate],
            )
            self.capture_remaining[candidate] = 0

        if self.capture_origin == GamePhase.MOVEMENT:
            # The mover's opponent moves next.
            self.current_player = self.capture_turn
            self._enter_movement_phase(MovementPhaseOrigin.FROM_MOVEMENT)
        else:
            self.current_player = actor
            self._enter_movement_phase(MovementPhaseOrigin.FROM_CAPTURE)

    def _enter_movement_phase(self, origin: MovementPhaseOrigin) -> None:
        self.phase = GamePhase.MOVEMENT
        self.movement_phase_origin = origin
        self.capture_origin = None
        if origin == MovementPhaseOrigin.FROM_PLACEMENT:
            self.current_player = Player.WHITE
        elif origin == MovementPhaseOrigin.FROM_MOVEMENT:
            self.current_player = self.current_player.opponent()
        self._update_reward_pieces()
        logger.debug(
            "Entering movement (%s), %s to move",
            origin.value, self.current_player.value,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _trigger(self, patterns: List[RewardPattern], player: Player) -> int:
        reward = 0
        for pattern in patterns:
            self.triggered.add(pattern)
            self._record(RewardAction(player=player, pattern=pattern))
            reward += pattern.reward
            logger.debug("%s completed %s (+%d)", player.value, pattern, pattern.reward)
        return reward

    def _declare_winner(self, player: Player, reason: str) -> None:
        self.winner = player
        logger.info("%s wins: %s", player.value, reason)
        raise ImmobilizationVictory(
            f"{player.value} wins: {reason}",
            winner=player,
        )

    def _record(self, action: GameAction) -> None:
        self.game_record.append(action)

    def _update_reward_pieces(self) -> None:
        self.reward_pieces = BoardManager.compute_reward_pieces(self.grid, self.triggered)

    def _empty_neighbours(self, row: int, col: int) -> List[Coord]:
        result = []
        for dr, dc in _ORTHOGONAL_STEPS:
            r, c = row + dr, col + dc
            if BoardManager.is_valid_position(r, c) and self.grid[r][c] is None:
                result.append((r, c))
        return result

    @staticmethod
    def _require_position(row: int, col: int) -> None:
        if not (
            isinstance(row, int)
            and isinstance(col, int)
            and BoardManager.is_valid_position(row, col)
        ):
            raise CoordinateError(
                f"Position must be within 0-{BOARD_SIZE - 1}",
                context={"pos": (row, col)},
            )

    @classmethod
    def _coerce_coord(cls, pos: Coord) -> Coord:
        try:
            row, col = pos
        except (TypeError, ValueError):
            raise CoordinateError("Malformed coordinate", context={"pos": pos})
        cls._require_position(row, col)
        return row, col

    def __str__(self) -> str:
        symbols = {None: ".", Player.BLACK: "B", Player.WHITE: "W"}
        return "\n".join(
            " ".join(symbols[cell] for cell in line) for line in self.grid
        )

    def __repr__(self) -> str:
        return (
            f"Board(phase={self.phase.value}, "
            f"current_player={self.current_player.value}, "
            f"actions={len(self.game_record)})"
        )
