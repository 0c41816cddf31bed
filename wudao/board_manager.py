"""Reward pattern detection for the Wudao board.

Every reward shape is a fixed list of cells. Squares are parametrised by
their top-left anchor; the diagonal families (tri, tetra, dragon) index into
hard-coded coordinate tables; rows and columns by their index. All helpers
here are pure functions of the grid and never mutate it.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set, Tuple

from .models import (
    BOARD_SIZE,
    Coord,
    PatternFamily,
    Player,
    RewardPattern,
)

__all__ = [
    "BoardManager",
    "DRAGON_CELLS",
    "Grid",
    "TETRA_CELLS",
    "TRI_CELLS",
]

Grid = List[List[Optional[Player]]]

TRI_CELLS: Tuple[Tuple[Coord, ...], ...] = (
    ((0, 2), (1, 1), (2, 0)),
    ((0, 2), (1, 3), (2, 4)),
    ((2, 0), (3, 1), (4, 2)),
    ((2, 4), (3, 3), (4, 2)),
)

TETRA_CELLS: Tuple[Tuple[Coord, ...], ...] = (
    ((0, 1), (1, 2), (2, 3), (3, 4)),
    ((0, 3), (1, 2), (2, 1), (3, 0)),
    ((1, 0), (2, 1), (3, 2), (4, 3)),
    ((1, 4), (2, 3), (3, 2), (4, 1)),
)

DRAGON_CELLS: Tuple[Tuple[Coord, ...], ...] = (
    tuple((i, i) for i in range(BOARD_SIZE)),
    tuple((i, BOARD_SIZE - 1 - i) for i in range(BOARD_SIZE)),
)

# Squares are anchored at (r, c) with r, c in 0..3 so that (r + 1, c + 1)
# stays on the board.
SQUARE_ANCHOR_LIMIT = BOARD_SIZE - 1


def _build_pattern_table() -> Dict[RewardPattern, Tuple[Coord, ...]]:
    table: Dict[RewardPattern, Tuple[Coord, ...]] = {}
    for r in range(SQUARE_ANCHOR_LIMIT):
        for c in range(SQUARE_ANCHOR_LIMIT):
            table[RewardPattern.square(r, c)] = (
                (r, c), (r, c + 1), (r + 1, c), (r + 1, c + 1),
            )
    for i, cells in enumerate(TRI_CELLS):
        table[RewardPattern.tri(i)] = cells
    for i, cells in enumerate(TETRA_CELLS):
        table[RewardPattern.tetra(i)] = cells
    for r in range(BOARD_SIZE):
        table[RewardPattern.row(r)] = tuple((r, c) for c in range(BOARD_SIZE))
    for c in range(BOARD_SIZE):
        table[RewardPattern.col(c)] = tuple((r, c) for r in range(BOARD_SIZE))
    for i, cells in enumerate(DRAGON_CELLS):
        table[RewardPattern.dragon(i)] = cells
    return table


# Scan order: squares row-major, tris, tetras, rows, columns, dragons.
_PATTERN_CELLS = _build_pattern_table()
_ALL_PATTERNS: Tuple[RewardPattern, ...] = tuple(_PATTERN_CELLS)


def _build_cell_index() -> Dict[Coord, Tuple[RewardPattern, ...]]:
    index: Dict[Coord, List[RewardPattern]] = {
        (r, c): [] for r in range(BOARD_SIZE) for c in range(BOARD_SIZE)
    }
    for pattern, cells in _PATTERN_CELLS.items():
        for cell in cells:
            index[cell].append(pattern)
    return {cell: tuple(patterns) for cell, patterns in index.items()}


_PATTERNS_BY_CELL = _build_cell_index()


class BoardManager:
    """Static pattern helpers shared by the rules engine and the advisor."""

    @staticmethod
    def is_valid_position(row: int, col: int) -> bool:
        return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE

    @staticmethod
    def all_patterns() -> Tuple[RewardPattern, ...]:
        """Every pattern instance on the board (16 squares, 4 tris, 4 tetras,
        5 rows, 5 columns, 2 dragons)."""
        return _ALL_PATTERNS

    @staticmethod
    def pattern_cells(pattern: RewardPattern) -> Tuple[Coord, ...]:
        return _PATTERN_CELLS[pattern]

    @staticmethod
    def patterns_touching(row: int, col: int) -> Tuple[RewardPattern, ...]:
        """Pattern instances that include ``(row, col)``.

        For squares this is the (up to) four anchors ``(row, col)``,
        ``(row, col - 1)``, ``(row - 1, col)``, ``(row - 1, col - 1)`` that
        stay inside the anchor space; for the other families it is every
        table entry containing the cell.
        """
        return _PATTERNS_BY_CELL[(row, col)]

    @staticmethod
    def _cells_owned_by(
        grid: Grid,
        cells: Iterable[Coord],
        player: Player,
    ) -> bool:
        return all(grid[r][c] == player for r, c in cells)

    @staticmethod
    def is_square(grid: Grid, row: int, col: int, player: Player) -> bool:
        """True iff the 2x2 block anchored at ``(row, col)`` belongs to
        ``player``. Anchors outside 0..3 never form a square."""
        if not (0 <= row < SQUARE_ANCHOR_LIMIT and 0 <= col < SQUARE_ANCHOR_LIMIT):
            return False
        return BoardManager._cells_owned_by(
            grid,
            ((row, col), (row, col + 1), (row + 1, col), (row + 1, col + 1)),
            player,
        )

    @staticmethod
    def is_tri(grid: Grid, pattern_id: int, player: Player) -> bool:
        if not 0 <= pattern_id < len(TRI_CELLS):
            return False
        return BoardManager._cells_owned_by(grid, TRI_CELLS[pattern_id], player)

    @staticmethod
    def is_tetra(grid: Grid, pattern_id: int, player: Player) -> bool:
        if not 0 <= pattern_id < len(TETRA_CELLS):
            return False
        return BoardManager._cells_owned_by(grid, TETRA_CELLS[pattern_id], player)

    @staticmethod
    def is_row(grid: Grid, index: int, player: Player) -> bool:
        if not 0 <= index < BOARD_SIZE:
            return False
        return all(cell == player for cell in grid[index])

    @staticmethod
    def is_col(grid: Grid, index: int, player: Player) -> bool:
        if not 0 <= index < BOARD_SIZE:
            return False
        return all(grid[r][index] == player for r in range(BOARD_SIZE))

    @staticmethod
    def is_dragon(grid: Grid, pattern_id: int, player: Player) -> bool:
        if not 0 <= pattern_id < len(DRAGON_CELLS):
            return False
        return BoardManager._cells_owned_by(grid, DRAGON_CELLS[pattern_id], player)

    @staticmethod
    def is_complete(grid: Grid, pattern: RewardPattern, player: Player) -> bool:
        """Generic predicate: every cell of ``pattern`` holds ``player``."""
        return BoardManager._cells_owned_by(grid, _PATTERN_CELLS[pattern], player)

    @staticmethod
    def owner_of(grid: Grid, pattern: RewardPattern) -> Optional[Player]:
        """The single player occupying all cells of ``pattern``, if any."""
        cells = _PATTERN_CELLS[pattern]
        first = grid[cells[0][0]][cells[0][1]]
        if first is None:
            return None
        if BoardManager._cells_owned_by(grid, cells[1:], first):
            return first
        return None

    @staticmethod
    def scan_complete(grid: Grid, player: Player) -> List[RewardPattern]:
        """All pattern instances currently complete for ``player``."""
        return [
            pattern
            for pattern in _ALL_PATTERNS
            if BoardManager.is_complete(grid, pattern, player)
        ]

    @staticmethod
    def newly_completed_after_placement(
        grid: Grid,
        row: int,
        col: int,
        player: Player,
        triggered: Set[RewardPattern],
    ) -> List[RewardPattern]:
        """Untriggered patterns completed by a stone placed at ``(row, col)``.

        Squares are checked only at the anchors that can contain the cell;
        the diagonal, row, column and dragon families are rescanned in full
        for ``player``.
        """
        found: List[RewardPattern] = []
        for dr, dc in ((0, 0), (0, -1), (-1, 0), (-1, -1)):
            r, c = row + dr, col + dc
            if BoardManager.is_square(grid, r, c, player):
                pattern = RewardPattern.square(r, c)
                if pattern not in triggered:
                    found.append(pattern)
        for pattern in _ALL_PATTERNS:
            if pattern.family is PatternFamily.SQUARE or pattern in triggered:
                continue
            if BoardManager.is_complete(grid, pattern, player):
                found.append(pattern)
        return found

    @staticmethod
    def newly_completed_at(
        grid: Grid,
        row: int,
        col: int,
        player: Player,
        triggered: Set[RewardPattern],
    ) -> List[RewardPattern]:
        """Untriggered patterns through ``(row, col)`` now owned by ``player``.

        Used after a move: only shapes containing the destination cell can
        have been completed by it.
        """
        return [
            pattern
            for pattern in _PATTERNS_BY_CELL[(row, col)]
            if pattern not in triggered
            and BoardManager.is_complete(grid, pattern, player)
        ]

    @staticmethod
    def owned_patterns(
        grid: Grid,
        triggered: Iterable[RewardPattern],
        player: Player,
    ) -> List[RewardPattern]:
        """Triggered patterns whose cells are all still held by ``player``."""
        return [
            pattern
            for pattern in triggered
            if BoardManager.is_complete(grid, pattern, player)
        ]

    @staticmethod
    def capture_quota(
        grid: Grid,
        triggered: Iterable[RewardPattern],
        player: Player,
    ) -> int:
        """Sum of rewards of triggered patterns ``player`` currently owns."""
        return sum(
            pattern.reward
            for pattern in BoardManager.owned_patterns(grid, triggered, player)
        )

    @staticmethod
    def compute_reward_pieces(
        grid: Grid,
        triggered: Iterable[RewardPattern],
    ) -> Dict[Player, Set[Coord]]:
        """Protected cells per player.

        A cell is protected for P while it belongs to an already-triggered
        pattern whose cells are all currently occupied by P.
        """
        protected: Dict[Player, Set[Coord]] = {
            Player.BLACK: set(),
            Player.WHITE: set(),
        }
        for pattern in triggered:
            owner = BoardManager.owner_of(grid, pattern)
            if owner is not None:
                protected[owner].update(_PATTERN_CELLS[pattern])
        return protected
