"""
Wudao Error Hierarchy

Unified exception hierarchy for the rules engine, the game record and the
move advisor. All custom exceptions inherit from WudaoError.

Usage:
    from wudao.errors import ImmobilizationVictory, RulesViolationError

    try:
        board.move((2, 2), (2, 3))
    except ImmobilizationVictory as win:
        end_game(win.winner)
    except RulesViolationError as e:
        logger.warning(f"Invalid move: {e.message} ({e.code})")
"""

from typing import Any, Optional

__all__ = [
    "AIError",
    "AdjacencyError",
    "CoordinateError",
    "ImmobilizationVictory",
    "InvalidStateError",
    "OccupancyError",
    "PhaseError",
    "QuotaError",
    "RecordFormatError",
    "ReplayError",
    "RulesViolationError",
    "WudaoError",
]


class WudaoError(Exception):
    """Root of every error raised by the wudao package.

    Attributes:
        code: Stable identifier, e.g. ``OCCUPANCY`` or ``REPLAY_FAILED``
        message: Text suitable for showing to a player
        context: Offending coordinates, player, step index and the like
    """
    code: str = "WUDAO_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = dict(context) if context else {}

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if not self.context:
            return text
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{text} ({details})"

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form for game logs and front ends."""
        return {"code": self.code, "message": self.message, "context": self.context}


# =============================================================================
# Game Rules Errors
# =============================================================================


class RulesViolationError(WudaoError):
    """Command rejected by the rules engine.

    Always raised before any state is touched, so the board is unchanged
    and the caller may simply prompt again.
    """
    code: str = "RULES_VIOLATION"


class PhaseError(RulesViolationError):
    """Command invoked outside the phase it belongs to."""
    code: str = "PHASE_MISMATCH"


class CoordinateError(RulesViolationError):
    """Coordinates outside the 5x5 grid or malformed."""
    code: str = "OUT_OF_BOUNDS"


class OccupancyError(RulesViolationError):
    """Source or target cell holds the wrong contents for the command.

    Covers placing on an occupied cell, capturing an empty, own or protected
    stone, moving from an empty or foreign cell and moving onto an occupied
    cell.
    """
    code: str = "OCCUPANCY"


class AdjacencyError(RulesViolationError):
    """Move target is not orthogonally adjacent to the source."""
    code: str = "NOT_ADJACENT"


class QuotaError(RulesViolationError):
    """Capture attempted without a pending capture entitlement."""
    code: str = "NO_CAPTURE_QUOTA"


class ImmobilizationVictory(WudaoError):
    """Terminal signal: the acting player has won outright.

    Raised after a capture or move that leaves the opponent unable to act.
    Unlike RulesViolationError the triggering action *has* been applied and
    recorded; callers must end the game instead of re-prompting.

    Attributes:
        winner: The player who made the deciding action
    """
    code: str = "IMMEDIATE_WIN"

    def __init__(
        self,
        message: str,
        winner: Any,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, context=context)
        self.winner = winner
        self.context["winner"] = getattr(winner, "value", winner)


class InvalidStateError(WudaoError):
    """Corrupted or unexpected board state.

    Raised when the board is in a configuration that should not be
    reachable through the command surface.
    """
    code: str = "INVALID_STATE"


# =============================================================================
# Game Record Errors
# =============================================================================


class ReplayError(WudaoError):
    """A recorded action could not be re-applied during replay.

    Attributes:
        step: Zero-based index of the failing action in the record
    """
    code: str = "REPLAY_FAILED"

    def __init__(
        self,
        message: str,
        step: int,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, context=context)
        self.step = step
        self.context["step"] = step


class RecordFormatError(WudaoError):
    """Serialized game record could not be parsed."""
    code: str = "RECORD_FORMAT"


# =============================================================================
# AI Errors
# =============================================================================


class AIError(WudaoError):
    """Base class for advisor errors."""
    code: str = "AI_ERROR"
