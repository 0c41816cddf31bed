"""Wudao: rules engine and move advisor for the 5x5 three-phase capture game."""

from wudao.errors import (
    ImmobilizationVictory,
    RulesViolationError,
    WudaoError,
)
from wudao.game_engine import Board
from wudao.game_record import GameReplayer, parse_game_record, serialize_game_record
from wudao.models import (
    AIConfig,
    CaptureAction,
    GamePhase,
    MoveAction,
    MovementPhaseOrigin,
    PatternFamily,
    PlaceAction,
    Player,
    Recommendation,
    RewardAction,
    RewardPattern,
)

__all__ = [
    "AIConfig",
    "Board",
    "CaptureAction",
    "GamePhase",
    "GameReplayer",
    "ImmobilizationVictory",
    "MoveAction",
    "MovementPhaseOrigin",
    "PatternFamily",
    "PlaceAction",
    "Player",
    "Recommendation",
    "RewardAction",
    "RewardPattern",
    "RulesViolationError",
    "WudaoError",
    "parse_game_record",
    "serialize_game_record",
]
