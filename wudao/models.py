"""
Pydantic Models for Wudao Game State
Players, phases, reward patterns and the append-only action log.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field

BOARD_SIZE = 5

# Zero-based (row, col)
Coord = Tuple[int, int]


class Player(str, Enum):
    """Player enumeration"""
    BLACK = "black"
    WHITE = "white"

    def opponent(self) -> "Player":
        return Player.WHITE if self is Player.BLACK else Player.BLACK


class GamePhase(str, Enum):
    """Game phase enumeration"""
    PLACEMENT = "placement"
    CAPTURE = "capture"
    MOVEMENT = "movement"


class MovementPhaseOrigin(str, Enum):
    """How the Movement phase was (re-)entered.

    - FROM_PLACEMENT: the board filled up and nobody could capture; White
      moves first.
    - FROM_CAPTURE: the post-placement capture round finished; whoever
      captured last keeps the turn.
    - FROM_MOVEMENT: a reward-triggered capture sub-loop finished; the turn
      passes to the opponent of the player who moved.
    """
    FROM_PLACEMENT = "from_placement"
    FROM_CAPTURE = "from_capture"
    FROM_MOVEMENT = "from_movement"


class PatternFamily(str, Enum):
    """Reward pattern family enumeration"""
    SQUARE = "square"
    TRI = "tri"
    TETRA = "tetra"
    ROW = "row"
    COL = "col"
    DRAGON = "dragon"

    @property
    def reward(self) -> int:
        return PATTERN_REWARDS[self]


PATTERN_REWARDS: Dict[PatternFamily, int] = {
    PatternFamily.SQUARE: 1,
    PatternFamily.TRI: 1,
    PatternFamily.TETRA: 1,
    PatternFamily.ROW: 2,
    PatternFamily.COL: 2,
    PatternFamily.DRAGON: 2,
}


class RewardPattern(BaseModel):
    """One concrete pattern instance.

    ``key`` is the top-left anchor ``(row, col)`` for squares and the fixed
    table index (or row/column index) for every other family.
    """
    family: PatternFamily
    key: Union[Coord, int]

    class Config:
        frozen = True

    @property
    def reward(self) -> int:
        return self.family.reward

    @classmethod
    def square(cls, row: int, col: int) -> "RewardPattern":
        return cls(family=PatternFamily.SQUARE, key=(row, col))

    @classmethod
    def tri(cls, pattern_id: int) -> "RewardPattern":
        return cls(family=PatternFamily.TRI, key=pattern_id)

    @classmethod
    def tetra(cls, pattern_id: int) -> "RewardPattern":
        return cls(family=PatternFamily.TETRA, key=pattern_id)

    @classmethod
    def row(cls, index: int) -> "RewardPattern":
        return cls(family=PatternFamily.ROW, key=index)

    @classmethod
    def col(cls, index: int) -> "RewardPattern":
        return cls(family=PatternFamily.COL, key=index)

    @classmethod
    def dragon(cls, pattern_id: int) -> "RewardPattern":
        return cls(family=PatternFamily.DRAGON, key=pattern_id)

    def __str__(self) -> str:
        if self.family is PatternFamily.SQUARE:
            return f"square@{self.key[0]},{self.key[1]}"
        return f"{self.family.value}:{self.key}"


class PlaceAction(BaseModel):
    """Stone placed during the Placement phase"""
    type: Literal["place"] = "place"
    player: Player
    pos: Coord

    class Config:
        frozen = True


class CaptureAction(BaseModel):
    """Opponent stone removed during a Capture (sub-)phase"""
    type: Literal["capture"] = "capture"
    player: Player
    pos: Coord

    class Config:
        frozen = True


class MoveAction(BaseModel):
    """Stone slid one step during the Movement phase"""
    type: Literal["move"] = "move"
    player: Player
    from_pos: Coord = Field(alias="from")
    to: Coord

    class Config:
        frozen = True
        populate_by_name = True


class RewardAction(BaseModel):
    """Log-only marker for a newly triggered pattern.

    Rewards are side effects of the preceding place/move and are never
    re-applied during replay.
    """
    type: Literal["reward"] = "reward"
    player: Player
    pattern: RewardPattern

    class Config:
        frozen = True


GameAction = Annotated[
    Union[PlaceAction, CaptureAction, MoveAction, RewardAction],
    Field(discriminator="type"),
]

# Actions a player can actually issue (everything except RewardAction).
PlayerAction = Annotated[
    Union[PlaceAction, CaptureAction, MoveAction],
    Field(discriminator="type"),
]


class AIConfig(BaseModel):
    """Advisor configuration"""
    think_time: Optional[int] = Field(None, ge=0, alias="thinkTime")
    rollout_depth: Optional[int] = Field(None, ge=1, alias="rolloutDepth")
    max_workers: Optional[int] = Field(None, ge=1, alias="maxWorkers")
    rng_seed: Optional[int] = Field(None, alias="rngSeed")
    heuristic_profile_id: Optional[str] = Field(None, alias="heuristicProfileId")

    class Config:
        populate_by_name = True


class Recommendation(BaseModel):
    """Advisor output: the suggested action and its score."""
    phase: GamePhase
    player: Player
    action: PlayerAction
    score: float
    candidates_evaluated: int = Field(0, alias="candidatesEvaluated")
    rollouts: int = 0

    class Config:
        populate_by_name = True
