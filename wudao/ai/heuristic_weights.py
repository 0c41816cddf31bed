"""Heuristic weight profiles for the Wudao move advisor.

This module centralises the scalar weights used by :class:`HeuristicAI` and
the Monte-Carlo terminal evaluation, plus the static positional table.

The keys in each profile mirror the attribute names on
:class:`HeuristicAI` (``WEIGHT_REWARD_POTENTIAL``, ``WEIGHT_PIECE_COUNT``,
etc.) so that instances can simply ``setattr(self, name, value)`` when
applying a profile.
"""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np

HeuristicWeights = dict[str, float]


# Center-biased 5x5 positional weights. The center point lies on both
# dragons, the middle row and the middle column, so it takes part in the
# most pattern instances.
POSITION_WEIGHTS: np.ndarray = np.array(
    [
        [3.0, 2.0, 3.0, 2.0, 3.0],
        [2.0, 4.0, 5.0, 4.0, 2.0],
        [3.0, 5.0, 8.0, 5.0, 3.0],
        [2.0, 4.0, 5.0, 4.0, 2.0],
        [3.0, 2.0, 3.0, 2.0, 3.0],
    ],
    dtype=np.float64,
)
POSITION_WEIGHTS.setflags(write=False)

# Reward potential counts near-complete squares touching a cell; a cell
# touches at most four squares.
REWARD_POTENTIAL_CAP = 4


BASE_BALANCED_WEIGHTS: HeuristicWeights = {
    # Placement advice
    "WEIGHT_PLACEMENT_BASE": 10.0,
    "WEIGHT_REWARD_POTENTIAL": 50.0,
    "WEIGHT_POSITIONAL": 1.0,
    "WEIGHT_OPPONENT_THREAT": 20.0,
    # Capture advice
    "WEIGHT_CAPTURE_BASE": 10.0,
    "WEIGHT_CAPTURE_CENTER": 5.0,
    "WEIGHT_POTENTIAL_REWARD_PIECE": 15.0,
    # Static evaluation (rollout terminal score)
    "WEIGHT_PIECE_COUNT": 10.0,
    "WEIGHT_PATTERN_COUNT": 50.0,
    "WEIGHT_PROTECTED_PIECES": 5.0,
    "WEIGHT_POSITIONAL_CONTROL": 1.0,
    "WEIGHT_DECISIVE_RESULT": 100.0,
}


# Canonical ordered list of weight keys; must stay in lockstep with the
# insertion order of BASE_BALANCED_WEIGHTS.
HEURISTIC_WEIGHT_KEYS: list[str] = [
    "WEIGHT_PLACEMENT_BASE",
    "WEIGHT_REWARD_POTENTIAL",
    "WEIGHT_POSITIONAL",
    "WEIGHT_OPPONENT_THREAT",
    "WEIGHT_CAPTURE_BASE",
    "WEIGHT_CAPTURE_CENTER",
    "WEIGHT_POTENTIAL_REWARD_PIECE",
    "WEIGHT_PIECE_COUNT",
    "WEIGHT_PATTERN_COUNT",
    "WEIGHT_PROTECTED_PIECES",
    "WEIGHT_POSITIONAL_CONTROL",
    "WEIGHT_DECISIVE_RESULT",
]


def _with_deltas(
    base: Mapping[str, float],
    deltas: Mapping[str, float],
) -> HeuristicWeights:
    """Return a copy of ``base`` with ``deltas`` added key-wise."""
    unknown = set(deltas) - set(base)
    if unknown:
        raise KeyError(f"Unknown heuristic weight keys: {sorted(unknown)}")
    return {key: base[key] + deltas.get(key, 0.0) for key in base}


# Aggressive persona: chases its own patterns harder and cares less about
# blocking.
AGGRESSIVE_WEIGHTS = _with_deltas(
    BASE_BALANCED_WEIGHTS,
    {
        "WEIGHT_REWARD_POTENTIAL": 20.0,
        "WEIGHT_OPPONENT_THREAT": -10.0,
        "WEIGHT_PIECE_COUNT": 5.0,
    },
)

# Defensive persona: values blocking and protected stones.
DEFENSIVE_WEIGHTS = _with_deltas(
    BASE_BALANCED_WEIGHTS,
    {
        "WEIGHT_OPPONENT_THREAT": 20.0,
        "WEIGHT_PROTECTED_PIECES": 5.0,
    },
)

HEURISTIC_WEIGHT_PROFILES: dict[str, HeuristicWeights] = {
    "balanced": BASE_BALANCED_WEIGHTS,
    "aggressive": AGGRESSIVE_WEIGHTS,
    "defensive": DEFENSIVE_WEIGHTS,
}


def get_weights(profile_id: str) -> HeuristicWeights:
    """Return a copy of the named profile.

    Raises:
        KeyError: ``profile_id`` is not a registered profile.
    """
    if profile_id not in HEURISTIC_WEIGHT_PROFILES:
        raise KeyError(
            f"Unknown heuristic profile {profile_id!r}; "
            f"available: {sorted(HEURISTIC_WEIGHT_PROFILES)}"
        )
    return dict(HEURISTIC_WEIGHT_PROFILES[profile_id])
