"""Move advisor implementations for Wudao.

Architecture:
- base.py: BaseAI abstract base class
- random_ai.py: uniform random policy (rollout playouts, baselines)
- heuristic_ai.py: per-phase heuristics and static evaluation
- monte_carlo_ai.py: parallel Monte-Carlo rollout search (movement)
- heuristic_weights.py: weight profiles and positional table
- advisor.py: MoveAdvisor phase-dispatch facade
"""

from wudao.ai.advisor import MoveAdvisor
from wudao.ai.base import BaseAI
from wudao.ai.heuristic_ai import HeuristicAI
from wudao.ai.monte_carlo_ai import MonteCarloAI, SearchResult
from wudao.ai.random_ai import RandomAI

__all__ = [
    "BaseAI",
    "HeuristicAI",
    "MonteCarloAI",
    "MoveAdvisor",
    "RandomAI",
    "SearchResult",
]
