"""Placement planner: reachable-placement search, heuristics and the tick driver."""

from .heuristics import PlannerWeights, board_features, evaluate
from .reachability import find_path, path_exists, reachable_landings, reachable_targets
from .planner import Candidate, Plan, PlacementPlanner
from .controller import AiController, SideState

__all__ = [
    "PlannerWeights",
    "board_features",
    "evaluate",
    "find_path",
    "path_exists",
    "reachable_landings",
    "reachable_targets",
    "Candidate",
    "Plan",
    "PlacementPlanner",
    "AiController",
    "SideState",
]
