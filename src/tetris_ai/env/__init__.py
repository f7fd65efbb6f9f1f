"""Gymnasium environments for the falling-block engine."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Placement-level environment (one action = final rotation + column)
register(
    id="TetrisPlacement-v0",
    entry_point="tetris_ai.env.placement_env:TetrisPlacementEnv",
)

__all__ = ["TetrisPlacement-v0"]
