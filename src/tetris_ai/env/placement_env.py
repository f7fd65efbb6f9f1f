from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from tetris_ai.ai.heuristics import board_features
from tetris_ai.ai.reachability import find_path, reachable_landings
from tetris_ai.game import Action, GameConfig, GameSession, shapes


MAX_ROTATIONS = 4


def _compute_action_mask(session: GameSession) -> np.ndarray:
    cols = session.board.cols
    mask = np.zeros((MAX_ROTATIONS * cols,), dtype=np.bool_)
    piece = session.active
    if piece is None or session.game_over:
        return mask
    for col, rot in reachable_landings(session.board, piece.kind, piece.state.col):
        mask[rot * cols + col] = True
    return mask


class TetrisPlacementEnv(gym.Env):
    """Placement-level environment: one action picks the final (rotation, column).

    Actions are ``rotation * cols + column``. Only placements a kick-free move
    sequence can reach from spawn are valid; the chosen one is executed move by
    move on the session's active piece and then locked.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 invalid_action_penalty: float = -0.1,
                 terminal_penalty: float = 0.0,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.session = GameSession(self.config)
        self.render_mode = render_mode

        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.max_episode_steps = int(max_episode_steps)
        self.reward_weights: Dict[str, float] = {
            "score": 0.01,       # per engine point
            "lines": 1.0,        # per line cleared
            "holes": 0.5,        # per hole created
            "bumpiness": 0.05,   # per unit of bumpiness increase
            "height": 0.05,      # per unit of max-height increase
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        rows, cols = self.config.rows, self.config.cols
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=0, high=7, shape=(rows, cols), dtype=np.int8),
                "current": spaces.Discrete(8),
                "next": spaces.Discrete(8),
            }
        )
        self.action_space = spaces.Discrete(MAX_ROTATIONS * cols)
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        piece = self.session.active
        current = int(piece.kind) if piece is not None and not self.session.game_over else 0
        nxt = int(self.session.next_kind) if self.session.next_kind is not None else 0
        return {
            "board": self.session.board.snapshot().astype(np.int8),
            "current": current,
            "next": nxt,
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.session),
            "score": self.session.score,
            "lines": self.session.lines_cleared_total,
            "steps": self._steps,
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.session)

    def decode_action(self, action: int) -> Tuple[int, int]:
        """(column, rotation) for a flat action index."""
        cols = self.config.cols
        return int(action) % cols, int(action) // cols

    def encode_action(self, column: int, rotation: int) -> int:
        return int(rotation) * self.config.cols + int(column)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.config = replace(self.config, seed=seed)
            self.session = GameSession(self.config)
        else:
            self.session.restart()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        col, rot = self.decode_action(action)
        session = self.session
        piece = session.active
        reward_components: Dict[str, float] = {}

        path = None
        if piece is not None and not session.game_over and rot < shapes.rotation_count(piece.kind):
            path = find_path(session.board, piece.kind, piece.state.col, col, rot)

        if path is None:
            reward_components["invalid"] = self.invalid_action_penalty
        else:
            before = board_features(session.board.grid)
            score_before = session.score
            for move in path:
                piece.apply(move)
            lines = session.step(Action.SOFT_DROP)
            after = board_features(session.board.grid)

            reward_components["score"] = self.reward_weights["score"] * float(session.score - score_before)
            reward_components["lines"] = self.reward_weights["lines"] * float(lines)
            reward_components["holes"] = -self.reward_weights["holes"] * float(
                max(0, after["holes"] - before["holes"]))
            reward_components["bumpiness"] = -self.reward_weights["bumpiness"] * float(
                max(0, after["bumpiness"] - before["bumpiness"]))
            reward_components["height"] = -self.reward_weights["height"] * float(
                max(0, after["max_height"] - before["max_height"]))

        self._steps += 1
        terminated = bool(session.game_over)
        truncated = self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))
        info = self._get_info()
        info["reward_components"] = reward_components
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        from tetris_ai.visualization.renderer import color_for_value

        state = self.session.get_state()
        cell = 12
        h, w = state.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                img[y * cell:(y + 1) * cell, x * cell:(x + 1) * cell, :] = color_for_value(int(state[y, x]))
        return img

    def close(self) -> None:
        pass
