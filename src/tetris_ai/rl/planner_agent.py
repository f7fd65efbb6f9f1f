from __future__ import annotations

import argparse
import logging
import random
import time
from typing import Dict, List, Optional

import gymnasium as gym
import numpy as np

import tetris_ai.env  # noqa: F401
from tetris_ai.ai.planner import PlacementPlanner
from tetris_ai.game import GameConfig
from tetris_ai.log import setup_logging


logger = logging.getLogger(__name__)


def planner_action(env: gym.Env, planner: PlacementPlanner, sweep_col: int = 0) -> int:
    """Flat action index for the planner's choice on the env's current session."""
    base = env.unwrapped
    session = base.session
    piece = session.active
    plan = planner.plan(
        session.board,
        piece.kind,
        session.next_kind,
        spawn_col=session.config.spawn_col,
        current_col=piece.state.col,
        sweep_col=sweep_col,
    )
    return base.encode_action(plan.target_column, plan.target_rotation)


def run_episode(env: gym.Env, planner: Optional[PlacementPlanner], seed: Optional[int] = None,
                max_pieces: int = 500) -> Dict[str, float]:
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    pieces = 0
    started = time.perf_counter()
    for _ in range(max_pieces):
        if planner is not None:
            action = planner_action(env, planner)
        else:
            valid = np.flatnonzero(info["action_mask"])
            action = int(random.choice(valid)) if valid.size else env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        pieces += 1
        if terminated or truncated:
            break
    elapsed = time.perf_counter() - started
    return {
        "score": float(info["score"]),
        "lines": float(info["lines"]),
        "pieces": float(pieces),
        "reward": total_reward,
        "ms_per_piece": 1000.0 * elapsed / max(1, pieces),
    }


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Benchmark the placement planner headlessly")
    p.add_argument("--episodes", type=int, default=3)
    p.add_argument("--max-pieces", type=int, default=500)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--random", action="store_true", help="uniform over valid placements instead")
    p.add_argument("--rows", type=int, default=20)
    p.add_argument("--cols", type=int, default=10)
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main() -> None:
    args = build_parser().parse_args()
    setup_logging(args.verbose)
    env = gym.make("TetrisPlacement-v0", config=GameConfig(rows=args.rows, cols=args.cols))
    planner = None if args.random else PlacementPlanner()
    results: List[Dict[str, float]] = []
    try:
        for ep in range(args.episodes):
            stats = run_episode(env, planner, seed=args.seed + ep, max_pieces=args.max_pieces)
            results.append(stats)
            logger.info("episode %d: score=%d lines=%d pieces=%d (%.1f ms/piece)",
                        ep, stats["score"], stats["lines"], stats["pieces"], stats["ms_per_piece"])
    finally:
        env.close()
    if results:
        logger.info("mean score %.1f, mean lines %.1f over %d episodes",
                    float(np.mean([r["score"] for r in results])),
                    float(np.mean([r["lines"] for r in results])),
                    len(results))


if __name__ == "__main__":  # pragma: no cover
    main()
