import gymnasium as gym
import numpy as np
import pytest

import tetris_ai.env  # noqa: F401
from tetris_ai.ai import PlacementPlanner
from tetris_ai.env.placement_env import TetrisPlacementEnv
from tetris_ai.game import GameConfig
from tetris_ai.rl.planner_agent import planner_action, run_episode


@pytest.fixture
def env():
    e = gym.make("TetrisPlacement-v0", config=GameConfig(seed=0))
    yield e
    e.close()


def test_reset_returns_observation_and_mask(env):
    obs, info = env.reset(seed=3)
    assert obs["board"].shape == (20, 10)
    assert 1 <= obs["current"] <= 7
    assert 1 <= obs["next"] <= 7
    mask = info["action_mask"]
    assert mask.shape == (40,)
    assert mask.any()
    assert env.observation_space.contains(obs)


def test_seeded_resets_repeat_piece_order(env):
    kinds = []
    for _ in range(2):
        obs, _ = env.reset(seed=9)
        kinds.append((obs["current"], obs["next"]))
    assert kinds[0] == kinds[1]


def test_valid_action_places_one_piece(env):
    _, info = env.reset(seed=1)
    action = int(np.flatnonzero(info["action_mask"])[0])
    _, reward, terminated, truncated, info = env.step(action)
    assert env.unwrapped.session.pieces_placed == 1
    assert "invalid" not in info["reward_components"]
    assert not terminated and not truncated
    assert int((env.unwrapped.session.board.grid != 0).sum()) == 4


def test_invalid_action_is_penalised():
    env = TetrisPlacementEnv(GameConfig(seed=2))
    _, info = env.reset()
    invalid = np.flatnonzero(~info["action_mask"])
    assert invalid.size
    _, reward, terminated, _, info = env.step(int(invalid[0]))
    assert reward == pytest.approx(-0.1)
    assert env.session.pieces_placed == 0
    assert not terminated


def test_action_encoding_round_trips():
    env = TetrisPlacementEnv()
    assert env.decode_action(env.encode_action(7, 3)) == (7, 3)


def test_planner_choices_are_always_valid(env):
    env.reset(seed=4)
    planner = PlacementPlanner()
    for _ in range(10):
        action = planner_action(env, planner)
        assert env.unwrapped.get_action_mask()[action]
        _, _, terminated, _, info = env.step(action)
        assert "invalid" not in info["reward_components"]
        if terminated:
            break


def test_planner_survives_fifteen_pieces(env):
    stats = run_episode(env, PlacementPlanner(), seed=5, max_pieces=15)
    assert stats["pieces"] == 15


def test_rgb_render():
    env = TetrisPlacementEnv(render_mode="rgb_array")
    env.reset(seed=0)
    frame = env.render()
    assert frame.shape == (240, 120, 3)
    assert frame.dtype == np.uint8
