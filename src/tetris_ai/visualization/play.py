from __future__ import annotations

import argparse
import logging
import time
from typing import Dict, List, Optional

import pygame

from tetris_ai.ai.controller import AiController
from tetris_ai.game import Action, GameConfig, GameSession, create_versus
from tetris_ai.log import setup_logging
from tetris_ai.net.client import DEFAULT_PORT, RemotePlanner, TetrisClient
from .renderer import Renderer


logger = logging.getLogger(__name__)

# Side 0 keys, side 1 keys
KEY_TO_ACTION: List[Dict[int, Action]] = [
    {
        pygame.K_LEFT: Action.LEFT,
        pygame.K_RIGHT: Action.RIGHT,
        pygame.K_UP: Action.ROTATE_CW,
        pygame.K_z: Action.ROTATE_CCW,
        pygame.K_DOWN: Action.SOFT_DROP,
        pygame.K_SPACE: Action.HARD_DROP,
    },
    {
        pygame.K_a: Action.LEFT,
        pygame.K_d: Action.RIGHT,
        pygame.K_w: Action.ROTATE_CW,
        pygame.K_q: Action.ROTATE_CCW,
        pygame.K_s: Action.SOFT_DROP,
        pygame.K_e: Action.HARD_DROP,
    },
]


def build_sessions(config: GameConfig, ai_sides: List[bool], remote: Optional[str] = None) -> List[GameSession]:
    planner = None
    if remote:
        host, _, port = remote.partition(":")
        planner = RemotePlanner(TetrisClient(host or "localhost", int(port or DEFAULT_PORT)))
    controller = AiController.from_config(config, planner)
    controllers = tuple(controller if ai else None for ai in ai_sides)
    if config.players == 2:
        return create_versus(config, controllers=controllers)  # type: ignore[arg-type]
    return [GameSession(config, controller=controllers[0])]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play or watch the falling-block engine")
    p.add_argument("--rows", type=int, default=20)
    p.add_argument("--cols", type=int, default=10)
    p.add_argument("--gravity", type=float, default=2.0, help="cells per second")
    p.add_argument("--spawn-col", type=int, default=3)
    p.add_argument("--players", type=int, choices=[1, 2], default=1)
    p.add_argument("--ai", type=int, nargs="*", default=[], help="side ids driven by the planner")
    p.add_argument("--remote", type=str, default=None, help="host:port of a remote planner")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--fps", type=int, default=60)
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def run(config: GameConfig, ai_sides: List[bool], remote: Optional[str] = None, fps: int = 60) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        sessions = build_sessions(config, ai_sides, remote)
        renderer = Renderer(cell_size=28)

        side_w, side_h = renderer.side_size(config.rows, config.cols)
        screen = pygame.display.set_mode((side_w * len(sessions), side_h))
        pygame.display.set_caption("Tetris AI")

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_p:
                        for s in sessions:
                            s.toggle_pause()
                    elif event.key == pygame.K_r:
                        if all(s.paused or s.game_over for s in sessions):
                            for s in sessions:
                                s.restart()
                    else:
                        for side, s in enumerate(sessions):
                            if s.controller is not None:
                                continue
                            action = KEY_TO_ACTION[side].get(event.key)
                            if action is not None:
                                s.step(action)

            now = time.monotonic_ns()
            for s in sessions:
                s.tick(now)

            screen.fill((10, 10, 14))
            for side, s in enumerate(sessions):
                label = f"P{side + 1}" + (" AI" if s.controller is not None else "")
                renderer.draw(screen, s.snapshot(), origin=(side * side_w, 0), label=label)
            pygame.display.flip()
            clock.tick(fps)
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    setup_logging(args.verbose)
    config = GameConfig(
        rows=args.rows,
        cols=args.cols,
        gravity_cps=args.gravity,
        spawn_col=args.spawn_col,
        players=args.players,
        seed=args.seed,
    )
    ai_sides = [side in args.ai for side in range(args.players)]
    if args.players == 1:
        ai_sides.append(False)
    run(config, ai_sides, args.remote, args.fps)


if __name__ == "__main__":  # pragma: no cover
    main()
