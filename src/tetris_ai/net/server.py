"""Line-oriented TCP server answering remote planner requests with the local planner."""

from __future__ import annotations

import argparse
import logging
import socketserver
import threading
from typing import Optional, Tuple

from tetris_ai.ai.planner import PlacementPlanner
from tetris_ai.log import setup_logging

from .client import DEFAULT_PORT, LINE_LIMIT
from .protocol import OpMove, ProtocolError, PureGame


logger = logging.getLogger(__name__)


class _PlannerHandler(socketserver.StreamRequestHandler):
    timeout = 5.0

    def handle(self) -> None:
        line = self.rfile.readline(LINE_LIMIT)
        if not line.strip():
            return
        try:
            game = PureGame.from_json(line.decode("utf-8"))
            move = self.server.answer(game)  # type: ignore[attr-defined]
        except (ProtocolError, UnicodeDecodeError) as e:
            # Closing without a reply is how the caller learns the request was bad
            logger.warning("rejecting request from %s: %s", self.client_address, e)
            return
        self.wfile.write(move.to_json().encode("utf-8") + b"\n")


class PlannerServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(
        self,
        address: Tuple[str, int] = ("127.0.0.1", DEFAULT_PORT),
        planner: Optional[PlacementPlanner] = None,
        spawn_col: int = 3,
    ) -> None:
        super().__init__(address, _PlannerHandler)
        self.planner = planner or PlacementPlanner()
        self.spawn_col = spawn_col
        self._thread: Optional[threading.Thread] = None

    def server_activate(self) -> None:
        super().server_activate()
        logger.info("planner server listening on %s:%d", self.server_address[0], self.port)

    @property
    def port(self) -> int:
        return int(self.server_address[1])

    def answer(self, game: PureGame) -> OpMove:
        kind = game.current_kind()
        plan = self.planner.plan(game.board(), kind, game.next_kind(), spawn_col=self.spawn_col)
        logger.debug("answered %s on %dx%d -> col=%d rot=%d",
                     kind.name, game.width, game.height, plan.target_column, plan.target_rotation)
        return OpMove(plan.target_column, plan.target_rotation)

    def start(self) -> None:
        self._thread = threading.Thread(target=self.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self.shutdown()
        self.server_close()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        logger.info("planner server stopped")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Serve placement plans over JSON lines")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=DEFAULT_PORT)
    p.add_argument("--spawn-col", type=int, default=3)
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main() -> None:
    args = build_parser().parse_args()
    setup_logging(args.verbose)
    server = PlannerServer((args.host, args.port), spawn_col=args.spawn_col)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
        logger.info("planner server stopped")


if __name__ == "__main__":  # pragma: no cover
    main()
