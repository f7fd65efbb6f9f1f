"""Shared 7-bag piece sequencer."""

from __future__ import annotations

import random
import threading
from collections import deque
from typing import Deque, List, Optional

from .shapes import TetrominoType


class PieceBag:
    """7-bag randomizer shared by one or more sessions.

    ``next()`` pops from a single shared queue. ``cursor()`` hands out an
    independent reader over one lazily extended sequence, so every holder of a
    cursor sees the identical piece order (two-player sessions).
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)
        self._lock = threading.Lock()
        self._queue: Deque[TetrominoType] = deque()
        self._sequence: List[TetrominoType] = []

    def _shuffled(self) -> List[TetrominoType]:
        kinds = list(TetrominoType)
        self.rng.shuffle(kinds)
        return kinds

    def next(self) -> TetrominoType:
        with self._lock:
            if not self._queue:
                self._queue.extend(self._shuffled())
            return self._queue.popleft()

    def at(self, index: int) -> TetrominoType:
        """Piece ``index`` of the shared sequence, extending it bag by bag."""
        with self._lock:
            while len(self._sequence) <= index:
                self._sequence.extend(self._shuffled())
            return self._sequence[index]

    def cursor(self) -> "BagCursor":
        return BagCursor(self)


class BagCursor:
    def __init__(self, bag: PieceBag) -> None:
        self.bag = bag
        self.position = 0

    def next(self) -> TetrominoType:
        kind = self.bag.at(self.position)
        self.position += 1
        return kind

    def __call__(self) -> TetrominoType:
        return self.next()
