import threading
from collections import Counter

from tetris_ai.game import PieceBag, TetrominoType


ALL_KINDS = set(TetrominoType)


def test_each_bag_is_a_permutation_of_all_kinds():
    bag = PieceBag(seed=12345)
    for _ in range(5):
        draws = [bag.next() for _ in range(7)]
        assert set(draws) == ALL_KINDS
        assert len(draws) == 7


def test_seeded_bags_are_reproducible():
    a = PieceBag(seed=7)
    b = PieceBag(seed=7)
    assert [a.next() for _ in range(21)] == [b.next() for _ in range(21)]


def test_cursors_see_identical_order():
    bag = PieceBag(seed=3)
    left, right = bag.cursor(), bag.cursor()
    seen_left = [left.next() for _ in range(10)]
    seen_right = []
    # interleave draws unevenly
    for _ in range(5):
        seen_right.append(right())
    seen_left += [left.next() for _ in range(11)]
    seen_right += [right() for _ in range(16)]
    assert seen_left == seen_right
    for start in range(0, 21, 7):
        assert set(seen_left[start:start + 7]) == ALL_KINDS


def test_concurrent_draws_never_duplicate_within_a_bag():
    bag = PieceBag(seed=99)
    results = []
    lock = threading.Lock()

    def worker():
        local = [bag.next() for _ in range(700)]
        with lock:
            results.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    counts = Counter(results)
    assert len(results) == 1400
    assert all(counts[k] == 200 for k in TetrominoType)


def test_concurrent_cursors_agree():
    bag = PieceBag(seed=5)
    out = {}

    def reader(name):
        cur = bag.cursor()
        out[name] = [cur.next() for _ in range(350)]

    threads = [threading.Thread(target=reader, args=(n,)) for n in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert out["a"] == out["b"]
