# tests/test_queueing.py
# How to run:
#   pytest -q
#
# What this covers:
#   - FifoQueue ordering and empty-queue behaviour
#   - safe_put drops the oldest item when the queue is full

import queue

from core.utils.queueing import FifoQueue, safe_put
from core.timing.clock import ManualClock

def test_fifo_order():
    q = FifoQueue([1, 2])
    q.enqueue(3)
    assert q.size() == 3 and len(q) == 3
    assert q.peek() == 1 and q.peek_last() == 3
    assert q.dequeue() == 1
    assert list(q) == [2, 3]

def test_empty_queue():
    q = FifoQueue()
    assert q.is_empty()
    assert q.dequeue() is None
    assert q.peek() is None and q.peek_last() is None
    q.enqueue("x")
    q.clear()
    assert q.is_empty()

def test_safe_put_drops_oldest_when_full():
    q = queue.Queue(maxsize=2)
    for item in ("a", "b", "c"):
        safe_put(q, item)
    assert [q.get_nowait(), q.get_nowait()] == ["b", "c"]

def test_manual_clock():
    c = ManualClock(start_ms=10)
    assert c() == 10.0
    assert c.advance(5) == 15.0
    c.set(100)
    assert c() == 100.0
