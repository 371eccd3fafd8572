"""Retry queue for credibility recomputes that failed after a committed transition.

A failed recompute never fails the transition that triggered it. The user
is parked here and picked up by the next reconcile pass, which simply
recomputes from history again.
"""

import logging
import threading

from marketplace.services.credibility import CredibilityEngine

logger = logging.getLogger(__name__)


class RecomputeQueue:
    def __init__(self):
        self._pending: set[str] = set()
        self._lock = threading.Lock()

    def add(self, user_id: str):
        with self._lock:
            self._pending.add(user_id)

    def drain(self) -> list[str]:
        with self._lock:
            users = sorted(self._pending)
            self._pending.clear()
        return users

    def snapshot(self) -> list[str]:
        with self._lock:
            return sorted(self._pending)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


pending_recomputes = RecomputeQueue()


def reconcile_scores(engine: CredibilityEngine, queue: RecomputeQueue = pending_recomputes) -> dict:
    """Recompute every parked user once; failures go back on the queue."""
    result = {"recomputed": 0, "failed": []}
    for user_id in queue.drain():
        try:
            engine.recompute(user_id)
            result["recomputed"] += 1
        except Exception as e:
            logger.error(f"[reconcile] Recompute for {user_id} failed again: {e}")
            queue.add(user_id)
            result["failed"].append(user_id)

    if result["recomputed"] or result["failed"]:
        logger.info(
            f"[reconcile] recomputed={result['recomputed']} failed={len(result['failed'])}"
        )
    return result
