import logging
import threading
from typing import Callable, Dict, Iterable, Optional

from state import GameState

logger = logging.getLogger(__name__)


class MatchStore:
    """In-memory match states keyed by match id ("Volley", "Basket", ...).

    Every id owns a lock. Anything that reads, computes and writes a state
    runs under that lock as one unit, so two updates of the same match never
    interleave. Different matches never wait on each other apart from the
    brief registry lock taken to look an entry up.
    """

    def __init__(self, seeded: Iterable[str] = ()):
        self._states: Dict[str, GameState] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        for match_id in seeded:
            self._entry(match_id)

    def _entry(self, match_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(match_id)
            if lock is None:
                lock = self._locks[match_id] = threading.Lock()
                self._states[match_id] = GameState()
                logger.info("Created match %r", match_id)
            return lock

    def get_or_create(self, match_id: str) -> GameState:
        """Stored state for ``match_id``, created with defaults when missing."""
        lock = self._entry(match_id)
        with lock:
            return self._states[match_id]

    def replace(self, match_id: str, new_state: GameState):
        lock = self._entry(match_id)
        with lock:
            self._states[match_id] = new_state

    def update(self, match_id: str, fn: Callable[[GameState], Optional[GameState]]) -> GameState:
        """Run ``fn`` on the match state while holding its lock.

        If ``fn`` returns a GameState it takes the place of the old one
        before the lock is released. Returns the state now stored.
        """
        lock = self._entry(match_id)
        with lock:
            replacement = fn(self._states[match_id])
            if replacement is not None:
                self._states[match_id] = replacement
            return self._states[match_id]

    def snapshot(self, match_id: str) -> dict:
        lock = self._entry(match_id)
        with lock:
            return self._states[match_id].to_dict()

    def ids(self) -> list:
        with self._registry_lock:
            return list(self._states)

    def __contains__(self, match_id: str) -> bool:
        with self._registry_lock:
            return match_id in self._states
