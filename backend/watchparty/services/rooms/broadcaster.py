import logging
import threading
from typing import Any, Callable, Iterable

from .registry import RoomRegistry

logger = logging.getLogger(__name__)

LOCK_STRIPES = 64


class Broadcaster:
    """Deliver events to room members, one connection at a time.

    ``emit`` has the shape of ``SocketIO.emit``: ``emit(event, *args, to=sid)``.
    Flask-SocketIO queues each packet on the target's own transport, so a
    slow peer does not hold up the others, and a peer whose send raises is
    logged and skipped.

    ``room_lock`` orders a room's commit-then-send sequences: whoever holds
    it commits a change and enqueues the resulting events before any other
    change to that room is committed. Enqueueing does no network I/O, so
    holding it across ``emit`` is cheap. Rooms share a fixed pool of
    striped locks.
    """

    _NO_PAYLOAD = object()

    def __init__(self, registry: RoomRegistry, emit: Callable[..., Any]) -> None:
        self.registry = registry
        self._emit = emit
        self._room_locks = [threading.RLock() for _ in range(LOCK_STRIPES)]

    def room_lock(self, room_key: str) -> threading.RLock:
        return self._room_locks[hash(room_key) % LOCK_STRIPES]

    def send(self, sid: str, event: str, payload: Any = _NO_PAYLOAD) -> bool:
        args = () if payload is self._NO_PAYLOAD else (payload,)
        try:
            self._emit(event, *args, to=sid)
        except Exception as exc:
            logger.warning("Send of %s to %s failed: %s", event, sid, exc)
            return False
        return True

    def to_room(self, room_key: str, event: str, payload: Any = _NO_PAYLOAD, exclude: Iterable[str] = ()) -> int:
        """Send ``event`` to every current member of the room not in ``exclude``.

        Returns the number of successful deliveries. Membership is read once
        from the registry; the registry lock is not held while sending.
        """
        skip = set(exclude)
        with self.room_lock(room_key):
            targets = [sid for sid in self.registry.members(room_key) if sid not in skip]
            if not targets:
                logger.debug("Skipped %s broadcast: room=%s has no other members", event, room_key)
                return 0
            delivered = 0
            for sid in targets:
                if self.send(sid, event, payload):
                    delivered += 1
            return delivered
