import logging
import threading
from typing import Callable, Dict, FrozenSet, List, Optional, Set, Tuple

from watchparty.models import Room

logger = logging.getLogger(__name__)


class RoomRegistry:
    """In-memory store of live rooms and of which rooms each connection joined.

    Data structures:
        _rooms: room_key -> Room (only rooms with at least one member)
        _connections: sid -> set of room keys joined; a sid is present
                      while its connection is open

    All methods take one re-entrant lock for the duration of the in-memory
    update only. Callers must never do network I/O while holding it, so
    ``apply`` and friends return plain values and fan-out happens afterwards.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}
        self._connections: Dict[str, Set[str]] = {}
        self._lock = threading.RLock()

    # ---- connections ----

    def open_connection(self, sid: str) -> None:
        with self._lock:
            self._connections.setdefault(sid, set())

    def is_open(self, sid: str) -> bool:
        with self._lock:
            return sid in self._connections

    def close_connection(self, sid: str) -> List[str]:
        """Forget ``sid`` and drop it from every room it joined.

        Returns the keys of the rooms it was removed from. Closing an
        unknown or already closed sid returns an empty list.
        """
        with self._lock:
            room_keys = self._connections.pop(sid, set())
            left = []
            for room_key in sorted(room_keys):
                if self._discard(room_key, sid):
                    left.append(room_key)
            return left

    def rooms_of(self, sid: str) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._connections.get(sid, ()))

    # ---- rooms ----

    def get_or_create(self, room_key: str) -> Room:
        with self._lock:
            room = self._rooms.get(room_key)
            if room is None:
                room = Room(key=room_key)
                self._rooms[room_key] = room
                logger.info("Room %s created", room_key)
            return room

    def get(self, room_key: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_key)

    def add_member(self, room_key: str, sid: str) -> bool:
        """Add ``sid`` to the room, creating the room on first join.

        Returns True only when the sid was newly added. A sid whose
        connection is not open is never added.
        """
        with self._lock:
            joined = self._connections.get(sid)
            if joined is None:
                return False
            room = self.get_or_create(room_key)
            if sid in room.members:
                return False
            room.members.add(sid)
            joined.add(room_key)
            logger.info("Room %s now has %d members", room_key, len(room.members))
            return True

    def remove_member(self, room_key: str, sid: str) -> bool:
        """Remove ``sid`` from the room; an emptied room is deleted.

        Idempotent: returns False when the sid was not a member.
        """
        with self._lock:
            joined = self._connections.get(sid)
            if joined is not None:
                joined.discard(room_key)
            return self._discard(room_key, sid)

    def _discard(self, room_key: str, sid: str) -> bool:
        room = self._rooms.get(room_key)
        if room is None or sid not in room.members:
            return False
        room.members.discard(sid)
        if not room.members:
            del self._rooms[room_key]
            logger.info("Room %s deleted (no members left)", room_key)
        else:
            logger.info("Room %s now has %d members", room_key, len(room.members))
        return True

    def apply(self, room_key: str, mutator: Callable[[Room], None]) -> bool:
        """Run ``mutator`` against the room while holding the lock.

        Returns False (and does nothing) when the room does not exist.
        """
        with self._lock:
            room = self._rooms.get(room_key)
            if room is None:
                return False
            mutator(room)
            return True

    def members(self, room_key: str) -> FrozenSet[str]:
        with self._lock:
            room = self._rooms.get(room_key)
            return frozenset(room.members) if room else frozenset()

    def snapshot(self, room_key: str) -> Optional[dict]:
        with self._lock:
            room = self._rooms.get(room_key)
            return room.to_dict() if room else None

    def stats(self) -> Tuple[int, int]:
        """Return ``(active_rooms, total_members)``."""
        with self._lock:
            return len(self._rooms), sum(len(r.members) for r in self._rooms.values())

    def clear(self) -> None:
        with self._lock:
            self._rooms.clear()
            self._connections.clear()
