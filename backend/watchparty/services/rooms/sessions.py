import logging
from datetime import datetime
from typing import Callable, Optional

from watchparty.models import ChatMessage, Room
from .broadcaster import Broadcaster
from .registry import RoomRegistry

logger = logging.getLogger(__name__)


class SessionHandler:
    """Apply one connection's commands to the registry and fan out the results.

    A connection starts unjoined, joins any number of rooms and ends with
    ``disconnect``. Commands against a room that does not exist (never
    joined, or emptied a moment ago) are dropped without error, as are
    commands from a connection that has already disconnected.

    Transient controls (play, pause, syncTime) go to the other members only;
    durable changes (video source, chat) are echoed to the sender too.
    """

    def __init__(self, registry: RoomRegistry, broadcaster: Broadcaster,
                 timestamp_format: str = '%I:%M:%S %p',
                 clock: Optional[Callable[[], datetime]] = None) -> None:
        self.registry = registry
        self.broadcaster = broadcaster
        self.timestamp_format = timestamp_format
        self._clock = clock or datetime.now

    def connect(self, sid: str) -> None:
        self.registry.open_connection(sid)
        logger.info("Connection %s opened", sid)

    def disconnect(self, sid: str) -> None:
        left = self.registry.close_connection(sid)
        logger.info("Connection %s closed (left %d rooms)", sid, len(left))
        for room_key in left:
            self.broadcaster.to_room(room_key, 'userLeft', sid)

    def join(self, sid: str, room_key: str) -> bool:
        # Snapshot and its send happen under the room lock, so no change to
        # the room can be broadcast between them
        with self.broadcaster.room_lock(room_key):
            is_new_member = self.registry.add_member(room_key, sid)
            # Membership is re-read so a racing disconnect is seen
            if sid not in self.registry.members(room_key):
                logger.debug("Join of %s by closed connection %s dropped", room_key, sid)
                return False
            state = self.registry.snapshot(room_key)
            if state is None:
                return False
            logger.info("Connection %s joined room %s", sid, room_key)
            self.broadcaster.send(sid, 'roomState', state)
            if is_new_member:
                self.broadcaster.to_room(room_key, 'userJoined', sid, exclude=(sid,))
            return True

    def leave(self, sid: str, room_key: str) -> bool:
        with self.broadcaster.room_lock(room_key):
            if not self.registry.remove_member(room_key, sid):
                return False
            logger.info("Connection %s left room %s", sid, room_key)
            self.broadcaster.to_room(room_key, 'userLeft', sid)
            return True

    def set_playing(self, sid: str, room_key: str, playing: bool) -> bool:
        event = 'play' if playing else 'pause'
        with self.broadcaster.room_lock(room_key):
            if not self._apply(sid, room_key, lambda room: room.set_playing(playing)):
                return False
            logger.info("%s command sent to room %s", event.capitalize(), room_key)
            self.broadcaster.to_room(room_key, event, exclude=(sid,))
            return True

    def sync_time(self, sid: str, room_key: str, current_time: float) -> bool:
        with self.broadcaster.room_lock(room_key):
            if not self._apply(sid, room_key, lambda room: room.seek(current_time)):
                return False
            logger.debug("Time sync: %ss in room %s", current_time, room_key)
            self.broadcaster.to_room(room_key, 'syncTime', {'currentTime': current_time}, exclude=(sid,))
            return True

    def set_video_source(self, sid: str, room_key: str, url: str) -> bool:
        with self.broadcaster.room_lock(room_key):
            if not self._apply(sid, room_key, lambda room: room.set_video_source(url)):
                return False
            logger.info("Video URL set for room %s: %s", room_key, url)
            self.broadcaster.to_room(room_key, 'videoUrlChanged', {'videoUrl': url})
            return True

    def send_chat(self, sid: str, room_key: str, text: str, author: str) -> bool:
        if not text.strip() or not author.strip():
            logger.debug("Empty chat message from %s dropped", sid)
            return False
        if not self.registry.is_open(sid) or self.registry.get(room_key) is None:
            return False
        message = ChatMessage.create(text, author, self.timestamp_format, now=self._clock())
        logger.info("Message broadcast in room %s by %s", room_key, message.author)
        self.broadcaster.to_room(room_key, 'message', message.to_dict())
        return True

    def _apply(self, sid: str, room_key: str, mutator: Callable[[Room], None]) -> bool:
        if not self.registry.is_open(sid):
            logger.debug("Command for room %s from closed connection %s dropped", room_key, sid)
            return False
        if not self.registry.apply(room_key, mutator):
            logger.debug("Command for unknown room %s dropped", room_key)
            return False
        return True
