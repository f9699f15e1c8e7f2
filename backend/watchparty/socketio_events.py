from flask import current_app, request
from typing import Any, Optional
import logging
import math

from watchparty.services.rooms import SessionHandler

logger = logging.getLogger(__name__)


def handle_connect(auth=None):
    _sessions().connect(_get_sid())


def handle_disconnect(reason=None):
    _sessions().disconnect(_get_sid())


def handle_join_room(data):
    room_key = _room_key(data)
    if room_key is None:
        return _dropped('joinRoom', data)
    _sessions().join(_get_sid(), room_key)


def handle_leave_room(data):
    room_key = _room_key(data)
    if room_key is None:
        return _dropped('leaveRoom', data)
    _sessions().leave(_get_sid(), room_key)


def handle_play(data):
    room_key = _room_key(data)
    if room_key is None:
        return _dropped('play', data)
    _sessions().set_playing(_get_sid(), room_key, True)


def handle_pause(data):
    room_key = _room_key(data)
    if room_key is None:
        return _dropped('pause', data)
    _sessions().set_playing(_get_sid(), room_key, False)


def handle_sync_time(data):
    room_key = _room_key(data)
    current_time = _playhead(data.get('currentTime') if isinstance(data, dict) else None)
    if room_key is None or current_time is None:
        return _dropped('syncTime', data)
    _sessions().sync_time(_get_sid(), room_key, current_time)


def handle_set_video_url(data):
    room_key = _room_key(data)
    url = data.get('videoUrl') if isinstance(data, dict) else None
    if room_key is None or not isinstance(url, str):
        return _dropped('setVideoUrl', data)
    _sessions().set_video_source(_get_sid(), room_key, url)


def handle_message(data):
    room_key = _room_key(data)
    if room_key is None or not isinstance(data, dict):
        return _dropped('message', data)
    text, author = data.get('message'), data.get('username')
    if not isinstance(text, str) or not isinstance(author, str):
        return _dropped('message', data)
    _sessions().send_chat(_get_sid(), room_key, text, author)


# ---- payload helpers ----

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _sessions() -> SessionHandler:
    return current_app.extensions['room_sessions']


def _room_key(data: Any) -> Optional[str]:
    """Room key from a bare string payload or a ``roomId``/``roomKey`` field."""
    if isinstance(data, dict):
        data = data.get('roomId', data.get('roomKey'))
    return data if isinstance(data, str) else None


def _playhead(value: Any) -> Optional[float]:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    if not math.isfinite(value) or value < 0:
        return None
    return value


def _dropped(event: str, data: Any) -> None:
    logger.debug("Malformed %s payload dropped: %r", event, data)


def register_socketio_handlers(socketio, namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``.

    Handlers resolve the session handler from ``current_app.extensions`` so
    each application instance works against its own registry.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('joinRoom', handle_join_room, namespace=namespace)
    socketio.on_event('leaveRoom', handle_leave_room, namespace=namespace)
    socketio.on_event('play', handle_play, namespace=namespace)
    socketio.on_event('pause', handle_pause, namespace=namespace)
    socketio.on_event('syncTime', handle_sync_time, namespace=namespace)
    socketio.on_event('setVideoUrl', handle_set_video_url, namespace=namespace)
    socketio.on_event('message', handle_message, namespace=namespace)
