from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Set


@dataclass
class Room:
    """Shared playback state for one room key.

    The playhead is the last position a member reported; the server never
    advances it on its own.
    """
    key: str
    members: Set[str] = field(default_factory=set)
    video_source: Optional[str] = None
    is_playing: bool = False
    playhead_seconds: float = 0.0

    def set_playing(self, playing: bool) -> None:
        self.is_playing = bool(playing)

    def seek(self, seconds: float) -> None:
        self.playhead_seconds = float(seconds)

    def set_video_source(self, url: str) -> None:
        # A new source always starts paused at the beginning
        self.video_source = url
        self.is_playing = False
        self.playhead_seconds = 0.0

    def to_dict(self):
        return {
            'currentTime': self.playhead_seconds,
            'isPlaying': self.is_playing,
            'videoUrl': self.video_source,
        }


@dataclass(frozen=True)
class ChatMessage:
    text: str
    author: str
    emitted_at: str

    @classmethod
    def create(cls, text: str, author: str, timestamp_format: str = '%I:%M:%S %p', now: Optional[datetime] = None) -> 'ChatMessage':
        stamp = (now or datetime.now()).strftime(timestamp_format)
        return cls(text=text.strip(), author=author.strip(), emitted_at=stamp)

    def to_dict(self):
        return {
            'message': self.text,
            'username': self.author,
            'timestamp': self.emitted_at,
        }
