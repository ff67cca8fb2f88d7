"""Caption sessions: the adapter between the engine and its presentation layer."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Iterable
from datetime import UTC, datetime
from uuid import uuid4

from shared.models import TrackFormat, TranscriptItem
from shared.utils import config, sanitize_filename, setup_logging

from .drivers import CueProvider
from .errors import SessionNotFoundError
from .serializer import TRACK_FORMATS, TrackSerializer
from .store import CueInput, CueStore
from .synchronizer import PlaybackSynchronizer, TickResult
from .timecode import encode

logger = setup_logging("caption-session")


class CaptionSession:
    """One media item's caption state: a store plus its synchronizer.

    The store is only ever replaced wholesale with a fully built one, so the
    synchronizer never sees a half-constructed track.
    """

    def __init__(self, session_id: str | None = None, serializer: TrackSerializer | None = None):
        self.session_id = session_id or str(uuid4())
        self.serializer = serializer or TrackSerializer()
        self.synchronizer = PlaybackSynchronizer()
        self.media_name: str | None = None
        self.created_at = datetime.now(UTC)
        self.last_position: float | None = None

    @property
    def store(self) -> CueStore:
        return self.synchronizer.store

    def load(self, raw_cues: Iterable[CueInput], media_name: str | None = None) -> CueStore:
        """Build a store from provider records and make it the active track."""
        store = CueStore.build(raw_cues)
        self._swap(store)
        self.media_name = media_name or self.media_name
        logger.info(f"Session {self.session_id} loaded {len(store)} cues")
        return store

    async def load_from(self, provider: CueProvider, media_name: str = "video") -> CueStore:
        """Fetch cues from ``provider`` and load them.

        Cancelling the awaiting task before the provider resolves leaves the
        current store untouched.
        """
        logger.info(f"Session {self.session_id} requesting cues from '{provider.name}' for {media_name}")
        raw_cues = await provider.fetch_cues(media_name)
        return self.load(raw_cues, media_name=media_name)

    def import_track(self, content: str) -> CueStore:
        """Parse a WebVTT document and make it the active track."""
        store = self.serializer.parse(content)
        self._swap(store)
        logger.info(f"Session {self.session_id} imported {len(store)} cues")
        return store

    def reset(self) -> None:
        self._swap(CueStore.empty())
        self.media_name = None
        logger.info(f"Session {self.session_id} reset")

    def _swap(self, store: CueStore) -> None:
        self.synchronizer.replace_store(store)
        self.last_position = None

    def tick(self, position: float) -> TickResult:
        result = self.synchronizer.tick(position)
        self.last_position = position
        return result

    def seek(self, index: int) -> float:
        return self.synchronizer.seek_to(index)

    def transcript(self) -> list[TranscriptItem]:
        """Rows for the transcript panel, with the active cue flagged."""
        active = self.synchronizer.active_index
        return [
            TranscriptItem(
                id=cue.id,
                start=cue.start,
                end=cue.end,
                text=cue.text,
                timestamp=encode(cue.start),
                active=index == active,
            )
            for index, cue in enumerate(self.store.iterate())
        ]

    def export(self, track_format: TrackFormat | str = TrackFormat.VTT) -> str:
        return self.serializer.render_as(self.store, track_format)

    @staticmethod
    def export_filename(track_format: TrackFormat | str = TrackFormat.VTT) -> str:
        extension = TRACK_FORMATS[TrackFormat(track_format)]["extension"]
        basename = config.get("caption_export_basename", "subtitles_en")
        return sanitize_filename(f"{basename}.{extension}")


class CaptionSessionManager:
    """Keep caption sessions by id, evicting the oldest beyond a limit."""

    def __init__(self, max_sessions: int | None = None) -> None:
        self.max_sessions = max_sessions or int(config.get("caption_max_sessions", 100))
        self._sessions: OrderedDict[str, CaptionSession] = OrderedDict()

    def create(self) -> CaptionSession:
        return self.register(CaptionSession())

    def register(self, session: CaptionSession) -> CaptionSession:
        """Track a (usually already loaded) session, evicting the oldest beyond the limit."""
        self._sessions[session.session_id] = session
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.warning(f"Evicted caption session {evicted_id} (limit {self.max_sessions})")
        return session

    def get(self, session_id: str) -> CaptionSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Caption session {session_id} not found")
        return session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def reset(self) -> None:
        """Drop all sessions (primarily for tests)."""
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions


# Shared manager instance
session_manager = CaptionSessionManager()
