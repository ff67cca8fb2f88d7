from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CUE_TIME_SEPARATOR = "-->"


class TrackFormat(str, Enum):
    VTT = "vtt"
    SRT = "srt"

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None


class SyncState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


class RawCue(BaseModel):
    """Cue record as delivered by a transcription/translation provider."""

    model_config = ConfigDict(extra="ignore")

    start: float = Field(..., description="Start time in seconds")
    end: float = Field(..., description="End time in seconds")
    text: str = Field(..., description="Caption text")
    id: int | None = Field(default=None, description="Optional external cue id")


def _whole_ms(seconds: float) -> int:
    return int(Decimal(str(seconds)) * 1000)


class Cue(BaseModel):
    """Immutable timed caption entry.

    Times are half-open: a cue covers ``start <= t < end``.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="Cue id, unique within a store")
    start: float = Field(..., ge=0, allow_inf_nan=False, description="Start time in seconds")
    end: float = Field(..., ge=0, allow_inf_nan=False, description="End time in seconds")
    text: str = Field(..., description="Caption text, may span several lines")

    @field_validator("text")
    @classmethod
    def _normalize_text(cls, value: str) -> str:
        lines = [line.rstrip() for line in value.strip().splitlines()]
        if not lines:
            raise ValueError("cue text must not be empty")
        if any(not line for line in lines):
            raise ValueError("cue text must not contain blank lines")
        text = "\n".join(lines)
        if CUE_TIME_SEPARATOR in text:
            raise ValueError(f"cue text must not contain '{CUE_TIME_SEPARATOR}'")
        return text

    @model_validator(mode="after")
    def _check_interval(self) -> "Cue":
        # Compared in whole milliseconds, the resolution cues are written at.
        if _whole_ms(self.start) >= _whole_ms(self.end):
            raise ValueError(
                f"cue start ({self.start}) must be at least 1ms before end ({self.end})"
            )
        return self

    @property
    def duration(self) -> float:
        return self.end - self.start


class SessionCreateRequest(BaseModel):
    cues: list[RawCue] | None = Field(
        default=None, description="Finished cue list; when omitted the provider is queried"
    )
    provider: str | None = Field(default=None, description="Cue provider name (mock, http)")
    media_name: str = Field(default="video", description="Name of the media item")


class TranscriptItem(BaseModel):
    """Row of the transcript panel."""

    id: int
    start: float
    end: float
    text: str
    timestamp: str = Field(..., description="Encoded start time (HH:MM:SS.mmm)")
    active: bool = False


class SessionResponse(BaseModel):
    session_id: str
    cue_count: int
    duration: float
    cues: list[TranscriptItem]


class TickRequest(BaseModel):
    position: float = Field(..., allow_inf_nan=False, description="Current playback position in seconds")


class TickResponse(BaseModel):
    position: float
    state: SyncState
    active_index: int | None = None
    active_cue: Cue | None = None
    entered: int | None = None
    exited: int | None = None


class SeekResponse(BaseModel):
    index: int
    cue_id: int
    position: float


class TrackImportRequest(BaseModel):
    content: str = Field(..., description="WebVTT document body")


class APIResponse(BaseModel):
    """Generic API response wrapper"""

    success: bool = True
    message: str = "Success"
    data: Any | None = None
    error: str | None = None
    timestamp: datetime = Field(default_factory=datetime.now)

