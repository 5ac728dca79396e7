"""Data models for whisperclip."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


class SessionState(enum.Enum):
    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    REFINING = "refining"


@dataclass
class RecordingSession:
    target_path: str
    sample_rate_hz: int
    started_at: datetime = field(default_factory=datetime.now)
    stop_event: threading.Event = field(default_factory=threading.Event)

    @property
    def is_active(self) -> bool:
        return not self.stop_event.is_set()


@dataclass
class RecordingResult:
    audio_path: str
    duration_seconds: float
    frames: int


@dataclass
class TranscriptResult:
    raw_text: str
    refined_text: Optional[str] = None

    @property
    def final_text(self) -> str:
        if self.refined_text is not None:
            return self.refined_text
        return self.raw_text
