"""Storage and naming utilities."""

from __future__ import annotations

import logging
import os
import tempfile
import time
from datetime import datetime

logger = logging.getLogger(__name__)

RECORDING_PREFIX = "whisper"


def timestamp_slug(dt: datetime | None = None) -> str:
    now = dt or datetime.now()
    return now.strftime("%Y%m%d-%H%M%S")


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def default_recordings_dir() -> str:
    return os.path.join(tempfile.gettempdir(), "whisperclip")


def build_recording_path(recordings_dir: str, dt: datetime | None = None) -> str:
    """Return a fresh ``whisper-<timestamp>.wav`` path that does not exist yet."""
    ensure_dir(recordings_dir)
    base = f"{RECORDING_PREFIX}-{timestamp_slug(dt)}"
    candidate = os.path.join(recordings_dir, f"{base}.wav")
    counter = 1
    while os.path.exists(candidate):
        candidate = os.path.join(recordings_dir, f"{base}-{counter}.wav")
        counter += 1
    return candidate


def cleanup_recordings(recordings_dir: str, hours: int = 48) -> int:
    if hours <= 0 or not os.path.isdir(recordings_dir):
        return 0
    cutoff = time.time() - hours * 3600
    removed = 0
    for name in os.listdir(recordings_dir):
        if not (name.startswith(RECORDING_PREFIX) and name.endswith(".wav")):
            continue
        path = os.path.join(recordings_dir, name)
        try:
            if os.path.getmtime(path) < cutoff:
                os.remove(path)
                removed += 1
        except OSError as exc:
            logger.debug("Cleanup failed for %s: %s", path, exc)
    if removed:
        logger.info("Removed %s recordings older than %s hours", removed, hours)
    return removed
