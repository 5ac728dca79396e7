"""Audio helpers."""

from __future__ import annotations

import wave
from dataclasses import dataclass

import numpy as np

from .errors import AudioFileError


@dataclass
class WavInfo:
    channels: int
    sample_rate_hz: int
    sample_width: int
    frames: int

    @property
    def duration_seconds(self) -> float:
        if not self.sample_rate_hz:
            return 0.0
        return self.frames / self.sample_rate_hz


def as_int16_mono(block) -> np.ndarray:
    """Collapse a captured block to a 1-D int16 array."""
    data = np.asarray(block)
    if data.ndim > 1:
        if data.shape[1] == 1:
            data = data[:, 0]
        else:
            data = data.mean(axis=1)
    if data.dtype == np.int16:
        return data
    if np.issubdtype(data.dtype, np.floating):
        data = np.clip(data, -1.0, 1.0) * 32767.0
    return data.astype(np.int16)


def describe_wav(path: str) -> WavInfo:
    try:
        with wave.open(path, "rb") as handle:
            return WavInfo(
                channels=handle.getnchannels(),
                sample_rate_hz=handle.getframerate(),
                sample_width=handle.getsampwidth(),
                frames=handle.getnframes(),
            )
    except (OSError, EOFError, wave.Error) as exc:
        raise AudioFileError(f"Cannot read WAV file {path}: {exc}") from exc


def write_silence(path: str, seconds: float, sample_rate_hz: int = 44100) -> None:
    frames = int(seconds * sample_rate_hz)
    with wave.open(path, "wb") as out:
        out.setnchannels(1)
        out.setsampwidth(2)
        out.setframerate(sample_rate_hz)
        out.writeframes(np.zeros(frames, dtype=np.int16).tobytes())
