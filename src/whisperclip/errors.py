"""Error types raised by whisperclip components."""

from __future__ import annotations

from typing import Optional


class WhisperClipError(Exception):
    """Base class for every recoverable failure in a session."""


class ConfigError(WhisperClipError):
    """Settings or config file cannot be read, written or is incomplete."""


class DeviceError(WhisperClipError):
    """Audio input device is missing, busy or failed mid-capture."""


class AudioFileError(WhisperClipError):
    """Audio file cannot be created or read."""


class NetworkError(WhisperClipError):
    """Connection failure or timeout talking to an API endpoint."""


class ProtocolError(WhisperClipError):
    """Endpoint answered, but not with what we expected."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ClipboardError(WhisperClipError):
    """System clipboard rejected the write."""


class SessionActiveError(WhisperClipError):
    """A recording is already in progress."""
