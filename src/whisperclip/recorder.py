"""Audio recording utilities."""

from __future__ import annotations

import logging
import threading
import wave
from typing import Any, Callable, Dict, List, Optional

from .audio_utils import as_int16_mono
from .errors import AudioFileError, DeviceError, SessionActiveError
from .models import RecordingResult, RecordingSession

logger = logging.getLogger(__name__)

CHANNELS = 1
SAMPLE_WIDTH_BYTES = 2

StreamFactory = Callable[[int, int, Optional[str], int], Any]


def list_input_devices() -> List[Dict[str, Any]]:
    try:
        import sounddevice as sd
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise DeviceError("sounddevice is required for device detection.") from exc

    try:
        devices = sd.query_devices()
    except sd.PortAudioError as exc:  # pragma: no cover - environment-dependent
        raise DeviceError(f"Cannot query audio devices: {exc}") from exc
    return [d for d in devices if d.get("max_input_channels", 0) > 0]


def select_input_device(
    candidates: List[Dict[str, Any]],
    prefer_name: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Pick the first device whose name contains ``prefer_name``.

    ``None`` means "use the system default input".
    """
    if not prefer_name:
        return None
    name_lower = prefer_name.lower()
    for device in candidates:
        if name_lower in device.get("name", "").lower():
            return device
    logger.info("Input device %r not found, using default", prefer_name)
    return None


def find_input_device(prefer_name: Optional[str] = None) -> Optional[int]:
    if not prefer_name:
        return None
    device = select_input_device(list_input_devices(), prefer_name=prefer_name)
    return device.get("index") if device else None


def open_input_stream(
    sample_rate_hz: int,
    channels: int,
    device_name: Optional[str],
    block_size: int,
):
    """Open and start a blocking int16 input stream on the chosen device."""
    try:
        import sounddevice as sd
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise DeviceError("sounddevice is required for recording.") from exc

    device_index = find_input_device(device_name)
    try:
        stream = sd.InputStream(
            samplerate=sample_rate_hz,
            channels=channels,
            dtype="int16",
            device=device_index,
            blocksize=block_size,
        )
        stream.start()
    except (sd.PortAudioError, ValueError) as exc:
        raise DeviceError(f"Cannot open audio input: {exc}") from exc
    return stream


class CaptureSession:
    """Records one WAV file at a time from the input device.

    ``start`` opens the device and the file on the calling thread so setup
    failures surface immediately; a single background thread then reads
    blocks until ``stop`` sets the session's stop event. ``stop`` joins the
    thread, so the WAV header is final once it returns.
    """

    def __init__(
        self,
        device_name: Optional[str] = None,
        block_size: int = 1024,
        stream_factory: StreamFactory = open_input_stream,
    ) -> None:
        self.device_name = device_name
        self.block_size = block_size
        self._stream_factory = stream_factory
        self._lock = threading.Lock()
        self._session: Optional[RecordingSession] = None
        self._thread: Optional[threading.Thread] = None
        self._frames = 0
        self._error: Optional[BaseException] = None
        self._close_error: Optional[OSError] = None

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._session is not None

    @property
    def session(self) -> Optional[RecordingSession]:
        return self._session

    def start(self, file_path: str, sample_rate_hz: int) -> RecordingSession:
        with self._lock:
            if self._session is not None:
                raise SessionActiveError(
                    f"Already recording into {self._session.target_path}"
                )

            stream = self._stream_factory(
                sample_rate_hz, CHANNELS, self.device_name, self.block_size
            )
            try:
                handle = wave.open(file_path, "wb")
                handle.setnchannels(CHANNELS)
                handle.setsampwidth(SAMPLE_WIDTH_BYTES)
                handle.setframerate(sample_rate_hz)
            except OSError as exc:
                _close_stream(stream)
                raise AudioFileError(f"Cannot create {file_path}: {exc}") from exc

            session = RecordingSession(
                target_path=file_path, sample_rate_hz=sample_rate_hz
            )
            self._frames = 0
            self._error = None
            self._close_error = None
            self._thread = threading.Thread(
                target=self._capture_loop,
                args=(session, stream, handle),
                name="whisperclip-capture",
                daemon=True,
            )
            self._session = session
            self._thread.start()

        logger.info("Recording into %s at %s Hz", file_path, sample_rate_hz)
        return session

    def stop(self, session: Optional[RecordingSession] = None) -> Optional[RecordingResult]:
        """Stop the active recording and return what was written.

        Stopping with nothing active, or with a handle that is no longer the
        active session, does nothing and returns ``None``.
        """
        with self._lock:
            active = self._session
            if active is None or (session is not None and session is not active):
                logger.info("Stop requested but not recording")
                return None

            active.stop_event.set()
            if self._thread is not None:
                self._thread.join()
            self._session = None
            self._thread = None
            frames = self._frames
            error, self._error = self._error, None
            close_error, self._close_error = self._close_error, None

        if error is not None:
            raise DeviceError(f"Recording failed: {error}") from error
        if close_error is not None:
            raise AudioFileError(
                f"Cannot finalize {active.target_path}: {close_error}"
            ) from close_error

        logger.info("Recording stopped: %s (%s frames)", active.target_path, frames)
        return RecordingResult(
            audio_path=active.target_path,
            duration_seconds=frames / active.sample_rate_hz,
            frames=frames,
        )

    def _capture_loop(self, session: RecordingSession, stream, handle) -> None:
        frames = 0
        try:
            while not session.stop_event.is_set():
                data, overflowed = stream.read(self.block_size)
                if overflowed:
                    logger.debug("Input overflow in %s", session.target_path)
                block = as_int16_mono(data)
                if block.size:
                    handle.writeframes(block.tobytes())
                    frames += block.shape[0]
        except Exception as exc:
            logger.exception("Capture loop failed")
            self._error = exc
        finally:
            self._frames = frames
            try:
                _close_stream(stream)
            except Exception as exc:
                logger.exception("Closing input stream failed")
                self._error = self._error or exc
            try:
                handle.close()
            except OSError as exc:
                logger.exception("Cannot finalize %s", session.target_path)
                self._close_error = exc


def _close_stream(stream) -> None:
    try:
        stream.stop()
    finally:
        stream.close()
