import argparse
import os
import sys
import tempfile
import time
import wave

import numpy as np

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from whisperclip.audio_utils import describe_wav
from whisperclip.errors import WhisperClipError
from whisperclip.recorder import CaptureSession, find_input_device, list_input_devices


def _describe_device(name: str | None) -> None:
    devices = list_input_devices()
    index = find_input_device(name)
    if index is None:
        print("Input device: system default")
        return
    info = next((d for d in devices if d.get("index") == index), {})
    print(f"Input device: {info.get('name', '')}")
    print(f"Index: {index}")
    print(f"Max input channels: {info.get('max_input_channels', 0)}")
    print(f"Default sample rate: {info.get('default_samplerate', '')}")


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--device", help="Device name substring.")
    parser.add_argument("--seconds", type=float, default=3.0, help="Test duration.")
    parser.add_argument("--rate", type=int, default=44100, help="Sample rate.")
    parser.add_argument("--keep", action="store_true", help="Keep the WAV file.")
    args = parser.parse_args()

    _describe_device(args.device)

    handle, path = tempfile.mkstemp(prefix="whisper-diag-", suffix=".wav")
    os.close(handle)
    capture = CaptureSession(device_name=args.device)
    try:
        capture.start(path, args.rate)
        print(f"Recording {args.seconds:g}s into {path}...")
        time.sleep(args.seconds)
        result = capture.stop()
    except WhisperClipError as exc:
        print(f"Capture failed: {exc}")
        return 1

    info = describe_wav(path)
    print(
        f"Frames: {result.frames} ({info.duration_seconds:.2f}s, "
        f"{info.sample_rate_hz} Hz, {info.channels} ch)"
    )
    with wave.open(path, "rb") as wav:
        data = np.frombuffer(wav.readframes(wav.getnframes()), dtype=np.int16)
    if data.size:
        samples = data.astype("float32") / 32768.0
        rms = float(np.sqrt(np.mean(samples**2)))
        peak = float(np.max(np.abs(samples)))
        print(f"RMS {rms:.3f} | Peak {peak:.3f}")
    else:
        print("No samples captured.")

    if not args.keep:
        os.remove(path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
