import json
import time

import numpy as np
import pytest
import requests


class FakeInputStream:
    """Stands in for ``sounddevice.InputStream`` opened in blocking mode.

    With ``total_frames`` set it yields that many frames of silence and then
    empty blocks; otherwise it yields silence forever.
    """

    def __init__(self, sample_rate_hz, channels, total_frames=None, fail_after=None):
        self.sample_rate_hz = sample_rate_hz
        self.channels = channels
        self.frames_left = total_frames
        self.fail_after = fail_after
        self.reads = 0
        self.stopped = False
        self.closed = False

    def read(self, frames):
        self.reads += 1
        if self.fail_after is not None and self.reads > self.fail_after:
            raise OSError("device unplugged")
        if self.frames_left is None:
            count = frames
            time.sleep(0.001)
        else:
            count = min(frames, self.frames_left)
            self.frames_left -= count
            if count == 0:
                time.sleep(0.005)
        return np.zeros((count, self.channels), dtype=np.int16), False

    def stop(self):
        self.stopped = True

    def close(self):
        self.closed = True


class FakeStreamFactory:
    def __init__(self, total_frames_seconds=None, fail_after=None):
        self.total_frames_seconds = total_frames_seconds
        self.fail_after = fail_after
        self.streams = []

    def __call__(self, sample_rate_hz, channels, device_name, block_size):
        total = None
        if self.total_frames_seconds is not None:
            total = int(self.total_frames_seconds * sample_rate_hz)
        stream = FakeInputStream(
            sample_rate_hz, channels, total_frames=total, fail_after=self.fail_after
        )
        self.streams.append(stream)
        return stream


class FakeScheduler:
    """Records ``root.after`` jobs and runs them on demand."""

    def __init__(self):
        self.jobs = {}
        self.next_id = 0

    def after(self, _delay_ms, callback):
        self.next_id += 1
        self.jobs[self.next_id] = callback
        return self.next_id

    def after_cancel(self, job):
        self.jobs.pop(job, None)

    def run_pending(self):
        jobs, self.jobs = self.jobs, {}
        for callback in jobs.values():
            callback()


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def make_response(status_code, payload=None, text=None):
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    if payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
    else:
        response._content = (text or "").encode("utf-8")
    return response


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


@pytest.fixture
def stream_factory():
    return FakeStreamFactory()
