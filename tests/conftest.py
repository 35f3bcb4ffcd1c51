"""Shared fakes for the external collaborators."""

from datetime import datetime

import pytest

from console_maint import Dispatcher, DispatcherError, ScheduledJob


class MemoryDispatcher(Dispatcher):
    """Dispatcher keeping jobs in a dict; can be told to fail."""

    def __init__(self, fail_after=None):
        self.jobs = {}
        self.fail_after = fail_after
        self.scheduled = 0
        self._counter = 0

    def schedule(self, payload, fires_at: datetime) -> str:
        if self.fail_after is not None and self.scheduled >= self.fail_after:
            raise DispatcherError("dispatcher unavailable")
        self._counter += 1
        self.scheduled += 1
        job_id = f"job-{self._counter}"
        self.jobs[job_id] = ScheduledJob(job_id, fires_at, dict(payload))
        return job_id

    def cancel(self, job_id: str) -> None:
        self.jobs.pop(job_id, None)

    def list_scheduled(self):
        return sorted(self.jobs.values(), key=lambda j: j.fires_at)


class MemoryKV:
    """Key/value store backed by a dict."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value


@pytest.fixture
def dispatcher():
    return MemoryDispatcher()


@pytest.fixture
def kv():
    return MemoryKV()
