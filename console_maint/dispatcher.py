"""
Reminder dispatchers.

A dispatcher accepts one-shot jobs for a future instant and delivers
them when they come due. The engine only needs the contract defined by
Dispatcher; YamlDispatcher keeps pending jobs in a YAML spool file that
a delivery loop (or the CLI) can drain.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from .errors import DispatcherError

logger = logging.getLogger(__name__)


@dataclass
class ScheduledJob:
    """A pending reminder job as reported by a dispatcher."""

    job_id: str
    fires_at: datetime
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def item_id(self):
        return self.payload.get("itemId")


class Dispatcher(ABC):
    """Contract for one-shot reminder delivery backends."""

    @abstractmethod
    def schedule(self, payload: Dict[str, Any], fires_at: datetime) -> str:
        """Schedule a reminder and return its job id."""

    @abstractmethod
    def cancel(self, job_id: str) -> None:
        """Cancel a job. Unknown ids are ignored."""

    @abstractmethod
    def list_scheduled(self) -> List[ScheduledJob]:
        """All jobs that have not fired or been cancelled."""

    def cancel_for_item(self, item_id: str) -> int:
        """
        Cancel every job whose payload belongs to item_id.

        Scans list_scheduled(); backends with native tag cancellation
        may override this. Returns the number of jobs cancelled.
        """
        cancelled = 0
        for job in self.list_scheduled():
            if job.item_id == item_id:
                self.cancel(job.job_id)
                cancelled += 1
        return cancelled


class YamlDispatcher(Dispatcher):
    """Dispatcher that spools pending jobs to a YAML file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.RLock()

    def _load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r") as fp:
                data = yaml.load(fp, Loader=yaml.SafeLoader) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise DispatcherError(f"Failed to read spool {self.path}: {exc}") from exc
        return data.get("jobs") or []

    def _dump(self, jobs: List[Dict[str, Any]]) -> None:
        try:
            with open(self.path, "w") as fp:
                yaml.dump(
                    {"jobs": jobs},
                    fp,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    width=120,
                )
        except (OSError, yaml.YAMLError) as exc:
            raise DispatcherError(f"Failed to write spool {self.path}: {exc}") from exc

    @staticmethod
    def _to_job(dct: Dict[str, Any]) -> ScheduledJob:
        return ScheduledJob(
            dct["id"], datetime.fromisoformat(dct["firesAt"]), dct.get("payload") or {}
        )

    def schedule(self, payload: Dict[str, Any], fires_at: datetime) -> str:
        if not isinstance(payload, dict):
            raise DispatcherError("Job payload must be a mapping")
        job_id = uuid.uuid4().hex
        with self._lock:
            jobs = self._load()
            jobs.append(
                {
                    "id": job_id,
                    "firesAt": fires_at.isoformat(timespec="seconds"),
                    "payload": dict(payload),
                }
            )
            self._dump(jobs)
        logger.debug("Spooled job %s for %s", job_id, fires_at.isoformat())
        return job_id

    def cancel(self, job_id: str) -> None:
        with self._lock:
            jobs = self._load()
            remaining = [j for j in jobs if j["id"] != job_id]
            if len(remaining) != len(jobs):
                self._dump(remaining)
                logger.debug("Cancelled job %s", job_id)

    def list_scheduled(self) -> List[ScheduledJob]:
        return sorted((self._to_job(j) for j in self._load()), key=lambda j: j.fires_at)

    def due_jobs(self, now: datetime) -> List[ScheduledJob]:
        """Jobs whose fire time is at or before now."""
        return [j for j in self.list_scheduled() if j.fires_at <= now]

    def pop_due(self, now: datetime) -> List[ScheduledJob]:
        """Remove and return the jobs that are due for delivery."""
        with self._lock:
            due = self.due_jobs(now)
            if due:
                due_ids = {j.job_id for j in due}
                self._dump([j for j in self._load() if j["id"] not in due_ids])
        return due
