"""Shared types used across modules."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class RequestContext:
    """Per-request context attached by middleware."""

    request_id: str
    path: str | None = None
    method: str | None = None


class JobState(str, Enum):
    """Lifecycle of a single PDF render job."""

    QUEUED = "queued"
    ADMITTED = "admitted"
    RENDERING = "rendering"
    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed_out"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.TIMED_OUT, JobState.FAILED)
