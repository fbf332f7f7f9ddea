"""Context object shared across worker threads."""

from dataclasses import dataclass
from typing import Optional

from oneshot.lifecycle.state import ServerLifecycle


@dataclass(frozen=True)
class WorkerContext:
    """Configuration handed to every connection worker.

    The base directory is only ever read; the lifecycle does its own locking.
    """

    directory: str
    lifecycle: Optional[ServerLifecycle] = None
