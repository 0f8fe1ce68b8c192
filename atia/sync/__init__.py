"""
ATIA Synchronization Layer

Polling streams, manual refresh and the submission workflow.
"""

from atia.sync.scheduler import AsyncioScheduler, ManualScheduler
from atia.sync.submission import SubmissionController, SubmissionPhase, SubmissionState
from atia.sync.synchronizer import PollingStream, StreamPhase, StreamState, Synchronizer

__all__ = [
    "AsyncioScheduler",
    "ManualScheduler",
    "SubmissionController",
    "SubmissionPhase",
    "SubmissionState",
    "PollingStream",
    "StreamPhase",
    "StreamState",
    "Synchronizer",
]
