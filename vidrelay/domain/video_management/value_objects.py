"""
Video Management Value Objects

Video status enumeration and the lifecycle state machine.
"""

from enum import Enum
from typing import FrozenSet


class VideoStatus(Enum):
    """Video lifecycle status."""
    CREATED = "CREATED"
    UPLOADING = "UPLOADING"
    QUEUED = "QUEUED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    def is_terminal(self) -> bool:
        """Check if status is terminal (completed or failed)."""
        return self in (VideoStatus.COMPLETED, VideoStatus.FAILED)

    def successors(self) -> FrozenSet["VideoStatus"]:
        """Statuses this status may move to."""
        return _SUCCESSORS[self]

    def predecessors(self) -> FrozenSet["VideoStatus"]:
        """Statuses that may move to this status."""
        return frozenset(
            status for status, successors in _SUCCESSORS.items() if self in successors
        )

    def can_transition_to(self, requested: "VideoStatus") -> bool:
        """Check if requested is a valid successor of this status."""
        return requested in _SUCCESSORS[self]


_SUCCESSORS = {
    VideoStatus.CREATED: frozenset({VideoStatus.UPLOADING, VideoStatus.FAILED}),
    VideoStatus.UPLOADING: frozenset({VideoStatus.QUEUED, VideoStatus.FAILED}),
    VideoStatus.QUEUED: frozenset({VideoStatus.PROCESSING, VideoStatus.FAILED}),
    VideoStatus.PROCESSING: frozenset({VideoStatus.COMPLETED, VideoStatus.FAILED}),
    VideoStatus.COMPLETED: frozenset(),
    VideoStatus.FAILED: frozenset(),
}


class TransitionOutcome(Enum):
    """Result of applying a requested status to a video."""
    APPLIED = "applied"
    REAFFIRMED = "reaffirmed"
    IGNORED = "ignored"

    @property
    def written(self) -> bool:
        """True when the store was written."""
        return self is not TransitionOutcome.IGNORED


def decide_transition(current: VideoStatus, requested: VideoStatus) -> TransitionOutcome:
    """
    Decide what happens when requested is applied to a video in current.

    Terminal statuses absorb every request. Requests that are neither the
    current status nor a valid successor are ignored, not rejected, so that
    duplicate and out-of-order external events cannot regress a video.

    Args:
        current: Status currently stored
        requested: Status being applied

    Returns:
        TransitionOutcome
    """
    if current.is_terminal():
        return TransitionOutcome.IGNORED
    if requested == current:
        return TransitionOutcome.REAFFIRMED
    if current.can_transition_to(requested):
        return TransitionOutcome.APPLIED
    return TransitionOutcome.IGNORED


def writable_from(requested: VideoStatus) -> FrozenSet[VideoStatus]:
    """
    Statuses from which requested may be written.

    Used by stores to apply decide_transition atomically as a
    compare-and-set on the current status.
    """
    allowed = set(requested.predecessors())
    if not requested.is_terminal():
        allowed.add(requested)
    return frozenset(allowed)
