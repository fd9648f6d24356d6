"""
Video Management Domain

Video records and their lifecycle state machine.
"""

from .entities import Video
from .value_objects import TransitionOutcome, VideoStatus, decide_transition, writable_from
from .services import VideoManager
from .repositories import VideoRepository

__all__ = [
    'Video',
    'VideoStatus',
    'TransitionOutcome',
    'decide_transition',
    'writable_from',
    'VideoManager',
    'VideoRepository',
]
