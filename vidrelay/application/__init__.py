"""
Application Layer

Services coordinating the upload and broadcast use cases.
"""

from .broadcast_hub import BroadcastHub
from .dependency_container import DependencyContainer, DependencyNotFoundError
from .keyed_dispatcher import KeyedDispatcher
from .subscriber_registry import SubscriberRegistry
from .upload_coordinator import CreatedVideo, UploadCoordinator
from .upload_service import DispatchedJob, UploadService

__all__ = [
    'BroadcastHub',
    'DependencyContainer',
    'DependencyNotFoundError',
    'KeyedDispatcher',
    'SubscriberRegistry',
    'CreatedVideo',
    'UploadCoordinator',
    'DispatchedJob',
    'UploadService',
]
