"""
Broadcast Hub

Relays job log lines and status changes from the event bus to the
subscribers of each video's channel, applying status changes to the
stored video on the way.
"""

import logging
import threading
from typing import Optional

from vidrelay.domain.errors import VideoNotFoundError
from vidrelay.domain.events import JobStatusEvent, LogEvent, VideoEvent, status_message
from vidrelay.domain.video_management import TransitionOutcome, VideoManager, VideoStatus

from .keyed_dispatcher import KeyedDispatcher
from .subscriber_registry import SubscriberRegistry

logger = logging.getLogger(__name__)

# Statuses the transcoding job is allowed to report
JOB_REPORTED_STATUSES = frozenset(
    {VideoStatus.PROCESSING, VideoStatus.FAILED, VideoStatus.COMPLETED}
)

JOB_FAILURE_MESSAGE = "Transcoding job reported failure"


class BroadcastHub:
    """
    Routes video events to channels.

    Events are processed through a KeyedDispatcher keyed by video id, so
    events of one video are handled in the order received while different
    videos proceed concurrently.
    """

    def __init__(
        self,
        video_manager: VideoManager,
        registry: SubscriberRegistry,
        dispatcher: Optional[KeyedDispatcher] = None,
        event_bus=None,
    ):
        """
        Args:
            video_manager: Domain service owning video status
            registry: Channel membership and delivery
            dispatcher: Per-video executor, a default one is created if None
            event_bus: Source of events for start(); optional when events
                are fed through handle_event() directly
        """
        self.video_manager = video_manager
        self.registry = registry
        self.dispatcher = dispatcher or KeyedDispatcher(thread_name_prefix="hub")
        self.event_bus = event_bus
        self._listener: Optional[threading.Thread] = None

    def handle_event(self, event: VideoEvent) -> None:
        """Queue an event behind earlier events of the same video."""
        self.dispatcher.submit(event.video_id, self._process, event)

    def notify_status(self, video_id: str, status: VideoStatus) -> None:
        """Queue a broadcast of a status change that was already stored."""
        self.dispatcher.submit(video_id, self._relay_status, video_id, status)

    def _process(self, event: VideoEvent) -> None:
        if isinstance(event, LogEvent):
            self.registry.broadcast(event.video_id, event.to_message())
        elif isinstance(event, JobStatusEvent):
            self._process_status(event)
        else:
            logger.warning(f"Unhandled event type {type(event).__name__}")

    def _process_status(self, event: JobStatusEvent) -> None:
        try:
            status = event.video_status()
        except ValueError:
            logger.warning(f"Unknown status {event.status!r} for video {event.video_id}")
            return

        if status not in JOB_REPORTED_STATUSES:
            logger.debug(f"Ignoring job-reported status {status.value} for video {event.video_id}")
            return

        error_message = JOB_FAILURE_MESSAGE if status == VideoStatus.FAILED else None
        try:
            outcome = self.video_manager.apply_status(event.video_id, status, error_message)
        except VideoNotFoundError:
            logger.warning(f"Status {status.value} for unknown video {event.video_id} dropped")
            return

        if outcome is TransitionOutcome.IGNORED:
            return

        self._relay_status(event.video_id, status)

    def _relay_status(self, video_id: str, status: VideoStatus) -> None:
        delivered = self.registry.broadcast(video_id, status_message(status))
        logger.info(f"Video {video_id} is {status.value} ({delivered} subscriber(s) notified)")

    def start(self) -> None:
        """Run the event bus listener on a background thread."""
        if self.event_bus is None:
            raise RuntimeError("BroadcastHub has no event bus to listen on")
        if self._listener is not None and self._listener.is_alive():
            return

        self._listener = threading.Thread(
            target=self.event_bus.listen,
            args=(self.handle_event,),
            name="event-bus-listener",
            daemon=True,
        )
        self._listener.start()
        logger.info("Broadcast hub started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop listening and let queued events finish."""
        if self.event_bus is not None:
            self.event_bus.stop()
        if self._listener is not None:
            self._listener.join(timeout)
            self._listener = None
        self.dispatcher.shutdown(wait=True)
        logger.info("Broadcast hub stopped")
