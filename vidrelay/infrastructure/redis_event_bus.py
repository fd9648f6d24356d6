"""
Redis Event Bus

Listens on the Redis pub/sub channels the transcoding job publishes to and
decodes their messages into domain events.

Channels:
    logs:<video_id>  log lines, ``{"log": "..."}`` or raw text
    job-updates      status reports, ``{"videoId": "...", "status": "..."}``
"""

import json
import logging
import threading
from typing import Callable, Dict, Optional

import redis
from redis.exceptions import RedisError

from vidrelay.domain.events import JobStatusEvent, LogEvent, VideoEvent

logger = logging.getLogger(__name__)

LOG_CHANNEL_PATTERN = "logs:*"
LOG_CHANNEL_PREFIX = "logs:"
STATUS_CHANNEL = "job-updates"


def _as_text(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def decode_bus_message(message: Dict) -> Optional[VideoEvent]:
    """
    Decode a redis-py pub/sub message into a domain event.

    Args:
        message: Message dict as returned by PubSub.get_message()

    Returns:
        LogEvent or JobStatusEvent, or None for messages that carry no event
    """
    message_type = message.get("type")
    channel = _as_text(message.get("channel", ""))
    data = _as_text(message.get("data", ""))

    if message_type == "pmessage" and channel.startswith(LOG_CHANNEL_PREFIX):
        video_id = channel[len(LOG_CHANNEL_PREFIX):]
        if not video_id:
            logger.warning("Dropping log message on channel without video id")
            return None
        return LogEvent(video_id=video_id, text=_extract_log_text(data))

    if message_type == "message" and channel == STATUS_CHANNEL:
        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            logger.warning(f"Dropping malformed status update: {data!r}")
            return None

        if not isinstance(payload, dict):
            logger.warning(f"Dropping status update that is not an object: {data!r}")
            return None

        video_id = payload.get("videoId")
        status = payload.get("status")
        if not isinstance(video_id, str) or not video_id or not isinstance(status, str):
            logger.warning(f"Dropping status update without videoId/status: {data!r}")
            return None
        return JobStatusEvent(video_id=video_id, status=status)

    return None


def _extract_log_text(data: str) -> str:
    """Return the "log" field of a JSON payload, or the raw text."""
    try:
        payload = json.loads(data)
    except json.JSONDecodeError:
        return data

    if isinstance(payload, dict) and "log" in payload:
        return _as_text(payload["log"])
    return data


class RedisEventBus:
    """
    Blocking listener over Redis pub/sub.

    listen() runs until stop() is called; it is meant to run as a
    background task. Connection failures are logged and the subscription
    is re-established after a delay.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        poll_timeout: float = 1.0,
        reconnect_delay: float = 2.0,
    ):
        self.redis = redis_client
        self.poll_timeout = poll_timeout
        self.reconnect_delay = reconnect_delay
        self._stopped = threading.Event()

    def _subscribe(self):
        pubsub = self.redis.pubsub(ignore_subscribe_messages=True)
        pubsub.psubscribe(LOG_CHANNEL_PATTERN)
        pubsub.subscribe(STATUS_CHANNEL)
        logger.info(f"Subscribed to {LOG_CHANNEL_PATTERN} and {STATUS_CHANNEL}")
        return pubsub

    def listen(self, handler: Callable[[VideoEvent], None]) -> None:
        """
        Deliver decoded events to handler until stopped.

        Args:
            handler: Called once per event, on the listening thread
        """
        self._stopped.clear()

        while not self._stopped.is_set():
            try:
                pubsub = self._subscribe()
            except RedisError as e:
                logger.error(f"Event bus cannot subscribe: {e}")
                self._stopped.wait(self.reconnect_delay)
                continue

            try:
                while not self._stopped.is_set():
                    message = pubsub.get_message(timeout=self.poll_timeout)
                    if message is None:
                        continue
                    event = decode_bus_message(message)
                    if event is not None:
                        handler(event)
            except RedisError as e:
                logger.error(f"Event bus connection lost: {e}")
                self._stopped.wait(self.reconnect_delay)
            finally:
                pubsub.close()

        logger.info("Event bus listener stopped")

    def stop(self) -> None:
        """Ask the listener loop to exit after its current poll."""
        self._stopped.set()

    @property
    def is_stopped(self) -> bool:
        return self._stopped.is_set()
