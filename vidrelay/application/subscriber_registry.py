"""
Subscriber Registry

Many-to-many membership between connection handles and per-video channels,
with fan-out delivery to a channel's members.
"""

import logging
import threading
from typing import Any, Callable, Dict, Hashable, Set

logger = logging.getLogger(__name__)

Deliver = Callable[[Hashable, Any], None]


class SubscriberRegistry:
    """
    Channel membership keyed by video id.

    Channels exist while they have members: the first join creates one and
    the last leave drops it. Delivery runs outside the lock on a snapshot
    of the membership, so a slow or failing handle never blocks joins.
    """

    def __init__(self, deliver: Deliver):
        """
        Args:
            deliver: Sends one message to one handle; raising marks the
                handle as dead and evicts it
        """
        self._deliver = deliver
        self._channels: Dict[str, Set[Hashable]] = {}
        self._memberships: Dict[Hashable, Set[str]] = {}
        self._lock = threading.Lock()

    def join(self, handle: Hashable, video_id: str) -> bool:
        """
        Add handle to the channel of video_id.

        Returns:
            True if newly joined, False if already a member
        """
        with self._lock:
            members = self._channels.setdefault(video_id, set())
            if handle in members:
                return False
            members.add(handle)
            self._memberships.setdefault(handle, set()).add(video_id)

        logger.debug(f"Subscriber {handle} joined {video_id}")
        return True

    def leave_channel(self, handle: Hashable, video_id: str) -> bool:
        """
        Remove handle from one channel.

        Returns:
            True if handle was a member
        """
        with self._lock:
            return self._remove(handle, video_id)

    def leave(self, handle: Hashable) -> int:
        """
        Remove handle from every channel, e.g. on disconnect.

        Returns:
            Number of channels left
        """
        with self._lock:
            video_ids = list(self._memberships.get(handle, ()))
            for video_id in video_ids:
                self._remove(handle, video_id)

        if video_ids:
            logger.debug(f"Subscriber {handle} left {len(video_ids)} channel(s)")
        return len(video_ids)

    def _remove(self, handle: Hashable, video_id: str) -> bool:
        # Caller holds the lock
        members = self._channels.get(video_id)
        if not members or handle not in members:
            return False

        members.discard(handle)
        if not members:
            del self._channels[video_id]

        channels = self._memberships.get(handle)
        if channels is not None:
            channels.discard(video_id)
            if not channels:
                del self._memberships[handle]
        return True

    def broadcast(self, video_id: str, message: Any) -> int:
        """
        Deliver message to every member of the channel of video_id.

        Handles whose delivery raises are evicted from every channel.

        Returns:
            Number of successful deliveries
        """
        with self._lock:
            snapshot = list(self._channels.get(video_id, ()))

        delivered = 0
        for handle in snapshot:
            try:
                self._deliver(handle, message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Delivery to {handle} failed, evicting: {e}")
                self.leave(handle)

        return delivered

    def channels_of(self, handle: Hashable) -> Set[str]:
        """Video ids handle is subscribed to."""
        with self._lock:
            return set(self._memberships.get(handle, ()))

    def subscribers_of(self, video_id: str) -> Set[Hashable]:
        """Handles subscribed to video_id."""
        with self._lock:
            return set(self._channels.get(video_id, ()))

    def channel_count(self) -> int:
        """Number of channels with at least one subscriber."""
        with self._lock:
            return len(self._channels)
