"""
Presence registry: which users currently hold a live WebSocket connection.

The registry lives for the lifetime of the process and is rebuilt as clients
reconnect. It is written by the real-time consumer (connect / disconnect)
and read by the notification service. Consumers run on the event loop while
HTTP views run in worker threads, so every access goes through a lock.
"""

import threading
from typing import Dict, Hashable, List, Set


class PresenceRegistry:
    """Map of user id to the channel names of that user's open connections."""

    def __init__(self):
        self._lock = threading.Lock()
        self._connections: Dict[Hashable, Set[str]] = {}

    def register(self, user_id: Hashable, channel_name: str) -> None:
        with self._lock:
            self._connections.setdefault(user_id, set()).add(channel_name)

    def unregister(self, user_id: Hashable, channel_name: str) -> None:
        """Forget one connection; the user goes offline with the last one."""
        with self._lock:
            channel_names = self._connections.get(user_id)
            if channel_names is None:
                return
            channel_names.discard(channel_name)
            if not channel_names:
                del self._connections[user_id]

    def lookup(self, user_id: Hashable) -> List[str]:
        """Channel names for the user, empty when offline."""
        with self._lock:
            return sorted(self._connections.get(user_id, ()))

    def is_online(self, user_id: Hashable) -> bool:
        with self._lock:
            return user_id in self._connections

    def online_user_ids(self) -> List[Hashable]:
        with self._lock:
            return list(self._connections)

    def clear(self) -> None:
        with self._lock:
            self._connections.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
