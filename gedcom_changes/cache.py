import time
from threading import Lock
from typing import Any, Callable, Dict, Optional, Tuple


class ArrayCache:
    """Records built by the factories, kept for a fixed number of seconds."""

    def __init__(self, default_ttl: int = 300):
        self.default_ttl = default_ttl
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = Lock()

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def remember(self, key: str, builder: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        """Return the live value stored under key, calling builder on a miss."""
        now = time.time()
        with self._lock:
            entry = self._entries.get(key)
        if entry is not None and entry[0] > now:
            return entry[1]

        value = builder()
        with self._lock:
            self._entries[key] = (now + (ttl or self.default_ttl), value)
        return value

    def cleanup_expired(self) -> int:
        now = time.time()
        with self._lock:
            expired = [key for key, (expiry, _) in self._entries.items() if expiry <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)
