"""
In-process TTL cache.

Entries expire lazily: a read past the TTL drops the entry and misses.
Writes are last-write-wins. The clock is injectable so tests can move time
without sleeping.
"""
import threading
import time


class TTLCache:

    def __init__(self, ttl_seconds, clock=time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, key, default=None):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return default
            return value

    def set(self, key, value):
        with self._lock:
            self._entries[key] = (value, self._clock())

    def clear(self):
        with self._lock:
            self._entries.clear()

    def keys(self):
        with self._lock:
            return list(self._entries)

    def __contains__(self, key):
        return self.get(key) is not None

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def stats(self):
        keys = self.keys()
        return {'size': len(keys), 'entries': keys}
