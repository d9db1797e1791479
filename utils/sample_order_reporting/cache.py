# utils/sample_order_reporting/cache.py
"""
Time-boxed result cache.

Entries are JSON blobs {"data": ..., "timestamp": <epoch seconds>} stored
under a fixed key prefix in a mutable mapping (st.session_state in the app).
Expired entries are removed on read. Corrupt or unreadable entries are
logged and treated as a miss, never raised.

No locking: concurrent writers on one key are last-write-wins.
"""

import json
import logging
import time
from typing import Any, Callable, MutableMapping, Optional

import pandas as pd

from .constants import CACHE_PREFIX, CACHE_TTL_SECONDS
from .models import FilterState

logger = logging.getLogger(__name__)

_FRAME_MARKER = '__dataframe__'


def _encode(value: Any) -> Any:
    if isinstance(value, pd.DataFrame):
        payload = json.loads(value.to_json(orient='split', date_format='iso', index=False))
        return {_FRAME_MARKER: payload}
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    return value


def _decode(value: Any) -> Any:
    if isinstance(value, dict):
        if _FRAME_MARKER in value:
            payload = value[_FRAME_MARKER]
            return pd.DataFrame(payload.get('data', []), columns=payload.get('columns', []))
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


class ResultCache:
    """
    Usage:
        cache = ResultCache(st.session_state)
        key = cache.generate_key('sample', filters, viewer='a@b.com')
        kpis = cache.get(key + '_kpis')
        if kpis is None:
            kpis = compute()
            cache.set(key + '_kpis', kpis)
    """

    def __init__(
        self,
        store: Optional[MutableMapping] = None,
        ttl_seconds: int = CACHE_TTL_SECONDS,
        prefix: str = CACHE_PREFIX,
        clock: Callable[[], float] = time.time
    ):
        self.store = store if store is not None else {}
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix
        self._clock = clock

    @staticmethod
    def generate_key(cache_type: str, filters: FilterState, viewer: str = '') -> str:
        """Composite key of query type + viewer + filter state."""
        return f"{cache_type}_{viewer}_{filters.cache_token()}"

    def get(self, key: str) -> Optional[Any]:
        """Return cached data, or None when missing, expired or unreadable."""
        full_key = self.prefix + key
        try:
            raw = self.store.get(full_key)
            if not raw:
                return None

            entry = json.loads(raw)
            if self._clock() - float(entry['timestamp']) > self.ttl_seconds:
                self.store.pop(full_key, None)
                return None

            return _decode(entry['data'])
        except Exception as e:
            logger.warning(f"Error reading cache entry {key[:60]}: {e}")
            return None

    def set(self, key: str, data: Any) -> None:
        try:
            entry = {'data': _encode(data), 'timestamp': self._clock()}
            self.store[self.prefix + key] = json.dumps(entry, default=str)
        except Exception as e:
            logger.warning(f"Error writing cache entry {key[:60]}: {e}")

    def clear_key(self, key: str) -> None:
        try:
            self.store.pop(self.prefix + key, None)
        except Exception as e:
            logger.warning(f"Error clearing cache entry {key[:60]}: {e}")

    def clear(self) -> None:
        """Remove every entry under this cache's prefix."""
        try:
            for key in [k for k in list(self.store.keys()) if str(k).startswith(self.prefix)]:
                self.store.pop(key, None)
        except Exception as e:
            logger.warning(f"Error clearing cache: {e}")
