"""
HTTP JSON source with caching and retries.

Serves tables exposed by a REST endpoint as JSON arrays of objects
(``GET {base_url}/{table}``). Provides:
- Response cache (in-memory, MD5 keys, optional TTL) so every pass of a
  run sees the same snapshot
- Retry with exponential backoff and jitter (skips 4xx)
- Session pooling with custom User-Agent
- Per-request telemetry
"""

import hashlib
import json
import random
import time
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import requests

from ..quality.errors import SourceUnavailable
from .base import Record, RowSource, normalize_value


class HttpJsonSource(RowSource):
    """Tables served as JSON by an HTTP API.

    Args:
        base_url: Root URL (no trailing slash).
        records_key: Key holding the record list when the response is an
                     object rather than a bare array.
        cache_ttl: Cache time-to-live in seconds. None (the default) keeps
                   a fetched table until ``clear_cache()``.
        max_retries: Retry attempts on 5xx and connection errors.
        timeout: Per-request timeout in seconds.
    """

    source_name = 'http'

    def __init__(
        self,
        base_url: str,
        records_key: Optional[str] = None,
        cache_ttl: Optional[float] = None,
        max_retries: int = 3,
        timeout: float = 30,
    ):
        super().__init__()
        self.base_url = base_url.rstrip('/')
        self.records_key = records_key
        self.max_retries = max_retries
        self.timeout = timeout
        self._cache_ttl = cache_ttl

        # Session pooling
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": "supastore-data-quality/http",
            "Accept": "application/json",
        })

        # Response cache: key -> (response_json, expiry_timestamp or None)
        self._cache: Dict[str, Tuple[Any, Optional[float]]] = {}

        # Telemetry counters
        self.api_calls = 0
        self.cache_hits = 0
        self.errors = 0

    # --- Cache ----------------------------------------------------------------

    def _cache_key(self, url: str, params: Optional[Dict] = None) -> str:
        """Deterministic MD5 cache key from URL + sorted params."""
        normalized = json.dumps(params or {}, sort_keys=True)
        raw = f"{url}|{normalized}"
        return hashlib.md5(raw.encode()).hexdigest()

    def _cache_get(self, key: str) -> Optional[Any]:
        """Return cached value if present and not expired."""
        entry = self._cache.get(key)
        if entry is None:
            return None
        value, expiry = entry
        if expiry is not None and time.time() > expiry:
            del self._cache[key]
            return None
        return value

    def _cache_set(self, key: str, value: Any) -> None:
        expiry = None if self._cache_ttl is None else time.time() + self._cache_ttl
        self._cache[key] = (value, expiry)

    def clear_cache(self) -> None:
        """Drop fetched tables so the next pass sees a fresh snapshot."""
        self._cache.clear()

    # --- HTTP with retries ----------------------------------------------------

    def _get(self, table: str) -> Any:
        """GET ``{base_url}/{table}`` with caching and retries.

        Raises:
            SourceUnavailable: On 4xx, or once retries are exhausted.
        """
        url = f"{self.base_url}/{table}"
        key = self._cache_key(url)
        cached = self._cache_get(key)
        if cached is not None:
            self.cache_hits += 1
            self._log.debug("Cache hit: %s", key[:8])
            return cached

        last_error: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            self.api_calls += 1
            try:
                resp = self._session.get(url, timeout=self.timeout)
            except requests.ConnectionError as exc:
                self.errors += 1
                last_error = exc
                self._backoff(attempt, "Connection error")
                continue

            # 4xx: the table is not there, don't retry
            if 400 <= resp.status_code < 500:
                self.errors += 1
                raise SourceUnavailable(table, f"HTTP {resp.status_code}")

            # 5xx: retry with backoff
            if resp.status_code >= 500:
                last_error = requests.HTTPError(f"{resp.status_code}", response=resp)
                self._backoff(attempt, f"Server error {resp.status_code}")
                continue

            try:
                data = resp.json()
            except ValueError as exc:
                self.errors += 1
                raise SourceUnavailable(table, f"invalid JSON: {exc}") from exc
            self._cache_set(key, data)
            return data

        self.errors += 1
        raise SourceUnavailable(table, f"retries exhausted: {last_error}")

    def _backoff(self, attempt: int, reason: str) -> None:
        if attempt >= self.max_retries:
            return
        wait = (2 ** attempt) + random.uniform(0, 1)
        self._log.warning(
            "%s, retry %d/%d in %.1fs", reason, attempt + 1, self.max_retries, wait,
        )
        time.sleep(wait)

    # --- Row source -----------------------------------------------------------

    def _rows(self, table: str) -> List[Dict[str, Any]]:
        data = self._get(table)
        if self.records_key is not None and isinstance(data, dict):
            data = data.get(self.records_key)
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise SourceUnavailable(table, 'response is not a list of objects')
        return data

    @staticmethod
    def _keys(rows: List[Dict[str, Any]]) -> List[str]:
        # objects may omit keys, so the field set is the union in first-seen order
        return list(dict.fromkeys(key for row in rows for key in row))

    def fields(self, table: str) -> List[str]:
        return self._keys(self._rows(table))

    def records(self, table: str, columns: Optional[Sequence[str]] = None) -> Iterator[Record]:
        rows = self._rows(table)
        available = self._keys(rows) if rows else list(columns or [])
        cols = self._project(table, available, columns)
        # absent keys read as null so every record has the same fields
        return ({c: normalize_value(row.get(c)) for c in cols} for row in rows)

    def get_telemetry(self) -> Dict[str, Any]:
        return {
            "source": self.source_name,
            "api_calls": self.api_calls,
            "cache_hits": self.cache_hits,
            "errors": self.errors,
        }
