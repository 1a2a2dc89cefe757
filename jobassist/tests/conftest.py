"""
Shared test doubles for JobAssist tests.

No test touches the network: Redis is replaced by an in-memory store and
HTTP by a canned-response session.
"""

import fnmatch
import logging
from typing import Dict, List, Optional

import pytest
import redis
import requests

from jobassist.cache.redis_cache import RedisCache
from jobassist.core.schemas import CacheMetrics

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(message)s')


class FakeRedis:
    """In-memory stand-in for the subset of redis.Redis the cache uses."""

    def __init__(self, fail_on: Optional[set] = None):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.fail_on = fail_on or set()
        self.scan_calls = 0
        self._scan_snapshot: List[str] = []

    def _maybe_fail(self, op: str):
        if op in self.fail_on:
            raise redis.ConnectionError(f"{op} unavailable")

    def get(self, key):
        self._maybe_fail("get")
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self._maybe_fail("setex")
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        self._maybe_fail("delete")
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    def scan(self, cursor=0, match=None, count=None):
        self._maybe_fail("scan")
        self.scan_calls += 1
        if cursor == 0:
            self._scan_snapshot = list(self.store)
        count = count or 10
        batch = self._scan_snapshot[cursor:cursor + count]
        next_cursor = cursor + count
        if next_cursor >= len(self._scan_snapshot):
            next_cursor = 0
        keys = [k for k in batch if match is None or fnmatch.fnmatchcase(k, match)]
        return next_cursor, keys


class FakeResponse:
    """Minimal requests.Response replacement."""

    def __init__(self, status_code: int = 200, json_data=None, text: str = ""):
        self.status_code = status_code
        self._json = json_data
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


class FakeSession:
    """Maps URLs to canned responses (or exceptions) and records requests."""

    def __init__(self, routes: Optional[Dict[str, object]] = None):
        self.routes = routes or {}
        self.requested: List[str] = []
        self.headers_seen: List[Optional[dict]] = []

    def get(self, url, headers=None, timeout=None):
        self.requested.append(url)
        self.headers_seen.append(headers)
        outcome = self.routes.get(url)
        if outcome is None:
            raise requests.ConnectionError(f"no route for {url}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def metrics():
    return CacheMetrics()


@pytest.fixture
def redis_cache(fake_redis, metrics):
    return RedisCache(client=fake_redis, metrics=metrics)


@pytest.fixture
def disabled_cache():
    return RedisCache(client=None, metrics=CacheMetrics())
