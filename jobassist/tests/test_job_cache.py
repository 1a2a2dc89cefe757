"""
Tests for the job search cache.

Run with: python -m pytest jobassist/tests/test_job_cache.py -v
"""

import json

import pytest

from jobassist.cache.job_cache import (
    JobCache, cache_key, hash_search_params, normalize_search_params, _djb2, _to_base36
)
from jobassist.core.schemas import JobResult, JobSearchParams, JobSource


def make_job(external_id: str, source: JobSource = JobSource.GREENHOUSE) -> JobResult:
    return JobResult(
        external_id=external_id,
        source=source,
        source_url=f"https://example.com/jobs/{external_id}",
        title="Backend Engineer",
        company="Acme",
        location="Remote",
        is_remote=True
    )


@pytest.fixture
def params():
    return JobSearchParams(
        roles=["Data Engineer", "Backend Engineer"],
        locations=["Berlin", "Remote"],
        skills=["python", "sql"],
        remote_preference="remote",
        salary_min=90000
    )


@pytest.fixture
def job_cache(redis_cache):
    return JobCache(redis_cache)


# ============================================================================
# Key derivation
# ============================================================================

def test_key_ignores_list_ordering(params):
    shuffled = JobSearchParams(
        roles=["Backend Engineer", "Data Engineer"],
        locations=["Remote", "Berlin"],
        skills=["sql", "python"],
        remote_preference="remote",
        salary_min=90000
    )
    assert cache_key(params) == cache_key(shuffled)


def test_key_changes_with_content(params):
    other = params.model_copy(update={"salary_max": 150000})
    assert cache_key(params) != cache_key(other)


def test_missing_scalars_normalize_to_neutral_values():
    normalized = normalize_search_params(JobSearchParams(roles=["b", "a"]))
    assert normalized == {
        "roles": ["a", "b"],
        "locations": [],
        "skills": [],
        "remote_preference": "",
        "salary_min": 0,
        "salary_max": 0,
    }
    assert hash_search_params(JobSearchParams(salary_min=0)) == hash_search_params(JobSearchParams())


def test_key_format(params):
    key = cache_key(params)
    prefix, digest = key.split(":")
    assert prefix == "job-cache"
    assert digest and all(c in "0123456789abcdefghijklmnopqrstuvwxyz" for c in digest)


def test_djb2_is_32_bit_signed():
    assert _djb2("") == 5381
    assert _djb2("a") == (5381 * 33) ^ ord("a")
    for text in ["x" * 100, json.dumps({"roles": ["Engineer"] * 20})]:
        assert -2**31 <= _djb2(text) < 2**31


def test_base36():
    assert _to_base36(0) == "0"
    assert _to_base36(35) == "z"
    assert _to_base36(36) == "10"


# ============================================================================
# Cache operations
# ============================================================================

def test_cache_jobs_then_get(job_cache, params, fake_redis):
    jobs = [make_job("1"), make_job("2", JobSource.LEVER), make_job("3", JobSource.LEVER)]
    job_cache.cache_jobs(params, jobs, ttl_seconds=120)

    cached = job_cache.get_cached_jobs(params)
    assert [j.external_id for j in cached] == ["1", "2", "3"]

    data = job_cache.get_cached_job_data(params)
    assert data.source_counts == {"greenhouse": 1, "lever": 2}
    assert (data.expires_at - data.cached_at).total_seconds() == 120
    assert data.search_params == params
    assert fake_redis.ttls[cache_key(params)] == 120


def test_get_cached_jobs_miss(job_cache, params):
    assert job_cache.get_cached_jobs(params) is None


def test_malformed_entry_is_a_miss(job_cache, params, fake_redis):
    fake_redis.store[cache_key(params)] = json.dumps({"jobs": "not-a-list"})
    assert job_cache.get_cached_jobs(params) is None

    fake_redis.store[cache_key(params)] = json.dumps({"jobs": [{"title": "missing fields"}]})
    assert job_cache.get_cached_jobs(params) is None


def test_with_job_cache_fetches_once(job_cache, params):
    calls = {"count": 0}

    def fetcher():
        calls["count"] += 1
        return [make_job("1")]

    first = job_cache.with_job_cache(params, fetcher)
    second = job_cache.with_job_cache(params, fetcher)

    assert calls["count"] == 1
    assert first == second
    assert first[0].external_id == "1"


def test_with_job_cache_entry_readable_by_getters(job_cache, params):
    job_cache.with_job_cache(params, lambda: [{
        "external_id": "9",
        "source": "muse",
        "source_url": "https://example.com/9",
        "title": "Designer",
        "company": "Muse Co"
    }])

    data = job_cache.get_cached_job_data(params)
    assert data is not None
    assert data.source_counts == {"muse": 1}
    assert job_cache.get_cached_jobs(params)[0].company == "Muse Co"


def test_with_job_cache_refetches_over_stale_shape(job_cache, params, fake_redis):
    # Entry written by an older version: bare list instead of an envelope
    fake_redis.store[cache_key(params)] = json.dumps([{"external_id": "old"}])

    jobs = job_cache.with_job_cache(params, lambda: [make_job("new")])

    assert jobs[0].external_id == "new"
    stats = job_cache.stats()
    assert (stats.hits, stats.misses) == (0, 1)
    assert job_cache.get_cached_jobs(params)[0].external_id == "new"


def test_unconfigured_job_cache(disabled_cache, params):
    job_cache = JobCache(disabled_cache)
    calls = {"count": 0}

    def fetcher():
        calls["count"] += 1
        return [make_job("1")]

    job_cache.with_job_cache(params, fetcher)
    job_cache.with_job_cache(params, fetcher)
    job_cache.cache_jobs(params, [make_job("1")])

    assert calls["count"] == 2
    assert job_cache.get_cached_jobs(params) is None
    assert job_cache.get_cached_job_data(params) is None
    assert job_cache.invalidate() == 0
    assert job_cache.stats().is_configured is False


def test_invalidate_all_and_pattern(job_cache, params, fake_redis):
    job_cache.cache_jobs(params, [make_job("1")])
    job_cache.cache_jobs(JobSearchParams(roles=["Chef"]), [make_job("2")])
    fake_redis.store["unrelated"] = "1"

    digest = hash_search_params(params)
    assert job_cache.invalidate(digest) == 1
    assert job_cache.get_cached_jobs(params) is None

    assert job_cache.invalidate() == 1
    assert list(fake_redis.store) == ["unrelated"]


def test_stats(job_cache, params):
    job_cache.get_cached_jobs(params)
    job_cache.cache_jobs(params, [make_job("1")])
    job_cache.get_cached_jobs(params)

    stats = job_cache.stats()
    assert stats.hits == 1
    assert stats.misses == 1
    assert stats.errors == 0
    assert stats.is_configured is True
    assert stats.prefix == "job-cache"
    assert stats.default_ttl_seconds == 14400


def test_prewarm_counts_failures(job_cache):
    criteria = [JobSearchParams(roles=["A"]), JobSearchParams(roles=["B"]), JobSearchParams(roles=["C"])]

    def factory(params):
        def fetch():
            if params.roles == ["B"]:
                raise RuntimeError("provider error")
            return [make_job(params.roles[0])]
        return fetch

    result = job_cache.prewarm(criteria, factory)

    assert result == {"warmed": 2, "failed": 1}
    assert job_cache.get_cached_jobs(criteria[0])[0].external_id == "A"
    assert job_cache.get_cached_jobs(criteria[1]) is None
