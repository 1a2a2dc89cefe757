"""
Pydantic schemas for data validation and LLM structured outputs.

These schemas ensure:
1. Job search parameters and results round-trip through the cache
2. LLM extraction outputs conform to expected structure
3. API requests and responses are consistent
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict
from enum import Enum
from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


# ============================================================================
# Enums
# ============================================================================

class JobSource(str, Enum):
    """Job search providers whose results are cached."""

    ADZUNA = "adzuna"
    MUSE = "muse"
    GREENHOUSE = "greenhouse"
    LEVER = "lever"


class AttemptStatus(str, Enum):
    """Outcome of a single fallback tier."""

    OK = "ok"
    NO_MATCH = "no_match"
    FAILED = "failed"


# ============================================================================
# Job Search Schemas (cached)
# ============================================================================

class JobSearchParams(BaseModel):
    """Criteria for a job search. Used to derive cache keys."""

    roles: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    remote_preference: Optional[str] = None  # "remote", "hybrid", "onsite"
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None


class JobResult(BaseModel):
    """A job returned by one of the search providers."""

    # Identifiers
    external_id: str
    source: JobSource
    source_url: str

    # Core info
    title: str
    company: str
    company_logo: Optional[str] = None
    location: Optional[str] = None
    is_remote: bool = False

    # Description
    description: Optional[str] = None
    requirements: Optional[List[str]] = None

    # Compensation
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_currency: Optional[str] = None

    # Metadata
    employment_type: Optional[str] = None
    experience_level: Optional[str] = None
    posted_at: Optional[str] = None
    match_score: Optional[float] = None


class CachedJobData(BaseModel):
    """Envelope stored in Redis for one search."""

    jobs: List[JobResult]
    cached_at: datetime
    expires_at: datetime
    source_counts: Dict[str, int] = Field(default_factory=dict)
    search_params: JobSearchParams


# ============================================================================
# Cache Metrics
# ============================================================================

@dataclass
class CacheMetrics:
    """
    Hit/miss/error counters for a cache instance.

    Created once at startup and passed to the cache. Counters are not
    atomic; they only feed observability.
    """

    hits: int = 0
    misses: int = 0
    errors: int = 0
    last_reset: datetime = field(default_factory=utcnow)

    def record_hit(self) -> None:
        self.hits += 1

    def record_miss(self) -> None:
        self.misses += 1

    def record_error(self) -> None:
        self.errors += 1

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.errors = 0
        self.last_reset = utcnow()

    def snapshot(self) -> "CacheMetrics":
        """Return an independent copy of the current counters."""
        return CacheMetrics(
            hits=self.hits,
            misses=self.misses,
            errors=self.errors,
            last_reset=self.last_reset
        )


class JobCacheStats(BaseModel):
    """Cache metrics plus configuration state."""

    hits: int
    misses: int
    errors: int
    last_reset: datetime
    is_configured: bool
    prefix: str
    default_ttl_seconds: int


# ============================================================================
# Job Extraction Schemas (For LLM Structured Output)
# ============================================================================

class ExtractedJobInfo(BaseModel):
    """Structured job posting information. LLM output schema."""

    title: Optional[str] = Field(default=None, description="Job title")
    company: Optional[str] = Field(default=None, description="Company name")
    location: Optional[str] = Field(default=None, description="Job location")
    salary: Optional[str] = Field(default=None, description="Salary range if mentioned")
    description: str = Field(description="Full job description")
    requirements: List[str] = Field(
        default_factory=list,
        description="List of job requirements and qualifications"
    )
    responsibilities: List[str] = Field(
        default_factory=list,
        description="List of job responsibilities"
    )
    benefits: List[str] = Field(
        default_factory=list,
        description="List of benefits if mentioned"
    )
    employment_type: Optional[str] = Field(
        default=None,
        description="Full-time, part-time, contract, etc."
    )
    experience_level: Optional[str] = Field(
        default=None,
        description="Entry, mid, senior level"
    )
    skills: List[str] = Field(
        default_factory=list,
        description="Required and preferred skills"
    )
    is_remote: bool = Field(default=False, description="Whether the job is remote")


@dataclass
class ExtractionAttempt:
    """Result of one strategy in a fallback chain."""

    strategy: str
    status: AttemptStatus
    info: Optional[ExtractedJobInfo] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == AttemptStatus.OK and self.info is not None

    @classmethod
    def success(cls, strategy: str, info: ExtractedJobInfo) -> "ExtractionAttempt":
        return cls(strategy=strategy, status=AttemptStatus.OK, info=info)

    @classmethod
    def no_match(cls, strategy: str) -> "ExtractionAttempt":
        return cls(strategy=strategy, status=AttemptStatus.NO_MATCH)

    @classmethod
    def failure(cls, strategy: str, error: str) -> "ExtractionAttempt":
        return cls(strategy=strategy, status=AttemptStatus.FAILED, error=error)


# ============================================================================
# API Schemas
# ============================================================================

class ScrapeRequest(BaseModel):
    """Scrape a job URL, or parse pasted text for that URL."""

    url: str = Field(pattern=r"^https?://\S+$", description="Job posting URL")
    text: Optional[str] = Field(default=None, max_length=50000, description="Raw job text (skips scraping)")


class ParseRequest(BaseModel):
    """Parse raw job description text."""

    text: str = Field(min_length=50, max_length=50000)


class InvalidateRequest(BaseModel):
    """Invalidate job cache entries matching an optional glob pattern."""

    pattern: Optional[str] = None


class JobSummary(BaseModel):
    """Job payload returned to the resume builder."""

    title: str
    company: str
    description: str
    requirements: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    salary: Optional[str] = None
    source_url: Optional[str] = None


class JobInfoResponse(BaseModel):
    """Successful scrape/parse response."""

    success: bool = True
    job: JobSummary
