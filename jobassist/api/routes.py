"""
FastAPI Routes for JobAssist

REST endpoints for the resume builder (job scraping/parsing) and job cache
administration. Authentication is handled upstream by the auth provider.

Run with: uvicorn jobassist.api.routes:create_app --factory --reload
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobassist import __version__
from jobassist.cache.job_cache import JobCache
from jobassist.cache.redis_cache import RedisCache
from jobassist.core.config import Settings, configure_logging, get_settings
from jobassist.core.llm_client import get_llm_client
from jobassist.core.schemas import (
    ExtractedJobInfo, InvalidateRequest, JobCacheStats, JobInfoResponse,
    JobSummary, ParseRequest, ScrapeRequest, utcnow
)
from jobassist.scraper.extractor import JobInfoExtractor
from jobassist.scraper.job_scraper import JobScraper

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


# ============================================================================
# Service Wiring
# ============================================================================

@dataclass
class Services:
    """Everything the routes need, built once at startup."""

    settings: Settings
    job_cache: JobCache
    extractor: JobInfoExtractor
    scraper: JobScraper


def build_services(settings: Settings) -> Services:
    """Construct clients explicitly from settings."""
    redis_cache = RedisCache.from_settings(settings.cache)
    job_cache = JobCache(
        redis_cache,
        prefix=settings.cache.key_prefix,
        default_ttl_seconds=settings.cache.default_ttl_seconds
    )
    extractor = JobInfoExtractor(get_llm_client(settings.llm), settings.scraper)
    scraper = JobScraper(extractor, settings=settings.scraper)
    return Services(settings=settings, job_cache=job_cache, extractor=extractor, scraper=scraper)


def get_services(request: Request) -> Services:
    return request.app.state.services


def _summary(info: ExtractedJobInfo, description: str, source_url: Optional[str] = None) -> JobSummary:
    return JobSummary(
        title=info.title or "Unknown Position",
        company=info.company or "Unknown Company",
        description=description,
        requirements=info.requirements or [],
        location=info.location,
        salary=info.salary,
        source_url=source_url
    )


# ============================================================================
# App Factory
# ============================================================================

def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """
    Create the FastAPI app.

    Args:
        settings: Application settings (read from env when omitted)
        services: Pre-built services, e.g. with test doubles injected
    """
    settings = settings or (services.settings if services else get_settings())
    configure_logging(settings.log_level)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Job search cache and job posting extraction",
        version=__version__
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.services = services or build_services(settings)
    app.state.started_at = time.monotonic()

    # ------------------------------------------------------------------------
    # Health Check
    # ------------------------------------------------------------------------

    @app.get("/health")
    def health_check(request: Request):
        """Health check endpoint."""
        return JSONResponse(
            {
                "status": "healthy",
                "timestamp": utcnow().isoformat(),
                "uptime": int(time.monotonic() - request.app.state.started_at),
                "version": __version__,
                "environment": settings.environment
            },
            headers=NO_CACHE_HEADERS
        )

    # ------------------------------------------------------------------------
    # Resume Builder Endpoints
    # ------------------------------------------------------------------------

    @app.post("/api/builder/scrape", response_model=JobInfoResponse)
    def scrape_job(body: ScrapeRequest, services: Services = Depends(get_services)):
        """
        Scrape a job posting URL.

        When `text` is supplied it is parsed directly instead of fetching
        the URL.
        """
        if body.text:
            info = services.extractor.extract_job_info(body.text)
        else:
            info = services.scraper.scrape_job_url(body.url)

        if info is None:
            return JSONResponse(
                status_code=422,
                content={
                    "error": "Could not extract job information from the provided URL",
                    "suggestion": "Try pasting the job description directly"
                }
            )

        return JobInfoResponse(job=_summary(info, info.description or "", source_url=body.url))

    @app.post("/api/builder/parse", response_model=JobInfoResponse)
    def parse_job(body: ParseRequest, services: Services = Depends(get_services)):
        """Parse raw job description text into structured job info."""
        info = services.extractor.extract_job_info(body.text)

        if info is None:
            return JSONResponse(
                status_code=422,
                content={"error": "Could not extract job information from the provided text"}
            )

        return JobInfoResponse(job=_summary(info, info.description or body.text))

    # ------------------------------------------------------------------------
    # Cache Administration
    # ------------------------------------------------------------------------

    @app.get("/api/cache/stats", response_model=JobCacheStats)
    def cache_stats(services: Services = Depends(get_services)):
        """Hit/miss/error counters and configuration state."""
        return services.job_cache.stats()

    @app.post("/api/cache/invalidate")
    def invalidate_cache(body: InvalidateRequest, services: Services = Depends(get_services)):
        """Invalidate job cache entries (all, or those matching `pattern`)."""
        deleted = services.job_cache.invalidate(body.pattern)
        return {"deleted": deleted}

    return app
