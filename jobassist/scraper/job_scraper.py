"""
Job URL Scraper

Turns a job posting URL into ExtractedJobInfo using a tiered approach:
1. Direct APIs (Lever, Greenhouse) - fastest, most reliable
2. Known boards without an API (Ashby) - page fetch + AI extraction
3. Generic page scraping - fetch, strip markup, AI extraction

A URL recognised by a board strategy never falls through to generic
scraping; the board's result (or None) is final.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

import requests

from jobassist.core.config import ScraperSettings
from jobassist.core.schemas import ExtractedJobInfo, ExtractionAttempt, AttemptStatus
from jobassist.scraper.extractor import JobInfoExtractor
from jobassist.scraper.heuristics import (
    extract_requirements, extract_responsibilities, extract_skills, is_remote_text
)
from jobassist.scraper.text import strip_html

logger = logging.getLogger(__name__)

LEVER_API = "https://api.lever.co/v0/postings/{company}/{job_id}"
GREENHOUSE_API = "https://boards-api.greenhouse.io/v1/boards/{company}/jobs/{job_id}"
ASHBY_PAGE = "https://jobs.ashbyhq.com/{company}/{job_id}"

# Priority order matters: first match wins
JOB_BOARD_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("lever", re.compile(r"jobs\.lever\.co/([^/]+)/([a-f0-9-]+)", re.IGNORECASE)),
    ("greenhouse", re.compile(r"boards\.greenhouse\.io/([^/]+)/jobs/(\d+)", re.IGNORECASE)),
    ("ashby", re.compile(r"jobs\.ashbyhq\.com/([^/]+)/([a-f0-9-]+)", re.IGNORECASE)),
    ("linkedin", re.compile(r"linkedin\.com/jobs/view/(\d+)", re.IGNORECASE)),
    ("indeed", re.compile(r"indeed\.com/viewjob", re.IGNORECASE)),
    ("glassdoor", re.compile(r"glassdoor\.com/job-listing", re.IGNORECASE)),
    ("workday", re.compile(r"myworkdayjobs\.com", re.IGNORECASE)),
]


def detect_job_board(url: str) -> Optional[Tuple[str, Tuple[str, ...]]]:
    """
    Detect which known job board a URL belongs to.

    Returns:
        (board name, captured groups) or None for unknown sites
    """
    for board, pattern in JOB_BOARD_PATTERNS:
        match = pattern.search(url)
        if match:
            return board, match.groups()
    return None


class JobScraper:
    """
    Scrapes job posting URLs.

    Every strategy returns an ExtractionAttempt; NO_MATCH means "not my
    URL, try the next one".
    """

    def __init__(
        self,
        extractor: JobInfoExtractor,
        session: Optional[requests.Session] = None,
        settings: Optional[ScraperSettings] = None
    ):
        self.extractor = extractor
        self.session = session or requests.Session()
        self.settings = settings or extractor.settings
        self.strategies: List[Tuple[str, Callable[[str], ExtractionAttempt]]] = [
            ("lever", self._scrape_lever),
            ("greenhouse", self._scrape_greenhouse),
            ("ashby", self._scrape_ashby),
            ("generic", self._scrape_generic),
        ]

    # =========================================================================
    # HTTP helpers
    # =========================================================================

    def _get(self, url: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        response = self.session.get(url, headers=headers, timeout=self.settings.request_timeout)
        response.raise_for_status()
        return response

    def _fetch_json(self, strategy: str, url: str):
        try:
            return self._get(url).json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"{strategy} API request failed for {url}: {e}")
            return None

    def _fetch_text(self, strategy: str, url: str) -> Optional[str]:
        try:
            html = self._get(url, headers={"User-Agent": self.settings.user_agent}).text
        except requests.RequestException as e:
            logger.warning(f"{strategy} page fetch failed for {url}: {e}")
            return None
        return strip_html(html)

    def _from_text(self, strategy: str, text: str) -> ExtractionAttempt:
        info = self.extractor.extract_job_info(text)
        if info is None:
            return ExtractionAttempt.failure(strategy, "no job information in page text")
        return ExtractionAttempt.success(strategy, info)

    # =========================================================================
    # Board strategies
    # =========================================================================

    def _scrape_lever(self, url: str) -> ExtractionAttempt:
        """Lever public postings API."""
        detected = detect_job_board(url)
        if not detected or detected[0] != "lever":
            return ExtractionAttempt.no_match("lever")

        company, job_id = detected[1]
        job = self._fetch_json("lever", LEVER_API.format(company=company, job_id=job_id))
        if not isinstance(job, dict):
            return ExtractionAttempt.failure("lever", "Lever API returned no posting")

        categories = job.get("categories") or {}
        lists_content = "\n\n".join(
            f"{item.get('text', '')}:\n{item.get('content', '')}"
            for item in job.get("lists") or []
        )
        description = f"{job.get('descriptionPlain') or ''}\n\n{lists_content}".strip()

        return ExtractionAttempt.success("lever", ExtractedJobInfo(
            title=job.get("text") or None,
            company=categories.get("department") or company,
            location=categories.get("location") or None,
            salary=None,
            description=description,
            requirements=extract_requirements(description),
            responsibilities=extract_responsibilities(description),
            benefits=[],
            employment_type=categories.get("commitment") or None,
            experience_level=None,
            skills=extract_skills(description),
            is_remote=is_remote_text(description, categories.get("location"))
        ))

    def _scrape_greenhouse(self, url: str) -> ExtractionAttempt:
        """Greenhouse public job board API."""
        detected = detect_job_board(url)
        if not detected or detected[0] != "greenhouse":
            return ExtractionAttempt.no_match("greenhouse")

        company, job_id = detected[1]
        job = self._fetch_json("greenhouse", GREENHOUSE_API.format(company=company, job_id=job_id))
        if not isinstance(job, dict):
            return ExtractionAttempt.failure("greenhouse", "Greenhouse API returned no job")

        # Greenhouse returns HTML content
        description = strip_html(job.get("content") or "")
        location = (job.get("location") or {}).get("name")

        return ExtractionAttempt.success("greenhouse", ExtractedJobInfo(
            title=job.get("title") or None,
            company=company,
            location=location or None,
            salary=None,
            description=description,
            requirements=extract_requirements(description),
            responsibilities=extract_responsibilities(description),
            benefits=[],
            employment_type=None,
            experience_level=None,
            skills=extract_skills(description),
            is_remote=is_remote_text(description, location)
        ))

    def _scrape_ashby(self, url: str) -> ExtractionAttempt:
        """Ashby has no public posting API; fetch the page and extract."""
        detected = detect_job_board(url)
        if not detected or detected[0] != "ashby":
            return ExtractionAttempt.no_match("ashby")

        company, job_id = detected[1]
        text = self._fetch_text("ashby", ASHBY_PAGE.format(company=company, job_id=job_id))
        if text is None:
            return ExtractionAttempt.failure("ashby", "page fetch failed")

        return self._from_text("ashby", text)

    def _scrape_generic(self, url: str) -> ExtractionAttempt:
        """Any other site: fetch, strip markup, extract."""
        text = self._fetch_text("generic", url)
        if text is None:
            return ExtractionAttempt.failure("generic", "page fetch failed")

        # Too little text: likely blocked or not a job page
        if len(text) < self.settings.min_page_text_length:
            logger.warning(f"Page text too short ({len(text)} chars) for {url}")
            return ExtractionAttempt.failure("generic", "page text too short")

        return self._from_text("generic", text)

    # =========================================================================
    # Main entry point
    # =========================================================================

    def scrape(self, url: str) -> ExtractionAttempt:
        """Return the attempt from the first strategy that claims the URL."""
        for _name, strategy in self.strategies:
            attempt = strategy(url)
            if attempt.status != AttemptStatus.NO_MATCH:
                return attempt
        return ExtractionAttempt.no_match("generic")

    def scrape_job_url(self, url: str) -> Optional[ExtractedJobInfo]:
        """
        Scrape a job URL and extract job information.

        Returns:
            ExtractedJobInfo, or None if nothing usable could be extracted
        """
        attempt = self.scrape(url)
        if attempt.ok:
            logger.info(f"Scraped {url} via {attempt.strategy}")
            return attempt.info

        logger.warning(f"Could not scrape {url} ({attempt.strategy}: {attempt.error})")
        return None
