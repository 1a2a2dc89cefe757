"""
Structured job extraction from raw posting text.

Strategies are tried in order until one succeeds:
1. llm - Claude returns JSON validated against ExtractedJobInfo
2. heuristics - regex/keyword extraction (always produces a result)
"""

import json
import logging
from typing import Callable, List, Optional, Tuple

import anthropic
from pydantic import ValidationError

from jobassist.core.config import ScraperSettings
from jobassist.core.llm_client import generate_json
from jobassist.core.schemas import ExtractedJobInfo, ExtractionAttempt
from jobassist.scraper.heuristics import extract_with_heuristics

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM_PROMPT = (
    "You extract structured data from job postings. "
    "Respond with a single JSON object matching this JSON schema:\n"
    + json.dumps(ExtractedJobInfo.model_json_schema())
)

EXTRACTION_PROMPT = """Extract structured job information from the following job posting text.

Job Posting Text:
{text}

Instructions:
- Extract the job title, company name, and location if present
- List all requirements, qualifications, and skills mentioned
- Identify if this is a remote position
- Extract salary information if mentioned
- Determine experience level (entry/junior, mid, senior, lead, etc.)
- Be thorough in extracting skills - include both technical and soft skills"""

# Errors that send us to the next strategy
LLM_ERRORS = (anthropic.APIError, ValueError, ValidationError)


class JobInfoExtractor:
    """Turns raw job text into ExtractedJobInfo."""

    def __init__(self, llm_client=None, settings: Optional[ScraperSettings] = None):
        """
        Args:
            llm_client: ClaudeLLMClient / MockLLMClient, or None to skip the LLM tier
            settings: Scraper thresholds (defaults if omitted)
        """
        self.llm_client = llm_client
        self.settings = settings or ScraperSettings()
        self.strategies: List[Tuple[str, Callable[[str], ExtractionAttempt]]] = [
            ("llm", self._extract_with_llm),
            ("heuristics", self._extract_with_heuristics),
        ]

    def _truncate(self, text: str) -> str:
        budget = self.settings.llm_char_budget
        return text[:budget] + "..." if len(text) > budget else text

    def _extract_with_llm(self, text: str) -> ExtractionAttempt:
        if self.llm_client is None:
            return ExtractionAttempt.no_match("llm")

        prompt = EXTRACTION_PROMPT.format(text=self._truncate(text))
        try:
            data = generate_json(prompt, self.llm_client, system_prompt=EXTRACTION_SYSTEM_PROMPT)
            info = ExtractedJobInfo.model_validate(data)
        except LLM_ERRORS as e:
            logger.error(f"Error extracting job info with AI: {e}")
            return ExtractionAttempt.failure("llm", str(e))

        return ExtractionAttempt.success("llm", info)

    def _extract_with_heuristics(self, text: str) -> ExtractionAttempt:
        info = extract_with_heuristics(text, self.settings.fallback_description_chars)
        return ExtractionAttempt.success("heuristics", info)

    def attempts(self, text: str) -> List[ExtractionAttempt]:
        """
        Run strategies in order, stopping at the first success.

        Returns every attempt made, for diagnostics. Empty when the text is
        below the minimum length.
        """
        if not text or len(text) < self.settings.min_text_length:
            return []

        results = []
        for name, strategy in self.strategies:
            attempt = strategy(text)
            results.append(attempt)
            if attempt.ok:
                break
            logger.debug(f"Extraction strategy {name} gave {attempt.status.value}")
        return results

    def extract_job_info(self, text: str) -> Optional[ExtractedJobInfo]:
        """
        Extract structured job information from raw text.

        Returns:
            ExtractedJobInfo, or None when the text is too short to be a
            job posting (no LLM call is made in that case)
        """
        for attempt in self.attempts(text):
            if attempt.ok:
                logger.info(f"Extracted job info via {attempt.strategy}")
                return attempt.info
        return None
