"""
LLM Client Wrapper for JobAssist

Provides a unified interface for Claude (Anthropic) API.
Clients are built once at startup and passed to the extractor.

Usage:
    from jobassist.core.config import get_settings
    from jobassist.core.llm_client import get_llm_client

    client = get_llm_client(get_settings().llm)
    if client is not None:
        response = client.generate("Your prompt here", json_output=True)
"""

import json
import logging
from typing import Optional, Dict, Any, List
from dataclasses import dataclass

import anthropic

from jobassist.core.config import LLMSettings

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Standardized LLM response."""

    content: str
    model: str
    usage: Dict[str, int]
    raw_response: Any = None

    def to_json(self) -> Optional[Dict]:
        """Parse content as JSON if possible."""
        try:
            return json.loads(self.content)
        except json.JSONDecodeError:
            return None


class ClaudeLLMClient:
    """
    Claude (Anthropic) LLM client.

    Uses the Anthropic Python SDK for API calls.
    Handles structured output via system prompts.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-latest",
        max_tokens: int = 4096,
        temperature: float = 0.0,
        timeout: float = 60.0
    ):
        """
        Initialize Claude client.

        Args:
            api_key: Anthropic API key.
            model: Claude model to use. Extraction does not need a large
                   model; claude-3-5-haiku-latest is the default.
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature (0-1)
            timeout: Request timeout in seconds
        """
        if not api_key:
            raise ValueError(
                "Anthropic API key required. Set LLM_ANTHROPIC_API_KEY env var "
                "or pass api_key parameter."
            )

        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = anthropic.Anthropic(api_key=api_key, timeout=timeout)
        logger.info(f"Claude client initialized with model: {model}")

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False
    ) -> LLMResponse:
        """
        Generate a response from Claude.

        Args:
            prompt: The user prompt
            system_prompt: Optional system prompt for context
            temperature: Override default temperature
            max_tokens: Override default max tokens
            json_output: If True, instructs Claude to return valid JSON

        Returns:
            LLMResponse with content and metadata

        Raises:
            anthropic.APIError: On provider errors (logged, then re-raised)
        """
        system = system_prompt or "You are a helpful assistant."

        if json_output:
            system += "\n\nIMPORTANT: You must respond with valid JSON only. No markdown, no explanations, just the JSON object."

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens or self.max_tokens,
                temperature=temperature if temperature is not None else self.temperature,
                system=system,
                messages=[
                    {"role": "user", "content": prompt}
                ]
            )
        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            raise

        content = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )

        if json_output:
            content = _extract_json(content)

        return LLMResponse(
            content=content,
            model=response.model,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens
            },
            raw_response=response
        )


def _extract_json(text: str) -> str:
    """Extract JSON from response text."""
    text = text.strip()

    # Remove markdown code blocks if present
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]

    if text.endswith("```"):
        text = text[:-3]

    return text.strip()


class MockLLMClient:
    """
    Mock LLM client for testing without API calls.

    Returns a canned job extraction, or the queued responses when given.
    Every prompt is recorded in `calls`.
    """

    DEFAULT_EXTRACTION = {
        "title": "Senior Data Engineer",
        "company": "Example Corp",
        "location": "Remote - US",
        "salary": "$150,000 - $180,000",
        "description": "Build and operate the data platform.",
        "requirements": ["5+ years of experience with Python", "Experience with Spark"],
        "responsibilities": ["Design data pipelines"],
        "benefits": ["Health insurance"],
        "employment_type": "Full-time",
        "experience_level": "Senior",
        "skills": ["Python", "Spark", "AWS"],
        "is_remote": True
    }

    def __init__(self, responses: Optional[List[str]] = None):
        """Initialize mock client."""
        logger.info("Using Mock LLM Client (no API calls)")
        self.model = "mock-claude"
        self.responses = list(responses or [])
        self.calls: List[str] = []

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False
    ) -> LLMResponse:
        """Return mock response."""
        self.calls.append(prompt)

        if self.responses:
            content = self.responses.pop(0)
        elif "job posting" in prompt.lower():
            content = json.dumps(self.DEFAULT_EXTRACTION)
        else:
            content = "This is a mock response for testing."
            if json_output:
                content = json.dumps({"response": content})

        return LLMResponse(
            content=content,
            model=self.model,
            usage={"input_tokens": 100, "output_tokens": 200}
        )


# ============================================================================
# Factory Function
# ============================================================================

def get_llm_client(settings: LLMSettings):
    """
    Build the LLM client described by settings.

    Returns:
        MockLLMClient when use_mock is set, ClaudeLLMClient when an API key
        is configured, otherwise None (extraction then uses the regex
        fallback only).
    """
    if settings.use_mock:
        return MockLLMClient()

    if not settings.anthropic_api_key:
        logger.warning("LLM_ANTHROPIC_API_KEY not set - AI extraction disabled")
        return None

    return ClaudeLLMClient(
        api_key=settings.anthropic_api_key,
        model=settings.extraction_model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature
    )


# ============================================================================
# Convenience Functions
# ============================================================================

def generate_json(
    prompt: str,
    client,
    system_prompt: Optional[str] = None
) -> Dict:
    """
    Generate JSON response from Claude.

    Args:
        prompt: The prompt
        client: LLM client (ClaudeLLMClient or MockLLMClient)
        system_prompt: Optional system context

    Returns:
        Parsed JSON dict

    Raises:
        ValueError: If the response is not a JSON object
    """
    response = client.generate(
        prompt=prompt,
        system_prompt=system_prompt,
        json_output=True
    )

    result = response.to_json()
    if not isinstance(result, dict):
        raise ValueError(f"Failed to parse JSON from response: {response.content[:200]}")

    return result
