"""
Regex/keyword extraction of job fields.

Used when the LLM is unavailable or its output cannot be validated, and
for enriching job board API responses. Every extractor is independent and
best-effort: it returns None (or an empty list) when nothing matches.
"""

import re
from typing import List, Optional

from jobassist.core.schemas import ExtractedJobInfo

# ============================================================================
# Patterns
# ============================================================================

TITLE_PATTERNS = [
    re.compile(r"(?:job title|position|role)[:\s]+([^\n]+)", re.IGNORECASE),
    re.compile(
        r"^([A-Z][a-z]+ (?:Engineer|Developer|Manager|Designer|Analyst|Specialist)[^\n]*)",
        re.MULTILINE
    ),
]

COMPANY_PATTERNS = [
    re.compile(r"(?:company|employer|at)[:\s]+([^\n]+)", re.IGNORECASE),
    re.compile(r"(?:about|join)\s+([A-Z][^\n,]+)", re.IGNORECASE),
]

LOCATION_PATTERNS = [
    re.compile(r"(?:location|based in|office)[:\s]+([^\n]+)", re.IGNORECASE),
    re.compile(
        r"(?:in|at)\s+((?:San Francisco|New York|Los Angeles|Chicago|Seattle|Austin|Boston|Denver|Remote)[^\n,]*)",
        re.IGNORECASE
    ),
]

SALARY_PATTERNS = [
    re.compile(r"\$[\d,]+(?:\s*-\s*\$[\d,]+)?(?:\s*(?:per year|annually|/year|k|K))?"),
    re.compile(r"(?:salary|compensation)[:\s]+([^\n]+)", re.IGNORECASE),
]

REQUIREMENTS_SECTION = re.compile(
    r"(?:requirements?|qualifications?|what you(?:'ll)? need)[:\s]*\n?([\s\S]*?)"
    r"(?:\n(?:benefits|responsibilities|about|what we offer)|\Z)",
    re.IGNORECASE
)

RESPONSIBILITIES_SECTION = re.compile(
    r"(?:responsibilities?|what you(?:'ll)? do|your role)[:\s]*\n?([\s\S]*?)"
    r"(?:\n(?:requirements|qualifications|benefits|about)|\Z)",
    re.IGNORECASE
)

BULLET = re.compile(r"[•\-\*]\s*([^\n]+)")

EXPERIENCE_PATTERNS = [
    re.compile(r"(\d+)\+?\s*years?\s+(?:of\s+)?experience", re.IGNORECASE),
    re.compile(r"experience\s+(?:with|in)\s+([^,.\n]+)", re.IGNORECASE),
    re.compile(r"proficient\s+(?:with|in)\s+([^,.\n]+)", re.IGNORECASE),
]

SKILL_PATTERNS = [
    # Programming languages
    re.compile(r"\b(JavaScript|TypeScript|Python|Java|C\+\+|C#|Ruby|Go|Rust|PHP|Swift|Kotlin|Scala|R)\b", re.IGNORECASE),
    # Frameworks
    re.compile(r"\b(React|Vue|Angular|Svelte|Next\.js|Nuxt|Express|Django|Flask|FastAPI|Spring|Laravel|Rails)\b", re.IGNORECASE),
    # Databases
    re.compile(r"\b(PostgreSQL|MySQL|MongoDB|Redis|Elasticsearch|DynamoDB|Cassandra|SQLite|Oracle|SQL Server)\b", re.IGNORECASE),
    # Cloud & DevOps
    re.compile(r"\b(AWS|Azure|GCP|Docker|Kubernetes|Jenkins|GitLab|CircleCI|Terraform|Ansible)\b", re.IGNORECASE),
    # Tools & Other
    re.compile(r"\b(Git|Node\.js|REST|GraphQL|API|CI/CD|Agile|Scrum|Linux|Figma|Jira)\b", re.IGNORECASE),
]

# (keywords, label) checked in order; first hit wins
EMPLOYMENT_TYPES = [
    (("full-time", "full time"), "Full-time"),
    (("part-time", "part time"), "Part-time"),
    (("contract",), "Contract"),
    (("internship", "intern"), "Internship"),
]

EXPERIENCE_LEVELS = [
    (("senior", "sr."), "Senior"),
    (("lead", "principal"), "Lead"),
    (("junior", "jr."), "Junior"),
    (("entry level", "entry-level"), "Entry"),
    (("mid-level", "mid level"), "Mid"),
]

MAX_REQUIREMENTS = 15
MAX_RESPONSIBILITIES = 10
MAX_SKILLS = 30


# ============================================================================
# Single-field extractors
# ============================================================================

def _first_match(patterns, text: str, limit: Optional[int] = None) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            value = (match.group(1) if match.groups() else match.group(0)).strip()
            return value[:limit] if limit else value
    return None


def _keyword_label(table, text: str) -> Optional[str]:
    text_lower = text.lower()
    for keywords, label in table:
        if any(kw in text_lower for kw in keywords):
            return label
    return None


def _section_bullets(section_pattern, text: str) -> List[str]:
    match = section_pattern.search(text)
    if not match:
        return []
    return [bullet.strip() for bullet in BULLET.findall(match.group(1))]


def extract_title(text: str) -> Optional[str]:
    return _first_match(TITLE_PATTERNS, text)


def extract_company(text: str) -> Optional[str]:
    return _first_match(COMPANY_PATTERNS, text, limit=100)


def extract_location(text: str) -> Optional[str]:
    return _first_match(LOCATION_PATTERNS, text, limit=100)


def extract_salary(text: str) -> Optional[str]:
    return _first_match(SALARY_PATTERNS, text)


def extract_employment_type(text: str) -> Optional[str]:
    return _keyword_label(EMPLOYMENT_TYPES, text)


def extract_experience_level(text: str) -> Optional[str]:
    return _keyword_label(EXPERIENCE_LEVELS, text)


def extract_requirements(text: str) -> List[str]:
    """Bullets under a requirements heading plus experience phrases."""
    requirements = _section_bullets(REQUIREMENTS_SECTION, text)

    for pattern in EXPERIENCE_PATTERNS:
        for match in pattern.finditer(text):
            requirement = match.group(0).strip()
            if requirement and requirement not in requirements:
                requirements.append(requirement)

    return requirements[:MAX_REQUIREMENTS]


def extract_responsibilities(text: str) -> List[str]:
    return _section_bullets(RESPONSIBILITIES_SECTION, text)[:MAX_RESPONSIBILITIES]


def extract_skills(text: str) -> List[str]:
    """Known technologies, in first-seen order."""
    skills = {}
    for pattern in SKILL_PATTERNS:
        for match in pattern.finditer(text):
            skills.setdefault(match.group(1), None)
    return list(skills)[:MAX_SKILLS]


def is_remote_text(*texts: Optional[str]) -> bool:
    return any("remote" in (text or "").lower() for text in texts)


# ============================================================================
# Combined
# ============================================================================

def extract_with_heuristics(text: str, description_chars: int = 5000) -> ExtractedJobInfo:
    """Build a full ExtractedJobInfo from regex/keyword heuristics alone."""
    return ExtractedJobInfo(
        title=extract_title(text),
        company=extract_company(text),
        location=extract_location(text),
        salary=extract_salary(text),
        description=text[:description_chars],
        requirements=extract_requirements(text),
        responsibilities=extract_responsibilities(text),
        benefits=[],
        employment_type=extract_employment_type(text),
        experience_level=extract_experience_level(text),
        skills=extract_skills(text),
        is_remote=is_remote_text(text)
    )
