"""
Tests for HTML stripping and the regex/keyword heuristics.

Run with: python -m pytest jobassist/tests/test_text_extraction.py -v
"""

from jobassist.scraper import heuristics
from jobassist.scraper.text import strip_html


SAMPLE_POSTING = """Backend Engineer (Senior)
Company: Acme Robotics
Location: Austin, TX
Salary: $140,000 - $170,000 per year
This is a full-time role.

Responsibilities:
- Design and build Python services
- Own our PostgreSQL and Redis infrastructure
Requirements:
- 5+ years of experience building APIs
- Experience with Kubernetes and AWS
- Proficient in Python
Benefits
- Health insurance
"""


# ============================================================================
# strip_html
# ============================================================================

def test_strip_html_removes_script_contents():
    html = "<p>Before</p><script>var secret = 'do not show';</script><p>After</p>"
    text = strip_html(html)
    assert "secret" not in text
    assert "Before" in text and "After" in text


def test_strip_html_removes_style_and_tags():
    html = "<html><head><style>.x { color: red }</style></head><body><h1>Title</h1><div>Body</div></body></html>"
    assert strip_html(html) == "Title Body"


def test_strip_html_decodes_entities_and_collapses_whitespace():
    html = "<p>R&amp;D&nbsp;team</p>\n\n   <p>&lt;Python&gt; &quot;fast&quot; &#39;ok&#39;</p>"
    assert strip_html(html) == "R&D team <Python> \"fast\" 'ok'"


def test_strip_html_empty():
    assert strip_html("") == ""


# ============================================================================
# Heuristics
# ============================================================================

def test_title_company_location_salary():
    assert heuristics.extract_title("Position: Staff Engineer\nmore") == "Staff Engineer"
    assert heuristics.extract_title("Backend Engineer, Platform\nstuff") == "Backend Engineer, Platform"
    assert heuristics.extract_title("Senior Backend Engineer\nstuff") is None
    assert heuristics.extract_company("Company: Acme Robotics\n") == "Acme Robotics"
    assert heuristics.extract_location("Location: Austin, TX\n") == "Austin, TX"
    assert heuristics.extract_location("Work with us in Seattle, WA") == "Seattle"
    assert heuristics.extract_salary("Pay is $140,000 - $170,000 per year") == "$140,000 - $170,000 per year"
    assert heuristics.extract_salary("Compensation: competitive\n") == "competitive"


def test_company_and_location_are_capped():
    long_name = "X" * 300
    assert len(heuristics.extract_company(f"Employer: {long_name}")) == 100
    assert len(heuristics.extract_location(f"Location: {long_name}")) == 100


def test_nothing_found_returns_none_or_empty():
    text = "lorem ipsum dolor sit amet"
    assert heuristics.extract_title(text) is None
    assert heuristics.extract_salary(text) is None
    assert heuristics.extract_employment_type(text) is None
    assert heuristics.extract_experience_level(text) is None
    assert heuristics.extract_requirements(text) == []
    assert heuristics.extract_responsibilities(text) == []
    assert heuristics.extract_skills(text) == []


def test_employment_type_and_level_priority():
    assert heuristics.extract_employment_type("Full-time or contract") == "Full-time"
    assert heuristics.extract_employment_type("6 month contract") == "Contract"
    assert heuristics.extract_employment_type("Summer internship") == "Internship"
    assert heuristics.extract_experience_level("Senior or Lead") == "Senior"
    assert heuristics.extract_experience_level("Principal engineer") == "Lead"
    assert heuristics.extract_experience_level("Entry-level role") == "Entry"
    assert heuristics.extract_experience_level("mid-level") == "Mid"


def test_requirements_from_section_and_phrases():
    requirements = heuristics.extract_requirements(SAMPLE_POSTING)
    assert "5+ years of experience building APIs" in requirements
    assert "Experience with Kubernetes and AWS" in requirements
    assert "Proficient in Python" in requirements
    assert "Health insurance" not in requirements
    assert len(requirements) == len(set(requirements))
    assert len(requirements) <= 15


def test_responsibilities_section():
    responsibilities = heuristics.extract_responsibilities(SAMPLE_POSTING)
    assert responsibilities == [
        "Design and build Python services",
        "Own our PostgreSQL and Redis infrastructure",
    ]


def test_skills_deduplicated_in_order():
    skills = heuristics.extract_skills("Python, python, AWS, Docker and PostgreSQL; Python again")
    assert skills == ["Python", "python", "PostgreSQL", "AWS", "Docker"]


def test_skills_capped():
    text = " ".join(["Python Java Ruby Go Rust PHP Swift Kotlin Scala React Vue Angular Svelte",
                     "Django Flask FastAPI Spring Laravel Rails PostgreSQL MySQL MongoDB Redis",
                     "Elasticsearch DynamoDB Cassandra SQLite Oracle AWS Azure GCP Docker Kubernetes"])
    assert len(heuristics.extract_skills(text)) == 30


def test_extract_with_heuristics_combines_fields():
    info = heuristics.extract_with_heuristics(SAMPLE_POSTING + " Remote friendly.", description_chars=40)
    assert info.title == "Backend Engineer (Senior)"
    assert info.company == "Acme Robotics"
    assert info.employment_type == "Full-time"
    assert info.experience_level == "Senior"
    assert info.is_remote is True
    assert len(info.description) == 40
    assert "Python" in info.skills
    assert info.benefits == []
