# JobAssist - Job Search Assistance Backend
# Version 0.1.0

"""
JobAssist server-side helpers for the job search assistant.

Layers:
1. Cache - Redis-backed get-or-compute cache for job search results
2. Scraper - Job board URL dispatch (Lever, Greenhouse, Ashby) and page scraping
3. Extractor - Structured job info from raw text via Claude, with regex fallback
4. API - FastAPI routes for the resume builder and cache administration
"""

__version__ = "0.1.0"
