"""
Job Board API
Resume building, AI-assisted writing, job postings and applications.

Architecture:
- Supabase Postgres: users, companies, job postings, applications, resumes
- Supabase Auth: session tokens (verified locally, refreshed remotely)
- Supabase Storage: uploaded resume files
- OpenAI: cover letters, resume enhancement, matching
"""

__version__ = "1.0.0"
