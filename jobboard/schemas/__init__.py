"""
Schemas module - Request/Response schemas for API endpoints.

Everything lives in schemas.schemas; import from there:
    from jobboard.schemas.schemas import JobSummary, ResumeWrite
"""
