# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the logic behind the feature route groups:
# - models/: Pydantic schemas for transactions, reports and analytics
# - services/: Supabase-backed services used by routers and cron jobs
#
# Code in this package should NOT import from FastAPI or Celery.
# This keeps the logic testable and reusable.
# =============================================================================
