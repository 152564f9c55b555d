# =============================================================================
# workers/ - Celery Background Jobs
# =============================================================================
# This package contains the recurring (cron) jobs of the API:
#
# Components:
# - celery_app.py: Celery application configuration + beat schedule
# - tasks.py: Task definitions (recurring transactions, monthly reports)
# - schedule.py: CRON_JOBS and the in-process runner used in development
# - config.py: Worker-specific settings
#
# Usage:
#   # Production: worker + beat
#   celery -A workers.celery_app worker -Q default,cron --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
#
#   # Development: nothing to start, the API runs the jobs itself
# =============================================================================
