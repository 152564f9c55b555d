# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers and beat.
# =============================================================================

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge tasks after they complete (not before)
    task_acks_late = True

    worker_prefetch_multiplier = 1

    # Task results expire after 1 day
    result_expires = 86400

    # Cron jobs touch every user; allow them 30 minutes
    task_time_limit = 1800
    task_soft_time_limit = 1740

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_routes = {
        "workers.tasks.process_recurring_transactions": {"queue": "cron"},
        "workers.tasks.generate_monthly_reports": {"queue": "cron"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Timezone
    # -------------------------------------------------------------------------

    # Cron expressions in workers/schedule.py are UTC
    timezone = "UTC"
    enable_utc = True
