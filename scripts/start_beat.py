#!/usr/bin/env python3
# =============================================================================
# scripts/start_beat.py - Celery Beat Entry Point
# =============================================================================
# Fires the cron jobs in workers/schedule.py outside development.
# Run exactly one beat process per deployment.
#
# Usage:
#   python scripts/start_beat.py
#   celery -A workers.celery_app beat --loglevel=info
# =============================================================================

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workers.celery_app import celery_app


def main():
    """Start Celery beat."""
    print("Starting FinPlatform cron scheduler (Celery beat)...")
    celery_app.start(["beat", "--loglevel=info"])


if __name__ == "__main__":
    main()
