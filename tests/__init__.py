# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the FinPlatform API:
# - test_origins.py: base path / origin normalization and allowlist building
# - test_config.py: settings parsing
# - test_cors.py: CORS gate decisions and response headers
# - test_routes.py: route mount table and bearer-token gate
# - test_auth.py: token verification and the auth route group
# - test_bootstrap.py: startup sequence, root handler, error funnel
# - test_services.py: recurrence, summaries and reports
# - test_crons.py: cron schedule and in-process runner
#
# Run tests with: pytest
# =============================================================================
