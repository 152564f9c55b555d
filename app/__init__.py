# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App factory, lifespan, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - cors.py: Allowlist CORS policy and middleware
# - exceptions.py: Error types and JSON error handlers
# - auth/: Bearer-token gate and the auth route group
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
