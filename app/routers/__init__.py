# =============================================================================
# app/routers/ - API Route Definitions & Mount Table
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - user.py: Profile of the authenticated user
# - transaction.py: Transaction CRUD
# - report.py: Monthly reports and report settings
# - analytics.py: Dashboard summary
#
# The auth group lives in app/auth/routes.py.
#
# ROUTE_GROUPS is the single mount table: every group is mounted at
# {base_path}/{feature}; protected groups sit behind get_current_user so
# their handlers never run for unauthenticated requests.
# =============================================================================

import logging
from typing import NamedTuple

from fastapi import APIRouter, Depends, FastAPI

from app.auth import get_current_user
from app.auth import routes as auth_routes

from . import analytics
from . import health
from . import report
from . import transaction
from . import user

logger = logging.getLogger(__name__)


class RouteGroup(NamedTuple):
    feature: str
    router: APIRouter
    protected: bool
    tag: str


ROUTE_GROUPS: tuple[RouteGroup, ...] = (
    RouteGroup("auth", auth_routes.router, protected=False, tag="Auth"),
    RouteGroup("user", user.router, protected=True, tag="User"),
    RouteGroup("transaction", transaction.router, protected=True, tag="Transaction"),
    RouteGroup("report", report.router, protected=True, tag="Report"),
    RouteGroup("analytics", analytics.router, protected=True, tag="Analytics"),
)


def mount_routes(app: FastAPI, base_path: str) -> None:
    """
    Register every route group under the (already normalized) base path.

    Args:
        app: The application to mount onto
        base_path: "" or "/prefix" (no trailing slash)
    """
    app.include_router(health.router, prefix=base_path, tags=["Health"])

    for group in ROUTE_GROUPS:
        prefix = f"{base_path}/{group.feature}"
        dependencies = [Depends(get_current_user)] if group.protected else []
        app.include_router(
            group.router,
            prefix=prefix,
            tags=[group.tag],
            dependencies=dependencies,
        )
        logger.debug(f"Mounted {prefix} ({'protected' if group.protected else 'public'})")


__all__ = [
    "ROUTE_GROUPS",
    "RouteGroup",
    "mount_routes",
]
