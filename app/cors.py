# =============================================================================
# app/cors.py - Origin Allowlist CORS Gate
# =============================================================================
# Decides, per request, whether a browser origin may talk to the API:
#
#   no (or empty) Origin    -> NO_ORIGIN       pass through (curl, server-to-server)
#   Origin in allowlist     -> ORIGIN_ALLOWED  echo origin, allow credentials
#   Origin not in allowlist -> ORIGIN_DENIED   403, no Access-Control-Allow-Origin
#
# Preflight (OPTIONS) requests get the same decision on every path.
# "Vary: Origin" is set on every response so shared caches never serve one
# origin's response to another.
#
# Usage:
#   policy = CorsPolicy(allowed_origins=settings.allowed_origins)
#   app.add_middleware(AllowlistCORSMiddleware, policy=policy)
# =============================================================================

import logging
from dataclasses import dataclass
from enum import Enum

from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.exceptions import CorsOriginDeniedError
from lib.origins import normalize_origin

logger = logging.getLogger(__name__)


ALLOWED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
ALLOWED_HEADERS = ("Content-Type", "Authorization", "Accept")


class CorsDecision(str, Enum):
    """Outcome of the CORS gate for one request."""
    NO_ORIGIN = "no_origin"
    ORIGIN_ALLOWED = "origin_allowed"
    ORIGIN_DENIED = "origin_denied"


@dataclass(frozen=True)
class CorsPolicy:
    """
    Immutable CORS configuration, built once at startup.

    Membership is exact-match on normalized origins; there is no wildcard or
    subdomain matching.
    """
    allowed_origins: frozenset[str]
    allow_methods: tuple[str, ...] = ALLOWED_METHODS
    allow_headers: tuple[str, ...] = ALLOWED_HEADERS
    allow_credentials: bool = True

    def evaluate(self, origin: str | None) -> CorsDecision:
        """Classify a raw Origin header value (None when the header is absent)."""
        if not origin:
            return CorsDecision.NO_ORIGIN
        if normalize_origin(origin) in self.allowed_origins:
            return CorsDecision.ORIGIN_ALLOWED
        return CorsDecision.ORIGIN_DENIED

    def is_allowed(self, origin: str) -> bool:
        return self.evaluate(origin) is CorsDecision.ORIGIN_ALLOWED


class AllowlistCORSMiddleware(CORSMiddleware):
    """
    CORSMiddleware driven by a CorsPolicy.

    Allowed origins and preflights are answered by the stock middleware, with
    origin comparison going through normalize_origin. Denied origins are
    rejected here before any route runs.
    """

    def __init__(self, app: ASGIApp, policy: CorsPolicy) -> None:
        super().__init__(
            app,
            allow_origins=sorted(policy.allowed_origins),
            allow_methods=policy.allow_methods,
            allow_headers=policy.allow_headers,
            allow_credentials=policy.allow_credentials,
        )
        self.policy = policy

    def is_allowed_origin(self, origin: str) -> bool:
        return self.policy.is_allowed(origin)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_vary(message: Message) -> None:
            if message["type"] == "http.response.start":
                _ensure_vary_origin(MutableHeaders(scope=message))
            await send(message)

        origin = Headers(scope=scope).get("origin")
        decision = self.policy.evaluate(origin)

        if decision is CorsDecision.ORIGIN_DENIED:
            logger.warning(f"CORS blocked {scope['method']} {scope['path']} from origin {origin!r}")
            exc = CorsOriginDeniedError(origin)
            response = JSONResponse(status_code=exc.status_code, content=exc.to_dict())
            await response(scope, receive, send_with_vary)
            return

        if decision is CorsDecision.NO_ORIGIN:
            await self.app(scope, receive, send_with_vary)
            return

        await super().__call__(scope, receive, send_with_vary)


def _ensure_vary_origin(headers: MutableHeaders) -> None:
    """Add "Origin" to the Vary header unless it is already listed."""
    existing = headers.get("vary")
    if existing is None:
        headers["Vary"] = "Origin"
        return
    tokens = {token.strip().lower() for token in existing.split(",")}
    if "origin" not in tokens and "*" not in tokens:
        headers["Vary"] = f"{existing}, Origin"
