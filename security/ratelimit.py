"""Per-IP fixed-window rate limits for the public API.

Each public write endpoint carries its own tier on top of the shared
``general`` tier, which counts every public request from one IP against a
single budget regardless of route. Health and admin routes are not
decorated with the general tier; login has its own.

``enforce_rate_limits`` runs as HTTP middleware and counts a request against
the tiers of the route it resolves to before the body is parsed or
validated, so malformed submissions spend quota like any other. ``/api``
paths no route claims count toward the general tier.
"""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.routing import Match
from config import (
    API_PREFIX,
    RATE_LIMIT_ENABLED,
    GENERAL_RATE_LIMIT,
    LOGIN_RATE_LIMIT,
    GUESTBOOK_RATE_LIMIT,
    NEWSLETTER_RATE_LIMIT,
    CONTACT_RATE_LIMIT,
)

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    strategy="fixed-window",
    enabled=RATE_LIMIT_ENABLED,
)

general_limit = limiter.shared_limit(
    GENERAL_RATE_LIMIT,
    scope="general",
    error_message="Too many requests. Please try again in a few minutes.",
)

login_limit = limiter.limit(
    LOGIN_RATE_LIMIT,
    error_message="Too many login attempts. Try again in 15 minutes.",
)

guestbook_write_limit = limiter.limit(
    GUESTBOOK_RATE_LIMIT,
    error_message="You've signed the guestbook recently. Come back in a bit!",
)

newsletter_limit = limiter.limit(
    NEWSLETTER_RATE_LIMIT,
    error_message="Too many subscribe attempts. Please try again later.",
)

contact_limit = limiter.limit(
    CONTACT_RATE_LIMIT,
    error_message="You've sent a few messages already. I'll get back to you soon!",
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit hit on {request.url.path} from {get_remote_address(request)}: {exc.detail}")
    return JSONResponse(status_code=429, content={"error": exc.detail})


def describe_limits():
    return {
        "general": GENERAL_RATE_LIMIT,
        "login": LOGIN_RATE_LIMIT,
        "guestbook": GUESTBOOK_RATE_LIMIT,
        "newsletter": NEWSLETTER_RATE_LIMIT,
        "contact": CONTACT_RATE_LIMIT,
    }


@general_limit
def unrouted_api_request(request: Request):
    """Limit holder for /api paths that no route matches."""


def resolve_endpoint(request: Request):
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "endpoint", None)
    return unrouted_api_request


async def enforce_rate_limits(request: Request, call_next):
    if not limiter.enabled or not request.url.path.startswith(API_PREFIX):
        return await call_next(request)

    try:
        limiter._check_request_limit(request, resolve_endpoint(request), False)
    except RateLimitExceeded as exc:
        return rate_limit_exceeded_handler(request, exc)

    # Already counted; the route decorators skip their own check
    request.state._rate_limiting_complete = True
    return await call_next(request)
