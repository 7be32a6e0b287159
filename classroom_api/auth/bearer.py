"""Shared-secret bearer token check for service-to-service routes."""

import logging
import secrets
from typing import Callable

from fastapi import Request, Response
from fastapi.routing import APIRoute

from classroom_api.errors import InvalidCredential, MissingCredential, ServiceMisconfigured

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def authenticate(authorization: str | None, secret: str | None) -> None:
    """Raise unless ``authorization`` carries exactly ``secret`` as a bearer token.

    Configuration is checked first, so an unset secret fails every request
    even one without credentials.
    """
    if not secret:
        logger.error("TPA_API_BEARER_TOKEN is not configured")
        raise ServiceMisconfigured()

    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MissingCredential()

    token = authorization[len(BEARER_PREFIX):].encode()
    expected = secret.encode()
    # Only the length may short-circuit; the content comparison is constant time.
    if len(token) != len(expected) or not secrets.compare_digest(token, expected):
        raise InvalidCredential()


def require_service_token(request: Request) -> None:
    authenticate(
        request.headers.get("authorization"),
        request.app.state.settings.tpa_api_bearer_token,
    )


class ServiceTokenRoute(APIRoute):
    """Route that checks the bearer token before the request body is read.

    FastAPI parses the body before solving dependencies, so a dependency
    would let a malformed body answer 400 ahead of the token check.
    """

    def get_route_handler(self) -> Callable:
        handler = super().get_route_handler()

        async def gated_handler(request: Request) -> Response:
            require_service_token(request)
            return await handler(request)

        return gated_handler
