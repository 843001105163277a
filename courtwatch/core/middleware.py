"""Middleware that turns away vulnerability scanners before routing."""
import logging
from typing import Callable, Iterable, Optional

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

BLOCKED_PATHS = [
    "/wp-admin",
    "/wp-content",
    "/wp-includes",
    "/wordpress",
    "/wp-",
    ".php",
    "/cgi-bin",
    "/xmlrpc",
    "/.env",
    "/.git",
    "/phpmyadmin",
    "/.well-known/acme-challenge",
]

BLOCKED_USER_AGENTS = [
    "sqlmap",
    "nikto",
    "masscan",
    "nmap",
    "zgrab",
    "shodan",
    "censys",
    "scanning",
    "vulnerability",
    "exploit",
    "hack",
]


class BotBlockMiddleware(BaseHTTPMiddleware):
    """
    404 for paths only scanners ask for, 403 for scanner user agents.

    Both checks are case-insensitive substring matches.
    """

    def __init__(
        self,
        app,
        blocked_paths: Optional[Iterable[str]] = None,
        blocked_user_agents: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        self.blocked_paths = [p.lower() for p in (blocked_paths or BLOCKED_PATHS)]
        self.blocked_user_agents = [a.lower() for a in (blocked_user_agents or BLOCKED_USER_AGENTS)]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path.lower()
        for blocked in self.blocked_paths:
            if blocked in path:
                logger.info(f"Blocked suspicious request: {request.url.path}")
                return PlainTextResponse("Not Found", status_code=404)

        user_agent = request.headers.get("user-agent", "").lower()
        for blocked in self.blocked_user_agents:
            if blocked in user_agent:
                logger.info(f"Blocked suspicious user agent: {user_agent}")
                return PlainTextResponse("Forbidden", status_code=403)

        return await call_next(request)
