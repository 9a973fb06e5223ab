"""Remote collaborators: the REST gateway, token discovery, and process helpers."""

from __future__ import annotations

from .auth import AuthError, resolve_token
from .client import DEFAULT_API_URL, GatewayError, GitHubGateway, LogsUnavailable, RerunScope
from .helper import HelperError
from .logs import flatten_log_bundle

__all__ = [
    "AuthError",
    "DEFAULT_API_URL",
    "GatewayError",
    "GitHubGateway",
    "HelperError",
    "LogsUnavailable",
    "RerunScope",
    "flatten_log_bundle",
    "resolve_token",
]
