"""Shared HTTP helper used by registry-backed metadata queries.

Encapsulates request/timeout error handling so backends avoid duplicating
try/except blocks.
"""
from __future__ import annotations

import logging
from typing import Any

import requests

from constants import Constants, ExitCodes
from common.errors import die
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def safe_get(url: str, *, context: str, **kwargs: Any) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "npm").
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object.
    """
    safe_target = safe_url(url)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = requests.get(url, timeout=Constants.REQUEST_TIMEOUT, **kwargs)
        except requests.Timeout:
            die(
                "%s request timed out after %s seconds",
                context,
                Constants.REQUEST_TIMEOUT,
                code=ExitCodes.CONNECTION_ERROR,
            )
        except requests.RequestException as exc:  # includes ConnectionError
            die("%s connection error: %s", context, exc, code=ExitCodes.CONNECTION_ERROR)
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response ok",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res
