"""Shared HTTP helpers used by remote gem sources.

Encapsulates common request/timeout error handling so sources avoid
duplicating try/except blocks. Failures surface as FetchError; the installer
decides whether a failed download aborts the run.
"""
from __future__ import annotations

import logging
import os
import tempfile
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import requests

from constants import Constants
from common.errors import FetchError
from common.logging_utils import extra_context, is_debug_enabled, Timer

logger = logging.getLogger(__name__)


def safe_url(url: str) -> str:
    """Strip credentials from a URL before it reaches a log line."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<invalid url>"
    if parts.username or parts.password:
        host = parts.hostname or ""
        if parts.port:
            host = f"{host}:{parts.port}"
        return urlunsplit((parts.scheme, host, parts.path, "", ""))
    return url


def safe_get(url: str, *, context: str, **kwargs: Any) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces."""
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
                    context=context,
                ),
            )
        try:
            res = requests.get(url, timeout=Constants.REQUEST_TIMEOUT, **kwargs)
        except requests.Timeout as exc:
            raise FetchError(
                f"{context} request timed out after {Constants.REQUEST_TIMEOUT} seconds"
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            raise FetchError(f"{context} connection error: {exc}") from exc
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context,
                ),
            )
        return res


def download(url: str, dest: str, *, context: str) -> str:
    """Stream ``url`` into ``dest``.

    The body lands in a sibling temp file first and is renamed into place
    only once complete, so an interrupted download never leaves a partial
    archive at ``dest``.
    """
    res = safe_get(url, context=context, stream=True)
    try:
        if res.status_code != 200:
            raise FetchError(f"{context} returned HTTP {res.status_code} for {safe_url(url)}")
        directory = os.path.dirname(dest) or "."
        os.makedirs(directory, exist_ok=True)
        fd, partial = tempfile.mkstemp(prefix=".download-", dir=directory)
        try:
            with os.fdopen(fd, "wb") as fh:
                for chunk in res.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
            os.replace(partial, dest)
        except requests.RequestException as exc:
            raise FetchError(f"{context} download interrupted: {exc}") from exc
        finally:
            if os.path.exists(partial):
                os.unlink(partial)
    finally:
        res.close()
    logger.debug("Downloaded %s to %s", safe_url(url), dest)
    return dest
