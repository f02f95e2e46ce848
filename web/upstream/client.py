"""
HTTP helpers for the campus CMS and the schedule backend.

Every page and proxy route in this site goes through these functions so that
timeouts, logging and error translation are handled in one place.
"""

import logging
from hashlib import sha256
from urllib.parse import urlencode

import requests
from django.conf import settings
from django.core.cache import cache

from .exceptions import UpstreamError

logger = logging.getLogger(__name__)

LOG_BODY_LIMIT = 2000


def _truncate(text: str) -> str:
    if len(text) > LOG_BODY_LIMIT:
        return f"{text[:LOG_BODY_LIMIT]}... (truncated)"
    return text


def is_success(response) -> bool:
    return 200 <= response.status_code < 300


def public_url(path: str) -> str:
    """Absolute upstream URL for a CMS path; absolute URLs pass through."""
    if path.startswith("http://") or path.startswith("https://"):
        return path
    base = settings.API_BASE.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"


def build_query(params: dict | None) -> str:
    if not params:
        return ""
    clean = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        clean[key] = str(value)
    qs = urlencode(clean)
    return f"?{qs}" if qs else ""


def json_or_empty(response) -> dict:
    """Decode a JSON body, falling back to an empty dict for empty/non-JSON bodies."""
    try:
        return response.json()
    except ValueError:
        return {}


def error_message(data, fallback: str) -> str:
    """Human readable message from an upstream error body (detail/error keys)."""
    if isinstance(data, dict):
        for key in ("detail", "error"):
            value = data.get(key)
            if value:
                if isinstance(value, list):
                    return " ".join(str(item) for item in value)
                return str(value)
    return fallback


def api_get(path: str, params: dict | None = None, use_cache: bool = True):
    """
    GET a JSON document from upstream.

    Successful responses are cached for UPSTREAM_CACHE_SECONDS.
    Raises UpstreamError on network failures, non-2xx statuses and invalid JSON.
    """
    url = f"{public_url(path)}{build_query(params)}"
    cache_key = f"upstream:get:{sha256(url.encode('utf-8')).hexdigest()}"

    if use_cache:
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

    try:
        response = requests.get(
            url,
            headers={"Accept": "application/json"},
            timeout=settings.UPSTREAM_TIMEOUT,
        )
    except requests.RequestException as exc:
        logger.warning("GET %s failed: %s", url, exc)
        raise UpstreamError(f"GET {url} failed: {exc}") from exc

    logger.info("GET %s -> %s", url, response.status_code)
    if settings.DEBUG_API:
        logger.debug("GET %s body: %s", url, _truncate(response.text))

    if not is_success(response):
        raise UpstreamError(
            f"GET {url} failed: {response.status_code} {response.reason}",
            status_code=response.status_code,
            data=json_or_empty(response),
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise UpstreamError(
            f"GET {url} returned invalid JSON", status_code=response.status_code
        ) from exc

    if use_cache:
        cache.set(cache_key, data, timeout=settings.UPSTREAM_CACHE_SECONDS)
    return data


def api_get_raw(path: str, query_string: str = ""):
    """Uncached GET returning the raw response, used by passthrough proxies."""
    url = public_url(path)
    if query_string:
        url = f"{url}?{query_string}"
    try:
        response = requests.get(
            url,
            headers={"Accept": "application/json"},
            timeout=settings.UPSTREAM_TIMEOUT,
        )
    except requests.RequestException as exc:
        logger.warning("GET %s failed: %s", url, exc)
        raise UpstreamError(f"GET {url} failed: {exc}") from exc

    logger.info("[proxy] %s -> %s %s", url, response.status_code, response.reason)
    if settings.DEBUG_API:
        logger.debug("[proxy] %s body: %s", url, _truncate(response.text))
    return response


def post_json(path: str, payload: dict):
    """POST a JSON body; returns the raw response so callers can relay the status."""
    url = public_url(path)
    try:
        response = requests.post(
            url,
            json=payload,
            headers={"Accept": "application/json"},
            timeout=settings.UPSTREAM_TIMEOUT,
        )
    except requests.RequestException as exc:
        logger.warning("POST %s failed: %s", url, exc)
        raise UpstreamError(f"POST {url} failed: {exc}") from exc

    logger.info("POST %s -> %s", url, response.status_code)
    return response


def post_multipart(path: str, data: dict, files: list | None = None):
    """POST form fields and file parts (multipart/form-data)."""
    url = public_url(path)
    try:
        response = requests.post(
            url,
            data=data,
            files=files or None,
            headers={"Accept": "application/json"},
            timeout=settings.UPSTREAM_TIMEOUT,
        )
    except requests.RequestException as exc:
        logger.warning("POST %s failed: %s", url, exc)
        raise UpstreamError(f"POST {url} failed: {exc}") from exc

    logger.info("POST %s (multipart) -> %s", url, response.status_code)
    return response
