"""Utility for logging outgoing API requests when KIOSK_LOG_REQUESTS is enabled."""

import json
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}
SENSITIVE_PARAMS = {"appid", "api_key", "client_secret", "code", "refresh_token"}
REDACTED = "***REDACTED***"


def should_log_requests() -> bool:
    """Check if request logging is enabled via KIOSK_LOG_REQUESTS environment variable."""
    return os.getenv("KIOSK_LOG_REQUESTS", "").lower() == "true"


def _redact_params(params: dict[str, Any]) -> dict[str, Any]:
    return {k: REDACTED if k.lower() in SENSITIVE_PARAMS else v for k, v in params.items()}


def _build_url_with_params(url: str, params: dict[str, Any] | None) -> str:
    """Build full URL with (redacted) query parameters."""
    if not params:
        return url
    param_str = "&".join(f"{k}={v}" for k, v in sorted(_redact_params(params).items()))
    return f"{url}?{param_str}" if "?" not in url else f"{url}&{param_str}"


def _redact_sensitive_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers from logging."""
    return {k: REDACTED if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()}


def log_api_request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> None:
    """Log API request details if KIOSK_LOG_REQUESTS is enabled.

    Args:
        method: HTTP method (GET, POST, etc.).
        url: Request URL.
        params: Query parameters (credentials are redacted).
        headers: Request headers (credentials are redacted).
    """
    if not should_log_requests():
        return

    log_parts = [f"{method} {_build_url_with_params(url, params)}"]
    if headers:
        log_parts.append(f"Headers: {json.dumps(_redact_sensitive_headers(headers), indent=2)}")

    logger.info("API Request:\n" + "\n".join(log_parts))
