"""Shared HTTP transport for image-provider clients.

Processing flow:
    1. Submit one JSON payload to a provider endpoint with a bounded timeout.
    2. Translate transport failures (timeout, connection) into `ProviderError`.
    3. Translate non-2xx responses into `ProviderError` with the upstream text.
    4. Return the raw `requests.Response` for provider-specific parsing.

Retry behavior:
    No retry loop is implemented. Each call is attempted exactly once; fallback
    between providers belongs to `product_imagegen.core.engine`.

Security considerations:
    Headers (which carry credentials) are never logged or embedded in errors.
"""

from __future__ import annotations

import logging

import requests

from product_imagegen.core.errors import ProviderError


logger = logging.getLogger(__name__)

# Upstream bodies are truncated before being surfaced to callers.
MAX_UPSTREAM_MESSAGE_CHARS = 500


def upstream_message(response: requests.Response) -> str:
    """Extract a readable failure message from a provider response.

    Prefers the `error` / `message` / `detail` field of a JSON body and falls
    back to the raw text. An empty body yields the HTTP status line.
    """
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        for key in ("error", "message", "detail"):
            value = data.get(key)
            if isinstance(value, dict):
                value = value.get("message") or value.get("name")
            if value:
                return str(value)[:MAX_UPSTREAM_MESSAGE_CHARS]

    text = (response.text or "").strip()
    if text:
        return text[:MAX_UPSTREAM_MESSAGE_CHARS]
    return f"HTTP {response.status_code}"


def send_provider_request(
    provider: str,
    url: str,
    payload: dict,
    headers: dict,
    timeout: float,
) -> requests.Response:
    """POST one request to a provider and return the successful response.

    Args:
        provider: Provider identifier used to label errors.
        url: Provider endpoint.
        payload: JSON body.
        headers: Request headers including credentials.
        timeout: Upper bound in seconds for the whole call.

    Returns:
        Response with a 2xx status.

    Error handling:
        - Timeout -> `ProviderError` ("timed out after Ns").
        - Other `requests` exceptions -> `ProviderError` with exception text.
        - Non-2xx status -> `ProviderError` with upstream message.
    """
    logger.debug("POST %s (provider=%s, timeout=%ss)", url, provider, timeout)
    try:
        response = requests.post(url, json=payload, headers=headers, timeout=timeout)
    except requests.exceptions.Timeout:
        raise ProviderError(provider, f"Request timed out after {timeout:g}s")
    except requests.exceptions.RequestException as err:
        raise ProviderError(provider, f"Request failed: {err.__class__.__name__}: {err}")

    if not 200 <= response.status_code < 300:
        message = upstream_message(response)
        logger.warning(
            "Provider %s returned status %s: %s", provider, response.status_code, message
        )
        raise ProviderError(
            provider,
            f"Request failed with status {response.status_code}: {message}",
        )

    return response
