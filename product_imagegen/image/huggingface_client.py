"""Hugging Face Inference API text-to-image client (Service A).

Processing flow:
    1. Require a configured API key (local `ConfigurationError` otherwise).
    2. POST `{"inputs": prompt}` to the configured model endpoint.
    3. Expect a raw binary image payload and return its bytes.

Base64 and temporary files:
    - No Base64 decoding is performed.
    - Bytes are returned to the orchestrator, which persists them.

Error handling strategy:
    - Missing credential -> `ConfigurationError` (no network call).
    - Transport failure, timeout, non-2xx -> `ProviderError`.
    - JSON or empty body on a 2xx response -> `ProviderError` (malformed payload).

Performance characteristics:
    One synchronous HTTP call bounded by `ProviderSettings.timeout_seconds`.
"""

from __future__ import annotations

import logging

from product_imagegen.core.errors import ConfigurationError, ProviderError
from product_imagegen.core.generation_types import Provider
from product_imagegen.image.client import send_provider_request, upstream_message
from product_imagegen.image.provider_config import PROVIDERS, ProviderSettings, setup_guidance


logger = logging.getLogger(__name__)


class HuggingFaceClient:
    """Synchronous adapter for the Hugging Face hosted inference endpoint."""

    provider = Provider.HUGGINGFACE

    def __init__(self, settings: ProviderSettings) -> None:
        self.settings = settings

    @property
    def configured(self) -> bool:
        return self.settings.is_configured(self.provider)

    @property
    def url(self) -> str:
        return PROVIDERS[self.provider]["url"].format(model=self.settings.huggingface_model)

    def invoke(self, prompt: str) -> bytes:
        """Generate one image for `prompt` and return the raw image bytes.

        Raises:
            ConfigurationError: `HUGGINGFACE_API_KEY` is not set.
            ProviderError: The remote call failed or returned a non-image body.
        """
        api_key = self.settings.huggingface_api_key
        if not api_key:
            raise ConfigurationError(
                self.provider.value,
                "HUGGINGFACE_API_KEY is not set",
                setup_guidance(self.provider),
            )

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Accept": "image/png",
        }
        logger.info("Requesting %s image (model=%s)", self.provider.label, self.settings.huggingface_model)
        response = send_provider_request(
            self.provider.value,
            self.url,
            {"inputs": prompt},
            headers,
            self.settings.timeout_seconds,
        )

        content_type = (response.headers.get("Content-Type") or "").lower()
        if "json" in content_type or content_type.startswith("text/"):
            raise ProviderError(
                self.provider.value,
                f"Expected image payload, got {content_type}: {upstream_message(response)}",
            )
        if not response.content:
            raise ProviderError(self.provider.value, "Provider returned an empty image payload")

        return response.content
