"""FASHN.ai image-conditioned generation client (Service B).

Processing flow:
    1. Require a configured API key (local `ConfigurationError` otherwise).
    2. Submit a `product-to-model` job with the prompt and the reference image URL.
    3. Return the job/result descriptor unchanged.

Multimodal scope:
    The reference image is passed by URL only. This client never reads or
    uploads local files.

Polling:
    Not performed. The provider may answer with an asynchronous job handle
    (`{"id": ..., "error": null}`); callers receive it as-is.

Error handling strategy:
    - Missing credential -> `ConfigurationError` (no network call).
    - Missing reference image URL -> `ValueError` (programming error).
    - Transport failure, timeout, non-2xx -> `ProviderError`.
    - Non-JSON body or descriptor with a non-null `error` -> `ProviderError`.
"""

from __future__ import annotations

import logging

from product_imagegen.core.errors import ConfigurationError, ProviderError
from product_imagegen.core.generation_types import Provider
from product_imagegen.image.client import send_provider_request
from product_imagegen.image.provider_config import (
    FASHN_MODEL_NAME,
    PROVIDERS,
    ProviderSettings,
    setup_guidance,
)


logger = logging.getLogger(__name__)


class FashnClient:
    """Synchronous adapter for the FASHN.ai run endpoint."""

    provider = Provider.FASHN

    def __init__(self, settings: ProviderSettings) -> None:
        self.settings = settings

    @property
    def configured(self) -> bool:
        return self.settings.is_configured(self.provider)

    def invoke(self, prompt: str, reference_image_url: str) -> dict:
        """Submit one generation job and return the provider descriptor.

        Args:
            prompt: Text description of the desired shot.
            reference_image_url: Publicly reachable URL of the garment image.

        Raises:
            ConfigurationError: `FASHN_API_KEY` is not set.
            ProviderError: The remote call failed or the descriptor reports an error.
        """
        api_key = self.settings.fashn_api_key
        if not api_key:
            raise ConfigurationError(
                self.provider.value,
                "FASHN_API_KEY is not set",
                setup_guidance(self.provider),
            )
        if not reference_image_url:
            raise ValueError("reference_image_url is required")

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model_name": FASHN_MODEL_NAME,
            "inputs": {
                "product_image": reference_image_url,
                "prompt": prompt,
            },
        }

        logger.info("Submitting %s job for %s", self.provider.label, reference_image_url)
        response = send_provider_request(
            self.provider.value,
            PROVIDERS[self.provider]["url"],
            payload,
            headers,
            self.settings.timeout_seconds,
        )

        try:
            descriptor = response.json()
        except ValueError:
            raise ProviderError(self.provider.value, "Provider returned a non-JSON descriptor")

        if not isinstance(descriptor, dict):
            raise ProviderError(self.provider.value, "Provider returned an unexpected descriptor")

        error = descriptor.get("error")
        if error:
            if isinstance(error, dict):
                error = error.get("message") or error.get("name") or error
            raise ProviderError(self.provider.value, str(error))

        logger.info("%s job accepted (id=%s)", self.provider.label, descriptor.get("id"))
        return descriptor
