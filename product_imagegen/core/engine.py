"""Generation orchestration engine.

Request lifecycle:
    1. Resolve the prompt (default fashion-photography prompt when blank).
    2. Select the primary provider: explicit preference, else Hugging Face.
    3. Invoke the primary provider once (blocking call in a worker thread).
    4. On success, persist Hugging Face bytes / accept the FASHN.ai descriptor.
    5. On a default-route Hugging Face failure, fall back to FASHN.ai only when
       fallback is allowed, FASHN.ai is configured, and a reference image exists.
    6. Otherwise raise `GenerationFailed` with every provider error collected
       and setup guidance for each provider without a key.

Control flow:
    Start -> ValidatingInput -> SelectingProvider -> InvokingPrimary
    -> {Succeeded | InvokingFallback} -> {Succeeded | Failed}

Concurrency:
    The orchestrator holds no per-request state. Provider calls run through
    `asyncio.to_thread`, so a slow provider suspends only its own request.

Error handling:
    - Neither provider configured -> `ConfigurationError` before any network call.
    - FASHN.ai selected without a reference image -> `ValidationError`.
    - Provider failures -> collected; fallback or `GenerationFailed`.
    - Local persistence failures (`StorageError`) propagate unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from product_imagegen.core.errors import (
    ConfigurationError,
    GenerationFailed,
    ProviderError,
    ValidationError,
)
from product_imagegen.core.generation_types import (
    GenerationRequest,
    GenerationResult,
    GenerationStatus,
    Provider,
)
from product_imagegen.core.storage import save_generated_image
from product_imagegen.image.provider_config import (
    DEFAULT_PROMPT,
    ProviderSettings,
    setup_guidance,
)
from product_imagegen.image.service import build_clients


logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = Provider.HUGGINGFACE
FALLBACK_PROVIDER = Provider.FASHN


def resolve_prompt(prompt: Optional[str]) -> str:
    """Return the stripped prompt, or `DEFAULT_PROMPT` when blank/absent."""
    if prompt is None or not prompt.strip():
        return DEFAULT_PROMPT
    return prompt.strip()


def _descriptor_location(descriptor: dict[str, Any]) -> str:
    """Pick the most useful output reference from a FASHN.ai descriptor.

    A finished descriptor carries `output` URLs; a job handle carries only `id`.
    """
    output = descriptor.get("output")
    if isinstance(output, list) and output:
        return str(output[0])
    if isinstance(output, str) and output:
        return output
    job_id = descriptor.get("id")
    if job_id:
        return str(job_id)
    raise ProviderError(FALLBACK_PROVIDER.value, "Descriptor has neither output nor job id")


class GenerationOrchestrator:
    """Primary/fallback image generation across the configured providers.

    Args:
        settings: Startup configuration, shared by reference.
        clients: Optional `{Provider: client}` override (tests inject fakes).
    """

    def __init__(self, settings: ProviderSettings, clients: Optional[dict] = None) -> None:
        self.settings = settings
        self.clients = clients if clients is not None else build_clients(settings)

    # ============================================================
    # Selection
    # ============================================================

    def ensure_configured(self, preferred: Optional[Provider] = None) -> None:
        """Raise `ConfigurationError` when no provider has a key.

        Callers with side effects (storing an upload) run this first.
        """
        if not any(self.settings.is_configured(p) for p in Provider):
            guidance = " ".join(setup_guidance(p) for p in Provider)
            raise ConfigurationError(
                (preferred or DEFAULT_PROVIDER).value,
                "No image generation provider is configured",
                guidance,
            )

    def select_provider(self, request: GenerationRequest) -> Provider:
        """Return the primary provider; fail fast when nothing is configured."""
        self.ensure_configured(request.preferred_provider)
        return request.preferred_provider or DEFAULT_PROVIDER

    def _fallback_allowed(self, request: GenerationRequest) -> bool:
        if request.preferred_provider is not None:
            return False
        if not request.allow_fallback:
            return False
        if not self.settings.is_configured(FALLBACK_PROVIDER):
            logger.info("Fallback skipped: %s is not configured", FALLBACK_PROVIDER.label)
            return False
        if not request.reference_image_url:
            logger.info("Fallback skipped: no reference image for %s", FALLBACK_PROVIDER.label)
            return False
        return True

    # ============================================================
    # Invocation
    # ============================================================

    async def _invoke(
        self,
        provider: Provider,
        prompt: str,
        request: GenerationRequest,
    ) -> GenerationResult:
        client = self.clients[provider]

        if provider is Provider.HUGGINGFACE:
            data = await asyncio.to_thread(client.invoke, prompt)
            name, path = await asyncio.to_thread(
                save_generated_image, self.settings.generated_dir, data
            )
            return GenerationResult(
                output_location=name,
                used_provider=provider,
                prompt_used=prompt,
                status=GenerationStatus.COMPLETED,
                output_path=path,
            )

        descriptor = await asyncio.to_thread(
            client.invoke, prompt, request.reference_image_url
        )
        return GenerationResult(
            output_location=_descriptor_location(descriptor),
            used_provider=provider,
            prompt_used=prompt,
            status=GenerationStatus.COMPLETED,
            descriptor=descriptor,
        )

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run one request through selection, invocation, and fallback.

        Returns:
            `GenerationResult` with `status=completed`.

        Raises:
            ConfigurationError: No provider is configured at all.
            ValidationError: FASHN.ai was selected without a reference image.
            GenerationFailed: The primary (and any fallback) failed.
            StorageError: The generated image could not be written.
        """
        prompt = resolve_prompt(request.prompt)
        primary = self.select_provider(request)

        if primary is Provider.FASHN and not request.reference_image_url:
            raise ValidationError(f"{Provider.FASHN.label} requires a reference image")

        errors: list[ProviderError] = []
        logger.info(
            "Generating with %s (explicit=%s)", primary.label, request.preferred_provider is not None
        )
        try:
            return await self._invoke(primary, prompt, request)
        except ProviderError as err:
            logger.warning("%s failed: %s", primary.label, err.message)
            errors.append(err)

        unconfigured = self.settings.unconfigured_setup()
        if not self._fallback_allowed(request):
            raise GenerationFailed(errors, prompt=prompt, unconfigured=unconfigured)

        logger.info("Falling back to %s", FALLBACK_PROVIDER.label)
        try:
            result = await self._invoke(FALLBACK_PROVIDER, prompt, request)
        except ProviderError as err:
            logger.warning("%s failed: %s", FALLBACK_PROVIDER.label, err.message)
            errors.append(err)
            raise GenerationFailed(errors, prompt=prompt, unconfigured=unconfigured)

        result.errors = errors
        return result
