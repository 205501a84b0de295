"""Error taxonomy shared by intake, provider clients, and orchestration.

Architectural role:
    Defines the exception types raised below the HTTP layer. Exception
    handlers registered in `product_imagegen.api.http_api.create_app` map each
    type to a status code and a structured JSON body.

Mapping:
    - `ValidationError`    -> HTTP 400 (caller input).
    - `ConfigurationError` -> HTTP 500 with setup guidance (operator setup).
    - `ProviderError`      -> HTTP 500 with upstream detail (remote failure).
    - `StorageError`       -> HTTP 500 with a generic message (local I/O).
    - `GenerationFailed`   -> HTTP 500 carrying every provider error seen.

Security considerations:
    Messages never include credential values. Upstream messages are forwarded
    as received from the provider body.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for all service-level failures."""


class ValidationError(GenerationError):
    """Caller supplied missing or unacceptable input."""


class StorageError(GenerationError):
    """Local persistence of an upload or generated image failed."""


class ProviderError(GenerationError):
    """A provider call failed.

    Attributes:
        provider: Provider identifier (`huggingface` / `fashn`).
        message: Human-readable failure detail, upstream text when available.
        remediation: Optional hint for fixing the failure.
    """

    def __init__(self, provider: str, message: str, remediation: str = ""):
        self.provider = provider
        self.message = message
        self.remediation = remediation
        super().__init__(f"{provider}: {message}")

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "message": self.message,
            "remediation": self.remediation,
        }


class ConfigurationError(ProviderError):
    """Provider credential is missing. Raised locally, before any network call."""


class GenerationFailed(GenerationError):
    """Terminal orchestration failure after the primary and any fallback."""

    def __init__(
        self,
        errors: list[ProviderError],
        prompt: str = "",
        unconfigured: dict[str, str] | None = None,
    ):
        self.errors = list(errors)
        self.prompt = prompt
        self.unconfigured = dict(unconfigured or {})
        summary = "; ".join(str(err) for err in self.errors) or "no provider attempted"
        super().__init__(f"Image generation failed: {summary}")

    @property
    def setup(self) -> dict[str, str]:
        """Remediation text per provider that lacked configuration.

        Covers providers that raised `ConfigurationError` as well as those
        skipped silently (e.g. an unconfigured fallback).
        """
        setup = dict(self.unconfigured)
        setup.update(
            (err.provider, err.remediation)
            for err in self.errors
            if isinstance(err, ConfigurationError)
        )
        return setup
