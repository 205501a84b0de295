"""Product image generator: upload intake and provider-relayed image generation."""

__version__ = "1.0.0"
