"""Image generation adapter package.

Scope:
    Provides provider configuration, one HTTP client per external provider,
    and a factory used by core orchestration.

Non-goals:
    - No local image processing or inference.
    - No polling of asynchronous provider jobs.
"""
