"""Product image generator API adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP and CLI interfaces.
- Performs transport-level validation and response shaping.
- Delegates provider selection and fallback to the core layer.
"""
