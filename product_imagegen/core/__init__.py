"""Core orchestration package.

Composition:
    - `engine`: primary/fallback generation control flow.
    - `generation_types`: shared request/result contracts.
    - `errors`: error taxonomy mapped to HTTP responses by the API layer.
    - `storage`: append-only local file storage.
"""
