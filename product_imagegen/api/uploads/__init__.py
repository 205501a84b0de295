"""Upload intake package for API adapters.

Architectural role:
- Validates caller-supplied image files against type and size constraints.
- Persists accepted files into the upload area.

Scope:
- Intake only; no HTTP endpoint definitions and no image processing.
"""
