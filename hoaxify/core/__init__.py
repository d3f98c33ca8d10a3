"""
Core utilities shared across the Hoaxify API.

This package hosts:
- configuration helpers (env vars, storage paths)
- the error taxonomy used by services and mapped by the HTTP layer
- password hashing, logging setup and the message catalog

Services depend on these primitives instead of importing FastAPI or storage
layers directly.
"""
