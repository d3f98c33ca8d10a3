"""SQLAlchemy plumbing for users and session tokens.

``session`` owns the cached engine and the schema bootstrap; ``models`` holds
the ``users`` and ``tokens`` tables.
"""

from .session import Base, create_all, get_engine, get_session

__all__ = ["Base", "create_all", "get_engine", "get_session"]
