"""
Persistence adapters.

Services depend on the repository instead of opening SQLAlchemy sessions
themselves; the repository treats each call as one atomic, durable operation.
"""
