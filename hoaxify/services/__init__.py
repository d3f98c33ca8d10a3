"""
High-level use cases for the Hoaxify API.

Each service module orchestrates repositories/adapters to implement business
rules (verify credentials, issue sessions, authorize and apply profile updates).

Routers (FastAPI endpoints) call these services instead of manipulating the
database, the token store or the upload folder directly.
"""
