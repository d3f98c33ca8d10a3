"""
FastAPI routers grouped by domain (auth, users).

Each module exposes an APIRouter included by the application factory
(app.py). Routers translate HTTP to service calls; services live on
``app.state`` so every app instance owns its own token store and folders.
"""
