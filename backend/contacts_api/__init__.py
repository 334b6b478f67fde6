"""
Contact API — Application Package Initializer
==============================================

What: Marks the `contacts_api` directory as a Python package.
Why:  Enables module imports like `from contacts_api.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The service is a thin layered stack:

    ┌─────────────────────────────────────┐
    │       Routes (Contact Service)      │  ← HTTP concerns, status mapping
    ├─────────────────────────────────────┤
    │      Services (Contact Store)       │  ← One database operation per call
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async engine + session factory
    └─────────────────────────────────────┘

    The store handle is built once at startup and handed to the routes through
    FastAPI's dependency injection, so every layer can be tested on its own.
"""

__version__ = "1.0.0"
