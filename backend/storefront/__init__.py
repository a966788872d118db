"""
Storefront Backend: Application Package Initializer
====================================================

What: Marks the `storefront` directory as a Python package.
Why:  Enables module imports like `from storefront.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend keeps a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Products, uploads, email
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Collaborators (DB, storage, SMTP) │  ← Reached through narrow interfaces
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
