"""
Murmur Backend — Application Package Initializer
=================================================

What: Marks the `murmur` directory as a Python package.
Who:  Imported by uvicorn (`murmur.main:app`), Alembic, and pytest.

Architecture Note:
    The backend follows a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, cookies, status codes
    ├─────────────────────────────────────┤
    │   Dependencies (session, media)     │  ← identity + injected singletons
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← auth, users, posts, notifications
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch SQL; services never touch HTTP. Image bytes leave the
    process through a MediaStore and only the resulting URL is persisted.
"""

__version__ = "1.0.0"
