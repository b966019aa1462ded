"""
Pressroom Backend: Application Package
======================================

What: Backend for a personal/blog-style site (accounts, posts, news, contact form,
      page screenshots).
Who:  Imported by uvicorn (`pressroom.main:app`), Alembic and the test suite.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependencies
    ├─────────────────────────────────────┤
    │   Services (stores, guard, tokens)  │  ← Business rules, error translation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  Database + external collaborators  │  ← Sessions, object storage, SMTP, browser
    └─────────────────────────────────────┘

    Everything stateful (engine, session factory, services, collaborators) is built
    once by `create_app()` and hangs off `app.state`. Handlers reach it through the
    dependencies in `pressroom.dependencies`.
"""

__version__ = "1.0.0"
