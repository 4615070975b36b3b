"""
SkillSwap Backend: Application Package
======================================

What: The skill-exchange marketplace API. Users advertise the skills they offer
      and want, browse each other, and negotiate swaps through a
      request / accept / reject workflow.
Who:  Imported by uvicorn (`uvicorn skillswap.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependency
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← UserDirectory, SwapRequestService
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The swap-request state machine lives entirely in the services layer and
    receives its database session at construction, so it can be exercised
    against an in-memory SQLite database without any HTTP machinery.
"""

__version__ = "1.0.0"
