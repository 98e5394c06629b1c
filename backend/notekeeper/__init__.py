"""
NoteKeeper Backend — Application Package Initializer
======================================================

Architecture Note:
    A small layered service:

    ┌─────────────────────────────────────┐
    │   Middleware (request id, logging,  │  ← cross-cutting
    │   CORS)                             │
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (credential resolver,     │  ← auth and scoped CRUD
    │  note store accessor)               │
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← shared async pool handle
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
