"""
NoteKeeper Backend — NamedNote SQLAlchemy Model
=================================================

What:  ORM model representing the `named_notes` table in PostgreSQL.
Why:   Maps note rows to Python objects for the note service.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by NoteService for scoped CRUD and by Alembic for schema management.

Table Design Rationale:
    - Serial integer primary key: notes are addressed by (owner, name), the
      id is informational only
    - user_id: owner, foreign key to users.id with ON DELETE CASCADE so
      removing an account removes its notes
    - name: caller-chosen identifier, case-sensitive
    - content: TEXT, replaced wholesale on update
    - created_at: UTC timestamp set by the database

    Unique constraint on (user_id, name):
        The database enforces at most one note per name per owner. Concurrent
        creates of the same name race on this constraint; exactly one insert
        wins and the rest are ignored by ON CONFLICT DO NOTHING. It also backs
        the owner-scoped lookups and the ordered name listing.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import ForeignKey, Integer, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from notekeeper.database import Base


class NamedNote(Base):
    """
    A text note owned by one user and addressed by its name.

    Lifecycle:
        1. Created by its owner (create-or-ignore on a duplicate name)
        2. Content replaced in place by update-by-name
        3. Deleted by delete-by-name, or by cascade when the owner is removed
    """

    __tablename__ = "named_notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_named_notes_user_name"),
    )

    def __repr__(self) -> str:
        return f"<NamedNote(id={self.id}, user_id={self.user_id}, name='{self.name}')>"
