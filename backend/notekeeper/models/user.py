"""
NoteKeeper Backend — User SQLAlchemy Model
============================================

What:  ORM mapping of the pre-existing `users` table.
Why:   The credential resolver looks users up by their opaque token.
Who:   Read by CredentialResolver; referenced by NamedNote's foreign key.

Ownership:
    The table is provisioned and managed outside this service (accounts,
    password hashes, token issuance). This service only reads `id`,
    `username` and `token`, and never creates or migrates the table.
"""

from typing import Optional

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from notekeeper.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(Text, nullable=False)

    # Opaque bearer token; nullable because not every account holds one
    token: Mapped[Optional[str]] = mapped_column(Text, nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
