"""Create named_notes table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates `named_notes`, one row per (user, note name).
How:   Serial primary key, cascading foreign key to the pre-existing `users`
       table, unique constraint on (user_id, name).

Rollback: downgrade() drops the table entirely (destructive, all notes lost).
The `users` table is owned elsewhere and is never touched.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "named_notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
        # Deleting a user removes their notes
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        # At most one note per name per user; also backs ON CONFLICT DO NOTHING
        sa.UniqueConstraint("user_id", "name", name="uq_named_notes_user_name"),
    )


def downgrade() -> None:
    op.drop_table("named_notes")
