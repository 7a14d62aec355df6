"""Key-value storage table for catalog, ledger, transactions and settings

Revision ID: 20261019_storage_entries
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_storage_entries"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "storage_entries",
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade():
    op.drop_table("storage_entries")
