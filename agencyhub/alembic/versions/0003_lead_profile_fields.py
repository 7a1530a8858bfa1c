"""add name, business and industry fields to leads

Revision ID: 0003
Revises: 0002
Create Date: 2025-02-20 10:15:00
"""

from alembic import op
import sqlalchemy as sa

from agencyhub.migrations import add_columns


# revision identifiers, used by Alembic.
revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None

COLUMNS = ("first_name", "last_name", "business_name", "industry")


def upgrade() -> None:
    add_columns(
        op,
        "leads",
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("business_name", sa.String(255), nullable=True),
        sa.Column("industry", sa.String(100), nullable=True),
    )


def downgrade() -> None:
    with op.batch_alter_table("leads") as batch_op:
        for name in reversed(COLUMNS):
            batch_op.drop_column(name)
