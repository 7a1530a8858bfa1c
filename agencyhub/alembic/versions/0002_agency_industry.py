"""add industry to agencies

Revision ID: 0002
Revises: 0001
Create Date: 2025-02-03 14:30:00
"""

from alembic import op
import sqlalchemy as sa

from agencyhub.migrations import add_column


# revision identifiers, used by Alembic.
revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    add_column(op, "agencies", sa.Column("industry", sa.String(100), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("agencies") as batch_op:
        batch_op.drop_column("industry")
