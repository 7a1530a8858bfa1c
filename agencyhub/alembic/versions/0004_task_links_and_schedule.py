"""link tasks to leads and add meeting times

Revision ID: 0004
Revises: 0003
Create Date: 2025-03-11 16:45:00
"""

from alembic import op
import sqlalchemy as sa

from agencyhub.migrations import add_column, add_columns


# revision identifiers, used by Alembic.
revision = "0004"
down_revision = "0003"
branch_labels = None
depends_on = None


def upgrade() -> None:
    add_column(
        op,
        "tasks",
        sa.Column("lead_id", sa.String(36), sa.ForeignKey("leads.id"), nullable=True),
        index=True,
    )
    add_columns(
        op,
        "tasks",
        sa.Column("start_time", sa.String(32), nullable=True),
        sa.Column("end_time", sa.String(32), nullable=True),
        sa.Column("estimated_hours", sa.Integer(), nullable=True),
    )


def downgrade() -> None:
    op.drop_index("ix_tasks_lead_id", table_name="tasks")
    with op.batch_alter_table("tasks") as batch_op:
        for name in ("estimated_hours", "end_time", "start_time", "lead_id"):
            batch_op.drop_column(name)
