"""initial schema

Revision ID: 0001
Revises:
Create Date: 2025-01-15 09:00:00
"""

from alembic import op

import agencyhub.models  # noqa: F401
from agencyhub.database import Base


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Tables that already exist (databases from before the ledger) are
    # left as they are; the following revisions bring them up to date.
    Base.metadata.create_all(bind=op.get_bind(), checkfirst=True)


def downgrade() -> None:
    Base.metadata.drop_all(bind=op.get_bind())
