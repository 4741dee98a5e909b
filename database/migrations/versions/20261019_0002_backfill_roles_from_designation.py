"""backfill hod roles from legacy designations

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:10:00.000000

"""
from alembic import op

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


HOD_DESIGNATION_FILTER = "(UPPER(designation) LIKE '%HOD%' OR UPPER(designation) LIKE '%HEAD%')"


def upgrade() -> None:
    op.execute(f"UPDATE faculty SET role = 'hod' WHERE role = 'faculty' AND {HOD_DESIGNATION_FILTER}")
    op.execute(f"UPDATE users SET role = 'hod' WHERE role = 'faculty' AND {HOD_DESIGNATION_FILTER}")


def downgrade() -> None:
    # Promotions cannot be told apart from roles assigned explicitly afterwards.
    pass
