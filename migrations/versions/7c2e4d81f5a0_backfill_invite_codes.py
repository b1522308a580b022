"""Backfill invite codes for challenges created without one

Revision ID: 7c2e4d81f5a0
Revises: 3b1f0c9a2d47
Create Date: 2026-10-02 18:40:51.007342

"""
import secrets

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '7c2e4d81f5a0'
down_revision = '3b1f0c9a2d47'
branch_labels = None
depends_on = None


def upgrade():
    conn = op.get_bind()
    taken = {
        row[0] for row in conn.execute(
            sa.text("SELECT invite_code FROM challenges WHERE invite_code IS NOT NULL")
        )
    }
    missing = conn.execute(
        sa.text("SELECT id FROM challenges WHERE invite_code IS NULL OR invite_code = ''")
    ).fetchall()

    for (challenge_id,) in missing:
        code = secrets.token_hex(4).upper()
        while code in taken:
            code = secrets.token_hex(4).upper()
        taken.add(code)
        conn.execute(
            sa.text("UPDATE challenges SET invite_code = :code WHERE id = :id"),
            {"code": code, "id": challenge_id},
        )


def downgrade():
    # codes may already be shared; leave them in place
    pass
