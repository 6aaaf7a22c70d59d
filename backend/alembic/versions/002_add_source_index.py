"""Add source index to learned_records

Revision ID: 002_add_source_index
Revises: 001_initial
Create Date: 2026-10-19 09:30:00.000000

"""
from alembic import op


# revision identifiers, used by Alembic.
revision = '002_add_source_index'
down_revision = '001_initial'
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Debug feedback records are listed by provenance
    op.create_index('ix_learned_records_source', 'learned_records', ['source'])


def downgrade() -> None:
    op.drop_index('ix_learned_records_source', table_name='learned_records')
