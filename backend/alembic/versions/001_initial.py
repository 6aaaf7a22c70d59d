"""Initial schema

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create learned_records table
    op.create_table(
        'learned_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=50), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('content_hash', sa.String(length=64), nullable=False),
        sa.Column('source', sa.String(length=50), nullable=False),
        sa.Column('metadata', sa.Text(), nullable=False, server_default='{}'),
        sa.Column('prompt_pattern', sa.Text()),
        sa.Column('score', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('kind', 'content_hash', name='uq_learned_records_kind_hash')
    )
    op.create_index('ix_learned_records_id', 'learned_records', ['id'])
    op.create_index('ix_learned_records_kind', 'learned_records', ['kind'])

    # Create kv_entries table
    op.create_table(
        'kv_entries',
        sa.Column('namespace', sa.String(length=255), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('namespace', 'key')
    )


def downgrade() -> None:
    op.drop_table('kv_entries')

    op.drop_index('ix_learned_records_kind', table_name='learned_records')
    op.drop_index('ix_learned_records_id', table_name='learned_records')
    op.drop_table('learned_records')
