"""create_journal_tables

Revision ID: 3f1c9a7d2b64
Revises:
Create Date: 2026-10-19 09:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b64'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, weeks and entries."""
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(length=320), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=200), nullable=False),
        sa.Column('timezone', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('reflection_weekday', sa.Integer(), nullable=False),
        sa.Column('reflection_time', sqlmodel.sql.sqltypes.AutoString(length=5), nullable=False),
        sa.Column('next_reflection_at', sa.DateTime(), nullable=False),
        sa.Column('location_enabled', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_next_reflection_at', 'users', ['next_reflection_at'])

    op.create_table(
        'weeks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('week_start', sa.DateTime(), nullable=False),
        sa.Column('week_end', sa.DateTime(), nullable=False),
        sa.Column('reflection_date', sa.DateTime(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('RECORDING', 'PROCESSING', 'COMPLETE', 'ERROR', name='weekstatus'),
            nullable=False,
        ),
        sa.Column('transcriptions', sa.JSON(), nullable=True),
        sa.Column('summary', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('insights', sa.JSON(), nullable=True),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'year', 'week_number', name='uq_weeks_user_year_week'),
    )
    op.create_index('ix_weeks_user_id', 'weeks', ['user_id'])
    op.create_index('ix_weeks_reflection_date', 'weeks', ['reflection_date'])
    op.create_index('ix_weeks_status', 'weeks', ['status'])

    op.create_table(
        'entries',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('week_id', sa.Uuid(), nullable=False),
        sa.Column('audio_ref', sqlmodel.sql.sqltypes.AutoString(length=1024), nullable=False),
        sa.Column('duration', sa.Float(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('accuracy', sa.Float(), nullable=True),
        sa.Column('location_timestamp', sa.DateTime(), nullable=True),
        sa.Column('address', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('city', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('state', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('country', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('neighborhood', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('formatted_address', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['week_id'], ['weeks.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_entries_user_id', 'entries', ['user_id'])
    op.create_index('ix_entries_week_id', 'entries', ['week_id'])
    op.create_index('ix_entries_recorded_at', 'entries', ['recorded_at'])


def downgrade() -> None:
    """Drop the journal tables."""
    op.drop_index('ix_entries_recorded_at', table_name='entries')
    op.drop_index('ix_entries_week_id', table_name='entries')
    op.drop_index('ix_entries_user_id', table_name='entries')
    op.drop_table('entries')

    op.drop_index('ix_weeks_status', table_name='weeks')
    op.drop_index('ix_weeks_reflection_date', table_name='weeks')
    op.drop_index('ix_weeks_user_id', table_name='weeks')
    op.drop_table('weeks')
    sa.Enum(name='weekstatus').drop(op.get_bind(), checkfirst=True)

    op.drop_index('ix_users_next_reflection_at', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
