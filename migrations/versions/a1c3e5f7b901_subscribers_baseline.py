"""subscribers and subscriber_types baseline

Revision ID: a1c3e5f7b901
Revises:
Create Date: 2025-03-02

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'a1c3e5f7b901'
down_revision = None
branch_labels = None
depends_on = None

SUBSCRIBER_TYPES = ('shopper', 'business', 'driver', 'champion', 'donor', 'developer')


def _subscriber_type_enum(bind):
    if bind.dialect.name == 'postgresql':
        return postgresql.ENUM(*SUBSCRIBER_TYPES, name='subscriber_type', create_type=False)
    return sa.Enum(*SUBSCRIBER_TYPES, name='subscriber_type')


def upgrade():
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        op.execute("""
            DO $$
            BEGIN
                IF NOT EXISTS (SELECT 1 FROM pg_type WHERE typname = 'subscriber_type') THEN
                    CREATE TYPE subscriber_type AS ENUM
                        ('shopper', 'business', 'driver', 'champion', 'donor', 'developer');
                END IF;
            END$$;
        """)

    op.create_table(
        'subscribers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        if_not_exists=True,
    )
    op.create_table(
        'subscriber_types',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('subscriber_id', sa.Integer(), sa.ForeignKey('subscribers.id'), nullable=False),
        sa.Column('name', _subscriber_type_enum(bind), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        if_not_exists=True,
    )
    op.create_index(
        'ix_subscriber_types_subscriber_id', 'subscriber_types', ['subscriber_id'],
        if_not_exists=True,
    )


def downgrade():
    op.drop_index('ix_subscriber_types_subscriber_id', table_name='subscriber_types')
    op.drop_table('subscriber_types')
    op.drop_table('subscribers')
    if op.get_bind().dialect.name == 'postgresql':
        op.execute("DROP TYPE IF EXISTS subscriber_type;")
