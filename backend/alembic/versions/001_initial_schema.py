"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(),
                  nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(),
                  nullable=False),
    ]


def upgrade() -> None:
    # Create enum types
    op.execute("CREATE TYPE tenant_status AS ENUM ('trialing', 'active', 'suspended', 'archived')")
    op.execute("CREATE TYPE tenant_plan AS ENUM ('starter', 'growth', 'enterprise')")
    op.execute("CREATE TYPE user_role AS ENUM ('super_admin', 'tenant_admin', 'staff')")
    op.execute("CREATE TYPE user_status AS ENUM ('active', 'inactive')")
    op.execute("CREATE TYPE ledger_entity_type AS ENUM ('Customer', 'Supplier', 'Employee')")
    op.execute("CREATE TYPE ledger_direction AS ENUM ('INCOME', 'EXPENSE')")
    op.execute("CREATE TYPE ledger_status AS ENUM ('Pending', 'Paid', 'Cancelled')")

    # Create tenants table
    op.create_table(
        'tenants',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('subdomain', sa.String(30), nullable=False),
        sa.Column('custom_domain', sa.String(255), nullable=True),
        sa.Column('status', postgresql.ENUM(name='tenant_status', create_type=False),
                  nullable=False, server_default='trialing'),
        sa.Column('plan', postgresql.ENUM(name='tenant_plan', create_type=False),
                  nullable=False, server_default='starter'),
        sa.Column('contact_email', sa.String(255), nullable=False),
        sa.Column('contact_name', sa.String(255)),
        sa.Column('phone', sa.String(50)),
        sa.Column('admin_email', sa.String(255), nullable=False),
        sa.Column('branding', postgresql.JSONB, server_default='{}'),
        sa.Column('settings', postgresql.JSONB, server_default='{}'),
        sa.Column('approved_at', sa.DateTime(timezone=True)),
        sa.Column('approved_by', sa.String(255)),
        sa.Column('approval_reason', sa.String(1000)),
        sa.Column('suspended_at', sa.DateTime(timezone=True)),
        sa.Column('suspended_by', sa.String(255)),
        sa.Column('suspension_reason', sa.String(1000)),
        sa.Column('rejected_at', sa.DateTime(timezone=True)),
        sa.Column('rejected_by', sa.String(255)),
        sa.Column('rejection_reason', sa.String(1000)),
        *_timestamps(),
    )
    op.create_index('ix_tenants_id', 'tenants', ['id'])
    op.create_index('ix_tenants_subdomain', 'tenants', ['subdomain'], unique=True)
    op.create_index('ix_tenants_custom_domain', 'tenants', ['custom_domain'], unique=True)

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('tenants.id', ondelete='CASCADE'), nullable=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('role', postgresql.ENUM(name='user_role', create_type=False),
                  nullable=False, server_default='staff'),
        sa.Column('status', postgresql.ENUM(name='user_status', create_type=False),
                  nullable=False, server_default='active'),
        sa.Column('last_login_at', sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_tenant_id', 'users', ['tenant_id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Create tenant_documents table
    op.create_table(
        'tenant_documents',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('key', sa.String(100), nullable=False),
        sa.Column('data', postgresql.JSONB),
        sa.Column('version', sa.Integer, nullable=False, server_default='1'),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'key', name='uq_tenant_documents_tenant_key'),
    )
    op.create_index('ix_tenant_documents_id', 'tenant_documents', ['id'])
    op.create_index('ix_tenant_documents_tenant_id', 'tenant_documents', ['tenant_id'])

    # Create ledger tables
    op.create_table(
        'ledger_entities',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('type', postgresql.ENUM(name='ledger_entity_type', create_type=False),
                  nullable=False),
        sa.Column('total_owed_to_me', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total_i_owe_them', sa.Numeric(12, 2), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_ledger_entities_id', 'ledger_entities', ['id'])
    op.create_index('ix_ledger_entities_phone', 'ledger_entities', ['phone'], unique=True)
    op.create_index('ix_ledger_entities_type_name', 'ledger_entities', ['type', 'name'])

    op.create_table(
        'ledger_transactions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('entity_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('ledger_entities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('entity_name', sa.String(100), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('direction', postgresql.ENUM(name='ledger_direction', create_type=False),
                  nullable=False),
        sa.Column('transaction_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True)),
        sa.Column('notes', sa.String(500)),
        sa.Column('status', postgresql.ENUM(name='ledger_status', create_type=False),
                  nullable=False, server_default='Pending'),
        *_timestamps(),
    )
    op.create_index('ix_ledger_transactions_id', 'ledger_transactions', ['id'])
    op.create_index('ix_ledger_transactions_entity_id', 'ledger_transactions', ['entity_id'])
    op.create_index('ix_ledger_transactions_status_date', 'ledger_transactions',
                    ['status', 'transaction_date'])


def downgrade() -> None:
    op.drop_table('ledger_transactions')
    op.drop_table('ledger_entities')
    op.drop_table('tenant_documents')
    op.drop_table('users')
    op.drop_table('tenants')

    op.execute("DROP TYPE IF EXISTS ledger_status")
    op.execute("DROP TYPE IF EXISTS ledger_direction")
    op.execute("DROP TYPE IF EXISTS ledger_entity_type")
    op.execute("DROP TYPE IF EXISTS user_status")
    op.execute("DROP TYPE IF EXISTS user_role")
    op.execute("DROP TYPE IF EXISTS tenant_plan")
    op.execute("DROP TYPE IF EXISTS tenant_status")
