"""initial smashlabs schema

Revision ID: e4f5a6b7c8d9
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'e4f5a6b7c8d9'
down_revision = None
branch_labels = None
depends_on = None


def _lifecycle_columns():
    return [
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=80), nullable=False),
        sa.Column('entity', sa.String(length=40), nullable=True),
        sa.Column('entity_id', sa.String(length=80), nullable=True),
        sa.Column('reference_code', sa.String(length=40), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('metadata_json', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('audit_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_audit_logs_action'), ['action'], unique=False)
        batch_op.create_index(batch_op.f('ix_audit_logs_reference_code'), ['reference_code'], unique=False)
        batch_op.create_index(batch_op.f('ix_audit_logs_timestamp'), ['timestamp'], unique=False)
        batch_op.create_index('ix_audit_logs_entity', ['entity', 'entity_id'], unique=False)

    op.create_table(
        'ip_rate_limits',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ip', sa.String(length=64), nullable=False),
        sa.Column('scope', sa.String(length=40), nullable=False),
        sa.Column('window_start', sa.DateTime(), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('ip', 'scope', name='uq_ip_rate_limit_scope')
    )
    with op.batch_alter_table('ip_rate_limits', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_ip_rate_limits_ip'), ['ip'], unique=False)

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reference_code', sa.String(length=40), nullable=False),
        sa.Column('customer_name', sa.String(length=100), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=False),
        sa.Column('customer_phone', sa.String(length=30), nullable=False),
        sa.Column('package_type', sa.String(length=20), nullable=False),
        sa.Column('package_name', sa.String(length=120), nullable=False),
        sa.Column('package_price', sa.Float(), nullable=False),
        sa.Column('preferred_date', sa.DateTime(), nullable=False),
        sa.Column('preferred_time', sa.String(length=20), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('participants', sa.Integer(), nullable=False),
        sa.Column('special_requests', sa.String(length=500), nullable=True),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('payment_method', sa.String(length=20), nullable=True),
        *_lifecycle_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('bookings', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_bookings_reference_code'), ['reference_code'], unique=True)
        batch_op.create_index(batch_op.f('ix_bookings_customer_email'), ['customer_email'], unique=False)
        batch_op.create_index(batch_op.f('ix_bookings_preferred_date'), ['preferred_date'], unique=False)
        batch_op.create_index(batch_op.f('ix_bookings_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_bookings_created_at'), ['created_at'], unique=False)

    op.create_table(
        'corporate_bookings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reference_code', sa.String(length=40), nullable=False),
        sa.Column('company_name', sa.String(length=100), nullable=False),
        sa.Column('contact_person', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=10), nullable=False),
        sa.Column('job_title', sa.String(length=50), nullable=False),
        sa.Column('team_size', sa.String(length=20), nullable=False),
        sa.Column('preferred_date', sa.DateTime(), nullable=False),
        sa.Column('preferred_time', sa.String(length=40), nullable=False),
        sa.Column('duration', sa.String(length=20), nullable=False),
        sa.Column('event_type', sa.String(length=40), nullable=False),
        sa.Column('special_requests', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('estimated_cost', sa.Float(), nullable=False, server_default='0'),
        sa.Column('actual_cost', sa.Float(), nullable=True),
        *_lifecycle_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('corporate_bookings', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_corporate_bookings_reference_code'), ['reference_code'], unique=True)
        batch_op.create_index(batch_op.f('ix_corporate_bookings_company_name'), ['company_name'], unique=False)
        batch_op.create_index(batch_op.f('ix_corporate_bookings_email'), ['email'], unique=False)
        batch_op.create_index(batch_op.f('ix_corporate_bookings_preferred_date'), ['preferred_date'], unique=False)
        batch_op.create_index(batch_op.f('ix_corporate_bookings_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_corporate_bookings_created_at'), ['created_at'], unique=False)
        batch_op.create_index('ix_corporate_company_email', ['company_name', 'email'], unique=False)

    op.create_table(
        'registrations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reference_code', sa.String(length=40), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=10), nullable=False),
        sa.Column('interests_json', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('hear_about', sa.String(length=40), nullable=False),
        sa.Column('message', sa.String(length=1000), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('source', sa.String(length=40), nullable=False, server_default='website'),
        sa.Column('admin_notes', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('registrations', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_registrations_reference_code'), ['reference_code'], unique=True)
        batch_op.create_index(batch_op.f('ix_registrations_email'), ['email'], unique=True)
        batch_op.create_index(batch_op.f('ix_registrations_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_registrations_created_at'), ['created_at'], unique=False)

    op.create_table(
        'contact_messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('subject', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('inquiry_type', sa.String(length=20), nullable=False, server_default='general'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='new'),
        sa.Column('priority', sa.String(length=10), nullable=False, server_default='medium'),
        sa.Column('admin_response', sa.Text(), nullable=True),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.Column('responded_by', sa.String(length=100), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('follow_up_required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('follow_up_date', sa.DateTime(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('source', sa.String(length=20), nullable=False, server_default='website'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('contact_messages', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_contact_messages_email'), ['email'], unique=False)
        batch_op.create_index(batch_op.f('ix_contact_messages_inquiry_type'), ['inquiry_type'], unique=False)
        batch_op.create_index(batch_op.f('ix_contact_messages_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_contact_messages_priority'), ['priority'], unique=False)
        batch_op.create_index(batch_op.f('ix_contact_messages_responded_at'), ['responded_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_contact_messages_created_at'), ['created_at'], unique=False)

    op.create_table(
        'contact_notes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('contact_id', sa.Integer(), nullable=False),
        sa.Column('note', sa.String(length=500), nullable=False),
        sa.Column('added_by', sa.String(length=100), nullable=False),
        sa.Column('added_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['contact_id'], ['contact_messages.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('contact_notes', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_contact_notes_contact_id'), ['contact_id'], unique=False)

    op.create_table(
        'newsletter_subscribers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('interests_json', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('frequency', sa.String(length=20), nullable=False, server_default='weekly'),
        sa.Column('source', sa.String(length=20), nullable=False, server_default='website'),
        sa.Column('subscribed_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('unsubscribed_at', sa.DateTime(), nullable=True),
        sa.Column('unsubscribe_reason', sa.String(length=40), nullable=True),
        sa.Column('unsubscribe_feedback', sa.String(length=500), nullable=True),
        sa.Column('emails_sent', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_email_sent', sa.DateTime(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('newsletter_subscribers', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_newsletter_subscribers_email'), ['email'], unique=True)
        batch_op.create_index(batch_op.f('ix_newsletter_subscribers_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_newsletter_subscribers_subscribed_at'), ['subscribed_at'], unique=False)


def downgrade():
    op.drop_table('newsletter_subscribers')
    op.drop_table('contact_notes')
    op.drop_table('contact_messages')
    op.drop_table('registrations')
    op.drop_table('corporate_bookings')
    op.drop_table('bookings')
    op.drop_table('ip_rate_limits')
    op.drop_table('audit_logs')
