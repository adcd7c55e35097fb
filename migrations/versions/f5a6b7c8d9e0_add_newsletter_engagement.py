"""add newsletter engagement

Revision ID: f5a6b7c8d9e0
Revises: e4f5a6b7c8d9
Create Date: 2026-10-19 14:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'f5a6b7c8d9e0'
down_revision = 'e4f5a6b7c8d9'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('newsletter_subscribers', schema=None) as batch_op:
        batch_op.add_column(sa.Column('emails_opened', sa.Integer(), nullable=False, server_default='0'))
        batch_op.add_column(sa.Column('last_email_opened', sa.DateTime(), nullable=True))
        batch_op.add_column(sa.Column('links_clicked', sa.Integer(), nullable=False, server_default='0'))
        batch_op.add_column(sa.Column('last_link_clicked', sa.DateTime(), nullable=True))

    op.create_table(
        'newsletter_campaign_interactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('subscriber_id', sa.Integer(), nullable=False),
        sa.Column('campaign_id', sa.String(length=80), nullable=False),
        sa.Column('campaign_name', sa.String(length=200), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=False),
        sa.Column('opened_at', sa.DateTime(), nullable=True),
        sa.Column('clicked_at', sa.DateTime(), nullable=True),
        sa.Column('links_json', sa.Text(), nullable=False, server_default='[]'),
        sa.ForeignKeyConstraint(['subscriber_id'], ['newsletter_subscribers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('newsletter_campaign_interactions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_newsletter_campaign_interactions_subscriber_id'), ['subscriber_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_newsletter_campaign_interactions_campaign_id'), ['campaign_id'], unique=False)

    op.create_table(
        'newsletter_bounces',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('subscriber_id', sa.Integer(), nullable=False),
        sa.Column('bounce_type', sa.String(length=10), nullable=False),
        sa.Column('reason', sa.String(length=500), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['subscriber_id'], ['newsletter_subscribers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('newsletter_bounces', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_newsletter_bounces_subscriber_id'), ['subscriber_id'], unique=False)


def downgrade():
    with op.batch_alter_table('newsletter_bounces', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_newsletter_bounces_subscriber_id'))
    op.drop_table('newsletter_bounces')

    with op.batch_alter_table('newsletter_campaign_interactions', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_newsletter_campaign_interactions_campaign_id'))
        batch_op.drop_index(batch_op.f('ix_newsletter_campaign_interactions_subscriber_id'))
    op.drop_table('newsletter_campaign_interactions')

    with op.batch_alter_table('newsletter_subscribers', schema=None) as batch_op:
        batch_op.drop_column('last_link_clicked')
        batch_op.drop_column('links_clicked')
        batch_op.drop_column('last_email_opened')
        batch_op.drop_column('emails_opened')
