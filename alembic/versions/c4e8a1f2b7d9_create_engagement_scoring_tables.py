"""create watch session, engagement, scoring config and lead score tables

Revision ID: c4e8a1f2b7d9
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = 'c4e8a1f2b7d9'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'webinars',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_webinars_tenant_id', 'webinars', ['tenant_id'])

    op.create_table(
        'registrations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('webinar_id', sa.Integer(), sa.ForeignKey('webinars.id'), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('attended', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('watched_replay', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('webinar_id', 'email', name='uq_registration_webinar_email'),
    )
    op.create_index('ix_registrations_webinar_id', 'registrations', ['webinar_id'])

    op.create_table(
        'watch_sessions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('webinar_id', sa.Integer(), sa.ForeignKey('webinars.id'), nullable=False),
        sa.Column('registration_id', sa.Integer(), sa.ForeignKey('registrations.id'), nullable=False),
        sa.Column('session_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('session_end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_watch_seconds', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('milestones_reached', sa.JSON(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_watch_sessions_webinar_id', 'watch_sessions', ['webinar_id'])
    op.create_index('ix_watch_sessions_registration_id', 'watch_sessions', ['registration_id'])
    op.create_index(
        'uq_watch_sessions_open_pair',
        'watch_sessions',
        ['webinar_id', 'registration_id'],
        unique=True,
        postgresql_where=sa.text('session_end IS NULL'),
        sqlite_where=sa.text('session_end IS NULL'),
    )

    op.create_table(
        'engagement_events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('webinar_id', sa.Integer(), sa.ForeignKey('webinars.id'), nullable=False),
        sa.Column('registration_id', sa.Integer(), sa.ForeignKey('registrations.id'), nullable=False),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('event_data', sa.JSON(), nullable=True),
        sa.Column('points_earned', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_engagement_events_registration_created', 'engagement_events', ['registration_id', 'created_at'])
    op.create_index('ix_engagement_events_webinar_created', 'engagement_events', ['webinar_id', 'created_at'])
    op.create_index('ix_engagement_events_type', 'engagement_events', ['event_type'])

    op.create_table(
        'scoring_configs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(64), nullable=False),
        sa.Column('chat_message_points', sa.Integer(), nullable=True),
        sa.Column('qa_submit_points', sa.Integer(), nullable=True),
        sa.Column('qa_upvote_points', sa.Integer(), nullable=True),
        sa.Column('poll_response_points', sa.Integer(), nullable=True),
        sa.Column('reaction_points', sa.Integer(), nullable=True),
        sa.Column('cta_click_points', sa.Integer(), nullable=True),
        sa.Column('watch_25_points', sa.Integer(), nullable=True),
        sa.Column('watch_50_points', sa.Integer(), nullable=True),
        sa.Column('watch_75_points', sa.Integer(), nullable=True),
        sa.Column('watch_100_points', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_scoring_configs_tenant_id', 'scoring_configs', ['tenant_id'], unique=True)

    op.create_table(
        'lead_scores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('registration_id', sa.Integer(), sa.ForeignKey('registrations.id'), nullable=False),
        sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('engagement_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('watch_time_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('interaction_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_calculated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_lead_scores_registration_id', 'lead_scores', ['registration_id'], unique=True)
    op.create_index('ix_lead_scores_total', 'lead_scores', ['total_score'])


def downgrade() -> None:
    op.drop_index('ix_lead_scores_total', 'lead_scores')
    op.drop_index('ix_lead_scores_registration_id', 'lead_scores')
    op.drop_table('lead_scores')
    op.drop_index('ix_scoring_configs_tenant_id', 'scoring_configs')
    op.drop_table('scoring_configs')
    op.drop_index('ix_engagement_events_type', 'engagement_events')
    op.drop_index('ix_engagement_events_webinar_created', 'engagement_events')
    op.drop_index('ix_engagement_events_registration_created', 'engagement_events')
    op.drop_table('engagement_events')
    op.drop_index('uq_watch_sessions_open_pair', 'watch_sessions')
    op.drop_index('ix_watch_sessions_registration_id', 'watch_sessions')
    op.drop_index('ix_watch_sessions_webinar_id', 'watch_sessions')
    op.drop_table('watch_sessions')
    op.drop_index('ix_registrations_webinar_id', 'registrations')
    op.drop_table('registrations')
    op.drop_index('ix_webinars_tenant_id', 'webinars')
    op.drop_table('webinars')
