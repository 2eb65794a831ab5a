"""Initial disposition schema: leads, catalog, pipeline pointer + history, DNC, metrics

Revision ID: 4f1a9c27d3b0
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1a9c27d3b0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'leads',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('phone_number', sa.Text(), nullable=False),
        sa.Column('first_name', sa.Text(), nullable=True),
        sa.Column('last_name', sa.Text(), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('company', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), nullable=False, server_default='new'),
        sa.Column('do_not_call', sa.Boolean(), server_default=sa.false()),
        sa.Column('next_callback_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_contacted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('custom_fields', sa.JSON(), nullable=True),
        sa.Column('timezone', sa.Text(), nullable=True),
        *_timestamps(),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_leads_user_id', 'leads', ['user_id'])

    op.create_table(
        'dispositions',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.Text(), server_default='#3B82F6'),
        sa.Column('pipeline_stage', sa.Text(), nullable=True),
        sa.Column('auto_actions', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_dispositions_user_id', 'dispositions', ['user_id'])

    op.create_table(
        'disposition_auto_actions',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('disposition_id', sa.Text(), sa.ForeignKey('dispositions.id'), nullable=True),
        sa.Column('disposition_name', sa.Text(), nullable=True),
        sa.Column('action_type', sa.Text(), nullable=False),
        sa.Column('action_config', sa.JSON(), nullable=True),
        sa.Column('priority', sa.Integer(), server_default='0'),
        sa.Column('active', sa.Boolean(), server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_disposition_auto_actions_user_id', 'disposition_auto_actions', ['user_id'])

    op.create_table(
        'dnc_list',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('phone_number', sa.Text(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('added_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'phone_number', name='uq_dnc_user_phone'),
    )

    op.create_table(
        'lead_workflow_progress',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('lead_id', sa.Text(), nullable=False),
        sa.Column('workflow_id', sa.Text(), nullable=False),
        sa.Column('campaign_id', sa.Text(), nullable=True),
        sa.Column('current_step', sa.Integer(), server_default='0'),
        sa.Column('status', sa.Text(), nullable=False, server_default='active'),
        sa.Column('removal_reason', sa.Text(), nullable=True),
        *_timestamps(),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_lead_workflow_progress_lead_id', 'lead_workflow_progress', ['lead_id'])

    op.create_table(
        'dialing_queues',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('campaign_id', sa.Text(), nullable=True),
        sa.Column('lead_id', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False, server_default='pending'),
        sa.Column('priority', sa.Integer(), server_default='1'),
        sa.Column('attempts', sa.Integer(), server_default='0'),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_dialing_queues_lead_id', 'dialing_queues', ['lead_id'])

    op.create_table(
        'pipeline_boards',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('position', sa.Integer(), server_default='0'),
        sa.Column('disposition_id', sa.Text(), sa.ForeignKey('dispositions.id'), nullable=True),
        sa.Column('settings', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_pipeline_boards_user_id', 'pipeline_boards', ['user_id'])

    op.create_table(
        'lead_pipeline_positions',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('lead_id', sa.Text(), sa.ForeignKey('leads.id'), nullable=False),
        sa.Column('pipeline_board_id', sa.Text(), sa.ForeignKey('pipeline_boards.id'), nullable=False),
        sa.Column('position', sa.Integer(), server_default='0'),
        sa.Column('moved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('moved_by_user', sa.Boolean(), server_default=sa.false()),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'lead_id', name='uq_pipeline_position_user_lead'),
    )
    op.create_index('ix_lead_pipeline_positions_lead_id', 'lead_pipeline_positions', ['lead_id'])

    op.create_table(
        'lead_pipeline_moves',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('lead_id', sa.Text(), sa.ForeignKey('leads.id'), nullable=False),
        sa.Column('from_board_id', sa.Text(), sa.ForeignKey('pipeline_boards.id'), nullable=True),
        sa.Column('to_board_id', sa.Text(), sa.ForeignKey('pipeline_boards.id'), nullable=False),
        sa.Column('moved_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('moved_by_user', sa.Boolean(), server_default=sa.false()),
        sa.Column('notes', sa.Text(), nullable=True),
    )
    op.create_index('ix_lead_pipeline_moves_lead_id', 'lead_pipeline_moves', ['lead_id'])

    op.create_table(
        'call_logs',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('lead_id', sa.Text(), nullable=True),
        sa.Column('campaign_id', sa.Text(), nullable=True),
        sa.Column('phone_number', sa.Text(), nullable=True),
        sa.Column('outcome', sa.Text(), nullable=True),
        sa.Column('duration_seconds', sa.Integer(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_call_logs_lead_id', 'call_logs', ['lead_id'])

    op.create_table(
        'calendar_appointments',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('lead_id', sa.Text(), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('timezone', sa.Text(), server_default='America/New_York'),
        sa.Column('status', sa.Text(), server_default='scheduled'),
        *_timestamps(),
    )
    op.create_index('ix_calendar_appointments_lead_id', 'calendar_appointments', ['lead_id'])

    op.create_table(
        'phone_numbers',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('number', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), server_default='active'),
        *_timestamps(),
    )
    op.create_index('ix_phone_numbers_user_id', 'phone_numbers', ['user_id'])

    op.create_table(
        'reachability_events',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('lead_id', sa.Text(), nullable=False),
        sa.Column('event_type', sa.Text(), nullable=False),
        sa.Column('event_outcome', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_reachability_events_lead_id', 'reachability_events', ['lead_id'])

    op.create_table(
        'disposition_metrics',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('user_id', sa.Text(), nullable=False),
        sa.Column('lead_id', sa.Text(), nullable=False),
        sa.Column('call_id', sa.Text(), nullable=True),
        sa.Column('disposition_id', sa.Text(), nullable=True),
        sa.Column('disposition_name', sa.Text(), nullable=True),
        sa.Column('set_by', sa.Text(), server_default='manual'),
        sa.Column('set_by_user_id', sa.Text(), nullable=True),
        sa.Column('ai_confidence_score', sa.Float(), nullable=True),
        sa.Column('call_ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('disposition_set_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('time_to_disposition_seconds', sa.Integer(), nullable=True),
        sa.Column('previous_status', sa.Text(), nullable=True),
        sa.Column('new_status', sa.Text(), nullable=True),
        sa.Column('previous_pipeline_stage', sa.Text(), nullable=True),
        sa.Column('new_pipeline_stage', sa.Text(), nullable=True),
        sa.Column('workflow_id', sa.Text(), nullable=True),
        sa.Column('campaign_id', sa.Text(), nullable=True),
        sa.Column('actions_triggered', sa.JSON(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_disposition_metrics_user_id', 'disposition_metrics', ['user_id'])
    op.create_index('ix_disposition_metrics_lead_id', 'disposition_metrics', ['lead_id'])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'disposition_metrics', 'reachability_events', 'phone_numbers',
        'calendar_appointments', 'call_logs', 'lead_pipeline_moves',
        'lead_pipeline_positions', 'pipeline_boards', 'dialing_queues',
        'lead_workflow_progress', 'dnc_list', 'disposition_auto_actions',
        'dispositions', 'leads',
    ):
        op.drop_table(table)
