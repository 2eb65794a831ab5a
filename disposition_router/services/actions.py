"""
Auto-action vocabulary: what a user-defined DispositionAutoAction rule can do.

Each handler takes the ActionContext and the rule's action_config and returns
True when it did something, False when a precondition was missing (no
campaign id, no phone, unknown board, ...). Collaborator calls are appended to
ctx.side_effects and only sent after the cascade commits.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List

from disposition_router.config import (
    DEFAULT_CALLBACK_DELAY_HOURS, DEFAULT_APPOINTMENT_MINUTES, APPOINTMENT_TIMEZONE,
)
from disposition_router.database import as_utc
from disposition_router.models.appointment import CalendarAppointment
from disposition_router.models.lead import Lead
from disposition_router.models.phone_number import PhoneNumber
from disposition_router.services import lead_ops
from disposition_router.services.functions import (
    SideEffect, start_workflow_effect, send_sms_effect, book_appointment_effect,
)

logger = logging.getLogger('services.actions')

AUTO_ACTION_REASON = 'Auto-action'


@dataclass
class ActionContext:
    session: Any
    user_id: str
    lead: Lead
    now: datetime
    side_effects: List[SideEffect] = field(default_factory=list)


def _remove_all_campaigns(ctx: ActionContext, config: Dict) -> bool:
    lead_ops.remove_from_workflows(ctx.session, ctx.lead.id, AUTO_ACTION_REASON, ctx.now)
    return True


def _remove_from_campaign(ctx: ActionContext, config: Dict) -> bool:
    campaign_id = config.get('campaign_id')
    if not campaign_id:
        return False
    lead_ops.remove_from_workflows(ctx.session, ctx.lead.id, AUTO_ACTION_REASON, ctx.now,
                                   campaign_id=campaign_id)
    return True


def _move_to_stage(ctx: ActionContext, config: Dict) -> bool:
    board_id = config.get('target_stage_id')
    if not board_id:
        return False
    board = lead_ops.find_board(ctx.session, ctx.user_id, board_id=board_id)
    if board is None:
        logger.warning("move_to_stage: board %s not found for user %s", board_id, ctx.user_id)
        return False
    lead_ops.move_to_board(ctx.session, ctx.user_id, ctx.lead.id, board, ctx.now, moved_by_user=False)
    return True


def _add_to_dnc(ctx: ActionContext, config: Dict) -> bool:
    return lead_ops.add_to_dnc(
        ctx.session, ctx.user_id, ctx.lead,
        reason='Auto-action from disposition', now=ctx.now, mark_status=False,
    )


def _start_workflow(ctx: ActionContext, config: Dict) -> bool:
    workflow_id = config.get('target_workflow_id')
    if not workflow_id:
        return False
    ctx.side_effects.append(start_workflow_effect(
        ctx.user_id, ctx.lead.id, workflow_id, config.get('campaign_id'),
    ))
    return True


def _send_sms(ctx: ActionContext, config: Dict) -> bool:
    message = config.get('message')
    if not message:
        return False
    sender = ctx.session.query(PhoneNumber).filter_by(
        user_id=ctx.user_id,
        status='active',
    ).first()
    if not ctx.lead.phone_number or sender is None:
        logger.error("Cannot send SMS to lead %s: missing lead phone or no active sending number",
                     ctx.lead.id)
        return False
    ctx.side_effects.append(send_sms_effect(ctx.lead.phone_number, sender.number, message, ctx.lead.id))
    return True


def _schedule_callback(ctx: ActionContext, config: Dict) -> bool:
    delay_hours = float(config.get('delay_hours') or DEFAULT_CALLBACK_DELAY_HOURS)
    ctx.lead.next_callback_at = ctx.now + timedelta(hours=delay_hours)
    ctx.lead.status = 'callback'
    ctx.session.flush()
    return True


def _book_appointment(ctx: ActionContext, config: Dict) -> bool:
    title = config.get('title')
    if not title:
        return False
    duration = int(config.get('duration_minutes') or DEFAULT_APPOINTMENT_MINUTES)
    if config.get('start_time'):
        start = as_utc(datetime.fromisoformat(str(config['start_time']).replace('Z', '+00:00')))
    else:
        start = ctx.now + timedelta(days=1)
    end = start + timedelta(minutes=duration)

    ctx.session.add(CalendarAppointment(
        user_id=ctx.user_id,
        lead_id=ctx.lead.id,
        title=title,
        start_time=start,
        end_time=end,
        timezone=APPOINTMENT_TIMEZONE,
        status='scheduled',
    ))
    ctx.session.flush()

    ctx.side_effects.append(book_appointment_effect(
        start, duration,
        attendee_name=ctx.lead.full_name or 'Lead',
        attendee_email=ctx.lead.email,
        title=title,
        lead_id=ctx.lead.id,
    ))
    return True


ACTION_HANDLERS: Dict[str, Callable[[ActionContext, Dict], bool]] = {
    'remove_all_campaigns': _remove_all_campaigns,
    'remove_from_campaign': _remove_from_campaign,
    'move_to_stage':        _move_to_stage,
    'add_to_dnc':           _add_to_dnc,
    'start_workflow':       _start_workflow,
    'send_sms':             _send_sms,
    'schedule_callback':    _schedule_callback,
    'book_appointment':     _book_appointment,
}


def execute_action(ctx: ActionContext, rule) -> str:
    """Run one auto-action rule and return its log line for the actions list."""
    action_type = rule.action_type
    handler = ACTION_HANDLERS.get(action_type)
    if handler is None:
        logger.warning("Unknown auto-action type %r on rule %s", action_type, rule.id)
        return f'Skipped: {action_type} (unknown action)'

    if handler(ctx, rule.action_config or {}):
        return f'Executed: {action_type}'
    return f'Skipped: {action_type}'
