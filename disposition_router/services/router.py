"""
Disposition router: applies a call outcome to a lead.

Given (lead, user, disposition, optional call/transcript) the cascade:

  1. snapshots the lead's status and pipeline stage
  2. resolves call timing and the active workflow/campaign
  3. runs the user's auto-action rules for this disposition, by priority
  4. forces DNC when the disposition name hits a DNC keyword
  5. removes the lead from every workflow and dialing queue on a
     "remove everywhere" keyword
  6. forces DNC when the transcript contains a hostile phrase
  7. moves the lead to the board named by the disposition's pipeline_stage
  8. logs a 'disposition_set' reachability event

Steps 1-8 share one session and commit once: any exception rolls all of
them back. Afterwards the metrics row is written in its own transaction
(best-effort) and pending collaborator calls are dispatched.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_

from disposition_router.config import SET_BY_VALUES, WORKFLOW_ACTIVE
from disposition_router.database import get_session, utcnow, as_utc
from disposition_router.models.call_log import CallLog
from disposition_router.models.disposition import Disposition, DispositionAutoAction
from disposition_router.models.reachability_event import ReachabilityEvent
from disposition_router.models.workflow import LeadWorkflowProgress
from disposition_router.services import lead_ops
from disposition_router.services.actions import ActionContext, execute_action
from disposition_router.services.errors import InvalidRequestError, LeadNotFoundError
from disposition_router.services.functions import SideEffect, dispatch_side_effects
from disposition_router.services.metrics import record_disposition_metrics
from disposition_router.services.triggers import (
    TriggerKind, normalize_disposition, classify_disposition, find_negative_phrase,
)

logger = logging.getLogger('services.router')

ACTION_ADDED_TO_DNC = 'Added to DNC list'
ACTION_REMOVED_EVERYWHERE = 'Removed from all active campaigns and workflows'
ACTION_SENTIMENT_DNC = 'Auto-DNC: Negative sentiment detected'


@dataclass
class DispositionRequest:
    lead_id: str
    user_id: str
    disposition_id: Optional[str] = None
    disposition_name: Optional[str] = None
    call_outcome: Optional[str] = None
    transcript: Optional[str] = None
    call_id: Optional[str] = None
    ai_confidence: Optional[float] = None
    set_by: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> 'DispositionRequest':
        """Build from the camelCase JSON body; raises InvalidRequestError."""
        lead_id = data.get('leadId')
        user_id = data.get('userId')
        if not lead_id or not user_id:
            raise InvalidRequestError('leadId and userId are required')

        ai_confidence = data.get('aiConfidence')
        if ai_confidence is not None:
            try:
                ai_confidence = float(ai_confidence)
            except (TypeError, ValueError):
                raise InvalidRequestError(f'aiConfidence must be a number, got {ai_confidence!r}')

        set_by = data.get('setBy')
        if set_by is not None and set_by not in SET_BY_VALUES:
            raise InvalidRequestError(f'setBy must be one of {SET_BY_VALUES}')

        return cls(
            lead_id=str(lead_id),
            user_id=str(user_id),
            disposition_id=data.get('dispositionId'),
            disposition_name=data.get('dispositionName'),
            call_outcome=data.get('callOutcome'),
            transcript=data.get('transcript'),
            call_id=data.get('callId'),
            ai_confidence=ai_confidence,
            set_by=set_by,
        )


@dataclass
class CascadeOutcome:
    """Everything the cascade learned and did; feeds the metrics row."""
    processed_at: datetime
    actions: List[str] = field(default_factory=list)
    side_effects: List[SideEffect] = field(default_factory=list)
    previous_status: Optional[str] = None
    previous_stage: Optional[str] = None
    call_ended_at: Optional[datetime] = None
    time_to_disposition_seconds: Optional[int] = None
    workflow_id: Optional[str] = None
    campaign_id: Optional[str] = None
    auto_actions_count: int = 0

    def to_response(self) -> Dict[str, Any]:
        return {'success': True, 'actions': self.actions}


def process_disposition(req: DispositionRequest) -> CascadeOutcome:
    """Run the cascade atomically, then record metrics and dispatch side effects."""
    now = utcnow()
    session = get_session()
    try:
        outcome = _run_cascade(session, req, now)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    logger.info("Disposition %r applied to lead %s: %d actions",
                req.disposition_name, req.lead_id, len(outcome.actions),
                extra={'lead_id': req.lead_id, 'user_id': req.user_id,
                       'disposition': req.disposition_name})

    record_disposition_metrics(req, outcome)

    if outcome.side_effects:
        dispatch_side_effects(outcome.side_effects)

    return outcome


def _run_cascade(session, req: DispositionRequest, now: datetime) -> CascadeOutcome:
    outcome = CascadeOutcome(processed_at=now)
    name = req.disposition_name
    normalized = normalize_disposition(name)

    # 1. Snapshot
    lead = lead_ops.get_lead(session, req.lead_id)
    if lead is None:
        raise LeadNotFoundError(req.lead_id)
    outcome.previous_status = lead.status
    outcome.previous_stage = lead_ops.current_stage_name(session, req.user_id, req.lead_id)

    # 2. Call + workflow context
    _resolve_context(session, req, outcome, now)

    # 3. User-defined auto-actions
    rules = _matching_rules(session, req)
    outcome.auto_actions_count = len(rules)
    ctx = ActionContext(session=session, user_id=req.user_id, lead=lead, now=now,
                        side_effects=outcome.side_effects)
    for rule in rules:
        outcome.actions.append(execute_action(ctx, rule))

    triggers = classify_disposition(normalized)

    # 4. DNC keywords
    if TriggerKind.DNC in triggers:
        if lead_ops.add_to_dnc(session, req.user_id, lead, f'Disposition: {name}', now):
            outcome.actions.append(ACTION_ADDED_TO_DNC)

    # 5. Remove-everywhere keywords
    if TriggerKind.REMOVE_ALL in triggers:
        reason = f'Disposition: {name}'
        lead_ops.remove_from_workflows(session, lead.id, reason, now)
        lead_ops.remove_from_queues(session, lead.id)
        lead.status = normalized or 'not_interested'
        session.flush()
        outcome.actions.append(ACTION_REMOVED_EVERYWHERE)

    # 6. Transcript sentiment
    phrase = find_negative_phrase(req.transcript)
    if phrase:
        logger.info("Hostile phrase %r in transcript for lead %s", phrase, lead.id,
                    extra={'lead_id': lead.id})
        if lead_ops.add_to_dnc(session, req.user_id, lead,
                               'Negative sentiment detected in transcript', now):
            outcome.actions.append(ACTION_SENTIMENT_DNC)

    # 7. Pipeline auto-move
    disposition = session.get(Disposition, req.disposition_id) if req.disposition_id else None
    if disposition is not None and disposition.pipeline_stage:
        board = lead_ops.find_board(session, req.user_id, name=disposition.pipeline_stage)
        if board is not None:
            lead_ops.move_to_board(
                session, req.user_id, lead.id, board, now,
                moved_by_user=False,
                notes=f'Auto-moved by disposition: {name}',
            )
            outcome.actions.append(f'Moved to pipeline stage: {disposition.pipeline_stage}')
        else:
            logger.info("No board named %r for user %s; lead %s not moved",
                        disposition.pipeline_stage, req.user_id, lead.id)

    # 8. Reachability event
    session.add(ReachabilityEvent(
        user_id=req.user_id,
        lead_id=lead.id,
        event_type='disposition_set',
        event_outcome=name,
        metadata_={'dispositionId': req.disposition_id, 'callOutcome': req.call_outcome},
    ))
    session.flush()

    return outcome


def _resolve_context(session, req: DispositionRequest, outcome: CascadeOutcome, now: datetime):
    if req.call_id:
        call = session.get(CallLog, req.call_id)
        if call is not None:
            outcome.campaign_id = call.campaign_id
            if call.ended_at:
                ended_at = as_utc(call.ended_at)
                outcome.call_ended_at = ended_at
                outcome.time_to_disposition_seconds = round((now - ended_at).total_seconds())

    active = session.query(LeadWorkflowProgress).filter(
        LeadWorkflowProgress.lead_id == req.lead_id,
        LeadWorkflowProgress.status == WORKFLOW_ACTIVE,
    ).order_by(LeadWorkflowProgress.created_at.desc()).first()
    if active is not None:
        outcome.workflow_id = active.workflow_id
        if not outcome.campaign_id:
            outcome.campaign_id = active.campaign_id


def _matching_rules(session, req: DispositionRequest) -> List[DispositionAutoAction]:
    """Active rules matching the disposition by id or by name, lowest priority first."""
    conditions = []
    if req.disposition_id:
        conditions.append(DispositionAutoAction.disposition_id == req.disposition_id)
    if req.disposition_name:
        conditions.append(DispositionAutoAction.disposition_name.icontains(
            req.disposition_name, autoescape=True,
        ))
    if not conditions:
        return []

    return session.query(DispositionAutoAction).filter(
        DispositionAutoAction.user_id == req.user_id,
        DispositionAutoAction.active.is_(True),
        or_(*conditions),
    ).order_by(DispositionAutoAction.priority.asc()).all()
