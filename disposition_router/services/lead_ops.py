"""
Lead mutations shared by the disposition cascade, auto-actions and the
pipeline-management surface.

Every helper works inside the caller's session and only flushes; committing
(or rolling back) is the caller's job.
"""
import logging
from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite

from disposition_router.config import (
    WORKFLOW_ACTIVE, WORKFLOW_REMOVED, QUEUE_OPEN_STATUSES, QUEUE_REMOVED,
)
from disposition_router.database import new_id
from disposition_router.models.dnc import DncEntry
from disposition_router.models.lead import Lead
from disposition_router.models.pipeline import PipelineBoard, LeadPipelinePosition, LeadPipelineMove
from disposition_router.models.workflow import LeadWorkflowProgress, DialingQueueEntry

logger = logging.getLogger('services.lead_ops')


def _insert(session, model):
    """INSERT with ON CONFLICT support for the bound dialect (Postgres or SQLite)."""
    if session.get_bind().dialect.name == 'sqlite':
        return sqlite.insert(model)
    return postgresql.insert(model)


def get_lead(session, lead_id) -> Optional[Lead]:
    return session.get(Lead, lead_id)


def current_stage_name(session, user_id, lead_id) -> Optional[str]:
    """Name of the board the lead currently sits on, or None."""
    row = session.query(PipelineBoard.name).join(
        LeadPipelinePosition, LeadPipelinePosition.pipeline_board_id == PipelineBoard.id,
    ).filter(
        LeadPipelinePosition.user_id == user_id,
        LeadPipelinePosition.lead_id == lead_id,
    ).order_by(LeadPipelinePosition.moved_at.desc()).first()
    return row.name if row else None


def add_to_dnc(session, user_id, lead, reason, now, mark_status=True) -> bool:
    """
    Upsert a dnc_list row for the lead's phone and flag the lead.

    mark_status also sets lead.status = 'dnc'. Returns False (no writes) when
    the lead has no phone number.
    """
    if not lead or not lead.phone_number:
        logger.warning("Cannot add lead %s to DNC: no phone number",
                       lead.id if lead else None)
        return False

    stmt = _insert(session, DncEntry).values(
        id=new_id(),
        user_id=user_id,
        phone_number=lead.phone_number,
        reason=reason,
        added_at=now,
    )
    session.execute(stmt.on_conflict_do_update(
        index_elements=['user_id', 'phone_number'],
        set_={'reason': reason, 'added_at': now},
    ))

    lead.do_not_call = True
    if mark_status:
        lead.status = 'dnc'
    session.flush()
    return True


def remove_from_workflows(session, lead_id, reason, now, campaign_id=None) -> int:
    """
    Mark workflow enrollments removed.

    Without campaign_id: every active enrollment. With campaign_id: every
    enrollment in that campaign, whatever its status.
    """
    query = session.query(LeadWorkflowProgress).filter(LeadWorkflowProgress.lead_id == lead_id)
    if campaign_id:
        query = query.filter(LeadWorkflowProgress.campaign_id == campaign_id)
    else:
        query = query.filter(LeadWorkflowProgress.status == WORKFLOW_ACTIVE)

    count = 0
    for progress in query.all():
        progress.status = WORKFLOW_REMOVED
        progress.removal_reason = reason
        progress.updated_at = now
        count += 1
    session.flush()
    return count


def remove_from_queues(session, lead_id) -> int:
    """Mark every pending/scheduled dialing-queue row for the lead removed."""
    rows = session.query(DialingQueueEntry).filter(
        DialingQueueEntry.lead_id == lead_id,
        DialingQueueEntry.status.in_(QUEUE_OPEN_STATUSES),
    ).all()
    for row in rows:
        row.status = QUEUE_REMOVED
    session.flush()
    return len(rows)


def move_to_board(session, user_id, lead_id, board, now, moved_by_user=False,
                  notes=None, position=0) -> LeadPipelinePosition:
    """
    Point the lead at `board` and append the move to its history.

    The pointer row is unique per (user, lead); moving onto the board the lead
    already sits on still refreshes moved_at and records a history row.
    """
    board_id = board.id
    from_board_id = session.query(LeadPipelinePosition.pipeline_board_id).filter_by(
        user_id=user_id,
        lead_id=lead_id,
    ).scalar()

    fields = {
        'pipeline_board_id': board_id,
        'position': position,
        'moved_at': now,
        'moved_by_user': moved_by_user,
        'notes': notes,
    }
    stmt = _insert(session, LeadPipelinePosition).values(
        id=new_id(), user_id=user_id, lead_id=lead_id, **fields,
    )
    session.execute(stmt.on_conflict_do_update(
        index_elements=['user_id', 'lead_id'],
        set_=fields,
    ))

    session.add(LeadPipelineMove(
        user_id=user_id,
        lead_id=lead_id,
        from_board_id=from_board_id,
        to_board_id=board_id,
        moved_at=now,
        moved_by_user=moved_by_user,
        notes=notes,
    ))
    session.flush()
    return session.query(LeadPipelinePosition).filter_by(
        user_id=user_id,
        lead_id=lead_id,
    ).populate_existing().one()


def find_board(session, user_id, board_id=None, name=None) -> Optional[PipelineBoard]:
    """Look up one of the user's boards by id or exact name."""
    query = session.query(PipelineBoard).filter(PipelineBoard.user_id == user_id)
    if board_id:
        return query.filter(PipelineBoard.id == board_id).first()
    if name:
        return query.filter(PipelineBoard.name == name).first()
    return None
