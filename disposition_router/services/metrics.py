"""
Disposition metrics: the audit row written after every cascade, plus the
aggregate read used by GET /api/disposition-metrics.

Writing metrics is best-effort: a failure is logged and rolled back, never
raised, so a committed cascade always answers 200.
"""
import logging
from datetime import timedelta
from typing import Dict, Optional

from sqlalchemy import func

from disposition_router.database import get_session, utcnow
from disposition_router.models.disposition_metric import DispositionMetric
from disposition_router.services import lead_ops

logger = logging.getLogger('services.metrics')


def record_disposition_metrics(req, outcome) -> Optional[DispositionMetric]:
    """
    Insert one DispositionMetric row for a committed cascade.

    Reads the lead's post-cascade status and stage so the row carries the
    before/after pair. Returns the row, or None if the write failed.
    """
    session = get_session()
    try:
        lead = lead_ops.get_lead(session, req.lead_id)
        set_by = req.set_by or 'manual'

        row = DispositionMetric(
            user_id=req.user_id,
            lead_id=req.lead_id,
            call_id=req.call_id,
            disposition_id=req.disposition_id,
            disposition_name=req.disposition_name,
            set_by=set_by,
            set_by_user_id=req.user_id if set_by == 'manual' else None,
            ai_confidence_score=req.ai_confidence,
            call_ended_at=outcome.call_ended_at,
            disposition_set_at=outcome.processed_at,
            time_to_disposition_seconds=outcome.time_to_disposition_seconds,
            previous_status=outcome.previous_status,
            new_status=lead.status if lead else None,
            previous_pipeline_stage=outcome.previous_stage,
            new_pipeline_stage=lead_ops.current_stage_name(session, req.user_id, req.lead_id),
            workflow_id=outcome.workflow_id,
            campaign_id=outcome.campaign_id,
            actions_triggered=list(outcome.actions),
            metadata_={
                'call_outcome': req.call_outcome,
                'had_transcript': bool(req.transcript),
                'auto_actions_count': outcome.auto_actions_count,
            },
        )
        session.add(row)
        session.commit()
        logger.info("Recorded metrics for disposition %s", req.disposition_name,
                    extra={'lead_id': req.lead_id, 'disposition': req.disposition_name})
        return row
    except Exception:
        session.rollback()
        logger.error("Failed to insert disposition metrics for lead %s", req.lead_id,
                     exc_info=True, extra={'lead_id': req.lead_id})
        return None
    finally:
        session.close()


def summarize_disposition_metrics(user_id: str, days: int = 30, top_transitions: int = 10) -> Dict:
    """Aggregate the user's metrics rows over the last `days` days."""
    since = utcnow() - timedelta(days=days)
    session = get_session()
    try:
        base = session.query(DispositionMetric).filter(
            DispositionMetric.user_id == user_id,
            DispositionMetric.disposition_set_at >= since,
        )
        total = base.count()

        by_disposition = session.query(
            DispositionMetric.disposition_name,
            func.count(DispositionMetric.id).label('count'),
            func.avg(DispositionMetric.time_to_disposition_seconds).label('avg_seconds'),
        ).filter(
            DispositionMetric.user_id == user_id,
            DispositionMetric.disposition_set_at >= since,
        ).group_by(DispositionMetric.disposition_name).order_by(
            func.count(DispositionMetric.id).desc(),
        ).all()

        by_set_by = session.query(
            DispositionMetric.set_by,
            func.count(DispositionMetric.id).label('count'),
        ).filter(
            DispositionMetric.user_id == user_id,
            DispositionMetric.disposition_set_at >= since,
        ).group_by(DispositionMetric.set_by).all()

        transitions = session.query(
            DispositionMetric.previous_status,
            DispositionMetric.new_status,
            func.count(DispositionMetric.id).label('count'),
        ).filter(
            DispositionMetric.user_id == user_id,
            DispositionMetric.disposition_set_at >= since,
        ).group_by(
            DispositionMetric.previous_status, DispositionMetric.new_status,
        ).order_by(func.count(DispositionMetric.id).desc()).limit(top_transitions).all()

        avg_row = session.query(
            func.avg(DispositionMetric.time_to_disposition_seconds),
        ).filter(
            DispositionMetric.user_id == user_id,
            DispositionMetric.disposition_set_at >= since,
        ).scalar()

        return {
            'days': days,
            'total': total,
            'avg_time_to_disposition_seconds': round(float(avg_row), 1) if avg_row is not None else None,
            'by_disposition': [
                {
                    'disposition_name': row.disposition_name,
                    'count': row.count,
                    'avg_time_to_disposition_seconds': (
                        round(float(row.avg_seconds), 1) if row.avg_seconds is not None else None
                    ),
                }
                for row in by_disposition
            ],
            'by_set_by': {row.set_by or 'unknown': row.count for row in by_set_by},
            'status_transitions': [
                {'from': row.previous_status, 'to': row.new_status, 'count': row.count}
                for row in transitions
            ],
        }
    finally:
        session.close()
