"""
Catalog + pipeline management: dispositions, boards, lead positions and
auto-action rules for one user.

Backs POST /pipeline-management. Every function opens its own session and
commits before returning plain dicts.
"""
import logging
from typing import Dict, List, Optional

from disposition_router.config import STANDARD_DISPOSITIONS, SENTIMENT_COLORS
from disposition_router.database import get_session, utcnow
from disposition_router.models.disposition import Disposition, DispositionAutoAction
from disposition_router.models.pipeline import PipelineBoard, LeadPipelinePosition
from disposition_router.services import lead_ops
from disposition_router.services.actions import ACTION_HANDLERS
from disposition_router.services.errors import InvalidRequestError, LeadNotFoundError
from disposition_router.services.triggers import describe_triggers

logger = logging.getLogger('services.catalog')

DISPOSITION_FIELDS = ('name', 'description', 'color', 'pipeline_stage', 'auto_actions')
BOARD_FIELDS = ('name', 'description', 'position', 'disposition_id', 'settings')
RULE_FIELDS = ('disposition_id', 'disposition_name', 'action_type', 'action_config', 'priority', 'active')


def _pick(data: Optional[Dict], fields) -> Dict:
    data = data or {}
    return {k: data[k] for k in fields if k in data}


# ── Dispositions ─────────────────────────────────────────────────────────────

def list_dispositions(user_id) -> List[Dict]:
    session = get_session()
    try:
        rows = session.query(Disposition).filter_by(user_id=user_id).order_by(Disposition.name).all()
        return [row.to_dict() for row in rows]
    finally:
        session.close()


def create_disposition(user_id, data) -> Dict:
    values = _pick(data, DISPOSITION_FIELDS)
    if not values.get('name'):
        raise InvalidRequestError('disposition_data.name is required')
    session = get_session()
    try:
        row = Disposition(user_id=user_id, **values)
        session.add(row)
        session.commit()
        logger.info("Created disposition %r for user %s", row.name, user_id)
        return row.to_dict()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def dispositions_exist(user_id) -> bool:
    session = get_session()
    try:
        return session.query(Disposition.id).filter_by(user_id=user_id).first() is not None
    finally:
        session.close()


def insert_default_dispositions(user_id, dispositions: Optional[List[Dict]] = None) -> List[Dict]:
    """
    Insert the standard set (or the supplied list), skipping names the user
    already has. Returns only the rows created.
    """
    session = get_session()
    try:
        existing = {name for (name,) in session.query(Disposition.name).filter_by(user_id=user_id)}
        created = []
        for item in dispositions or _standard_dispositions():
            values = _pick(item, DISPOSITION_FIELDS)
            if not values.get('name') or values['name'] in existing:
                continue
            row = Disposition(user_id=user_id, **values)
            session.add(row)
            existing.add(values['name'])
            created.append(row)
        session.commit()
        logger.info("Inserted %d default dispositions for user %s", len(created), user_id)
        return [row.to_dict() for row in created]
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _standard_dispositions() -> List[Dict]:
    return [
        {
            'name': d['name'],
            'description': f"Standard disposition: {d['name']}",
            'color': SENTIMENT_COLORS[d['sentiment']],
            'pipeline_stage': d['pipeline_stage'],
            'auto_actions': [],
        }
        for d in STANDARD_DISPOSITIONS
    ]


# ── Pipeline boards + positions ──────────────────────────────────────────────

def list_pipeline_boards(user_id) -> List[Dict]:
    session = get_session()
    try:
        rows = session.query(PipelineBoard).filter_by(user_id=user_id).order_by(PipelineBoard.position).all()
        return [row.to_dict() for row in rows]
    finally:
        session.close()


def create_pipeline_board(user_id, data) -> Dict:
    values = _pick(data, BOARD_FIELDS)
    if not values.get('name'):
        raise InvalidRequestError('board_data.name is required')
    session = get_session()
    try:
        row = PipelineBoard(user_id=user_id, **values)
        session.add(row)
        session.commit()
        return row.to_dict()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def list_lead_positions(user_id) -> List[Dict]:
    session = get_session()
    try:
        rows = session.query(LeadPipelinePosition).filter_by(user_id=user_id).order_by(
            LeadPipelinePosition.moved_at.desc(),
        ).all()
        return [row.to_dict(include_lead=True) for row in rows]
    finally:
        session.close()


def move_lead_to_pipeline(user_id, lead_id, board_id, position=0, moved_by_user=True, notes='') -> Dict:
    """Manual move through the same pointer + history upsert the router uses."""
    if not lead_id or not board_id:
        raise InvalidRequestError('lead_id and pipeline_board_id are required')
    session = get_session()
    try:
        if lead_ops.get_lead(session, lead_id) is None:
            raise LeadNotFoundError(lead_id)
        board = lead_ops.find_board(session, user_id, board_id=board_id)
        if board is None:
            raise InvalidRequestError(f'Pipeline board not found: {board_id}')
        row = lead_ops.move_to_board(
            session, user_id, lead_id, board, utcnow(),
            moved_by_user=moved_by_user, notes=notes or '', position=position or 0,
        )
        session.commit()
        return row.to_dict()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ── Auto-action rules ────────────────────────────────────────────────────────

def list_auto_actions(user_id) -> List[Dict]:
    session = get_session()
    try:
        rows = session.query(DispositionAutoAction).filter_by(user_id=user_id).order_by(
            DispositionAutoAction.priority.asc(),
        ).all()
        return [row.to_dict() for row in rows]
    finally:
        session.close()


def create_auto_action(user_id, data) -> Dict:
    values = _pick(data, RULE_FIELDS)
    action_type = values.get('action_type')
    if action_type not in ACTION_HANDLERS:
        raise InvalidRequestError(
            f'action_type must be one of {sorted(ACTION_HANDLERS)}, got {action_type!r}'
        )
    if not values.get('disposition_id') and not values.get('disposition_name'):
        raise InvalidRequestError('disposition_id or disposition_name is required')
    session = get_session()
    try:
        row = DispositionAutoAction(user_id=user_id, **values)
        session.add(row)
        session.commit()
        return row.to_dict()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_disposition_triggers() -> Dict[str, List[str]]:
    return describe_triggers()
