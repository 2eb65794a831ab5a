"""
Pipeline management endpoint: POST /pipeline-management.

Action-dispatched catalog surface: dispositions, boards, lead positions and
auto-action rules. Success answers {success: true, data}; any failure
answers 400 {error, details}.
"""
import logging
from flask import Blueprint, request, jsonify

from disposition_router.services import catalog
from disposition_router.services.errors import InvalidRequestError, UnknownActionError

logger = logging.getLogger('routes.pipeline')

bp = Blueprint('pipeline', __name__)


def _move_lead(user_id, params):
    return catalog.move_lead_to_pipeline(
        user_id,
        params.get('lead_id'),
        params.get('pipeline_board_id'),
        position=params.get('position', 0),
        moved_by_user=params.get('moved_by_user', True),
        notes=params.get('notes', ''),
    )


ACTIONS = {
    'get_dispositions':            lambda user_id, p: catalog.list_dispositions(user_id),
    'get_pipeline_boards':         lambda user_id, p: catalog.list_pipeline_boards(user_id),
    'get_lead_positions':          lambda user_id, p: catalog.list_lead_positions(user_id),
    'create_disposition':          lambda user_id, p: catalog.create_disposition(user_id, p.get('disposition_data')),
    'create_pipeline_board':       lambda user_id, p: catalog.create_pipeline_board(user_id, p.get('board_data')),
    'move_lead_to_pipeline':       _move_lead,
    'check_dispositions_exist':    lambda user_id, p: catalog.dispositions_exist(user_id),
    'insert_default_dispositions': lambda user_id, p: catalog.insert_default_dispositions(user_id, p.get('dispositions')),
    'get_auto_actions':            lambda user_id, p: catalog.list_auto_actions(user_id),
    'create_auto_action':          lambda user_id, p: catalog.create_auto_action(user_id, p.get('rule_data')),
    'get_disposition_triggers':    lambda user_id, p: catalog.get_disposition_triggers(),
}


@bp.route('/pipeline-management', methods=['POST'])
def pipeline_management():
    data = request.get_json(silent=True) or {}
    action = None
    try:
        if not isinstance(data, dict):
            raise InvalidRequestError('Request body must be a JSON object')
        action = data.pop('action', None)
        handler = ACTIONS.get(action)
        if handler is None:
            raise UnknownActionError(action)
        user_id = data.get('userId')
        if not user_id:
            raise InvalidRequestError('userId is required')

        result = handler(user_id, data)
        logger.info("Processed pipeline action %s for user %s", action, user_id)
        return jsonify({'success': True, 'data': result}), 200

    except Exception as e:
        logger.error("Error in pipeline-management action %s: %s", action, e, exc_info=True)
        return jsonify({
            'error': str(e),
            'details': 'Failed to process pipeline management request',
        }), 400
