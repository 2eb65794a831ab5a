"""
Disposition router endpoint: POST /disposition-router.

Called by the call-ended webhooks and the manual disposition UI. Every failure
answers 500 {error}; the actions accumulated before a failure are discarded
along with the rolled-back cascade.
"""
import logging
from flask import Blueprint, request, jsonify

from disposition_router.services.errors import UnknownActionError
from disposition_router.services.router import DispositionRequest, process_disposition

logger = logging.getLogger('routes.disposition')

bp = Blueprint('disposition', __name__)


@bp.route('/disposition-router', methods=['POST'])
def disposition_router():
    try:
        data = request.get_json(silent=True) or {}
        action = data.get('action')

        if action == 'process_disposition':
            req = DispositionRequest.from_payload(data)
            outcome = process_disposition(req)
            return jsonify(outcome.to_response()), 200

        raise UnknownActionError(action)

    except Exception as e:
        logger.error("Error in disposition-router: %s", e, exc_info=True)
        return jsonify({'error': str(e) or 'Unknown error'}), 500
