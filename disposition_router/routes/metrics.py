"""
Disposition analytics: GET /api/disposition-metrics.
"""
from flask import Blueprint, request, jsonify

from disposition_router.services.metrics import summarize_disposition_metrics

bp = Blueprint('metrics', __name__)


@bp.route('/api/disposition-metrics')
def disposition_metrics():
    """Aggregated disposition metrics for one user over the last N days."""
    user_id = request.args.get('userId')
    if not user_id:
        return jsonify({'error': 'userId is required'}), 400

    try:
        days = int(request.args.get('days', 30))
    except ValueError:
        days = 0
    if days <= 0:
        return jsonify({'error': 'days must be a positive integer'}), 400

    try:
        return jsonify(summarize_disposition_metrics(user_id, days=days))
    except Exception as e:
        return jsonify({'error': str(e)}), 500
