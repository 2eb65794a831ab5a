"""
Health routes: liveness plus collaborator circuit-breaker state.
"""
import logging
from flask import Blueprint, jsonify

from disposition_router.services.circuit_breaker import get_all_breakers

logger = logging.getLogger('routes.health')

bp = Blueprint('health', __name__)


@bp.route('/health')
def health_check():
    """Liveness probe."""
    return jsonify({"status": "healthy"}), 200


@bp.route('/api/health')
def api_health():
    """Breaker state + success/failure counters for every collaborator function."""
    services = {name: cb.get_health() for name, cb in get_all_breakers().items()}
    degraded = [name for name, h in services.items() if h['state'] != 'closed']
    return jsonify({
        'status': 'degraded' if degraded else 'healthy',
        'degraded': degraded,
        'services': services,
    })


@bp.route('/api/health/<service>/reset', methods=['POST'])
def reset_circuit(service):
    """Manually close a collaborator's breaker."""
    breakers = get_all_breakers()
    if service not in breakers:
        return jsonify({'error': f'Unknown service: {service}'}), 404
    breakers[service].reset()
    logger.info("Breaker for %s reset via API", service)
    return jsonify({'ok': True, 'service': service})
