"""
Health routes: liveness probe and circuit-breaker status for each upstream.
"""
import logging

from flask import Blueprint, jsonify

from leadscout.services.circuit_breaker import get_all_breakers

logger = logging.getLogger('routes.health')

bp = Blueprint('health', __name__)


@bp.route('/health')
def health_check():
    """Liveness check."""
    return jsonify({"status": "healthy"}), 200


@bp.route('/api/health')
def upstream_health():
    breakers = get_all_breakers()
    services = {name: cb.get_health() for name, cb in sorted(breakers.items())}
    degraded = [name for name, h in services.items() if h['state'] != 'closed']
    return jsonify({
        'status': 'degraded' if degraded else 'ok',
        'degraded': degraded,
        'services': services,
    })


@bp.route('/api/health/<service>/reset', methods=['POST'])
def reset_breaker(service):
    breaker = get_all_breakers().get(service)
    if breaker is None:
        return jsonify({'error': f'Unknown service: {service}'}), 404
    if not breaker.reset():
        return jsonify({'error': 'Could not reset circuit breaker'}), 503
    logger.info("Circuit breaker %s reset via API", service)
    return jsonify({'ok': True, 'service': service, 'health': breaker.get_health()})
